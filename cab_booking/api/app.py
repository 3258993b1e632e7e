"""
FastAPI application factory.

* Registers routes for accounts, bookings, payments, dashboard and admin.
* Seeds the fleet once on startup (idempotent) via lifespan events.
* Maps domain errors to HTTP statuses; storage failures become a generic 500.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from cab_booking.api.middleware import limiter
from cab_booking.api.routes import accounts, admin, bookings, dashboard, payments
from cab_booking.config import settings
from cab_booking.domain.errors import (
    AllocationFailed,
    CabBookingError,
    NotFound,
    PaymentInProgress,
    SettlementFailed,
    Unauthenticated,
    ValidationError,
)
from cab_booking.infrastructure.database import async_session_factory
from cab_booking.infrastructure.redis_client import close_redis
from cab_booking.infrastructure.repositories import CabRepository

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

GENERIC_FAILURE = "An error occurred while processing your request. Please try again."

_ERROR_STATUS: list[tuple[type[CabBookingError], int]] = [
    (ValidationError, 422),
    (Unauthenticated, 401),
    (NotFound, 404),
    (AllocationFailed, 422),
    (SettlementFailed, 402),
    (PaymentInProgress, 409),
]


async def bootstrap_fleet() -> int:
    async with async_session_factory() as session:
        created = await CabRepository(session).bootstrap_fleet()
        await session.commit()
    return created


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the fleet on startup; release the Redis pool on shutdown."""
    if settings.seed_fleet_on_startup:
        await bootstrap_fleet()
    yield
    await close_redis()


async def _domain_error_handler(request: Request, exc: CabBookingError) -> JSONResponse:
    status = next(
        (code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 400
    )
    body = {"detail": exc.message}
    if isinstance(exc, SettlementFailed):
        body["payment_id"] = exc.payment_id
    return JSONResponse(status_code=status, content=body)


async def _storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": GENERIC_FAILURE})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Cab Booking API",
        description=(
            "Riders register, book a cab of a chosen type, pay by cash or a "
            "simulated digital method, and review or cancel their bookings."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Error mapping
    app.add_exception_handler(CabBookingError, _domain_error_handler)
    app.add_exception_handler(SQLAlchemyError, _storage_error_handler)
    app.add_exception_handler(RedisError, _storage_error_handler)

    # Routers
    app.include_router(accounts.router, prefix="/api/v1")
    app.include_router(bookings.router, prefix="/api/v1")
    app.include_router(payments.router, prefix="/api/v1")
    app.include_router(dashboard.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
