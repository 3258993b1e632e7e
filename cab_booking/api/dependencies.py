"""FastAPI dependency injection helpers."""

from typing import Optional

import redis.asyncio as aioredis
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cab_booking.config import settings
from cab_booking.domain.errors import Unauthenticated
from cab_booking.domain.settlement import PaymentSimulator
from cab_booking.infrastructure.database import async_session_factory
from cab_booking.infrastructure.redis_client import get_redis
from cab_booking.infrastructure.sessions import SessionStore


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_store(
    redis: aioredis.Redis = Depends(get_redis),
) -> SessionStore:
    return SessionStore(redis)


def get_payment_simulator() -> PaymentSimulator:
    return PaymentSimulator(
        success_rate=settings.settlement_success_rate,
        delay_seconds=settings.settlement_delay_seconds,
    )


def get_session_token(
    request: Request,
    x_session_token: Optional[str] = Header(None),
) -> Optional[str]:
    """Session token from the ``X-Session-Token`` header or the cookie."""
    return x_session_token or request.cookies.get(settings.session_cookie_name)


async def get_current_user_id(
    token: Optional[str] = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
) -> Optional[str]:
    return await store.get_user_id(token)


async def require_user_id(
    user_id: Optional[str] = Depends(get_current_user_id),
) -> str:
    if not user_id:
        raise Unauthenticated()
    return user_id
