"""
Account endpoints
=================

POST /api/v1/accounts/register -- create a rider and log them in
POST /api/v1/accounts/login    -- open a session
POST /api/v1/accounts/logout   -- close the session
GET  /api/v1/accounts/me       -- the logged-in rider
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from cab_booking.api.dependencies import (
    get_db,
    get_session_store,
    get_session_token,
    require_user_id,
)
from cab_booking.api.middleware import limiter
from cab_booking.api.schemas import (
    LoginRequest,
    RegisterRequest,
    SessionResponse,
    UserResponse,
)
from cab_booking.config import settings
from cab_booking.infrastructure.sessions import SessionStore
from cab_booking.services.account_service import AccountService

router = APIRouter(prefix="/accounts", tags=["accounts"])


def _set_session_cookie(response: Response, token: str, remember_me: bool) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        token,
        httponly=True,
        samesite="lax",
        max_age=settings.remember_me_ttl_seconds if remember_me else None,
    )


@router.post(
    "/register",
    status_code=201,
    response_model=SessionResponse,
    summary="Register a rider (logs them in)",
)
@limiter.limit(settings.rate_limit)
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    service = AccountService(db, store)
    user = await service.register(
        body.first_name, body.last_name, body.email, body.password
    )
    token = await service.open_session(user)
    _set_session_cookie(response, token, remember_me=False)
    return SessionResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=SessionResponse, summary="Log in")
@limiter.limit(settings.rate_limit)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    user, token = await AccountService(db, store).login(
        body.email, body.password, remember_me=body.remember_me
    )
    _set_session_cookie(response, token, body.remember_me)
    return SessionResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/logout", status_code=204, summary="Log out")
@limiter.limit(settings.rate_limit)
async def logout(
    request: Request,
    token: Optional[str] = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
):
    await store.destroy(token)
    response = Response(status_code=204)
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get("/me", response_model=UserResponse, summary="Current rider")
@limiter.limit(settings.rate_limit)
async def me(
    request: Request,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    return await AccountService(db, store).current_user(user_id)
