"""Account service - registration, login and session identity"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from cab_booking.domain.errors import Unauthenticated, ValidationError
from cab_booking.domain.security import hash_password, verify_password
from cab_booking.infrastructure.models import UserModel
from cab_booking.infrastructure.repositories import UserRepository
from cab_booking.infrastructure.sessions import SessionStore

logger = logging.getLogger(__name__)


class AccountService:
    """Identity store operations plus the session that backs them."""

    def __init__(self, session: AsyncSession, sessions: SessionStore):
        self.users = UserRepository(session)
        self.sessions = sessions

    async def register(
        self, first_name: str, last_name: str, email: str, password: str
    ) -> UserModel:
        """
        Create a rider account.

        Raises:
            ValidationError: blank fields, or the email is already taken
                (compared exactly as stored).
        """
        if not all(v and v.strip() for v in (first_name, last_name, email, password)):
            raise ValidationError("All registration fields are required.")
        if await self.users.exists(email):
            raise ValidationError("User with this email already exists.")

        user = await self.users.add(
            UserModel(
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                email=email,
                password_hash=hash_password(password),
            )
        )
        logger.info("Registered user %s", user.id)
        return user

    async def authenticate(self, email: str, password: str) -> Optional[UserModel]:
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user

    async def login(
        self, email: str, password: str, remember_me: bool = False
    ) -> tuple[UserModel, str]:
        user = await self.authenticate(email, password)
        if user is None:
            raise Unauthenticated("Invalid email or password.")
        token = await self.sessions.create(user.id, remember_me=remember_me)
        return user, token

    async def open_session(self, user: UserModel, remember_me: bool = False) -> str:
        return await self.sessions.create(user.id, remember_me=remember_me)

    async def logout(self, token: Optional[str]) -> None:
        await self.sessions.destroy(token)

    async def current_user(self, user_id: Optional[str]) -> UserModel:
        """Resolve a session's user id to a live user or raise."""
        if not user_id:
            raise Unauthenticated()
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise Unauthenticated()
        return user
