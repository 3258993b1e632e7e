"""
Login sessions stored in Redis.

A session is an opaque random token mapped to a user id under
``session:<token>``.  Every successful lookup slides the expiry forward
by the idle timeout; "remember me" sessions use the longer TTL instead.
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional

import redis.asyncio as aioredis

from cab_booking.config import settings

logger = logging.getLogger(__name__)

_PREFIX = "session:"
_REMEMBER_SUFFIX = ":remember"


class SessionStore:
    def __init__(
        self,
        client: aioredis.Redis,
        ttl_seconds: int = settings.session_ttl_seconds,
        remember_ttl_seconds: int = settings.remember_me_ttl_seconds,
    ):
        self.redis = client
        self.ttl = ttl_seconds
        self.remember_ttl = remember_ttl_seconds

    @staticmethod
    def _key(token: str) -> str:
        return f"{_PREFIX}{token}"

    async def create(self, user_id: str, remember_me: bool = False) -> str:
        token = secrets.token_urlsafe(32)
        ttl = self.remember_ttl if remember_me else self.ttl
        await self.redis.set(self._key(token), user_id, ex=ttl)
        if remember_me:
            await self.redis.set(self._key(token) + _REMEMBER_SUFFIX, "1", ex=ttl)
        logger.info("Session opened for user %s", user_id)
        return token

    async def get_user_id(self, token: Optional[str]) -> Optional[str]:
        """Resolve *token* to a user id, refreshing its idle timeout."""
        if not token:
            return None
        key = self._key(token)
        user_id = await self.redis.get(key)
        if user_id is None:
            return None
        remembered = await self.redis.get(key + _REMEMBER_SUFFIX)
        ttl = self.remember_ttl if remembered else self.ttl
        await self.redis.expire(key, ttl)
        if remembered:
            await self.redis.expire(key + _REMEMBER_SUFFIX, ttl)
        return user_id

    async def destroy(self, token: Optional[str]) -> None:
        if not token:
            return
        await self.redis.delete(self._key(token), self._key(token) + _REMEMBER_SUFFIX)
