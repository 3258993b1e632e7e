"""
Redis-based distributed lock.

Guards payment submission so two concurrent requests for the same booking
cannot both create and settle a payment.  Acquire is ``SET NX EX`` with a
random owner token; release is an atomic compare-and-delete in Lua so an
expired holder never deletes a lock that has since been re-acquired.
"""

from __future__ import annotations

import uuid

import redis.asyncio as aioredis

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class LockUnavailable(RuntimeError):
    """Raised by the context manager when the lock is already held."""


class DistributedLock:
    def __init__(
        self, client: aioredis.Redis, key: str, ttl_seconds: int = 30
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.token = uuid.uuid4().hex

    @classmethod
    def for_booking_payment(
        cls, client: aioredis.Redis, booking_id: str, ttl_seconds: int = 30
    ) -> "DistributedLock":
        return cls(client, f"payment:{booking_id}", ttl_seconds)

    async def acquire(self) -> bool:
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def release(self) -> bool:
        """True if this holder still owned the lock when releasing it."""
        return bool(await self.redis.eval(_RELEASE_SCRIPT, 1, self.key, self.token))

    async def __aenter__(self):
        if not await self.acquire():
            raise LockUnavailable(self.key)
        return self

    async def __aexit__(self, *args):
        await self.release()
