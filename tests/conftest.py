"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  The production ORM models are used as-is;
Redis is replaced by ``FakeRedis``, an in-memory stand-in for the handful
of commands the session store and locks issue.
"""

from __future__ import annotations

import random
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from cab_booking.domain.security import hash_password
from cab_booking.domain.settlement import PaymentSimulator
from cab_booking.infrastructure.database import Base
from cab_booking.infrastructure.models import UserModel
from cab_booking.infrastructure.repositories import CabRepository

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# Cheap hashing for fixtures; the production default is deliberately slow.
FIXTURE_HASH_ITERATIONS = 1_000


class FakeRedis:
    """In-memory subset of ``redis.asyncio.Redis`` (no real expiry)."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttl: dict[str, int] = {}

    async def set(self, key: str, value: str, nx: bool = False, ex: Optional[int] = None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        if ex is not None:
            self.ttl[key] = ex
        return True

    async def get(self, key: str):
        return self.store.get(key)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttl.pop(key, None)
        return removed

    async def expire(self, key: str, seconds: int) -> bool:
        if key not in self.store:
            return False
        self.ttl[key] = seconds
        return True

    async def eval(self, script: str, numkeys: int, *args):
        # Only the lock's compare-and-delete script is ever evaluated.
        key, token = args[0], args[1]
        if self.store.get(key) == token:
            await self.delete(key)
            return 1
        return 0


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory schema per test."""
    eng = create_async_engine(
        TEST_DB_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest_asyncio.fixture
async def seeded_fleet(db_session: AsyncSession) -> int:
    created = await CabRepository(db_session).bootstrap_fleet()
    await db_session.commit()
    return created


async def make_user(
    session: AsyncSession,
    email: str = "rider@example.com",
    password: str = "secret",
    first_name: str = "Test",
    last_name: str = "Rider",
) -> UserModel:
    user = UserModel(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password_hash=hash_password(password, iterations=FIXTURE_HASH_ITERATIONS),
    )
    session.add(user)
    await session.flush()
    return user


@pytest_asyncio.fixture
async def rider(db_session: AsyncSession) -> UserModel:
    user = await make_user(db_session)
    await db_session.commit()
    return user


def instant_simulator(success_rate: float = 1.0, seed: int = 7) -> PaymentSimulator:
    return PaymentSimulator(
        success_rate=success_rate, delay_seconds=0, rng=random.Random(seed)
    )


@pytest_asyncio.fixture
async def app(session_factory, fake_redis):
    """Application wired to SQLite + FakeRedis, with a seeded fleet."""
    async with session_factory() as session:
        await CabRepository(session).bootstrap_fleet()
        await session.commit()

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def _test_redis():
        return fake_redis

    from cab_booking.api.app import create_app
    from cab_booking.api.dependencies import get_db, get_payment_simulator
    from cab_booking.api.middleware import limiter
    from cab_booking.infrastructure.redis_client import get_redis

    limiter.reset()
    app = create_app()
    app.dependency_overrides[get_db] = _test_db
    app.dependency_overrides[get_redis] = _test_redis
    app.dependency_overrides[get_payment_simulator] = lambda: instant_simulator()
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
