"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - the initial fleet (3 Mini, 3 Sedan, 2 SUV, 2 Luxury) if no cabs exist
  - 4 sample riders (password ``password123``) if no users exist
  - 1 Pending booking per rider, each holding one cab
"""

import asyncio

from sqlalchemy import func, select

from cab_booking.domain.enums import CabType
from cab_booking.domain.security import hash_password
from cab_booking.infrastructure.database import async_session_factory, engine
from cab_booking.infrastructure.models import UserModel
from cab_booking.infrastructure.repositories import CabRepository
from cab_booking.services.booking_service import BookingService

SAMPLE_PASSWORD = "password123"

USERS = [
    {"first_name": "Aarav", "last_name": "Sharma", "email": "aarav@example.com"},
    {"first_name": "Priya", "last_name": "Patel", "email": "priya@example.com"},
    {"first_name": "Rohan", "last_name": "Mehta", "email": "rohan@example.com"},
    {"first_name": "Sneha", "last_name": "Gupta", "email": "sneha@example.com"},
]

BOOKINGS = [
    ("Mumbai Airport T2", "Andheri East", CabType.MINI),
    ("Bandra West", "Powai", CabType.SEDAN),
    ("Colaba", "Mumbai Airport T2", CabType.SUV),
    ("Juhu Beach", "Lower Parel", CabType.LUXURY),
]


async def seed():
    async with async_session_factory() as session:
        # ── Fleet ─────────────────────────────────────────────────────
        created = await CabRepository(session).bootstrap_fleet()
        print(f"  Created {created} cabs" if created else "  Fleet already seeded")

        # ── Users ─────────────────────────────────────────────────────
        result = await session.execute(select(func.count()).select_from(UserModel))
        if result.scalar() > 0:
            await session.commit()
            print("Users already seeded. Skipping.")
            return

        user_models = []
        for u in USERS:
            m = UserModel(**u, password_hash=hash_password(SAMPLE_PASSWORD))
            session.add(m)
            user_models.append(m)
        await session.flush()
        print(f"  Created {len(user_models)} users")

        # ── Bookings ──────────────────────────────────────────────────
        service = BookingService(session)
        for user, (pickup, dropoff, cab_type) in zip(user_models, BOOKINGS):
            await service.create_booking(
                user.id,
                pickup_location=pickup,
                dropoff_location=dropoff,
                cab_type=cab_type,
            )
        print(f"  Created {len(BOOKINGS)} pending bookings")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
