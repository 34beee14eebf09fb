#!/usr/bin/env python3
"""
Seed script to create demo store settings, staff and a courier
"""

import asyncio
from decimal import Decimal

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

STAFF = [
    ("Admin", "admin123", "ADMIN", None),
    ("Cozinha", "cozinha123", "KITCHEN", None),
    ("Balcao", "balcao123", "PDV", None),
    ("Joao Motoboy", "moto123", "MOTOBOY", "11988887777"),
]


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select
    from app.database import SessionLocal, engine, Base
    from app.models.user import User, UserRole
    from app.models.motoboy import Motoboy
    from app.models.store import StoreSettings

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo data already exists
        result = await db.execute(select(StoreSettings).limit(1))
        if result.scalar_one_or_none():
            print("Demo data already exists. Skipping...")
            return

        print("Creating store settings...")

        db.add(StoreSettings(
            store_address="Rua Vergueiro, 1000, Vila Mariana, São Paulo, SP",
            store_lat=Decimal("-23.579000"),
            store_lng=Decimal("-46.639000"),
            delivery_rate_per_km=Decimal("1.25"),
            min_delivery_fee=Decimal("5.00"),
            max_delivery_distance=Decimal("15.00"),
            pix_key="pix@vibedrinks.com.br",
            opening_hours={
                "monday": {"open": "18:00", "close": "02:00"},
                "tuesday": {"open": "18:00", "close": "02:00"},
                "wednesday": {"open": "18:00", "close": "02:00"},
                "thursday": {"open": "18:00", "close": "03:00"},
                "friday": {"open": "18:00", "close": "05:00"},
                "saturday": {"open": "16:00", "close": "05:00"},
                "sunday": {"open": "16:00", "close": "00:00"},
            },
            is_open=True,
        ))

        print("Creating staff users...")

        motoboy_user = None
        for name, password, role, whatsapp in STAFF:
            user = User(
                name=name,
                whatsapp=whatsapp,
                hashed_password=pwd_context.hash(password),
                role=UserRole[role],
            )
            db.add(user)
            if user.role == UserRole.MOTOBOY:
                motoboy_user = user

        await db.flush()

        db.add(Motoboy(
            user_id=motoboy_user.id,
            name=motoboy_user.name,
            whatsapp=motoboy_user.whatsapp,
            is_active=True,
        ))

        await db.commit()

        print("""
Demo data created successfully!

Users (name / password):
  Admin:    Admin / admin123
  Kitchen:  Cozinha / cozinha123
  PDV:      Balcao / balcao123
  Motoboy:  Joao Motoboy / moto123

Store: Vila Mariana, distance pricing at R$ 1.25/km (min R$ 5.00, max 15 km)
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
