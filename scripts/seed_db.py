"""
Create the schema and seed a demonstration agency.

Creates:
- a demo agency with a verified owner and a member
- a few creator models
- a 30-day temporary access link for prospects
"""

import asyncio
import sys
from datetime import timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from app.core.database import Base, db_manager
from app.core.security import generate_token, hash_password, utcnow
from app.models import Agency, CreatorModel, TemporaryAccess, User
from app.models.agency import SubscriptionPlan, SubscriptionStatus
from app.models.user import UserRole

OWNER_EMAIL = "owner@demo-agency.com"
OWNER_PASSWORD = "Owner123!"
MEMBER_EMAIL = "member@demo-agency.com"
MEMBER_PASSWORD = "Member123!"


async def create_schema() -> None:
    async with db_manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("✅ Schema up to date")


async def seed_data() -> None:
    """Create initial demonstration data."""
    print("🌱 Seeding database...")

    db_manager.init()
    await create_schema()

    async for db in db_manager.get_session():
        result = await db.execute(select(User).where(User.email == OWNER_EMAIL))
        if result.first():
            print("⚠️  Demo agency already exists. Skipping seed.")
            break

        agency = Agency(
            name="Demo Agency",
            plan=SubscriptionPlan.PREMIUM,
            subscription_status=SubscriptionStatus.ACTIVE,
            is_demo=True,
        )
        db.add(agency)
        await db.flush()

        owner = User(
            email=OWNER_EMAIL,
            hashed_password=hash_password(OWNER_PASSWORD),
            first_name="Demo",
            last_name="Owner",
            role=UserRole.OWNER,
            is_active=True,
            email_verified=True,
            agency_id=agency.id,
        )
        member = User(
            email=MEMBER_EMAIL,
            hashed_password=hash_password(MEMBER_PASSWORD),
            first_name="Demo",
            last_name="Member",
            role=UserRole.MEMBER,
            is_active=True,
            email_verified=True,
            agency_id=agency.id,
        )
        db.add_all([owner, member])
        await db.flush()

        for name, platform, followers in (
            ("Luna", "instagram", 120_000),
            ("Maya", "tiktok", 450_000),
            ("Zoe", "instagram", 38_000),
        ):
            db.add(CreatorModel(
                name=name,
                platform=platform,
                username=name.lower(),
                followers=followers,
                agency_id=agency.id,
            ))

        grant = TemporaryAccess(
            label="Prospect preview",
            token=generate_token(),
            is_active=True,
            expires_at=utcnow() + timedelta(days=30),
            agency_id=agency.id,
            created_by=owner.id,
        )
        db.add(grant)

        await db.commit()

        print(f"✅ Created agency: {agency.name}")
        print(f"✅ Created owner: {OWNER_EMAIL} (password: {OWNER_PASSWORD})")
        print(f"✅ Created member: {MEMBER_EMAIL} (password: {MEMBER_PASSWORD})")
        print(f"✅ Demo link: /access/{grant.token}")

    await db_manager.close()
    print("🎉 Seeding complete!")


if __name__ == "__main__":
    asyncio.run(seed_data())
