"""
Create or reactivate a platform super admin.

Usage:
    python scripts/create_admin.py admin@onlytrack.io --first-name Ada --last-name Root

The password is read from --password or generated and printed once.
"""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from app.core.database import db_manager
from app.core.security import generate_secure_password, hash_password, validate_password
from app.models.admin import SuperAdmin


async def create_admin(email: str, first_name: str, last_name: str, password: str | None) -> None:
    generated = password is None
    password = password or generate_secure_password()

    check = validate_password(password)
    if not check.is_valid:
        print(f"❌ {check.error}")
        sys.exit(1)

    db_manager.init()

    async for db in db_manager.get_session():
        result = await db.execute(select(SuperAdmin).where(SuperAdmin.email == email.lower()))
        admin = result.scalar_one_or_none()

        if admin:
            admin.is_active = True
            admin.hashed_password = hash_password(password)
            print(f"♻️  Reactivated admin: {admin.email}")
        else:
            admin = SuperAdmin(
                email=email.lower(),
                hashed_password=hash_password(password),
                first_name=first_name,
                last_name=last_name,
                is_active=True,
            )
            db.add(admin)
            print(f"✅ Created admin: {admin.email}")

        await db.commit()

    await db_manager.close()

    if generated:
        print(f"🔑 Password: {password}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a super admin")
    parser.add_argument("email")
    parser.add_argument("--first-name", default="Platform")
    parser.add_argument("--last-name", default="Admin")
    parser.add_argument("--password", default=None)

    args = parser.parse_args()
    asyncio.run(create_admin(args.email, args.first_name, args.last_name, args.password))
