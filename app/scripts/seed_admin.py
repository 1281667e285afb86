"""Seed script to create or promote an admin account.

Usage:
    python -m app.scripts.seed_admin --email=owner@example.com --password=SecurePass123!
    python -m app.scripts.seed_admin --email=owner@example.com --password=SecurePass123! --catalog

NEVER hardcode credentials in this file. Always pass via CLI arguments.
"""

import argparse
import asyncio
import sys
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import async_session
from app.core.seed import seed_catalog
from app.models.user import ROLE_ADMIN, User
from app.services.auth import get_user_by_email, hash_password


async def create_or_update_admin(db: AsyncSession, email: str, password: str) -> User:
    """Create a new admin, or promote and reactivate an existing account.

    Args:
        db: Open database session
        email: Admin email address
        password: Admin password (will be hashed)
    """
    user = await get_user_by_email(db, email)

    if user:
        print(f"✅ User {email} already exists. Updating to admin role...")
        user.role = ROLE_ADMIN
        user.status = "active"
        user.is_active = True
        user.hashed_password = hash_password(password)
    else:
        print(f"🆕 Creating new admin user: {email}...")
        user = User(
            email=email.lower(),
            hashed_password=hash_password(password),
            first_name="Admin",
            role=ROLE_ADMIN,
            status="active",
            is_active=True,
        )
        db.add(user)

    await db.commit()
    await db.refresh(user)
    return user


async def run(email: str, password: str, with_catalog: bool) -> None:
    async with async_session() as db:
        user = await create_or_update_admin(db, email, password)
        if with_catalog:
            created = await seed_catalog(db)
            print(f"📦 Catalog seeded: {created} new entries")

    print(f"\n🎉 Admin setup complete!")
    print(f"   Email: {user.email}")
    print(f"   Role: {user.role}")


def main():
    """Parse CLI arguments and run the seed script."""
    parser = argparse.ArgumentParser(description="Create or update an admin user for the Lawn Care API")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--password", required=True, help="Admin password (will be hashed before storing)")
    parser.add_argument(
        "--catalog",
        action="store_true",
        help="Also insert any missing standard packages and add-ons",
    )

    args = parser.parse_args()

    if "@" not in args.email or "." not in args.email:
        print("❌ Error: Invalid email format.", file=sys.stderr)
        sys.exit(1)

    if len(args.password) < 8:
        print("❌ Error: Password must be at least 8 characters.", file=sys.stderr)
        sys.exit(1)

    asyncio.run(run(args.email, args.password, args.catalog))


if __name__ == "__main__":
    main()
