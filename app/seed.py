import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import SessionLocal
from app.core.security import get_password_hash
from app.modules.auth.models import User, UserRole, UserStatus, KYCStatus

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

CREATORS_DATA: List[Dict] = [
    {
        "name": "Sarah Johnson",
        "email": "sarah@example.com",
        "bio": "Professional model and lifestyle creator. Love traveling!",
        "hourly_rate": 9.99,
        "image": "https://api.dicebear.com/7.x/avataaars/svg?seed=Sarah",
    },
    {
        "name": "Emma Williams",
        "email": "emma@example.com",
        "bio": "Fitness enthusiast and wellness coach.",
        "hourly_rate": 12.99,
        "image": "https://api.dicebear.com/7.x/avataaars/svg?seed=Emma",
    },
    {
        "name": "Jessica Davis",
        "email": "jessica@example.com",
        "bio": "Fashion blogger & stylist.",
        "hourly_rate": 14.99,
        "image": "https://api.dicebear.com/7.x/avataaars/svg?seed=Jessica",
    },
    {
        "name": "Olivia Martinez",
        "email": "olivia@example.com",
        "bio": "Artist & creative mind.",
        "hourly_rate": 11.99,
        "image": "https://api.dicebear.com/7.x/avataaars/svg?seed=Olivia",
    },
]

SUBSCRIBER_DATA = {"name": "Test Fan", "email": "fan@example.com"}
ADMIN_DATA = {"name": "Super Admin", "email": "admin@example.com"}

async def _exists(session: AsyncSession, email: str) -> bool:
    result = await session.execute(select(User.id).where(User.email == email))
    return result.first() is not None

async def seed_demo_data(session: AsyncSession) -> List[User]:
    """
    Insert the demo creators, a subscriber and an admin. Accounts whose
    e-mail already exists are skipped. Returns the users created.
    """
    hashed_password = get_password_hash(DEMO_PASSWORD)
    now = datetime.now(timezone.utc)
    created = []

    for data in CREATORS_DATA:
        if await _exists(session, data["email"]):
            continue
        created.append(User(
            hashed_password=hashed_password,
            role=UserRole.CREATOR,
            status=UserStatus.ACTIVE,
            kyc_status=KYCStatus.VERIFIED,
            kyc_verified_at=now,
            email_verified_at=now,
            **data,
        ))

    if not await _exists(session, SUBSCRIBER_DATA["email"]):
        created.append(User(
            hashed_password=hashed_password,
            role=UserRole.SUBSCRIBER,
            email_verified_at=now,
            **SUBSCRIBER_DATA,
        ))

    if not await _exists(session, ADMIN_DATA["email"]):
        created.append(User(
            hashed_password=hashed_password,
            role=UserRole.ADMIN,
            kyc_status=KYCStatus.VERIFIED,
            email_verified_at=now,
            **ADMIN_DATA,
        ))

    session.add_all(created)
    await session.commit()
    logger.info(f"Seeded {len(created)} users")
    return created

async def main():
    async with SessionLocal() as session:
        created = await seed_demo_data(session)
    for user in created:
        logger.info(f"{user.role.value}: {user.email} / {DEMO_PASSWORD}")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
