import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.modules.admin import schemas
from app.modules.auth.models import User, VerificationToken
from app.modules.bookings.models import Booking, BookingChat, Review
from app.modules.creators.models import ProfileView
from app.modules.kyc.models import KYCSubmission
from app.modules.messages.models import Message
from app.modules.notifications.models import Notification
from app.modules.payments.models import Earning
from app.modules.posts.models import Post
from app.modules.subscriptions.models import Subscription
from app.seed import seed_demo_data

logger = logging.getLogger(__name__)

router = APIRouter()

# Children first so foreign keys never dangle
WIPE_ORDER = (
    Message, BookingChat, Review, Booking, Post, Subscription, ProfileView,
    Earning, KYCSubmission, Notification, VerificationToken, User,
)

async def require_seed_token(x_seed_token: str | None = Header(None)) -> None:
    if x_seed_token != settings.SEED_TOKEN:
        raise HTTPException(status_code=401, detail="Unauthorized")
    if settings.is_production:
        raise HTTPException(status_code=403, detail="Not allowed in production")

@router.post("/clear", response_model=schemas.ClearResponse, dependencies=[Depends(require_seed_token)])
async def clear_database(db: AsyncSession = Depends(get_db)) -> Any:
    """
    Development only: delete every row of application data.
    """
    for model in WIPE_ORDER:
        await db.execute(delete(model))
    await db.commit()
    logger.warning("Database cleared via admin endpoint")
    return {"message": "Database cleared successfully"}

@router.post("/seed", response_model=schemas.SeedResponse, dependencies=[Depends(require_seed_token)])
async def seed_database(db: AsyncSession = Depends(get_db)) -> Any:
    created = await seed_demo_data(db)
    return {
        "message": "Database seeded successfully",
        "users_created": len(created),
        "users": created,
    }
