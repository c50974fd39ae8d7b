import logging
from typing import Dict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.auth import models as auth_models
from app.modules.kyc import service as kyc_service
from app.modules.messages.models import Message
from app.modules.subscriptions.models import Subscription, SubscriptionStatus
from app.modules.users import schemas

logger = logging.getLogger(__name__)

async def sync_kyc_status(db: AsyncSession, user: auth_models.User) -> None:
    """
    Align user.kyc_status with the user's KYC submission, if one exists.
    """
    submission = await kyc_service.get_submission_for_user(db, user.id)
    if not submission:
        return
    submission_status = auth_models.KYCStatus(submission.status.value)
    if user.kyc_status != submission_status:
        logger.info(f"Syncing kyc_status for {user.id}: {user.kyc_status.value} -> {submission_status.value}")
        user.kyc_status = submission_status
        await db.commit()

async def get_counts(db: AsyncSession, user: auth_models.User) -> Dict[str, int]:
    subscriptions = await db.scalar(
        select(func.count(Subscription.id)).where(
            Subscription.subscriber_id == user.id,
            Subscription.status == SubscriptionStatus.ACTIVE,
        )
    )
    subscribers = await db.scalar(
        select(func.count(Subscription.id)).where(
            Subscription.creator_id == user.id,
            Subscription.status == SubscriptionStatus.ACTIVE,
        )
    )
    received_messages = await db.scalar(
        select(func.count(Message.id)).where(Message.recipient_id == user.id)
    )
    return {
        "subscriptions": subscriptions or 0,
        "subscribers": subscribers or 0,
        "received_messages": received_messages or 0,
    }

async def get_profile(db: AsyncSession, user: auth_models.User) -> schemas.ProfileRead:
    await sync_kyc_status(db, user)
    profile = schemas.ProfileRead.model_validate(user)
    profile.stripe_connected = bool(user.stripe_connect_id)
    profile.counts = schemas.ProfileCounts(**await get_counts(db, user))
    return profile

async def update_profile(
    db: AsyncSession,
    user: auth_models.User,
    profile_in: schemas.ProfileUpdate
) -> schemas.ProfileRead:
    update_data = profile_in.model_dump(exclude_none=True)
    if "role" in update_data:
        update_data["role"] = auth_models.UserRole(update_data["role"])
    # A zero rate counts as unset
    if not update_data.get("hourly_rate"):
        update_data.pop("hourly_rate", None)

    for field, value in update_data.items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    return await get_profile(db, user)
