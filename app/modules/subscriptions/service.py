import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.subscriptions import models
from app.modules.payments.stripe_client import StripeClient, StripeError

logger = logging.getLogger(__name__)

async def get_active_subscription(db: AsyncSession, subscriber_id: UUID, creator_id: UUID) -> Optional[models.Subscription]:
    result = await db.execute(
        select(models.Subscription)
        .where(
            models.Subscription.subscriber_id == subscriber_id,
            models.Subscription.creator_id == creator_id,
            models.Subscription.status == models.SubscriptionStatus.ACTIVE
        )
    )
    return result.scalars().first()

async def check_subscription_access(db: AsyncSession, subscriber_id: UUID, creator_id: UUID) -> bool:
    return await get_active_subscription(db, subscriber_id, creator_id) is not None

async def list_active_subscriptions(db: AsyncSession, subscriber_id: UUID) -> List[models.Subscription]:
    result = await db.execute(
        select(models.Subscription)
        .where(
            models.Subscription.subscriber_id == subscriber_id,
            models.Subscription.status == models.SubscriptionStatus.ACTIVE
        )
        .order_by(models.Subscription.created_at.desc())
    )
    return list(result.scalars().all())

async def get_by_stripe_id(db: AsyncSession, stripe_subscription_id: str) -> Optional[models.Subscription]:
    result = await db.execute(
        select(models.Subscription)
        .where(models.Subscription.stripe_subscription_id == stripe_subscription_id)
    )
    return result.scalars().first()

async def cancel_subscription(
    db: AsyncSession,
    subscription_id: UUID,
    user_id: UUID,
    stripe: StripeClient
) -> models.Subscription:
    sub = await db.get(models.Subscription, subscription_id)
    if not sub:
        raise HTTPException(status_code=404, detail="Subscription not found")

    if sub.subscriber_id != user_id:
        raise HTTPException(status_code=403, detail="Unauthorized - only subscriber can cancel")

    if sub.status != models.SubscriptionStatus.ACTIVE:
        raise HTTPException(status_code=400, detail=f"Subscription is already {sub.status.value.lower()}")

    if sub.stripe_subscription_id:
        try:
            await stripe.cancel_subscription(sub.stripe_subscription_id)
        except StripeError as e:
            # Local state is still updated; the webhook reconciles later
            logger.warning(f"Error cancelling Stripe subscription {sub.stripe_subscription_id}: {e.message}")

    sub.status = models.SubscriptionStatus.CANCELLED
    sub.cancelled_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(sub)
    logger.info(f"Subscription {sub.id} cancelled by {user_id}")
    return sub
