import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.auth import models as auth_models
from app.modules.payments import models
from app.modules.payments.stripe_client import StripeClient
from app.modules.subscriptions import models as sub_models
from app.modules.subscriptions import service as sub_service

logger = logging.getLogger(__name__)

async def connect_account(db: AsyncSession, user: auth_models.User, code: str, stripe: StripeClient) -> str:
    account_id = await stripe.exchange_connect_code(code)
    user.stripe_connect_id = account_id
    await db.commit()
    logger.info(f"User {user.id} connected Stripe account {account_id}")
    return account_id

async def connect_mock_account(db: AsyncSession, user: auth_models.User) -> str:
    account_id = f"acct_mock_dev_bypass_{int(time.time() * 1000)}"
    user.stripe_connect_id = account_id
    await db.commit()
    return account_id

async def ensure_customer(db: AsyncSession, user: auth_models.User, stripe: StripeClient) -> str:
    """The user's Stripe customer id, created on first payment."""
    if user.stripe_customer_id:
        return user.stripe_customer_id
    customer_id = await stripe.create_customer(user.email, user.name, str(user.id))
    user.stripe_customer_id = customer_id
    await db.commit()
    return customer_id

async def attach_saved_payment_method(customer_id: str, setup_intent_id: str, stripe: StripeClient) -> str:
    setup_intent = await stripe.retrieve_setup_intent(setup_intent_id)
    payment_method_id = _object_id(setup_intent.get("payment_method"))
    if not payment_method_id:
        raise HTTPException(status_code=400, detail="Payment method not found in setup intent")

    await stripe.attach_payment_method(payment_method_id, customer_id)
    await stripe.set_default_payment_method(customer_id, payment_method_id)
    return payment_method_id

async def create_subscription(
    db: AsyncSession,
    subscriber: auth_models.User,
    creator_id: UUID,
    tier: sub_models.SubscriptionTier,
    stripe: StripeClient,
    setup_intent_id: Optional[str] = None
) -> sub_models.Subscription:
    """
    With `setup_intent_id` the card saved by that SetupIntent becomes the
    customer's default and is charged for the subscription.
    """
    if subscriber.id == creator_id:
        raise HTTPException(status_code=400, detail="Cannot subscribe to yourself")

    creator = await db.get(auth_models.User, creator_id)
    if not creator or creator.role != auth_models.UserRole.CREATOR:
        raise HTTPException(status_code=404, detail="Creator not found")

    if await sub_service.check_subscription_access(db, subscriber.id, creator_id):
        raise HTTPException(status_code=400, detail="Already subscribed to this creator")

    customer_id = await ensure_customer(db, subscriber, stripe)
    payment_method_id = None
    if setup_intent_id:
        payment_method_id = await attach_saved_payment_method(customer_id, setup_intent_id, stripe)

    unit_amount = sub_models.TIER_PRICING[tier]
    stripe_sub = await stripe.create_subscription(
        customer_id=customer_id,
        product_name=f"{creator.name or 'Creator'} - {tier.value} Tier",
        unit_amount=unit_amount,
        metadata={
            "creatorId": str(creator_id),
            "subscriberId": str(subscriber.id),
            "tier": tier.value,
        },
        default_payment_method=payment_method_id,
    )

    period_end = stripe_sub.get("current_period_end")
    if period_end:
        renews_at = datetime.fromtimestamp(period_end, tz=timezone.utc)
    else:
        renews_at = datetime.now(timezone.utc) + timedelta(days=30)

    sub = sub_models.Subscription(
        subscriber_id=subscriber.id,
        creator_id=creator_id,
        tier=tier,
        price=unit_amount / 100,
        stripe_subscription_id=stripe_sub["id"],
        status=sub_models.SubscriptionStatus.ACTIVE,
        renews_at=renews_at,
    )
    db.add(sub)
    await db.commit()
    await db.refresh(sub)
    logger.info(f"Subscription {sub.id}: {subscriber.id} -> {creator_id} ({tier.value})")
    return sub

def _object_id(value: Any) -> str | None:
    # Stripe expands some fields into objects
    if isinstance(value, dict):
        return value.get("id")
    return value

async def handle_webhook_event(db: AsyncSession, event: Dict[str, Any]) -> None:
    event_type = event.get("type")
    obj = (event.get("data") or {}).get("object") or {}

    if event_type == "customer.subscription.created":
        metadata = obj.get("metadata") or {}
        if not metadata.get("creatorId") or not metadata.get("subscriberId"):
            return
        sub = await sub_service.get_by_stripe_id(db, obj.get("id"))
        if sub:
            sub.status = sub_models.SubscriptionStatus.ACTIVE

    elif event_type == "customer.subscription.deleted":
        sub = await sub_service.get_by_stripe_id(db, obj.get("id"))
        if sub:
            sub.status = sub_models.SubscriptionStatus.CANCELLED
            sub.cancelled_at = datetime.now(timezone.utc)

    elif event_type == "invoice.payment_succeeded":
        subscription_id = _object_id(obj.get("subscription"))
        if not subscription_id:
            return
        sub = await sub_service.get_by_stripe_id(db, subscription_id)
        if sub:
            total = obj.get("total") or 0
            db.add(models.Earning(
                creator_id=sub.creator_id,
                amount=round(total / 100 * models.CREATOR_REVENUE_SHARE, 2),
                source=models.EarningSource.SUBSCRIPTION,
                stripe_charge_id=_object_id(obj.get("charge")),
            ))

    elif event_type == "invoice.payment_failed":
        logger.error(f"Payment failed for invoice {obj.get('id')}")
        subscription_id = _object_id(obj.get("subscription"))
        sub = await sub_service.get_by_stripe_id(db, subscription_id) if subscription_id else None
        if sub:
            sub.status = sub_models.SubscriptionStatus.PAST_DUE

    else:
        logger.debug(f"Ignoring Stripe event {event_type}")
        return

    await db.commit()
