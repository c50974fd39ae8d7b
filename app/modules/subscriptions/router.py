from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core import deps
from app.modules.auth import models as auth_models
from app.modules.payments.stripe_client import StripeClient, get_stripe_client
from app.modules.subscriptions import schemas, service

router = APIRouter()

@router.get("/my-subscriptions", response_model=schemas.MySubscriptions)
async def list_my_subscriptions(
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """The caller's active subscriptions."""
    subs = await service.list_active_subscriptions(db, current_user.id)
    return {"subscriptions": subs}

@router.post("/cancel", response_model=schemas.SubscriptionCancelResponse)
async def cancel_subscription(
    cancel_in: schemas.SubscriptionCancel,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    stripe: StripeClient = Depends(get_stripe_client),
    db: AsyncSession = Depends(get_db)
) -> Any:
    sub = await service.cancel_subscription(db, cancel_in.subscription_id, current_user.id, stripe)
    return {"subscription": sub}

@router.get("/check/{creator_id}", response_model=bool)
async def check_access(
    creator_id: UUID,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.check_subscription_access(db, current_user.id, creator_id)
