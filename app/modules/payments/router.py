import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.core import deps
from app.modules.auth import models as auth_models
from app.modules.payments import schemas, service
from app.modules.payments.stripe_client import StripeClient, WebhookSignatureError, get_stripe_client
from app.modules.subscriptions import schemas as sub_schemas

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/connect-url", response_model=schemas.ConnectUrlResponse)
async def stripe_connect_url(
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    stripe: StripeClient = Depends(get_stripe_client)
) -> Any:
    """
    Stripe Connect onboarding link. `state` carries the caller id and is
    checked again on the callback.
    """
    return {"url": stripe.build_connect_url(state=str(current_user.id), email=current_user.email)}

@router.post("/connect-callback", response_model=schemas.ConnectCallbackResponse)
async def stripe_connect_callback(
    callback_in: schemas.ConnectCallback,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    stripe: StripeClient = Depends(get_stripe_client),
    db: AsyncSession = Depends(get_db)
) -> Any:
    if callback_in.state != str(current_user.id):
        raise HTTPException(status_code=400, detail="Invalid state parameter")

    await service.connect_account(db, current_user, callback_in.code, stripe)
    return {"message": "Stripe account connected successfully", "success": True}

@router.post("/dev-skip")
async def stripe_dev_skip(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """Development only: mark the caller as connected without Stripe."""
    if not settings.is_development:
        raise HTTPException(status_code=403, detail="Forbidden")

    current_user = await deps.get_current_user(
        request,
        token_query=request.query_params.get("token"),
        token_header=await deps.oauth2_scheme(request),
        db=db,
    )
    account_id = await service.connect_mock_account(db, current_user)
    return {"success": True, "stripe_connect_id": account_id}

@router.post("/create-subscription", response_model=sub_schemas.SubscriptionRead)
async def create_subscription(
    sub_in: schemas.CreateSubscription,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    stripe: StripeClient = Depends(get_stripe_client),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.create_subscription(db, current_user, sub_in.creator_id, sub_in.tier, stripe)

@router.post("/create-subscription-with-payment", response_model=sub_schemas.SubscriptionRead)
async def create_subscription_with_payment(
    sub_in: schemas.CreateSubscriptionWithPayment,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    stripe: StripeClient = Depends(get_stripe_client),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """Subscribe using the card saved by a completed SetupIntent."""
    return await service.create_subscription(
        db, current_user, sub_in.creator_id, sub_in.tier, stripe, setup_intent_id=sub_in.setup_intent_id
    )

@router.post("/webhook", response_model=schemas.WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe: StripeClient = Depends(get_stripe_client),
    db: AsyncSession = Depends(get_db)
) -> Any:
    payload = await request.body()
    try:
        event = stripe.construct_event(payload, request.headers.get("stripe-signature"))
    except WebhookSignatureError as e:
        logger.warning(f"Rejected Stripe webhook: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    await service.handle_webhook_event(db, event)
    return {"received": True}
