from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from app.modules.subscriptions.models import SubscriptionStatus, SubscriptionTier

class SubscriptionSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    creator_id: UUID
    status: SubscriptionStatus
    price: float
    tier: SubscriptionTier

class MySubscriptions(BaseModel):
    subscriptions: List[SubscriptionSummary]

class SubscriptionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    subscriber_id: UUID
    creator_id: UUID
    status: SubscriptionStatus
    tier: SubscriptionTier
    price: float
    stripe_subscription_id: Optional[str] = None
    renews_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

class SubscriptionCancel(BaseModel):
    subscription_id: UUID

class SubscriptionCancelResponse(BaseModel):
    subscription: SubscriptionRead
