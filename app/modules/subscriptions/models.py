import uuid
import enum
from sqlalchemy import Column, DateTime, ForeignKey, Enum, Float, String, func
from sqlalchemy.dialects.postgresql import UUID
from app.core.db import Base

class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    PAST_DUE = "PAST_DUE"
    CANCELLED = "CANCELLED"

class SubscriptionTier(str, enum.Enum):
    BASIC = "BASIC"
    PREMIUM = "PREMIUM"
    VIP = "VIP"

# Monthly price in cents
TIER_PRICING = {
    SubscriptionTier.BASIC: 499,
    SubscriptionTier.PREMIUM: 999,
    SubscriptionTier.VIP: 2499,
}

class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subscriber_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    creator_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    status = Column(Enum(SubscriptionStatus), default=SubscriptionStatus.ACTIVE, nullable=False)
    tier = Column(Enum(SubscriptionTier), default=SubscriptionTier.BASIC, nullable=False)
    price = Column(Float, nullable=False) # Dollars per month

    stripe_subscription_id = Column(String, unique=True, nullable=True)
    renews_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
