import uuid
import enum
from sqlalchemy import Column, DateTime, ForeignKey, Enum, Float, String, func
from sqlalchemy.dialects.postgresql import UUID
from app.core.db import Base

# Share of each subscription invoice paid out to the creator
CREATOR_REVENUE_SHARE = 0.8

class EarningSource(str, enum.Enum):
    SUBSCRIPTION = "SUBSCRIPTION"
    MESSAGE = "MESSAGE"
    BOOKING = "BOOKING"

class Earning(Base):
    __tablename__ = "earnings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    creator_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False) # Dollars
    source = Column(Enum(EarningSource), nullable=False)
    stripe_charge_id = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
