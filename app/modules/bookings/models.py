import uuid
import enum
from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.core.db import Base

# Platform cut of each completed booking; the rest is the creator's payout
PLATFORM_FEE_PERCENT = 0.15

DEFAULT_MIN_BOOKING_HOURS = 2
MAX_BOOKING_HOURS = 8

class BookingStatus(str, enum.Enum):
    PENDING = "PENDING" # Card authorized, waiting for the creator
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED" # Payment captured
    CANCELLED = "CANCELLED"

# Statuses that hold the creator's calendar
BLOCKING_STATUSES = (BookingStatus.PENDING, BookingStatus.APPROVED)

class Booking(Base):
    __tablename__ = "bookings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    creator_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    client_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    meeting_location = Column(String, nullable=False)
    notes = Column(Text, nullable=True)

    hourly_rate = Column(Float, nullable=False) # Dollars, copied from the creator at request time
    duration_hours = Column(Float, nullable=False)
    total_price_cents = Column(Integer, nullable=False)

    status = Column(Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False)
    stripe_payment_intent_id = Column(String, nullable=True)
    payment_captured_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    creator = relationship("User", foreign_keys=[creator_id])
    client = relationship("User", foreign_keys=[client_id])

class BookingChat(Base):
    __tablename__ = "booking_chats"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_id = Column(UUID(as_uuid=True), ForeignKey("bookings.id"), nullable=False, index=True)
    sender_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    recipient_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("booking_id", "reviewed_by", name="uq_reviews_booking_reviewer"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_id = Column(UUID(as_uuid=True), ForeignKey("bookings.id"), nullable=False, index=True)
    creator_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    client_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    reviewed_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    reviewed_user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
