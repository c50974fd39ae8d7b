import uuid
import enum
from sqlalchemy import Column, String, Boolean, DateTime, func, Enum, Float, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from app.core.db import Base

class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    CREATOR = "CREATOR"
    SUBSCRIBER = "SUBSCRIBER"

class UserStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"

class KYCStatus(str, enum.Enum):
    NONE = "NONE" # Never submitted
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"

class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True) # Null for identity-provider sign-ins
    name = Column(String, nullable=True)
    role = Column(Enum(UserRole), default=UserRole.SUBSCRIBER, nullable=False)
    status = Column(Enum(UserStatus), default=UserStatus.ACTIVE, nullable=False)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)

    # Profile
    image = Column(String, nullable=True)
    bio = Column(String, nullable=True)
    location = Column(String, nullable=True)
    hourly_rate = Column(Float, nullable=True)
    min_booking_hours = Column(Integer, nullable=True)
    average_rating = Column(Float, nullable=True)
    is_featured = Column(Boolean, default=False, nullable=False)

    # KYC, mirrored from the latest submission
    kyc_status = Column(Enum(KYCStatus), default=KYCStatus.NONE, nullable=False)
    kyc_verified_at = Column(DateTime(timezone=True), nullable=True)
    kyc_rejection_reason = Column(String, nullable=True)

    # Stripe
    stripe_connect_id = Column(String, nullable=True) # Payout account (Connect)
    stripe_customer_id = Column(String, nullable=True) # Paying side

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def is_creator(self) -> bool:
        return self.role == UserRole.CREATOR

    @property
    def is_available_creator(self) -> bool:
        return self.status == UserStatus.ACTIVE and self.kyc_status == KYCStatus.VERIFIED

    @property
    def is_bookable(self) -> bool:
        return self.is_creator and self.is_available_creator

class VerificationToken(Base):
    """Single-use e-mail verification token."""
    __tablename__ = "verification_tokens"
    __table_args__ = (
        UniqueConstraint("identifier", "token", name="uq_verification_tokens_identifier_token"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    identifier = Column(String, nullable=False, index=True) # e-mail address
    token = Column(String, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
