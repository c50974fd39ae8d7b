import uuid
import enum
from sqlalchemy import Column, String, Date, DateTime, ForeignKey, Enum, func
from sqlalchemy.dialects.postgresql import UUID
from app.core.db import Base

class SubmissionStatus(str, enum.Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"

class GovernmentIdType(str, enum.Enum):
    PASSPORT = "PASSPORT"
    DRIVERS_LICENSE = "DRIVERS_LICENSE"
    NATIONAL_ID = "NATIONAL_ID"

class KYCSubmission(Base):
    __tablename__ = "kyc_submissions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, unique=True) # One submission per user, resubmitted in place

    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    date_of_birth = Column(Date, nullable=False)
    government_id_type = Column(Enum(GovernmentIdType), nullable=False)
    government_id_number = Column(String, nullable=False)

    # Storage keys, not URLs; download links are signed on read
    government_id_image_url = Column(String, nullable=False)
    government_id_back_url = Column(String, nullable=True)
    liveliness_image_url = Column(String, nullable=False)

    status = Column(Enum(SubmissionStatus), default=SubmissionStatus.PENDING, nullable=False)
    rejection_reason = Column(String, nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
