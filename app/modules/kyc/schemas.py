from datetime import date, datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Literal, Optional
from app.modules.auth.models import KYCStatus
from app.modules.kyc.models import GovernmentIdType, SubmissionStatus

DOCUMENT_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "application/pdf")

class UploadUrlRequest(BaseModel):
    file_type: str = Field(min_length=1)
    doc_type: Literal["id", "selfie"]

    @field_validator("file_type")
    @classmethod
    def allowed_mime(cls, value: str) -> str:
        if value not in DOCUMENT_MIME_TYPES:
            raise ValueError("Invalid file type. Allowed: JPEG, PNG, WEBP, PDF")
        return value

class UploadUrlResponse(BaseModel):
    upload_url: str
    auth_token: str
    file_key: str
    expires_in: int

class KYCSubmit(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    date_of_birth: date
    id_type: GovernmentIdType
    government_id_number: str = Field(min_length=1)
    government_id_key: str = Field(min_length=1)
    liveliness_key: str = Field(min_length=1)
    government_id_back_key: Optional[str] = None

class KYCSubmitResponse(BaseModel):
    message: str
    kyc_id: UUID
    status: SubmissionStatus

class KYCRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    first_name: str
    last_name: str
    date_of_birth: date
    government_id_type: GovernmentIdType
    status: SubmissionStatus
    rejection_reason: Optional[str] = None
    verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

class KYCStatusRead(BaseModel):
    kyc_status: KYCStatus
    submission: Optional[KYCRead] = None

class PendingKYC(KYCRead):
    user_email: str
    user_name: Optional[str] = None
    government_id_number: str
    government_id_url: Optional[str] = None
    government_id_back_url: Optional[str] = None
    liveliness_url: Optional[str] = None

class KYCApprove(BaseModel):
    submission_id: UUID

class KYCReject(BaseModel):
    submission_id: UUID
    rejection_reason: str

    @field_validator("rejection_reason")
    @classmethod
    def reason_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Rejection reason is required")
        return value

class KYCReviewResponse(BaseModel):
    message: str
    submission: KYCRead
