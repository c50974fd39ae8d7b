from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.modules.auth.models import UserRole, UserStatus, KYCStatus

class UserBase(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    role: UserRole = UserRole.SUBSCRIBER

class UserCreate(UserBase):
    password: str = Field(min_length=8)

    @field_validator("role")
    @classmethod
    def no_self_assigned_admin(cls, value: UserRole) -> UserRole:
        if value == UserRole.ADMIN:
            raise ValueError("Role must be CREATOR or SUBSCRIBER")
        return value

class UserRead(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: UserStatus
    kyc_status: KYCStatus
    is_creator: bool = False
    image: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    hourly_rate: Optional[float] = None
    min_booking_hours: Optional[int] = None
    average_rating: Optional[float] = None
    email_verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

class Token(BaseModel):
    access_token: str
    token_type: str

class OAuthAuthorizeResponse(BaseModel):
    url: str

class OAuthCallback(BaseModel):
    code: str = Field(min_length=1)
    state: str = Field(min_length=1)

class OAuthLoginResponse(Token):
    user: UserRead
    created: bool = False

class VerifyEmailRequest(BaseModel):
    email: EmailStr

class VerifyEmailResponse(BaseModel):
    message: str
    verified: bool = False
    success: bool = True
    # Development only; in other environments the link goes out by e-mail
    verification_url: Optional[str] = None
