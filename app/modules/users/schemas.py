from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator
from app.modules.auth.schemas import UserRead

class ProfileCounts(BaseModel):
    subscriptions: int = 0
    subscribers: int = 0
    received_messages: int = 0

class ProfileRead(UserRead):
    is_featured: bool = False
    stripe_connected: bool = False
    kyc_rejection_reason: Optional[str] = None
    counts: ProfileCounts = ProfileCounts()

class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = Field(default=None, max_length=2000)
    role: Optional[Literal["CREATOR", "SUBSCRIBER"]] = None
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    min_booking_hours: Optional[int] = Field(default=None, ge=1, le=8)
    image: Optional[str] = None

    @field_validator("name", "bio", "image", "role", mode="before")
    @classmethod
    def empty_as_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value
