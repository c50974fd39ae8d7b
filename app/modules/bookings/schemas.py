from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from app.modules.bookings.models import BookingStatus

class BookingCreate(BaseModel):
    creator_id: UUID
    start_time: datetime
    end_time: datetime
    meeting_location: str = Field(min_length=1, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("meeting_location")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Meeting location is required")
        return value

class BookingParty(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: Optional[str] = None
    image: Optional[str] = None

class BookingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    creator_id: UUID
    client_id: UUID
    start_time: datetime
    end_time: datetime
    meeting_location: str
    notes: Optional[str] = None
    hourly_rate: float
    duration_hours: float
    total_price_cents: int
    status: BookingStatus
    payment_captured_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    creator: Optional[BookingParty] = None
    client: Optional[BookingParty] = None

class BookingCreateResponse(BaseModel):
    booking: BookingRead
    client_secret: Optional[str] = None

class BookingAction(BaseModel):
    booking_id: UUID

class BookingResponse(BaseModel):
    booking: BookingRead

class BookingList(BaseModel):
    bookings: List[BookingRead]

class ChatSend(BaseModel):
    message: str = Field(max_length=1000)

    @field_validator("message")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Message is required")
        return value

class ChatMessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    sender_id: UUID
    recipient_id: UUID
    message: str
    created_at: Optional[datetime] = None

class ChatMessages(BaseModel):
    messages: List[ChatMessageRead]

class ChatMessageResponse(BaseModel):
    message: ChatMessageRead

class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)
    reviewed_user_id: UUID

class ReviewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    creator_id: UUID
    client_id: UUID
    reviewed_by: UUID
    reviewed_user_id: UUID
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

class ReviewResponse(BaseModel):
    review: ReviewRead

class ReviewList(BaseModel):
    reviews: List[ReviewRead]
