from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional

class MessageSend(BaseModel):
    recipient_id: UUID
    content: str = Field(max_length=5000)
    is_paid_message: bool = False
    cost_credits: int = Field(default=0, ge=0)

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Message content is required")
        return value

class MessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sender_id: UUID
    recipient_id: UUID
    content: str
    is_paid_message: bool
    cost_credits: int
    is_read: bool
    created_at: Optional[datetime] = None

class Conversation(BaseModel):
    messages: List[MessageRead]
