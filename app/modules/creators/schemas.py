from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict
from typing import List, Literal, Optional

SortBy = Literal["newest", "popular", "name"]

class CreatorCounts(BaseModel):
    subscriptions: int = 0
    received_messages: int = 0

class CreatorRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: Optional[str] = None
    image: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    hourly_rate: Optional[float] = None
    min_booking_hours: Optional[int] = None
    average_rating: Optional[float] = None
    is_featured: bool = False
    created_at: Optional[datetime] = None
    counts: CreatorCounts = CreatorCounts()

class CreatorDetail(CreatorRead):
    is_subscribed: bool = False

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool

class CreatorList(BaseModel):
    creators: List[CreatorRead]
    pagination: Pagination
