from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict
from app.modules.auth.models import UserRole

class ClearResponse(BaseModel):
    message: str

class SeededUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: Optional[str] = None
    email: str
    role: UserRole
    hourly_rate: Optional[float] = None

class SeedResponse(BaseModel):
    message: str
    users_created: int
    users: List[SeededUser]
