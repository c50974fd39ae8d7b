from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict
from typing import Optional

class NotificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    message: str
    is_read: bool
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    created_at: Optional[datetime] = None
