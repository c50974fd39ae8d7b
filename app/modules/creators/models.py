import uuid
from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from app.core.db import Base

class ProfileView(Base):
    __tablename__ = "profile_views"
    __table_args__ = (
        UniqueConstraint("viewer_id", "viewed_id", name="uq_profile_views_viewer_viewed"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    viewer_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    viewed_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    last_viewed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
