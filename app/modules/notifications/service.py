import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.modules.notifications import models
from uuid import UUID
from typing import List, Optional

logger = logging.getLogger(__name__)

def add_notification(
    db: AsyncSession,
    user_id: UUID,
    title: str,
    message: str,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None
) -> models.Notification:
    """
    Stage a notification on the session. The caller commits it together
    with the change it describes.
    """
    notification = models.Notification(
        user_id=user_id,
        title=title,
        message=message,
        resource_type=resource_type,
        resource_id=resource_id,
        is_read=False
    )
    db.add(notification)
    logger.info(f"Notification for {user_id}: {title}")
    return notification

async def list_my_notifications(db: AsyncSession, user_id: UUID) -> List[models.Notification]:
    result = await db.execute(
        select(models.Notification)
        .where(models.Notification.user_id == user_id)
        .order_by(models.Notification.created_at.desc())
    )
    return list(result.scalars().all())

async def mark_as_read(db: AsyncSession, notification_id: UUID, user_id: UUID) -> Optional[models.Notification]:
    result = await db.execute(
        select(models.Notification)
        .where(models.Notification.id == notification_id, models.Notification.user_id == user_id)
    )
    notification = result.scalars().first()
    if notification:
        notification.is_read = True
        await db.commit()
        await db.refresh(notification)
    return notification
