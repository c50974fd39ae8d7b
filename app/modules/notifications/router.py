from typing import Any, List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core import deps
from app.modules.auth import models as auth_models
from app.modules.notifications import schemas, service

router = APIRouter()

@router.get("", response_model=List[schemas.NotificationRead])
async def list_notifications(
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    List current user's notifications.
    """
    return await service.list_my_notifications(db, current_user.id)

@router.post("/{id}/read", response_model=schemas.NotificationRead)
async def mark_read(
    id: UUID,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Mark a notification as read.
    """
    notification = await service.mark_as_read(db, id, current_user.id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification
