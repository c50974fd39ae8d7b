from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core import deps
from app.modules.auth import models as auth_models
from app.modules.messages import schemas, service

router = APIRouter()

@router.post("/send", response_model=schemas.MessageRead)
async def send_message(
    message_in: schemas.MessageSend,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Send a message. The sender needs an active subscription to the recipient.
    """
    return await service.send_message(db, current_user, message_in)

@router.get("/conversation/{user_id}", response_model=schemas.Conversation)
async def get_conversation(
    user_id: UUID,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    messages = await service.get_conversation(db, current_user.id, user_id)
    return {"messages": messages}
