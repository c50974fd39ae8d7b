import logging
from typing import List
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.auth import models as auth_models
from app.modules.messages import models, schemas
from app.modules.subscriptions import service as sub_service

logger = logging.getLogger(__name__)

async def send_message(
    db: AsyncSession,
    sender: auth_models.User,
    message_in: schemas.MessageSend
) -> models.Message:
    if message_in.recipient_id == sender.id:
        raise HTTPException(status_code=400, detail="Cannot message yourself")

    recipient = await db.get(auth_models.User, message_in.recipient_id)
    if not recipient:
        raise HTTPException(status_code=404, detail="Recipient not found")

    if not await sub_service.check_subscription_access(db, sender.id, recipient.id):
        raise HTTPException(status_code=403, detail="Must be subscribed to message this creator")

    # Credits are recorded only; no balance is deducted
    message = models.Message(
        sender_id=sender.id,
        recipient_id=recipient.id,
        content=message_in.content,
        is_paid_message=message_in.is_paid_message,
        cost_credits=message_in.cost_credits,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)
    logger.info(f"Message {message.id}: {sender.id} -> {recipient.id}")
    return message

async def get_conversation(db: AsyncSession, user_id: UUID, other_id: UUID) -> List[models.Message]:
    result = await db.execute(
        select(models.Message)
        .where(
            or_(
                and_(models.Message.sender_id == user_id, models.Message.recipient_id == other_id),
                and_(models.Message.sender_id == other_id, models.Message.recipient_id == user_id),
            )
        )
        .order_by(models.Message.created_at.asc())
    )
    return list(result.scalars().all())
