import logging
import math
from typing import Optional, Tuple
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.auth import models as auth_models
from app.modules.creators import models, schemas
from app.modules.messages.models import Message
from app.modules.subscriptions.models import Subscription

logger = logging.getLogger(__name__)

def _counts_columns():
    subscriptions_count = (
        select(func.count(Subscription.id))
        .where(Subscription.creator_id == auth_models.User.id)
        .scalar_subquery()
    )
    messages_count = (
        select(func.count(Message.id))
        .where(Message.recipient_id == auth_models.User.id)
        .scalar_subquery()
    )
    return subscriptions_count.label("subscriptions_count"), messages_count.label("messages_count")

def to_schema(user: auth_models.User, subscriptions: int, messages: int, model=schemas.CreatorRead):
    creator = model.model_validate(user)
    creator.counts = schemas.CreatorCounts(subscriptions=subscriptions or 0, received_messages=messages or 0)
    return creator

async def list_creators(
    db: AsyncSession,
    page: int,
    limit: int,
    search: Optional[str],
    sort_by: str
) -> dict:
    filters = [
        auth_models.User.role == auth_models.UserRole.CREATOR,
        auth_models.User.status == auth_models.UserStatus.ACTIVE,
        auth_models.User.kyc_status == auth_models.KYCStatus.VERIFIED,
    ]
    if search:
        pattern = f"%{search}%"
        filters.append(or_(auth_models.User.name.ilike(pattern), auth_models.User.bio.ilike(pattern)))

    subscriptions_count, messages_count = _counts_columns()

    if sort_by == "popular":
        order_by = [subscriptions_count.desc(), auth_models.User.created_at.desc()]
    elif sort_by == "name":
        order_by = [auth_models.User.name.asc()]
    else:
        order_by = [auth_models.User.created_at.desc()]

    total = await db.scalar(select(func.count(auth_models.User.id)).where(*filters)) or 0

    result = await db.execute(
        select(auth_models.User, subscriptions_count, messages_count)
        .where(*filters)
        .order_by(*order_by)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    creators = [to_schema(user, subs, msgs) for user, subs, msgs in result.all()]

    total_pages = math.ceil(total / limit)
    return {
        "creators": creators,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": total_pages,
            "has_more": page < total_pages,
        },
    }

async def get_creator_with_counts(db: AsyncSession, creator_id: UUID) -> Tuple[auth_models.User, int, int]:
    subscriptions_count, messages_count = _counts_columns()
    result = await db.execute(
        select(auth_models.User, subscriptions_count, messages_count)
        .where(auth_models.User.id == creator_id)
    )
    row = result.first()
    if not row:
        raise HTTPException(status_code=404, detail="Creator not found")
    return row[0], row[1], row[2]

async def record_profile_view(db: AsyncSession, viewer_id: UUID, viewed_id: UUID) -> None:
    """
    Insert a view, or refresh last_viewed_at when the pair already exists.
    """
    dialect = db.get_bind().dialect.name
    insert = sqlite.insert if dialect == "sqlite" else postgresql.insert

    stmt = insert(models.ProfileView).values(viewer_id=viewer_id, viewed_id=viewed_id)
    stmt = stmt.on_conflict_do_update(
        index_elements=[models.ProfileView.viewer_id, models.ProfileView.viewed_id],
        set_={"last_viewed_at": func.now()},
    )
    await db.execute(stmt)
    await db.commit()
