import logging
from typing import List, Tuple

from fastapi import HTTPException
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.modules.auth import models as auth_models
from app.modules.posts import models, schemas
from app.modules.subscriptions import models as sub_models

logger = logging.getLogger(__name__)

def to_schema(post: models.Post) -> schemas.PostRead:
    return schemas.PostRead(
        id=post.id,
        creator_id=post.creator_id,
        creator_name=post.creator.name if post.creator else None,
        creator_image=post.creator.image if post.creator else None,
        content=post.content,
        image_url=post.image_url,
        video_url=post.video_url,
        is_subscriber_only=post.is_subscriber_only,
        likes=post.likes,
        comments=post.comments,
        created_at=post.created_at,
    )

def require_creator(user: auth_models.User, detail: str) -> None:
    if not user.is_creator:
        raise HTTPException(status_code=403, detail=detail)

async def create_post(db: AsyncSession, user: auth_models.User, post_in: schemas.PostCreate) -> models.Post:
    require_creator(user, "Only creators can create posts")
    if user.kyc_status != auth_models.KYCStatus.VERIFIED:
        raise HTTPException(
            status_code=403,
            detail="Account verification required. Please complete verification to create posts.",
        )

    post = models.Post(
        creator_id=user.id,
        content=post_in.content,
        image_url=post_in.image_url,
        video_url=post_in.video_url,
        is_subscriber_only=post_in.is_subscriber_only,
        likes=0,
        comments=0,
    )
    post.creator = user
    db.add(post)
    await db.commit()
    await db.refresh(post, attribute_names=["created_at"])
    logger.info(f"Post {post.id} created by {user.id}")
    return post

async def get_feed(db: AsyncSession, user: auth_models.User, page: int, limit: int) -> Tuple[List[models.Post], bool]:
    """
    Public posts from active creators, plus subscriber-only posts from
    creators the caller actively subscribes to, plus the caller's own posts.
    """
    subscribed = (
        select(sub_models.Subscription.creator_id)
        .where(
            sub_models.Subscription.subscriber_id == user.id,
            sub_models.Subscription.status == sub_models.SubscriptionStatus.ACTIVE,
        )
    )
    result = await db.execute(
        select(models.Post)
        .join(auth_models.User, auth_models.User.id == models.Post.creator_id)
        .where(
            auth_models.User.status == auth_models.UserStatus.ACTIVE,
            or_(
                models.Post.is_subscriber_only.is_(False),
                models.Post.creator_id.in_(subscribed),
                models.Post.creator_id == user.id,
            ),
        )
        .options(selectinload(models.Post.creator))
        .order_by(models.Post.created_at.desc(), models.Post.id)
        .offset((page - 1) * limit)
        .limit(limit + 1)
    )
    posts = list(result.scalars().all())
    return posts[:limit], len(posts) > limit
