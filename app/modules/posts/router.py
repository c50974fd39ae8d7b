from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core import deps
from app.core.storage import UPLOAD_TOKEN_TTL_SECONDS, B2Storage, build_post_media_key, get_storage
from app.modules.auth import models as auth_models
from app.modules.posts import schemas, service

router = APIRouter()
feed_router = APIRouter()

@router.post("/create", response_model=schemas.PostResponse)
async def create_post(
    post_in: schemas.PostCreate,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    post = await service.create_post(db, current_user, post_in)
    return {"post": service.to_schema(post)}

@router.post("/upload-url", response_model=schemas.PostMediaUploadResponse)
async def post_media_upload_url(
    upload_in: schemas.PostMediaUploadRequest,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    storage: B2Storage = Depends(get_storage)
) -> Any:
    """
    Upload target for a post's image or video. `public_url` is what goes
    into the post once the upload finished.
    """
    service.require_creator(current_user, "Only creators can upload post media")
    upload_url, auth_token = storage.get_upload_url()
    file_key = build_post_media_key(current_user.id, upload_in.file_type, upload_in.media_type)
    return {
        "upload_url": upload_url,
        "auth_token": auth_token,
        "file_key": file_key,
        "public_url": storage.get_public_url(file_key),
        "expires_in": UPLOAD_TOKEN_TTL_SECONDS,
    }

@feed_router.get("", response_model=schemas.Feed)
async def get_feed(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    posts, has_more = await service.get_feed(db, current_user, page, limit)
    return {
        "posts": [service.to_schema(post) for post in posts],
        "page": page,
        "limit": limit,
        "has_more": has_more,
    }
