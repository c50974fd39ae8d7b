from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core import deps
from app.modules.auth import models as auth_models
from app.modules.creators import schemas, service
from app.modules.subscriptions import service as sub_service

router = APIRouter()

@router.get("", response_model=schemas.CreatorList)
async def list_creators(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    sort_by: schemas.SortBy = Query("newest"),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Public listing of verified, active creators.
    """
    return await service.list_creators(db, page, limit, search.strip() if search else None, sort_by)

@router.get("/{creator_id}", response_model=schemas.CreatorDetail)
async def get_creator_profile(
    creator_id: UUID,
    current_user: Optional[auth_models.User] = Depends(deps.get_current_user_optional),
    db: AsyncSession = Depends(get_db)
) -> Any:
    creator, subscriptions, messages = await service.get_creator_with_counts(db, creator_id)
    if not creator.is_available_creator:
        raise HTTPException(status_code=403, detail="Creator not available")

    response = service.to_schema(creator, subscriptions, messages, model=schemas.CreatorDetail)

    if current_user and current_user.id != creator.id:
        await service.record_profile_view(db, current_user.id, creator.id)
        response.is_subscribed = await sub_service.check_subscription_access(db, current_user.id, creator.id)

    return response
