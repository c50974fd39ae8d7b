from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core import deps
from app.modules.auth import models as auth_models
from app.modules.users import schemas, service

router = APIRouter()

@router.get("/profile", response_model=schemas.ProfileRead)
async def read_profile(
    current_user: auth_models.User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.get_profile(db, current_user)

@router.patch("/profile", response_model=schemas.ProfileRead)
async def update_profile(
    profile_in: schemas.ProfileUpdate,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Update the caller's profile. Empty values leave the field unchanged.
    """
    return await service.update_profile(db, current_user, profile_in)
