import hashlib
import logging
from typing import Any
from urllib.parse import unquote

import aiofiles
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.core import deps
from app.core.storage import MOCK_UPLOAD_DIR, UPLOAD_TOKEN_TTL_SECONDS, B2Storage, build_upload_key, get_storage
from app.modules.auth import models as auth_models
from app.modules.uploads import schemas

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/profile-image-url", response_model=schemas.ProfileImageUploadResponse)
async def profile_image_upload_url(
    upload_in: schemas.ProfileImageUploadRequest,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    storage: B2Storage = Depends(get_storage),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Upload target for a new profile image. The user's image points at the
    new key right away.
    """
    upload_url, auth_token = storage.get_upload_url()
    file_key = build_upload_key(current_user.id, upload_in.file_type, "profile")
    image_url = storage.get_public_url(file_key)

    current_user.image = image_url
    await db.commit()

    return {
        "upload_url": upload_url,
        "auth_token": auth_token,
        "file_key": file_key,
        "image_url": image_url,
        "expires_in": UPLOAD_TOKEN_TTL_SECONDS,
    }

@router.post("/mock", response_model=schemas.MockUploadResponse)
async def mock_upload(request: Request) -> Any:
    """
    Simulates the B2 upload endpoint for local development.
    Expects a binary body and an 'X-Bz-File-Name' header.
    """
    if not settings.is_development:
        raise HTTPException(status_code=404, detail="Not found")

    file_name_encoded = request.headers.get("X-Bz-File-Name")
    if not file_name_encoded:
        raise HTTPException(status_code=400, detail="Missing X-Bz-File-Name header")

    file_name = unquote(file_name_encoded)
    base = MOCK_UPLOAD_DIR.resolve()
    target = (base / file_name).resolve()
    if base not in target.parents:
        raise HTTPException(status_code=400, detail="Invalid file name")
    target.parent.mkdir(parents=True, exist_ok=True)

    sha1 = hashlib.sha1()
    async with aiofiles.open(target, "wb") as out_file:
        async for chunk in request.stream():
            sha1.update(chunk)
            await out_file.write(chunk)

    logger.info(f"Mock upload stored {file_name}")
    return {"fileId": "mock-file-id", "fileName": file_name, "contentSha1": sha1.hexdigest()}
