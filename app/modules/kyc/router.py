from typing import Any, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core import deps
from app.core.storage import B2Storage, UPLOAD_TOKEN_TTL_SECONDS, build_upload_key, get_storage
from app.modules.auth import models as auth_models
from app.modules.kyc import schemas, service

router = APIRouter()
admin_router = APIRouter()

@router.post("/upload-url", response_model=schemas.UploadUrlResponse)
async def kyc_upload_url(
    upload_in: schemas.UploadUrlRequest,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    storage: B2Storage = Depends(get_storage)
) -> Any:
    """
    Direct-upload target for one KYC document. The client uploads with
    `auth_token` and later submits `file_key`.
    """
    upload_url, auth_token = storage.get_upload_url()
    return {
        "upload_url": upload_url,
        "auth_token": auth_token,
        "file_key": build_upload_key(current_user.id, upload_in.file_type, upload_in.doc_type),
        "expires_in": UPLOAD_TOKEN_TTL_SECONDS,
    }

@router.post("/submit", response_model=schemas.KYCSubmitResponse)
async def submit_kyc(
    submit_in: schemas.KYCSubmit,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    submission = await service.submit_kyc(db, current_user, submit_in)
    return {
        "message": "KYC submitted successfully",
        "kyc_id": submission.id,
        "status": submission.status,
    }

@router.get("/status", response_model=schemas.KYCStatusRead)
async def kyc_status(
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    submission = await service.get_submission_for_user(db, current_user.id)
    return {"kyc_status": current_user.kyc_status, "submission": submission}

@admin_router.get("/pending", response_model=List[schemas.PendingKYC])
async def list_pending(
    current_user: auth_models.User = Depends(deps.get_current_admin),
    storage: B2Storage = Depends(get_storage),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_pending_kyc(db, storage)

@admin_router.post("/approve", response_model=schemas.KYCReviewResponse)
async def approve_submission(
    approve_in: schemas.KYCApprove,
    current_user: auth_models.User = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db)
) -> Any:
    submission = await service.approve_kyc(db, approve_in.submission_id, current_user.id)
    return {"message": "KYC approved", "submission": submission}

@admin_router.post("/reject", response_model=schemas.KYCReviewResponse)
async def reject_submission(
    reject_in: schemas.KYCReject,
    current_user: auth_models.User = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db)
) -> Any:
    submission = await service.reject_kyc(db, reject_in.submission_id, current_user.id, reject_in.rejection_reason)
    return {"message": "KYC rejected", "submission": submission}
