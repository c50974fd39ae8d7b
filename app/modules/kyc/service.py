import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.storage import B2Storage
from app.modules.auth import models as auth_models
from app.modules.kyc import models, schemas
from app.modules.notifications import service as notification_service

logger = logging.getLogger(__name__)

async def get_submission_for_user(db: AsyncSession, user_id: UUID) -> Optional[models.KYCSubmission]:
    result = await db.execute(select(models.KYCSubmission).where(models.KYCSubmission.user_id == user_id))
    return result.scalars().first()

async def submit_kyc(
    db: AsyncSession,
    user: auth_models.User,
    submit_in: schemas.KYCSubmit
) -> models.KYCSubmission:
    existing = await get_submission_for_user(db, user.id)
    if existing and existing.status == models.SubmissionStatus.PENDING:
        raise HTTPException(status_code=400, detail="KYC submission already pending review")
    if existing and existing.status == models.SubmissionStatus.VERIFIED:
        raise HTTPException(status_code=400, detail="KYC already verified")

    prefix = f"kyc/{user.id}/"
    for key in (submit_in.government_id_key, submit_in.liveliness_key, submit_in.government_id_back_key):
        if key is not None and not key.startswith(prefix):
            raise HTTPException(status_code=400, detail="Document keys must be uploads of the current user")

    fields = dict(
        first_name=submit_in.first_name.strip(),
        last_name=submit_in.last_name.strip(),
        date_of_birth=submit_in.date_of_birth,
        government_id_type=submit_in.id_type,
        government_id_number=submit_in.government_id_number.strip(),
        government_id_image_url=submit_in.government_id_key,
        government_id_back_url=submit_in.government_id_back_key,
        liveliness_image_url=submit_in.liveliness_key,
        status=models.SubmissionStatus.PENDING,
    )

    if existing:
        # Resubmission after a rejection
        for key, value in fields.items():
            setattr(existing, key, value)
        existing.rejection_reason = None
        existing.reviewed_by = None
        submission = existing
    else:
        submission = models.KYCSubmission(user_id=user.id, **fields)
        db.add(submission)

    user.kyc_status = auth_models.KYCStatus.PENDING
    user.kyc_rejection_reason = None
    await db.flush()

    notification_service.add_notification(
        db,
        user_id=user.id,
        title="KYC submitted",
        message="Your identity documents were received and are awaiting review.",
        resource_type="kyc_submission",
        resource_id=str(submission.id),
    )

    await db.commit()
    await db.refresh(submission)
    logger.info(f"KYC submission {submission.id} from user {user.id}")
    return submission

async def list_pending_kyc(db: AsyncSession, storage: B2Storage) -> List[dict]:
    stmt = (
        select(models.KYCSubmission, auth_models.User.email, auth_models.User.name)
        .join(auth_models.User, models.KYCSubmission.user_id == auth_models.User.id)
        .where(models.KYCSubmission.status == models.SubmissionStatus.PENDING)
        .order_by(models.KYCSubmission.created_at.asc())
    )
    result = await db.execute(stmt)

    response = []
    for kyc, email, name in result.all():
        item = schemas.KYCRead.model_validate(kyc).model_dump()
        item.update(
            user_email=email,
            user_name=name,
            government_id_number=kyc.government_id_number,
            government_id_url=storage.get_download_url(kyc.government_id_image_url),
            government_id_back_url=(
                storage.get_download_url(kyc.government_id_back_url) if kyc.government_id_back_url else None
            ),
            liveliness_url=storage.get_download_url(kyc.liveliness_image_url),
        )
        response.append(item)
    return response

async def _get_pending(db: AsyncSession, submission_id: UUID) -> models.KYCSubmission:
    submission = await db.get(models.KYCSubmission, submission_id)
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    if submission.status != models.SubmissionStatus.PENDING:
        raise HTTPException(status_code=400, detail=f"Submission is already {submission.status.value.lower()}")
    return submission

async def approve_kyc(db: AsyncSession, submission_id: UUID, admin_id: UUID) -> models.KYCSubmission:
    submission = await _get_pending(db, submission_id)
    now = datetime.now(timezone.utc)

    submission.status = models.SubmissionStatus.VERIFIED
    submission.verified_at = now
    submission.rejection_reason = None
    submission.reviewed_by = admin_id

    user = await db.get(auth_models.User, submission.user_id)
    if user:
        user.kyc_status = auth_models.KYCStatus.VERIFIED
        user.kyc_verified_at = now
        user.kyc_rejection_reason = None

    notification_service.add_notification(
        db,
        user_id=submission.user_id,
        title="KYC Approved",
        message="Your identity has been verified. Your creator profile is now visible.",
        resource_type="kyc_submission",
        resource_id=str(submission.id),
    )

    await db.commit()
    await db.refresh(submission)
    logger.info(f"KYC submission {submission.id} approved by {admin_id}")
    return submission

async def reject_kyc(db: AsyncSession, submission_id: UUID, admin_id: UUID, reason: str) -> models.KYCSubmission:
    submission = await _get_pending(db, submission_id)

    submission.status = models.SubmissionStatus.REJECTED
    submission.rejection_reason = reason
    submission.reviewed_by = admin_id

    user = await db.get(auth_models.User, submission.user_id)
    if user:
        user.kyc_status = auth_models.KYCStatus.REJECTED
        user.kyc_rejection_reason = reason

    notification_service.add_notification(
        db,
        user_id=submission.user_id,
        title="KYC Rejected",
        message=f"Your KYC submission was rejected: {reason}",
        resource_type="kyc_submission",
        resource_id=str(submission.id),
    )

    await db.commit()
    await db.refresh(submission)
    logger.info(f"KYC submission {submission.id} rejected by {admin_id}")
    return submission
