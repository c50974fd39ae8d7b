from typing import Any, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core import deps
from app.modules.auth import models as auth_models
from app.modules.bookings import models, schemas, service
from app.modules.payments.stripe_client import StripeClient, get_stripe_client

router = APIRouter()

@router.post("/request", response_model=schemas.BookingCreateResponse)
async def request_booking(
    booking_in: schemas.BookingCreate,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    stripe: StripeClient = Depends(get_stripe_client),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Request a paid booking. `client_secret` lets the front end confirm the
    card authorization.
    """
    booking, client_secret = await service.request_booking(db, current_user, booking_in, stripe)
    return {"booking": booking, "client_secret": client_secret}

@router.post("/approve", response_model=schemas.BookingResponse)
async def approve_booking(
    action_in: schemas.BookingAction,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return {"booking": await service.approve_booking(db, current_user, action_in.booking_id)}

@router.post("/reject", response_model=schemas.BookingResponse)
async def reject_booking(
    action_in: schemas.BookingAction,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    stripe: StripeClient = Depends(get_stripe_client),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return {"booking": await service.reject_booking(db, current_user, action_in.booking_id, stripe)}

@router.post("/complete", response_model=schemas.BookingResponse)
async def complete_booking(
    action_in: schemas.BookingAction,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    stripe: StripeClient = Depends(get_stripe_client),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return {"booking": await service.complete_booking(db, current_user, action_in.booking_id, stripe)}

@router.get("/list", response_model=schemas.BookingList)
async def list_bookings(
    role: Optional[Literal["creator", "client"]] = Query(None),
    status: Optional[str] = Query(None),
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """The caller's bookings, newest first, as creator, client or both."""
    status_filter = None
    if status:
        try:
            status_filter = models.BookingStatus(status.upper())
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid status: {status}")
    return {"bookings": await service.list_bookings(db, current_user, role, status_filter)}

@router.get("/{booking_id}/chat", response_model=schemas.ChatMessages)
async def list_chat(
    booking_id: UUID,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return {"messages": await service.list_chat_messages(db, current_user, booking_id)}

@router.post("/{booking_id}/chat", response_model=schemas.ChatMessageResponse)
async def send_chat(
    booking_id: UUID,
    chat_in: schemas.ChatSend,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return {"message": await service.send_chat_message(db, current_user, booking_id, chat_in.message)}

@router.get("/{booking_id}/review", response_model=schemas.ReviewList)
async def list_reviews(
    booking_id: UUID,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return {"reviews": await service.list_reviews(db, current_user, booking_id)}

@router.post("/{booking_id}/review", response_model=schemas.ReviewResponse)
async def submit_review(
    booking_id: UUID,
    review_in: schemas.ReviewCreate,
    current_user: auth_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return {"review": await service.submit_review(db, current_user, booking_id, review_in)}
