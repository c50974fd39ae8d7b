import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.db import as_utc
from app.modules.auth import models as auth_models
from app.modules.bookings import models, schemas
from app.modules.notifications import service as notification_service
from app.modules.payments import models as payment_models
from app.modules.payments import service as payment_service
from app.modules.payments.stripe_client import StripeClient, StripeError

logger = logging.getLogger(__name__)

LIST_LIMIT = 50

async def _load(db: AsyncSession, booking_id: UUID) -> Optional[models.Booking]:
    result = await db.execute(
        select(models.Booking)
        .where(models.Booking.id == booking_id)
        .options(selectinload(models.Booking.creator), selectinload(models.Booking.client))
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()

async def _get_booking(db: AsyncSession, booking_id: UUID) -> models.Booking:
    booking = await _load(db, booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking

def _require_party(booking: models.Booking, user: auth_models.User, action: str) -> bool:
    """Returns True when the caller is the creator, False when the client."""
    if booking.creator_id == user.id:
        return True
    if booking.client_id == user.id:
        return False
    raise HTTPException(status_code=403, detail=f"Unauthorized - only creator or client can {action}")

def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

async def request_booking(
    db: AsyncSession,
    client: auth_models.User,
    booking_in: schemas.BookingCreate,
    stripe: StripeClient
) -> Tuple[models.Booking, Optional[str]]:
    """
    Validates the slot, authorizes the full price on the client's card
    (manual capture) and stores a PENDING booking.
    """
    creator = await db.get(auth_models.User, booking_in.creator_id)
    if not creator:
        raise HTTPException(status_code=404, detail="Creator not found")
    if not creator.is_bookable:
        raise HTTPException(status_code=400, detail="Creator is not available for bookings")
    if creator.id == client.id:
        raise HTTPException(status_code=400, detail="Cannot book yourself")

    start = _to_utc(booking_in.start_time)
    end = _to_utc(booking_in.end_time)
    if end <= start:
        raise HTTPException(status_code=400, detail="End time must be after start time")
    if start < datetime.now(timezone.utc):
        raise HTTPException(status_code=400, detail="Cannot book in the past")

    hours = (end - start).total_seconds() / 3600
    min_hours = creator.min_booking_hours or models.DEFAULT_MIN_BOOKING_HOURS
    if hours < min_hours:
        raise HTTPException(status_code=400, detail=f"Minimum booking duration is {min_hours} hours")
    if hours > models.MAX_BOOKING_HOURS:
        raise HTTPException(status_code=400, detail=f"Maximum booking duration is {models.MAX_BOOKING_HOURS} hours")

    rate = creator.hourly_rate or 0
    if rate <= 0:
        raise HTTPException(status_code=400, detail="Creator has not set an hourly rate")
    total_cents = round(rate * hours * 100)

    conflict = await db.execute(
        select(models.Booking.id)
        .where(
            models.Booking.creator_id == creator.id,
            models.Booking.status.in_(models.BLOCKING_STATUSES),
            models.Booking.start_time < end,
            models.Booking.end_time > start,
        )
        .limit(1)
    )
    if conflict.first():
        raise HTTPException(status_code=400, detail="Creator has a conflicting booking at this time")

    customer_id = await payment_service.ensure_customer(db, client, stripe)
    intent = await stripe.create_payment_intent(
        amount=total_cents,
        customer_id=customer_id,
        description=f"Booking request for {creator.name or 'creator'}",
        metadata={
            "bookingType": "date_booking",
            "creatorId": str(creator.id),
            "clientId": str(client.id),
        },
    )

    booking = models.Booking(
        creator_id=creator.id,
        client_id=client.id,
        start_time=start,
        end_time=end,
        meeting_location=booking_in.meeting_location,
        notes=booking_in.notes,
        hourly_rate=rate,
        duration_hours=hours,
        total_price_cents=total_cents,
        status=models.BookingStatus.PENDING,
        stripe_payment_intent_id=intent.get("id"),
    )
    db.add(booking)
    await db.flush()
    notification_service.add_notification(
        db,
        user_id=creator.id,
        title="New booking request",
        message=f"{client.name or 'A client'} requested a {hours:g} hour booking.",
        resource_type="booking",
        resource_id=str(booking.id),
    )
    await db.commit()
    logger.info(f"Booking {booking.id}: {client.id} -> {creator.id}, {total_cents} cents authorized")
    return await _get_booking(db, booking.id), intent.get("client_secret")

async def approve_booking(db: AsyncSession, user: auth_models.User, booking_id: UUID) -> models.Booking:
    booking = await _get_booking(db, booking_id)
    if booking.creator_id != user.id:
        raise HTTPException(status_code=403, detail="Unauthorized - only creator can approve bookings")
    if booking.status != models.BookingStatus.PENDING:
        raise HTTPException(status_code=400, detail=f"Booking is already {booking.status.value.lower()}")

    booking.status = models.BookingStatus.APPROVED
    notification_service.add_notification(
        db,
        user_id=booking.client_id,
        title="Booking approved",
        message=f"{user.name or 'The creator'} approved your booking.",
        resource_type="booking",
        resource_id=str(booking.id),
    )
    await db.commit()
    return booking

async def reject_booking(
    db: AsyncSession,
    user: auth_models.User,
    booking_id: UUID,
    stripe: StripeClient
) -> models.Booking:
    booking = await _get_booking(db, booking_id)
    if booking.creator_id != user.id:
        raise HTTPException(status_code=403, detail="Unauthorized - only creator can reject bookings")
    if booking.status != models.BookingStatus.PENDING:
        raise HTTPException(status_code=400, detail=f"Booking is already {booking.status.value.lower()}")

    if booking.stripe_payment_intent_id:
        try:
            await stripe.cancel_payment_intent(booking.stripe_payment_intent_id)
        except StripeError as e:
            # The authorization lapses on its own if the cancel fails
            logger.warning(f"Error cancelling payment intent {booking.stripe_payment_intent_id}: {e.message}")

    booking.status = models.BookingStatus.REJECTED
    notification_service.add_notification(
        db,
        user_id=booking.client_id,
        title="Booking declined",
        message=f"{user.name or 'The creator'} declined your booking. The card hold was released.",
        resource_type="booking",
        resource_id=str(booking.id),
    )
    await db.commit()
    return booking

async def complete_booking(
    db: AsyncSession,
    user: auth_models.User,
    booking_id: UUID,
    stripe: StripeClient
) -> models.Booking:
    """
    Captures the authorized payment and records the creator's payout
    (total minus PLATFORM_FEE_PERCENT) as an Earning.
    """
    booking = await _get_booking(db, booking_id)
    _require_party(booking, user, "complete booking")
    if booking.status != models.BookingStatus.APPROVED:
        raise HTTPException(
            status_code=400,
            detail=f"Booking must be APPROVED to complete. Current status: {booking.status.value}",
        )
    now = datetime.now(timezone.utc)
    if now < as_utc(booking.end_time):
        raise HTTPException(status_code=400, detail="Cannot complete booking before end time")

    captured_at = booking.payment_captured_at
    if not captured_at and booking.stripe_payment_intent_id:
        try:
            intent = await stripe.retrieve_payment_intent(booking.stripe_payment_intent_id)
            if intent.get("status") == "requires_capture":
                await stripe.capture_payment_intent(booking.stripe_payment_intent_id)
                captured_at = now
            elif intent.get("status") == "succeeded" and intent.get("created"):
                captured_at = datetime.fromtimestamp(intent["created"], tz=timezone.utc)
        except StripeError as e:
            logger.error(f"Error capturing payment for booking {booking.id}: {e.message}")
            raise StripeError("Failed to capture payment")

    platform_fee_cents = round(booking.total_price_cents * models.PLATFORM_FEE_PERCENT)
    payout_cents = booking.total_price_cents - platform_fee_cents

    booking.status = models.BookingStatus.COMPLETED
    booking.payment_captured_at = captured_at or now
    db.add(payment_models.Earning(
        creator_id=booking.creator_id,
        amount=payout_cents / 100,
        source=payment_models.EarningSource.BOOKING,
        stripe_charge_id=booking.stripe_payment_intent_id,
    ))
    await db.commit()
    logger.info(f"Booking {booking.id} completed, creator payout {payout_cents} cents")
    return booking

async def list_bookings(
    db: AsyncSession,
    user: auth_models.User,
    role: Optional[str] = None,
    status: Optional[models.BookingStatus] = None
) -> List[models.Booking]:
    if role == "creator":
        where = [models.Booking.creator_id == user.id]
    elif role == "client":
        where = [models.Booking.client_id == user.id]
    else:
        where = [or_(models.Booking.creator_id == user.id, models.Booking.client_id == user.id)]
    if status:
        where.append(models.Booking.status == status)

    result = await db.execute(
        select(models.Booking)
        .where(*where)
        .options(selectinload(models.Booking.creator), selectinload(models.Booking.client))
        .order_by(models.Booking.created_at.desc())
        .limit(LIST_LIMIT)
    )
    return list(result.scalars().all())

# Chat (open between approval and the booking's end time)

async def _get_open_chat_booking(db: AsyncSession, user: auth_models.User, booking_id: UUID, action: str) -> Tuple[models.Booking, bool]:
    booking = await _get_booking(db, booking_id)
    is_creator = _require_party(booking, user, action)
    if booking.status != models.BookingStatus.APPROVED:
        raise HTTPException(status_code=400, detail="Chat is only available for approved bookings")
    if datetime.now(timezone.utc) > as_utc(booking.end_time):
        raise HTTPException(status_code=400, detail="Chat has closed after booking end time")
    return booking, is_creator

async def list_chat_messages(db: AsyncSession, user: auth_models.User, booking_id: UUID) -> List[models.BookingChat]:
    await _get_open_chat_booking(db, user, booking_id, "view chat")
    result = await db.execute(
        select(models.BookingChat)
        .where(models.BookingChat.booking_id == booking_id)
        .order_by(models.BookingChat.created_at.asc())
    )
    return list(result.scalars().all())

async def send_chat_message(
    db: AsyncSession,
    user: auth_models.User,
    booking_id: UUID,
    message: str
) -> models.BookingChat:
    booking, is_creator = await _get_open_chat_booking(db, user, booking_id, "send messages")
    chat = models.BookingChat(
        booking_id=booking.id,
        sender_id=user.id,
        recipient_id=booking.client_id if is_creator else booking.creator_id,
        message=message,
    )
    db.add(chat)
    await db.commit()
    await db.refresh(chat)
    return chat

# Reviews

async def submit_review(
    db: AsyncSession,
    user: auth_models.User,
    booking_id: UUID,
    review_in: schemas.ReviewCreate
) -> models.Review:
    booking = await _get_booking(db, booking_id)
    is_creator = _require_party(booking, user, "submit reviews")
    if booking.status != models.BookingStatus.COMPLETED:
        raise HTTPException(status_code=400, detail="Reviews can only be submitted for completed bookings")

    other_party_id = booking.client_id if is_creator else booking.creator_id
    if review_in.reviewed_user_id != other_party_id:
        raise HTTPException(status_code=400, detail="Can only review the other party in the booking")

    existing = await db.execute(
        select(models.Review.id).where(
            models.Review.booking_id == booking.id,
            models.Review.reviewed_by == user.id,
        )
    )
    if existing.first():
        raise HTTPException(status_code=400, detail="Review already submitted for this booking")

    review = models.Review(
        booking_id=booking.id,
        creator_id=booking.creator_id,
        client_id=booking.client_id,
        reviewed_by=user.id,
        reviewed_user_id=review_in.reviewed_user_id,
        rating=review_in.rating,
        comment=review_in.comment or None,
    )
    db.add(review)
    await db.flush()

    if review_in.reviewed_user_id == booking.creator_id:
        average = await db.scalar(
            select(func.avg(models.Review.rating))
            .where(models.Review.reviewed_user_id == booking.creator_id)
        )
        booking.creator.average_rating = float(average) if average is not None else None

    await db.commit()
    await db.refresh(review)
    return review

async def list_reviews(db: AsyncSession, user: auth_models.User, booking_id: UUID) -> List[models.Review]:
    booking = await _get_booking(db, booking_id)
    _require_party(booking, user, "view reviews")
    result = await db.execute(
        select(models.Review)
        .where(models.Review.booking_id == booking.id)
        .order_by(models.Review.created_at.desc())
    )
    return list(result.scalars().all())
