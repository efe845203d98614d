import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from carrental.db.session import get_db
from carrental.api.deps import get_optional_paystack_client, get_optional_telegram_client
from carrental.schemas.booking import BookingCreate, BookingCreated, BookingConfirmRequest
from carrental.services.booking_service import (
    create_booking, get_booking, booking_out,
    CarNotFound, UserResolutionError, BookingWriteError,
)
from carrental.services.notification_service import format_booking_message, queue_notification
from carrental.services.payment_service import settle_booking
from carrental.services.paystack_client import PaystackClient, PaystackError
from carrental.services.session_service import mark_booked
from carrental.services.telegram_client import TelegramClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings"])


@router.post("/public/bookings", response_model=BookingCreated)
def create_public_booking(body: BookingCreate, db: Session = Depends(get_db)):
    if body.missing_fields():
        raise HTTPException(status_code=400, detail="Missing required fields")
    try:
        b = create_booking(db, body)
    except CarNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (UserResolutionError, BookingWriteError) as e:
        raise HTTPException(status_code=500, detail=str(e))
    return BookingCreated(booking_id=b.id, order_id=b.order_id, payment_reference=b.payment_reference)


@router.get("/public/bookings/{booking_id}")
def get_public_booking(booking_id: str, db: Session = Depends(get_db)):
    b = get_booking(db, booking_id)
    if not b:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking_out(db, b)


@router.post("/public/bookings/{booking_id}/confirm")
def confirm_booking(
    booking_id: str,
    body: BookingConfirmRequest,
    db: Session = Depends(get_db),
    paystack: PaystackClient | None = Depends(get_optional_paystack_client),
    telegram: TelegramClient | None = Depends(get_optional_telegram_client),
):
    """Success page: settle a verified gateway payment, mark the chat session BOOKED, tell the operator."""
    b = get_booking(db, booking_id)
    if not b:
        raise HTTPException(status_code=404, detail="Booking not found")

    if body.reference and b.payment_status != "paid":
        if paystack is None:
            logger.warning("Cannot verify %s for %s: Paystack is not configured", body.reference, b.order_id)
        else:
            try:
                tx = paystack.verify_transaction(body.reference)
            except PaystackError as e:
                logger.warning("Verify %s for %s failed: %s", body.reference, b.order_id, e.message)
                tx = {}
            if tx.get("status") == "success":
                settle_booking(db, b, actor="public", provider="paystack", provider_reference=str(tx.get("reference") or body.reference))

    if body.sessionId:
        try:
            mark_booked(db, body.sessionId, {"order_id": b.order_id, "booking_id": b.id})
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Session %s update failed for %s", body.sessionId, b.order_id)

    out = booking_out(db, b)
    notification_sent = False
    try:
        log = queue_notification(db, telegram, format_booking_message(out, session_id=body.sessionId), related_order_id=b.order_id)
        notification_sent = log.status == "sent"
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not queue operator notification for %s", b.order_id)
    return {**out, "notification_sent": notification_sent}
