import logging
import random
import string
import time
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from carrental.core.config import settings
from carrental.models.booking import Booking
from carrental.models.car import Car
from carrental.models.payment import Payment
from carrental.models.user import User
from carrental.schemas.booking import BookingCreate
from carrental.services.audit_service import log_audit
from carrental.services.catalog_service import get_active_car
from carrental.services.pricing_service import quote, matches_quote
from carrental.services.session_service import mark_booked
from carrental.services.user_service import resolve_user

logger = logging.getLogger(__name__)

BASE36 = string.ascii_uppercase + string.digits
REF_ATTEMPTS = 10


class CarNotFound(LookupError):
    pass


class UserResolutionError(RuntimeError):
    pass


class BookingWriteError(RuntimeError):
    pass


def make_order_id(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"ORD-{now.strftime('%Y%m%d')}-" + "".join(random.choices(BASE36, k=6))


def make_payment_reference() -> str:
    return f"PAY-{int(time.time() * 1000)}-" + "".join(random.choices(BASE36, k=9))


def _unique(db: Session, make, column) -> str:
    for _ in range(REF_ATTEMPTS):
        ref = make()
        if not db.query(column).filter(column == ref).first():
            return ref
    raise BookingWriteError("could not allocate a unique reference")


def create_booking(db: Session, body: BookingCreate, mode: str | None = None) -> Booking:
    """Create booking + payment for a wizard submission.

    Only the booking insert is fatal. The payment row and the chat session
    update are best effort: the booking stands if either fails.
    """
    mode = mode or settings.SETTLEMENT_MODE
    car = get_active_car(db, body.car_id)
    if not car:
        raise CarNotFound("Car not found")

    q = quote(body.pickup_date, body.return_date, car.daily_rate)
    if not matches_quote(q, days=body.days, daily_rate=body.daily_rate, total_amount=body.total_amount):
        logger.warning(
            "Rejecting booking for %s: client quoted days=%s rate=%s total=%s, server %s/%s/%s",
            car.car_id, body.days, body.daily_rate, body.total_amount, q.days, q.daily_rate, q.total_amount,
        )
        raise ValueError("Quoted price does not match current rate")

    try:
        user = resolve_user(db, phone=body.phone_number, name=body.full_name, email=body.email, session_id=body.sessionId)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("User resolution failed for phone %s", body.phone_number)
        raise UserResolutionError(f"Failed to create user: {e.__class__.__name__}")

    assisted = mode == "assisted"
    try:
        order_id = _unique(db, make_order_id, Booking.order_id)
        payment_reference = _unique(db, make_payment_reference, Payment.payment_reference)
        booking = Booking(
            id=str(uuid.uuid4()),
            order_id=order_id,
            user_id=user.id,
            car_id=car.id,
            pickup_date=body.pickup_date,
            return_date=body.return_date,
            pickup_location=body.pickup_location,
            days=q.days,
            daily_rate=q.daily_rate,
            total_amount=q.total_amount,
            deposit_amount=q.total_amount,
            balance_amount=Decimal("0"),
            status="paid" if assisted else "pending",
            payment_status="paid" if assisted else "unpaid",
            payment_reference=payment_reference,
            settlement_mode=mode,
        )
        db.add(booking)
        log_audit(db, "public", "booking.created", "booking", order_id, {"car": car.car_id, "total": q.total_amount, "mode": mode})
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Booking insert failed for car %s", car.car_id)
        raise BookingWriteError("Failed to create booking")

    try:
        db.add(Payment(
            id=str(uuid.uuid4()),
            payment_reference=payment_reference,
            order_id=order_id,
            amount=q.total_amount,
            currency=settings.PAYSTACK_CURRENCY,
            status="success" if assisted else "pending",
            provider="manual" if assisted else "paystack",
            provider_reference=payment_reference if assisted else "",
            paid_at=datetime.now(timezone.utc) if assisted else None,
            meta={"sessionId": body.sessionId, "settlement_mode": mode},
        ))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Payment insert failed for %s; booking kept", order_id)

    if body.sessionId:
        try:
            mark_booked(db, body.sessionId, {
                "payment_reference": payment_reference,
                "order_id": order_id,
                "booking_id": booking.id,
            })
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Session %s update failed for %s", body.sessionId, order_id)

    db.refresh(booking)
    return booking


def get_booking(db: Session, booking_id: str) -> Booking | None:
    return db.get(Booking, booking_id)


def booking_out(db: Session, b: Booking) -> dict:
    user = db.get(User, b.user_id)
    car = db.get(Car, b.car_id)
    return {
        "id": b.id,
        "order_id": b.order_id,
        "pickup_date": b.pickup_date.isoformat(),
        "return_date": b.return_date.isoformat(),
        "pickup_location": b.pickup_location,
        "days": b.days,
        "daily_rate": b.daily_rate,
        "total_amount": b.total_amount,
        "deposit_amount": b.deposit_amount,
        "balance_amount": b.balance_amount,
        "status": b.status,
        "payment_status": b.payment_status,
        "payment_reference": b.payment_reference,
        "settlement_mode": b.settlement_mode,
        "created_at": b.created_at.isoformat() if b.created_at else None,
        "user": {"name": user.name, "phone": user.phone, "email": user.email} if user else None,
        "car": {"name": car.name, "car_id": car.car_id, "category": car.category, "daily_rate": car.daily_rate} if car else None,
    }
