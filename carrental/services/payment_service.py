"""Settlement ("mark paid") shared by the webhook, the confirmation page and operators.

Payment and booking status only ever advance to success/paid. Settling an
already settled record is a no-op, so the webhook and the success page can
both fire for the same booking without clobbering each other.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from carrental.models.booking import Booking
from carrental.models.payment import Payment
from carrental.services.audit_service import log_audit

logger = logging.getLogger(__name__)


def get_payment(db: Session, payment_reference: str, lock: bool = False) -> Payment | None:
    q = db.query(Payment).filter(Payment.payment_reference == payment_reference)
    if lock:
        # row lock, and reload so the status check sees the committed value
        q = q.with_for_update().populate_existing()
    return q.first()


def get_booking_by_order(db: Session, order_id: str, lock: bool = False) -> Booking | None:
    q = db.query(Booking).filter(Booking.order_id == order_id)
    if lock:
        q = q.with_for_update().populate_existing()
    return q.first()


def mark_payment_success(db: Session, p: Payment, actor: str, provider: str | None = None, provider_reference: str = "") -> bool:
    if p.status == "success":
        return False
    if p.status == "failed":
        # money arrived after the hold expired; settle anyway, ops will see the audit trail
        logger.warning("Payment %s was failed, settling late %s confirmation", p.payment_reference, actor)
    previous = p.status
    p.status = "success"
    p.paid_at = datetime.now(timezone.utc)
    if provider:
        p.provider = provider
    if provider_reference:
        p.provider_reference = provider_reference
    log_audit(db, actor, "payment.mark_success", "payment", p.payment_reference, {"from": previous, "providerReference": provider_reference})
    return True


def mark_booking_paid(db: Session, b: Booking, actor: str) -> bool:
    if b.payment_status == "paid" and b.status == "paid":
        return False
    previous = b.status
    b.status = "paid"
    b.payment_status = "paid"
    log_audit(db, actor, "booking.mark_paid", "booking", b.order_id, {"from": previous})
    return True


def settle_booking(db: Session, b: Booking, actor: str, provider: str, provider_reference: str = "") -> bool:
    """Mark the booking and its payment paid in one commit. Returns False if already paid.

    Booking then payment are locked and re-read first, so a concurrent
    webhook or operator settlement turns this call into a no-op.
    """
    changed = False
    db.refresh(b, with_for_update=True)
    p = get_payment(db, b.payment_reference, lock=True)
    if p:
        changed = mark_payment_success(db, p, actor, provider=provider, provider_reference=provider_reference) or changed
    else:
        logger.warning("Booking %s has no payment row %s", b.order_id, b.payment_reference)
    changed = mark_booking_paid(db, b, actor) or changed
    db.commit()
    return changed
