import logging
from datetime import datetime, timezone, timedelta
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError, ProgrammingError
from carrental.db.session import SessionLocal
from carrental.core.config import settings
from carrental.models.booking import Booking
from carrental.models.payment import Payment
from carrental.services.audit_service import log_audit
from carrental.services.notification_service import process_pending_notifications
from carrental.api.deps import get_optional_telegram_client

logger = logging.getLogger(__name__)

# OperationalError: SQLite reports a missing table this way
MISSING_TABLES = (ProgrammingError, OperationalError)


def expire_pending_bookings(ttl_minutes: int | None = None):
    """Gateway bookings nobody paid for within the TTL become expired; their payments failed."""
    ttl = settings.PENDING_BOOKING_TTL_MINUTES if ttl_minutes is None else ttl_minutes
    db: Session = SessionLocal()
    try:
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=ttl)
        try:
            expired = db.query(Booking).filter(
                Booking.status == "pending",
                Booking.payment_status == "unpaid",
                Booking.created_at < cutoff,
            ).all()
        except MISSING_TABLES:
            # DB not migrated yet; don't crash the worker.
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}
        for b in expired:
            b.status = "expired"
            p = db.query(Payment).filter(Payment.payment_reference == b.payment_reference).first()
            if p and p.status == "pending":
                p.status = "failed"
            log_audit(db, "worker", "booking.expired", "booking", b.order_id, {"ttlMinutes": ttl})
        db.commit()
        if expired:
            logger.info("Expired %d unpaid bookings", len(expired))
        return {"expired": len(expired)}
    finally:
        db.close()


def process_notification_queue(limit: int = 50) -> dict:
    """Retry queued/failed operator notifications. Run periodically via Celery beat."""
    client = get_optional_telegram_client()
    if client is None:
        return {"skipped": True, "reason": "telegram_not_configured"}
    db: Session = SessionLocal()
    try:
        try:
            return process_pending_notifications(db, client, limit=limit)
        except MISSING_TABLES:
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}
    finally:
        db.close()
