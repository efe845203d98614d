import html
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from carrental.core.config import settings
from carrental.models.notification_log import NotificationLog
from carrental.services.telegram_client import TelegramClient, TelegramError

logger = logging.getLogger(__name__)


def _long_date(d) -> str:
    # e.g. Monday, January 1, 2024
    return f"{d.strftime('%A')}, {d.strftime('%B')} {d.day}, {d.year}"


def _esc(v) -> str:
    return html.escape(str(v if v is not None else ""))


def _days_label(days: int) -> str:
    return f"{days} {'day' if days == 1 else 'days'}"


def format_booking_message(booking: dict, session_id: str | None = None, currency: str | None = None) -> str:
    """Operator message (Telegram HTML) for a confirmed booking, from booking_out()."""
    currency = currency or settings.PAYSTACK_CURRENCY
    user = booking.get("user") or {}
    car = booking.get("car") or {}
    pickup = datetime.fromisoformat(booking["pickup_date"]).date()
    return_ = datetime.fromisoformat(booking["return_date"]).date()
    lines = [
        "🎉 <b>New Booking Confirmed!</b>",
        "",
        f"📋 <b>Order ID:</b> {_esc(booking['order_id'])}",
        f"🚗 <b>Car:</b> {_esc(car.get('name'))} ({_esc(car.get('category'))})",
        f"👤 <b>Customer:</b> {_esc(user.get('name'))}",
        f"📞 <b>Phone:</b> {_esc(user.get('phone'))}",
        f"📧 <b>Email:</b> {_esc(user.get('email') or 'N/A')}",
        "",
        f"📅 <b>Pickup Date:</b> {_long_date(pickup)}",
        f"📅 <b>Return Date:</b> {_long_date(return_)}",
        f"📍 <b>Pickup Location:</b> {_esc(booking['pickup_location'])}",
        f"⏱️ <b>Duration:</b> {_days_label(int(booking['days']))}",
        "",
        f"💰 <b>Total Amount:</b> {_esc(currency)} {float(booking['total_amount']):.2f}",
        f"💳 <b>Payment Status:</b> {_esc(booking['payment_status'])}",
    ]
    if session_id:
        lines += ["", f"🔗 <b>Session ID:</b> {_esc(session_id)}"]
    return "\n".join(lines)


def queue_notification(db: Session, client: TelegramClient | None, message: str, related_order_id: str = "") -> NotificationLog:
    """Store the message and attempt immediate send. Failures are left for the worker to retry."""
    log = NotificationLog(
        id=str(uuid.uuid4()),
        channel="telegram",
        message=message,
        status="queued",
        attempts=0,
        related_order_id=related_order_id,
    )
    db.add(log)
    db.commit()
    if client is None:
        logger.warning("Telegram not configured; notification for %s left queued", related_order_id)
        return log
    _attempt(log, client)
    db.commit()
    return log


def _attempt(log: NotificationLog, client: TelegramClient) -> bool:
    log.attempts = (log.attempts or 0) + 1
    try:
        message_id = client.send_message(log.message)
    except TelegramError as e:
        log.status = "failed"
        log.last_error = e.message
        logger.warning("Notification %s attempt %s failed: %s", log.id, log.attempts, e.message)
        return False
    log.status = "sent"
    log.provider_message_id = str(message_id)
    log.sent_at = datetime.now(timezone.utc)
    log.last_error = ""
    return True


def process_pending_notifications(db: Session, client: TelegramClient, limit: int = 50, max_attempts: int | None = None) -> dict:
    """Retry queued/failed notifications below the attempt cap. Returns counts."""
    max_attempts = max_attempts or settings.NOTIFICATION_MAX_ATTEMPTS
    pending = (
        db.query(NotificationLog)
        .filter(NotificationLog.status.in_(["queued", "failed"]), NotificationLog.attempts < max_attempts)
        .order_by(NotificationLog.created_at.asc())
        .limit(limit)
        .all()
    )
    sent, failed = 0, 0
    for log in pending:
        if _attempt(log, client):
            sent += 1
        else:
            failed += 1
    if pending:
        db.commit()
    return {"processed": len(pending), "sent": sent, "failed": failed}
