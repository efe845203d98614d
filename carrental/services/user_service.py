import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from carrental.models.user import User

logger = logging.getLogger(__name__)


def _patch(u: User, name: str | None = None, email: str | None = None, phone: str | None = None) -> None:
    if name:
        u.name = name
    if email:
        u.email = email
    if phone:
        u.phone = phone


def resolve_user(db: Session, phone: str, name: str, email: str | None = None, session_id: str | None = None) -> User:
    """Find-or-create the customer for a booking.

    Lookup order: whatsapp_id (session id, or the phone when there is no
    session), then phone. A phone match is adopted and its whatsapp_id is
    overwritten with the lookup key. A new row is inserted inside a savepoint
    so a concurrent insert of the same whatsapp_id turns into a re-read.
    """
    whatsapp_id = session_id or phone

    u = db.query(User).filter(User.whatsapp_id == whatsapp_id).first()
    if u:
        _patch(u, name=name, email=email, phone=phone)
        db.flush()
        return u

    u = db.query(User).filter(User.phone == phone).order_by(User.created_at.asc()).first()
    if u:
        logger.info("Adopting user %s by phone; whatsapp_id %s -> %s", u.id, u.whatsapp_id, whatsapp_id)
        _patch(u, name=name, email=email)
        u.whatsapp_id = whatsapp_id
        db.flush()
        return u

    u = User(id=str(uuid.uuid4()), whatsapp_id=whatsapp_id, phone=phone, name=name or "", email=email or None)
    try:
        with db.begin_nested():
            db.add(u)
    except IntegrityError:
        logger.info("User with whatsapp_id %s created concurrently; re-reading", whatsapp_id)
        existing = db.query(User).filter(User.whatsapp_id == whatsapp_id).first()
        if not existing:
            raise
        return existing
    return u
