import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from carrental.models.chat_session import ChatSession, SESSION_STATES

logger = logging.getLogger(__name__)


def _rank(state: str | None) -> int:
    return SESSION_STATES.index(state) + 1 if state in SESSION_STATES else 0


def get_session(db: Session, session_id: str) -> ChatSession | None:
    return db.query(ChatSession).filter(ChatSession.whatsapp_id == session_id).first()


def update_session(db: Session, session_id: str, data: dict, state: str | None = None) -> bool:
    """Merge `data` into the session and optionally advance its state.

    States only move forward (unset -> IN_PROGRESS -> BOOKED); an older
    state is ignored. Returns False when the chat bot never created the
    session row.
    """
    if state is not None and state not in SESSION_STATES:
        raise ValueError(f"unknown session state: {state}")
    s = get_session(db, session_id)
    if not s:
        logger.info("Session %s not found; nothing to update", session_id)
        return False
    if state is not None:
        if _rank(state) >= _rank(s.session_state):
            s.session_state = state
        else:
            logger.warning("Refusing to move session %s from %s back to %s", session_id, s.session_state, state)
    # reassign so the JSON column is marked dirty
    s.session_data = {**(s.session_data or {}), **data}
    s.last_message_at = datetime.now(timezone.utc)
    db.flush()
    return True


def mark_booked(db: Session, session_id: str, data: dict) -> bool:
    return update_session(db, session_id, {"booking_completed": True, **data}, state="BOOKED")
