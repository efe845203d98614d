from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from carrental.db.session import Base

SESSION_STATES = ("IN_PROGRESS", "BOOKED")  # forward order; unset sorts before both

class ChatSession(Base):
    """WhatsApp conversation a booking flow started from. Rows are written by the chat bot."""
    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    whatsapp_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    session_state: Mapped[str | None] = mapped_column(String(30), nullable=True)
    session_data: Mapped[dict] = mapped_column(JSON, default=dict)
    last_message_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
