from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Numeric, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from carrental.db.session import Base

class Car(Base):
    __tablename__ = "cars"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    car_id: Mapped[str] = mapped_column(String(40), unique=True, index=True)  # catalog id, e.g. CAR-001
    name: Mapped[str] = mapped_column(String(120))
    category: Mapped[str] = mapped_column(String(40), default="")
    daily_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    seats: Mapped[int] = mapped_column(Integer, default=0)
    transmission: Mapped[str] = mapped_column(String(20), default="")  # Automatic|Manual
    fuel_type: Mapped[str] = mapped_column(String(20), default="")
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)  # absolute URL or bucket/path
    features: Mapped[list] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)  # active, inactive
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
