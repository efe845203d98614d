from decimal import Decimal
from sqlalchemy import String, Integer, Date, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from datetime import date, datetime, timezone
from carrental.db.session import Base

class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    order_id: Mapped[str] = mapped_column(String(32), unique=True, index=True)

    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), index=True)
    car_id: Mapped[str] = mapped_column(String(36), ForeignKey("cars.id"), index=True)

    pickup_date: Mapped[date] = mapped_column(Date)
    return_date: Mapped[date] = mapped_column(Date)
    pickup_location: Mapped[str] = mapped_column(String(200))

    days: Mapped[int] = mapped_column(Integer)
    daily_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    deposit_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    balance_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))

    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)  # pending, paid, expired, cancelled
    payment_status: Mapped[str] = mapped_column(String(20), default="unpaid")  # unpaid, paid
    payment_reference: Mapped[str] = mapped_column(String(40), index=True)
    settlement_mode: Mapped[str] = mapped_column(String(20), default="assisted")  # assisted, gateway

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
