from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from carrental.db.session import get_db
from carrental.api.deps import require_roles
from carrental.models.booking import Booking
from carrental.models.operator import Operator
from carrental.services.booking_service import booking_out
from carrental.services.payment_service import get_booking_by_order, settle_booking

router = APIRouter(tags=["ops"])


@router.get("/ops/bookings")
def list_bookings(
    status: Optional[str] = None,
    limit: int = 50,
    db: Session = Depends(get_db),
    op: Operator = Depends(require_roles("ops", "admin")),
):
    q = db.query(Booking)
    if status:
        q = q.filter(Booking.status == status)
    items = q.order_by(Booking.created_at.desc()).limit(max(1, min(200, limit))).all()
    return {"items": [booking_out(db, b) for b in items]}


@router.post("/ops/bookings/{order_id}/mark-paid")
def mark_paid(order_id: str, db: Session = Depends(get_db), op: Operator = Depends(require_roles("ops", "admin"))):
    """Assisted settlement: operator confirms payment collected outside the gateway."""
    b = get_booking_by_order(db, order_id)
    if not b:
        raise HTTPException(status_code=404, detail="Booking not found")
    if b.payment_status == "paid":
        return {"ok": True, "status": "already_paid"}
    settle_booking(db, b, actor=op.email, provider="manual", provider_reference=f"manual:{op.email}")
    return {"ok": True, "orderId": b.order_id, "status": b.status, "paymentStatus": b.payment_status}
