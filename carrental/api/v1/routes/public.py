from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from carrental.db.session import get_db
from carrental.schemas.booking import QuoteRequest, QuoteOut
from carrental.services.catalog_service import list_active_cars, get_active_car, car_out
from carrental.services.pricing_service import quote

router = APIRouter(tags=["public"])


@router.get("/public/cars")
def list_cars(
    category: Optional[str] = None,
    transmission: Optional[str] = None,
    max_price: Optional[Decimal] = None,
    db: Session = Depends(get_db),
):
    """Active cars, cheapest first. Empty filter values are ignored."""
    return {"items": [car_out(c) for c in list_active_cars(db, category, transmission, max_price)]}


@router.get("/public/cars/{car_id}")
def get_car(car_id: str, db: Session = Depends(get_db)):
    c = get_active_car(db, car_id)
    if not c:
        raise HTTPException(status_code=404, detail="Car not found")
    return car_out(c)


@router.post("/public/bookings/quote", response_model=QuoteOut)
def quote_booking(body: QuoteRequest, db: Session = Depends(get_db)):
    c = get_active_car(db, body.car_id)
    if not c:
        raise HTTPException(status_code=404, detail="Car not found")
    try:
        q = quote(body.pickup_date, body.return_date, c.daily_rate)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return QuoteOut(car_id=c.car_id, days=q.days, daily_rate=q.daily_rate, total_amount=q.total_amount)
