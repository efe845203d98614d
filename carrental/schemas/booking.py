from datetime import date
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional

from carrental.schemas.common import SessionToken

REQUIRED_BOOKING_FIELDS = ("car_id", "pickup_date", "return_date", "full_name", "phone_number", "pickup_location")


class BookingCreate(BaseModel):
    # Required fields are optional here so a missing one is answered with
    # "Missing required fields" instead of a per-field validation error.
    car_id: Optional[str] = Field(default=None, max_length=40)
    pickup_date: Optional[date] = None
    return_date: Optional[date] = None
    # limits match the users/bookings columns
    full_name: Optional[str] = Field(default=None, max_length=200)
    phone_number: Optional[str] = Field(default=None, max_length=40)
    email: Optional[str] = Field(default=None, max_length=320)
    pickup_location: Optional[str] = Field(default=None, max_length=200)
    # wizard-computed figures; checked against the server quote when present
    days: Optional[int] = None
    daily_rate: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    sessionId: SessionToken = None

    def missing_fields(self) -> list[str]:
        out = []
        for name in REQUIRED_BOOKING_FIELDS:
            v = getattr(self, name)
            if v is None or (isinstance(v, str) and not v.strip()):
                out.append(name)
        return out


class BookingCreated(BaseModel):
    success: bool = True
    booking_id: str
    order_id: str
    payment_reference: str


class QuoteRequest(BaseModel):
    car_id: str
    pickup_date: date
    return_date: date


class QuoteOut(BaseModel):
    car_id: str
    days: int
    daily_rate: Decimal
    total_amount: Decimal


class BookingConfirmRequest(BaseModel):
    sessionId: SessionToken = None
    reference: Optional[str] = None  # Paystack reference from the callback URL
