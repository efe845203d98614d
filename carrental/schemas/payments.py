from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Any, Optional


class PaymentInitializeRequest(BaseModel):
    email: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)  # major units
    metadata: Optional[dict[str, Any]] = None
    reference: Optional[str] = None  # our PAY- reference, so the webhook can find the payment row


class PaymentInitializeOut(BaseModel):
    authorization_url: str
    access_code: str
    reference: str


class PaymentVerifyOut(BaseModel):
    status: Optional[str] = None
    reference: Optional[str] = None
    amount: float = 0
    customer: Optional[dict[str, Any]] = None
    metadata: Optional[Any] = None
