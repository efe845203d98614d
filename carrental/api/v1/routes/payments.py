import json
import logging
from decimal import Decimal, InvalidOperation
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from carrental.db.session import get_db
from carrental.api.deps import get_paystack_client
from carrental.core.config import settings
from carrental.schemas.payments import PaymentInitializeRequest, PaymentInitializeOut, PaymentVerifyOut
from carrental.services.payment_service import get_payment, get_booking_by_order, mark_payment_success, mark_booking_paid
from carrental.services.paystack_client import PaystackClient, PaystackError, from_minor_units, verify_signature
from carrental.services.session_service import update_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])

SIGNATURE_HEADER = "x-paystack-signature"


def _session_id_from_metadata(metadata) -> str | None:
    """sessionId is either a direct metadata key or a Paystack custom field."""
    if not isinstance(metadata, dict):
        return None
    if metadata.get("sessionId"):
        return str(metadata["sessionId"])
    for field in metadata.get("custom_fields") or []:
        if isinstance(field, dict) and field.get("variable_name") == "sessionId" and field.get("value"):
            return str(field["value"])
    return None


@router.post("/public/payments/initialize", response_model=PaymentInitializeOut)
def initialize_payment(body: PaymentInitializeRequest, paystack: PaystackClient = Depends(get_paystack_client)):
    if not body.email or not body.amount:
        raise HTTPException(status_code=400, detail="Email and amount are required")
    try:
        data = paystack.initialize_transaction(
            email=body.email,
            amount=body.amount,
            metadata=body.metadata,
            reference=body.reference,
            callback_url=f"{settings.APP_PUBLIC_URL.rstrip('/')}/booking/success",
        )
    except PaystackError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return PaymentInitializeOut(
        authorization_url=data.get("authorization_url", ""),
        access_code=data.get("access_code", ""),
        reference=data.get("reference", ""),
    )


@router.get("/public/payments/verify", response_model=PaymentVerifyOut)
def verify_payment(reference: str | None = Query(default=None), paystack: PaystackClient = Depends(get_paystack_client)):
    """Read-through to Paystack; nothing is written locally."""
    if not reference:
        raise HTTPException(status_code=400, detail="Reference is required")
    try:
        data = paystack.verify_transaction(reference)
    except PaystackError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return PaymentVerifyOut(
        status=data.get("status"),
        reference=data.get("reference"),
        amount=from_minor_units(data.get("amount")),
        customer=data.get("customer"),
        metadata=data.get("metadata"),
    )


@router.post("/webhooks/paystack")
async def paystack_webhook(req: Request, db: Session = Depends(get_db), paystack: PaystackClient = Depends(get_paystack_client)):
    body = await req.body()
    signature = req.headers.get(SIGNATURE_HEADER)
    if not signature:
        raise HTTPException(status_code=400, detail="No signature provided")
    if not verify_signature(paystack.cfg.secret_key, body, signature):
        raise HTTPException(status_code=401, detail="Invalid signature")
    try:
        event = json.loads(body.decode("utf-8") or "{}")
    except (UnicodeDecodeError, json.JSONDecodeError):
        event = None
    if not isinstance(event, dict):
        raise HTTPException(status_code=400, detail="Invalid payload")

    # Once authenticated, always acknowledge: Paystack retries anything else.
    if event.get("event") != "charge.success":
        return {"received": True}

    data = event.get("data") or {}
    if not isinstance(data, dict):
        logger.warning("Paystack charge.success without a data object: %r", type(data).__name__)
        return {"received": True}
    reference = str(data.get("reference") or "")
    session_id = _session_id_from_metadata(data.get("metadata"))

    p = get_payment(db, reference, lock=True) if reference else None
    if not p:
        # webhook can beat the booking insert; nothing to reconcile yet
        logger.info("Paystack charge.success for unknown reference %r", reference)
        return {"received": True}
    order_id = p.order_id

    if data.get("amount") is not None:
        # advisory only; settlement goes ahead either way
        try:
            if Decimal(str(from_minor_units(data["amount"]))) != Decimal(p.amount):
                logger.warning("Paystack amount %s differs from payment %s amount %s", data["amount"], reference, p.amount)
        except (TypeError, ValueError, InvalidOperation):
            logger.warning("Unreadable Paystack amount %r for payment %s", data["amount"], reference)

    try:
        mark_payment_success(db, p, "paystack", provider="paystack", provider_reference=str(data.get("id") or reference))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error updating payment %s", reference)

    try:
        b = get_booking_by_order(db, order_id, lock=True)
        if b:
            mark_booking_paid(db, b, "paystack")
            db.commit()
        else:
            logger.warning("No booking %s for payment %s", order_id, reference)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error updating booking %s", order_id)

    if session_id:
        try:
            update_session(db, session_id, {"booking_completed": True, "payment_reference": reference, "order_id": order_id})
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Error updating session %s", session_id)

    logger.info("Payment webhook processed: %s", reference)
    return {"received": True}
