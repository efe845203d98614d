from fastapi import APIRouter, Depends, HTTPException
from carrental.api.deps import get_telegram_client
from carrental.schemas.notifications import NotificationRequest, NotificationOut
from carrental.services.telegram_client import TelegramClient, TelegramError

router = APIRouter(tags=["notifications"])


@router.post("/notifications/telegram", response_model=NotificationOut)
def send_telegram(body: NotificationRequest, telegram: TelegramClient = Depends(get_telegram_client)):
    """Relay a preformatted (HTML) message to the operator chat. No retry here."""
    if not body.message or not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")
    try:
        message_id = telegram.send_message(body.message)
    except TelegramError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return NotificationOut(message_id=message_id)
