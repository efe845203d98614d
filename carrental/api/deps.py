from functools import lru_cache

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from carrental.core.config import settings
from carrental.core.security import decode_token
from carrental.db.session import get_db
from carrental.models.operator import Operator
from carrental.services.paystack_client import PaystackClient, PaystackConfig
from carrental.services.telegram_client import TelegramClient, TelegramConfig

bearer = HTTPBearer(auto_error=False)


@lru_cache(maxsize=4)
def _paystack(secret_key: str, base_url: str, currency: str, timeout: int) -> PaystackClient:
    return PaystackClient(PaystackConfig(secret_key=secret_key, base_url=base_url, currency=currency, timeout=timeout))


@lru_cache(maxsize=4)
def _telegram(bot_token: str, chat_id: str, api_url: str, timeout: int) -> TelegramClient:
    return TelegramClient(TelegramConfig(bot_token=bot_token, chat_id=chat_id, api_url=api_url, timeout=timeout))


def get_paystack_client() -> PaystackClient:
    if not settings.PAYSTACK_SECRET_KEY:
        raise HTTPException(status_code=500, detail="Paystack is not configured")
    return _paystack(settings.PAYSTACK_SECRET_KEY, settings.PAYSTACK_BASE_URL, settings.PAYSTACK_CURRENCY, settings.HTTP_TIMEOUT_SECONDS)


def get_optional_paystack_client() -> PaystackClient | None:
    if not settings.PAYSTACK_SECRET_KEY:
        return None
    return get_paystack_client()


def get_optional_telegram_client() -> TelegramClient | None:
    if not (settings.TELEGRAM_BOT_TOKEN and settings.TELEGRAM_CHAT_ID):
        return None
    return _telegram(settings.TELEGRAM_BOT_TOKEN, settings.TELEGRAM_CHAT_ID, settings.TELEGRAM_API_URL, settings.HTTP_TIMEOUT_SECONDS)


def get_telegram_client(client: TelegramClient | None = Depends(get_optional_telegram_client)) -> TelegramClient:
    if client is None:
        raise HTTPException(status_code=500, detail="Telegram not configured")
    return client


def get_current_operator(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> Operator:
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    sub = payload.get("sub")
    op = db.get(Operator, sub) if sub else None
    if not op or not op.is_active:
        raise HTTPException(status_code=401, detail="Operator not found or inactive")
    return op

def require_roles(*roles: str):
    def _guard(op: Operator = Depends(get_current_operator)) -> Operator:
        if op.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return op
    return _guard
