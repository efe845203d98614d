import logging
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)


@dataclass
class TelegramConfig:
    bot_token: str
    chat_id: str
    api_url: str = "https://api.telegram.org"
    timeout: int = 20


class TelegramError(RuntimeError):
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TelegramClient:
    """Sends to the single operator chat configured in TELEGRAM_CHAT_ID."""

    def __init__(self, cfg: TelegramConfig):
        self.cfg = cfg

    def send_message(self, text: str, parse_mode: str = "HTML") -> int:
        url = f"{self.cfg.api_url.rstrip('/')}/bot{self.cfg.bot_token}/sendMessage"
        payload = {"chat_id": self.cfg.chat_id, "text": text, "parse_mode": parse_mode}
        try:
            r = requests.post(url, json=payload, timeout=self.cfg.timeout)
        except requests.RequestException as e:
            # the token is part of the URL; never log it
            logger.error("Telegram sendMessage failed: %s", type(e).__name__)
            raise TelegramError(f"Telegram unreachable: {type(e).__name__}", status_code=502)
        try:
            data = r.json() if r.text else {}
        except ValueError:
            data = {"description": r.text}
        if not r.ok or not data.get("ok", True):
            desc = data.get("description") if isinstance(data, dict) else None
            logger.warning("Telegram API error %s: %s", r.status_code, desc)
            raise TelegramError(desc or "Failed to send message to Telegram", status_code=r.status_code if not r.ok else 502)
        return int((data.get("result") or {}).get("message_id") or 0)
