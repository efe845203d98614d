import hashlib
import hmac
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

import requests

logger = logging.getLogger(__name__)


@dataclass
class PaystackConfig:
    secret_key: str
    base_url: str = "https://api.paystack.co"
    currency: str = "GHS"
    timeout: int = 20


class PaystackError(RuntimeError):
    """Non-2xx answer (or unreachable gateway). `status_code` is passed through to the caller."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def to_minor_units(amount) -> int:
    """Major units (cedis) to minor units (pesewas), rounded half up."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount) -> float:
    return float(Decimal(int(amount or 0)) / 100)


def sign_body(secret_key: str, body: bytes) -> str:
    """Hex HMAC-SHA512 over the raw body, as sent in x-paystack-signature."""
    return hmac.new(secret_key.encode("utf-8"), body, hashlib.sha512).hexdigest()


def verify_signature(secret_key: str, body: bytes, signature: str) -> bool:
    if not secret_key or not signature:
        return False
    return hmac.compare_digest(sign_body(secret_key, body), signature.strip().lower())


class PaystackClient:
    def __init__(self, cfg: PaystackConfig):
        self.cfg = cfg

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.cfg.secret_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def request(self, method: str, path: str, payload: dict | None = None) -> dict:
        url = f"{self.cfg.base_url.rstrip('/')}{path}"
        try:
            r = requests.request(method=method.upper(), url=url, json=payload, headers=self._headers(), timeout=self.cfg.timeout)
        except requests.RequestException as e:
            logger.error("Paystack %s %s failed: %s", method.upper(), path, e)
            raise PaystackError(f"Paystack unreachable: {e}", status_code=502)
        try:
            data = r.json() if r.text else {}
        except ValueError:
            data = {"message": r.text}
        if not r.ok:
            msg = data.get("message") if isinstance(data, dict) else None
            logger.warning("Paystack %s %s returned %s: %s", method.upper(), path, r.status_code, msg)
            raise PaystackError(msg or "Paystack request failed", status_code=r.status_code)
        return data

    def initialize_transaction(self, *, email: str, amount, callback_url: str, metadata: dict | None = None, reference: str | None = None) -> dict:
        payload = {
            "email": email,
            "amount": to_minor_units(amount),
            "currency": self.cfg.currency,
            "metadata": metadata or {},
            "callback_url": callback_url,
        }
        if reference:
            payload["reference"] = reference
        data = self.request("POST", "/transaction/initialize", payload)
        return data.get("data") or {}

    def verify_transaction(self, reference: str) -> dict:
        data = self.request("GET", f"/transaction/verify/{reference}")
        return data.get("data") or {}
