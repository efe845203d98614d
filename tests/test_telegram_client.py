import pytest
import requests

from carrental.services import telegram_client
from carrental.services.telegram_client import TelegramClient, TelegramConfig, TelegramError


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload
        self.text = "x" if payload is not None else ""

    def json(self):
        return self._payload


@pytest.fixture
def tg():
    return TelegramClient(TelegramConfig(bot_token="123:abc", chat_id="-1001", timeout=5))


def test_send_message(monkeypatch, tg):
    seen = {}

    def fake_post(url, json=None, timeout=None):
        seen.update(url=url, json=json, timeout=timeout)
        return FakeResponse(200, {"ok": True, "result": {"message_id": 42}})

    monkeypatch.setattr(telegram_client.requests, "post", fake_post)
    assert tg.send_message("<b>hi</b>") == 42
    assert seen["url"] == "https://api.telegram.org/bot123:abc/sendMessage"
    assert seen["json"] == {"chat_id": "-1001", "text": "<b>hi</b>", "parse_mode": "HTML"}
    assert seen["timeout"] == 5


def test_provider_error(monkeypatch, tg):
    monkeypatch.setattr(
        telegram_client.requests, "post",
        lambda url, json=None, timeout=None: FakeResponse(400, {"ok": False, "description": "Bad Request: chat not found"}),
    )
    with pytest.raises(TelegramError) as e:
        tg.send_message("hi")
    assert (e.value.status_code, e.value.message) == (400, "Bad Request: chat not found")


def test_ok_false_with_200(monkeypatch, tg):
    monkeypatch.setattr(
        telegram_client.requests, "post",
        lambda url, json=None, timeout=None: FakeResponse(200, {"ok": False, "description": "Forbidden"}),
    )
    with pytest.raises(TelegramError) as e:
        tg.send_message("hi")
    assert e.value.message == "Forbidden"


def test_unreachable_does_not_leak_token(monkeypatch, tg, caplog):
    def boom(url, json=None, timeout=None):
        raise requests.ConnectionError(f"failed to reach {url}")

    monkeypatch.setattr(telegram_client.requests, "post", boom)
    with pytest.raises(TelegramError) as e:
        tg.send_message("hi")
    assert e.value.status_code == 502
    assert "123:abc" not in e.value.message
    assert "123:abc" not in caplog.text
