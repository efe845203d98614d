import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENV", "test")

import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from carrental.main import app
from carrental.core.config import settings
from carrental.db.session import Base, get_db
from carrental.api.deps import get_paystack_client, get_optional_paystack_client, get_optional_telegram_client
from carrental.models.car import Car
from carrental.models.chat_session import ChatSession
from carrental.services.paystack_client import PaystackConfig
from carrental.services.telegram_client import TelegramError

PAYSTACK_SECRET = "sk_test_0123456789abcdef"


class FakePaystack:
    def __init__(self):
        self.cfg = PaystackConfig(secret_key=PAYSTACK_SECRET)
        self.initialized = []
        self.transactions = {}
        self.error = None

    def initialize_transaction(self, **kwargs):
        if self.error:
            raise self.error
        self.initialized.append(kwargs)
        return {
            "authorization_url": "https://checkout.paystack.com/abc123",
            "access_code": "abc123",
            "reference": kwargs.get("reference") or "T1234567890",
        }

    def verify_transaction(self, reference):
        if self.error:
            raise self.error
        return self.transactions.get(reference, {"status": "abandoned", "reference": reference, "amount": 0})


class FakeTelegram:
    def __init__(self):
        self.sent = []
        self.error = None

    def send_message(self, text, parse_mode="HTML"):
        if self.error:
            raise self.error
        self.sent.append(text)
        return 1000 + len(self.sent)


@pytest.fixture
def SessionTesting(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(SessionTesting):
    s = SessionTesting()
    yield s
    s.close()


@pytest.fixture
def fake_paystack():
    return FakePaystack()


@pytest.fixture
def fake_telegram():
    return FakeTelegram()


@pytest.fixture
def client(SessionTesting, fake_paystack, fake_telegram):
    def _get_db():
        s = SessionTesting()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_paystack_client] = lambda: fake_paystack
    app.dependency_overrides[get_optional_paystack_client] = lambda: fake_paystack
    app.dependency_overrides[get_optional_telegram_client] = lambda: fake_telegram
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def gateway_mode(monkeypatch):
    monkeypatch.setattr(settings, "SETTLEMENT_MODE", "gateway")


def add_car(db, car_id="CAR-001", daily_rate="200.00", status="active", **kw):
    data = dict(name="Toyota Corolla", category="Sedan", seats=5, transmission="Automatic", fuel_type="Petrol",
                image_url="https://images.unsplash.com/photo-1", features=["Bluetooth"])
    data.update(kw)
    c = Car(id=str(uuid.uuid4()), car_id=car_id, daily_rate=Decimal(daily_rate), status=status, **data)
    db.add(c)
    db.commit()
    return c


def add_session(db, whatsapp_id, state=None, data=None):
    s = ChatSession(id=str(uuid.uuid4()), whatsapp_id=whatsapp_id, session_state=state, session_data=data or {})
    db.add(s)
    db.commit()
    return s


@pytest.fixture
def car(db):
    return add_car(db)


def booking_payload(**overrides):
    body = {
        "car_id": "CAR-001",
        "pickup_date": "2024-01-01",
        "return_date": "2024-01-03",
        "full_name": "Ama Mensah",
        "phone_number": "+233201234567",
        "email": "ama@example.com",
        "pickup_location": "Kotoka International Airport",
        "days": 2,
        "daily_rate": 200,
        "total_amount": 400,
    }
    body.update(overrides)
    return {k: v for k, v in body.items() if v is not None}


def telegram_error(message="Bad Request: chat not found", status_code=400):
    return TelegramError(message, status_code=status_code)
