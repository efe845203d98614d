import re
from decimal import Decimal

from carrental.main import app
from carrental.api.deps import get_optional_telegram_client
from carrental.models.audit_log import AuditLog
from carrental.models.booking import Booking
from carrental.models.chat_session import ChatSession
from carrental.models.notification_log import NotificationLog
from carrental.models.payment import Payment
from carrental.models.user import User
from conftest import add_session, booking_payload, telegram_error


def _create(client, **overrides):
    r = client.post("/api/v1/public/bookings", json=booking_payload(**overrides))
    assert r.status_code == 200, r.text
    return r.json()


def test_create_booking_assisted_mode_records_paid_booking(client, db, car):
    out = _create(client)
    assert out["success"] is True
    assert re.fullmatch(r"ORD-\d{8}-[A-Z0-9]{6}", out["order_id"])
    assert re.fullmatch(r"PAY-\d{13}-[A-Z0-9]{9}", out["payment_reference"])

    db.expire_all()
    b = db.get(Booking, out["booking_id"])
    assert b.order_id == out["order_id"]
    assert b.days == 2
    assert b.total_amount == Decimal("400.00")
    assert b.total_amount == b.daily_rate * b.days
    assert b.deposit_amount == b.total_amount
    assert b.balance_amount == 0
    assert (b.status, b.payment_status) == ("paid", "paid")
    assert b.settlement_mode == "assisted"
    assert b.car_id == car.id

    p = db.query(Payment).filter(Payment.payment_reference == out["payment_reference"]).one()
    assert p.order_id == b.order_id
    assert p.amount == Decimal("400.00")
    assert p.status == "success"
    assert p.provider == "manual"
    assert p.paid_at is not None

    u = db.get(User, b.user_id)
    assert u.phone == "+233201234567"
    assert u.whatsapp_id == "+233201234567"
    assert db.query(AuditLog).filter(AuditLog.action == "booking.created", AuditLog.entity_id == b.order_id).count() == 1


def test_create_booking_gateway_mode_stays_pending(client, db, car, gateway_mode):
    out = _create(client)
    db.expire_all()
    b = db.get(Booking, out["booking_id"])
    assert (b.status, b.payment_status) == ("pending", "unpaid")
    p = db.query(Payment).filter(Payment.payment_reference == out["payment_reference"]).one()
    assert (p.status, p.provider) == ("pending", "paystack")
    assert p.paid_at is None


def test_missing_pickup_location(client, car):
    r = client.post("/api/v1/public/bookings", json=booking_payload(pickup_location=None))
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required fields"}


def test_blank_required_field_counts_as_missing(client, car):
    r = client.post("/api/v1/public/bookings", json=booking_payload(full_name="   "))
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required fields"}


def test_empty_and_absent_body(client, car):
    assert client.post("/api/v1/public/bookings", json={}).json() == {"error": "Missing required fields"}
    r = client.post("/api/v1/public/bookings")
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required fields"}


def test_overlong_phone_number_is_invalid_body(client, db, car):
    r = client.post("/api/v1/public/bookings", json=booking_payload(phone_number="+233" + "1" * 60))
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid request body"}
    assert db.query(User).count() == 0


def test_malformed_date_is_invalid_body(client, car):
    r = client.post("/api/v1/public/bookings", json=booking_payload(pickup_date="next tuesday"))
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid request body"}


def test_unknown_car(client, db, car):
    r = client.post("/api/v1/public/bookings", json=booking_payload(car_id="CAR-999"))
    assert r.status_code == 404
    assert r.json() == {"error": "Car not found"}
    assert db.query(User).count() == 0
    assert db.query(Booking).count() == 0


def test_client_price_must_match_server_quote(client, db, car):
    r = client.post("/api/v1/public/bookings", json=booking_payload(total_amount=10))
    assert r.status_code == 400
    assert r.json() == {"error": "Quoted price does not match current rate"}
    assert db.query(Booking).count() == 0


def test_figures_are_optional(client, db, car):
    out = _create(client, days=None, daily_rate=None, total_amount=None, return_date="2024-01-06")
    db.expire_all()
    b = db.get(Booking, out["booking_id"])
    assert b.days == 5
    assert b.total_amount == Decimal("1000.00")


def test_return_before_pickup(client, car):
    r = client.post("/api/v1/public/bookings", json=booking_payload(return_date="2023-12-30", days=None, total_amount=None))
    assert r.status_code == 400


def test_session_marked_booked(client, db, car):
    add_session(db, "wa-233201234567", state="IN_PROGRESS", data={"step": "dates"})
    out = _create(client, sessionId="wa-233201234567")

    db.expire_all()
    s = db.query(ChatSession).filter(ChatSession.whatsapp_id == "wa-233201234567").one()
    assert s.session_state == "BOOKED"
    assert s.session_data["booking_completed"] is True
    assert s.session_data["order_id"] == out["order_id"]
    assert s.session_data["payment_reference"] == out["payment_reference"]
    assert s.session_data["step"] == "dates"

    u = db.query(User).one()
    assert u.whatsapp_id == "wa-233201234567"


def test_booking_without_session_row_still_succeeds(client, db, car):
    _create(client, sessionId="wa-unknown")
    assert db.query(ChatSession).count() == 0
    assert db.query(Booking).count() == 1


def test_repeat_customer_reuses_user(client, db, car):
    first = _create(client)
    second = _create(client, full_name="Ama K. Mensah")
    assert first["order_id"] != second["order_id"]
    db.expire_all()
    assert db.query(User).count() == 1
    assert db.query(User).one().name == "Ama K. Mensah"


def test_get_booking(client, car):
    out = _create(client)
    r = client.get(f"/api/v1/public/bookings/{out['booking_id']}")
    assert r.status_code == 200
    body = r.json()
    assert body["order_id"] == out["order_id"]
    assert body["pickup_date"] == "2024-01-01"
    assert body["user"]["name"] == "Ama Mensah"
    assert body["car"]["car_id"] == "CAR-001"

    r = client.get("/api/v1/public/bookings/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"error": "Booking not found"}


def test_confirm_sends_operator_notification(client, db, car, fake_telegram):
    add_session(db, "wa-1", state="IN_PROGRESS")
    out = _create(client)
    r = client.post(f"/api/v1/public/bookings/{out['booking_id']}/confirm", json={"sessionId": "wa-1"})
    assert r.status_code == 200
    body = r.json()
    assert body["notification_sent"] is True
    assert len(fake_telegram.sent) == 1
    assert out["order_id"] in fake_telegram.sent[0]
    assert "wa-1" in fake_telegram.sent[0]

    db.expire_all()
    log = db.query(NotificationLog).one()
    assert (log.status, log.attempts, log.provider_message_id) == ("sent", 1, "1001")
    assert db.query(ChatSession).one().session_state == "BOOKED"


def test_confirm_settles_verified_gateway_payment(client, db, car, gateway_mode, fake_paystack):
    out = _create(client)
    ref = out["payment_reference"]
    fake_paystack.transactions[ref] = {"status": "success", "reference": ref, "amount": 40000}

    r = client.post(f"/api/v1/public/bookings/{out['booking_id']}/confirm", json={"reference": ref})
    assert r.status_code == 200
    assert r.json()["payment_status"] == "paid"

    db.expire_all()
    p = db.query(Payment).filter(Payment.payment_reference == ref).one()
    assert (p.status, p.provider) == ("success", "paystack")


def test_confirm_does_not_settle_unpaid_reference(client, db, car, gateway_mode):
    out = _create(client)
    r = client.post(f"/api/v1/public/bookings/{out['booking_id']}/confirm", json={"reference": out["payment_reference"]})
    assert r.status_code == 200
    assert r.json()["payment_status"] == "unpaid"


def test_confirm_keeps_failed_notification_for_retry(client, db, car, fake_telegram):
    fake_telegram.error = telegram_error()
    out = _create(client)
    r = client.post(f"/api/v1/public/bookings/{out['booking_id']}/confirm", json={})
    assert r.status_code == 200
    assert r.json()["notification_sent"] is False
    db.expire_all()
    log = db.query(NotificationLog).one()
    assert log.status == "failed"
    assert log.last_error == "Bad Request: chat not found"
    assert log.related_order_id == out["order_id"]


def test_confirm_without_telegram_queues(client, db, car):
    app.dependency_overrides[get_optional_telegram_client] = lambda: None
    out = _create(client)
    r = client.post(f"/api/v1/public/bookings/{out['booking_id']}/confirm", json={})
    assert r.status_code == 200
    assert r.json()["notification_sent"] is False
    assert db.query(NotificationLog).one().status == "queued"


def test_confirm_unknown_booking(client):
    r = client.post("/api/v1/public/bookings/nope/confirm", json={})
    assert r.status_code == 404
