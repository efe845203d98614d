from datetime import date, datetime
from decimal import Decimal

import pytest

from carrental.services.pricing_service import quote, rental_days, matches_quote


def test_quote_two_days():
    q = quote(date(2024, 1, 1), date(2024, 1, 3), 200)
    assert q.days == 2
    assert q.total_amount == Decimal("400.00")


def test_same_day_rental_is_one_day():
    assert rental_days(date(2024, 1, 1), date(2024, 1, 1)) == 1


def test_partial_day_rounds_up():
    assert rental_days(datetime(2024, 1, 1, 9), datetime(2024, 1, 2, 10)) == 2


def test_return_before_pickup_rejected():
    with pytest.raises(ValueError):
        rental_days(date(2024, 1, 3), date(2024, 1, 1))


def test_matches_quote_ignores_missing_figures():
    q = quote(date(2024, 1, 1), date(2024, 1, 3), "200")
    assert matches_quote(q)
    assert matches_quote(q, days=2, daily_rate="200.00", total_amount=400)
    assert not matches_quote(q, total_amount=399)
    assert not matches_quote(q, days=3)
    assert not matches_quote(q, daily_rate=150)


def test_quote_endpoint(client, car):
    r = client.post("/api/v1/public/bookings/quote", json={"car_id": "CAR-001", "pickup_date": "2024-01-01", "return_date": "2024-01-03"})
    assert r.status_code == 200
    body = r.json()
    assert body["days"] == 2
    assert float(body["daily_rate"]) == 200
    assert float(body["total_amount"]) == 400


def test_quote_endpoint_rejects_reversed_dates(client, car):
    r = client.post("/api/v1/public/bookings/quote", json={"car_id": "CAR-001", "pickup_date": "2024-01-05", "return_date": "2024-01-03"})
    assert r.status_code == 400
    assert "return_date" in r.json()["error"]


def test_quote_endpoint_unknown_car(client, car):
    r = client.post("/api/v1/public/bookings/quote", json={"car_id": "CAR-404", "pickup_date": "2024-01-01", "return_date": "2024-01-03"})
    assert r.status_code == 404
