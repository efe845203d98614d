import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class Quote:
    days: int
    daily_rate: Decimal
    total_amount: Decimal


def rental_days(pickup: date | datetime, return_: date | datetime) -> int:
    """Whole days between pickup and return, rounded up, minimum 1."""
    if type(pickup) is not type(return_):
        # mixed date/datetime: compare on calendar days
        pickup = pickup.date() if isinstance(pickup, datetime) else pickup
        return_ = return_.date() if isinstance(return_, datetime) else return_
    if return_ < pickup:
        raise ValueError("return_date must not be before pickup_date")
    seconds = (return_ - pickup).total_seconds()
    return max(1, math.ceil(seconds / SECONDS_PER_DAY))


def quote(pickup: date | datetime, return_: date | datetime, daily_rate) -> Quote:
    rate = Decimal(str(daily_rate)).quantize(Decimal("0.01"))
    days = rental_days(pickup, return_)
    return Quote(days=days, daily_rate=rate, total_amount=(rate * days).quantize(Decimal("0.01")))


def matches_quote(q: Quote, days=None, daily_rate=None, total_amount=None) -> bool:
    """Client-submitted figures must agree with the server quote when present."""
    if days is not None and int(days) != q.days:
        return False
    if daily_rate is not None and Decimal(str(daily_rate)).quantize(Decimal("0.01")) != q.daily_rate:
        return False
    if total_amount is not None and Decimal(str(total_amount)).quantize(Decimal("0.01")) != q.total_amount:
        return False
    return True
