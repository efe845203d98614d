import uuid
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import ProgrammingError, OperationalError

from carrental.db.session import SessionLocal
from carrental.core.config import settings
from carrental.core.security import hash_password
from carrental.models.car import Car
from carrental.models.operator import Operator

# Demo fleet for local runs; production cars are maintained by the catalog team.
CARS = [
    {"car_id": "CAR-001", "name": "Toyota Corolla", "category": "Sedan", "daily_rate": Decimal("200.00"), "seats": 5,
     "transmission": "Automatic", "fuel_type": "Petrol", "image_url": "https://images.unsplash.com/photo-1623869675781-80aa31012a5a",
     "features": ["Air Conditioning", "Bluetooth"]},
    {"car_id": "CAR-002", "name": "Hyundai Tucson", "category": "SUV", "daily_rate": Decimal("350.00"), "seats": 5,
     "transmission": "Automatic", "fuel_type": "Petrol", "image_url": "cars/hyundai-tucson.jpg",
     "features": ["Air Conditioning", "Reverse Camera"]},
    {"car_id": "CAR-003", "name": "Suzuki Swift", "category": "Economy", "daily_rate": Decimal("150.00"), "seats": 4,
     "transmission": "Manual", "fuel_type": "Petrol", "image_url": "",
     "features": ["Air Conditioning"]},
    {"car_id": "CAR-004", "name": "Toyota Land Cruiser Prado", "category": "SUV", "daily_rate": Decimal("800.00"), "seats": 7,
     "transmission": "Automatic", "fuel_type": "Diesel", "image_url": "https://res.cloudinary.com/demo/image/upload/prado.png",
     "features": ["4x4", "Leather Seats", "Air Conditioning"]},
]


def ensure_operator(db: Session, email: str, password: str, role: str, name: str):
    op = db.query(Operator).filter(Operator.email == email).first()
    if op:
        return
    db.add(
        Operator(
            id=str(uuid.uuid4()),
            email=email,
            full_name=name,
            role=role,
            password_hash=hash_password(password),
            is_active=True,
        )
    )
    db.commit()


def ensure_car(db: Session, data: dict):
    if db.query(Car).filter(Car.car_id == data["car_id"]).first():
        return
    db.add(Car(id=str(uuid.uuid4()), status="active", **data))
    db.commit()


def run(db=None):
    if db is None:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM cars LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            print("[seed] cars table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        if settings.SEED_ADMIN_PASSWORD:
            ensure_operator(db, settings.SEED_ADMIN_EMAIL.lower(), settings.SEED_ADMIN_PASSWORD, "admin", "Admin")
        else:
            print("[seed] SEED_ADMIN_PASSWORD not set; no admin operator created.")

        if settings.ENV == "local":
            for data in CARS:
                ensure_car(db, data)
    finally:
        db.close()


if __name__ == "__main__":
    run()
