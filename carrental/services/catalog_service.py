from decimal import Decimal
from sqlalchemy.orm import Session

from carrental.core.config import settings
from carrental.models.car import Car

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/400x200?text=Car+Image"
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp")
IMAGE_CDN_HOSTS = (
    "unsplash.com",
    "cloudinary.com",
    "imgur.com",
    "i.imgur.com",
    "images.unsplash.com",
    "res.cloudinary.com",
)


def is_image_url(url: str) -> bool:
    if not url:
        return False
    if url.startswith("data:image/"):
        return True
    lower = url.lower()
    for ext in IMAGE_EXTENSIONS:
        i = lower.find(ext)
        if i == -1:
            continue
        rest = lower[i + len(ext):]
        if rest == "" or rest.startswith("?") or rest.startswith("#"):
            return True
    return any(host in url for host in IMAGE_CDN_HOSTS)


def storage_public_url(ref: str, base_url: str | None = None) -> str:
    """bucket/path/to/file.jpg -> public object URL on the storage host."""
    base = (settings.STORAGE_PUBLIC_URL if base_url is None else base_url).rstrip("/")
    bucket, _, path = ref.partition("/")
    return f"{base}/storage/v1/object/public/{bucket}/{path}"


def normalize_image_url(raw: str | None, base_url: str | None = None) -> str:
    url = (raw or "").strip()
    if not url:
        return PLACEHOLDER_IMAGE_URL
    if not url.startswith(("http://", "https://", "data:")) and "/" in url:
        url = storage_public_url(url, base_url)
    if not is_image_url(url):
        return PLACEHOLDER_IMAGE_URL
    return url


def car_out(c: Car) -> dict:
    return {
        "car_id": c.car_id,
        "name": c.name,
        "category": c.category or "",
        "daily_rate": c.daily_rate,
        "seats": c.seats or 0,
        "transmission": c.transmission or "",
        "fuel_type": c.fuel_type or "",
        "image_url": normalize_image_url(c.image_url),
        "features": list(c.features or []),
        # every active car is bookable; there is no availability calendar
        "available": True,
    }


def list_active_cars(
    db: Session,
    category: str | None = None,
    transmission: str | None = None,
    max_price: Decimal | None = None,
) -> list[Car]:
    q = db.query(Car).filter(Car.status == "active")
    if category:
        q = q.filter(Car.category == category)
    if transmission:
        q = q.filter(Car.transmission == transmission)
    if max_price is not None:
        q = q.filter(Car.daily_rate <= max_price)
    return q.order_by(Car.daily_rate.asc(), Car.name.asc()).all()


def get_active_car(db: Session, car_id: str) -> Car | None:
    return db.query(Car).filter(Car.car_id == car_id, Car.status == "active").first()
