from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Car Rental API"
    # Comma-separated origins for CORS (e.g. https://rentals.example.com). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render/Supabase give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v
    REDIS_URL: str = "redis://localhost:6379/0"

    APP_PUBLIC_URL: str = "http://localhost:3000"  # storefront; Paystack callback goes to {APP_PUBLIC_URL}/booking/success
    STORAGE_PUBLIC_URL: str = ""  # e.g. https://xyz.supabase.co - resolves bucket/path image references

    # Paystack
    PAYSTACK_SECRET_KEY: str = ""
    PAYSTACK_PUBLIC_KEY: str = ""
    PAYSTACK_BASE_URL: str = "https://api.paystack.co"
    PAYSTACK_CURRENCY: str = "GHS"

    # Telegram operator channel
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_CHAT_ID: str = ""
    TELEGRAM_API_URL: str = "https://api.telegram.org"

    HTTP_TIMEOUT_SECONDS: int = 20

    # assisted: booking is recorded paid at creation, operator collects payment offline.
    # gateway: booking stays pending until Paystack (webhook/verify) or an operator settles it.
    SETTLEMENT_MODE: str = "assisted"
    PENDING_BOOKING_TTL_MINUTES: int = 30
    NOTIFICATION_MAX_ATTEMPTS: int = 5

    # Seed: admin operator is only created when a password is set
    SEED_ADMIN_EMAIL: str = "admin@carrental.local"
    SEED_ADMIN_PASSWORD: str = ""

    @field_validator("SETTLEMENT_MODE", mode="after")
    @classmethod
    def check_settlement_mode(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in ("assisted", "gateway"):
            raise ValueError("SETTLEMENT_MODE must be 'assisted' or 'gateway'")
        return v


settings = Settings()
