"""
Application configuration.

Values come from environment variables or a local .env file so development
works without any secret store.
"""
import logging
from decimal import Decimal
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

_DEFAULT_JWT_SECRET = "changeme"


class Settings(BaseSettings):
    APP_ENV: str = "development"
    DATABASE_URL: str = "sqlite+aiosqlite:///./lawncare.db"
    JWT_SECRET_KEY: str = _DEFAULT_JWT_SECRET
    CORS_ORIGINS: str = "*"

    # Stripe payments
    STRIPE_API_KEY: str = ""
    STRIPE_PUBLISHABLE_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    CURRENCY: str = "usd"

    # SendGrid Email
    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = "noreply@greenlawn.example"
    SENDGRID_FROM_NAME: str = "GreenLawn Care"

    # OpenWeather
    WEATHER_API_KEY: str = ""
    WEATHER_API_URL: str = "https://api.openweathermap.org/data/2.5"
    WEATHER_TIMEOUT_SECONDS: float = 10.0

    # Seeded administrator (skipped when email is empty)
    ADMIN_EMAIL: str = ""
    ADMIN_PASSWORD: str = ""

    FRONTEND_URL: str = "http://localhost:3000"

    # Referral program
    REFERRAL_DISCOUNT: Decimal = Decimal("10.00")
    REFERRAL_VALID_DAYS: int = 90

    class Config:
        env_file = ".env"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()

# Validate critical security settings
if settings.APP_ENV == "production" and settings.JWT_SECRET_KEY in ("", _DEFAULT_JWT_SECRET):
    raise ValueError(
        "JWT_SECRET_KEY is not set. It must be provided as a JWT_SECRET_KEY environment variable "
        "in production. Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
    )
if settings.JWT_SECRET_KEY == _DEFAULT_JWT_SECRET:
    logger.warning("JWT_SECRET_KEY is using the development default")
