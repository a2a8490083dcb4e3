from decimal import Decimal
from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production", "test"] = "local"
    LOG_LEVEL: str = "INFO"
    ADMIN_EMAIL: str = "admin@joulaa.com"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Supabase auth
    # Placeholder keeps local/test runs from failing when auth is not exercised.
    SUPABASE_JWT_SECRET: str = "test-jwt-secret"

    # Stripe
    STRIPE_SECRET_KEY: str = ""
    STRIPE_API_BASE: str = "https://api.stripe.com"

    # Checkout pricing
    STORE_CURRENCY: str = "aed"
    FREE_SHIPPING_THRESHOLD: Decimal = Decimal("50")
    FLAT_SHIPPING_FEE: Decimal = Decimal("5.99")
    DEFAULT_COST_RATIO: Decimal = Decimal("0.6")

    # Email (Resend)
    RESEND_API_KEY: str = ""
    RESEND_API_BASE: str = "https://api.resend.com"
    DEFAULT_FROM_EMAIL: str = "noreply@joulaa.com"
    DEFAULT_FROM_NAME: str = "Joulaa"

    # Background jobs
    REDIS_URL: str = "redis://localhost:6379/0"
    RECONCILIATION_MAX_ATTEMPTS: int = 5

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @field_validator("STORE_CURRENCY")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if len(v) != 3:
            raise ValueError("STORE_CURRENCY must be an ISO 4217 code")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
