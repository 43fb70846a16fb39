from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Shop Ledger"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./shopledger.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_SQL: bool = False

    # ==============================
    # Security
    # ==============================
    AUTH_REQUIRED: bool = True
    SESSION_SECRET: Optional[str] = None
    SESSION_COOKIE: str = "auth_token"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24
    API_KEYS: Optional[str] = None
    API_KEY_HEADER: str = "X-API-Key"
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: Optional[str] = None
    PBKDF2_ROUNDS: int = 200_000

    # ==============================
    # Sales
    # ==============================
    ALLOW_NEGATIVE_PROFIT: bool = False
    DEFAULT_PAYMENT_METHOD: str = "efectivo"
    INVOICE_PREFIX: str = "FACT"

    # ==============================
    # Reports
    # ==============================
    TOP_PRODUCTS_LIMIT: int = 5


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
