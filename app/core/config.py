"""
Application configuration using pydantic-settings.
All environment variables are loaded from .env file with sensible defaults.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    APP_NAME: str = "Retail Transactions Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Record store: "sql" (SQLAlchemy) or "memory" (CSV scanned in-process)
    STORE_BACKEND: str = "sql"
    DATABASE_URL: str = "sqlite:///./transactions.db"

    # Dataset
    DATASET_CSV_PATH: str = ""
    SEED_ON_STARTUP: bool = True
    SEED_ROW_COUNT: int = 2000
    WARM_CACHE_ON_STARTUP: bool = True

    # Redis (shared cache for unfiltered statistics / filter options)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_ENABLED: bool = False  # Disable by default for easy local dev
    CACHE_TTL_SECONDS: int = 3600

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Query limits
    DEFAULT_PAGE_LIMIT: int = 100
    MAX_PAGE_LIMIT: int = 1000
    MAX_FILTER_VALUES: int = 100

    # Categories hidden from the dashboard dropdown
    FILTER_OPTIONS_EXCLUDED_CATEGORIES: list[str] = ["home", "sports"]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance to avoid re-reading .env on every call."""
    return Settings()
