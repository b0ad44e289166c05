"""
Environment configuration — single source of truth for service settings.

Uses pydantic-settings for type-safe config with .env file support.
Engine constants (window size, singularity epsilon, calendar length) live
here so the HTTP layer can override them per deployment; the engine itself
receives them as plain keyword arguments and never reads this module.

Usage:
    from backend.app.core.config import settings
    print(settings.WINDOW_SIZE)
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings loaded from environment variables or .env file.

    Precedence: env var > .env file > default value
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Application ──
    APP_NAME: str = "Climatology Regression Engine"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development | staging | production
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"  # DEBUG | INFO | WARNING | ERROR | CRITICAL

    # ── Server ──
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # ── CORS ──
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    CORS_ALLOW_ALL: bool = True  # False in production

    # ── Reference dataset ──
    BASE_LATITUDE: float = 13.1186  # latitude the bundled series was recorded at
    BASE_LONGITUDE: float = 80.1083

    # ── Regression engine ──
    WINDOW_SIZE: int = 7
    CLIMATOLOGY_DAYS: int = 366
    SINGULARITY_EPSILON: float = 1e-10
    DEFAULT_FORECAST_DAYS: int = 7
    ADJUSTER_SEED: Optional[int] = None  # fixed seed → reproducible relocation

    # ── Upload limits ──
    MAX_UPLOAD_BYTES: int = 20 * 1024 * 1024

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
