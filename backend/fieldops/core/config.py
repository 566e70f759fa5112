# backend/fieldops/core/config.py
import logging
import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = BRAND_NAME
    environment: str = Field(default="development", description="deployment environment name")
    is_testing: bool = False

    database_url: str = Field(
        default="sqlite:///./fieldops.db",
        description="SQLAlchemy URL for the visit store",
    )
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 5

    log_level: str = "INFO"

    # Bounds for potentially blocking steps; expiry is reported as a retryable failure
    persistence_timeout_seconds: float = Field(default=10.0, gt=0)
    event_dispatch_timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        normalized = str(value or "INFO").strip().upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(sorted(_LOG_LEVELS))}")
        return normalized

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
if is_running_tests():
    settings.is_testing = True
logger.info("[CONFIG] environment=%s sqlite=%s", settings.environment, settings.is_sqlite)
