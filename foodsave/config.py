"""
Application settings (Pydantic Settings).

STORE_URL and STORE_SERVICE_KEY are required: the process refuses to start without them.
"""
from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

from foodsave.core.constants import (
    ALERT_SUPPRESSION_HOURS,
    EXPIRING_SOON_HOURS,
    EXPIRY_CHECK_INTERVAL_MINUTES,
    NOTIFICATION_RETENTION_DAYS,
    STORE_PAGE_SIZE,
    STORE_TIMEOUT_SECONDS,
)
from foodsave.core.policy import ExpiryPolicy

# .env at the project root (parent of foodsave/)
_env_path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    # Store: Supabase project URL (https://<ref>.supabase.co) or a SQLAlchemy URL
    store_url: str
    store_service_key: str
    store_timeout_seconds: float = STORE_TIMEOUT_SECONDS
    store_page_size: int = STORE_PAGE_SIZE

    expiring_soon_hours: int = EXPIRING_SOON_HOURS
    alert_suppression_hours: int = ALERT_SUPPRESSION_HOURS
    notification_retention_days: int = NOTIFICATION_RETENTION_DAYS

    scheduler_enabled: bool = False
    expiry_check_interval_minutes: int = EXPIRY_CHECK_INTERVAL_MINUTES

    class Config:
        env_file = _env_path
        extra = "ignore"

    @field_validator("store_url", "store_service_key", mode="after")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator(
        "expiring_soon_hours",
        "alert_suppression_hours",
        "notification_retention_days",
        "expiry_check_interval_minutes",
        "store_page_size",
        mode="after",
    )
    @classmethod
    def positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    def expiry_policy(self) -> ExpiryPolicy:
        return ExpiryPolicy(
            expiring_soon_window=timedelta(hours=self.expiring_soon_hours),
            alert_suppression_window=timedelta(hours=self.alert_suppression_hours),
            retention=timedelta(days=self.notification_retention_days),
        )


@lru_cache
def get_settings() -> Settings:
    """Build settings once per process. Raises pydantic.ValidationError when required values are missing."""
    return Settings()
