"""Expiry windows for one run. Built from Settings (config.expiry_policy) or the constants defaults."""
from dataclasses import dataclass
from datetime import timedelta

from foodsave.core.constants import (
    ALERT_SUPPRESSION_HOURS,
    EXPIRING_SOON_HOURS,
    NOTIFICATION_RETENTION_DAYS,
)


@dataclass(frozen=True)
class ExpiryPolicy:
    expiring_soon_window: timedelta = timedelta(hours=EXPIRING_SOON_HOURS)
    alert_suppression_window: timedelta = timedelta(hours=ALERT_SUPPRESSION_HOURS)
    retention: timedelta = timedelta(days=NOTIFICATION_RETENTION_DAYS)
