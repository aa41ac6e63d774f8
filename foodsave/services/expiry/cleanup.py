"""Retention: delete read notifications older than the retention window. Non-fatal on failure."""
import logging
from datetime import datetime, timedelta

from foodsave.core.errors import ErrorKind, StoreError
from foodsave.services.expiry.types import StageFailure
from foodsave.services.store.base import ExpiryStore

logger = logging.getLogger(__name__)


def purge_read_notifications(
    store: ExpiryStore, now: datetime, retention: timedelta
) -> tuple[int, StageFailure | None]:
    """Delete notifications with is_read and created_at < now - retention. Returns (deleted, failure)."""
    cutoff = now - retention
    try:
        deleted = store.delete_read_notifications(cutoff)
    except StoreError as e:
        logger.warning("Cleaning up read notifications before %s failed: %s", cutoff.isoformat(), e, exc_info=True)
        return 0, StageFailure(stage=ErrorKind.CLEANUP, error=f"Failed to clean up old notifications: {e}")
    logger.info("Cleaned up %s read notifications older than %s", deleted, cutoff.isoformat())
    return deleted, None
