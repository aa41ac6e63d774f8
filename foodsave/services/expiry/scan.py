"""
Expiry scanner and state transitioner.

Both are fatal on failure: without a correct view of what expired, the notifier would
miss expirations or notify for a transition that never happened.
"""
import logging
from datetime import datetime

from foodsave.core.errors import ErrorKind, ExpiryCheckError, StoreError
from foodsave.services.expiry.types import MealRecord
from foodsave.services.store.base import ExpiryStore

logger = logging.getLogger(__name__)


def find_expired_meals(store: ExpiryStore, now: datetime) -> list[MealRecord]:
    """Meals still 'available' whose available_until is before now. Read-only."""
    try:
        meals = store.fetch_expired_meals(now)
    except StoreError as e:
        logger.error("Expired meals scan failed: %s", e)
        raise ExpiryCheckError(ErrorKind.SCAN, f"Failed to fetch expired meals: {e}") from e
    logger.info("%s expired meals found", len(meals))
    return meals


def mark_meals_expired(store: ExpiryStore, meals: list[MealRecord], now: datetime) -> list[MealRecord]:
    """
    Flip the scanned meals to 'expired' in one batched write and return the ones actually changed.

    The write is conditional on status = 'available', so a meal another run expired (or one
    the catalog changed) between scan and update is not reported twice. Empty input is a no-op.
    """
    if not meals:
        return []
    try:
        changed_ids = set(store.mark_meals_expired([m.id for m in meals], now))
    except StoreError as e:
        logger.error("Marking %s meals expired failed: %s", len(meals), e)
        raise ExpiryCheckError(ErrorKind.TRANSITION, f"Failed to mark meals expired: {e}") from e
    changed = [m for m in meals if m.id in changed_ids]
    skipped = len(meals) - len(changed)
    if skipped:
        logger.info("%s meals were no longer available at update time; skipped", skipped)
    logger.info("%s meals marked as expired", len(changed))
    return changed
