"""
One pass of the meal expiry check.

Stages run strictly in order against the store; only the expired meals flow between them in memory:
  1. scan expired meals          (fatal)
  2. mark them expired           (fatal; conditional batched update)
  3. 'meal_expired' notices      (non-fatal; only for meals step 2 changed)
  4. scan meals expiring soon    (fatal)
  5. 'meal_expiring_soon' alerts (non-fatal; deduped against the trailing suppression window)
  6. purge old read notices      (non-fatal)
Safe to re-run: expired meals leave the step 1 filter, and recent alerts suppress repeats.
"""
import logging
from datetime import datetime, timezone

from foodsave.core.policy import ExpiryPolicy
from foodsave.services.expiry.cleanup import purge_read_notifications
from foodsave.services.expiry.notify import find_expiring_meals, notify_expired, notify_expiring_soon
from foodsave.services.expiry.scan import find_expired_meals, mark_meals_expired
from foodsave.services.expiry.types import RunSummary, as_utc
from foodsave.services.store.base import ExpiryStore

logger = logging.getLogger(__name__)


def run_meal_expiry_check(
    store: ExpiryStore,
    *,
    now: datetime | None = None,
    policy: ExpiryPolicy | None = None,
) -> RunSummary:
    """
    Run all stages once and return the summary. `now` is captured once and shared by every stage.
    Raises ExpiryCheckError for fatal failures (scans, transition); later stages are then skipped.
    """
    now = as_utc(now) if now else datetime.now(timezone.utc)
    policy = policy or ExpiryPolicy()
    logger.info("Starting meal expiry check at %s", now.isoformat())

    expired = find_expired_meals(store, now)
    transitioned = mark_meals_expired(store, expired, now)
    expired_outcome = notify_expired(store, transitioned, now)

    candidates = find_expiring_meals(store, now, policy.expiring_soon_window)
    soon_outcome = notify_expiring_soon(store, candidates, now, policy.alert_suppression_window)

    cleaned, cleanup_failure = purge_read_notifications(store, now, policy.retention)

    errors = expired_outcome.failures + soon_outcome.failures
    if cleanup_failure is not None:
        errors.append(cleanup_failure)
    summary = RunSummary(
        timestamp=now,
        expired_meals_count=len(transitioned),
        soon_to_expire_count=len(candidates),
        alerts_suppressed=soon_outcome.suppressed,
        notifications_attempted=expired_outcome.attempted + soon_outcome.attempted,
        notifications_sent=expired_outcome.sent + soon_outcome.sent,
        expired_notifications_sent=expired_outcome.sent,
        expiring_soon_notifications_sent=soon_outcome.sent,
        notifications_cleaned=cleaned,
        errors=errors,
    ).finalize()
    logger.info(
        "Meal expiry check done: expired=%s soon=%s suppressed=%s sent=%s/%s cleaned=%s status=%s",
        summary.expired_meals_count,
        summary.soon_to_expire_count,
        summary.alerts_suppressed,
        summary.notifications_sent,
        summary.notifications_attempted,
        summary.notifications_cleaned,
        summary.status,
    )
    return summary
