"""
Merchant notifications for the expiry check: 'meal_expired' and 'meal_expiring_soon'.

Expired: one per meal the transitioner just changed; no dedup needed (status guard makes it exactly-once).
Expiring soon: the meal stays 'available' across runs, so candidates already alerted within the
suppression window are dropped. Insert failures are non-fatal: logged and returned as StageFailure.
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Iterable

from foodsave.core.constants import (
    NOTIFICATION_TYPE_MEAL_EXPIRED,
    NOTIFICATION_TYPE_MEAL_EXPIRING_SOON,
)
from foodsave.core.errors import ErrorKind, ExpiryCheckError, StoreError
from foodsave.services.expiry.types import (
    MealExpiredPayload,
    MealExpiringSoonPayload,
    MealRecord,
    NotificationDraft,
    StageFailure,
    StageOutcome,
)
from foodsave.services.store.base import ExpiryStore

logger = logging.getLogger(__name__)

_HOUR = timedelta(hours=1)


def hours_left(available_until: datetime, now: datetime) -> int:
    """Whole hours until the deadline, rounded up: 61 minutes -> 2, 1 minute -> 1."""
    return math.ceil((available_until - now) / _HOUR)


# --- Builders ---


def build_expired_notification(meal: MealRecord, now: datetime) -> NotificationDraft:
    return NotificationDraft(
        user_id=meal.merchant_id,
        title="Meal expired",
        message=f'Your meal "{meal.title}" has expired and is no longer available for sale.',
        type=NOTIFICATION_TYPE_MEAL_EXPIRED,
        payload=MealExpiredPayload(
            meal_id=meal.id,
            meal_title=meal.title,
            expired_at=now,
            remaining_quantity=meal.remaining_quantity,
        ),
        created_at=now,
    )


def build_expiring_soon_notification(meal: MealRecord, now: datetime) -> NotificationDraft:
    left = hours_left(meal.available_until, now)
    return NotificationDraft(
        user_id=meal.merchant_id,
        title="Meal expiring soon",
        message=(
            f'Your meal "{meal.title}" expires in {left}h. '
            f"{meal.remaining_quantity} portion(s) left."
        ),
        type=NOTIFICATION_TYPE_MEAL_EXPIRING_SOON,
        payload=MealExpiringSoonPayload(
            meal_id=meal.id,
            meal_title=meal.title,
            expires_at=meal.available_until,
            hours_left=left,
            remaining_quantity=meal.remaining_quantity,
        ),
        created_at=now,
    )


# --- Dedup ---


def alerted_meal_ids(payloads: Iterable[dict[str, Any]]) -> set[str]:
    """meal_id of each alert payload; payloads without a usable meal_id are ignored."""
    ids: set[str] = set()
    for data in payloads:
        meal_id = data.get("meal_id") if isinstance(data, dict) else None
        if meal_id not in (None, ""):
            ids.add(str(meal_id))
    return ids


def recently_alerted_meal_ids(store: ExpiryStore, now: datetime, window: timedelta) -> set[str]:
    try:
        payloads = store.fetch_alert_payloads(NOTIFICATION_TYPE_MEAL_EXPIRING_SOON, now - window)
    except StoreError as e:
        raise ExpiryCheckError(ErrorKind.NOTIFY, f"Failed to fetch recent expiring-soon alerts: {e}") from e
    return alerted_meal_ids(payloads)


def find_expiring_meals(store: ExpiryStore, now: datetime, window: timedelta) -> list[MealRecord]:
    """Available meals with stock whose deadline is within (now, now + window). Fatal on failure."""
    try:
        meals = store.fetch_expiring_meals(now, now + window)
    except StoreError as e:
        logger.error("Expiring meals scan failed: %s", e)
        raise ExpiryCheckError(ErrorKind.SCAN, f"Failed to fetch meals expiring soon: {e}") from e
    logger.info("%s meals expire in less than %s", len(meals), window)
    return meals


# --- Inserts ---


def _insert(store: ExpiryStore, drafts: list[NotificationDraft], label: str, outcome: StageOutcome) -> None:
    outcome.attempted += len(drafts)
    if not drafts:
        return
    try:
        outcome.sent += store.insert_notifications(drafts)
    except StoreError as e:
        logger.warning("Creating %s %s notifications failed: %s", len(drafts), label, e, exc_info=True)
        outcome.failures.append(
            StageFailure(stage=ErrorKind.NOTIFY, error=f"Failed to create {label} notifications: {e}")
        )
        return
    logger.info("%s %s notifications created", len(drafts), label)


def notify_expired(store: ExpiryStore, meals: list[MealRecord], now: datetime) -> StageOutcome:
    """Call only with meals whose transition to 'expired' has been committed."""
    outcome = StageOutcome()
    drafts = [build_expired_notification(m, now) for m in meals]
    _insert(store, drafts, "expired-meal", outcome)
    return outcome


def notify_expiring_soon(
    store: ExpiryStore,
    candidates: list[MealRecord],
    now: datetime,
    suppression_window: timedelta,
) -> StageOutcome:
    """
    Alert merchants about candidates not already alerted within suppression_window.

    If the alert history cannot be read, no expiring-soon alerts are sent this run;
    the failure is returned, not raised.
    """
    outcome = StageOutcome()
    if not candidates:
        return outcome
    try:
        suppressed_ids = recently_alerted_meal_ids(store, now, suppression_window)
    except ExpiryCheckError as e:
        logger.warning("%s; skipping expiring-soon alerts this run", e, exc_info=True)
        outcome.failures.append(StageFailure(stage=e.kind, error=str(e)))
        return outcome

    fresh = [m for m in candidates if m.id not in suppressed_ids]
    outcome.suppressed = len(candidates) - len(fresh)
    if outcome.suppressed:
        logger.info("%s meals already alerted in the last %s; suppressed", outcome.suppressed, suppression_window)
    drafts = [build_expiring_soon_notification(m, now) for m in fresh]
    _insert(store, drafts, "expiring-soon", outcome)
    return outcome
