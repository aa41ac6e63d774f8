"""Store collaborator used by the expiry check. Implemented over PostgREST (rest_store) and SQLAlchemy (sql_store)."""
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol, Sequence

if TYPE_CHECKING:
    from foodsave.services.expiry.types import MealRecord, NotificationDraft

# Projection read from meals (same for both backends)
MEAL_FIELDS = ("id", "title", "merchant_id", "available_until", "status", "remaining_quantity")


class ExpiryStore(Protocol):
    """
    Every method returns or raises StoreError. Reads return every matching row, however many pages that takes.
    Timestamps passed in are timezone-aware UTC.
    """

    def fetch_expired_meals(self, now: datetime) -> list["MealRecord"]:
        """status = available AND available_until < now."""
        ...

    def mark_meals_expired(self, meal_ids: Sequence[str], now: datetime) -> list[str]:
        """Set status = expired, updated_at = now where id in meal_ids AND status = available. Returns ids changed."""
        ...

    def fetch_expiring_meals(self, now: datetime, until: datetime) -> list["MealRecord"]:
        """status = available AND now < available_until < until AND remaining_quantity > 0."""
        ...

    def fetch_alert_payloads(self, notification_type: str, since: datetime) -> list[dict[str, Any]]:
        """`data` of notifications with this type and created_at >= since."""
        ...

    def insert_notifications(self, drafts: Sequence["NotificationDraft"]) -> int:
        """One batched insert. Returns rows inserted."""
        ...

    def delete_read_notifications(self, before: datetime) -> int:
        """Delete where is_read AND created_at < before. Returns rows deleted."""
        ...

    def close(self) -> None:
        ...
