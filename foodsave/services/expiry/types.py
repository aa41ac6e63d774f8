"""Typed records for the meal expiry check. Same shape regardless of which store backs the run."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Literal, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from foodsave.core.constants import RUN_STATUS_PARTIAL, RUN_STATUS_SUCCESS
from foodsave.core.errors import ErrorKind

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Naive timestamps (SQLite) are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class MealRecord(BaseModel):
    """Projection of a meals row: the fields the expiry check reads."""

    id: str
    title: str = ""
    merchant_id: str
    available_until: datetime
    status: str | None = None
    remaining_quantity: int = Field(0, ge=0)

    @field_validator("id", "merchant_id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        return str(v) if v is not None else v

    @field_validator("title", mode="before")
    @classmethod
    def null_title(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("remaining_quantity", mode="before")
    @classmethod
    def null_quantity(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("available_until", mode="after")
    @classmethod
    def utc(cls, v: datetime) -> datetime:
        return as_utc(v)


def meal_records(rows: Iterable[dict[str, Any]]) -> list[MealRecord]:
    """Validate store rows; a row that still fails (no id, merchant or deadline) is logged and skipped."""
    meals: list[MealRecord] = []
    for row in rows:
        try:
            meals.append(MealRecord.model_validate(row))
        except ValidationError as e:
            meal_id = row.get("id") if isinstance(row, dict) else None
            logger.warning("Skipping unreadable meal row %s: %s", meal_id, e.errors(include_url=False))
    return meals


# --- Notification payloads (notifications.data), one model per type ---


class MealExpiredPayload(BaseModel):
    meal_id: str = Field(..., min_length=1)
    meal_title: str
    expired_at: datetime
    remaining_quantity: int


class MealExpiringSoonPayload(BaseModel):
    meal_id: str = Field(..., min_length=1)
    meal_title: str
    expires_at: datetime
    hours_left: int = Field(..., ge=1)
    remaining_quantity: int


NotificationPayload = Union[MealExpiredPayload, MealExpiringSoonPayload]


class NotificationDraft(BaseModel):
    """A notification row to insert. `created_at` is the run timestamp so dedup windows share one clock."""

    user_id: str
    title: str
    message: str
    type: Literal["meal_expired", "meal_expiring_soon"]
    payload: NotificationPayload
    created_at: datetime

    def to_row(self) -> dict[str, Any]:
        """Column dict as stored (payload lives in the `data` column)."""
        return {
            "user_id": self.user_id,
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "data": self.payload.model_dump(mode="json"),
            "is_read": False,
            "created_at": self.created_at.isoformat(),
        }


# --- Run results ---


class StageFailure(BaseModel):
    stage: ErrorKind
    error: str


@dataclass
class StageOutcome:
    """What one notifier class did: drafts built vs rows actually inserted."""

    attempted: int = 0
    sent: int = 0
    suppressed: int = 0
    failures: list[StageFailure] = field(default_factory=list)


class RunSummary(BaseModel):
    timestamp: datetime
    expired_meals_count: int = 0
    soon_to_expire_count: int = 0
    alerts_suppressed: int = 0
    notifications_attempted: int = 0
    notifications_sent: int = 0
    expired_notifications_sent: int = 0
    expiring_soon_notifications_sent: int = 0
    notifications_cleaned: int = 0
    errors: list[StageFailure] = Field(default_factory=list)
    status: str = RUN_STATUS_SUCCESS

    def finalize(self) -> "RunSummary":
        self.status = RUN_STATUS_PARTIAL if self.errors else RUN_STATUS_SUCCESS
        return self
