"""SQLAlchemy-backed store: self-hosted Postgres, or SQLite for local runs and tests."""
from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from foodsave.core.constants import MEAL_STATUS_AVAILABLE, MEAL_STATUS_EXPIRED
from foodsave.core.errors import StoreError
from foodsave.models.meal import Meal
from foodsave.models.notification import Notification
from foodsave.services.expiry.types import MealRecord, NotificationDraft, meal_records
from foodsave.services.store.base import MEAL_FIELDS


def _to_records(rows: Sequence[Meal]) -> list[MealRecord]:
    return meal_records({f: getattr(r, f) for f in MEAL_FIELDS} for r in rows)


class SqlExpiryStore:
    """One session per call; writes commit before returning."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _fail(self, what: str, e: SQLAlchemyError) -> StoreError:
        return StoreError(f"Database error while {what}: {e.__class__.__name__}", detail=str(e)[:500])

    def fetch_expired_meals(self, now: datetime) -> list[MealRecord]:
        db = self._session_factory()
        try:
            rows = (
                db.query(Meal)
                .filter(Meal.status == MEAL_STATUS_AVAILABLE, Meal.available_until < now)
                .order_by(Meal.available_until.asc())
                .all()
            )
            return _to_records(rows)
        except SQLAlchemyError as e:
            raise self._fail("reading expired meals", e) from e
        finally:
            db.close()

    def mark_meals_expired(self, meal_ids: Sequence[str], now: datetime) -> list[str]:
        if not meal_ids:
            return []
        db = self._session_factory()
        try:
            stmt = (
                update(Meal)
                .where(Meal.id.in_(list(meal_ids)), Meal.status == MEAL_STATUS_AVAILABLE)
                .values(status=MEAL_STATUS_EXPIRED, updated_at=now)
                .returning(Meal.id)
                .execution_options(synchronize_session=False)
            )
            changed = list(db.execute(stmt).scalars().all())
            db.commit()
            return changed
        except SQLAlchemyError as e:
            db.rollback()
            raise self._fail("marking meals expired", e) from e
        finally:
            db.close()

    def fetch_expiring_meals(self, now: datetime, until: datetime) -> list[MealRecord]:
        db = self._session_factory()
        try:
            rows = (
                db.query(Meal)
                .filter(
                    Meal.status == MEAL_STATUS_AVAILABLE,
                    Meal.available_until > now,
                    Meal.available_until < until,
                    Meal.remaining_quantity > 0,
                )
                .order_by(Meal.available_until.asc())
                .all()
            )
            return _to_records(rows)
        except SQLAlchemyError as e:
            raise self._fail("reading expiring meals", e) from e
        finally:
            db.close()

    def fetch_alert_payloads(self, notification_type: str, since: datetime) -> list[dict[str, Any]]:
        db = self._session_factory()
        try:
            rows = (
                db.query(Notification.payload)
                .filter(Notification.type == notification_type, Notification.created_at >= since)
                .all()
            )
            return [r[0] or {} for r in rows]
        except SQLAlchemyError as e:
            raise self._fail("reading recent alerts", e) from e
        finally:
            db.close()

    def insert_notifications(self, drafts: Sequence[NotificationDraft]) -> int:
        if not drafts:
            return 0
        db = self._session_factory()
        try:
            db.add_all(
                Notification(
                    user_id=d.user_id,
                    title=d.title,
                    message=d.message,
                    type=d.type,
                    payload=d.payload.model_dump(mode="json"),
                    is_read=False,
                    created_at=d.created_at,
                )
                for d in drafts
            )
            db.commit()
            return len(drafts)
        except SQLAlchemyError as e:
            db.rollback()
            raise self._fail("inserting notifications", e) from e
        finally:
            db.close()

    def delete_read_notifications(self, before: datetime) -> int:
        db = self._session_factory()
        try:
            deleted = (
                db.query(Notification)
                .filter(Notification.is_read.is_(True), Notification.created_at < before)
                .delete(synchronize_session=False)
            )
            db.commit()
            return deleted
        except SQLAlchemyError as e:
            db.rollback()
            raise self._fail("deleting old notifications", e) from e
        finally:
            db.close()

    def close(self) -> None:
        # Engine and pool are shared per process (foodsave.db.session)
        pass
