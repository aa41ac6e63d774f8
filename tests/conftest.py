"""
Shared fixtures

- in-memory SQLite store (isolated per test)
- meal / notification row helpers
- store wrapper that fails chosen operations
"""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from foodsave.core.errors import StoreError
from foodsave.db.base import Base
from foodsave.models.meal import Meal
from foodsave.models.notification import Notification
from foodsave.services.store.sql_store import SqlExpiryStore

NOW = datetime(2026, 3, 14, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return SqlExpiryStore(session_factory)


@pytest.fixture
def add_meal(session_factory):
    """Insert a meal row; returns its id."""

    def _add(
        meal_id: str,
        *,
        available_until: datetime,
        status: str = "available",
        remaining_quantity: int = 5,
        title: str | None = None,
        merchant_id: str = "merchant-1",
    ) -> str:
        db = session_factory()
        try:
            db.add(
                Meal(
                    id=meal_id,
                    title=title or f"Meal {meal_id}",
                    merchant_id=merchant_id,
                    available_until=available_until,
                    status=status,
                    remaining_quantity=remaining_quantity,
                    created_at=NOW - timedelta(days=1),
                    updated_at=NOW - timedelta(days=1),
                )
            )
            db.commit()
        finally:
            db.close()
        return meal_id

    return _add


@pytest.fixture
def add_notification(session_factory):
    """Insert a notification row; returns its id."""

    def _add(
        *,
        type: str = "meal_expiring_soon",
        created_at: datetime,
        data: dict | None = None,
        is_read: bool = False,
        user_id: str = "merchant-1",
    ) -> int:
        db = session_factory()
        try:
            row = Notification(
                user_id=user_id,
                title="t",
                message="m",
                type=type,
                payload=data or {},
                is_read=is_read,
                created_at=created_at,
            )
            db.add(row)
            db.commit()
            return row.id
        finally:
            db.close()

    return _add


@pytest.fixture
def meal_status(session_factory):
    def _status(meal_id: str) -> str | None:
        db = session_factory()
        try:
            row = db.query(Meal).filter(Meal.id == meal_id).first()
            return row.status if row else None
        finally:
            db.close()

    return _status


@pytest.fixture
def notifications(session_factory):
    """All notification rows as (type, user_id, data, is_read), oldest first."""

    def _rows(type: str | None = None) -> list[Notification]:
        db = session_factory()
        try:
            q = db.query(Notification)
            if type:
                q = q.filter(Notification.type == type)
            rows = q.order_by(Notification.id.asc()).all()
            db.expunge_all()
            return rows
        finally:
            db.close()

    return _rows


class FailingStore:
    """Delegates to a real store; operations named in fail_on raise StoreError. Records call order."""

    def __init__(self, inner, *fail_on: str) -> None:
        self._inner = inner
        self._fail_on = set(fail_on)
        self.calls: list[str] = []

    def __getattr__(self, name):
        attr = getattr(self._inner, name)
        if not callable(attr):
            return attr

        def _call(*args, **kwargs):
            self.calls.append(name)
            if name in self._fail_on:
                raise StoreError(f"{name} unavailable")
            return attr(*args, **kwargs)

        return _call


@pytest.fixture
def failing_store(store):
    def _make(*fail_on: str) -> FailingStore:
        return FailingStore(store, *fail_on)

    return _make
