"""
Scheduled run and app startup

- run_meal_expiry_check_job(): builds the store, runs, closes; never raises
- lifespan: settings validated at startup; interval job registered when enabled
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from foodsave.config import Settings, get_settings
from foodsave.core.constants import MEAL_EXPIRY_JOB_ID
from foodsave.scheduler import meal_expiry_job


class ClosingStore:
    def __init__(self, inner):
        self._inner = inner
        self.closed = False

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def close(self):
        self.closed = True


@pytest.fixture
def settings():
    return Settings(_env_file=None, store_url="sqlite://", store_service_key="k")


@pytest.fixture
def reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestScheduledJob:
    def test_runs_and_closes_store(self, monkeypatch, settings, store, add_meal, meal_status):
        add_meal("A", available_until=datetime.now(timezone.utc) - timedelta(hours=1))
        wrapped = ClosingStore(store)
        monkeypatch.setattr(meal_expiry_job, "get_settings", lambda: settings)
        monkeypatch.setattr(meal_expiry_job, "build_store", lambda s: wrapped)

        meal_expiry_job.run_meal_expiry_check_job()

        assert meal_status("A") == "expired"
        assert wrapped.closed

    def test_fatal_error_is_logged_not_raised(self, monkeypatch, settings, failing_store, caplog):
        broken = failing_store("fetch_expired_meals")
        monkeypatch.setattr(meal_expiry_job, "get_settings", lambda: settings)
        monkeypatch.setattr(meal_expiry_job, "build_store", lambda s: broken)

        meal_expiry_job.run_meal_expiry_check_job()

        assert "Meal expiry job aborted (scan)" in caplog.text

    def test_store_construction_error_is_logged_not_raised(self, monkeypatch, settings, caplog):
        def broken_build(s):
            raise ValueError("bad STORE_URL")

        monkeypatch.setattr(meal_expiry_job, "get_settings", lambda: settings)
        monkeypatch.setattr(meal_expiry_job, "build_store", broken_build)

        meal_expiry_job.run_meal_expiry_check_job()

        assert "Meal expiry job failed: bad STORE_URL" in caplog.text


class TestStartup:
    def test_missing_store_config_is_fatal(self, monkeypatch, reset_settings_cache):
        monkeypatch.delenv("STORE_URL", raising=False)
        monkeypatch.delenv("STORE_SERVICE_KEY", raising=False)
        monkeypatch.setitem(Settings.model_config, "env_file", None)

        with pytest.raises(ValidationError):
            get_settings()

    def test_scheduler_registered_when_enabled(self, monkeypatch, reset_settings_cache):
        from foodsave.main import _scheduler, app

        monkeypatch.setenv("STORE_URL", "sqlite://")
        monkeypatch.setenv("STORE_SERVICE_KEY", "k")
        monkeypatch.setenv("SCHEDULER_ENABLED", "true")
        monkeypatch.setenv("EXPIRY_CHECK_INTERVAL_MINUTES", "15")

        with TestClient(app):
            job = _scheduler.get_job(MEAL_EXPIRY_JOB_ID)
            assert job is not None
            assert job.trigger.interval == timedelta(minutes=15)
        assert not _scheduler.running
