"""
Settings and store selection

- required STORE_URL / STORE_SERVICE_KEY (startup-fatal when missing or blank)
- expiry policy from settings
- build_store(): REST for http(s), SQL otherwise
"""
from datetime import timedelta

import pytest
from pydantic import ValidationError

from foodsave.config import Settings
from foodsave.db.session import database_url
from foodsave.services.store.factory import build_store, is_rest_url
from foodsave.services.store.rest_store import RestExpiryStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("STORE_URL", "STORE_SERVICE_KEY", "EXPIRING_SOON_HOURS", "ALERT_SUPPRESSION_HOURS"):
        monkeypatch.delenv(key, raising=False)


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestSettings:
    def test_missing_required_fails(self):
        with pytest.raises(ValidationError) as exc:
            _settings()
        missing = {err["loc"][0] for err in exc.value.errors()}
        assert missing == {"store_url", "store_service_key"}

    def test_blank_key_fails(self):
        with pytest.raises(ValidationError):
            _settings(store_url="https://demo.supabase.co", store_service_key="   ")

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("STORE_URL", " https://demo.supabase.co ")
        monkeypatch.setenv("STORE_SERVICE_KEY", "k")
        monkeypatch.setenv("EXPIRING_SOON_HOURS", "4")

        s = _settings()

        assert s.store_url == "https://demo.supabase.co"
        assert s.expiring_soon_hours == 4
        assert s.scheduler_enabled is False

    def test_expiry_policy_defaults(self):
        policy = _settings(store_url="sqlite://", store_service_key="k").expiry_policy()

        assert policy.expiring_soon_window == timedelta(hours=2)
        assert policy.alert_suppression_window == timedelta(hours=3)
        assert policy.retention == timedelta(days=30)

    def test_non_positive_window_rejected(self):
        with pytest.raises(ValidationError):
            _settings(store_url="sqlite://", store_service_key="k", alert_suppression_hours=0)


class TestStoreSelection:
    def test_is_rest_url(self):
        assert is_rest_url("https://demo.supabase.co")
        assert is_rest_url("HTTP://localhost:54321")
        assert not is_rest_url("postgresql://foodsave@localhost/foodsave")

    def test_build_rest_store(self):
        store = build_store(_settings(store_url="https://demo.supabase.co", store_service_key="k"))
        try:
            assert isinstance(store, RestExpiryStore)
        finally:
            store.close()

    def test_database_url_uses_key_as_password(self):
        url = database_url("postgresql://foodsave@db:5432/foodsave", "s3cret")
        assert url == "postgresql://foodsave:s3cret@db:5432/foodsave"

    def test_database_url_keeps_explicit_password(self):
        url = database_url("postgresql://foodsave:pw@db/foodsave", "s3cret")
        assert url == "postgresql://foodsave:pw@db/foodsave"

    def test_sqlite_url_untouched(self):
        assert database_url("sqlite:///foodsave.db", "s3cret") == "sqlite:///foodsave.db"
