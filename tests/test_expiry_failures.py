"""
Error propagation

- fatal: expired scan, transition, expiring-soon scan -> ExpiryCheckError, later stages skipped
- non-fatal: notification inserts, alert history read, cleanup -> logged, status 'partial'
"""
from datetime import timedelta

import pytest

from foodsave.core.constants import RUN_STATUS_PARTIAL
from foodsave.core.errors import ErrorKind, ExpiryCheckError
from foodsave.services.expiry import run_meal_expiry_check


@pytest.fixture
def seeded(now, add_meal):
    add_meal("A", available_until=now - timedelta(hours=1))
    add_meal("B", available_until=now + timedelta(minutes=90))


# ===========================================================================
# Fatal
# ===========================================================================
class TestFatal:
    def test_expired_scan_failure_aborts(self, seeded, now, failing_store):
        store = failing_store("fetch_expired_meals")

        with pytest.raises(ExpiryCheckError) as exc:
            run_meal_expiry_check(store, now=now)

        assert exc.value.kind is ErrorKind.SCAN
        assert exc.value.fatal
        assert store.calls == ["fetch_expired_meals"]

    def test_transition_failure_sends_no_notifications(self, seeded, now, failing_store, meal_status, notifications):
        store = failing_store("mark_meals_expired")

        with pytest.raises(ExpiryCheckError) as exc:
            run_meal_expiry_check(store, now=now)

        assert exc.value.kind is ErrorKind.TRANSITION
        assert "insert_notifications" not in store.calls
        assert meal_status("A") == "available"
        assert notifications() == []

    def test_expiring_scan_failure_aborts_after_expired_notices(self, seeded, now, failing_store, notifications):
        store = failing_store("fetch_expiring_meals")

        with pytest.raises(ExpiryCheckError) as exc:
            run_meal_expiry_check(store, now=now)

        assert exc.value.kind is ErrorKind.SCAN
        assert "delete_read_notifications" not in store.calls
        # expired stage already committed before the second scan
        assert len(notifications("meal_expired")) == 1

    def test_no_transition_call_when_nothing_expired(self, now, add_meal, failing_store):
        add_meal("B", available_until=now + timedelta(minutes=90))
        store = failing_store("mark_meals_expired")

        summary = run_meal_expiry_check(store, now=now)

        assert "mark_meals_expired" not in store.calls
        assert summary.expired_meals_count == 0


# ===========================================================================
# Non-fatal
# ===========================================================================
class TestNonFatal:
    def test_insert_failure_is_partial(self, seeded, now, failing_store, meal_status):
        store = failing_store("insert_notifications")

        summary = run_meal_expiry_check(store, now=now)

        assert summary.status == RUN_STATUS_PARTIAL
        assert meal_status("A") == "expired"
        assert summary.expired_meals_count == 1
        assert summary.soon_to_expire_count == 1
        assert summary.notifications_attempted == 2
        assert summary.notifications_sent == 0
        assert [e.stage for e in summary.errors] == [ErrorKind.NOTIFY, ErrorKind.NOTIFY]
        assert store.calls[-1] == "delete_read_notifications"

    def test_alert_history_failure_skips_expiring_soon(self, seeded, now, failing_store, notifications):
        store = failing_store("fetch_alert_payloads")

        summary = run_meal_expiry_check(store, now=now)

        assert summary.status == RUN_STATUS_PARTIAL
        assert summary.expired_notifications_sent == 1
        assert summary.expiring_soon_notifications_sent == 0
        assert notifications("meal_expiring_soon") == []
        assert [e.stage for e in summary.errors] == [ErrorKind.NOTIFY]

    def test_cleanup_failure_is_partial(self, seeded, now, failing_store):
        store = failing_store("delete_read_notifications")

        summary = run_meal_expiry_check(store, now=now)

        assert summary.status == RUN_STATUS_PARTIAL
        assert summary.notifications_sent == 2
        assert summary.notifications_cleaned == 0
        assert [e.stage for e in summary.errors] == [ErrorKind.CLEANUP]


class TestErrorKind:
    @pytest.mark.parametrize(
        "kind,fatal",
        [
            (ErrorKind.SCAN, True),
            (ErrorKind.TRANSITION, True),
            (ErrorKind.NOTIFY, False),
            (ErrorKind.CLEANUP, False),
        ],
    )
    def test_fatal(self, kind, fatal):
        assert kind.fatal is fatal
