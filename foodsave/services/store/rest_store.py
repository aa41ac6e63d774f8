"""PostgREST (Supabase REST) store client: lowest level, sends filtered requests only.

Filters use PostgREST operators: ?status=eq.available&available_until=lt.<iso>.
Errors (transport, non-2xx, unreadable body) raise StoreError; the expiry stages decide fatality.
Reads page with limit/offset until a page comes back short, so max-rows never truncates a result.
"""
import json
from datetime import datetime
from typing import Any, Sequence

import httpx

from foodsave.core.constants import (
    MEAL_STATUS_AVAILABLE,
    MEAL_STATUS_EXPIRED,
    STORE_PAGE_SIZE,
    STORE_TIMEOUT_SECONDS,
)
from foodsave.core.errors import StoreError
from foodsave.services.expiry.types import MealRecord, NotificationDraft, meal_records
from foodsave.services.store.base import MEAL_FIELDS

REST_PATH = "/rest/v1"
MEALS_TABLE = "meals"
NOTIFICATIONS_TABLE = "notifications"

Params = list[tuple[str, str]]


class RestStoreConfig:
    """Base URL and privileged (service role) key for the PostgREST endpoint."""

    __slots__ = ("base_url", "service_key", "timeout", "page_size")

    def __init__(
        self,
        *,
        base_url: str,
        service_key: str,
        timeout: float = STORE_TIMEOUT_SECONDS,
        page_size: int = STORE_PAGE_SIZE,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        if not self.base_url.endswith(REST_PATH):
            self.base_url += REST_PATH
        self.service_key = service_key.strip()
        self.timeout = timeout
        self.page_size = page_size

    def headers(self) -> dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }


def _in_list(values: Sequence[str]) -> str:
    """PostgREST in.(...) filter; values double-quoted so commas/parens inside ids are safe."""
    return "in.(" + ",".join(json.dumps(str(v)) for v in values) + ")"


def _ts(value: datetime) -> str:
    return value.isoformat()


class RestExpiryStore:
    """Expiry store over one httpx.Client (connection reuse across the run's requests)."""

    def __init__(self, config: RestStoreConfig, *, client: httpx.Client | None = None) -> None:
        self._config = config
        self._client = client or httpx.Client(
            base_url=config.base_url,
            headers=config.headers(),
            timeout=config.timeout,
        )

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Params | None = None,
        json_body: Any = None,
        prefer: str | None = None,
    ) -> Any:
        headers = {"Prefer": prefer} if prefer else None
        try:
            r = self._client.request(method, f"/{table}", params=params, json=json_body, headers=headers)
        except httpx.HTTPError as e:
            raise StoreError(f"Store request failed ({method} {table}): {e}") from e
        if not r.is_success:
            detail = r.text[:500] if r.text else None
            message = f"Store API error {r.status_code} ({method} {table})"
            try:
                body = r.json()
                if isinstance(body, dict) and body.get("message"):
                    message = f"{message}: {body['message']}"
            except ValueError:
                pass
            raise StoreError(message, detail=detail)
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise StoreError(f"Store returned invalid JSON ({method} {table})", detail=r.text[:500]) from e

    def _get_all(self, table: str, params: Params) -> list[Any]:
        """GET every matching row, one page of page_size at a time. params must carry a total order."""
        size = self._config.page_size
        rows: list[Any] = []
        while True:
            page = self._request(
                "GET",
                table,
                params=[*params, ("limit", str(size)), ("offset", str(len(rows)))],
            ) or []
            rows.extend(page)
            if len(page) < size:
                return rows

    def _meals(self, params: Params) -> list[MealRecord]:
        return meal_records(self._get_all(MEALS_TABLE, [("select", ",".join(MEAL_FIELDS)), *params]))

    def fetch_expired_meals(self, now: datetime) -> list[MealRecord]:
        return self._meals([
            ("status", f"eq.{MEAL_STATUS_AVAILABLE}"),
            ("available_until", f"lt.{_ts(now)}"),
            ("order", "available_until.asc,id.asc"),
        ])

    def mark_meals_expired(self, meal_ids: Sequence[str], now: datetime) -> list[str]:
        if not meal_ids:
            return []
        rows = self._request(
            "PATCH",
            MEALS_TABLE,
            params=[
                ("id", _in_list(meal_ids)),
                ("status", f"eq.{MEAL_STATUS_AVAILABLE}"),
                ("select", "id"),
            ],
            json_body={"status": MEAL_STATUS_EXPIRED, "updated_at": _ts(now)},
            prefer="return=representation",
        ) or []
        return [str(row["id"]) for row in rows]

    def fetch_expiring_meals(self, now: datetime, until: datetime) -> list[MealRecord]:
        return self._meals([
            ("status", f"eq.{MEAL_STATUS_AVAILABLE}"),
            ("available_until", f"gt.{_ts(now)}"),
            ("available_until", f"lt.{_ts(until)}"),
            ("remaining_quantity", "gt.0"),
            ("order", "available_until.asc,id.asc"),
        ])

    def fetch_alert_payloads(self, notification_type: str, since: datetime) -> list[dict[str, Any]]:
        rows = self._get_all(
            NOTIFICATIONS_TABLE,
            [
                ("select", "data"),
                ("type", f"eq.{notification_type}"),
                ("created_at", f"gte.{_ts(since)}"),
                ("order", "id.asc"),
            ],
        )
        return [row.get("data") or {} for row in rows]

    def insert_notifications(self, drafts: Sequence[NotificationDraft]) -> int:
        if not drafts:
            return 0
        self._request(
            "POST",
            NOTIFICATIONS_TABLE,
            json_body=[d.to_row() for d in drafts],
            prefer="return=minimal",
        )
        return len(drafts)

    def delete_read_notifications(self, before: datetime) -> int:
        rows = self._request(
            "DELETE",
            NOTIFICATIONS_TABLE,
            params=[
                ("created_at", f"lt.{_ts(before)}"),
                ("is_read", "eq.true"),
                ("select", "id"),
            ],
            prefer="return=representation",
        ) or []
        return len(rows)

    def close(self) -> None:
        self._client.close()
