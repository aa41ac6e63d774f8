"""
Error kinds for the meal expiry check and the failure response shape.

Fatal kinds (SCAN, TRANSITION) abort the run; NOTIFY and CLEANUP are logged and recorded
in the run summary. Add new kinds here instead of deciding fatality at call sites.
"""
from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any

# HTTP status codes for the trigger
STATUS_OK = 200
STATUS_INTERNAL_ERROR = 500


class ErrorKind(str, enum.Enum):
    SCAN = "scan"
    TRANSITION = "transition"
    NOTIFY = "notify"
    CLEANUP = "cleanup"

    @property
    def fatal(self) -> bool:
        return self in (ErrorKind.SCAN, ErrorKind.TRANSITION)


class StoreError(Exception):
    """A store request failed (transport error, non-2xx response, database error)."""

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail


class ExpiryCheckError(Exception):
    """A stage of the expiry check failed. `kind` decides whether the run aborts."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def fatal(self) -> bool:
        return self.kind.fatal


def failure_response(exc: Exception, *, now: datetime | None = None) -> dict[str, Any]:
    """Body for a failed run: {success: false, error, timestamp}."""
    ts = now or datetime.now(timezone.utc)
    return {
        "success": False,
        "error": str(exc) or exc.__class__.__name__,
        "timestamp": ts.isoformat(),
    }
