"""
Error taxonomy shared by the store, the handlers and the HTTP layer.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-03-05T10:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


class DrinkLogError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500
    category = "internal"
    # Client-facing description of the operation that failed, set by the routes.
    operation: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        category: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        # Status reported by the remote host, if any.
        self.status = status
        if category:
            self.category = category


class ValidationError(DrinkLogError):
    status_code = 400
    category = "validation"


class AuthError(DrinkLogError):
    status_code = 401
    category = "auth"


class NotFoundError(DrinkLogError):
    status_code = 404
    category = "not_found"


class StoreError(DrinkLogError):
    status_code = 500
    category = "store"


class ConflictError(StoreError):
    """The stored revision changed between read and write."""

    category = "conflict"


class RateLimitError(DrinkLogError):
    status_code = 429
    category = "rate_limited"


def error_envelope(message: str, error: Any = None, **extra: Any) -> dict:
    payload = {
        "success": False,
        "message": message,
        "error": error,
        "timestamp": utc_timestamp(),
    }
    payload.update(extra)
    return payload
