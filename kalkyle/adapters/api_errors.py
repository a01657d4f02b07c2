"""Typed failures raised by the PostgREST adapters.

PostgREST reports errors as ``{"code", "message", "details", "hint"}``
where ``code`` is either a PostgreSQL SQLSTATE (``23503`` for a foreign-key
violation) or a ``PGRST*`` code of its own. The helpers below pick those
apart without ever raising, so a garbled error body still yields a usable
message.
"""

from __future__ import annotations

from typing import Any, Optional

# SQLSTATE class 23: integrity constraint violations.
CONSTRAINT_VIOLATION_PREFIX = "23"
FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"
# Row-level security rejected the row.
INSUFFICIENT_PRIVILEGE = "42501"

_SNIPPET_LIMIT = 400


class ApiError(RuntimeError):
    """Base class for REST adapter failures.

    ``context`` names the adapter call (``create[projects]``); ``payload`` is
    the decoded error body, or a text snippet when it was not JSON.
    """

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.hint = hint
        self.payload = payload
        self.context = context

    @property
    def is_constraint_violation(self) -> bool:
        return bool(self.code) and str(self.code).startswith(CONSTRAINT_VIOLATION_PREFIX)


class ApiClientError(ApiError):
    """HTTP 4xx: bad request, missing auth, RLS or constraint rejection."""


class ApiServerError(ApiError):
    """HTTP 5xx from PostgREST or the gateway in front of it."""


class ApiTimeoutError(ApiError):
    """Transport level timeout or connectivity failure."""


def parse_error_payload(resp: Any) -> Any:
    """Decoded JSON error body, else a text snippet, else None."""
    try:
        return resp.json()
    except ValueError:
        text = (getattr(resp, "text", "") or "").strip()
        return text[:_SNIPPET_LIMIT] or None


def build_error_message(ctx: str, status: int, payload: Any) -> str:
    detail = _text(payload.get("message")) if isinstance(payload, dict) else _text(payload)
    if detail:
        return f"{ctx}: {detail} (HTTP {status})"
    return f"{ctx}: HTTP {status}"


def extract_error_code(payload: Any) -> Optional[str]:
    """SQLSTATE or ``PGRST*`` code; Supabase auth errors use ``error_code``."""
    if not isinstance(payload, dict):
        return None
    for key in ("code", "error_code"):
        value = payload.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def extract_error_hint(payload: Any) -> Optional[str]:
    """``hint`` when PostgREST gave one, otherwise ``details``."""
    if isinstance(payload, dict):
        return _text(payload.get("hint")) or _text(payload.get("details"))
    return _text(payload)


def _text(value: Any, *, limit: int = 200) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    cleaned = str(value).strip()
    return cleaned[:limit] or None
