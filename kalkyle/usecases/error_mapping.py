"""Translate adapter errors into engine-level ``RemoteError`` instances."""

from __future__ import annotations

from typing import Optional

from kalkyle.adapters.api_errors import (
    FOREIGN_KEY_VIOLATION,
    INSUFFICIENT_PRIVILEGE,
    UNIQUE_VIOLATION,
    ApiClientError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
    extract_error_hint,
)
from kalkyle.domain.errors import EngineError, RemoteError


def map_api_error(
    exc: Exception,
    *,
    default_code: str = "REMOTE_ERROR",
    default_message: Optional[str] = None,
) -> EngineError:
    """Map adapter exceptions to stable ``RemoteError`` codes.

    Engine errors pass through untouched. Anything else that escapes a
    gateway call (including unexpected exceptions) becomes a ``RemoteError``
    so callers only ever see the engine taxonomy.
    """
    if isinstance(exc, EngineError):
        return exc
    if isinstance(exc, ApiTimeoutError):
        return RemoteError("Request timed out. Check connection.", code="REQUEST_TIMEOUT")
    if isinstance(exc, ApiClientError):
        status = exc.status or 0
        hint = exc.hint or extract_error_hint(getattr(exc, "payload", None))
        if status in (401, 403) or exc.code == INSUFFICIENT_PRIVILEGE:
            return RemoteError(
                "Not authorized for this organization.", code="AUTH_FAILED", status=status
            )
        if exc.code == FOREIGN_KEY_VIOLATION:
            return RemoteError(
                _compose_error_message("Referenced record does not exist", hint),
                code="CONSTRAINT_VIOLATION",
                status=status,
            )
        if exc.code == UNIQUE_VIOLATION:
            return RemoteError(
                _compose_error_message("Record already exists", hint),
                code="CONSTRAINT_VIOLATION",
                status=status,
            )
        if exc.is_constraint_violation:
            return RemoteError(
                _compose_error_message("Rejected by a database constraint", hint),
                code="CONSTRAINT_VIOLATION",
                status=status,
            )
        label = f"Request failed (HTTP {status})" if status else "Request failed"
        return RemoteError(
            _compose_error_message(label, hint), code="REQUEST_FAILED", status=status
        )
    if isinstance(exc, ApiServerError):
        return RemoteError("Server error, try again.", code="SERVER_ERROR", status=exc.status)
    if isinstance(exc, ApiError):
        return RemoteError(str(exc), code="API_ERROR", status=exc.status)

    message = default_message or str(exc) or "Unexpected error."
    return RemoteError(message, code=default_code)


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_api_error"]
