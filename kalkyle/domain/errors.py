"""Domain-level error types returned by engine operations.

These errors cross the engine boundary inside a ``Result`` and never leak
transport-specific exception details; adapters raise the ``ApiError`` family
and ``kalkyle.usecases.error_mapping`` translates those into ``RemoteError``.
"""
from __future__ import annotations

from typing import Optional


class EngineError(Exception):
    """Base class for errors surfaced by the synchronization engine."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class RemoteError(EngineError):
    """The remote store rejected or could not complete a request.

    ``reason`` is a user-presentable sentence; ``status`` carries the HTTP
    status when one was received.
    """

    def __init__(
        self,
        reason: str,
        *,
        code: str = "REMOTE_ERROR",
        status: Optional[int] = None,
    ) -> None:
        super().__init__(code, reason)
        self.reason = reason
        self.status = status


class NotFoundError(EngineError):
    """A required entity is missing from the local graph."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__("NOT_FOUND", f"{entity} {entity_id!r} not found")
        self.entity = entity
        self.entity_id = entity_id


class LoadError(EngineError):
    """The initial graph load failed; the graph was left untouched."""

    def __init__(self, message: str, *, cause: Optional[EngineError] = None) -> None:
        super().__init__("LOAD_FAILED", message)
        self.cause = cause
