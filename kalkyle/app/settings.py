"""Runtime configuration read from the process environment.

Required:
    SUPABASE_URL        Project base URL (``https://<ref>.supabase.co``).
    SUPABASE_ANON_KEY   Public anon key sent as ``apikey``.

Optional:
    KALKYLE_REQUEST_TIMEOUT_S   Per-request timeout (default 10).
    KALKYLE_LOAD_TIMEOUT_S      Whole initial-load timeout (default 15).
    KALKYLE_READ_RETRIES        Extra GET attempts on timeouts (default 2).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlparse

from kalkyle.adapters.http_client import HttpConfig
from kalkyle.usecases.load_graph import DEFAULT_LOAD_TIMEOUT_S

log = logging.getLogger(__name__)


class SettingsError(ValueError):
    """The environment does not describe a usable remote store."""


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_anon_key: str
    request_timeout_s: float = 10.0
    load_timeout_s: float = DEFAULT_LOAD_TIMEOUT_S
    read_retries: int = 2

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        url = (env.get("SUPABASE_URL") or "").strip()
        key = (env.get("SUPABASE_ANON_KEY") or "").strip()
        if not url or not key:
            log.error(
                "Missing Supabase environment variables (url=%r, key %s)",
                url,
                "exists" if key else "missing",
            )
            raise SettingsError("Missing Supabase environment variables")
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise SettingsError(f"Invalid Supabase URL: {url}")

        return cls(
            supabase_url=url.rstrip("/"),
            supabase_anon_key=key,
            request_timeout_s=_positive_float(env, "KALKYLE_REQUEST_TIMEOUT_S", 10.0),
            load_timeout_s=_positive_float(env, "KALKYLE_LOAD_TIMEOUT_S", DEFAULT_LOAD_TIMEOUT_S),
            read_retries=_non_negative_int(env, "KALKYLE_READ_RETRIES", 2),
        )

    def http_config(self) -> HttpConfig:
        return HttpConfig(request_timeout_s=self.request_timeout_s, read_retries=self.read_retries)


def _positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise SettingsError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise SettingsError(f"{name} must be positive, got {raw!r}")
    return value


def _non_negative_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise SettingsError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise SettingsError(f"{name} must not be negative, got {raw!r}")
    return value
