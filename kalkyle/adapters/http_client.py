"""Shared HTTP transport for the PostgREST adapters.

One ``requests.Session`` per principal. Every request carries the project
``apikey`` and the principal's bearer token; only reads are retried.

Dependencies:
    - ``requests`` for network I/O.
    - ``kalkyle.adapters.api_errors.ApiTimeoutError`` for typed transport failures.

Call context:
    - Constructed by ``kalkyle.adapters.supabase_rest.SupabaseRestGateway``.
    - Used only inside adapter methods; use cases interact through ports.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from kalkyle.adapters.api_errors import ApiError, ApiTimeoutError

log = logging.getLogger(__name__)


@dataclass
class HttpConfig:
    """Timeout and retry configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Default timeout in seconds for every call.
        read_retries: Extra attempts for GET requests after a timeout or
            connection failure. Writes are never retried.
    """
    request_timeout_s: float = 10
    read_retries: int = 2


class RetryingSession:
    """Transport only: status codes are left to the table adapters."""

    def __init__(
        self,
        api_key: str,
        cfg: HttpConfig,
        *,
        access_token: Optional[str] = None,
    ) -> None:
        """Create a session bound to one principal.

        Args:
            api_key: Project anon key sent as ``apikey``.
            cfg: Shared timeout and retry settings.
            access_token: User JWT; falls back to ``api_key`` for anonymous use.
        """
        self.session = requests.Session()
        self.api_key = api_key
        self.access_token = access_token
        self.cfg = cfg

    def _headers(
        self, *, json_body: bool = False, prefer: Optional[str] = None
    ) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
        }
        if json_body:
            headers["Content-Type"] = "application/json"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """Send a GET request with retries on timeout/connectivity failures.

        Raises:
            ApiTimeoutError: If all attempts fail with timeout/connection errors.
        """
        context = f"GET {url}"
        last_err: ApiTimeoutError | None = None
        for attempt in range(self.cfg.read_retries + 1):
            try:
                return self.session.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=timeout or self.cfg.request_timeout_s,
                )
            except (req_exc.Timeout, req_exc.ConnectionError):
                log.debug("%s failed (attempt %d)", context, attempt + 1)
                last_err = ApiTimeoutError(f"Timeout contacting {url}", context=context)
            except req_exc.RequestException as exc:
                raise ApiError(str(exc), context=context) from exc
        raise last_err

    def post(
        self,
        url: str,
        *,
        json_body: Any,
        params: Optional[Dict[str, Any]] = None,
        prefer: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        return self._send("POST", url, json_body=json_body, params=params, prefer=prefer, timeout=timeout)

    def patch(
        self,
        url: str,
        *,
        json_body: Any,
        params: Optional[Dict[str, Any]] = None,
        prefer: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        return self._send("PATCH", url, json_body=json_body, params=params, prefer=prefer, timeout=timeout)

    def delete(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        prefer: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        return self._send("DELETE", url, json_body=None, params=params, prefer=prefer, timeout=timeout)

    def _send(
        self,
        method: str,
        url: str,
        *,
        json_body: Any,
        params: Optional[Dict[str, Any]],
        prefer: Optional[str],
        timeout: Optional[float],
    ) -> requests.Response:
        """Single-attempt write. A lost response may still have been applied
        server-side, so writes are not retried."""
        context = f"{method} {url}"
        data = None if json_body is None else json.dumps(json_body)
        try:
            return self.session.request(
                method,
                url,
                params=params,
                data=data,
                headers=self._headers(json_body=json_body is not None, prefer=prefer),
                timeout=timeout or self.cfg.request_timeout_s,
            )
        except (req_exc.Timeout, req_exc.ConnectionError) as exc:
            raise ApiTimeoutError(f"Timeout contacting {url}", context=context) from exc
        except req_exc.RequestException as exc:
            raise ApiError(str(exc), context=context) from exc
