from __future__ import annotations

from kalkyle.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
)
from kalkyle.domain.errors import NotFoundError, RemoteError
from kalkyle.usecases.error_mapping import map_api_error


def test_timeout_maps_to_request_timeout() -> None:
    err = map_api_error(ApiTimeoutError("Timeout contacting x"))

    assert isinstance(err, RemoteError)
    assert err.code == "REQUEST_TIMEOUT"
    assert "timed out" in err.reason


def test_auth_failures_map_to_auth_failed() -> None:
    for exc in (
        ApiClientError("no", status=401),
        ApiClientError("rls", status=403, code="42501"),
    ):
        err = map_api_error(exc)
        assert err.code == "AUTH_FAILED"
        assert err.status == exc.status


def test_foreign_key_violation_carries_hint() -> None:
    exc = ApiClientError(
        "violates foreign key",
        status=409,
        code="23503",
        hint='Key (project_id)=(p9) is not present in table "projects".',
    )

    err = map_api_error(exc)

    assert err.code == "CONSTRAINT_VIOLATION"
    assert err.reason.startswith("Referenced record does not exist: Key (project_id)")


def test_other_constraint_violations() -> None:
    assert map_api_error(ApiClientError("dup", status=409, code="23505")).code == "CONSTRAINT_VIOLATION"
    assert map_api_error(ApiClientError("check", status=400, code="23514")).code == "CONSTRAINT_VIOLATION"


def test_plain_client_error_mentions_status() -> None:
    err = map_api_error(ApiClientError("bad", status=400, code="PGRST204"))

    assert err.code == "REQUEST_FAILED"
    assert err.reason == "Request failed (HTTP 400)."


def test_server_and_generic_api_errors() -> None:
    assert map_api_error(ApiServerError("down", status=502)).code == "SERVER_ERROR"
    generic = map_api_error(ApiError("list[organizations]: expected list response"))
    assert generic.code == "API_ERROR"
    assert "expected list" in generic.reason


def test_engine_errors_pass_through_and_unknown_errors_use_default_code() -> None:
    missing = NotFoundError("Project", "p1")
    assert map_api_error(missing) is missing

    err = map_api_error(KeyError("boom"), default_code="CREATE_FAILED")
    assert isinstance(err, RemoteError)
    assert err.code == "CREATE_FAILED"
