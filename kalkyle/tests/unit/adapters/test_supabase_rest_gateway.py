from __future__ import annotations

import json
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import pytest
from requests import exceptions as req_exc

from kalkyle.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
)
from kalkyle.adapters.http_client import HttpConfig
from kalkyle.adapters.supabase_rest import SupabaseRestGateway
from kalkyle.domain.entities import CalculatorDraft, ProjectDraft, ProjectStatus

BASE = "https://demo.supabase.co/"


class _ResponseStub:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = payload if isinstance(payload, str) else json.dumps(payload)

    def json(self) -> Any:
        if isinstance(self._payload, str):
            raise ValueError("not json")
        return self._payload


class _SessionStub:
    """Stands in for ``requests.Session``; replays responses or raises."""

    def __init__(self, responses: Sequence[Any]) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def _next(self) -> _ResponseStub:
        if not self._responses:
            raise RuntimeError("No stub response configured")
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url: str, *, params=None, headers=None, timeout=None) -> _ResponseStub:
        self.calls.append(
            {"method": "GET", "url": url, "params": params, "headers": dict(headers or {}), "timeout": timeout}
        )
        return self._next()

    def request(
        self, method: str, url: str, *, params=None, data=None, headers=None, timeout=None
    ) -> _ResponseStub:
        self.calls.append(
            {
                "method": method,
                "url": url,
                "params": params,
                "body": None if data is None else json.loads(data),
                "headers": dict(headers or {}),
                "timeout": timeout,
            }
        )
        return self._next()


def _gateway(responses: Sequence[Any], *, token: Optional[str] = "user-jwt") -> tuple:
    gateway = SupabaseRestGateway(
        BASE, "anon-key", access_token=token, cfg=HttpConfig(request_timeout_s=3, read_retries=2)
    )
    stub = _SessionStub(responses)
    gateway.session.session = stub  # type: ignore[assignment]
    return gateway, stub


def _org_row(org_id: str, created: str) -> Dict[str, Any]:
    return {
        "id": org_id,
        "name": f"Org {org_id}",
        "description": None,
        "logo": None,
        "address": None,
        "phone": None,
        "email": "post@example.no",
        "website": None,
        "created_at": created,
        "updated_at": created,
    }


def test_list_requests_newest_first_with_supabase_headers() -> None:
    rows = [_org_row("o2", "2024-05-02T10:00:00+00:00"), _org_row("o1", "2024-05-01T10:00:00+00:00")]
    gateway, stub = _gateway([_ResponseStub(rows)])

    orgs = gateway.organizations.list()

    call = stub.calls[0]
    assert call["url"] == "https://demo.supabase.co/rest/v1/organizations"
    assert call["params"] == {"select": "*", "order": "created_at.desc"}
    assert call["headers"]["apikey"] == "anon-key"
    assert call["headers"]["Authorization"] == "Bearer user-jwt"
    assert call["timeout"] == 3
    assert [o.id for o in orgs] == ["o2", "o1"]
    assert orgs[0].email == "post@example.no"


def test_anonymous_session_sends_anon_key_as_bearer() -> None:
    gateway, stub = _gateway([_ResponseStub([])], token=None)

    assert gateway.customers.list() == []
    assert stub.calls[0]["headers"]["Authorization"] == "Bearer anon-key"


def test_create_posts_single_row_and_returns_representation() -> None:
    row = {
        "id": "p-new",
        "organization_id": "o1",
        "customer_id": "c1",
        "name": "Bad",
        "description": "",
        "status": "on-hold",
        "start_date": "2024-06-01",
        "end_date": None,
        "budget": 125000,
        "created_at": "2024-06-01T08:00:00Z",
        "updated_at": "2024-06-01T08:00:00Z",
    }
    gateway, stub = _gateway([_ResponseStub([row], status_code=201)])
    draft = ProjectDraft(
        organization_id="o1",
        customer_id="c1",
        name="Bad",
        start_date=date(2024, 6, 1),
        status=ProjectStatus.ON_HOLD,
        budget=125000,
    )

    project = gateway.projects.create(draft)

    call = stub.calls[0]
    assert call["method"] == "POST"
    assert call["headers"]["Prefer"] == "return=representation"
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["body"] == [
        {
            "organization_id": "o1",
            "customer_id": "c1",
            "name": "Bad",
            "description": "",
            "status": "on-hold",
            "start_date": "2024-06-01",
            "end_date": None,
            "budget": 125000,
        }
    ]
    assert project.id == "p-new"
    assert project.status is ProjectStatus.ON_HOLD
    assert project.budget == 125000.0


def test_create_many_sends_one_batched_insert() -> None:
    def _row(calc_id: str) -> Dict[str, Any]:
        return {
            "id": calc_id,
            "organization_id": "o1",
            "project_id": "p1",
            "name": calc_id,
            "description": None,
            "entries": [],
            "summary": {},
            "created_at": "2024-06-01T08:00:00+00:00",
            "updated_at": "2024-06-01T08:00:00+00:00",
        }

    gateway, stub = _gateway([_ResponseStub([_row("k1"), _row("k2")], status_code=201)])
    drafts = [
        CalculatorDraft(organization_id="o1", project_id="p1", name="k1"),
        CalculatorDraft(organization_id="o1", project_id="p1", name="k2"),
    ]

    created = gateway.calculators.create_many(drafts)

    assert len(stub.calls) == 1
    assert [row["name"] for row in stub.calls[0]["body"]] == ["k1", "k2"]
    assert [c.id for c in created] == ["k1", "k2"]


def test_create_many_with_no_drafts_skips_the_network() -> None:
    gateway, stub = _gateway([])

    assert gateway.calculators.create_many([]) == []
    assert stub.calls == []


def test_update_and_delete_filter_on_id() -> None:
    gateway, stub = _gateway([_ResponseStub("", 204), _ResponseStub("", 204)])

    gateway.projects.update("p1", {"status": ProjectStatus.COMPLETED, "end_date": date(2024, 7, 1)})
    gateway.projects.delete("p1")

    patch, delete = stub.calls
    assert patch["method"] == "PATCH"
    assert patch["params"] == {"id": "eq.p1"}
    assert patch["body"] == {"status": "completed", "end_date": "2024-07-01"}
    assert delete["method"] == "DELETE"
    assert delete["params"] == {"id": "eq.p1"}
    assert delete["body"] is None


def test_foreign_key_violation_raises_client_error_with_code() -> None:
    payload = {
        "code": "23503",
        "message": "insert or update on table \"customers\" violates foreign key constraint",
        "details": "Key (organization_id)=(x) is not present in table \"organizations\".",
        "hint": None,
    }
    gateway, _ = _gateway([_ResponseStub(payload, status_code=409)])

    with pytest.raises(ApiClientError) as excinfo:
        gateway.customers.delete("c1")

    err = excinfo.value
    assert err.status == 409
    assert err.code == "23503"
    assert err.is_constraint_violation
    assert "is not present" in (err.hint or "")


def test_server_error_maps_to_api_server_error() -> None:
    gateway, _ = _gateway([_ResponseStub({"message": "boom"}, status_code=503)])

    with pytest.raises(ApiServerError):
        gateway.organizations.list()


def test_get_retries_timeouts_then_gives_up() -> None:
    gateway, stub = _gateway([req_exc.Timeout(), req_exc.ConnectionError(), req_exc.Timeout()])

    with pytest.raises(ApiTimeoutError):
        gateway.projects.list()

    assert len(stub.calls) == 3


def test_get_recovers_after_one_timeout() -> None:
    gateway, stub = _gateway([req_exc.Timeout(), _ResponseStub([])])

    assert gateway.projects.list() == []
    assert len(stub.calls) == 2


def test_writes_are_not_retried() -> None:
    gateway, stub = _gateway([req_exc.Timeout(), _ResponseStub([], status_code=201)])

    with pytest.raises(ApiTimeoutError):
        gateway.organizations.delete("o1")

    assert len(stub.calls) == 1


def test_non_list_body_is_rejected() -> None:
    gateway, _ = _gateway([_ResponseStub({"unexpected": True})])

    with pytest.raises(ApiError):
        gateway.organizations.list()


def test_malformed_row_is_reported_as_api_error() -> None:
    gateway, _ = _gateway([_ResponseStub([{"name": "no id"}])])

    with pytest.raises(ApiError) as excinfo:
        gateway.organizations.list()

    assert "malformed row" in str(excinfo.value)
