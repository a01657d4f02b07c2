from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Sequence, TypeVar

import requests

from kalkyle.domain.entities import (
    Calculator,
    CalculatorDraft,
    Customer,
    CustomerDraft,
    Organization,
    OrganizationDraft,
    Project,
    ProjectDraft,
)
from kalkyle.domain.ports import EntityId

from . import rows
from .api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    build_error_message,
    extract_error_code,
    extract_error_hint,
    parse_error_payload,
)
from .http_client import HttpConfig, RetryingSession

log = logging.getLogger(__name__)

E = TypeVar("E")
D = TypeVar("D")

TABLE_ORGANIZATIONS = "organizations"
TABLE_CUSTOMERS = "customers"
TABLE_PROJECTS = "projects"
TABLE_CALCULATORS = "calculators"

RETURN_REPRESENTATION = "return=representation"
RETURN_MINIMAL = "return=minimal"


class TableRestAdapter(Generic[E, D]):
    """CRUD for one PostgREST table.

    Reads come back ordered by ``created_at`` descending. Inserts ask for
    ``return=representation`` so the caller receives server-assigned ids and
    timestamps. Updates and deletes filter on ``id=eq.<id>``; a filter that
    matches nothing is not an error.
    """

    def __init__(
        self,
        base_url: str,
        table: str,
        session: RetryingSession,
        *,
        from_row: Callable[[Mapping[str, Any]], E],
        to_row: Callable[[D], Dict[str, Any]],
    ) -> None:
        if not base_url:
            raise ValueError("TableRestAdapter requires a base URL")
        self.base_url = base_url.rstrip("/")
        self.table = table
        self.session = session
        self._from_row = from_row
        self._to_row = to_row

    @property
    def url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def list(self) -> List[E]:
        ctx = f"list[{self.table}]"
        resp = self.session.get(
            self.url, params={"select": "*", "order": "created_at.desc"}
        )
        self._ensure_ok(resp, ctx)
        data = self._json_any(resp, ctx)
        if not isinstance(data, list):
            raise ApiError(f"{ctx}: expected list response", context=ctx)
        return [self._decode(row, ctx) for row in data]

    def create(self, draft: D) -> E:
        created = self._insert([self._to_row(draft)], f"create[{self.table}]")
        if len(created) != 1:
            raise ApiError(
                f"create[{self.table}]: expected one row, got {len(created)}",
                context=f"create[{self.table}]",
            )
        return created[0]

    def create_many(self, drafts: Sequence[D]) -> List[E]:
        if not drafts:
            return []
        return self._insert([self._to_row(d) for d in drafts], f"create_many[{self.table}]")

    def update(self, entity_id: EntityId, fields: Mapping[str, Any]) -> None:
        ctx = f"update[{self.table}:{entity_id}]"
        resp = self.session.patch(
            self.url,
            params={"id": f"eq.{entity_id}"},
            json_body=rows.fields_to_row(fields),
            prefer=RETURN_MINIMAL,
        )
        self._ensure_ok(resp, ctx)

    def delete(self, entity_id: EntityId) -> None:
        ctx = f"delete[{self.table}:{entity_id}]"
        resp = self.session.delete(
            self.url, params={"id": f"eq.{entity_id}"}, prefer=RETURN_MINIMAL
        )
        self._ensure_ok(resp, ctx)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _insert(self, body: List[Dict[str, Any]], ctx: str) -> List[E]:
        resp = self.session.post(self.url, json_body=body, prefer=RETURN_REPRESENTATION)
        self._ensure_ok(resp, ctx)
        data = self._json_any(resp, ctx)
        if not isinstance(data, list):
            raise ApiError(f"{ctx}: expected list response", context=ctx)
        log.debug("%s: inserted %d row(s)", ctx, len(data))
        return [self._decode(row, ctx) for row in data]

    def _decode(self, row: Any, ctx: str) -> E:
        if not isinstance(row, dict):
            raise ApiError(f"{ctx}: expected object rows", context=ctx)
        try:
            return self._from_row(row)
        except ValueError as exc:
            raise ApiError(f"{ctx}: malformed row: {exc}", payload=row, context=ctx) from exc

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        if 200 <= resp.status_code < 300:
            return
        status = resp.status_code
        payload = parse_error_payload(resp)
        message = build_error_message(ctx, status, payload)
        code = extract_error_code(payload)
        hint = extract_error_hint(payload)
        if 400 <= status < 500:
            raise ApiClientError(
                message,
                status=status,
                code=code,
                hint=hint,
                payload=payload,
                context=ctx,
            )
        if 500 <= status < 600:
            raise ApiServerError(
                message,
                status=status,
                code=code,
                payload=payload,
                context=ctx,
            )
        raise ApiError(message, status=status, payload=payload, context=ctx)

    @staticmethod
    def _json_any(resp: requests.Response, ctx: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            snippet = (getattr(resp, "text", "") or "")[:400]
            raise ApiError(f"{ctx}: invalid JSON response: {snippet}", context=ctx) from exc


class SupabaseRestGateway:
    """The four table adapters for one principal, sharing one HTTP session."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        access_token: Optional[str] = None,
        cfg: Optional[HttpConfig] = None,
    ) -> None:
        if not api_key:
            raise ValueError("SupabaseRestGateway requires an API key")
        self.cfg = cfg or HttpConfig()
        self.session = RetryingSession(api_key, self.cfg, access_token=access_token)
        self.organizations: TableRestAdapter[Organization, OrganizationDraft] = TableRestAdapter(
            base_url,
            TABLE_ORGANIZATIONS,
            self.session,
            from_row=rows.organization_from_row,
            to_row=rows.organization_draft_to_row,
        )
        self.customers: TableRestAdapter[Customer, CustomerDraft] = TableRestAdapter(
            base_url,
            TABLE_CUSTOMERS,
            self.session,
            from_row=rows.customer_from_row,
            to_row=rows.customer_draft_to_row,
        )
        self.projects: TableRestAdapter[Project, ProjectDraft] = TableRestAdapter(
            base_url,
            TABLE_PROJECTS,
            self.session,
            from_row=rows.project_from_row,
            to_row=rows.project_draft_to_row,
        )
        self.calculators: TableRestAdapter[Calculator, CalculatorDraft] = TableRestAdapter(
            base_url,
            TABLE_CALCULATORS,
            self.session,
            from_row=rows.calculator_from_row,
            to_row=rows.calculator_draft_to_row,
        )


__all__ = [
    "SupabaseRestGateway",
    "TableRestAdapter",
    "TABLE_CALCULATORS",
    "TABLE_CUSTOMERS",
    "TABLE_ORGANIZATIONS",
    "TABLE_PROJECTS",
]
