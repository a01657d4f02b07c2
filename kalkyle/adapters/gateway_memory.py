from __future__ import annotations

import threading
from dataclasses import dataclass, field, fields as dataclass_fields, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Sequence, Tuple, TypeVar
from uuid import uuid4

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

from .api_errors import FOREIGN_KEY_VIOLATION, ApiClientError, ApiError

E = TypeVar("E")
D = TypeVar("D")

Clock = Callable[[], datetime]


def _ticking_clock() -> Clock:
    """UTC clock that never returns the same instant twice."""
    last: List[datetime] = []
    lock = threading.Lock()

    def _now() -> datetime:
        with lock:
            now = datetime.now(timezone.utc)
            if last and now <= last[0]:
                now = last[0] + timedelta(microseconds=1)
            last[:] = [now]
            return now

    return _now


class _MemoryTable(Generic[E, D]):
    """One table of :class:`InMemoryGateway`; satisfies ``EntityGateway``."""

    def __init__(
        self,
        owner: "InMemoryGateway",
        name: str,
        entity_type: Callable[..., E],
        foreign_keys: Tuple[Tuple[str, str], ...] = (),
    ) -> None:
        self._owner = owner
        self.name = name
        self._entity_type = entity_type
        self._foreign_keys = foreign_keys
        self.rows: Dict[EntityId, E] = {}

    def list(self) -> List[E]:
        self._owner._enter(self.name, "list")
        with self._owner._lock:
            rows = list(self.rows.values())
        return sorted(rows, key=lambda row: row.created_at, reverse=True)

    def create(self, draft: D) -> E:
        self._owner._enter(self.name, "create")
        with self._owner._lock:
            return self._insert([draft])[0]

    def create_many(self, drafts: Sequence[D]) -> List[E]:
        self._owner._enter(self.name, "create_many")
        with self._owner._lock:
            return self._insert(list(drafts))

    def update(self, entity_id: EntityId, fields: Mapping[str, Any]) -> None:
        self._owner._enter(self.name, "update")
        with self._owner._lock:
            current = self.rows.get(entity_id)
            if current is None:
                return
            changes = dict(fields)
            for column, table in self._foreign_keys:
                if column in changes:
                    self._check_reference(table, changes[column])
            changes["updated_at"] = self._owner.clock()
            self.rows[entity_id] = replace(current, **changes)

    def delete(self, entity_id: EntityId) -> None:
        self._owner._enter(self.name, "delete")
        with self._owner._lock:
            if self.rows.pop(entity_id, None) is not None:
                self._owner._cascade(self.name, entity_id)

    # ------------------------------------------------------------------
    def _insert(self, drafts: List[D]) -> List[E]:
        # Validate the whole batch before writing anything.
        for draft in drafts:
            for column, table in self._foreign_keys:
                self._check_reference(table, getattr(draft, column))
        created: List[E] = []
        for draft in drafts:
            now = self._owner.clock()
            values = {f.name: getattr(draft, f.name) for f in dataclass_fields(draft)}
            entity = self._entity_type(
                id=str(uuid4()), created_at=now, updated_at=now, **values
            )
            self.rows[entity.id] = entity
            created.append(entity)
        return created

    def _check_reference(self, table: str, entity_id: Any) -> None:
        if entity_id not in self._owner._table(table).rows:
            raise ApiClientError(
                f"insert or update on table \"{self.name}\" violates foreign key "
                f"constraint: {table} {entity_id!r} does not exist",
                status=409,
                code=FOREIGN_KEY_VIOLATION,
                context=f"{self.name}",
            )


@dataclass
class InMemoryGateway:
    """Offline substitute for ``SupabaseRestGateway``.

    Behaves like the hosted schema: ids and timestamps are assigned on
    insert, lists come back newest-created first, inserts that reference a
    missing parent fail with a foreign-key violation, and deletes cascade to
    children. ``fail_next`` queues an error for the next call to one table
    operation; ``calls`` records every operation in order.
    """

    clock: Clock = field(default_factory=_ticking_clock)
    calls: List[Tuple[str, str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._lock = threading.RLock()
        self._failures: Dict[Tuple[str, str], List[Exception]] = {}
        self.organizations: _MemoryTable[Organization, OrganizationDraft] = _MemoryTable(
            self, "organizations", Organization
        )
        self.customers: _MemoryTable[Customer, CustomerDraft] = _MemoryTable(
            self, "customers", Customer, (("organization_id", "organizations"),)
        )
        self.projects: _MemoryTable[Project, ProjectDraft] = _MemoryTable(
            self,
            "projects",
            Project,
            (("organization_id", "organizations"), ("customer_id", "customers")),
        )
        self.calculators: _MemoryTable[Calculator, CalculatorDraft] = _MemoryTable(
            self,
            "calculators",
            Calculator,
            (("organization_id", "organizations"), ("project_id", "projects")),
        )

    def fail_next(self, table: str, op: str, error: Optional[Exception] = None) -> None:
        """Make the next ``op`` on ``table`` raise ``error`` instead of running."""
        if error is None:
            error = ApiError(f"{op}[{table}]: injected failure", context=f"{op}[{table}]")
        with self._lock:
            self._failures.setdefault((table, op), []).append(error)

    def calls_to(self, table: str, op: Optional[str] = None) -> int:
        return sum(
            1 for t, o in self.calls if t == table and (op is None or o == op)
        )

    def _enter(self, table: str, op: str) -> None:
        with self._lock:
            self.calls.append((table, op))
            pending = self._failures.get((table, op))
            error = pending.pop(0) if pending else None
        if error is not None:
            raise error

    def _table(self, name: str) -> _MemoryTable:
        return getattr(self, name)

    def _cascade(self, table: str, entity_id: EntityId) -> None:
        # organizations -> customers, projects, calculators
        # customers -> projects -> calculators
        if table == "organizations":
            for child in (self.customers, self.projects, self.calculators):
                for row_id in [r.id for r in child.rows.values() if r.organization_id == entity_id]:
                    del child.rows[row_id]
        elif table == "customers":
            for row_id in [r.id for r in self.projects.rows.values() if r.customer_id == entity_id]:
                del self.projects.rows[row_id]
                self._cascade("projects", row_id)
        elif table == "projects":
            for row_id in [r.id for r in self.calculators.rows.values() if r.project_id == entity_id]:
                del self.calculators.rows[row_id]


__all__ = ["InMemoryGateway"]
