from __future__ import annotations
from typing import Any, List, Mapping, Protocol, Sequence, TypeVar

from .entities import (
    Calculator,
    CalculatorDraft,
    Customer,
    CustomerDraft,
    Organization,
    OrganizationDraft,
    Project,
    ProjectDraft,
)

EntityId = str

E = TypeVar("E")
D = TypeVar("D", contravariant=True)


# ---- Ports (Hexagonal boundaries) ----
class EntityGateway(Protocol[E, D]):
    """CRUD against one remote table.

    Each call is exactly one network round trip. Implementations raise the
    adapter ``ApiError`` family on failure; use cases map those to
    ``RemoteError``.
    """

    def list(self) -> List[E]: ...  # newest-created first
    def create(self, draft: D) -> E: ...  # full persisted row
    def create_many(self, drafts: Sequence[D]) -> List[E]: ...  # one batched insert
    def update(self, entity_id: EntityId, fields: Mapping[str, Any]) -> None: ...
    def delete(self, entity_id: EntityId) -> None: ...  # zero rows is not an error


class RemoteGateway(Protocol):
    """The four table gateways of one authenticated principal."""

    organizations: EntityGateway[Organization, OrganizationDraft]
    customers: EntityGateway[Customer, CustomerDraft]
    projects: EntityGateway[Project, ProjectDraft]
    calculators: EntityGateway[Calculator, CalculatorDraft]

