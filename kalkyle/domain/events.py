"""
Graph transition events.

Events are pure data: they carry the authoritative payload of one completed
remote operation and contain zero transition logic. ``apply_event`` in
``transitions.py`` is the only consumer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Tuple, Union

from .entities import Calculator, Customer, Graph, Organization, Project


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LoadGraph:
    """Replace the whole graph with a freshly loaded one."""

    event_type = "load_graph"
    graph: Graph


# -- Organizations ---------------------------------------------------------


@dataclass(frozen=True)
class AddOrganization:
    event_type = "add_organization"
    organization: Organization


@dataclass(frozen=True)
class UpdateOrganization:
    event_type = "update_organization"
    organization: Organization


@dataclass(frozen=True)
class DeleteOrganization:
    """Remove an organization and everything scoped to it."""

    event_type = "delete_organization"
    organization_id: str


@dataclass(frozen=True)
class SetCurrentOrganization:
    event_type = "set_current_organization"
    organization_id: str


# -- Customers -------------------------------------------------------------


@dataclass(frozen=True)
class AddCustomer:
    event_type = "add_customer"
    customer: Customer


@dataclass(frozen=True)
class UpdateCustomer:
    event_type = "update_customer"
    customer: Customer


@dataclass(frozen=True)
class DeleteCustomer:
    """Remove a customer and its projects (calculators are left alone)."""

    event_type = "delete_customer"
    customer_id: str


# -- Projects --------------------------------------------------------------


@dataclass(frozen=True)
class AddProject:
    event_type = "add_project"
    project: Project


@dataclass(frozen=True)
class UpdateProject:
    event_type = "update_project"
    project: Project


@dataclass(frozen=True)
class DeleteProject:
    event_type = "delete_project"
    project_id: str


@dataclass(frozen=True)
class DuplicateProject:
    """Append a server-side duplicated project together with its calculators."""

    event_type = "duplicate_project"
    project: Project
    calculators: Tuple[Calculator, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "calculators", tuple(self.calculators))


# -- Calculators -----------------------------------------------------------


@dataclass(frozen=True)
class AddCalculator:
    event_type = "add_calculator"
    calculator: Calculator


@dataclass(frozen=True)
class UpdateCalculator:
    event_type = "update_calculator"
    calculator: Calculator


@dataclass(frozen=True)
class DeleteCalculator:
    event_type = "delete_calculator"
    calculator_id: str


@dataclass(frozen=True)
class DuplicateCalculator:
    event_type = "duplicate_calculator"
    calculator: Calculator


@dataclass(frozen=True)
class MoveCalculator:
    """Re-parent a calculator. ``moved_at`` becomes its new ``updated_at``."""

    event_type = "move_calculator"
    calculator_id: str
    new_project_id: str
    moved_at: datetime = field(default_factory=_utcnow)


GraphEvent = Union[
    LoadGraph,
    AddOrganization,
    UpdateOrganization,
    DeleteOrganization,
    SetCurrentOrganization,
    AddCustomer,
    UpdateCustomer,
    DeleteCustomer,
    AddProject,
    UpdateProject,
    DeleteProject,
    DuplicateProject,
    AddCalculator,
    UpdateCalculator,
    DeleteCalculator,
    DuplicateCalculator,
    MoveCalculator,
]
