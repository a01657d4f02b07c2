from __future__ import annotations

"""Domain value objects for the cached organization graph.

Every entity is a frozen dataclass. The cached graph is replaced wholesale on
each transition, so nothing in this module is ever mutated in place; use
``dataclasses.replace`` to derive a changed copy.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class ProjectStatus(str, Enum):
    """Lifecycle stage of a project as stored in the ``projects.status`` column."""

    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: Any) -> "ProjectStatus":
        if isinstance(value, ProjectStatus):
            return value
        text = str(value or "").strip().lower()
        for status in cls:
            if status.value == text:
                return status
        raise ValueError(f"Unknown project status: {value!r}")


@dataclass(frozen=True)
class CalculationEntry:
    """One line item of a calculator worksheet."""

    id: str
    """Client-generated row id; stable across edits of the worksheet."""
    item: str = ""
    description: str = ""
    quantity: float = 0.0
    material_cost: float = 0.0
    hours: float = 0.0
    cost_rate: float = 0.0
    """Internal hourly cost used for profit calculations."""
    hourly_rate: float = 0.0
    """Hourly rate billed to the customer."""
    material_markup_pct: float = 0.0
    unit_price: float = 0.0
    total: float = 0.0
    comment: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)
    """Keys found in the stored JSON that this client does not model."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", dict(self.extra or {}))


@dataclass(frozen=True)
class CalculationSummary:
    """Aggregate figures derived from a calculator's entries."""

    total_sum: float = 0.0
    profit: float = 0.0
    total_hours: float = 0.0
    contribution_margin_pct: float = 0.0
    total_labor_cost: float = 0.0
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", dict(self.extra or {}))


# ---- Drafts (creation data, no server-assigned fields) ----


@dataclass(frozen=True)
class OrganizationDraft:
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None


@dataclass(frozen=True)
class CustomerDraft:
    organization_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    company: Optional[str] = None


@dataclass(frozen=True)
class ProjectDraft:
    organization_id: str
    customer_id: str
    name: str
    start_date: date
    description: str = ""
    status: ProjectStatus = ProjectStatus.PLANNING
    end_date: Optional[date] = None
    budget: Optional[float] = None


@dataclass(frozen=True)
class CalculatorDraft:
    organization_id: str
    project_id: str
    name: str
    description: Optional[str] = None
    entries: Tuple[CalculationEntry, ...] = ()
    summary: CalculationSummary = field(default_factory=CalculationSummary)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries or ()))


# ---- Persisted entities ----


@dataclass(frozen=True)
class Organization:
    """Tenant root. Every other entity is scoped to one organization."""

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    logo: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None

    def business_fields(self) -> Dict[str, Any]:
        """Mutable fields sent on update (no id, no timestamps)."""
        return {
            "name": self.name,
            "description": self.description,
            "logo": self.logo,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "website": self.website,
        }


@dataclass(frozen=True)
class Customer:
    id: str
    organization_id: str
    name: str
    created_at: datetime
    updated_at: datetime
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    company: Optional[str] = None

    def business_fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "company": self.company,
        }


@dataclass(frozen=True)
class Project:
    id: str
    organization_id: str
    customer_id: str
    name: str
    start_date: date
    created_at: datetime
    updated_at: datetime
    description: str = ""
    status: ProjectStatus = ProjectStatus.PLANNING
    end_date: Optional[date] = None
    budget: Optional[float] = None

    def business_fields(self) -> Dict[str, Any]:
        # customer_id is editable; organization_id is not.
        return {
            "name": self.name,
            "description": self.description,
            "customer_id": self.customer_id,
            "status": self.status,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "budget": self.budget,
        }


@dataclass(frozen=True)
class Calculator:
    id: str
    organization_id: str
    project_id: str
    name: str
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    entries: Tuple[CalculationEntry, ...] = ()
    summary: CalculationSummary = field(default_factory=CalculationSummary)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries or ()))

    def business_fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "entries": self.entries,
            "summary": self.summary,
        }


@dataclass(frozen=True)
class Graph:
    """In-memory snapshot of every cached entity plus the selected organization."""

    organizations: Tuple[Organization, ...] = ()
    customers: Tuple[Customer, ...] = ()
    projects: Tuple[Project, ...] = ()
    calculators: Tuple[Calculator, ...] = ()
    current_organization_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "organizations", tuple(self.organizations))
        object.__setattr__(self, "customers", tuple(self.customers))
        object.__setattr__(self, "projects", tuple(self.projects))
        object.__setattr__(self, "calculators", tuple(self.calculators))

    @property
    def size(self) -> int:
        """Total number of cached entities across all four collections."""
        return (
            len(self.organizations)
            + len(self.customers)
            + len(self.projects)
            + len(self.calculators)
        )


EMPTY_GRAPH = Graph()
