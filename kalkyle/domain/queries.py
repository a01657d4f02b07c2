"""Read-only projections over a ``Graph`` snapshot.

Every function is re-derived on each call (linear scans, no memoization), so
results are only ever as fresh as the snapshot passed in. Lists preserve
collection order.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, TypeVar

from .entities import Calculator, Customer, Graph, Organization, Project

T = TypeVar("T")


def _find(items: Iterable[T], entity_id: str) -> Optional[T]:
    for item in items:
        if getattr(item, "id") == entity_id:
            return item
    return None


# ---- by-id lookups ----

def get_organization_by_id(graph: Graph, organization_id: str) -> Optional[Organization]:
    return _find(graph.organizations, organization_id)


def get_customer_by_id(graph: Graph, customer_id: str) -> Optional[Customer]:
    return _find(graph.customers, customer_id)


def get_project_by_id(graph: Graph, project_id: str) -> Optional[Project]:
    return _find(graph.projects, project_id)


def get_calculator_by_id(graph: Graph, calculator_id: str) -> Optional[Calculator]:
    return _find(graph.calculators, calculator_id)


# ---- current-organization scope ----

def current_organization(graph: Graph) -> Optional[Organization]:
    """The selected organization, or ``None`` when nothing is selected."""
    if graph.current_organization_id is None:
        return None
    return get_organization_by_id(graph, graph.current_organization_id)


def current_organization_customers(graph: Graph) -> List[Customer]:
    org_id = graph.current_organization_id
    return [c for c in graph.customers if c.organization_id == org_id]


def current_organization_projects(graph: Graph) -> List[Project]:
    org_id = graph.current_organization_id
    return [p for p in graph.projects if p.organization_id == org_id]


def current_organization_calculators(graph: Graph) -> List[Calculator]:
    org_id = graph.current_organization_id
    return [c for c in graph.calculators if c.organization_id == org_id]


# ---- parent scope ----

def projects_by_customer(graph: Graph, customer_id: str) -> List[Project]:
    return [p for p in graph.projects if p.customer_id == customer_id]


def calculators_by_project(graph: Graph, project_id: str) -> List[Calculator]:
    return [c for c in graph.calculators if c.project_id == project_id]


__all__ = [
    "calculators_by_project",
    "current_organization",
    "current_organization_calculators",
    "current_organization_customers",
    "current_organization_projects",
    "get_calculator_by_id",
    "get_customer_by_id",
    "get_organization_by_id",
    "get_project_by_id",
    "projects_by_customer",
]
