"""
Centralized graph transition logic.

ALL cache-mutation logic lives here. ``apply_event`` is a pure function:
the input graph is never touched, a new ``Graph`` is returned, and ids that
are not present make Update/Delete events no-ops rather than errors.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, Iterable, Optional, Tuple, Type, TypeVar

from .entities import Graph
from .events import (
    AddCalculator,
    AddCustomer,
    AddOrganization,
    AddProject,
    DeleteCalculator,
    DeleteCustomer,
    DeleteOrganization,
    DeleteProject,
    DuplicateCalculator,
    DuplicateProject,
    GraphEvent,
    LoadGraph,
    MoveCalculator,
    SetCurrentOrganization,
    UpdateCalculator,
    UpdateCustomer,
    UpdateOrganization,
    UpdateProject,
)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Public dispatcher
# ---------------------------------------------------------------------------

def apply_event(graph: Graph, event: GraphEvent) -> Graph:
    """Apply *event* to *graph* and return the resulting graph."""
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise ValueError(f"Unknown event type: {type(event).__name__}")
    return handler(graph, event)


# ---------------------------------------------------------------------------
# Collection helpers
# ---------------------------------------------------------------------------

def _replace_by_id(items: Tuple[T, ...], updated: T) -> Tuple[T, ...]:
    target = getattr(updated, "id")
    return tuple(updated if getattr(item, "id") == target else item for item in items)


def _without(items: Iterable[T], attr: str, value: str) -> Tuple[T, ...]:
    return tuple(item for item in items if getattr(item, attr) != value)


# ---------------------------------------------------------------------------
# Individual transition handlers (private)
# ---------------------------------------------------------------------------

def _apply_load_graph(graph: Graph, event: LoadGraph) -> Graph:
    loaded = event.graph
    first: Optional[str] = loaded.organizations[0].id if loaded.organizations else None
    return replace(loaded, current_organization_id=first)


def _apply_add_organization(graph: Graph, event: AddOrganization) -> Graph:
    org = event.organization
    return replace(
        graph,
        organizations=graph.organizations + (org,),
        current_organization_id=graph.current_organization_id or org.id,
    )


def _apply_update_organization(graph: Graph, event: UpdateOrganization) -> Graph:
    return replace(
        graph,
        organizations=_replace_by_id(graph.organizations, event.organization),
    )


def _apply_delete_organization(graph: Graph, event: DeleteOrganization) -> Graph:
    """
    Cascade by organization_id on every child collection directly, so a
    project pointing at a stale customer is still removed.
    """
    org_id = event.organization_id
    remaining = _without(graph.organizations, "id", org_id)

    current = graph.current_organization_id
    if current == org_id:
        current = remaining[0].id if remaining else None

    return Graph(
        organizations=remaining,
        customers=_without(graph.customers, "organization_id", org_id),
        projects=_without(graph.projects, "organization_id", org_id),
        calculators=_without(graph.calculators, "organization_id", org_id),
        current_organization_id=current,
    )


def _apply_set_current_organization(
    graph: Graph, event: SetCurrentOrganization,
) -> Graph:
    return replace(graph, current_organization_id=event.organization_id)


def _apply_add_customer(graph: Graph, event: AddCustomer) -> Graph:
    return replace(graph, customers=graph.customers + (event.customer,))


def _apply_update_customer(graph: Graph, event: UpdateCustomer) -> Graph:
    return replace(graph, customers=_replace_by_id(graph.customers, event.customer))


def _apply_delete_customer(graph: Graph, event: DeleteCustomer) -> Graph:
    # Calculators of the removed projects stay in the graph.
    customer_id = event.customer_id
    return replace(
        graph,
        customers=_without(graph.customers, "id", customer_id),
        projects=_without(graph.projects, "customer_id", customer_id),
    )


def _apply_add_project(graph: Graph, event: AddProject) -> Graph:
    return replace(graph, projects=graph.projects + (event.project,))


def _apply_update_project(graph: Graph, event: UpdateProject) -> Graph:
    return replace(graph, projects=_replace_by_id(graph.projects, event.project))


def _apply_delete_project(graph: Graph, event: DeleteProject) -> Graph:
    project_id = event.project_id
    return replace(
        graph,
        projects=_without(graph.projects, "id", project_id),
        calculators=_without(graph.calculators, "project_id", project_id),
    )


def _apply_duplicate_project(graph: Graph, event: DuplicateProject) -> Graph:
    return replace(
        graph,
        projects=graph.projects + (event.project,),
        calculators=graph.calculators + event.calculators,
    )


def _apply_add_calculator(graph: Graph, event: AddCalculator) -> Graph:
    return replace(graph, calculators=graph.calculators + (event.calculator,))


def _apply_update_calculator(graph: Graph, event: UpdateCalculator) -> Graph:
    return replace(
        graph,
        calculators=_replace_by_id(graph.calculators, event.calculator),
    )


def _apply_delete_calculator(graph: Graph, event: DeleteCalculator) -> Graph:
    return replace(
        graph,
        calculators=_without(graph.calculators, "id", event.calculator_id),
    )


def _apply_duplicate_calculator(graph: Graph, event: DuplicateCalculator) -> Graph:
    return replace(graph, calculators=graph.calculators + (event.calculator,))


def _apply_move_calculator(graph: Graph, event: MoveCalculator) -> Graph:
    return replace(
        graph,
        calculators=tuple(
            replace(calc, project_id=event.new_project_id, updated_at=event.moved_at)
            if calc.id == event.calculator_id
            else calc
            for calc in graph.calculators
        ),
    )


_HANDLERS: Dict[Type, Callable[[Graph, object], Graph]] = {
    LoadGraph: _apply_load_graph,
    AddOrganization: _apply_add_organization,
    UpdateOrganization: _apply_update_organization,
    DeleteOrganization: _apply_delete_organization,
    SetCurrentOrganization: _apply_set_current_organization,
    AddCustomer: _apply_add_customer,
    UpdateCustomer: _apply_update_customer,
    DeleteCustomer: _apply_delete_customer,
    AddProject: _apply_add_project,
    UpdateProject: _apply_update_project,
    DeleteProject: _apply_delete_project,
    DuplicateProject: _apply_duplicate_project,
    AddCalculator: _apply_add_calculator,
    UpdateCalculator: _apply_update_calculator,
    DeleteCalculator: _apply_delete_calculator,
    DuplicateCalculator: _apply_duplicate_calculator,
    MoveCalculator: _apply_move_calculator,
}
