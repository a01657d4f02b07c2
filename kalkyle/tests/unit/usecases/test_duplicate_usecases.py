from __future__ import annotations

from datetime import date

import pytest

from kalkyle.adapters.api_errors import ApiServerError
from kalkyle.adapters.gateway_memory import InMemoryGateway
from kalkyle.domain import events
from kalkyle.domain.entities import (
    CalculationEntry,
    CalculationSummary,
    CalculatorDraft,
    CustomerDraft,
    OrganizationDraft,
    ProjectDraft,
    ProjectStatus,
)
from kalkyle.domain.errors import NotFoundError, RemoteError
from kalkyle.domain.store import GraphStore
from kalkyle.usecases.duplicate_calculator import DuplicateCalculator
from kalkyle.usecases.duplicate_project import DuplicateProject
from kalkyle.usecases.load_graph import LoadEntityGraph
from kalkyle.usecases.move_calculator import MoveCalculator

TODAY = date(2024, 9, 30)


def _loaded(calculators: int = 2):
    gateway = InMemoryGateway()
    org = gateway.organizations.create(OrganizationDraft(name="Bygg AS"))
    cust = gateway.customers.create(CustomerDraft(organization_id=org.id, name="Kari"))
    proj = gateway.projects.create(
        ProjectDraft(
            organization_id=org.id,
            customer_id=cust.id,
            name="Bad",
            status=ProjectStatus.COMPLETED,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 2, 1),
            budget=50000,
        )
    )
    for n in range(calculators):
        gateway.calculators.create(
            CalculatorDraft(
                organization_id=org.id,
                project_id=proj.id,
                name=f"K{n + 1}",
                entries=(CalculationEntry(id=f"r{n}", item="Fliser", total=100.0 * (n + 1)),),
                summary=CalculationSummary(total_sum=100.0 * (n + 1)),
            )
        )
    store = GraphStore()
    store.dispatch(events.LoadGraph(LoadEntityGraph(gateway)()))
    gateway.calls.clear()
    return gateway, store, proj


def test_duplicate_project_copies_project_and_calculators() -> None:
    gateway, store, source = _loaded()
    before = store.snapshot()

    new_id = DuplicateProject(gateway, store, today=lambda: TODAY)(source.id)

    graph = store.snapshot()
    assert graph.size == before.size + 3
    copy = graph.projects[-1]
    assert copy.id == new_id
    assert copy.name == "Bad (Kopi)"
    assert copy.status is ProjectStatus.PLANNING
    assert copy.start_date == TODAY
    assert copy.end_date is None
    assert copy.budget == 50000
    assert copy.customer_id == source.customer_id
    clones = [k for k in graph.calculators if k.project_id == new_id]
    assert sorted(k.name for k in clones) == ["K1 (Kopi)", "K2 (Kopi)"]
    originals = {k.name: k for k in before.calculators}
    for clone in clones:
        original = originals[clone.name.replace(" (Kopi)", "")]
        assert clone.entries == original.entries
        assert clone.summary == original.summary
    assert gateway.calls == [("projects", "create"), ("calculators", "create_many")]


def test_duplicate_project_without_calculators_makes_one_call() -> None:
    gateway, store, source = _loaded(calculators=0)

    DuplicateProject(gateway, store, today=lambda: TODAY)(source.id)

    assert gateway.calls == [("projects", "create")]
    assert len(store.snapshot().projects) == 2


def test_duplicate_project_partial_failure_keeps_the_project() -> None:
    gateway, store, source = _loaded()
    gateway.fail_next("calculators", "create_many", ApiServerError("boom", status=500))
    before = store.snapshot()

    with pytest.raises(RemoteError) as excinfo:
        DuplicateProject(gateway, store, today=lambda: TODAY)(source.id)

    assert excinfo.value.code == "SERVER_ERROR"
    graph = store.snapshot()
    assert graph.size == before.size + 1
    assert graph.projects[-1].name == "Bad (Kopi)"
    assert graph.calculators == before.calculators
    assert len(gateway.projects.rows) == 2


def test_duplicate_project_failed_project_insert_changes_nothing() -> None:
    gateway, store, source = _loaded()
    gateway.fail_next("projects", "create")
    version = store.version

    with pytest.raises(RemoteError):
        DuplicateProject(gateway, store)(source.id)

    assert store.version == version
    assert gateway.calls == [("projects", "create")]


def test_duplicate_unknown_source_makes_no_network_calls() -> None:
    gateway, store, _ = _loaded()

    with pytest.raises(NotFoundError):
        DuplicateProject(gateway, store)("missing")
    with pytest.raises(NotFoundError):
        DuplicateCalculator(gateway, store)("missing")

    assert gateway.calls == []


def test_duplicate_calculator_into_other_project_keeps_source_organization() -> None:
    gateway, store, source = _loaded()
    other = gateway.projects.create(
        ProjectDraft(
            organization_id=source.organization_id,
            customer_id=source.customer_id,
            name="Kjøkken",
            start_date=TODAY,
        )
    )
    store.dispatch(events.AddProject(other))
    calc = store.snapshot().calculators[0]

    new_id = DuplicateCalculator(gateway, store)(calc.id, other.id)

    clone = store.snapshot().calculators[-1]
    assert clone.id == new_id
    assert clone.project_id == other.id
    assert clone.organization_id == calc.organization_id
    assert clone.name == f"{calc.name} (Kopi)"


def test_duplicate_calculator_defaults_to_source_project() -> None:
    gateway, store, source = _loaded(calculators=1)

    DuplicateCalculator(gateway, store)(store.snapshot().calculators[0].id)

    assert [k.project_id for k in store.snapshot().calculators] == [source.id, source.id]


def test_move_calculator_does_not_check_target_organization() -> None:
    gateway, store, source = _loaded(calculators=1)
    other_org = gateway.organizations.create(OrganizationDraft(name="Annen AS"))
    other_cust = gateway.customers.create(CustomerDraft(organization_id=other_org.id, name="Ola"))
    foreign = gateway.projects.create(
        ProjectDraft(
            organization_id=other_org.id,
            customer_id=other_cust.id,
            name="Garasje",
            start_date=TODAY,
        )
    )
    gateway.calls.clear()
    calc = store.snapshot().calculators[0]

    MoveCalculator(gateway, store)(calc.id, foreign.id)

    moved = store.snapshot().calculators[0]
    assert moved.project_id == foreign.id
    assert moved.organization_id == source.organization_id
    assert moved.name == calc.name
    assert gateway.calls == [("calculators", "update")]
    assert gateway.calculators.rows[calc.id].project_id == foreign.id
