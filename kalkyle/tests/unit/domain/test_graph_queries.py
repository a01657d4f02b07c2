from __future__ import annotations

from dataclasses import replace

from kalkyle.domain import queries
from kalkyle.domain.entities import EMPTY_GRAPH, Graph


def test_projects_by_customer_returns_matches_in_collection_order(make, two_org_graph) -> None:
    extra = make.project("P4", "O1", "C1")
    graph = replace(
        two_org_graph,
        projects=(extra,) + two_org_graph.projects,
    )

    result = queries.projects_by_customer(graph, "C1")

    assert [p.id for p in result] == ["P4", "P1"]
    assert all(p.customer_id == "C1" for p in result)


def test_projects_by_customer_unknown_customer_is_empty(two_org_graph: Graph) -> None:
    assert queries.projects_by_customer(two_org_graph, "nobody") == []


def test_calculators_by_project(two_org_graph: Graph) -> None:
    assert [k.id for k in queries.calculators_by_project(two_org_graph, "P1")] == ["K1", "K2"]
    assert queries.calculators_by_project(two_org_graph, "P2") == []


def test_current_organization_scoped_lists(two_org_graph: Graph) -> None:
    assert [c.id for c in queries.current_organization_customers(two_org_graph)] == ["C1", "C2"]
    assert [p.id for p in queries.current_organization_projects(two_org_graph)] == ["P1", "P2"]
    assert [k.id for k in queries.current_organization_calculators(two_org_graph)] == ["K1", "K2"]

    switched = replace(two_org_graph, current_organization_id="O2")
    assert [c.id for c in queries.current_organization_customers(switched)] == ["C3"]


def test_current_organization_lookup(two_org_graph: Graph) -> None:
    assert queries.current_organization(two_org_graph).id == "O1"
    assert queries.current_organization(EMPTY_GRAPH) is None
    stale = replace(two_org_graph, current_organization_id="gone")
    assert queries.current_organization(stale) is None


def test_by_id_lookups(two_org_graph: Graph) -> None:
    assert queries.get_organization_by_id(two_org_graph, "O2").name == "Org O2"
    assert queries.get_customer_by_id(two_org_graph, "C3").organization_id == "O2"
    assert queries.get_project_by_id(two_org_graph, "P2").customer_id == "C2"
    assert queries.get_calculator_by_id(two_org_graph, "K3").project_id == "P3"
    assert queries.get_calculator_by_id(two_org_graph, "missing") is None
