from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

import pytest

from kalkyle.domain.entities import (
    CalculationEntry,
    CalculationSummary,
    Calculator,
    Customer,
    Graph,
    Organization,
    Project,
    ProjectStatus,
)

T0 = datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)


class _Builders:
    """Entity builders with fixed timestamps; override any field by keyword."""

    t0 = T0

    @staticmethod
    def org(org_id: str, **kw: Any) -> Organization:
        kw.setdefault("name", f"Org {org_id}")
        return Organization(id=org_id, created_at=T0, updated_at=T0, **kw)

    @staticmethod
    def customer(cust_id: str, org_id: str, **kw: Any) -> Customer:
        kw.setdefault("name", f"Customer {cust_id}")
        return Customer(id=cust_id, organization_id=org_id, created_at=T0, updated_at=T0, **kw)

    @staticmethod
    def project(proj_id: str, org_id: str, cust_id: str, **kw: Any) -> Project:
        kw.setdefault("name", proj_id)
        kw.setdefault("start_date", date(2024, 3, 1))
        kw.setdefault("status", ProjectStatus.ACTIVE)
        return Project(
            id=proj_id,
            organization_id=org_id,
            customer_id=cust_id,
            created_at=T0,
            updated_at=T0,
            **kw,
        )

    @staticmethod
    def calculator(calc_id: str, org_id: str, proj_id: str, **kw: Any) -> Calculator:
        kw.setdefault("name", calc_id)
        kw.setdefault(
            "entries",
            (CalculationEntry(id=f"{calc_id}-row", item="Panel", quantity=2, total=100.0),),
        )
        kw.setdefault("summary", CalculationSummary(total_sum=100.0))
        return Calculator(
            id=calc_id,
            organization_id=org_id,
            project_id=proj_id,
            created_at=T0,
            updated_at=T0,
            **kw,
        )


@pytest.fixture
def make() -> _Builders:
    return _Builders()


@pytest.fixture
def two_org_graph(make: _Builders) -> Graph:
    """O1 (current) with C1 -> P1 -> K1, K2 and C2 -> P2; O2 with C3 -> P3 -> K3."""
    return Graph(
        organizations=(make.org("O1"), make.org("O2")),
        customers=(
            make.customer("C1", "O1"),
            make.customer("C2", "O1"),
            make.customer("C3", "O2"),
        ),
        projects=(
            make.project("P1", "O1", "C1"),
            make.project("P2", "O1", "C2"),
            make.project("P3", "O2", "C3"),
        ),
        calculators=(
            make.calculator("K1", "O1", "P1"),
            make.calculator("K2", "O1", "P1"),
            make.calculator("K3", "O2", "P3"),
        ),
        current_organization_id="O1",
    )
