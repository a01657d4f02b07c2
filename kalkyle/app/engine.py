"""Synchronization engine for one authenticated principal.

``QuoteEngine`` owns one ``GraphStore`` and wires every mutation use case
against an injected ``RemoteGateway``. Public operations never raise
``EngineError`` across this boundary: each returns a ``Result`` carrying
either the value or the error. Queries are plain reads over the current
snapshot.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, List, Optional, TypeVar

from kalkyle.domain import events, queries
from kalkyle.domain.entities import (
    Calculator,
    CalculatorDraft,
    Customer,
    CustomerDraft,
    Graph,
    Organization,
    OrganizationDraft,
    Project,
    ProjectDraft,
)
from kalkyle.domain.errors import EngineError
from kalkyle.domain.ports import EntityId, RemoteGateway
from kalkyle.domain.result import Result
from kalkyle.domain.store import GraphListener, GraphStore
from kalkyle.usecases.duplicate_calculator import DuplicateCalculator
from kalkyle.usecases.duplicate_project import DuplicateProject
from kalkyle.usecases.load_graph import DEFAULT_LOAD_TIMEOUT_S, LoadEntityGraph
from kalkyle.usecases.manage_entities import AddEntity, DeleteEntity, UpdateEntity
from kalkyle.usecases.move_calculator import MoveCalculator

T = TypeVar("T")


class QuoteEngine:
    def __init__(
        self,
        gateway: RemoteGateway,
        *,
        store: Optional[GraphStore] = None,
        load_timeout_s: float = DEFAULT_LOAD_TIMEOUT_S,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.gateway = gateway
        self.store = store if store is not None else GraphStore()
        self.loading = False
        self.last_error: Optional[EngineError] = None

        # --- Use cases ---
        self.uc_load = LoadEntityGraph(gateway, timeout_s=load_timeout_s)

        self.uc_add_organization = AddEntity(gateway.organizations, self.store, events.AddOrganization)
        self.uc_update_organization = UpdateEntity(gateway.organizations, self.store, events.UpdateOrganization)
        self.uc_delete_organization = DeleteEntity(gateway.organizations, self.store, events.DeleteOrganization)

        self.uc_add_customer = AddEntity(gateway.customers, self.store, events.AddCustomer)
        self.uc_update_customer = UpdateEntity(gateway.customers, self.store, events.UpdateCustomer)
        self.uc_delete_customer = DeleteEntity(gateway.customers, self.store, events.DeleteCustomer)

        self.uc_add_project = AddEntity(gateway.projects, self.store, events.AddProject)
        self.uc_update_project = UpdateEntity(gateway.projects, self.store, events.UpdateProject)
        self.uc_delete_project = DeleteEntity(gateway.projects, self.store, events.DeleteProject)
        self.uc_duplicate_project = DuplicateProject(gateway, self.store, today=today)

        self.uc_add_calculator = AddEntity(gateway.calculators, self.store, events.AddCalculator)
        self.uc_update_calculator = UpdateEntity(gateway.calculators, self.store, events.UpdateCalculator)
        self.uc_delete_calculator = DeleteEntity(gateway.calculators, self.store, events.DeleteCalculator)
        self.uc_duplicate_calculator = DuplicateCalculator(gateway, self.store)
        self.uc_move_calculator = MoveCalculator(gateway, self.store)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self) -> Result[Graph]:
        """Fetch the full graph and replace the cache with it.

        On failure the cache keeps its previous value and ``last_error`` is
        set.
        """
        self.loading = True
        try:
            graph = self.uc_load()
        except EngineError as err:
            self.last_error = err
            self._log.error("Initial load failed (%s): %s", err.code, err.message)
            return Result.failure(err)
        finally:
            self.loading = False
        self.last_error = None
        loaded = self.store.dispatch(events.LoadGraph(graph))
        self._log.info(
            "Loaded %d organizations, %d customers, %d projects, %d calculators",
            len(loaded.organizations),
            len(loaded.customers),
            len(loaded.projects),
            len(loaded.calculators),
        )
        return Result.success(loaded)

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------
    def add_organization(self, draft: OrganizationDraft) -> Result[None]:
        return self._void("add_organization", self.uc_add_organization, draft)

    def update_organization(self, organization: Organization) -> Result[None]:
        return self._run("update_organization", self.uc_update_organization, organization)

    def delete_organization(self, organization_id: EntityId) -> Result[None]:
        return self._run("delete_organization", self.uc_delete_organization, organization_id)

    def set_current_organization(self, organization_id: EntityId) -> Result[None]:
        """Select an organization locally; no network call."""
        self.store.dispatch(events.SetCurrentOrganization(organization_id))
        return Result.success(None)

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------
    def add_customer(self, draft: CustomerDraft) -> Result[None]:
        return self._void("add_customer", self.uc_add_customer, draft)

    def update_customer(self, customer: Customer) -> Result[None]:
        return self._run("update_customer", self.uc_update_customer, customer)

    def delete_customer(self, customer_id: EntityId) -> Result[None]:
        return self._run("delete_customer", self.uc_delete_customer, customer_id)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------
    def add_project(self, draft: ProjectDraft) -> Result[None]:
        return self._void("add_project", self.uc_add_project, draft)

    def update_project(self, project: Project) -> Result[None]:
        return self._run("update_project", self.uc_update_project, project)

    def delete_project(self, project_id: EntityId) -> Result[None]:
        return self._run("delete_project", self.uc_delete_project, project_id)

    def duplicate_project(self, project_id: EntityId) -> Result[EntityId]:
        return self._run("duplicate_project", self.uc_duplicate_project, project_id)

    # ------------------------------------------------------------------
    # Calculators
    # ------------------------------------------------------------------
    def add_calculator(self, draft: CalculatorDraft) -> Result[None]:
        return self._void("add_calculator", self.uc_add_calculator, draft)

    def update_calculator(self, calculator: Calculator) -> Result[None]:
        return self._run("update_calculator", self.uc_update_calculator, calculator)

    def delete_calculator(self, calculator_id: EntityId) -> Result[None]:
        return self._run("delete_calculator", self.uc_delete_calculator, calculator_id)

    def duplicate_calculator(
        self, calculator_id: EntityId, target_project_id: Optional[EntityId] = None
    ) -> Result[EntityId]:
        return self._run(
            "duplicate_calculator", self.uc_duplicate_calculator, calculator_id, target_project_id
        )

    def move_calculator(self, calculator_id: EntityId, new_project_id: EntityId) -> Result[None]:
        return self._run("move_calculator", self.uc_move_calculator, calculator_id, new_project_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def snapshot(self) -> Graph:
        return self.store.snapshot()

    def subscribe(self, listener: GraphListener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    @property
    def current_organization_id(self) -> Optional[EntityId]:
        return self.store.snapshot().current_organization_id

    def current_organization(self) -> Optional[Organization]:
        return queries.current_organization(self.store.snapshot())

    def get_organization_by_id(self, organization_id: EntityId) -> Optional[Organization]:
        return queries.get_organization_by_id(self.store.snapshot(), organization_id)

    def get_customer_by_id(self, customer_id: EntityId) -> Optional[Customer]:
        return queries.get_customer_by_id(self.store.snapshot(), customer_id)

    def get_project_by_id(self, project_id: EntityId) -> Optional[Project]:
        return queries.get_project_by_id(self.store.snapshot(), project_id)

    def get_calculator_by_id(self, calculator_id: EntityId) -> Optional[Calculator]:
        return queries.get_calculator_by_id(self.store.snapshot(), calculator_id)

    def current_organization_customers(self) -> List[Customer]:
        return queries.current_organization_customers(self.store.snapshot())

    def current_organization_projects(self) -> List[Project]:
        return queries.current_organization_projects(self.store.snapshot())

    def current_organization_calculators(self) -> List[Calculator]:
        return queries.current_organization_calculators(self.store.snapshot())

    def projects_by_customer(self, customer_id: EntityId) -> List[Project]:
        return queries.projects_by_customer(self.store.snapshot(), customer_id)

    def calculators_by_project(self, project_id: EntityId) -> List[Calculator]:
        return queries.calculators_by_project(self.store.snapshot(), project_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _run(self, name: str, use_case: Callable[..., T], *args: Any) -> Result[T]:
        try:
            value = use_case(*args)
        except EngineError as err:
            self.last_error = err
            self._log.warning("%s failed (%s): %s", name, err.code, err.message)
            return Result.failure(err)
        self.last_error = None
        self._log.debug("%s ok", name)
        return Result.success(value)

    def _void(self, name: str, use_case: Callable[..., Any], *args: Any) -> Result[None]:
        # Adds report success only; the new row is read back from the graph.
        result = self._run(name, use_case, *args)
        return result if not result.ok else Result.success(None)


__all__ = ["QuoteEngine"]
