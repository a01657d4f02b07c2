"""Duplicate a project together with all of its calculators.

Two sequential remote calls: one project insert, then (only when the source
has calculators) one batched calculator insert. They are not transactional.
When the batch fails the new project already exists remotely, so it is
cached before the failure is raised and the graph mirrors the remote state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, List

from kalkyle.domain import events, queries
from kalkyle.domain.entities import Calculator, CalculatorDraft, Project, ProjectDraft, ProjectStatus
from kalkyle.domain.errors import NotFoundError
from kalkyle.domain.ports import EntityId, RemoteGateway
from kalkyle.domain.store import GraphStore

from .error_mapping import map_api_error

COPY_SUFFIX = " (Kopi)"


def copy_name(name: str) -> str:
    return f"{name}{COPY_SUFFIX}"


def project_copy_draft(source: Project, *, today: date) -> ProjectDraft:
    """Draft for a fresh copy: status back to planning, dates restarted."""
    return ProjectDraft(
        organization_id=source.organization_id,
        customer_id=source.customer_id,
        name=copy_name(source.name),
        description=source.description,
        status=ProjectStatus.PLANNING,
        start_date=today,
        end_date=None,
        budget=source.budget,
    )


def calculator_copy_draft(source: Calculator, *, project_id: EntityId) -> CalculatorDraft:
    """Draft for a calculator clone under ``project_id``.

    ``organization_id`` always comes from the source calculator.
    """
    return CalculatorDraft(
        organization_id=source.organization_id,
        project_id=project_id,
        name=copy_name(source.name),
        description=source.description,
        entries=source.entries,
        summary=source.summary,
    )


@dataclass
class DuplicateProject:
    gateway: RemoteGateway
    store: GraphStore
    today: Callable[[], date] = date.today

    def __call__(self, project_id: EntityId) -> EntityId:
        graph = self.store.snapshot()
        source = queries.get_project_by_id(graph, project_id)
        if source is None:
            raise NotFoundError("Project", project_id)
        source_calculators = queries.calculators_by_project(graph, project_id)

        try:
            new_project = self.gateway.projects.create(
                project_copy_draft(source, today=self.today())
            )
        except Exception as exc:
            raise map_api_error(exc, default_code="DUPLICATE_FAILED") from exc

        clones: List[Calculator] = []
        if source_calculators:
            drafts = [
                calculator_copy_draft(calc, project_id=new_project.id)
                for calc in source_calculators
            ]
            try:
                clones = self.gateway.calculators.create_many(drafts)
            except Exception as exc:
                self.store.dispatch(events.DuplicateProject(project=new_project))
                raise map_api_error(exc, default_code="DUPLICATE_FAILED") from exc

        self.store.dispatch(events.DuplicateProject(project=new_project, calculators=tuple(clones)))
        return new_project.id
