from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from kalkyle.domain import events, queries
from kalkyle.domain.errors import NotFoundError
from kalkyle.domain.ports import EntityId, RemoteGateway
from kalkyle.domain.store import GraphStore

from .duplicate_project import calculator_copy_draft
from .error_mapping import map_api_error


@dataclass
class DuplicateCalculator:
    """Clone one calculator, optionally into another project.

    The target project is not checked against the source organization; the
    clone keeps the source calculator's ``organization_id`` either way.
    """

    gateway: RemoteGateway
    store: GraphStore

    def __call__(
        self, calculator_id: EntityId, target_project_id: Optional[EntityId] = None
    ) -> EntityId:
        source = queries.get_calculator_by_id(self.store.snapshot(), calculator_id)
        if source is None:
            raise NotFoundError("Calculator", calculator_id)

        draft = calculator_copy_draft(
            source, project_id=target_project_id or source.project_id
        )
        try:
            clone = self.gateway.calculators.create(draft)
        except Exception as exc:
            raise map_api_error(exc, default_code="DUPLICATE_FAILED") from exc

        self.store.dispatch(events.DuplicateCalculator(calculator=clone))
        return clone.id
