from __future__ import annotations

from dataclasses import dataclass

from kalkyle.domain import events
from kalkyle.domain.ports import EntityId, RemoteGateway
from kalkyle.domain.store import GraphStore

from .error_mapping import map_api_error


@dataclass
class MoveCalculator:
    gateway: RemoteGateway
    store: GraphStore

    def __call__(self, calculator_id: EntityId, new_project_id: EntityId) -> None:
        """Re-parent a calculator; only ``project_id`` is sent remotely."""
        try:
            self.gateway.calculators.update(calculator_id, {"project_id": new_project_id})
        except Exception as exc:
            raise map_api_error(exc, default_code="MOVE_FAILED") from exc
        self.store.dispatch(
            events.MoveCalculator(calculator_id=calculator_id, new_project_id=new_project_id)
        )
