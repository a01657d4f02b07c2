from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from kalkyle.domain.events import GraphEvent
from kalkyle.domain.ports import EntityGateway, EntityId
from kalkyle.domain.store import GraphStore

from .error_mapping import map_api_error

E = TypeVar("E")
D = TypeVar("D")


@dataclass
class AddEntity(Generic[E, D]):
    """Insert one row remotely, then cache the row the server returned."""

    table: EntityGateway[E, D]
    store: GraphStore
    make_event: Callable[[E], GraphEvent]

    def __call__(self, draft: D) -> E:
        try:
            created = self.table.create(draft)
        except Exception as exc:
            raise map_api_error(exc, default_code="CREATE_FAILED") from exc
        self.store.dispatch(self.make_event(created))
        return created


@dataclass
class UpdateEntity(Generic[E]):
    """Send the mutable fields of ``entity``, then cache ``entity`` as given.

    The gateway update returns nothing, so the cached copy keeps the
    caller's ``updated_at`` until the next load.
    """

    table: EntityGateway[E, Any]
    store: GraphStore
    make_event: Callable[[E], GraphEvent]

    def __call__(self, entity: E) -> None:
        try:
            self.table.update(entity.id, entity.business_fields())
        except Exception as exc:
            raise map_api_error(exc, default_code="UPDATE_FAILED") from exc
        self.store.dispatch(self.make_event(entity))


@dataclass
class DeleteEntity:
    """Delete one row remotely, then apply the cascading local delete.

    The local event is dispatched even when the remote delete matched no
    rows; unknown ids are no-ops in the graph.
    """

    table: EntityGateway[Any, Any]
    store: GraphStore
    make_event: Callable[[EntityId], GraphEvent]

    def __call__(self, entity_id: EntityId) -> None:
        try:
            self.table.delete(entity_id)
        except Exception as exc:
            raise map_api_error(exc, default_code="DELETE_FAILED") from exc
        self.store.dispatch(self.make_event(entity_id))
