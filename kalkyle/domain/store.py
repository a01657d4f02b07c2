"""Holder for the single cached ``Graph`` value of one engine.

The store never edits a graph in place: ``dispatch`` runs the pure transition
function and swaps the result in wholesale. Each replacement yields a new
object, so observers can detect change by identity (or by ``version``).
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List

from .entities import EMPTY_GRAPH, Graph
from .events import GraphEvent
from .transitions import apply_event

GraphListener = Callable[[Graph], None]

log = logging.getLogger(__name__)


class GraphStore:
    """Owns exactly one ``Graph`` at a time."""

    def __init__(self, graph: Graph = EMPTY_GRAPH) -> None:
        self._graph = graph
        self._version = 0
        self._lock = threading.Lock()
        self._listeners: List[GraphListener] = []

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> Graph:
        """Return the current graph. Safe to hold on to; it never changes."""
        return self._graph

    def dispatch(self, event: GraphEvent) -> Graph:
        """Apply ``event`` to the current graph and store the result."""
        with self._lock:
            new_graph = apply_event(self._graph, event)
            self._graph = new_graph
            self._version += 1
            listeners = list(self._listeners)
        log.debug("Applied %s (version %d)", event.event_type, self._version)
        for listener in listeners:
            try:
                listener(new_graph)
            except Exception:
                # The graph is already replaced; remaining listeners still run.
                log.exception("Graph listener %r failed", listener)
        return new_graph

    def subscribe(self, listener: GraphListener) -> Callable[[], None]:
        """Register ``listener`` for replacements; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe
