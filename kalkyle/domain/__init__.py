"""Domain package exports for entities, events, and the graph store."""

from .entities import (
    EMPTY_GRAPH,
    CalculationEntry,
    CalculationSummary,
    Calculator,
    CalculatorDraft,
    Customer,
    CustomerDraft,
    Graph,
    Organization,
    OrganizationDraft,
    Project,
    ProjectDraft,
    ProjectStatus,
)
from .errors import EngineError, LoadError, NotFoundError, RemoteError
from .result import Result
from .store import GraphStore
from .transitions import apply_event

__all__ = [
    "EMPTY_GRAPH",
    "CalculationEntry",
    "CalculationSummary",
    "Calculator",
    "CalculatorDraft",
    "Customer",
    "CustomerDraft",
    "EngineError",
    "Graph",
    "GraphStore",
    "LoadError",
    "NotFoundError",
    "Organization",
    "OrganizationDraft",
    "Project",
    "ProjectDraft",
    "ProjectStatus",
    "RemoteError",
    "Result",
    "apply_event",
]
