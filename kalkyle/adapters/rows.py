"""Translate between domain dataclasses and remote table rows.

Rows use the database column names (``organization_id``, ``start_date``,
...). The ``entries`` and ``summary`` JSONB columns keep the key names the
web client has always written (``kostMateriell``, ``totalSum``, ...); keys
this client does not model are kept in ``extra`` and written back verbatim.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from kalkyle.domain.entities import (
    CalculationEntry,
    CalculationSummary,
    Calculator,
    CalculatorDraft,
    Customer,
    CustomerDraft,
    Organization,
    OrganizationDraft,
    Project,
    ProjectDraft,
    ProjectStatus,
)

Row = Dict[str, Any]

# domain attribute -> stored JSON key
_ENTRY_KEYS: Tuple[Tuple[str, str], ...] = (
    ("id", "id"),
    ("item", "post"),
    ("description", "beskrivelse"),
    ("quantity", "antall"),
    ("material_cost", "kostMateriell"),
    ("hours", "timer"),
    ("cost_rate", "kostpris"),
    ("hourly_rate", "timepris"),
    ("material_markup_pct", "paslagMateriell"),
    ("unit_price", "enhetspris"),
    ("total", "sum"),
    ("comment", "kommentar"),
)
_ENTRY_TEXT = {"id", "item", "description", "comment"}

_SUMMARY_KEYS: Tuple[Tuple[str, str], ...] = (
    ("total_sum", "totalSum"),
    ("profit", "fortjeneste"),
    ("total_hours", "timerTotalt"),
    ("contribution_margin_pct", "bidrag"),
    ("total_labor_cost", "totalKostprisTimer"),
)


class RowFormatError(ValueError):
    """A row returned by the remote store is missing required columns."""


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------

def _require(row: Mapping[str, Any], key: str) -> Any:
    value = row.get(key)
    if value is None:
        raise RowFormatError(f"row is missing {key!r}: {sorted(row)}")
    return value


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _number(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _optional_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def encode_value(value: Any) -> Any:
    """Convert a domain field value into its JSON column representation."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, CalculationSummary):
        return summary_to_json(value)
    if isinstance(value, tuple) and all(isinstance(v, CalculationEntry) for v in value):
        return entries_to_json(value)
    return value


def fields_to_row(fields: Mapping[str, Any]) -> Row:
    return {key: encode_value(value) for key, value in fields.items()}


# ---------------------------------------------------------------------------
# Entries / summary JSON
# ---------------------------------------------------------------------------

def entry_from_json(data: Mapping[str, Any]) -> CalculationEntry:
    known = {json_key for _, json_key in _ENTRY_KEYS}
    kwargs: Dict[str, Any] = {}
    for attr, json_key in _ENTRY_KEYS:
        raw = data.get(json_key)
        if attr in _ENTRY_TEXT:
            kwargs[attr] = "" if raw is None else str(raw)
        else:
            kwargs[attr] = _number(raw)
    extra = {k: v for k, v in data.items() if k not in known}
    return CalculationEntry(extra=extra, **kwargs)


def entry_to_json(entry: CalculationEntry) -> Row:
    data: Row = dict(entry.extra)
    for attr, json_key in _ENTRY_KEYS:
        data[json_key] = getattr(entry, attr)
    return data


def entries_from_json(data: Any) -> Tuple[CalculationEntry, ...]:
    if not isinstance(data, list):
        return ()
    return tuple(entry_from_json(item) for item in data if isinstance(item, dict))


def entries_to_json(entries: Tuple[CalculationEntry, ...]) -> List[Row]:
    return [entry_to_json(entry) for entry in entries]


def summary_from_json(data: Any) -> CalculationSummary:
    if not isinstance(data, dict):
        return CalculationSummary()
    known = {json_key for _, json_key in _SUMMARY_KEYS}
    kwargs = {attr: _number(data.get(json_key)) for attr, json_key in _SUMMARY_KEYS}
    extra = {k: v for k, v in data.items() if k not in known}
    return CalculationSummary(extra=extra, **kwargs)


def summary_to_json(summary: CalculationSummary) -> Row:
    data: Row = dict(summary.extra)
    for attr, json_key in _SUMMARY_KEYS:
        data[json_key] = getattr(summary, attr)
    return data


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

def organization_from_row(row: Mapping[str, Any]) -> Organization:
    return Organization(
        id=str(_require(row, "id")),
        name=row.get("name") or "",
        created_at=_parse_datetime(_require(row, "created_at")),
        updated_at=_parse_datetime(_require(row, "updated_at")),
        description=row.get("description"),
        logo=row.get("logo"),
        address=row.get("address"),
        phone=row.get("phone"),
        email=row.get("email"),
        website=row.get("website"),
    )


def organization_draft_to_row(draft: OrganizationDraft) -> Row:
    return {
        "name": draft.name,
        "description": draft.description,
        "logo": draft.logo,
        "address": draft.address,
        "phone": draft.phone,
        "email": draft.email,
        "website": draft.website,
    }


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------

def customer_from_row(row: Mapping[str, Any]) -> Customer:
    return Customer(
        id=str(_require(row, "id")),
        organization_id=str(_require(row, "organization_id")),
        name=row.get("name") or "",
        created_at=_parse_datetime(_require(row, "created_at")),
        updated_at=_parse_datetime(_require(row, "updated_at")),
        email=row.get("email"),
        phone=row.get("phone"),
        address=row.get("address"),
        company=row.get("company"),
    )


def customer_draft_to_row(draft: CustomerDraft) -> Row:
    return {
        "organization_id": draft.organization_id,
        "name": draft.name,
        "email": draft.email,
        "phone": draft.phone,
        "address": draft.address,
        "company": draft.company,
    }


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

def project_from_row(row: Mapping[str, Any]) -> Project:
    return Project(
        id=str(_require(row, "id")),
        organization_id=str(_require(row, "organization_id")),
        customer_id=str(_require(row, "customer_id")),
        name=row.get("name") or "",
        start_date=_parse_date(_require(row, "start_date")),
        created_at=_parse_datetime(_require(row, "created_at")),
        updated_at=_parse_datetime(_require(row, "updated_at")),
        description=row.get("description") or "",
        status=ProjectStatus.parse(row.get("status") or ProjectStatus.PLANNING),
        end_date=_parse_date(row.get("end_date")),
        budget=_optional_number(row.get("budget")),
    )


def project_draft_to_row(draft: ProjectDraft) -> Row:
    return {
        "organization_id": draft.organization_id,
        "customer_id": draft.customer_id,
        "name": draft.name,
        "description": draft.description,
        "status": draft.status.value,
        "start_date": draft.start_date.isoformat(),
        "end_date": draft.end_date.isoformat() if draft.end_date else None,
        "budget": draft.budget,
    }


# ---------------------------------------------------------------------------
# Calculators
# ---------------------------------------------------------------------------

def calculator_from_row(row: Mapping[str, Any]) -> Calculator:
    return Calculator(
        id=str(_require(row, "id")),
        organization_id=str(_require(row, "organization_id")),
        project_id=str(_require(row, "project_id")),
        name=row.get("name") or "",
        created_at=_parse_datetime(_require(row, "created_at")),
        updated_at=_parse_datetime(_require(row, "updated_at")),
        description=row.get("description"),
        entries=entries_from_json(row.get("entries")),
        summary=summary_from_json(row.get("summary")),
    )


def calculator_draft_to_row(draft: CalculatorDraft) -> Row:
    return {
        "organization_id": draft.organization_id,
        "project_id": draft.project_id,
        "name": draft.name,
        "description": draft.description,
        "entries": entries_to_json(draft.entries),
        "summary": summary_to_json(draft.summary),
    }
