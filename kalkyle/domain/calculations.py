"""Line-item pricing math for calculator worksheets.

All public results are rounded to two decimals, matching what the web client
stores in the ``entries`` and ``summary`` JSON columns.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from .entities import CalculationEntry, CalculationSummary

_CENT = Decimal("0.01")


def _round2(value: float) -> float:
    # Ties go away from zero, judged on the exact binary value of the float.
    return float(Decimal(float(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def _material_with_markup(entry: CalculationEntry) -> float:
    return entry.material_cost * (1 + entry.material_markup_pct / 100)


def calculate_row(entry: CalculationEntry) -> CalculationEntry:
    """Return ``entry`` with ``unit_price`` and ``total`` recomputed.

    unit_price = material cost incl. markup + hours * hourly rate
    total      = unit_price * quantity
    """
    unit_price = _material_with_markup(entry) + entry.hours * entry.hourly_rate
    total = unit_price * entry.quantity
    return replace(entry, unit_price=_round2(unit_price), total=_round2(total))


def calculate_summary(entries: Iterable[CalculationEntry]) -> CalculationSummary:
    """Aggregate a worksheet.

    Profit is the billed total minus raw material cost and labour at cost
    rate. The contribution margin is profit as a percentage of the total, or
    ``0`` for an empty or zero-valued worksheet.
    """
    rows = list(entries)
    total_sum = sum(e.total for e in rows)
    total_hours = sum(e.hours * e.quantity for e in rows)
    material_cost = sum(e.material_cost * e.quantity for e in rows)
    labor_cost = sum(e.hours * e.cost_rate * e.quantity for e in rows)

    profit = total_sum - material_cost - labor_cost
    margin = (profit / total_sum) * 100 if total_sum > 0 else 0.0

    return CalculationSummary(
        total_sum=_round2(total_sum),
        profit=_round2(profit),
        total_hours=_round2(total_hours),
        contribution_margin_pct=_round2(margin),
        total_labor_cost=_round2(labor_cost),
    )


def recalculate(entries: Iterable[CalculationEntry]) -> tuple:
    """Recompute every row and the summary in one pass.

    Returns ``(rows, summary)`` where ``rows`` is a tuple of updated entries.
    """
    rows = tuple(calculate_row(e) for e in entries)
    return rows, calculate_summary(rows)


__all__ = ["calculate_row", "calculate_summary", "recalculate"]
