# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for FinStat.

This module defines the Period value object (an identified, labelled
balance sheet snapshot) and helpers to select the reporting period and
its comparison period from a collection of periods and CLI arguments.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from .models import BalanceSheetSnapshot


@dataclass(frozen=True)
class Period:
    """A balance sheet snapshot with an identifier and a display label."""

    id: str
    label: str
    data: BalanceSheetSnapshot


def sort_periods(periods: Iterable[Period]) -> list[Period]:
    """Return periods ordered chronologically (oldest first) by as_of date."""
    return sorted(periods, key=lambda p: (p.data.as_of, p.id))


def find_period(periods: Iterable[Period], period_id: str) -> Period:
    """Return the period with the given id.

    Raises:
        ValueError: if no period has this id.
    """
    for p in periods:
        if p.id == period_id:
            return p
    raise ValueError(f"Unknown period: {period_id!r}")


def latest_period(periods: Iterable[Period]) -> Period:
    """Most recent period (greatest as_of date)."""
    ordered = sort_periods(periods)
    if not ordered:
        raise ValueError("No periods available.")
    return ordered[-1]


def previous_period(periods: Iterable[Period], period_id: str) -> Optional[Period]:
    """
    Chronological predecessor of a period.

    Returns None when the period is the oldest one, so that callers can
    simply skip the comparison.
    """
    ordered = sort_periods(periods)
    for idx, p in enumerate(ordered):
        if p.id == period_id:
            return ordered[idx - 1] if idx > 0 else None
    raise ValueError(f"Unknown period: {period_id!r}")


def determine_periods_from_args(
    args,
    periods: list[Period],
) -> tuple[Period, Optional[Period]]:
    """
    Determine the reporting period and optional comparison period from CLI
    arguments.

    Priority (highest to lowest) for the reporting period:

        1. args.period (period id)
        2. most recent period by default

    Comparison period:

        1. args.compare (explicit period id)
        2. args.compare_previous -> chronological predecessor
        3. no comparison
    """
    period_id: Optional[str] = getattr(args, "period", None)
    selected = find_period(periods, period_id) if period_id else latest_period(periods)

    compare_id: Optional[str] = getattr(args, "compare", None)
    if compare_id:
        comparison = find_period(periods, compare_id)
        if comparison.id == selected.id:
            raise ValueError("Comparison period must differ from the reporting period.")
        return selected, comparison

    if getattr(args, "compare_previous", False):
        return selected, previous_period(periods, selected.id)

    return selected, None
