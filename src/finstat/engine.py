# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core rollup engine for FinStat.

This module turns the flat line-item lists of a balance sheet snapshot into
totals, and into the hierarchical statement table rendered by the views and
the CLI.

1. Rollups
   --------
   - ``sum_items(items)``: sum of amounts, ``Decimal("0")`` for an empty list.
   - ``section_totals(section)``: current, non-current and total of a Section,
     with ``total == current + non_current`` exactly.
   - ``aggregate_snapshot(snapshot)``: all category and grand totals of a
     snapshot as a frozen ``Totals`` object.

   Every sum uses Decimal arithmetic. The result does not depend on the
   order of the items.

2. Statement rows
   ---------------
   ``build_statement_rows(snapshot, totals)`` returns a long-format
   DataFrame with one row per statement line:

       level 0 : section totals (Total assets, Total liabilities, ...)
       level 1 : category subtotals (Current assets, Non-current assets, ...)
       level 2 : individual line items

   with columns level, display_order, id, name, type, category, amount.
   Amounts are kept as Decimal; rounding is a view concern.

Notes
-----
The engine never mutates the snapshot and keeps no state between calls.
Comparison, aging, tax and ratios live in their own modules and consume
the ``Totals`` produced here.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

import pandas as pd

from .models import ZERO, BalanceSheetSnapshot, LineItem, Section

logger = logging.getLogger(__name__)

# Category keys, in display order. They are shared with the comparison
# module so that per-category lookups use the same vocabulary.
CATEGORIES: tuple[str, ...] = (
    "current_assets",
    "non_current_assets",
    "current_liabilities",
    "non_current_liabilities",
    "equity",
)

GRAND_TOTALS: tuple[str, ...] = (
    "total_assets",
    "total_liabilities",
    "total_equity",
    "total_liabilities_and_equity",
)

CATEGORY_LABELS: dict[str, str] = {
    "current_assets": "Current assets",
    "non_current_assets": "Non-current assets",
    "current_liabilities": "Current liabilities",
    "non_current_liabilities": "Non-current liabilities",
    "equity": "Equity",
}

TOTAL_LABELS: dict[str, str] = {
    "total_assets": "Total assets",
    "total_liabilities": "Total liabilities",
    "total_equity": "Total equity",
    "total_liabilities_and_equity": "Total liabilities and equity",
}


@dataclass(frozen=True)
class SectionTotals:
    """Totals of a Section."""

    current: Decimal
    non_current: Decimal
    total: Decimal


@dataclass(frozen=True)
class Totals:
    """
    All totals of a balance sheet snapshot.

    Attributes
    ----------
    total_current_assets, total_non_current_assets, total_assets :
        Asset rollups (``total_assets = current + non_current``).
    total_current_liabilities, total_non_current_liabilities,
    total_liabilities :
        Liability rollups.
    total_equity :
        Sum of equity items.
    total_liabilities_and_equity :
        ``total_liabilities + total_equity``.
    """

    total_current_assets: Decimal
    total_non_current_assets: Decimal
    total_assets: Decimal
    total_current_liabilities: Decimal
    total_non_current_liabilities: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_liabilities_and_equity: Decimal

    def category_totals(self) -> dict[str, Decimal]:
        """Totals keyed by category (see CATEGORIES)."""
        return {
            "current_assets": self.total_current_assets,
            "non_current_assets": self.total_non_current_assets,
            "current_liabilities": self.total_current_liabilities,
            "non_current_liabilities": self.total_non_current_liabilities,
            "equity": self.total_equity,
        }

    def grand_totals(self) -> dict[str, Decimal]:
        """Totals keyed by grand-total name (see GRAND_TOTALS)."""
        return {
            "total_assets": self.total_assets,
            "total_liabilities": self.total_liabilities,
            "total_equity": self.total_equity,
            "total_liabilities_and_equity": self.total_liabilities_and_equity,
        }

    def as_dict(self) -> dict[str, Decimal]:
        return {
            "total_current_assets": self.total_current_assets,
            "total_non_current_assets": self.total_non_current_assets,
            "total_assets": self.total_assets,
            "total_current_liabilities": self.total_current_liabilities,
            "total_non_current_liabilities": self.total_non_current_liabilities,
            "total_liabilities": self.total_liabilities,
            "total_equity": self.total_equity,
            "total_liabilities_and_equity": self.total_liabilities_and_equity,
        }


def sum_items(items: Iterable[LineItem]) -> Decimal:
    """Return the Decimal sum of item amounts (0 for an empty list)."""
    total = ZERO
    for item in items:
        total += item.amount
    return total


def section_totals(section: Section) -> SectionTotals:
    """Compute current, non-current and total amounts of a Section."""
    current = sum_items(section.current)
    non_current = sum_items(section.non_current)
    return SectionTotals(current=current, non_current=non_current, total=current + non_current)


def aggregate_snapshot(snapshot: BalanceSheetSnapshot) -> Totals:
    """Aggregate a balance sheet snapshot into category and grand totals.

    Args:
        snapshot: Balance sheet to aggregate.

    Returns:
        A Totals instance. ``total_liabilities_and_equity`` is computed from
        the liabilities and equity totals; whether it matches
        ``total_assets`` is reported by the statement assembler.
    """
    assets = section_totals(snapshot.assets)
    liabilities = section_totals(snapshot.liabilities)
    equity = sum_items(snapshot.equity)

    totals = Totals(
        total_current_assets=assets.current,
        total_non_current_assets=assets.non_current,
        total_assets=assets.total,
        total_current_liabilities=liabilities.current,
        total_non_current_liabilities=liabilities.non_current,
        total_liabilities=liabilities.total,
        total_equity=equity,
        total_liabilities_and_equity=liabilities.total + equity,
    )
    logger.debug(
        "Aggregated snapshot as of %s: assets=%s, liabilities=%s, equity=%s",
        snapshot.as_of,
        totals.total_assets,
        totals.total_liabilities,
        totals.total_equity,
    )
    return totals


def category_items(snapshot: BalanceSheetSnapshot) -> dict[str, tuple[LineItem, ...]]:
    """Line items of a snapshot keyed by category (see CATEGORIES)."""
    return {
        "current_assets": snapshot.assets.current,
        "non_current_assets": snapshot.assets.non_current,
        "current_liabilities": snapshot.liabilities.current,
        "non_current_liabilities": snapshot.liabilities.non_current,
        "equity": snapshot.equity,
    }


# Layout of the hierarchical statement: (section total key, categories).
_STATEMENT_LAYOUT: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("total_assets", ("current_assets", "non_current_assets")),
    ("total_liabilities", ("current_liabilities", "non_current_liabilities")),
    ("total_equity", ("equity",)),
)


def build_statement_rows(snapshot: BalanceSheetSnapshot, totals: Totals) -> pd.DataFrame:
    """Build the hierarchical balance sheet as a long-format DataFrame.

    Rows are emitted in display order:
        Total assets (0) > Current assets (1) > items (2) > Non-current ...
        Total liabilities (0) > ...
        Total equity (0) > equity items (2)
        Total liabilities and equity (0)

    Equity has a single category, so its items sit directly below the
    section total with no level-1 subtotal row.

    Returns:
        DataFrame with columns:
            level, display_order, id, name, type, category, amount
        where ``type`` is 'total', 'subtotal' or 'item' and ``id`` is a
        stable row identifier (total key, category key or
        '<category>:<position>').
    """
    items_by_category = category_items(snapshot)
    category_totals = totals.category_totals()
    grand_totals = totals.grand_totals()

    rows: list[dict[str, object]] = []

    def _add(level: int, row_id: str, name: str, row_type: str, category: str, amount) -> None:
        rows.append(
            {
                "level": level,
                "display_order": (len(rows) + 1) * 10,
                "id": row_id,
                "name": name,
                "type": row_type,
                "category": category,
                "amount": amount,
            }
        )

    for total_key, categories in _STATEMENT_LAYOUT:
        _add(0, total_key, TOTAL_LABELS[total_key], "total", "", grand_totals[total_key])
        for category in categories:
            if len(categories) > 1:
                _add(
                    1,
                    category,
                    CATEGORY_LABELS[category],
                    "subtotal",
                    category,
                    category_totals[category],
                )
            for pos, item in enumerate(items_by_category[category], start=1):
                _add(2, f"{category}:{pos}", item.name, "item", category, item.amount)

    _add(
        0,
        "total_liabilities_and_equity",
        TOTAL_LABELS["total_liabilities_and_equity"],
        "total",
        "",
        grand_totals["total_liabilities_and_equity"],
    )

    return pd.DataFrame(
        rows,
        columns=["level", "display_order", "id", "name", "type", "category", "amount"],
    )
