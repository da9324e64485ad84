# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period-over-period comparison for FinStat.

``compare_periods(base, comparison)`` compares two balance sheet snapshots
and produces a Delta for:

- every line item (matched within its category),
- every category total (current assets, non-current assets, ...),
- every grand total (assets, liabilities, equity, liabilities + equity).

Delta semantics
---------------
    difference     = amount - comparison_amount
    percent_change = difference / comparison_amount * 100

When ``comparison_amount`` is zero there is no baseline: ``percent_change``
is None and the status is 'no_baseline'. This is a result state, not an
error.

Items present in a single period keep the missing side as None (never 0)
so that "not comparable" stays distinct from "true zero":

    status 'new'     : present in base only (comparison_amount is None)
    status 'removed' : present in comparison only (amount is None)

Item matching
-------------
Matching is scoped to a category and runs in two passes:

1. items that both carry an ``item_id`` are matched on that id;
2. remaining items are matched on name, skipping pairs whose ids are both
   set and different.

Names are not assumed unique. Each counterpart is consumed at most once,
and candidates are taken in display order (first unconsumed match wins),
so duplicated names pair up positionally. Swapping base and comparison
yields the same pairs, which keeps ``difference`` antisymmetric.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from .engine import CATEGORIES, GRAND_TOTALS, Totals, aggregate_snapshot, category_items
from .models import HUNDRED, ZERO, BalanceSheetSnapshot, LineItem

logger = logging.getLogger(__name__)

DeltaStatus = Literal["compared", "no_baseline", "new", "removed"]


@dataclass(frozen=True)
class Delta:
    """Comparison of one amount between the base and the comparison period."""

    amount: Optional[Decimal]
    comparison_amount: Optional[Decimal]
    difference: Optional[Decimal]
    percent_change: Optional[Decimal]
    status: DeltaStatus

    @property
    def has_baseline(self) -> bool:
        return self.percent_change is not None


@dataclass(frozen=True)
class ItemComparison:
    """A line item comparison within a category."""

    category: str
    name: str
    item_id: Optional[str]
    delta: Delta


@dataclass(frozen=True)
class ComparisonResult:
    """
    Result of compare_periods().

    Attributes:
        base_as_of: Date of the base snapshot.
        comparison_as_of: Date of the comparison snapshot.
        items: Item comparisons, per category in CATEGORIES order. Within a
            category, base items come first in display order, followed by
            the items that exist in the comparison period only.
        category_totals: Delta per category key.
        grand_totals: Delta per grand-total key.
    """

    base_as_of: date
    comparison_as_of: date
    items: tuple[ItemComparison, ...]
    category_totals: dict[str, Delta]
    grand_totals: dict[str, Delta]

    def item(self, category: str, name: str) -> Optional[Delta]:
        """Delta of the first item named ``name`` in ``category`` (None if absent)."""
        for entry in self.items:
            if entry.category == category and entry.name == name:
                return entry.delta
        return None

    def item_by_id(self, category: str, item_id: str) -> Optional[Delta]:
        for entry in self.items:
            if entry.category == category and entry.item_id == item_id:
                return entry.delta
        return None

    def items_in(self, category: str) -> list[ItemComparison]:
        return [entry for entry in self.items if entry.category == category]

    def category_total(self, category: str) -> Delta:
        """Delta of a category total.

        Raises:
            KeyError: if the category is unknown.
        """
        if category not in self.category_totals:
            raise KeyError(
                f"Unknown category {category!r}. Expected one of: {', '.join(CATEGORIES)}."
            )
        return self.category_totals[category]

    def grand_total(self, key: str) -> Delta:
        """Delta of a grand total.

        Raises:
            KeyError: if the key is unknown.
        """
        if key not in self.grand_totals:
            raise KeyError(
                f"Unknown total {key!r}. Expected one of: {', '.join(GRAND_TOTALS)}."
            )
        return self.grand_totals[key]


def compute_delta(amount: Optional[Decimal], comparison_amount: Optional[Decimal]) -> Delta:
    """Build a Delta from two (possibly missing) amounts."""
    if amount is None and comparison_amount is None:
        raise ValueError("At least one side of a comparison must be present.")
    if comparison_amount is None:
        return Delta(amount, None, None, None, "new")
    if amount is None:
        return Delta(None, comparison_amount, None, None, "removed")

    difference = amount - comparison_amount
    if comparison_amount == ZERO:
        return Delta(amount, comparison_amount, difference, None, "no_baseline")
    return Delta(
        amount,
        comparison_amount,
        difference,
        difference / comparison_amount * HUNDRED,
        "compared",
    )


def _match_items(
    base: Sequence[LineItem],
    comparison: Sequence[LineItem],
) -> dict[int, int]:
    """Pair base positions with comparison positions (base idx -> comparison idx)."""
    pairs: dict[int, int] = {}
    used: set[int] = set()

    # Pass 1: stable identifiers.
    for i, item in enumerate(base):
        if item.item_id is None:
            continue
        for j, other in enumerate(comparison):
            if j not in used and other.item_id == item.item_id:
                pairs[i] = j
                used.add(j)
                break

    # Pass 2: name heuristic.
    for i, item in enumerate(base):
        if i in pairs:
            continue
        for j, other in enumerate(comparison):
            if j in used or other.name != item.name:
                continue
            if item.item_id is not None and other.item_id is not None:
                continue
            pairs[i] = j
            used.add(j)
            logger.debug("Matched item %r by name (no shared identifier).", item.name)
            break

    return pairs


def _compare_category(
    category: str,
    base: Sequence[LineItem],
    comparison: Sequence[LineItem],
) -> list[ItemComparison]:
    pairs = _match_items(base, comparison)
    matched = set(pairs.values())

    out: list[ItemComparison] = []
    for i, item in enumerate(base):
        other = comparison[pairs[i]] if i in pairs else None
        out.append(
            ItemComparison(
                category=category,
                name=item.name,
                item_id=item.item_id or (other.item_id if other else None),
                delta=compute_delta(item.amount, other.amount if other else None),
            )
        )
    for j, other in enumerate(comparison):
        if j not in matched:
            out.append(
                ItemComparison(
                    category=category,
                    name=other.name,
                    item_id=other.item_id,
                    delta=compute_delta(None, other.amount),
                )
            )
    return out


def compare_periods(
    base: BalanceSheetSnapshot,
    comparison: BalanceSheetSnapshot,
    base_totals: Optional[Totals] = None,
    comparison_totals: Optional[Totals] = None,
) -> ComparisonResult:
    """Compare a base snapshot with a comparison snapshot.

    Args:
        base: Snapshot of the reporting period.
        comparison: Snapshot of the period compared against.
        base_totals, comparison_totals: Precomputed totals, if available.

    Returns:
        A ComparisonResult with item, category and grand-total deltas.
    """
    base_totals = base_totals or aggregate_snapshot(base)
    comparison_totals = comparison_totals or aggregate_snapshot(comparison)

    base_items = category_items(base)
    comparison_items = category_items(comparison)

    items: list[ItemComparison] = []
    for category in CATEGORIES:
        items.extend(
            _compare_category(category, base_items[category], comparison_items[category])
        )

    base_cat = base_totals.category_totals()
    comp_cat = comparison_totals.category_totals()
    base_grand = base_totals.grand_totals()
    comp_grand = comparison_totals.grand_totals()

    return ComparisonResult(
        base_as_of=base.as_of,
        comparison_as_of=comparison.as_of,
        items=tuple(items),
        category_totals={c: compute_delta(base_cat[c], comp_cat[c]) for c in CATEGORIES},
        grand_totals={k: compute_delta(base_grand[k], comp_grand[k]) for k in GRAND_TOTALS},
    )
