# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for FinStat.

This module turns engine results into pandas DataFrames ready for display
or CSV export. It never changes the numbers: rounding to a fixed number of
decimals is the only transformation, and it is applied here rather than in
the engine.

Statement views (hierarchical balance sheet, see engine.build_statement_rows):

- simplified: level 0 only (section totals),
- regular:    levels 0-1 (section totals and category subtotals),
- detailed:   all levels (line items included).

Other tables:

- comparison_to_dataframe:      one row per item, category and grand total,
- aging_to_dataframe:           one row per aging bucket,
- collections_to_dataframe:     projected collections per horizon,
- tax_summary_to_dataframe:     one row per tax rate plus totals,
- invoice_lines_to_dataframe:   per-line invoice values,
- ratios_to_dataframe:          one row per ratio.
"""

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import pandas as pd

from .aging import BUCKETS, AgingResult
from .comparison import ComparisonResult, Delta
from .engine import CATEGORY_LABELS, GRAND_TOTALS, TOTAL_LABELS
from .models import InvoiceLineItem
from .ratios import RatioResult
from .tax import TaxSummary

VIEW_LEVELS: dict[str, Optional[int]] = {
    "simplified": 0,
    "regular": 1,
    "detailed": None,
}

COMPARISON_COLUMNS = [
    "scope",
    "category",
    "key",
    "name",
    "amount",
    "comparison_amount",
    "difference",
    "percent_change",
    "status",
]


def round_amount(value: Optional[Decimal], decimals: Optional[int]) -> Optional[Decimal]:
    """Round half-up to ``decimals`` places; None and decimals=None pass through."""
    if value is None or decimals is None:
        return value
    return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def apply_view_level_filter(out: pd.DataFrame, view: str) -> pd.DataFrame:
    """Return a view-specific slice with harmonized display_order and columns.

    - "simplified": keep rows with level 0,
    - "regular":    keep rows with level <= 1,
    - "detailed":   keep all rows.

    Steps:
      1) filter by view,
      2) sort by the original display_order (ascending),
      3) renumber display_order to 10, 20, 30, ...
      4) reorder columns: display_order, id, level, name, type, amount.

    Raises:
        ValueError: on an unknown view name.
    """
    if view not in VIEW_LEVELS:
        raise ValueError(
            f"Unknown view {view!r}. Expected one of: {', '.join(VIEW_LEVELS)}."
        )

    max_level = VIEW_LEVELS[view]
    if max_level is None:
        df = out.copy()
    else:
        df = out[out["level"] <= max_level].copy()

    if "display_order" in df.columns:
        df = df.sort_values("display_order", ascending=True, kind="stable")
    df = df.reset_index(drop=True)

    df["display_order"] = (df.index + 1) * 10

    ordered_cols = ["display_order", "id", "level", "name", "type", "amount"]
    return df[[c for c in ordered_cols if c in df.columns]]


def round_statement(df: pd.DataFrame, decimals: int) -> pd.DataFrame:
    """Copy of a statement table with its amounts rounded."""
    out = df.copy()
    out["amount"] = [round_amount(v, decimals) for v in out["amount"]]
    return out


def _delta_row(
    scope: str,
    category: str,
    key: str,
    name: str,
    delta: Delta,
    decimals: Optional[int],
) -> dict[str, object]:
    return {
        "scope": scope,
        "category": category,
        "key": key,
        "name": name,
        "amount": round_amount(delta.amount, decimals),
        "comparison_amount": round_amount(delta.comparison_amount, decimals),
        "difference": round_amount(delta.difference, decimals),
        "percent_change": round_amount(delta.percent_change, decimals),
        "status": delta.status,
    }


def comparison_to_dataframe(
    comparison: ComparisonResult,
    decimals: Optional[int] = None,
) -> pd.DataFrame:
    """
    Flatten a ComparisonResult into one DataFrame.

    Rows are emitted per category (items first, then the category total),
    followed by the grand totals. The ``scope`` column is 'item',
    'category' or 'total'. Missing sides and undefined percentages stay
    None.
    """
    rows: list[dict[str, object]] = []

    for category, label in CATEGORY_LABELS.items():
        for entry in comparison.items_in(category):
            rows.append(
                _delta_row(
                    "item",
                    category,
                    entry.item_id or "",
                    entry.name,
                    entry.delta,
                    decimals,
                )
            )
        rows.append(
            _delta_row(
                "category",
                category,
                category,
                label,
                comparison.category_total(category),
                decimals,
            )
        )

    for key in GRAND_TOTALS:
        rows.append(
            _delta_row("total", "", key, TOTAL_LABELS[key], comparison.grand_total(key), decimals)
        )

    return pd.DataFrame(rows, columns=COMPARISON_COLUMNS)


def aging_to_dataframe(result: AgingResult, decimals: Optional[int] = None) -> pd.DataFrame:
    """One row per bucket with its amount and share of the total, plus a total row."""
    amounts = result.breakdown.as_dict()
    rows = [
        {
            "bucket": bucket,
            "amount": round_amount(amounts[bucket], decimals),
            "percent": round_amount(result.percentages[bucket], decimals),
        }
        for bucket in BUCKETS
    ]
    rows.append(
        {
            "bucket": "total",
            "amount": round_amount(result.total, decimals),
            "percent": round_amount(
                sum(result.percentages.values(), Decimal("0")), decimals
            ),
        }
    )
    return pd.DataFrame(rows, columns=["bucket", "amount", "percent"])


def collections_to_dataframe(
    projections: Mapping[str, Decimal],
    decimals: Optional[int] = None,
) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"horizon": horizon, "expected_amount": round_amount(amount, decimals)}
            for horizon, amount in projections.items()
        ],
        columns=["horizon", "expected_amount"],
    )


def tax_summary_to_dataframe(summary: TaxSummary, decimals: Optional[int] = None) -> pd.DataFrame:
    """
    Tax summary as a table.

    One 'rate' row per tax group (ascending rate), one 'charge' row per
    additional charge, then a final 'total' row holding the grand totals.
    """
    rows: list[dict[str, object]] = []
    for group in summary.groups.values():
        rows.append(
            {
                "type": "rate",
                "label": f"{group.rate}%",
                "item_count": group.item_count,
                "taxable_total": round_amount(group.taxable_total, decimals),
                "tax_total": round_amount(group.tax_total, decimals),
                "total": round_amount(group.gross_total, decimals),
            }
        )
    for label, amount in summary.additional_charges.items():
        rows.append(
            {
                "type": "charge",
                "label": label,
                "item_count": None,
                "taxable_total": None,
                "tax_total": None,
                "total": round_amount(amount, decimals),
            }
        )
    rows.append(
        {
            "type": "total",
            "label": "Grand total",
            "item_count": sum(g.item_count for g in summary.groups.values()),
            "taxable_total": round_amount(summary.grand_subtotal, decimals),
            "tax_total": round_amount(summary.grand_tax, decimals),
            "total": round_amount(summary.grand_total, decimals),
        }
    )
    return pd.DataFrame(
        rows, columns=["type", "label", "item_count", "taxable_total", "tax_total", "total"]
    )


def invoice_lines_to_dataframe(
    items: Iterable[InvoiceLineItem],
    decimals: Optional[int] = None,
) -> pd.DataFrame:
    """Per-line invoice values (gross, discount, taxable value, tax, line total)."""
    columns = [
        "description",
        "quantity",
        "unit_price",
        "discount_pct",
        "gross_value",
        "discount_amount",
        "taxable_value",
        "tax_rate_pct",
        "tax_amount",
        "line_total",
    ]
    rows = [
        {
            "description": i.description,
            "quantity": i.quantity,
            "unit_price": round_amount(i.unit_price, decimals),
            "discount_pct": i.discount_pct,
            "gross_value": round_amount(i.gross_value, decimals),
            "discount_amount": round_amount(i.discount_amount, decimals),
            "taxable_value": round_amount(i.taxable_value, decimals),
            "tax_rate_pct": i.tax_rate_pct,
            "tax_amount": round_amount(i.tax_amount, decimals),
            "line_total": round_amount(i.line_total, decimals),
        }
        for i in items
    ]
    return pd.DataFrame(rows, columns=columns)


def ratios_to_dataframe(ratios: list[RatioResult], decimals: Optional[int] = None) -> pd.DataFrame:
    """
    Convert a list of RatioResult objects into a pandas DataFrame.

    The resulting DataFrame has the following columns:
        - key:    Internal ratio identifier (e.g. "current_ratio").
        - name:   Human-readable name to display.
        - value:  Value, rounded to the requested number of decimals.
        - status: 'good', 'high' or 'low'.
        - unit:   Unit hint ("ratio" or "amount").
        - notes:  Optional description or comment.

    Rows keep the order in which the ratios were computed.
    """
    columns = ["key", "name", "value", "status", "unit", "notes"]
    if not ratios:
        return pd.DataFrame(columns=columns)

    rows = [
        {
            "key": r.key,
            "name": r.name,
            "value": round_amount(r.value, decimals),
            "status": r.status,
            "unit": r.unit,
            "notes": r.notes,
        }
        for r in ratios
    ]
    return pd.DataFrame(rows, columns=columns)
