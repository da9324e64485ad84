# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Multi-period orchestration for statements, totals, ratios and comparisons.

This module provides the high-level entry point used to compute all
financial outputs for multiple reporting periods in a *single pass*.

Overview
--------
``compute_all_multi_period(periods, config)``:

1. orders the periods chronologically (oldest first, by as_of date);

2. for each Period:
   - assembles its statement with ``statement.assemble_statement``,
     comparing it with its chronological predecessor when there is one,
   - records statement rows, totals, ratios and comparison rows with
     ``period_id`` and ``period_label`` columns;

3. concatenates all per-period results into long-format DataFrames.

Failure isolation
-----------------
A period whose data is invalid does not abort the batch: the error message
is recorded in ``MultiPeriodResult.errors`` (period id -> message), a
warning is logged, and the remaining periods are still computed. The
following period is then compared with the last valid one.

Data model
----------
The long-format DataFrames carry one row per item for one period, which
makes them easy to filter, pivot and export (CLI, BI tools).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from .config import EngineConfig
from .errors import FinStatError
from .models import BalanceSheetSnapshot
from .periods import Period, sort_periods
from .statement import Statement, assemble_statement
from .views import COMPARISON_COLUMNS, comparison_to_dataframe

logger = logging.getLogger(__name__)

STATEMENT_COLUMNS = [
    "period_id",
    "period_label",
    "level",
    "display_order",
    "id",
    "name",
    "type",
    "category",
    "amount",
]
TOTALS_COLUMNS = ["period_id", "period_label", "key", "amount", "is_balanced"]
RATIO_COLUMNS = ["period_id", "period_label", "key", "name", "value", "status", "unit", "notes"]


@dataclass(frozen=True, eq=False)
class MultiPeriodResult:
    """
    Multi-period result.

    Attributes
    ----------
    statements :
        Statement per period id, for the periods that could be computed.
    statement_rows :
        Long-format hierarchical balance sheets (see
        engine.build_statement_rows) with period_id / period_label.
    totals :
        One row per total key and period, with the period's is_balanced
        flag.
    ratios :
        One row per ratio and period.
    comparisons :
        Comparison rows (see views.comparison_to_dataframe) of each period
        against its predecessor, with a ``compared_with`` column holding
        the predecessor's id.
    errors :
        Error message per period id, for the periods that failed.
    """

    statements: dict[str, Statement]
    statement_rows: pd.DataFrame
    totals: pd.DataFrame
    ratios: pd.DataFrame
    comparisons: pd.DataFrame
    errors: dict[str, str] = field(default_factory=dict)


def _concat(frames: list[pd.DataFrame], columns: list[str]) -> pd.DataFrame:
    if frames:
        return pd.concat(frames, ignore_index=True)
    return pd.DataFrame(columns=columns)


def compute_all_multi_period(
    periods: list[Period],
    config: Optional[EngineConfig] = None,
) -> MultiPeriodResult:
    """
    Compute statements, totals, ratios and comparisons over multiple
    periods in a single pass.

    Parameters
    ----------
    periods :
        Period objects to compute, in any order.
    config :
        Engine configuration; defaults to EngineConfig().

    Returns
    -------
    MultiPeriodResult

    Raises
    ------
    ValueError
        If no periods are provided or if two periods share an id.
    """
    if not periods:
        raise ValueError("compute_all_multi_period requires at least one Period.")

    ids = [p.id for p in periods]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise ValueError(f"Duplicate period ids: {', '.join(duplicates)}")

    config = config or EngineConfig()

    statements: dict[str, Statement] = {}
    errors: dict[str, str] = {}
    statement_frames: list[pd.DataFrame] = []
    totals_rows: list[dict[str, Any]] = []
    ratio_rows: list[dict[str, Any]] = []
    comparison_frames: list[pd.DataFrame] = []

    valid: list[Period] = []
    for period in periods:
        if isinstance(period.data, BalanceSheetSnapshot):
            valid.append(period)
            continue
        message = (
            f"Period data must be a BalanceSheetSnapshot, got {type(period.data).__name__}."
        )
        logger.warning("Skipping period %s: %s", period.id, message)
        errors[period.id] = message

    previous: Optional[Period] = None

    for period in sort_periods(valid):
        try:
            statement = assemble_statement(
                period.data,
                previous.data if previous is not None else None,
                config=config,
            )
        except (FinStatError, ValueError) as exc:
            logger.warning("Skipping period %s: %s", period.id, exc)
            errors[period.id] = str(exc)
            continue

        statements[period.id] = statement

        # ------------------------------------------------------------------
        # Statement rows
        # ------------------------------------------------------------------
        rows = statement.rows.copy()
        rows.insert(0, "period_label", period.label)
        rows.insert(0, "period_id", period.id)
        statement_frames.append(rows)

        # ------------------------------------------------------------------
        # Totals
        # ------------------------------------------------------------------
        for key, amount in statement.totals.as_dict().items():
            totals_rows.append(
                {
                    "period_id": period.id,
                    "period_label": period.label,
                    "key": key,
                    "amount": amount,
                    "is_balanced": statement.is_balanced,
                }
            )

        # ------------------------------------------------------------------
        # Ratios
        # ------------------------------------------------------------------
        for r in statement.ratios:
            ratio_rows.append(
                {
                    "period_id": period.id,
                    "period_label": period.label,
                    "key": r.key,
                    "name": r.name,
                    "value": r.value,
                    "status": r.status,
                    "unit": r.unit,
                    "notes": r.notes,
                }
            )

        # ------------------------------------------------------------------
        # Comparison with the predecessor
        # ------------------------------------------------------------------
        if statement.comparison is not None and previous is not None:
            comp = comparison_to_dataframe(statement.comparison)
            comp.insert(0, "compared_with", previous.id)
            comp.insert(0, "period_label", period.label)
            comp.insert(0, "period_id", period.id)
            comparison_frames.append(comp)

        previous = period

    return MultiPeriodResult(
        statements=statements,
        statement_rows=_concat(statement_frames, STATEMENT_COLUMNS),
        totals=pd.DataFrame(totals_rows, columns=TOTALS_COLUMNS),
        ratios=pd.DataFrame(ratio_rows, columns=RATIO_COLUMNS),
        comparisons=_concat(
            comparison_frames,
            ["period_id", "period_label", "compared_with"] + COMPARISON_COLUMNS,
        ),
        errors=errors,
    )
