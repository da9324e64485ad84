# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Computation of financial ratios for FinStat.

This module complements the rollup engine (engine.py) by deriving
liquidity and leverage ratios from already-aggregated totals:

1. current_ratio = current_assets / current_liabilities
   -------------------------------------------------------
   Status:
       good : 1.5 <= ratio <= 3.0
       high : ratio > 3.0
       low  : ratio < 1.5
   Zero current liabilities: the ratio is reported as 0 with status
   'low' (defined sentinel, never a division error).

2. debt_to_equity = total_liabilities / total_equity
   --------------------------------------------------
   Status:
       good : ratio < 2.0
       high : ratio >= 2.0
   Zero equity: the ratio is reported as 0. The status defaults to 'good'
   and can be changed with ``RatioThresholds.zero_equity_status``.

3. working_capital = current_assets - current_liabilities
   -------------------------------------------------------
   Status: good if > 0, otherwise low.

The bounds (1.5, 3.0, 2.0) come from ``RatioThresholds`` and can be
overridden in the [ratios] section of the configuration file.

Each function returns a RatioResult containing:
    - key
    - name
    - value (Decimal)
    - status ('good', 'high', 'low')
    - unit ('ratio' or 'amount')
    - notes

Integration with the rest of the system
---------------------------------------
This module does NOT aggregate line items (engine.py does that) nor
orchestrate multi-period logic (multi_periods.py). It is consumed by
statement.py and by the tabular views.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Literal, Optional

from .config import RatioThresholds
from .engine import Totals
from .models import ZERO, to_decimal

RatioStatus = Literal["good", "high", "low"]


@dataclass(frozen=True)
class RatioResult:
    """
    Computed ratio as returned by this module.

    Attributes:
        key: Internal identifier (e.g. 'current_ratio').
        name: Human-readable name for display (e.g. 'Current ratio').
        value: Numeric value (Decimal). Zero denominators yield 0.
        status: Qualitative classification ('good', 'high', 'low').
        unit: Unit hint ('ratio' or 'amount').
        notes: Optional human-readable notes (e.g. sentinel explanation).
    """

    key: str
    name: str
    value: Decimal
    status: RatioStatus
    unit: str = "ratio"
    notes: str = ""


def current_ratio(
    current_assets: Any,
    current_liabilities: Any,
    thresholds: Optional[RatioThresholds] = None,
) -> RatioResult:
    """Current assets divided by current liabilities."""
    thresholds = thresholds or RatioThresholds()
    assets = to_decimal(current_assets, "current_assets")
    liabilities = to_decimal(current_liabilities, "current_liabilities")

    if liabilities == ZERO:
        return RatioResult(
            key="current_ratio",
            name="Current ratio",
            value=ZERO,
            status="low",
            notes="No current liabilities; ratio reported as 0.",
        )

    value = assets / liabilities
    status: RatioStatus
    if value > thresholds.current_ratio_high:
        status = "high"
    elif value < thresholds.current_ratio_low:
        status = "low"
    else:
        status = "good"

    return RatioResult(key="current_ratio", name="Current ratio", value=value, status=status)


def debt_to_equity(
    total_liabilities: Any,
    total_equity: Any,
    thresholds: Optional[RatioThresholds] = None,
) -> RatioResult:
    """Total liabilities divided by total equity."""
    thresholds = thresholds or RatioThresholds()
    liabilities = to_decimal(total_liabilities, "total_liabilities")
    equity = to_decimal(total_equity, "total_equity")

    if equity == ZERO:
        return RatioResult(
            key="debt_to_equity",
            name="Debt to equity",
            value=ZERO,
            status=thresholds.zero_equity_status,
            notes="No equity; ratio reported as 0.",
        )

    value = liabilities / equity
    status: RatioStatus = "good" if value < thresholds.debt_to_equity_high else "high"
    return RatioResult(key="debt_to_equity", name="Debt to equity", value=value, status=status)


def working_capital(current_assets: Any, current_liabilities: Any) -> RatioResult:
    """Current assets minus current liabilities."""
    value = to_decimal(current_assets, "current_assets") - to_decimal(
        current_liabilities, "current_liabilities"
    )
    return RatioResult(
        key="working_capital",
        name="Working capital",
        value=value,
        status="good" if value > ZERO else "low",
        unit="amount",
    )


def compute_ratios(
    totals: Totals,
    thresholds: Optional[RatioThresholds] = None,
) -> list[RatioResult]:
    """
    Compute all ratios from aggregated totals.

    Args:
        totals: Output of aggregate_snapshot().
        thresholds: Classification bounds; defaults to RatioThresholds().

    Returns:
        [current_ratio, debt_to_equity, working_capital], in that order.
    """
    return [
        current_ratio(
            totals.total_current_assets, totals.total_current_liabilities, thresholds
        ),
        debt_to_equity(totals.total_liabilities, totals.total_equity, thresholds),
        working_capital(totals.total_current_assets, totals.total_current_liabilities),
    ]
