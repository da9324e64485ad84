# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
FinStat
-------

A stateless computation engine that turns raw financial line items into
derived financial artifacts for Small and Medium-sized Businesses:

- hierarchical balance sheets (current / non-current rollups),
- period-over-period comparisons with explicit "no baseline" states,
- receivable / payable aging breakdowns and collection projections,
- multi-rate tax summaries of invoice items,
- liquidity and leverage ratios with qualitative status,
- a multi-period orchestration producing long-format DataFrames.

All amounts are ``decimal.Decimal``. Formatting and rounding are left to
the view helpers and the command-line interface.

Usage:
    python -m finstat.cli --help
"""

from .aging import bucket_for_due_date, classify_aging
from .comparison import compare_periods
from .engine import aggregate_snapshot
from .multi_periods import compute_all_multi_period
from .ratios import compute_ratios
from .statement import assemble_statement
from .tax import summarize_tax

__all__ = [
    "aggregate_snapshot",
    "assemble_statement",
    "bucket_for_due_date",
    "classify_aging",
    "compare_periods",
    "compute_all_multi_period",
    "compute_ratios",
    "summarize_tax",
]

__version__ = "0.1.0"
