# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Statement assembler for FinStat.

``assemble_statement`` runs the whole pipeline for one reporting period:

    aggregate -> statement rows -> compare -> aging -> tax -> ratios

and returns a single frozen Statement. Optional parts (comparison, aging,
tax) are None when the corresponding input is not supplied.

The balance check is tolerant:

    is_balanced = |total_assets - total_liabilities_and_equity| <= tolerance

with ``tolerance = config.balance_tolerance`` (0.01 by default). An
unbalanced sheet is a reported state, not an error; it is also logged as a
warning.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Union

import pandas as pd

from .aging import AgedBalance, AgingResult, build_aged_balance, classify_aging
from .comparison import ComparisonResult, compare_periods
from .config import EngineConfig
from .engine import Totals, aggregate_snapshot, build_statement_rows
from .models import BalanceSheetSnapshot, Invoice, InvoiceLineItem
from .ratios import RatioResult, compute_ratios
from .tax import AdditionalCharges, TaxSummary, summarize_tax

logger = logging.getLogger(__name__)

AgingInput = Union[AgedBalance, Iterable[Invoice]]


@dataclass(frozen=True, eq=False)
class Statement:
    """
    Everything computed for one reporting period.

    Attributes:
        as_of: Date of the reporting snapshot.
        totals: Category and grand totals.
        rows: Hierarchical balance sheet (see engine.build_statement_rows).
        comparison: Comparison with the comparison snapshot, if any.
        receivables_aging / payables_aging: Aging results, if supplied.
        tax: Tax summary of the invoice items, if supplied.
        ratios: Ratio results (empty when ratios are disabled).
        is_balanced: Whether assets match liabilities + equity within the
            configured tolerance.
        balance_difference: total_assets - total_liabilities_and_equity.
    """

    as_of: date
    totals: Totals
    rows: pd.DataFrame
    comparison: Optional[ComparisonResult]
    receivables_aging: Optional[AgingResult]
    payables_aging: Optional[AgingResult]
    tax: Optional[TaxSummary]
    ratios: list[RatioResult]
    is_balanced: bool
    balance_difference: Decimal


def _resolve_aging(
    data: Optional[AgingInput],
    snapshot: BalanceSheetSnapshot,
    config: EngineConfig,
) -> Optional[AgingResult]:
    if data is None:
        return None
    if not isinstance(data, AgedBalance):
        data = build_aged_balance(data, snapshot.as_of, config.aging)
    return classify_aging(data.total, data.breakdown, config.aging.epsilon)


def assemble_statement(
    snapshot: BalanceSheetSnapshot,
    comparison_snapshot: Optional[BalanceSheetSnapshot] = None,
    *,
    receivables: Optional[AgingInput] = None,
    payables: Optional[AgingInput] = None,
    invoice_items: Optional[Iterable[InvoiceLineItem]] = None,
    additional_charges: Optional[AdditionalCharges] = None,
    config: Optional[EngineConfig] = None,
) -> Statement:
    """
    Assemble the statement of one period.

    Parameters
    ----------
    snapshot :
        Balance sheet of the reporting period.
    comparison_snapshot :
        Optional balance sheet to compare against.
    receivables, payables :
        Either an AgedBalance (total + pre-bucketed breakdown) or a list of
        Invoice objects, which are bucketed by due date as of
        ``snapshot.as_of``.
    invoice_items, additional_charges :
        Optional invoice lines and flat charges for the tax summary.
    config :
        Engine configuration; defaults to EngineConfig().

    Returns
    -------
    Statement

    Raises
    ------
    InvalidInputError
        If an input value is malformed (for instance an invalid due date).
    """
    config = config or EngineConfig()

    totals = aggregate_snapshot(snapshot)
    rows = build_statement_rows(snapshot, totals)

    comparison = None
    if comparison_snapshot is not None:
        comparison = compare_periods(snapshot, comparison_snapshot, base_totals=totals)

    tax = None
    if invoice_items is not None:
        tax = summarize_tax(invoice_items, additional_charges)

    ratios = compute_ratios(totals, config.ratios) if config.ratios_enabled else []

    balance_difference = totals.total_assets - totals.total_liabilities_and_equity
    is_balanced = abs(balance_difference) <= config.balance_tolerance
    if not is_balanced:
        logger.warning(
            "Balance sheet as of %s is not balanced: assets=%s, liabilities and equity=%s.",
            snapshot.as_of,
            totals.total_assets,
            totals.total_liabilities_and_equity,
        )

    return Statement(
        as_of=snapshot.as_of,
        totals=totals,
        rows=rows,
        comparison=comparison,
        receivables_aging=_resolve_aging(receivables, snapshot, config),
        payables_aging=_resolve_aging(payables, snapshot, config),
        tax=tax,
        ratios=ratios,
        is_balanced=is_balanced,
        balance_difference=balance_difference,
    )
