# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Receivable / payable aging for FinStat.

Aging splits an outstanding balance into four buckets according to the
time elapsed since each document's due date:

    current, overdue_30, overdue_60, overdue_90_plus

This module provides:

1. ``bucket_for_due_date(due_date, as_of, policy)``
   The day-threshold rule. With the default AgingPolicy and
   ``days = (as_of - due_date).days``:

       days <= 0        -> 'current'           (not yet due, or due today)
       1 <= days <= 30  -> 'overdue_30'
       31 <= days <= 60 -> 'overdue_60'
       days > 60        -> 'overdue_90_plus'

2. ``classify_aging(total, breakdown, epsilon)``
   Validates a pre-bucketed breakdown against its owning total and computes
   each bucket's share of the total. A bucket sum that differs from the
   total by more than ``epsilon`` is reported (``is_consistent=False``)
   rather than raised, so that a caller can still render the figures.
   Percentages are 0 when the total is 0.

3. Helpers working from raw invoices
   - ``build_aged_balance(invoices, as_of, policy)``: bucket unpaid
     invoices (pending or overdue) and return the total with its breakdown.
   - ``summarize_invoices(invoices)``: totals and counts per status.
   - ``project_collections(breakdown, rates)``: expected collections per
     horizon from collection rates per bucket.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Literal, Optional

from .config import AgingPolicy
from .models import HUNDRED, ZERO, AgingBreakdown, Invoice, to_date, to_decimal

logger = logging.getLogger(__name__)

BucketName = Literal["current", "overdue_30", "overdue_60", "overdue_90_plus"]
BUCKETS: tuple[str, ...] = ("current", "overdue_30", "overdue_60", "overdue_90_plus")

DEFAULT_EPSILON = Decimal("0.01")

# Collection horizon fed by each bucket.
_HORIZONS: dict[str, str] = {
    "current": "next_30_days",
    "overdue_30": "next_60_days",
    "overdue_60": "next_90_days",
    "overdue_90_plus": "beyond_90_days",
}


@dataclass(frozen=True)
class AgedBalance:
    """An outstanding total together with its aging breakdown."""

    total: Decimal
    breakdown: AgingBreakdown

    def __post_init__(self) -> None:
        object.__setattr__(self, "total", to_decimal(self.total, "total"))


@dataclass(frozen=True)
class AgingResult:
    """
    Result of classify_aging().

    Attributes:
        total: Owning total (receivable or payable).
        breakdown: The bucketed amounts.
        bucket_sum: Sum of the four buckets.
        difference: ``bucket_sum - total``.
        is_consistent: True when ``|difference| <= epsilon``.
        percentages: Share of the total per bucket, in percent (all 0 when
            the total is 0).
    """

    total: Decimal
    breakdown: AgingBreakdown
    bucket_sum: Decimal
    difference: Decimal
    is_consistent: bool
    percentages: dict[str, Decimal]


@dataclass(frozen=True)
class InvoiceMetrics:
    """Totals and counts of a set of invoices, per status."""

    total_invoiced: Decimal
    total_paid: Decimal
    total_pending: Decimal
    total_overdue: Decimal
    invoice_count: int
    paid_count: int
    pending_count: int
    overdue_count: int
    average_invoice_amount: Decimal


def bucket_for_due_date(
    due_date: Any,
    as_of: Any,
    policy: Optional[AgingPolicy] = None,
) -> BucketName:
    """Return the aging bucket of a document due on ``due_date``.

    Args:
        due_date: Due date (date or ISO string).
        as_of: Reference date of the aging (date or ISO string).
        policy: Day thresholds; defaults to AgingPolicy().

    Raises:
        InvalidInputError: if a date is malformed.
    """
    policy = policy or AgingPolicy()
    days = (to_date(as_of, "as_of") - to_date(due_date, "due_date")).days

    if days <= policy.current_max_days:
        return "current"
    if days <= policy.overdue_30_max_days:
        return "overdue_30"
    if days <= policy.overdue_60_max_days:
        return "overdue_60"
    return "overdue_90_plus"


def classify_aging(
    total: Any,
    breakdown: AgingBreakdown,
    epsilon: Any = DEFAULT_EPSILON,
) -> AgingResult:
    """Validate a breakdown against its total and compute bucket shares.

    Args:
        total: Owning total (receivable or payable).
        breakdown: Pre-bucketed amounts.
        epsilon: Absolute tolerance between bucket sum and total.

    Returns:
        An AgingResult. ``percentages[bucket] = bucket / total * 100``,
        or 0 for every bucket when ``total == 0``.
    """
    total_dec = to_decimal(total, "total")
    eps = abs(to_decimal(epsilon, "epsilon"))

    bucket_sum = breakdown.total()
    difference = bucket_sum - total_dec
    is_consistent = abs(difference) <= eps
    if not is_consistent:
        logger.warning(
            "Aging buckets sum to %s but the total is %s (difference %s).",
            bucket_sum,
            total_dec,
            difference,
        )

    amounts = breakdown.as_dict()
    if total_dec == ZERO:
        percentages = {bucket: ZERO for bucket in BUCKETS}
    else:
        percentages = {bucket: amounts[bucket] / total_dec * HUNDRED for bucket in BUCKETS}

    return AgingResult(
        total=total_dec,
        breakdown=breakdown,
        bucket_sum=bucket_sum,
        difference=difference,
        is_consistent=is_consistent,
        percentages=percentages,
    )


def build_aged_balance(
    invoices: Iterable[Invoice],
    as_of: Any,
    policy: Optional[AgingPolicy] = None,
) -> AgedBalance:
    """
    Bucket outstanding invoices by due date.

    Paid invoices are excluded. Pending and overdue invoices are both
    bucketed with ``bucket_for_due_date``, so an invoice's bucket depends
    only on its due date, never on its status label.

    Returns
    -------
    AgedBalance
        ``total`` is the sum of all outstanding invoices and always equals
        the bucket sum.
    """
    as_of_date = to_date(as_of, "as_of")
    buckets = {bucket: ZERO for bucket in BUCKETS}

    for invoice in invoices:
        if invoice.status == "paid":
            continue
        bucket = bucket_for_due_date(invoice.due_date, as_of_date, policy)
        buckets[bucket] += invoice.amount

    breakdown = AgingBreakdown(**buckets)
    return AgedBalance(total=breakdown.total(), breakdown=breakdown)


def summarize_invoices(invoices: Iterable[Invoice]) -> InvoiceMetrics:
    """Totals and counts per status; average is 0 when there are no invoices."""
    totals = {"paid": ZERO, "pending": ZERO, "overdue": ZERO}
    counts = {"paid": 0, "pending": 0, "overdue": 0}
    total_invoiced = ZERO
    invoice_count = 0

    for invoice in invoices:
        total_invoiced += invoice.amount
        invoice_count += 1
        totals[invoice.status] += invoice.amount
        counts[invoice.status] += 1

    average = total_invoiced / invoice_count if invoice_count else ZERO

    return InvoiceMetrics(
        total_invoiced=total_invoiced,
        total_paid=totals["paid"],
        total_pending=totals["pending"],
        total_overdue=totals["overdue"],
        invoice_count=invoice_count,
        paid_count=counts["paid"],
        pending_count=counts["pending"],
        overdue_count=counts["overdue"],
        average_invoice_amount=average,
    )


def project_collections(
    breakdown: AgingBreakdown,
    rates: Optional[Mapping[str, Any]] = None,
) -> dict[str, Decimal]:
    """Expected collections per horizon.

    Each bucket feeds one horizon: current -> next_30_days, overdue_30 ->
    next_60_days, overdue_60 -> next_90_days, overdue_90_plus ->
    beyond_90_days. The amount is ``bucket * rate``; a missing rate counts
    as 0.
    """
    if rates is None:
        rates = AgingPolicy().collection_rates

    amounts = breakdown.as_dict()
    projections: dict[str, Decimal] = {}
    for bucket in BUCKETS:
        rate = to_decimal(rates.get(bucket, ZERO), f"collection rate '{bucket}'")
        projections[_HORIZONS[bucket]] = amounts[bucket] * rate
    return projections
