# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Multi-rate tax summary of invoice line items.

Each InvoiceLineItem carries its own discount and tax rate. The discount is
applied per line before grouping (see ``InvoiceLineItem.taxable_value``),
then lines are grouped by exact tax rate:

    TaxGroup(rate, taxable_total, tax_total, item_count)

Rates are grouped with Decimal equality, so ``Decimal("5")`` and
``Decimal("5.0")`` share a group. Groups are ordered by ascending rate.

Additional charges (transport, packaging, ...) are flat amounts added once
to the grand total. They are never taxed.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Union

from .errors import InvalidInputError
from .models import ZERO, InvoiceLineItem, to_decimal

AdditionalCharges = Union[Mapping[str, Any], Iterable[Any]]


@dataclass(frozen=True)
class TaxGroup:
    """Totals of the invoice lines sharing one tax rate."""

    rate: Decimal
    taxable_total: Decimal
    tax_total: Decimal
    item_count: int

    @property
    def gross_total(self) -> Decimal:
        return self.taxable_total + self.tax_total


@dataclass(frozen=True)
class TaxSummary:
    """
    Result of summarize_tax().

    Attributes:
        groups: TaxGroup per rate, in ascending rate order.
        grand_subtotal: Sum of taxable values over all lines.
        grand_tax: Sum of tax over all groups.
        additional_charges: Charges by label (positional labels
            'charge_1', 'charge_2', ... when given as plain amounts).
        additional_charges_total: Sum of the charges.
        grand_total: grand_subtotal + grand_tax + additional_charges_total.
    """

    groups: dict[Decimal, TaxGroup] = field(default_factory=dict)
    grand_subtotal: Decimal = ZERO
    grand_tax: Decimal = ZERO
    additional_charges: dict[str, Decimal] = field(default_factory=dict)
    additional_charges_total: Decimal = ZERO
    grand_total: Decimal = ZERO

    def group(self, rate: Any) -> Optional[TaxGroup]:
        return self.groups.get(to_decimal(rate, "rate"))


def _normalize_charges(charges: Optional[AdditionalCharges]) -> dict[str, Decimal]:
    if charges is None:
        return {}
    if isinstance(charges, Mapping):
        items = [(str(label), amount) for label, amount in charges.items()]
    elif isinstance(charges, (str, bytes)):
        raise InvalidInputError("Additional charges must be a mapping or a list of amounts.")
    else:
        items = [(f"charge_{pos}", amount) for pos, amount in enumerate(charges, start=1)]

    out: dict[str, Decimal] = {}
    for label, amount in items:
        out[label] = to_decimal(amount, f"additional charge '{label}'")
    return out


def summarize_tax(
    invoice_items: Iterable[InvoiceLineItem],
    additional_charges: Optional[AdditionalCharges] = None,
) -> TaxSummary:
    """
    Group invoice lines by tax rate and compute the invoice totals.

    Parameters
    ----------
    invoice_items :
        Invoice lines. Each one was validated on construction (no negative
        quantity, price or rate, discount within [0, 100]).
    additional_charges :
        Optional flat charges, either ``{"transport": 50, ...}`` or a plain
        list of amounts.

    Returns
    -------
    TaxSummary
        Empty groups and zero totals for an empty input (plus any charges).
    """
    taxable: dict[Decimal, Decimal] = {}
    tax: dict[Decimal, Decimal] = {}
    counts: dict[Decimal, int] = {}
    grand_subtotal = ZERO

    for item in invoice_items:
        if not isinstance(item, InvoiceLineItem):
            raise InvalidInputError(f"Expected InvoiceLineItem, got {type(item).__name__}.")
        rate = item.tax_rate_pct
        taxable[rate] = taxable.get(rate, ZERO) + item.taxable_value
        tax[rate] = tax.get(rate, ZERO) + item.tax_amount
        counts[rate] = counts.get(rate, 0) + 1
        grand_subtotal += item.taxable_value

    groups = {
        rate: TaxGroup(
            rate=rate,
            taxable_total=taxable[rate],
            tax_total=tax[rate],
            item_count=counts[rate],
        )
        for rate in sorted(taxable)
    }

    grand_tax = ZERO
    for g in groups.values():
        grand_tax += g.tax_total

    charges = _normalize_charges(additional_charges)
    charges_total = ZERO
    for amount in charges.values():
        charges_total += amount

    return TaxSummary(
        groups=groups,
        grand_subtotal=grand_subtotal,
        grand_tax=grand_tax,
        additional_charges=charges,
        additional_charges_total=charges_total,
        grand_total=grand_subtotal + grand_tax + charges_total,
    )
