# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Value objects shared by all FinStat components.

Every object in this module is an immutable dataclass. Monetary and
percentage fields are stored as ``decimal.Decimal`` so that summing many
line items never drifts by a cent, which binary floating point would do.

Objects defined here:

- LineItem:             one named amount of a balance sheet.
- Section:              current / non-current split of assets or liabilities.
- BalanceSheetSnapshot: a full balance sheet at a given date.
- AgingBreakdown:       amounts bucketed by elapsed time since due date.
- InvoiceLineItem:      one invoice line with discount and tax rate.
- Invoice:              one receivable/payable document, used to build
                        aging breakdowns from raw records.

Construction accepts ``int``, ``str``, ``float`` and ``Decimal`` for amounts
and a ``date`` or an ISO string for dates. Lists supplied by the caller are
copied into tuples, so the caller's collections are never shared nor
mutated.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Literal, Optional

from .errors import InvalidInputError

ZERO = Decimal("0")
HUNDRED = Decimal("100")

InvoiceStatus = Literal["paid", "pending", "overdue"]
INVOICE_STATUSES: tuple[str, ...] = ("paid", "pending", "overdue")


def to_decimal(value: Any, field_name: str = "amount") -> Decimal:
    """Convert a numeric value to Decimal without going through binary floats.

    Floats are converted through ``str()`` so that ``0.1`` becomes
    ``Decimal("0.1")`` rather than its binary approximation.

    Raises:
        InvalidInputError: if the value is empty, not numeric, or not finite.
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid {field_name}: {value!r} is not a number.")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise InvalidInputError(f"Invalid {field_name}: empty value.")
        try:
            result = Decimal(raw)
        except InvalidOperation as exc:
            raise InvalidInputError(
                f"Invalid {field_name}: {value!r} is not a number."
            ) from exc
    else:
        raise InvalidInputError(
            f"Invalid {field_name}: unsupported type {type(value).__name__}."
        )

    if not result.is_finite():
        raise InvalidInputError(f"Invalid {field_name}: {value!r} is not finite.")
    return result


def to_date(value: Any, field_name: str = "date") -> date:
    """Convert a date, datetime or ISO string (YYYY-MM-DD) to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidInputError(
                f"Invalid {field_name}: {value!r}, expected YYYY-MM-DD format."
            ) from exc
    raise InvalidInputError(
        f"Invalid {field_name}: unsupported type {type(value).__name__}."
    )


@dataclass(frozen=True)
class LineItem:
    """A named amount of a balance sheet (e.g. 'Cash', 125000).

    Attributes:
        name: Display name. Not guaranteed unique within a list.
        amount: Signed amount; may be negative (e.g. treasury stock).
        item_id: Optional stable identifier. When both periods carry one,
            period comparison matches on it instead of the name.
    """

    name: str
    amount: Decimal
    item_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", str(self.name))
        object.__setattr__(self, "amount", to_decimal(self.amount, "amount"))
        if self.item_id is not None:
            item_id = str(self.item_id).strip()
            object.__setattr__(self, "item_id", item_id or None)


def _as_items(items: Iterable[Any]) -> tuple[LineItem, ...]:
    out = []
    for item in items:
        if not isinstance(item, LineItem):
            raise InvalidInputError(
                f"Expected LineItem, got {type(item).__name__}."
            )
        out.append(item)
    return tuple(out)


@dataclass(frozen=True)
class Section:
    """Current / non-current split used for assets and liabilities.

    Order within each tuple is display order only.
    """

    current: tuple[LineItem, ...] = ()
    non_current: tuple[LineItem, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "current", _as_items(self.current))
        object.__setattr__(self, "non_current", _as_items(self.non_current))


@dataclass(frozen=True)
class BalanceSheetSnapshot:
    """A balance sheet at a given date.

    ``total(assets) == total(liabilities) + total(equity)`` is a *reported*
    property: nothing here enforces it. The statement assembler computes
    and exposes whether it holds.
    """

    as_of: date
    assets: Section = field(default_factory=Section)
    liabilities: Section = field(default_factory=Section)
    equity: tuple[LineItem, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "as_of", to_date(self.as_of, "as_of"))
        object.__setattr__(self, "equity", _as_items(self.equity))


@dataclass(frozen=True)
class AgingBreakdown:
    """Outstanding amounts bucketed by elapsed time since due date."""

    current: Decimal = ZERO
    overdue_30: Decimal = ZERO
    overdue_60: Decimal = ZERO
    overdue_90_plus: Decimal = ZERO

    def __post_init__(self) -> None:
        for name in ("current", "overdue_30", "overdue_60", "overdue_90_plus"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))

    def as_dict(self) -> dict[str, Decimal]:
        return {
            "current": self.current,
            "overdue_30": self.overdue_30,
            "overdue_60": self.overdue_60,
            "overdue_90_plus": self.overdue_90_plus,
        }

    def total(self) -> Decimal:
        return self.current + self.overdue_30 + self.overdue_60 + self.overdue_90_plus


@dataclass(frozen=True)
class InvoiceLineItem:
    """
    One invoice line.

    Derived values
    --------------
    gross_value     = quantity * unit_price
    discount_amount = gross_value * discount_pct / 100
    taxable_value   = gross_value - discount_amount
                      (= quantity * unit_price * (1 - discount_pct / 100))
    tax_amount      = taxable_value * tax_rate_pct / 100
    line_total      = taxable_value + tax_amount

    Raises
    ------
    InvalidInputError
        On a negative quantity, unit price or tax rate, or a discount
        outside [0, 100].
    """

    description: str
    quantity: Decimal
    unit_price: Decimal
    discount_pct: Decimal = ZERO
    tax_rate_pct: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "description", str(self.description))
        for name in ("quantity", "unit_price", "discount_pct", "tax_rate_pct"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))

        if self.quantity < ZERO:
            raise InvalidInputError(
                f"Negative quantity on invoice line {self.description!r}: "
                f"{self.quantity}."
            )
        if self.unit_price < ZERO:
            raise InvalidInputError(
                f"Negative unit price on invoice line {self.description!r}: "
                f"{self.unit_price}."
            )
        if not ZERO <= self.discount_pct <= HUNDRED:
            raise InvalidInputError(
                f"Discount must be within [0, 100] on invoice line "
                f"{self.description!r}: {self.discount_pct}."
            )
        if self.tax_rate_pct < ZERO:
            raise InvalidInputError(
                f"Negative tax rate on invoice line {self.description!r}: "
                f"{self.tax_rate_pct}."
            )

    @property
    def gross_value(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def discount_amount(self) -> Decimal:
        return self.gross_value * self.discount_pct / HUNDRED

    @property
    def taxable_value(self) -> Decimal:
        return self.gross_value - self.discount_amount

    @property
    def tax_amount(self) -> Decimal:
        return self.taxable_value * self.tax_rate_pct / HUNDRED

    @property
    def line_total(self) -> Decimal:
        return self.taxable_value + self.tax_amount


@dataclass(frozen=True)
class Invoice:
    """A receivable (or payable) document used for aging.

    Attributes:
        invoice_id: Caller identifier, kept for traceability only.
        amount: Outstanding amount of the document.
        due_date: Payment due date.
        status: 'paid', 'pending' or 'overdue'. Paid documents are not
            part of the outstanding balance.
    """

    invoice_id: str
    amount: Decimal
    due_date: date
    status: InvoiceStatus = "pending"

    def __post_init__(self) -> None:
        object.__setattr__(self, "invoice_id", str(self.invoice_id))
        object.__setattr__(self, "amount", to_decimal(self.amount, "amount"))
        object.__setattr__(self, "due_date", to_date(self.due_date, "due_date"))
        status = str(self.status).strip().lower()
        if status not in INVOICE_STATUSES:
            raise InvalidInputError(
                f"Unknown invoice status {self.status!r} for invoice "
                f"{self.invoice_id!r}. Expected one of: "
                f"{', '.join(INVOICE_STATUSES)}."
            )
        object.__setattr__(self, "status", status)
