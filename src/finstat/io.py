# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for FinStat.

This module reads CSV files and turns them into the engine's value objects.
All cells are read as text (``dtype=str``) and amounts are converted to
Decimal directly from that text, so no value ever goes through a binary
float.

Expected input formats
----------------------

Column names are case-insensitive. Any other column is ignored.

1) Balance sheets
   ---------------
       period_id, period_label, as_of, section, category, name, amount[, item_id]

   - ``section``:  assets, liabilities or equity
   - ``category``: current or non_current for assets and liabilities;
                   empty for equity
   - ``item_id``:  optional stable identifier used to match items across
                   periods

   Rows of the same ``period_id`` form one Period. Their ``as_of`` values
   must agree. Row order is kept as display order.

2) Invoice items
   --------------
       description, quantity, unit_price, discount_pct, tax_rate_pct

   ``discount_pct`` and ``tax_rate_pct`` may be left empty (0).

3) Invoices (receivables or payables)
   ----------------------------------
       invoice_id, amount, due_date, status

   ``status`` is paid, pending or overdue (pending when empty).

Errors
------
A missing column raises ValueError. A malformed cell raises
InvalidInputError with the row number (1-based, header excluded).
"""

import os
from typing import Union

import pandas as pd

from .errors import InvalidInputError
from .models import (
    BalanceSheetSnapshot,
    Invoice,
    InvoiceLineItem,
    LineItem,
    Section,
    to_date,
)
from .periods import Period

PathLike = Union[str, "os.PathLike[str]"]

BALANCE_SHEET_COLUMNS = {"period_id", "period_label", "as_of", "section", "category", "name", "amount"}
INVOICE_ITEM_COLUMNS = {"description", "quantity", "unit_price", "discount_pct", "tax_rate_pct"}
INVOICE_COLUMNS = {"invoice_id", "amount", "due_date", "status"}


def _read_csv(path: PathLike, required: set[str], kind: str) -> pd.DataFrame:
    """Read a CSV as text with lower-cased, stripped column names."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).lower().strip() for c in df.columns]

    missing = required - set(df.columns)
    if missing:
        raise ValueError(
            f"Invalid {kind} structure in {os.fspath(path)}. Missing column(s): "
            f"{', '.join(sorted(missing))}. Expected: {', '.join(sorted(required))} "
            "(column names are case-insensitive)."
        )

    for col in df.columns:
        df[col] = df[col].str.strip()
    return df


def _row_error(kind: str, row_no: int, exc: Exception) -> InvalidInputError:
    return InvalidInputError(f"Invalid {kind} row {row_no}: {exc}")


def read_balance_sheets(path: PathLike) -> list[Period]:
    """
    Read balance sheet snapshots from a CSV file.

    Parameters
    ----------
    path:
        Path to the CSV file (see module docstring for the format).

    Returns
    -------
    list[Period]
        One Period per distinct period_id, in order of first appearance.

    Raises
    ------
    ValueError
        If a required column is missing.
    InvalidInputError
        On an unknown section/category, a malformed amount or date, or
        inconsistent as_of dates within a period.
    """
    df = _read_csv(path, BALANCE_SHEET_COLUMNS, "balance sheet")
    has_item_id = "item_id" in df.columns

    order: list[str] = []
    labels: dict[str, str] = {}
    dates: dict[str, object] = {}
    buckets: dict[str, dict[str, list[LineItem]]] = {}

    for row_no, row in enumerate(df.itertuples(index=False), start=1):
        try:
            period_id = row.period_id
            if not period_id:
                raise InvalidInputError("empty period_id.")

            as_of = to_date(row.as_of, "as_of")
            section = row.section.lower()
            category = row.category.lower().replace("-", "_")

            if section == "equity":
                key = "equity"
            elif section in ("assets", "liabilities"):
                if category not in ("current", "non_current"):
                    raise InvalidInputError(
                        f"unknown category {row.category!r} for section {section!r}; "
                        "expected current or non_current."
                    )
                key = f"{section}_{category}"
            else:
                raise InvalidInputError(
                    f"unknown section {row.section!r}; expected assets, liabilities or equity."
                )

            item = LineItem(
                name=row.name,
                amount=row.amount,
                item_id=row.item_id if has_item_id else None,
            )
        except InvalidInputError as exc:
            raise _row_error("balance sheet", row_no, exc) from exc

        if period_id not in buckets:
            order.append(period_id)
            buckets[period_id] = {
                "assets_current": [],
                "assets_non_current": [],
                "liabilities_current": [],
                "liabilities_non_current": [],
                "equity": [],
            }
            dates[period_id] = as_of
        elif dates[period_id] != as_of:
            raise InvalidInputError(
                f"Invalid balance sheet row {row_no}: as_of {as_of} differs from "
                f"{dates[period_id]} for period {period_id!r}."
            )

        if row.period_label and period_id not in labels:
            labels[period_id] = row.period_label
        buckets[period_id][key].append(item)

    periods: list[Period] = []
    for period_id in order:
        b = buckets[period_id]
        snapshot = BalanceSheetSnapshot(
            as_of=dates[period_id],
            assets=Section(current=b["assets_current"], non_current=b["assets_non_current"]),
            liabilities=Section(
                current=b["liabilities_current"], non_current=b["liabilities_non_current"]
            ),
            equity=b["equity"],
        )
        periods.append(Period(id=period_id, label=labels.get(period_id, period_id), data=snapshot))
    return periods


def read_invoice_items(path: PathLike) -> list[InvoiceLineItem]:
    """Read invoice line items from a CSV file (see module docstring)."""
    df = _read_csv(path, INVOICE_ITEM_COLUMNS, "invoice items")

    items: list[InvoiceLineItem] = []
    for row_no, row in enumerate(df.itertuples(index=False), start=1):
        try:
            items.append(
                InvoiceLineItem(
                    description=row.description,
                    quantity=row.quantity,
                    unit_price=row.unit_price,
                    discount_pct=row.discount_pct or "0",
                    tax_rate_pct=row.tax_rate_pct or "0",
                )
            )
        except InvalidInputError as exc:
            raise _row_error("invoice item", row_no, exc) from exc
    return items


def read_invoices(path: PathLike) -> list[Invoice]:
    """Read receivable or payable invoices from a CSV file (see module docstring)."""
    df = _read_csv(path, INVOICE_COLUMNS, "invoices")

    invoices: list[Invoice] = []
    for row_no, row in enumerate(df.itertuples(index=False), start=1):
        try:
            invoices.append(
                Invoice(
                    invoice_id=row.invoice_id,
                    amount=row.amount,
                    due_date=row.due_date,
                    status=row.status or "pending",
                )
            )
        except InvalidInputError as exc:
            raise _row_error("invoice", row_no, exc) from exc
    return invoices
