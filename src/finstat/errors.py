# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Exceptions raised by FinStat.

Only invalid caller input is an error. Zero denominators (missing baseline
in a period comparison, zero liabilities or equity in ratios, zero totals in
aging percentages) are regular result states and never raise.
"""


class FinStatError(Exception):
    """Base class for all FinStat errors."""


class InvalidInputError(FinStatError, ValueError):
    """Raised when a caller-supplied record cannot be used as-is.

    Typical causes are a negative quantity or tax rate on an invoice line,
    a discount outside [0, 100], a malformed date or a non-numeric amount.
    Values are never silently coerced to something else.
    """
