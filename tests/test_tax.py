from decimal import Decimal

import pytest

from finstat.errors import InvalidInputError
from finstat.models import InvoiceLineItem
from finstat.tax import summarize_tax


def _items() -> list[InvoiceLineItem]:
    return [
        InvoiceLineItem("Consulting day", 2, 100, 10, 5),
        InvoiceLineItem("Software licence", 1, 1200, 0, 18),
        InvoiceLineItem("Training session", 3, 250, 5, 18),
        InvoiceLineItem("Printed manuals", 10, "12.50", 0, 0),
    ]


def test_single_item_reference_example() -> None:
    item = InvoiceLineItem("Item", quantity=2, unit_price=100, discount_pct=10, tax_rate_pct=5)
    summary = summarize_tax([item])

    assert summary.grand_subtotal == Decimal("180")
    assert summary.grand_tax == Decimal("9")
    assert summary.grand_total == Decimal("189")


def test_groups_by_rate_in_ascending_order() -> None:
    summary = summarize_tax(_items())

    assert list(summary.groups) == [Decimal("0"), Decimal("5"), Decimal("18")]

    g18 = summary.group(18)
    assert g18.item_count == 2
    # 1200 + 3 * 250 * 0.95
    assert g18.taxable_total == Decimal("1912.5")
    assert g18.tax_total == Decimal("344.25")

    g0 = summary.group("0")
    assert g0.taxable_total == Decimal("125")
    assert g0.tax_total == Decimal("0")


def test_grand_subtotal_equals_sum_of_taxable_values() -> None:
    items = _items()
    summary = summarize_tax(items)

    assert summary.grand_subtotal == sum((i.taxable_value for i in items), Decimal("0"))
    assert summary.grand_tax == sum((g.tax_total for g in summary.groups.values()), Decimal("0"))


def test_equal_rates_share_a_group() -> None:
    summary = summarize_tax(
        [
            InvoiceLineItem("a", 1, 100, tax_rate_pct="5"),
            InvoiceLineItem("b", 1, 100, tax_rate_pct="5.0"),
        ]
    )
    assert len(summary.groups) == 1
    assert summary.group(5).item_count == 2


def test_additional_charges_are_added_once_and_not_taxed() -> None:
    items = [InvoiceLineItem("Item", 2, 100, 10, 5)]
    summary = summarize_tax(items, {"transport": 50, "packaging": "12.5"})

    assert summary.grand_tax == Decimal("9")
    assert summary.additional_charges == {"transport": Decimal("50"), "packaging": Decimal("12.5")}
    assert summary.additional_charges_total == Decimal("62.5")
    assert summary.grand_total == Decimal("251.5")


def test_additional_charges_as_plain_amounts() -> None:
    summary = summarize_tax([], [10, "5"])

    assert summary.additional_charges == {"charge_1": Decimal("10"), "charge_2": Decimal("5")}
    assert summary.grand_total == Decimal("15")


def test_empty_input_yields_empty_groups_and_zero_totals() -> None:
    summary = summarize_tax([])

    assert summary.groups == {}
    assert summary.grand_subtotal == Decimal("0")
    assert summary.grand_tax == Decimal("0")
    assert summary.grand_total == Decimal("0")


def test_invalid_charge_is_rejected() -> None:
    with pytest.raises(InvalidInputError):
        summarize_tax([], {"transport": "fifty"})
    with pytest.raises(InvalidInputError):
        summarize_tax([], "50")
