from decimal import Decimal

import pytest

from finstat.config import RatioThresholds
from finstat.engine import aggregate_snapshot
from finstat.models import BalanceSheetSnapshot, LineItem, Section
from finstat.ratios import compute_ratios, current_ratio, debt_to_equity, working_capital


@pytest.mark.parametrize(
    "assets, liabilities, expected_status",
    [
        (150, 100, "good"),  # lower bound inclusive
        (300, 100, "good"),  # upper bound inclusive
        (301, 100, "high"),
        (149, 100, "low"),
    ],
)
def test_current_ratio_status(assets, liabilities, expected_status) -> None:
    result = current_ratio(assets, liabilities)
    assert result.status == expected_status
    assert result.value == Decimal(assets) / Decimal(liabilities)


def test_current_ratio_zero_liabilities_is_sentinel() -> None:
    result = current_ratio(0, 0)
    assert result.value == Decimal("0")
    assert result.status == "low"

    result = current_ratio(5000, 0)
    assert result.value == Decimal("0")
    assert result.status == "low"


def test_debt_to_equity_status() -> None:
    assert debt_to_equity(100, 100).status == "good"
    assert debt_to_equity(199, 100).status == "good"
    assert debt_to_equity(200, 100).status == "high"


def test_debt_to_equity_zero_equity_policy() -> None:
    result = debt_to_equity(1000, 0)
    assert result.value == Decimal("0")
    assert result.status == "good"

    strict = RatioThresholds(zero_equity_status="high")
    assert debt_to_equity(1000, 0, strict).status == "high"


def test_working_capital() -> None:
    positive = working_capital(310000, 95000)
    assert positive.value == Decimal("215000")
    assert positive.status == "good"
    assert positive.unit == "amount"

    assert working_capital(100, 100).status == "low"
    assert working_capital(50, 100).value == Decimal("-50")


def test_custom_thresholds() -> None:
    thresholds = RatioThresholds(
        current_ratio_low=Decimal("1.0"),
        current_ratio_high=Decimal("2.0"),
        debt_to_equity_high=Decimal("1.0"),
    )
    assert current_ratio(250, 100, thresholds).status == "high"
    assert debt_to_equity(150, 100, thresholds).status == "high"


def test_compute_ratios_from_totals() -> None:
    snapshot = BalanceSheetSnapshot(
        as_of="2024-12-31",
        assets=Section(
            current=[LineItem("Cash", 125000), LineItem("Accounts receivable", 185000)],
            non_current=[LineItem("PPE", 890000)],
        ),
        liabilities=Section(
            current=[LineItem("Accounts payable", 95000)],
            non_current=[LineItem("Long-term debt", 420000)],
        ),
        equity=[LineItem("Common stock", 500000), LineItem("Retained earnings", 185000)],
    )
    ratios = {r.key: r for r in compute_ratios(aggregate_snapshot(snapshot))}

    assert list(ratios) == ["current_ratio", "debt_to_equity", "working_capital"]
    assert ratios["current_ratio"].value == Decimal("310000") / Decimal("95000")
    assert ratios["current_ratio"].status == "high"
    assert ratios["debt_to_equity"].value == Decimal("515000") / Decimal("685000")
    assert ratios["debt_to_equity"].status == "good"
    assert ratios["working_capital"].value == Decimal("215000")
