from decimal import Decimal

import pytest

import finstat.multi_periods as mp
from finstat.errors import InvalidInputError
from finstat.models import BalanceSheetSnapshot, LineItem, Section
from finstat.periods import Period


def _period(period_id: str, as_of: str, cash, equity) -> Period:
    return Period(
        id=period_id,
        label=period_id.replace("-", " "),
        data=BalanceSheetSnapshot(
            as_of=as_of,
            assets=Section(current=[LineItem("Cash", cash)]),
            liabilities=Section(current=[LineItem("Accounts payable", 100)]),
            equity=[LineItem("Common stock", equity)],
        ),
    )


def test_compute_all_multi_period_orders_and_compares_with_predecessor() -> None:
    periods = [
        _period("FY-2024", "2024-12-31", 300, 200),
        _period("FY-2022", "2022-12-31", 150, 50),
        _period("FY-2023", "2023-12-31", 200, 100),
    ]
    result = mp.compute_all_multi_period(periods)

    assert result.errors == {}
    assert list(result.statements) == ["FY-2022", "FY-2023", "FY-2024"]

    # Oldest period has no comparison
    assert result.statements["FY-2022"].comparison is None
    cash = result.statements["FY-2024"].comparison.item("current_assets", "Cash")
    assert cash.comparison_amount == Decimal("200")

    # Long-format totals: 8 keys per period
    assert len(result.totals) == 3 * 8
    assets = result.totals[result.totals["key"] == "total_assets"]
    assert assets["period_id"].tolist() == ["FY-2022", "FY-2023", "FY-2024"]
    assert assets["amount"].tolist() == [Decimal("150"), Decimal("200"), Decimal("300")]
    assert result.totals["is_balanced"].all()

    # Ratios: 3 per period
    assert len(result.ratios) == 9
    assert set(result.ratios["key"]) == {"current_ratio", "debt_to_equity", "working_capital"}

    # Comparisons exist for the two periods that have a predecessor
    assert set(result.comparisons["period_id"]) == {"FY-2023", "FY-2024"}
    latest = result.comparisons[
        (result.comparisons["period_id"] == "FY-2024")
        & (result.comparisons["key"] == "total_assets")
    ].iloc[0]
    assert latest["compared_with"] == "FY-2023"
    assert latest["difference"] == Decimal("100")
    assert latest["percent_change"] == Decimal("50")

    rows = result.statement_rows
    assert list(rows.columns[:2]) == ["period_id", "period_label"]
    assert set(rows["period_label"]) == {"FY 2022", "FY 2023", "FY 2024"}


def test_invalid_period_is_recorded_and_batch_continues() -> None:
    periods = [
        _period("FY-2023", "2023-12-31", 200, 100),
        Period(id="broken", label="Broken", data={"cash": 10}),
        _period("FY-2024", "2024-12-31", 300, 200),
    ]
    result = mp.compute_all_multi_period(periods)

    assert "broken" in result.errors
    assert list(result.statements) == ["FY-2023", "FY-2024"]


def test_assembly_error_is_isolated(monkeypatch) -> None:
    real_assemble = mp.assemble_statement

    def flaky_assemble(snapshot, comparison_snapshot=None, **kwargs):
        if snapshot.as_of.year == 2023:
            raise InvalidInputError("bad data for 2023")
        return real_assemble(snapshot, comparison_snapshot, **kwargs)

    monkeypatch.setattr(mp, "assemble_statement", flaky_assemble)

    periods = [
        _period("FY-2022", "2022-12-31", 150, 50),
        _period("FY-2023", "2023-12-31", 200, 100),
        _period("FY-2024", "2024-12-31", 300, 200),
    ]
    result = mp.compute_all_multi_period(periods)

    assert result.errors == {"FY-2023": "bad data for 2023"}
    # FY-2024 falls back to the last valid period as its baseline
    cash = result.statements["FY-2024"].comparison.item("current_assets", "Cash")
    assert cash.comparison_amount == Decimal("150")


def test_empty_or_duplicate_periods_are_rejected() -> None:
    with pytest.raises(ValueError):
        mp.compute_all_multi_period([])

    with pytest.raises(ValueError):
        mp.compute_all_multi_period(
            [
                _period("FY-2024", "2024-12-31", 1, 1),
                _period("FY-2024", "2023-12-31", 1, 1),
            ]
        )


def test_single_period_has_empty_comparisons() -> None:
    result = mp.compute_all_multi_period([_period("FY-2024", "2024-12-31", 300, 200)])

    assert result.comparisons.empty
    assert "compared_with" in result.comparisons.columns
