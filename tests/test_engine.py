from decimal import Decimal

from finstat.engine import (
    aggregate_snapshot,
    build_statement_rows,
    section_totals,
    sum_items,
)
from finstat.models import BalanceSheetSnapshot, LineItem, Section


def _sample_snapshot() -> BalanceSheetSnapshot:
    return BalanceSheetSnapshot(
        as_of="2024-12-31",
        assets=Section(
            current=[LineItem("Cash", 125000), LineItem("Accounts receivable", 185000)],
            non_current=[LineItem("Property plant and equipment", 890000)],
        ),
        liabilities=Section(
            current=[LineItem("Accounts payable", 95000)],
            non_current=[LineItem("Long-term debt", 420000)],
        ),
        equity=[LineItem("Common stock", 500000), LineItem("Retained earnings", 185000)],
    )


def test_sum_items_empty_is_zero() -> None:
    total = sum_items([])
    assert total == Decimal("0")
    assert isinstance(total, Decimal)


def test_sum_items_is_order_independent() -> None:
    items = [
        LineItem("a", "0.10"),
        LineItem("b", "0.20"),
        LineItem("c", "1000000.01"),
        LineItem("d", "-0.30"),
        LineItem("e", 0.1),
    ]
    assert sum_items(items) == sum_items(list(reversed(items)))
    assert sum_items(items) == Decimal("1000000.11")


def test_section_total_is_exact_sum_of_parts() -> None:
    section = Section(
        current=[LineItem("x", "0.1"), LineItem("y", "0.2")],
        non_current=[LineItem("z", "0.3")],
    )
    totals = section_totals(section)

    assert totals.current == Decimal("0.3")
    assert totals.non_current == Decimal("0.3")
    assert totals.total == totals.current + totals.non_current


def test_aggregate_snapshot_reference_balance_sheet() -> None:
    totals = aggregate_snapshot(_sample_snapshot())

    assert totals.total_current_assets == Decimal("310000")
    assert totals.total_non_current_assets == Decimal("890000")
    assert totals.total_assets == Decimal("1200000")
    assert totals.total_liabilities == Decimal("515000")
    assert totals.total_equity == Decimal("685000")
    assert totals.total_liabilities_and_equity == Decimal("1200000")


def test_aggregate_empty_snapshot() -> None:
    totals = aggregate_snapshot(BalanceSheetSnapshot(as_of="2024-01-01"))
    assert all(v == Decimal("0") for v in totals.as_dict().values())


def test_negative_equity_item_reduces_total_equity() -> None:
    snapshot = BalanceSheetSnapshot(
        as_of="2024-12-31",
        equity=[LineItem("Common stock", 1000), LineItem("Treasury stock", -200)],
    )
    assert aggregate_snapshot(snapshot).total_equity == Decimal("800")


def test_build_statement_rows_hierarchy() -> None:
    snapshot = _sample_snapshot()
    rows = build_statement_rows(snapshot, aggregate_snapshot(snapshot))

    assert list(rows.columns) == [
        "level",
        "display_order",
        "id",
        "name",
        "type",
        "category",
        "amount",
    ]
    assert rows["id"].iloc[0] == "total_assets"
    assert rows["id"].iloc[-1] == "total_liabilities_and_equity"
    assert rows["display_order"].is_monotonic_increasing

    by_id = rows.set_index("id")
    assert by_id.loc["current_assets", "level"] == 1
    assert by_id.loc["current_assets", "amount"] == Decimal("310000")
    assert by_id.loc["current_assets:2", "name"] == "Accounts receivable"
    assert by_id.loc["current_assets:2", "level"] == 2

    # Equity items sit directly below the equity total
    assert "equity" not in by_id.index
    assert by_id.loc["equity:1", "type"] == "item"

    # One row per item, per category subtotal (4) and per total (4)
    assert len(rows) == 7 + 4 + 4
