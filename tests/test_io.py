from datetime import date
from decimal import Decimal

import pytest

from finstat.errors import InvalidInputError
from finstat.io import read_balance_sheets, read_invoice_items, read_invoices

BALANCE_SHEETS = """\
Period_ID,Period_Label,As_Of,Section,Category,Name,Amount,Item_ID
FY-2023,FY 2023,2023-12-31,assets,current,Cash,100000.10,cash
FY-2023,FY 2023,2023-12-31,equity,,Common stock,100000.10,
FY-2024,FY 2024,2024-12-31,assets,current,Cash,125000,cash
FY-2024,FY 2024,2024-12-31,assets,non-current,PPE,890000,ppe
FY-2024,FY 2024,2024-12-31,liabilities,current,Accounts payable,95000,
FY-2024,FY 2024,2024-12-31,liabilities,non_current,Long-term debt,420000,
FY-2024,FY 2024,2024-12-31,equity,,Retained earnings,500000,
"""


def _write(tmp_path, name: str, content: str):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_read_balance_sheets(tmp_path) -> None:
    periods = read_balance_sheets(_write(tmp_path, "bs.csv", BALANCE_SHEETS))

    assert [p.id for p in periods] == ["FY-2023", "FY-2024"]
    fy2023, fy2024 = periods

    assert fy2023.label == "FY 2023"
    assert fy2023.data.as_of == date(2023, 12, 31)
    # Amounts are parsed from text, not floats
    assert fy2023.data.assets.current[0].amount == Decimal("100000.10")
    assert fy2023.data.assets.current[0].item_id == "cash"
    assert fy2023.data.equity[0].item_id is None

    assert fy2024.data.assets.non_current[0].name == "PPE"
    assert fy2024.data.liabilities.non_current[0].amount == Decimal("420000")
    assert len(fy2024.data.equity) == 1


def test_read_balance_sheets_missing_column(tmp_path) -> None:
    path = _write(tmp_path, "bs.csv", "period_id,as_of,name,amount\nA,2024-12-31,Cash,1\n")
    with pytest.raises(ValueError, match="Missing column"):
        read_balance_sheets(path)


@pytest.mark.parametrize(
    "row",
    [
        "FY,FY,2024-12-31,revenue,,Sales,10",
        "FY,FY,2024-12-31,assets,long,Cash,10",
        "FY,FY,2024-12-31,assets,current,Cash,ten",
        "FY,FY,31/12/2024,assets,current,Cash,10",
    ],
)
def test_read_balance_sheets_invalid_rows(tmp_path, row) -> None:
    header = "period_id,period_label,as_of,section,category,name,amount\n"
    path = _write(tmp_path, "bs.csv", header + row + "\n")
    with pytest.raises(InvalidInputError, match="row 1"):
        read_balance_sheets(path)


def test_read_balance_sheets_inconsistent_dates(tmp_path) -> None:
    content = (
        "period_id,period_label,as_of,section,category,name,amount\n"
        "FY,FY,2024-12-31,assets,current,Cash,10\n"
        "FY,FY,2024-06-30,assets,current,Bank,10\n"
    )
    with pytest.raises(InvalidInputError, match="differs"):
        read_balance_sheets(_write(tmp_path, "bs.csv", content))


def test_read_invoice_items(tmp_path) -> None:
    content = (
        "description,quantity,unit_price,discount_pct,tax_rate_pct\n"
        "Consulting,2,100,10,5\n"
        "Manuals,10,12.50,,\n"
    )
    items = read_invoice_items(_write(tmp_path, "items.csv", content))

    assert items[0].taxable_value == Decimal("180")
    assert items[1].discount_pct == Decimal("0")
    assert items[1].tax_rate_pct == Decimal("0")


def test_read_invoice_items_rejects_negative_quantity(tmp_path) -> None:
    content = "description,quantity,unit_price,discount_pct,tax_rate_pct\nBad,-1,10,0,5\n"
    with pytest.raises(InvalidInputError, match="invoice item row 1"):
        read_invoice_items(_write(tmp_path, "items.csv", content))


def test_read_invoices(tmp_path) -> None:
    content = (
        "invoice_id,amount,due_date,status\n"
        "INV-1,1200.50,2025-01-15,Paid\n"
        "INV-2,800,2025-02-15,\n"
    )
    invoices = read_invoices(_write(tmp_path, "invoices.csv", content))

    assert invoices[0].status == "paid"
    assert invoices[0].amount == Decimal("1200.50")
    assert invoices[1].status == "pending"
    assert invoices[1].due_date == date(2025, 2, 15)
