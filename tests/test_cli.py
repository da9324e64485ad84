import pytest

from finstat.cli import main

BALANCE_SHEETS = """\
period_id,period_label,as_of,section,category,name,amount,item_id
FY-2023,FY 2023,2023-12-31,assets,current,Cash,100000,cash
FY-2023,FY 2023,2023-12-31,liabilities,current,Accounts payable,40000,ap
FY-2023,FY 2023,2023-12-31,equity,,Common stock,60000,stock
FY-2024,FY 2024,2024-12-31,assets,current,Cash,150000,cash
FY-2024,FY 2024,2024-12-31,liabilities,current,Accounts payable,50000,ap
FY-2024,FY 2024,2024-12-31,equity,,Common stock,100000,stock
"""

INVOICES = """\
invoice_id,amount,due_date,status
INV-1,1000,2025-03-31,pending
INV-2,500,2025-02-15,overdue
INV-3,300,2025-01-01,paid
"""

ITEMS = """\
description,quantity,unit_price,discount_pct,tax_rate_pct
Consulting,2,100,10,5
Licence,1,50,0,20
"""


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Empty working directory so that no finstat_config.toml is picked up."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "bs.csv").write_text(BALANCE_SHEETS, encoding="utf-8")
    (tmp_path / "invoices.csv").write_text(INVOICES, encoding="utf-8")
    (tmp_path / "items.csv").write_text(ITEMS, encoding="utf-8")
    return tmp_path


def test_version(capsys) -> None:
    main(["--version"])
    assert "finstat version" in capsys.readouterr().out


def test_statement_pipeline_prints_tables(workdir, capsys) -> None:
    main(["--balance-sheets", "bs.csv", "--compare-previous", "--scope", "all"])

    out = capsys.readouterr().out
    assert "Applied period: FY 2024" in out
    assert "Compared with: FY 2023" in out
    assert "Balance check: balanced" in out
    assert "=== Balance sheet ===" in out
    assert "=== Comparison ===" in out
    assert "=== Ratios ===" in out


def test_statement_pipeline_writes_csv(workdir, capsys) -> None:
    out_dir = workdir / "out"
    main(
        [
            "--balance-sheets",
            "bs.csv",
            "--receivables",
            "invoices.csv",
            "--scope",
            "all",
            "--display-mode",
            "csv",
            "--output",
            str(out_dir),
        ]
    )

    names = sorted(p.name.rsplit("_", 1)[0] for p in out_dir.glob("*.csv"))
    assert names == ["balance_sheet", "ratios", "receivables_aging"]
    assert "===" not in capsys.readouterr().out


def test_explicit_period_and_view(workdir, capsys) -> None:
    main(["--balance-sheets", "bs.csv", "--period", "FY-2023", "--view", "simplified"])

    out = capsys.readouterr().out
    assert "Applied period: FY 2023" in out
    assert "Cash" not in out


def test_unknown_period_exits(workdir) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--balance-sheets", "bs.csv", "--period", "FY-1999"])
    assert "FY-1999" in str(excinfo.value)


def test_missing_balance_sheets_exits(workdir) -> None:
    with pytest.raises(SystemExit):
        main([])


def test_tax_subcommand(workdir, capsys) -> None:
    main(["tax", "--items", "items.csv", "--charge", "transport=15"])

    out = capsys.readouterr().out
    assert "Invoice items read: 2" in out
    assert "=== Tax summary ===" in out
    assert "transport" in out


def test_tax_subcommand_rejects_bad_charge(workdir) -> None:
    with pytest.raises(SystemExit):
        main(["tax", "--items", "items.csv", "--charge", "transport"])


def test_aging_subcommand(workdir, capsys) -> None:
    main(["aging", "--invoices", "invoices.csv", "--as-of", "2025-03-31", "--projections"])

    out = capsys.readouterr().out
    assert "Aging as of 2025-03-31" in out
    assert "Invoices: 3" in out
    assert "=== Expected collections ===" in out


def test_aging_subcommand_invalid_date(workdir) -> None:
    with pytest.raises(SystemExit):
        main(["aging", "--invoices", "invoices.csv", "--as-of", "31/03/2025"])


def test_periods_subcommand(workdir, capsys) -> None:
    main(["--balance-sheets", "bs.csv", "periods"])

    out = capsys.readouterr().out
    assert "Periods computed: 2 / 2" in out
    assert "=== Totals by period ===" in out
    assert "=== Changes against previous period ===" in out


def test_invalid_config_exits(workdir) -> None:
    (workdir / "bad.toml").write_text('[display]\nmode = "html"\n', encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        main(["--config", "bad.toml", "--balance-sheets", "bs.csv"])
    assert "Configuration error" in str(excinfo.value)
