from decimal import Decimal
from pathlib import Path

import pytest

from finstat.config import EngineConfig, load_engine_config

FULL_CONFIG = """
[tolerance]
balance = "0.5"

[aging]
epsilon = "0.05"
current_max_days = 5
overdue_30_max_days = 35
overdue_60_max_days = 65

[aging.collection_rates]
current = "1.0"
overdue_90_plus = "0.10"

[ratios]
enabled = false
current_ratio_low = "1.2"
current_ratio_high = "2.5"
debt_to_equity_high = "1.8"
zero_equity_status = "high"

[display]
mode = "both"
decimals = 0

[paths]
balance_sheets = "data/bs.csv"
receivables = "data/ar.csv"
"""


def _write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "finstat_config.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_defaults_without_config_file(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    config = load_engine_config()

    assert config == EngineConfig()
    assert config.balance_tolerance == Decimal("0.01")
    assert config.aging.overdue_60_max_days == 60
    assert config.ratios.zero_equity_status == "good"
    assert config.display.mode == "table"
    assert config.paths.balance_sheets is None


def test_config_in_working_directory_is_picked_up(tmp_path, monkeypatch) -> None:
    _write_config(tmp_path, "[tolerance]\nbalance = \"1\"\n")
    monkeypatch.chdir(tmp_path)

    assert load_engine_config().balance_tolerance == Decimal("1")


def test_load_full_config(tmp_path) -> None:
    path = _write_config(tmp_path, FULL_CONFIG)

    config = load_engine_config(str(path))

    assert config.balance_tolerance == Decimal("0.5")

    assert config.aging.epsilon == Decimal("0.05")
    assert config.aging.current_max_days == 5
    assert config.aging.overdue_30_max_days == 35
    assert config.aging.overdue_60_max_days == 65
    # Unset rates keep their defaults
    assert config.aging.collection_rates == {
        "current": Decimal("1.0"),
        "overdue_30": Decimal("0.75"),
        "overdue_60": Decimal("0.50"),
        "overdue_90_plus": Decimal("0.10"),
    }

    assert config.ratios_enabled is False
    assert config.ratios.current_ratio_low == Decimal("1.2")
    assert config.ratios.current_ratio_high == Decimal("2.5")
    assert config.ratios.debt_to_equity_high == Decimal("1.8")
    assert config.ratios.zero_equity_status == "high"

    assert config.display.mode == "both"
    assert config.display.decimals == 0

    # Paths are resolved relative to the config file
    assert config.paths.balance_sheets == (tmp_path / "data" / "bs.csv").resolve()
    assert config.paths.receivables == (tmp_path / "data" / "ar.csv").resolve()
    assert config.paths.invoice_items is None


def test_missing_explicit_config_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_engine_config(str(tmp_path / "missing.toml"))


@pytest.mark.parametrize(
    "content",
    [
        "[display]\nmode = \"html\"\n",
        "[ratios]\nzero_equity_status = \"bad\"\n",
        "[ratios]\ncurrent_ratio_low = \"4\"\ncurrent_ratio_high = \"3\"\n",
        "[aging]\ncurrent_max_days = 30\noverdue_30_max_days = 30\n",
        "[aging]\nepsilon = \"abc\"\n",
        "[tolerance]\nbalance = \"-1\"\n",
        "not = [valid toml",
    ],
)
def test_invalid_config_raises_value_error(tmp_path, content) -> None:
    path = _write_config(tmp_path, content)
    with pytest.raises(ValueError):
        load_engine_config(str(path))
