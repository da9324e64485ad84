# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration loader for FinStat.

This module reads the TOML configuration file (finstat_config.toml) and
exposes a strongly-typed EngineConfig object used by the statement
assembler, the multi-period orchestration and the CLI.

Every section is optional: a missing section or key falls back to the
defaults below, so ``EngineConfig()`` is a complete configuration by
itself. Thresholds and tolerances are parsed as Decimal; write them as
strings in the TOML file ("0.01") to keep them exact.

Sections
--------
[tolerance]
    balance  : tolerance used for the is_balanced check (default 0.01).

[aging]
    epsilon             : tolerated gap between bucket sum and total.
    current_max_days    : last day-past-due still counted as current.
    overdue_30_max_days : last day-past-due of the overdue_30 bucket.
    overdue_60_max_days : last day-past-due of the overdue_60 bucket.
    Anything later falls in overdue_90_plus.

[aging.collection_rates]
    current, overdue_30, overdue_60, overdue_90_plus : expected share of
    each bucket that will be collected (used for projections).

[ratios]
    enabled, current_ratio_low, current_ratio_high, debt_to_equity_high,
    zero_equity_status.

[display]
    mode     : 'table', 'csv' or 'both'.
    decimals : number of decimals used by the tabular views.

[paths]
    balance_sheets, invoice_items, receivables, payables : default input
    CSV files for the CLI, resolved relative to the TOML file.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

import tomllib  # Python 3.11+

from .errors import InvalidInputError
from .models import to_decimal

DISPLAY_MODES: tuple[str, ...] = ("table", "csv", "both")
RATIO_STATUSES: tuple[str, ...] = ("good", "high", "low")


@dataclass(frozen=True)
class AgingPolicy:
    """Day thresholds (inclusive upper bounds) and collection assumptions.

    With the defaults, ``days = as_of - due_date``:
        days <= 0        -> current
        1 <= days <= 30  -> overdue_30
        31 <= days <= 60 -> overdue_60
        days > 60        -> overdue_90_plus
    """

    current_max_days: int = 0
    overdue_30_max_days: int = 30
    overdue_60_max_days: int = 60
    epsilon: Decimal = Decimal("0.01")
    collection_rates: Mapping[str, Decimal] = field(
        default_factory=lambda: {
            "current": Decimal("0.90"),
            "overdue_30": Decimal("0.75"),
            "overdue_60": Decimal("0.50"),
            "overdue_90_plus": Decimal("0.25"),
        }
    )


@dataclass(frozen=True)
class RatioThresholds:
    """Bounds used to classify ratios as good / high / low."""

    current_ratio_low: Decimal = Decimal("1.5")
    current_ratio_high: Decimal = Decimal("3.0")
    debt_to_equity_high: Decimal = Decimal("2.0")
    # Status reported for debt-to-equity when equity is zero.
    zero_equity_status: str = "good"


@dataclass(frozen=True)
class DisplayOptions:
    """Rendering options for the CLI and tabular views."""

    mode: str = "table"
    decimals: int = 2


@dataclass(frozen=True)
class InputPaths:
    """Default input files, all optional."""

    balance_sheets: Optional[Path] = None
    invoice_items: Optional[Path] = None
    receivables: Optional[Path] = None
    payables: Optional[Path] = None


@dataclass(frozen=True)
class EngineConfig:
    """
    Full FinStat configuration.

    This aggregates:
    - the balance check tolerance,
    - the aging policy (day thresholds, epsilon, collection rates),
    - ratio thresholds and whether ratios are computed at all,
    - display options,
    - default input paths for the CLI.
    """

    balance_tolerance: Decimal = Decimal("0.01")
    aging: AgingPolicy = field(default_factory=AgingPolicy)
    ratios_enabled: bool = True
    ratios: RatioThresholds = field(default_factory=RatioThresholds)
    display: DisplayOptions = field(default_factory=DisplayOptions)
    paths: InputPaths = field(default_factory=InputPaths)


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _table(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _decimal_setting(section: Mapping[str, Any], key: str, default: Decimal, where: str) -> Decimal:
    raw = section.get(key)
    if raw is None:
        return default
    try:
        value = to_decimal(raw, key)
    except InvalidInputError as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration. Expected a number."
        ) from exc
    if value < 0:
        raise ValueError(f"'{where}.{key}' cannot be negative.")
    return value


def _int_setting(section: Mapping[str, Any], key: str, default: int, where: str) -> int:
    raw = section.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration. Expected an integer."
        ) from exc


def _parse_aging(raw: Mapping[str, Any]) -> AgingPolicy:
    aging = _table(raw, "aging")
    defaults = AgingPolicy()

    current_max = _int_setting(aging, "current_max_days", defaults.current_max_days, "aging")
    overdue_30_max = _int_setting(
        aging, "overdue_30_max_days", defaults.overdue_30_max_days, "aging"
    )
    overdue_60_max = _int_setting(
        aging, "overdue_60_max_days", defaults.overdue_60_max_days, "aging"
    )
    if not current_max < overdue_30_max < overdue_60_max:
        raise ValueError(
            "Aging thresholds must be strictly increasing: "
            "current_max_days < overdue_30_max_days < overdue_60_max_days."
        )

    rates_section = _table(aging, "collection_rates")
    rates = dict(defaults.collection_rates)
    for bucket in rates:
        rates[bucket] = _decimal_setting(
            rates_section, bucket, rates[bucket], "aging.collection_rates"
        )

    return AgingPolicy(
        current_max_days=current_max,
        overdue_30_max_days=overdue_30_max,
        overdue_60_max_days=overdue_60_max,
        epsilon=_decimal_setting(aging, "epsilon", defaults.epsilon, "aging"),
        collection_rates=rates,
    )


def _parse_ratios(raw: Mapping[str, Any]) -> tuple[bool, RatioThresholds]:
    ratios = _table(raw, "ratios")
    defaults = RatioThresholds()

    low = _decimal_setting(ratios, "current_ratio_low", defaults.current_ratio_low, "ratios")
    high = _decimal_setting(
        ratios, "current_ratio_high", defaults.current_ratio_high, "ratios"
    )
    if low > high:
        raise ValueError("'ratios.current_ratio_low' cannot exceed 'ratios.current_ratio_high'.")

    zero_equity_status = str(ratios.get("zero_equity_status", defaults.zero_equity_status))
    if zero_equity_status not in RATIO_STATUSES:
        raise ValueError(
            f"Invalid 'ratios.zero_equity_status': {zero_equity_status!r}. "
            f"Expected one of: {', '.join(RATIO_STATUSES)}."
        )

    thresholds = RatioThresholds(
        current_ratio_low=low,
        current_ratio_high=high,
        debt_to_equity_high=_decimal_setting(
            ratios, "debt_to_equity_high", defaults.debt_to_equity_high, "ratios"
        ),
        zero_equity_status=zero_equity_status,
    )
    return bool(ratios.get("enabled", True)), thresholds


def _parse_display(raw: Mapping[str, Any]) -> DisplayOptions:
    display = _table(raw, "display")

    mode = str(display.get("mode", "table"))
    if mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid 'display.mode': {mode!r}. Expected one of: {', '.join(DISPLAY_MODES)}."
        )

    try:
        decimals = int(display.get("decimals", 2))
    except (TypeError, ValueError):
        decimals = 2

    return DisplayOptions(mode=mode, decimals=decimals)


def _parse_paths(raw: Mapping[str, Any], base_dir: Path) -> InputPaths:
    paths = _table(raw, "paths")

    def _resolve_optional(rel: Optional[str]) -> Optional[Path]:
        if not rel:
            return None
        return (base_dir / str(rel)).resolve()

    return InputPaths(
        balance_sheets=_resolve_optional(paths.get("balance_sheets")),
        invoice_items=_resolve_optional(paths.get("invoice_items")),
        receivables=_resolve_optional(paths.get("receivables")),
        payables=_resolve_optional(paths.get("payables")),
    )


def load_engine_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Load the FinStat configuration from a TOML file.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file. When omitted,
        ``finstat_config.toml`` in the current directory is used if it
        exists, otherwise the built-in defaults are returned.

    Returns
    -------
    EngineConfig
        Parsed and validated configuration.

    Raises
    ------
    FileNotFoundError
        If an explicit config_path does not exist.
    ValueError
        If the file cannot be parsed or a setting is invalid.
    """
    if config_path is None:
        config_file = Path("finstat_config.toml").resolve()
        if not config_file.is_file():
            return EngineConfig()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    tolerance = _table(raw, "tolerance")
    ratios_enabled, thresholds = _parse_ratios(raw)

    return EngineConfig(
        balance_tolerance=_decimal_setting(
            tolerance, "balance", EngineConfig.balance_tolerance, "tolerance"
        ),
        aging=_parse_aging(raw),
        ratios_enabled=ratios_enabled,
        ratios=thresholds,
        display=_parse_display(raw),
        paths=_parse_paths(raw, base_dir),
    )
