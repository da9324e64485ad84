# FinStat - Financial Statement Aggregation Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for FinStat.

This module wires together the main building blocks of FinStat:

- configuration (tolerances, aging policy, ratio thresholds, display),
- CSV readers (balance sheets, invoices, invoice items),
- the statement assembler (rollups, comparison, aging, ratios),
- the tax summarizer,
- the multi-period orchestration,
- view helpers (detail levels and tabular rendering).

The CLI is intentionally thin: it does not implement financial logic
itself. It orchestrates the underlying modules based on command-line
arguments and configuration files.


High-level pipeline
-------------------

Without a subcommand, the CLI:

1) loads the TOML configuration (finstat_config.toml by default, or
   ``--config PATH``);

2) reads the balance sheet CSV (``--balance-sheets`` or
   ``[paths].balance_sheets``) into periods;

3) selects the reporting period (``--period ID``, latest period by
   default) and an optional comparison period (``--compare ID`` or
   ``--compare-previous``);

4) optionally reads receivable / payable invoices (``--receivables``,
   ``--payables``) and ages them as of ``--as-of`` (the period date by
   default);

5) assembles the statement and renders the requested ``--scope``.


Scopes
------

- ``statement`` (default): the hierarchical balance sheet.
- ``comparison``: item, category and total deltas against the comparison
  period.
- ``ratios``: current ratio, debt to equity, working capital.
- ``all``: everything above, plus aging tables when invoices are given.


Statement views
---------------

- ``simplified``: section totals only (level 0).
- ``regular``:    section totals and category subtotals (levels 0-1).
- ``detailed``:   all lines (default).


Subcommands
-----------

- ``tax``:     multi-rate tax summary of invoice items
               (``--items CSV [--charge LABEL=AMOUNT ...]``).
- ``aging``:   aging of invoices (``--invoices CSV --as-of DATE
               [--projections]``).
- ``periods``: totals and ratios of every period of the balance sheet
               CSV, each compared with its predecessor.


Display modes and output
------------------------

``display.mode`` in the configuration, overridden by ``--display-mode``:

- ``table``: print tables to stdout,
- ``csv``:   write CSV files only,
- ``both``:  do both.

CSV files are written to ``--output DIR`` (``data/output`` by default) with
a timestamp-based name, e.g. ``balance_sheet_YYYY-MM-DD-HH-MM-SS.csv``.


Examples
--------

    python -m finstat.cli --balance-sheets data/input/balance_sheets.csv \\
        --compare-previous --scope all

    python -m finstat.cli --display-mode both tax \\
        --items data/input/invoice_items.csv --charge transport=50

    python -m finstat.cli aging --invoices data/input/receivables.csv \\
        --as-of 2025-03-31 --projections
"""

import argparse
import logging
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .aging import build_aged_balance, classify_aging, project_collections, summarize_invoices
from .config import DISPLAY_MODES, EngineConfig, load_engine_config
from .engine import GRAND_TOTALS
from .errors import FinStatError
from .io import read_balance_sheets, read_invoice_items, read_invoices
from .models import to_decimal
from .multi_periods import compute_all_multi_period
from .periods import Period, determine_periods_from_args
from .statement import assemble_statement
from .tax import summarize_tax
from .views import (
    aging_to_dataframe,
    apply_view_level_filter,
    collections_to_dataframe,
    comparison_to_dataframe,
    invoice_lines_to_dataframe,
    ratios_to_dataframe,
    round_amount,
    round_statement,
    tax_summary_to_dataframe,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m finstat.cli",
        description=(
            "FinStat - Financial Statement Aggregation Engine. "
            "Reads balance sheets and invoices, computes hierarchical balance "
            "sheets, period comparisons, aging, tax summaries and ratios."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of finstat and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. "
            "If omitted, 'finstat_config.toml' in the current directory is used "
            "when present."
        ),
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging verbosity (default: WARNING).",
    )

    # Inputs
    ap.add_argument(
        "--balance-sheets",
        dest="balance_sheets",
        metavar="CSV_PATH",
        help="Balance sheet CSV. Overrides [paths].balance_sheets.",
    )
    ap.add_argument(
        "--receivables",
        metavar="CSV_PATH",
        help="Receivable invoices CSV to age. Overrides [paths].receivables.",
    )
    ap.add_argument(
        "--payables",
        metavar="CSV_PATH",
        help="Payable invoices CSV to age. Overrides [paths].payables.",
    )
    ap.add_argument(
        "--as-of",
        dest="as_of",
        help="Aging reference date (YYYY-MM-DD). Defaults to the period date.",
    )

    # Period selection
    ap.add_argument(
        "--period",
        help="Reporting period id. If omitted, the most recent period is used.",
    )
    compare_group = ap.add_mutually_exclusive_group()
    compare_group.add_argument(
        "--compare",
        help="Id of the period to compare the reporting period with.",
    )
    compare_group.add_argument(
        "--compare-previous",
        dest="compare_previous",
        action="store_true",
        help="Compare the reporting period with its chronological predecessor.",
    )

    # Scope and view
    ap.add_argument(
        "--scope",
        choices=["statement", "comparison", "ratios", "all"],
        default="statement",
        help=(
            "Select what to render: 'statement' = balance sheet; "
            "'comparison' = deltas against the comparison period; "
            "'ratios' = ratios only; 'all' = everything."
        ),
    )
    ap.add_argument(
        "--view",
        choices=["simplified", "regular", "detailed"],
        default="detailed",
        help=(
            "Level of detail of the balance sheet. simplified: section totals; "
            "regular: totals and subtotals; detailed: all lines."
        ),
    )

    # Display options
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=list(DISPLAY_MODES),
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, 'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory for CSV files when display mode includes 'csv'. "
            "If omitted, 'data/output' is used."
        ),
    )

    # ------------------------------------------------------------------
    # Subcommands
    # ------------------------------------------------------------------
    subparsers = ap.add_subparsers(
        dest="command",
        metavar="command",
        help="Optional subcommands: 'tax', 'aging', 'periods'.",
    )

    tax_parser = subparsers.add_parser(
        "tax",
        help="Summarize invoice items by tax rate.",
    )
    tax_parser.add_argument(
        "--items",
        metavar="CSV_PATH",
        help="Invoice items CSV. Overrides [paths].invoice_items.",
    )
    tax_parser.add_argument(
        "--charge",
        dest="charges",
        action="append",
        default=[],
        metavar="LABEL=AMOUNT",
        help="Untaxed additional charge (repeatable), e.g. transport=50.",
    )

    aging_parser = subparsers.add_parser(
        "aging",
        help="Age receivable or payable invoices by due date.",
    )
    aging_parser.add_argument(
        "--invoices",
        metavar="CSV_PATH",
        help="Invoices CSV. Overrides [paths].receivables.",
    )
    aging_parser.add_argument(
        "--as-of",
        dest="aging_as_of",
        help="Reference date (YYYY-MM-DD). Defaults to today.",
    )
    aging_parser.add_argument(
        "--projections",
        action="store_true",
        help="Also show expected collections per horizon.",
    )

    subparsers.add_parser(
        "periods",
        help="Totals and ratios of every period, each compared with its predecessor.",
    )

    return ap


def _parse_optional_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an optional CLI date argument (YYYY-MM-DD).

    Raises
    ------
    SystemExit
        If the date format is invalid.
    """
    if value is None:
        return None

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"Invalid date format: {value!r}. Expected YYYY-MM-DD."
        raise SystemExit(msg) from exc


def _parse_charges(values: list[str]) -> dict[str, Decimal]:
    """Parse repeated ``LABEL=AMOUNT`` arguments."""
    charges: dict[str, Decimal] = {}
    for raw in values:
        label, sep, amount = raw.partition("=")
        if not sep or not label.strip():
            raise SystemExit(f"Invalid --charge {raw!r}. Expected LABEL=AMOUNT.")
        try:
            charges[label.strip()] = to_decimal(amount, f"charge '{label.strip()}'")
        except FinStatError as exc:
            raise SystemExit(str(exc)) from exc
    return charges


def _resolve_input(cli_value: Optional[str], configured: Optional[Path]) -> Optional[Path]:
    if cli_value:
        return Path(cli_value)
    return configured


def _render(
    tables: list[tuple[str, str, pd.DataFrame]],
    display_mode: str,
    output_dir: Optional[str],
) -> None:
    """Print and/or write (title, file stem, DataFrame) tables."""
    if display_mode in {"table", "both"}:
        for title, _, df in tables:
            print()
            print(f"=== {title} ===")
            print(df.to_string(index=False))

    if display_mode in {"csv", "both"}:
        out = Path(output_dir) if output_dir else Path("data/output")
        out.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        for _, stem, df in tables:
            path = out / f"{stem}_{timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


def _load_periods(args: argparse.Namespace, config: EngineConfig, parser) -> list[Period]:
    path = _resolve_input(args.balance_sheets, config.paths.balance_sheets)
    if path is None:
        parser.error(
            "No balance sheet file configured. Either set [paths].balance_sheets "
            "in the configuration or provide --balance-sheets."
        )
    if not path.is_file():
        parser.error(f"Balance sheet file not found: {path}")

    periods = read_balance_sheets(path)
    if not periods:
        raise SystemExit(f"No balance sheet rows found in {path}.")
    return periods


def _handle_tax(args: argparse.Namespace, config: EngineConfig, parser) -> None:
    path = _resolve_input(args.items, config.paths.invoice_items)
    if path is None:
        parser.error(
            "No invoice items file configured. Either set [paths].invoice_items "
            "in the configuration or provide --items."
        )
    if not path.is_file():
        parser.error(f"Invoice items file not found: {path}")

    items = read_invoice_items(path)
    summary = summarize_tax(items, _parse_charges(args.charges))
    decimals = config.display.decimals

    print(f"Invoice items read: {len(items)}")
    _render(
        [
            ("Invoice lines", "invoice_lines", invoice_lines_to_dataframe(items, decimals)),
            ("Tax summary", "tax_summary", tax_summary_to_dataframe(summary, decimals)),
        ],
        args.display_mode or config.display.mode,
        args.output_dir,
    )


def _handle_aging(args: argparse.Namespace, config: EngineConfig, parser) -> None:
    path = _resolve_input(args.invoices, config.paths.receivables)
    if path is None:
        parser.error(
            "No invoices file configured. Either set [paths].receivables in the "
            "configuration or provide --invoices."
        )
    if not path.is_file():
        parser.error(f"Invoices file not found: {path}")

    as_of = _parse_optional_date(args.aging_as_of) or date.today()
    invoices = read_invoices(path)
    decimals = config.display.decimals

    aged = build_aged_balance(invoices, as_of, config.aging)
    result = classify_aging(aged.total, aged.breakdown, config.aging.epsilon)
    metrics = summarize_invoices(invoices)

    print(f"Aging as of {as_of.isoformat()}")
    print(
        f"Invoices: {metrics.invoice_count} | "
        f"Paid: {metrics.paid_count} ({round_amount(metrics.total_paid, decimals)}) | "
        f"Pending: {metrics.pending_count} ({round_amount(metrics.total_pending, decimals)}) | "
        f"Overdue: {metrics.overdue_count} ({round_amount(metrics.total_overdue, decimals)})"
    )

    tables = [("Aging", "aging", aging_to_dataframe(result, decimals))]
    if args.projections:
        projections = project_collections(aged.breakdown, config.aging.collection_rates)
        tables.append(
            ("Expected collections", "collections", collections_to_dataframe(projections, decimals))
        )
    _render(tables, args.display_mode or config.display.mode, args.output_dir)


def _handle_periods(args: argparse.Namespace, config: EngineConfig, parser) -> None:
    periods = _load_periods(args, config, parser)
    result = compute_all_multi_period(periods, config)
    decimals = config.display.decimals

    for period_id, message in result.errors.items():
        print(f"Warning: period {period_id!r} skipped: {message}")

    tables: list[tuple[str, str, pd.DataFrame]] = []
    if not result.totals.empty:
        totals = result.totals.pivot(index="key", columns="period_id", values="amount")
        totals = totals.reindex(list(result.totals["key"].unique()))
        for col in totals.columns:
            totals[col] = [round_amount(v, decimals) for v in totals[col]]
        totals = totals.reset_index()
        totals.columns.name = None
        tables.append(("Totals by period", "totals_by_period", totals))

    if not result.ratios.empty:
        ratios = result.ratios.copy()
        ratios["value"] = [round_amount(v, decimals) for v in ratios["value"]]
        tables.append(
            (
                "Ratios by period",
                "ratios_by_period",
                ratios[["period_id", "period_label", "key", "value", "status"]],
            )
        )

    if not result.comparisons.empty:
        comp = result.comparisons[result.comparisons["scope"] == "total"].copy()
        for col in ("amount", "comparison_amount", "difference", "percent_change"):
            comp[col] = [round_amount(v, decimals) for v in comp[col]]
        tables.append(
            (
                "Changes against previous period",
                "changes_by_period",
                comp[
                    [
                        "period_id",
                        "compared_with",
                        "key",
                        "amount",
                        "comparison_amount",
                        "difference",
                        "percent_change",
                        "status",
                    ]
                ],
            )
        )

    print(f"Periods computed: {len(result.statements)} / {len(periods)}")
    _render(tables, args.display_mode or config.display.mode, args.output_dir)


def _run_pipeline(args: argparse.Namespace, config: EngineConfig, parser) -> None:
    periods = _load_periods(args, config, parser)
    selected, comparison = determine_periods_from_args(args, periods)

    as_of = _parse_optional_date(args.as_of) or selected.data.as_of
    receivables_path = _resolve_input(args.receivables, config.paths.receivables)
    payables_path = _resolve_input(args.payables, config.paths.payables)

    receivables = (
        build_aged_balance(read_invoices(receivables_path), as_of, config.aging)
        if receivables_path is not None
        else None
    )
    payables = (
        build_aged_balance(read_invoices(payables_path), as_of, config.aging)
        if payables_path is not None
        else None
    )

    statement = assemble_statement(
        selected.data,
        comparison.data if comparison is not None else None,
        receivables=receivables,
        payables=payables,
        config=config,
    )
    decimals = config.display.decimals

    print(f"Applied period: {selected.label} (as of {selected.data.as_of.isoformat()})")
    if comparison is not None:
        print(f"Compared with: {comparison.label} (as of {comparison.data.as_of.isoformat()})")
    if statement.is_balanced:
        print("Balance check: balanced")
    else:
        print(
            "Balance check: NOT balanced "
            f"(difference {round_amount(statement.balance_difference, decimals)})"
        )

    scope = args.scope
    tables: list[tuple[str, str, pd.DataFrame]] = []

    if scope in {"statement", "all"}:
        view = apply_view_level_filter(statement.rows, args.view)
        tables.append(("Balance sheet", "balance_sheet", round_statement(view, decimals)))

    if scope in {"comparison", "all"}:
        if statement.comparison is None:
            print(
                "A comparison has been requested in scope, but no comparison period "
                "was selected (use --compare ID or --compare-previous)."
            )
        else:
            tables.append(
                ("Comparison", "comparison", comparison_to_dataframe(statement.comparison, decimals))
            )

    if scope in {"ratios", "all"}:
        if not config.ratios_enabled:
            print(
                "Ratios have been requested in scope, but ratios are disabled in the "
                "configuration (ratios.enabled = false). Skipping ratio computation."
            )
        else:
            tables.append(("Ratios", "ratios", ratios_to_dataframe(statement.ratios, decimals)))

    if scope == "all":
        if statement.receivables_aging is not None:
            tables.append(
                (
                    "Receivables aging",
                    "receivables_aging",
                    aging_to_dataframe(statement.receivables_aging, decimals),
                )
            )
        if statement.payables_aging is not None:
            tables.append(
                (
                    "Payables aging",
                    "payables_aging",
                    aging_to_dataframe(statement.payables_aging, decimals),
                )
            )

    _render(tables, args.display_mode or config.display.mode, args.output_dir)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the FinStat CLI.

    This function parses command-line arguments, configures logging, loads
    the configuration and dispatches to a subcommand or to the main
    statement pipeline. Configuration and input errors are turned into a
    readable SystemExit message.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"finstat version {__version__}")
        return

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_engine_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    command = getattr(args, "command", None)
    try:
        if command == "tax":
            _handle_tax(args, config, parser)
        elif command == "aging":
            _handle_aging(args, config, parser)
        elif command == "periods":
            _handle_periods(args, config, parser)
        else:
            _run_pipeline(args, config, parser)
    except (FinStatError, ValueError) as exc:
        logger.debug("Command failed", exc_info=True)
        raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
    main()
