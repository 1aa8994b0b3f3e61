# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Shop FinSight.

This module wires together the main building blocks of Shop FinSight:

- global configuration (business, database, report defaults, display),
- transactions / expenses storage and CSV imports,
- the analytics engine (reports) and dashboard analytics,
- view helpers (tabular rendering and CSV / JSON export).

The CLI is intentionally thin: it does not implement any financial logic
itself. It orchestrates the underlying modules based on command-line
arguments and the configuration file.


Commands
--------

    report KIND          Generate one report for a period and print / export it.
    reports              List the available reports (optionally by category).
    dashboard            Monthly KPIs, N-month trend and service distribution.
    transactions ...     add | list | edit | delete transactions.
    expenses ...         add | list | edit | delete expenses.
    import KIND CSV      Import transactions or expenses from a CSV file.
    seed                 Fill the database with sample data.
    settings currency    Show or change the business currency.


Reporting period
----------------

Commands working on a period accept:

    --period last7days | last30days | last90days | thisMonth | lastYear
    --from-date YYYY-MM-DD --to-date YYYY-MM-DD

``--period`` wins over custom dates. Without either, ``report`` uses the
``[reports].default_range`` of the configuration when it is set, otherwise
the default range of the report (see ``reports``). ``list`` commands show
every record.


Configuration
-------------

By default, the CLI reads ``shop_finsight_config.toml`` in the current
working directory (built-in defaults are used if it does not exist). Use
``--config PATH`` to point to another file.


Output
------

Report output is controlled by ``--format`` (default: ``[display].mode``):

- table: print the report tables to the console,
- csv / json: write the report to ``--output`` (default:
  ``[display].output_dir``),
- both: print the tables and write both CSV and JSON files.


Errors
------

Invalid input (bad dates, unknown report, missing record, missing file...)
ends the program with a one-line error message and a non-zero exit status.
"""

import argparse
import logging
from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__, services
from .config import DISPLAY_MODES, LOG_LEVELS, AppConfig, load_app_config
from .currency import SUPPORTED_CURRENCIES
from .dashboard import monthly_analytics, monthly_trend, service_distribution
from .db import init_database
from .periods import NAMED_RANGES, Period, determine_period_from_args
from .records import EXPENSE_TYPES, Expense, Transaction
from .reports import REPORT_CATALOG, InactiveCustomersReport, reports_for_category
from .views import export_report, report_tables

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_period_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--period",
        choices=NAMED_RANGES,
        help="Predefined period relative to today.",
    )
    parser.add_argument(
        "--from-date",
        dest="from_date",
        metavar="YYYY-MM-DD",
        help="Start date of a custom period (inclusive).",
    )
    parser.add_argument(
        "--to-date",
        dest="to_date",
        metavar="YYYY-MM-DD",
        help="End date of a custom period (inclusive). Defaults to today.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="shop-finsight",
        description=(
            "Shop FinSight - Financial tracker & reporting for personal-services "
            "businesses. Records transactions and expenses, computes monthly "
            "analytics and generates exportable reports."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of shop_finsight and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'shop_finsight_config.toml' in the current directory is used "
            "when it exists."
        ),
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (overrides [logging].level).",
    )

    subparsers = ap.add_subparsers(dest="command")

    # report
    report_parser = subparsers.add_parser("report", help="Generate a report.")
    report_parser.add_argument(
        "kind", choices=list(REPORT_CATALOG), help="Report type."
    )
    _add_period_arguments(report_parser)
    report_parser.add_argument(
        "--threshold",
        type=float,
        help=(
            "Amount threshold for high-value transactions and low-performance "
            "services (overrides [reports])."
        ),
    )
    report_parser.add_argument(
        "--inactive-days",
        dest="inactive_days",
        type=int,
        help="Inactivity cutoff in days for inactive customers.",
    )
    report_parser.add_argument(
        "--as-of",
        dest="as_of",
        metavar="YYYY-MM-DD",
        help="Reference day of the inactivity cutoff (default: today).",
    )
    report_parser.add_argument(
        "--format",
        dest="output_format",
        choices=DISPLAY_MODES,
        help="Output format (default: [display].mode).",
    )
    report_parser.add_argument(
        "--output",
        dest="output_dir",
        metavar="DIR",
        help="Export directory for csv / json (default: [display].output_dir).",
    )

    # reports
    reports_parser = subparsers.add_parser("reports", help="List available reports.")
    reports_parser.add_argument(
        "--category",
        choices=("all", "summary", "detailed", "exception"),
        default="all",
        help="Restrict the list to one category.",
    )

    # dashboard
    dashboard_parser = subparsers.add_parser(
        "dashboard", help="Show monthly KPIs, trend and service distribution."
    )
    dashboard_parser.add_argument(
        "--month",
        metavar="YYYY-MM",
        help="Month to analyse (default: current month).",
    )
    dashboard_parser.add_argument(
        "--months",
        type=int,
        default=6,
        help="Number of months in the trend table (default: 6).",
    )

    # transactions
    txn_parser = subparsers.add_parser("transactions", help="Manage transactions.")
    txn_sub = txn_parser.add_subparsers(dest="action", required=True)

    txn_add = txn_sub.add_parser("add", help="Record a new transaction.")
    txn_add.add_argument("--date", default=None, help="YYYY-MM-DD (default: today).")
    txn_add.add_argument("--style", required=True, help="Service name.")
    txn_add.add_argument("--price", type=float, required=True, help="Amount charged.")
    txn_add.add_argument("--notes", help="Optional notes.")

    txn_list = txn_sub.add_parser("list", help="List transactions.")
    _add_period_arguments(txn_list)

    txn_edit = txn_sub.add_parser("edit", help="Edit a transaction.")
    txn_edit.add_argument("id", help="Transaction id.")
    txn_edit.add_argument("--date")
    txn_edit.add_argument("--style")
    txn_edit.add_argument("--price", type=float)
    txn_edit.add_argument("--notes", help="New notes (empty string clears them).")

    txn_delete = txn_sub.add_parser("delete", help="Delete a transaction.")
    txn_delete.add_argument("id", help="Transaction id.")

    # expenses
    exp_parser = subparsers.add_parser("expenses", help="Manage expenses.")
    exp_sub = exp_parser.add_subparsers(dest="action", required=True)

    exp_add = exp_sub.add_parser("add", help="Record a new expense.")
    exp_add.add_argument("--date", default=None, help="YYYY-MM-DD (default: today).")
    exp_add.add_argument(
        "--type", dest="expense_type", choices=EXPENSE_TYPES, required=True
    )
    exp_add.add_argument("--description", required=True)
    exp_add.add_argument("--amount", type=float, required=True)

    exp_list = exp_sub.add_parser("list", help="List expenses.")
    _add_period_arguments(exp_list)

    exp_edit = exp_sub.add_parser("edit", help="Edit an expense.")
    exp_edit.add_argument("id", help="Expense id.")
    exp_edit.add_argument("--date")
    exp_edit.add_argument("--type", dest="expense_type", choices=EXPENSE_TYPES)
    exp_edit.add_argument("--description")
    exp_edit.add_argument("--amount", type=float)

    exp_delete = exp_sub.add_parser("delete", help="Delete an expense.")
    exp_delete.add_argument("id", help="Expense id.")

    # import
    import_parser = subparsers.add_parser(
        "import", help="Import transactions or expenses from a CSV file."
    )
    import_parser.add_argument("record_kind", choices=("transactions", "expenses"))
    import_parser.add_argument("csv_path", metavar="CSV_PATH")

    # seed
    seed_parser = subparsers.add_parser("seed", help="Insert sample data.")
    seed_parser.add_argument("--transactions", type=int, default=50)
    seed_parser.add_argument("--expenses", type=int, default=20)
    seed_parser.add_argument("--seed", type=int, help="Random seed.")

    # settings
    settings_parser = subparsers.add_parser("settings", help="Application settings.")
    settings_sub = settings_parser.add_subparsers(dest="setting", required=True)
    currency_parser = settings_sub.add_parser(
        "currency", help="Show or change the business currency."
    )
    currency_parser.add_argument(
        "code",
        nargs="?",
        type=str.upper,
        choices=list(SUPPORTED_CURRENCIES),
        help="New currency code. Stored amounts are converted.",
    )

    return ap


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_optional_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an optional CLI date argument (YYYY-MM-DD).

    Raises
    ------
    ValueError
        If the date format is invalid.
    """
    if value is None:
        return None

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"Invalid date format: {value!r}. Expected YYYY-MM-DD."
        raise ValueError(msg) from exc


def _parse_month(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM argument into the first day of that month."""
    if value is None:
        return None

    try:
        year_str, month_str = value.split("-")
        return date(int(year_str), int(month_str), 1)
    except ValueError as exc:
        raise ValueError(f"Invalid month: {value!r}. Expected YYYY-MM.") from exc


def _optional_period(args: argparse.Namespace) -> Optional[Period]:
    """Period given on the command line, or None when no bound was given."""
    if args.period or args.from_date or args.to_date:
        return determine_period_from_args(args)
    return None


def _print_table(title: str, df: pd.DataFrame) -> None:
    print()
    print(f"{title}:")
    if df.empty:
        print("  (no data)")
    else:
        print(df.to_string(index=False))


def _money(amount: float, config: AppConfig, currency: str) -> str:
    return f"{amount:,.{config.decimals}f} {currency}"


def _describe_transaction(txn: Transaction) -> str:
    return f"{txn.id} ({txn.date}, {txn.style}, {txn.price:.2f})"


def _describe_expense(exp: Expense) -> str:
    return f"{exp.id} ({exp.date}, {exp.type}, {exp.amount:.2f})"


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _handle_report(args: argparse.Namespace, config: AppConfig) -> None:
    """
    Handle the 'report' command.

    - determines the period (--period, custom dates or default range),
    - generates the report over the stored records,
    - prints and / or exports it depending on --format.
    """
    default_range = services.default_range_for(config, args.kind)
    period = determine_period_from_args(args, default_range)
    report = services.generate_report(
        config,
        args.kind,
        period,
        threshold=args.threshold,
        inactive_days=args.inactive_days,
        as_of=_parse_optional_date(args.as_of),
    )

    output_format = args.output_format or config.display_mode
    name = REPORT_CATALOG[args.kind].name

    if output_format in {"table", "both"}:
        print(f"{name}")
        print(
            f"Applied period: {period.label} "
            f"({period.start.isoformat()} → {period.end.isoformat()})"
        )
        for title, df in report_tables(report, config.decimals).items():
            _print_table(title, df)
        if isinstance(report, InactiveCustomersReport):
            print()
            print(f"Note: {report.disclaimer}")

    formats = {"csv": ["csv"], "json": ["json"], "both": ["csv", "json"]}.get(
        output_format, []
    )
    output_dir = Path(args.output_dir) if args.output_dir else config.output_dir
    for fmt in formats:
        path = export_report(report, args.kind, output_dir, fmt)
        print(f"Report exported to: {path}")


def _handle_reports(args: argparse.Namespace) -> None:
    """Handle the 'reports' command: list catalog entries."""
    rows = [
        (c.kind, c.name, c.category, c.default_range, c.description)
        for c in reports_for_category(args.category)
    ]
    df = pd.DataFrame(
        rows, columns=["type", "name", "category", "default_range", "description"]
    )
    print(df.to_string(index=False))


def _handle_dashboard(args: argparse.Namespace, config: AppConfig) -> None:
    """Handle the 'dashboard' command."""
    month = _parse_month(args.month)
    engine = services.load_engine(config)
    currency = services.get_currency(config)

    analytics = monthly_analytics(engine.transactions, engine.expenses, month)
    kpi = analytics.to_kpi()

    print(f"{config.business_name} - dashboard for {analytics.month}")
    print(f"  Total income     : {_money(kpi.total_income, config, currency)}")
    print(f"  Total expenses   : {_money(kpi.total_expenses, config, currency)}")
    print(f"  Net profit       : {_money(kpi.net_profit, config, currency)}")
    print(f"  Customers        : {kpi.total_customers}")
    print(f"  Customer growth  : {kpi.customer_growth:.1f}%")
    print(f"  Profit growth    : {kpi.profit_growth:.1f}%")
    print(f"  Top service      : {kpi.top_service}")

    trend = monthly_trend(
        engine.transactions, engine.expenses, months=args.months, today=month
    )
    _print_table(f"Last {args.months} months", trend.round(config.decimals))

    distribution = service_distribution(engine.transactions, engine.expenses, month)
    _print_table("Service distribution", distribution)


def _handle_transactions(args: argparse.Namespace, config: AppConfig) -> None:
    """Handle the 'transactions add | list | edit | delete' commands."""
    if args.action == "add":
        txn_date = args.date or date.today().isoformat()
        txn = services.create_transaction(
            config, txn_date, args.style, args.price, args.notes
        )
        print(f"Transaction recorded: {_describe_transaction(txn)}")
    elif args.action == "list":
        transactions = services.list_transactions(config, _optional_period(args))
        if not transactions:
            print("No transactions found for the given criteria.")
            return
        df = pd.DataFrame(
            [(t.id, t.date, t.style, t.price, t.notes or "") for t in transactions],
            columns=["id", "date", "style", "price", "notes"],
        )
        print(df.to_string(index=False))
        print()
        print(f"Total transactions: {len(df)} | Total amount: {df['price'].sum():.2f}")
    elif args.action == "edit":
        txn = services.edit_transaction(
            config,
            args.id,
            date=args.date,
            style=args.style,
            price=args.price,
            notes=args.notes,
        )
        print(f"Transaction updated: {_describe_transaction(txn)}")
    elif args.action == "delete":
        services.delete_transaction(config, args.id)
        print(f"Transaction deleted: {args.id}")


def _handle_expenses(args: argparse.Namespace, config: AppConfig) -> None:
    """Handle the 'expenses add | list | edit | delete' commands."""
    if args.action == "add":
        exp_date = args.date or date.today().isoformat()
        exp = services.create_expense(
            config, exp_date, args.expense_type, args.description, args.amount
        )
        print(f"Expense recorded: {_describe_expense(exp)}")
    elif args.action == "list":
        expenses = services.list_expenses(config, _optional_period(args))
        if not expenses:
            print("No expenses found for the given criteria.")
            return
        df = pd.DataFrame(
            [(e.id, e.date, e.type, e.description, e.amount) for e in expenses],
            columns=["id", "date", "type", "description", "amount"],
        )
        print(df.to_string(index=False))
        print()
        print(f"Total expenses: {len(df)} | Total amount: {df['amount'].sum():.2f}")
    elif args.action == "edit":
        exp = services.edit_expense(
            config,
            args.id,
            date=args.date,
            type=args.expense_type,
            description=args.description,
            amount=args.amount,
        )
        print(f"Expense updated: {_describe_expense(exp)}")
    elif args.action == "delete":
        services.delete_expense(config, args.id)
        print(f"Expense deleted: {args.id}")


def _handle_import(args: argparse.Namespace, config: AppConfig) -> None:
    """Handle the 'import transactions | expenses CSV_PATH' command."""
    csv_path = Path(args.csv_path)
    if not csv_path.is_file():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    print(f"Importing {args.record_kind} from {csv_path} into the database...")
    if args.record_kind == "transactions":
        stats = services.import_transactions_csv(config, csv_path)
    else:
        stats = services.import_expenses_csv(config, csv_path)
    print(
        f"Imported {stats.rows_inserted} {args.record_kind}, "
        f"{stats.duplicates_skipped} duplicates skipped."
    )


def _handle_seed(args: argparse.Namespace, config: AppConfig) -> None:
    n_txn, n_exp = services.seed_database(
        config, args.transactions, args.expenses, seed=args.seed
    )
    print(f"Added {n_txn} transactions and {n_exp} expenses.")


def _handle_settings(args: argparse.Namespace, config: AppConfig) -> None:
    current = services.get_currency(config)
    if args.code is None:
        print(f"Currency: {current} - {SUPPORTED_CURRENCIES.get(current, current)}")
        return

    rate = services.change_currency(config, args.code)
    print(f"Currency changed from {current} to {args.code} (rate applied: {rate}).")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    config = load_app_config(args.config_path)

    logging.basicConfig(
        level=args.log_level or config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Using database %s", config.database.path)

    # Initialize the database (create file and schema if needed)
    init_database(config.database)

    command = args.command
    if command == "report":
        _handle_report(args, config)
    elif command == "reports":
        _handle_reports(args)
    elif command == "dashboard":
        _handle_dashboard(args, config)
    elif command == "transactions":
        _handle_transactions(args, config)
    elif command == "expenses":
        _handle_expenses(args, config)
    elif command == "import":
        _handle_import(args, config)
    elif command == "seed":
        _handle_seed(args, config)
    elif command == "settings":
        _handle_settings(args, config)
    else:
        parser.print_help()


def main(argv: Optional[list[str]] = None) -> None:
    """
    Entry point for the Shop FinSight CLI.

    Parses command-line arguments, loads the configuration, configures
    logging, initializes the database and dispatches to the selected
    command. Input errors are reported as a one-line message and a non-zero
    exit status.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"shop_finsight version {__version__}")
        return

    try:
        _run(args, parser)
    except (ValueError, LookupError, FileNotFoundError) as exc:
        raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
    main()
