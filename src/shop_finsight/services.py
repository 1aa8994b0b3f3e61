# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
High-level services for record management and reporting.

This module sits between:
- the low-level database helpers in `db.py`, and
- user-facing layers such as the CLI.

Responsibilities
----------------
1) Reporting
   - Load a snapshot of all stored records into an AnalyticsEngine.
   - Generate any catalog report for a period, using the thresholds
     configured in [reports] unless explicitly overridden.

2) CRUD Operations
   - Create transactions and expenses (validated before storage).
   - Edit existing records using partial updates.
   - Delete records.

3) Imports and sample data
   - Import transactions / expenses from CSV files.
   - Fill the database with generated sample data.

4) Currency
   - Read the active business currency (stored setting, or config default).
   - Change it, converting every stored amount with the rate table.

Design notes
------------
- There is no long-lived in-memory store. Each call to `load_engine` reads
  the database again, so callers see up-to-date records by loading again.
- Validation errors are raised as ValueError and missing ids as LookupError;
  the CLI turns both into user-facing messages.
"""

import logging
import random
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Optional

from . import db
from .config import AppConfig
from .currency import SUPPORTED_CURRENCIES, exchange_rate
from .db import ImportStats
from .engine import AnalyticsEngine
from .io import read_expenses_csv, read_transactions_csv
from .periods import Period
from .records import Expense, Transaction, validate_expense, validate_transaction
from .reports import Report, get_report_config
from .seed import generate_expenses, generate_transactions

logger = logging.getLogger(__name__)

CURRENCY_SETTING = "currency"


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def load_engine(app_config: AppConfig) -> AnalyticsEngine:
    """
    Load every stored transaction and expense into a new AnalyticsEngine.

    The engine holds an immutable snapshot: later changes to the database are
    not visible until `load_engine` is called again.
    """
    transactions = db.list_transactions(app_config.database)
    expenses = db.list_expenses(app_config.database)
    logger.debug(
        "Loaded snapshot: %d transactions, %d expenses",
        len(transactions),
        len(expenses),
    )
    return AnalyticsEngine(transactions, expenses)


def default_range_for(app_config: AppConfig, kind: str) -> str:
    """
    Return the named range used by a report when no period is given.

    ``[reports].default_range`` wins when configured, otherwise the catalog
    entry of the report decides.

    Raises:
        ValueError: if ``kind`` is unknown.
    """
    catalog_range = get_report_config(kind).default_range
    return app_config.reports.default_range or catalog_range


def generate_report(
    app_config: AppConfig,
    kind: str,
    period: Period,
    *,
    threshold: Optional[float] = None,
    inactive_days: Optional[int] = None,
    as_of: Optional[date] = None,
) -> Report:
    """
    Generate a catalog report over the stored records.

    Parameters
    ----------
    kind:
        Report kind (see ``reports.REPORT_CATALOG``).
    period:
        Reporting period (inclusive bounds).
    threshold:
        Overrides the configured threshold of high-value transactions or
        low-performance services.
    inactive_days:
        Overrides the configured inactivity cutoff of inactive customers.
    as_of:
        Reference day of the inactivity cutoff (default: today).

    Raises
    ------
    ValueError
        If ``kind`` is unknown.
    """
    reports_cfg = app_config.reports
    if threshold is None:
        if kind == "high-value-transactions":
            threshold = reports_cfg.high_value_threshold
        elif kind == "low-performance-services":
            threshold = reports_cfg.low_performance_threshold
    if inactive_days is None:
        inactive_days = reports_cfg.inactive_days

    engine = load_engine(app_config)
    return engine.generate(
        kind,
        period.to_date_range(),
        threshold=threshold,
        inactive_days=inactive_days,
        as_of=as_of,
    )


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def list_transactions(
    app_config: AppConfig, period: Optional[Period] = None
) -> list[Transaction]:
    """List stored transactions, most recent first, optionally for a period."""
    if period is None:
        return db.list_transactions(app_config.database)
    return db.list_transactions(app_config.database, period.start, period.end)


def create_transaction(
    app_config: AppConfig,
    date: str,
    style: str,
    price: float,
    notes: Optional[str] = None,
) -> Transaction:
    """
    Validate and store a new transaction.

    Raises
    ------
    ValueError
        If the date, service name or price is invalid.
    """
    transaction = validate_transaction(
        Transaction(
            id="",
            date=date,
            style=style.strip(),
            price=float(price),
            notes=notes or None,
        )
    )
    return db.insert_transaction(app_config.database, transaction)


def edit_transaction(
    app_config: AppConfig,
    transaction_id: str,
    *,
    date: Optional[str] = None,
    style: Optional[str] = None,
    price: Optional[float] = None,
    notes: Optional[str] = None,
) -> Transaction:
    """
    Update some fields of an existing transaction.

    Only the fields passed explicitly (not None) are changed. Passing an
    empty string for ``notes`` clears the notes.

    Raises
    ------
    LookupError
        If no transaction has this id.
    ValueError
        If the updated transaction is invalid.
    """
    current = db.get_transaction(app_config.database, transaction_id)
    if current is None:
        raise LookupError(f"Transaction {transaction_id!r} not found.")

    changes: dict[str, object] = {}
    if date is not None:
        changes["date"] = date
    if style is not None:
        changes["style"] = style.strip()
    if price is not None:
        changes["price"] = float(price)
    if notes is not None:
        changes["notes"] = notes or None

    updated = validate_transaction(replace(current, **changes))
    return db.update_transaction(app_config.database, updated)


def delete_transaction(app_config: AppConfig, transaction_id: str) -> None:
    """Delete a transaction (LookupError if it does not exist)."""
    db.delete_transaction(app_config.database, transaction_id)


def import_transactions_csv(app_config: AppConfig, path: Path) -> ImportStats:
    """Read a transactions CSV file and store its rows."""
    df = read_transactions_csv(path)
    stats = db.import_transactions(df, app_config.database)
    logger.info("Imported transactions from %s", path)
    return stats


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


def list_expenses(
    app_config: AppConfig, period: Optional[Period] = None
) -> list[Expense]:
    """List stored expenses, most recent first, optionally for a period."""
    if period is None:
        return db.list_expenses(app_config.database)
    return db.list_expenses(app_config.database, period.start, period.end)


def create_expense(
    app_config: AppConfig,
    date: str,
    type: str,
    description: str,
    amount: float,
) -> Expense:
    """
    Validate and store a new expense.

    Raises
    ------
    ValueError
        If the date, type, description or amount is invalid.
    """
    expense = validate_expense(
        Expense(
            id="",
            date=date,
            type=type,
            description=description.strip(),
            amount=float(amount),
        )
    )
    return db.insert_expense(app_config.database, expense)


def edit_expense(
    app_config: AppConfig,
    expense_id: str,
    *,
    date: Optional[str] = None,
    type: Optional[str] = None,
    description: Optional[str] = None,
    amount: Optional[float] = None,
) -> Expense:
    """
    Update some fields of an existing expense.

    Raises
    ------
    LookupError
        If no expense has this id.
    ValueError
        If the updated expense is invalid.
    """
    current = db.get_expense(app_config.database, expense_id)
    if current is None:
        raise LookupError(f"Expense {expense_id!r} not found.")

    changes: dict[str, object] = {}
    if date is not None:
        changes["date"] = date
    if type is not None:
        changes["type"] = type
    if description is not None:
        changes["description"] = description.strip()
    if amount is not None:
        changes["amount"] = float(amount)

    updated = validate_expense(replace(current, **changes))
    return db.update_expense(app_config.database, updated)


def delete_expense(app_config: AppConfig, expense_id: str) -> None:
    """Delete an expense (LookupError if it does not exist)."""
    db.delete_expense(app_config.database, expense_id)


def import_expenses_csv(app_config: AppConfig, path: Path) -> ImportStats:
    """Read an expenses CSV file and store its rows."""
    df = read_expenses_csv(path)
    stats = db.import_expenses(df, app_config.database)
    logger.info("Imported expenses from %s", path)
    return stats


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------


def seed_database(
    app_config: AppConfig,
    transactions: int = 50,
    expenses: int = 20,
    *,
    seed: Optional[int] = None,
    today: Optional[date] = None,
) -> tuple[int, int]:
    """
    Store generated sample transactions and expenses.

    Returns
    -------
    tuple[int, int]
        Number of transactions and expenses inserted.
    """
    rng = random.Random(seed)
    cfg = app_config.database

    new_txns = generate_transactions(transactions, today=today, rng=rng)
    new_exps = generate_expenses(expenses, today=today, rng=rng)
    for t in new_txns:
        db.insert_transaction(cfg, t)
    for e in new_exps:
        db.insert_expense(cfg, e)

    logger.info(
        "Seeded %d transactions and %d expenses", len(new_txns), len(new_exps)
    )
    return len(new_txns), len(new_exps)


# ---------------------------------------------------------------------------
# Currency
# ---------------------------------------------------------------------------


def get_currency(app_config: AppConfig) -> str:
    """Return the active currency: the stored setting, else the config value."""
    stored = db.get_setting(app_config.database, CURRENCY_SETTING)
    return stored or app_config.currency


def change_currency(app_config: AppConfig, new_currency: str) -> float:
    """
    Switch the business currency and convert every stored amount.

    The conversion uses the static rate table of ``currency.py``. Unknown
    pairs convert with a rate of 1.

    Returns
    -------
    float
        The rate applied to the stored amounts.

    Raises
    ------
    ValueError
        If ``new_currency`` is not a supported currency code.
    """
    new_currency = new_currency.upper()
    if new_currency not in SUPPORTED_CURRENCIES:
        allowed = ", ".join(SUPPORTED_CURRENCIES)
        raise ValueError(
            f"Unsupported currency {new_currency!r}. Expected one of: {allowed}."
        )

    old_currency = get_currency(app_config)
    rate = exchange_rate(old_currency, new_currency)
    if rate != 1.0:
        db.scale_all_amounts(app_config.database, rate)
    db.set_setting(app_config.database, CURRENCY_SETTING, new_currency)

    logger.info(
        "Currency changed from %s to %s (rate %s)", old_currency, new_currency, rate
    )
    return rate
