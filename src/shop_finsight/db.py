# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Database layer for Shop FinSight.

This module provides all low-level accessors for the SQLite database used
by the application. It is responsible for:

- Initializing the database schema.
- Exposing CRUD operations on transactions and expenses.
- Bulk-importing transactions and expenses from normalized DataFrames,
  skipping rows that already exist.
- Storing application settings (e.g. the business currency).
- Converting every stored amount when the business currency changes.

The database is the single source of truth for records. The analytics
engine never talks to it directly: higher layers load a snapshot
(``list_transactions`` / ``list_expenses``) and hand it to the engine.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

1) transactions
   - id           TEXT    PRIMARY KEY   -- "txn_<ms>_<random>"
   - date         TEXT    NOT NULL      -- ISO date "YYYY-MM-DD"
   - style        TEXT    NOT NULL      -- service name
   - price_cents  INTEGER NOT NULL      -- price in cents
   - notes        TEXT
   - created_at   TEXT    NOT NULL      -- UTC timestamp
   - updated_at   TEXT                  -- UTC timestamp of last edit

2) expenses
   - id           TEXT    PRIMARY KEY   -- "exp_<ms>_<random>"
   - date         TEXT    NOT NULL
   - type         TEXT    NOT NULL      -- "Fixed" | "Short-term"
   - description  TEXT    NOT NULL
   - amount_cents INTEGER NOT NULL
   - created_at   TEXT    NOT NULL
   - updated_at   TEXT

3) settings
   - key          TEXT    PRIMARY KEY
   - value        TEXT    NOT NULL

------------------------------------------------------------------------------
SQLite Notes
------------------------------------------------------------------------------

- Amounts are stored as integer cents and converted back to floats.
- All timestamps are stored as ISO-8601 text (UTC).
- Each public function opens its own connection and closes it before
  returning. The caller never manages connections.
"""

from __future__ import annotations

import logging
import random
import sqlite3
import string
import time
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path

import pandas as pd

from .records import Expense, Transaction

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for Shop FinSight.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


@dataclass(frozen=True)
class ImportStats:
    """
    Summary of a bulk import.

    Attributes
    ----------
    rows_inserted:
        Number of rows inserted.
    duplicates_skipped:
        Number of rows skipped because an identical record already existed
        (same date, service / type, description / notes and amount).
    """

    rows_inserted: int
    duplicates_skipped: int


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    return sqlite3.connect(cfg.path)


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """
    Create tables and indexes if they do not exist yet.

    This function is idempotent and can be called multiple times safely.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS transactions (
            id          TEXT    PRIMARY KEY,
            date        TEXT    NOT NULL,  -- ISO date 'YYYY-MM-DD'
            style       TEXT    NOT NULL,
            price_cents INTEGER NOT NULL,
            notes       TEXT,
            created_at  TEXT    NOT NULL,
            updated_at  TEXT
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS expenses (
            id           TEXT    PRIMARY KEY,
            date         TEXT    NOT NULL,  -- ISO date 'YYYY-MM-DD'
            type         TEXT    NOT NULL,  -- 'Fixed' | 'Short-term'
            description  TEXT    NOT NULL,
            amount_cents INTEGER NOT NULL,
            created_at   TEXT    NOT NULL,
            updated_at   TEXT
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS settings (
            key   TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );
        """
    )

    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_transactions_date ON transactions(date);"
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date);")

    conn.commit()


def _to_cents(amount: float) -> int:
    return int(round(float(amount) * 100))


def _to_iso_date(value) -> str:
    """Convert a date-like value to ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value)).isoformat()


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def new_record_id(prefix: str) -> str:
    """Return a new record id such as 'txn_1718000000000_k3j9d0a1b'."""
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}_{millis}_{suffix}"


def _date_bounds_clause(
    start: date | None, end: date | None
) -> tuple[str, list[object]]:
    clauses: list[str] = ["1 = 1"]
    params: list[object] = []
    if start is not None:
        clauses.append("date >= ?")
        params.append(start.isoformat())
    if end is not None:
        clauses.append("date <= ?")
        params.append(end.isoformat())
    return " AND ".join(clauses), params


def _row_to_transaction(row: tuple) -> Transaction:
    """Convert a (id, date, style, price_cents, notes) row into a Transaction."""
    txn_id, date_str, style, price_cents, notes = row
    return Transaction(
        id=txn_id,
        date=date_str,
        style=style,
        price=float(price_cents) / 100.0,
        notes=notes,
    )


def _row_to_expense(row: tuple) -> Expense:
    """Convert a (id, date, type, description, amount_cents) row into an Expense."""
    exp_id, date_str, exp_type, description, amount_cents = row
    return Expense(
        id=exp_id,
        date=date_str,
        type=exp_type,
        description=description,
        amount=float(amount_cents) / 100.0,
    )


# ---------------------------------------------------------------------------
# Public API: schema
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if it does not exist.
    - Creates tables and indexes if they are missing.
    - This function is idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    _ensure_sqlite(cfg)
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        _create_schema_if_needed(conn)
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def get_transaction(cfg: DatabaseConfig, transaction_id: str) -> Transaction | None:
    """Load a single transaction by id, or None if it does not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            SELECT id, date, style, price_cents, notes
              FROM transactions
             WHERE id = ?;
            """,
            (transaction_id,),
        )
        row = cur.fetchone()
    finally:
        conn.close()

    return None if row is None else _row_to_transaction(row)


def list_transactions(
    cfg: DatabaseConfig,
    start: date | None = None,
    end: date | None = None,
) -> list[Transaction]:
    """
    Return transactions, most recent first, within optional inclusive bounds.
    """
    init_database(cfg)
    where, params = _date_bounds_clause(start, end)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"""
            SELECT id, date, style, price_cents, notes
              FROM transactions
             WHERE {where}
             ORDER BY date DESC, created_at DESC, rowid DESC;
            """,
            params,
        )
        rows = cur.fetchall()
    finally:
        conn.close()

    return [_row_to_transaction(r) for r in rows]


def insert_transaction(cfg: DatabaseConfig, transaction: Transaction) -> Transaction:
    """
    Insert a transaction and return it as stored.

    A new id is generated when ``transaction.id`` is empty.
    """
    init_database(cfg)

    txn_id = transaction.id or new_record_id("txn")
    conn = _connect(cfg)
    try:
        conn.execute(
            """
            INSERT INTO transactions (id, date, style, price_cents, notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?);
            """,
            (
                txn_id,
                _to_iso_date(transaction.date),
                transaction.style,
                _to_cents(transaction.price),
                transaction.notes,
                _now_utc_iso(),
            ),
        )
        conn.commit()
    finally:
        conn.close()

    logger.info("Inserted transaction %s", txn_id)
    result = get_transaction(cfg, txn_id)
    if result is None:
        msg = f"Transaction {txn_id!r} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def update_transaction(cfg: DatabaseConfig, transaction: Transaction) -> Transaction:
    """
    Replace every field of an existing transaction.

    Raises
    ------
    LookupError
        If no transaction has this id.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            UPDATE transactions
               SET date        = ?,
                   style       = ?,
                   price_cents = ?,
                   notes       = ?,
                   updated_at  = ?
             WHERE id = ?;
            """,
            (
                _to_iso_date(transaction.date),
                transaction.style,
                _to_cents(transaction.price),
                transaction.notes,
                _now_utc_iso(),
                transaction.id,
            ),
        )
        conn.commit()
        updated = cur.rowcount
    finally:
        conn.close()

    if updated == 0:
        raise LookupError(f"Transaction {transaction.id!r} not found.")

    logger.info("Updated transaction %s", transaction.id)
    result = get_transaction(cfg, transaction.id)
    if result is None:
        msg = f"Transaction {transaction.id!r} was updated but could not be reloaded."
        raise RuntimeError(msg)
    return result


def delete_transaction(cfg: DatabaseConfig, transaction_id: str) -> None:
    """
    Permanently delete a transaction.

    Raises
    ------
    LookupError
        If no transaction has this id.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM transactions WHERE id = ?;", (transaction_id,))
        conn.commit()
        deleted = cur.rowcount
    finally:
        conn.close()

    if deleted == 0:
        raise LookupError(f"Transaction {transaction_id!r} not found.")
    logger.info("Deleted transaction %s", transaction_id)


def import_transactions(df: pd.DataFrame, cfg: DatabaseConfig) -> ImportStats:
    """
    Import a batch of transactions.

    Parameters
    ----------
    df:
        Normalized transactions with columns date, style, price and
        optionally notes (see ``io.read_transactions_csv``).

    Behavior
    --------
    - Each row receives a new id.
    - A row identical to a transaction stored before the import (same
      date, style, price_cents and notes) is skipped and counted as a
      duplicate. Each stored transaction absorbs at most one imported row,
      so re-importing a file inserts nothing while identical rows within a
      single file (two customers, same service, same day) are all kept.
    - All rows are inserted in a single commit.

    Raises
    ------
    ValueError
        If df does not contain the required columns.
    """
    missing = {"date", "style", "price"}.difference(df.columns)
    if missing:
        cols = ", ".join(sorted(missing))
        raise ValueError(f"DataFrame is missing required column(s): {cols}")

    init_database(cfg)
    now = _now_utc_iso()
    inserted = 0
    skipped = 0

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(
            "SELECT date, style, price_cents, COALESCE(notes, '') FROM transactions;"
        )
        existing = Counter(tuple(r) for r in cur.fetchall())

        for _, row in df.iterrows():
            iso_date = _to_iso_date(row["date"])
            style = str(row["style"])
            price_cents = _to_cents(row["price"])
            raw_notes = row["notes"] if "notes" in df.columns else None
            notes = None if pd.isna(raw_notes) or raw_notes == "" else str(raw_notes)

            key = (iso_date, style, price_cents, notes or "")
            if existing[key] > 0:
                existing[key] -= 1
                skipped += 1
                continue

            cur.execute(
                """
                INSERT INTO transactions
                    (id, date, style, price_cents, notes, created_at)
                VALUES (?, ?, ?, ?, ?, ?);
                """,
                (new_record_id("txn"), iso_date, style, price_cents, notes, now),
            )
            inserted += 1

        conn.commit()
    finally:
        conn.close()

    logger.info("Imported %d transactions (%d duplicates skipped)", inserted, skipped)
    return ImportStats(rows_inserted=inserted, duplicates_skipped=skipped)


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


def get_expense(cfg: DatabaseConfig, expense_id: str) -> Expense | None:
    """Load a single expense by id, or None if it does not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            SELECT id, date, type, description, amount_cents
              FROM expenses
             WHERE id = ?;
            """,
            (expense_id,),
        )
        row = cur.fetchone()
    finally:
        conn.close()

    return None if row is None else _row_to_expense(row)


def list_expenses(
    cfg: DatabaseConfig,
    start: date | None = None,
    end: date | None = None,
) -> list[Expense]:
    """Return expenses, most recent first, within optional inclusive bounds."""
    init_database(cfg)
    where, params = _date_bounds_clause(start, end)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"""
            SELECT id, date, type, description, amount_cents
              FROM expenses
             WHERE {where}
             ORDER BY date DESC, created_at DESC, rowid DESC;
            """,
            params,
        )
        rows = cur.fetchall()
    finally:
        conn.close()

    return [_row_to_expense(r) for r in rows]


def insert_expense(cfg: DatabaseConfig, expense: Expense) -> Expense:
    """
    Insert an expense and return it as stored.

    A new id is generated when ``expense.id`` is empty.
    """
    init_database(cfg)

    exp_id = expense.id or new_record_id("exp")
    conn = _connect(cfg)
    try:
        conn.execute(
            """
            INSERT INTO expenses (id, date, type, description, amount_cents, created_at)
            VALUES (?, ?, ?, ?, ?, ?);
            """,
            (
                exp_id,
                _to_iso_date(expense.date),
                expense.type,
                expense.description,
                _to_cents(expense.amount),
                _now_utc_iso(),
            ),
        )
        conn.commit()
    finally:
        conn.close()

    logger.info("Inserted expense %s", exp_id)
    result = get_expense(cfg, exp_id)
    if result is None:
        msg = f"Expense {exp_id!r} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def update_expense(cfg: DatabaseConfig, expense: Expense) -> Expense:
    """
    Replace every field of an existing expense.

    Raises
    ------
    LookupError
        If no expense has this id.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            UPDATE expenses
               SET date         = ?,
                   type         = ?,
                   description  = ?,
                   amount_cents = ?,
                   updated_at   = ?
             WHERE id = ?;
            """,
            (
                _to_iso_date(expense.date),
                expense.type,
                expense.description,
                _to_cents(expense.amount),
                _now_utc_iso(),
                expense.id,
            ),
        )
        conn.commit()
        updated = cur.rowcount
    finally:
        conn.close()

    if updated == 0:
        raise LookupError(f"Expense {expense.id!r} not found.")

    logger.info("Updated expense %s", expense.id)
    result = get_expense(cfg, expense.id)
    if result is None:
        msg = f"Expense {expense.id!r} was updated but could not be reloaded."
        raise RuntimeError(msg)
    return result


def delete_expense(cfg: DatabaseConfig, expense_id: str) -> None:
    """
    Permanently delete an expense.

    Raises
    ------
    LookupError
        If no expense has this id.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM expenses WHERE id = ?;", (expense_id,))
        conn.commit()
        deleted = cur.rowcount
    finally:
        conn.close()

    if deleted == 0:
        raise LookupError(f"Expense {expense_id!r} not found.")
    logger.info("Deleted expense %s", expense_id)


def import_expenses(df: pd.DataFrame, cfg: DatabaseConfig) -> ImportStats:
    """
    Import a batch of expenses.

    Parameters
    ----------
    df:
        Normalized expenses with columns date, type, description, amount
        (see ``io.read_expenses_csv``).

    Behavior
    --------
    Same as ``import_transactions``: new ids, exact duplicates skipped,
    single commit.

    Raises
    ------
    ValueError
        If df does not contain the required columns.
    """
    missing = {"date", "type", "description", "amount"}.difference(df.columns)
    if missing:
        cols = ", ".join(sorted(missing))
        raise ValueError(f"DataFrame is missing required column(s): {cols}")

    init_database(cfg)
    now = _now_utc_iso()
    inserted = 0
    skipped = 0

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute("SELECT date, type, description, amount_cents FROM expenses;")
        existing = Counter(tuple(r) for r in cur.fetchall())

        for _, row in df.iterrows():
            iso_date = _to_iso_date(row["date"])
            exp_type = str(row["type"])
            description = str(row["description"])
            amount_cents = _to_cents(row["amount"])

            key = (iso_date, exp_type, description, amount_cents)
            if existing[key] > 0:
                existing[key] -= 1
                skipped += 1
                continue

            cur.execute(
                """
                INSERT INTO expenses
                    (id, date, type, description, amount_cents, created_at)
                VALUES (?, ?, ?, ?, ?, ?);
                """,
                (
                    new_record_id("exp"),
                    iso_date,
                    exp_type,
                    description,
                    amount_cents,
                    now,
                ),
            )
            inserted += 1

        conn.commit()
    finally:
        conn.close()

    logger.info("Imported %d expenses (%d duplicates skipped)", inserted, skipped)
    return ImportStats(rows_inserted=inserted, duplicates_skipped=skipped)


# ---------------------------------------------------------------------------
# Settings & currency conversion
# ---------------------------------------------------------------------------


def get_setting(
    cfg: DatabaseConfig, key: str, default: str | None = None
) -> str | None:
    """Return a stored setting, or ``default`` if it has never been set."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("SELECT value FROM settings WHERE key = ?;", (key,))
        row = cur.fetchone()
    finally:
        conn.close()

    return default if row is None else row[0]


def set_setting(cfg: DatabaseConfig, key: str, value: str) -> None:
    """Insert or replace a setting."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        conn.execute(
            """
            INSERT INTO settings (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value;
            """,
            (key, value),
        )
        conn.commit()
    finally:
        conn.close()


def scale_all_amounts(cfg: DatabaseConfig, rate: float) -> tuple[int, int]:
    """
    Multiply every stored price and expense amount by ``rate``.

    Amounts are rounded to the cent. Both tables are updated in a single
    commit.

    Returns
    -------
    tuple[int, int]
        Number of transactions and expenses updated.
    """
    init_database(cfg)
    now = _now_utc_iso()

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            UPDATE transactions
               SET price_cents = CAST(ROUND(price_cents * ?) AS INTEGER),
                   updated_at  = ?;
            """,
            (rate, now),
        )
        txn_count = cur.rowcount
        cur = conn.execute(
            """
            UPDATE expenses
               SET amount_cents = CAST(ROUND(amount_cents * ?) AS INTEGER),
                   updated_at   = ?;
            """,
            (rate, now),
        )
        exp_count = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    logger.info(
        "Scaled %d transactions and %d expenses by %s", txn_count, exp_count, rate
    )
    return txn_count, exp_count
