# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for Shop FinSight.

This module reads transactions and expenses from CSV files and normalizes
them into a consistent structure suitable for storage and analytics.

Expected input formats
----------------------
Column names are case-insensitive and surrounding spaces are ignored.

1) Transactions
   ------------
       date, style, price[, notes][, id]

   - ``date``:  date of the visit (any format pandas can parse)
   - ``style``: service name (``service`` is accepted as an alias)
   - ``price``: amount charged (non-negative number)
   - ``notes``: optional free text
   - ``id``:    optional identifier (ignored on import, a new id is assigned)

2) Expenses
   --------
       date, type, description, amount[, id]

   - ``type``: "Fixed" or "Short-term" (matched case-insensitively)

Output schema
-------------
Dates are returned as ISO ``YYYY-MM-DD`` strings, amounts as floats and text
columns as strings. Any other column present in the input file is ignored.

If the CSV structure does not match, or if dates / amounts cannot be parsed,
a clear ValueError is raised.
"""

import os
from typing import Union

import pandas as pd

from .records import EXPENSE_TYPES

PathLike = Union[str, "os.PathLike[str]"]


def _read_normalized(path: PathLike) -> pd.DataFrame:
    df = pd.read_csv(path)
    df.columns = [str(c).lower().strip() for c in df.columns]
    return df


def _parse_dates(d: pd.DataFrame) -> None:
    try:
        d["date"] = pd.to_datetime(d["date"], errors="raise").dt.strftime("%Y-%m-%d")
    except Exception as exc:  # noqa: BLE001
        raise ValueError("Invalid values in 'date' column.") from exc


def _parse_amounts(d: pd.DataFrame, col: str) -> None:
    d[col] = pd.to_numeric(d[col], errors="coerce")
    if d[col].isna().any():
        raise ValueError(f"Invalid numeric values in '{col}' column.")
    if (d[col] < 0).any():
        raise ValueError(f"Negative values in '{col}' column.")
    d[col] = d[col].astype(float)


def _text(series: pd.Series) -> pd.Series:
    return series.fillna("").astype(str).str.strip()


def read_transactions_csv(path: PathLike) -> pd.DataFrame:
    """
    Read transactions from a CSV file and normalize them.

    Returns
    -------
    pandas.DataFrame
        A DataFrame with exactly these columns:

            - date  (str, YYYY-MM-DD)
            - style (str)
            - price (float)
            - notes (str, empty when missing)

    Raises
    ------
    ValueError
        If required columns are missing, a date or price cannot be parsed,
        a price is negative or a service name is empty.
    """
    df = _read_normalized(path)
    cols = set(df.columns)

    if "service" in cols and "style" not in cols:
        df = df.rename(columns={"service": "style"})
        cols = set(df.columns)

    required = {"date", "style", "price"}
    if not required.issubset(cols):
        raise ValueError(
            "Invalid transactions structure. Expected columns: "
            "date, style, price[, notes] "
            "(column names are case-insensitive; 'service' is accepted as an "
            "alias for 'style')."
        )

    d = df.copy()
    _parse_dates(d)
    _parse_amounts(d, "price")

    d["style"] = _text(d["style"])
    if (d["style"] == "").any():
        raise ValueError("Empty values in 'style' column.")

    d["notes"] = _text(d["notes"]) if "notes" in cols else ""

    return d[["date", "style", "price", "notes"]].reset_index(drop=True)


def read_expenses_csv(path: PathLike) -> pd.DataFrame:
    """
    Read expenses from a CSV file and normalize them.

    Returns
    -------
    pandas.DataFrame
        A DataFrame with exactly these columns:

            - date        (str, YYYY-MM-DD)
            - type        ("Fixed" or "Short-term")
            - description (str)
            - amount      (float)

    Raises
    ------
    ValueError
        If required columns are missing, a value cannot be parsed, an amount
        is negative, a description is empty or a type is unknown.
    """
    df = _read_normalized(path)
    cols = set(df.columns)

    required = {"date", "type", "description", "amount"}
    if not required.issubset(cols):
        raise ValueError(
            "Invalid expenses structure. Expected columns: "
            "date, type, description, amount "
            "(column names are case-insensitive)."
        )

    d = df.copy()
    _parse_dates(d)
    _parse_amounts(d, "amount")

    canonical_types = {t.lower(): t for t in EXPENSE_TYPES}
    raw_types = _text(d["type"])
    d["type"] = raw_types.str.lower().map(canonical_types)
    if d["type"].isna().any():
        bad = sorted(set(raw_types[d["type"].isna()]))
        allowed = ", ".join(EXPENSE_TYPES)
        raise ValueError(
            f"Invalid values in 'type' column: {bad}. Expected one of: {allowed}."
        )

    d["description"] = _text(d["description"])
    if (d["description"] == "").any():
        raise ValueError("Empty values in 'description' column.")

    return d[["date", "type", "description", "amount"]].reset_index(drop=True)
