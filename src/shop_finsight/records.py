# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Record types for Shop FinSight.

This module defines the two raw record types handled by the application
and the date range used to select them:

- Transaction : one income-generating service (a haircut, a beard trim...),
- Expense     : one cost incurred by the business (rent, supplies...),
- ReportDateRange : inclusive [start_date, end_date] bounds, as ISO strings.

Permissive parsing
------------------
Records coming from storage, CSV files or user input may be partially
populated. The analytics engine never raises on such records. Instead, all
missing values go through two helpers:

- ``coerce_amount(value)`` : missing / empty / NaN / non-numeric -> 0.0
- ``coerce_text(value, default)`` : missing / empty -> default

``Transaction.from_mapping`` and ``Expense.from_mapping`` apply them
uniformly, so the zero-default policy lives in one place.

Validation
----------
Strict validation (the "form" rules) is kept separate from parsing:
``validate_transaction`` and ``validate_expense`` raise ``ValueError`` and
are used by the services layer before storing user input. The engine never
calls them.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal, Optional

ExpenseType = Literal["Fixed", "Short-term"]
EXPENSE_TYPES: tuple[str, ...] = ("Fixed", "Short-term")


def coerce_amount(value: Any) -> float:
    """Return ``value`` as a float, or 0.0 when it is missing or not numeric."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount):
        return 0.0
    return amount


def coerce_text(value: Any, default: str = "") -> str:
    """Return ``value`` as a string, or ``default`` when it is missing or empty."""
    if value is None:
        return default
    if isinstance(value, float) and math.isnan(value):
        return default
    text = str(value)
    return text if text else default


@dataclass(frozen=True)
class Transaction:
    """One service rendered to a customer on a given date."""

    id: str
    date: str
    style: str
    price: float
    notes: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Transaction":
        """Build a Transaction from a loosely-typed mapping (DB row, CSV row...)."""
        notes = data.get("notes")
        return cls(
            id=coerce_text(data.get("id")),
            date=coerce_text(data.get("date")),
            style=coerce_text(data.get("style")),
            price=coerce_amount(data.get("price")),
            notes=None if notes is None else coerce_text(notes),
        )


@dataclass(frozen=True)
class Expense:
    """One cost incurred by the business on a given date."""

    id: str
    date: str
    type: str
    description: str
    amount: float

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Expense":
        """Build an Expense from a loosely-typed mapping (DB row, CSV row...)."""
        return cls(
            id=coerce_text(data.get("id")),
            date=coerce_text(data.get("date")),
            type=coerce_text(data.get("type")),
            description=coerce_text(data.get("description")),
            amount=coerce_amount(data.get("amount")),
        )


@dataclass(frozen=True)
class ReportDateRange:
    """
    Inclusive date bounds for a report.

    Both bounds are ISO ``YYYY-MM-DD`` strings. Ordering of the bounds is the
    caller's responsibility: an inverted range simply selects nothing.
    """

    start_date: str
    end_date: str

    @classmethod
    def from_dates(cls, start: date, end: date) -> "ReportDateRange":
        return cls(start_date=start.isoformat(), end_date=end.isoformat())

    @property
    def label(self) -> str:
        """Human-readable label shared by all reports."""
        return f"{self.start_date} to {self.end_date}"

    def contains(self, day: str) -> bool:
        """Return True if the ISO date string falls within the bounds."""
        return bool(day) and self.start_date <= day <= self.end_date


def _check_iso_date(value: str) -> None:
    try:
        date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid date {value!r}, expected YYYY-MM-DD format."
        ) from exc


def validate_transaction(transaction: Transaction) -> Transaction:
    """
    Check a transaction against the input rules and return it unchanged.

    Raises:
        ValueError: if the date is not a valid ISO date, the service name is
            empty or the price is negative.
    """
    _check_iso_date(transaction.date)
    if not transaction.style.strip():
        raise ValueError("Service/style is required.")
    if transaction.price < 0:
        raise ValueError("Price must be positive.")
    return transaction


def validate_expense(expense: Expense) -> Expense:
    """
    Check an expense against the input rules and return it unchanged.

    Raises:
        ValueError: if the date is not a valid ISO date, the type is not one
            of EXPENSE_TYPES, the description is empty or the amount is
            negative.
    """
    _check_iso_date(expense.date)
    if expense.type not in EXPENSE_TYPES:
        allowed = ", ".join(EXPENSE_TYPES)
        raise ValueError(
            f"Invalid expense type {expense.type!r}. Expected one of: {allowed}."
        )
    if not expense.description.strip():
        raise ValueError("Description is required.")
    if expense.amount < 0:
        raise ValueError("Amount must be positive.")
    return expense
