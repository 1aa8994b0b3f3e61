# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for Shop FinSight.

This module defines a Period value object and helpers to derive reporting
periods from named ranges (last 7 / 30 / 90 days, this month, last year),
from CLI arguments, or from a calendar month.

All named ranges are computed relative to "today". ``_today()`` is isolated
so that tests can pin it with monkeypatch.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

import pandas as pd

from .records import ReportDateRange

NAMED_RANGES: tuple[str, ...] = (
    "last7days",
    "last30days",
    "last90days",
    "thisMonth",
    "lastYear",
)

_RANGE_LABELS = {
    "last7days": "Last 7 days",
    "last30days": "Last 30 days",
    "last90days": "Last 90 days",
    "thisMonth": "This month",
    "lastYear": "Last year",
}

_RANGE_DAYS = {
    "last7days": 7,
    "last30days": 30,
    "last90days": 90,
    "lastYear": 365,
}


@dataclass
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str

    def to_date_range(self) -> ReportDateRange:
        return ReportDateRange.from_dates(self.start, self.end)


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def month_period(year: int, month: int) -> Period:
    """Full calendar month."""
    start = date(year, month, 1)
    end = date(year, month, monthrange(year, month)[1])
    return Period(start=start, end=end, label=start.strftime("%B %Y"))


def shift_month(day: date, months: int) -> date:
    """Return the first day of the month ``months`` away from ``day``'s month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def period_from_name(name: str, today: Optional[date] = None) -> Period:
    """
    Build a Period from a named range.

    - last7days / last30days / last90days : today minus N days -> today,
    - thisMonth : first -> last day of the current month,
    - lastYear  : today minus 365 days -> today.

    Unknown names fall back to the last 30 days.
    """
    if today is None:
        today = _today()

    if name == "thisMonth":
        p = month_period(today.year, today.month)
        return Period(start=p.start, end=p.end, label=_RANGE_LABELS[name])

    if name not in _RANGE_DAYS:
        name = "last30days"

    start = today - timedelta(days=_RANGE_DAYS[name])
    return Period(start=start, end=today, label=_RANGE_LABELS[name])


def determine_period_from_args(
    args,
    default_range: str = "last30days",
    today: Optional[date] = None,
) -> Period:
    """
    Determine the reporting period to use based on CLI args.

    Priority (highest to lowest):

        1. args.period (last7days, last30days, last90days, thisMonth, lastYear)
        2. args.from_date / args.to_date (custom period)
        3. the configured default range

    A custom period given with only one bound uses today for the missing end,
    or the default range start for the missing start.

    Raises:
        ValueError: if a custom date is malformed or the end is before the start.
    """
    if today is None:
        today = _today()

    # 1) Predefined period wins over everything else
    if getattr(args, "period", None):
        p = args.period
        if p not in NAMED_RANGES:
            raise ValueError(f"Unknown period: {p!r}")
        return period_from_name(p, today)

    # 2) Custom from/to dates
    from_raw: Optional[str] = getattr(args, "from_date", None)
    to_raw: Optional[str] = getattr(args, "to_date", None)

    if from_raw or to_raw:
        fallback = period_from_name(default_range, today)
        try:
            start = date.fromisoformat(from_raw) if from_raw else fallback.start
            end = date.fromisoformat(to_raw) if to_raw else today
        except ValueError as exc:
            raise ValueError(
                "Invalid custom period date, expected YYYY-MM-DD format."
            ) from exc

        if end < start:
            raise ValueError("Custom period end date cannot be before start date.")

        return Period(start=start, end=end, label=f"Custom period ({start} → {end})")

    # 3) Default range from configuration
    return period_from_name(default_range, today)


def iter_days(start_date: str, end_date: str) -> list[str]:
    """
    Return every calendar day in [start_date, end_date] as ISO strings.

    An inverted range yields an empty list.

    Raises:
        ValueError: if a bound is not a valid ISO date.
    """
    try:
        start = date.fromisoformat(start_date)
        end = date.fromisoformat(end_date)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid date range {start_date!r} -> {end_date!r}, "
            "expected YYYY-MM-DD bounds."
        ) from exc

    if end < start:
        return []
    return [d.strftime("%Y-%m-%d") for d in pd.date_range(start, end, freq="D")]
