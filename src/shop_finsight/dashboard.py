# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Monthly dashboard analytics for Shop FinSight.

While ``engine.py`` builds reports for an arbitrary date range, this module
computes the month-oriented figures shown on the dashboard:

- ``monthly_analytics()`` : totals for one calendar month, compared with the
  previous month (customer growth, profit growth) and the most requested
  service,
- ``kpi_data()`` : the subset of those figures shown as KPI cards,
- ``monthly_trend()`` : one row per month over the last N months, in the
  long format used for charts (income, expenses, profit, customers),
- ``service_distribution()`` : visit count per service for one month.

Month boundaries are computed with ``periods.month_period`` and records are
selected with the same inclusive, lexicographic date filter as the engine.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Optional

import pandas as pd

from .engine import filter_by_date_range
from .periods import _today, month_period, shift_month
from .records import Expense, Transaction, coerce_amount, coerce_text


@dataclass(frozen=True)
class KPIData:
    total_income: float
    total_expenses: float
    net_profit: float
    total_customers: int
    customer_growth: float
    profit_growth: float
    top_service: str


@dataclass(frozen=True)
class MonthlyAnalytics:
    """
    Figures for one calendar month.

    Attributes
    ----------
    month :
        Month as 'YYYY-MM'.
    customer_growth :
        Percentage change of the visit count vs. the previous month, 0 when
        the previous month had no visit.
    profit_growth :
        Percentage change of the net profit vs. the previous month, 0 unless
        the previous month's profit was positive.
    top_service :
        Most frequent service of the month ('None' if there is no visit).
        On ties, the service seen first wins.
    """

    month: str
    total_income: float
    total_expenses: float
    net_profit: float
    total_customers: int
    customer_growth: float
    profit_growth: float
    top_service: str
    transactions: tuple[Transaction, ...]
    expenses: tuple[Expense, ...]

    def to_kpi(self) -> KPIData:
        return KPIData(
            total_income=self.total_income,
            total_expenses=self.total_expenses,
            net_profit=self.net_profit,
            total_customers=self.total_customers,
            customer_growth=self.customer_growth,
            profit_growth=self.profit_growth,
            top_service=self.top_service,
        )


def _month_records(
    transactions: Iterable[Transaction],
    expenses: Iterable[Expense],
    month: date,
) -> tuple[list[Transaction], list[Expense]]:
    date_range = month_period(month.year, month.month).to_date_range()
    return (
        filter_by_date_range(transactions, date_range),
        filter_by_date_range(expenses, date_range),
    )


def _top_service(transactions: Iterable[Transaction]) -> str:
    counts: dict[str, int] = {}
    for t in transactions:
        style = coerce_text(t.style, "Unknown")
        counts[style] = counts.get(style, 0) + 1

    top, top_count = "None", 0
    for style, count in counts.items():
        if count > top_count:
            top, top_count = style, count
    return top


def monthly_analytics(
    transactions: Sequence[Transaction],
    expenses: Sequence[Expense],
    month: Optional[date] = None,
) -> MonthlyAnalytics:
    """
    Compute the dashboard figures for the month containing ``month``.

    Args:
        transactions: All known transactions (any order).
        expenses: All known expenses (any order).
        month: Any day of the target month. Defaults to today.

    Returns:
        A MonthlyAnalytics instance.
    """
    if month is None:
        month = _today()

    month_txns, month_exps = _month_records(transactions, expenses, month)
    total_income = sum((coerce_amount(t.price) for t in month_txns), 0.0)
    total_expenses = sum((coerce_amount(e.amount) for e in month_exps), 0.0)
    net_profit = total_income - total_expenses
    total_customers = len(month_txns)

    # Previous month, used for growth figures.
    prev_txns, prev_exps = _month_records(
        transactions, expenses, shift_month(month, -1)
    )
    prev_customers = len(prev_txns)
    prev_profit = sum((coerce_amount(t.price) for t in prev_txns), 0.0) - sum(
        (coerce_amount(e.amount) for e in prev_exps), 0.0
    )

    if prev_customers > 0:
        customer_growth = (total_customers - prev_customers) / prev_customers * 100
    else:
        customer_growth = 0.0

    if prev_profit > 0:
        profit_growth = (net_profit - prev_profit) / prev_profit * 100
    else:
        profit_growth = 0.0

    return MonthlyAnalytics(
        month=month.strftime("%Y-%m"),
        total_income=total_income,
        total_expenses=total_expenses,
        net_profit=net_profit,
        total_customers=total_customers,
        customer_growth=customer_growth,
        profit_growth=profit_growth,
        top_service=_top_service(month_txns),
        transactions=tuple(month_txns),
        expenses=tuple(month_exps),
    )


def kpi_data(
    transactions: Sequence[Transaction],
    expenses: Sequence[Expense],
    month: Optional[date] = None,
) -> KPIData:
    """KPI card figures for the month containing ``month`` (default: today)."""
    return monthly_analytics(transactions, expenses, month).to_kpi()


def monthly_trend(
    transactions: Sequence[Transaction],
    expenses: Sequence[Expense],
    months: int = 6,
    today: Optional[date] = None,
) -> pd.DataFrame:
    """
    Income, expenses, profit and visit count for the last ``months`` months.

    Returns:
        A DataFrame with one row per month, oldest first, and columns:
            month (YYYY-MM), label ('Jan 2025'), income, expenses, profit,
            customers
    """
    if today is None:
        today = _today()

    rows = []
    for offset in range(months - 1, -1, -1):
        month = shift_month(today, -offset)
        analytics = monthly_analytics(transactions, expenses, month)
        rows.append(
            {
                "month": analytics.month,
                "label": month.strftime("%b %Y"),
                "income": analytics.total_income,
                "expenses": analytics.total_expenses,
                "profit": analytics.net_profit,
                "customers": analytics.total_customers,
            }
        )

    columns = ["month", "label", "income", "expenses", "profit", "customers"]
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns)


def service_distribution(
    transactions: Sequence[Transaction],
    expenses: Sequence[Expense],
    month: Optional[date] = None,
    top: int = 8,
) -> pd.DataFrame:
    """
    Visit count per service for one month, most requested first.

    Returns:
        A DataFrame with columns: name, value (visit count), percentage
        (share of the month's visits, rounded to 1 decimal). At most ``top``
        rows are returned.
    """
    analytics = monthly_analytics(transactions, expenses, month)
    if not analytics.transactions:
        return pd.DataFrame(columns=["name", "value", "percentage"])

    counts: dict[str, int] = {}
    for t in analytics.transactions:
        style = coerce_text(t.style, "Unknown")
        counts[style] = counts.get(style, 0) + 1

    df = pd.DataFrame({"name": list(counts), "value": list(counts.values())})
    df["percentage"] = (df["value"] / analytics.total_customers * 100).round(1)
    df = df.sort_values("value", ascending=False, kind="stable")
    return df.head(top).reset_index(drop=True)
