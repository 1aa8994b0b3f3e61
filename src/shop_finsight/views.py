# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for Shop FinSight.

This module turns report dataclasses (see ``reports.py``) into pandas
DataFrames ready for display, and writes them to disk as CSV or JSON.

- ``report_tables()`` returns every table of a report, in display order.
  Most reports have a single table; the financial summary and the expense
  breakdown have a second one (expense categories, totals per type).
- ``report_to_dataframe()`` returns the main table only. This is the table
  written by CSV exports.
- ``export_report()`` writes a report to ``<Report_Name>_<YYYY-MM-DD>.<ext>``.

Column headers follow the layout used by exported reports (e.g. business
summary: Metric / Value).
"""

import json
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd

from .periods import _today
from .reports import (
    BusinessSummaryReport,
    CustomerAnalyticsReport,
    DailyOperationsReport,
    ExpenseAnomaliesReport,
    ExpenseBreakdownReport,
    FinancialSummaryReport,
    HighValueTransactionsReport,
    InactiveCustomersReport,
    LowPerformanceServicesReport,
    Report,
    RevenueOutliersReport,
    ServicePerformanceReport,
    TransactionHistoryReport,
    TransactionRow,
    get_report_config,
)

_TRANSACTION_COLUMNS = ["Date", "Service", "Amount", "Notes"]


def _metric_table(rows: list[tuple[str, object]]) -> pd.DataFrame:
    # object dtype keeps counts as ints next to float amounts
    return pd.DataFrame(rows, columns=["Metric", "Value"], dtype=object)


def _transactions_table(rows: tuple[TransactionRow, ...]) -> pd.DataFrame:
    return pd.DataFrame(
        [(t.date, t.service, t.amount, t.notes) for t in rows],
        columns=_TRANSACTION_COLUMNS,
    )


def _round_table(df: pd.DataFrame, decimals: Optional[int]) -> pd.DataFrame:
    """Round float columns (and float values of Metric/Value tables)."""
    if decimals is None or df.empty:
        return df

    df = df.copy()
    for col in df.columns:
        if pd.api.types.is_float_dtype(df[col]):
            df[col] = df[col].round(decimals)
        elif df[col].dtype == object:
            df[col] = df[col].map(
                lambda v: round(v, decimals) if isinstance(v, float) else v
            )
    return df


def report_tables(
    report: Report, decimals: Optional[int] = None
) -> dict[str, pd.DataFrame]:
    """
    Return every table of a report, keyed by a human-readable title.

    Args:
        report: Any report returned by ``AnalyticsEngine``.
        decimals: If given, float values are rounded for display.

    Raises:
        TypeError: if ``report`` is not a known report type.
    """
    tables: dict[str, pd.DataFrame]

    if isinstance(report, BusinessSummaryReport):
        tables = {
            "Summary": _metric_table(
                [
                    ("Total Revenue", report.total_revenue),
                    ("Total Expenses", report.total_expenses),
                    ("Net Profit", report.net_profit),
                    ("Total Customers", report.total_customers),
                    ("Average Transaction Value", report.average_transaction_value),
                    ("Profit Margin (%)", report.profit_margin),
                ]
            )
        }
    elif isinstance(report, ServicePerformanceReport):
        tables = {
            "Services": pd.DataFrame(
                [
                    (s.name, s.count, s.total_revenue, s.average_price, s.percentage)
                    for s in report.services
                ],
                columns=[
                    "Service",
                    "Count",
                    "Total Revenue",
                    "Avg Price",
                    "Percentage",
                ],
            )
        }
    elif isinstance(report, FinancialSummaryReport):
        tables = {
            "Revenue by month": pd.DataFrame(
                [
                    (m.month, m.revenue, m.expenses, m.profit)
                    for m in report.revenue_by_month
                ],
                columns=["Month", "Revenue", "Expenses", "Profit"],
            ),
            "Expense categories": pd.DataFrame(
                [
                    (c.category, c.amount, c.percentage)
                    for c in report.expense_categories
                ],
                columns=["Category", "Amount", "Percentage"],
            ),
        }
    elif isinstance(report, CustomerAnalyticsReport):
        tables = {
            "Customers": _metric_table(
                [
                    ("Total Customers", report.total_customers),
                    ("New Customers", report.new_customers),
                    ("Returning Customers", report.returning_customers),
                    ("Average Customer Value", report.average_customer_value),
                    ("Customer Retention Rate (%)", report.customer_retention_rate),
                ]
            )
        }
    elif isinstance(report, TransactionHistoryReport):
        tables = {"Transactions": _transactions_table(report.transactions)}
    elif isinstance(report, ExpenseBreakdownReport):
        tables = {
            "Expenses": pd.DataFrame(
                [(e.date, e.type, e.description, e.amount) for e in report.expenses],
                columns=["Date", "Type", "Description", "Amount"],
            ),
            "Totals by type": pd.DataFrame(
                [(t.type, t.amount) for t in report.by_category],
                columns=["Type", "Amount"],
            ),
        }
    elif isinstance(report, DailyOperationsReport):
        tables = {
            "Daily operations": pd.DataFrame(
                [
                    (
                        d.date,
                        d.transactions,
                        d.revenue,
                        d.expenses,
                        d.profit,
                        d.customers,
                    )
                    for d in report.daily_data
                ],
                columns=[
                    "Date",
                    "Transactions",
                    "Revenue",
                    "Expenses",
                    "Profit",
                    "Customers",
                ],
            )
        }
    elif isinstance(report, HighValueTransactionsReport):
        tables = {"High-value transactions": _transactions_table(report.transactions)}
    elif isinstance(report, ExpenseAnomaliesReport):
        tables = {
            "Anomalies": pd.DataFrame(
                [
                    (a.date, a.description, a.amount, a.severity, a.reason)
                    for a in report.anomalies
                ],
                columns=["Date", "Description", "Amount", "Severity", "Reason"],
            )
        }
    elif isinstance(report, InactiveCustomersReport):
        tables = {
            "Stale visits": pd.DataFrame(
                [
                    (
                        c.last_visit,
                        c.days_since_last_visit,
                        c.total_visits,
                        c.last_service,
                        c.total_spent,
                    )
                    for c in report.customers
                ],
                columns=[
                    "Last Visit",
                    "Days Since Last Visit",
                    "Total Visits",
                    "Last Service",
                    "Total Spent",
                ],
            )
        }
    elif isinstance(report, LowPerformanceServicesReport):
        tables = {
            "Services": pd.DataFrame(
                [
                    (
                        s.name,
                        s.count,
                        s.total_revenue,
                        s.average_price,
                        s.performance_score,
                    )
                    for s in report.services
                ],
                columns=[
                    "Service",
                    "Count",
                    "Total Revenue",
                    "Avg Price",
                    "Performance Score",
                ],
            )
        }
    elif isinstance(report, RevenueOutliersReport):
        tables = {
            "Outliers": pd.DataFrame(
                [
                    (o.date, o.revenue, o.deviation, o.type, o.transactions)
                    for o in report.outliers
                ],
                columns=["Date", "Revenue", "Deviation (%)", "Type", "Transactions"],
            )
        }
    else:
        raise TypeError(f"Unsupported report type: {type(report).__name__}")

    return {title: _round_table(df, decimals) for title, df in tables.items()}


def report_to_dataframe(report: Report, decimals: Optional[int] = None) -> pd.DataFrame:
    """Return the main table of a report (the first of ``report_tables``)."""
    return next(iter(report_tables(report, decimals).values()))


def export_filename(kind: str, fmt: str, today: Optional[date] = None) -> str:
    """Return '<Report_Name>_<YYYY-MM-DD>.<fmt>' for a report kind."""
    if today is None:
        today = _today()
    name = "_".join(get_report_config(kind).name.split())
    return f"{name}_{today.isoformat()}.{fmt}"


def export_report(
    report: Report,
    kind: str,
    output_dir: Path,
    fmt: str = "csv",
    today: Optional[date] = None,
) -> Path:
    """
    Write a report to ``output_dir`` and return the file path.

    - csv:  the main table (``report_to_dataframe``), without index.
    - json: the whole report, wrapped with its type, title and generation
      date.

    Raises:
        ValueError: if ``kind`` is unknown or ``fmt`` is not one of its
            export formats.
        TypeError: if ``report`` is not the report class of ``kind``.
    """
    config = get_report_config(kind)
    if fmt not in config.export_formats:
        allowed = ", ".join(config.export_formats)
        raise ValueError(
            f"Unsupported export format {fmt!r}. Expected one of: {allowed}."
        )
    if not isinstance(report, config.report_class):
        raise TypeError(
            f"Cannot export {type(report).__name__} as a {kind!r} report."
        )
    if today is None:
        today = _today()

    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(kind, fmt, today)

    if fmt == "csv":
        report_to_dataframe(report).to_csv(path, index=False)
    else:
        payload = {
            "type": kind,
            "title": config.name,
            "generated_at": today.isoformat(),
            "data": asdict(report),
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    return path
