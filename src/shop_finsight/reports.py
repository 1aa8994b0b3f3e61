# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Report value objects and report catalog for Shop FinSight.

Every report produced by the analytics engine is a frozen dataclass. All of
them share a ``period`` attribute (``"<start> to <end>"``) and are built
fresh on each call: nothing is cached or persisted.

The set of report kinds is closed. ``ReportKind`` lists the identifiers
used by the CLI and the export layer, and ``Report`` is the union of all
report classes. Code that switches over report kinds (``engine.generate``,
``views.report_to_dataframe``) handles every member of this union.

Report kinds are grouped in three categories:

- summary   : business summary, service performance, financial summary,
              customer analytics,
- detailed  : transaction history, expense breakdown, daily operations,
- exception : high-value transactions, expense anomalies, inactive
              customers, low-performance services, revenue outliers.

``REPORT_CATALOG`` describes each kind for listing and export purposes.
"""

from dataclasses import dataclass
from typing import Literal, Union

ReportKind = Literal[
    "business-summary",
    "service-performance",
    "financial-summary",
    "customer-analytics",
    "transaction-history",
    "expense-breakdown",
    "daily-operations",
    "high-value-transactions",
    "expense-anomalies",
    "inactive-customers",
    "low-performance-services",
    "revenue-outliers",
]

ReportCategory = Literal["summary", "detailed", "exception"]
Severity = Literal["low", "medium", "high"]
OutlierType = Literal["high", "low"]

# ---------------------------------------------------------------------------
# Row types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServiceStats:
    name: str
    count: int
    total_revenue: float
    average_price: float
    percentage: float


@dataclass(frozen=True)
class MonthlyRevenue:
    month: str
    revenue: float
    expenses: float
    profit: float


@dataclass(frozen=True)
class ExpenseCategory:
    category: str
    amount: float
    percentage: float


@dataclass(frozen=True)
class TransactionRow:
    id: str
    date: str
    service: str
    amount: float
    notes: str = ""


@dataclass(frozen=True)
class ExpenseRow:
    id: str
    date: str
    type: str
    description: str
    amount: float


@dataclass(frozen=True)
class ExpenseTypeTotal:
    type: str
    amount: float


@dataclass(frozen=True)
class DailyStats:
    date: str
    transactions: int
    revenue: float
    expenses: float
    profit: float
    customers: int


@dataclass(frozen=True)
class ExpenseAnomaly:
    id: str
    date: str
    description: str
    amount: float
    reason: str
    severity: Severity


@dataclass(frozen=True)
class StaleVisit:
    """A past visit older than the inactivity cutoff."""

    last_visit: str
    days_since_last_visit: int
    total_visits: int
    last_service: str
    total_spent: float


@dataclass(frozen=True)
class LowPerformanceService:
    name: str
    count: int
    total_revenue: float
    average_price: float
    performance_score: float


@dataclass(frozen=True)
class RevenueOutlier:
    date: str
    revenue: float
    deviation: float
    type: OutlierType
    transactions: int


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BusinessSummaryReport:
    period: str
    total_revenue: float
    total_expenses: float
    net_profit: float
    total_customers: int
    average_transaction_value: float
    profit_margin: float


@dataclass(frozen=True)
class ServicePerformanceReport:
    period: str
    services: tuple[ServiceStats, ...]
    top_service: str
    least_popular_service: str


@dataclass(frozen=True)
class FinancialSummaryReport:
    period: str
    revenue_by_month: tuple[MonthlyRevenue, ...]
    expense_categories: tuple[ExpenseCategory, ...]


@dataclass(frozen=True)
class CustomerAnalyticsReport:
    period: str
    total_customers: int
    new_customers: int
    returning_customers: int
    average_customer_value: float
    customer_retention_rate: float


@dataclass(frozen=True)
class TransactionHistoryReport:
    period: str
    transactions: tuple[TransactionRow, ...]
    total_count: int
    total_amount: float


@dataclass(frozen=True)
class ExpenseBreakdownReport:
    period: str
    expenses: tuple[ExpenseRow, ...]
    total_count: int
    total_amount: float
    by_category: tuple[ExpenseTypeTotal, ...] = ()


@dataclass(frozen=True)
class DailyOperationsReport:
    period: str
    daily_data: tuple[DailyStats, ...]


@dataclass(frozen=True)
class HighValueTransactionsReport:
    period: str
    threshold: float
    transactions: tuple[TransactionRow, ...]
    count: int
    total_value: float


@dataclass(frozen=True)
class ExpenseAnomaliesReport:
    period: str
    anomalies: tuple[ExpenseAnomaly, ...]
    total_anomalies: int


@dataclass(frozen=True)
class InactiveCustomersReport:
    """
    Visits older than the inactivity cutoff.

    The data model has no customer identity, so each row is a past visit
    rather than a customer. ``disclaimer`` states this explicitly so that
    rendering layers can show it next to the figures.
    """

    period: str
    inactive_days: int
    as_of: str
    customers: tuple[StaleVisit, ...]
    count: int
    disclaimer: str


@dataclass(frozen=True)
class LowPerformanceServicesReport:
    period: str
    threshold: float
    services: tuple[LowPerformanceService, ...]


@dataclass(frozen=True)
class RevenueOutliersReport:
    period: str
    average_daily_revenue: float
    outliers: tuple[RevenueOutlier, ...]


Report = Union[
    BusinessSummaryReport,
    ServicePerformanceReport,
    FinancialSummaryReport,
    CustomerAnalyticsReport,
    TransactionHistoryReport,
    ExpenseBreakdownReport,
    DailyOperationsReport,
    HighValueTransactionsReport,
    ExpenseAnomaliesReport,
    InactiveCustomersReport,
    LowPerformanceServicesReport,
    RevenueOutliersReport,
]

# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReportConfig:
    """
    Static description of a report kind.

    ``report_class`` is the dataclass produced for this kind; exports check
    it so that a report cannot be written under another kind's name.
    ``default_range`` applies when no period is given and the configuration
    does not override it.
    """

    kind: str
    name: str
    description: str
    category: ReportCategory
    report_class: type
    default_range: str = "last30days"
    export_formats: tuple[str, ...] = ("csv", "json")


REPORT_CATALOG: dict[str, ReportConfig] = {
    c.kind: c
    for c in (
        ReportConfig(
            kind="business-summary",
            name="Business Summary",
            description="High-level overview of revenue, expenses, and profit",
            category="summary",
            report_class=BusinessSummaryReport,
        ),
        ReportConfig(
            kind="service-performance",
            name="Service Performance",
            description=(
                "Analysis of most and least popular services with revenue breakdown"
            ),
            category="summary",
            report_class=ServicePerformanceReport,
        ),
        ReportConfig(
            kind="financial-summary",
            name="Financial Summary",
            description="Monthly revenue, expenses and profit with expense categories",
            category="summary",
            default_range="lastYear",
            report_class=FinancialSummaryReport,
        ),
        ReportConfig(
            kind="customer-analytics",
            name="Customer Analytics",
            description="Customer visits, average value and estimated retention",
            category="summary",
            report_class=CustomerAnalyticsReport,
        ),
        ReportConfig(
            kind="transaction-history",
            name="Complete Transaction History",
            description="Detailed list of all transactions with full information",
            category="detailed",
            report_class=TransactionHistoryReport,
        ),
        ReportConfig(
            kind="expense-breakdown",
            name="Detailed Expense Breakdown",
            description="Complete expense analysis with categories and descriptions",
            category="detailed",
            report_class=ExpenseBreakdownReport,
        ),
        ReportConfig(
            kind="daily-operations",
            name="Daily Operations",
            description="Day-by-day revenue, expenses, profit and customer counts",
            category="detailed",
            default_range="last7days",
            report_class=DailyOperationsReport,
        ),
        ReportConfig(
            kind="high-value-transactions",
            name="High-Value Transactions",
            description="Transactions exceeding configurable threshold amount",
            category="exception",
            report_class=HighValueTransactionsReport,
        ),
        ReportConfig(
            kind="expense-anomalies",
            name="Expense Anomalies",
            description="Unusual spending patterns and unexpectedly high expenses",
            category="exception",
            report_class=ExpenseAnomaliesReport,
        ),
        ReportConfig(
            kind="inactive-customers",
            name="Inactive Customers",
            description="Past visits older than the inactivity cutoff (approximate)",
            category="exception",
            default_range="lastYear",
            report_class=InactiveCustomersReport,
        ),
        ReportConfig(
            kind="low-performance-services",
            name="Low-Performance Services",
            description="Services whose revenue stays below a threshold",
            category="exception",
            report_class=LowPerformanceServicesReport,
        ),
        ReportConfig(
            kind="revenue-outliers",
            name="Revenue Outliers",
            description="Days whose revenue deviates strongly from the daily average",
            category="exception",
            report_class=RevenueOutliersReport,
        ),
    )
}


def get_report_config(kind: str) -> ReportConfig:
    """
    Return the catalog entry for a report kind.

    Raises:
        ValueError: if the kind is not part of the catalog.
    """
    try:
        return REPORT_CATALOG[kind]
    except KeyError as exc:
        known = ", ".join(REPORT_CATALOG)
        raise ValueError(
            f"Unknown report type: {kind!r}. Expected one of: {known}."
        ) from exc


def reports_for_category(category: str = "all") -> list[ReportConfig]:
    """Return catalog entries for a category ('all' returns every report)."""
    if category == "all":
        return list(REPORT_CATALOG.values())
    return [c for c in REPORT_CATALOG.values() if c.category == category]
