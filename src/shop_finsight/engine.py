# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Analytics engine for Shop FinSight.

This module turns raw transactions and expenses into the report value
objects defined in ``reports.py``.

The engine is a pure function library wrapped in a small class:

1. Snapshot
   --------
   ``AnalyticsEngine(transactions, expenses)`` captures both sequences as
   tuples. The engine never mutates them and holds no other state, so one
   instance can be reused for any number of reports, in any order.

2. Date filtering
   --------------
   Every generator starts by keeping the records whose ``date`` string lies
   within ``[start_date, end_date]``. The comparison is lexicographic, which
   is valid because dates are zero-padded ISO strings. Records without a
   date are dropped.

3. Report generators
   -----------------
   One method per report kind. Each method accumulates amounts into plain
   buckets (per service, per month, per day, per expense type), then derives
   averages, percentages and rankings from them.

   Every ratio guards its denominator: when the denominator is 0 the ratio
   is 0. No generator raises on partially-populated records; missing
   amounts count as 0 (see ``records.coerce_amount``).

4. Dispatch
   --------
   ``generate(kind, date_range, ...)`` maps a report kind identifier to the
   matching generator. It is used by the CLI and the export layer.

Notes
-----
The engine does not validate the ordering of the date range. An inverted
range selects no record and yields empty reports.
"""

import logging
import math
from collections.abc import Iterable
from datetime import date, timedelta
from typing import Optional

from .periods import _today, iter_days
from .records import Expense, ReportDateRange, Transaction, coerce_amount, coerce_text
from .reports import (
    BusinessSummaryReport,
    CustomerAnalyticsReport,
    DailyOperationsReport,
    DailyStats,
    ExpenseAnomaliesReport,
    ExpenseAnomaly,
    ExpenseBreakdownReport,
    ExpenseCategory,
    ExpenseRow,
    ExpenseTypeTotal,
    FinancialSummaryReport,
    HighValueTransactionsReport,
    InactiveCustomersReport,
    LowPerformanceService,
    LowPerformanceServicesReport,
    MonthlyRevenue,
    Report,
    RevenueOutlier,
    RevenueOutliersReport,
    ServicePerformanceReport,
    ServiceStats,
    StaleVisit,
    TransactionHistoryReport,
    TransactionRow,
)

logger = logging.getLogger(__name__)

DEFAULT_HIGH_VALUE_THRESHOLD = 100.0
DEFAULT_INACTIVE_DAYS = 30
DEFAULT_LOW_PERFORMANCE_THRESHOLD = 50.0
DEFAULT_INACTIVE_LIMIT = 5

# Share of customers assumed to be returning ones. There is no customer
# identity in the data model, so this is a fixed estimate.
RETURNING_CUSTOMER_SHARE = 0.7

INACTIVE_CUSTOMERS_DISCLAIMER = (
    "Approximation: transactions carry no customer identity, so each row is "
    "a single past visit older than the inactivity cutoff, not a customer."
)


def _ratio(numerator: float, denominator: float) -> float:
    """Return numerator / denominator, or 0.0 when the denominator is 0."""
    if denominator == 0:
        return 0.0
    return numerator / denominator


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def filter_by_date_range(records: Iterable, date_range: ReportDateRange) -> list:
    """Keep the records whose ``date`` falls within the inclusive range."""
    return [r for r in records if date_range.contains(r.date)]


class AnalyticsEngine:
    """Report generator over a point-in-time snapshot of records."""

    def __init__(
        self,
        transactions: Iterable[Transaction],
        expenses: Iterable[Expense],
    ) -> None:
        self._transactions: tuple[Transaction, ...] = tuple(transactions)
        self._expenses: tuple[Expense, ...] = tuple(expenses)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._transactions

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self._expenses

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def filter_transactions(self, date_range: ReportDateRange) -> list[Transaction]:
        selected = filter_by_date_range(self._transactions, date_range)
        logger.debug(
            "Selected %d/%d transactions for %s",
            len(selected),
            len(self._transactions),
            date_range.label,
        )
        return selected

    def filter_expenses(self, date_range: ReportDateRange) -> list[Expense]:
        selected = filter_by_date_range(self._expenses, date_range)
        logger.debug(
            "Selected %d/%d expenses for %s",
            len(selected),
            len(self._expenses),
            date_range.label,
        )
        return selected

    # ------------------------------------------------------------------
    # Summary reports
    # ------------------------------------------------------------------

    def business_summary(self, date_range: ReportDateRange) -> BusinessSummaryReport:
        """Revenue, expenses, profit, visit count, average ticket and margin."""
        transactions = self.filter_transactions(date_range)
        expenses = self.filter_expenses(date_range)

        total_revenue = sum((coerce_amount(t.price) for t in transactions), 0.0)
        total_expenses = sum((coerce_amount(e.amount) for e in expenses), 0.0)
        net_profit = total_revenue - total_expenses
        # Each transaction is one customer visit.
        total_customers = len(transactions)

        return BusinessSummaryReport(
            period=date_range.label,
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            net_profit=net_profit,
            total_customers=total_customers,
            average_transaction_value=_ratio(total_revenue, total_customers),
            profit_margin=_ratio(net_profit, total_revenue) * 100,
        )

    def service_performance(
        self, date_range: ReportDateRange
    ) -> ServicePerformanceReport:
        """
        Per-service visit count and revenue, ranked by revenue.

        Services are sorted by total revenue (descending). Ties keep the order
        in which services first appear in the input. ``top_service`` and
        ``least_popular_service`` are the first and last entries, or "None"
        when there is no transaction in the range.
        """
        transactions = self.filter_transactions(date_range)

        # Buckets keep first-appearance order (dict insertion order).
        counts: dict[str, int] = {}
        revenues: dict[str, float] = {}
        for t in transactions:
            style = coerce_text(t.style, "Unknown")
            counts[style] = counts.get(style, 0) + 1
            revenues[style] = revenues.get(style, 0.0) + coerce_amount(t.price)

        grand_total = sum((coerce_amount(t.price) for t in transactions), 0.0)

        services = sorted(
            (
                ServiceStats(
                    name=name,
                    count=counts[name],
                    total_revenue=revenues[name],
                    average_price=_ratio(revenues[name], counts[name]),
                    percentage=_ratio(revenues[name], grand_total) * 100,
                )
                for name in counts
            ),
            key=lambda s: s.total_revenue,
            reverse=True,
        )

        return ServicePerformanceReport(
            period=date_range.label,
            services=tuple(services),
            top_service=services[0].name if services else "None",
            least_popular_service=services[-1].name if services else "None",
        )

    def financial_summary(self, date_range: ReportDateRange) -> FinancialSummaryReport:
        """Monthly revenue / expenses / profit and the expense split by type."""
        transactions = self.filter_transactions(date_range)
        expenses = self.filter_expenses(date_range)

        # 1) Monthly buckets, keyed by the 'YYYY-MM' prefix of the ISO date.
        monthly: dict[str, list[float]] = {}
        for t in transactions:
            bucket = monthly.setdefault(t.date[:7], [0.0, 0.0])
            bucket[0] += coerce_amount(t.price)
        for e in expenses:
            bucket = monthly.setdefault(e.date[:7], [0.0, 0.0])
            bucket[1] += coerce_amount(e.amount)

        revenue_by_month = tuple(
            MonthlyRevenue(
                month=month,
                revenue=revenue,
                expenses=spent,
                profit=revenue - spent,
            )
            for month, (revenue, spent) in sorted(monthly.items())
        )

        # 2) Expense categories (first-appearance order).
        by_type = _sum_expenses_by_type(expenses)
        total_spent = sum(by_type.values(), 0.0)
        expense_categories = tuple(
            ExpenseCategory(
                category=category,
                amount=amount,
                percentage=_ratio(amount, total_spent) * 100,
            )
            for category, amount in by_type.items()
        )

        return FinancialSummaryReport(
            period=date_range.label,
            revenue_by_month=revenue_by_month,
            expense_categories=expense_categories,
        )

    def customer_analytics(
        self, date_range: ReportDateRange
    ) -> CustomerAnalyticsReport:
        """
        Visit-based customer figures.

        Without customer identities, every transaction counts as one customer
        and the returning share is the fixed ``RETURNING_CUSTOMER_SHARE``
        estimate.
        """
        transactions = self.filter_transactions(date_range)

        total_customers = len(transactions)
        total_revenue = sum((coerce_amount(t.price) for t in transactions), 0.0)
        returning = math.floor(total_customers * RETURNING_CUSTOMER_SHARE)

        return CustomerAnalyticsReport(
            period=date_range.label,
            total_customers=total_customers,
            new_customers=total_customers - returning,
            returning_customers=returning,
            average_customer_value=_ratio(total_revenue, total_customers),
            customer_retention_rate=_ratio(returning, total_customers) * 100,
        )

    # ------------------------------------------------------------------
    # Detailed reports
    # ------------------------------------------------------------------

    def transaction_history(
        self, date_range: ReportDateRange
    ) -> TransactionHistoryReport:
        """All transactions of the range, most recent first."""
        rows = sorted(
            (_transaction_row(t) for t in self.filter_transactions(date_range)),
            key=lambda r: r.date,
            reverse=True,
        )
        return TransactionHistoryReport(
            period=date_range.label,
            transactions=tuple(rows),
            total_count=len(rows),
            total_amount=sum((r.amount for r in rows), 0.0),
        )

    def expense_breakdown(self, date_range: ReportDateRange) -> ExpenseBreakdownReport:
        """All expenses of the range, most recent first, with totals per type."""
        expenses = self.filter_expenses(date_range)
        rows = sorted(
            (
                ExpenseRow(
                    id=coerce_text(e.id),
                    date=coerce_text(e.date),
                    type=coerce_text(e.type, "Unknown"),
                    description=coerce_text(e.description),
                    amount=coerce_amount(e.amount),
                )
                for e in expenses
            ),
            key=lambda r: r.date,
            reverse=True,
        )
        return ExpenseBreakdownReport(
            period=date_range.label,
            expenses=tuple(rows),
            total_count=len(rows),
            total_amount=sum((r.amount for r in rows), 0.0),
            by_category=tuple(
                ExpenseTypeTotal(type=t, amount=amount)
                for t, amount in _sum_expenses_by_type(expenses).items()
            ),
        )

    def daily_operations(self, date_range: ReportDateRange) -> DailyOperationsReport:
        """
        One row per calendar day of the range, including days without activity.

        Raises:
            ValueError: if a bound of the range is not a valid ISO date.
        """
        transactions = self.filter_transactions(date_range)
        expenses = self.filter_expenses(date_range)

        # 1) Initialize a zero bucket for every day so that quiet days appear.
        #    [transactions, revenue, expenses]
        buckets: dict[str, list[float]] = {
            day: [0, 0.0, 0.0]
            for day in iter_days(date_range.start_date, date_range.end_date)
        }

        # 2) Accumulate. Records whose date is not a known day are skipped.
        for t in transactions:
            bucket = buckets.get(t.date)
            if bucket is not None:
                bucket[0] += 1
                bucket[1] += coerce_amount(t.price)
        for e in expenses:
            bucket = buckets.get(e.date)
            if bucket is not None:
                bucket[2] += coerce_amount(e.amount)

        daily_data = tuple(
            DailyStats(
                date=day,
                transactions=int(count),
                revenue=revenue,
                expenses=spent,
                profit=revenue - spent,
                customers=int(count),
            )
            for day, (count, revenue, spent) in sorted(buckets.items())
        )
        return DailyOperationsReport(period=date_range.label, daily_data=daily_data)

    # ------------------------------------------------------------------
    # Exception reports
    # ------------------------------------------------------------------

    def high_value_transactions(
        self,
        date_range: ReportDateRange,
        threshold: float = DEFAULT_HIGH_VALUE_THRESHOLD,
    ) -> HighValueTransactionsReport:
        """Transactions priced at or above ``threshold``, most expensive first."""
        rows = sorted(
            (
                _transaction_row(t)
                for t in self.filter_transactions(date_range)
                if coerce_amount(t.price) >= threshold
            ),
            key=lambda r: r.amount,
            reverse=True,
        )
        return HighValueTransactionsReport(
            period=date_range.label,
            threshold=threshold,
            transactions=tuple(rows),
            count=len(rows),
            total_value=sum((r.amount for r in rows), 0.0),
        )

    def expense_anomalies(self, date_range: ReportDateRange) -> ExpenseAnomaliesReport:
        """
        Expenses above twice the average expense of the range.

        Severity: above 5x the average is "high", above 3x is "medium",
        otherwise "low". Nothing is flagged when the average is 0.
        """
        expenses = self.filter_expenses(date_range)
        amounts = [coerce_amount(e.amount) for e in expenses]
        average = _ratio(sum(amounts, 0.0), len(amounts))

        anomalies: list[ExpenseAnomaly] = []
        if average > 0:
            for e, amount in zip(expenses, amounts):
                if amount <= average * 2:
                    continue
                if amount > average * 5:
                    severity = "high"
                elif amount > average * 3:
                    severity = "medium"
                else:
                    severity = "low"
                share = _round_half_up(amount / average * 100)
                anomalies.append(
                    ExpenseAnomaly(
                        id=coerce_text(e.id),
                        date=coerce_text(e.date),
                        description=coerce_text(e.description),
                        amount=amount,
                        reason=f"Amount is {share}% of average expense",
                        severity=severity,
                    )
                )

        anomalies.sort(key=lambda a: a.amount, reverse=True)
        return ExpenseAnomaliesReport(
            period=date_range.label,
            anomalies=tuple(anomalies),
            total_anomalies=len(anomalies),
        )

    def inactive_customers(
        self,
        date_range: ReportDateRange,
        inactive_days: int = DEFAULT_INACTIVE_DAYS,
        *,
        as_of: Optional[date] = None,
        limit: int = DEFAULT_INACTIVE_LIMIT,
    ) -> InactiveCustomersReport:
        """
        Past visits of the range that are older than the inactivity cutoff.

        The cutoff is ``as_of - inactive_days``; visits strictly before it are
        listed, most recent first, up to ``limit`` rows. Each row describes a
        single visit (``total_visits`` is 1 and ``total_spent`` its price):
        see ``INACTIVE_CUSTOMERS_DISCLAIMER``.
        """
        if as_of is None:
            as_of = _today()
        cutoff = as_of - timedelta(days=inactive_days)

        stale: list[tuple[Transaction, date]] = []
        for t in self.filter_transactions(date_range):
            try:
                visit_day = date.fromisoformat(t.date)
            except ValueError:
                continue
            if visit_day < cutoff:
                stale.append((t, visit_day))

        stale.sort(key=lambda item: item[1], reverse=True)
        customers = tuple(
            StaleVisit(
                last_visit=t.date,
                days_since_last_visit=(as_of - visit_day).days,
                total_visits=1,
                last_service=coerce_text(t.style, "Unknown"),
                total_spent=coerce_amount(t.price),
            )
            for t, visit_day in stale[: max(limit, 0)]
        )

        return InactiveCustomersReport(
            period=date_range.label,
            inactive_days=inactive_days,
            as_of=as_of.isoformat(),
            customers=customers,
            count=len(customers),
            disclaimer=INACTIVE_CUSTOMERS_DISCLAIMER,
        )

    def low_performance_services(
        self,
        date_range: ReportDateRange,
        threshold: float = DEFAULT_LOW_PERFORMANCE_THRESHOLD,
    ) -> LowPerformanceServicesReport:
        """Services whose revenue is below ``threshold``, weakest first."""
        performance = self.service_performance(date_range)
        services = sorted(
            (
                LowPerformanceService(
                    name=s.name,
                    count=s.count,
                    total_revenue=s.total_revenue,
                    average_price=s.average_price,
                    performance_score=_ratio(s.total_revenue, threshold) * 100,
                )
                for s in performance.services
                if s.total_revenue < threshold
            ),
            key=lambda s: s.performance_score,
        )
        return LowPerformanceServicesReport(
            period=date_range.label,
            threshold=threshold,
            services=tuple(services),
        )

    def revenue_outliers(self, date_range: ReportDateRange) -> RevenueOutliersReport:
        """
        Days whose revenue deviates by more than 50% from the daily average.

        The average only considers days with revenue. Deviation is expressed
        as a percentage of that average; outliers are sorted by absolute
        deviation, largest first.
        """
        daily = self.daily_operations(date_range).daily_data

        revenues = [d.revenue for d in daily if d.revenue > 0]
        average = _ratio(sum(revenues, 0.0), len(revenues))
        tolerance = average * 0.5

        outliers: list[RevenueOutlier] = []
        if average > 0:
            for d in daily:
                if abs(d.revenue - average) <= tolerance:
                    continue
                outliers.append(
                    RevenueOutlier(
                        date=d.date,
                        revenue=d.revenue,
                        deviation=_ratio(d.revenue - average, average) * 100,
                        type="high" if d.revenue > average else "low",
                        transactions=d.transactions,
                    )
                )

        outliers.sort(key=lambda o: abs(o.deviation), reverse=True)
        return RevenueOutliersReport(
            period=date_range.label,
            average_daily_revenue=average,
            outliers=tuple(outliers),
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def generate(
        self,
        kind: str,
        date_range: ReportDateRange,
        *,
        threshold: Optional[float] = None,
        inactive_days: Optional[int] = None,
        as_of: Optional[date] = None,
    ) -> Report:
        """
        Build the report identified by ``kind``.

        ``threshold`` applies to high-value transactions and low-performance
        services, ``inactive_days`` and ``as_of`` to inactive customers. When
        omitted, each generator uses its own default.

        Raises:
            ValueError: if ``kind`` is not a known report kind.
        """
        if kind == "business-summary":
            return self.business_summary(date_range)
        if kind == "service-performance":
            return self.service_performance(date_range)
        if kind == "financial-summary":
            return self.financial_summary(date_range)
        if kind == "customer-analytics":
            return self.customer_analytics(date_range)
        if kind == "transaction-history":
            return self.transaction_history(date_range)
        if kind == "expense-breakdown":
            return self.expense_breakdown(date_range)
        if kind == "daily-operations":
            return self.daily_operations(date_range)
        if kind == "high-value-transactions":
            return self.high_value_transactions(
                date_range,
                DEFAULT_HIGH_VALUE_THRESHOLD if threshold is None else threshold,
            )
        if kind == "expense-anomalies":
            return self.expense_anomalies(date_range)
        if kind == "inactive-customers":
            return self.inactive_customers(
                date_range,
                DEFAULT_INACTIVE_DAYS if inactive_days is None else inactive_days,
                as_of=as_of,
            )
        if kind == "low-performance-services":
            return self.low_performance_services(
                date_range,
                DEFAULT_LOW_PERFORMANCE_THRESHOLD if threshold is None else threshold,
            )
        if kind == "revenue-outliers":
            return self.revenue_outliers(date_range)
        raise ValueError(f"Report type {kind!r} not implemented")


def _transaction_row(t: Transaction) -> TransactionRow:
    return TransactionRow(
        id=coerce_text(t.id),
        date=coerce_text(t.date),
        service=coerce_text(t.style, "Unknown"),
        amount=coerce_amount(t.price),
        notes=coerce_text(t.notes),
    )


def _sum_expenses_by_type(expenses: Iterable[Expense]) -> dict[str, float]:
    totals: dict[str, float] = {}
    for e in expenses:
        key = coerce_text(e.type, "Unknown")
        totals[key] = totals.get(key, 0.0) + coerce_amount(e.amount)
    return totals
