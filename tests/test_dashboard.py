from datetime import date

import pytest

from shop_finsight.dashboard import (
    kpi_data,
    monthly_analytics,
    monthly_trend,
    service_distribution,
)
from shop_finsight.records import Expense, Transaction


def txn(day: str, style: str, price: float) -> Transaction:
    return Transaction(id=f"txn_{day}_{style}", date=day, style=style, price=price)


def exp(day: str, amount: float) -> Expense:
    return Expense(
        id=f"exp_{day}", date=day, type="Fixed", description="Rent", amount=amount
    )


TRANSACTIONS = [
    # February 2025: 2 visits, revenue 50
    txn("2025-02-03", "Fade", 30),
    txn("2025-02-20", "Beard Trim", 20),
    # March 2025: 3 visits, revenue 85
    txn("2025-03-01", "Shave", 25),
    txn("2025-03-10", "Fade", 30),
    txn("2025-03-31", "Fade", 30),
]
EXPENSES = [exp("2025-02-01", 30), exp("2025-03-05", 45)]


def test_monthly_analytics_with_growth_vs_previous_month():
    analytics = monthly_analytics(TRANSACTIONS, EXPENSES, date(2025, 3, 15))

    assert analytics.month == "2025-03"
    assert analytics.total_income == 85
    assert analytics.total_expenses == 45
    assert analytics.net_profit == 40
    assert analytics.total_customers == 3
    assert analytics.customer_growth == pytest.approx(50.0)
    # Previous profit 20 -> 40
    assert analytics.profit_growth == pytest.approx(100.0)
    assert analytics.top_service == "Fade"
    assert len(analytics.transactions) == 3


def test_growth_is_zero_without_previous_activity():
    analytics = monthly_analytics(TRANSACTIONS, EXPENSES, date(2025, 2, 10))

    assert analytics.customer_growth == 0
    assert analytics.profit_growth == 0


def test_profit_growth_is_zero_when_previous_profit_not_positive():
    analytics = monthly_analytics(
        [txn("2025-03-02", "Fade", 30)],
        [exp("2025-02-01", 100)],
        date(2025, 3, 1),
    )

    assert analytics.profit_growth == 0


def test_kpi_data_for_empty_month():
    kpi = kpi_data([], [], date(2025, 1, 1))

    assert kpi.total_income == 0
    assert kpi.total_customers == 0
    assert kpi.top_service == "None"


def test_top_service_ties_keep_first_seen():
    analytics = monthly_analytics(
        [txn("2025-03-01", "Shave", 25), txn("2025-03-02", "Fade", 30)],
        [],
        date(2025, 3, 1),
    )

    assert analytics.top_service == "Shave"


def test_monthly_trend_oldest_first():
    df = monthly_trend(TRANSACTIONS, EXPENSES, months=3, today=date(2025, 3, 15))

    assert list(df.columns) == [
        "month",
        "label",
        "income",
        "expenses",
        "profit",
        "customers",
    ]
    assert list(df["month"]) == ["2025-01", "2025-02", "2025-03"]
    assert list(df["label"]) == ["Jan 2025", "Feb 2025", "Mar 2025"]
    assert list(df["income"]) == [0, 50, 85]
    assert list(df["customers"]) == [0, 2, 3]


def test_service_distribution_percentages():
    df = service_distribution(TRANSACTIONS, EXPENSES, date(2025, 3, 15))

    assert list(df["name"]) == ["Fade", "Shave"]
    assert list(df["value"]) == [2, 1]
    assert list(df["percentage"]) == [66.7, 33.3]


def test_service_distribution_empty_month():
    df = service_distribution(TRANSACTIONS, EXPENSES, date(2024, 1, 1))

    assert df.empty
    assert list(df.columns) == ["name", "value", "percentage"]
