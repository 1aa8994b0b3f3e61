import json
from dataclasses import replace
from datetime import date

import pytest

from shop_finsight.engine import AnalyticsEngine
from shop_finsight.records import Expense, ReportDateRange, Transaction
from shop_finsight.reports import REPORT_CATALOG
from shop_finsight.views import (
    export_filename,
    export_report,
    report_tables,
    report_to_dataframe,
)

JANUARY = ReportDateRange("2024-01-01", "2024-01-31")


def sample_engine() -> AnalyticsEngine:
    return AnalyticsEngine(
        [
            Transaction("txn_1", "2024-01-05", "Fade", 30.0),
            Transaction("txn_2", "2024-01-10", "Fade", 30.0, "Regular customer"),
            Transaction("txn_3", "2024-01-11", "Shave", 25.0),
        ],
        [
            Expense("exp_1", "2024-01-07", "Fixed", "Rent", 20.0),
            Expense("exp_2", "2024-01-08", "Short-term", "Supplies", 10.0),
        ],
    )


@pytest.mark.parametrize("kind", list(REPORT_CATALOG))
def test_every_report_renders_as_a_table(kind):
    report = sample_engine().generate(kind, JANUARY, as_of=date(2024, 3, 1))

    tables = report_tables(report)

    assert tables
    assert report_to_dataframe(report).equals(next(iter(tables.values())))


def test_business_summary_metric_value_layout():
    report = sample_engine().business_summary(JANUARY)

    df = report_to_dataframe(report, decimals=2)

    assert list(df.columns) == ["Metric", "Value"]
    values = dict(zip(df["Metric"], df["Value"]))
    assert values["Total Revenue"] == 85.0
    assert values["Total Customers"] == 3
    assert values["Profit Margin (%)"] == 64.71


def test_service_performance_columns():
    df = report_to_dataframe(sample_engine().service_performance(JANUARY))

    assert list(df.columns) == [
        "Service",
        "Count",
        "Total Revenue",
        "Avg Price",
        "Percentage",
    ]
    assert list(df["Service"]) == ["Fade", "Shave"]


def test_financial_summary_has_two_tables():
    tables = report_tables(sample_engine().financial_summary(JANUARY))

    assert list(tables) == ["Revenue by month", "Expense categories"]
    assert list(tables["Expense categories"]["Category"]) == ["Fixed", "Short-term"]


def test_transaction_history_columns():
    df = report_to_dataframe(sample_engine().transaction_history(JANUARY))

    assert list(df.columns) == ["Date", "Service", "Amount", "Notes"]
    assert list(df["Date"]) == ["2024-01-11", "2024-01-10", "2024-01-05"]


def test_unknown_report_type_raises():
    with pytest.raises(TypeError):
        report_tables(object())


def test_export_filename():
    name = export_filename("high-value-transactions", "csv", date(2025, 1, 2))

    assert name == "High-Value_Transactions_2025-01-02.csv"


def test_export_report_csv(tmp_path):
    report = sample_engine().expense_breakdown(JANUARY)

    path = export_report(
        report, "expense-breakdown", tmp_path / "out", "csv", date(2025, 1, 2)
    )

    assert path == tmp_path / "out" / "Detailed_Expense_Breakdown_2025-01-02.csv"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Date,Type,Description,Amount"
    assert len(lines) == 3


def test_export_report_json(tmp_path):
    report = sample_engine().business_summary(JANUARY)

    path = export_report(report, "business-summary", tmp_path, "json", date(2025, 1, 2))

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["type"] == "business-summary"
    assert payload["title"] == "Business Summary"
    assert payload["generated_at"] == "2025-01-02"
    assert payload["data"]["total_revenue"] == 85.0
    assert payload["data"]["period"] == "2024-01-01 to 2024-01-31"


def test_export_report_rejects_unknown_format(tmp_path):
    report = sample_engine().business_summary(JANUARY)

    with pytest.raises(ValueError, match="Unsupported export format"):
        export_report(report, "business-summary", tmp_path, "pdf")


def test_metric_tables_keep_counts_as_integers(tmp_path):
    report = sample_engine().business_summary(JANUARY)

    df = report_to_dataframe(report, decimals=2)
    values = dict(zip(df["Metric"], df["Value"]))
    path = export_report(report, "business-summary", tmp_path, "csv", date(2025, 1, 2))

    assert isinstance(values["Total Customers"], int)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert "Total Customers,3" in lines
    assert "Total Revenue,85.0" in lines


def test_export_formats_come_from_the_catalog(tmp_path, monkeypatch):
    csv_only = replace(REPORT_CATALOG["business-summary"], export_formats=("csv",))
    monkeypatch.setitem(REPORT_CATALOG, "business-summary", csv_only)
    report = sample_engine().business_summary(JANUARY)

    with pytest.raises(ValueError, match="Expected one of: csv"):
        export_report(report, "business-summary", tmp_path, "json")
    assert export_report(report, "business-summary", tmp_path, "csv").exists()


def test_export_rejects_report_of_another_kind(tmp_path):
    report = sample_engine().business_summary(JANUARY)

    with pytest.raises(TypeError, match="BusinessSummaryReport"):
        export_report(report, "expense-breakdown", tmp_path, "csv")
    assert not any(tmp_path.iterdir())
