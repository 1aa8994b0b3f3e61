import pytest

from shop_finsight import __version__
from shop_finsight.cli import main


@pytest.fixture
def config_path(tmp_path):
    """Write a minimal config whose database lives in tmp_path."""
    path = tmp_path / "shop_finsight_config.toml"
    path.write_text(
        """
[business]
name = "Test Shop"

[database]
path = "shop.sqlite"

[display]
output_dir = "exports"
""",
        encoding="utf-8",
    )
    return str(path)


def run(config_path, *args):
    main(["--config", config_path, *args])


def add_fade(config_path, day):
    run(
        config_path,
        "transactions",
        "add",
        "--date",
        day,
        "--style",
        "Fade",
        "--price",
        "30",
    )


def test_version(capsys):
    main(["--version"])

    assert __version__ in capsys.readouterr().out


def test_reports_lists_catalog(config_path, capsys):
    run(config_path, "reports", "--category", "exception")

    out = capsys.readouterr().out
    assert "expense-anomalies" in out
    assert "business-summary" not in out


def test_transactions_add_list_and_report(config_path, capsys):
    add_fade(config_path, "2024-01-05")
    add_fade(config_path, "2024-01-10")
    run(
        config_path,
        "expenses",
        "add",
        "--date",
        "2024-01-07",
        "--type",
        "Fixed",
        "--description",
        "Rent",
        "--amount",
        "20",
    )
    capsys.readouterr()

    run(config_path, "transactions", "list")
    listing = capsys.readouterr().out
    assert "Total transactions: 2 | Total amount: 60.00" in listing

    run(
        config_path,
        "report",
        "business-summary",
        "--from-date",
        "2024-01-01",
        "--to-date",
        "2024-01-31",
    )
    out = capsys.readouterr().out
    assert "Business Summary" in out
    assert "Net Profit" in out
    assert "40.0" in out


def test_report_export_both_formats(config_path, tmp_path, capsys):
    add_fade(config_path, "2024-01-05")

    run(
        config_path,
        "report",
        "transaction-history",
        "--from-date",
        "2024-01-01",
        "--to-date",
        "2024-01-31",
        "--format",
        "json",
        "--output",
        str(tmp_path / "out"),
    )

    exported = list((tmp_path / "out").glob("Complete_Transaction_History_*.json"))
    assert len(exported) == 1
    assert "Report exported to:" in capsys.readouterr().out


def test_import_command(config_path, tmp_path, capsys):
    csv_path = tmp_path / "expenses.csv"
    csv_path.write_text("date,type,description,amount\n2024-01-01,fixed,Rent,750\n")

    run(config_path, "import", "expenses", str(csv_path))

    assert "Imported 1 expenses, 0 duplicates skipped." in capsys.readouterr().out


def test_dashboard_runs_on_empty_database(config_path, capsys):
    run(config_path, "dashboard", "--month", "2024-01", "--months", "3")

    out = capsys.readouterr().out
    assert "Test Shop - dashboard for 2024-01" in out
    assert "Top service      : None" in out


def test_settings_currency(config_path, capsys):
    run(config_path, "settings", "currency")
    assert "USD" in capsys.readouterr().out

    run(config_path, "settings", "currency", "gbp")
    assert "Currency changed from USD to GBP" in capsys.readouterr().out


@pytest.mark.parametrize(
    "args, message",
    [
        (["transactions", "delete", "txn_missing"], "not found"),
        (
            "transactions add --date 2024-13-01 --style Fade --price 1".split(),
            "Invalid date",
        ),
        (
            (
                "report business-summary"
                " --from-date 2024-02-01 --to-date 2024-01-01"
            ).split(),
            "cannot be before",
        ),
        (["import", "transactions", "missing.csv"], "CSV file not found"),
        (["dashboard", "--month", "January"], "Invalid month"),
    ],
)
def test_input_errors_exit_with_message(config_path, args, message):
    with pytest.raises(SystemExit) as excinfo:
        run(config_path, *args)

    assert message in str(excinfo.value.code)


def test_missing_config_file_exits(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(tmp_path / "missing.toml"), "reports"])

    assert "Config file not found" in str(excinfo.value.code)


def test_report_without_period_uses_catalog_default_range(config_path, capsys):
    run(config_path, "report", "financial-summary")

    assert "Applied period: Last year" in capsys.readouterr().out


def test_report_default_range_from_config_wins(tmp_path, capsys):
    path = tmp_path / "shop_finsight_config.toml"
    path.write_text(
        '[database]\npath = "shop.sqlite"\n\n[reports]\ndefault_range = "thisMonth"\n',
        encoding="utf-8",
    )

    main(["--config", str(path), "report", "daily-operations"])

    assert "Applied period: This month" in capsys.readouterr().out
