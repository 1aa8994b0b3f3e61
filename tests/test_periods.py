from datetime import date
from types import SimpleNamespace

import pytest

import shop_finsight.periods as periods

TODAY = date(2025, 3, 15)


def make_args(period=None, from_date=None, to_date=None) -> SimpleNamespace:
    return SimpleNamespace(period=period, from_date=from_date, to_date=to_date)


@pytest.mark.parametrize(
    "name, start",
    [
        ("last7days", date(2025, 3, 8)),
        ("last30days", date(2025, 2, 13)),
        ("last90days", date(2024, 12, 15)),
        ("lastYear", date(2024, 3, 15)),
    ],
)
def test_rolling_named_ranges_end_today(name, start):
    p = periods.period_from_name(name, TODAY)

    assert p.start == start
    assert p.end == TODAY


def test_this_month_covers_whole_month():
    p = periods.period_from_name("thisMonth", TODAY)

    assert p.start == date(2025, 3, 1)
    assert p.end == date(2025, 3, 31)
    assert p.label == "This month"


def test_unknown_name_falls_back_to_last30days():
    p = periods.period_from_name("sometime", TODAY)

    assert p.start == date(2025, 2, 13)
    assert p.label == "Last 30 days"


def test_period_to_date_range_uses_iso_strings():
    date_range = periods.month_period(2024, 2).to_date_range()

    assert date_range.start_date == "2024-02-01"
    assert date_range.end_date == "2024-02-29"
    assert date_range.label == "2024-02-01 to 2024-02-29"


@pytest.mark.parametrize(
    "day, months, expected",
    [
        (date(2025, 3, 15), -1, date(2025, 2, 1)),
        (date(2025, 1, 31), -1, date(2024, 12, 1)),
        (date(2024, 11, 2), 3, date(2025, 2, 1)),
        (date(2025, 3, 15), 0, date(2025, 3, 1)),
    ],
)
def test_shift_month(day, months, expected):
    assert periods.shift_month(day, months) == expected


def test_determine_period_priority_named_range_wins():
    args = make_args(period="last7days", from_date="2025-01-01", to_date="2025-01-31")

    p = periods.determine_period_from_args(args, today=TODAY)

    assert p.start == date(2025, 3, 8)


def test_determine_period_custom_range():
    args = make_args(from_date="2025-01-01", to_date="2025-01-31")

    p = periods.determine_period_from_args(args, today=TODAY)

    assert (p.start, p.end) == (date(2025, 1, 1), date(2025, 1, 31))
    assert p.label.startswith("Custom period")


def test_determine_period_custom_range_missing_end_uses_today():
    args = make_args(from_date="2025-03-01")

    p = periods.determine_period_from_args(args, today=TODAY)

    assert p.end == TODAY


def test_determine_period_defaults_to_configured_range():
    p = periods.determine_period_from_args(make_args(), "last90days", today=TODAY)

    assert p.label == "Last 90 days"


@pytest.mark.parametrize(
    "args",
    [
        make_args(from_date="2025-02-01", to_date="2025-01-01"),
        make_args(from_date="2025/01/01"),
        make_args(period="yesterday"),
    ],
)
def test_determine_period_rejects_invalid_input(args):
    with pytest.raises(ValueError):
        periods.determine_period_from_args(args, today=TODAY)


def test_today_can_be_pinned(monkeypatch):
    monkeypatch.setattr(periods, "_today", lambda: TODAY)

    p = periods.determine_period_from_args(make_args(period="thisMonth"))

    assert p.start == date(2025, 3, 1)


def test_iter_days_inclusive_and_inverted():
    assert periods.iter_days("2024-02-28", "2024-03-01") == [
        "2024-02-28",
        "2024-02-29",
        "2024-03-01",
    ]
    assert periods.iter_days("2024-03-01", "2024-02-28") == []


def test_iter_days_invalid_bound_raises():
    with pytest.raises(ValueError):
        periods.iter_days("2024-13-01", "2024-12-31")
