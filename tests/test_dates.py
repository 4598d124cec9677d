from datetime import date, datetime

import pytest

from utils.dates import date_range, format_long, format_short, period_bounds, school_days


def test_date_range_is_inclusive():
    assert date_range(date(2025, 7, 30), date(2025, 8, 1)) == [date(2025, 7, 30), date(2025, 7, 31), date(2025, 8, 1)]
    assert date_range(date(2025, 7, 2), date(2025, 7, 1)) == []


def test_school_days_skip_weekends():
    days = school_days(date(2025, 7, 18), date(2025, 7, 22))
    assert days == [date(2025, 7, 18), date(2025, 7, 21), date(2025, 7, 22)]


def test_school_days_capped_at_one_month():
    days = school_days(date(2025, 7, 1), date(2025, 8, 31))
    assert days[-1] == date(2025, 8, 1)
    assert len(days) == 24


@pytest.mark.parametrize(
    "period,expected",
    [
        ("today", (date(2025, 7, 23), date(2025, 7, 23))),
        ("week", (date(2025, 7, 21), date(2025, 7, 23))),
        ("month", (date(2025, 7, 1), date(2025, 7, 23))),
    ],
)
def test_period_bounds(period, expected):
    assert period_bounds(period, date(2025, 7, 23)) == expected


def test_period_bounds_rejects_unknown():
    with pytest.raises(ValueError):
        period_bounds("year", date(2025, 7, 23))


def test_formatting():
    assert format_short(date(2025, 7, 1)) == "1/7/2025"
    assert format_long(datetime(2025, 7, 21, 9, 5)) == "Senin, 21 Juli 2025"
