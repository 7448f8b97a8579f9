"""Tests for date parsing, including dates written in message bodies."""

import pytest
from datetime import date, datetime, timedelta, timezone

from smsledger.utils.date_parser import (
    combine_with_arrival_time,
    date_to_millis,
    find_message_date,
    from_millis,
    parse_date,
    to_millis,
)

ARRIVAL = to_millis(datetime(2026, 1, 3, 10, 30, tzinfo=timezone.utc))


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    assert parse_date("today") == date.today()


def test_parse_yesterday():
    """Test parsing 'yesterday'."""
    assert parse_date("yesterday") == date.today() - timedelta(days=1)


def test_parse_last_month():
    """Test parsing 'last month'."""
    result = parse_date("last month")
    # Should be first day of last month
    today = date.today()
    if today.month == 1:
        expected = date(today.year - 1, 12, 1)
    else:
        expected = date(today.year, today.month - 1, 1)
    assert result == expected


def test_parse_last_week():
    """Test parsing 'last week'."""
    result = parse_date("last week")
    today = date.today()
    assert result == today - timedelta(days=today.weekday() + 7)
    assert result.weekday() == 0


def test_parse_this_month():
    """Test parsing 'this month'."""
    today = date.today()
    assert parse_date("this month") == date(today.year, today.month, 1)


def test_parse_invalid_relative():
    """Test parsing invalid relative date."""
    with pytest.raises(ValueError):
        parse_date("last invalid")


def test_parse_day_first_formats():
    """Test that slash dates are read day-first, as Indian banks write them."""
    assert parse_date("January 15, 2024") == date(2024, 1, 15)
    assert parse_date("15/01/2024") == date(2024, 1, 15)
    assert parse_date("03/01/2026") == date(2026, 1, 3)


@pytest.mark.parametrize(
    "body",
    [
        "Rs.500 debited on 03-01-26 at Amazon",
        "Rs.500 debited on 03/01/2026 at Amazon",
        "INR 500 spent on 03-Jan-26 on AMAZON",
        "INR 500 spent on 03Jan26 at AMAZON",
        "Rs 500 paid on 2026-01-03",
    ],
)
def test_find_message_date_formats(body):
    """Test each date format banks put in alerts."""
    assert find_message_date(body, ARRIVAL) == date(2026, 1, 3)


def test_find_message_date_none_when_absent():
    """Test a body without a date."""
    assert find_message_date("Rs.500 debited from A/c XX1234", ARRIVAL) is None


def test_find_message_date_ignores_implausible_dates():
    """Test that dates far from the arrival time are treated as noise."""
    assert find_message_date("Rs.500 debited on 03-01-20", ARRIVAL) is None
    assert find_message_date("Rs.500 debited on 10-01-26", ARRIVAL) is None


def test_combine_with_arrival_time_keeps_time_of_day():
    """Test that the explicit day is combined with the arrival time."""
    result = from_millis(combine_with_arrival_time(date(2026, 1, 2), ARRIVAL))
    assert result == datetime(2026, 1, 2, 10, 30, tzinfo=timezone.utc)


def test_date_to_millis_day_bounds():
    """Test start and end of a UTC day."""
    start = date_to_millis(date(2026, 1, 3))
    end = date_to_millis(date(2026, 1, 3), end_of_day=True)
    assert from_millis(start) == datetime(2026, 1, 3, tzinfo=timezone.utc)
    assert end - start == 24 * 60 * 60 * 1000 - 1


def test_message_date_read_on_local_calendar():
    """Test an alert sent just after local midnight, still the previous day in UTC."""
    # 2026-01-04 00:30 IST
    arrival = to_millis(datetime(2026, 1, 3, 19, 0, tzinfo=timezone.utc))

    day = find_message_date("Rs.500 debited on 04-01-26", arrival)

    assert day == date(2026, 1, 4)
    assert combine_with_arrival_time(day, arrival) == arrival


def test_combine_with_arrival_time_other_zone():
    """Test combining in an explicit time zone."""
    arrival = to_millis(datetime(2026, 1, 3, 23, 0, tzinfo=timezone.utc))
    result = combine_with_arrival_time(date(2026, 1, 1), arrival, tzinfo=timezone.utc)
    assert from_millis(result) == datetime(2026, 1, 1, 23, 0, tzinfo=timezone.utc)
