"""Date parsing utilities."""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from dateutil import parser as date_parser, tz
from dateutil.relativedelta import relativedelta

# Date tokens as banks write them: 03-01-26, 03/01/2026, 03-Jan-26, 03Jan26, 2026-01-03
MESSAGE_DATE_PATTERN = re.compile(
    r"\b("
    r"\d{4}-\d{2}-\d{2}"
    r"|\d{1,2}[-/.]\d{1,2}[-/.]\d{2,4}"
    r"|\d{1,2}[- ]?(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*[- ]?\d{2,4}"
    r")\b",
    re.IGNORECASE,
)

MAX_FUTURE_SKEW = timedelta(days=1)
MAX_PAST_SKEW = timedelta(days=366)

# Banks write dates in the alert on the local calendar, not in UTC
MESSAGE_TZ = tz.gettz("Asia/Kolkata")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "15-01-2024", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this year", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            # Monday of last week
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    # ISO dates are unambiguous; everything else is read day-first like the messages
    try:
        dt = date_parser.parse(date_str, dayfirst=not re.match(r"^\d{4}-", date_str))
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def find_message_date(body: str, received_at: int, tzinfo=MESSAGE_TZ) -> Optional[date]:
    """Find the first explicit date written in a message body.

    Dates are read day-first. A date more than a day after the message
    arrived or more than a year before it is treated as noise.

    Args:
        body: Message text
        received_at: Arrival time of the message in epoch milliseconds
        tzinfo: Time zone the bank writes its dates in

    Returns:
        The date, or None when the body names no usable date
    """
    arrival = from_millis(received_at).astimezone(tzinfo).date()
    for match in MESSAGE_DATE_PATTERN.finditer(body):
        token = match.group(1)
        try:
            parsed = date_parser.parse(token, dayfirst=not re.match(r"^\d{4}-", token)).date()
        except (ValueError, OverflowError):
            continue
        if parsed - arrival > MAX_FUTURE_SKEW or arrival - parsed > MAX_PAST_SKEW:
            continue
        return parsed
    return None


def combine_with_arrival_time(day: date, received_at: int, tzinfo=MESSAGE_TZ) -> int:
    """Return epoch millis for the local ``day`` at the arrival's local time of day.

    When ``day`` is the local arrival date the arrival time comes back
    unchanged.
    """
    arrival = from_millis(received_at).astimezone(tzinfo)
    combined = arrival.replace(year=day.year, month=day.month, day=day.day)
    return to_millis(combined)


def from_millis(millis: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def to_millis(dt: datetime) -> int:
    """Convert a datetime (naive values are taken as UTC) to epoch milliseconds."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def date_to_millis(day: date, end_of_day: bool = False) -> int:
    """Epoch millis for the start (or last millisecond) of a UTC calendar day."""
    moment = datetime.combine(day, time.max if end_of_day else time.min, tzinfo=timezone.utc)
    return to_millis(moment)


def now_millis() -> int:
    """Current time in epoch milliseconds."""
    return to_millis(datetime.now(timezone.utc))
