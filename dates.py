"""Date parsing, formatting and month arithmetic.

Dates are ISO ``YYYY-MM-DD`` strings at the boundary and ``datetime.date``
inside the application. Months are ``YYYY-MM`` strings. Timestamps are
timezone-aware UTC datetimes, serialized the way JavaScript's
``Date.toISOString()`` does so existing backup files keep their format.
"""

import re
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple

from dateutil.relativedelta import relativedelta

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_YEAR_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def is_valid_date(value) -> bool:
    """Check that a value is a well-formed ``YYYY-MM-DD`` calendar date."""
    if isinstance(value, date):
        return True
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_date(value) -> date:
    """Parse a ``YYYY-MM-DD`` string into a date.

    Raises:
        ValueError: If the value is not a valid date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not is_valid_date(value):
        raise ValueError(f"Invalid date: {value!r}")
    return date.fromisoformat(value)


def is_valid_year_month(value) -> bool:
    """Check that a value is a ``YYYY-MM`` string with a real month."""
    if not isinstance(value, str):
        return False
    match = _YEAR_MONTH_PATTERN.match(value)
    return bool(match) and 1 <= int(match.group(2)) <= 12


def parse_year_month(value: str) -> Tuple[int, int]:
    """Split a ``YYYY-MM`` string into (year, month).

    Raises:
        ValueError: If the value is not a valid year-month.
    """
    if not is_valid_year_month(value):
        raise ValueError(f"Invalid year-month: {value!r}")
    year, month = value.split("-")
    return int(year), int(month)


def year_month_of(value: date) -> str:
    """Format the month a date falls in as ``YYYY-MM``."""
    return f"{value.year:04d}-{value.month:02d}"


def current_date() -> date:
    return date.today()


def current_year_month(today: Optional[date] = None) -> str:
    return year_month_of(today or date.today())


def now_utc() -> datetime:
    """Current UTC time at the millisecond precision timestamps are stored with."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def format_timestamp(value: datetime) -> str:
    """Serialize a timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value) -> datetime:
    """Parse an ISO timestamp. Naive values are taken to be UTC.

    Raises:
        ValueError: If the value is not an ISO timestamp.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def add_months(value: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the month end."""
    return value + relativedelta(months=months)


def month_difference(start: date, end: date) -> int:
    """Number of calendar-month boundaries between two dates.

    Only year and month take part: 2024-01-31 to 2024-02-01 is 1.
    """
    return (end.year - start.year) * 12 + (end.month - start.month)


def year_month_difference(start: str, end: str) -> int:
    """Months from one ``YYYY-MM`` to another (negative if end is earlier)."""
    start_year, start_month = parse_year_month(start)
    end_year, end_month = parse_year_month(end)
    return (end_year - start_year) * 12 + (end_month - start_month)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a month."""
    first = date(year, month, 1)
    last = first + relativedelta(months=1, days=-1)
    return first, last


def last_n_months(n: int, today: Optional[date] = None) -> List[str]:
    """The last ``n`` months ending with the current one, oldest first."""
    today = today or date.today()
    return [year_month_of(add_months(today, -i)) for i in range(n - 1, -1, -1)]
