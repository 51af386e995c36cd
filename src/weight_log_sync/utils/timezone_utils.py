"""
Timezone and date utilities.

Provides the current calendar date in a configured timezone and
normalization of user-typed dates to the YYYY-MM-DD file format.
"""

from datetime import date, datetime

import pytz
from dateutil import parser

DATE_FORMAT = "%Y-%m-%d"


def today(timezone_str: str = "UTC") -> date:
    """
    Get today's date in the given timezone.

    Args:
        timezone_str: Timezone string (e.g., "Asia/Taipei").

    Returns:
        Current calendar date in that timezone.
    """
    tz = pytz.timezone(timezone_str)
    return datetime.now(pytz.utc).astimezone(tz).date()


def normalize_date(date_str: str) -> str:
    """
    Parse a loosely formatted date and return it as YYYY-MM-DD.

    Args:
        date_str: Date string (e.g., "2026-1-5", "Jan 5 2026").

    Returns:
        Date in YYYY-MM-DD form.

    Raises:
        ValueError: If the string is not a recognizable date.
    """
    try:
        parsed = parser.parse(date_str.strip(), yearfirst=True)
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid date: {date_str!r}") from e
    return parsed.strftime(DATE_FORMAT)


def year_month_of(day: date) -> str:
    """Return the YYYY-MM period containing the given date."""
    return f"{day.year:04d}-{day.month:02d}"
