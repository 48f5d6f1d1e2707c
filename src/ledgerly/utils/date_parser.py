"""Date parsing utilities."""

import re
from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_OFFSET = re.compile(r"^(?:in\s+|\+)(\d+)\s*(d|day|days|w|week|weeks|m|month|months)$")


def parse_date(date_str: str, base: date | None = None) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow"
    - Offsets from ``base`` (default today): "in 30 days", "+2w", "+1 month"

    Args:
        date_str: Date string in various formats
        base: Date that offsets are counted from

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()
    base = base or today

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # Payment terms style offsets, e.g. "in 30 days" for net-30
    match = _OFFSET.match(date_str)
    if match:
        count = int(match.group(1))
        unit = match.group(2)[0]
        if unit == "d":
            return base + timedelta(days=count)
        if unit == "w":
            return base + timedelta(weeks=count)
        return base + relativedelta(months=count)

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
