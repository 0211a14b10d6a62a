"""Calendar-date helpers shared by validation, services and pages."""

import random
import re
from datetime import date, datetime, timedelta

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# First day with an Astronomy Picture of the Day
APOD_FIRST_DATE = date(1995, 6, 16)


def parse_date(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD string; None if malformed or not a real day."""
    if not value or not DATE_RE.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def format_display_date(value: str | date | None) -> str | None:
    """Long US form, e.g. "Monday, January 1, 2024".

    Built from the calendar date itself so no timezone can shift the day.
    """
    if value is None:
        return None
    d = value if isinstance(value, date) else parse_date(str(value)[:10])
    if d is None:
        return None
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def year_of(value: str | None) -> int | None:
    d = parse_date(str(value)[:10]) if value else None
    return d.year if d else None


def default_range(days: int = 7, today: date | None = None) -> tuple[str, str]:
    """(start, end) ISO strings covering the last `days` days up to today."""
    end = today or date.today()
    start = end - timedelta(days=days)
    return start.isoformat(), end.isoformat()


def random_date(start: date, end: date) -> date:
    """A uniformly chosen day in [start, end]."""
    return start + timedelta(days=random.randint(0, (end - start).days))
