"""
Request parameter validation.

Each helper returns the parsed value or raises HTTPBadRequest with the
JSON error envelope, so handlers read top to bottom without branching.
"""

from datetime import date

from explorer.dates import APOD_FIRST_DATE, parse_date
from explorer.services.mars_rover_service import ROVERS
from explorer.web.responses import bad_request

MAX_NEO_RANGE_DAYS = 7


def require_date(value: str | None, plural: bool = False) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise bad_request(
            "Invalid date format",
            "Dates must be in YYYY-MM-DD format" if plural else "Date must be in YYYY-MM-DD format",
        )
    return parsed


def apod_date(value: str, today: date | None = None) -> str:
    """A single APOD date: well-formed and between the first APOD and today."""
    d = require_date(value)
    today = today or date.today()
    if d < APOD_FIRST_DATE or d > today:
        raise bad_request(
            "Date out of range",
            f"Date must be between {APOD_FIRST_DATE.isoformat()} and today",
        )
    return d.isoformat()


def date_range(
    start: str | None,
    end: str | None,
    max_days: int | None = None,
) -> tuple[str, str]:
    """Both dates present and well-formed, start <= end, span within max_days."""
    if not start or not end:
        raise bad_request(
            "Missing date parameters",
            "Both start_date and end_date are required (YYYY-MM-DD format)",
        )
    start_d = require_date(start, plural=True)
    end_d = require_date(end, plural=True)

    if max_days is not None and (end_d - start_d).days > max_days:
        raise bad_request(
            "Date range too large",
            f"Date range cannot exceed {max_days} days for free API tier",
        )
    if start_d > end_d:
        raise bad_request(
            "Invalid date range",
            "Start date must be before or equal to end date",
        )
    return start_d.isoformat(), end_d.isoformat()


def rover_name(value: str | None) -> str:
    rover = (value or "curiosity").strip().lower()
    if rover not in ROVERS:
        raise bad_request(
            "Invalid rover name",
            f"Rover must be one of: {', '.join(ROVERS)}",
        )
    return rover


def int_param(value: str | None, default: int, minimum: int, maximum: int | None = None) -> int | None:
    """Parse an integer query param; None when it is out of bounds or not a number."""
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except ValueError:
        return None
    if number < minimum or (maximum is not None and number > maximum):
        return None
    return number


def page_number(value: str | None, default: int = 1, minimum: int = 1) -> int:
    page = int_param(value, default, minimum)
    if page is None:
        message = "Page must be a positive integer" if minimum >= 1 else "Page must be a non-negative integer"
        raise bad_request("Invalid page number", message)
    return page


def page_size(value: str | None, default: int = 20) -> int:
    size = int_param(value, default, 1, 100)
    if size is None:
        raise bad_request("Invalid size parameter", "Size must be between 1 and 100")
    return size


def sol_or_earth_date(sol: str | None, earth_date: str | None) -> tuple[int | None, str | None]:
    """At least one of sol / earth_date; sol is a non-negative integer."""
    if not sol and not earth_date:
        raise bad_request(
            "Missing date parameter",
            "Either sol or earth_date must be provided",
        )
    sol_value = None
    if sol:
        sol_value = int_param(sol, 0, 0)
        if sol_value is None:
            raise bad_request("Invalid sol", "Sol must be a non-negative integer")
    earth_value = None
    if earth_date:
        earth_value = require_date(earth_date).isoformat()
    return sol_value, earth_value


def search_query(value: str | None) -> str:
    query = (value or "").strip()
    if not query:
        raise bad_request("Missing search query", "Query parameter q is required")
    return query


def flag(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")
