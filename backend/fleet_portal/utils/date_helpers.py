import re

_MONTH_NAMES = [
    "", "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

_FULL_MONTH_NAMES = [
    "", "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def get_month_name(month: int) -> str:
    """Return abbreviated month name (1-indexed). E.g. 1 -> 'Jan'."""
    if 1 <= month <= 12:
        return _MONTH_NAMES[month]
    raise ValueError(f"Invalid month: {month}")


def parse_year_month(value: str) -> tuple[int, int]:
    """Parse 'YYYY-MM' into (year, month)."""
    match = _YEAR_MONTH_RE.match(value or "")
    if match is None:
        raise ValueError(f"Invalid year-month: {value!r}. Expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in year-month: {value!r}")
    return year, month


def format_year_month(value: str) -> str:
    """Format 'YYYY-MM' for display. E.g. '2025-03' -> 'March 2025'."""
    year, month = parse_year_month(value)
    return f"{_FULL_MONTH_NAMES[month]} {year}"
