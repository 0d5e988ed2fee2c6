from datetime import datetime
from models import Category, DATE_FORMAT


def parse_date(date_str: str) -> datetime:
    """Parse a 'YYYY-MM-DD HH:MM' string into a datetime object."""
    try:
        return datetime.strptime(date_str.strip(), DATE_FORMAT)
    except ValueError:
        raise ValueError(f"Invalid date format: {date_str!r} (expected YYYY-MM-DD HH:MM)")


def format_date(date: datetime) -> str:
    return date.strftime(DATE_FORMAT)


def parse_category(name: str, case_sensitive: bool = True) -> Category:
    """Look up a category by its canonical member name."""
    key = name.strip() if case_sensitive else name.strip().upper()
    try:
        return Category[key]
    except KeyError:
        choices = ", ".join(c.name for c in Category)
        raise ValueError(f"Unknown category: {name!r} (expected one of {choices})")


def parse_int(value: str, label: str, minimum: int | None = None) -> int:
    """Parse a decimal integer, optionally enforcing a lower bound."""
    try:
        number = int(value.strip())
    except ValueError:
        raise ValueError(f"Invalid {label}: {value!r}")
    if minimum is not None and number < minimum:
        raise ValueError(f"Invalid {label}: {number} is below {minimum}")
    return number
