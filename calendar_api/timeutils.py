"""Helpers for timestamp handling.

Timestamps are stored as naive UTC datetimes; everything entering the
data-access layer goes through :func:`to_naive_utc` first.
"""

from datetime import date, datetime, time, timezone

from .exceptions import InputValidationError


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive input is taken as UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_range_bound(raw: str, *, end: bool = False) -> datetime:
    """
    Parse an ISO date or datetime string used as a range bound.

    A bare date expands to the first instant of that day, or to the last
    instant of that day when ``end`` is true, so that ``[d, d]`` covers
    the whole day.

    Args:
        raw (str): ISO 8601 date or datetime.
        end (bool): Whether the value closes the range.

    Raises:
        InputValidationError: If the value cannot be parsed.

    Returns:
        datetime: Naive UTC datetime.
    """
    text = raw.strip()
    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            return datetime.combine(day, time.max if end else time.min)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return to_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        raise InputValidationError(f"Invalid date: {raw}")


def parse_range(start: str, end: str) -> tuple[datetime, datetime]:
    """
    Parse the bounds of a date range query.

    Raises:
        InputValidationError: If a bound is invalid or start is after end.
    """
    range_start = parse_range_bound(start)
    range_end = parse_range_bound(end, end=True)
    if range_start > range_end:
        raise InputValidationError("Start date must not be after end date")
    return range_start, range_end
