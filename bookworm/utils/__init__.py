"""
Utilities Package

Small helpers shared by the services:
- round_half_up: rounding that matches what readers expect (2.5 -> 3)
- as_utc: normalize datetimes read back from the database
"""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round half away from zero.

    Python's round() uses banker's rounding (round(2.5) == 2), which is not
    what a percentage or a star average should show.

    Example:
        >>> round_half_up(2.5)
        3.0
        >>> round_half_up(4.25, 1)
        4.3
    """
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def as_utc(value: datetime | None) -> datetime | None:
    """
    Return value as an aware UTC datetime.

    SQLite hands back naive datetimes even for timezone-aware columns;
    those are stored in UTC, so they are tagged rather than converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
