# File: utils/dt_utils.py
"""Calendar utilities for Gayret.

Pure Python date/time functions with no dependency on the rest of the package.
All functions here can be unit tested in isolation.

Day identity: a day key (``YYYY-MM-DD`` in the configured local timezone) is
the only notion of "same day" used across the engines.

There is no mutable process-wide timezone: every function that turns an
instant into a calendar day takes an optional ``tz`` and falls back to UTC.

Weekday convention: recurrence sets use 0=Sunday..6=Saturday, while weeks run
Monday..Sunday. ``weekday_index`` converts from Python's Monday=0 numbering.

Functions:
    - dt_today_local, dt_now_local: Current date/time
    - as_local: Convert an aware datetime to the local timezone
    - dt_parse_date: Parse date (or datetime) strings into a date
    - to_date: Normalize date/datetime/str inputs into a local date
    - date_key: Canonical day key
    - weekday_index / weekday_name: Sunday-based weekday helpers
    - monday_of: Monday starting the week of a date
    - week_days: The seven days of a Monday-anchored week
    - is_scheduled_day: Recurrence + creation-date check
    - count_scheduled_days_in_month: Pro-rated scheduled day count (rrule)
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
import logging
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

# Third-party date utilities
from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, rrule

if TYPE_CHECKING:
    from collections.abc import Iterable

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# These mirror const.py values but are defined locally for purity.
# ==============================================================================

# Fallback timezone when the caller passes none
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Today's date in the specified timezone.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_now_local(tz: ZoneInfo | None = None) -> datetime:
    """Return the current datetime in local timezone (timezone-aware)."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Args:
        dt_obj: Datetime object. Naive values are assumed to be local wall
            time already and only get the tzinfo attached.
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime in local timezone
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        return dt_obj.replace(tzinfo=tz_info)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Parsing / Normalization
# ==============================================================================


def dt_parse_date(date_str: str | None, tz: ZoneInfo | None = None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts formats:
    - "2025-04-07" (ISO date)
    - "2025-04-07T14:30:00+00:00" (ISO datetime, converted to local date)
    - "2025/04/07"

    Args:
        date_str: Date string to parse, or None
        tz: Timezone for datetime strings. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        datetime.date or None if parsing fails.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    # Try ISO date first (most common)
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    # Full ISO datetime (e.g. habit creation timestamps)
    try:
        parsed = datetime.fromisoformat(date_str.replace("Z", "+00:00"))
        return as_local(parsed, tz).date()
    except ValueError:
        pass

    try:
        return datetime.strptime(date_str, "%Y/%m/%d").date()
    except ValueError:
        _LOGGER.debug("Unparseable date string: %s", date_str)
        return None


def to_date(
    value: date | datetime | str | None, tz: ZoneInfo | None = None
) -> date | None:
    """Normalize date-like input to a local calendar date.

    Args:
        value: date, datetime (aware values are converted to local time),
            date string, or None
        tz: Local timezone. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        The local calendar date, or None if the input cannot be interpreted.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_local(value, tz).date()
    if isinstance(value, date):
        return value
    return dt_parse_date(value, tz)


def resolve_reference_date(
    value: date | datetime | str | None = None, tz: ZoneInfo | None = None
) -> date:
    """Return the local date for an injected reference, defaulting to today.

    Unparseable strings fall back to today with a warning.
    """
    if value is None:
        return dt_today_local(tz)
    resolved = to_date(value, tz)
    if resolved is None:
        _LOGGER.warning("Invalid reference date %r, using today", value)
        return dt_today_local(tz)
    return resolved


def date_key(value: date | datetime, tz: ZoneInfo | None = None) -> str:
    """Return the canonical day key (``YYYY-MM-DD``) for a date or instant.

    Two instants map to the same key iff they fall on the same local
    calendar day.

    Example:
        date_key(date(2024, 1, 3)) → "2024-01-03"
    """
    if isinstance(value, datetime):
        value = as_local(value, tz).date()
    return value.isoformat()


# ==============================================================================
# Weekday Helpers
# ==============================================================================


def weekday_index(day: date) -> int:
    """Return the weekday index of a date with 0=Sunday..6=Saturday."""
    return (day.weekday() + 1) % 7


def weekday_name(index: int) -> str:
    """Return the English name for a Sunday-based weekday index.

    Raises:
        ValueError: If index is outside 0..6
    """
    if not 0 <= index <= 6:
        raise ValueError(f"Weekday index out of range: {index}")
    return WEEKDAY_NAMES[index]


def monday_of(day: date | datetime, tz: ZoneInfo | None = None) -> date:
    """Return the Monday that starts the week containing ``day``.

    Sunday is the last day of its week, so it maps to the Monday six days
    earlier.

    Example:
        monday_of(date(2024, 1, 7))  # Sunday → date(2024, 1, 1)
    """
    if isinstance(day, datetime):
        day = as_local(day, tz).date()
    return day - timedelta(days=day.weekday())


def week_days(monday: date) -> list[date]:
    """Return the seven days Monday..Sunday of the week starting at ``monday``."""
    return [monday + timedelta(days=offset) for offset in range(7)]


def is_scheduled_day(
    day: date, recurrence: Iterable[int], created_at: date | None
) -> bool:
    """Check whether a habit is scheduled on ``day``.

    A day is scheduled when its weekday is in the recurrence set and it falls
    on or after the habit's creation date.
    """
    if created_at is not None and day < created_at:
        return False
    return weekday_index(day) in set(recurrence)


# ==============================================================================
# Month Enumeration
# ==============================================================================


def count_scheduled_days_in_month(
    year: int,
    month: int,
    recurrence: Iterable[int],
    created_at: date | None,
) -> int:
    """Count days of a month whose weekday is in ``recurrence``.

    Counting starts at ``max(first_of_month, created_at)`` and never crosses
    into the next month, so a habit created mid-month only owes its remaining
    scheduled days.

    Args:
        year: Calendar year
        month: Calendar month (1-12)
        recurrence: Weekday indices, 0=Sunday..6=Saturday
        created_at: Habit creation date, or None for no lower bound

    Returns:
        Number of scheduled days (0 if the habit was created after the month)

    Examples:
        January 2024, Mon-Fri, created 2023 → 23
        January 2024, Mon-Fri, created 2024-01-20 → 8
    """
    # rrule weekdays are Monday=0; recurrence is Sunday=0
    byweekday = sorted({(idx + 6) % 7 for idx in recurrence if 0 <= idx <= 6})
    if not byweekday:
        return 0

    first_of_month = date(year, month, 1)
    last_of_month = first_of_month + relativedelta(months=1, days=-1)
    start = max(first_of_month, created_at) if created_at else first_of_month
    if start > last_of_month:
        return 0

    rule = rrule(
        DAILY,
        dtstart=datetime.combine(start, datetime.min.time()),
        until=datetime.combine(last_of_month, datetime.min.time()),
        byweekday=byweekday,
    )
    return rule.count()
