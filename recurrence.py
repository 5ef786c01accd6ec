"""Recurrence calculations for yearly events.

Every function takes "today" explicitly. Datetimes are truncated to their
calendar day before comparing, so intraday clock differences never shift a
result by one day.

Leap days: an event stored as "02-29" occurs on Feb 28 in non-leap years.
"""

import calendar
import re
from datetime import date, datetime
from typing import Iterable, Optional, Tuple, Union
from zoneinfo import ZoneInfo

from errors import InvalidMonthDay, ValidationError

DateLike = Union[date, datetime]

MONTH_DAY_PATTERN = re.compile(r"^(\d{1,2})-(\d{1,2})$")

# Any leap year works here; only the month lengths matter.
_LEAP_REFERENCE_YEAR = 2000


def as_day(value: DateLike) -> date:
    """Strip time-of-day from a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def local_today(timezone_name: str = "UTC") -> date:
    """Current calendar day in the given timezone.

    This is the only wall-clock read in the service; outer callers pass its
    result down as "today".
    """
    return datetime.now(ZoneInfo(timezone_name)).date()


def parse_month_day(month_day: str) -> Tuple[int, int]:
    """Parse "MM-DD" (or "M-D") into (month, day).

    Raises:
        InvalidMonthDay: If the string is malformed or not a calendar day.
    """
    if not isinstance(month_day, str):
        raise InvalidMonthDay(f"Month-day must be a string, got {type(month_day).__name__}")

    match = MONTH_DAY_PATTERN.match(month_day.strip())
    if not match:
        raise InvalidMonthDay(f"Month-day '{month_day}' is not in MM-DD format")

    month, day = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidMonthDay(f"Month {month} in '{month_day}' is outside 1-12")

    last_day = calendar.monthrange(_LEAP_REFERENCE_YEAR, month)[1]
    if not 1 <= day <= last_day:
        raise InvalidMonthDay(f"Day {day} in '{month_day}' is outside 1-{last_day}")

    return month, day


def format_month_day(month: int, day: int) -> str:
    return f"{month:02d}-{day:02d}"


def occurrence_in_year(month: int, day: int, year: int) -> date:
    """The date a month/day falls on in a given year (Feb 29 -> Feb 28 off leap years)."""
    if month == 2 and day == 29 and not calendar.isleap(year):
        return date(year, 2, 28)
    return date(year, month, day)


def next_occurrence(month_day: str, today: DateLike) -> date:
    """Nearest date on or after today matching the month-day."""
    month, day = parse_month_day(month_day)
    today = as_day(today)

    this_year = occurrence_in_year(month, day, today.year)
    if this_year >= today:
        return this_year
    return occurrence_in_year(month, day, today.year + 1)


def days_until_next_occurrence(month_day: str, today: DateLike) -> int:
    """Whole days from today to the next occurrence; 0 means today."""
    today = as_day(today)
    return (next_occurrence(month_day, today) - today).days


def month_day_of(event_date: Union[DateLike, str]) -> str:
    """The "MM-DD" part of a date or an ISO "YYYY-MM-DD" string."""
    day = _to_date(event_date)
    return format_month_day(day.month, day.day)


def calculate_age(
    event_date: Union[DateLike, str],
    has_year: bool,
    today: DateLike
) -> Optional[int]:
    """Age (or anniversary count) reached on the next occurrence.

    Returns None when the original year is unknown.
    """
    if not has_year:
        return None

    event_day = _to_date(event_date)
    upcoming = next_occurrence(month_day_of(event_day), today)
    return upcoming.year - event_day.year


def parse_lead_days(reminder_lead_days: Iterable[Union[int, str]]) -> Tuple[int, ...]:
    """Convert lead times ("7", 7, ...) to distinct non-negative ints, descending."""
    parsed = set()
    for value in reminder_lead_days or ():
        if isinstance(value, bool):
            raise ValidationError(f"Reminder lead time {value!r} is not a whole number of days")
        try:
            days = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Reminder lead time {value!r} is not a whole number of days") from None
        if isinstance(value, float) and value != days:
            raise ValidationError(f"Reminder lead time {value!r} is not a whole number of days")
        if days < 0:
            raise ValidationError(f"Reminder lead time {days} must not be negative")
        parsed.add(days)
    return tuple(sorted(parsed, reverse=True))


def should_show_reminder(
    month_day: str,
    reminder_lead_days: Iterable[Union[int, str]],
    today: DateLike
) -> bool:
    """True on the day itself or when a lead time matches the days remaining exactly."""
    days_until = days_until_next_occurrence(month_day, today)
    if days_until == 0:
        return True
    return days_until in parse_lead_days(reminder_lead_days)


def _to_date(value: Union[DateLike, str]) -> date:
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"Event date '{value}' is not a YYYY-MM-DD date") from None
    if isinstance(value, (date, datetime)):
        return as_day(value)
    raise ValidationError(f"Event date must be a date, got {type(value).__name__}")
