"""Normalization of user-entered event dates.

Forms send either a full date ("YYYY-MM-DD") or a month-day ("MM-DD") when
the year is unknown. Both are turned into the stored triple
(full date, month-day, has-year). Any other shape is rejected.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from errors import InvalidDateFormat, InvalidMonthDay
from recurrence import DateLike, as_day, format_month_day, parse_month_day

FULL_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
MONTH_DAY_PATTERN = re.compile(r"^(\d{1,2})-(\d{1,2})$")


@dataclass(frozen=True)
class NormalizedDate:
    """Canonical stored form of an event date."""

    full_date: date
    month_day: str
    has_year: bool

    @property
    def event_year(self) -> Optional[int]:
        """Original year, only when it is known"""
        return self.full_date.year if self.has_year else None


def normalize_date_input(
    value: str,
    today: DateLike,
    event_year: Optional[int] = None
) -> NormalizedDate:
    """Convert a user-entered date string into its stored form.

    Args:
        value: "YYYY-MM-DD" or "MM-DD"
        today: Reference day; its year is the placeholder for month-day input
        event_year: Optional separately entered year for month-day input

    Returns:
        NormalizedDate: full_date, month_day and has_year

    Raises:
        InvalidDateFormat: If the input matches neither shape, is not a real
            calendar date, or conflicts with event_year
    """
    if not isinstance(value, str):
        raise InvalidDateFormat(f"Event date must be a string, got {type(value).__name__}")
    text = value.strip()

    full_match = FULL_DATE_PATTERN.match(text)
    if full_match:
        year, month, day = (int(part) for part in full_match.groups())
        try:
            full_date = date(year, month, day)
        except ValueError as e:
            raise InvalidDateFormat(f"Event date '{value}' is not a calendar date: {e}") from None
        if event_year is not None and event_year != year:
            raise InvalidDateFormat(
                f"Event year {event_year} conflicts with the year in '{value}'"
            )
        return NormalizedDate(full_date, format_month_day(month, day), True)

    if MONTH_DAY_PATTERN.match(text):
        try:
            month, day = parse_month_day(text)
        except InvalidMonthDay as e:
            raise InvalidDateFormat(str(e)) from None

        if event_year is not None:
            try:
                full_date = date(event_year, month, day)
            except ValueError as e:
                raise InvalidDateFormat(
                    f"'{value}' does not exist in year {event_year}: {e}"
                ) from None
            return NormalizedDate(full_date, format_month_day(month, day), True)

        year = _placeholder_year(month, day, as_day(today).year)
        return NormalizedDate(date(year, month, day), format_month_day(month, day), False)

    raise InvalidDateFormat(f"Event date '{value}' must be YYYY-MM-DD or MM-DD")


def _placeholder_year(month: int, day: int, current_year: int) -> int:
    # Feb 29 needs a leap year to be representable as a full date
    if month == 2 and day == 29:
        year = current_year
        while not calendar.isleap(year):
            year -= 1
        return year
    return current_year
