"""Display helpers for events.

Builds the text, countdown and urgency tier shown for an event. Everything
here is derived from stored event fields plus "today"; nothing is persisted.
"""

import enum
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from errors import ValidationError
from recurrence import (
    DateLike,
    calculate_age,
    days_until_next_occurrence,
    next_occurrence,
    should_show_reminder,
)


class UrgencyTier(str, enum.Enum):
    """How soon an event is, driving display styling"""
    TODAY = "today"
    THIS_WEEK = "this-week"
    THIS_MONTH = "this-month"
    NORMAL = "normal"


@dataclass(frozen=True)
class EventSummary:
    """Derived, display-ready facts about one event."""

    event_id: Optional[int]
    person_name: str
    event_type: str
    relation: Optional[str]
    month_day: str
    next_occurrence: date
    days_until: int
    age: Optional[int]
    display_text: str
    countdown_text: str
    urgency: UrgencyTier
    reminder_active: bool


def urgency_tier(days_until: int) -> UrgencyTier:
    if days_until < 0:
        raise ValidationError(f"Days until must not be negative, got {days_until}")
    if days_until == 0:
        return UrgencyTier.TODAY
    if days_until <= 7:
        return UrgencyTier.THIS_WEEK
    if days_until <= 30:
        return UrgencyTier.THIS_MONTH
    return UrgencyTier.NORMAL


def ordinal_suffix(number: int) -> str:
    last_digit = number % 10
    last_two = number % 100
    if last_digit == 1 and last_two != 11:
        return "st"
    if last_digit == 2 and last_two != 12:
        return "nd"
    if last_digit == 3 and last_two != 13:
        return "rd"
    return "th"


def ordinal(number: int) -> str:
    return f"{number}{ordinal_suffix(number)}"


def countdown_text(days_until: int) -> str:
    if days_until == 0:
        return "Today!"
    return f"{days_until} day{'' if days_until == 1 else 's'} away"


def display_text(
    person_name: str,
    event_type: Any,
    days_until: int,
    age: Optional[int] = None
) -> str:
    """Headline for an event card.

    The template depends on the event type, whether an age/anniversary
    count is known and whether the event is today. Ages below 1 are
    treated as unknown.
    """
    event_type = _plain(event_type)
    if age is not None and age < 1:
        age = None

    if event_type == "birthday":
        occasion = "birthday"
        detail = f" (turning {age})" if age else ""
    elif event_type == "anniversary":
        occasion = f"{ordinal(age)} anniversary" if age else "anniversary"
        detail = ""
    else:
        occasion = "special day"
        detail = f" ({ordinal(age)} year)" if age else ""

    if days_until == 0:
        return f"🎉 {person_name}'s {occasion} today!{detail}"

    day_word = "day" if days_until == 1 else "days"
    return f"{person_name}'s {occasion} in {days_until} {day_word}{detail}"


def summarize_event(event: Any, today: DateLike) -> EventSummary:
    """Derive the display summary for a stored event record.

    Args:
        event: Any object with person_name, event_type, event_date,
            month_day, has_year and reminders attributes (an ORM row works)
        today: Reference day

    Returns:
        EventSummary: Derived facts for the event
    """
    days_until = days_until_next_occurrence(event.month_day, today)
    age = calculate_age(event.event_date, event.has_year, today)

    return EventSummary(
        event_id=getattr(event, "id", None),
        person_name=event.person_name,
        event_type=_plain(event.event_type),
        relation=_plain(getattr(event, "relation", None)),
        month_day=event.month_day,
        next_occurrence=next_occurrence(event.month_day, today),
        days_until=days_until,
        age=age,
        display_text=display_text(event.person_name, event.event_type, days_until, age),
        countdown_text=countdown_text(days_until),
        urgency=urgency_tier(days_until),
        reminder_active=should_show_reminder(event.month_day, event.reminders or [], today),
    )


def _plain(value: Any) -> Any:
    # Accept enum members as well as raw strings
    return getattr(value, "value", value)
