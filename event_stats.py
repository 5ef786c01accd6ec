"""Aggregate statistics over a user's events.

Windows are half-open: "this week" is [today, today + 7 days) and
"this month" is [today, same day next month).
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterable

from recurrence import DateLike, as_day, next_occurrence

EVENT_TYPES = ("birthday", "anniversary", "other")


@dataclass
class EventStatistics:
    total_events: int = 0
    upcoming_this_week: int = 0
    upcoming_this_month: int = 0
    by_type: Dict[str, int] = field(default_factory=lambda: {t: 0 for t in EVENT_TYPES})

    @property
    def birthday_count(self) -> int:
        return self.by_type.get("birthday", 0)

    @property
    def anniversary_count(self) -> int:
        return self.by_type.get("anniversary", 0)

    @property
    def other_count(self) -> int:
        return self.by_type.get("other", 0)


def add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping to the last day of the target month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def compute_statistics(events: Iterable[Any], today: DateLike) -> EventStatistics:
    """Count events by type and by upcoming window.

    Args:
        events: Records with event_type and month_day attributes
        today: Reference day

    Returns:
        EventStatistics: Totals for the collection
    """
    today = as_day(today)
    week_end = today + timedelta(days=7)
    month_end = add_months(today, 1)

    stats = EventStatistics()
    for event in events:
        stats.total_events += 1

        event_type = getattr(event.event_type, "value", event.event_type)
        stats.by_type[event_type] = stats.by_type.get(event_type, 0) + 1

        upcoming = next_occurrence(event.month_day, today)
        if today <= upcoming < week_end:
            stats.upcoming_this_week += 1
        if today <= upcoming < month_end:
            stats.upcoming_this_month += 1

    return stats
