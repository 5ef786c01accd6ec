"""Tests for event display helpers."""

from datetime import date
from types import SimpleNamespace

import pytest

from display import (
    UrgencyTier,
    countdown_text,
    display_text,
    ordinal,
    ordinal_suffix,
    summarize_event,
    urgency_tier,
)
from errors import ValidationError

TODAY = date(2024, 6, 10)


@pytest.mark.parametrize("days,tier", [
    (0, UrgencyTier.TODAY),
    (1, UrgencyTier.THIS_WEEK),
    (7, UrgencyTier.THIS_WEEK),
    (8, UrgencyTier.THIS_MONTH),
    (30, UrgencyTier.THIS_MONTH),
    (31, UrgencyTier.NORMAL),
    (365, UrgencyTier.NORMAL),
])
def test_urgency_tiers(days, tier):
    assert urgency_tier(days) is tier


def test_urgency_rejects_negative_days():
    with pytest.raises(ValidationError):
        urgency_tier(-1)


@pytest.mark.parametrize("number,suffix", [
    (1, "st"), (2, "nd"), (3, "rd"), (4, "th"),
    (11, "th"), (12, "th"), (13, "th"),
    (21, "st"), (22, "nd"), (23, "rd"),
    (101, "st"), (111, "th"), (112, "th"),
])
def test_ordinal_suffix(number, suffix):
    assert ordinal_suffix(number) == suffix


def test_ordinal():
    assert ordinal(34) == "34th"
    assert ordinal(42) == "42nd"


def test_countdown_text():
    assert countdown_text(0) == "Today!"
    assert countdown_text(1) == "1 day away"
    assert countdown_text(12) == "12 days away"


def test_birthday_texts():
    assert display_text("Alice", "birthday", 0, 34) == "🎉 Alice's birthday today! (turning 34)"
    assert display_text("Alice", "birthday", 0, None) == "🎉 Alice's birthday today!"
    assert display_text("Alice", "birthday", 1, 34) == "Alice's birthday in 1 day (turning 34)"
    assert display_text("Alice", "birthday", 5, None) == "Alice's birthday in 5 days"


def test_anniversary_texts():
    assert display_text("Bo & Cy", "anniversary", 0, 11) == "🎉 Bo & Cy's 11th anniversary today!"
    assert display_text("Bo & Cy", "anniversary", 0, None) == "🎉 Bo & Cy's anniversary today!"
    assert display_text("Bo & Cy", "anniversary", 3, 22) == "Bo & Cy's 22nd anniversary in 3 days"
    assert display_text("Bo & Cy", "anniversary", 3, None) == "Bo & Cy's anniversary in 3 days"


def test_other_texts():
    assert display_text("Dee", "other", 0, None) == "🎉 Dee's special day today!"
    assert display_text("Dee", "other", 2, 3) == "Dee's special day in 2 days (3rd year)"


def test_zero_age_is_not_shown():
    assert display_text("Eve", "anniversary", 4, 0) == "Eve's anniversary in 4 days"


def _event(**overrides):
    fields = dict(
        id=1,
        person_name="Alice",
        event_type="birthday",
        relation="friend",
        event_date=date(1990, 6, 17),
        month_day="06-17",
        has_year=True,
        reminders=[7, 3, 1],
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_summarize_event():
    summary = summarize_event(_event(), TODAY)

    assert summary.event_id == 1
    assert summary.next_occurrence == date(2024, 6, 17)
    assert summary.days_until == 7
    assert summary.age == 34
    assert summary.display_text == "Alice's birthday in 7 days (turning 34)"
    assert summary.countdown_text == "7 days away"
    assert summary.urgency is UrgencyTier.THIS_WEEK
    assert summary.reminder_active is True


def test_summarize_event_without_year():
    summary = summarize_event(
        _event(event_type="anniversary", month_day="06-16", event_date=date(2024, 6, 16),
               has_year=False, reminders=None),
        TODAY
    )

    assert summary.age is None
    assert summary.display_text == "Alice's anniversary in 6 days"
    assert summary.reminder_active is False
