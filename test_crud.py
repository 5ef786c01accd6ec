"""Tests for event and message CRUD operations."""

from datetime import date

import pytest

import crud
from database import EventTypeEnum, RelationEnum, ToneEnum
from errors import InvalidDateFormat, ValidationError

TODAY = date(2024, 6, 10)
USER = "user-a"
OTHER_USER = "user-b"


def _create(db, user=USER, **overrides):
    data = {
        'person_name': 'Alice',
        'event_type': 'birthday',
        'event_date': '1990-06-17',
        'relation': 'friend',
        'notes': 'Likes tulips',
    }
    data.update(overrides)
    return crud.create_event(db, user, data, TODAY)


def test_event_lifecycle(db):
    """Create, read, update, search and delete one event."""
    # 1. Create
    event = _create(db)
    assert event.id is not None
    assert event.event_type is EventTypeEnum.BIRTHDAY
    assert event.relation is RelationEnum.FRIEND
    assert event.event_date == date(1990, 6, 17)
    assert event.month_day == "06-17"
    assert event.event_year == 1990
    assert event.has_year is True
    assert event.reminders == [30, 15, 7, 3, 1]

    # 2. List
    events = crud.get_events_by_user(db, USER)
    assert [e.id for e in events] == [event.id]

    # 3. Get
    fetched = crud.get_event(db, event.id, USER)
    assert fetched.person_name == "Alice"

    # 4. Update: switch to month-day only
    updated = crud.update_event(db, event.id, USER, {'event_date': '07-01', 'notes': 'Tulips!'}, TODAY)
    assert updated.month_day == "07-01"
    assert updated.has_year is False
    assert updated.event_year is None
    assert updated.event_date == date(2024, 7, 1)
    assert updated.notes == "Tulips!"

    # 5. Search
    assert len(crud.search_events(db, USER, 'tulip')) == 1
    assert crud.search_events(db, USER, 'roses') == []

    # 6. Delete
    assert crud.delete_event(db, event.id, USER) is True
    assert crud.get_event(db, event.id, USER) is None
    assert crud.delete_event(db, event.id, USER) is False


def test_month_day_event_without_year(db):
    event = _create(db, event_date='12-25')

    assert event.has_year is False
    assert event.event_year is None
    assert event.event_date == date(2024, 12, 25)


def test_month_day_event_with_separate_year(db):
    event = _create(db, event_date='12-25', event_year=1970)

    assert event.has_year is True
    assert event.event_year == 1970
    assert event.event_date == date(1970, 12, 25)


def test_update_year_only_redates_existing_month_day(db):
    event = _create(db, event_date='12-25')
    updated = crud.update_event(db, event.id, USER, {'event_year': 1980}, TODAY)

    assert updated.event_date == date(1980, 12, 25)
    assert updated.has_year is True
    assert updated.event_year == 1980


def test_reminders_are_deduplicated_and_sorted(db):
    event = _create(db, reminders=['1', 7, '7', 3])
    assert event.reminders == [7, 3, 1]

    updated = crud.update_event(db, event.id, USER, {'reminders': [15]}, TODAY)
    assert updated.reminders == [15]


def test_empty_reminder_list_is_kept(db):
    assert _create(db, reminders=[]).reminders == []


@pytest.mark.parametrize("field,value", [
    ('event_type', 'graduation'),
    ('relation', 'enemy'),
    ('person_name', '   '),
    ('reminders', [-3]),
])
def test_invalid_fields_are_rejected(db, field, value):
    with pytest.raises(ValidationError):
        _create(db, **{field: value})
    assert crud.get_events_count(db, USER) == 0


def test_missing_required_field(db):
    with pytest.raises(ValidationError):
        _create(db, relation=None)


def test_invalid_date_is_rejected(db):
    with pytest.raises(InvalidDateFormat):
        _create(db, event_date='17/06/1990')


def test_events_are_scoped_by_user(db):
    event = _create(db)
    _create(db, user=OTHER_USER, person_name='Bob')

    assert crud.get_event(db, event.id, OTHER_USER) is None
    assert crud.update_event(db, event.id, OTHER_USER, {'notes': 'x'}, TODAY) is None
    assert crud.delete_event(db, event.id, OTHER_USER) is False
    assert [e.person_name for e in crud.get_events_by_user(db, OTHER_USER)] == ['Bob']


def test_events_ordered_by_month_day(db):
    _create(db, person_name='December', event_date='12-01')
    _create(db, person_name='March', event_date='2001-03-01')
    _create(db, person_name='July', event_date='07-04')

    names = [e.person_name for e in crud.get_events_by_user(db, USER)]
    assert names == ['March', 'July', 'December']


def test_filter_events(db):
    _create(db, person_name='Alice')
    _create(db, person_name='Mom & Dad', event_type='anniversary', relation='family')
    _create(db, person_name='Boss', event_type='birthday', relation='colleague')

    assert len(crud.filter_events(db, USER, 'birthday')) == 2
    assert len(crud.filter_events(db, USER, 'all', 'family')) == 1
    assert len(crud.filter_events(db, USER, 'birthday', 'colleague')) == 1
    assert len(crud.filter_events(db, USER)) == 3

    with pytest.raises(ValidationError):
        crud.filter_events(db, USER, 'holiday')


def test_message_is_overwritten_not_appended(db):
    event = _create(db)

    first = crud.save_event_message(db, event.id, USER, 'cheerful', 'short', 'Happy birthday!')
    second = crud.save_event_message(db, event.id, USER, 'formal', 'long', 'Best wishes on your birthday.')

    assert second.id == first.id
    current = crud.get_event_message(db, event.id, USER)
    assert current.tone is ToneEnum.FORMAL
    assert current.message == 'Best wishes on your birthday.'


def test_message_validation(db):
    event = _create(db)

    with pytest.raises(ValidationError):
        crud.save_event_message(db, event.id, USER, 'sarcastic', 'short', 'Hi')
    with pytest.raises(ValidationError):
        crud.save_event_message(db, event.id, USER, 'cheerful', 'short', '  ')


def test_delete_message(db):
    event = _create(db)
    crud.save_event_message(db, event.id, USER, 'cheerful', 'short', 'Happy birthday!')

    assert crud.delete_event_message(db, event.id, USER) is True
    assert crud.get_event_message(db, event.id, USER) is None
    assert crud.delete_event_message(db, event.id, USER) is False


def test_deleting_event_removes_its_message(db):
    event = _create(db)
    crud.save_event_message(db, event.id, USER, 'cheerful', 'short', 'Happy birthday!')

    crud.delete_event(db, event.id, USER)

    assert crud.get_event_message(db, event.id, USER) is None


def test_events_due_for_notification(db):
    today_event = _create(db, person_name='Today', event_date='06-10', reminders=[])
    week_event = _create(db, person_name='Week', event_date='06-17', reminders=[7])
    _create(db, person_name='Six days', event_date='06-16', reminders=[7, 3])
    _create(db, user=OTHER_USER, person_name='Other', event_date='1980-06-13', reminders=[3])

    due = crud.get_events_due_for_notification(db, TODAY)
    assert sorted(e.person_name for e in due) == ['Other', 'Today', 'Week']

    crud.mark_event_notified(db, today_event, TODAY)
    crud.mark_event_notified(db, week_event, TODAY)

    due = crud.get_events_due_for_notification(db, TODAY)
    assert [e.person_name for e in due] == ['Other']


def test_update_clears_notes_with_none(db):
    event = _create(db)
    updated = crud.update_event(db, event.id, USER, {'notes': None, 'person_name': None}, TODAY)

    assert updated.notes is None
    assert updated.person_name == 'Alice'


def test_search_treats_wildcards_literally(db):
    _create(db, person_name='Alice', notes='Likes tulips')
    _create(db, person_name='Bob', notes='50% off cake')
    _create(db, person_name='Carol_B', notes=None)

    assert [e.person_name for e in crud.search_events(db, USER, '%')] == ['Bob']
    assert [e.person_name for e in crud.search_events(db, USER, '_')] == ['Carol_B']
    assert crud.search_events(db, USER, 'Ali_e') == []
