"""CRUD operations for Event Reminder Service.

Every event and message query is scoped by user_id. Date fields are only
ever written through the date-input normalizer, so event_date, month_day,
event_year and has_year stay consistent.
"""

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified
from typing import Iterable, List, Optional, Union
from datetime import date, datetime, timezone

from config import settings
from database import Event, EventMessage, EventTypeEnum, RelationEnum, ToneEnum, LengthEnum
from date_input import normalize_date_input
from errors import ValidationError
from logger_config import setup_logger
from recurrence import parse_lead_days, should_show_reminder

logger = setup_logger(__name__, 'crud.log')


def _to_enum(enum_cls, value, field_name: str):
    """Convert a string (or enum member) to enum_cls, raising ValidationError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field_name} '{value}'. Allowed: {allowed}") from None


def _normalize_reminders(reminders: Optional[Iterable[Union[int, str]]]) -> List[int]:
    return list(parse_lead_days(reminders or []))


def _validate_person_name(person_name) -> str:
    if not isinstance(person_name, str) or not person_name.strip():
        raise ValidationError("person_name must not be empty")
    return person_name.strip()


def create_event(db: Session, user_id: str, event_data: dict, today: date) -> Event:
    """Create a new event in the database.

    Args:
        db: Database session
        user_id: Owning user
        event_data: Dictionary with event fields
            - person_name: str
            - event_type: str
            - event_date: str ("YYYY-MM-DD" or "MM-DD")
            - relation: str
            - event_year: Optional[int]
            - notes: Optional[str]
            - reminders: Optional[list] (default from settings)
        today: Reference day (placeholder year for month-day input)

    Returns:
        Event: Created event

    Raises:
        ValidationError: On invalid input or when the user is at the event limit
    """
    for required in ('person_name', 'event_type', 'event_date', 'relation'):
        if event_data.get(required) in (None, ''):
            raise ValidationError(f"{required} is required")

    if get_events_count(db, user_id) >= settings.MAX_EVENTS_PER_USER:
        raise ValidationError(f"Event limit of {settings.MAX_EVENTS_PER_USER} reached")

    normalized = normalize_date_input(
        event_data['event_date'], today, event_year=event_data.get('event_year')
    )

    reminders = event_data.get('reminders')
    if reminders is None:
        reminders = settings.DEFAULT_REMINDERS

    now = datetime.now(timezone.utc)
    db_event = Event(
        user_id=user_id,
        person_name=_validate_person_name(event_data['person_name']),
        event_type=_to_enum(EventTypeEnum, event_data['event_type'], 'event_type'),
        event_date=normalized.full_date,
        month_day=normalized.month_day,
        event_year=normalized.event_year,
        has_year=normalized.has_year,
        relation=_to_enum(RelationEnum, event_data['relation'], 'relation'),
        notes=event_data.get('notes'),
        reminders=_normalize_reminders(reminders),
        created_at=now,
        updated_at=now
    )

    db.add(db_event)
    db.commit()
    db.refresh(db_event)
    logger.info(f"Created event {db_event.id} ({db_event.event_type.value} on {db_event.month_day}) for user {user_id}")
    return db_event


def get_event(db: Session, event_id: int, user_id: str) -> Optional[Event]:
    """Get a specific event by ID, only if it belongs to user_id."""
    return db.query(Event).filter(
        Event.id == event_id,
        Event.user_id == user_id
    ).first()


def get_events_by_user(db: Session, user_id: str, limit: Optional[int] = None) -> List[Event]:
    """Get all events for a user ordered by month-day (calendar order)."""
    query = db.query(Event).filter(Event.user_id == user_id).order_by(Event.month_day, Event.id)
    if limit:
        query = query.limit(limit)
    return query.all()


def update_event(
    db: Session,
    event_id: int,
    user_id: str,
    updates: dict,
    today: date
) -> Optional[Event]:
    """Update an existing event.

    Only keys present with a non-None value are applied, except notes,
    which is cleared by an explicit None. A new event_date
    and/or event_year is re-normalized; an event_year alone re-dates the
    existing month-day into that year.

    Returns:
        Optional[Event]: Updated event if found, None otherwise

    Raises:
        ValidationError: On invalid input
    """
    event = get_event(db, event_id, user_id)
    if not event:
        return None

    # notes may be cleared with None; other fields ignore None
    updates = {key: value for key, value in updates.items() if value is not None or key == 'notes'}

    if 'event_date' in updates or 'event_year' in updates:
        date_input = updates.get('event_date', event.month_day)
        normalized = normalize_date_input(date_input, today, event_year=updates.get('event_year'))
        event.event_date = normalized.full_date
        event.month_day = normalized.month_day
        event.event_year = normalized.event_year
        event.has_year = normalized.has_year

    for key, value in updates.items():
        if key in ('event_date', 'event_year'):
            continue
        if key == 'person_name':
            value = _validate_person_name(value)
        elif key == 'event_type':
            value = _to_enum(EventTypeEnum, value, 'event_type')
        elif key == 'relation':
            value = _to_enum(RelationEnum, value, 'relation')
        elif key == 'reminders':
            value = _normalize_reminders(value)
        elif key not in ('notes',):
            raise ValidationError(f"Field '{key}' cannot be updated")

        setattr(event, key, value)

        # JSON columns need explicit change flagging
        if key == 'reminders':
            flag_modified(event, 'reminders')

    event.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(event)
    return event


def delete_event(db: Session, event_id: int, user_id: str) -> bool:
    """Delete an event together with its generated message.

    Returns:
        bool: True if deleted, False if not found
    """
    event = get_event(db, event_id, user_id)
    if not event:
        return False

    db.delete(event)
    db.commit()
    logger.info(f"Deleted event {event_id} for user {user_id}")
    return True


def search_events(db: Session, user_id: str, query: str) -> List[Event]:
    """Search events by person name or notes."""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    search_pattern = f"%{escaped}%"
    return db.query(Event).filter(
        Event.user_id == user_id,
        (
            Event.person_name.ilike(search_pattern, escape="\\") |
            Event.notes.ilike(search_pattern, escape="\\")
        )
    ).order_by(Event.month_day, Event.id).all()


def filter_events(
    db: Session,
    user_id: str,
    event_type: Optional[str] = None,
    relation: Optional[str] = None
) -> List[Event]:
    """Filter events by type and/or relation ("all" or None means no filter)."""
    query = db.query(Event).filter(Event.user_id == user_id)

    if event_type and event_type != 'all':
        query = query.filter(Event.event_type == _to_enum(EventTypeEnum, event_type, 'event_type'))

    if relation and relation != 'all':
        query = query.filter(Event.relation == _to_enum(RelationEnum, relation, 'relation'))

    return query.order_by(Event.month_day, Event.id).all()


def get_events_count(db: Session, user_id: str) -> int:
    """Get total number of events for a user."""
    return db.query(Event).filter(Event.user_id == user_id).count()


def get_event_message(db: Session, event_id: int, user_id: str) -> Optional[EventMessage]:
    """Get the current generated message for an event."""
    return db.query(EventMessage).filter(
        EventMessage.event_id == event_id,
        EventMessage.user_id == user_id
    ).first()


def save_event_message(
    db: Session,
    event_id: int,
    user_id: str,
    tone: str,
    length: str,
    message: str
) -> EventMessage:
    """Store a generated message, overwriting the current one if present.

    Raises:
        ValidationError: On invalid tone/length or empty message
    """
    tone_value = _to_enum(ToneEnum, tone, 'tone')
    length_value = _to_enum(LengthEnum, length, 'length')
    if not message or not message.strip():
        raise ValidationError("message must not be empty")

    now = datetime.now(timezone.utc)
    existing = get_event_message(db, event_id, user_id)
    if existing:
        existing.tone = tone_value
        existing.length = length_value
        existing.message = message
        existing.updated_at = now
        db_message = existing
    else:
        db_message = EventMessage(
            event_id=event_id,
            user_id=user_id,
            tone=tone_value,
            length=length_value,
            message=message,
            created_at=now,
            updated_at=now
        )
        db.add(db_message)

    db.commit()
    db.refresh(db_message)
    return db_message


def delete_event_message(db: Session, event_id: int, user_id: str) -> bool:
    """Delete the generated message for an event.

    Returns:
        bool: True if deleted, False if not found
    """
    message = get_event_message(db, event_id, user_id)
    if not message:
        return False

    db.delete(message)
    db.commit()
    return True


def get_events_due_for_notification(db: Session, today: date) -> List[Event]:
    """Get events (all users) whose reminder fires today and are not yet notified.

    Args:
        db: Database session
        today: Reference day

    Returns:
        List[Event]: Events eligible for a notification today
    """
    candidates = db.query(Event).filter(
        (Event.last_notified_on.is_(None)) | (Event.last_notified_on != today)
    ).order_by(Event.user_id, Event.month_day).all()

    eligible = []
    for event in candidates:
        try:
            if should_show_reminder(event.month_day, event.reminders or [], today):
                eligible.append(event)
        except ValidationError as e:
            # One corrupt row must not block everyone else's reminders
            logger.error(f"Skipping event {event.id}: {e}")

    return eligible


def mark_event_notified(db: Session, event: Event, today: date) -> Event:
    """Record that today's notification for the event was handled."""
    event.last_notified_on = today
    db.commit()
    db.refresh(event)
    return event
