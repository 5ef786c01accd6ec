"""Database module for Event Reminder Service.

This module defines SQLAlchemy models and database session management.
Events keep both the full event_date and the derived month_day; recurrence
math always works from month_day.
"""

import enum

from sqlalchemy import (
    create_engine, Column, Integer, String, Text, Date, DateTime, Boolean, JSON,
    ForeignKey, Enum as SQLEnum, Index, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from config import settings

# SQLAlchemy Base
Base = declarative_base()


class EventTypeEnum(str, enum.Enum):
    """Kinds of yearly events"""
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"
    OTHER = "other"


class RelationEnum(str, enum.Enum):
    """Relation of the person to the user"""
    FAMILY = "family"
    FRIEND = "friend"
    COLLEAGUE = "colleague"
    PARTNER = "partner"
    OTHER = "other"


class ToneEnum(str, enum.Enum):
    """Tone of a generated greeting"""
    CHEERFUL = "cheerful"
    HEARTFELT = "heartfelt"
    FUNNY = "funny"
    FORMAL = "formal"


class LengthEnum(str, enum.Enum):
    """Length of a generated greeting"""
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Event(Base):
    """Event model - one yearly-recurring date for one person.

    month_day ("MM-DD") always matches event_date. When has_year is False the
    year of event_date is only a placeholder and event_year is NULL.
    """

    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True, doc="Event ID")

    # Owner
    user_id = Column(String, nullable=False, index=True, doc="Owning user identifier")

    # Event Content
    person_name = Column(String, nullable=False, doc="Who the event is about")
    event_type = Column(
        SQLEnum(EventTypeEnum, values_callable=_enum_values),
        nullable=False,
        doc="birthday, anniversary or other"
    )
    event_date = Column(Date, nullable=False, doc="Full date (placeholder year if unknown)")
    month_day = Column(String(5), nullable=False, doc="MM-DD used for yearly recurrence")
    event_year = Column(Integer, nullable=True, doc="Original year, only if known")
    has_year = Column(Boolean, nullable=False, default=True, doc="Whether the year is known")
    relation = Column(
        SQLEnum(RelationEnum, values_callable=_enum_values),
        nullable=False,
        doc="Relation of the person to the user"
    )
    notes = Column(Text, nullable=True, doc="Optional free text")
    reminders = Column(JSON, default=list, doc="Lead times in days, descending")

    # Worker bookkeeping
    last_notified_on = Column(Date, nullable=True, doc="Last day a reminder notification was sent")

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, doc="When event was created")
    updated_at = Column(DateTime(timezone=True), nullable=False, doc="When event was last updated")

    messages = relationship(
        "EventMessage",
        back_populates="event",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index('idx_user_month_day', 'user_id', 'month_day'),
        Index('idx_user_type', 'user_id', 'event_type'),
    )

    def __repr__(self):
        """String representation"""
        return (
            f"<Event(id={self.id}, user={self.user_id}, person={self.person_name}, "
            f"type={self.event_type.value if self.event_type else None}, month_day={self.month_day})>"
        )


class EventMessage(Base):
    """Generated greeting for an event. At most one per event and user."""

    __tablename__ = "event_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    tone = Column(SQLEnum(ToneEnum, values_callable=_enum_values), nullable=False)
    length = Column(SQLEnum(LengthEnum, values_callable=_enum_values), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    event = relationship("Event", back_populates="messages")

    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name='uq_event_message_owner'),
    )

    def __repr__(self):
        return f"<EventMessage(event_id={self.event_id}, tone={self.tone}, length={self.length})>"


# Database Engine Setup
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {},
    echo=False  # Set to True for SQL debugging
)

# Session Factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Database session dependency for FastAPI.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Create all tables
Base.metadata.create_all(bind=engine)
