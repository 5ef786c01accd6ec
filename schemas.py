"""Pydantic schemas for Event Reminder Service.

This module defines request and response schemas for API validation.
event_date is accepted as entered by the user ("YYYY-MM-DD" or "MM-DD") and
normalized by crud; responses carry the stored date objects.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional, List, Dict

from database import EventTypeEnum, RelationEnum, ToneEnum, LengthEnum
from display import UrgencyTier

EVENT_TYPE_PATTERN = "^(birthday|anniversary|other)$"
RELATION_PATTERN = "^(family|friend|colleague|partner|other)$"
TONE_PATTERN = "^(cheerful|heartfelt|funny|formal)$"
LENGTH_PATTERN = "^(short|medium|long)$"


class EventCreate(BaseModel):
    """Schema for creating a new event.

    event_date is either a full date or month-day only; event_year may be
    supplied separately for month-day input.
    """

    person_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Who the event is about",
        examples=["Alice", "Mom & Dad"]
    )

    event_type: str = Field(
        ...,
        pattern=EVENT_TYPE_PATTERN,
        description="Event type: birthday, anniversary, or other"
    )

    event_date: str = Field(
        ...,
        description="Event date as YYYY-MM-DD, or MM-DD if the year is unknown",
        examples=["1990-06-10", "06-10"]
    )

    event_year: Optional[int] = Field(
        None,
        ge=1,
        le=9999,
        description="Optional year when event_date is MM-DD"
    )

    relation: str = Field(
        ...,
        pattern=RELATION_PATTERN,
        description="Relation: family, friend, colleague, partner, or other"
    )

    notes: Optional[str] = Field(
        None,
        description="Optional notes"
    )

    reminders: Optional[List[int]] = Field(
        None,
        description="Reminder lead times in days (default: 30, 15, 7, 3, 1)",
        examples=[[30, 7, 1]]
    )


class EventUpdate(BaseModel):
    """Schema for updating an existing event.

    All fields are optional - only provided fields will be updated.
    """

    person_name: Optional[str] = Field(None, min_length=1, max_length=200)
    event_type: Optional[str] = Field(None, pattern=EVENT_TYPE_PATTERN)
    event_date: Optional[str] = Field(
        None,
        description="New date as YYYY-MM-DD or MM-DD"
    )
    event_year: Optional[int] = Field(None, ge=1, le=9999)
    relation: Optional[str] = Field(None, pattern=RELATION_PATTERN)
    notes: Optional[str] = Field(None)
    reminders: Optional[List[int]] = Field(None, description="Replacement reminder lead times")


class EventResponse(BaseModel):
    """Schema for stored events."""

    id: int = Field(..., description="Event ID")
    user_id: str = Field(..., description="Owning user")
    person_name: str
    event_type: EventTypeEnum
    event_date: date
    month_day: str = Field(..., description="MM-DD used for yearly recurrence")
    event_year: Optional[int] = None
    has_year: bool
    relation: RelationEnum
    notes: Optional[str] = None
    reminders: List[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        """Pydantic configuration"""
        from_attributes = True  # Enable ORM mode for SQLAlchemy models


class EventSummaryResponse(BaseModel):
    """Derived display facts for an event, relative to today."""

    event_id: Optional[int] = None
    person_name: str
    event_type: str
    relation: Optional[str] = None
    month_day: str
    next_occurrence: date
    days_until: int
    age: Optional[int] = None
    display_text: str
    countdown_text: str
    urgency: UrgencyTier
    reminder_active: bool

    class Config:
        from_attributes = True


class StatsResponse(BaseModel):
    """Aggregate counts for a user's events."""

    total_events: int
    by_type: Dict[str, int]
    birthday_count: int
    anniversary_count: int
    other_count: int
    upcoming_this_week: int
    upcoming_this_month: int


class MessageGenerateRequest(BaseModel):
    """Options for generating a greeting message."""

    tone: str = Field(
        default="cheerful",
        pattern=TONE_PATTERN,
        description="Tone: cheerful, heartfelt, funny, or formal"
    )
    length: str = Field(
        default="medium",
        pattern=LENGTH_PATTERN,
        description="Length: short, medium, or long"
    )


class MessageResponse(BaseModel):
    """Schema for a stored generated message."""

    event_id: int
    tone: ToneEnum
    length: LengthEnum
    message: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
