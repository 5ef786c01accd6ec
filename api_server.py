"""FastAPI REST API server for Event Reminder Service.

This module provides HTTP endpoints for managing yearly events, their
derived summaries and statistics, and generated greeting messages.

Authentication happens upstream; the caller's identity arrives in the
X-User-Id header and every query is scoped by it.
"""

from datetime import date
from typing import List, Optional

from fastapi import FastAPI, Depends, Header, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import crud
import schemas
import database
import message_generator
from config import settings
from display import summarize_event
from errors import GenerationError, ValidationError
from event_stats import compute_statistics
from logger_config import setup_logger
from recurrence import calculate_age, local_today

logger = setup_logger(__name__, 'api.log')

# Create FastAPI application
app = FastAPI(
    title="Event Reminder Service API",
    description="Yearly event reminders (birthdays, anniversaries) with generated greeting messages",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

origins = [
    "http://localhost:3000",
    "http://localhost:5173",
]

# Configure CORS for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Invalid input is the caller's problem: 400."""
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def get_current_user(x_user_id: str = Header(..., description="Authenticated user identifier")) -> str:
    """User identity supplied by the authentication layer"""
    if not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing user identity")
    return x_user_id


def get_today() -> date:
    """Today's date in the configured timezone"""
    return local_today(settings.TIMEZONE)


def _get_event_or_404(db: Session, event_id: int, user_id: str):
    event = crud.get_event(db, event_id, user_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@app.get("/")
def root():
    """Root endpoint - service information"""
    return {
        "service": "Event Reminder Service API",
        "version": "1.0.0",
        "status": "healthy",
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "events": "/events"
        }
    }


@app.get("/health")
def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "event_reminder_service",
        "database": settings.DATABASE_URL.split("://")[0],
        "generation_configured": bool(settings.GEMINI_API_KEY)
    }


@app.post("/events", response_model=schemas.EventResponse, status_code=201)
def create_event(
    event: schemas.EventCreate,
    user_id: str = Depends(get_current_user),
    today: date = Depends(get_today),
    db: Session = Depends(database.get_db)
):
    """Create a new event.

    Request body example:
    ```json
    {
        "person_name": "Alice",
        "event_type": "birthday",
        "event_date": "1990-06-10",
        "relation": "friend",
        "reminders": [7, 1]
    }
    ```

    event_date may be "MM-DD" when the year is unknown.
    """
    return crud.create_event(db, user_id, event.model_dump(), today)


@app.get("/events", response_model=List[schemas.EventResponse])
def list_events(
    search: Optional[str] = Query(None, description="Match person name or notes"),
    type: Optional[str] = Query(None, description="Filter by event type (or 'all')"),
    relation: Optional[str] = Query(None, description="Filter by relation (or 'all')"),
    user_id: str = Depends(get_current_user),
    db: Session = Depends(database.get_db)
):
    """List events in calendar order, optionally searched or filtered."""
    if search:
        return crud.search_events(db, user_id, search)
    if type or relation:
        return crud.filter_events(db, user_id, type, relation)
    return crud.get_events_by_user(db, user_id)


@app.get("/events/stats", response_model=schemas.StatsResponse)
def get_event_stats(
    user_id: str = Depends(get_current_user),
    today: date = Depends(get_today),
    db: Session = Depends(database.get_db)
):
    """Counts by type and events coming up this week / this month."""
    stats = compute_statistics(crud.get_events_by_user(db, user_id), today)
    return schemas.StatsResponse(
        total_events=stats.total_events,
        by_type=stats.by_type,
        birthday_count=stats.birthday_count,
        anniversary_count=stats.anniversary_count,
        other_count=stats.other_count,
        upcoming_this_week=stats.upcoming_this_week,
        upcoming_this_month=stats.upcoming_this_month
    )


@app.get("/events/upcoming", response_model=List[schemas.EventSummaryResponse])
def list_upcoming_events(
    days: int = Query(366, ge=0, le=366, description="Only events within this many days"),
    user_id: str = Depends(get_current_user),
    today: date = Depends(get_today),
    db: Session = Depends(database.get_db)
):
    """Event summaries sorted by how soon they occur."""
    summaries = [summarize_event(e, today) for e in crud.get_events_by_user(db, user_id)]
    summaries = [s for s in summaries if s.days_until <= days]
    summaries.sort(key=lambda s: (s.days_until, s.person_name))
    return summaries


@app.get("/events/reminders/today", response_model=List[schemas.EventSummaryResponse])
def list_todays_reminders(
    user_id: str = Depends(get_current_user),
    today: date = Depends(get_today),
    db: Session = Depends(database.get_db)
):
    """Events whose reminder is active today (event day or matching lead time)."""
    summaries = [summarize_event(e, today) for e in crud.get_events_by_user(db, user_id)]
    active = [s for s in summaries if s.reminder_active]
    active.sort(key=lambda s: (s.days_until, s.person_name))
    return active


@app.get("/events/{event_id}", response_model=schemas.EventResponse)
def get_event(
    event_id: int,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(database.get_db)
):
    """Get a specific event by ID."""
    return _get_event_or_404(db, event_id, user_id)


@app.get("/events/{event_id}/summary", response_model=schemas.EventSummaryResponse)
def get_event_summary(
    event_id: int,
    user_id: str = Depends(get_current_user),
    today: date = Depends(get_today),
    db: Session = Depends(database.get_db)
):
    """Display text, countdown, urgency and reminder state for one event."""
    return summarize_event(_get_event_or_404(db, event_id, user_id), today)


@app.put("/events/{event_id}", response_model=schemas.EventResponse)
def update_event(
    event_id: int,
    updates: schemas.EventUpdate,
    user_id: str = Depends(get_current_user),
    today: date = Depends(get_today),
    db: Session = Depends(database.get_db)
):
    """Update an existing event.

    Only provided fields will be updated. A new event_date is normalized the
    same way as on creation.
    """
    event = crud.update_event(db, event_id, user_id, updates.model_dump(exclude_unset=True), today)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@app.delete("/events/{event_id}", status_code=200)
def delete_event(
    event_id: int,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(database.get_db)
):
    """Delete an event and its generated message."""
    if not crud.delete_event(db, event_id, user_id):
        raise HTTPException(status_code=404, detail="Event not found")
    return {"message": "Event deleted successfully", "event_id": event_id}


@app.get("/events/{event_id}/message", response_model=schemas.MessageResponse)
def get_event_message(
    event_id: int,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(database.get_db)
):
    """Get the current generated message for an event."""
    _get_event_or_404(db, event_id, user_id)
    message = crud.get_event_message(db, event_id, user_id)
    if not message:
        raise HTTPException(status_code=404, detail="No message generated for this event")
    return message


@app.post("/events/{event_id}/message", response_model=schemas.MessageResponse)
async def generate_event_message(
    event_id: int,
    options: schemas.MessageGenerateRequest,
    user_id: str = Depends(get_current_user),
    today: date = Depends(get_today),
    db: Session = Depends(database.get_db)
):
    """Generate a greeting message and store it, replacing any previous one.

    If generation fails the stored message is left untouched and 502 is returned.
    """
    # Database calls run in the threadpool; only generation is awaited on the loop
    event = await run_in_threadpool(_get_event_or_404, db, event_id, user_id)
    age = calculate_age(event.event_date, event.has_year, today)

    try:
        text = await message_generator.generate_greeting_message(
            event.person_name,
            event.event_type.value,
            event.relation.value,
            age,
            options.tone,
            options.length
        )
    except GenerationError as e:
        logger.error(f"Generation failed for event {event_id}: {str(e)}")
        raise HTTPException(status_code=502, detail=str(e))

    return await run_in_threadpool(
        crud.save_event_message, db, event_id, user_id, options.tone, options.length, text
    )


@app.delete("/events/{event_id}/message", status_code=200)
def delete_event_message(
    event_id: int,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(database.get_db)
):
    """Delete the generated message for an event."""
    if not crud.delete_event_message(db, event_id, user_id):
        raise HTTPException(status_code=404, detail="Message not found")
    return {"message": "Message deleted successfully", "event_id": event_id}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level="info"
    )
