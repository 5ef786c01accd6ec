"""MCP Server for Event Reminder Service.

This module provides MCP tools for AI agents to manage yearly events.
Uses the same database as the REST API for data consistency.

Transport Support:
- stdio: Standard input/output (local process communication)
- sse: Server-Sent Events over HTTP (network access)
"""

from mcp.server.fastmcp import FastMCP
from typing import List
import os

import crud
import database
from config import settings
from display import summarize_event
from errors import ValidationError
from event_stats import compute_statistics
from logger_config import setup_logger
from recurrence import local_today

logger = setup_logger(__name__, 'mcp.log')
logger.info("MCP Server initialized")

# Create FastMCP server with host and port from settings
mcp = FastMCP(
    "EventReminderService",
    host=settings.MCP_HOST,
    port=settings.MCP_PORT
)


def _today():
    return local_today(settings.TIMEZONE)


def _format_summary(summary) -> str:
    line = f"\n• {summary.display_text}\n  ID: {summary.event_id}\n  Date: {summary.next_occurrence.isoformat()}"
    if summary.reminder_active:
        line += "\n  ⏰ Reminder active today"
    return line


@mcp.tool()
def add_event(
    user_id: str,
    person_name: str,
    event_type: str,
    event_date: str,
    relation: str,
    event_year: int = None,
    notes: str = None,
    reminders: List[int] = None
) -> str:
    """Add a yearly event (birthday, anniversary, other) for a user.

    Args:
        user_id: User identifier
        person_name: Who the event is about
        event_type: "birthday", "anniversary", or "other"
        event_date: "YYYY-MM-DD", or "MM-DD" if the year is unknown
        relation: "family", "friend", "colleague", "partner", or "other"
        event_year: Optional year when event_date is "MM-DD"
        notes: Optional notes
        reminders: Optional reminder lead times in days (default 30, 15, 7, 3, 1)

    Returns:
        Success message with event ID, or error message
    """
    db = database.SessionLocal()
    try:
        logger.info(f"📝 Adding event: {person_name} | {event_type} | {event_date}")
        event = crud.create_event(db, user_id, {
            'person_name': person_name,
            'event_type': event_type,
            'event_date': event_date,
            'relation': relation,
            'event_year': event_year,
            'notes': notes,
            'reminders': reminders,
        }, _today())
        summary = summarize_event(event, _today())
        return (
            f"✓ Event added successfully!\n"
            f"ID: {event.id}\n"
            f"{summary.display_text}\n"
            f"Reminders: {', '.join(str(d) for d in event.reminders) or 'none'} day(s) before"
        )
    except ValidationError as e:
        return f"✗ Error adding event: {str(e)}"
    finally:
        db.close()


@mcp.tool()
def list_events(user_id: str, event_type: str = None, relation: str = None) -> str:
    """List a user's events in calendar order.

    Args:
        user_id: User identifier
        event_type: Optional filter - "birthday", "anniversary", or "other"
        relation: Optional filter - "family", "friend", "colleague", "partner", or "other"

    Returns:
        Formatted list of events or message if none found
    """
    db = database.SessionLocal()
    try:
        events = crud.filter_events(db, user_id, event_type, relation)
        if not events:
            return "No events found."

        result = [f"Found {len(events)} event(s):\n"]
        for e in events:
            year_text = str(e.event_year) if e.has_year else "year unknown"
            result.append(
                f"\n• {e.person_name} - {e.event_type.value} ({e.relation.value})\n"
                f"  ID: {e.id}\n"
                f"  Date: {e.month_day} ({year_text})"
            )
            if e.notes:
                result.append(f"  Notes: {e.notes}")
        return "\n".join(result)
    except ValidationError as e:
        return f"✗ Error listing events: {str(e)}"
    finally:
        db.close()


@mcp.tool()
def upcoming_events(user_id: str, days: int = 30) -> str:
    """List events occurring within the next `days` days, soonest first.

    Args:
        user_id: User identifier
        days: Window size in days (default: 30)

    Returns:
        Formatted list of upcoming events
    """
    db = database.SessionLocal()
    try:
        today = _today()
        summaries = [summarize_event(e, today) for e in crud.get_events_by_user(db, user_id)]
        summaries = sorted(
            (s for s in summaries if s.days_until <= days),
            key=lambda s: (s.days_until, s.person_name)
        )
        if not summaries:
            return f"No events in the next {days} day(s)."

        result = [f"🗓 {len(summaries)} event(s) in the next {days} day(s):\n"]
        result.extend(_format_summary(s) for s in summaries)
        return "\n".join(result)
    finally:
        db.close()


@mcp.tool()
def check_todays_reminders(user_id: str) -> str:
    """Check which events have a reminder active today.

    Args:
        user_id: User identifier

    Returns:
        Events that occur today or whose reminder lead time matches today
    """
    db = database.SessionLocal()
    try:
        today = _today()
        active = [
            s for s in (summarize_event(e, today) for e in crud.get_events_by_user(db, user_id))
            if s.reminder_active
        ]
        if not active:
            return "No reminders today. ✓"

        active.sort(key=lambda s: s.days_until)
        result = [f"⏰ {len(active)} reminder(s) today:\n"]
        result.extend(_format_summary(s) for s in active)
        return "\n".join(result)
    finally:
        db.close()


@mcp.tool()
def get_event_stats(user_id: str) -> str:
    """Get event counts by type and for this week / this month.

    Args:
        user_id: User identifier

    Returns:
        Formatted statistics
    """
    db = database.SessionLocal()
    try:
        stats = compute_statistics(crud.get_events_by_user(db, user_id), _today())
        return (
            f"Event Statistics:\n"
            f"━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━\n"
            f"Total: {stats.total_events}\n"
            f"Birthdays: {stats.birthday_count}\n"
            f"Anniversaries: {stats.anniversary_count}\n"
            f"Other: {stats.other_count}\n"
            f"This week: {stats.upcoming_this_week}\n"
            f"This month: {stats.upcoming_this_month}"
        )
    finally:
        db.close()


@mcp.tool()
def delete_event(event_id: int, user_id: str) -> str:
    """Delete an event.

    Args:
        event_id: Event ID
        user_id: User identifier

    Returns:
        Success or error message
    """
    db = database.SessionLocal()
    try:
        if crud.delete_event(db, event_id, user_id):
            return f"✓ Event {event_id} deleted successfully."
        return "✗ Event not found."
    finally:
        db.close()


if __name__ == "__main__":
    # Get transport from environment or config
    transport = os.getenv("MCP_TRANSPORT", settings.MCP_TRANSPORT).lower()

    if transport == "sse":
        host = settings.MCP_HOST
        port = settings.MCP_PORT

        print(f"Starting MCP server with SSE transport on {host}:{port}")
        print(f"SSE endpoint: http://{host}:{port}/sse")

        mcp.run(transport="sse")
    else:
        print("Starting MCP server with stdio transport")
        mcp.run(transport="stdio")
