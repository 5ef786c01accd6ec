"""Background Worker for Event Reminder Service.

This module implements a background worker that checks which events have a
reminder active today and posts a notification for each to a webhook.

The worker:
- Runs continuously, checking every WORKER_CHECK_INTERVAL seconds
- Picks events whose reminder fires today and that were not notified today
- POSTs a JSON payload to NOTIFICATION_WEBHOOK_URL (retry with backoff)
- Marks the event as notified for today on success
- Only logs the reminder when no webhook is configured
"""

import asyncio
import signal
import sys
from datetime import date
from typing import Optional

import httpx

import crud
import database
from config import settings
from display import summarize_event
from logger_config import setup_logger
from recurrence import local_today

# Configure logging
logger = setup_logger(__name__, 'worker.log')

# Global flag for graceful shutdown
shutdown_requested = False


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    global shutdown_requested
    logger.info(f"Received signal {signum}, initiating graceful shutdown...")
    shutdown_requested = True


def build_notification(event, today: date) -> dict:
    """Payload describing today's reminder for an event."""
    summary = summarize_event(event, today)
    return {
        "user_id": event.user_id,
        "event_id": event.id,
        "person_name": event.person_name,
        "event_type": summary.event_type,
        "next_occurrence": summary.next_occurrence.isoformat(),
        "days_until": summary.days_until,
        "age": summary.age,
        "urgency": summary.urgency.value,
        "message": summary.display_text,
    }


async def send_notification(client: httpx.AsyncClient, payload: dict) -> bool:
    """POST one notification to the webhook.

    Returns:
        bool: True if the webhook accepted it (2xx), False otherwise
    """
    try:
        response = await client.post(settings.NOTIFICATION_WEBHOOK_URL, json=payload)
    except httpx.TimeoutException:
        logger.error(f"Timeout while notifying for event {payload['event_id']}")
        return False
    except httpx.RequestError as e:
        logger.error(f"Network error while notifying for event {payload['event_id']}: {str(e)}")
        return False

    if response.is_success:
        return True

    logger.error(
        f"Webhook rejected notification for event {payload['event_id']}. "
        f"Status: {response.status_code}, Response: {response.text}"
    )
    return False


async def deliver_with_retry(client: httpx.AsyncClient, payload: dict) -> bool:
    """Send a notification with exponential backoff (2s, 4s, ...) between attempts."""
    max_retries = max(1, settings.NOTIFICATION_MAX_RETRIES)
    for attempt in range(1, max_retries + 1):
        if await send_notification(client, payload):
            logger.info(f"Notified for event {payload['event_id']} on attempt {attempt}")
            return True

        logger.warning(f"Attempt {attempt}/{max_retries} failed for event {payload['event_id']}")
        if attempt < max_retries:
            await asyncio.sleep(2 ** attempt)

    return False


async def process_due_reminders(
    today: Optional[date] = None,
    client: Optional[httpx.AsyncClient] = None
) -> int:
    """Notify for every event whose reminder fires today.

    Args:
        today: Reference day (default: today in the configured timezone)
        client: Optional HTTP client (a new one is created if omitted)

    Returns:
        int: Number of events marked as notified
    """
    today = today or local_today(settings.TIMEZONE)
    db = database.SessionLocal()
    owns_client = client is None and bool(settings.NOTIFICATION_WEBHOOK_URL)
    if owns_client:
        client = httpx.AsyncClient(timeout=30.0)

    notified = 0
    try:
        events = crud.get_events_due_for_notification(db, today)
        if not events:
            logger.debug("No reminders due today")
            return 0

        logger.info(f"Found {len(events)} event(s) with a reminder today ({today.isoformat()})")

        for event in events:
            payload = build_notification(event, today)

            if not settings.NOTIFICATION_WEBHOOK_URL:
                logger.info(f"⏰ Reminder for user {event.user_id}: {payload['message']}")
                delivered = True
            else:
                delivered = await deliver_with_retry(client, payload)

            if delivered:
                crud.mark_event_notified(db, event, today)
                notified += 1
            else:
                # Left unmarked so the next iteration tries again today
                logger.error(f"Giving up on event {event.id} for this iteration")

        return notified
    finally:
        if owns_client:
            await client.aclose()
        db.close()


async def worker_loop():
    """Main worker loop that runs continuously."""
    logger.info("Background worker started")
    logger.info(f"Worker enabled: {settings.WORKER_ENABLED}")
    logger.info(f"Check interval: {settings.WORKER_CHECK_INTERVAL} seconds")
    logger.info(f"Notification webhook: {settings.NOTIFICATION_WEBHOOK_URL or '(log only)'}")

    if not settings.WORKER_ENABLED:
        logger.warning("Worker is disabled in configuration. Exiting.")
        return

    iteration = 0
    while not shutdown_requested:
        try:
            iteration += 1
            logger.debug(f"Worker iteration {iteration} started")

            await process_due_reminders()

            # Sleep in 1-second steps to allow quick shutdown
            for _ in range(settings.WORKER_CHECK_INTERVAL):
                if shutdown_requested:
                    break
                await asyncio.sleep(1)

        except Exception as e:
            logger.error(f"Error in worker loop iteration {iteration}: {str(e)}", exc_info=True)
            await asyncio.sleep(5)

    logger.info("Background worker shutting down gracefully")


def main():
    """Main entry point for the background worker."""
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    logger.info("=" * 60)
    logger.info("Event Reminder Service - Background Worker")
    logger.info("=" * 60)

    try:
        asyncio.run(worker_loop())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.error(f"Fatal error in background worker: {str(e)}", exc_info=True)
        sys.exit(1)

    logger.info("Background worker stopped")
    sys.exit(0)


if __name__ == "__main__":
    main()
