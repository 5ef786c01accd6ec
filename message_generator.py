"""Greeting-message generation for events.

Builds a prompt from event details and asks the Gemini generateContent API
for a message. One request per call, no retries; any failure surfaces as
GenerationError so callers can keep the previously stored message.
"""

from typing import Optional

import httpx

from config import settings
from display import ordinal
from errors import GenerationError, ValidationError
from logger_config import setup_logger

logger = setup_logger(__name__, 'generation.log')

TONE_INSTRUCTIONS = {
    "cheerful": "Make it upbeat and enthusiastic.",
    "heartfelt": "Make it warm and sincere.",
    "funny": "Add some light humor appropriate for the relationship.",
    "formal": "Keep it respectful and professional.",
}

LENGTH_INSTRUCTIONS = {
    "short": "Keep it to 1-2 sentences.",
    "medium": "Keep it to 3-4 sentences.",
    "long": "Make it 5-6 sentences with more detail.",
}


def build_prompt(
    person_name: str,
    event_type: str,
    relation: str,
    age: Optional[int],
    tone: str,
    length: str
) -> str:
    """Compose the generation prompt.

    Raises:
        ValidationError: If tone or length is not supported
    """
    event_type = getattr(event_type, "value", event_type)
    relation = getattr(relation, "value", relation)
    tone = getattr(tone, "value", tone)
    length = getattr(length, "value", length)

    if tone not in TONE_INSTRUCTIONS:
        raise ValidationError(f"Unsupported tone '{tone}'. Allowed: {', '.join(TONE_INSTRUCTIONS)}")
    if length not in LENGTH_INSTRUCTIONS:
        raise ValidationError(f"Unsupported length '{length}'. Allowed: {', '.join(LENGTH_INSTRUCTIONS)}")

    prompt = f"Generate a {length} {tone} {event_type} message for {person_name}"

    if age and age > 0:
        if event_type == "birthday":
            prompt += f" who is turning {age}"
        elif event_type == "anniversary":
            prompt += f" celebrating their {ordinal(age)} anniversary"

    prompt += f". They are my {relation}. Keep it appropriate for sending as a personal message."
    prompt += f" {TONE_INSTRUCTIONS[tone]}"
    prompt += f" {LENGTH_INSTRUCTIONS[length]}"
    return prompt


def _extract_text(data: dict) -> str:
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"] or ""
    except (KeyError, IndexError, TypeError):
        return ""


async def generate_greeting_message(
    person_name: str,
    event_type: str,
    relation: str,
    age: Optional[int],
    tone: str,
    length: str,
    client: Optional[httpx.AsyncClient] = None
) -> str:
    """Generate a greeting message via the Gemini API.

    Args:
        person_name: Who the message is for
        event_type: birthday, anniversary or other
        relation: Relation of the person to the user
        age: Age/anniversary count on the next occurrence, or None
        tone: cheerful, heartfelt, funny or formal
        length: short, medium or long
        client: Optional HTTP client (a new one is created if omitted)

    Returns:
        str: Generated message text

    Raises:
        ValidationError: If tone or length is not supported
        GenerationError: If the API is not configured or the call fails
    """
    prompt = build_prompt(person_name, event_type, relation, age, tone, length)

    if not settings.GEMINI_API_KEY:
        raise GenerationError("Message generation is not configured (GEMINI_API_KEY is empty)")

    api_url = f"{settings.GEMINI_API_URL}/models/{settings.GEMINI_MODEL}:generateContent"
    payload = {"contents": [{"parts": [{"text": prompt}]}]}
    headers = {
        "Content-Type": "application/json",
        "X-goog-api-key": settings.GEMINI_API_KEY,
    }

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=settings.GENERATION_TIMEOUT)

    try:
        logger.info(f"Generating {tone}/{length} {getattr(event_type, 'value', event_type)} message")
        response = await client.post(api_url, json=payload, headers=headers)
    except httpx.TimeoutException as e:
        logger.error("Timeout while generating message")
        raise GenerationError("Message generation timed out") from e
    except httpx.RequestError as e:
        logger.error(f"Network error while generating message: {str(e)}")
        raise GenerationError(f"Message generation failed: {str(e)}") from e
    finally:
        if owns_client:
            await client.aclose()

    if response.status_code != 200:
        logger.error(f"Generation API error. Status: {response.status_code}, Response: {response.text}")
        raise GenerationError(f"Generation API error: {response.status_code}")

    try:
        data = response.json()
    except ValueError as e:
        raise GenerationError("Generation API returned invalid JSON") from e

    text = _extract_text(data).strip()
    if not text:
        logger.error("Generation API returned no text")
        raise GenerationError("No text generated")

    return text
