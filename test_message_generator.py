"""Tests for greeting-message generation."""

import json

import httpx
import pytest

import message_generator
from config import settings
from errors import GenerationError, ValidationError


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _gemini_reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_birthday_prompt_mentions_age():
    prompt = message_generator.build_prompt("Alice", "birthday", "friend", 34, "cheerful", "short")

    assert prompt.startswith("Generate a short cheerful birthday message for Alice who is turning 34.")
    assert "They are my friend." in prompt
    assert "upbeat and enthusiastic" in prompt
    assert "1-2 sentences" in prompt


def test_anniversary_prompt_uses_ordinal():
    prompt = message_generator.build_prompt("Mom & Dad", "anniversary", "family", 33, "heartfelt", "long")

    assert "celebrating their 33rd anniversary" in prompt
    assert "warm and sincere" in prompt
    assert "5-6 sentences" in prompt


def test_prompt_without_age():
    prompt = message_generator.build_prompt("Bob", "birthday", "colleague", None, "formal", "medium")

    assert "turning" not in prompt
    assert "respectful and professional" in prompt


def test_prompt_rejects_unknown_tone_and_length():
    with pytest.raises(ValidationError):
        message_generator.build_prompt("Bob", "birthday", "friend", None, "sarcastic", "short")
    with pytest.raises(ValidationError):
        message_generator.build_prompt("Bob", "birthday", "friend", None, "funny", "epic")


@pytest.mark.asyncio
async def test_generate_returns_trimmed_text():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers["X-goog-api-key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_gemini_reply("  Happy birthday, Alice!\n"))

    async with _client(handler) as client:
        text = await message_generator.generate_greeting_message(
            "Alice", "birthday", "friend", 34, "cheerful", "short", client=client
        )

    assert text == "Happy birthday, Alice!"
    assert seen["url"].endswith(f"/models/{settings.GEMINI_MODEL}:generateContent")
    assert seen["key"] == settings.GEMINI_API_KEY
    assert "turning 34" in seen["body"]["contents"][0]["parts"][0]["text"]


@pytest.mark.asyncio
async def test_api_error_raises_generation_error():
    async with _client(lambda request: httpx.Response(429, json={"error": "quota"})) as client:
        with pytest.raises(GenerationError):
            await message_generator.generate_greeting_message(
                "Alice", "birthday", "friend", None, "cheerful", "short", client=client
            )


@pytest.mark.asyncio
async def test_empty_candidates_raise_generation_error():
    async with _client(lambda request: httpx.Response(200, json={"candidates": []})) as client:
        with pytest.raises(GenerationError):
            await message_generator.generate_greeting_message(
                "Alice", "birthday", "friend", None, "cheerful", "short", client=client
            )


@pytest.mark.asyncio
async def test_network_error_raises_generation_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(GenerationError):
            await message_generator.generate_greeting_message(
                "Alice", "birthday", "friend", None, "cheerful", "short", client=client
            )


@pytest.mark.asyncio
async def test_missing_api_key_raises_generation_error(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "")

    with pytest.raises(GenerationError):
        await message_generator.generate_greeting_message(
            "Alice", "birthday", "friend", None, "cheerful", "short"
        )


@pytest.mark.asyncio
async def test_timeout_raises_generation_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    async with _client(handler) as client:
        with pytest.raises(GenerationError, match="timed out"):
            await message_generator.generate_greeting_message(
                "Alice", "birthday", "friend", None, "cheerful", "short", client=client
            )
