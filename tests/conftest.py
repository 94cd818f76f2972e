"""Shared test fixtures for the LINE webhook bridge."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.llm import GeminiGenerator
from src.webhook.line import LineRelay, compute_signature

CHANNEL_SECRET = "test-channel-secret"
ACCESS_TOKEN = "test-access-token"


@pytest.fixture
def relay() -> LineRelay:
    return LineRelay(channel_secret=CHANNEL_SECRET, channel_access_token=ACCESS_TOKEN)


@pytest.fixture
def mock_generator() -> MagicMock:
    generator = MagicMock(spec=GeminiGenerator)
    generator.generate = AsyncMock(return_value="generated answer")
    generator.model = "gemini-2.5-flash"
    return generator


@pytest.fixture
def mock_relay() -> MagicMock:
    mock = MagicMock(spec=LineRelay)
    mock.reply_message = AsyncMock(return_value=None)
    return mock


# --- Factory functions for test data ---


def make_text_event(
    text: str = "hello",
    reply_token: str = "abc",
    **kwargs: Any,
) -> dict[str, Any]:
    """Factory for a raw LINE text message event."""
    event: dict[str, Any] = {
        "type": "message",
        "mode": "active",
        "timestamp": 1700000000000,
        "source": {"type": "user", "userId": "U123"},
        "webhookEventId": "01HEVENT",
        "deliveryContext": {"isRedelivery": False},
        "replyToken": reply_token,
        "message": {"id": "1", "type": "text", "text": text},
    }
    event.update(kwargs)
    return event


def make_body(events: list[dict[str, Any]] | None = None) -> bytes:
    payload = {"destination": "Uxxxxxxxx", "events": events or []}
    return json.dumps(payload).encode()


def sign(body: bytes, secret: str = CHANNEL_SECRET) -> str:
    return compute_signature(secret, body)
