"""Data models for LINE webhook events and outbound replies."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

MAX_TEXT_LENGTH = 5000  # LINE Messaging API limit for a text message


class WebhookPayload(BaseModel):
    """Parsed webhook request body. Events stay raw until dispatch."""

    destination: str | None = None
    events: list[Any]


class TextMessageEvent(BaseModel):
    """A user text message; the only event variant that gets a reply."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    reply_token: str = Field(alias="replyToken", min_length=1)
    text: str
    webhook_event_id: str | None = Field(default=None, alias="webhookEventId")
    is_redelivery: bool = False
    source: dict[str, Any] | None = None


class UnhandledEvent(BaseModel):
    """Any other event shape. Skipped on purpose, never an error."""

    model_config = ConfigDict(frozen=True)

    event_type: str | None = None
    message_type: str | None = None


class TextMessage(BaseModel):
    """Outbound text message for the reply API."""

    model_config = ConfigDict(frozen=True)

    type: str = "text"
    text: str

    @classmethod
    def create(cls, text: str) -> TextMessage:
        return cls(text=text[:MAX_TEXT_LENGTH])


LineEvent = TextMessageEvent | UnhandledEvent


def parse_event(raw: Any) -> LineEvent:
    """Classify one raw webhook event.

    Only ``{"type": "message", "message": {"type": "text", ...}}`` with a
    reply token becomes a :class:`TextMessageEvent`. Everything else,
    malformed entries included, is an :class:`UnhandledEvent`.
    """
    if not isinstance(raw, dict):
        return UnhandledEvent()

    event_type = raw.get("type")
    message = raw.get("message")
    message_type = message.get("type") if isinstance(message, dict) else None
    unhandled = UnhandledEvent(
        event_type=event_type if isinstance(event_type, str) else None,
        message_type=message_type if isinstance(message_type, str) else None,
    )

    if event_type != "message" or message_type != "text":
        return unhandled

    reply_token = raw.get("replyToken")
    text = message.get("text")
    if not isinstance(reply_token, str) or not reply_token or not isinstance(text, str):
        return unhandled

    delivery = raw.get("deliveryContext")
    is_redelivery = bool(delivery.get("isRedelivery")) if isinstance(delivery, dict) else False
    event_id = raw.get("webhookEventId")
    source = raw.get("source")

    return TextMessageEvent(
        reply_token=reply_token,
        text=text,
        webhook_event_id=event_id if isinstance(event_id, str) else None,
        is_redelivery=is_redelivery,
        source=source if isinstance(source, dict) else None,
    )
