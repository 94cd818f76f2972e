"""Event dispatcher: LINE text message -> Gemini -> LINE reply.

Runs detached from the HTTP response, so it never raises. Each reply token
gets at most one accepted reply: the answer, or the fixed fallback text when
generation or the answer reply fails. Delivery is best-effort with no retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from src.webhook.models import TextMessageEvent, UnhandledEvent, parse_event

if TYPE_CHECKING:
    from src.llm import GeminiGenerator
    from src.webhook.line import LineRelay

logger = logging.getLogger(__name__)

FALLBACK_TEXT = (
    "Sorry! A system error occurred while calling the AI service. "
    "Please try again later."
)


@dataclass
class DispatchSummary:
    replied: int = 0
    fallback: int = 0
    skipped: int = 0
    failed: int = 0


class EventDispatcher:
    """Processes verified webhook events one by one, independently."""

    def __init__(
        self,
        generator: GeminiGenerator,
        relay: LineRelay,
        fallback_text: str = FALLBACK_TEXT,
    ) -> None:
        self._generator = generator
        self._relay = relay
        self._fallback_text = fallback_text

    async def handle_events(self, events: list[Any]) -> DispatchSummary:
        summary = DispatchSummary()
        for raw in events:
            try:
                await self._handle_event(raw, summary)
            except Exception:
                summary.failed += 1
                logger.exception("Unexpected error while handling LINE event")
        logger.info(
            "Dispatched %d event(s): replied=%d fallback=%d skipped=%d failed=%d",
            len(events), summary.replied, summary.fallback,
            summary.skipped, summary.failed,
        )
        return summary

    async def _handle_event(self, raw: Any, summary: DispatchSummary) -> None:
        event = parse_event(raw)
        if isinstance(event, UnhandledEvent):
            summary.skipped += 1
            logger.debug(
                "Skipping event type=%s message_type=%s",
                event.event_type, event.message_type,
            )
            return

        if await self._answer(event):
            summary.replied += 1
        elif await self._send_fallback(event):
            summary.fallback += 1
        else:
            summary.failed += 1

    async def _answer(self, event: TextMessageEvent) -> bool:
        """Generate and send the answer. False means the token is still unused."""
        logger.info(
            "Received user message: %s (event=%s, redelivery=%s)",
            event.text, event.webhook_event_id, event.is_redelivery,
        )
        try:
            answer = await self._generator.generate(event.text)
            await self._relay.reply_message(event.reply_token, answer)
        except Exception:
            logger.exception(
                "Error calling %s or replying to LINE", self._generator.model,
            )
            return False
        return True

    async def _send_fallback(self, event: TextMessageEvent) -> bool:
        try:
            await self._relay.reply_message(event.reply_token, self._fallback_text)
        except Exception:
            logger.exception("Fallback reply failed; not retrying")
            return False
        return True
