"""FastAPI application exposing the LINE webhook endpoint."""

from __future__ import annotations

import logging

from fastapi import BackgroundTasks, FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from src.config import Settings
from src.llm import GeminiGenerator
from src.webhook.dispatcher import EventDispatcher
from src.webhook.line import LineRelay, SignatureVerificationError

logger = logging.getLogger(__name__)

VERIFICATION_FAILED_PREFIX = "LINE Signature Verification Failed:"


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = Settings.from_env()
    relay = LineRelay(
        channel_secret=settings.channel_secret,
        channel_access_token=settings.channel_access_token,
        api_base=settings.line_api_base,
        timeout=settings.line_reply_timeout,
    )
    generator = GeminiGenerator(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
    )
    dispatcher = EventDispatcher(generator=generator, relay=relay)
    return create_app(relay, dispatcher, webhook_path=settings.webhook_path)


def create_app(
    relay: LineRelay,
    dispatcher: EventDispatcher,
    webhook_path: str = "/",
) -> FastAPI:
    """Create the webhook app around two long-lived clients."""
    app = FastAPI(docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(webhook_path)
    async def line_webhook(request: Request, background_tasks: BackgroundTasks) -> Response:
        body = await request.body()

        # Verification completes before any downstream work is scheduled
        try:
            relay.verify_signature(dict(request.headers), body)
            payload = relay.parse_payload(body)
        except SignatureVerificationError as exc:
            message = f"{VERIFICATION_FAILED_PREFIX}{exc}\n"
            logger.warning(message.rstrip())
            return PlainTextResponse(message, status_code=400)

        logger.info(
            "Signature verified; %d event(s) for destination %s",
            len(payload.events), payload.destination,
        )
        # Runs after the 200 is sent; its errors stay inside the dispatcher
        if payload.events:
            background_tasks.add_task(dispatcher.handle_events, payload.events)
        return PlainTextResponse("OK", status_code=200)

    return app
