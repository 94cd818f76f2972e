"""LINE Messaging API webhook relay.

Handles LINE webhook requests: signature verification, payload parsing,
and reply delivery through the reply API.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging

import httpx
from pydantic import ValidationError

from src.config import DEFAULT_LINE_API_BASE
from src.webhook.models import TextMessage, WebhookPayload

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-line-signature"


class SignatureVerificationError(Exception):
    """Raised when an inbound request fails signature or body validation."""


class LineReplyError(Exception):
    """Raised when the reply API call fails."""


def compute_signature(channel_secret: str, body: bytes) -> str:
    """Base64-encoded HMAC-SHA256 of the raw body, as LINE signs it."""
    digest = hmac.new(channel_secret.encode(), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


class LineRelay:
    """Handles LINE webhook verification and replies.

    Built once per process; holds only read-only credentials and is safe to
    share across concurrent requests.
    """

    def __init__(
        self,
        channel_secret: str,
        channel_access_token: str,
        api_base: str = DEFAULT_LINE_API_BASE,
        timeout: float = 10.0,
    ) -> None:
        self._channel_secret = channel_secret
        self._channel_access_token = channel_access_token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    def verify_signature(self, headers: dict[str, str], body: bytes) -> None:
        """Check ``x-line-signature`` against the raw body.

        Raises SignatureVerificationError when the header is missing or does
        not match. Comparison is constant-time.
        """
        signature = headers.get(SIGNATURE_HEADER, "")
        if not signature:
            raise SignatureVerificationError("no signature")

        expected = compute_signature(self._channel_secret, body)
        if not hmac.compare_digest(signature.encode(), expected.encode()):
            raise SignatureVerificationError("signature validation failed")

    def parse_payload(self, body: bytes) -> WebhookPayload:
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SignatureVerificationError(f"invalid JSON body: {exc}") from exc

        if not isinstance(data, dict):
            raise SignatureVerificationError("request body must be a JSON object")
        try:
            return WebhookPayload.model_validate(data)
        except ValidationError as exc:
            raise SignatureVerificationError(
                f"invalid webhook body: {exc.error_count()} validation error(s)"
            ) from exc

    async def reply_message(self, reply_token: str, text: str) -> None:
        """Send one text reply addressed to ``reply_token``.

        No retry: a reply token is single-use and short-lived.
        """
        url = f"{self._api_base}/v2/bot/message/reply"
        payload = {
            "replyToken": reply_token,
            "messages": [TextMessage.create(text).model_dump()],
        }
        headers = {"Authorization": f"Bearer {self._channel_access_token}"}

        try:
            async with httpx.AsyncClient(verify=True) as client:
                resp = await client.post(
                    url, json=payload, headers=headers, timeout=self._timeout,
                )
        except httpx.HTTPError as exc:
            raise LineReplyError(f"reply request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise LineReplyError(
                f"reply API returned {resp.status_code}: {resp.text}"
            )
