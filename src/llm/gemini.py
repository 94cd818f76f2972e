"""Single-turn text generation against Gemini via the google-genai SDK."""

from __future__ import annotations

import logging

from google import genai

from src.config import DEFAULT_GEMINI_MODEL

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when the model call fails or returns no usable text."""


class GeminiGenerator:
    """Wraps one long-lived genai client. No conversation state is kept."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_GEMINI_MODEL,
        client: genai.Client | None = None,
    ) -> None:
        self._client = client or genai.Client(api_key=api_key)
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    async def generate(self, text: str) -> str:
        """Return the model's answer for ``text`` with no prior context."""
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=text,
            )
            answer = response.text
        except Exception as exc:  # SDK raises from both genai.errors and the transport
            raise GenerationError(f"{self._model} call failed: {exc}") from exc

        if not answer:
            raise GenerationError(f"{self._model} returned no text")
        return answer
