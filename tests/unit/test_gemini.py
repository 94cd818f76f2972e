"""Tests for the Gemini generator wrapper."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.llm.gemini import GeminiGenerator, GenerationError


def _make_client(text: str | None = "answer") -> MagicMock:
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=MagicMock(text=text))
    return client


class TestGeminiGenerator:
    @pytest.mark.asyncio
    async def test_single_turn_call(self) -> None:
        client = _make_client("hi there")
        generator = GeminiGenerator(client=client, model="gemini-2.5-flash")

        assert await generator.generate("hello") == "hi there"
        client.aio.models.generate_content.assert_awaited_once_with(
            model="gemini-2.5-flash", contents="hello",
        )

    @pytest.mark.asyncio
    async def test_no_history_between_calls(self) -> None:
        client = _make_client()
        generator = GeminiGenerator(client=client)
        await generator.generate("first")
        await generator.generate("second")
        last = client.aio.models.generate_content.await_args
        assert last.kwargs["contents"] == "second"

    @pytest.mark.asyncio
    async def test_sdk_error_wrapped(self) -> None:
        client = _make_client()
        client.aio.models.generate_content.side_effect = RuntimeError("quota")
        generator = GeminiGenerator(client=client)
        with pytest.raises(GenerationError, match="quota"):
            await generator.generate("hello")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", [None, ""])
    async def test_empty_response_raises(self, text: str | None) -> None:
        generator = GeminiGenerator(client=_make_client(text))
        with pytest.raises(GenerationError, match="no text"):
            await generator.generate("hello")

    def test_default_model(self) -> None:
        assert GeminiGenerator(client=_make_client()).model == "gemini-2.5-flash"

    def test_builds_client_from_api_key(self) -> None:
        with patch("src.llm.gemini.genai.Client") as mock_cls:
            GeminiGenerator(api_key="key-123")
        mock_cls.assert_called_once_with(api_key="key-123")
