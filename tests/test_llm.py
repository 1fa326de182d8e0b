"""Tests for the OpenAI chat and image helpers (client mocked)."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from openai import APIStatusError

from playground.context.prompt_blocks import IMAGE_PROMPT_PREAMBLE
from playground.core.errors import ConfigurationError, GenerationError
from playground.core.llm import (
    build_image_prompt,
    generate_chat_reply,
    generate_image,
    get_openai_client,
)


def _status_error(status: int, body: str) -> APIStatusError:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status, request=request, text=body)
    return APIStatusError("upstream error", response=response, body=None)


def _chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=_chat_response("Hi there!"))
    client.images.generate = AsyncMock(return_value=SimpleNamespace(data=[SimpleNamespace(b64_json="aW1n")]))
    with patch("playground.core.llm.get_openai_client", return_value=client):
        yield client


def test_missing_key_raises(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", " ")
    with pytest.raises(ConfigurationError):
        get_openai_client()


def test_client_does_not_retry():
    assert get_openai_client().max_retries == 0


class TestChatReply:
    @pytest.mark.asyncio
    async def test_uses_configured_model(self, mock_client):
        messages = [{"role": "user", "content": "hi"}]
        reply = await generate_chat_reply(messages)
        assert reply == "Hi there!"
        kwargs = mock_client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"] == messages
        assert kwargs["temperature"] == 0.4
        assert kwargs["max_tokens"] == 700

    @pytest.mark.asyncio
    async def test_model_override(self, mock_client):
        await generate_chat_reply([], model="gpt-4o")
        assert mock_client.chat.completions.create.await_args.kwargs["model"] == "gpt-4o"

    @pytest.mark.asyncio
    async def test_empty_content(self, mock_client):
        mock_client.chat.completions.create.return_value = _chat_response(None)
        assert await generate_chat_reply([]) == ""

    @pytest.mark.asyncio
    async def test_status_error(self, mock_client):
        mock_client.chat.completions.create.side_effect = _status_error(429, "rate limited " * 100)
        with pytest.raises(GenerationError) as exc_info:
            await generate_chat_reply([])
        assert exc_info.value.status_code == 429
        assert exc_info.value.details.startswith("rate limited")
        assert len(exc_info.value.details) == 500


class TestImage:
    def test_prompt_wrapper(self):
        prompt = build_image_prompt("  a happy robot ")
        assert prompt.startswith(IMAGE_PROMPT_PREAMBLE)
        assert prompt.endswith("\n\na happy robot")

    @pytest.mark.asyncio
    async def test_generate(self, mock_client):
        assert await generate_image("a happy robot") == "aW1n"
        kwargs = mock_client.images.generate.await_args.kwargs
        assert kwargs["model"] == "gpt-image-1"
        assert kwargs["size"] == "1024x1024"
        assert kwargs["prompt"].endswith("a happy robot")

    @pytest.mark.asyncio
    async def test_no_image(self, mock_client):
        mock_client.images.generate.return_value = SimpleNamespace(data=[])
        with pytest.raises(GenerationError) as exc_info:
            await generate_image("a happy robot")
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_status_error(self, mock_client):
        mock_client.images.generate.side_effect = _status_error(400, "content policy")
        with pytest.raises(GenerationError) as exc_info:
            await generate_image("a happy robot")
        assert exc_info.value.status_code == 400
        assert exc_info.value.details == "content policy"
