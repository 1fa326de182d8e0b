"""OpenAI client utilities for chat replies and image generation."""

import time

from openai import APIError, APIStatusError, AsyncOpenAI

from playground.context.prompt_blocks import IMAGE_PROMPT_PREAMBLE
from playground.core.config import get_settings
from playground.core.errors import ConfigurationError, GenerationError
from playground.core.logging import get_logger

logger = get_logger(__name__)


def get_openai_client() -> AsyncOpenAI:
    """
    Get a configured async OpenAI client.

    Raises:
        ConfigurationError: If OPENAI_API_KEY is not set
    """
    settings = get_settings()
    api_key = (settings.OPENAI_API_KEY or "").strip()
    if not api_key:
        raise ConfigurationError("OPENAI_API_KEY env var is empty")
    # Requests are not retried
    return AsyncOpenAI(api_key=api_key, max_retries=0)


def _generation_error(e: APIError, what: str) -> GenerationError:
    if isinstance(e, APIStatusError):
        return GenerationError(f"{what} API error", status_code=e.status_code, details=e.response.text)
    return GenerationError(f"{what} API error", status_code=502, details=str(e))


async def generate_chat_reply(messages: list[dict], model: str | None = None) -> str:
    """
    Generate a chat reply from an ordered message list.

    Args:
        messages: OpenAI-format messages (system prompt, context, history, user turn)
        model: Model override (defaults to CHAT_MODEL)

    Returns:
        Raw reply text (may be empty)

    Raises:
        ConfigurationError: If the API key is missing
        GenerationError: If the provider returns an error
    """
    settings = get_settings()
    client = get_openai_client()
    model_name = model or settings.CHAT_MODEL

    start = time.time()
    try:
        response = await client.chat.completions.create(
            model=model_name,
            messages=messages,
            temperature=settings.CHAT_TEMPERATURE,
            max_tokens=settings.CHAT_MAX_TOKENS,
        )
    except APIError as e:
        logger.error(f"Chat completion failed: {e}")
        raise _generation_error(e, "Chat") from e

    duration_ms = int((time.time() - start) * 1000)
    logger.info(f"Chat completion from {model_name} in {duration_ms}ms")

    if not response.choices:
        return ""
    return response.choices[0].message.content or ""


def build_image_prompt(prompt: str) -> str:
    """Wrap a user prompt in the kid-safe illustration preamble."""
    return f"{IMAGE_PROMPT_PREAMBLE}\n\n{prompt.strip()}".strip()


async def generate_image(prompt: str) -> str:
    """
    Generate a kid-safe image.

    Args:
        prompt: Raw user prompt

    Returns:
        Base64-encoded PNG data

    Raises:
        ConfigurationError: If the API key is missing
        GenerationError: If the provider errors or returns no image
    """
    settings = get_settings()
    client = get_openai_client()

    try:
        response = await client.images.generate(
            model=settings.IMAGE_MODEL,
            prompt=build_image_prompt(prompt),
            size=settings.IMAGE_SIZE,
        )
    except APIError as e:
        logger.error(f"Image generation failed: {e}")
        raise _generation_error(e, "Image") from e

    image_b64 = response.data[0].b64_json if response.data else None
    if not image_b64:
        raise GenerationError("No image returned", status_code=500)
    return image_b64
