"""Knowledge base fetch.

The KB is fetched on every request and never cached, so concurrent requests
may see different snapshots.
"""

import json
from typing import Any

import httpx

from playground.core.config import get_settings
from playground.core.errors import ConfigurationError, KnowledgeBaseError
from playground.core.logging import get_logger

logger = get_logger(__name__)


async def fetch_knowledge_base(url: str | None = None, timeout: float | None = None) -> Any:
    """
    Fetch and parse the KB JSON document.

    Args:
        url: KB location (defaults to KB_URL setting)
        timeout: Request timeout in seconds (defaults to KB_FETCH_TIMEOUT; None waits indefinitely)

    Returns:
        Parsed JSON document

    Raises:
        ConfigurationError: If no KB URL is configured
        KnowledgeBaseError: On transport failure, non-200 status or invalid JSON
    """
    settings = get_settings()
    kb_url = (url or settings.KB_URL or "").strip()
    if not kb_url:
        raise ConfigurationError("KB_URL env var is empty")

    request_timeout = timeout if timeout is not None else settings.KB_FETCH_TIMEOUT

    try:
        async with httpx.AsyncClient(timeout=request_timeout) as client:
            response = await client.get(kb_url, headers={"Accept": "application/json"})
    except httpx.HTTPError as e:
        logger.error(f"KB fetch failed for {kb_url}: {e}")
        raise KnowledgeBaseError("Knowledge base fetch failed", details=str(e)) from e

    if response.status_code != 200:
        logger.error(f"KB fetch returned {response.status_code} for {kb_url}")
        raise KnowledgeBaseError(
            f"Knowledge base fetch returned HTTP {response.status_code}",
            details=response.text,
        )

    try:
        document = response.json()
    except (json.JSONDecodeError, ValueError) as e:
        logger.error(f"KB document is not valid JSON: {e}")
        raise KnowledgeBaseError("Knowledge base is not valid JSON", details=str(e)) from e

    logger.debug(f"Fetched KB from {kb_url} ({len(response.content)} bytes)")
    return document
