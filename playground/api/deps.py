"""Shared route dependencies."""

from fastapi import Header, HTTPException

from playground.core.config import get_settings
from playground.core.logging import get_logger

logger = get_logger(__name__)


def origin_allowed(origin: str | None, allowed: list[str]) -> bool:
    """
    Check an Origin header against the allow-list.

    A missing origin is never allowed; an empty allow-list accepts any origin.
    Entries are prefixes, so "https://shop.example" also admits its subpaths.
    """
    if not origin:
        return False
    if not allowed:
        return True
    return any(origin.startswith(prefix) for prefix in allowed)


async def require_allowed_origin(origin: str | None = Header(default=None)) -> str:
    """Reject requests from origins outside ALLOWED_ORIGIN with 403."""
    settings = get_settings()
    if not origin_allowed(origin, settings.allowed_origins):
        logger.warning(f"Rejected request from origin {origin!r}")
        raise HTTPException(status_code=403, detail="Forbidden origin")
    return origin
