"""Chat playground API endpoints."""

import logging
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException

from playground.api.deps import require_allowed_origin
from playground.chains.chat_turn import run_chat_turn
from playground.context.prompt_blocks import GENERATION_FALLBACK_TEXT
from playground.core.config import get_settings
from playground.core.errors import ConfigurationError, GenerationError, KnowledgeBaseError
from playground.core.kb_client import fetch_knowledge_base
from playground.core.llm import generate_chat_reply
from playground.core.logging import get_logger, log_with_context
from playground.core.schemas_chat import ChatRequest, ChatResult

logger = get_logger(__name__)

router = APIRouter()


@router.get("/playground")
async def playground_diagnostics() -> dict[str, Any]:
    """
    Report the configuration this deployment sees.

    Secrets are never returned; the API key is reported by length only.
    """
    settings = get_settings()
    return {
        "ok": True,
        "env": settings.PLAYGROUND_ENV,
        "seenEnvVars": ["OPENAI_API_KEY", "KB_URL", "ALLOWED_ORIGIN"],
        "values": {
            "OPENAI_API_KEY_length": len((settings.OPENAI_API_KEY or "").strip()),
            "KB_URL": settings.KB_URL,
            "ALLOWED_ORIGIN": settings.allowed_origins or None,
        },
    }


@router.post("/playground", response_model=ChatResult)
async def playground_chat(
    request: ChatRequest,
    _origin: str = Depends(require_allowed_origin),
) -> ChatResult:
    """
    Answer one chat turn.

    Deterministic intents (kit overview, lists, project videos, support
    escalation) are answered from the KB; everything else goes to the
    language model with a grounded context.

    Args:
        request: Chat text, prior turns and optional image attachment

    Returns:
        Reply text plus routing debug info
    """
    if request.is_empty:
        raise HTTPException(status_code=400, detail="Message text or image attachment is required")

    settings = get_settings()
    request_id = str(uuid4())
    log_with_context(
        logger,
        logging.INFO,
        "Chat turn received",
        request_id=request_id,
        history_turns=len(request.history),
        has_attachment=request.attachment is not None,
    )

    try:
        if not (settings.OPENAI_API_KEY or "").strip():
            raise ConfigurationError("OPENAI_API_KEY env var is empty")

        kb = await fetch_knowledge_base()
        return await run_chat_turn(request, kb, generate_chat_reply)

    except ConfigurationError as e:
        log_with_context(logger, logging.ERROR, f"Server config error: {e}", request_id=request_id)
        raise HTTPException(
            status_code=500,
            detail={"message": "Server config error", "details": str(e)},
        ) from e
    except KnowledgeBaseError as e:
        raise HTTPException(
            status_code=502,
            detail={"message": str(e), "details": e.details},
        ) from e
    except GenerationError as e:
        raise HTTPException(
            status_code=502,
            detail={"message": "Generation error", "details": e.details, "text": GENERATION_FALLBACK_TEXT},
        ) from e
