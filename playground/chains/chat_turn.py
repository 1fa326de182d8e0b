"""Chat turn orchestration.

Flow: build indexes → classify + detect → deterministic short-circuit →
history fallback → support check → grounded context → generator.
Every step runs sequentially; the only awaits are the generator call.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from playground.chains import deterministic
from playground.context.entity_detector import detect_component, detect_project
from playground.context.grounded_context import assemble, summarize_components, summarize_projects
from playground.context.history_resolver import fill_from_history
from playground.context.intent_classifier import classify
from playground.context.models import DetectedEntities, IntentTag
from playground.context.prompt_blocks import GENERATION_FALLBACK_TEXT, SYSTEM_PROMPT
from playground.core.config import get_settings
from playground.core.knowledge_index import build_indexes
from playground.core.logging import get_logger, log_with_context
from playground.core.schemas_chat import ChatDebug, ChatRequest, ChatResult, ChatTurn
from playground.core.schemas_kb import KnowledgeIndexes
from playground.core.support_escalation import (
    build_support_message,
    detect_support_failure,
    should_escalate,
)
from playground.core.text_cleanup import clean_reply

logger = get_logger(__name__)

Generator = Callable[[list[dict]], Awaitable[str]]

DEFAULT_IMAGE_QUESTION = "What is in this picture?"


def _result(text: str, entities: DetectedEntities, intent: IntentTag, mode: str) -> ChatResult:
    kb_mode = "generative" if mode == "generative" else "deterministic"
    log_with_context(
        logger,
        logging.INFO,
        "Chat turn routed",
        intent=intent.value,
        mode=mode,
        project=entities.project,
        component=entities.component,
    )
    return ChatResult(
        text=text,
        debug=ChatDebug(
            detected_project=entities.project,
            detected_component=entities.component,
            intent=intent.value,
            mode=mode,
            kb_mode=kb_mode,
        ),
    )


def trim_history(history: list[ChatTurn], max_turns: int) -> list[ChatTurn]:
    """Most recent non-empty turns, oldest first."""
    turns = [t for t in history if t.content and t.content.strip()]
    if max_turns <= 0:
        return []
    return turns[-max_turns:]


def build_messages(
    context: str,
    request: ChatRequest,
    max_history_turns: int,
) -> list[dict]:
    """Ordered messages: system prompt, grounded context, recent history, user turn."""
    messages: list[dict] = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "system", "content": f"Kit context:\n\n{context}"},
    ]
    for turn in trim_history(request.history, max_history_turns):
        messages.append({"role": turn.role, "content": turn.content})

    text = request.text.strip()
    if request.attachment is not None:
        messages.append({
            "role": "user",
            "content": [
                {"type": "text", "text": text or DEFAULT_IMAGE_QUESTION},
                {"type": "image_url", "image_url": {"url": request.attachment.as_data_url()}},
            ],
        })
    else:
        messages.append({"role": "user", "content": text})
    return messages


def _deterministic_reply(
    intent: IntentTag,
    entities: DetectedEntities,
    request: ChatRequest,
    indexes: KnowledgeIndexes,
) -> tuple[str, str, DetectedEntities]:
    """Return (text, mode, entities) for an intent answered from the KB."""
    if intent == IntentTag.KIT_OVERVIEW:
        return deterministic.kit_overview_reply(indexes), "kit_overview", entities
    if intent == IntentTag.COMPONENTS_LIST:
        return deterministic.components_list_reply(indexes), "components_list", entities
    if intent == IntentTag.LIST_PROJECTS:
        return deterministic.projects_list_reply(indexes), "projects_list", entities

    # Project videos
    if entities.project is None:
        entities = fill_from_history(
            entities, request.history, indexes.project_names, indexes.component_index
        )
    if entities.project is None:
        return deterministic.clarify_project_reply(), "clarify_project", entities
    return deterministic.project_videos_reply(indexes, entities.project), "project_videos", entities


async def run_chat_turn(
    request: ChatRequest,
    kb: Any,
    generate: Generator,
    max_history_turns: int | None = None,
) -> ChatResult:
    """
    Answer one chat turn.

    Args:
        request: Validated chat request (text and/or attachment present)
        kb: Parsed KB document for this request
        generate: Async text generator taking OpenAI-format messages
        max_history_turns: History turns forwarded to the generator
            (defaults to MAX_HISTORY_TURNS)

    Returns:
        ChatResult with reply text and routing debug info

    Raises:
        GenerationError: If the generator fails
    """
    if max_history_turns is None:
        max_history_turns = get_settings().MAX_HISTORY_TURNS

    indexes = build_indexes(kb)
    text = request.text.strip()

    intent = classify(text, indexes.project_names, indexes.component_index)
    entities = DetectedEntities(
        project=detect_project(text, indexes.project_names),
        component=detect_component(text, indexes.component_index),
    )

    if intent.is_deterministic:
        reply, mode, entities = _deterministic_reply(intent, entities, request, indexes)
        return _result(reply, entities, intent, mode)

    entities = fill_from_history(entities, request.history, indexes.project_names, indexes.component_index)
    project_block = indexes.project_blocks.get(entities.project, "") if entities.project else ""

    reason = detect_support_failure(text, entities.project, project_block, entities.component)
    if should_escalate(reason, indexes.support_config):
        return _result(build_support_message(reason, indexes.support_config), entities, intent, "support")
    if reason is not None:
        logger.debug(f"Support reason {reason.value} not configured for escalation")

    context = assemble(
        entities.project,
        project_block,
        indexes.lesson_index,
        indexes.pin_text,
        indexes.safety_text,
        indexes.kit_overview,
        summarize_components(indexes.component_index),
        summarize_projects(indexes.project_names, entities.project),
        intent,
        detected_component=indexes.component_index.get(entities.component) if entities.component else None,
        user_text=text,
    )

    raw_reply = await generate(build_messages(context, request, max_history_turns))
    reply = clean_reply(raw_reply) or GENERATION_FALLBACK_TEXT
    return _result(reply, entities, intent, "generative")
