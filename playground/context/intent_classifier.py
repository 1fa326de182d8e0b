"""Rule-based intent classification for chat turns.

Rules are evaluated in a fixed precedence order and the first match wins.
A named project always outranks kit-wide and generic component questions.
"""

import re

from playground.context.entity_detector import detect_component, detect_project
from playground.context.models import IntentTag
from playground.core.logging import get_logger
from playground.core.schemas_kb import ComponentInfo

logger = get_logger(__name__)


def _compile(patterns: list[str]) -> list[re.Pattern]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


KIT_OVERVIEW_PATTERNS = _compile([
    r"\bwhat\b.*\b(?:in|inside|about|contains?|includes?|included)\b.*\bkit\b",
    r"\bwhat\b.*\bkit\b.*\b(?:contains?|includes?|have|has)\b",
    r"\btell me\b.*\babout\b.*\bkit\b",
    r"\bkit overview\b",
    r"\babout (?:the|this|your) kit\b",
])

# Words that belong to a narrower intent than the kit overview
KIT_OVERVIEW_BLOCKERS = re.compile(
    r"\b(?:components?|parts?|pieces?|projects?|modules?|videos?|lessons?|tutorials?)\b",
    re.IGNORECASE,
)

COMPONENTS_LIST_PATTERNS = _compile([
    r"\b(?:what|which|list|show|all|name)\b.*\b(?:components|parts|pieces)\b.*\bkit\b",
    r"\bkit(?:'s)?\b.*\b(?:components|parts|pieces)\b",
    r"\b(?:components|parts|pieces)\b.*\b(?:in|inside|of|from) (?:the|this|my|your) kit\b",
])

EXPLANATION_PATTERNS = _compile([
    r"\bwhat(?:'s| is| are| does| do)\b",
    r"\btell me about\b",
    r"\bhow\b.*\b(?:works?|use|used|using)\b",
    r"\bexplain\b",
])

LIST_PROJECTS_PATTERNS = _compile([
    r"\b(?:list|show|what are|tell me|which|name)\b.*\b(?:projects|modules)\b",
    r"\bhow many (?:projects|modules)\b",
    r"\ball (?:the |your )?(?:projects|modules)\b",
])

VIDEO_WORDS = re.compile(r"\b(?:videos?|lessons?|tutorials?)\b", re.IGNORECASE)
PROJECT_WORDS = re.compile(r"\b(?:projects?|modules?)\b", re.IGNORECASE)
PROJECT_VIDEOS_PATTERNS = _compile([
    r"\bhow (?:to|do i|can i|do we|can we)\b.*\b(?:build|make|create)\b.*\b(?:projects?|modules?)\b",
    r"\bshow\b(?: me)?(?: the| some| all| any)? (?:videos?|lessons?|tutorials?)\b",
])


def _matches_any(patterns: list[re.Pattern], text: str) -> bool:
    return any(p.search(text) for p in patterns)


def classify(
    text: str,
    project_names: list[str],
    component_index: dict[str, ComponentInfo],
) -> IntentTag:
    """
    Classify a chat turn into the closed intent set.

    Args:
        text: Current user text
        project_names: Canonical project names
        component_index: Known components

    Returns:
        IntentTag; GENERAL when no rule fires
    """
    if not text or not text.strip():
        return IntentTag.GENERAL

    project = detect_project(text, project_names)

    # 1. Kit overview
    if (
        project is None
        and _matches_any(KIT_OVERVIEW_PATTERNS, text)
        and not KIT_OVERVIEW_BLOCKERS.search(text)
    ):
        return IntentTag.KIT_OVERVIEW

    # 2. Components list
    if project is None and _matches_any(COMPONENTS_LIST_PATTERNS, text):
        return IntentTag.COMPONENTS_LIST

    # 3. Component info (never for a project question)
    if (
        project is None
        and detect_component(text, component_index) is not None
        and _matches_any(EXPLANATION_PATTERNS, text)
    ):
        return IntentTag.COMPONENT_INFO

    # 4. List projects
    if _matches_any(LIST_PROJECTS_PATTERNS, text):
        return IntentTag.LIST_PROJECTS

    # 5. Project videos
    has_video_word = VIDEO_WORDS.search(text) is not None
    if (
        (has_video_word and (PROJECT_WORDS.search(text) or project is not None))
        or _matches_any(PROJECT_VIDEOS_PATTERNS, text)
    ):
        return IntentTag.PROJECT_VIDEOS

    return IntentTag.GENERAL
