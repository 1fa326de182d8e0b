"""Support-escalation detection.

Certain failures (missing or damaged parts, unknown hardware, projects the KB
does not cover) are answered with a canned support message instead of a
generated reply.
"""

import re

from playground.core.logging import get_logger
from playground.core.schemas_kb import SupportConfig, SupportReason

logger = get_logger(__name__)

USER_REQUESTED_RE = re.compile(
    r"\b(?:contact|support team|call|email|e-mail|phone|helpline|customer care)\b", re.IGNORECASE
)
HARDWARE_DAMAGED_RE = re.compile(
    r"\b(?:broken|broke|burnt|burned|melted|smoke|smoking|faulty|damaged|cracked|not powering)\b",
    re.IGNORECASE,
)
PART_MISSING_RE = re.compile(
    r"\b(?:missing|not included|lost|component missing|didn'?t get|did not get)\b", re.IGNORECASE
)
GENERIC_HARDWARE_RE = re.compile(
    r"\b(?:sensors?|motors?|boards?|wires?|leds?|wheels?|fans?|batter(?:y|ies)|switch(?:es)?)\b",
    re.IGNORECASE,
)

# First match wins
_TEXT_CHECKS: list[tuple[SupportReason, re.Pattern]] = [
    (SupportReason.USER_REQUESTED_SUPPORT, USER_REQUESTED_RE),
    (SupportReason.HARDWARE_DAMAGED, HARDWARE_DAMAGED_RE),
    (SupportReason.PART_MISSING, PART_MISSING_RE),
]

_REASON_OPENERS: dict[SupportReason, str] = {
    SupportReason.USER_REQUESTED_SUPPORT: "Sure! Our support team will be happy to help you.",
    SupportReason.PART_MISSING: "Oh no, it sounds like a part is missing from your kit.",
    SupportReason.HARDWARE_DAMAGED: (
        "It sounds like a part may be damaged. Please unplug the battery and do not use it for now."
    ),
    SupportReason.UNKNOWN_COMPONENT: "I couldn't recognise that part from our kit.",
    SupportReason.PROJECT_NOT_IN_KB: "I don't have the details for that project yet.",
}


def detect_support_failure(
    user_text: str,
    detected_project: str | None,
    project_context: str | None,
    detected_component: str | None,
) -> SupportReason | None:
    """
    Flag a chat turn that should go to human support.

    Args:
        user_text: Current user text
        detected_project: Project detected for this turn (after history fallback)
        project_context: Content block for the detected project
        detected_component: Component id detected for this turn

    Returns:
        The first matching SupportReason, or None
    """
    text = user_text or ""

    for reason, pattern in _TEXT_CHECKS:
        if pattern.search(text):
            return reason

    if detected_project is None and detected_component is None and GENERIC_HARDWARE_RE.search(text):
        return SupportReason.UNKNOWN_COMPONENT

    if detected_project is not None and not (project_context or "").strip():
        return SupportReason.PROJECT_NOT_IN_KB

    return None


def should_escalate(reason: SupportReason | None, config: SupportConfig) -> bool:
    """Escalate only when support is enabled and the reason is an allowed trigger."""
    return reason is not None and config.enabled and reason in config.triggers


def build_support_message(reason: SupportReason, config: SupportConfig) -> str:
    """Canned support reply with whatever contact details the KB provides."""
    lines = [_REASON_OPENERS[reason]]

    contact = []
    if config.email:
        contact.append(f"Email: {config.email}")
    if config.phone:
        contact.append(f"Phone: {config.phone}")
    if config.hours:
        contact.append(f"Hours: {config.hours}")

    if contact:
        lines.append("Please reach out to our support team and ask a grown-up to help:")
        lines.extend(contact)
    else:
        lines.append("Please ask a grown-up to contact our support team for help.")

    logger.info(f"Support escalation triggered: {reason.value}")
    return "\n".join(lines)
