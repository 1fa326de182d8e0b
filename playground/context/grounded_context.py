"""Grounded context assembly.

Renders the resolved entities and KB fragments into the single context
message handed to the generator. Only the focused project's data is ever
rendered; the other projects appear at most as a count.
"""

import re
from collections.abc import Mapping

from playground.context.models import IntentTag
from playground.context.prompt_blocks import (
    ASK_FOR_PROJECT_INSTRUCTION,
    DEFAULT_KIT_OVERVIEW,
    DEFAULT_SAFETY_RULES,
    PROJECT_NOT_FOUND_INSTRUCTION,
    SUPPLEMENTARY_SAFETY_NOTES,
)
from playground.core.schemas_kb import ComponentInfo, Lesson

_LESSON_HINT_RE = re.compile(r"\b(?:videos?|lessons?|tutorials?)\b", re.IGNORECASE)


def summarize_components(component_index: Mapping[str, ComponentInfo]) -> str:
    """Component count plus category names only."""
    if not component_index:
        return ""
    categories = list(dict.fromkeys(c.category for c in component_index.values() if c.category))
    summary = f"The kit has {len(component_index)} components."
    if categories:
        summary += f" Categories: {', '.join(categories)}."
    return summary


def summarize_projects(project_names: list[str], focused_project: str | None = None) -> str:
    """
    Project count plus the full name list.

    With a focused project the names are left out so no other project's name
    reaches the context.
    """
    if not project_names:
        return ""
    if focused_project is not None:
        return f"The kit has {len(project_names)} projects. This conversation is about {focused_project} only."
    return f"The kit has {len(project_names)} projects: {', '.join(project_names)}."


def format_lessons(lessons: list[Lesson]) -> str:
    """Numbered lesson list with explanation and links."""
    lines = []
    for i, lesson in enumerate(lessons, start=1):
        lines.append(f"{i}. {lesson.name}")
        if lesson.explanation:
            lines.append(f"   {lesson.explanation}")
        for link in lesson.videos:
            lines.append(f"   {link}")
    return "\n".join(lines)


def wants_lessons(intent: IntentTag, user_text: str = "") -> bool:
    return intent == IntentTag.PROJECT_VIDEOS or bool(_LESSON_HINT_RE.search(user_text or ""))


def _section(title: str, body: str) -> str:
    return f"{title}:\n{body.strip()}"


def assemble(
    detected_project: str | None,
    project_block: str,
    lesson_index: Mapping[str, list[Lesson]],
    pin_text: str,
    safety_text: str,
    kit_overview: str,
    components_summary: str,
    projects_summary: str,
    intent: IntentTag,
    *,
    detected_component: ComponentInfo | None = None,
    user_text: str = "",
) -> str:
    """
    Build the grounded context string.

    Sections, in order, each omitted when empty: kit overview, safety rules,
    pin mappings, components summary, projects summary, then the focused
    project (block and, for lesson questions, its lessons) or an instruction
    to ask for the project name.

    Returns:
        Sections joined by blank lines
    """
    sections = [_section("Kit overview", kit_overview or DEFAULT_KIT_OVERVIEW)]

    safety = (safety_text or DEFAULT_SAFETY_RULES).strip()
    sections.append(_section("Safety rules", f"{safety}\n{SUPPLEMENTARY_SAFETY_NOTES}"))

    if pin_text and pin_text.strip():
        sections.append(_section("Pin and port mappings", pin_text))
    if components_summary:
        sections.append(_section("Components", components_summary))
    if projects_summary:
        sections.append(_section("Projects", projects_summary))

    if detected_component is not None:
        body = detected_component.name
        if detected_component.description:
            body += f": {detected_component.description}"
        sections.append(_section("Component in question", body))

    if detected_project is None:
        sections.append(ASK_FOR_PROJECT_INSTRUCTION)
    elif project_block and project_block.strip():
        sections.append(_section(f"Focused project ({detected_project})", project_block))
        lessons = lesson_index.get(detected_project) or []
        if lessons and wants_lessons(intent, user_text):
            sections.append(_section(f"Lessons for {detected_project}", format_lessons(lessons)))
    else:
        sections.append(PROJECT_NOT_FOUND_INSTRUCTION.format(project=detected_project))

    return "\n\n".join(sections)
