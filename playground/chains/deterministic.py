"""Deterministic replies built purely from the KB indexes."""

from playground.context.grounded_context import format_lessons
from playground.context.prompt_blocks import CLARIFY_PROJECT_TEXT, DEFAULT_KIT_OVERVIEW
from playground.core.schemas_kb import KnowledgeIndexes


def kit_overview_reply(indexes: KnowledgeIndexes) -> str:
    return indexes.kit_overview or DEFAULT_KIT_OVERVIEW


def components_list_reply(indexes: KnowledgeIndexes) -> str:
    components = list(indexes.component_index.values())
    if not components:
        return "I don't have the list of kit components right now."
    lines = [f"Your kit has {len(components)} components:"]
    lines.extend(f"{i}. {c.name}" for i, c in enumerate(components, start=1))
    return "\n".join(lines)


def projects_list_reply(indexes: KnowledgeIndexes) -> str:
    names = indexes.project_names
    if not names:
        return "I don't have the list of projects right now."
    lines = [f"There are {len(names)} projects you can build:"]
    lines.extend(f"{i}. {name}" for i, name in enumerate(names, start=1))
    return "\n".join(lines)


def project_videos_reply(indexes: KnowledgeIndexes, project: str) -> str:
    """Ranked lesson list for one project, or a clear "I don't have that"."""
    lessons = indexes.lesson_index.get(project) or []
    if not lessons:
        return f"I don't have any videos for {project} yet."
    return f"Here are the lessons for {project}:\n\n{format_lessons(lessons)}"


def clarify_project_reply() -> str:
    return CLARIFY_PROJECT_TEXT
