"""Recover an implicit project/component reference from earlier turns."""

from collections.abc import Sequence

from playground.context.entity_detector import detect_component, detect_project
from playground.context.models import DetectedEntities
from playground.core.schemas_chat import ChatTurn
from playground.core.schemas_kb import ComponentInfo


def resolve(
    history: Sequence[ChatTurn],
    project_names: list[str],
    component_index: dict[str, ComponentInfo],
) -> DetectedEntities:
    """
    Scan history newest-first for the most recent project and component.

    The history is never modified. Scanning stops once both are found.
    """
    found = DetectedEntities()
    for turn in reversed(history):
        content = turn.content or ""
        if not content.strip():
            continue
        if found.project is None:
            found.project = detect_project(content, project_names)
        if found.component is None:
            found.component = detect_component(content, component_index)
        if found.complete:
            break
    return found


def fill_from_history(
    current: DetectedEntities,
    history: Sequence[ChatTurn],
    project_names: list[str],
    component_index: dict[str, ComponentInfo],
) -> DetectedEntities:
    """Fill only the entities the current turn left unset."""
    if current.complete or not history:
        return current
    recovered = resolve(history, project_names, component_index)
    return DetectedEntities(
        project=current.project or recovered.project,
        component=current.component or recovered.component,
    )
