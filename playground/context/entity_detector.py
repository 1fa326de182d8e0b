"""Heuristic project/component detection over free text.

Layered scoring (exact, substring, word overlap, collapsed alphanumerics,
curated variations) catches partial and colloquial names without fuzzy
edit-distance matching; the name sets are small and distinct.
"""

import re

from playground.core.schemas_kb import ComponentInfo
from playground.core.text_cleanup import collapse_alnum

PROJECT_MIN_SCORE = 3
COMPONENT_MIN_SCORE = 2

SHARED_WORD_SCORE = 3
ALL_WORDS_BONUS = 10

# Colloquial names per component; keys are lower-cased component names
COMPONENT_VARIATIONS: dict[str, list[str]] = {
    "servo motor": ["servo"],
    "potentiometer": ["knob", "pot", "dial"],
    "ultrasonic sensor": ["ultrasonic", "distance sensor"],
    "ldr": ["ldr", "light sensor", "light dependent resistor"],
    "light sensor": ["ldr", "light sensor", "light dependent resistor"],
    "ir sensor": ["ir", "infrared"],
    "dc motor": ["motor", "dc motor"],
    "buzzer": ["beeper", "beep"],
    "rgb led": ["rgb"],
    "push button": ["button", "push switch"],
    "battery holder": ["battery", "battery box"],
}


def _words(text: str) -> list[str]:
    """Lower-cased whitespace tokens with edge punctuation stripped."""
    words = []
    for raw in text.lower().split():
        word = raw.strip(".,!?;:'\"()[]{}")
        if word.endswith("'s"):
            word = word[:-2]
        if word:
            words.append(word)
    return words


def score_project(text: str, name: str) -> int:
    """Score how strongly `text` refers to project `name` (exact matches handled by caller)."""
    lowered = text.lower()
    target = name.lower().strip()
    if not target:
        return 0

    score = 0
    if target in lowered:
        score += 2 * len(target)

    text_words = set(_words(text))
    name_words = _words(name)
    shared = [w for w in dict.fromkeys(name_words) if w in text_words]
    score += SHARED_WORD_SCORE * len(shared)
    if name_words and all(w in text_words for w in name_words):
        score += ALL_WORDS_BONUS

    collapsed_name = collapse_alnum(name)
    if collapsed_name and collapsed_name in collapse_alnum(text):
        score += len(collapsed_name)

    return score


def detect_project(text: str, project_names: list[str]) -> str | None:
    """
    Identify the project the text refers to.

    Args:
        text: Free user text
        project_names: Canonical project names, in KB order

    Returns:
        The best-scoring name at or above the threshold, or None. Ties keep
        the first name in `project_names` order.
    """
    if not text or not text.strip():
        return None

    stripped = text.strip().lower()
    for name in project_names:
        if name.strip().lower() == stripped:
            return name

    best_name = None
    best_score = 0
    for name in project_names:
        score = score_project(text, name)
        if score > best_score:
            best_name, best_score = name, score

    return best_name if best_score >= PROJECT_MIN_SCORE else None


def _component_labels(comp_id: str, info: ComponentInfo) -> list[str]:
    labels = [info.name.strip().lower()]
    id_label = re.sub(r"[_\-]+", " ", comp_id).strip().lower()
    if id_label and id_label not in labels:
        labels.append(id_label)
    return [label for label in labels if label]


def score_component(text: str, comp_id: str, info: ComponentInfo) -> int:
    lowered = text.lower()
    score = 0
    variations: list[str] = []
    for label in _component_labels(comp_id, info):
        # Word-bounded so short names like "led" do not fire inside "needed"
        if re.search(rf"\b{re.escape(label)}s?\b", lowered):
            score += 2 * len(label)
        variations.extend(COMPONENT_VARIATIONS.get(label, []))

    for variation in dict.fromkeys(variations):
        if re.search(rf"\b{re.escape(variation)}s?\b", lowered):
            score += len(variation)
    return score


def detect_component(text: str, component_index: dict[str, ComponentInfo]) -> str | None:
    """
    Identify the component the text refers to.

    Returns:
        Component id of the best match at or above the threshold, or None
    """
    if not text or not text.strip():
        return None

    stripped = text.strip().lower()
    for comp_id, info in component_index.items():
        if stripped == comp_id.lower() or stripped in _component_labels(comp_id, info):
            return comp_id

    best_id = None
    best_score = 0
    for comp_id, info in component_index.items():
        score = score_component(text, comp_id, info)
        if score > best_score:
            best_id, best_score = comp_id, score

    return best_id if best_score >= COMPONENT_MIN_SCORE else None
