"""Knowledge index builder.

Normalises the loosely structured KB document into the lookup structures the
chat pipeline works from. Every extractor degrades to an empty value on
missing or malformed input; only the fetch itself can fail a request.
"""

import re
from typing import Any
from urllib.parse import urlparse

from playground.core.logging import get_logger
from playground.core.schemas_kb import (
    ComponentInfo,
    KnowledgeIndexes,
    Lesson,
    SupportConfig,
    SupportReason,
)
from playground.core.text_cleanup import sanitize_kb_text

logger = get_logger(__name__)

# Degraded-mode default used only when the KB names no projects at all
FALLBACK_PROJECT_NAMES = [
    "Mood Lamp",
    "Candle Lamp",
    "Smart Fan",
    "Line Follower Robot",
    "Obstacle Avoider",
    "Automatic Night Light",
    "Musical Keyboard",
    "Traffic Light",
]

# Pages taken after the one that opens a project block
PROJECT_BLOCK_FOLLOWING_PAGES = 5
PIN_FOLLOWING_PAGES = 2
SAFETY_FOLLOWING_PAGES = 3

PIN_HEADINGS = ("fixed port mappings", "pin mapping")
SAFETY_HEADINGS = ("global safety",)
KIT_OVERVIEW_HEADINGS = ("kit overview",)

# Topical rank: connection setup, build, coding, working demo, intro, rest.
# Keywords match whole words only.
_LESSON_RANKS: list[tuple[int, re.Pattern]] = [
    (0, re.compile(r"\b(?:connections?|connecting)\b", re.IGNORECASE)),
    (1, re.compile(r"\b(?:build|building)\b", re.IGNORECASE)),
    (2, re.compile(r"\b(?:coding|code)\b", re.IGNORECASE)),
    (3, re.compile(r"\b(?:working|demo)\b", re.IGNORECASE)),
    (4, re.compile(r"\b(?:intro|introduction)\b", re.IGNORECASE)),
]
_UNRANKED = 5

_PROJECT_NAME_LINE_RE = re.compile(r"^\s*project\s+name\s*:\s*(.+?)\s*$", re.IGNORECASE | re.MULTILINE)
_LESSON_MARKER_RE = re.compile(
    r"lesson\s+id\s*:|\bbuild\s*\d+\b|\bcoding\s+part\s*\d+\b", re.IGNORECASE
)
_LESSON_NAME_RE = re.compile(r"^\s*(?:lesson\s+name|title)\s*:\s*(.+?)\s*$", re.IGNORECASE | re.MULTILINE)
_EXPLANATION_RE = re.compile(r"^\s*explanation\s*:\s*(.*)$", re.IGNORECASE)
_EXPLANATION_STOP_RE = re.compile(r"^\s*(?:video|link|lesson)\b", re.IGNORECASE)
_URL_RE = re.compile(r"https?://[^\s<>\"'()\[\]]+")
_FIELD_LINE_RE = re.compile(r"^\s*([A-Za-z ]+?)\s*:\s*(.*?)\s*$")

_LINK_KEYS = ("videos", "links", "video", "url", "link", "video_url", "videoUrl")


# ---------------------------------------------------------------------------
# Small coercion helpers
# ---------------------------------------------------------------------------


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _first_text(record: dict, *keys: str) -> str:
    for key in keys:
        text = _as_text(record.get(key))
        if text:
            return text
    return ""


def _first_value(kb: dict, *keys: str) -> Any:
    for key in keys:
        if key in kb and kb[key] not in (None, "", [], {}):
            return kb[key]
    return None


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def _is_http_url(candidate: str) -> bool:
    parsed = urlparse(candidate)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _pages(kb: dict) -> list[tuple[str, str]]:
    """Return (text, tag) pairs for every usable free-text page."""
    pages = []
    for page in _as_list(kb.get("pages")):
        if isinstance(page, str):
            pages.append((page, ""))
        elif isinstance(page, dict):
            text = page.get("text")
            if not isinstance(text, str):
                text = page.get("content")
            if isinstance(text, str):
                tag = _first_text(page, "type", "tag", "category").lower()
                pages.append((text, tag))
    return pages


def _page_texts(pages: list[tuple[str, str]]) -> list[str]:
    return [text for text, _ in pages]


# ---------------------------------------------------------------------------
# Project names
# ---------------------------------------------------------------------------


def _names_from_items(items: list) -> list[str]:
    names = []
    for item in items:
        if isinstance(item, str):
            name = item
        elif isinstance(item, dict):
            name = item.get("name")
        else:
            continue
        if isinstance(name, str) and name.strip():
            names.append(name)
    return names


def build_project_names(kb: dict, pages: list[tuple[str, str]] | None = None) -> list[str]:
    """
    Resolve the canonical project-name list.

    Order of sources: explicit name list, structured project records,
    "Project Name:" lines in pages, then the fixed fallback list.
    """
    pages = _pages(kb) if pages is None else pages

    explicit = _names_from_items(_as_list(_first_value(kb, "project_names", "projectNames")))
    if explicit:
        return _dedupe(explicit)

    structured = _names_from_items(_as_list(kb.get("projects")))
    if structured:
        return _dedupe(structured)

    scanned = []
    for text in _page_texts(pages):
        scanned.extend(m.group(1) for m in _PROJECT_NAME_LINE_RE.finditer(text))
    if scanned:
        return _dedupe(scanned)

    logger.warning("KB names no projects; using fallback project list")
    return list(FALLBACK_PROJECT_NAMES)


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


def _component_from_record(key: str, record: dict) -> tuple[str, ComponentInfo] | None:
    comp_id = _as_text(record.get("id")) or key
    name = _as_text(record.get("name")) or comp_id
    if not comp_id:
        comp_id = name
    if not comp_id:
        return None
    return comp_id, ComponentInfo(
        name=name,
        description=_first_text(record, "description", "desc"),
        category=_first_text(record, "category", "type") or None,
    )


def _components_from_pages(pages: list[tuple[str, str]]) -> dict[str, ComponentInfo]:
    index: dict[str, ComponentInfo] = {}
    for text, tag in pages:
        if "component" not in tag:
            continue
        current: dict[str, str] = {}
        chunks: list[dict[str, str]] = []
        for line in text.splitlines():
            match = _FIELD_LINE_RE.match(line)
            if not match:
                continue
            field = match.group(1).strip().lower()
            value = match.group(2)
            # A repeated id/name line opens the next component on the same page
            if field in ("component id", "component name") and field in current:
                chunks.append(current)
                current = {}
            current[field] = value
        if current:
            chunks.append(current)
        for chunk in chunks:
            comp_id = chunk.get("component id") or chunk.get("component name") or chunk.get("name")
            if not comp_id:
                continue
            index.setdefault(
                comp_id,
                ComponentInfo(
                    name=chunk.get("component name") or chunk.get("name") or comp_id,
                    description=chunk.get("description", ""),
                    category=chunk.get("category") or None,
                ),
            )
    return index


def build_component_index(kb: dict, pages: list[tuple[str, str]] | None = None) -> dict[str, ComponentInfo]:
    """Map component id to its display name and description."""
    pages = _pages(kb) if pages is None else pages
    raw = kb.get("components")
    index: dict[str, ComponentInfo] = {}

    if isinstance(raw, dict):
        for key, record in raw.items():
            if isinstance(record, dict):
                entry = _component_from_record(str(key), record)
            elif isinstance(record, str):
                entry = (str(key), ComponentInfo(name=record))
            else:
                entry = None
            if entry and entry[0] not in index:
                index[entry[0]] = entry[1]
    else:
        for record in _as_list(raw):
            if isinstance(record, dict):
                entry = _component_from_record("", record)
            elif isinstance(record, str) and record.strip():
                entry = (record.strip(), ComponentInfo(name=record.strip()))
            else:
                entry = None
            if entry and entry[0] not in index:
                index[entry[0]] = entry[1]

    if index:
        return index
    return _components_from_pages(pages)


def _resolve_component_name(ref: Any, component_index: dict[str, ComponentInfo]) -> str:
    if isinstance(ref, dict):
        ref_id = _as_text(ref.get("id"))
        name = _as_text(ref.get("name"))
        quantity = _as_text(ref.get("quantity") or ref.get("qty"))
        display = name or _resolve_component_name(ref_id, component_index)
        return f"{display} x{quantity}" if display and quantity else display
    ref_text = _as_text(ref)
    if not ref_text:
        return ""
    if ref_text in component_index:
        return component_index[ref_text].name
    lowered = ref_text.lower()
    for comp_id, info in component_index.items():
        if comp_id.lower() == lowered:
            return info.name
    return ref_text


# ---------------------------------------------------------------------------
# Project blocks
# ---------------------------------------------------------------------------


def _find_project_record(projects: list, name: str) -> dict | None:
    lowered = name.strip().lower()
    for record in projects:
        if isinstance(record, dict) and _as_text(record.get("name")) == name:
            return record
    for record in projects:
        if not isinstance(record, dict):
            continue
        candidates = [_as_text(record.get("name"))]
        candidates.extend(_as_text(a) for a in _as_list(record.get("aliases")))
        if any(c and c.lower() == lowered for c in candidates):
            return record
    return None


def _render_steps(steps: Any) -> list[str]:
    lines = []
    number = 0
    for step in _as_list(steps):
        if isinstance(step, dict):
            text = _first_text(step, "text", "step", "description", "title")
        else:
            text = _as_text(step)
        if text:
            number += 1
            lines.append(f"{number}. {text}")
    return lines


def render_project_block(record: dict, component_index: dict[str, ComponentInfo]) -> str:
    """Render a structured project record into a fixed-order text block."""
    lines = []
    name = _as_text(record.get("name"))
    if name:
        lines.append(f"Project: {name}")
    difficulty = _as_text(record.get("difficulty"))
    if difficulty:
        lines.append(f"Difficulty: {difficulty}")
    time = _first_text(record, "time", "estimated_time", "estimatedTime")
    if time:
        lines.append(f"Estimated time: {time}")
    description = _as_text(record.get("description"))
    if description:
        lines.append(f"Description: {description}")

    component_refs = _first_value(record, "components", "component_ids", "componentIds")
    components = [
        c for c in (_resolve_component_name(ref, component_index) for ref in _as_list(component_refs)) if c
    ]
    if components:
        lines.append(f"Components: {', '.join(components)}")

    steps = _render_steps(_first_value(record, "steps", "build_steps", "buildSteps"))
    if steps:
        lines.append("Build steps:")
        lines.extend(steps)

    how = _first_text(record, "how_it_works", "howItWorks")
    if how:
        lines.append(f"How it works: {how}")

    return "\n".join(lines)


def _project_page_slice(name: str, page_texts: list[str]) -> list[str]:
    """
    Return the page opening a project's block plus the pages that follow it.

    The block ends early at the first later page that opens another project.
    """
    target = name.strip().lower()
    if not target:
        return []
    for i, text in enumerate(page_texts):
        for line in text.splitlines():
            lowered = line.lower()
            if "project name" in lowered and target in lowered:
                block = [text]
                for follow in page_texts[i + 1 : i + 1 + PROJECT_BLOCK_FOLLOWING_PAGES]:
                    if _opens_other_project(follow, target):
                        break
                    block.append(follow)
                return block
    return []


def _opens_other_project(text: str, target: str) -> bool:
    return any(m.group(1).lower() != target for m in _PROJECT_NAME_LINE_RE.finditer(text))


def build_project_block(
    name: str,
    projects: list,
    page_texts: list[str],
    component_index: dict[str, ComponentInfo],
) -> str:
    record = _find_project_record(projects, name)
    if record is not None:
        return render_project_block(record, component_index)
    return sanitize_kb_text("\n\n".join(_project_page_slice(name, page_texts)))


# ---------------------------------------------------------------------------
# Lessons
# ---------------------------------------------------------------------------


def lesson_rank(name: str, project: str | None = None) -> int:
    """Topical rank of a lesson name, ignoring a leading project name."""
    title = name.strip()
    prefix = (project or "").strip()
    if prefix and title.lower().startswith(prefix.lower()):
        title = title[len(prefix) :]
    for rank, pattern in _LESSON_RANKS:
        if pattern.search(title):
            return rank
    return _UNRANKED


def sort_lessons(lessons: list[Lesson], project: str | None = None) -> list[Lesson]:
    """Stable sort by topical rank."""
    return sorted(lessons, key=lambda lesson: lesson_rank(lesson.name, project))


def expand_lesson(name: str, links: list[str], explanation: str | None = None) -> list[Lesson]:
    """One Lesson per unique link; multi-link lessons get a "Part N" suffix."""
    unique = _dedupe([link for link in links if _is_http_url(link)])
    explanation = explanation or None
    if len(unique) <= 1:
        return [Lesson(name=name, videos=unique, explanation=explanation)]
    return [
        Lesson(name=f"{name} Part {i}", videos=[link], explanation=explanation)
        for i, link in enumerate(unique, start=1)
    ]


def _record_links(record: dict) -> list[str]:
    links: list[str] = []
    for key in _LINK_KEYS:
        for value in _as_list(record.get(key)):
            if isinstance(value, dict):
                value = value.get("url") or value.get("link")
            if isinstance(value, str) and value.strip():
                links.append(value.strip())
    return links


def _lessons_from_records(records: list) -> list[Lesson]:
    lessons: list[Lesson] = []
    for record in records:
        if isinstance(record, str) and record.strip():
            lessons.extend(expand_lesson(record.strip(), []))
        elif isinstance(record, dict):
            name = _first_text(record, "name", "title") or "Lesson"
            lessons.extend(
                expand_lesson(name, _record_links(record), _first_text(record, "explanation", "summary"))
            )
    return lessons


def _explanation_from(lines: list[str]) -> str | None:
    for i, line in enumerate(lines):
        match = _EXPLANATION_RE.match(line)
        if not match:
            continue
        parts = [match.group(1).strip()]
        for follow in lines[i + 1 :]:
            if not follow.strip() or _EXPLANATION_STOP_RE.match(follow) or _LESSON_MARKER_RE.search(follow):
                break
            parts.append(follow.strip())
        text = " ".join(p for p in parts if p)
        return text or None
    return None


def _links_from(text: str) -> list[str]:
    links = []
    for match in _URL_RE.finditer(text):
        candidate = match.group(0).rstrip(".,;:!?")
        if _is_http_url(candidate):
            links.append(candidate)
    return links


def lessons_from_text(text: str) -> list[Lesson]:
    """Scan a project's page block for marker-delimited lesson sub-blocks."""
    blocks: list[list[str]] = []
    for line in text.splitlines():
        # "Lesson Name: ... Coding Part 1" names the open lesson, it does not start one
        if _LESSON_MARKER_RE.search(line) and not _LESSON_NAME_RE.match(line):
            blocks.append([line])
        elif blocks:
            blocks[-1].append(line)

    lessons: list[Lesson] = []
    for block in blocks:
        block_text = "\n".join(block)
        name_match = _LESSON_NAME_RE.search(block_text)
        name = name_match.group(1) if name_match else block[0].strip()
        lessons.extend(expand_lesson(name, _links_from(block_text), _explanation_from(block)))
    return lessons


def _has_structured_lessons(kb: dict) -> bool:
    if any(isinstance(r, dict) for r in _as_list(kb.get("lessons"))):
        return True
    return any(
        isinstance(p, dict) and _as_list(p.get("lessons")) for p in _as_list(kb.get("projects"))
    )


def _project_matches(ref: str, name: str, record: dict | None) -> bool:
    lowered = ref.strip().lower()
    if not lowered:
        return False
    if lowered == name.lower():
        return True
    if record is not None:
        return any(_as_text(a).lower() == lowered for a in _as_list(record.get("aliases")))
    return False


def build_lesson_list(
    name: str,
    kb: dict,
    projects: list,
    page_texts: list[str],
    structured: bool,
) -> list[Lesson]:
    if structured:
        record = _find_project_record(projects, name)
        records = list(_as_list(record.get("lessons"))) if record else []
        for lesson in _as_list(kb.get("lessons")):
            if isinstance(lesson, dict):
                ref = _first_text(lesson, "project", "project_name", "projectName")
                if _project_matches(ref, name, record):
                    records.append(lesson)
        return sort_lessons(_lessons_from_records(records), name)

    page_slice = _project_page_slice(name, page_texts)
    return sort_lessons(lessons_from_text(sanitize_kb_text("\n\n".join(page_slice))), name)


# ---------------------------------------------------------------------------
# Global reference text
# ---------------------------------------------------------------------------


def section_from_pages(page_texts: list[str], headings: tuple[str, ...], following: int) -> str:
    """First page containing any heading (case-insensitive) plus `following` pages."""
    for i, text in enumerate(page_texts):
        lowered = text.lower()
        if any(h in lowered for h in headings):
            return sanitize_kb_text("\n\n".join(page_texts[i : i + 1 + following]))
    return ""


def _explicit_text(value: Any, bullet: str = "") -> str:
    if isinstance(value, str):
        return sanitize_kb_text(value)
    if isinstance(value, dict):
        lines = [f"{k}: {_as_text(v)}" for k, v in value.items() if _as_text(v)]
        return "\n".join(lines)
    lines = [f"{bullet}{_as_text(v)}" for v in _as_list(value) if _as_text(v)]
    return "\n".join(lines)


def build_pin_text(kb: dict, page_texts: list[str]) -> str:
    explicit = _explicit_text(_first_value(kb, "pin_map", "pinMap", "pins"))
    if explicit:
        return explicit
    return section_from_pages(page_texts, PIN_HEADINGS, PIN_FOLLOWING_PAGES)


def build_safety_text(kb: dict, page_texts: list[str]) -> str:
    explicit = _explicit_text(_first_value(kb, "safety", "safety_rules", "safetyRules"), bullet="- ")
    if explicit:
        return explicit
    return section_from_pages(page_texts, SAFETY_HEADINGS, SAFETY_FOLLOWING_PAGES)


def build_kit_overview(kb: dict, page_texts: list[str]) -> str:
    explicit = _explicit_text(_first_value(kb, "kit_overview", "kitOverview", "overview"))
    if explicit:
        return explicit
    return section_from_pages(page_texts, KIT_OVERVIEW_HEADINGS, 0)


def _parse_reason(value: Any) -> SupportReason | None:
    text = _as_text(value).upper().replace(" ", "_").replace("-", "_")
    try:
        return SupportReason(text)
    except ValueError:
        return None


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def build_support_config(kb: dict) -> SupportConfig:
    raw = _first_value(kb, "support", "support_escalation", "supportEscalation")
    if not isinstance(raw, dict):
        return SupportConfig()

    triggers = {
        reason
        for reason in (_parse_reason(v) for v in _as_list(raw.get("triggers") or raw.get("reasons")))
        if reason is not None
    }
    contact = raw.get("contact") if isinstance(raw.get("contact"), dict) else {}
    return SupportConfig(
        enabled=_truthy(raw.get("enabled")),
        triggers=triggers,
        email=_first_text(contact, "email") or _first_text(raw, "email") or None,
        phone=_first_text(contact, "phone") or _first_text(raw, "phone") or None,
        hours=_first_text(contact, "hours") or _first_text(raw, "hours") or None,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_indexes(kb: Any) -> KnowledgeIndexes:
    """
    Build every lookup structure from one KB snapshot.

    Args:
        kb: Parsed KB document. Anything other than a JSON object is
            treated as an empty KB.

    Returns:
        KnowledgeIndexes for this request
    """
    if not isinstance(kb, dict):
        kb = {}

    pages = _pages(kb)
    page_texts = _page_texts(pages)
    projects = [p for p in _as_list(kb.get("projects")) if isinstance(p, dict)]

    component_index = build_component_index(kb, pages)
    project_names = build_project_names(kb, pages)
    structured_lessons = _has_structured_lessons(kb)

    project_blocks = {
        name: build_project_block(name, projects, page_texts, component_index) for name in project_names
    }
    lesson_index = {
        name: build_lesson_list(name, kb, projects, page_texts, structured_lessons) for name in project_names
    }

    indexes = KnowledgeIndexes(
        project_names=project_names,
        project_blocks=project_blocks,
        lesson_index=lesson_index,
        pin_text=build_pin_text(kb, page_texts),
        safety_text=build_safety_text(kb, page_texts),
        component_index=component_index,
        support_config=build_support_config(kb),
        kit_overview=build_kit_overview(kb, page_texts),
    )

    logger.debug(
        f"Built KB indexes: {len(project_names)} projects, "
        f"{len(component_index)} components, "
        f"{sum(len(v) for v in lesson_index.values())} lessons"
    )
    return indexes
