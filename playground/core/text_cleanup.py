"""Text normalisation for KB pages and model replies.

KB pages arrive as loosely formatted exports; model replies arrive with
markdown the chat widget cannot render.
"""

import re

_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_TRAILING_SPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)

# Markdown markers stripped from replies
_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+", re.MULTILINE)
_BOLD_RE = re.compile(r"(\*\*|__)(.+?)\1", re.DOTALL)
_ITALIC_RE = re.compile(r"(?<![\w*])\*(?!\s)([^*\n]+?)(?<!\s)\*(?![\w*])")
_STRAY_BOLD_RE = re.compile(r"\*\*|__")


def sanitize_kb_text(text: str) -> str:
    """
    Clean a KB page block.

    Strips null bytes, trailing whitespace on every line, and collapses
    runs of three or more newlines to a single blank line.
    """
    if not text:
        return ""
    text = text.replace("\x00", "").replace("\r\n", "\n")
    text = _TRAILING_SPACE_RE.sub("", text)
    text = _EXCESS_NEWLINES_RE.sub("\n\n", text)
    return text.strip()


def clean_reply(text: str) -> str:
    """Strip markdown emphasis/heading markers and excess blank lines from a model reply."""
    if not text or not text.strip():
        return ""
    text = text.replace("\r\n", "\n")
    text = _HEADING_RE.sub("", text)
    text = _BOLD_RE.sub(r"\2", text)
    text = _ITALIC_RE.sub(r"\1", text)
    text = _STRAY_BOLD_RE.sub("", text)
    text = _TRAILING_SPACE_RE.sub("", text)
    text = _EXCESS_NEWLINES_RE.sub("\n\n", text)
    return text.strip()


def collapse_alnum(text: str) -> str:
    """Lowercase and drop every non-alphanumeric character."""
    return re.sub(r"[^a-z0-9]", "", text.lower())
