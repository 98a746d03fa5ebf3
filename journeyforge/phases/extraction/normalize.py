"""
Text normalisation helpers for the extraction cascade.

Everything here is pure and deterministic: no I/O, no logging.
"""

from __future__ import annotations

import json
import re
from typing import Any

from journeyforge.core.models.extraction import ActivityCategory


ACTION_VERBS = (
    "explore",
    "create",
    "build",
    "design",
    "research",
    "analyze",
    "present",
    "collaborate",
)

DEFAULT_ACTIVITY_KEYWORDS = ["Explore", "Create", "Share"]

DEFAULT_DURATION = "1 week"

MAX_TITLE_LENGTH = 50
TITLE_WORDS = 5
TRUNCATE_LENGTH = 200

_BOLD = re.compile(r"(\*\*|__)(.+?)\1", re.DOTALL)
_ITALIC = re.compile(r"(?<![\w*])\*(?![\s*])([^*\n]+?)(?<!\s)\*(?![\w*])")
_HEADING = re.compile(r"^[ \t]*#{1,6}[ \t]+", re.MULTILINE)
_DURATION = re.compile(r"\d+\s*(?:minute|hour|day|week|month)s?\b", re.IGNORECASE)
_WORD = re.compile(r"[a-z][a-z'-]*")
_FENCED_BLOCK = re.compile(r"```[a-zA-Z]*\s*\n(.*?)```", re.DOTALL)
_BULLET = re.compile(r"^\s*[-*•]\s+(.+?)\s*$", re.MULTILINE)
_NUMBERED = re.compile(r"^\s*(\d+)[.)]\s+(.+?)\s*$", re.MULTILINE)
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def clean_markdown(text: str) -> str:
    """Strip emphasis, heading hashes and backticks; keep list bullets."""
    text = _BOLD.sub(r"\2", text)
    text = _ITALIC.sub(r"\1", text)
    text = _HEADING.sub("", text)
    text = text.replace("`", "")
    return text.strip()


def extract_title(text: str) -> str:
    """First five words, cut to 47 chars plus "..." when longer than 50."""
    title = " ".join(text.split()[:TITLE_WORDS])
    if len(title) > MAX_TITLE_LENGTH:
        return title[: MAX_TITLE_LENGTH - 3] + "..."
    return title


def extract_duration(text: str, default: str = DEFAULT_DURATION) -> str:
    match = _DURATION.search(text)
    return match.group(0) if match else default


def extract_activity_keywords(text: str) -> list[str]:
    """Short phrases starting at each action verb found in the text.

    Each phrase is the verb plus up to four following words. Falls back to
    Explore / Create / Share when no verb occurs.
    """
    words = _WORD.findall(text.lower())
    phrases = []
    for verb in ACTION_VERBS:
        if verb in words:
            idx = words.index(verb)
            phrases.append(" ".join(words[idx : idx + 5]))
    return phrases or list(DEFAULT_ACTIVITY_KEYWORDS)


def categorize_activity(text: str) -> ActivityCategory:
    lower = text.lower()
    if any(word in lower for word in ("research", "explore", "investigate")):
        return ActivityCategory.EXPLORATION
    if any(word in lower for word in ("create", "build", "design")):
        return ActivityCategory.CREATION
    if any(word in lower for word in ("collaborate", "team", "group")):
        return ActivityCategory.COLLABORATION
    if any(word in lower for word in ("present", "share", "demonstrate")):
        return ActivityCategory.PRESENTATION
    return ActivityCategory.EXPLORATION


def truncate(text: str, limit: int = TRUNCATE_LENGTH) -> str:
    return text.strip()[:limit]


def split_paragraphs(text: str, min_length: int = 0) -> list[str]:
    """Blank-line separated blocks, stripped, longer than ``min_length``."""
    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(text)]
    return [p for p in paragraphs if p and len(p) > min_length]


def bullet_items(text: str) -> list[str]:
    return [item for item in _BULLET.findall(text) if item]


def numbered_items(text: str) -> list[tuple[int, str]]:
    return [(int(number), item) for number, item in _NUMBERED.findall(text)]


def split_label(text: str) -> tuple[str, str]:
    """Split "Title: description" into its parts; description may be empty."""
    title, sep, description = text.partition(":")
    if not sep:
        return text.strip(), ""
    return title.strip(), description.strip()


def find_json_block(raw: str) -> Any | None:
    """Locate and decode an embedded JSON object or array.

    Tries fenced code blocks first, then the outermost brace span, then the
    outermost bracket span. Returns None when nothing decodes.
    """
    candidates = [block.strip() for block in _FENCED_BLOCK.findall(raw)]
    for opener, closer in (("{", "}"), ("[", "]")):
        start = raw.find(opener)
        end = raw.rfind(closer) + 1
        if start >= 0 and end > start:
            candidates.append(raw[start:end])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, (dict, list)):
            return parsed
    return None


def distribute_weights(count: int) -> list[int]:
    """Equal integer weights summing to exactly 100, remainder on the last.

    >>> distribute_weights(3)
    [33, 33, 34]
    """
    if count <= 0:
        return []
    share = 100 // count
    return [share] * (count - 1) + [100 - share * (count - 1)]
