"""
Extraction Strategies.

Each strategy is a small pattern matcher over one text block that either
produces a payload (``Matched``) or explains why it did not (``Missed``).
Strategies never raise on odd input and never build the public
ExtractionResult; the engine does that.

Strategies are grouped into ordered tuples per payload kind at the bottom
of this module. Earlier entries win.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar, Union

from journeyforge.core.models.extraction import (
    ActivitiesData,
    ActivityCategory,
    ExtractionFormat,
    IdeationData,
    ParsedActivity,
    ParsedPhase,
    RubricCriterion,
    RubricData,
    count_items,
)
from journeyforge.phases.extraction.normalize import (
    DEFAULT_ACTIVITY_KEYWORDS,
    bullet_items,
    categorize_activity,
    distribute_weights,
    extract_activity_keywords,
    extract_duration,
    extract_title,
    find_json_block,
    numbered_items,
    split_label,
    split_paragraphs,
    truncate,
)


T = TypeVar("T")

PARAGRAPH_MIN_LENGTH = 20
SENTENCE_MIN_LENGTH = 20
MAX_SENTENCE_ACTIVITIES = 5
RESOURCE_MIN_LENGTH = 5
RESOURCE_MAX_LENGTH = 100


# ============================================================================
# Outcomes
# ============================================================================


@dataclass(frozen=True)
class Matched(Generic[T]):
    """A strategy recovered at least one item."""

    data: T
    warnings: tuple[str, ...] = ()

    @property
    def item_count(self) -> int:
        return count_items(self.data)


@dataclass(frozen=True)
class Missed:
    """A strategy found nothing it recognises."""

    reason: str


Outcome = Union[Matched, Missed]


@dataclass(frozen=True)
class Strategy:
    """One step of the cascade.

    Attributes:
        name: Short identifier used in logs
        format: Tag reported on results this strategy produces
        confidence: Fixed score reported on results this strategy produces
        match: Pure function from text to Outcome
        fallback: Runs only when fallback is enabled; exempt from min_confidence
        raw_text: Receives the untouched input instead of the cleaned text
    """

    name: str
    format: ExtractionFormat
    confidence: float
    match: Callable[[str], Outcome] = field(compare=False)
    fallback: bool = False
    raw_text: bool = False

    def __call__(self, text: str) -> Outcome:
        return self.match(text)


def _found(data: Any, what: str) -> Outcome:
    if count_items(data) == 0:
        return Missed(f"no {what} found")
    return Matched(data)


# ============================================================================
# Shared helpers
# ============================================================================


_PHASE_HEADER = re.compile(
    r"^\s*(?:[-*•]|\d+[.)])?\s*Phase\s+(\d+)\s*[:.)\-]\s*(.+?)\s*$", re.IGNORECASE
)
_PHASE_FIELD = re.compile(
    r"^\s*(?:[-*•]\s*)?(Focus|Activities|Duration)\s*:\s*(.*?)\s*$", re.IGNORECASE
)
_ACTIVITY_HEADER = re.compile(
    r"^\s*(?:[-*•]|\d+[.)])?\s*Activity\s+\d+\s*[:.)\-]\s*(.+?)\s*$", re.IGNORECASE
)
_MILESTONE_PREFIX = re.compile(r"^\s*milestone\s*\d*\s*:?\s*", re.IGNORECASE)
_TABLE_SEPARATOR = re.compile(r"^\s*\|?\s*:?-{3,}")
_SENTENCE_BREAK = re.compile(r"[.!?]+")
_QUESTION = re.compile(r"[^.!?\n]*\?")


def _as_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


def _first(raw: dict, *keys: str, default: Any = "") -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, "", []):
            return value
    return default


def _is_milestone(text: str) -> bool:
    return "milestone" in text.lower()


def _milestone_text(text: str) -> str:
    return _MILESTONE_PREFIX.sub("", text).strip()


def _activity_from_text(index: int, text: str) -> ParsedActivity:
    """Turn one free activity line into a record.

    "Title: description" keeps both parts; otherwise the title is derived
    from the first words and the whole line becomes the description.
    """
    title, description = split_label(text)
    if not description:
        title, description = extract_title(text), text
    return ParsedActivity(
        id=f"activity_{index}",
        title=title or "Activity",
        description=description,
        type=categorize_activity(text),
        duration=extract_duration(text, default="1 hour"),
    )


def _split_activity_lines(lines: list[str]) -> ActivitiesData:
    activities: list[ParsedActivity] = []
    milestones: list[str] = []
    for line in lines:
        if _is_milestone(line):
            milestone = _milestone_text(line)
            if milestone:
                milestones.append(milestone)
        else:
            activities.append(_activity_from_text(len(activities) + 1, line))
    return ActivitiesData(activities=activities, milestones=milestones)


# ============================================================================
# Phases
# ============================================================================


def _normalize_phase(index: int, raw: Any) -> ParsedPhase | None:
    if isinstance(raw, str):
        raw = {"title": raw}
    if not isinstance(raw, dict):
        return None
    return ParsedPhase(
        id=str(_first(raw, "id", default=f"phase_{index}")),
        title=str(_first(raw, "title", "name", default="Unnamed Phase")),
        focus=str(_first(raw, "focus", "description")),
        activities=_as_list(raw.get("activities")),
        duration=str(_first(raw, "duration", "timeframe", default="1 week")),
    )


def structured_phases(text: str) -> Outcome:
    block = find_json_block(text)
    if block is None:
        return Missed("no embedded data block")
    items = block.get("phases") if isinstance(block, dict) else block
    if not isinstance(items, list):
        return Missed("data block has no phases list")
    phases = [p for i, raw in enumerate(items, 1) if (p := _normalize_phase(i, raw))]
    return _found(phases, "phases in data block")


def marked_phases(text: str) -> Outcome:
    """ "Phase N: title" headers, each with optional Focus/Activities/Duration lines."""
    phases: list[dict[str, Any]] = []
    for line in text.splitlines():
        header = _PHASE_HEADER.match(line)
        if header:
            phases.append({"title": header.group(2), "focus": "", "activities": [], "duration": ""})
            continue
        field_match = _PHASE_FIELD.match(line)
        if field_match and phases:
            label, value = field_match.group(1).lower(), field_match.group(2)
            if label == "activities":
                phases[-1]["activities"] = _as_list(value)
            else:
                phases[-1][label] = value

    parsed = [
        ParsedPhase(
            id=f"phase_{i}",
            title=item["title"],
            focus=item["focus"],
            activities=item["activities"],
            duration=item["duration"] or extract_duration(f"{item['title']} {item['focus']}"),
        )
        for i, item in enumerate(phases, 1)
    ]
    return _found(parsed, "Phase N: headers")


def numbered_phases(text: str) -> Outcome:
    phases = []
    for number, item in numbered_items(text):
        title, focus = split_label(item)
        phases.append(
            ParsedPhase(
                id=f"phase_{number}",
                title=title,
                focus=focus,
                activities=extract_activity_keywords(focus),
                duration=extract_duration(f"{title} {focus}"),
            )
        )
    return _found(phases, "numbered items")


def paragraph_phases(text: str) -> Outcome:
    phases = [
        ParsedPhase(
            id=f"phase_{i}",
            title=extract_title(para),
            focus=para,
            activities=extract_activity_keywords(para),
            duration=extract_duration(para),
        )
        for i, para in enumerate(split_paragraphs(text, PARAGRAPH_MIN_LENGTH), 1)
    ]
    return _found(phases, "paragraphs")


def minimal_phase(text: str) -> Outcome:
    return Matched(
        [
            ParsedPhase(
                id="phase_1",
                title="Project Phase",
                focus=truncate(text),
                activities=list(DEFAULT_ACTIVITY_KEYWORDS),
                duration="1 week",
            )
        ]
    )


# ============================================================================
# Activities
# ============================================================================


def _normalize_activity(index: int, raw: Any) -> ParsedActivity | None:
    if isinstance(raw, str):
        return _activity_from_text(index, raw)
    if not isinstance(raw, dict):
        return None
    description = str(_first(raw, "description"))
    kind = str(raw.get("type", "")).lower()
    category = (
        ActivityCategory(kind)
        if kind in {c.value for c in ActivityCategory}
        else categorize_activity(description)
    )
    return ParsedActivity(
        id=str(_first(raw, "id", default=f"activity_{index}")),
        title=str(_first(raw, "title", "name", default="Activity")),
        description=description,
        type=category,
        duration=str(_first(raw, "duration", default="1 hour")),
        required=raw.get("required") is not False,
    )


def structured_activities(text: str) -> Outcome:
    block = find_json_block(text)
    if not isinstance(block, dict):
        return Missed("no embedded data object")
    if "activities" not in block and "milestones" not in block:
        return Missed("data block has no activities or milestones")
    raw_activities = block.get("activities") or []
    activities = [
        a for i, raw in enumerate(raw_activities, 1) if (a := _normalize_activity(i, raw))
    ]
    data = ActivitiesData(activities=activities, milestones=_as_list(block.get("milestones")))
    return _found(data, "activities in data block")


def marked_activities(text: str) -> Outcome:
    """ "Activity N: ..." headers and bullet items; milestone lines split off."""
    lines = []
    for line in text.splitlines():
        header = _ACTIVITY_HEADER.match(line)
        if header:
            lines.append(header.group(1))
    lines.extend(bullet_items(text))
    return _found(_split_activity_lines(lines), "marked activities")


def numbered_activities(text: str) -> Outcome:
    lines = [item for _, item in numbered_items(text)]
    return _found(_split_activity_lines(lines), "numbered activities")


def sentence_activities(text: str) -> Outcome:
    sentences = [
        s.strip() for s in _SENTENCE_BREAK.split(text) if len(s.strip()) > SENTENCE_MIN_LENGTH
    ]
    activities = [
        ParsedActivity(
            id=f"activity_{i}",
            title=f"Activity {i}",
            description=sentence,
            type=categorize_activity(sentence),
            duration=extract_duration(sentence, default="30 minutes"),
        )
        for i, sentence in enumerate(sentences[:MAX_SENTENCE_ACTIVITIES], 1)
    ]
    return _found(ActivitiesData(activities=activities), "sentences")


def minimal_activity(text: str) -> Outcome:
    return Matched(
        ActivitiesData(
            activities=[
                ParsedActivity(
                    id="activity_1",
                    title="Project Activity",
                    description=truncate(text),
                    type=ActivityCategory.EXPLORATION,
                    duration="1 hour",
                )
            ]
        )
    )


# ============================================================================
# Resources
# ============================================================================


def structured_resources(text: str) -> Outcome:
    block = find_json_block(text)
    items = block.get("resources") if isinstance(block, dict) else block
    if not isinstance(items, list):
        return Missed("no resources list in data block")
    resources = []
    for item in items:
        if isinstance(item, dict):
            item = _first(item, "name", "title")
        if isinstance(item, str) and item.strip():
            resources.append(item.strip())
    return _found(resources, "resources in data block")


def marked_resources(text: str) -> Outcome:
    return _found(bullet_items(text), "bullet resources")


def numbered_resources(text: str) -> Outcome:
    return _found([item for _, item in numbered_items(text)], "numbered resources")


def delimited_resources(text: str) -> Outcome:
    items = [part.strip() for part in re.split(r"[,;\n]", text)]
    resources = [i for i in items if RESOURCE_MIN_LENGTH < len(i) < RESOURCE_MAX_LENGTH]
    return _found(resources, "delimited resources")


def minimal_resource(text: str) -> Outcome:
    return Matched([truncate(text) or "General project materials"])


# ============================================================================
# Rubric
# ============================================================================


DEFAULT_CRITERIA = (
    ("Content Understanding", "Demonstrates knowledge of subject"),
    ("Creativity", "Shows original thinking"),
    ("Collaboration", "Works well with others"),
    ("Presentation", "Communicates effectively"),
)


def _rubric(pairs: list[tuple[str, str]], levels: list[str] | None = None) -> RubricData:
    weights = distribute_weights(len(pairs))
    criteria = [
        RubricCriterion(name=name, description=description, weight=weight)
        for (name, description), weight in zip(pairs, weights)
    ]
    if levels:
        return RubricData(criteria=criteria, levels=levels)
    return RubricData(criteria=criteria)


def structured_rubric(text: str) -> Outcome:
    block = find_json_block(text)
    if not isinstance(block, dict):
        return Missed("no embedded data object")
    body = block.get("rubric") if isinstance(block.get("rubric"), dict) else block
    raw_criteria = body.get("criteria")
    if raw_criteria is None and isinstance(block.get("rubric"), list):
        raw_criteria = block["rubric"]
    if not isinstance(raw_criteria, list):
        return Missed("data block has no criteria list")

    pairs: list[tuple[str, str]] = []
    for raw in raw_criteria:
        if isinstance(raw, str) and raw.strip():
            pairs.append(split_label(raw))
        elif isinstance(raw, dict) and _first(raw, "name", "title"):
            pairs.append((str(_first(raw, "name", "title")), str(_first(raw, "description"))))

    levels = _as_list(body.get("levels")) or None
    return _found(_rubric(pairs, levels), "criteria in data block")


def marked_rubric(text: str) -> Outcome:
    """Bullet lines of the form "- Name: description"."""
    pairs = []
    for item in bullet_items(text):
        name, description = split_label(item)
        if description and name:
            pairs.append((name, description))
    return _found(_rubric(pairs), "Name: description bullets")


def table_rubric(text: str) -> Outcome:
    """``|``-delimited rows; header and separator rows are skipped."""
    lines = text.splitlines()
    pairs = []
    for i, line in enumerate(lines):
        if "|" not in line or _TABLE_SEPARATOR.match(line):
            continue
        followed_by_separator = i + 1 < len(lines) and bool(_TABLE_SEPARATOR.match(lines[i + 1]))
        cells = [cell.strip() for cell in line.split("|") if cell.strip()]
        if len(cells) < 2 or followed_by_separator or "criteri" in cells[0].lower():
            continue
        pairs.append((cells[0], " ".join(cells[1:])))
    return _found(_rubric(pairs), "table rows")


def numbered_rubric(text: str) -> Outcome:
    pairs = [split_label(item) for _, item in numbered_items(text)]
    return _found(_rubric([p for p in pairs if p[0]]), "numbered criteria")


def paragraph_rubric(text: str) -> Outcome:
    pairs = [(extract_title(p), p) for p in split_paragraphs(text, PARAGRAPH_MIN_LENGTH)]
    return _found(_rubric(pairs), "paragraphs")


def minimal_rubric(text: str) -> Outcome:
    return Matched(_rubric(list(DEFAULT_CRITERIA)), warnings=("Using default rubric structure",))


# ============================================================================
# Ideation
# ============================================================================


_IDEATION_LABELS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("driving question", "essential question"), "driving_question"),
    (("objective",), "learning_objectives"),
    (("success", "criteria"), "success_criteria"),
    (("constraint", "limitation"), "constraints"),
    (("real", "application"), "real_world_application"),
)
_LIST_FIELDS = {"learning_objectives", "success_criteria", "constraints"}
_SECTION_HEADER = re.compile(r"^\s*([A-Za-z][A-Za-z \-]{2,40}?)\s*:\s*(.*?)\s*$")
_LINE_BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")


def _ideation_field(label: str) -> str | None:
    lower = label.lower()
    for keywords, name in _IDEATION_LABELS:
        if any(keyword in lower for keyword in keywords):
            return name
    return None


def _ideation_from_dict(raw: dict) -> IdeationData:
    return IdeationData(
        driving_question=str(_first(raw, "drivingQuestion", "driving_question", "question")),
        learning_objectives=_as_list(
            _first(raw, "learningObjectives", "learning_objectives", "objectives", default=[])
        ),
        success_criteria=_as_list(
            _first(raw, "successCriteria", "success_criteria", "criteria", default=[])
        ),
        constraints=_as_list(raw.get("constraints")),
        real_world_application=str(
            _first(raw, "realWorldApplication", "real_world_application", "application")
        ),
    )


def structured_ideation(text: str) -> Outcome:
    block = find_json_block(text)
    if not isinstance(block, dict):
        return Missed("no embedded data object")
    return _found(_ideation_from_dict(block), "ideation fields in data block")


def marked_ideation(text: str) -> Outcome:
    """ "Driving Question:" style sections with inline or following content."""
    sections: dict[str, list[str]] = {}
    current: str | None = None
    for line in text.splitlines():
        header = _SECTION_HEADER.match(line)
        field_name = _ideation_field(header.group(1)) if header else None
        if field_name:
            current = field_name
            sections.setdefault(current, [])
            if header.group(2):
                sections[current].append(header.group(2))
            continue
        content = _LINE_BULLET.sub("", line).strip()
        if current and content:
            sections[current].append(content)

    data = IdeationData(
        **{
            name: (lines if name in _LIST_FIELDS else " ".join(lines))
            for name, lines in sections.items()
        }
    )
    return _found(data, "ideation sections")


def numbered_ideation(text: str) -> Outcome:
    """Numbered items become objectives; the first question becomes the driving question."""
    objectives = [item for _, item in numbered_items(text)]
    if not objectives:
        return Missed("no numbered items")
    question = _QUESTION.search(text)
    return Matched(
        IdeationData(
            driving_question=question.group(0).strip() if question else "",
            learning_objectives=objectives,
        )
    )


def paragraph_ideation(text: str) -> Outcome:
    question = _QUESTION.search(text)
    paragraphs = split_paragraphs(text, PARAGRAPH_MIN_LENGTH)
    driving_question = question.group(0).strip() if question else ""
    application = next((p for p in paragraphs if "?" not in p), "")
    return _found(
        IdeationData(driving_question=driving_question, real_world_application=application),
        "question or paragraph",
    )


def minimal_ideation(text: str) -> Outcome:
    return Matched(
        IdeationData(
            driving_question=truncate(text) or "What real-world problem will this project address?"
        )
    )


# ============================================================================
# Cascades
# ============================================================================


def _cascade(
    structured: Callable[[str], Outcome],
    marked: Callable[[str], Outcome],
    numbered: Callable[[str], Outcome],
    paragraph: Callable[[str], Outcome],
    minimal: Callable[[str], Outcome],
    table: Callable[[str], Outcome] | None = None,
) -> tuple[Strategy, ...]:
    steps = [
        Strategy("structured", ExtractionFormat.STRUCTURED, 1.0, structured, raw_text=True),
        Strategy("marked-list", ExtractionFormat.MARKED_LIST, 0.9, marked),
    ]
    if table is not None:
        steps.append(Strategy("table", ExtractionFormat.TABLE, 0.8, table))
    steps += [
        Strategy("numbered-list", ExtractionFormat.NUMBERED_LIST, 0.8, numbered),
        Strategy("paragraph", ExtractionFormat.PARAGRAPH_HEURISTIC, 0.5, paragraph, fallback=True),
        Strategy("minimal", ExtractionFormat.MINIMAL_FALLBACK, 0.3, minimal, fallback=True),
    ]
    return tuple(steps)


PHASE_STRATEGIES = _cascade(
    structured_phases, marked_phases, numbered_phases, paragraph_phases, minimal_phase
)
ACTIVITY_STRATEGIES = _cascade(
    structured_activities,
    marked_activities,
    numbered_activities,
    sentence_activities,
    minimal_activity,
)
RESOURCE_STRATEGIES = _cascade(
    structured_resources,
    marked_resources,
    numbered_resources,
    delimited_resources,
    minimal_resource,
)
RUBRIC_STRATEGIES = _cascade(
    structured_rubric,
    marked_rubric,
    numbered_rubric,
    paragraph_rubric,
    minimal_rubric,
    table=table_rubric,
)
IDEATION_STRATEGIES = _cascade(
    structured_ideation, marked_ideation, numbered_ideation, paragraph_ideation, minimal_ideation
)
