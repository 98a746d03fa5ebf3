"""
Extraction Models for JourneyForge.

Payload records recovered from generated text, and the generic
ExtractionResult wrapper every parse operation returns.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


DEGRADED_THRESHOLD = 0.6

DEFAULT_RUBRIC_LEVELS = ["Emerging", "Developing", "Proficient", "Advanced"]


class ExtractionFormat(str, Enum):
    """Which strategy produced a result."""
    STRUCTURED = "structured"
    MARKED_LIST = "marked-list"
    TABLE = "table"
    NUMBERED_LIST = "numbered-list"
    PARAGRAPH_HEURISTIC = "paragraph-heuristic"
    MINIMAL_FALLBACK = "minimal-fallback"
    NONE = "none"


class ActivityCategory(str, Enum):
    EXPLORATION = "exploration"
    CREATION = "creation"
    COLLABORATION = "collaboration"
    PRESENTATION = "presentation"


# ============================================================================
# Payload Records
# ============================================================================


class ParsedPhase(BaseModel):
    """A phase suggestion as recovered from text.

    Attributes:
        id: Positional id ("phase_1", ...)
        title: Short phase title
        focus: What the phase concentrates on
        activities: Activity keywords or names
        duration: Free-text duration ("2 weeks")
    """

    id: str
    title: str = "Unnamed Phase"
    focus: str = ""
    activities: list[str] = Field(default_factory=list)
    duration: str = "1 week"


class ParsedActivity(BaseModel):
    id: str
    title: str = "Activity"
    description: str = ""
    type: ActivityCategory = ActivityCategory.EXPLORATION
    duration: str = "1 hour"
    required: bool = True


class ActivitiesData(BaseModel):
    activities: list[ParsedActivity] = Field(default_factory=list)
    milestones: list[str] = Field(default_factory=list)


class RubricCriterion(BaseModel):
    name: str
    description: str = ""
    weight: int = Field(default=0, ge=0, le=100)


class RubricData(BaseModel):
    criteria: list[RubricCriterion] = Field(default_factory=list)
    levels: list[str] = Field(default_factory=lambda: list(DEFAULT_RUBRIC_LEVELS))

    @property
    def weights(self) -> list[int]:
        return [criterion.weight for criterion in self.criteria]


class IdeationData(BaseModel):
    """Ideation framing recovered from text."""

    driving_question: str = ""
    learning_objectives: list[str] = Field(default_factory=list)
    success_criteria: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    real_world_application: str = ""


def count_items(data: Any) -> int:
    """Number of records carried by an extraction payload.

    Lists count their entries; ActivitiesData counts activities plus
    milestones; RubricData counts criteria; IdeationData counts filled
    fields and list entries.
    """
    if data is None:
        return 0
    if isinstance(data, list):
        return len(data)
    if isinstance(data, ActivitiesData):
        return len(data.activities) + len(data.milestones)
    if isinstance(data, RubricData):
        return len(data.criteria)
    if isinstance(data, IdeationData):
        return (
            int(bool(data.driving_question.strip()))
            + int(bool(data.real_world_application.strip()))
            + len(data.learning_objectives)
            + len(data.success_criteria)
            + len(data.constraints)
        )
    return 1


# ============================================================================
# Extraction Result
# ============================================================================


T = TypeVar("T")


class ExtractionResult(BaseModel, Generic[T]):
    """Public outcome of one parse operation.

    Attributes:
        data: The recovered payload
        confidence: Score in [0, 1] fixed by the producing strategy
        format: Strategy tag
        warnings: Human-readable notes (degraded results, empty results)
    """

    data: T
    confidence: float = Field(ge=0.0, le=1.0)
    format: ExtractionFormat
    warnings: list[str] = Field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"ExtractionResult({self.format.value}, confidence={self.confidence}, "
            f"items={self.item_count})"
        )

    @property
    def item_count(self) -> int:
        return count_items(self.data)

    @property
    def is_empty(self) -> bool:
        return self.item_count == 0

    @property
    def is_degraded(self) -> bool:
        """Low confidence results should be confirmed by the user."""
        return self.confidence < DEGRADED_THRESHOLD

    def should_auto_apply(self, threshold: float = DEGRADED_THRESHOLD) -> bool:
        return not self.is_empty and self.confidence >= threshold
