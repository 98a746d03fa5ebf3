"""
Journey Models for JourneyForge.

Defines the phase content records (objectives, activities, deliverables),
the Phase model and the JourneyState snapshot that the workflow engine
produces on every mutation.

Snapshots are immutable by convention: the engine never edits a snapshot
in place, it builds a new one with ``model_copy(update=...)`` so callers
can detect changes by identity.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from journeyforge.core.enums import PHASE_ORDER, GradeBand, PhaseType
from journeyforge.core.events.iteration import IterationEvent
from journeyforge.utils.ids import (
    generate_activity_id,
    generate_deliverable_id,
    generate_id,
    generate_objective_id,
)


ALLOCATION_TOLERANCE = 1e-6

DEFAULT_ALLOCATIONS: dict[PhaseType, float] = {
    PhaseType.ANALYZE: 0.25,
    PhaseType.BRAINSTORM: 0.25,
    PhaseType.PROTOTYPE: 0.35,
    PhaseType.EVALUATE: 0.15,
}


# ============================================================================
# Duration Math
# ============================================================================


def phase_duration_weeks(project_duration_weeks: int, allocation: float) -> int:
    """Weeks for one phase, rounded half-up.

    Goes through Decimal(str(...)) so 10 * 0.15 rounds to 2, not 1.
    """
    product = Decimal(str(project_duration_weeks)) * Decimal(str(allocation))
    return int(product.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_weeks(weeks: int) -> str:
    return f"{weeks} week{'' if weeks == 1 else 's'}"


# ============================================================================
# Phase Content Records
# ============================================================================


class Objective(BaseModel):
    """A learning objective within a phase."""

    id: str = Field(default_factory=generate_objective_id)
    text: str = ""
    required: bool = True

    model_config = ConfigDict(frozen=True)


class Activity(BaseModel):
    """A student activity within a phase."""

    id: str = Field(default_factory=generate_activity_id)
    name: str = ""
    description: str = ""
    duration: str = ""
    resources: list[str] = Field(default_factory=list)
    student_choice: bool = False

    model_config = ConfigDict(frozen=True)


class Deliverable(BaseModel):
    """A product students hand in at the end of a phase."""

    id: str = Field(default_factory=generate_deliverable_id)
    name: str = ""
    format: str = ""
    assessment_criteria: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class IterationSupport(BaseModel):
    """Guidance for looping back into a phase.

    Attributes:
        triggers: Situations that typically send students back here
        resources: Material that helps during the loop
        time_buffer: Percentage of phase time reserved for iteration
        strategies: Suggested ways to run the loop
    """

    triggers: list[str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    time_buffer: int = Field(default=0, ge=0, le=100)
    strategies: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class PhaseAssessment(BaseModel):
    formative: list[str] = Field(default_factory=list)
    summative: str = ""
    rubric_criteria: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


# ============================================================================
# Phase
# ============================================================================


class Phase(BaseModel):
    """One of the four fixed stages of a journey.

    ``duration`` and ``duration_weeks`` are derived from the project
    duration and ``allocation``; the engine recomputes them together.
    ``completed`` is a manual override and is independent of the
    completion predicate.
    """

    type: PhaseType
    name: str
    description: str = ""
    allocation: float = Field(ge=0.0, le=1.0)
    duration_weeks: int = Field(default=0, ge=0)
    duration: str = ""
    objectives: list[Objective] = Field(default_factory=list)
    activities: list[Activity] = Field(default_factory=list)
    deliverables: list[Deliverable] = Field(default_factory=list)
    iteration_support: IterationSupport = Field(default_factory=IterationSupport)
    assessment: PhaseAssessment = Field(default_factory=PhaseAssessment)
    student_agency: list[str] = Field(default_factory=list)
    completed: bool = False

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"Phase({self.type.value}, {self.duration or '?'})"

    @property
    def meets_completion_criteria(self) -> bool:
        """objectives >= 2, activities >= 2 and deliverables >= 1."""
        return (
            len(self.objectives) >= 2
            and len(self.activities) >= 2
            and len(self.deliverables) >= 1
        )


# ============================================================================
# Seed Context
# ============================================================================


class SeedContext(BaseModel):
    """Prior-stage context used once when a journey is created."""

    subject: str = ""
    grade_level: str = "middle"
    duration_weeks: int = Field(default=4, ge=1)
    big_idea: str = ""
    essential_question: str = ""
    challenge: str = ""

    @classmethod
    def from_captured(cls, captured: dict[str, Any] | None) -> "SeedContext":
        """Build from the nested wizard/ideation dict captured by earlier stages.

        Missing keys fall back to the defaults (4 weeks, middle school).
        """
        captured = captured or {}
        wizard = captured.get("wizard") or {}
        ideation = captured.get("ideation") or {}
        return cls(
            subject=(wizard.get("subject") or {}).get("area", "") or "",
            grade_level=(wizard.get("students") or {}).get("gradeLevel", "middle") or "middle",
            duration_weeks=(wizard.get("timeline") or {}).get("duration", 4) or 4,
            big_idea=ideation.get("bigIdea", "") or "",
            essential_question=ideation.get("essentialQuestion", "") or "",
            challenge=ideation.get("challenge", "") or "",
        )


# ============================================================================
# Journey State
# ============================================================================


class JourneyState(BaseModel):
    """Complete snapshot of one project's creative-process journey.

    Attributes:
        project_id: Identifier used by persistence and revision history
        project_duration_weeks: Total project length
        grade_level: Grade band used for scaffolding
        subject, big_idea, essential_question, challenge: Seed framing
        phases: Exactly four phases in ANALYZE..EVALUATE order
        current_phase_index: Index of the active phase
        iteration_history: Append-only log of confirmed backward moves
        allow_iteration: Whether backward navigation is permitted
    """

    project_id: str = Field(default_factory=lambda: generate_id("PROJ"))
    project_duration_weeks: int = Field(default=4, ge=1)
    grade_level: GradeBand = GradeBand.MIDDLE
    subject: str = ""
    big_idea: str = ""
    essential_question: str = ""
    challenge: str = ""
    phases: list[Phase]
    current_phase_index: int = 0
    iteration_history: list[IterationEvent] = Field(default_factory=list)
    allow_iteration: bool = True

    model_config = ConfigDict(frozen=True)

    @field_validator("grade_level", mode="before")
    @classmethod
    def _normalise_grade(cls, value: Any) -> GradeBand:
        return GradeBand.from_text(value)

    @field_validator("phases")
    @classmethod
    def _check_phase_order(cls, phases: list[Phase]) -> list[Phase]:
        types = tuple(phase.type for phase in phases)
        if types != PHASE_ORDER:
            raise ValueError(
                f"phases must be {[t.value for t in PHASE_ORDER]}, got {[t.value for t in types]}"
            )
        total = sum(phase.allocation for phase in phases)
        if abs(total - 1.0) > ALLOCATION_TOLERANCE:
            raise ValueError(f"phase allocations must sum to 1.0, got {total}")
        return phases

    @model_validator(mode="after")
    def _check_current_index(self) -> "JourneyState":
        if not 0 <= self.current_phase_index < len(self.phases):
            raise ValueError(
                f"current_phase_index {self.current_phase_index} out of range"
            )
        return self

    def __str__(self) -> str:
        return (
            f"JourneyState({self.project_id}, phase={self.current_phase.type.value}, "
            f"iterations={len(self.iteration_history)})"
        )

    @property
    def current_phase(self) -> Phase:
        return self.phases[self.current_phase_index]

    @property
    def allocations(self) -> list[float]:
        return [phase.allocation for phase in self.phases]

    def phase_index(self, phase_type: PhaseType) -> int:
        return PHASE_ORDER.index(phase_type)

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-compatible structure (enums as values, datetimes as ISO)."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JourneyState":
        return cls.model_validate(data)

    def to_json(self, indent: int | None = 2) -> str:
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_json(cls, payload: str) -> "JourneyState":
        return cls.model_validate_json(payload)
