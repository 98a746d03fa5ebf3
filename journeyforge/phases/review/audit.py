"""
Iteration analytics and reviewer-facing completion audits.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from journeyforge.core.enums import PHASE_ORDER, PhaseType
from journeyforge.core.events.iteration import IterationEvent
from journeyforge.core.events.revision import ChangeRecord
from journeyforge.core.models.journey import JourneyState, Phase
from journeyforge.phases.review.differ import diff_records


# Share of all iterations above which a phase is flagged as a hotspot
HOTSPOT_SHARE = 0.4

MIN_OBJECTIVES = 2
MIN_ACTIVITIES = 2
MIN_DELIVERABLES = 1


# ============================================================================
# Iteration Audit Log
# ============================================================================


class IterationAuditLog:
    """Read-only view over a journey's confirmed iterations.

    Usage:
        log = IterationAuditLog.from_state(engine.state)
        log.transition_counts()[(PhaseType.PROTOTYPE, PhaseType.BRAINSTORM)]
    """

    def __init__(self, events: Sequence[IterationEvent] = ()):
        self._events = tuple(events)

    @classmethod
    def from_state(cls, state: JourneyState) -> "IterationAuditLog":
        return cls(state.iteration_history)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[IterationEvent]:
        return iter(self._events)

    @property
    def events(self) -> tuple[IterationEvent, ...]:
        return self._events

    def for_phase(self, phase_type: PhaseType) -> list[IterationEvent]:
        """Events that left from or returned to ``phase_type``."""
        return [e for e in self._events if phase_type in (e.from_phase, e.to_phase)]

    def transition_counts(self) -> Counter[tuple[PhaseType, PhaseType]]:
        return Counter((e.from_phase, e.to_phase) for e in self._events)

    def revisit_counts(self) -> dict[PhaseType, int]:
        """How often each phase was returned to, in pipeline order."""
        counts = Counter(e.to_phase for e in self._events)
        return {phase: counts.get(phase, 0) for phase in PHASE_ORDER}

    def most_revisited_phase(self) -> PhaseType | None:
        """Ties resolve to the earliest phase in the pipeline."""
        counts = self.revisit_counts()
        best = max(counts.values(), default=0)
        if best == 0:
            return None
        return next(phase for phase in PHASE_ORDER if counts[phase] == best)

    def hotspots(self) -> list[PhaseType]:
        """Phases drawing more than HOTSPOT_SHARE of all iterations."""
        total = len(self._events)
        if total == 0:
            return []
        return [p for p, n in self.revisit_counts().items() if n > total * HOTSPOT_SHARE]

    def total_minutes(self) -> int:
        return sum(e.duration_minutes for e in self._events)

    def summary(self) -> dict[str, Any]:
        total = len(self._events)
        most = self.most_revisited_phase()
        return {
            "total_iterations": total,
            "total_minutes": self.total_minutes(),
            "average_minutes": self.total_minutes() / total if total else 0.0,
            "transitions": {
                f"{src.value}->{dst.value}": count
                for (src, dst), count in sorted(
                    self.transition_counts().items(),
                    key=lambda item: (PHASE_ORDER.index(item[0][0]), PHASE_ORDER.index(item[0][1])),
                )
            },
            "revisits": {phase.value: count for phase, count in self.revisit_counts().items()},
            "most_revisited_phase": most.value if most else None,
            "hotspots": [phase.value for phase in self.hotspots()],
            "reasons": [e.reason for e in self._events],
        }


# ============================================================================
# Completion Audit
# ============================================================================


class PhaseAudit(BaseModel):
    """Completion status of one phase as a reviewer sees it."""

    phase: PhaseType
    name: str
    objectives: int
    activities: int
    deliverables: int
    meets_criteria: bool
    manually_completed: bool
    missing: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def is_complete(self) -> bool:
        return self.meets_criteria or self.manually_completed


class CompletionAudit(BaseModel):
    project_id: str
    phases: dict[str, PhaseAudit]
    complete_phases: int
    journey_complete: bool

    model_config = ConfigDict(frozen=True)


def _missing(phase: Phase) -> list[str]:
    gaps = []
    for label, have, need in (
        ("objective", len(phase.objectives), MIN_OBJECTIVES),
        ("activity", len(phase.activities), MIN_ACTIVITIES),
        ("deliverable", len(phase.deliverables), MIN_DELIVERABLES),
    ):
        if have < need:
            short = need - have
            noun = label if short == 1 else ("activities" if label == "activity" else f"{label}s")
            gaps.append(f"needs {short} more {noun}")
    return gaps


def audit_phase(phase: Phase) -> PhaseAudit:
    return PhaseAudit(
        phase=phase.type,
        name=phase.name,
        objectives=len(phase.objectives),
        activities=len(phase.activities),
        deliverables=len(phase.deliverables),
        meets_criteria=phase.meets_completion_criteria,
        manually_completed=phase.completed,
        missing=_missing(phase),
    )


def completion_audit(state: JourneyState) -> CompletionAudit:
    """Per-phase completion report keyed by phase type."""
    phases = {phase.type.value: audit_phase(phase) for phase in state.phases}
    return CompletionAudit(
        project_id=state.project_id,
        phases=phases,
        complete_phases=sum(1 for audit in phases.values() if audit.meets_criteria),
        journey_complete=all(audit.meets_criteria for audit in phases.values()),
    )


def diff_completion(before: CompletionAudit, after: CompletionAudit) -> list[ChangeRecord]:
    """What changed between two audits, e.g. "phases.ANALYZE.objectives"."""
    return diff_records(before, after)
