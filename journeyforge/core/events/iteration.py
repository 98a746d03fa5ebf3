"""
Iteration events.

An IterationEvent records one confirmed backward move through the phase
pipeline together with the rationale the user gave for it.
"""

from __future__ import annotations

from pydantic import ConfigDict, Field

from journeyforge.core.events.base import BaseEvent
from journeyforge.core.enums import PhaseType
from journeyforge.utils.ids import generate_iteration_id


class IterationEvent(BaseEvent):
    """Confirmed backward navigation from one phase to an earlier one."""

    id: str = Field(default_factory=generate_iteration_id)
    from_phase: PhaseType = Field(description="Phase the user left")
    to_phase: PhaseType = Field(description="Earlier phase the user returned to")
    reason: str = Field(description="Rationale supplied at confirmation")
    duration_minutes: int = Field(
        default=0,
        ge=0,
        description="Time spent on the iteration loop, filled in by callers"
    )

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"Iteration({self.from_phase.value} -> {self.to_phase.value}: {self.reason[:40]})"
