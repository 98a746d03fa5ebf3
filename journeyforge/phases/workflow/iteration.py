"""
Iteration protocol - controlled backward navigation.

A backward move is proposed, then either confirmed with a rationale or
cancelled. Confirmation is the only path that moves the phase pointer
backwards, and it appends the IterationEvent in the same snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable

from journeyforge.core.enums import PhaseType
from journeyforge.core.events.iteration import IterationEvent
from journeyforge.core.models.journey import JourneyState


class NavigationOutcome(str, Enum):
    """Result of a navigation request."""
    MOVED = "moved"
    PENDING_ITERATION = "pending_iteration"
    IGNORED = "ignored"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class PendingIteration:
    """A proposed backward move awaiting a rationale.

    Attributes:
        from_index: Phase index the user is leaving
        to_index: Earlier phase index the user wants to return to
        from_phase: Phase type being left
        to_phase: Phase type being returned to
        proposed_at: When the move was proposed
    """

    from_index: int
    to_index: int
    from_phase: PhaseType
    to_phase: PhaseType
    proposed_at: datetime

    @classmethod
    def propose(
        cls, state: JourneyState, target_index: int, clock: Callable[[], datetime]
    ) -> "PendingIteration":
        current = state.current_phase_index
        if target_index >= current:
            raise ValueError(
                f"Iteration must move backwards (current {current}, target {target_index})"
            )
        return cls(
            from_index=current,
            to_index=target_index,
            from_phase=state.phases[current].type,
            to_phase=state.phases[target_index].type,
            proposed_at=clock(),
        )

    @staticmethod
    def is_valid_reason(reason: str | None) -> bool:
        return bool(reason and reason.strip())

    def commit(
        self, state: JourneyState, reason: str, clock: Callable[[], datetime]
    ) -> JourneyState:
        """Build the snapshot with the event appended and the pointer moved."""
        if not self.is_valid_reason(reason):
            raise ValueError("An iteration needs a non-empty reason")
        event = IterationEvent(
            from_phase=self.from_phase,
            to_phase=self.to_phase,
            reason=reason.strip(),
            timestamp=clock(),
        )
        return state.model_copy(
            update={
                "iteration_history": [*state.iteration_history, event],
                "current_phase_index": self.to_index,
            }
        )
