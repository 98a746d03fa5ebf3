"""
Undo/redo for phase content edits.

Only editable content is remembered (phases and project duration). Undo
and redo graft that content onto the current snapshot, so the phase
pointer and the iteration log always stay as they are.
"""

from __future__ import annotations

from collections import deque
from typing import NamedTuple

from journeyforge.core.models.journey import JourneyState, Phase


DEFAULT_HISTORY_LIMIT = 50


class ContentSnapshot(NamedTuple):
    phases: list[Phase]
    project_duration_weeks: int

    @classmethod
    def of(cls, state: JourneyState) -> "ContentSnapshot":
        return cls(list(state.phases), state.project_duration_weeks)

    def restore_onto(self, state: JourneyState) -> JourneyState:
        return state.model_copy(
            update={
                "phases": list(self.phases),
                "project_duration_weeks": self.project_duration_weeks,
            }
        )


class UndoHistory:
    """Bounded undo stack with a redo branch.

    Recording a new edit discards the redo branch. When the stack is full
    the oldest entry is dropped.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError(f"History limit must be positive, got {limit}")
        self.limit = limit
        self._past: deque[ContentSnapshot] = deque(maxlen=limit)
        self._future: list[ContentSnapshot] = []

    def __len__(self) -> int:
        return len(self._past)

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def record(self, before: JourneyState) -> None:
        """Remember the content of ``before`` ahead of an edit."""
        self._past.append(ContentSnapshot.of(before))
        self._future.clear()

    def undo(self, current: JourneyState) -> JourneyState | None:
        if not self._past:
            return None
        self._future.append(ContentSnapshot.of(current))
        return self._past.pop().restore_onto(current)

    def redo(self, current: JourneyState) -> JourneyState | None:
        if not self._future:
            return None
        self._past.append(ContentSnapshot.of(current))
        return self._future.pop().restore_onto(current)

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
