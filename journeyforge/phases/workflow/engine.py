"""
Phase Workflow Engine for JourneyForge.

Owns one JourneyState and every change made to it: navigation through the
ANALYZE -> BRAINSTORM -> PROTOTYPE -> EVALUATE pipeline, the iteration
protocol for backward moves, phase content edits, time allocation and
undo/redo.

Each successful mutating call replaces ``state`` with a new snapshot, so
callers can detect changes with ``is``. The engine is not reentrant; one
writer at a time.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, Callable, NoReturn

from pydantic import ValidationError

from journeyforge.app.config import WorkflowConfig
from journeyforge.core.enums import PHASE_ORDER, PhaseType
from journeyforge.core.events.base import utc_now
from journeyforge.core.exceptions import (
    InvalidTransitionError,
    IterationPendingError,
    JourneyValidationError,
    NoPendingIterationError,
)
from journeyforge.core.models.extraction import ActivitiesData, ExtractionResult, ParsedPhase
from journeyforge.core.models.journey import (
    Activity,
    Deliverable,
    IterationSupport,
    JourneyState,
    Objective,
    Phase,
    PhaseAssessment,
    SeedContext,
    format_weeks,
    phase_duration_weeks,
)
from journeyforge.phases.review.revisions import RevisionHistory
from journeyforge.phases.workflow.history import UndoHistory
from journeyforge.phases.workflow.iteration import NavigationOutcome, PendingIteration
from journeyforge.phases.workflow.templates import build_default_phases, grade_examples
from journeyforge.phases.workflow.validation import (
    ACTIVITY_DESCRIPTION_MAX,
    ACTIVITY_NAME_MAX,
    validate_activity,
    validate_deliverable,
    validate_objective,
)
from journeyforge.utils.ids import generate_id
from journeyforge.utils.logging import get_logger, log_operation

logger = get_logger("workflow.engine")

_SNAKE = re.compile(r"(?<!^)(?=[A-Z])")


def _clip(text: str, limit: int) -> str:
    text = text.strip()
    return text if len(text) <= limit else text[: limit - 3].rstrip() + "..."


def _coerce(model: type, value: Any, text_field: str | None = None) -> Any:
    """Accept a model instance, a mapping of its fields, or (for objectives) plain text.

    Raises JourneyValidationError naming the first offending field.
    """
    label = _SNAKE.sub("_", model.__name__).lower()
    if isinstance(value, model):
        return value
    try:
        if isinstance(value, Mapping):
            return model(**value)
        if text_field and isinstance(value, str):
            return model(**{text_field: value})
    except ValidationError as e:
        error = e.errors()[0]
        loc = ".".join(str(part) for part in error["loc"])
        raise JourneyValidationError(f"{label}.{loc}" if loc else label, value, error["msg"]) from e
    raise JourneyValidationError(
        label, value, f"Expected {model.__name__} or mapping, got {type(value).__name__}"
    )


class PhaseWorkflowEngine:
    """Manages one project's four-phase journey.

    Usage:
        engine = PhaseWorkflowEngine.from_seed(SeedContext(duration_weeks=8))
        engine.add_objective(0, "Map the school's energy use")
        engine.navigate_to_phase(2)            # MOVED
        engine.navigate_to_phase(0)            # PENDING_ITERATION
        engine.confirm_iteration("Survey data was incomplete")

    Attributes:
        config: Workflow settings
        revisions: Optional revision history fed on every committed change
    """

    def __init__(
        self,
        state: JourneyState,
        config: WorkflowConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        revisions: RevisionHistory | None = None,
    ):
        self.config = config or WorkflowConfig()
        self.revisions = revisions
        self._state = state
        self._clock = clock or utc_now
        self._history = UndoHistory(self.config.history_limit)
        self._pending: PendingIteration | None = None

    @classmethod
    def from_seed(
        cls,
        seed: SeedContext | None = None,
        config: WorkflowConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        revisions: RevisionHistory | None = None,
        project_id: str | None = None,
    ) -> "PhaseWorkflowEngine":
        """Create a fresh journey from prior-stage context."""
        config = config or WorkflowConfig()
        seed = seed or SeedContext(duration_weeks=config.default_duration_weeks)
        state = JourneyState(
            project_id=project_id or generate_id("PROJ"),
            project_duration_weeks=seed.duration_weeks,
            grade_level=seed.grade_level,
            subject=seed.subject,
            big_idea=seed.big_idea,
            essential_question=seed.essential_question,
            challenge=seed.challenge,
            phases=build_default_phases(seed.duration_weeks),
            allow_iteration=config.allow_iteration,
        )
        log_operation(
            logger,
            "Created journey",
            {"project": state.project_id, "weeks": state.project_duration_weeks,
             "grade": state.grade_level.value},
        )
        return cls(state, config=config, clock=clock, revisions=revisions)

    # ========== Read access ==========

    @property
    def state(self) -> JourneyState:
        return self._state

    @property
    def pending_iteration(self) -> PendingIteration | None:
        return self._pending

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @staticmethod
    def is_phase_complete(phase: Phase) -> bool:
        """objectives >= 2, activities >= 2 and deliverables >= 1."""
        return phase.meets_completion_criteria

    def is_journey_complete(self) -> bool:
        return all(self.is_phase_complete(phase) for phase in self._state.phases)

    def phase_progress(self, phase_index: int) -> int:
        """0..100, averaging objective, activity and deliverable coverage."""
        self._check_index(phase_index)
        phase = self._state.phases[phase_index]
        objective_pct = min(100.0, len(phase.objectives) / 2 * 100)
        activity_pct = min(100.0, len(phase.activities) / 2 * 100)
        deliverable_pct = min(100.0, len(phase.deliverables) * 100)
        return round((objective_pct + activity_pct + deliverable_pct) / 3)

    def overall_progress(self) -> int:
        """Percentage of phases meeting the completion criteria."""
        phases = self._state.phases
        complete = sum(1 for phase in phases if self.is_phase_complete(phase))
        return round(complete / len(phases) * 100)

    # ========== Internals ==========

    def _check_index(self, phase_index: int) -> None:
        if not 0 <= phase_index < len(self._state.phases):
            raise InvalidTransitionError(phase_index, len(self._state.phases))

    def _guard(self, operation: str) -> None:
        if self._pending is not None:
            logger.warning(f"Rejected {operation}: iteration awaiting confirmation")
            raise IterationPendingError(operation)

    def _reject(self, operation: str, error: JourneyValidationError) -> NoReturn:
        logger.warning(f"Rejected {operation}: {error.field}: {error.message}")
        raise error

    def _commit(self, new_state: JourneyState, operation: str, undoable: bool = True) -> JourneyState:
        before = self._state
        if undoable:
            self._history.record(before)
        self._state = new_state
        if self.revisions is not None:
            self.revisions.record(before.project_id, before, new_state, label=operation)
        log_operation(logger, operation, {"project": new_state.project_id}, level=logging.DEBUG)
        return new_state

    def _with_phase(self, phase_index: int, **changes: Any) -> JourneyState:
        phases = list(self._state.phases)
        phases[phase_index] = phases[phase_index].model_copy(update=changes)
        return self._state.model_copy(update={"phases": phases})

    def _with_durations(self, phases: Sequence[Phase], weeks: int) -> list[Phase]:
        updated = []
        for phase in phases:
            phase_weeks = phase_duration_weeks(weeks, phase.allocation)
            updated.append(
                phase.model_copy(
                    update={"duration_weeks": phase_weeks, "duration": format_weeks(phase_weeks)}
                )
            )
        return updated

    # ========== Navigation ==========

    def navigate_to_phase(self, phase_index: int) -> NavigationOutcome:
        """Move the phase pointer.

        Forward moves happen at once. Backward moves open a pending
        iteration when iteration is allowed and are ignored otherwise.

        Raises:
            InvalidTransitionError: index outside the pipeline
            IterationPendingError: another iteration awaits confirmation
        """
        self._guard("navigate_to_phase")
        self._check_index(phase_index)
        current = self._state.current_phase_index

        if phase_index == current:
            return NavigationOutcome.UNCHANGED

        if phase_index > current:
            self._commit(
                self._state.model_copy(update={"current_phase_index": phase_index}),
                "navigate_to_phase",
                undoable=False,
            )
            return NavigationOutcome.MOVED

        if not self._state.allow_iteration:
            logger.info(f"Ignored backward move {current} -> {phase_index}: iteration disabled")
            return NavigationOutcome.IGNORED

        self._pending = PendingIteration.propose(self._state, phase_index, self._clock)
        logger.info(
            f"Iteration proposed {self._pending.from_phase.value} -> {self._pending.to_phase.value}"
        )
        return NavigationOutcome.PENDING_ITERATION

    def confirm_iteration(self, reason: str) -> JourneyState | None:
        """Commit the pending backward move with its rationale.

        A blank reason leaves the proposal pending and returns None.

        Raises:
            NoPendingIterationError: nothing was proposed
        """
        if self._pending is None:
            raise NoPendingIterationError()
        if not PendingIteration.is_valid_reason(reason):
            logger.warning("Iteration not confirmed: a reason is required")
            return None

        pending = self._pending
        new_state = pending.commit(self._state, reason, self._clock)
        self._pending = None
        log_operation(
            logger,
            "Iteration confirmed",
            {"from": pending.from_phase.value, "to": pending.to_phase.value},
        )
        return self._commit(new_state, "confirm_iteration", undoable=False)

    def cancel_iteration(self) -> None:
        """Discard the pending backward move. State is untouched."""
        if self._pending is None:
            raise NoPendingIterationError()
        logger.info(f"Iteration cancelled ({self._pending.to_phase.value})")
        self._pending = None

    def continue_forward(self) -> NavigationOutcome:
        """Advance to the next unfinished phase, else simply the next one."""
        self._guard("continue_forward")
        current = self._state.current_phase_index
        later = range(current + 1, len(self._state.phases))
        for index in later:
            phase = self._state.phases[index]
            if not (phase.completed or self.is_phase_complete(phase)):
                return self.navigate_to_phase(index)
        if current + 1 < len(self._state.phases):
            return self.navigate_to_phase(current + 1)
        return NavigationOutcome.UNCHANGED

    def set_allow_iteration(self, allowed: bool) -> JourneyState:
        self._guard("set_allow_iteration")
        if self._state.allow_iteration == allowed:
            return self._state
        return self._commit(
            self._state.model_copy(update={"allow_iteration": allowed}),
            "set_allow_iteration",
            undoable=False,
        )

    # ========== Phase content ==========

    def add_objective(self, phase_index: int, objective: Objective | Mapping | str) -> JourneyState:
        self._guard("add_objective")
        self._check_index(phase_index)
        try:
            record = _coerce(Objective, objective, text_field="text")
            validate_objective(record)
        except JourneyValidationError as e:
            self._reject("add_objective", e)
        phase = self._state.phases[phase_index]
        return self._commit(
            self._with_phase(phase_index, objectives=[*phase.objectives, record]),
            "add_objective",
        )

    def add_activity(self, phase_index: int, activity: Activity | Mapping) -> JourneyState:
        self._guard("add_activity")
        self._check_index(phase_index)
        try:
            record = _coerce(Activity, activity)
            validate_activity(record)
        except JourneyValidationError as e:
            self._reject("add_activity", e)
        phase = self._state.phases[phase_index]
        return self._commit(
            self._with_phase(phase_index, activities=[*phase.activities, record]),
            "add_activity",
        )

    def add_deliverable(self, phase_index: int, deliverable: Deliverable | Mapping) -> JourneyState:
        self._guard("add_deliverable")
        self._check_index(phase_index)
        try:
            record = _coerce(Deliverable, deliverable)
            validate_deliverable(record)
        except JourneyValidationError as e:
            self._reject("add_deliverable", e)
        phase = self._state.phases[phase_index]
        return self._commit(
            self._with_phase(phase_index, deliverables=[*phase.deliverables, record]),
            "add_deliverable",
        )

    def _remove(self, operation: str, phase_index: int, collection: str, item_id: str) -> JourneyState:
        self._guard(operation)
        self._check_index(phase_index)
        items = getattr(self._state.phases[phase_index], collection)
        kept = [item for item in items if item.id != item_id]
        if len(kept) == len(items):
            logger.debug(f"{operation}: no item with id {item_id}")
            return self._state
        return self._commit(self._with_phase(phase_index, **{collection: kept}), operation)

    def remove_objective(self, phase_index: int, objective_id: str) -> JourneyState:
        return self._remove("remove_objective", phase_index, "objectives", objective_id)

    def remove_activity(self, phase_index: int, activity_id: str) -> JourneyState:
        return self._remove("remove_activity", phase_index, "activities", activity_id)

    def remove_deliverable(self, phase_index: int, deliverable_id: str) -> JourneyState:
        return self._remove("remove_deliverable", phase_index, "deliverables", deliverable_id)

    def update_phase(
        self,
        phase_index: int,
        *,
        name: str | None = None,
        description: str | None = None,
        iteration_support: IterationSupport | Mapping | None = None,
        assessment: PhaseAssessment | Mapping | None = None,
        student_agency: Sequence[str] | None = None,
    ) -> JourneyState:
        """Edit the descriptive fields of a phase. Omitted fields are kept."""
        self._guard("update_phase")
        self._check_index(phase_index)
        changes: dict[str, Any] = {}
        if name is not None:
            if not name.strip():
                self._reject(
                    "update_phase", JourneyValidationError("phase.name", name, "Phase name is required")
                )
            changes["name"] = name.strip()
        if description is not None:
            changes["description"] = description
        try:
            if iteration_support is not None:
                changes["iteration_support"] = _coerce(IterationSupport, iteration_support)
            if assessment is not None:
                changes["assessment"] = _coerce(PhaseAssessment, assessment)
        except JourneyValidationError as e:
            self._reject("update_phase", e)
        if student_agency is not None:
            changes["student_agency"] = [s for s in student_agency if s and s.strip()]
        if not changes:
            return self._state
        return self._commit(self._with_phase(phase_index, **changes), "update_phase")

    def mark_phase_complete(self, phase_index: int) -> JourneyState:
        """Manual override: flag the phase complete regardless of its content."""
        self._guard("mark_phase_complete")
        self._check_index(phase_index)
        return self._commit(self._with_phase(phase_index, completed=True), "mark_phase_complete")

    # ========== Time allocation ==========

    def update_time_allocations(
        self, allocations: Sequence[float] | Mapping[PhaseType, float]
    ) -> JourneyState:
        """Re-normalise the four allocations to sum 1.0 and recompute durations."""
        self._guard("update_time_allocations")
        if isinstance(allocations, Mapping):
            missing = [p.value for p in PHASE_ORDER if p not in allocations]
            if missing:
                self._reject(
                    "update_time_allocations",
                    JourneyValidationError("allocations", allocations, f"Missing phases: {missing}"),
                )
            raw = [allocations[p] for p in PHASE_ORDER]
        else:
            raw = list(allocations)
        try:
            values = [float(a) for a in raw]
        except (TypeError, ValueError):
            self._reject(
                "update_time_allocations",
                JourneyValidationError("allocations", raw, "Allocations must be numbers"),
            )

        if len(values) != len(PHASE_ORDER):
            self._reject(
                "update_time_allocations",
                JourneyValidationError(
                    "allocations", values, f"Expected {len(PHASE_ORDER)} allocations, got {len(values)}"
                ),
            )
        if not all(math.isfinite(v) and v >= 0 for v in values) or sum(values) <= 0:
            self._reject(
                "update_time_allocations",
                JourneyValidationError(
                    "allocations", values, "Allocations must be finite and non-negative with a positive total"
                ),
            )

        total = sum(values)
        normalised = [v / total for v in values]
        phases = [
            phase.model_copy(update={"allocation": share})
            for phase, share in zip(self._state.phases, normalised)
        ]
        phases = self._with_durations(phases, self._state.project_duration_weeks)
        return self._commit(
            self._state.model_copy(update={"phases": phases}), "update_time_allocations"
        )

    def update_project_duration(self, weeks: int) -> JourneyState:
        self._guard("update_project_duration")
        if weeks < 1:
            self._reject(
                "update_project_duration",
                JourneyValidationError(
                    "project_duration_weeks", weeks, "Project duration must be at least 1 week"
                ),
            )
        phases = self._with_durations(self._state.phases, weeks)
        return self._commit(
            self._state.model_copy(update={"phases": phases, "project_duration_weeks": weeks}),
            "update_project_duration",
        )

    # ========== Applying suggestions ==========

    @staticmethod
    def _activity_from_keyword(keyword: str, parsed: ParsedPhase) -> Activity:
        return Activity(
            name=_clip(keyword.capitalize(), ACTIVITY_NAME_MAX),
            description=_clip(parsed.focus or keyword, ACTIVITY_DESCRIPTION_MAX),
            duration=parsed.duration or "1 week",
        )

    def apply_phase_suggestions(self, result: ExtractionResult[list[ParsedPhase]]) -> JourneyState:
        """Merge parsed phases onto the pipeline by position.

        Parsed focus becomes the phase description; parsed activity
        keywords are appended as activities. Everything is validated before
        the single commit.
        """
        self._guard("apply_phase_suggestions")
        if result.is_empty:
            return self._state

        phases = list(self._state.phases)
        for index, parsed in enumerate(result.data[: len(phases)]):
            activities = [self._activity_from_keyword(k, parsed) for k in parsed.activities if k.strip()]
            for activity in activities:
                try:
                    validate_activity(activity)
                except JourneyValidationError as e:
                    self._reject("apply_phase_suggestions", e)
            changes: dict[str, Any] = {"activities": [*phases[index].activities, *activities]}
            if parsed.focus.strip():
                changes["description"] = parsed.focus.strip()
            phases[index] = phases[index].model_copy(update=changes)

        logger.info(
            f"Applied {min(len(result.data), len(phases))} phase suggestions "
            f"({result.format.value}, confidence {result.confidence})"
        )
        return self._commit(self._state.model_copy(update={"phases": phases}), "apply_phase_suggestions")

    def apply_activity_suggestions(
        self, phase_index: int, result: ExtractionResult[ActivitiesData]
    ) -> JourneyState:
        """Append parsed activities to one phase, all or nothing."""
        self._guard("apply_activity_suggestions")
        self._check_index(phase_index)
        if not result.data.activities:
            return self._state

        activities = []
        for parsed in result.data.activities:
            name = _clip(parsed.title, ACTIVITY_NAME_MAX) or "Activity"
            activities.append(
                Activity(
                    name=name,
                    description=_clip(parsed.description, ACTIVITY_DESCRIPTION_MAX) or name,
                    duration=parsed.duration.strip() or "1 hour",
                    student_choice=not parsed.required,
                )
            )
        for activity in activities:
            try:
                validate_activity(activity)
            except JourneyValidationError as e:
                self._reject("apply_activity_suggestions", e)

        phase = self._state.phases[phase_index]
        return self._commit(
            self._with_phase(phase_index, activities=[*phase.activities, *activities]),
            "apply_activity_suggestions",
        )

    def apply_grade_examples(self, phase_index: int) -> JourneyState:
        """Append the grade-band example objectives and activities for a phase."""
        self._guard("apply_grade_examples")
        self._check_index(phase_index)
        phase = self._state.phases[phase_index]
        objectives, activities = grade_examples(self._state.grade_level, phase.type)
        return self._commit(
            self._with_phase(
                phase_index,
                objectives=[*phase.objectives, *objectives],
                activities=[*phase.activities, *activities],
            ),
            "apply_grade_examples",
        )

    # ========== Undo / redo ==========

    def undo(self) -> JourneyState | None:
        """Restore the previous phase content. Pointer and iteration log are kept."""
        self._guard("undo")
        restored = self._history.undo(self._state)
        if restored is None:
            return None
        return self._commit(restored, "undo", undoable=False)

    def redo(self) -> JourneyState | None:
        self._guard("redo")
        restored = self._history.redo(self._state)
        if restored is None:
            return None
        return self._commit(restored, "redo", undoable=False)
