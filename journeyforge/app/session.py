"""
JourneyForge Editing Session.

One session owns the collaborators used while a project is being edited:
the extraction engine, the workflow engine, the revision history and the
snapshot store. Nothing is shared between sessions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from journeyforge.app.config import JourneyForgeConfig
from journeyforge.core.models.extraction import ExtractionResult
from journeyforge.core.models.journey import JourneyState, SeedContext
from journeyforge.phases.extraction.engine import ExtractionEngine
from journeyforge.phases.review.audit import CompletionAudit, IterationAuditLog, completion_audit
from journeyforge.phases.review.revisions import RevisionHistory
from journeyforge.phases.workflow.engine import PhaseWorkflowEngine
from journeyforge.systems.storage.snapshots import SnapshotStore
from journeyforge.utils.ids import generate_session_id
from journeyforge.utils.logging import get_logger

logger = get_logger("app.session")


@dataclass
class JourneySession:
    """Runtime container for one editing session.

    Usage:
        session = JourneySession.start(config, SeedContext(subject="Science"))
        result, applied = session.apply_phase_text(generated_text)
        session.save()
    """

    config: JourneyForgeConfig
    workflow: PhaseWorkflowEngine
    extraction: ExtractionEngine
    revisions: RevisionHistory
    store: SnapshotStore
    session_id: str = field(default_factory=generate_session_id)
    _saved_state: JourneyState | None = field(default=None, repr=False)

    @classmethod
    def _collaborators(cls, config: JourneyForgeConfig) -> dict[str, Any]:
        return {
            "extraction": ExtractionEngine(config.parsing),
            "revisions": RevisionHistory(config.revisions.max_revisions),
            "store": SnapshotStore(config.snapshots_dir),
        }

    @classmethod
    def start(
        cls,
        config: JourneyForgeConfig,
        seed: SeedContext | None = None,
        project_id: str | None = None,
    ) -> "JourneySession":
        """Begin a session on a brand-new journey."""
        parts = cls._collaborators(config)
        workflow = PhaseWorkflowEngine.from_seed(
            seed,
            config=config.workflow,
            revisions=parts["revisions"],
            project_id=project_id,
        )
        session = cls(config=config, workflow=workflow, **parts)
        logger.info(f"Session {session.session_id} started for {workflow.state.project_id}")
        return session

    @classmethod
    def open(cls, config: JourneyForgeConfig, project_id: str) -> "JourneySession":
        """Begin a session on a stored journey.

        Raises:
            SnapshotNotFoundError: If the project has no stored snapshot
        """
        parts = cls._collaborators(config)
        state = parts["store"].load(project_id)
        workflow = PhaseWorkflowEngine(state, config=config.workflow, revisions=parts["revisions"])
        session = cls(config=config, workflow=workflow, _saved_state=state, **parts)
        logger.info(f"Session {session.session_id} opened {project_id}")
        return session

    # ========== State ==========

    @property
    def state(self) -> JourneyState:
        return self.workflow.state

    @property
    def project_id(self) -> str:
        return self.workflow.state.project_id

    @property
    def dirty(self) -> bool:
        """True when the current snapshot has not been saved."""
        return self.workflow.state is not self._saved_state

    def save(self) -> None:
        self.store.save(self.workflow.state)
        self._saved_state = self.workflow.state

    # ========== Suggestions ==========

    def parse(self, kind: str, text: str) -> ExtractionResult:
        return self.extraction.parse(kind, text)

    def apply_phase_text(self, text: str, force: bool = False) -> tuple[ExtractionResult, bool]:
        """Parse phase suggestions and apply them when confident enough.

        Returns:
            The extraction result and whether it was applied
        """
        result = self.extraction.parse_phases(text)
        threshold = self.config.workflow.auto_apply_threshold
        if not (force or result.should_auto_apply(threshold)):
            logger.info(
                f"Phase suggestions held for review (confidence {result.confidence} < {threshold})"
            )
            return result, False
        self.workflow.apply_phase_suggestions(result)
        return result, True

    def apply_activity_text(
        self, phase_index: int, text: str, force: bool = False
    ) -> tuple[ExtractionResult, bool]:
        result = self.extraction.parse_activities(text)
        threshold = self.config.workflow.auto_apply_threshold
        if not (force or result.should_auto_apply(threshold)):
            logger.info(
                f"Activity suggestions held for review (confidence {result.confidence} < {threshold})"
            )
            return result, False
        self.workflow.apply_activity_suggestions(phase_index, result)
        return result, True

    # ========== Review ==========

    def iteration_log(self) -> IterationAuditLog:
        return IterationAuditLog.from_state(self.workflow.state)

    def completion(self) -> CompletionAudit:
        return completion_audit(self.workflow.state)
