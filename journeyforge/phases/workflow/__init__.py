"""
Workflow - the four-phase pipeline, its content and the iteration protocol.
"""

from journeyforge.phases.workflow.engine import PhaseWorkflowEngine
from journeyforge.phases.workflow.history import UndoHistory
from journeyforge.phases.workflow.iteration import NavigationOutcome, PendingIteration
from journeyforge.phases.workflow.templates import build_default_phases, grade_examples

__all__ = [
    "PhaseWorkflowEngine",
    "UndoHistory",
    "NavigationOutcome",
    "PendingIteration",
    "build_default_phases",
    "grade_examples",
]
