"""
Domain exceptions for JourneyForge.

The extraction layer never raises on user input; these exceptions describe
programmer-level misuse of the workflow engine and rejected edits. Each
carries a stable ``error_code`` for logging and API mapping.
"""

from __future__ import annotations

from typing import Any


class JourneyForgeError(Exception):
    """Base class for JourneyForge domain errors."""

    error_code = "journeyforge_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


class JourneyValidationError(JourneyForgeError):
    """A child record failed its field rules. No state was changed."""

    error_code = "validation_failed"

    def __init__(self, field: str, value: Any, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.value = value

    def __str__(self) -> str:
        return f"{self.error_code}: {self.field}: {self.message}"


class InvalidTransitionError(JourneyForgeError):
    """Navigation to a phase index outside the pipeline."""

    error_code = "invalid_transition"

    def __init__(self, target_index: int, phase_count: int) -> None:
        super().__init__(
            f"Phase index {target_index} out of range (0..{phase_count - 1})"
        )
        self.target_index = target_index
        self.phase_count = phase_count


class IterationPendingError(JourneyForgeError):
    """A mutation was attempted while a backward move awaits confirmation."""

    error_code = "iteration_pending"

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"Cannot run '{operation}' while an iteration is awaiting confirmation"
        )
        self.operation = operation


class NoPendingIterationError(JourneyForgeError):
    """confirm/cancel was called with no iteration proposed."""

    error_code = "no_pending_iteration"

    def __init__(self, message: str = "No iteration is awaiting confirmation") -> None:
        super().__init__(message)


class SnapshotNotFoundError(JourneyForgeError):
    """No stored snapshot exists for a project id."""

    error_code = "snapshot_not_found"

    def __init__(self, project_id: str) -> None:
        super().__init__(f"No snapshot stored for project '{project_id}'")
        self.project_id = project_id
