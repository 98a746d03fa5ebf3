"""
Core data models - journey state and extraction payloads.
"""

from journeyforge.core.models.extraction import (
    ActivitiesData,
    ActivityCategory,
    ExtractionFormat,
    ExtractionResult,
    IdeationData,
    ParsedActivity,
    ParsedPhase,
    RubricCriterion,
    RubricData,
)
from journeyforge.core.models.journey import (
    DEFAULT_ALLOCATIONS,
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

__all__ = [
    # Extraction
    "ActivitiesData",
    "ActivityCategory",
    "ExtractionFormat",
    "ExtractionResult",
    "IdeationData",
    "ParsedActivity",
    "ParsedPhase",
    "RubricCriterion",
    "RubricData",
    # Journey
    "DEFAULT_ALLOCATIONS",
    "Activity",
    "Deliverable",
    "IterationSupport",
    "JourneyState",
    "Objective",
    "Phase",
    "PhaseAssessment",
    "SeedContext",
    "format_weeks",
    "phase_duration_weeks",
]
