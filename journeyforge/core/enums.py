"""
Enumerations shared by the journey models and events.
"""

from __future__ import annotations

from enum import Enum


class PhaseType(str, Enum):
    """The four fixed stages of the creative process, in pipeline order."""
    ANALYZE = "ANALYZE"
    BRAINSTORM = "BRAINSTORM"
    PROTOTYPE = "PROTOTYPE"
    EVALUATE = "EVALUATE"


PHASE_ORDER: tuple[PhaseType, ...] = (
    PhaseType.ANALYZE,
    PhaseType.BRAINSTORM,
    PhaseType.PROTOTYPE,
    PhaseType.EVALUATE,
)


class GradeBand(str, Enum):
    """Grade band used to pick scaffolding examples."""
    ELEMENTARY = "elementary"
    MIDDLE = "middle"
    HIGH = "high"

    @classmethod
    def from_text(cls, value: "str | GradeBand | None") -> "GradeBand":
        """Normalise free grade text ("5th grade middle school") to a band.

        Anything mentioning neither elementary nor middle is treated as high.
        """
        if isinstance(value, GradeBand):
            return value
        lowered = (value or "").lower()
        if "elementary" in lowered:
            return cls.ELEMENTARY
        if "middle" in lowered:
            return cls.MIDDLE
        return cls.HIGH
