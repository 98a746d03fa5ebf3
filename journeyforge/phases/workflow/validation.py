"""
Field rules for phase content records.

Each validator raises JourneyValidationError naming the offending field
("objective.text", "activity.duration", ...) and returns nothing on success.
"""

from __future__ import annotations

from journeyforge.core.exceptions import JourneyValidationError
from journeyforge.core.models.journey import Activity, Deliverable, Objective


OBJECTIVE_TEXT_MAX = 200
ACTIVITY_NAME_MAX = 100
ACTIVITY_DESCRIPTION_MAX = 300
DELIVERABLE_NAME_MAX = 100


def _require(field: str, value: str, label: str) -> None:
    if not value or not value.strip():
        raise JourneyValidationError(field, value, f"{label} is required")


def _limit(field: str, value: str, label: str, maximum: int) -> None:
    if len(value) > maximum:
        raise JourneyValidationError(
            field, value, f"{label} must be at most {maximum} characters"
        )


def validate_objective(objective: Objective) -> None:
    _require("objective.text", objective.text, "Objective text")
    _limit("objective.text", objective.text, "Objective text", OBJECTIVE_TEXT_MAX)


def validate_activity(activity: Activity) -> None:
    _require("activity.name", activity.name, "Activity name")
    _limit("activity.name", activity.name, "Activity name", ACTIVITY_NAME_MAX)
    _require("activity.description", activity.description, "Activity description")
    _limit(
        "activity.description",
        activity.description,
        "Activity description",
        ACTIVITY_DESCRIPTION_MAX,
    )
    _require("activity.duration", activity.duration, "Activity duration")


def validate_deliverable(deliverable: Deliverable) -> None:
    _require("deliverable.name", deliverable.name, "Deliverable name")
    _limit("deliverable.name", deliverable.name, "Deliverable name", DELIVERABLE_NAME_MAX)
    _require("deliverable.format", deliverable.format, "Deliverable format")
