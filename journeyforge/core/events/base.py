"""
Base Event Classes for JourneyForge.

Events are immutable recorded facts. They are appended to logs, never
edited in place.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from journeyforge.utils.ids import generate_id


def utc_now() -> datetime:
    """Timezone-aware current time used as the default event clock."""
    return datetime.now(UTC)


class BaseEvent(BaseModel):
    """Immutable atomic fact.

    Attributes:
        id: Unique event ID
        timestamp: When the event occurred (UTC)
    """

    id: str = Field(
        default_factory=lambda: generate_id("EVENT"),
        description="Unique event ID"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When event occurred"
    )

    model_config = ConfigDict(frozen=True)
