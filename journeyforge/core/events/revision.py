"""
Revision records produced by the structural differ.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from journeyforge.core.events.base import BaseEvent
from journeyforge.utils.ids import generate_revision_id


class ChangeAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ChangeRecord(BaseModel):
    """One differing leaf between two nested records.

    Attributes:
        path: Dotted path to the leaf (e.g. "iteration_support.time_buffer")
        old_value: Value before the change (None for create)
        new_value: Value after the change (None for delete)
        action: create, update or delete
    """

    path: str
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None
    action: ChangeAction

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.action.value} {self.path}"


class Revision(BaseEvent):
    """A labelled set of changes recorded for one project."""

    id: str = Field(default_factory=generate_revision_id)
    project_id: str
    label: str = ""
    changes: list[ChangeRecord] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def paths(self) -> list[str]:
        return [change.path for change in self.changes]
