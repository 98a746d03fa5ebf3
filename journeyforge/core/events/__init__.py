"""
Event records - iteration events and revisions.
"""

from journeyforge.core.events.base import BaseEvent, utc_now
from journeyforge.core.events.iteration import IterationEvent
from journeyforge.core.events.revision import ChangeAction, ChangeRecord, Revision

__all__ = [
    "BaseEvent",
    "utc_now",
    "IterationEvent",
    "ChangeAction",
    "ChangeRecord",
    "Revision",
]
