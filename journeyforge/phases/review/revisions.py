"""
Revision history - bounded, per-project change log built from diffs.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Any, Callable

from journeyforge.core.events.base import utc_now
from journeyforge.core.events.revision import ChangeRecord, Revision
from journeyforge.phases.review.differ import diff_records
from journeyforge.utils.logging import get_logger

logger = get_logger("review.revisions")


DEFAULT_MAX_REVISIONS = 50


class RevisionHistory:
    """Stores diff-based revisions per project.

    Each project keeps at most ``max_revisions`` entries; once full, the
    oldest revision is evicted first, strictly in recording order.

    Usage:
        history = RevisionHistory()
        history.record("PROJ_1", before, after, label="add_objective")
        for revision in history.revisions("PROJ_1"):
            print(revision.label, revision.paths)
    """

    def __init__(
        self,
        max_revisions: int = DEFAULT_MAX_REVISIONS,
        differ: Callable[[Any, Any], list[ChangeRecord]] = diff_records,
        clock: Callable[[], datetime] = utc_now,
    ):
        if max_revisions < 1:
            raise ValueError(f"max_revisions must be positive, got {max_revisions}")
        self.max_revisions = max_revisions
        self._differ = differ
        self._clock = clock
        self._store: dict[str, deque[Revision]] = {}

    def record(self, project_id: str, before: Any, after: Any, label: str = "") -> Revision | None:
        """Diff two records and store the result when anything changed."""
        changes = self._differ(before, after)
        if not changes:
            return None
        revision = Revision(
            project_id=project_id,
            label=label,
            changes=changes,
            timestamp=self._clock(),
        )
        self.add(revision)
        return revision

    def add(self, revision: Revision) -> None:
        entries = self._store.setdefault(revision.project_id, deque(maxlen=self.max_revisions))
        if len(entries) == self.max_revisions:
            logger.debug(f"Evicting oldest revision {entries[0].id} for {revision.project_id}")
        entries.append(revision)

    def revisions(self, project_id: str) -> list[Revision]:
        """Revisions for a project, oldest first."""
        return list(self._store.get(project_id, ()))

    def latest(self, project_id: str) -> Revision | None:
        entries = self._store.get(project_id)
        return entries[-1] if entries else None

    def count(self, project_id: str) -> int:
        return len(self._store.get(project_id, ()))

    def projects(self) -> list[str]:
        return sorted(self._store)

    def clear(self, project_id: str | None = None) -> None:
        if project_id is None:
            self._store.clear()
        else:
            self._store.pop(project_id, None)
