"""
Snapshot Store for JourneyForge.

Persists JourneyState snapshots as one JSON file per project. Writes are
synchronous; debouncing belongs to the caller.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from pydantic import ValidationError

from journeyforge.core.exceptions import SnapshotNotFoundError
from journeyforge.core.models.journey import JourneyState
from journeyforge.utils.logging import get_logger, log_error

logger = get_logger("storage.snapshots")

_SAFE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class SnapshotStore:
    """File-backed store of journey snapshots.

    Usage:
        store = SnapshotStore(config.snapshots_dir)
        store.save(engine.state)
        state = store.load("PROJ_1712345678_001")
    """

    SUFFIX = ".json"

    def __init__(self, directory: str | Path):
        """Initialize the store.

        Args:
            directory: Folder holding one ``<project_id>.json`` per project
        """
        self.directory = Path(directory)

    def _path(self, project_id: str) -> Path:
        if not _SAFE_ID.match(project_id or ""):
            raise ValueError(f"Invalid project id for storage: {project_id!r}")
        return self.directory / f"{project_id}{self.SUFFIX}"

    def save(self, state: JourneyState) -> Path:
        """Write the snapshot, replacing any earlier one for the project.

        Returns:
            Path to the written file
        """
        filepath = self._path(state.project_id)
        self.directory.mkdir(parents=True, exist_ok=True)

        tmp_path = filepath.with_suffix(".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(state.to_dict(), f, indent=2, ensure_ascii=False)
            tmp_path.replace(filepath)
        except (OSError, TypeError, ValueError):
            tmp_path.unlink(missing_ok=True)
            raise

        logger.debug(f"Saved snapshot {state.project_id} -> {filepath}")
        return filepath

    def load(self, project_id: str) -> JourneyState:
        """Read a stored snapshot.

        Raises:
            SnapshotNotFoundError: If nothing is stored for the project
        """
        filepath = self._path(project_id)
        if not filepath.exists():
            raise SnapshotNotFoundError(project_id)

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return JourneyState.from_dict(json.load(f))
        except (json.JSONDecodeError, ValidationError) as e:
            log_error(logger, "load snapshot", e, {"project": project_id, "path": filepath})
            raise

    def exists(self, project_id: str) -> bool:
        return self._path(project_id).exists()

    def list_projects(self) -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob(f"*{self.SUFFIX}"))

    def delete(self, project_id: str) -> bool:
        """Remove a stored snapshot. Returns False if there was none."""
        filepath = self._path(project_id)
        if not filepath.exists():
            return False
        filepath.unlink()
        logger.info(f"Deleted snapshot {project_id}")
        return True
