"""
Storage - JSON snapshot persistence.
"""

from journeyforge.systems.storage.snapshots import SnapshotStore

__all__ = ["SnapshotStore"]
