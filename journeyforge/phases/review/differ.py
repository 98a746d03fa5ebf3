"""
Structural differ for nested records.

Recurses into mappings and pydantic models; lists and scalars are compared
as whole leaves. Every differing leaf becomes one ChangeRecord with a
dotted path.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from journeyforge.core.events.revision import ChangeAction, ChangeRecord


def _as_mapping(value: Any) -> dict[str, Any] | None:
    if isinstance(value, BaseModel):
        return {name: getattr(value, name) for name in type(value).model_fields}
    if isinstance(value, Mapping):
        return {str(key): item for key, item in value.items()}
    return None


def _plain(value: Any) -> Any:
    return to_jsonable_python(value)


def _join(prefix: str, key: str) -> str:
    return f"{prefix}.{key}" if prefix else key


def _leaf_change(path: str, old: Any, new: Any) -> ChangeRecord:
    if old is None:
        action = ChangeAction.CREATE
    elif new is None:
        action = ChangeAction.DELETE
    else:
        action = ChangeAction.UPDATE
    return ChangeRecord(path=path, old_value=_plain(old), new_value=_plain(new), action=action)


def diff_records(old: Any, new: Any, prefix: str = "") -> list[ChangeRecord]:
    """Compare two records and list every differing leaf.

    Args:
        old: Record before the change (model, mapping or scalar)
        new: Record after the change
        prefix: Path prefix for nested calls

    Returns:
        ChangeRecords in field order of ``old``, then fields only in ``new``

    Usage:
        changes = diff_records(before_state, after_state)
        paths = [c.path for c in changes]   # e.g. ["current_phase_index"]
    """
    old_map = _as_mapping(old)
    new_map = _as_mapping(new)

    if old_map is None or new_map is None:
        if old == new:
            return []
        return [_leaf_change(prefix, old, new)]

    changes: list[ChangeRecord] = []
    for key, old_value in old_map.items():
        path = _join(prefix, key)
        if key not in new_map:
            changes.append(
                ChangeRecord(path=path, old_value=_plain(old_value), action=ChangeAction.DELETE)
            )
        else:
            changes.extend(diff_records(old_value, new_map[key], path))

    for key, new_value in new_map.items():
        if key not in old_map:
            changes.append(
                ChangeRecord(
                    path=_join(prefix, key),
                    new_value=_plain(new_value),
                    action=ChangeAction.CREATE,
                )
            )
    return changes
