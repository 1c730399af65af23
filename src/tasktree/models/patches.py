# Rev 0.3.0
"""Typed inputs for the managers.

Patch fields default to ``UNSET``; only fields the caller supplied change.
``None`` is a real value (e.g. clear a due date). The merge functions list
every updatable column explicitly.
"""
from __future__ import annotations
from dataclasses import dataclass, fields
from datetime import date
from typing import Any, Dict, Mapping, Optional, Union

from ..errors import ValidationError
from .entities import Project, Todo
from .types import PRIORITY_DEFAULT, UNSET, _Unset

DateLike = Union[str, date, None]


def iso_date(value: DateLike) -> Optional[str]:
    if isinstance(value, date):
        return value.isoformat()
    return value


def _from_mapping(cls, data: Mapping[str, Any]):
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValidationError(f"Unknown field(s) for {cls.__name__}: {', '.join(unknown)}", field=unknown[0])
    return cls(**dict(data))


def _supplied(obj) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if value is UNSET:
            continue
        out[f.name] = iso_date(value)
    return out


# ---------- create ----------

@dataclass
class TodoCreate:
    title: str
    description: Optional[str] = None
    priority: int = PRIORITY_DEFAULT
    due_date: DateLike = None
    project_id: Optional[int] = None
    parent_id: Optional[int] = None
    milestone_id: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TodoCreate":
        if "title" not in data:
            raise ValidationError("title is required", field="title")
        return _from_mapping(cls, data)

    def to_payload(self) -> Dict[str, Any]:
        return _supplied(self)


# ---------- patches ----------

@dataclass
class ProjectPatch:
    name: Union[str, _Unset] = UNSET
    description: Union[Optional[str], _Unset] = UNSET
    status: Union[str, _Unset] = UNSET

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProjectPatch":
        return _from_mapping(cls, data)

    def to_payload(self) -> Dict[str, Any]:
        return _supplied(self)


@dataclass
class TodoPatch:
    title: Union[str, _Unset] = UNSET
    description: Union[Optional[str], _Unset] = UNSET
    status: Union[str, _Unset] = UNSET
    priority: Union[int, _Unset] = UNSET
    due_date: Union[DateLike, _Unset] = UNSET
    project_id: Union[Optional[int], _Unset] = UNSET
    parent_id: Union[Optional[int], _Unset] = UNSET
    milestone_id: Union[Optional[int], _Unset] = UNSET

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TodoPatch":
        return _from_mapping(cls, data)

    def to_payload(self) -> Dict[str, Any]:
        return _supplied(self)


def _pick(new, old):
    return old if new is UNSET else new


def merge_project(current: Project, patch: ProjectPatch) -> Dict[str, Any]:
    return {
        "name": _pick(patch.name, current.name),
        "description": _pick(patch.description, current.description),
        "status": _pick(patch.status, current.status),
    }


def merge_todo(current: Todo, patch: TodoPatch) -> Dict[str, Any]:
    """Column values after applying ``patch``; ``level`` is derived by the caller."""
    return {
        "title": _pick(patch.title, current.title),
        "description": _pick(patch.description, current.description),
        "status": _pick(patch.status, current.status),
        "priority": _pick(patch.priority, current.priority),
        "due_date": iso_date(_pick(patch.due_date, current.due_date)),
        "project_id": _pick(patch.project_id, current.project_id),
        "parent_id": _pick(patch.parent_id, current.parent_id),
        "milestone_id": _pick(patch.milestone_id, current.milestone_id),
    }


# ---------- listing ----------

@dataclass
class TodoFilter:
    """AND-combined filters. ``project_id``/``parent_id`` set to None mean IS NULL."""
    status: Optional[str] = None
    project_id: Union[Optional[int], _Unset] = UNSET
    parent_id: Union[Optional[int], _Unset] = UNSET
    level: Optional[str] = None
