# Rev 0.3.0
"""Lightweight entities aligned with schema Rev 1.0.0 (projects, milestones, todos, tool_actions)"""
from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class Project:
    id: int
    name: str
    description: Optional[str] = None
    status: str = "active"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    # derived, never stored
    total_tasks: int = 0
    completed_tasks: int = 0
    progress_percent: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Project":
        return cls(
            id=int(row["id"]),
            name=row["name"],
            description=row["description"],
            status=row["status"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Milestone:
    id: int
    project_id: int
    title: str
    target_date: str
    status: str = "pending"
    created_at: Optional[str] = None
    total_tasks: int = 0
    completed_tasks: int = 0
    progress_percent: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Milestone":
        return cls(
            id=int(row["id"]),
            project_id=int(row["project_id"]),
            title=row["title"],
            target_date=row["target_date"],
            status=row["status"],
            created_at=row["created_at"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Todo:
    id: int
    title: str
    description: Optional[str] = None
    status: str = "pending"
    priority: int = 3
    due_date: Optional[str] = None
    project_id: Optional[int] = None
    parent_id: Optional[int] = None
    milestone_id: Optional[int] = None
    level: str = "task"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Todo":
        return cls(
            id=int(row["id"]),
            title=row["title"],
            description=row["description"],
            status=row["status"],
            priority=int(row["priority"]),
            due_date=row["due_date"],
            project_id=row["project_id"],
            parent_id=row["parent_id"],
            milestone_id=row["milestone_id"],
            level=row["level"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TodoWithChildren(Todo):
    subtasks: List[Todo] = field(default_factory=list)


@dataclass
class TodoListResult:
    todos: List[Todo]
    total_count: int

    def __iter__(self):
        return iter(self.todos)

    def __len__(self) -> int:
        return self.total_count


@dataclass
class Deleted:
    """Confirmation returned by delete operations."""
    id: int
    success: bool = True


@dataclass
class ToolAction:
    action_type: str
    todo_id: Optional[int] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error_message: Optional[str] = None
