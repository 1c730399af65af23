# Rev 0.3.0
"""Todo hierarchy service (Rev 0.3.0)

Owns tasks and subtasks in the unified ``todos`` table:

- ``level`` is derived from ``parent_id`` and never set directly;
- a subtask's project comes from its parent, whatever the caller passed;
- subtasks cannot have children (project → task → subtask is the deepest chain);
- deleting a task removes its subtasks (FK cascade).

Every mutating call emits ``actionPerformed`` once it has finished, whether it
succeeded or failed. With ``record_actions=True`` the signal feeds
``log_action``, which appends to ``tool_actions`` and never raises.
"""
from __future__ import annotations

import sqlite3
from typing import Any, Dict, Iterable, List, Optional, Union

from PySide6.QtCore import QObject, Signal

from ..errors import MaxDepthExceededError, NotFoundError, ValidationError
from ..models.entities import Deleted, Todo, TodoListResult, TodoWithChildren, ToolAction
from ..models.patches import TodoCreate, TodoFilter, TodoPatch, iso_date, merge_todo
from ..models.types import (
    LEVEL_SUBTASK,
    LEVEL_TASK,
    PRIORITY_MAX,
    PRIORITY_MIN,
    TODO_LEVELS,
    TODO_STATUSES,
    UNSET,
)
from ..repositories.db import resolve_connection, tx
from ..repositories.sqlite_todo_repository import SQLiteTodoRepository
from ..repositories.sqlite_tool_action_repository import SQLiteToolActionRepository
from ..utils.logging_setup import get_logger


def _check_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Todo title must not be empty", field="title")
    return title


def _check_priority(priority: Any) -> int:
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise ValidationError(f"Priority must be an integer, got {priority!r}", field="priority")
    if not PRIORITY_MIN <= priority <= PRIORITY_MAX:
        raise ValidationError(
            f"Priority must be between {PRIORITY_MIN} and {PRIORITY_MAX}, got {priority}",
            field="priority",
        )
    return priority


def _check_choice(value: Any, allowed: tuple, field: str) -> str:
    if value not in allowed:
        raise ValidationError(f"Invalid {field} {value!r} (expected one of {', '.join(allowed)})", field=field)
    return value


class TodoManager(QObject):
    actionPerformed = Signal(object)  # ToolAction

    def __init__(
        self,
        db_or_conn: Union[sqlite3.Connection, Any],
        *,
        record_actions: bool = True,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._db_or_conn = db_or_conn
        self._todos = SQLiteTodoRepository(db_or_conn)
        self._actions = SQLiteToolActionRepository(db_or_conn)
        self._log = get_logger("TodoManager")
        if record_actions:
            self.actionPerformed.connect(self.log_action)

    # ---- queries
    def list_todos(self, filters: Optional[TodoFilter] = None) -> TodoListResult:
        f = filters or TodoFilter()
        if f.status is not None:
            _check_choice(f.status, TODO_STATUSES, "status")
        if f.level is not None:
            _check_choice(f.level, TODO_LEVELS, "level")
        rows = self._todos.list_todos(
            status=f.status, project_id=f.project_id, parent_id=f.parent_id, level=f.level
        )
        todos = [Todo.from_row(r) for r in rows]
        return TodoListResult(todos=todos, total_count=len(todos))

    def list_standalone(self, status: Optional[str] = None) -> TodoListResult:
        """Tasks with neither a project nor a parent."""
        return self.list_todos(TodoFilter(status=status, project_id=None, parent_id=None))

    def get_project_tree(self, project_id: int) -> List[TodoWithChildren]:
        tasks = self._todos.list_todos(project_id=project_id, parent_id=None)
        children = self._todos.list_children_of(r["id"] for r in tasks)

        by_parent: Dict[int, List[Todo]] = {}
        for row in children:
            by_parent.setdefault(int(row["parent_id"]), []).append(Todo.from_row(row))

        tree: List[TodoWithChildren] = []
        for row in tasks:
            node = TodoWithChildren.from_row(row)
            node.subtasks = by_parent.get(node.id, [])
            tree.append(node)
        return tree

    def get(self, todo_id: int) -> Todo:
        row = self._todos.get_todo(todo_id)
        if row is None:
            raise NotFoundError("todo", todo_id)
        return Todo.from_row(row)

    # ---- commands
    def create(self, data: TodoCreate) -> Todo:
        payload = data.to_payload()
        try:
            todo = self._create(data)
        except Exception as exc:
            self._emit("create", payload, error=exc)
            raise
        self._emit("create", payload, todo_id=todo.id)
        return todo

    def create_many(self, items: Iterable[TodoCreate], *, atomic: bool = False) -> List[Todo]:
        """Create ``items`` in order.

        Not atomic by default: the first failure propagates and everything created
        before it stays committed. ``atomic=True`` runs the batch in one transaction.
        """
        items = list(items)
        payload = {"items": [i.to_payload() for i in items], "atomic": atomic}
        parents = {i.parent_id for i in items}
        batch_parent = parents.pop() if len(parents) == 1 else None
        try:
            if atomic:
                with tx(self._conn()):
                    created = [self._create(i) for i in items]
            else:
                created = [self._create(i) for i in items]
        except Exception as exc:
            self._emit("create_many", payload, todo_id=batch_parent, error=exc)
            raise
        self._emit("create_many", payload, todo_id=batch_parent)
        return created

    def update(self, todo_id: int, patch: TodoPatch) -> Todo:
        payload = {"id": todo_id, **patch.to_payload()}
        try:
            todo = self._update(todo_id, patch)
        except Exception as exc:
            self._emit("modify", payload, todo_id=todo_id, error=exc)
            raise
        self._emit("modify", payload, todo_id=todo_id)
        return todo

    def update_status(self, todo_id: int, status: str) -> Todo:
        # reopening is logged as an undone completion
        payload = {"id": todo_id, "status": status, "undo": status != "completed"}
        try:
            _check_choice(status, TODO_STATUSES, "status")
            todo = self._update(todo_id, TodoPatch(status=status))
        except Exception as exc:
            self._emit("complete", payload, todo_id=todo_id, error=exc)
            raise
        self._emit("complete", payload, todo_id=todo_id)
        return todo

    def delete(self, todo_id: int) -> Deleted:
        payload = {"id": todo_id}
        try:
            self.get(todo_id)
            n_children = self._todos.count_children(todo_id)
            self._todos.delete_todo(todo_id)
        except Exception as exc:
            self._emit("delete", payload, todo_id=todo_id, error=exc)
            raise
        self._log.info("Deleted todo #%s (+%d subtasks)", todo_id, n_children)
        self._emit("delete", payload, todo_id=todo_id)
        return Deleted(id=todo_id)

    # ---- audit log
    def log_action(self, action: ToolAction) -> Optional[int]:
        """Append to tool_actions. Write failures are logged, never raised."""
        try:
            return self._actions.append(action)
        except Exception:
            self._log.exception(
                "Could not record tool action %s (todo #%s)", action.action_type, action.todo_id
            )
            return None

    # ---- internals
    def _conn(self) -> sqlite3.Connection:
        return resolve_connection(self._db_or_conn, "TodoManager")

    def _emit(self, action_type: str, payload: Dict[str, Any], *, todo_id: Optional[int] = None,
              error: Optional[BaseException] = None) -> None:
        self.actionPerformed.emit(
            ToolAction(
                action_type=action_type,
                todo_id=todo_id,
                payload=payload,
                success=error is None,
                error_message=str(error) if error is not None else None,
            )
        )

    def _resolve_parent(self, parent_id: int, *, child_id: Optional[int] = None) -> Todo:
        if child_id is not None and parent_id == child_id:
            raise ValidationError("A todo cannot be its own parent", field="parent_id")
        parent = self.get(parent_id)
        if parent.level == LEVEL_SUBTASK:
            self._log.warning("Rejected child of subtask #%s (max depth)", parent_id)
            raise MaxDepthExceededError()
        if child_id is not None and self._todos.count_children(child_id) > 0:
            raise MaxDepthExceededError(
                f"Todo #{child_id} has subtasks of its own and cannot become a subtask"
            )
        return parent

    def _create(self, data: TodoCreate) -> Todo:
        title = _check_title(data.title)
        priority = _check_priority(data.priority)
        project_id = data.project_id
        level = LEVEL_SUBTASK if data.parent_id is not None else LEVEL_TASK
        if data.parent_id is not None:
            parent = self._resolve_parent(data.parent_id)
            # subtasks always live in their parent's project
            project_id = parent.project_id

        todo_id = self._todos.insert_todo(
            title=title,
            description=data.description,
            priority=priority,
            due_date=iso_date(data.due_date),
            project_id=project_id,
            parent_id=data.parent_id,
            milestone_id=data.milestone_id,
            level=level,
        )
        self._log.info("Created %s #%s %r (project=%s parent=%s)", level, todo_id, title, project_id, data.parent_id)
        return self.get(todo_id)

    def _update(self, todo_id: int, patch: TodoPatch) -> Todo:
        current = self.get(todo_id)
        values = merge_todo(current, patch)
        _check_title(values["title"])
        _check_priority(values["priority"])
        _check_choice(values["status"], TODO_STATUSES, "status")

        reparented = patch.parent_id is not UNSET and patch.parent_id != current.parent_id
        if reparented:
            if values["parent_id"] is not None:
                parent = self._resolve_parent(values["parent_id"], child_id=todo_id)
                values["project_id"] = parent.project_id
        elif (
            current.parent_id is not None
            and patch.project_id is not UNSET
            and patch.project_id != current.project_id
        ):
            raise ValidationError(
                "A subtask's project is inherited from its parent and cannot be changed directly",
                field="project_id",
            )

        level = LEVEL_SUBTASK if values["parent_id"] is not None else LEVEL_TASK
        self._todos.update_todo(todo_id, level=level, **values)
        if level == LEVEL_TASK and values["project_id"] != current.project_id:
            moved = self._todos.set_children_project(todo_id, values["project_id"])
            self._log.info("Moved %d subtasks of #%s to project %s", moved, todo_id, values["project_id"])
        return self.get(todo_id)
