# Rev 0.3.0
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from ..models.types import UNSET
from .base import SQLiteRepository

# NULL due dates sort after dated rows; id keeps ties stable
ORDER_BY = "priority ASC, due_date IS NULL ASC, due_date ASC, id ASC"


class SQLiteTodoRepository(SQLiteRepository):
    """
    Todo CRUD + filtered listing over the unified 'todos' table.
    Tasks and subtasks share the table; level/parent_id tell them apart.
    Subtask removal on parent delete is done by the FK (ON DELETE CASCADE).
    """

    _COLUMNS = (
        "id, title, description, status, priority, due_date, project_id, "
        "parent_id, milestone_id, level, created_at, updated_at"
    )

    # -------------------------
    # CRUD
    # -------------------------
    def insert_todo(
        self,
        *,
        title: str,
        description: Optional[str],
        priority: int,
        due_date: Optional[str],
        project_id: Optional[int],
        parent_id: Optional[int],
        milestone_id: Optional[int],
        level: str,
    ) -> int:
        cur = self._execute(
            """
            INSERT INTO todos(title, description, priority, due_date, project_id,
                              parent_id, milestone_id, level, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, datetime('now'), datetime('now'))
            """,
            (title, description, priority, due_date, project_id, parent_id, milestone_id, level),
        )
        return int(cur.lastrowid)

    def get_todo(self, todo_id: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one(
            f"SELECT {self._COLUMNS} FROM todos WHERE id = ? LIMIT 1",
            (todo_id,),
        )

    def update_todo(
        self,
        todo_id: int,
        *,
        title: str,
        description: Optional[str],
        status: str,
        priority: int,
        due_date: Optional[str],
        project_id: Optional[int],
        parent_id: Optional[int],
        milestone_id: Optional[int],
        level: str,
    ) -> bool:
        cur = self._execute(
            """
            UPDATE todos
            SET title = ?, description = ?, status = ?, priority = ?, due_date = ?,
                project_id = ?, parent_id = ?, milestone_id = ?, level = ?,
                updated_at = datetime('now')
            WHERE id = ?
            """,
            (title, description, status, priority, due_date,
             project_id, parent_id, milestone_id, level, todo_id),
        )
        return cur.rowcount > 0

    def set_children_project(self, parent_id: int, project_id: Optional[int]) -> int:
        cur = self._execute(
            "UPDATE todos SET project_id = ?, updated_at = datetime('now') WHERE parent_id = ?",
            (project_id, parent_id),
        )
        return cur.rowcount

    def delete_todo(self, todo_id: int) -> bool:
        cur = self._execute("DELETE FROM todos WHERE id = ?", (todo_id,))
        return cur.rowcount > 0

    # -------------------------
    # Listings
    # -------------------------
    def list_todos(
        self,
        *,
        status: Optional[str] = None,
        project_id: Any = UNSET,
        parent_id: Any = UNSET,
        level: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        where: List[str] = []
        params: List[Any] = []
        if status is not None:
            where.append("status = ?")
            params.append(status)
        if project_id is None:
            where.append("project_id IS NULL")
        elif project_id is not UNSET:
            where.append("project_id = ?")
            params.append(project_id)
        if parent_id is None:
            where.append("parent_id IS NULL")
        elif parent_id is not UNSET:
            where.append("parent_id = ?")
            params.append(parent_id)
        if level is not None:
            where.append("level = ?")
            params.append(level)

        clause = f"WHERE {' AND '.join(where)}" if where else ""
        return self._fetch_all(
            f"""
            SELECT {self._COLUMNS}
            FROM todos
            {clause}
            ORDER BY {ORDER_BY}
            """,
            params,
        )

    def list_children_of(self, parent_ids: Iterable[int]) -> List[Dict[str, Any]]:
        ids = list(parent_ids)
        if not ids:
            return []
        marks = ", ".join("?" * len(ids))
        return self._fetch_all(
            f"""
            SELECT {self._COLUMNS}
            FROM todos
            WHERE parent_id IN ({marks})
            ORDER BY {ORDER_BY}
            """,
            ids,
        )

    def count_children(self, parent_id: int) -> int:
        row = self._fetch_one("SELECT COUNT(1) AS n FROM todos WHERE parent_id = ?", (parent_id,))
        return int(row["n"]) if row and row["n"] is not None else 0
