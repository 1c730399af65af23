# Rev 0.3.0
# tasktree – SQLiteProjectRepository (aligned with schema Rev 1.0.0)
from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple

from .base import SQLiteRepository


class SQLiteProjectRepository(SQLiteRepository):
    """
    Project repository.
    Deleting a project relies on the schema: milestones CASCADE, todos SET NULL.
    """

    _COLUMNS = "id, name, description, status, created_at, updated_at"

    # ---------- public API ----------

    def list_projects(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Returns all projects, newest id first, optionally filtered by status.
        """
        where, params = "", []
        if status is not None:
            where = "WHERE status = ?"
            params.append(status)
        sql = f"""
            SELECT {self._COLUMNS}
            FROM projects
            {where}
            ORDER BY id DESC;
        """
        return self._fetch_all(sql, params)

    def get_project(self, project_id: int) -> Optional[Dict[str, Any]]:
        sql = f"SELECT {self._COLUMNS} FROM projects WHERE id = ?;"
        return self._fetch_one(sql, (project_id,))

    # ---------- mutations ----------

    def insert_project(self, name: str, description: Optional[str] = None) -> int:
        cur = self._execute(
            """
            INSERT INTO projects(name, description, status, created_at, updated_at)
            VALUES (?, ?, 'active', datetime('now'), datetime('now'))
            """,
            (name, description),
        )
        return int(cur.lastrowid)

    def update_project(self, project_id: int, *, name: str, description: Optional[str], status: str) -> bool:
        cur = self._execute(
            """
            UPDATE projects
            SET name = ?, description = ?, status = ?, updated_at = datetime('now')
            WHERE id = ?
            """,
            (name, description, status, project_id),
        )
        return cur.rowcount > 0

    def delete_project(self, project_id: int) -> bool:
        cur = self._execute("DELETE FROM projects WHERE id = ?", (project_id,))
        return cur.rowcount > 0

    # ---------- progress ----------

    def todo_counts(self, project_id: int) -> Tuple[int, int]:
        """(total, completed) over every todo linked to the project, subtasks included."""
        row = self._fetch_one(
            """
            SELECT COUNT(1) AS total,
                   COALESCE(SUM(CASE WHEN status = 'completed' THEN 1 ELSE 0 END), 0) AS completed
            FROM todos
            WHERE project_id = ?
            """,
            (project_id,),
        )
        if not row:
            return 0, 0
        return int(row["total"] or 0), int(row["completed"] or 0)
