# Rev 0.3.0
from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple

from .base import SQLiteRepository


class SQLiteMilestoneRepository(SQLiteRepository):
    """
    Thin wrapper around the 'milestones' table.
    project_id is set once at insert and never updated.
    """

    _COLUMNS = "id, project_id, title, target_date, status, created_at"

    def list_for_project(self, project_id: int) -> List[Dict[str, Any]]:
        return self._fetch_all(
            f"""
            SELECT {self._COLUMNS}
            FROM milestones
            WHERE project_id = ?
            ORDER BY target_date ASC, id ASC
            """,
            (project_id,),
        )

    def get_milestone(self, milestone_id: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one(
            f"SELECT {self._COLUMNS} FROM milestones WHERE id = ?",
            (milestone_id,),
        )

    def insert_milestone(self, project_id: int, title: str, target_date: str) -> int:
        cur = self._execute(
            """
            INSERT INTO milestones(project_id, title, target_date, status, created_at)
            VALUES (?, ?, ?, 'pending', datetime('now'))
            """,
            (project_id, title, target_date),
        )
        return int(cur.lastrowid)

    def set_status(self, milestone_id: int, status: str) -> bool:
        cur = self._execute("UPDATE milestones SET status = ? WHERE id = ?", (status, milestone_id))
        return cur.rowcount > 0

    def delete_milestone(self, milestone_id: int) -> bool:
        cur = self._execute("DELETE FROM milestones WHERE id = ?", (milestone_id,))
        return cur.rowcount > 0

    def todo_counts(self, milestone_id: int) -> Tuple[int, int]:
        row = self._fetch_one(
            """
            SELECT COUNT(1) AS total,
                   COALESCE(SUM(CASE WHEN status = 'completed' THEN 1 ELSE 0 END), 0) AS completed
            FROM todos
            WHERE milestone_id = ?
            """,
            (milestone_id,),
        )
        if not row:
            return 0, 0
        return int(row["total"] or 0), int(row["completed"] or 0)
