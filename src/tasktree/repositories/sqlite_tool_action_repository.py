# Rev 0.3.0
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from ..models.entities import ToolAction
from .base import SQLiteRepository


class SQLiteToolActionRepository(SQLiteRepository):
    """
    Append-only audit sink for mutating todo operations.

    Schema expectation (Rev 1.0.0):

      tool_actions(
        id INTEGER PRIMARY KEY,
        action_type TEXT NOT NULL,
        todo_id INTEGER NULL,          -- no FK: rows outlive deleted todos
        payload TEXT NULL,             -- JSON
        success INTEGER NOT NULL,
        error_message TEXT NULL,
        created_at TEXT NOT NULL
      )
    """

    def append(self, action: ToolAction) -> int:
        cur = self._execute(
            """
            INSERT INTO tool_actions(action_type, todo_id, payload, success, error_message, created_at)
            VALUES (?, ?, ?, ?, ?, datetime('now'))
            """,
            (
                action.action_type,
                action.todo_id,
                json.dumps(action.payload, default=str, ensure_ascii=False),
                1 if action.success else 0,
                action.error_message,
            ),
        )
        return int(cur.lastrowid)

    # Diagnostics only; the managers never read the log back.
    def list_actions(self, *, todo_id: Optional[int] = None, limit: int = 200) -> List[Dict[str, Any]]:
        where, params = "", []
        if todo_id is not None:
            where = "WHERE todo_id = ?"
            params.append(todo_id)
        rows = self._fetch_all(
            f"""
            SELECT id, action_type, todo_id, payload, success, error_message, created_at
            FROM tool_actions
            {where}
            ORDER BY id ASC
            LIMIT ?
            """,
            (*params, limit),
        )
        for r in rows:
            r["payload"] = json.loads(r["payload"]) if r["payload"] else {}
            r["success"] = bool(r["success"])
        return rows
