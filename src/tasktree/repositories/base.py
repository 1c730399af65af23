# Rev 0.3.0
from __future__ import annotations
import sqlite3
from typing import Any, Dict, List, Optional, Sequence, Union

from .db import resolve_connection


class SQLiteRepository:
    """Shared connection handling + row helpers for the table repositories."""

    def __init__(self, db_or_conn: Union[sqlite3.Connection, Any]):
        self._db_or_conn = db_or_conn

    def _conn(self) -> sqlite3.Connection:
        return resolve_connection(self._db_or_conn, type(self).__name__)

    def _fetch_all(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        cur = self._conn().execute(sql, tuple(params))
        cols = [d[0] for d in cur.description]
        return [{cols[i]: row[i] for i in range(len(cols))} for row in cur.fetchall()]

    def _fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        rows = self._fetch_all(sql, params)
        return rows[0] if rows else None

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        return self._conn().execute(sql, tuple(params))
