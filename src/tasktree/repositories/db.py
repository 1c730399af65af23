# Rev 0.3.0

"""SQLite connection & migration runner (Rev 0.3.0)
- autocommit (isolation_level=None): every statement commits on its own
- WAL mode, foreign_keys=ON, busy_timeout
- Applies SQL files in data/migrations in lexical order
- Tracks applied files in schema_migrations(filename TEXT PRIMARY KEY, applied_at UTC)
"""
from __future__ import annotations
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Iterator

from ..utils.logging_setup import get_logger
from ..utils.paths import DB_PATH, MEMORY_DB, MIGRATIONS_DIR


class Database:
    def __init__(
        self,
        path: Path | str = DB_PATH,
        *,
        journal_mode: str = "WAL",
        busy_timeout_ms: int = 5000,
    ) -> None:
        self._log = get_logger("Database")
        if str(path) == MEMORY_DB:
            self.path: Path | None = None
            target: str | Path = MEMORY_DB
        else:
            self.path = Path(path)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            target = self.path
        self.conn = sqlite3.connect(target, isolation_level=None, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute(f"PRAGMA journal_mode={journal_mode};")
        self.conn.execute("PRAGMA foreign_keys=ON;")
        self.conn.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)};")
        self.conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_migrations (filename TEXT PRIMARY KEY, applied_at TEXT NOT NULL)"
        )
        self._log.info("SQLite open %s", target)

    def close(self) -> None:
        try:
            self.conn.close()
        except sqlite3.ProgrammingError:
            pass

    def applied(self) -> set[str]:
        rows = self.conn.execute("SELECT filename FROM schema_migrations").fetchall()
        return {r[0] for r in rows}

    def apply_sql(self, sql: str) -> None:
        self.conn.executescript(sql)

    def run_migrations(self, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
        applied = self.applied()
        to_apply = [p for p in sorted(Path(migrations_dir).glob("*.sql")) if p.name not in applied]
        for p in to_apply:
            self._log.info("Applying migration %s", p.name)
            self.apply_sql(p.read_text(encoding="utf-8"))
            self.conn.execute(
                "INSERT INTO schema_migrations(filename, applied_at) VALUES(?, ?)",
                (p.name, datetime.now(timezone.utc).isoformat()),
            )
        return [p.name for p in to_apply]

    def journal_mode(self) -> str:
        (mode,) = self.conn.execute("PRAGMA journal_mode;").fetchone()
        return str(mode).lower()

    def table_names(self) -> set[str]:
        rows = self.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
        ).fetchall()
        return {r[0] for r in rows}


def resolve_connection(db_or_conn: Any, owner: str = "repository") -> sqlite3.Connection:
    """Accept a raw sqlite3.Connection or a wrapper exposing .conn / .connect()."""
    if isinstance(db_or_conn, sqlite3.Connection):
        return db_or_conn
    if hasattr(db_or_conn, "conn") and isinstance(db_or_conn.conn, sqlite3.Connection):
        return db_or_conn.conn
    if hasattr(db_or_conn, "connect"):
        maybe = db_or_conn.connect()
        if isinstance(maybe, sqlite3.Connection):
            return maybe
    raise RuntimeError(
        f"{owner}: could not obtain sqlite3.Connection "
        "(expected .conn or .connect() on wrapper, or a raw Connection)."
    )


@contextmanager
def tx(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Explicit BEGIN/COMMIT around a block; ROLLBACK on any error.

    Needs an autocommit connection (isolation_level=None) so statements inside
    the block are not committed one by one.
    """
    conn.execute("BEGIN;")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK;")
        raise
    else:
        conn.execute("COMMIT;")
