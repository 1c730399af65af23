# File: src/tasktree/tools/migrate.py
# Usage examples:
#   python -m tasktree.tools.migrate up
#   python -m tasktree.tools.migrate status
#   python -m tasktree.tools.migrate rebuild
#   python -m tasktree.tools.migrate verify --db /path/to/tasktree.db
#
# Notes:
# - DB path defaults to env TASKTREE_DB or $XDG_DATA_HOME/tasktree/tasktree.db
# - Applies the packaged data/migrations/*.sql in lexicographic order
# - Records applied migrations in schema_migrations

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from ..repositories.db import Database
from ..utils.paths import DB_PATH, MIGRATIONS_DIR, env_db_path

DEFAULT_DB = env_db_path() or DB_PATH

REQUIRED_TABLES = ("projects", "milestones", "todos", "tool_actions", "schema_migrations")

# (table, column, referenced table, on_delete)
EXPECTED_FOREIGN_KEYS = (
    ("milestones", "project_id", "projects", "CASCADE"),
    ("todos", "project_id", "projects", "SET NULL"),
    ("todos", "parent_id", "todos", "CASCADE"),
    ("todos", "milestone_id", "milestones", "SET NULL"),
)


def cmd_status(db_path: Path, migrations_dir: Path) -> int:
    db = Database(db_path)
    try:
        applied = sorted(db.applied())
        print(f"DB: {db_path}")
        print(f"Migrations dir: {migrations_dir}")
        print(f"Applied count: {len(applied)}")
        for name in applied:
            print(f"  ✔ {name}")
        pending = [p.name for p in sorted(migrations_dir.glob("*.sql")) if p.name not in applied]
        print(f"Pending count: {len(pending)}")
        for name in pending:
            print(f"  ⧗ {name}")
        return 0
    finally:
        db.close()


def cmd_up(db_path: Path, migrations_dir: Path) -> int:
    db = Database(db_path)
    try:
        applied = db.run_migrations(migrations_dir)
        for name in applied:
            print(f"→ Applied migration: {name}")
        if applied:
            print("✓ Database is up to date.")
        else:
            print("✓ No changes. Database already up to date.")
        return 0
    finally:
        db.close()


def cmd_rebuild(db_path: Path, migrations_dir: Path) -> int:
    if db_path.exists():
        print(f"⟲ Rebuilding: removing existing DB {db_path}")
        db_path.unlink()
        for suffix in ("-wal", "-shm"):
            side = db_path.with_name(db_path.name + suffix)
            if side.exists():
                side.unlink()
    db = Database(db_path)
    try:
        db.run_migrations(migrations_dir)
        print("✓ Rebuild complete.")
        return 0
    finally:
        db.close()


def cmd_verify(db_path: Path) -> int:
    db = Database(db_path)
    try:
        names = db.table_names()
        missing = [t for t in REQUIRED_TABLES if t not in names]
        if missing:
            print("❌ Missing tables:", ", ".join(missing))
            return 2

        for table, column, target, on_delete in EXPECTED_FOREIGN_KEYS:
            rows = db.conn.execute(f"PRAGMA foreign_key_list({table})").fetchall()
            found = [r for r in rows if r["from"] == column and r["table"] == target]
            if not found or found[0]["on_delete"].upper() != on_delete:
                print(f"❌ Foreign key {table}.{column} → {target} is not ON DELETE {on_delete}")
                return 3

        mode = db.journal_mode()
        if mode != "wal":
            print(f"❌ journal_mode is not WAL (got {mode})")
            return 4

        print("✓ Verification passed.")
        return 0
    finally:
        db.close()


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="tasktree-migrate", description="SQLite migration runner for tasktree")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(sp: argparse.ArgumentParser):
        sp.add_argument("--db", type=Path, default=DEFAULT_DB, help=f"Path to SQLite DB (default: {DEFAULT_DB})")
        sp.add_argument("--migrations-dir", type=Path, default=MIGRATIONS_DIR, help=f"Migrations directory (default: {MIGRATIONS_DIR})")

    s_up = sub.add_parser("up", help="Run pending migrations")
    add_common(s_up)

    s_rebuild = sub.add_parser("rebuild", help="Drop and recreate DB from migrations")
    add_common(s_rebuild)

    s_status = sub.add_parser("status", help="Show applied and pending migrations")
    add_common(s_status)

    s_verify = sub.add_parser("verify", help="Check tables, foreign keys and journal mode")
    s_verify.add_argument("--db", type=Path, default=DEFAULT_DB, help=f"Path to SQLite DB (default: {DEFAULT_DB})")

    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    if ns.cmd == "status":
        return cmd_status(ns.db, ns.migrations_dir)
    if ns.cmd == "up":
        return cmd_up(ns.db, ns.migrations_dir)
    if ns.cmd == "rebuild":
        return cmd_rebuild(ns.db, ns.migrations_dir)
    if ns.cmd == "verify":
        return cmd_verify(ns.db)
    raise SystemExit(1)


if __name__ == "__main__":
    raise SystemExit(main())
