# Rev 0.3.0

"""Paths and XDG helpers (Rev 0.3.0)
- XDG base directories for data/state/config
- DB defaults to $XDG_DATA_HOME/tasktree/tasktree.db (override with TASKTREE_DB)
- Migrations ship inside the package (data/migrations)
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "tasktree"


XDG_DATA_HOME = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
XDG_STATE_HOME = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
XDG_CONFIG_HOME = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


DATA_DIR = XDG_DATA_HOME / APP_NAME
STATE_DIR = XDG_STATE_HOME / APP_NAME
LOGS_DIR = STATE_DIR / "logs"
CONFIG_DIR = XDG_CONFIG_HOME / APP_NAME


# Package-relative locations
PACKAGE_ROOT = Path(__file__).resolve().parents[1]
MIGRATIONS_DIR = (PACKAGE_ROOT / "data" / "migrations").resolve()


DB_PATH = DATA_DIR / "tasktree.db"

MEMORY_DB = ":memory:"


def env_db_path() -> Path | None:
    raw = os.environ.get("TASKTREE_DB")
    return Path(raw) if raw else None


def ensure_dirs() -> None:
    for p in (DATA_DIR, STATE_DIR, LOGS_DIR, CONFIG_DIR):
        p.mkdir(parents=True, exist_ok=True)
