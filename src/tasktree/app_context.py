# tasktree application context
# Rev 0.3.0

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .repositories.db import Database
from .services.project_service import ProjectManager
from .services.todo_service import TodoManager
from .utils.config import load_settings
from .utils.logging_setup import get_logger
from .utils.paths import DB_PATH, env_db_path


def resolve_db_path(db_path: Optional[Path | str], settings: Dict[str, Any]) -> Path | str:
    """Explicit argument → TASKTREE_DB → settings database.path → DB_PATH."""
    if db_path is not None:
        return db_path
    from_env = env_db_path()
    if from_env is not None:
        return from_env
    configured = settings.get("database", {}).get("path")
    if configured:
        return configured
    return DB_PATH


@dataclass
class AppContext:
    """Central container for the store handle and the two managers."""
    db_path: Path | str
    db: Database
    projects: ProjectManager
    todos: TodoManager
    settings: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        db_path: Optional[Path | str] = None,
        *,
        settings: Optional[Dict[str, Any]] = None,
    ) -> "AppContext":
        """Open the DB, apply pending migrations, wire the managers."""
        log = get_logger("AppContext")
        settings = settings if settings is not None else load_settings()
        path = resolve_db_path(db_path, settings)
        db_cfg = settings.get("database", {})

        db = Database(
            path,
            journal_mode=db_cfg.get("journal_mode", "WAL"),
            busy_timeout_ms=db_cfg.get("busy_timeout_ms", 5000),
        )
        applied = db.run_migrations()
        if applied:
            log.info("Applied migrations: %s", ", ".join(applied))

        record = bool(settings.get("action_log", {}).get("enabled", True))
        projects = ProjectManager(db)
        todos = TodoManager(db, record_actions=record)
        log.info("AppContext initialized with DB=%s (action log %s)", path, "on" if record else "off")
        return cls(db_path=path, db=db, projects=projects, todos=todos, settings=settings)

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
