# Rev 0.3.0

"""Pytest fixtures for tasktree (Rev 0.3.0)"""
from __future__ import annotations
import pytest
from pathlib import Path

from tasktree.repositories.db import Database
from tasktree.services.project_service import ProjectManager
from tasktree.services.todo_service import TodoManager


@pytest.fixture()
def db(tmp_path: Path):
    database = Database(path=tmp_path / "test.db")
    try:
        database.run_migrations()
        yield database
    finally:
        database.close()


@pytest.fixture()
def db_conn(db):
    return db.conn


@pytest.fixture()
def projects(db) -> ProjectManager:
    return ProjectManager(db)


@pytest.fixture()
def todos(db) -> TodoManager:
    return TodoManager(db)
