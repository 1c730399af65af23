# Rev 0.3.0

"""Project/milestone service (Rev 0.3.0)
CRUD for projects and milestones with progress attached on every read.
Progress is derived from the todos table and never stored.
"""
from __future__ import annotations
import sqlite3
from datetime import date
from typing import Any, List, Optional, Union

from ..errors import NotFoundError, ValidationError
from ..models.entities import Deleted, Milestone, Project
from ..models.patches import ProjectPatch, iso_date, merge_project
from ..models.types import PROJECT_STATUSES
from ..repositories.sqlite_milestone_repository import SQLiteMilestoneRepository
from ..repositories.sqlite_project_repository import SQLiteProjectRepository
from ..utils.logging_setup import get_logger
from .progress import progress_percent


class ProjectManager:
    def __init__(self, db_or_conn: Union[sqlite3.Connection, Any]):
        self._projects = SQLiteProjectRepository(db_or_conn)
        self._milestones = SQLiteMilestoneRepository(db_or_conn)
        self._log = get_logger("ProjectManager")

    # ---------- projects ----------

    def list_projects(self, status: Optional[str] = None) -> List[Project]:
        rows = self._projects.list_projects(status)
        return [self._attach_progress(Project.from_row(r)) for r in rows]

    def get_project(self, project_id: int) -> Project:
        row = self._projects.get_project(project_id)
        if row is None:
            raise NotFoundError("project", project_id)
        return self._attach_progress(Project.from_row(row))

    def create_project(self, name: str, description: Optional[str] = None) -> Project:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Project name must not be empty", field="name")
        project_id = self._projects.insert_project(name, description)
        self._log.info("Created project #%s %r", project_id, name)
        return self.get_project(project_id)

    def update_project(self, project_id: int, patch: Optional[ProjectPatch] = None) -> Project:
        """Apply only the supplied fields; updated_at is refreshed even for an empty patch."""
        current = self.get_project(project_id)
        values = merge_project(current, patch or ProjectPatch())
        if not isinstance(values["name"], str) or not values["name"].strip():
            raise ValidationError("Project name must not be empty", field="name")
        if values["status"] not in PROJECT_STATUSES:
            raise ValidationError(
                f"Invalid project status {values['status']!r} (expected one of {', '.join(PROJECT_STATUSES)})",
                field="status",
            )
        self._projects.update_project(project_id, **values)
        self._log.info("Updated project #%s", project_id)
        return self.get_project(project_id)

    def delete_project(self, project_id: int) -> Deleted:
        self.get_project(project_id)
        self._projects.delete_project(project_id)
        self._log.info("Deleted project #%s (milestones removed, todos detached)", project_id)
        return Deleted(id=project_id)

    # ---------- milestones ----------

    def list_milestones(self, project_id: int) -> List[Milestone]:
        self.get_project(project_id)
        rows = self._milestones.list_for_project(project_id)
        return [self._attach_milestone_progress(Milestone.from_row(r)) for r in rows]

    def get_milestone(self, milestone_id: int) -> Milestone:
        row = self._milestones.get_milestone(milestone_id)
        if row is None:
            raise NotFoundError("milestone", milestone_id)
        return self._attach_milestone_progress(Milestone.from_row(row))

    def create_milestone(self, project_id: int, title: str, target_date: Union[str, date]) -> Milestone:
        self.get_project(project_id)
        if not title or not title.strip():
            raise ValidationError("Milestone title must not be empty", field="title")
        if not target_date:
            raise ValidationError("Milestone target date is required", field="target_date")
        milestone_id = self._milestones.insert_milestone(project_id, title, iso_date(target_date))
        self._log.info("Created milestone #%s for project #%s", milestone_id, project_id)
        return self.get_milestone(milestone_id)

    def complete_milestone(self, milestone_id: int, undo: bool = False) -> Milestone:
        self.get_milestone(milestone_id)
        new_status = "pending" if undo else "reached"
        self._milestones.set_status(milestone_id, new_status)
        self._log.info("Milestone #%s -> %s", milestone_id, new_status)
        return self.get_milestone(milestone_id)

    def delete_milestone(self, milestone_id: int) -> Deleted:
        self.get_milestone(milestone_id)
        self._milestones.delete_milestone(milestone_id)
        self._log.info("Deleted milestone #%s (todos detached)", milestone_id)
        return Deleted(id=milestone_id)

    # ---------- progress ----------

    def _attach_progress(self, project: Project) -> Project:
        total, completed = self._projects.todo_counts(project.id)
        project.total_tasks = total
        project.completed_tasks = completed
        project.progress_percent = progress_percent(completed, total)
        return project

    def _attach_milestone_progress(self, milestone: Milestone) -> Milestone:
        total, completed = self._milestones.todo_counts(milestone.id)
        milestone.total_tasks = total
        milestone.completed_tasks = completed
        milestone.progress_percent = progress_percent(completed, total)
        return milestone
