"""Persistence primitives for projects and tasks."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import timedelta
from typing import Any, Iterator, Mapping, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from models.project import Project, utcnow
from models.task import Task
from services.errors import NotFoundError, StoreFailure

PROJECT_FIELDS = ("name", "completed")
TASK_FIELDS = ("title", "completed")


class SqlAlchemyStore:
    """Entity store backed by a SQLAlchemy session.

    Each public method is a single commit. Database errors roll the session
    back and are re-raised as ``StoreFailure``.
    """

    def __init__(self, session):
        self.session = session

    @contextmanager
    def _guard(self, action: str, *, commit: bool = False) -> Iterator[None]:
        try:
            yield
            if commit:
                self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logging.error("Database error while trying to %s", action, exc_info=True)
            raise StoreFailure(f"Failed to {action}.") from exc

    def find_projects(self) -> list[tuple[Project, int]]:
        """Return ``(project, task_count)`` pairs, newest project first."""
        statement = (
            select(Project, func.count(Task.id))
            .outerjoin(Task, Task.project_id == Project.id)
            .group_by(Project.id)
            .order_by(Project.created_at.desc())
        )
        with self._guard("fetch projects"):
            rows = self.session.execute(statement).all()
        return [(project, count) for project, count in rows]

    def find_project(self, project_id: str) -> Project | None:
        with self._guard("fetch project"):
            return self.session.get(Project, project_id)

    def find_task(self, task_id: str) -> Task | None:
        with self._guard("fetch task"):
            return self.session.get(Task, task_id)

    def _get_project(self, project_id: str) -> Project:
        project = self.find_project(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    def _get_task(self, task_id: str) -> Task:
        task = self.find_task(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def insert_projects_batch(self, names: Sequence[str]) -> list[Project]:
        """Insert open projects in one commit and return them in input order.

        Rows get strictly increasing creation times so the last name of the
        batch sorts as the most recent project.
        """
        now = utcnow()
        projects = [
            Project(name=name, completed=False, created_at=now + timedelta(microseconds=offset))
            for offset, name in enumerate(names)
        ]
        with self._guard("create projects", commit=True):
            self.session.add_all(projects)
        return projects

    def insert_tasks_batch(self, project_id: str, titles: Sequence[str]) -> list[Task]:
        now = utcnow()
        tasks = [
            Task(
                title=title,
                completed=False,
                project_id=project_id,
                created_at=now + timedelta(microseconds=offset),
            )
            for offset, title in enumerate(titles)
        ]
        with self._guard("create tasks", commit=True):
            self.session.add_all(tasks)
        return tasks

    def update_project(self, project_id: str, changes: Mapping[str, Any]) -> Project:
        project = self._get_project(project_id)
        with self._guard("update project", commit=True):
            for key in PROJECT_FIELDS:
                if key in changes:
                    setattr(project, key, changes[key])
        return project

    def update_task(self, task_id: str, changes: Mapping[str, Any]) -> Task:
        task = self._get_task(task_id)
        with self._guard("update task", commit=True):
            for key in TASK_FIELDS:
                if key in changes:
                    setattr(task, key, changes[key])
        return task

    def delete_project(self, project_id: str) -> None:
        """Delete the project's tasks, then the project, in a single commit."""
        project = self._get_project(project_id)
        with self._guard("delete project", commit=True):
            for task in list(project.tasks):
                self.session.delete(task)
            self.session.delete(project)

    def delete_task(self, task_id: str) -> None:
        task = self._get_task(task_id)
        with self._guard("delete task", commit=True):
            self.session.delete(task)

    def clear(self) -> None:
        """Remove every task and project."""
        with self._guard("clear data", commit=True):
            self.session.query(Task).delete()
            self.session.query(Project).delete()


__all__ = ["PROJECT_FIELDS", "SqlAlchemyStore", "TASK_FIELDS"]
