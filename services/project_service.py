"""Project and task operations behind the HTTP API.

Each operation fetches the current state, checks the consistency rules and
only then writes through the store. Failures are raised as ``TrackerError``
subclasses and nothing is persisted before every check has passed.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from models.project import Project
from models.task import Task
from services.errors import NotFoundError, RuleViolation, ValidationError
from services.rules import (
    can_complete_project,
    can_create_task_under,
    can_delete_project,
    clean_text,
    field,
    needs_completion_reset,
    validate_batch,
)

INCOMPLETE_TASKS_MESSAGE = "Cannot complete project: all tasks must be completed first."
COMPLETED_PROJECT_TASKS_MESSAGE = "Cannot add tasks to a completed project."
DELETE_OPEN_PROJECT_MESSAGE = "Only completed projects can be deleted."


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.isoformat() + "Z"
    return value.isoformat()


def serialize_task(task: Task) -> Dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "completed": bool(task.completed),
        "projectId": task.project_id,
        "createdAt": _format_datetime(task.created_at),
    }


def serialize_project(
    project: Project,
    *,
    task_count: Optional[int] = None,
    include_tasks: bool = False,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": project.id,
        "name": project.name,
        "completed": bool(project.completed),
        "createdAt": _format_datetime(project.created_at),
    }
    if task_count is not None:
        payload["_count"] = {"tasks": task_count}
    if include_tasks:
        payload["tasks"] = [serialize_task(task) for task in project.tasks]
    return payload


def _require_object(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    return payload


def _parse_completed(payload: Dict[str, Any]) -> Optional[bool]:
    if "completed" not in payload:
        return None
    value = payload["completed"]
    if not isinstance(value, bool):
        raise ValidationError("completed must be a boolean.")
    return value


def _load_project(store, project_id: str) -> Project:
    project = store.find_project(project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return project


def _load_task(store, task_id: str) -> Task:
    task = store.find_task(task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return task


def list_projects(store) -> List[Dict[str, Any]]:
    return [
        serialize_project(project, task_count=count)
        for project, count in store.find_projects()
    ]


def get_project(store, project_id: str) -> Dict[str, Any]:
    project = _load_project(store, project_id)
    return serialize_project(project, include_tasks=True)


def create_projects(store, payload: Any) -> List[Dict[str, Any]]:
    """Create every project in ``{"projects": [{"name": ...}]}`` or none of them.

    The created projects are returned most recent first.
    """
    body = _require_object(payload)
    names = validate_batch(body.get("projects"), field("name"), label="Project name")
    projects = store.insert_projects_batch(names)
    logging.info("Created %s project(s)", len(projects))
    return [serialize_project(project) for project in reversed(projects)]


def update_project(store, project_id: str, payload: Any) -> Dict[str, Any]:
    project = _load_project(store, project_id)
    body = _require_object(payload)

    changes: Dict[str, Any] = {}
    if "name" in body:
        changes["name"] = clean_text(body["name"], "Project name")
    completed = _parse_completed(body)
    if completed is not None:
        changes["completed"] = completed
    if not changes:
        raise ValidationError("Provide a name or completed value to update.")

    if completed and not can_complete_project(project, project.tasks):
        logging.warning("Rejected completion of project %s with open tasks", project_id)
        raise RuleViolation(INCOMPLETE_TASKS_MESSAGE)

    updated = store.update_project(project_id, changes)
    logging.info("Updated project %s", project_id)
    return serialize_project(updated)


def delete_project(store, project_id: str) -> None:
    project = _load_project(store, project_id)
    if not can_delete_project(project):
        logging.warning("Rejected deletion of open project %s", project_id)
        raise RuleViolation(DELETE_OPEN_PROJECT_MESSAGE)
    store.delete_project(project_id)
    logging.info("Deleted project %s and its tasks", project_id)


def create_tasks(store, project_id: str, payload: Any) -> List[Dict[str, Any]]:
    """Create every task in ``{"tasks": [{"title": ...}]}`` under an open project."""
    project = _load_project(store, project_id)
    if not can_create_task_under(project):
        logging.warning("Rejected task creation under completed project %s", project_id)
        raise RuleViolation(COMPLETED_PROJECT_TASKS_MESSAGE)
    body = _require_object(payload)
    titles = validate_batch(body.get("tasks"), field("title"), label="Task title")
    tasks = store.insert_tasks_batch(project_id, titles)
    logging.info("Created %s task(s) in project %s", len(tasks), project_id)
    return [serialize_task(task) for task in tasks]


def update_task(store, task_id: str, payload: Any) -> Dict[str, Any]:
    """Apply a partial task update.

    Reopening a task of a completed project also reopens the project. The
    two writes are not atomic: if the project update fails the task keeps
    its new state.
    """
    task = _load_task(store, task_id)
    body = _require_object(payload)

    changes: Dict[str, Any] = {}
    if "title" in body:
        changes["title"] = clean_text(body["title"], "Task title")
    completed = _parse_completed(body)
    if completed is not None:
        changes["completed"] = completed
    if not changes:
        return serialize_task(task)

    project = _load_project(store, task.project_id)
    reopen_project = needs_completion_reset(project, task, completed)

    updated = store.update_task(task_id, changes)
    if reopen_project:
        store.update_project(project.id, {"completed": False})
        logging.info("Reopened project %s after task %s was reopened", project.id, task_id)
    return serialize_task(updated)


def delete_task(store, task_id: str) -> None:
    _load_task(store, task_id)
    store.delete_task(task_id)
    logging.info("Deleted task %s", task_id)


def health() -> Dict[str, str]:
    return {"status": "OK", "message": "Backend is running"}


__all__ = [
    "create_projects",
    "create_tasks",
    "delete_project",
    "delete_task",
    "get_project",
    "health",
    "list_projects",
    "serialize_project",
    "serialize_task",
    "update_project",
    "update_task",
]
