"""Client-side view state with optimistic updates.

The view state is an immutable snapshot. Every optimistic mutation keeps a
reference to the snapshot it replaced and puts it back unchanged if the API
call fails; no inverse operation is computed and nothing is retried.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional, Tuple

from client.api import ApiError, TrackerApiClient

Notifier = Callable[[str, str], None]

REOPENED_PROJECT_MESSAGE = "Project marked as In Progress because a task was reopened."


def log_notifier(level: str, message: str) -> None:
    """Default notifier writing user-facing messages to the log."""
    if level == "error":
        logging.error(message)
    else:
        logging.info(message)


@dataclass(frozen=True)
class TaskView:
    id: str
    title: str
    completed: bool
    project_id: str
    created_at: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TaskView":
        return cls(
            id=payload["id"],
            title=payload["title"],
            completed=bool(payload.get("completed")),
            project_id=payload.get("projectId", ""),
            created_at=payload.get("createdAt"),
        )


@dataclass(frozen=True)
class ProjectView:
    id: str
    name: str
    completed: bool
    created_at: Optional[str] = None
    task_count: Optional[int] = None
    tasks: Tuple[TaskView, ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ProjectView":
        tasks = tuple(TaskView.from_payload(item) for item in payload.get("tasks") or [])
        count = (payload.get("_count") or {}).get("tasks")
        return cls(
            id=payload["id"],
            name=payload["name"],
            completed=bool(payload.get("completed")),
            created_at=payload.get("createdAt"),
            task_count=count if count is not None else (len(tasks) if "tasks" in payload else None),
            tasks=tasks,
        )

    def find_task(self, task_id: str) -> Optional[TaskView]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def with_task(self, updated: TaskView) -> "ProjectView":
        return replace(
            self,
            tasks=tuple(updated if task.id == updated.id else task for task in self.tasks),
        )


class _SyncBase:
    def __init__(self, client: TrackerApiClient, notifier: Optional[Notifier] = None):
        self.client = client
        self.notify = notifier or log_notifier

    def _fail(self, error: ApiError, fallback: str) -> None:
        self.notify("error", error.message or fallback)


class ProjectDetailSync(_SyncBase):
    """Keeps one project and its tasks in sync with the API."""

    def __init__(
        self,
        client: TrackerApiClient,
        project_id: str,
        notifier: Optional[Notifier] = None,
    ):
        super().__init__(client, notifier)
        self.project_id = project_id
        self.state: Optional[ProjectView] = None

    def refresh(self) -> Optional[ProjectView]:
        try:
            self.state = ProjectView.from_payload(self.client.get_project(self.project_id))
        except ApiError as error:
            self._fail(error, "Failed to fetch project details")
            return None
        return self.state

    def _apply(
        self,
        mutate: Callable[[ProjectView], ProjectView],
        call: Callable[[], Any],
        failure_message: str,
    ) -> Tuple[bool, Any]:
        snapshot = self.state
        if snapshot is None:
            raise RuntimeError("Project has not been loaded; call refresh() first.")
        self.state = mutate(snapshot)
        try:
            result = call()
        except ApiError as error:
            self.state = snapshot
            self._fail(error, failure_message)
            return False, None
        return True, result

    def _require_task(self, task_id: str) -> TaskView:
        task = self.state.find_task(task_id) if self.state is not None else None
        if task is None:
            raise KeyError(task_id)
        return task

    def toggle_task(self, task_id: str) -> bool:
        """Flip a task's completion, reopening a completed project locally."""
        task = self._require_task(task_id)
        new_completed = not task.completed
        reopens_project = self.state.completed and task.completed

        def mutate(view: ProjectView) -> ProjectView:
            view = view.with_task(replace(task, completed=new_completed))
            if reopens_project:
                view = replace(view, completed=False)
            return view

        ok, payload = self._apply(
            mutate,
            lambda: self.client.update_task(task_id, completed=new_completed),
            "Failed to update task. Please try again.",
        )
        if not ok:
            return False
        if reopens_project:
            self.notify("info", REOPENED_PROJECT_MESSAGE)
            self.refresh()
        else:
            self.state = self.state.with_task(TaskView.from_payload(payload))
            verb = "completed" if new_completed else "reopened"
            self.notify("success", f"Task {verb} successfully")
        return True

    def rename_task(self, task_id: str, title: str) -> bool:
        task = self._require_task(task_id)
        ok, payload = self._apply(
            lambda view: view.with_task(replace(task, title=title.strip())),
            lambda: self.client.update_task(task_id, title=title),
            "Failed to update task. Please try again.",
        )
        if ok:
            self.state = self.state.with_task(TaskView.from_payload(payload))
            self.notify("success", "Task updated successfully")
        return ok

    def delete_task(self, task_id: str) -> bool:
        self._require_task(task_id)

        def mutate(view: ProjectView) -> ProjectView:
            remaining = tuple(task for task in view.tasks if task.id != task_id)
            return replace(view, tasks=remaining, task_count=len(remaining))

        ok, _ = self._apply(
            mutate,
            lambda: self.client.delete_task(task_id),
            "Failed to delete task. Please try again.",
        )
        if ok:
            self.notify("success", "Task deleted successfully")
        return ok

    def add_task(self, title: str) -> bool:
        """Create a task; the new row is only shown once the server returns it."""
        try:
            payload = self.client.create_task(self.project_id, title)
        except ApiError as error:
            self._fail(error, "Failed to add task")
            return False
        if self.state is not None:
            tasks = self.state.tasks + (TaskView.from_payload(payload),)
            self.state = replace(self.state, tasks=tasks, task_count=len(tasks))
        self.notify("success", "Task added successfully")
        return True

    def update_project(self, *, name: Optional[str] = None, completed: Optional[bool] = None) -> bool:
        changes: Dict[str, Any] = {}
        local: Dict[str, Any] = {}
        if name is not None:
            changes["name"] = name
            local["name"] = name.strip()
        if completed is not None:
            changes["completed"] = completed
            local["completed"] = completed
        ok, payload = self._apply(
            lambda view: replace(view, **local),
            lambda: self.client.update_project(self.project_id, **changes),
            "Failed to update project",
        )
        if ok:
            self.state = replace(
                self.state,
                name=payload["name"],
                completed=bool(payload["completed"]),
            )
            self.notify("success", "Project updated successfully")
        return ok


class ProjectListSync(_SyncBase):
    """Keeps the project list in sync with the API."""

    def __init__(self, client: TrackerApiClient, notifier: Optional[Notifier] = None):
        super().__init__(client, notifier)
        self.projects: Tuple[ProjectView, ...] = ()

    def refresh(self) -> Tuple[ProjectView, ...]:
        try:
            payload = self.client.get_projects()
        except ApiError as error:
            self._fail(error, "Failed to fetch projects")
            return self.projects
        self.projects = tuple(ProjectView.from_payload(item) for item in payload)
        return self.projects

    def create_project(self, name: str) -> Optional[ProjectView]:
        try:
            payload = self.client.create_project(name)
        except ApiError as error:
            self._fail(error, "Failed to create project")
            return None
        created = replace(ProjectView.from_payload(payload), task_count=0)
        self.projects = (created,) + self.projects
        self.notify("success", "Project created successfully")
        return created

    def delete_project(self, project_id: str) -> bool:
        snapshot = self.projects
        self.projects = tuple(item for item in snapshot if item.id != project_id)
        try:
            self.client.delete_project(project_id)
        except ApiError as error:
            self.projects = snapshot
            self._fail(error, "Failed to delete project")
            return False
        self.notify("success", "Project deleted successfully")
        return True


__all__ = [
    "ProjectDetailSync",
    "ProjectListSync",
    "ProjectView",
    "TaskView",
    "log_notifier",
]
