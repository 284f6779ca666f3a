"""Tests for optimistic client state and rollback."""

from unittest.mock import MagicMock

import pytest

from client.api import ApiError
from client.sync import (
    REOPENED_PROJECT_MESSAGE,
    ProjectDetailSync,
    ProjectListSync,
    ProjectView,
)


def _task(task_id, completed=False, title="Design"):
    return {
        "id": task_id,
        "title": title,
        "completed": completed,
        "projectId": "p1",
        "createdAt": "2024-01-01T00:00:00Z",
    }


def _project(completed=False, tasks=()):
    return {
        "id": "p1",
        "name": "Site",
        "completed": completed,
        "createdAt": "2024-01-01T00:00:00Z",
        "tasks": list(tasks),
    }


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def api():
    return MagicMock()


def _detail(api, notifications, payload):
    api.get_project.return_value = payload
    sync = ProjectDetailSync(api, "p1", notifier=lambda level, message: notifications.append((level, message)))
    sync.refresh()
    return sync


def test_refresh_builds_snapshot(api, notifications):
    sync = _detail(api, notifications, _project(tasks=[_task("t1")]))

    assert isinstance(sync.state, ProjectView)
    assert sync.state.task_count == 1
    assert sync.state.tasks[0].project_id == "p1"


def test_toggle_failure_restores_exact_snapshot(api, notifications):
    sync = _detail(api, notifications, _project(completed=True, tasks=[_task("t1", True)]))
    before = sync.state
    api.update_task.side_effect = ApiError("Failed to update task", 500)

    assert sync.toggle_task("t1") is False

    assert sync.state is before
    assert notifications == [("error", "Failed to update task")]


def test_reopening_task_reopens_project_and_refreshes(api, notifications):
    sync = _detail(api, notifications, _project(completed=True, tasks=[_task("t1", True)]))
    api.update_task.return_value = _task("t1", False)
    api.get_project.return_value = _project(completed=False, tasks=[_task("t1", False)])

    assert sync.toggle_task("t1") is True

    api.update_task.assert_called_once_with("t1", completed=False)
    api.update_project.assert_not_called()
    assert sync.state.completed is False
    assert ("info", REOPENED_PROJECT_MESSAGE) in notifications
    assert api.get_project.call_count == 2


def test_completing_task_applies_server_copy(api, notifications):
    sync = _detail(api, notifications, _project(tasks=[_task("t1")]))
    api.update_task.return_value = _task("t1", True, title="Design v2")

    assert sync.toggle_task("t1") is True

    assert sync.state.tasks[0].completed is True
    assert sync.state.tasks[0].title == "Design v2"
    assert notifications[-1] == ("success", "Task completed successfully")


def test_optimistic_state_is_visible_during_call(api, notifications):
    sync = _detail(api, notifications, _project(tasks=[_task("t1")]))
    seen = {}

    def update_task(task_id, **changes):
        seen["completed"] = sync.state.find_task(task_id).completed
        return _task(task_id, True)

    api.update_task.side_effect = update_task
    sync.toggle_task("t1")

    assert seen["completed"] is True


def test_delete_task_rollback(api, notifications):
    sync = _detail(api, notifications, _project(tasks=[_task("t1"), _task("t2")]))
    before = sync.state
    api.delete_task.side_effect = ApiError("", 500)

    assert sync.delete_task("t1") is False

    assert sync.state is before
    assert notifications == [("error", "Failed to delete task. Please try again.")]


def test_update_project_rejected_by_rule(api, notifications):
    sync = _detail(api, notifications, _project(tasks=[_task("t1")]))
    api.update_project.side_effect = ApiError(
        "Cannot complete project: all tasks must be completed first.", 400
    )

    assert sync.update_project(completed=True) is False

    assert sync.state.completed is False
    assert notifications[-1][0] == "error"


def test_add_task_appends_server_record(api, notifications):
    sync = _detail(api, notifications, _project())
    api.create_task.return_value = _task("t9", title="New")

    assert sync.add_task("New") is True

    assert [task.id for task in sync.state.tasks] == ["t9"]
    assert sync.state.task_count == 1


def test_unknown_task_raises(api, notifications):
    sync = _detail(api, notifications, _project())
    with pytest.raises(KeyError):
        sync.toggle_task("missing")


def test_mutation_before_refresh_raises(api):
    sync = ProjectDetailSync(api, "p1", notifier=lambda *args: None)
    with pytest.raises(RuntimeError):
        sync.update_project(name="x")


def test_project_list_delete_rollback(api, notifications):
    api.get_projects.return_value = [
        {"id": "p1", "name": "Site", "completed": False, "_count": {"tasks": 2}},
        {"id": "p2", "name": "Docs", "completed": True, "_count": {"tasks": 0}},
    ]
    sync = ProjectListSync(api, notifier=lambda level, message: notifications.append((level, message)))
    sync.refresh()
    before = sync.projects
    api.delete_project.side_effect = ApiError("Only completed projects can be deleted.", 400)

    assert sync.delete_project("p1") is False

    assert sync.projects is before
    assert sync.projects[0].task_count == 2
    assert notifications == [("error", "Only completed projects can be deleted.")]


def test_project_list_create_prepends(api, notifications):
    api.get_projects.return_value = [{"id": "p1", "name": "Site", "completed": False}]
    sync = ProjectListSync(api, notifier=lambda level, message: notifications.append((level, message)))
    sync.refresh()
    api.create_project.return_value = {"id": "p2", "name": "New", "completed": False}

    created = sync.create_project("New")

    assert created.task_count == 0
    assert [item.id for item in sync.projects] == ["p2", "p1"]
