"""Task endpoints."""
from __future__ import annotations

from flask import Blueprint, jsonify

from routes import get_store, json_error, request_payload
from services import project_service
from services.errors import TrackerError

tasks_bp = Blueprint("tasks", __name__, url_prefix="/api/tasks")


@tasks_bp.route("/<string:task_id>", methods=["PUT"])
def update_task(task_id: str):
    """Update a task's title and/or completion.

    Reopening a task of a completed project reopens the project as well.
    """
    try:
        updated = project_service.update_task(get_store(), task_id, request_payload())
    except TrackerError as exc:
        return json_error(exc.message, status=exc.status_code)
    return jsonify(updated)


@tasks_bp.route("/<string:task_id>", methods=["DELETE"])
def delete_task(task_id: str):
    try:
        project_service.delete_task(get_store(), task_id)
    except TrackerError as exc:
        return json_error(exc.message, status=exc.status_code)
    return "", 204
