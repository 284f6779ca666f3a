"""Project endpoints."""
from __future__ import annotations

from flask import Blueprint, jsonify

from routes import get_store, json_error, request_payload
from services import project_service
from services.errors import TrackerError

projects_bp = Blueprint("projects", __name__, url_prefix="/api/projects")


@projects_bp.route("", methods=["GET"])
def list_projects():
    """Return all projects with their task counts, newest first."""
    try:
        return jsonify(project_service.list_projects(get_store()))
    except TrackerError as exc:
        return json_error(exc.message, status=exc.status_code)


@projects_bp.route("/<string:project_id>", methods=["GET"])
def get_project(project_id: str):
    try:
        return jsonify(project_service.get_project(get_store(), project_id))
    except TrackerError as exc:
        return json_error(exc.message, status=exc.status_code)


@projects_bp.route("", methods=["POST"])
def create_projects():
    """Create a batch of projects from ``{"projects": [{"name": ...}]}``."""
    try:
        created = project_service.create_projects(get_store(), request_payload())
    except TrackerError as exc:
        return json_error(exc.message, status=exc.status_code)
    return jsonify(created), 201


@projects_bp.route("/<string:project_id>", methods=["PUT"])
def update_project(project_id: str):
    try:
        updated = project_service.update_project(get_store(), project_id, request_payload())
    except TrackerError as exc:
        return json_error(exc.message, status=exc.status_code)
    return jsonify(updated)


@projects_bp.route("/<string:project_id>", methods=["DELETE"])
def delete_project(project_id: str):
    """Delete a completed project along with its tasks."""
    try:
        project_service.delete_project(get_store(), project_id)
    except TrackerError as exc:
        return json_error(exc.message, status=exc.status_code)
    return "", 204


@projects_bp.route("/<string:project_id>/tasks", methods=["POST"])
def create_tasks(project_id: str):
    """Create a batch of tasks from ``{"tasks": [{"title": ...}]}``."""
    try:
        created = project_service.create_tasks(get_store(), project_id, request_payload())
    except TrackerError as exc:
        return json_error(exc.message, status=exc.status_code)
    return jsonify(created), 201
