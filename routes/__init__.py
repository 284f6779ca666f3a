"""Shared helpers for route blueprints."""

from __future__ import annotations

from typing import Any

from flask import jsonify, request

from database import db
from services.store import SqlAlchemyStore

__all__ = ["get_store", "json_error", "request_payload"]


def get_store() -> SqlAlchemyStore:
    """Return an entity store bound to the current request's session."""
    return SqlAlchemyStore(db.session)


def request_payload() -> Any:
    """Return the decoded JSON body, or None when it is absent or malformed."""
    return request.get_json(silent=True)


def json_error(message: str, *, status: int = 400):
    """Return a JSON error response."""
    return jsonify({"success": False, "message": message}), status
