"""HTTP client for the tracker API."""

from __future__ import annotations

import json
import logging
import os
from http.client import RemoteDisconnected
from typing import Any, Dict, List, Optional, Tuple
from urllib import error as urllib_error, request as urllib_request
from urllib.parse import quote

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_TIMEOUT = 20


class ApiError(RuntimeError):
    """Raised when an API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TrackerApiClient:
    """Thin JSON client mirroring every endpoint of the tracker API."""

    def __init__(self, base_url: Optional[str] = None, *, timeout: float = DEFAULT_TIMEOUT):
        base = base_url or os.environ.get("TRACKER_API_URL") or DEFAULT_API_URL
        self.base_url = base.rstrip("/")
        self.timeout = timeout

    def _request(
        self,
        method: str,
        endpoint: str,
        payload: Optional[Any] = None,
    ) -> Tuple[int, Any]:
        url = f"{self.base_url}/api{endpoint}"
        data = None
        headers = {"Accept": "application/json"}
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"

        request = urllib_request.Request(url, data=data, headers=headers, method=method)
        try:
            with urllib_request.urlopen(request, timeout=self.timeout) as response:
                status = response.getcode()
                raw = response.read()
        except urllib_error.HTTPError as error:
            status = error.code
            raw = error.read()
        except RemoteDisconnected as error:
            raise ApiError("The server closed the connection unexpectedly.") from error
        except urllib_error.URLError as error:
            raise ApiError("Unable to reach the tracker API.") from error

        text = raw.decode("utf-8") if raw else ""
        try:
            body = json.loads(text) if text else None
        except json.JSONDecodeError:
            body = None
        if status >= 400:
            logging.warning(
                "Tracker API call failed",
                extra={"method": method, "url": url, "status": status, "body": text[:500]},
            )
            message = None
            if isinstance(body, dict):
                message = body.get("message") or body.get("error")
            raise ApiError(message or f"Request failed with status {status}.", status)
        return status, body

    def get_projects(self) -> List[Dict[str, Any]]:
        _, body = self._request("GET", "/projects")
        return body or []

    def get_project(self, project_id: str) -> Dict[str, Any]:
        _, body = self._request("GET", f"/projects/{quote(project_id)}")
        return body

    def create_projects(self, names: List[str]) -> List[Dict[str, Any]]:
        payload = {"projects": [{"name": name} for name in names]}
        _, body = self._request("POST", "/projects", payload)
        return body or []

    def create_project(self, name: str) -> Dict[str, Any]:
        return self.create_projects([name])[0]

    def update_project(self, project_id: str, **changes: Any) -> Dict[str, Any]:
        _, body = self._request("PUT", f"/projects/{quote(project_id)}", changes)
        return body

    def delete_project(self, project_id: str) -> None:
        self._request("DELETE", f"/projects/{quote(project_id)}")

    def create_tasks(self, project_id: str, titles: List[str]) -> List[Dict[str, Any]]:
        payload = {"tasks": [{"title": title} for title in titles]}
        _, body = self._request("POST", f"/projects/{quote(project_id)}/tasks", payload)
        return body or []

    def create_task(self, project_id: str, title: str) -> Dict[str, Any]:
        return self.create_tasks(project_id, [title])[0]

    def update_task(self, task_id: str, **changes: Any) -> Dict[str, Any]:
        _, body = self._request("PUT", f"/tasks/{quote(task_id)}", changes)
        return body

    def delete_task(self, task_id: str) -> None:
        self._request("DELETE", f"/tasks/{quote(task_id)}")

    def health(self) -> Dict[str, Any]:
        _, body = self._request("GET", "/health")
        return body or {}


__all__ = ["ApiError", "DEFAULT_API_URL", "TrackerApiClient"]
