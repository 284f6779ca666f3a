"""Consistency rules for projects and their tasks.

Every function here is pure: it looks at the objects it is given and never
touches the database. Objects only need ``completed`` attributes, so ORM
models, dataclasses and test doubles all work.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Sequence

from services.errors import ValidationError

DEFAULT_MAX_LENGTH = 255


def can_complete_project(project: Any, tasks: Iterable[Any]) -> bool:
    """Return True when every task is completed.

    A project without tasks is always eligible.
    """
    return all(task.completed for task in tasks)


def can_create_task_under(project: Any) -> bool:
    """Return True when the project is still open."""
    return not project.completed


def can_delete_project(project: Any) -> bool:
    """Return True when the project has been completed."""
    return bool(project.completed)


def needs_completion_reset(project: Any, task: Any, new_task_completed: Optional[bool]) -> bool:
    """Return True when reopening ``task`` must also reopen ``project``.

    ``new_task_completed`` is None when the update leaves completion untouched.
    """
    return bool(project.completed and task.completed and new_task_completed is False)


def clean_text(value: Any, label: str, *, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Trim a name or title and reject blank, non-string or oversized values."""
    if not isinstance(value, str):
        raise ValidationError(f"{label} is required and must be a string.")
    cleaned = value.strip()
    if not cleaned:
        raise ValidationError(f"{label} cannot be empty.")
    if len(cleaned) > max_length:
        raise ValidationError(f"{label} must be {max_length} characters or fewer.")
    return cleaned


def validate_batch(
    entries: Any,
    field_extractor: Callable[[Any], Any],
    *,
    label: str = "Value",
    max_length: int = DEFAULT_MAX_LENGTH,
) -> list[str]:
    """Validate a batch of new records and return their trimmed values.

    The whole batch is rejected with ``ValidationError`` when ``entries`` is
    not a non-empty list or when any single entry fails, so callers never
    persist a partial batch.
    """
    if not isinstance(entries, Sequence) or isinstance(entries, (str, bytes)):
        raise ValidationError("Expected a non-empty list of entries.")
    if not entries:
        raise ValidationError("At least one entry is required.")

    cleaned: list[str] = []
    for index, entry in enumerate(entries):
        try:
            value = field_extractor(entry)
        except (AttributeError, KeyError, TypeError):
            value = None
        try:
            cleaned.append(clean_text(value, label, max_length=max_length))
        except ValidationError as exc:
            raise ValidationError(f"Entry {index + 1}: {exc.message}") from exc
    return cleaned


def field(name: str) -> Callable[[Any], Any]:
    """Return an extractor reading ``name`` from a JSON object entry."""

    def extract(entry: Any) -> Any:
        if not isinstance(entry, dict):
            return None
        return entry.get(name)

    return extract


__all__ = [
    "can_complete_project",
    "can_create_task_under",
    "can_delete_project",
    "clean_text",
    "field",
    "needs_completion_reset",
    "validate_batch",
]
