"""A Project is the top-level unit of work.

A Project owns zero or more Tasks
A Project can only be completed when all its Tasks are completed
A Project can only be deleted once it is completed
Deleting a Project deletes all its Tasks

"""
import uuid
from datetime import datetime, timezone

from database import db

NAME_MAX_LENGTH = 255


def generate_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, as stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Project(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    name = db.Column(db.String(NAME_MAX_LENGTH), nullable=False)
    completed = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    tasks = db.relationship(
        "Task",
        back_populates="project",
        lazy=True,
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Task.created_at",
    )

    def __repr__(self):
        return f"<Project {self.name}>"
