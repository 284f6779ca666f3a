"""A Task represents a unit of work inside a Project.

A Task belongs to exactly one Project and is never moved to another one
A Task cannot be created under a completed Project
Reopening a Task of a completed Project reopens the Project too

"""
from database import db
from models.project import NAME_MAX_LENGTH, generate_id, utcnow

TITLE_MAX_LENGTH = NAME_MAX_LENGTH


class Task(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    title = db.Column(db.String(TITLE_MAX_LENGTH), nullable=False)
    completed = db.Column(db.Boolean, default=False, nullable=False)
    project_id = db.Column(
        db.String(36),
        db.ForeignKey("project.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    project = db.relationship("Project", back_populates="tasks")

    def __repr__(self):
        return f"<Task {self.title}>"
