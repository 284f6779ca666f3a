import logging
import os

import click
from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_migrate import Migrate

from database import db

load_dotenv()

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Initialize Flask app
app = Flask(__name__)
app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get(
    "DATABASE_URL", "sqlite:///tracker.db"
)
app.json.sort_keys = False

db.init_app(app)

# Models import should be after initializing db
from models.project import Project
from models.task import Task

from routes.projects import projects_bp
from routes.tasks import tasks_bp
from services.project_service import health as health_payload
from services.store import SqlAlchemyStore

# Create flask command lines to update the db based on the model
# Useage:
# Create a migration script in ./migrations/versions
# > flask db migrate -m "Update comments"
# Run the update
# > flask db upgrade
migrate = Migrate(app, db)
app.register_blueprint(projects_bp)
app.register_blueprint(tasks_bp)


@app.route("/api/health")
def health():
    return jsonify(health_payload())


SEED_PROJECTS = [
    (
        "Website Redesign",
        False,
        [
            ("Design mockups", True),
            ("Implement header component", True),
            ("Add responsive navigation", False),
        ],
    ),
    (
        "Mobile App Development",
        False,
        [
            ("Set up React Native project", True),
            ("Create login screen", False),
            ("Implement user authentication", False),
        ],
    ),
    (
        "Documentation Update",
        True,
        [
            ("Update API documentation", True),
            ("Review user guides", True),
        ],
    ),
    (
        "Database Migration",
        False,
        [
            ("Plan migration strategy", True),
            ("Test migration scripts", False),
        ],
    ),
]


def seed_database():
    """Replace all data with the demo projects and tasks.

    Returns a tuple of (project_count, task_count).
    """
    store = SqlAlchemyStore(db.session)
    store.clear()
    task_total = 0
    for name, completed, tasks in SEED_PROJECTS:
        project = Project(name=name, completed=completed)
        project.tasks = [Task(title=title, completed=done) for title, done in tasks]
        db.session.add(project)
        task_total += len(tasks)
    db.session.commit()
    return len(SEED_PROJECTS), task_total


@app.cli.command("seed")
def seed_command():
    """Load demo projects into the database."""
    projects, tasks = seed_database()
    click.echo(f"Created {projects} projects and {tasks} tasks")


if __name__ == "__main__":
    app.run(debug=os.environ.get("FLASK_DEBUG") == "1", port=int(os.environ.get("PORT", 5000)))
