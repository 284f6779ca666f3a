import unittest
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app import app, db
from models.project import Project
from models.task import Task
from services.errors import NotFoundError, StoreFailure
from services.store import SqlAlchemyStore
from tests.utils.db import reset_schema


class SqlAlchemyStoreTestCase(unittest.TestCase):
    def setUp(self):
        self.ctx = app.app_context()
        self.ctx.push()
        reset_schema(db)
        self.store = SqlAlchemyStore(db.session)

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()

    def test_batch_insert_returns_rows_in_input_order(self):
        projects = self.store.insert_projects_batch(["One", "Two", "Three"])

        self.assertEqual([project.name for project in projects], ["One", "Two", "Three"])
        self.assertTrue(all(project.id for project in projects))
        self.assertTrue(all(project.completed is False for project in projects))
        created = [project.created_at for project in projects]
        self.assertEqual(created, sorted(created))
        self.assertEqual(len(set(created)), 3)

    def test_find_projects_counts_tasks(self):
        first, second = self.store.insert_projects_batch(["First", "Second"])
        self.store.insert_tasks_batch(first.id, ["a", "b", "c"])

        rows = self.store.find_projects()

        self.assertEqual([(project.name, count) for project, count in rows], [("Second", 0), ("First", 3)])

    def test_find_project_loads_tasks_oldest_first(self):
        (project,) = self.store.insert_projects_batch(["Site"])
        self.store.insert_tasks_batch(project.id, ["Design", "Build"])
        db.session.expire_all()

        loaded = self.store.find_project(project.id)

        self.assertEqual([task.title for task in loaded.tasks], ["Design", "Build"])

    def test_update_only_touches_known_fields(self):
        (project,) = self.store.insert_projects_batch(["Site"])

        updated = self.store.update_project(project.id, {"name": "Renamed", "id": "other"})

        self.assertEqual(updated.name, "Renamed")
        self.assertEqual(updated.id, project.id)

    def test_update_unknown_ids(self):
        with self.assertRaises(NotFoundError):
            self.store.update_project("missing", {"name": "x"})
        with self.assertRaises(NotFoundError):
            self.store.update_task("missing", {"title": "x"})
        self.assertIsNone(self.store.find_task("missing"))

    def test_delete_project_removes_tasks(self):
        keep, drop = self.store.insert_projects_batch(["Keep", "Drop"])
        self.store.insert_tasks_batch(keep.id, ["stay"])
        self.store.insert_tasks_batch(drop.id, ["gone", "also gone"])
        drop_id = drop.id

        self.store.delete_project(drop_id)

        self.assertIsNone(db.session.get(Project, drop_id))
        self.assertEqual(db.session.query(Task).filter_by(project_id=drop_id).count(), 0)
        self.assertEqual(db.session.query(Task).count(), 1)

    def test_delete_task(self):
        (project,) = self.store.insert_projects_batch(["Site"])
        (task,) = self.store.insert_tasks_batch(project.id, ["Design"])
        task_id = task.id

        self.store.delete_task(task_id)

        self.assertIsNone(self.store.find_task(task_id))
        self.assertIsNotNone(self.store.find_project(project.id))

    def test_failed_cascade_rolls_back_both_steps(self):
        (project,) = self.store.insert_projects_batch(["Site"])
        self.store.insert_tasks_batch(project.id, ["Design"])
        project_id = project.id

        with patch.object(
            db.session,
            "commit",
            side_effect=OperationalError("DELETE", {}, Exception("locked")),
        ):
            with self.assertRaises(StoreFailure):
                self.store.delete_project(project_id)

        self.assertIsNotNone(db.session.get(Project, project_id))
        self.assertEqual(db.session.query(Task).count(), 1)

    def test_clear(self):
        (project,) = self.store.insert_projects_batch(["Site"])
        self.store.insert_tasks_batch(project.id, ["Design"])

        self.store.clear()

        self.assertEqual(self.store.find_projects(), [])
        self.assertEqual(db.session.query(Task).count(), 0)


if __name__ == "__main__":
    unittest.main()
