import os

from tests.utils.db import cleanup_test_database, provision_test_database

# The application binds its engine at import time, so the test database must
# be chosen before any test module imports ``app``.
_TEST_DB_NAME, _TEST_DB_URI, _MANAGED_TEST_DB = provision_test_database()
os.environ["DATABASE_URL"] = _TEST_DB_URI


def pytest_sessionfinish(session, exitstatus):
    if not _MANAGED_TEST_DB:
        return
    from app import db, app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()
    cleanup_test_database(_TEST_DB_NAME)
