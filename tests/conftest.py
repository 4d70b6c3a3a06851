# tests/conftest.py
from datetime import date

import pytest

from library_app.app import create_app
from library_app.models.circulation import Circulation
from library_app.models.database import Database, create_schema
from library_app.models.user import ADMIN, User

ADMIN_PASSWORD = "admin-test-pass"
TODAY = date(2026, 3, 1)


@pytest.fixture()
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "DATABASE_PATH": str(tmp_path / "library.db"),
        "ADMIN_USERNAME": "admin",
        "ADMIN_PASSWORD": ADMIN_PASSWORD,
        "RESET_DB_ON_START": True,
        "SEED_ON_START": True,
        "SCHEDULER_ENABLED": False,
    })
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def login(app):
    """Return a fresh test client logged in as ``username``.

    Unknown members are registered first.
    """
    def _login(username, password="secret123"):
        c = app.test_client()
        if username == "admin":
            password = ADMIN_PASSWORD
        else:
            c.post("/register", data={"username": username, "password": password})
        resp = c.post("/login", data={"username": username, "password": password})
        assert resp.status_code == 302
        return c
    return _login


@pytest.fixture()
def db(tmp_path):
    """Standalone database for model-level tests (no Flask app)."""
    database = Database(str(tmp_path / "models.db"))
    create_schema(database)
    yield database
    database.close()


@pytest.fixture()
def admin(db):
    user_id = User.register(db, "admin", "admin-pass", role=ADMIN)
    return User.get_by_id(db, user_id)


@pytest.fixture()
def alice(db):
    return User.get_by_id(db, User.register(db, "alice", "alice-pass"))


@pytest.fixture()
def bob(db):
    return User.get_by_id(db, User.register(db, "bob", "bob-pass"))


@pytest.fixture()
def today():
    """Fixed calendar day the model tests run on."""
    return TODAY


@pytest.fixture()
def clock(today):
    """Mutable "today" for Circulation, starting at ``today``."""
    class Clock:
        def __init__(self, start):
            self.today = start

        def __call__(self):
            return self.today
    return Clock(today)


@pytest.fixture()
def circulation(db, clock):
    return Circulation(db, loan_period_days=30, fine_per_day=5, today=clock)
