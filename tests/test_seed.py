import pytest

from library_app.errors import ConfigurationError
from library_app.models.circulation import Circulation
from library_app.models.user import Admin, User
from library_app.seed import SEED_BOOKS, bootstrap, seed_admin, seed_books


def _bootstrap(db, reset):
    bootstrap(db, reset=reset, seed=True, admin_username="admin", admin_password="boot-pass")


def test_bootstrap_seeds_admin_and_ten_books_in_order(db):
    _bootstrap(db, reset=True)

    rows = db.query_all("SELECT id, title, author, status FROM books ORDER BY id")
    assert [(r["title"], r["author"]) for r in rows] == list(SEED_BOOKS)
    assert [r["id"] for r in rows] == list(range(1, 11))
    assert {r["status"] for r in rows} == {"Available"}

    admin = User.authenticate(db, "admin", "boot-pass")
    assert isinstance(admin, Admin)
    assert admin.password != "boot-pass"


def test_bootstrap_without_reset_keeps_data(db):
    _bootstrap(db, reset=True)
    alice_id = User.register(db, "alice", "pw")
    alice = User.get_by_id(db, alice_id)
    Circulation(db).borrow(1, alice)

    _bootstrap(db, reset=False)

    assert db.query_one("SELECT COUNT(*) AS n FROM books")["n"] == 10
    assert db.query_one("SELECT COUNT(*) AS n FROM users WHERE role = 'admin'")["n"] == 1
    assert db.query_one("SELECT * FROM books WHERE id = 1")["borrowed_by_user_id"] == alice_id


def test_bootstrap_with_reset_drops_everything(db):
    _bootstrap(db, reset=True)
    User.register(db, "alice", "pw")
    db.execute("DELETE FROM books WHERE id = ?", (1,))

    _bootstrap(db, reset=True)

    assert User.get_by_username(db, "alice") is None
    assert db.query_one("SELECT MIN(id) AS first FROM books")["first"] == 1
    assert db.query_one("SELECT COUNT(*) AS n FROM books")["n"] == 10


def test_seed_books_only_fills_an_empty_catalog(db):
    assert seed_books(db) == 10
    assert seed_books(db) == 0
    assert db.query_one("SELECT COUNT(*) AS n FROM books")["n"] == 10


def test_admin_password_must_be_supplied(db):
    with pytest.raises(ConfigurationError):
        seed_admin(db, "admin", None)
    with pytest.raises(ConfigurationError):
        seed_admin(db, "admin", "")


def test_existing_admin_needs_no_password(db):
    seed_admin(db, "admin", "first")
    assert seed_admin(db, "admin", None) is None
