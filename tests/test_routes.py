from datetime import date, timedelta

import pytest

from library_app.app import create_app
from library_app.errors import ConfigurationError, StoreError
from library_app.models.book import Book
from library_app.models.circulation import Circulation
from library_app.models.database import get_db
from library_app.models.user import User


def _book(app, book_id):
    with app.app_context():
        return Book.get_by_id(get_db(), book_id)


def test_create_app_requires_a_secret_key(tmp_path):
    with pytest.raises(ConfigurationError):
        create_app({"SECRET_KEY": None, "DATABASE_PATH": str(tmp_path / "x.db")})


# --- auth ---------------------------------------------------------------

def test_login_and_register_pages_render(client):
    assert client.get("/login").status_code == 200
    assert client.get("/register").status_code == 200


def test_catalog_requires_login(client):
    resp = client.get("/")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/login")


def test_register_flow(client):
    resp = client.post("/register", data={"username": "alice", "password": "pw"})
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/login")

    dup = client.post("/register", data={"username": "alice", "password": "other"})
    assert dup.status_code == 400
    assert dup.get_data(as_text=True) == "Username already exists"
    assert dup.mimetype == "text/plain"

    missing = client.post("/register", data={"username": "bob"})
    assert missing.status_code == 400


def test_login_flow(client):
    client.post("/register", data={"username": "alice", "password": "pw"})

    assert client.post("/login", data={"username": "alice"}).status_code == 400
    bad = client.post("/login", data={"username": "alice", "password": "nope"})
    assert bad.status_code == 401
    assert bad.get_data(as_text=True) == "Invalid username or password"

    ok = client.post("/login", data={"username": "alice", "password": "pw"})
    assert ok.status_code == 302
    assert ok.headers["Location"].endswith("/")

    page = client.get("/")
    assert page.status_code == 200
    assert "My Books" in page.get_data(as_text=True)


def test_logout_destroys_the_server_side_session(app, login):
    alice = login("alice")
    with app.app_context():
        assert get_db().query_one("SELECT COUNT(*) AS n FROM sessions")["n"] == 1

    resp = alice.post("/logout")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/login")
    assert alice.get("/").status_code == 302
    with app.app_context():
        assert get_db().query_one("SELECT COUNT(*) AS n FROM sessions")["n"] == 0

    # logging out twice is harmless
    assert alice.post("/logout").status_code == 302


def test_expired_session_redirects_to_login(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "DATABASE_PATH": str(tmp_path / "expiring.db"),
        "ADMIN_PASSWORD": "admin-pass",
        "RESET_DB_ON_START": True,
        "SCHEDULER_ENABLED": False,
        "SESSION_LIFETIME": timedelta(seconds=0),
    })
    client = app.test_client()
    client.post("/register", data={"username": "alice", "password": "pw"})
    client.post("/login", data={"username": "alice", "password": "pw"})

    resp = client.get("/")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/login")


def test_anonymous_request_is_sent_to_login_with_a_prompt(client):
    resp = client.get("/", follow_redirects=True)
    assert resp.request.path == "/login"
    assert "Please login to access this page" in resp.get_data(as_text=True)


def test_logging_in_again_revokes_the_previous_session(app, login):
    alice = login("alice")
    with app.app_context():
        first = get_db().query_one("SELECT token FROM sessions")["token"]

    resp = alice.post("/login", data={"username": "alice", "password": "secret123"})
    assert resp.status_code == 302
    with app.app_context():
        tokens = [row["token"] for row in get_db().query_all("SELECT token FROM sessions")]
    assert len(tokens) == 1
    assert first not in tokens
    assert alice.get("/").status_code == 200


# --- borrow / return ----------------------------------------------------

def test_member_borrows_and_returns(app, login):
    alice = login("alice")

    resp = alice.post("/borrow/1")
    assert resp.status_code == 302
    book = _book(app, 1)
    assert book.status == "Borrowed"
    assert book.due_date == date.today() + timedelta(days=30)

    assert alice.post("/borrow/1").status_code == 409

    assert alice.post("/return/1").status_code == 302
    assert _book(app, 1).is_available
    assert alice.post("/return/1").status_code == 409


def test_admin_borrow_is_always_forbidden(app, login):
    admin = login("admin")
    alice = login("alice")
    alice.post("/borrow/2")

    for book_id in (1, 2, 999):
        resp = admin.post(f"/borrow/{book_id}")
        assert resp.status_code == 403
        assert "Admins cannot borrow books" in resp.get_data(as_text=True)
    assert _book(app, 1).is_available


def test_return_permissions(app, login):
    alice, bob, admin = login("alice"), login("bob"), login("admin")
    alice.post("/borrow/3")

    assert bob.post("/return/3").status_code == 403
    assert _book(app, 3).is_borrowed

    assert admin.post("/return/3").status_code == 302
    assert _book(app, 3).is_available

    assert bob.post("/return/999").status_code == 404


def test_borrow_missing_book(login):
    assert login("alice").post("/borrow/999").status_code == 404


def test_store_errors_are_500_with_a_generic_message(login, monkeypatch):
    alice = login("alice")

    def broken(self, book_id, user):
        raise StoreError()

    monkeypatch.setattr(Circulation, "borrow", broken)
    resp = alice.post("/borrow/1")
    assert resp.status_code == 500
    assert resp.get_data(as_text=True) == "Internal storage error"


def test_catalog_shows_fines(app, login):
    alice = login("alice")
    with app.app_context():
        db = get_db()
        member = db.query_one("SELECT id, username, role FROM users WHERE username = 'alice'")
        Circulation(db, today=lambda: date.today() - timedelta(days=33)).borrow(4, User(**member))

    html = alice.get("/").get_data(as_text=True)
    assert "$15" in html


# --- admin --------------------------------------------------------------

@pytest.mark.parametrize("method, path", [
    ("get", "/admin"),
    ("get", "/admin/addbook"),
    ("post", "/admin/addbook"),
    ("get", "/admin/edit/1"),
    ("post", "/admin/edit/1"),
    ("post", "/admin/delete/1"),
])
def test_admin_routes_reject_members(login, client, method, path):
    member = login("alice")
    resp = getattr(member, method)(path, data={"title": "T", "author": "A"})
    assert resp.status_code == 403

    anonymous = getattr(client, method)(path)
    assert anonymous.status_code == 302
    assert anonymous.headers["Location"].endswith("/login")


def test_admin_dashboard(login):
    admin = login("admin")
    html = admin.get("/admin").get_data(as_text=True)
    assert "Admin Dashboard" in html
    assert "Books in catalog: 10" in html


def test_add_book(app, login):
    admin = login("admin")
    assert admin.get("/admin/addbook").status_code == 200
    assert admin.post("/admin/addbook", data={"title": "Emma"}).status_code == 400

    resp = admin.post("/admin/addbook", data={"title": "Emma", "author": "Jane Austen"})
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/admin")
    assert _book(app, 11).title == "Emma"
    assert "Emma" in admin.get("/").get_data(as_text=True)


def test_edit_book(app, login):
    admin = login("admin")
    assert admin.get("/admin/edit/999").status_code == 404
    assert admin.post("/admin/edit/999", data={"title": "T", "author": "A"}).status_code == 404
    assert admin.post("/admin/edit/1", data={"title": "", "author": "A"}).status_code == 400

    form = admin.get("/admin/edit/1")
    assert form.status_code == 200
    assert "1984" in form.get_data(as_text=True)

    resp = admin.post("/admin/edit/1", data={"title": "Nineteen Eighty-Four", "author": "George Orwell"})
    assert resp.status_code == 302
    assert _book(app, 1).title == "Nineteen Eighty-Four"


def test_delete_book(app, login):
    admin, alice = login("admin"), login("alice")
    alice.post("/borrow/5")

    assert admin.post("/admin/delete/999").status_code == 404
    assert admin.post("/admin/delete/5").status_code == 409
    assert _book(app, 5) is not None

    assert admin.post("/admin/delete/6").status_code == 302
    assert _book(app, 6) is None


# --- end to end ---------------------------------------------------------

def test_end_to_end_borrow_then_delete(app, login):
    alice, admin = login("alice"), login("admin")

    catalog = alice.get("/").get_data(as_text=True)
    assert catalog.count('id="book-') == 10

    alice.post("/borrow/1")
    due = (date.today() + timedelta(days=30)).strftime("%Y-%m-%d")
    catalog = alice.get("/").get_data(as_text=True)
    assert due in catalog
    row = catalog.split('id="book-1"')[1].split("</tr>")[0]
    assert "Borrowed" in row and "alice" in row

    assert admin.post("/admin/delete/2").status_code == 302
    catalog = alice.get("/").get_data(as_text=True)
    assert 'id="book-2"' not in catalog
    assert "Dune" not in catalog
    assert catalog.count('id="book-') == 9
