import pytest

from bibliosys import create_app
from bibliosys.api import STORE_KEY


@pytest.fixture(params=["sqlite", "json"])
def app(request, tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "STORAGE_BACKEND": request.param,
            "DATABASE": str(tmp_path / "library.db"),
            "DATA_FILE": str(tmp_path / "library.json"),
            "SEED_DATA": False,
            "SWEEPER_ENABLED": False,
        }
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def store(app):
    return app.extensions[STORE_KEY]


@pytest.fixture
def make_book(client):
    def _make(title="X", author="Y", count=1, **extra):
        resp = client.post("/api/books", json={"title": title, "author": author, "count": count, **extra})
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _make


@pytest.fixture
def make_member(client):
    def _make(name="Ana Silva", contact="(34) 99999-9999", **extra):
        resp = client.post("/api/members", json={"name": name, "contact": contact, **extra})
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _make


@pytest.fixture
def borrow(client):
    def _borrow(book_id, member_id, **extra):
        return client.post("/api/loans", json={"bookId": book_id, "memberId": member_id, **extra})

    return _borrow
