from bibliosys import create_app
from bibliosys.api import STORE_KEY
from bibliosys.catalog import list_books, list_members


def test_create_book(client):
    resp = client.post("/api/books", json={"title": "Dom Casmurro", "author": "Machado de Assis", "category": "Romance", "count": 3})
    assert resp.status_code == 201
    book = resp.get_json()
    assert book["id"] == 1
    assert book["count"] == 3
    assert book["available"] == 3
    assert book["category"] == "Romance"


def test_create_book_defaults_category(make_book):
    assert make_book()["category"] == "Não categorizado"


def test_create_book_missing_fields(client):
    resp = client.post("/api/books", json={"title": "X"})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Campos obrigatórios: title, author, count"}


def test_create_book_rejects_bad_count(client):
    for count in ("many", -1, 1.5, True):
        resp = client.post("/api/books", json={"title": "X", "author": "Y", "count": count})
        assert resp.status_code == 400, count


def test_create_book_without_body(client):
    resp = client.post("/api/books", data="not json")
    assert resp.status_code == 400


def test_list_books_sorted_by_title(client, make_book):
    make_book(title="b")
    make_book(title="A")
    make_book(title="c")
    titles = [b["title"] for b in client.get("/api/books").get_json()]
    assert titles == ["A", "b", "c"]


def test_create_member(client):
    resp = client.post("/api/members", json={"name": "Carlos", "contact": "(34) 88888-8888"})
    assert resp.status_code == 201
    member = resp.get_json()
    assert member["activeLoans"] == 0
    assert member["email"] == ""


def test_create_member_missing_contact(client):
    resp = client.post("/api/members", json={"name": "Carlos"})
    assert resp.status_code == 400
    assert "contact" in resp.get_json()["error"]


def test_list_members_sorted_by_name(client, make_member):
    make_member(name="Maria")
    make_member(name="ana")
    assert [m["name"] for m in client.get("/api/members").get_json()] == ["ana", "Maria"]


def test_seed_data_only_into_empty_store(tmp_path):
    config = {
        "TESTING": True,
        "DATABASE": str(tmp_path / "library.db"),
        "SEED_DATA": True,
        "SWEEPER_ENABLED": False,
    }
    app = create_app(config)
    store = app.extensions[STORE_KEY]
    assert len(list_books(store)) == 4
    assert len(list_members(store)) == 3

    # a second start over the same file must not duplicate the catalog
    app = create_app(config)
    assert len(list_books(app.extensions[STORE_KEY])) == 4


def test_health(client, app):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["storage"] == app.config["STORAGE_BACKEND"]
