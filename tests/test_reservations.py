def reserve(client, book_id, member_id):
    return client.post("/api/reservations", json={"bookId": book_id, "memberId": member_id})


def test_create_reservation(client, make_book, make_member):
    book, member = make_book(title="1984"), make_member()
    resp = reserve(client, book["id"], member["id"])
    assert resp.status_code == 201
    reservation = resp.get_json()
    assert reservation["status"] == "Active"
    assert reservation["bookTitle"] == "1984"
    assert reservation["memberName"] == "Ana Silva"
    # an available book can still be reserved
    assert client.get("/api/books").get_json()[0]["available"] == 1


def test_duplicate_active_reservation_rejected(client, make_book, make_member):
    book, member = make_book(), make_member()
    assert reserve(client, book["id"], member["id"]).status_code == 201
    resp = reserve(client, book["id"], member["id"])
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Já existe uma reserva ativa para este livro"}
    assert len(client.get("/api/reservations").get_json()) == 1


def test_reserve_again_after_cancel(client, make_book, make_member):
    book, member = make_book(), make_member()
    first = reserve(client, book["id"], member["id"]).get_json()
    client.put(f"/api/reservations/{first['id']}/cancel")
    assert reserve(client, book["id"], member["id"]).status_code == 201


def test_reservation_unknown_ids(client, make_book):
    book = make_book()
    resp = reserve(client, book["id"], 7)
    assert resp.status_code == 404


def test_reservation_requires_ids(client):
    resp = client.post("/api/reservations", json={"memberId": 1})
    assert resp.status_code == 400


def test_cancel_reservation(client, make_book, make_member):
    book, member = make_book(), make_member()
    reservation = reserve(client, book["id"], member["id"]).get_json()

    resp = client.put(f"/api/reservations/{reservation['id']}/cancel")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "Cancelled"

    resp = client.put(f"/api/reservations/{reservation['id']}/cancel")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Só é possível cancelar reservas ativas"}


def test_cancel_unknown_reservation(client):
    resp = client.put("/api/reservations/5/cancel")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Reserva não encontrada"}
