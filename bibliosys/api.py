from flask import Blueprint, current_app, jsonify, request

from . import catalog, circulation, notifications, reports

STORE_KEY = "bibliosys.store"

bp = Blueprint("api", __name__)


def get_store():
    return current_app.extensions[STORE_KEY]


def get_payload() -> dict:
    payload = request.get_json(force=True, silent=True)
    return payload if isinstance(payload, dict) else {}


def setting(name):
    return current_app.config[name]


@bp.get("/health")
def health():
    return {"status": "ok", "storage": get_store().name}, 200


# ---- books / members ----
@bp.get("/api/books")
def list_books():
    return jsonify([b.to_dict() for b in catalog.list_books(get_store())]), 200


@bp.post("/api/books")
def create_book():
    data = get_payload()
    book = catalog.create_book(
        get_store(), data.get("title"), data.get("author"), data.get("count"), data.get("category")
    )
    return jsonify(book.to_dict()), 201


@bp.get("/api/members")
def list_members():
    return jsonify([m.to_dict() for m in catalog.list_members(get_store())]), 200


@bp.post("/api/members")
def create_member():
    data = get_payload()
    member = catalog.create_member(get_store(), data.get("name"), data.get("contact"), data.get("email"))
    return jsonify(member.to_dict()), 201


# ---- loans ----
@bp.get("/api/loans")
def list_loans():
    return jsonify(circulation.list_loans(get_store())), 200


@bp.post("/api/loans")
def create_loan():
    data = get_payload()
    loan = circulation.create_loan(
        get_store(),
        data.get("bookId"),
        data.get("memberId"),
        data.get("loanDate"),
        data.get("returnDate"),
        loan_days=setting("LOAN_DAYS"),
        max_active_loans=setting("MAX_ACTIVE_LOANS"),
    )
    return jsonify(loan), 201


@bp.put("/api/loans/<int:loan_id>/return")
def return_loan(loan_id: int):
    return jsonify(circulation.return_loan(get_store(), loan_id)), 200


# ---- reservations ----
@bp.get("/api/reservations")
def list_reservations():
    return jsonify(circulation.list_reservations(get_store())), 200


@bp.post("/api/reservations")
def create_reservation():
    data = get_payload()
    reservation = circulation.create_reservation(get_store(), data.get("bookId"), data.get("memberId"))
    return jsonify(reservation), 201


@bp.put("/api/reservations/<int:reservation_id>/cancel")
def cancel_reservation(reservation_id: int):
    return jsonify(circulation.cancel_reservation(get_store(), reservation_id)), 200


# ---- notifications ----
@bp.get("/api/notifications")
def list_notifications():
    return jsonify([n.to_dict() for n in notifications.list_notifications(get_store())]), 200


@bp.put("/api/notifications/<int:notification_id>/read")
def mark_notification_read(notification_id: int):
    note = notifications.mark_notification_read(get_store(), notification_id)
    return jsonify(note.to_dict()), 200


# ---- reports ----
@bp.get("/api/reports/<report_type>")
def get_report(report_type: str):
    report = reports.build_report(get_store(), report_type, tolerance_days=setting("TOLERANCE_DAYS"))
    return jsonify(report), 200
