"""Loan and reservation workflows.

Each operation runs inside a single ``store.atomic()`` block: the book and
member counters, the loan row, the notifications it resolves and the
reservation it flips are committed together or not at all.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from .catalog import positive_int
from .errors import Conflict, NotFound, ValidationError
from .models import (
    LOAN_ACTIVE,
    LOAN_RETURNED,
    NOTIFICATION_PENDING,
    NOTIFICATION_RESOLVED,
    RESERVATION_ACTIVE,
    RESERVATION_CANCELLED,
    RESERVATION_NOTIFIED,
    Book,
    Loan,
    Member,
    Notification,
    Reservation,
    parse_timestamp,
    timestamp,
)

logger = logging.getLogger(__name__)

LOAN_DAYS = 14
MAX_ACTIVE_LOANS = 3


def _moment(value, field: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return parse_timestamp(str(value))
    except ValueError:
        raise ValidationError(f"Data inválida: {field}") from None


def _ids(book_id, member_id):
    if not book_id or not member_id:
        raise ValidationError("Campos obrigatórios: bookId, memberId")
    return positive_int(book_id, "bookId"), positive_int(member_id, "memberId")


def _load_parties(tx, book_id: int, member_id: int):
    book = tx.get(Book, book_id)
    member = tx.get(Member, member_id)
    if book is None or member is None:
        raise NotFound("Livro ou membro não encontrado")
    return book, member


def _view(record, book: Optional[Book], member: Optional[Member]) -> dict:
    data = record.to_dict()
    data["bookTitle"] = book.title if book else None
    data["memberName"] = member.name if member else None
    return data


def _views(tx, records, newest_by: str) -> list:
    books = {b.id: b for b in tx.list(Book)}
    members = {m.id: m for m in tx.list(Member)}
    ordered = sorted(records, key=lambda r: (getattr(r, newest_by), r.id), reverse=True)
    return [_view(r, books.get(r.book_id), members.get(r.member_id)) for r in ordered]


# ---- loans ----

def create_loan(
    store,
    book_id,
    member_id,
    loan_date=None,
    return_date=None,
    *,
    loan_days: int = LOAN_DAYS,
    max_active_loans: int = MAX_ACTIVE_LOANS,
    now: Optional[datetime] = None,
) -> dict:
    book_id, member_id = _ids(book_id, member_id)
    start = _moment(loan_date, "loanDate") or now or datetime.now()
    due = _moment(return_date, "returnDate") or start + timedelta(days=loan_days)

    with store.atomic() as tx:
        book, member = _load_parties(tx, book_id, member_id)
        if book.available <= 0:
            raise Conflict("Livro não disponível")
        if member.active_loans >= max_active_loans:
            raise Conflict("Limite de empréstimos atingido")

        loan = tx.add(
            Loan(
                id=None,
                book_id=book.id,
                member_id=member.id,
                loan_date=timestamp(start),
                return_date=timestamp(due),
                status=LOAN_ACTIVE,
            )
        )
        book.available -= 1
        member.active_loans += 1
        tx.save(book)
        tx.save(member)

    logger.info("loan #%s: book #%s -> member #%s, due %s", loan.id, book.id, member.id, loan.return_date)
    return _view(loan, book, member)


def return_loan(store, loan_id, *, now: Optional[datetime] = None) -> dict:
    loan_id = positive_int(loan_id, "id")
    stamp = timestamp(now)

    with store.atomic() as tx:
        loan = tx.get(Loan, loan_id)
        if loan is None:
            raise NotFound("Empréstimo não encontrado")
        if not loan.is_active:
            raise Conflict("Empréstimo já foi devolvido")

        loan.status = LOAN_RETURNED
        loan.returned_date = stamp
        tx.save(loan)

        book = tx.get(Book, loan.book_id)
        if book is not None:
            book.available += 1
            tx.save(book)
        member = tx.get(Member, loan.member_id)
        if member is not None:
            member.active_loans -= 1
            tx.save(member)

        for note in tx.list(Notification):
            if note.loan_id == loan.id and note.status == NOTIFICATION_PENDING:
                note.status = NOTIFICATION_RESOLVED
                note.resolved_at = stamp
                tx.save(note)

        waiting = next_reservation(tx, loan.book_id)
        if waiting is not None:
            waiting.status = RESERVATION_NOTIFIED
            tx.save(waiting)
            logger.info("reservation #%s notified: book #%s is back", waiting.id, loan.book_id)

    logger.info("loan #%s returned", loan.id)
    return _view(loan, book, member)


def list_loans(store) -> list:
    with store.atomic() as tx:
        return _views(tx, tx.list(Loan), "loan_date")


# ---- reservations ----

def next_reservation(tx, book_id: int) -> Optional[Reservation]:
    """Oldest Active reservation for ``book_id`` (first come, first served)."""
    queue = [
        r for r in tx.list(Reservation)
        if r.book_id == book_id and r.status == RESERVATION_ACTIVE
    ]
    if not queue:
        return None
    return min(queue, key=lambda r: (r.reservation_date, r.id))


def create_reservation(store, book_id, member_id, *, now: Optional[datetime] = None) -> dict:
    book_id, member_id = _ids(book_id, member_id)

    with store.atomic() as tx:
        book, member = _load_parties(tx, book_id, member_id)
        for r in tx.list(Reservation):
            if r.book_id == book.id and r.member_id == member.id and r.status == RESERVATION_ACTIVE:
                raise Conflict("Já existe uma reserva ativa para este livro")
        reservation = tx.add(
            Reservation(
                id=None,
                book_id=book.id,
                member_id=member.id,
                reservation_date=timestamp(now),
                status=RESERVATION_ACTIVE,
            )
        )

    return _view(reservation, book, member)


def cancel_reservation(store, reservation_id) -> dict:
    reservation_id = positive_int(reservation_id, "id")

    with store.atomic() as tx:
        reservation = tx.get(Reservation, reservation_id)
        if reservation is None:
            raise NotFound("Reserva não encontrada")
        if reservation.status != RESERVATION_ACTIVE:
            raise Conflict("Só é possível cancelar reservas ativas")
        reservation.status = RESERVATION_CANCELLED
        tx.save(reservation)
        book = tx.get(Book, reservation.book_id)
        member = tx.get(Member, reservation.member_id)

    return _view(reservation, book, member)


def list_reservations(store) -> list:
    with store.atomic() as tx:
        return _views(tx, tx.list(Reservation), "reservation_date")
