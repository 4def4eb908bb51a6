from collections import Counter
from datetime import datetime
from typing import Optional

from .errors import ValidationError
from .models import Book, Loan, Member
from .notifications import TOLERANCE_DAYS, is_overdue, overdue_since

TOP = 10
SECONDS_PER_DAY = 24 * 60 * 60


def _most_borrowed(tx, **_):
    counts = Counter(loan.book_id for loan in tx.list(Loan))
    rows = [
        {"bookId": b.id, "title": b.title, "author": b.author, "loanCount": counts[b.id]}
        for b in tx.list(Book)
    ]
    # sorted() is stable: ties keep id order
    return {"data": sorted(rows, key=lambda r: r["loanCount"], reverse=True)[:TOP]}


def _active_members(tx, **_):
    counts = Counter(loan.member_id for loan in tx.list(Loan))
    rows = [
        {
            "memberId": m.id,
            "name": m.name,
            "contact": m.contact,
            "loanCount": counts[m.id],
            "activeLoans": m.active_loans,
        }
        for m in tx.list(Member)
    ]
    return {"data": sorted(rows, key=lambda r: r["loanCount"], reverse=True)[:TOP]}


def _overdue_summary(tx, now, tolerance_days):
    books = {b.id: b for b in tx.list(Book)}
    members = {m.id: m for m in tx.list(Member)}
    rows = []
    for loan in tx.list(Loan):
        if not is_overdue(loan, now, tolerance_days):
            continue
        late = now - overdue_since(loan, tolerance_days)
        book, member = books.get(loan.book_id), members.get(loan.member_id)
        rows.append(
            {
                "loanId": loan.id,
                "bookTitle": book.title if book else None,
                "memberName": member.name if member else None,
                "returnDate": loan.return_date,
                "daysOverdue": int(late.total_seconds() // SECONDS_PER_DAY),
            }
        )
    return {"data": rows, "totalOverdue": len(rows)}


def _collection_stats(tx, **_):
    books = tx.list(Book)
    total = sum(b.count for b in books)
    available = sum(b.available for b in books)
    loaned = total - available
    categories = Counter()
    for b in books:
        categories[b.category] += b.count
    return {
        "data": {
            "totalBooks": total,
            "availableBooks": available,
            "loanedBooks": loaned,
            "utilizationRate": round(loaned / total * 100, 1) if total > 0 else 0,
            "totalTitles": len(books),
            "categories": [{"name": name, "count": count} for name, count in categories.items()],
        }
    }


REPORTS = {
    "most-borrowed": ("Livros Mais Emprestados", _most_borrowed),
    "active-members": ("Leitores Mais Ativos", _active_members),
    "overdue-summary": ("Resumo de Atrasos", _overdue_summary),
    "collection-stats": ("Estatísticas do Acervo", _collection_stats),
}


def build_report(store, report_type: str, now: Optional[datetime] = None, tolerance_days: int = TOLERANCE_DAYS) -> dict:
    if report_type not in REPORTS:
        raise ValidationError("Tipo de relatório inválido")
    title, build = REPORTS[report_type]
    now = now or datetime.now()
    with store.atomic() as tx:
        body = build(tx, now=now, tolerance_days=tolerance_days)
    return {"type": report_type, "title": title, **body, "generatedAt": now.isoformat()}
