import logging
import threading
from datetime import datetime, timedelta
from typing import Optional

from .catalog import positive_int
from .errors import Conflict, NotFound
from .models import (
    NOTIFICATION_OVERDUE,
    NOTIFICATION_PENDING,
    NOTIFICATION_READ,
    NOTIFICATION_RESOLVED,
    Book,
    Loan,
    Notification,
    parse_timestamp,
    timestamp,
)

logger = logging.getLogger(__name__)

TOLERANCE_DAYS = 2


def overdue_since(loan: Loan, tolerance_days: int = TOLERANCE_DAYS) -> datetime:
    """Moment after which ``loan`` counts as overdue."""
    return parse_timestamp(loan.return_date) + timedelta(days=tolerance_days)


def is_overdue(loan: Loan, now: datetime, tolerance_days: int = TOLERANCE_DAYS) -> bool:
    return loan.is_active and now > overdue_since(loan, tolerance_days)


def overdue_message(book: Optional[Book], loan: Loan) -> str:
    title = book.title if book else f"#{loan.book_id}"
    due = parse_timestamp(loan.return_date).strftime("%d/%m/%Y")
    return f'Empréstimo em atraso: "{title}" deveria ter sido devolvido em {due}'


def sweep_overdue(store, now: Optional[datetime] = None, tolerance_days: int = TOLERANCE_DAYS) -> list:
    """Add one pending overdue notification per overdue loan that has none."""
    now = now or datetime.now()
    created = []
    with store.atomic() as tx:
        flagged = {
            n.loan_id
            for n in tx.list(Notification)
            if n.type == NOTIFICATION_OVERDUE and n.status == NOTIFICATION_PENDING
        }
        for loan in tx.list(Loan):
            if loan.id in flagged or not is_overdue(loan, now, tolerance_days):
                continue
            note = Notification(
                id=None,
                type=NOTIFICATION_OVERDUE,
                loan_id=loan.id,
                member_id=loan.member_id,
                message=overdue_message(tx.get(Book, loan.book_id), loan),
                status=NOTIFICATION_PENDING,
                created_at=timestamp(now),
            )
            created.append(tx.add(note))
            flagged.add(loan.id)
    if created:
        logger.info("overdue sweep: %d new notification(s)", len(created))
    return created


def list_notifications(store) -> list:
    with store.atomic() as tx:
        notes = tx.list(Notification)
    return sorted(notes, key=lambda n: (n.created_at or "", n.id), reverse=True)


def mark_notification_read(store, notification_id, *, now: Optional[datetime] = None) -> Notification:
    notification_id = positive_int(notification_id, "id")
    with store.atomic() as tx:
        note = tx.get(Notification, notification_id)
        if note is None:
            raise NotFound("Notificação não encontrada")
        if note.status == NOTIFICATION_RESOLVED:
            raise Conflict("Notificação já foi resolvida")
        if note.status == NOTIFICATION_PENDING:
            note.status = NOTIFICATION_READ
            note.read_at = timestamp(now)
            tx.save(note)
    return note


class OverdueSweeper:
    """Runs :func:`sweep_overdue` once at start, then every ``interval`` seconds."""

    def __init__(self, store, interval: float, tolerance_days: int = TOLERANCE_DAYS):
        self.store = store
        self.interval = interval
        self.tolerance_days = tolerance_days
        self._stop = threading.Event()
        self._start_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> int:
        try:
            return len(sweep_overdue(self.store, tolerance_days=self.tolerance_days))
        except Exception:
            # keep the timer alive; the next tick retries
            logger.exception("overdue sweep failed")
            return 0

    def _loop(self):
        self.run_once()
        while not self._stop.wait(self.interval):
            self.run_once()

    def start(self) -> bool:
        """Start the timer thread; False if it is already running."""
        with self._start_lock:
            if self.running:
                return False
            self._stop.clear()
            self._thread = threading.Thread(target=self._loop, name="overdue-sweeper", daemon=True)
            self._thread.start()
        logger.info("overdue sweeper started (every %ss)", self.interval)
        return True

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
