"""Records kept by the library.

Each record is a plain dataclass whose field names match the storage
columns (SQLite) and document keys (JSON file).  ``to_dict`` renders the
camelCase shape the HTTP API returns.  Timestamps are ISO-8601 strings.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import ClassVar, Optional

DEFAULT_CATEGORY = "Não categorizado"

LOAN_ACTIVE = "Active"
LOAN_RETURNED = "Devolvido"

RESERVATION_ACTIVE = "Active"
RESERVATION_CANCELLED = "Cancelled"
RESERVATION_NOTIFIED = "Notificada"

NOTIFICATION_OVERDUE = "overdue"
NOTIFICATION_PENDING = "pending"
NOTIFICATION_READ = "read"
NOTIFICATION_RESOLVED = "resolved"


def timestamp(when: Optional[datetime] = None) -> str:
    return (when or datetime.now()).replace(microsecond=0).isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse ``YYYY-MM-DD`` or a full ISO datetime, with or without offset."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is not None:
        # everything is stored as naive local time
        moment = moment.astimezone().replace(tzinfo=None)
    return moment


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class Record:
    table: ClassVar[str]
    id: Optional[int]

    @classmethod
    def columns(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_row(cls, row) -> "Record":
        return cls(**{name: row[name] for name in cls.columns()})

    def to_row(self) -> dict:
        return asdict(self)

    def to_dict(self) -> dict:
        return {_camel(k): v for k, v in asdict(self).items()}


@dataclass
class Book(Record):
    table: ClassVar[str] = "books"

    id: Optional[int]
    title: str
    author: str
    category: str = DEFAULT_CATEGORY
    count: int = 1
    available: int = 1
    created_at: Optional[str] = None


@dataclass
class Member(Record):
    table: ClassVar[str] = "members"

    id: Optional[int]
    name: str
    contact: str
    email: str = ""
    active_loans: int = 0
    register_date: Optional[str] = None


@dataclass
class Loan(Record):
    table: ClassVar[str] = "loans"

    id: Optional[int]
    book_id: int
    member_id: int
    loan_date: str
    return_date: str
    returned_date: Optional[str] = None
    status: str = LOAN_ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == LOAN_ACTIVE


@dataclass
class Reservation(Record):
    table: ClassVar[str] = "reservations"

    id: Optional[int]
    book_id: int
    member_id: int
    reservation_date: str
    status: str = RESERVATION_ACTIVE


@dataclass
class Notification(Record):
    table: ClassVar[str] = "notifications"

    id: Optional[int]
    type: str
    loan_id: Optional[int]
    member_id: Optional[int]
    message: str
    status: str = NOTIFICATION_PENDING
    created_at: Optional[str] = None
    read_at: Optional[str] = None
    resolved_at: Optional[str] = None


MODELS = (Book, Member, Loan, Reservation, Notification)
