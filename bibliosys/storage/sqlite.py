import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from .base import Store, Transaction, seed_initial_data

logger = logging.getLogger(__name__)

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS books(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        author TEXT NOT NULL,
        category TEXT,
        count INTEGER NOT NULL DEFAULT 1,
        available INTEGER NOT NULL DEFAULT 1,
        created_at TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_books_title ON books(title)",
    "CREATE INDEX IF NOT EXISTS idx_books_author ON books(author)",
    """
    CREATE TABLE IF NOT EXISTS members(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        contact TEXT NOT NULL,
        email TEXT,
        active_loans INTEGER NOT NULL DEFAULT 0,
        register_date TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_members_email ON members(email)",
    """
    CREATE TABLE IF NOT EXISTS loans(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        book_id INTEGER NOT NULL,
        member_id INTEGER NOT NULL,
        loan_date TEXT NOT NULL,
        return_date TEXT NOT NULL,
        returned_date TEXT,
        status TEXT NOT NULL DEFAULT 'Active',
        FOREIGN KEY(book_id) REFERENCES books(id) ON DELETE CASCADE,
        FOREIGN KEY(member_id) REFERENCES members(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_loans_status ON loans(status)",
    """
    CREATE TABLE IF NOT EXISTS reservations(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        book_id INTEGER NOT NULL,
        member_id INTEGER NOT NULL,
        reservation_date TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'Active',
        FOREIGN KEY(book_id) REFERENCES books(id) ON DELETE CASCADE,
        FOREIGN KEY(member_id) REFERENCES members(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_reservations_status ON reservations(status)",
    """
    CREATE TABLE IF NOT EXISTS notifications(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        type TEXT NOT NULL,
        loan_id INTEGER,
        member_id INTEGER,
        message TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        created_at TEXT,
        read_at TEXT,
        resolved_at TEXT,
        FOREIGN KEY(loan_id) REFERENCES loans(id) ON DELETE CASCADE,
        FOREIGN KEY(member_id) REFERENCES members(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_notifications_status ON notifications(status)",
)


class SQLiteTransaction(Transaction):
    def __init__(self, db: sqlite3.Connection):
        self.db = db

    def get(self, model, record_id):
        row = self.db.execute(
            f"SELECT * FROM {model.table} WHERE id=?", (record_id,)
        ).fetchone()
        return model.from_row(row) if row else None

    def list(self, model):
        rows = self.db.execute(f"SELECT * FROM {model.table} ORDER BY id").fetchall()
        return [model.from_row(r) for r in rows]

    def add(self, record):
        row = record.to_row()
        row.pop("id")
        cols = ", ".join(row)
        marks = ", ".join("?" for _ in row)
        cur = self.db.execute(
            f"INSERT INTO {record.table}({cols}) VALUES ({marks})", tuple(row.values())
        )
        record.id = cur.lastrowid
        return record

    def save(self, record):
        row = record.to_row()
        record_id = row.pop("id")
        assignments = ", ".join(f"{col}=?" for col in row)
        self.db.execute(
            f"UPDATE {record.table} SET {assignments} WHERE id=?",
            (*row.values(), record_id),
        )


class SQLiteStore(Store):
    """Relational backend; one connection and one transaction per ``atomic()``."""

    name = "sqlite"

    def __init__(self, path):
        self.path = str(path)

    def connect(self) -> sqlite3.Connection:
        # autocommit mode: transactions are opened explicitly below
        db = sqlite3.connect(self.path, timeout=30, isolation_level=None)
        db.row_factory = sqlite3.Row
        db.execute("PRAGMA foreign_keys = ON")
        return db

    @contextmanager
    def atomic(self):
        db = self.connect()
        try:
            # take the write lock up front so concurrent workflows serialize
            db.execute("BEGIN IMMEDIATE")
            try:
                yield SQLiteTransaction(db)
            except BaseException:
                db.execute("ROLLBACK")
                raise
            db.execute("COMMIT")
        finally:
            db.close()

    def initialize(self, seed=False):
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        with self.atomic() as tx:
            for statement in SCHEMA:
                tx.db.execute(statement)
            if seed and seed_initial_data(tx):
                logger.info("seeded initial catalog into %s", self.path)
