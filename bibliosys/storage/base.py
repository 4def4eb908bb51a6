"""Storage interface shared by the SQLite and JSON-file backends.

Workflows never talk to a backend directly: they open ``store.atomic()``
and use the returned :class:`Transaction`.  Everything written inside the
``with`` block is committed together when the block exits normally and
discarded when it raises.
"""

from __future__ import annotations

import abc
from contextlib import AbstractContextManager
from typing import Optional, Type, TypeVar

from ..models import Book, Member, Record, timestamp

R = TypeVar("R", bound=Record)


class Transaction(abc.ABC):
    @abc.abstractmethod
    def get(self, model: Type[R], record_id: int) -> Optional[R]:
        ...

    @abc.abstractmethod
    def list(self, model: Type[R]) -> list[R]:
        """All records of ``model`` in id order."""

    @abc.abstractmethod
    def add(self, record: R) -> R:
        """Insert ``record`` and set its id."""

    @abc.abstractmethod
    def save(self, record: Record) -> None:
        """Overwrite the stored copy of an existing record."""


class Store(abc.ABC):
    name = "store"

    @abc.abstractmethod
    def atomic(self) -> AbstractContextManager[Transaction]:
        ...

    @abc.abstractmethod
    def initialize(self, seed: bool = False) -> None:
        """Prepare the backing storage; seed demo data into an empty store."""


def seed_initial_data(tx: Transaction) -> bool:
    if tx.list(Book):
        return False
    now = timestamp()
    for title, author, category, count in (
        ("Dom Casmurro", "Machado de Assis", "Literatura Brasileira", 3),
        ("O Pequeno Príncipe", "Antoine de Saint-Exupéry", "Literatura Infantil", 2),
        ("1984", "George Orwell", "Ficção Científica", 2),
        ("O Senhor dos Anéis", "J.R.R. Tolkien", "Fantasia", 3),
    ):
        tx.add(Book(None, title, author, category, count, count, now))
    for name, contact, email in (
        ("Ana Silva", "(34) 99999-9999", "ana@email.com"),
        ("Carlos Santos", "(34) 88888-8888", "carlos@email.com"),
        ("Maria Oliveira", "(34) 77777-7777", "maria@email.com"),
    ):
        tx.add(Member(None, name, contact, email, 0, now))
    return True
