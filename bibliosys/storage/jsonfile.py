"""Flat-file backend: the whole library lives in one JSON document.

Layout::

    {"books": [...], "members": [...], "loans": [...],
     "reservations": [...], "notifications": [...],
     "nextId": {"books": 1, "members": 1, ...}}

Every ``atomic()`` block reloads the document, works on that snapshot and
rewrites the file in one piece (temp file + ``os.replace``).  Blocks on
the same file are serialized by a per-path lock, so two requests can no
longer read the same snapshot and clobber each other's counters.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path

from ..models import MODELS
from .base import Store, Transaction, seed_initial_data

logger = logging.getLogger(__name__)

_locks: dict[str, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = str(path.resolve())
    with _locks_guard:
        return _locks.setdefault(key, threading.RLock())


def empty_document() -> dict:
    doc: dict = {model.table: [] for model in MODELS}
    doc["nextId"] = {model.table: 1 for model in MODELS}
    return doc


class JsonTransaction(Transaction):
    def __init__(self, doc: dict):
        self.doc = doc
        self.dirty = False

    def _rows(self, table: str) -> list:
        return self.doc.setdefault(table, [])

    def get(self, model, record_id):
        for row in self._rows(model.table):
            if row["id"] == record_id:
                return model.from_row(row)
        return None

    def list(self, model):
        rows = sorted(self._rows(model.table), key=lambda r: r["id"])
        return [model.from_row(r) for r in rows]

    def add(self, record):
        counters = self.doc.setdefault("nextId", {})
        record.id = counters.get(record.table, 1)
        counters[record.table] = record.id + 1
        self._rows(record.table).append(record.to_row())
        self.dirty = True
        return record

    def save(self, record):
        rows = self._rows(record.table)
        for i, row in enumerate(rows):
            if row["id"] == record.id:
                rows[i] = record.to_row()
                self.dirty = True
                return
        raise KeyError(f"{record.table} #{record.id} is not stored")


class JsonFileStore(Store):
    name = "json"

    def __init__(self, path):
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    def load(self) -> dict:
        if not self.path.exists():
            return empty_document()
        with open(self.path, "r", encoding="utf-8") as f:
            doc = json.load(f)
        base = empty_document()
        base["nextId"].update(doc.get("nextId", {}))
        doc["nextId"] = base["nextId"]
        for model in MODELS:
            doc.setdefault(model.table, [])
        return doc

    def dump(self, doc: dict) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(doc, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)

    @contextmanager
    def atomic(self):
        with self._lock:
            tx = JsonTransaction(self.load())
            yield tx
            if tx.dirty or not self.path.exists():
                self.dump(tx.doc)

    def initialize(self, seed=False):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.atomic() as tx:
            if seed and seed_initial_data(tx):
                logger.info("seeded initial catalog into %s", self.path)
