"""Record store contract and an in-process implementation.

Records are plain dicts keyed by the snake_case column names of the
``deliveries``, ``tracking_updates`` and ``customers`` tables. Only
single-record atomicity is assumed; there are no multi-record transactions.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Mapping, Optional, Protocol

from ..errors import DuplicateRecord

DELIVERIES = "deliveries"
TRACKING_UPDATES = "tracking_updates"
CUSTOMERS = "customers"

UNIQUE_COLUMNS: dict[str, tuple[str, ...]] = {
    DELIVERIES: ("tracking_code",),
}


class RecordStore(Protocol):
    def get(self, kind: str, record_id: str) -> Optional[dict]: ...

    def query(
        self,
        kind: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict]: ...

    def insert(self, kind: str, record: dict) -> dict: ...

    def update(self, kind: str, record_id: str, patch: Mapping[str, Any]) -> Optional[dict]: ...


class InMemoryRecordStore:
    """Thread-safe dict-backed store used for development and tests."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, dict]] = {}
        self._lock = threading.Lock()

    def _table(self, kind: str) -> dict[str, dict]:
        return self._tables.setdefault(kind, {})

    def get(self, kind: str, record_id: str) -> Optional[dict]:
        with self._lock:
            record = self._table(kind).get(str(record_id))
            return copy.deepcopy(record) if record is not None else None

    def query(
        self,
        kind: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict]:
        with self._lock:
            rows = [
                copy.deepcopy(record)
                for record in self._table(kind).values()
                if all(record.get(column) == value for column, value in (filters or {}).items())
            ]
        if order_by:
            # Insertion order breaks ties, so equal timestamps keep append order.
            rows.sort(key=lambda row: (row.get(order_by) is None, row.get(order_by) or ""), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def insert(self, kind: str, record: dict) -> dict:
        if "id" not in record:
            raise ValueError("Records must carry an 'id' before insertion.")
        with self._lock:
            table = self._table(kind)
            key = str(record["id"])
            if key in table:
                raise DuplicateRecord(kind, "id")
            for column in UNIQUE_COLUMNS.get(kind, ()):
                value = record.get(column)
                if value is not None and any(existing.get(column) == value for existing in table.values()):
                    raise DuplicateRecord(kind, column)
            table[key] = copy.deepcopy(record)
            return copy.deepcopy(table[key])

    def update(self, kind: str, record_id: str, patch: Mapping[str, Any]) -> Optional[dict]:
        with self._lock:
            table = self._table(kind)
            record = table.get(str(record_id))
            if record is None:
                return None
            record.update(copy.deepcopy(dict(patch)))
            return copy.deepcopy(record)

    def count(self, kind: str) -> int:
        with self._lock:
            return len(self._table(kind))
