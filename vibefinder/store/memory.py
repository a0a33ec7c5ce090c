from __future__ import annotations

import copy
import threading

from .base import Row, StoreError, TABLE_KEYS, key_field


class InMemoryStore:
    """Dict-backed table store. Rows go in and come out as copies."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, Row]] = {name: {} for name in TABLE_KEYS}
        self._lock = threading.Lock()

    def get(self, table: str, key: str) -> Row | None:
        key_field(table)
        with self._lock:
            row = self._tables[table].get(key)
            return copy.deepcopy(row) if row is not None else None

    def list(self, table: str) -> list[Row]:
        key_field(table)
        with self._lock:
            return [copy.deepcopy(r) for r in self._tables[table].values()]

    def upsert(self, table: str, row: Row) -> Row:
        kf = key_field(table)
        key = row.get(kf)
        if not key:
            raise StoreError(f"Row for {table} is missing {kf}")
        with self._lock:
            merged = {**self._tables[table].get(key, {}), **copy.deepcopy(row)}
            self._tables[table][key] = merged
            return copy.deepcopy(merged)

    def delete(self, table: str, key: str) -> bool:
        key_field(table)
        with self._lock:
            return self._tables[table].pop(key, None) is not None
