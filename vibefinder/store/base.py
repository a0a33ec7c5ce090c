from __future__ import annotations

from typing import Any, Protocol

Row = dict[str, Any]

TABLE_KEYS: dict[str, str] = {
    "recommendations": "recommendation_id",
    "venues": "venue_id",
    "users": "user_id",
}


class StoreError(Exception):
    """Raised when the backing store cannot complete an operation."""


class TableStore(Protocol):
    def get(self, table: str, key: str) -> Row | None: ...

    def list(self, table: str) -> list[Row]: ...

    def upsert(self, table: str, row: Row) -> Row: ...

    def delete(self, table: str, key: str) -> bool: ...


def key_field(table: str) -> str:
    try:
        return TABLE_KEYS[table]
    except KeyError:
        raise StoreError(f"Unknown table: {table}") from None
