from __future__ import annotations

import logging

from supabase import Client, create_client

from .base import Row, StoreError, key_field
from .config import StoreConfig

logger = logging.getLogger(__name__)


class SupabaseStore:
    """Table store backed by a hosted Supabase (PostgREST) project."""

    def __init__(self, config: StoreConfig, client: Client | None = None) -> None:
        self._client = client or create_client(config.supabase_url, config.supabase_key)

    def get(self, table: str, key: str) -> Row | None:
        kf = key_field(table)
        try:
            result = self._client.table(table).select("*").eq(kf, key).limit(1).execute()
        except Exception as exc:
            logger.error("Supabase select on %s failed", table, exc_info=True)
            raise StoreError(f"Failed to fetch from {table}") from exc
        return result.data[0] if result.data else None

    def list(self, table: str) -> list[Row]:
        key_field(table)
        try:
            result = self._client.table(table).select("*").execute()
        except Exception as exc:
            logger.error("Supabase select on %s failed", table, exc_info=True)
            raise StoreError(f"Failed to fetch from {table}") from exc
        return list(result.data or [])

    def upsert(self, table: str, row: Row) -> Row:
        kf = key_field(table)
        if not row.get(kf):
            raise StoreError(f"Row for {table} is missing {kf}")
        try:
            result = self._client.table(table).upsert(row, on_conflict=kf).execute()
        except Exception as exc:
            logger.error("Supabase upsert on %s failed", table, exc_info=True)
            raise StoreError(f"Failed to write to {table}") from exc
        return result.data[0] if result.data else row

    def delete(self, table: str, key: str) -> bool:
        kf = key_field(table)
        try:
            result = self._client.table(table).delete().eq(kf, key).execute()
        except Exception as exc:
            logger.error("Supabase delete on %s failed", table, exc_info=True)
            raise StoreError(f"Failed to delete from {table}") from exc
        return bool(result.data)
