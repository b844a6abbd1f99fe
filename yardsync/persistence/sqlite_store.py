"""SQLite EntityStore: one JSON document per (collection, id) row."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiosqlite

from yardsync.errors import RecordRejectedError, StoreError
from yardsync.models.context import utc_now
from yardsync.persistence.query import apply_query
from yardsync.protocols.store import QueryFilter


def _decode(collection: str, raw: str) -> dict[str, Any]:
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise StoreError(f"corrupt {collection} row: {exc}") from exc


class SQLiteEntityStore:
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        try:
            async with aiosqlite.connect(self.db_path) as db:
                yield db
        except sqlite3.Error as exc:
            raise StoreError(f"entity store {self.db_path} unavailable: {exc}") from exc

    async def get_all(self, collection: str) -> list[dict[str, Any]]:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT data FROM entities WHERE collection = ? ORDER BY seq",
                (collection,),
            )
            rows = await cursor.fetchall()
        return [_decode(collection, row[0]) for row in rows]

    async def get_by_id(self, collection: str, record_id: str) -> dict[str, Any] | None:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT data FROM entities WHERE collection = ? AND id = ?",
                (collection, record_id),
            )
            row = await cursor.fetchone()
        return _decode(collection, row[0]) if row is not None else None

    async def save(self, collection: str, record: dict[str, Any]) -> None:
        record_id = record.get("id")
        if not isinstance(record_id, str) or not record_id:
            raise RecordRejectedError(collection, None, "record has no string id")
        try:
            data = json.dumps(record, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            reason = f"not JSON-serializable: {exc}"
            raise RecordRejectedError(collection, record_id, reason) from exc

        async with self._connect() as db:
            # Upsert keeps ``seq`` so updated records hold their original position.
            await db.execute(
                """INSERT INTO entities (collection, id, data, updated_at)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT (collection, id)
                   DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at""",
                (collection, record_id, data, utc_now().isoformat()),
            )
            await db.commit()

    async def delete(self, collection: str, record_id: str) -> None:
        async with self._connect() as db:
            await db.execute(
                "DELETE FROM entities WHERE collection = ? AND id = ?",
                (collection, record_id),
            )
            await db.commit()

    async def query(self, collection: str, query: QueryFilter) -> list[dict[str, Any]]:
        return apply_query(await self.get_all(collection), query)

    async def count(self, collection: str, query: QueryFilter | None = None) -> int:
        if query is not None:
            return len(await self.query(collection, query))
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT COUNT(*) FROM entities WHERE collection = ?",
                (collection,),
            )
            row = await cursor.fetchone()
        return int(row[0]) if row else 0


__all__ = ["SQLiteEntityStore"]
