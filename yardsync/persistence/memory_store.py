"""Dict-backed EntityStore used for tests, dry runs and scratch imports."""

from __future__ import annotations

import copy
from typing import Any

from yardsync.errors import RecordRejectedError
from yardsync.persistence.query import apply_query
from yardsync.protocols.store import QueryFilter


class InMemoryEntityStore:
    """Insertion-ordered collections; records are copied on the way in and out."""

    def __init__(self, seed: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        for collection, records in (seed or {}).items():
            for record in records:
                self._put(collection, record)

    def _put(self, collection: str, record: dict[str, Any]) -> None:
        record_id = record.get("id")
        if not isinstance(record_id, str) or not record_id:
            raise RecordRejectedError(collection, None, "record has no string id")
        self._collections.setdefault(collection, {})[record_id] = copy.deepcopy(record)

    async def get_all(self, collection: str) -> list[dict[str, Any]]:
        return [copy.deepcopy(r) for r in self._collections.get(collection, {}).values()]

    async def get_by_id(self, collection: str, record_id: str) -> dict[str, Any] | None:
        record = self._collections.get(collection, {}).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def save(self, collection: str, record: dict[str, Any]) -> None:
        self._put(collection, record)

    async def delete(self, collection: str, record_id: str) -> None:
        self._collections.get(collection, {}).pop(record_id, None)

    async def query(self, collection: str, query: QueryFilter) -> list[dict[str, Any]]:
        return apply_query(await self.get_all(collection), query)

    async def count(self, collection: str, query: QueryFilter | None = None) -> int:
        if query is None:
            return len(self._collections.get(collection, {}))
        return len(await self.query(collection, query))


__all__ = ["InMemoryEntityStore"]
