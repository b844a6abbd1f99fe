"""In-process evaluation of ``QueryFilter`` for document-style stores."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from yardsync.protocols.store import QueryFilter


def _matches(record: dict[str, Any], where: dict[str, Any]) -> bool:
    for key, expected in where.items():
        actual = record.get(key)
        if isinstance(expected, list):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True


def apply_query(records: Iterable[dict[str, Any]], query: QueryFilter) -> list[dict[str, Any]]:
    out = [r for r in records if _matches(r, query.where)]

    if query.order_by is not None:
        field = query.order_by.field
        # Records without the field always sort last, whatever the direction.
        present = [r for r in out if r.get(field) is not None]
        missing = [r for r in out if r.get(field) is None]
        present.sort(key=lambda r: r[field], reverse=query.order_by.direction == "desc")
        out = present + missing

    if query.offset:
        out = out[query.offset :]
    if query.limit is not None:
        out = out[: query.limit]
    return out


__all__ = ["apply_query"]
