"""Exception types raised by stores and surfaced by the sync engine."""

from __future__ import annotations


class SyncError(Exception):
    """Base class for engine-level failures."""


class StoreError(SyncError):
    """The backing store could not be read or written at all.

    Fatal for the running operation: export/preview/import stop and return
    a failed result, leaving already-committed writes in place.
    """


class RecordRejectedError(SyncError):
    """The store refused a single record (bad shape, unserializable data)."""

    def __init__(self, collection: str, record_id: str | None, reason: str) -> None:
        self.collection = collection
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"{collection} record {record_id or '<no id>'} rejected: {reason}")


__all__ = ["RecordRejectedError", "StoreError", "SyncError"]
