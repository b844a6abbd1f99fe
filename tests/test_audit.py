"""Tests for the store-backed audit recorder."""

from __future__ import annotations

import pytest
from yardsync.audit.recorder import AUDIT_COLLECTION, AuditRecorder
from yardsync.models.audit import AuditAction
from yardsync.models.context import OperatorContext
from yardsync.persistence.memory_store import InMemoryEntityStore
from yardsync.protocols.audit import AuditLog

from tests.fakes import make_audit_entry

pytestmark = pytest.mark.asyncio


async def test_log_appends_to_audit_collection(
    store: InMemoryEntityStore, operator: OperatorContext
) -> None:
    recorder = AuditRecorder(store)

    entry = await recorder.log(
        operator, AuditAction.import_, "Import", "run-1", "Imported data", metadata={"n": 1}
    )

    stored = await store.get_by_id(AUDIT_COLLECTION, entry.id)
    assert stored is not None
    assert stored["action"] == "IMPORT"
    assert stored["userName"] == "Test User"
    assert stored["metadata"] == {"n": 1}
    assert stored["createdAt"] == stored["timestamp"]


async def test_get_all_reads_imported_entries_in_time_order(store: InMemoryEntityStore) -> None:
    later = make_audit_entry("A2")
    later["timestamp"] = "2026-04-01T00:00:00.000Z"
    await store.save(AUDIT_COLLECTION, later)
    await store.save(AUDIT_COLLECTION, make_audit_entry("A1"))

    entries = await AuditRecorder(store).get_all()

    assert [e.id for e in entries] == ["A1", "A2"]
    assert entries[0].action is AuditAction.create


async def test_satisfies_protocol(store: InMemoryEntityStore) -> None:
    assert isinstance(AuditRecorder(store), AuditLog)
