"""Tests for bundle export."""

from __future__ import annotations

import pytest
from yardsync.models.context import OperatorContext
from yardsync.models.options import ExportOptions
from yardsync.models.portability import SCHEMA_VERSION
from yardsync.persistence.memory_store import InMemoryEntityStore
from yardsync.sync.collections import COLLECTION_NAMES, collections_for_group
from yardsync.sync.exporter import export_data

from tests.fakes import FailingStore, full_dataset, make_client, make_user

NOTHING = ExportOptions(
    include_projects=False,
    include_clients=False,
    include_users=False,
    include_library=False,
    include_audit_log=False,
    include_timesheets=False,
)


@pytest.mark.asyncio
async def test_empty_store_exports_empty_collections(operator: OperatorContext) -> None:
    result = await export_data(InMemoryEntityStore(), ExportOptions(), operator)

    assert result.ok is True
    bundle = result.unwrap()
    assert bundle.manifest.schema_version == SCHEMA_VERSION
    assert bundle.manifest.exported_by == "Test User"
    assert set(bundle.collections) == set(COLLECTION_NAMES)
    assert all(records == [] for records in bundle.collections.values())
    assert bundle.manifest.counts == dict.fromkeys(COLLECTION_NAMES, 0)


@pytest.mark.asyncio
async def test_full_export_carries_every_record(operator: OperatorContext) -> None:
    data = full_dataset()
    store = InMemoryEntityStore(data)

    bundle = (await export_data(store, ExportOptions(), operator)).unwrap()

    for name, records in data.items():
        assert len(bundle.records(name)) == len(records)
        assert bundle.manifest.counts[name] == len(records)
    assert [p["id"] for p in bundle.records("projects")] == ["P1", "P2"]
    assert bundle.records("projects")[1]["libraryPins"]["boatModelVersionId"] == "BMV1"


@pytest.mark.asyncio
async def test_export_is_unfiltered(operator: OperatorContext) -> None:
    archived = make_client("C9", name="Archived Client")
    archived["status"] = "archived"
    archived["archivedAt"] = "2025-01-01T00:00:00.000Z"
    store = InMemoryEntityStore({"clients": [make_client(), archived]})

    bundle = (await export_data(store, ExportOptions(), operator)).unwrap()

    assert [c["id"] for c in bundle.records("clients")] == ["C1", "C9"]


@pytest.mark.asyncio
async def test_disabled_groups_are_left_out(operator: OperatorContext) -> None:
    store = InMemoryEntityStore(full_dataset())
    options = ExportOptions(include_library=False, include_audit_log=False)

    bundle = (await export_data(store, options, operator)).unwrap()

    for descriptor in collections_for_group("library"):
        assert not bundle.has(descriptor.name)
        assert bundle.manifest.counts[descriptor.name] == 0
    assert not bundle.has("auditEntries")
    assert bundle.has("projects")
    assert bundle.manifest.options["includeLibrary"] is False


@pytest.mark.asyncio
async def test_all_groups_disabled_yields_manifest_only(operator: OperatorContext) -> None:
    store = InMemoryEntityStore(full_dataset())

    bundle = (await export_data(store, NOTHING, operator)).unwrap()

    assert bundle.collections == {}
    assert set(bundle.to_document()) == {"manifest"}


@pytest.mark.asyncio
async def test_password_hashes_stripped_by_default(operator: OperatorContext) -> None:
    store = InMemoryEntityStore({"users": [make_user("U1", password_hash="secret")]})

    bundle = (await export_data(store, ExportOptions(), operator)).unwrap()

    assert "passwordHash" not in bundle.records("users")[0]
    assert bundle.records("users")[0]["name"] == "Jan Smit"
    stored = await store.get_by_id("users", "U1")
    assert stored is not None
    assert stored["passwordHash"] == "secret"


@pytest.mark.asyncio
async def test_password_hashes_kept_on_request(operator: OperatorContext) -> None:
    store = InMemoryEntityStore({"users": [make_user("U1", password_hash="secret")]})

    bundle = (
        await export_data(store, ExportOptions(include_user_passwords=True), operator)
    ).unwrap()

    assert bundle.records("users")[0]["passwordHash"] == "secret"


@pytest.mark.asyncio
async def test_store_failure_is_an_error_result(operator: OperatorContext) -> None:
    store = FailingStore(full_dataset(), fail_reads={"projects"})

    result = await export_data(store, ExportOptions(), operator)

    assert result.ok is False
    assert (result.error or "").startswith("Export failed:")
    assert "projects" in (result.error or "")


@pytest.mark.asyncio
async def test_failure_in_disabled_collection_is_not_reached(operator: OperatorContext) -> None:
    store = FailingStore(full_dataset(), fail_reads={"projects"})

    result = await export_data(store, ExportOptions(include_projects=False), operator)

    assert result.ok is True
