"""Dry-run analysis of an inbound bundle against the live store.

Nothing here writes. Compatibility problems become warnings; the caller
decides whether to go ahead with the import.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from yardsync.core.logging import correlation_scope
from yardsync.errors import StoreError
from yardsync.models.options import ImportOptions, import_enabled
from yardsync.models.portability import (
    SCHEMA_VERSION,
    Bundle,
    CollectionCounts,
    ImportConflict,
    PreviewResult,
    Record,
)
from yardsync.models.result import Err, Ok, Result
from yardsync.protocols.store import EntityStore
from yardsync.sync.collections import (
    CollectionDescriptor,
    get_descriptor,
    is_known,
    order_collections,
)
from yardsync.sync.manifest import is_major_compatible
from yardsync.sync.protection import is_protected, protection_reason
from yardsync.sync.records import missing_fields, record_id, record_label, record_version
from yardsync.sync.validator import coerce_bundle

logger = logging.getLogger(__name__)


def _conflict_for(
    descriptor: CollectionDescriptor, incoming: Record, existing: Record
) -> ImportConflict | None:
    local_version = record_version(existing)
    import_version = record_version(incoming)
    protected = descriptor.protectable and is_protected(existing)
    newer_locally = (
        local_version is not None and import_version is not None and local_version > import_version
    )
    if not protected and not newer_locally:
        return None

    reasons = []
    if newer_locally:
        reasons.append(
            f"Local version {local_version} is newer than import version {import_version}"
        )
    if protected:
        reasons.append(f"Local record is protected: {protection_reason(existing)}")
    return ImportConflict(
        collection=descriptor.name,
        id=record_id(incoming),
        name=record_label(incoming),
        reason="; ".join(reasons),
        local_version=local_version,
        import_version=import_version,
        is_protected=protected,
    )


async def _analyze_collection(
    store: EntityStore,
    descriptor: CollectionDescriptor,
    records: list[Record],
    preview: PreviewResult,
) -> int:
    """Tally one collection into ``preview``; returns new records lacking credentials."""
    counts = CollectionCounts()
    uncredentialed = 0

    if descriptor.append_only:
        existing_ids = {record_id(r) for r in await store.get_all(descriptor.name)}
        for record in records:
            if record_id(record) in existing_ids:
                counts.existing += 1
            else:
                counts.new += 1
        preview.counts[descriptor.name] = counts
        return 0

    for record in records:
        existing = await store.get_by_id(descriptor.name, record_id(record))
        if existing is None:
            counts.new += 1
            fields = descriptor.credential_fields
            if fields and missing_fields(record, fields):
                uncredentialed += 1
            continue
        counts.existing += 1
        conflict = _conflict_for(descriptor, record, existing)
        if conflict is not None:
            counts.conflicts += 1
            preview.conflicts.append(conflict)

    preview.counts[descriptor.name] = counts
    return uncredentialed


async def preview_import(
    store: EntityStore,
    data: Bundle | Mapping[str, Any],
    options: ImportOptions | None = None,
) -> Result[PreviewResult]:
    parsed = coerce_bundle(data)
    if not parsed.ok:
        return Err(parsed.error or "Invalid export data")
    bundle: Bundle = parsed.unwrap()
    options = options or ImportOptions()

    manifest = bundle.manifest
    preview = PreviewResult(manifest=manifest)

    if not is_major_compatible(manifest.schema_version):
        preview.warnings.append(
            f"Export version {manifest.schema_version} may not be fully compatible "
            f"with current version {SCHEMA_VERSION}"
        )

    for name in bundle.collections:
        if not is_known(name):
            preview.warnings.append(f"Unknown collection '{name}' will be ignored")

    selected = [
        name
        for name in bundle.collections
        if is_known(name) and import_enabled(options, get_descriptor(name).group)
    ]
    uncredentialed = 0

    with correlation_scope(operation_id=uuid.uuid4().hex, operation="preview"):
        try:
            for name in order_collections(selected):
                records = bundle.records(name)
                declared = manifest.counts.get(name)
                if declared is not None and declared != len(records):
                    preview.warnings.append(
                        f"Manifest declares {declared} {name} "
                        f"but the bundle contains {len(records)}"
                    )
                with correlation_scope(collection=name):
                    uncredentialed += await _analyze_collection(
                        store, get_descriptor(name), records, preview
                    )
        except StoreError as exc:
            logger.error("preview aborted: %s", exc)
            return Err(f"Preview failed: {exc}")

        protected = sum(1 for c in preview.conflicts if c.is_protected)
        if protected:
            preview.warnings.append(
                f"{protected} item(s) have pinned/frozen data and will not be overwritten"
            )
        if uncredentialed:
            preview.warnings.append(
                f"{uncredentialed} new user(s) have no password hash and will not be imported"
            )
        for warning in preview.warnings:
            logger.warning("%s", warning)

    # Validation already passed to get here; everything else is advisory.
    preview.is_compatible = True
    return Ok(preview)


__all__ = ["preview_import"]
