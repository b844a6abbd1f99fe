"""Bundle assembly: a full point-in-time copy of the selected collections."""

from __future__ import annotations

import logging
import uuid

from yardsync.core.logging import correlation_scope
from yardsync.errors import StoreError
from yardsync.models.context import OperatorContext
from yardsync.models.options import ExportOptions, export_enabled
from yardsync.models.portability import Bundle, Record
from yardsync.models.result import Err, Ok, Result
from yardsync.protocols.store import EntityStore
from yardsync.sync.collections import COLLECTION_NAMES, COLLECTIONS
from yardsync.sync.manifest import build_manifest
from yardsync.sync.records import strip_fields

logger = logging.getLogger(__name__)


async def export_data(
    store: EntityStore,
    options: ExportOptions,
    context: OperatorContext,
) -> Result[Bundle]:
    """Read every enabled collection unfiltered and package it with a manifest.

    Disabled collections are left out of the bundle entirely. Credential
    fields are stripped from users unless ``include_user_passwords`` is set.
    Only a store read failure produces an error result.
    """
    collections: dict[str, list[Record]] = {}
    counts: dict[str, int] = dict.fromkeys(COLLECTION_NAMES, 0)

    with correlation_scope(operation_id=uuid.uuid4().hex, operation="export"):
        try:
            for descriptor in COLLECTIONS:
                if not export_enabled(options, descriptor.group):
                    continue
                with correlation_scope(collection=descriptor.name):
                    records = await store.get_all(descriptor.name)
                    if descriptor.credential_fields and not options.include_user_passwords:
                        records = [strip_fields(r, descriptor.credential_fields) for r in records]
                    logger.debug("read %d %s", len(records), descriptor.name)
                collections[descriptor.name] = records
                counts[descriptor.name] = len(records)
        except StoreError as exc:
            logger.error("export aborted: %s", exc)
            return Err(f"Export failed: {exc}")

        manifest = build_manifest(options, context, counts)
        logger.info(
            "exported %d record(s) across %d collection(s) for %s",
            sum(counts.values()),
            len(collections),
            context.user_name,
        )
    return Ok(Bundle(manifest=manifest, collections=collections))


__all__ = ["export_data"]
