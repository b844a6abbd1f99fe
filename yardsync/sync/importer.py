"""Import executor: writes a bundle back into the store in merge or replace mode.

Collections are processed one at a time in dependency order so references
created earlier in the pass resolve for later collections. Per-record
problems are collected into ``ImportResult.errors``; only a store failure or
a bundle without a manifest ends the call with an error result.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from yardsync.core.logging import correlation_scope
from yardsync.errors import RecordRejectedError, StoreError
from yardsync.models.context import OperatorContext
from yardsync.models.options import ImportMode, ImportOptions, import_enabled
from yardsync.models.portability import Bundle, ImportResult, Record
from yardsync.models.result import Err, Ok, Result
from yardsync.protocols.store import EntityStore
from yardsync.sync.collections import (
    CollectionDescriptor,
    get_descriptor,
    is_known,
    order_collections,
)
from yardsync.sync.protection import is_protected
from yardsync.sync.records import missing_fields, record_id, record_label
from yardsync.sync.validator import coerce_bundle

logger = logging.getLogger(__name__)


def _bump(tally: dict[str, int], name: str) -> None:
    tally[name] = tally.get(name, 0) + 1


class _CollectionImport:
    """Import state for a single collection within one pass."""

    def __init__(
        self,
        store: EntityStore,
        descriptor: CollectionDescriptor,
        options: ImportOptions,
        result: ImportResult,
    ) -> None:
        self.store = store
        self.descriptor = descriptor
        self.options = options
        self.result = result
        self.name = descriptor.name

    async def run(self, records: list[Record]) -> None:
        self.result.track(self.name)
        if self.descriptor.append_only:
            await self._union(records)
        elif self.options.mode is ImportMode.replace:
            await self._replace(records)
        else:
            await self._merge(records)
        logger.info(
            "%s: %d imported, %d skipped",
            self.name,
            self.result.imported.get(self.name, 0),
            self.result.skipped.get(self.name, 0),
        )

    async def _union(self, records: list[Record]) -> None:
        # Append-only history: never cleared, duplicates dropped by id.
        known = {record_id(r) for r in await self.store.get_all(self.name)}
        for record in records:
            rid = record_id(record)
            if rid in known:
                _bump(self.result.skipped, self.name)
                continue
            if await self._save(record):
                known.add(rid)

    async def _replace(self, records: list[Record]) -> None:
        retained: set[str] = set()
        credentials: dict[str, dict[str, Any]] = {}

        for existing in await self.store.get_all(self.name):
            rid = record_id(existing)
            if self.descriptor.credential_fields:
                credentials[rid] = {
                    f: existing[f] for f in self.descriptor.credential_fields if existing.get(f)
                }
            if self.descriptor.protectable and is_protected(existing):
                retained.add(rid)
                continue
            await self.store.delete(self.name, rid)

        if retained:
            self.result.preserved[self.name] = len(retained)
            logger.info("%s: kept %d protected record(s) through replace", self.name, len(retained))

        for record in records:
            if record_id(record) in retained:
                self._refuse_protected(record)
                continue
            await self._write(record, credentials.get(record_id(record)))

    async def _merge(self, records: list[Record]) -> None:
        for record in records:
            existing = await self.store.get_by_id(self.name, record_id(record))
            if existing is not None:
                if self.descriptor.protectable and is_protected(existing):
                    self._refuse_protected(record)
                    continue
                if self.options.skip_conflicts:
                    _bump(self.result.skipped, self.name)
                    continue
            await self._write(record, existing)

    def _refuse_protected(self, record: Record) -> None:
        _bump(self.result.skipped, self.name)
        _bump(self.result.protected, self.name)
        logger.debug(
            "%s %s is protected locally; incoming copy not written", self.name, record_id(record)
        )

    async def _write(self, record: Record, previous: Mapping[str, Any] | None) -> None:
        record = dict(record)
        fields = self.descriptor.credential_fields
        if fields:
            for field in missing_fields(record, fields):
                if previous and previous.get(field):
                    record[field] = previous[field]
            if missing_fields(record, fields):
                self._skip_with_error(record, "no password hash in import")
                return

        problem = await self._unresolved_reference(record)
        if problem is not None:
            self._skip_with_error(record, problem)
            return

        await self._save(record)

    async def _save(self, record: Record) -> bool:
        try:
            await self.store.save(self.name, record)
        except RecordRejectedError as exc:
            self.result.errors.append(
                f"Failed to import {self.name} record {record_id(record)}: {exc.reason}"
            )
            logger.warning("%s", exc)
            return False
        _bump(self.result.imported, self.name)
        return True

    async def _unresolved_reference(self, record: Record) -> str | None:
        for key in self.descriptor.references:
            value = record.get(key.field)
            if value is None or value == "":
                if key.required:
                    return f"{key.label} not found ({key.field} missing)"
                continue
            if not isinstance(value, str):
                return f"{key.label} not found ({key.field}={value!r})"
            if await self.store.get_by_id(key.target, value) is None:
                return f"{key.label} not found ({key.field}={value})"
        return None

    def _skip_with_error(self, record: Record, reason: str) -> None:
        message = (
            f'Skipped {self.name} record {record_id(record)} ("{record_label(record)}"): {reason}'
        )
        self.result.errors.append(message)
        logger.warning("%s", message)


async def import_data(
    store: EntityStore,
    data: Bundle | Mapping[str, Any],
    options: ImportOptions,
    context: OperatorContext,
) -> Result[ImportResult]:
    if not isinstance(data, Bundle) and (
        not isinstance(data, Mapping) or data.get("manifest") is None
    ):
        return Err("Import failed: missing manifest")
    parsed = coerce_bundle(data)
    if not parsed.ok:
        return Err(f"Import failed: {parsed.error}")
    bundle: Bundle = parsed.unwrap()

    result = ImportResult()
    for name in bundle.collections:
        if not is_known(name):
            logger.warning("ignoring unknown collection %r in bundle", name)

    selected = [
        name
        for name in bundle.collections
        if is_known(name) and import_enabled(options, get_descriptor(name).group)
    ]

    with correlation_scope(operation_id=uuid.uuid4().hex, operation="import"):
        logger.info(
            "%s import of %d collection(s) by %s (skip_conflicts=%s)",
            options.mode.value,
            len(selected),
            context.user_name,
            options.skip_conflicts,
        )
        try:
            for name in order_collections(selected):
                with correlation_scope(collection=name):
                    step = _CollectionImport(store, get_descriptor(name), options, result)
                    await step.run(bundle.records(name))
        except StoreError as exc:
            logger.error("import aborted: %s", exc)
            return Err(f"Import failed: {exc} (progress before failure: {result.summary()})")

        result.success = not result.errors
        logger.info("import finished: %s", result.summary())
    return Ok(result)


__all__ = ["import_data"]
