"""Operator-facing facade over the export/import engine."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import ValidationError

from yardsync.errors import StoreError
from yardsync.models.audit import AuditAction
from yardsync.models.context import SYSTEM_OPERATOR, OperatorContext
from yardsync.models.options import ExportOptions, ImportOptions
from yardsync.models.portability import Bundle, ImportResult, PreviewResult
from yardsync.models.result import Err, Ok, Result
from yardsync.protocols.audit import AuditLog
from yardsync.protocols.store import EntityStore
from yardsync.sync.exporter import export_data
from yardsync.sync.importer import import_data
from yardsync.sync.preview import preview_import
from yardsync.sync.validator import validate_export_data

logger = logging.getLogger(__name__)

OptionsInput = Mapping[str, Any] | None
M = TypeVar("M", ExportOptions, ImportOptions)


def _options_error(kind: str, exc: ValidationError) -> str:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in e['loc']) or kind}: {e['msg']}" for e in exc.errors()
    )
    return f"Invalid {kind} options: {problems}"


def _resolve(model: type[M], options: M | OptionsInput, kind: str) -> Result[M]:
    if isinstance(options, model):
        return Ok(options)
    try:
        return Ok(model.model_validate(options or {}))
    except ValidationError as exc:
        return Err(_options_error(kind, exc))


class SyncService:
    """Export, validate, preview and import bundles against one store.

    Every method returns a ``Result``; none raises for bad input or a
    partially failed import. With an audit log attached, each completed
    export and import appends one audit entry after its data pass.
    """

    def __init__(self, store: EntityStore, audit: AuditLog | None = None) -> None:
        self._store = store
        self._audit = audit

    @staticmethod
    def default_export_options() -> ExportOptions:
        return ExportOptions()

    @staticmethod
    def default_import_options() -> ImportOptions:
        return ImportOptions()

    @staticmethod
    def validate_export_data(data: Any) -> Result[Bundle]:
        return validate_export_data(data)

    async def export_data(
        self,
        options: ExportOptions | OptionsInput = None,
        context: OperatorContext | None = None,
    ) -> Result[Bundle]:
        parsed = _resolve(ExportOptions, options, "export")
        if not parsed.ok:
            return Err(parsed.error or "Invalid export options")
        resolved = parsed.unwrap()
        context = context or SYSTEM_OPERATOR

        result = await export_data(self._store, resolved, context)
        if not result.ok or self._audit is None:
            return result

        counts = result.unwrap().manifest.counts
        try:
            await self._audit.log(
                context,
                AuditAction.create,
                "Export",
                uuid.uuid4().hex,
                f"Exported data: {counts.get('projects', 0)} projects, "
                f"{counts.get('clients', 0)} clients, {counts.get('users', 0)} users",
                metadata={"counts": counts},
            )
        except StoreError as exc:
            return Err(f"Export failed: could not record audit entry: {exc}")
        return result

    async def preview_import(
        self,
        bundle: Bundle | Mapping[str, Any],
        options: ImportOptions | OptionsInput = None,
    ) -> Result[PreviewResult]:
        parsed = _resolve(ImportOptions, options, "import")
        if not parsed.ok:
            return Err(parsed.error or "Invalid import options")
        resolved = parsed.unwrap()
        return await preview_import(self._store, bundle, resolved)

    async def import_data(
        self,
        bundle: Bundle | Mapping[str, Any],
        options: ImportOptions | OptionsInput = None,
        context: OperatorContext | None = None,
    ) -> Result[ImportResult]:
        parsed = _resolve(ImportOptions, options, "import")
        if not parsed.ok:
            return Err(parsed.error or "Invalid import options")
        resolved = parsed.unwrap()
        context = context or SYSTEM_OPERATOR

        result = await import_data(self._store, bundle, resolved, context)
        if not result.ok or self._audit is None:
            return result

        report: ImportResult = result.unwrap()
        try:
            await self._audit.log(
                context,
                AuditAction.import_,
                "Import",
                uuid.uuid4().hex,
                f"Imported data ({resolved.mode.value}): {report.summary()}",
                metadata={"imported": report.imported, "skipped": report.skipped},
            )
        except StoreError as exc:
            logger.error("import audit entry not recorded: %s", exc)
            report.errors.append(f"Failed to record audit entry: {exc}")
            report.success = False
        return Ok(report)


__all__ = ["SyncService"]
