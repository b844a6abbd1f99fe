from __future__ import annotations

from yardsync.models.audit import AuditAction, AuditEntry
from yardsync.models.context import SYSTEM_OPERATOR, OperatorContext, utc_now
from yardsync.models.options import ExportOptions, ImportMode, ImportOptions
from yardsync.models.portability import (
    SCHEMA_VERSION,
    Bundle,
    CollectionCounts,
    ImportConflict,
    ImportResult,
    Manifest,
    PreviewResult,
)
from yardsync.models.result import Err, Ok, Result

__all__ = [
    "AuditAction",
    "AuditEntry",
    "Bundle",
    "CollectionCounts",
    "Err",
    "ExportOptions",
    "ImportConflict",
    "ImportMode",
    "ImportOptions",
    "ImportResult",
    "Manifest",
    "Ok",
    "OperatorContext",
    "PreviewResult",
    "Result",
    "SCHEMA_VERSION",
    "SYSTEM_OPERATOR",
    "utc_now",
]  # noqa: RUF022
