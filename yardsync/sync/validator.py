"""Structural gate for inbound bundle documents.

Runs before preview or import. Only checks shape; whether the schema version
is one this engine understands is the analyzer's call.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from yardsync.models.portability import Bundle
from yardsync.models.result import Err, Ok, Result

logger = logging.getLogger(__name__)

_PREFIX = "Invalid export data"


def _check_collection(name: str, records: object) -> str | None:
    if not isinstance(records, list):
        return f"{_PREFIX}: collection '{name}' is not a list"
    seen: set[str] = set()
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            return f"{_PREFIX}: {name}[{index}] is not an object"
        record_id = record.get("id")
        if not isinstance(record_id, str) or not record_id:
            return f"{_PREFIX}: {name}[{index}] has no id"
        if record_id in seen:
            return f"{_PREFIX}: duplicate id {record_id} in {name}"
        seen.add(record_id)
    return None


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error["loc"] if p != "manifest")
        parts.append(f"{location or 'manifest'}: {error['msg']}")
    return "; ".join(parts)


def validate_export_data(data: Any) -> Result[Bundle]:
    """Check ``data`` is a well-formed bundle document and parse it."""
    if data is None or not isinstance(data, Mapping):
        return Err(f"{_PREFIX}: not an object")

    manifest = data.get("manifest")
    if manifest is None:
        return Err(f"{_PREFIX}: missing manifest")
    if not isinstance(manifest, Mapping):
        return Err(f"{_PREFIX}: manifest is not an object")
    version = manifest.get("version")
    if not isinstance(version, str) or not version.strip():
        return Err(f"{_PREFIX}: missing version in manifest")

    for name, records in data.items():
        if name == "manifest":
            continue
        problem = _check_collection(name, records)
        if problem is not None:
            return Err(problem)

    try:
        bundle = Bundle.from_document(data)
    except ValidationError as exc:
        return Err(f"{_PREFIX}: malformed manifest ({_describe(exc)})")

    logger.debug(
        "bundle v%s from %s: %s",
        bundle.manifest.schema_version,
        bundle.manifest.exported_by or "unknown",
        ", ".join(f"{k}={len(v)}" for k, v in bundle.collections.items()) or "no collections",
    )
    return Ok(bundle)


def coerce_bundle(data: Bundle | Mapping[str, Any]) -> Result[Bundle]:
    """Accept an already-parsed bundle or run a raw document through the gate."""
    if isinstance(data, Bundle):
        return Ok(data)
    return validate_export_data(data)


__all__ = ["coerce_bundle", "validate_export_data"]
