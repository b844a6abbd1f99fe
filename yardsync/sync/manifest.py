from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from yardsync.models.context import OperatorContext, utc_now
from yardsync.models.options import ExportOptions
from yardsync.models.portability import APP_VERSION, SCHEMA_VERSION, Manifest


def build_manifest(
    options: ExportOptions,
    operator: OperatorContext,
    counts: Mapping[str, int],
    exported_at: datetime | None = None,
) -> Manifest:
    return Manifest(
        schema_version=SCHEMA_VERSION,
        app_version=APP_VERSION,
        exported_at=exported_at or utc_now(),
        exported_by=operator.user_name,
        counts=dict(counts),
        options=options.snapshot(),
    )


def schema_major(version: str) -> str:
    """Major component of a dotted version string (``"1.4.2"`` -> ``"1"``)."""
    return version.strip().lstrip("vV").split(".", 1)[0]


def is_major_compatible(version: str, current: str = SCHEMA_VERSION) -> bool:
    return schema_major(version) == schema_major(current)


__all__ = ["build_manifest", "is_major_compatible", "schema_major"]
