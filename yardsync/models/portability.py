"""Bundle, manifest and report models for export/import between instances."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from yardsync import __version__

# Bump the major component when an entity's stored shape changes incompatibly.
SCHEMA_VERSION = "1.0.0"
APP_VERSION = __version__

Record = dict[str, Any]

_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Manifest(BaseModel):
    """Provenance and scope header carried at the top of every bundle."""

    # Newer producers may add header fields; ignore them rather than refuse.
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

    schema_version: str = Field(alias="version")
    app_version: str = ""
    exported_at: datetime | None = None
    exported_by: str = ""
    counts: dict[str, int] = Field(default_factory=dict)
    options: dict[str, bool] = Field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Bundle(BaseModel):
    """A manifest plus zero or more entity collections.

    On the wire the collections sit next to ``manifest`` as top-level keys.
    A missing key means "not exported", an empty list "exported, but empty".
    """

    manifest: Manifest
    collections: dict[str, list[Record]] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Bundle:
        collections = {key: list(value) for key, value in document.items() if key != "manifest"}
        return cls.model_validate({"manifest": document["manifest"], "collections": collections})

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {"manifest": self.manifest.to_wire()}
        document.update(self.collections)
        return document

    def dump_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_document(), indent=indent, ensure_ascii=False)

    def has(self, name: str) -> bool:
        return name in self.collections

    def records(self, name: str) -> list[Record]:
        return self.collections.get(name, [])


class CollectionCounts(BaseModel):
    model_config = _WIRE_CONFIG

    new: int = 0
    existing: int = 0
    conflicts: int = 0


class ImportConflict(BaseModel):
    model_config = _WIRE_CONFIG

    collection: str
    id: str
    name: str
    reason: str
    local_version: int | None = None
    import_version: int | None = None
    is_protected: bool = False


class PreviewResult(BaseModel):
    model_config = _WIRE_CONFIG

    manifest: Manifest
    is_compatible: bool = True
    warnings: list[str] = Field(default_factory=list)
    counts: dict[str, CollectionCounts] = Field(default_factory=dict)
    conflicts: list[ImportConflict] = Field(default_factory=list)


class ImportResult(BaseModel):
    model_config = _WIRE_CONFIG

    success: bool = True
    imported: dict[str, int] = Field(default_factory=dict)
    skipped: dict[str, int] = Field(default_factory=dict)
    protected: dict[str, int] = Field(default_factory=dict)
    """Incoming records refused because the existing record is frozen/pinned."""
    preserved: dict[str, int] = Field(default_factory=dict)
    """Protected existing records kept through a replace-mode clear."""
    errors: list[str] = Field(default_factory=list)

    def track(self, name: str) -> None:
        for tally in (self.imported, self.skipped):
            tally.setdefault(name, 0)

    def total(self, tally: str) -> int:
        return sum(getattr(self, tally).values())

    def summary(self) -> str:
        return (
            f"{self.total('imported')} imported, {self.total('skipped')} skipped, "
            f"{len(self.errors)} errors"
        )


__all__ = [
    "APP_VERSION",
    "Bundle",
    "CollectionCounts",
    "ImportConflict",
    "ImportResult",
    "Manifest",
    "PreviewResult",
    "Record",
    "SCHEMA_VERSION",
]  # noqa: RUF022
