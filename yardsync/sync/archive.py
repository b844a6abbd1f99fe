"""Bundle files on disk: a single JSON document or a ZIP of per-collection files."""

from __future__ import annotations

import json
import zipfile
import zlib
from pathlib import Path
from typing import Any

from yardsync.models.portability import Bundle
from yardsync.models.result import Err, Ok, Result

MANIFEST_FILE = "manifest.json"


def write_bundle(bundle: Bundle, path: str | Path) -> Path:
    """Write ``bundle`` to ``path``; a ``.zip`` suffix selects the archive layout."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    if target.suffix.lower() != ".zip":
        target.write_text(bundle.dump_json(), encoding="utf-8")
        return target

    with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(MANIFEST_FILE, json.dumps(bundle.manifest.to_wire(), indent=2))
        for name, records in bundle.collections.items():
            archive.writestr(f"{name}.json", json.dumps(records, indent=2, ensure_ascii=False))
    return target


def _read_archive(source: Path) -> Result[dict[str, Any]]:
    with zipfile.ZipFile(source) as archive:
        names = set(archive.namelist())
        if MANIFEST_FILE not in names:
            return Err("Invalid export file: missing manifest.json")
        document: dict[str, Any] = {"manifest": json.loads(archive.read(MANIFEST_FILE))}
        for member in sorted(names - {MANIFEST_FILE}):
            if not member.endswith(".json") or "/" in member:
                continue
            document[member[: -len(".json")]] = json.loads(archive.read(member))
    return Ok(document)


def read_bundle(path: str | Path) -> Result[dict[str, Any]]:
    """Load a raw bundle document; it still has to pass the validator."""
    source = Path(path)
    try:
        if zipfile.is_zipfile(source):
            return _read_archive(source)
        return Ok(json.loads(source.read_text(encoding="utf-8")))
    except (OSError, ValueError, zipfile.BadZipFile, zlib.error) as exc:
        return Err(f"Failed to parse import file: {exc}")


__all__ = ["MANIFEST_FILE", "read_bundle", "write_bundle"]
