"""Small accessors shared by the analyzer and the executor."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_LABEL_FIELDS = ("title", "name", "projectNumber", "clientNumber", "description")


def record_id(record: Mapping[str, Any]) -> str:
    return str(record.get("id", ""))


def record_label(record: Mapping[str, Any]) -> str:
    for key in _LABEL_FIELDS:
        value = record.get(key)
        if isinstance(value, str) and value:
            return value
    return record_id(record)


def record_version(record: Mapping[str, Any]) -> int | None:
    value = record.get("version")
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def strip_fields(record: Mapping[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
    return {k: v for k, v in record.items() if k not in fields}


def missing_fields(record: Mapping[str, Any], fields: tuple[str, ...]) -> list[str]:
    return [f for f in fields if not record.get(f)]


__all__ = ["missing_fields", "record_id", "record_label", "record_version", "strip_fields"]
