"""Frozen/pinned record detection.

A record is protected when its configuration is frozen or it carries a
library-pins block. The check reads only those two fields, so it applies to
any collection that may carry them without knowing the rest of its shape.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

_VIEW_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class LibraryPins(BaseModel):
    model_config = _VIEW_CONFIG

    boat_model_version_id: str | None = None
    catalog_version_id: str | None = None
    template_version_ids: dict[str, str] = Field(default_factory=dict)
    procedure_version_ids: list[str] = Field(default_factory=list)
    pinned_at: str | None = None
    pinned_by: str | None = None


class ConfigurationState(BaseModel):
    model_config = _VIEW_CONFIG

    is_frozen: bool = False


class ProtectionMarkers(BaseModel):
    model_config = _VIEW_CONFIG

    configuration: ConfigurationState | None = None
    library_pins: LibraryPins | None = None

    @property
    def is_frozen(self) -> bool:
        return self.configuration is not None and self.configuration.is_frozen

    @property
    def is_pinned(self) -> bool:
        return self.library_pins is not None

    @property
    def is_protected(self) -> bool:
        return self.is_frozen or self.is_pinned


def _raw_markers_present(record: Mapping[str, Any]) -> bool:
    configuration = record.get("configuration")
    frozen = isinstance(configuration, Mapping) and bool(configuration.get("isFrozen"))
    return frozen or record.get("libraryPins") is not None


def read_markers(record: Mapping[str, Any]) -> ProtectionMarkers | None:
    try:
        return ProtectionMarkers.model_validate(record)
    except ValidationError:
        return None


def is_protected(record: Mapping[str, Any] | None) -> bool:
    """True when ``record`` holds a frozen configuration or library pins.

    A marker block that does not parse still counts: a half-written pin is
    treated as a pin.
    """
    if record is None:
        return False
    markers = read_markers(record)
    if markers is None:
        return _raw_markers_present(record)
    return markers.is_protected


def protection_reason(record: Mapping[str, Any]) -> str:
    markers = read_markers(record)
    if markers is None:
        return "malformed protection markers"
    if markers.is_frozen and markers.is_pinned:
        return "configuration is frozen and library versions are pinned"
    if markers.is_frozen:
        return "configuration is frozen"
    if markers.is_pinned:
        return "library versions are pinned"
    return "not protected"


__all__ = [
    "ConfigurationState",
    "LibraryPins",
    "ProtectionMarkers",
    "is_protected",
    "protection_reason",
    "read_markers",
]
