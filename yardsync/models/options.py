"""Explicit export/import option structures.

Every recognised toggle is enumerated here with its default; unknown keys are
rejected so a typo in a config file or API payload fails loudly instead of
silently exporting (or importing) the wrong data.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_OPTION_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="forbid",
)


class ImportMode(str, Enum):
    merge = "merge"
    replace = "replace"


class ExportOptions(BaseModel):
    model_config = _OPTION_CONFIG

    include_projects: bool = True
    include_clients: bool = True
    include_users: bool = True
    include_user_passwords: bool = False
    """Keep credential fields on exported users. Off by default; users are
    still exported, just without their password hashes."""
    include_library: bool = True
    """Categories, articles, kits, templates, procedures, boat models and
    equipment, including every version collection."""
    include_audit_log: bool = True
    include_documents: bool = False
    """Binary documents are not carried by the bundle format; recorded in the
    manifest snapshot only."""
    include_timesheets: bool = True

    def snapshot(self) -> dict[str, bool]:
        return self.model_dump(by_alias=True)


class ImportOptions(BaseModel):
    model_config = _OPTION_CONFIG

    mode: ImportMode = ImportMode.merge
    skip_conflicts: bool = True
    """Merge mode only: keep the existing record on an id collision instead
    of overwriting it with the incoming one."""
    import_projects: bool = True
    import_clients: bool = True
    import_users: bool = True
    import_library: bool = True
    import_audit_log: bool = True
    import_timesheets: bool = True


class GroupToggles(BaseModel):
    """Maps option groups onto the toggle attribute names above."""

    export_field: str
    import_field: str


OPTION_GROUPS: dict[str, GroupToggles] = {
    "projects": GroupToggles(export_field="include_projects", import_field="import_projects"),
    "clients": GroupToggles(export_field="include_clients", import_field="import_clients"),
    "users": GroupToggles(export_field="include_users", import_field="import_users"),
    "library": GroupToggles(export_field="include_library", import_field="import_library"),
    "auditLog": GroupToggles(export_field="include_audit_log", import_field="import_audit_log"),
    "timesheets": GroupToggles(
        export_field="include_timesheets", import_field="import_timesheets"
    ),
}


def export_enabled(options: ExportOptions, group: str) -> bool:
    return bool(getattr(options, OPTION_GROUPS[group].export_field))


def import_enabled(options: ImportOptions, group: str) -> bool:
    return bool(getattr(options, OPTION_GROUPS[group].import_field))


__all__ = [
    "OPTION_GROUPS",
    "ExportOptions",
    "GroupToggles",
    "ImportMode",
    "ImportOptions",
    "export_enabled",
    "import_enabled",
]
