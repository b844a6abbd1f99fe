from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from yardsync.models.context import OperatorContext
from yardsync.models.options import ExportOptions, ImportOptions


class OperatorConfig(BaseModel):
    user_id: str = "system"
    user_name: str = "System"

    def as_context(self) -> OperatorContext:
        return OperatorContext(user_id=self.user_id, user_name=self.user_name)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


class AuditConfig(BaseModel):
    record_operations: bool = True
    """Append an audit entry for every completed export and import."""


class SyncSettings(BaseSettings):
    data_dir: Path = Path("./data")
    database: str = "yardsync.db"
    operator: OperatorConfig = Field(default_factory=OperatorConfig)
    export: ExportOptions = Field(default_factory=ExportOptions)
    import_: ImportOptions = Field(default_factory=ImportOptions, alias="import")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)

    model_config = SettingsConfigDict(
        env_prefix="YARDSYNC_",
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.database


def _coerce_env_value(value: str) -> object:
    parsed = yaml.safe_load(value)
    return value if parsed is None else parsed


def _match_key(mapping: dict[str, object], key: str) -> str:
    """Spelling of ``key`` already used in ``mapping``, if any.

    Env names arrive lower-cased, while the file may spell toggles in
    camelCase; ``skip_conflicts`` and ``skipconflicts`` both land on an
    existing ``skipConflicts``.
    """
    if key in mapping:
        return key
    folded = key.replace("_", "")
    for existing in mapping:
        if isinstance(existing, str) and existing.replace("_", "").lower() == folded:
            return existing
    return key


def _set_nested(mapping: dict[str, object], path: list[str], value: object) -> None:
    current = mapping
    for key in path[:-1]:
        key = _match_key(current, key)
        existing = current.get(key)
        if not isinstance(existing, dict):
            existing = {}
            current[key] = existing
        current = existing
    current[_match_key(current, path[-1])] = value


def _apply_env_overrides(data: dict[str, object]) -> dict[str, object]:
    merged = dict(data)
    prefix = "YARDSYNC_"
    for key, raw_value in os.environ.items():
        if not key.startswith(prefix):
            continue
        path = key[len(prefix) :].lower().split("__")
        _set_nested(merged, path, _coerce_env_value(raw_value))
    return merged


def load_config(path: str | Path = "config/yardsync.yaml") -> SyncSettings:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")

    loaded = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(loaded, dict):
        raise ValueError("config file must contain a top-level mapping")

    raw = loaded.get("yardsync", loaded)
    if not isinstance(raw, dict):
        raise ValueError("yardsync config section must be a mapping")

    return SyncSettings.model_validate(_apply_env_overrides(raw))


__all__ = [
    "AuditConfig",
    "LoggingConfig",
    "OperatorConfig",
    "SyncSettings",
    "load_config",
]
