from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from yardsync.audit.recorder import AuditRecorder
from yardsync.config import SyncSettings, load_config
from yardsync.core.logging import setup_logging
from yardsync.models.options import OPTION_GROUPS, ImportMode
from yardsync.models.portability import Bundle, ImportResult, PreviewResult
from yardsync.models.result import Result
from yardsync.persistence.migrations import run_migrations
from yardsync.persistence.sqlite_store import SQLiteEntityStore
from yardsync.sync.archive import read_bundle, write_bundle
from yardsync.sync.service import SyncService
from yardsync.sync.validator import validate_export_data

_DEFAULT_CONFIG = "config/yardsync.yaml"
_GROUPS = sorted(OPTION_GROUPS)


def _load_settings(config_path: str) -> SyncSettings:
    try:
        settings = load_config(config_path)
    except (FileNotFoundError, ValueError, ValidationError) as exc:
        raise click.ClickException(f"invalid configuration: {exc}") from exc
    setup_logging(settings.logging.level, json_output=settings.logging.json_output)
    return settings


async def _open_service(settings: SyncSettings) -> SyncService:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    db = str(settings.db_path)
    await run_migrations(db)
    store = SQLiteEntityStore(db)
    audit = AuditRecorder(store) if settings.audit.record_operations else None
    return SyncService(store, audit=audit)


def _read_raw(path: Path) -> dict[str, Any]:
    loaded = read_bundle(path)
    if not loaded.ok:
        raise click.ClickException(loaded.error or "could not read bundle")
    return loaded.unwrap()


@click.group()
def cli() -> None:
    """Export and import yard data bundles."""


@cli.command("init")
@click.option("--config", "config_path", default=_DEFAULT_CONFIG, show_default=True)
def init_command(config_path: str) -> None:
    """Create the data directory and apply database migrations."""
    settings = _load_settings(config_path)
    asyncio.run(_open_service(settings))
    click.echo(f"Store ready at {settings.db_path}")


@cli.command("export")
@click.option("--config", "config_path", default=_DEFAULT_CONFIG, show_default=True)
@click.option("--exclude", multiple=True, type=click.Choice(_GROUPS), help="Leave a group out.")
@click.option("--include-passwords", is_flag=True, help="Keep user password hashes.")
@click.argument("output", type=click.Path(path_type=Path, dir_okay=False))
def export_command(
    config_path: str, exclude: tuple[str, ...], include_passwords: bool, output: Path
) -> None:
    """Export the store to OUTPUT (.json or .zip)."""
    settings = _load_settings(config_path)
    update: dict[str, bool] = {OPTION_GROUPS[g].export_field: False for g in exclude}
    if include_passwords:
        update["include_user_passwords"] = True
    options = settings.export.model_copy(update=update)

    async def _run() -> Result[Bundle]:
        service = await _open_service(settings)
        return await service.export_data(options, settings.operator.as_context())

    result = asyncio.run(_run())
    if not result.ok:
        raise click.ClickException(result.error or "export failed")
    bundle = result.unwrap()
    write_bundle(bundle, output)
    total = sum(len(records) for records in bundle.collections.values())
    click.echo(f"Exported {total} record(s) in {len(bundle.collections)} collection(s) to {output}")


@cli.command("validate")
@click.argument("bundle_file", type=click.Path(exists=True, path_type=Path, dir_okay=False))
def validate_command(bundle_file: Path) -> None:
    """Check that BUNDLE_FILE is a well-formed bundle."""
    result = validate_export_data(_read_raw(bundle_file))
    if not result.ok:
        raise click.ClickException(result.error or "invalid bundle")
    manifest = result.unwrap().manifest
    click.echo(
        f"OK: bundle version {manifest.schema_version} exported by "
        f"{manifest.exported_by or 'unknown'}"
    )


@cli.command("preview")
@click.option("--config", "config_path", default=_DEFAULT_CONFIG, show_default=True)
@click.argument("bundle_file", type=click.Path(exists=True, path_type=Path, dir_okay=False))
def preview_command(config_path: str, bundle_file: Path) -> None:
    """Show what importing BUNDLE_FILE would do, without writing."""
    settings = _load_settings(config_path)
    raw = _read_raw(bundle_file)

    async def _run() -> Result[PreviewResult]:
        service = await _open_service(settings)
        return await service.preview_import(raw, settings.import_)

    result = asyncio.run(_run())
    if not result.ok:
        raise click.ClickException(result.error or "preview failed")
    click.echo(result.unwrap().model_dump_json(by_alias=True, indent=2))


@cli.command("import")
@click.option("--config", "config_path", default=_DEFAULT_CONFIG, show_default=True)
@click.option("--mode", type=click.Choice([m.value for m in ImportMode]), default=None)
@click.option(
    "--overwrite-conflicts",
    is_flag=True,
    help="Merge mode: overwrite existing records instead of keeping them.",
)
@click.option("--skip", multiple=True, type=click.Choice(_GROUPS), help="Do not import a group.")
@click.argument("bundle_file", type=click.Path(exists=True, path_type=Path, dir_okay=False))
def import_command(
    config_path: str,
    mode: str | None,
    overwrite_conflicts: bool,
    skip: tuple[str, ...],
    bundle_file: Path,
) -> None:
    """Import BUNDLE_FILE into the store."""
    settings = _load_settings(config_path)
    update: dict[str, object] = {OPTION_GROUPS[g].import_field: False for g in skip}
    if mode is not None:
        update["mode"] = ImportMode(mode)
    if overwrite_conflicts:
        update["skip_conflicts"] = False
    options = settings.import_.model_copy(update=update)
    raw = _read_raw(bundle_file)

    async def _run() -> Result[ImportResult]:
        service = await _open_service(settings)
        return await service.import_data(raw, options, settings.operator.as_context())

    result = asyncio.run(_run())
    if not result.ok:
        raise click.ClickException(result.error or "import failed")
    report = result.unwrap()
    click.echo(report.summary())
    for error in report.errors:
        click.echo(f"  - {error}")
    if not report.success:
        raise SystemExit(1)


def main() -> None:
    cli()


__all__ = ["cli", "main"]
