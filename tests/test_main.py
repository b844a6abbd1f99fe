"""Tests for the yardsync command line."""

from __future__ import annotations

import json
import logging
import zipfile
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner
from yardsync.main import cli

from tests.fakes import full_dataset, make_client, make_project, manifest

FULL_COUNT = sum(len(records) for records in full_dataset().values())


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    saved_handlers, saved_filters, saved_level = root.handlers[:], root.filters[:], root.level
    yield
    root.handlers[:] = saved_handlers
    root.filters[:] = saved_filters
    root.setLevel(saved_level)


@pytest.fixture
def config_path(tmp_path: Path) -> str:
    path = tmp_path / "yardsync.yaml"
    path.write_text(
        "yardsync:\n"
        f"  data_dir: {tmp_path / 'data'}\n"
        "  operator:\n"
        "    user_id: U1\n"
        "    user_name: Jan Smit\n"
        "  logging:\n"
        "    level: ERROR\n",
        encoding="utf-8",
    )
    return str(path)


def _write_bundle(path: Path, **collections: object) -> Path:
    path.write_text(json.dumps({"manifest": manifest(), **collections}), encoding="utf-8")
    return path


def test_init_creates_store(config_path: str, tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["init", "--config", config_path])

    assert result.exit_code == 0, result.output
    assert "Store ready" in result.output
    assert (tmp_path / "data" / "yardsync.db").exists()


def test_import_export_validate(config_path: str, tmp_path: Path) -> None:
    runner = CliRunner()
    source = _write_bundle(tmp_path / "in.json", **full_dataset())

    imported = runner.invoke(cli, ["import", "--config", config_path, str(source)])
    assert imported.exit_code == 0, imported.output
    assert f"{FULL_COUNT} imported, 0 skipped, 0 errors" in imported.output

    archive = tmp_path / "out.zip"
    exported = runner.invoke(
        cli, ["export", "--config", config_path, "--exclude", "auditLog", str(archive)]
    )
    assert exported.exit_code == 0, exported.output
    with zipfile.ZipFile(archive) as bundle:
        names = set(bundle.namelist())
        users = json.loads(bundle.read("users.json"))
    assert "auditEntries.json" not in names
    assert "projects.json" in names
    assert all("passwordHash" not in user for user in users)

    validated = runner.invoke(cli, ["validate", str(archive)])
    assert validated.exit_code == 0, validated.output
    assert "OK: bundle version 1.0.0 exported by Jan Smit" in validated.output


def test_export_with_passwords(config_path: str, tmp_path: Path) -> None:
    runner = CliRunner()
    source = _write_bundle(tmp_path / "in.json", **full_dataset())
    runner.invoke(cli, ["import", "--config", config_path, str(source)])

    target = tmp_path / "out.json"
    result = runner.invoke(
        cli, ["export", "--config", config_path, "--include-passwords", str(target)]
    )

    assert result.exit_code == 0, result.output
    users = json.loads(target.read_text(encoding="utf-8"))["users"]
    assert {u["passwordHash"] for u in users} == {"hash-1", "hash-2"}


def test_preview_prints_json(config_path: str, tmp_path: Path) -> None:
    source = _write_bundle(tmp_path / "in.json", clients=[make_client("C1"), make_client("C2")])

    result = CliRunner().invoke(cli, ["preview", "--config", config_path, str(source)])

    assert result.exit_code == 0, result.output
    preview = json.loads(result.output)
    assert preview["isCompatible"] is True
    assert preview["counts"]["clients"] == {"new": 2, "existing": 0, "conflicts": 0}


def test_import_with_record_errors_exits_nonzero(config_path: str, tmp_path: Path) -> None:
    source = _write_bundle(tmp_path / "in.json", projects=[make_project("P1", "C404")])

    result = CliRunner().invoke(cli, ["import", "--config", config_path, str(source)])

    assert result.exit_code == 1
    assert "0 imported, 0 skipped, 1 errors" in result.output
    assert "  - Skipped projects record P1" in result.output


def test_replace_mode_from_command_line(config_path: str, tmp_path: Path) -> None:
    runner = CliRunner()
    first = _write_bundle(tmp_path / "first.json", clients=[make_client("C1")])
    second = _write_bundle(tmp_path / "second.json", clients=[make_client("C2")])
    runner.invoke(cli, ["import", "--config", config_path, str(first)])

    result = runner.invoke(
        cli, ["import", "--config", config_path, "--mode", "replace", str(second)]
    )
    assert result.exit_code == 0, result.output

    out = tmp_path / "check.json"
    runner.invoke(cli, ["export", "--config", config_path, str(out)])
    clients = json.loads(out.read_text(encoding="utf-8"))["clients"]
    assert [c["id"] for c in clients] == ["C2"]


def test_validate_rejects_bad_bundle(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"manifest": {}}), encoding="utf-8")

    result = CliRunner().invoke(cli, ["validate", str(path)])

    assert result.exit_code == 1
    assert "missing version in manifest" in result.output


def test_invalid_config_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("export:\n  includeEverything: true\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["init", "--config", str(path)])

    assert result.exit_code == 1
    assert "invalid configuration" in result.output
