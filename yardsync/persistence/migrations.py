"""Schema migrations for the entity database.

Each ``NNNN_name.sql`` file under ``migrations/`` runs once, in name order.
Its SHA-256 is recorded alongside the name so an applied file that was
edited afterwards is caught before any pending file runs.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path

import aiosqlite

from yardsync.models.context import utc_now

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Migration:
    name: str
    sql: str

    @property
    def checksum(self) -> str:
        return hashlib.sha256(self.sql.encode("utf-8")).hexdigest()


def discover(migrations_dir: Path = MIGRATIONS_DIR) -> list[Migration]:
    return [
        Migration(name=path.name, sql=path.read_text(encoding="utf-8"))
        for path in sorted(migrations_dir.glob("*.sql"))
    ]


async def _recorded(db: aiosqlite.Connection) -> dict[str, str]:
    await db.execute(
        "CREATE TABLE IF NOT EXISTS schema_migrations ("
        "name TEXT PRIMARY KEY, checksum TEXT NOT NULL, applied_at TEXT NOT NULL)"
    )
    cursor = await db.execute("SELECT name, checksum FROM schema_migrations")
    return {name: checksum for name, checksum in await cursor.fetchall()}


async def run_migrations(db_path: str, migrations_dir: Path | None = None) -> list[str]:
    """Bring ``db_path`` up to date; returns the names applied by this call.

    Raises ``RuntimeError`` when a recorded migration no longer matches its file.
    """
    migrations = discover(migrations_dir or MIGRATIONS_DIR)
    applied: list[str] = []

    async with aiosqlite.connect(db_path) as db:
        recorded = await _recorded(db)
        for migration in migrations:
            checksum = recorded.get(migration.name)
            if checksum is not None and checksum != migration.checksum:
                raise RuntimeError(
                    f"migration {migration.name} checksum mismatch: recorded {checksum}, "
                    f"file {migration.checksum}; applied migrations must not be edited"
                )

        for migration in migrations:
            if migration.name in recorded:
                continue
            await db.executescript(migration.sql)
            await db.execute(
                "INSERT INTO schema_migrations (name, checksum, applied_at) VALUES (?, ?, ?)",
                (migration.name, migration.checksum, utc_now().isoformat()),
            )
            await db.commit()
            applied.append(migration.name)

    if applied:
        logger.info("migrated %s: %s", db_path, ", ".join(applied))
    return applied


__all__ = ["MIGRATIONS_DIR", "Migration", "discover", "run_migrations"]
