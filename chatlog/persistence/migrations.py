"""Sequential, idempotent migration runner with SHA-256 checksums."""

from __future__ import annotations

import hashlib
import logging
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from chatlog.errors import MigrationError

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"
DEFAULT_MIGRATIONS_TABLE = "_migrations"

logger = logging.getLogger(__name__)


def _checksum(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


async def apply_migrations(
    db: aiosqlite.Connection,
    migrations_dir: Path | None = None,
    table: str = DEFAULT_MIGRATIONS_TABLE,
) -> list[str]:
    """Apply pending ``*.sql`` files in name order on an open connection.

    Returns the names of the files applied by this call. Raises
    ``MigrationError`` when an applied file was modified afterwards.
    """

    if migrations_dir is None:
        migrations_dir = MIGRATIONS_DIR

    await db.execute(
        f"CREATE TABLE IF NOT EXISTS {table} ("
        "  name TEXT PRIMARY KEY,"
        "  checksum TEXT NOT NULL,"
        "  applied_at TEXT NOT NULL"
        ")"
    )
    await db.commit()

    cursor = await db.execute(f"SELECT name, checksum FROM {table} ORDER BY name")
    applied = {row[0]: row[1] for row in await cursor.fetchall()}

    newly_applied: list[str] = []
    for sql_file in sorted(migrations_dir.glob("*.sql")):
        name = sql_file.name
        checksum = _checksum(sql_file)

        if name in applied:
            if applied[name] != checksum:
                raise MigrationError(
                    f"Migration {name} checksum mismatch: "
                    f"applied={applied[name]}, current={checksum}. "
                    f"Previously applied migrations must not be modified."
                )
            continue

        await db.executescript(sql_file.read_text(encoding="utf-8"))
        await db.execute(
            f"INSERT OR IGNORE INTO {table} (name, checksum, applied_at) VALUES (?, ?, ?)",
            (name, checksum, datetime.now(UTC).isoformat()),
        )
        await db.commit()
        logger.info("Applied migration %s", name)
        newly_applied.append(name)

    return newly_applied


async def run_migrations(
    db_path: str,
    migrations_dir: Path | None = None,
    table: str = DEFAULT_MIGRATIONS_TABLE,
) -> list[str]:
    """Apply all pending migrations to the database at ``db_path``."""

    async with aiosqlite.connect(db_path) as db:
        return await apply_migrations(db, migrations_dir, table)


__all__ = ["DEFAULT_MIGRATIONS_TABLE", "MIGRATIONS_DIR", "apply_migrations", "run_migrations"]
