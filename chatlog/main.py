"""chatlog CLI entry point."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import click

from chatlog.codec import encode
from chatlog.config import ChatlogSettings, load_config
from chatlog.core.logging import setup_logging
from chatlog.errors import MigrationError
from chatlog.persistence.factory import create_chatlog_store
from chatlog.persistence.migrations import run_migrations

logger = logging.getLogger(__name__)


def _load_settings(config_path: str) -> ChatlogSettings:
    try:
        settings = load_config(config_path)
    except (FileNotFoundError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(settings.logging.level, json_output=settings.logging.json_output)
    return settings


async def _migrate(settings: ChatlogSettings) -> list[str]:
    db_path = settings.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return await run_migrations(
        str(db_path),
        settings.migrations.directory,
        settings.migrations.table,
    )


async def _history(
    settings: ChatlogSettings,
    sender_id: str,
    page_id: str | None,
    limit: int,
    end_at: float | None,
    start_at: float | None,
) -> list[dict[str, object]]:
    provider, store = create_chatlog_store(settings)
    try:
        records = await store.get_interactions(
            sender_id,
            page_id=page_id,
            limit=limit,
            end_at=end_at,
            start_at=start_at,
        )
    finally:
        await provider.close()
    return [record.as_dict() for record in records]


@click.group()
def cli() -> None:
    """Chat log maintenance CLI."""


@cli.command("migrate")
@click.option("--config", "config_path", default="config/chatlog.yaml", show_default=True)
def migrate_command(config_path: str) -> None:
    """Apply pending schema migrations."""
    settings = _load_settings(config_path)
    try:
        applied = asyncio.run(_migrate(settings))
    except MigrationError as exc:
        raise click.ClickException(str(exc)) from exc
    if applied:
        click.echo(f"Applied {len(applied)} migration(s): {', '.join(applied)}")
    else:
        click.echo("Schema is up to date.")


@cli.command("history")
@click.argument("sender_id")
@click.option("--page-id", default=None, help="Read by page; omit to read by flag.")
@click.option("--limit", type=int, default=None, help="Defaults to storage.default_limit; 0 for no limit.")
@click.option("--end-at", type=float, default=None, help="Newest timestamp to include.")
@click.option("--start-at", type=float, default=None, help="Oldest timestamp to include.")
@click.option("--config", "config_path", default="config/chatlog.yaml", show_default=True)
def history_command(
    sender_id: str,
    page_id: str | None,
    limit: int | None,
    end_at: float | None,
    start_at: float | None,
    config_path: str,
) -> None:
    """Print interactions for SENDER_ID as JSON lines, oldest first."""
    settings = _load_settings(config_path)
    if not Path(settings.db_path).exists():
        raise click.ClickException(f"database not found: {settings.db_path}")
    if limit is None:
        limit = settings.storage.default_limit

    records = asyncio.run(_history(settings, sender_id, page_id, limit, end_at, start_at))
    logger.debug("history returned %d records for %s", len(records), sender_id)
    for record in records:
        click.echo(json.dumps(encode(record), ensure_ascii=False, sort_keys=True))


__all__ = ["cli"]
