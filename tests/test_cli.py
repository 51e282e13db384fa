from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest
from chatlog import main as main_module
from chatlog.main import cli
from chatlog.persistence.chatlog_store import SQLiteChatLogStore
from chatlog.persistence.connection import SQLiteConnectionProvider
from click.testing import CliRunner


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main_module, "setup_logging", lambda *args, **kwargs: None)


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "chatlog.yaml"
    path.write_text(
        f"chatlog:\n  db_path: {tmp_path / 'chatlogs.db'}\n  logging:\n    level: WARNING\n",
        encoding="utf-8",
    )
    return path


async def _seed(db_path: Path) -> None:
    provider = SQLiteConnectionProvider(db_path)
    store = SQLiteChatLogStore(provider, mute_errors=False)
    try:
        for ts in (10, 20, 30):
            await store.log_interaction("u1", [{"text": "ok"}], {"text": f"m{ts}"}, {"flag": "u1", "timestamp": ts})
    finally:
        await provider.close()


def test_migrate_then_up_to_date(config_path: Path) -> None:
    runner = CliRunner()

    first = runner.invoke(cli, ["migrate", "--config", str(config_path)])
    second = runner.invoke(cli, ["migrate", "--config", str(config_path)])

    assert first.exit_code == 0, first.output
    assert "001_chatlogs.sql" in first.output
    assert second.exit_code == 0
    assert "up to date" in second.output


def test_history_prints_json_lines(config_path: Path, tmp_path: Path) -> None:
    asyncio.run(_seed(tmp_path / "chatlogs.db"))

    result = CliRunner().invoke(
        cli, ["history", "u1", "--limit", "2", "--end-at", "25", "--config", str(config_path)]
    )

    assert result.exit_code == 0, result.output
    lines = [json.loads(line) for line in result.output.splitlines() if line.strip()]
    assert [line["timestamp"] for line in lines] == [10, 20]
    assert all("err" not in line for line in lines)


def test_history_requires_database(config_path: Path) -> None:
    result = CliRunner().invoke(cli, ["history", "u1", "--config", str(config_path)])

    assert result.exit_code != 0
    assert "database not found" in result.output


def test_missing_config_is_reported(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["migrate", "--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code != 0
    assert "config file not found" in result.output
