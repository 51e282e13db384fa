from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseModel):
    mute_errors: bool = True
    """Write failures are reported to the diagnostic sink and not raised."""
    revive_dates: bool = False
    """Turn ISO-8601 strings in read payloads back into datetimes."""
    default_limit: int = Field(default=10, ge=0)


class MigrationsConfig(BaseModel):
    skip: bool = False
    table: str = "_migrations"
    directory: Path | None = None

    @field_validator("table")
    @classmethod
    def _validate_table_name(cls, value: str) -> str:
        if not value.replace("_", "").isalnum():
            raise ValueError("migrations.table must be alphanumeric with underscores")
        return value


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False


class ChatlogSettings(BaseSettings):
    db_path: Path = Path("./data/chatlogs.db")
    storage: StorageConfig = Field(default_factory=StorageConfig)
    migrations: MigrationsConfig = Field(default_factory=MigrationsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="CHATLOG_",
        env_nested_delimiter="__",
        extra="ignore",
    )


def _coerce_env_value(value: str) -> object:
    parsed = yaml.safe_load(value)
    return value if parsed is None else parsed


def _set_nested(mapping: dict[str, object], path: list[str], value: object) -> None:
    current = mapping
    for key in path[:-1]:
        existing = current.get(key)
        if not isinstance(existing, dict):
            existing = {}
            current[key] = existing
        current = existing
    current[path[-1]] = value


def _apply_env_overrides(data: dict[str, object]) -> dict[str, object]:
    merged = dict(data)
    prefix = "CHATLOG_"
    for key, raw_value in os.environ.items():
        if not key.startswith(prefix):
            continue
        path = key[len(prefix) :].lower().split("__")
        _set_nested(merged, path, _coerce_env_value(raw_value))
    return merged


def load_config(path: str | Path = "config/chatlog.yaml") -> ChatlogSettings:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")

    loaded = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(loaded, dict):
        raise ValueError("config file must contain a top-level mapping")

    raw = loaded.get("chatlog", loaded)
    if not isinstance(raw, dict):
        raise ValueError("chatlog config section must be a mapping")

    merged = _apply_env_overrides(raw)
    return ChatlogSettings.model_validate(merged)


__all__ = [
    "ChatlogSettings",
    "LoggingConfig",
    "MigrationsConfig",
    "StorageConfig",
    "load_config",
]
