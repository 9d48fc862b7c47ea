from __future__ import annotations

import os
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

DEFAULT_CONFIG_NAME = "httplens.toml"
LOG_LEVEL_ENV = "HTTPLENS_LOG_LEVEL"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def _section(data: TomlTable, name: str) -> TomlTable:
    section = data.get(name, {})
    return section if isinstance(section, dict) else {}


def logging_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    return _section(load_config(root=root, config_path=config_path), "logging")


def transcript_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    return _section(load_config(root=root, config_path=config_path), "transcript")


def log_level(section: TomlTable | None) -> str:
    override = os.getenv(LOG_LEVEL_ENV, "").strip()
    if override:
        return override.upper()
    if section is None:
        return "INFO"
    value = section.get("level")
    if isinstance(value, str) and value.strip():
        return value.strip().upper()
    return "INFO"


def _as_path(value: TomlValue, root: Path | None) -> Path | None:
    if not isinstance(value, str) or not value.strip():
        return None
    path = Path(value.strip()).expanduser()
    if not path.is_absolute() and root is not None:
        path = root / path
    return path


def log_file(section: TomlTable | None, root: Path | None = None) -> Path | None:
    if section is None:
        return None
    return _as_path(section.get("file"), root)


def transcript_fallback_dir(
    section: TomlTable | None, root: Path | None = None
) -> Path | None:
    if section is None:
        return None
    return _as_path(section.get("fallback_dir"), root)
