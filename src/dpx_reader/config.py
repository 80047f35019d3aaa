from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any

from dpx_reader.errors import MissingDependencyError


@dataclass
class ReaderConfig:
    rawcolor: bool = False
    default_subimage: int = 0
    tiff_export_float: bool = False
    log_level: str = "INFO"
    log_file: Path | None = None


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"config section '{name}' must be a mapping")
    return value


def _log_level(value: Any) -> str:
    name = str(value or "INFO").upper()
    if not isinstance(logging.getLevelName(name), int):
        raise ValueError(f"unknown log_level: {value}")
    return name


def _log_file(value: str | None, base: Path) -> Path | None:
    if not value:
        return None
    path = Path(value).expanduser()
    return path if path.is_absolute() else (base / path).resolve()


def config_from_dict(raw: dict[str, Any], base: Path) -> ReaderConfig:
    reader_raw = _section(raw, "reader")
    export_raw = _section(raw, "export")
    subimage = int(reader_raw.get("default_subimage", 0))
    if subimage < 0:
        raise ValueError("reader.default_subimage must be >= 0")
    return ReaderConfig(
        rawcolor=bool(reader_raw.get("rawcolor", False)),
        default_subimage=subimage,
        tiff_export_float=bool(export_raw.get("float", False)),
        log_level=_log_level(raw.get("log_level")),
        log_file=_log_file(raw.get("log_file"), base),
    )


def load_config(path: str | Path) -> ReaderConfig:
    """Read a YAML reader config; relative ``log_file`` paths resolve against the config's folder."""
    try:
        import yaml  # type: ignore
    except ImportError as exc:
        raise MissingDependencyError("PyYAML is required to read dpx-reader config files") from exc

    cfg_path = Path(path).expanduser().resolve()
    raw = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"config root must be a mapping: {cfg_path}")
    return config_from_dict(raw, cfg_path.parent)
