"""Daemon configuration loaded from a JSON file."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple

DEFAULT_PATH = "config/config.json"

_INT_MIN, _INT_MAX = -(2**63), 2**63 - 1


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or decoded."""


@dataclass
class CollectorsConfig:
    seconds_save_stats: int = 0
    clear_stats_seconds_interval: int = 0
    enable_cpu_usage: bool = False
    enable_load_average: bool = False
    enable_disk_load: bool = False
    enable_filesystem_info: bool = False


@dataclass
class GrpcConfig:
    port: int = 0


@dataclass
class Config:
    debug_mode: bool = False
    grpc: GrpcConfig = field(default_factory=GrpcConfig)
    collectors: CollectorsConfig = field(default_factory=CollectorsConfig)


_COLLECTOR_KEYS: Dict[str, Tuple[str, type]] = {
    "secondsSaveStats": ("seconds_save_stats", int),
    "clearStatsSecondsInterval": ("clear_stats_seconds_interval", int),
    "enableCpuUsage": ("enable_cpu_usage", bool),
    "enableLoadAverage": ("enable_load_average", bool),
    "enableDiskLoad": ("enable_disk_load", bool),
    "enableFilesystemInfo": ("enable_filesystem_info", bool),
}
_FOLDED_KEYS = {key.casefold(): spec for key, spec in _COLLECTOR_KEYS.items()}


def _lookup(key: str) -> Tuple[str, type] | None:
    return _COLLECTOR_KEYS.get(key) or _FOLDED_KEYS.get(key.casefold())


def _convert(key: str, value: Any, kind: type) -> Any:
    if kind is bool:
        if not isinstance(value, bool):
            raise ConfigError(f"failed to decode config file: {key} must be a boolean")
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"failed to decode config file: {key} must be an integer")
    if not _INT_MIN <= value <= _INT_MAX:
        raise ConfigError(f"failed to decode config file: {key} is out of range")
    return value


def _apply(target: CollectorsConfig, data: Any) -> None:
    if data is None:
        return
    if not isinstance(data, dict):
        raise ConfigError("failed to decode config file: expected a JSON object")
    for key, value in data.items():
        spec = _lookup(key)
        if spec is None or value is None:
            continue
        attribute, kind = spec
        setattr(target, attribute, _convert(key, value, kind))


def load(path: str | Path = DEFAULT_PATH) -> Config:
    """Read the collectors settings from the JSON file at ``path``."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"failed to open config file: {exc}") from exc

    try:
        data, _ = json.JSONDecoder().raw_decode(text.lstrip())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"failed to decode config file: {exc}") from exc

    collectors = CollectorsConfig()
    _apply(collectors, data)
    return Config(debug_mode=False, grpc=GrpcConfig(), collectors=collectors)