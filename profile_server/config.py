from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

LOGGER = logging.getLogger(__name__)

DEFAULT_MOUNT = Path("/mnt")
DEFAULT_PORT = 8888

_ENV_PREFIX = "PROFILE_SERVER_"


class ConfigError(Exception):
    """Raised when the server configuration is invalid."""


def resolve_log_level(value: Optional[str]) -> int:
    """Resolve log level from string or numeric value."""
    if not value:
        return logging.INFO
    raw = value.strip()
    if raw.isdigit():
        return int(raw)
    return getattr(logging, raw.upper(), logging.INFO)


@dataclass(frozen=True)
class ServerConfig:
    """Paths, token and listener settings fixed for the process lifetime."""

    profile_file: Path = DEFAULT_MOUNT / "profile"
    radio_silence_file: Path = DEFAULT_MOUNT / "radio-silence"
    radio_silence_counter_file: Path = DEFAULT_MOUNT / "radio-silence-counter"
    radio_status_file: Path = DEFAULT_MOUNT / "radio-status.json"
    app_info_file: Path = DEFAULT_MOUNT / "app-info-status.json"
    token: str = ""
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    def with_overrides(self, overrides: Mapping[str, Any]) -> "ServerConfig":
        values = _normalize(overrides)
        return replace(self, **values) if values else self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        environ = os.environ if environ is None else environ
        raw: Dict[str, Any] = {}
        for item in fields(cls):
            value = environ.get(_ENV_PREFIX + item.name.upper())
            if value is not None:
                raw[item.name] = value
        if "LOG_LEVEL" in environ and "log_level" not in raw:
            raw["log_level"] = environ["LOG_LEVEL"]
        return cls().with_overrides(raw)

    def to_dict(self) -> Dict[str, Any]:
        return {
            item.name: str(getattr(self, item.name))
            if isinstance(getattr(self, item.name), Path)
            else getattr(self, item.name)
            for item in fields(self)
        }


def _normalize(raw: Mapping[str, Any]) -> Dict[str, Any]:
    known = {item.name: item for item in fields(ServerConfig)}
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        name = str(key).replace("-", "_")
        if name not in known:
            raise ConfigError(f"Unknown configuration key: {key}")
        if value is None:
            continue
        if name == "port":
            try:
                port = int(value)
            except (TypeError, ValueError) as exc:
                raise ConfigError("port must be an integer") from exc
            if not 0 < port < 65536:
                raise ConfigError("port must be between 1 and 65535")
            values[name] = port
        elif name.endswith("_file"):
            if not str(value).strip():
                raise ConfigError(f"{name} must not be empty")
            values[name] = Path(str(value))
        else:
            values[name] = str(value)
    return values


def load_yaml_config(path: Path, base: Optional[ServerConfig] = None) -> ServerConfig:
    """Load a YAML mapping of ServerConfig fields on top of *base*."""
    base = base or ServerConfig()
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    try:
        data = yaml.safe_load(text) if text.strip() else {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")
    LOGGER.debug("Loaded configuration from %s", path)
    return base.with_overrides(data)
