"""Configuration loading for spin-info (.spin-info.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".spin-info.yml"
CONFIG_ENV_VAR = "SPIN_INFO_CONFIG"


@dataclass
class RegistryCredentials:
    """Credentials presented when a registry asks for a bearer token."""

    username: Optional[str] = None
    password: Optional[str] = None

    def is_set(self) -> bool:
        return bool(self.username and self.password)


@dataclass
class InfoConfig:
    """Represents the settings defined in .spin-info.yml."""

    cache_dir: Optional[Path] = None
    insecure: bool = False
    request_timeout: float = 30.0
    registry: RegistryCredentials = field(default_factory=RegistryCredentials)

    def with_cache_dir(self, cache_dir: Optional[Path]) -> "InfoConfig":
        """Return a copy with ``cache_dir`` overridden when one is given."""
        if cache_dir is None:
            return self
        return InfoConfig(
            cache_dir=cache_dir.expanduser(),
            insecure=self.insecure,
            request_timeout=self.request_timeout,
            registry=self.registry,
        )


def default_cache_dir() -> Path:
    """Return the cache root used when neither the CLI nor config sets one."""
    base = os.getenv("XDG_CACHE_HOME")
    root = Path(base) if base else Path.home() / ".cache"
    return root / "spin-info"


def load_config(config_path: Path | None = None) -> InfoConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    if config_path is None:
        env_value = os.getenv(CONFIG_ENV_VAR)
        config_path = Path(env_value) if env_value else Path.cwd()
    config_file = _resolve_config_path(config_path)

    if not config_file.exists():
        return InfoConfig()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    cache_dir_str = _as_str(data.get("cache_dir"))
    cache_dir = None
    if cache_dir_str:
        cache_dir = Path(cache_dir_str).expanduser()
        if not cache_dir.is_absolute():
            cache_dir = config_file.parent / cache_dir

    registry_data = _as_dict(data.get("registry"))
    registry = RegistryCredentials(
        username=_as_str(registry_data.get("username")),
        password=_as_str(registry_data.get("password")),
    )

    timeout = _as_float(data.get("request_timeout"))

    return InfoConfig(
        cache_dir=cache_dir,
        insecure=_as_bool(data.get("insecure")) or False,
        request_timeout=timeout if timeout and timeout > 0 else 30.0,
        registry=registry,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "InfoConfig",
    "RegistryCredentials",
    "default_cache_dir",
    "load_config",
]
