"""
Configuration management for Sysreport.

Supports configuration via YAML files, environment variables, and programmatic access.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from sysreport.identity import resolve_cache_root

DEFAULT_CONFIG_PATHS = [
    Path("/etc/sysreport/config.yaml"),
    Path.home() / ".config" / "sysreport" / "config.yaml",
    Path("sysreport-config.yaml"),
]


@dataclass
class Config:
    """
    Configuration container for Sysreport.

    Priority (highest to lowest):
    1. Programmatic values passed to __init__
    2. Environment variables (prefixed with SYSREPORT_)
    3. Config file values
    4. Default values
    """

    # Upload settings
    upload_url: str | None = None
    upload_timeout: int = 30
    upload_retries: int = 1

    # Cache settings
    cache_dir: str | None = None
    namespace: str = "sysreport"

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create config from a dictionary."""
        # Nested sections map onto prefixed field names
        flat = {}
        for key, value in data.items():
            if isinstance(value, dict):
                for subkey, subvalue in value.items():
                    flat[f"{key}_{subkey}"] = subvalue
                    flat.setdefault(subkey, subvalue)
            else:
                flat[key] = value

        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in flat.items() if k in known_fields}

        return cls(**filtered)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """
        Load configuration with full resolution order.

        Args:
            config_path: Explicit path to config file. If None, searches
                        default locations.

        Returns:
            Fully resolved Config instance.
        """
        base_config: dict[str, Any] = {}

        if config_path:
            path = Path(config_path)
            if path.exists():
                with open(path) as f:
                    base_config = yaml.safe_load(f) or {}
        else:
            for path in DEFAULT_CONFIG_PATHS:
                if path.exists():
                    with open(path) as f:
                        base_config = yaml.safe_load(f) or {}
                    break

        config = cls.from_dict(base_config) if base_config else cls()
        config._apply_env_overrides()

        return config

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        env_mappings = {
            "SYSREPORT_UPLOAD_URL": "upload_url",
            "SYSREPORT_UPLOAD_TIMEOUT": "upload_timeout",
            "SYSREPORT_UPLOAD_RETRIES": "upload_retries",
            "SYSREPORT_CACHE_DIR": "cache_dir",
            "SYSREPORT_LOG_LEVEL": "log_level",
            "SYSREPORT_LOG_FILE": "log_file",
        }

        for env_var, attr in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                current = getattr(self, attr)
                if isinstance(current, int):
                    setattr(self, attr, int(value))
                else:
                    setattr(self, attr, value)

    def cache_root(self) -> Path:
        """Return the effective cache root directory."""
        if self.cache_dir:
            return Path(self.cache_dir).expanduser()
        return resolve_cache_root()

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "upload": {
                "url": self.upload_url,
                "timeout": self.upload_timeout,
                "retries": self.upload_retries,
            },
            "cache": {
                "dir": self.cache_dir,
                "namespace": self.namespace,
            },
            "log": {
                "level": self.log_level,
                "file": self.log_file,
            },
        }

    def save(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
