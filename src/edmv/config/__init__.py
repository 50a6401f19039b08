"""Configuration file handling for edmv."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import EdmvConfig
from .resolver import ENV_PREFIX, assign, build_config, env_overrides

DEFAULT_CONFIG_PATH = Path("~/.edmv/config.yaml")
_HEADER = (
    "# edmv configuration; `edmv config set KEY --value VALUE` or `edmv config edit` rewrite it.\n"
    "# Environment variables such as EDMV__RENAME__FORCE=true take precedence.\n"
)


class ConfigManager:
    """Read, validate, and rewrite the YAML configuration file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    def load(self, *, include_env: bool = True) -> EdmvConfig:
        """Return the effective configuration: defaults < file < environment.

        Raises:
            ConfigError: If the file cannot be parsed or a value is invalid.
        """
        self.ensure_exists()
        layers = [self.file_data()]
        if include_env:
            layers.append(env_overrides(self._env))
        return build_config(*layers)

    def file_data(self) -> dict[str, Any]:
        """Return the mapping stored in the configuration file."""
        if not self.config_path.exists():
            return {}
        return _parse(self.config_path.read_text(encoding="utf-8"))

    def read_text(self) -> str:
        if not self.config_path.exists():
            return ""
        return self.config_path.read_text(encoding="utf-8")

    def ensure_exists(self) -> Path:
        """Write the defaults if no configuration file exists yet."""
        if not self.config_path.exists():
            self.save(EdmvConfig().model_dump(mode="python"))
        return self.config_path

    def set_value(self, key: str, value: Any) -> None:
        """Validate and store ``value`` under a dotted ``key`` such as ``rename.force``.

        Raises:
            ConfigError: If the key is empty, crosses a scalar, or yields an invalid config.
        """
        keys = [part.strip() for part in key.split(".") if part.strip()]
        if not keys:
            raise ConfigError("KEY must be a dotted path such as 'rename.force'.")
        data = self.file_data()
        assign(data, keys, value)
        build_config(data)
        self.save(data)

    def replace_text(self, text: str) -> None:
        """Validate edited file contents and store them.

        Raises:
            ConfigError: If the text is not a YAML mapping of valid settings.
        """
        data = _parse(text)
        build_config(data)
        self.save(data)

    def save(self, data: Mapping[str, Any]) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self.config_path.write_text(
            f"{_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8"
        )


def _parse(text: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a top-level mapping.")
    return data


__all__ = [
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "EdmvConfig",
    "build_config",
]
