"""Layering of configuration sources into a validated `EdmvConfig`."""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import EdmvConfig

ENV_PREFIX = "EDMV__"


def build_config(*layers: Mapping[str, Any]) -> EdmvConfig:
    """Validate the defaults overlaid with each layer in turn.

    Later layers win, so callers pass the config file before the environment.

    Raises:
        ConfigError: If the merged data does not describe a valid configuration.
    """
    merged: dict[str, Any] = EdmvConfig().model_dump(mode="python")
    for layer in layers:
        merged = _overlay(merged, layer)
    try:
        return EdmvConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect `EDMV__SECTION__KEY` variables as a nested mapping of YAML-parsed values."""
    overrides: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        keys = [part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part]
        if not keys:
            continue
        try:
            value: Any = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        assign(overrides, keys, value, replace=True)
    return overrides


def assign(target: dict[str, Any], keys: list[str], value: Any, *, replace: bool = False) -> None:
    """Store ``value`` under the nested ``keys`` of ``target``, creating sections as needed.

    Raises:
        ConfigError: If a key on the way is a scalar and ``replace`` is off.
    """
    node = target
    for depth, key in enumerate(keys[:-1], start=1):
        child = node.get(key)
        if not isinstance(child, dict):
            if child is not None and not replace:
                raise ConfigError(f"'{'.'.join(keys[:depth])}' is not a section.")
            child = node[key] = {}
        node = child
    node[keys[-1]] = value


def _overlay(base: Mapping[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    result = deepcopy(dict(base))
    for key, value in layer.items():
        current = result.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            result[key] = _overlay(current, value)
        else:
            result[key] = deepcopy(value)
    return result


__all__ = ["ENV_PREFIX", "assign", "build_config", "env_overrides"]
