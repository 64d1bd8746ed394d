"""Layered configuration loading.

Every layer (defaults, YAML file, ``TRACKARR_*`` environment, CLI flags) is
first brought into the sectioned shape of ``config.yaml`` and then folded
onto the previous one. Validation happens once, on the folded result.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

Layer = dict[str, Any]

_TOP_LEVEL_KEYS = ("app_name", "environment")

# Flat keys (env vars, CLI flags) are "<prefix><key in section>".
_FLAT_PREFIXES: dict[str, str] = {
    "sites": "",
    "http": "http_",
    "search": "search_",
    "logging": "log_",
}


def _flat_keys() -> dict[str, tuple[str, str]]:
    flat: dict[str, tuple[str, str]] = {}
    for section, prefix in _FLAT_PREFIXES.items():
        for key in DEFAULT_CONFIG[section]:
            # logging.level -> log_level, sites.sites_dir -> sites_dir
            flat[f"{prefix}{key}"] = (section, key)
    return flat


_FLAT_KEYS = _flat_keys()


def _sectioned(data: Mapping[str, Any]) -> Layer:
    """Bring one layer into the sectioned shape; unknown keys are dropped."""
    layer: Layer = {key: data[key] for key in _TOP_LEVEL_KEYS if key in data}

    for section in _FLAT_PREFIXES:
        block = data.get(section)
        if isinstance(block, Mapping):
            layer[section] = dict(block)

    for flat_key, (section, key) in _FLAT_KEYS.items():
        if flat_key in data:
            layer.setdefault(section, {})[key] = data[flat_key]
    return layer


def _fold(layers: Iterable[Layer]) -> Layer:
    """Later layers win; sections merge key by key."""
    result: Layer = {}
    for layer in layers:
        for key, value in layer.items():
            current = result.get(key)
            if isinstance(current, dict) and isinstance(value, Mapping):
                result[key] = {**current, **value}
            else:
                result[key] = value
    return result


def _require(path: Path) -> Path:
    if not path.exists():
        raise FileNotFoundError(path)
    return path


def _yaml_layer(config_path: Path) -> Layer:
    parsed = yaml.safe_load(_require(config_path).read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return _sectioned(parsed)


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """
    Build the validated AppConfig.

    Precedence: defaults < YAML file < env vars (.env included) < cli overrides.
    Reads files only; never creates them.

    Raises:
        FileNotFoundError: An explicitly given config or .env path is missing.
        ValueError: The YAML file is not a mapping.
        pydantic.ValidationError: The merged values are invalid.
    """
    # .env values join the environment, so real env vars still take precedence.
    if dotenv_path is not None:
        load_dotenv(_require(dotenv_path), override=False)

    layers = [_sectioned(deepcopy(DEFAULT_CONFIG))]
    if config_path is not None:
        layers.append(_yaml_layer(config_path))
    layers.append(_sectioned(EnvOverrides().to_update_dict()))
    layers.append(_sectioned(cli_overrides or {}))

    return AppConfig.model_validate(_fold(layers))
