"""
page-order — runtime config loader.

Layers, lowest first: built-in defaults, ``page_order.toml``, ``PAGE_ORDER_*``
environment variables, CLI overrides. Every config key lives one level deep
(``section.key``), so each layer is a plain ``{section: {key: value}}`` overlay.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from page_order.config.schema import (
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "page_order.toml"
ENV_PREFIX: Final[str] = "PAGE_ORDER_"

# Environment variable -> (section, key, value type).
_ENV_VARIABLES: Final[dict[str, tuple[str, str, type]]] = {
    f"{ENV_PREFIX}INPUT_PATH": ("input", "path", str),
    f"{ENV_PREFIX}BENCH_ITERATIONS": ("bench", "iterations", int),
    f"{ENV_PREFIX}BENCH_WARMUP": ("bench", "warmup", int),
    f"{ENV_PREFIX}OBSERVABILITY_LOG_LEVEL": ("observability", "log_level", str),
    f"{ENV_PREFIX}OBSERVABILITY_LOG_DIR": ("observability", "log_dir", str),
    f"{ENV_PREFIX}OBSERVABILITY_LOG_TO_STDERR": ("observability", "log_to_stderr", bool),
}

_TRUE_WORDS: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})

Overlay = dict[str, dict[str, object]]


class ConfigLoadError(ValueError):
    """Raised when a config layer cannot be read or coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return the validated effective config, paths resolved against the config file."""

    if config_path is None:
        path = (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    else:
        path = Path(config_path).expanduser().resolve()

    layers = (
        _read_toml(path, required=config_path is not None),
        _env_overlay(os.environ if environ is None else environ),
        _cli_overlay(cli_overrides or {}),
    )
    config: dict[str, Any] = dict(default_config())
    for layer in layers:
        config = merge_config(config, layer)

    return normalize_paths(assert_valid_config(config), base_dir=path.parent)


def normalize_paths(config: Mapping[str, Any], *, base_dir: Path) -> dict[str, Any]:
    """Make relative path fields absolute under ``base_dir`` (posix form)."""

    normalized = merge_config({}, config)
    for section, key in PATH_FIELDS:
        raw = normalized.get(section, {}).get(key)
        if not isinstance(raw, str):
            continue
        candidate = Path(os.path.expandvars(raw)).expanduser()
        if not candidate.is_absolute():
            candidate = base_dir / candidate
        normalized[section][key] = Path(os.path.normpath(candidate)).as_posix()
    return normalized


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Render config as compact JSON with sorted keys."""

    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _read_toml(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.is_file():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _env_overlay(environ: Mapping[str, str]) -> Overlay:
    overlay: Overlay = {}
    for name, (section, key, kind) in _ENV_VARIABLES.items():
        raw = environ.get(name)
        if raw is not None:
            overlay.setdefault(section, {})[key] = _coerce_env(name, raw.strip(), kind)
    return overlay


def _coerce_env(name: str, value: str, kind: type) -> object:
    if kind is int:
        try:
            return int(value)
        except ValueError:
            raise ConfigLoadError(f"{name} must be an integer, got {value!r}") from None
    if kind is bool:
        word = value.lower()
        if word in _TRUE_WORDS or word in _FALSE_WORDS:
            return word in _TRUE_WORDS
        raise ConfigLoadError(f"{name} must be a boolean (true/false/yes/no/on/off/1/0)")
    return value


def _cli_overlay(overrides: Mapping[str, object]) -> Overlay:
    overlay: Overlay = {}
    for dotted, value in overrides.items():
        if value is None:
            continue
        section, dot, key = dotted.partition(".")
        if not dot or not section or not key or "." in key:
            raise ConfigLoadError(f"CLI override {dotted!r} must look like 'section.key'")
        overlay.setdefault(section, {})[key] = value
    return overlay


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "dump_effective_config",
    "load_config",
    "normalize_paths",
]
