"""
proptag — host settings and project configuration loader.

File: src/proptag/config/loader.py

Purpose
- Load effective host settings from defaults, ``proptag.toml``, ``PROPTAG_``
  environment variables and CLI overrides.
- Load and initialize the JSON project configuration file that extends the
  property schema.

What should be included in this file
- Precedence logic: CLI > env (PROPTAG_) > file > defaults.
- TOML loading via ``tomllib``; JSON project config via ``json``.
- Deterministic environment variable mapping and coercion.

Functional requirements
- A missing settings file is only an error when its path was given explicitly.
- A missing project configuration file is never an error.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Literal

from proptag.config.schema import assert_valid_config, default_config, merge_config
from proptag.constants import DEFAULT_PROJECT_CONFIG_FILE, DEFAULT_SETTINGS_FILE
from proptag.engine.properties import build_snapshot

DEFAULT_CONFIG_FILE: Final[str] = DEFAULT_SETTINGS_FILE
ENV_PREFIX: Final[str] = "PROPTAG_"

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

_ValueType = Literal["str", "bool", "list"]


@dataclass(frozen=True, slots=True)
class _Binding:
    path: tuple[str, ...]
    value_type: _ValueType


_BINDINGS: Final[tuple[_Binding, ...]] = (
    _Binding(("lint", "enabled"), "bool"),
    _Binding(("lint", "file_types"), "list"),
    _Binding(("lint", "ignore_patterns"), "list"),
    _Binding(("lint", "project_config"), "str"),
    _Binding(("observability", "log_level"), "str"),
    _Binding(("observability", "log_format"), "str"),
)


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or overrides cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
    base_dir: str | Path | None = None,
) -> dict[str, Any]:
    """Load effective settings with deterministic precedence: CLI > env > file > defaults."""

    resolved_path = _resolve_config_path(config_path, base_dir)
    explicit_path = config_path is not None
    env_map = dict(os.environ if environ is None else environ)

    file_payload = _load_toml_file(resolved_path, required=explicit_path)
    merged = merge_config(default_config(), file_payload)
    merged = assert_valid_config(merged)

    merged = merge_config(merged, _collect_env_overrides(env_map))
    merged = merge_config(merged, _materialize_cli_overrides(cli_overrides or {}))
    return assert_valid_config(merged)


def load_project_config(
    root: str | Path,
    filename: str = DEFAULT_PROJECT_CONFIG_FILE,
) -> dict[str, Any]:
    """Read the JSON project configuration at ``root``; absent means empty."""

    path = Path(root) / filename
    if not path.exists():
        return {}

    try:
        parsed = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigLoadError(f"invalid JSON in {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"unable to read project config {path}: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ConfigLoadError(f"project config root must be an object: {path}")
    return parsed


def init_project_config(
    root: str | Path,
    filename: str = DEFAULT_PROJECT_CONFIG_FILE,
) -> Path:
    """Write the project configuration, merging an existing file over the defaults."""

    path = Path(root) / filename
    existing = load_project_config(root, filename)
    snapshot = build_snapshot(project=existing)
    payload = snapshot.to_project_payload()
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path


def effective_config(config: Mapping[str, object]) -> dict[str, Any]:
    """Return a deterministic copy of ``config`` suitable for display and logging."""

    return merge_config({}, config)


def dump_effective_config(config: Mapping[str, object]) -> str:
    return json.dumps(
        effective_config(config), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def env_name_for_path(path: tuple[str, ...]) -> str:
    return ENV_PREFIX + "_".join(part.upper() for part in path)


def _resolve_config_path(config_path: str | Path | None, base_dir: str | Path | None) -> Path:
    if config_path is None:
        root = Path.cwd() if base_dir is None else Path(base_dir)
        return (root / DEFAULT_CONFIG_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            parsed = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc

    return parsed


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for binding in _BINDINGS:
        env_name = env_name_for_path(binding.path)
        raw = environ.get(env_name)
        if raw is None:
            continue
        value = _coerce_env(raw, binding.value_type, env_name, binding.path)
        _set_nested(overrides, binding.path, value)
    return overrides


def _coerce_env(
    raw: str,
    value_type: _ValueType,
    env_name: str,
    path: tuple[str, ...],
) -> object:
    value = raw.strip()
    if value_type == "str":
        return value
    if value_type == "list":
        return [item.strip() for item in value.split(",") if item.strip()]

    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise ConfigLoadError(
        f"{env_name} -> {'.'.join(path)} must be a boolean (true/false/1/0/yes/no/on/off)"
    )


def _materialize_cli_overrides(cli_overrides: Mapping[str, object]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for key in sorted(cli_overrides):
        value = cli_overrides[key]
        path = tuple(part for part in key.split(".") if part)
        if not path:
            raise ConfigLoadError(f"invalid CLI override key {key!r}")
        _set_nested(payload, path, value)
    return payload


def _set_nested(target: dict[str, Any], path: tuple[str, ...], value: object) -> None:
    cursor = target
    for part in path[:-1]:
        next_node = cursor.get(part)
        if not isinstance(next_node, dict):
            next_node = {}
            cursor[part] = next_node
        cursor = next_node
    cursor[path[-1]] = value


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "dump_effective_config",
    "effective_config",
    "env_name_for_path",
    "init_project_config",
    "load_config",
    "load_project_config",
]
