"""
proptag — host settings schema and validation.

File: src/proptag/config/schema.py

Purpose
- Define the built-in host settings and strict validation rules.

What should be included in this file
- Defaults for the ``[lint]`` and ``[observability]`` sections.
- Validation returning structured issues (field path + message).
- Deterministic deep-merge helpers.

Functional requirements
- Reject unknown fields and wrong types with one issue per problem.
- Leave ``lint.custom_properties`` entries to the property schema merge, which
  recovers from malformed entries one at a time.

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

from proptag.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_FILE_TYPES,
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_PROJECT_CONFIG_FILE,
)

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION
LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS: Final[tuple[str, ...]] = ("console", "json")


class MetaConfig(TypedDict):
    schema_version: int


class LintConfig(TypedDict):
    enabled: bool
    file_types: list[str]
    ignore_patterns: list[str]
    project_config: str
    custom_properties: dict[str, Any]


class ObservabilityConfig(TypedDict):
    log_level: str
    log_format: Literal["console", "json"]


class ProptagConfig(TypedDict):
    meta: MetaConfig
    lint: LintConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[ProptagConfig] = {
    "meta": {"schema_version": CONFIG_SCHEMA_VERSION},
    "lint": {
        "enabled": True,
        "file_types": list(DEFAULT_FILE_TYPES),
        "ignore_patterns": list(DEFAULT_IGNORE_PATTERNS),
        "project_config": DEFAULT_PROJECT_CONFIG_FILE,
        "custom_properties": {},
    },
    "observability": {
        "log_level": "WARNING",
        "log_format": "console",
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> ProptagConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    _reject_unknown_keys(root, {"meta", "lint", "observability"}, "", issues)
    normalized: dict[str, Any] = {}

    meta = _section(root, "meta", issues)
    if meta is not None:
        _reject_unknown_keys(meta, {"schema_version"}, "meta", issues)
        version = _as_int(meta.get("schema_version"), "meta.schema_version", issues)
        if version is not None and version != ConfigSchemaVersion:
            issues.add(
                "meta.schema_version",
                f"unsupported schema version {version}; expected {ConfigSchemaVersion}",
            )
        normalized["meta"] = {"schema_version": version}

    lint = _section(root, "lint", issues)
    if lint is not None:
        normalized["lint"] = _validate_lint(lint, issues)

    observability = _section(root, "observability", issues)
    if observability is not None:
        normalized["observability"] = _validate_observability(observability, issues)

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_lint(payload: Mapping[str, object], issues: _IssueCollector) -> dict[str, Any]:
    _reject_unknown_keys(
        payload,
        {"enabled", "file_types", "ignore_patterns", "project_config", "custom_properties"},
        "lint",
        issues,
    )
    file_types = _as_str_list(payload.get("file_types"), "lint.file_types", issues)
    if file_types is not None:
        for index, suffix in enumerate(file_types):
            if not suffix.startswith("."):
                issues.add(f"lint.file_types[{index}]", "file type must start with '.'")

    custom = payload.get("custom_properties")
    if not isinstance(custom, Mapping):
        issues.add("lint.custom_properties", f"expected object, got {type(custom).__name__}")
        custom = {}

    return {
        "enabled": _as_bool(payload.get("enabled"), "lint.enabled", issues),
        "file_types": file_types,
        "ignore_patterns": _as_str_list(
            payload.get("ignore_patterns"), "lint.ignore_patterns", issues
        ),
        "project_config": _as_str(payload.get("project_config"), "lint.project_config", issues),
        "custom_properties": _deep_copy_mapping(custom),
    }


def _validate_observability(
    payload: Mapping[str, object], issues: _IssueCollector
) -> dict[str, Any]:
    _reject_unknown_keys(payload, {"log_level", "log_format"}, "observability", issues)
    level = _as_str(payload.get("log_level"), "observability.log_level", issues)
    if level is not None:
        level = level.upper()
        if level not in LOG_LEVELS:
            issues.add(
                "observability.log_level",
                f"invalid value {level!r}; expected one of: {', '.join(LOG_LEVELS)}",
            )
    log_format = _as_str(payload.get("log_format"), "observability.log_format", issues)
    if log_format is not None and log_format not in LOG_FORMATS:
        issues.add(
            "observability.log_format",
            f"invalid value {log_format!r}; expected one of: {', '.join(LOG_FORMATS)}",
        )
    return {"log_level": level, "log_format": log_format}


def _section(
    root: Mapping[str, object], key: str, issues: _IssueCollector
) -> dict[str, object] | None:
    if key not in root:
        issues.add(key, "missing required section")
        return None
    return _as_object(root[key], key, issues)


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(value: object, path: str, issues: _IssueCollector) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    return value


def _as_str_list(value: object, path: str, issues: _IssueCollector) -> list[str] | None:
    if isinstance(value, str) or not isinstance(value, Sequence):
        issues.add(path, f"expected list of strings, got {type(value).__name__}")
        return None
    out: list[str] = []
    for index, item in enumerate(value):
        parsed = _as_str(item, f"{path}[{index}]", issues)
        if parsed is not None:
            out.append(parsed)
    return out


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            else:
                nested: dict[str, Any] = {}
                _merge_into(nested, value)
                target[key] = nested
        else:
            target[key] = _deep_copy_value(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in value:
        out[key] = _deep_copy_value(value[key])
    return out


def _deep_copy_value(value: object) -> Any:
    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for key, item in value.items():
            if isinstance(key, str):
                out[key] = _deep_copy_value(item)
        return out
    if isinstance(value, list):
        return [_deep_copy_value(item) for item in value]
    if isinstance(value, tuple):
        return [_deep_copy_value(item) for item in value]
    return copy.deepcopy(value)


__all__ = [
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "LintConfig",
    "ObservabilityConfig",
    "ProptagConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "validate_config",
]
