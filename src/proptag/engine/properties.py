"""
proptag — property schema

File: src/proptag/engine/properties.py

Purpose
- Define the built-in property definitions per scope and merge the project
  configuration file and host custom properties over them.

What should be included in this file
- ``PropertyDefinition`` / ``Severity`` value types.
- Field-level layer merging with per-entry recovery for malformed input.
- Immutable, versioned ``SchemaSnapshot`` objects and the ``PropertySchema``
  holder that swaps snapshots on explicit reload.

Functional requirements
- Layers in increasing priority: defaults, project file, host custom properties.
- An override replaces only the fields it names.
- Scope lists merge by ordered union.
- Reloading with unchanged inputs yields an identical snapshot.

Non-functional requirements
- Snapshots are safe to share between analyses once published.
"""

from __future__ import annotations

import hashlib
import json
import re
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Final

import structlog

from proptag.constants import (
    MASTER_FORMULA_TOKEN,
    SCOPE_FILE,
    SCOPE_FUNCTION,
    SCOPES,
    TAG_NAME_PATTERN,
)

_NAME_RE: Final[re.Pattern[str]] = re.compile(rf"^{TAG_NAME_PATTERN}$")
_DEFINITION_FIELDS: Final[frozenset[str]] = frozenset({"required", "severity", "description"})
_CUSTOM_FIELDS: Final[frozenset[str]] = _DEFINITION_FIELDS | {"scopes"}

SOURCE_DEFAULTS: Final[str] = "defaults"
SOURCE_PROJECT: Final[str] = "project"
SOURCE_CUSTOM: Final[str] = "custom"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class UnknownScopeError(KeyError):
    """Raised when a scope that the schema does not declare is requested."""


@dataclass(frozen=True, slots=True)
class PropertyDefinition:
    required: bool
    severity: Severity
    description: str

    def to_dict(self) -> dict[str, object]:
        return {
            "required": self.required,
            "severity": self.severity.value,
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class SchemaIssue:
    """A malformed layer entry that was ignored while merging."""

    source: str
    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"source": self.source, "path": self.path, "message": self.message}


DEFAULT_PROPERTIES: Final[Mapping[str, PropertyDefinition]] = MappingProxyType(
    {
        "author": PropertyDefinition(
            required=True,
            severity=Severity.ERROR,
            description="Author of the file",
        ),
        "description": PropertyDefinition(
            required=True,
            severity=Severity.ERROR,
            description="Description of the file or function",
        ),
        "params": PropertyDefinition(
            required=False,
            severity=Severity.WARNING,
            description="List of parameters and their descriptions",
        ),
        "returns": PropertyDefinition(
            required=False,
            severity=Severity.WARNING,
            description="Description of return value",
        ),
        "example": PropertyDefinition(
            required=False,
            severity=Severity.INFO,
            description="Usage example",
        ),
    }
)

DEFAULT_SCOPES: Final[Mapping[str, tuple[str, ...]]] = MappingProxyType(
    {
        SCOPE_FILE: ("author", "description"),
        SCOPE_FUNCTION: ("description", "params", "returns", "example"),
    }
)


@dataclass(frozen=True, slots=True)
class SchemaSnapshot:
    """Resolved schema; one snapshot is used for a whole analysis pass."""

    version: int
    fingerprint: str
    properties: Mapping[str, PropertyDefinition]
    scopes: Mapping[str, tuple[str, ...]]
    issues: tuple[SchemaIssue, ...] = ()

    def resolve(self, scope: str) -> Mapping[str, PropertyDefinition]:
        """Return the ordered definitions of ``scope``."""

        names = self.scopes.get(scope)
        if names is None:
            raise UnknownScopeError(scope)
        return MappingProxyType({name: self.properties[name] for name in names})

    def to_project_payload(self) -> dict[str, Any]:
        """Return the snapshot in project configuration file shape."""

        return {
            "properties": {
                name: definition.to_dict() for name, definition in self.properties.items()
            },
            "scopes": {scope: list(names) for scope, names in self.scopes.items()},
        }


def build_snapshot(
    *,
    project: Mapping[str, object] | None = None,
    custom_properties: Mapping[str, object] | None = None,
    version: int = 1,
) -> SchemaSnapshot:
    """Merge the three layers into a new snapshot."""

    merger = _LayerMerger()
    if project:
        merger.apply_project(project)
    if custom_properties:
        merger.apply_custom(custom_properties)
    return merger.snapshot(version=version)


def default_snapshot() -> SchemaSnapshot:
    return build_snapshot()


class PropertySchema:
    """Process-wide holder of the current schema snapshot.

    Readers take ``snapshot`` once per pass; ``reload`` builds a new snapshot
    and publishes it atomically.
    """

    def __init__(
        self,
        *,
        project: Mapping[str, object] | None = None,
        custom_properties: Mapping[str, object] | None = None,
        logger: Any | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        self._snapshot = build_snapshot(project=project, custom_properties=custom_properties)
        self._log_issues(self._snapshot)

    @property
    def snapshot(self) -> SchemaSnapshot:
        return self._snapshot

    def resolve(self, scope: str) -> Mapping[str, PropertyDefinition]:
        return self._snapshot.resolve(scope)

    def reload(
        self,
        *,
        project: Mapping[str, object] | None = None,
        custom_properties: Mapping[str, object] | None = None,
    ) -> SchemaSnapshot:
        """Rebuild the schema; the version only advances when content changes."""

        with self._lock:
            current = self._snapshot
            candidate = build_snapshot(
                project=project,
                custom_properties=custom_properties,
                version=current.version,
            )
            if candidate.fingerprint != current.fingerprint:
                candidate = build_snapshot(
                    project=project,
                    custom_properties=custom_properties,
                    version=current.version + 1,
                )
            self._snapshot = candidate

        self._logger.debug(
            "property_schema_reloaded",
            version=candidate.version,
            fingerprint=candidate.fingerprint,
            changed=candidate.version != current.version,
        )
        self._log_issues(candidate)
        return candidate

    def _log_issues(self, snapshot: SchemaSnapshot) -> None:
        for issue in snapshot.issues:
            self._logger.warning(
                "property_schema_entry_ignored",
                source=issue.source,
                path=issue.path,
                reason=issue.message,
            )


class _LayerMerger:
    def __init__(self) -> None:
        self._properties: dict[str, dict[str, Any]] = {
            name: {
                "required": definition.required,
                "severity": definition.severity,
                "description": definition.description,
            }
            for name, definition in DEFAULT_PROPERTIES.items()
        }
        self._scopes: dict[str, list[str]] = {
            scope: list(names) for scope, names in DEFAULT_SCOPES.items()
        }
        self._issues: list[SchemaIssue] = []

    def apply_project(self, payload: Mapping[str, object]) -> None:
        for key in payload:
            if key not in {"properties", "scopes"}:
                self._issue(SOURCE_PROJECT, key, "unknown field")

        properties = payload.get("properties")
        if properties is not None:
            if isinstance(properties, Mapping):
                for name, entry in properties.items():
                    self._merge_entry(SOURCE_PROJECT, f"properties.{name}", name, entry)
            else:
                self._issue(SOURCE_PROJECT, "properties", "expected object")

        scopes = payload.get("scopes")
        if scopes is None:
            return
        if not isinstance(scopes, Mapping):
            self._issue(SOURCE_PROJECT, "scopes", "expected object")
            return
        for scope, names in scopes.items():
            path = f"scopes.{scope}"
            if scope not in SCOPES:
                expected = ", ".join(SCOPES)
                self._issue(SOURCE_PROJECT, path, f"unknown scope; expected one of: {expected}")
                continue
            if isinstance(names, str) or not isinstance(names, Sequence):
                self._issue(SOURCE_PROJECT, path, "expected a list of property names")
                continue
            for index, name in enumerate(names):
                if not isinstance(name, str) or name not in self._properties:
                    self._issue(
                        SOURCE_PROJECT, f"{path}[{index}]", f"undefined property {name!r}"
                    )
                    continue
                self._add_to_scope(scope, name)

    def apply_custom(self, payload: Mapping[str, object]) -> None:
        for name, entry in payload.items():
            self._merge_entry(SOURCE_CUSTOM, str(name), name, entry, allow_scopes=True)

    def snapshot(self, *, version: int) -> SchemaSnapshot:
        properties = {
            name: PropertyDefinition(
                required=fields["required"],
                severity=fields["severity"],
                description=fields["description"],
            )
            for name, fields in self._properties.items()
        }
        scopes = {scope: tuple(names) for scope, names in self._scopes.items()}
        return SchemaSnapshot(
            version=version,
            fingerprint=_fingerprint(properties, scopes),
            properties=MappingProxyType(properties),
            scopes=MappingProxyType(scopes),
            issues=tuple(self._issues),
        )

    def _merge_entry(
        self,
        source: str,
        path: str,
        name: object,
        entry: object,
        *,
        allow_scopes: bool = False,
    ) -> None:
        if not isinstance(name, str) or not _NAME_RE.fullmatch(name):
            self._issue(source, path, "property name must match [A-Za-z0-9_]+")
            return
        if name == MASTER_FORMULA_TOKEN:
            self._issue(source, path, "masterFormula is always required and cannot be configured")
            return
        if not isinstance(entry, Mapping):
            self._issue(source, path, "expected object")
            return

        allowed = _CUSTOM_FIELDS if allow_scopes else _DEFINITION_FIELDS
        fields: dict[str, Any] = {}
        problems: list[str] = []
        for key, value in entry.items():
            if key not in allowed:
                problems.append(f"unknown field {key!r}")
            elif key == "required":
                if isinstance(value, bool):
                    fields[key] = value
                else:
                    problems.append("required must be a boolean")
            elif key == "severity":
                severity = _as_severity(value)
                if severity is None:
                    problems.append("severity must be one of: error, warning, info")
                else:
                    fields[key] = severity
            elif key == "description":
                if isinstance(value, str):
                    fields[key] = value
                else:
                    problems.append("description must be a string")
            else:
                scopes = _as_scope_list(value)
                if scopes is None:
                    problems.append(f"scopes must be a list drawn from: {', '.join(SCOPES)}")
                else:
                    fields[key] = scopes

        if problems:
            for problem in problems:
                self._issue(source, path, problem)
            return

        scopes = fields.pop("scopes", None)
        is_new = name not in self._properties
        merged = self._properties.setdefault(
            name,
            {"required": False, "severity": Severity.WARNING, "description": ""},
        )
        merged.update(fields)

        if scopes is not None:
            for scope in scopes:
                self._add_to_scope(scope, name)
        elif is_new and allow_scopes:
            for scope in SCOPES:
                self._add_to_scope(scope, name)

    def _add_to_scope(self, scope: str, name: str) -> None:
        names = self._scopes.setdefault(scope, [])
        if name not in names:
            names.append(name)

    def _issue(self, source: str, path: str, message: str) -> None:
        self._issues.append(SchemaIssue(source=source, path=path, message=message))


def _as_severity(value: object) -> Severity | None:
    if isinstance(value, Severity):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Severity(value.strip().lower())
    except ValueError:
        return None


def _as_scope_list(value: object) -> tuple[str, ...] | None:
    if isinstance(value, str) or not isinstance(value, Sequence):
        return None
    scopes: list[str] = []
    for item in value:
        if not isinstance(item, str) or item not in SCOPES:
            return None
        if item not in scopes:
            scopes.append(item)
    return tuple(scopes)


def _fingerprint(
    properties: Mapping[str, PropertyDefinition],
    scopes: Mapping[str, tuple[str, ...]],
) -> str:
    payload = {
        "properties": {name: definition.to_dict() for name, definition in properties.items()},
        "scopes": {scope: list(names) for scope, names in scopes.items()},
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


__all__ = [
    "DEFAULT_PROPERTIES",
    "DEFAULT_SCOPES",
    "PropertyDefinition",
    "PropertySchema",
    "SchemaIssue",
    "SchemaSnapshot",
    "Severity",
    "UnknownScopeError",
    "build_snapshot",
    "default_snapshot",
]
