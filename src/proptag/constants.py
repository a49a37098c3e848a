"""Stable constants shared across the engine, config layer and CLI."""

from __future__ import annotations

from typing import Final

# Schema version for the project configuration file and host settings.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Scopes a property schema is partitioned into.
SCOPE_FILE: Final[str] = "file"
SCOPE_FUNCTION: Final[str] = "function"
SCOPES: Final[tuple[str, ...]] = (SCOPE_FILE, SCOPE_FUNCTION)

# Tag wire format: [[OPEN:<name>]] ... [[CLOSE:<name>]].
TAG_NAME_PATTERN: Final[str] = r"[A-Za-z0-9_]+"
OPEN_MARKER_TEMPLATE: Final[str] = "[[OPEN:{name}]]"
CLOSE_MARKER_TEMPLATE: Final[str] = "[[CLOSE:{name}]]"

# Mandatory marker present in every block regardless of the schema.
MASTER_FORMULA_TOKEN: Final[str] = "masterFormula"
MASTER_FORMULA: Final[str] = "▽ = ⨍(⏵▷, τ𝑡, ⌬ⵣ, ↯〰⥂⥮, ☀♬⨳❄, eℰ∈∃, ⍨☯, Ψ?⍰⸮, ℳ⚖)"

# Host settings defaults.
DEFAULT_SETTINGS_FILE: Final[str] = "proptag.toml"
DEFAULT_PROJECT_CONFIG_FILE: Final[str] = ".proptag.json"
DEFAULT_FILE_TYPES: Final[tuple[str, ...]] = (".js", ".ts", ".jsx", ".tsx", ".py")
DEFAULT_IGNORE_PATTERNS: Final[tuple[str, ...]] = (
    "node_modules/**",
    "dist/**",
    "build/**",
)

__all__ = [
    "CLOSE_MARKER_TEMPLATE",
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_FILE_TYPES",
    "DEFAULT_IGNORE_PATTERNS",
    "DEFAULT_PROJECT_CONFIG_FILE",
    "DEFAULT_SETTINGS_FILE",
    "MASTER_FORMULA",
    "MASTER_FORMULA_TOKEN",
    "OPEN_MARKER_TEMPLATE",
    "SCOPES",
    "SCOPE_FILE",
    "SCOPE_FUNCTION",
    "TAG_NAME_PATTERN",
]
