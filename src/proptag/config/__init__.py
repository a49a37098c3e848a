"""
proptag config package public API.

File: src/proptag/config/__init__.py

Purpose
- Export settings loading/validation entrypoints, project configuration
  helpers and public error types.

Functional requirements
- Support loading from ``proptag.toml`` + ``PROPTAG_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from proptag.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    effective_config,
    env_name_for_path,
    init_project_config,
    load_config,
    load_project_config,
)
from proptag.config.schema import (
    DEFAULT_CONFIG,
    LOG_FORMATS,
    LOG_LEVELS,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    ProptagConfig,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "ProptagConfig",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "effective_config",
    "env_name_for_path",
    "init_project_config",
    "load_config",
    "load_project_config",
    "merge_config",
    "validate_config",
]
