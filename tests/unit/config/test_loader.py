"""
proptag — unit tests for config loader

File: tests/unit/config/test_loader.py

Purpose
- Validate deterministic settings loading from defaults, TOML, env overrides, and CLI overrides.
- Validate reading and initializing the JSON project configuration.

What this test file should cover
- Precedence: CLI > env > file > defaults.
- Deterministic env var path mapping and type coercion.
- Missing, malformed and explicit config paths.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from proptag.config.loader import (
    ConfigLoadError,
    dump_effective_config,
    env_name_for_path,
    init_project_config,
    load_config,
    load_project_config,
)
from proptag.config.schema import ConfigValidationError
from proptag.engine.properties import build_snapshot


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_loader_precedence_default_file_env_cli(tmp_path: Path) -> None:
    config_path = tmp_path / "proptag.toml"
    _write_config(
        config_path,
        """
[observability]
log_level = "INFO"
""".strip(),
    )

    default_loaded = load_config(base_dir=tmp_path / "empty", environ={})
    file_loaded = load_config(config_path, environ={})
    env_loaded = load_config(config_path, environ={"PROPTAG_OBSERVABILITY_LOG_LEVEL": "error"})
    cli_loaded = load_config(
        config_path,
        environ={"PROPTAG_OBSERVABILITY_LOG_LEVEL": "error"},
        cli_overrides={"observability.log_level": "debug"},
    )

    assert default_loaded["observability"]["log_level"] == "WARNING"
    assert file_loaded["observability"]["log_level"] == "INFO"
    assert env_loaded["observability"]["log_level"] == "ERROR"
    assert cli_loaded["observability"]["log_level"] == "DEBUG"


def test_default_file_is_discovered_in_base_dir(tmp_path: Path) -> None:
    _write_config(tmp_path / "proptag.toml", "[lint]\nenabled = false\n")

    loaded = load_config(base_dir=tmp_path, environ={})

    assert loaded["lint"]["enabled"] is False
    assert loaded["lint"]["file_types"] == [".js", ".ts", ".jsx", ".tsx", ".py"]


def test_env_values_are_coerced(tmp_path: Path) -> None:
    loaded = load_config(
        base_dir=tmp_path,
        environ={
            "PROPTAG_LINT_ENABLED": "off",
            "PROPTAG_LINT_FILE_TYPES": ".js, .mjs ,",
            "PROPTAG_LINT_IGNORE_PATTERNS": "vendor/**",
            "PROPTAG_OBSERVABILITY_LOG_FORMAT": "json",
        },
    )

    assert loaded["lint"]["enabled"] is False
    assert loaded["lint"]["file_types"] == [".js", ".mjs"]
    assert loaded["lint"]["ignore_patterns"] == ["vendor/**"]
    assert loaded["observability"]["log_format"] == "json"


def test_invalid_env_boolean_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="PROPTAG_LINT_ENABLED"):
        load_config(base_dir=tmp_path, environ={"PROPTAG_LINT_ENABLED": "maybe"})


def test_env_name_mapping() -> None:
    assert env_name_for_path(("lint", "file_types")) == "PROPTAG_LINT_FILE_TYPES"


def test_explicit_missing_config_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "nope.toml", environ={})


def test_invalid_toml_is_reported(tmp_path: Path) -> None:
    config_path = tmp_path / "proptag.toml"
    _write_config(config_path, "[lint\nenabled = true\n")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


def test_invalid_values_fail_validation(tmp_path: Path) -> None:
    config_path = tmp_path / "proptag.toml"
    _write_config(config_path, '[lint]\nfile_types = ["js"]\nunknown = 1\n')

    with pytest.raises(ConfigValidationError) as excinfo:
        load_config(config_path, environ={})

    assert [item.path for item in excinfo.value.issues] == [
        "lint.unknown",
        "lint.file_types[0]",
    ]


def test_custom_properties_pass_through(tmp_path: Path) -> None:
    config_path = tmp_path / "proptag.toml"
    _write_config(
        config_path,
        """
[lint.custom_properties.complexity]
required = true
severity = "warning"
scopes = ["function"]
""".strip(),
    )

    loaded = load_config(config_path, environ={})

    assert loaded["lint"]["custom_properties"] == {
        "complexity": {"required": True, "severity": "warning", "scopes": ["function"]}
    }


def test_dump_effective_config_is_deterministic(tmp_path: Path) -> None:
    first = dump_effective_config(load_config(base_dir=tmp_path, environ={}))
    second = dump_effective_config(load_config(base_dir=tmp_path, environ={}))

    assert first == second
    assert json.loads(first)["meta"] == {"schema_version": 1}


def test_project_config_absent_is_empty(tmp_path: Path) -> None:
    assert load_project_config(tmp_path) == {}


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_project_config_malformed_is_an_error(tmp_path: Path, content: str) -> None:
    _write_config(tmp_path / ".proptag.json", content)

    with pytest.raises(ConfigLoadError):
        load_project_config(tmp_path)


def test_init_project_config_writes_defaults(tmp_path: Path) -> None:
    path = init_project_config(tmp_path)

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert path.name == ".proptag.json"
    assert payload["scopes"] == {
        "file": ["author", "description"],
        "function": ["description", "params", "returns", "example"],
    }
    assert payload["properties"]["author"]["required"] is True


def test_init_project_config_keeps_existing_entries(tmp_path: Path) -> None:
    existing = {
        "properties": {"owner": {"required": True, "severity": "warning"}},
        "scopes": {"file": ["owner"]},
    }
    _write_config(tmp_path / ".proptag.json", json.dumps(existing))

    init_project_config(tmp_path)

    payload = load_project_config(tmp_path)
    assert payload["scopes"]["file"] == ["author", "description", "owner"]
    assert payload["properties"]["owner"]["severity"] == "warning"
    assert build_snapshot(project=payload).resolve("file")["owner"].required is True
