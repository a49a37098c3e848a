"""
proptag — unit tests for the workspace checker

File: tests/unit/engine/test_workspace.py

Purpose
- Verify document gating, deterministic traversal, partial-failure handling
  and the text/JSON renderings of a batch result.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from proptag.engine import workspace
from proptag.engine.properties import default_snapshot
from proptag.engine.templates import render_property_block
from proptag.engine.workspace import (
    SKIP_DISABLED,
    SKIP_FILE_TYPE,
    SKIP_IGNORED,
    LintSettings,
    check_paths,
    check_workspace,
    format_json,
    format_text,
    skip_reason,
)


def _write(path: Path, content: str | bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def _clean_js() -> str:
    schema = default_snapshot()
    return (
        render_property_block("file", schema)
        + "\n"
        + render_property_block("function", schema)
        + "function add(a, b) {\n  return a + b;\n}\n"
    )


@pytest.mark.parametrize(
    ("rel_path", "settings", "expected"),
    [
        ("src/app.js", LintSettings(), None),
        ("src/app.js", LintSettings(enabled=False), SKIP_DISABLED),
        ("README.md", LintSettings(), SKIP_FILE_TYPE),
        ("src/app.go", LintSettings(file_types=(".js",)), SKIP_FILE_TYPE),
        ("node_modules/lib/index.js", LintSettings(), SKIP_IGNORED),
        ("packages/web/node_modules/lib/index.js", LintSettings(), SKIP_IGNORED),
        ("dist/bundle.js", LintSettings(), SKIP_IGNORED),
        ("src/generated.ts", LintSettings(ignore_patterns=("*.ts",)), SKIP_IGNORED),
        ("src/builder.js", LintSettings(), None),
    ],
)
def test_skip_reason(rel_path: str, settings: LintSettings, expected: str | None) -> None:
    assert skip_reason(rel_path, settings) == expected


def test_settings_from_config_reads_lint_section() -> None:
    settings = LintSettings.from_config(
        {
            "lint": {
                "enabled": False,
                "file_types": [".ts"],
                "ignore_patterns": ["vendor/**"],
                "project_config": "props.json",
                "custom_properties": {"complexity": {"required": True}},
            }
        }
    )

    assert settings.enabled is False
    assert settings.file_types == (".ts",)
    assert settings.ignore_patterns == ("vendor/**",)
    assert settings.project_config == "props.json"
    assert settings.custom_properties == {"complexity": {"required": True}}


def test_check_workspace_continues_past_undecodable_file(tmp_path: Path) -> None:
    _write(tmp_path / "a.js", _clean_js())
    _write(tmp_path / "b.js", b"\xff\xfe/* broken */")
    _write(tmp_path / "c.js", "function lonely() {}\n")
    _write(tmp_path / "node_modules" / "dep" / "index.js", "function skipped() {}\n")
    _write(tmp_path / ".git" / "hooks" / "x.js", "function hidden() {}\n")

    result = check_workspace(tmp_path, settings=LintSettings(), schema=default_snapshot())

    assert [report.path for report in result.reports] == ["a.js", "c.js"]
    assert result.reports[0].diagnostics == ()
    assert [failure.path for failure in result.failures] == ["b.js"]
    assert result.failures[0].error_type == "UnicodeDecodeError"
    assert [(item.path, item.reason) for item in result.skipped] == [
        ("node_modules/dep/index.js", SKIP_IGNORED)
    ]
    assert result.summary()["checked_files"] == 2
    assert result.failure_count == 1


def test_check_workspace_counts_problems(tmp_path: Path) -> None:
    _write(tmp_path / "c.js", "function lonely() {}\n")

    result = check_workspace(tmp_path, settings=LintSettings(), schema=default_snapshot())

    # Missing file block plus missing block for lonely().
    assert result.problem_count == 2
    assert result.error_count == 2
    assert result.warning_count == 0
    assert result.schema_version == 1


def test_check_paths_records_missing_file(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "a.js", _clean_js())

    result = check_paths(
        ["src/a.js", "src/missing.js"],
        repo_root=tmp_path,
        settings=LintSettings(),
        schema=default_snapshot(),
    )

    assert [report.path for report in result.reports] == ["src/a.js"]
    assert [(item.path, item.error_type) for item in result.failures] == [
        ("src/missing.js", "FileNotFoundError")
    ]


def test_check_paths_expands_directories_and_dedupes(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "a.js", _clean_js())
    _write(tmp_path / "src" / "nested" / "b.ts", _clean_js())

    result = check_paths(
        ["src", "src/a.js"],
        repo_root=tmp_path,
        settings=LintSettings(),
        schema=default_snapshot(),
    )

    assert [report.path for report in result.reports] == ["src/a.js", "src/nested/b.ts"]


def test_disabled_settings_skip_every_file(tmp_path: Path) -> None:
    _write(tmp_path / "c.js", "function lonely() {}\n")

    result = check_workspace(
        tmp_path, settings=LintSettings(enabled=False), schema=default_snapshot()
    )

    assert result.reports == ()
    assert [item.reason for item in result.skipped] == [SKIP_DISABLED]


def test_format_text_lists_diagnostics_failures_and_summary(tmp_path: Path) -> None:
    _write(tmp_path / "b.js", b"\xff")
    _write(tmp_path / "c.js", "function lonely() {}\n")
    result = check_workspace(tmp_path, settings=LintSettings(), schema=default_snapshot())

    lines = format_text(result, highlight=str.upper).splitlines()

    assert lines[0] == (
        "c.js:1:1: ERROR: Missing file-level properties block (including masterFormula) [file]"
    )
    assert lines[1] == (
        'c.js:1:1: ERROR: Missing property block for function "lonely" '
        "(including masterFormula) [function (lonely)]"
    )
    assert lines[3] == "FAILURES"
    assert lines[4].startswith("  b.js: UnicodeDecodeError: ")
    assert lines[-1] == (
        "Summary: checked_files=1 problems=2 errors=2 warnings=0 infos=0 failures=1"
    )


def test_format_text_for_clean_run_is_summary_only(tmp_path: Path) -> None:
    _write(tmp_path / "a.js", _clean_js())
    result = check_workspace(tmp_path, settings=LintSettings(), schema=default_snapshot())

    assert format_text(result) == (
        "Summary: checked_files=1 problems=0 errors=0 warnings=0 infos=0 failures=0\n"
    )


def test_format_json_is_sorted_and_complete(tmp_path: Path) -> None:
    _write(tmp_path / "c.js", "function lonely() {}\n")
    result = check_workspace(tmp_path, settings=LintSettings(), schema=default_snapshot())

    payload = json.loads(format_json(result))

    assert payload["summary"]["problem_count"] == 2
    assert payload["reports"][0]["path"] == "c.js"
    assert [item["kind"] for item in payload["reports"][0]["diagnostics"]] == [
        "missing_block",
        "missing_block",
    ]
    assert payload["failures"] == []


def test_unexpected_analysis_error_is_recorded_and_batch_continues(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _write(tmp_path / "a.js", _clean_js())
    _write(tmp_path / "boom.js", "function boom() {}\n")
    real_analyze = workspace.analyze_text

    def _analyze(text: str, **kwargs: object) -> object:
        if kwargs.get("path") == "boom.js":
            raise RuntimeError("analysis exploded")
        return real_analyze(text, **kwargs)

    monkeypatch.setattr(workspace, "analyze_text", _analyze)

    result = check_workspace(tmp_path, settings=LintSettings(), schema=default_snapshot())

    assert [report.path for report in result.reports] == ["a.js"]
    assert [(item.path, item.error_type, item.message) for item in result.failures] == [
        ("boom.js", "RuntimeError", "analysis exploded")
    ]
