"""
proptag — workspace checker

File: src/proptag/engine/workspace.py

Purpose
- Apply the per-document gating rules (enable flag, file suffixes, ignore
  globs) and analyze files one by one into a deterministic batch result.

What should be included in this file
- ``LintSettings`` derived from the validated host settings.
- Directory traversal with always-ignored tool directories.
- Partial-failure semantics: a file that cannot be read, decoded or analyzed
  is recorded as a ``FileAnalysisFailure`` and the batch continues.
- Text and JSON renderings of the batch result.

Non-functional requirements
- Sequential and deterministic: files are visited in sorted order and one
  schema snapshot is used for the whole pass.
"""

from __future__ import annotations

import fnmatch
import json
import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

import structlog
from structlog.contextvars import bound_contextvars

from proptag.constants import (
    DEFAULT_FILE_TYPES,
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_PROJECT_CONFIG_FILE,
)
from proptag.engine.analyzer import DocumentReport, analyze_text
from proptag.engine.languages import profile_for_path
from proptag.engine.properties import SchemaSnapshot

_logger = structlog.get_logger(__name__)

_ALWAYS_IGNORED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".venv",
        "__pycache__",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        ".hypothesis",
        ".tox",
        ".nox",
    }
)

SKIP_DISABLED = "linting disabled"
SKIP_FILE_TYPE = "file type not enabled"
SKIP_IGNORED = "matches ignore pattern"


@dataclass(frozen=True, slots=True)
class LintSettings:
    enabled: bool = True
    file_types: tuple[str, ...] = DEFAULT_FILE_TYPES
    ignore_patterns: tuple[str, ...] = DEFAULT_IGNORE_PATTERNS
    project_config: str = DEFAULT_PROJECT_CONFIG_FILE
    custom_properties: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> LintSettings:
        """Build settings from the ``lint`` section of validated host settings."""

        lint = config.get("lint", {})
        return cls(
            enabled=bool(lint.get("enabled", True)),
            file_types=tuple(lint.get("file_types", DEFAULT_FILE_TYPES)),
            ignore_patterns=tuple(lint.get("ignore_patterns", DEFAULT_IGNORE_PATTERNS)),
            project_config=str(lint.get("project_config", DEFAULT_PROJECT_CONFIG_FILE)),
            custom_properties=dict(lint.get("custom_properties", {})),
        )


@dataclass(frozen=True, slots=True)
class FileAnalysisFailure:
    path: str
    error_type: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "error_type": self.error_type, "message": self.message}


@dataclass(frozen=True, slots=True)
class SkippedFile:
    path: str
    reason: str


@dataclass(frozen=True, slots=True)
class WorkspaceResult:
    reports: tuple[DocumentReport, ...]
    failures: tuple[FileAnalysisFailure, ...] = ()
    skipped: tuple[SkippedFile, ...] = ()
    schema_version: int = 0

    @property
    def checked_count(self) -> int:
        return len(self.reports)

    @property
    def problem_count(self) -> int:
        return sum(len(report.diagnostics) for report in self.reports)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def error_count(self) -> int:
        return sum(report.error_count for report in self.reports)

    @property
    def warning_count(self) -> int:
        return sum(report.warning_count for report in self.reports)

    @property
    def info_count(self) -> int:
        return sum(report.info_count for report in self.reports)

    def summary(self) -> dict[str, object]:
        return {
            "checked_files": self.checked_count,
            "problem_count": self.problem_count,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
            "failure_count": self.failure_count,
            "skipped_files": len(self.skipped),
            "schema_version": self.schema_version,
        }

    def to_dict(self) -> dict[str, object]:
        return {
            "summary": self.summary(),
            "reports": [report.to_dict() for report in self.reports],
            "failures": [failure.to_dict() for failure in self.failures],
            "skipped": [{"path": item.path, "reason": item.reason} for item in self.skipped],
        }


def skip_reason(rel_path: str, settings: LintSettings) -> str | None:
    """Return why ``rel_path`` is not analyzed, or ``None`` when it is."""

    if not settings.enabled:
        return SKIP_DISABLED
    suffix = PurePosixPath(rel_path).suffix
    if suffix not in settings.file_types:
        return SKIP_FILE_TYPE
    if any(_matches_ignore(rel_path, pattern) for pattern in settings.ignore_patterns):
        return SKIP_IGNORED
    return None


def analyze_file(
    path: Path,
    *,
    schema: SchemaSnapshot,
    display_path: str | None = None,
) -> DocumentReport:
    """Read ``path`` as UTF-8 and analyze it; read and decode errors propagate."""

    text = path.read_text(encoding="utf-8")
    return analyze_text(
        text,
        schema=schema,
        profile=profile_for_path(path),
        path=display_path or path.as_posix(),
    )


def check_paths(
    paths: Sequence[str | Path],
    *,
    repo_root: Path,
    settings: LintSettings,
    schema: SchemaSnapshot,
) -> WorkspaceResult:
    """Analyze the named files; directories are expanded recursively."""

    root = repo_root.resolve()
    candidates: list[tuple[Path, str]] = []
    failures: list[FileAnalysisFailure] = []
    for raw in paths:
        path = Path(raw)
        absolute = path if path.is_absolute() else root / path
        if absolute.is_dir():
            candidates.extend(_walk(absolute, root))
        elif absolute.exists():
            candidates.append((absolute, _display_path(absolute, root)))
        else:
            failures.append(
                FileAnalysisFailure(
                    path=_display_path(absolute, root),
                    error_type="FileNotFoundError",
                    message="no such file or directory",
                )
            )
    return _run(candidates, settings=settings, schema=schema, failures=failures)


def check_workspace(
    repo_root: Path,
    *,
    settings: LintSettings,
    schema: SchemaSnapshot,
) -> WorkspaceResult:
    """Analyze every enabled file under ``repo_root``."""

    root = repo_root.resolve()
    return _run(list(_walk(root, root)), settings=settings, schema=schema, failures=[])


def format_text(
    result: WorkspaceResult,
    *,
    highlight: Callable[[str], str] | None = None,
) -> str:
    """Render one line per diagnostic, then failures, then the summary line."""

    label = highlight or (lambda value: value)
    output_lines: list[str] = []
    for report in result.reports:
        for diagnostic in report.diagnostics:
            where = f" ({diagnostic.function_name})" if diagnostic.function_name else ""
            output_lines.append(
                f"{report.path}:{diagnostic.line}:{diagnostic.column}: "
                f"{label(diagnostic.severity.value)}: {diagnostic.message} "
                f"[{diagnostic.scope}{where}]"
            )

    if result.failures:
        if output_lines:
            output_lines.append("")
        output_lines.append("FAILURES")
        for failure in result.failures:
            output_lines.append(f"  {failure.path}: {failure.error_type}: {failure.message}")

    if output_lines:
        output_lines.append("")
    summary = result.summary()
    output_lines.append(
        "Summary: "
        f"checked_files={summary['checked_files']} "
        f"problems={summary['problem_count']} "
        f"errors={summary['error_count']} "
        f"warnings={summary['warning_count']} "
        f"infos={summary['info_count']} "
        f"failures={summary['failure_count']}"
    )
    return "\n".join(output_lines).rstrip() + "\n"


def format_json(result: WorkspaceResult) -> str:
    return json.dumps(result.to_dict(), sort_keys=True, indent=2, ensure_ascii=False) + "\n"


def _run(
    candidates: Sequence[tuple[Path, str]],
    *,
    settings: LintSettings,
    schema: SchemaSnapshot,
    failures: list[FileAnalysisFailure],
) -> WorkspaceResult:
    reports: list[DocumentReport] = []
    skipped: list[SkippedFile] = []
    seen: set[str] = set()

    for absolute, rel_path in sorted(candidates, key=lambda item: item[1]):
        if rel_path in seen:
            continue
        seen.add(rel_path)

        reason = skip_reason(rel_path, settings)
        if reason is not None:
            skipped.append(SkippedFile(path=rel_path, reason=reason))
            continue

        with bound_contextvars(path=rel_path):
            try:
                report = analyze_file(absolute, schema=schema, display_path=rel_path)
            except Exception as exc:  # noqa: BLE001 - one bad file never aborts the batch.
                _logger.warning(
                    "document_analysis_failed",
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                failures.append(
                    FileAnalysisFailure(
                        path=rel_path,
                        error_type=type(exc).__name__,
                        message=str(exc),
                    )
                )
                continue
            _logger.debug(
                "document_analyzed",
                diagnostics=len(report.diagnostics),
                functions=len(report.functions),
            )
            reports.append(report)

    result = WorkspaceResult(
        reports=tuple(reports),
        failures=tuple(failures),
        skipped=tuple(skipped),
        schema_version=schema.version,
    )
    _logger.info("workspace_check_completed", **result.summary())
    return result


def _walk(base: Path, repo_root: Path) -> list[tuple[Path, str]]:
    discovered: list[tuple[Path, str]] = []
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames[:] = sorted(name for name in dirnames if name not in _ALWAYS_IGNORED_DIRS)
        current_dir = Path(dirpath)
        for filename in sorted(filenames):
            file_path = current_dir / filename
            discovered.append((file_path, _display_path(file_path, repo_root)))
    return discovered


def _display_path(path: Path, repo_root: Path) -> str:
    try:
        return path.resolve(strict=False).relative_to(repo_root).as_posix()
    except ValueError:
        return path.as_posix()


def _matches_ignore(rel_path: str, pattern: str) -> bool:
    normalized = pattern.strip().replace("\\", "/").lstrip("/")
    if not normalized:
        return False
    if fnmatch.fnmatchcase(rel_path, normalized):
        return True
    return fnmatch.fnmatchcase(rel_path, f"*/{normalized}")


__all__ = [
    "FileAnalysisFailure",
    "LintSettings",
    "SKIP_DISABLED",
    "SKIP_FILE_TYPE",
    "SKIP_IGNORED",
    "SkippedFile",
    "WorkspaceResult",
    "analyze_file",
    "check_paths",
    "check_workspace",
    "format_json",
    "format_text",
    "skip_reason",
]
