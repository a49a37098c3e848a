"""Command-line interface router for proptag."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

import structlog

from proptag.config import (
    ConfigLoadError,
    ConfigValidationError,
    effective_config,
    init_project_config,
    load_config,
    load_project_config,
)
from proptag.constants import SCOPE_FILE, SCOPE_FUNCTION, SCOPES
from proptag.engine.edits import insert_master_formula
from proptag.engine.languages import PROFILES, profile_by_name, profile_for_path
from proptag.engine.properties import PropertySchema, SchemaSnapshot
from proptag.engine.templates import render_property_block
from proptag.engine.workspace import (
    LintSettings,
    WorkspaceResult,
    check_paths,
    check_workspace,
    format_json,
    format_text,
)
from proptag.observability import LoggingConfig, setup_logging
from proptag.ui.render import CLIRenderer, create_renderer

_logger = structlog.get_logger(__name__)

OUTPUT_FORMATS: Final[tuple[str, ...]] = ("text", "json")


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class _Session:
    repo_root: Path
    config: dict[str, Any]
    settings: LintSettings
    schema: SchemaSnapshot


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="proptag",
        description=(
            "proptag — documentation property linter.\n\n"
            "Common workflows:\n"
            "  proptag check src/app.js     Check files for missing properties\n"
            "  proptag workspace            Check every enabled file in the repo\n"
            "  proptag template function    Print an empty function property block\n"
            "  proptag config               Show the resolved property schema\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--repo-root",
        default=".",
        help="Repository root directory (default: current working directory).",
    )
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to proptag TOML settings (default: <repo-root>/proptag.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output and debug logs.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    report = argparse.ArgumentParser(add_help=False)
    report.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default="text",
        help="Report format (default: text).",
    )
    report.add_argument(
        "--fail-on-warn",
        action="store_true",
        default=False,
        help="Exit non-zero when warnings are reported.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # check ---------------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check",
        parents=[common, report],
        help="Check files or directories for missing documentation properties",
        description=(
            "Analyze the named files (directories are expanded) against the property schema.\n\n"
            "Examples:\n"
            "  proptag check src/app.js\n"
            "  proptag check src --format json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    check_parser.add_argument("paths", nargs="+", help="Files or directories to check")
    check_parser.set_defaults(handler=_cmd_check)

    # workspace -----------------------------------------------------------
    workspace_parser = subparsers.add_parser(
        "workspace",
        parents=[common, report],
        help="Check every enabled file under the repository root",
        description=(
            "Walk the repository root, apply file type and ignore filters and check each file.\n\n"
            "Examples:\n"
            "  proptag workspace\n"
            "  proptag workspace --fail-on-warn\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    workspace_parser.set_defaults(handler=_cmd_workspace)

    # template ------------------------------------------------------------
    template_parser = subparsers.add_parser(
        "template",
        parents=[common],
        help="Print an empty property block for a scope",
        description=(
            "Render the property block for the file or function scope from the schema.\n\n"
            "Examples:\n"
            "  proptag template file\n"
            "  proptag template function --language python\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    template_parser.add_argument("scope", choices=SCOPES, help="Target scope")
    template_parser.add_argument(
        "--language",
        choices=tuple(profile.name for profile in PROFILES),
        default="c-family",
        help="Comment syntax of the block (default: c-family).",
    )
    template_parser.set_defaults(handler=_cmd_template)

    # add-master-formula --------------------------------------------------
    formula_parser = subparsers.add_parser(
        "add-master-formula",
        parents=[common],
        help="Insert the master formula into every block that lacks it",
        description=(
            "Edit files in place: add the master formula to the file block and each\n"
            "function block, creating blocks where none exist.\n\n"
            "Examples:\n"
            "  proptag add-master-formula src/app.js\n"
            "  proptag add-master-formula src/app.js --dry-run\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    formula_parser.add_argument("paths", nargs="+", help="Files to edit")
    formula_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Report planned insertions without writing files.",
    )
    formula_parser.set_defaults(handler=_cmd_add_master_formula)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show the resolved property schema and effective settings",
        description=(
            "Display the property schema by scope, custom properties and the effective\n"
            "settings after merging defaults, file, env and CLI.\n\n"
            "Examples:\n"
            "  proptag config\n"
            "  proptag config --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    config_parser.set_defaults(handler=_cmd_config)

    # init-config ---------------------------------------------------------
    init_parser = subparsers.add_parser(
        "init-config",
        parents=[common],
        help="Write the project configuration file with the default schema",
        description=(
            "Create or update the project configuration file at the repository root.\n"
            "Existing entries are kept and merged over the defaults.\n\n"
            "Examples:\n"
            "  proptag init-config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    init_parser.set_defaults(handler=_cmd_init_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_check(args: argparse.Namespace) -> int:
    session = _open_session(args)
    result = check_paths(
        list(args.paths),
        repo_root=session.repo_root,
        settings=session.settings,
        schema=session.schema,
    )
    return _report(args, result, session.schema)


def _cmd_workspace(args: argparse.Namespace) -> int:
    session = _open_session(args)
    result = check_workspace(
        session.repo_root,
        settings=session.settings,
        schema=session.schema,
    )
    return _report(args, result, session.schema)


def _cmd_template(args: argparse.Namespace) -> int:
    session = _open_session(args)
    profile = profile_by_name(args.language)
    block = render_property_block(args.scope, session.schema, profile.comment)
    sys.stdout.write(block)
    return 0


def _cmd_add_master_formula(args: argparse.Namespace) -> int:
    session = _open_session(args)
    renderer = _get_renderer(args)
    dry_run = _flag(args, "dry_run")

    total = 0
    for raw in args.paths:
        path = _resolve_file(raw, session.repo_root)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CLIError(f"unable to read {raw}: {exc}", exit_code=2) from exc

        edited, count = insert_master_formula(text, profile_for_path(path))
        total += count
        if count and not dry_run:
            path.write_text(edited, encoding="utf-8")
        _logger.info("master_formula_inserted", path=str(raw), insertions=count, dry_run=dry_run)
        verb = "would insert" if dry_run else "inserted"
        renderer.text(f"{raw}: {verb} {count} master formula marker(s)")

    if _flag(args, "verbose"):
        renderer.kv("Total insertions", total)
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    session = _open_session(args)
    schema = session.schema
    by_scope = {
        scope: [
            {"name": name, **definition.to_dict()}
            for name, definition in schema.resolve(scope).items()
        ]
        for scope in SCOPES
    }
    payload: dict[str, object] = {
        "command": "config",
        "schema": {
            "version": schema.version,
            "fingerprint": schema.fingerprint,
            "scopes": by_scope,
            "issues": [issue.to_dict() for issue in schema.issues],
        },
        "custom_properties": dict(session.settings.custom_properties),
        "config": effective_config(session.config),
    }

    if _flag(args, "json"):
        _emit_json(payload)
        return 0

    renderer = _get_renderer(args)
    renderer.kv("Schema version", schema.version)
    renderer.kv("Fingerprint", schema.fingerprint)
    titles = {SCOPE_FILE: "File level:", SCOPE_FUNCTION: "Function level:"}
    for scope in SCOPES:
        rows = [
            [
                str(entry["name"]),
                "yes" if entry["required"] else "no",
                str(entry["severity"]),
                str(entry["description"]),
            ]
            for entry in by_scope[scope]
        ]
        renderer.table(
            ("property", "required", "severity", "description"),
            rows,
            title=titles.get(scope, f"{scope}:"),
        )
    if schema.issues:
        renderer.section("Ignored schema entries:")
        renderer.items([f"{issue.source} {issue.path}: {issue.message}" for issue in schema.issues])
    renderer.section("Custom properties:")
    renderer.text(
        json.dumps(dict(session.settings.custom_properties), indent=2, sort_keys=True)
    )
    renderer.section("Settings:")
    renderer.text(
        json.dumps(effective_config(session.config), indent=2, sort_keys=True, ensure_ascii=False)
    )
    return 0


def _cmd_init_config(args: argparse.Namespace) -> int:
    session = _open_session(args)
    try:
        written = init_project_config(session.repo_root, session.settings.project_config)
    except ConfigLoadError as exc:
        raise CLIError(str(exc), exit_code=2) from exc
    except OSError as exc:
        raise CLIError(f"unable to write project config: {exc}", exit_code=2) from exc

    _logger.info("project_config_initialized", path=str(written))
    renderer = _get_renderer(args)
    renderer.ok(f"wrote {_display_path(written, session.repo_root)}")
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _report(args: argparse.Namespace, result: WorkspaceResult, schema: SchemaSnapshot) -> int:
    if args.output_format == "json":
        sys.stdout.write(format_json(result))
    else:
        notices = create_renderer(no_color=_flag(args, "no_color"), stream=sys.stderr)
        for issue in schema.issues:
            notices.warning(f"ignored {issue.source} entry {issue.path}: {issue.message}")
        renderer = _get_renderer(args)
        sys.stdout.write(format_text(result, highlight=renderer.severity))

    should_fail = (
        result.error_count > 0
        or result.failure_count > 0
        or (_flag(args, "fail_on_warn") and result.warning_count > 0)
    )
    return 1 if should_fail else 0


def _open_session(args: argparse.Namespace) -> _Session:
    repo_root = _repo_root(args)
    config = _load_effective_config(args, repo_root)
    setup_logging(
        LoggingConfig.from_settings(
            config.get("observability"),
            colors=not _flag(args, "no_color"),
            verbose=_flag(args, "verbose"),
        )
    )
    settings = LintSettings.from_config(config)
    try:
        project = load_project_config(repo_root, settings.project_config)
    except ConfigLoadError as exc:
        raise CLIError(str(exc), exit_code=2) from exc

    schema = PropertySchema(project=project, custom_properties=settings.custom_properties)
    return _Session(
        repo_root=repo_root,
        config=config,
        settings=settings,
        schema=schema.snapshot,
    )


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    no_color = _flag(args, "no_color")
    verbose = _flag(args, "verbose")
    return create_renderer(no_color=no_color, verbose=verbose)


def _repo_root(args: argparse.Namespace) -> Path:
    raw = getattr(args, "repo_root", None)
    if not isinstance(raw, str) or not raw.strip():
        raise CLIError("repo_root must be a non-empty string", exit_code=2)
    candidate = Path(raw).expanduser().resolve()
    if not candidate.exists() or not candidate.is_dir():
        raise CLIError(f"repo root is not a directory: {candidate}", exit_code=2)
    return candidate


def _load_effective_config(args: argparse.Namespace, repo_root: Path) -> dict[str, Any]:
    config_path = getattr(args, "config_path", None)
    try:
        return load_config(config_path, base_dir=repo_root)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _resolve_file(raw: str, repo_root: Path) -> Path:
    candidate = Path(raw).expanduser()
    resolved = candidate if candidate.is_absolute() else repo_root / candidate
    if not resolved.is_file():
        raise CLIError(f"file not found: {raw}", exit_code=2)
    return resolved


def _display_path(path: Path, repo_root: Path) -> str:
    try:
        return path.resolve().relative_to(repo_root).as_posix()
    except ValueError:
        return path.as_posix()


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "run_cli"]
