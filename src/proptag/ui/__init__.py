"""UI package exports for the CLI and its rendering layer."""

from proptag.ui.cli import CLIError, build_parser, run_cli
from proptag.ui.render import CLIRenderer, create_renderer

__all__ = [
    "CLIError",
    "CLIRenderer",
    "build_parser",
    "create_renderer",
    "run_cli",
]
