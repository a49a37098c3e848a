"""
proptag — structured logging setup

File: src/proptag/observability/logging.py

Purpose
- Configure ``structlog`` once per process from the ``[observability]``
  settings: level filtering, console or JSON-lines rendering, contextvars
  merging for per-file context.

Functional requirements
- Log output goes to stderr by default so reports on stdout stay parseable.
- JSON lines use sorted keys and ISO-8601 UTC timestamps.
- Reconfiguring replaces the previous configuration.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final, TextIO

import structlog

from proptag.config.schema import LOG_FORMATS, LOG_LEVELS

_DEFAULT_LEVEL: Final[str] = "WARNING"
_DEFAULT_FORMAT: Final[str] = "console"


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: str = _DEFAULT_LEVEL
    log_format: str = _DEFAULT_FORMAT
    colors: bool = True

    @classmethod
    def from_settings(
        cls,
        observability_config: Mapping[str, object] | None = None,
        *,
        colors: bool = True,
        verbose: bool = False,
    ) -> LoggingConfig:
        """Build from an ``[observability]`` mapping; ``verbose`` forces DEBUG."""

        cfg = dict(observability_config or {})
        raw_level = cfg.get("log_level", _DEFAULT_LEVEL)
        level = raw_level.upper() if isinstance(raw_level, str) else _DEFAULT_LEVEL
        if level not in LOG_LEVELS:
            level = _DEFAULT_LEVEL
        raw_format = cfg.get("log_format", _DEFAULT_FORMAT)
        log_format = raw_format if raw_format in LOG_FORMATS else _DEFAULT_FORMAT
        return cls(
            level="DEBUG" if verbose else level,
            log_format=str(log_format),
            colors=colors,
        )


def setup_logging(config: LoggingConfig | None = None, *, stream: TextIO | None = None) -> None:
    """Configure structlog for the whole process."""

    cfg = config or LoggingConfig()
    renderer: structlog.types.Processor
    if cfg.log_format == "json":
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=cfg.colors)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(cfg.level)),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def reset_logging() -> None:
    """Restore structlog's built-in defaults."""

    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def _level_number(level: str) -> int:
    number = logging.getLevelNamesMapping().get(level.upper())
    if number is None:
        raise ValueError(f"unknown log level {level!r}; expected one of: {', '.join(LOG_LEVELS)}")
    return number


__all__ = ["LoggingConfig", "reset_logging", "setup_logging"]
