"""Public observability primitives: structured logging setup."""

from proptag.observability.logging import LoggingConfig, reset_logging, setup_logging

__all__ = ["LoggingConfig", "reset_logging", "setup_logging"]
