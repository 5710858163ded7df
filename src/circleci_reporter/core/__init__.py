"""Core module exports."""

from circleci_reporter.core.errors import (
    ConfigError,
    ErrorCode,
    ReporterError,
)
from circleci_reporter.core.logging import (
    configure_logging,
    get_logger,
    route_to_stdlib,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "ReporterError",
    # Logging
    "configure_logging",
    "get_logger",
    "route_to_stdlib",
]
