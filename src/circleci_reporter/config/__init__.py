"""Config module exports."""

from circleci_reporter.config.loader import load_config
from circleci_reporter.config.models import (
    DEFAULT_RESULT_FILE_NAME,
    DEFAULT_RESULTS_DIR,
    HASH_PLACEHOLDER,
    LoggingConfig,
    LogOutputConfig,
    ReporterConfig,
    ReporterSettingsModel,
)

__all__ = [
    "load_config",
    "DEFAULT_RESULT_FILE_NAME",
    "DEFAULT_RESULTS_DIR",
    "HASH_PLACEHOLDER",
    "LoggingConfig",
    "LogOutputConfig",
    "ReporterConfig",
    "ReporterSettingsModel",
]
