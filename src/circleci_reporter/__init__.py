"""circleci-reporter: JUnit XML reports for CircleCI test metadata.

Collects test attempts, keeps the last attempt of every test, and writes
one deterministic report per run to a content-addressed file.
"""

from circleci_reporter.config import ReporterConfig, load_config
from circleci_reporter.core.errors import ConfigError, ReporterError
from circleci_reporter.report import (
    ReportContext,
    TestCase,
    TestError,
    TestOutcome,
    TestResult,
    on_run_end,
    on_run_start,
    on_test_end,
)
from circleci_reporter.reporter import CircleCIReporter

__version__ = "0.1.0"

__all__ = [
    "CircleCIReporter",
    "ConfigError",
    "ReportContext",
    "ReporterConfig",
    "ReporterError",
    "TestCase",
    "TestError",
    "TestOutcome",
    "TestResult",
    "load_config",
    "on_run_end",
    "on_run_start",
    "on_test_end",
]
