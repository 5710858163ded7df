"""Host-facing reporter object.

Mirrors the callbacks a test runner invokes (begin, test begin/end, end)
and delegates to the lifecycle handlers in ``circleci_reporter.report``.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

from circleci_reporter.config.loader import load_config
from circleci_reporter.config.models import LoggingConfig, ReporterConfig
from circleci_reporter.core.logging import configure_logging
from circleci_reporter.report.builder import on_run_end, on_run_start, on_test_end
from circleci_reporter.report.models import ReportContext, TestCase, TestRecord, TestResult


class CircleCIReporter:
    """Collects test attempts during a run and writes one JUnit XML file at the end.

    Without an explicit ``config``, settings are resolved by ``load_config``:
    keyword options, then ``CIRCLECI_REPORTER__*`` env vars, then the YAML
    file at ``config_path``, then defaults.

    Example:
        reporter = CircleCIReporter(project="chromium")
        reporter.on_begin()
        reporter.on_test_end(test, result)  # once per attempt
        path = reporter.on_end()
    """

    def __init__(
        self,
        config: ReporterConfig | None = None,
        *,
        project: str | None = None,
        results_dir: str | None = None,
        result_file_name: str | None = None,
        config_path: Path | str | None = None,
        setup_logging: bool = False,
    ) -> None:
        """
        Args:
            config: Use as-is, skipping env vars and config files.
            project, results_dir, result_file_name: Highest-precedence overrides.
            config_path: Optional YAML file with ``reporter:`` / ``logging:`` sections.
            setup_logging: Apply the logging section in on_begin. Leave off when
                the host owns logging.

        Raises:
            ConfigError: Missing or invalid config file, or invalid values.
        """
        logging_config = LoggingConfig()
        if config is None:
            options = {
                "project": project,
                "results_dir": results_dir,
                "result_file_name": result_file_name,
            }
            overrides = {k: v for k, v in options.items() if v is not None}
            settings = load_config(config_path, **({"reporter": overrides} if overrides else {}))
            config = settings.reporter
            logging_config = settings.logging
        self.config = config
        self.logging_config = logging_config
        self.setup_logging = setup_logging
        self._ctx: ReportContext | None = None
        self.result_path: Path | None = None

    @property
    def context(self) -> ReportContext:
        if self._ctx is None:
            raise RuntimeError("on_begin() has not been called")
        return self._ctx

    def on_begin(
        self,
        config: Any = None,  # noqa: ARG002
        suite: Any = None,  # noqa: ARG002
        *,
        now: datetime | None = None,
    ) -> None:
        """Start the run. Host config and suite tree are not inspected.

        Raises:
            ConfigError: result_file_name lacks the ``[hash]`` placeholder.
        """
        if self.setup_logging:
            configure_logging(config=self.logging_config)
        self._ctx = on_run_start(self.config, now=now)
        self.result_path = None

    def on_test_begin(self, test: TestCase, result: TestResult) -> None:
        """Attempts are handled in on_test_end."""

    def on_test_end(self, test: TestCase, result: TestResult) -> TestRecord | None:
        return on_test_end(self.context, test, result)

    def on_end(self, result: Any = None, *, now: datetime | None = None) -> Path:  # noqa: ARG002
        """Write the report and return its path."""
        self.result_path = on_run_end(self.context, now=now)
        return self.result_path
