"""pytest host adapter.

Inactive unless ``--circleci-report`` is passed (or ``circleci_report = true``
is set in the ini file). Feeds pytest's per-phase reports into a
CircleCIReporter, keyed by node id, so a later phase or a rerun of the
same node replaces the earlier record.
"""

from __future__ import annotations

import re
from typing import Any

import pytest

from circleci_reporter.core.errors import ConfigError
from circleci_reporter.core.logging import route_to_stdlib
from circleci_reporter.report.models import TestCase, TestError, TestOutcome, TestResult
from circleci_reporter.reporter import CircleCIReporter

PLUGIN_NAME = "circleci-reporter"

# "pkg.mod.ErrorName: message" as produced by ExceptionInfo.exconly()
_EXCONLY_RE = re.compile(r"^(?P<name>[A-Za-z_][\w.]*): ?(?P<message>.*)$", re.DOTALL)
# pytest-timeout fails the test with "Failed: Timeout >Ns"
_TIMEOUT_PREFIX = "Timeout"


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("circleci-report", "CircleCI JUnit report")
    group.addoption(
        "--circleci-report",
        action="store_true",
        default=False,
        help="Write a JUnit XML report with one testcase per test (last attempt wins).",
    )
    group.addoption(
        "--circleci-results-dir",
        default=None,
        help="Report directory (default: ./test_results/playwright).",
    )
    group.addoption(
        "--circleci-project",
        default=None,
        help="Path segment prefixed onto test file paths.",
    )
    group.addoption(
        "--circleci-result-file-name",
        default=None,
        help="Report file name template, must contain '[hash]' (default: playwright-[hash]).",
    )
    group.addoption(
        "--circleci-config",
        default=None,
        help="YAML file with reporter settings. Command-line options take precedence.",
    )
    parser.addini(
        "circleci_report",
        type="bool",
        default=False,
        help="Enable the CircleCI JUnit report.",
    )


def pytest_configure(config: pytest.Config) -> None:
    enabled = config.getoption("circleci_report") or config.getini("circleci_report")
    # xdist workers forward their reports to the controller, which writes the file.
    if not enabled or hasattr(config, "workerinput"):
        return
    route_to_stdlib()
    # pytest owns logging, so the logging section of the config is not applied.
    try:
        reporter = CircleCIReporter(
            project=config.getoption("circleci_project"),
            results_dir=config.getoption("circleci_results_dir"),
            result_file_name=config.getoption("circleci_result_file_name"),
            config_path=config.getoption("circleci_config"),
        )
    except ConfigError as e:
        raise pytest.UsageError(str(e)) from e
    config.pluginmanager.register(CircleCIReportPlugin(reporter), PLUGIN_NAME)


def _split_nodeid(nodeid: str) -> tuple[str, list[str]]:
    """``tests/test_a.py::TestX::test_y`` -> (file, [module, *classes, name])."""
    file_path, *names = nodeid.split("::")
    module = re.sub(r"\.py$", "", file_path).replace("/", ".")
    if not names:
        return file_path, [file_path]
    return file_path, [module, *names]


def _test_case(report: pytest.TestReport) -> TestCase:
    file_path, title_path = _split_nodeid(report.nodeid)
    return TestCase(id=report.nodeid, title=title_path[-1], title_path=title_path, file=file_path)


def _error_from(report: pytest.TestReport) -> TestError:
    crash = getattr(report.longrepr, "reprcrash", None)
    exconly = getattr(crash, "message", None) or ""
    name = message = None
    match = _EXCONLY_RE.match(exconly)
    if match:
        name, message = match.group("name"), match.group("message")
    elif exconly:
        message = exconly
    return TestError(message=message, stack=report.longreprtext or None, name=name)


def _status(report: pytest.TestReport, error: TestError | None) -> str:
    if report.passed:
        return TestOutcome.PASSED
    if report.skipped:
        return TestOutcome.SKIPPED
    if report.failed:
        if error and error.name == "Failed" and (error.message or "").startswith(_TIMEOUT_PREFIX):
            return TestOutcome.TIMED_OUT
        return TestOutcome.FAILED
    # e.g. "rerun" from pytest-rerunfailures
    return report.outcome


class CircleCIReportPlugin:
    """Hook implementations bound to one reporter for the session."""

    def __init__(self, reporter: CircleCIReporter) -> None:
        self.reporter = reporter

    def pytest_sessionstart(self, session: pytest.Session) -> None:  # noqa: ARG002
        try:
            self.reporter.on_begin()
        except ConfigError as e:
            raise pytest.UsageError(str(e)) from e

    def pytest_runtest_logreport(self, report: pytest.TestReport) -> None:
        # Setup/teardown only matter when they did not pass; the call phase always counts.
        if report.when != "call" and report.passed:
            return
        if report.when == "teardown" and report.skipped:
            return
        error = _error_from(report) if report.failed else None
        result = TestResult(
            status=_status(report, error),
            duration=report.duration * 1000,
            error=error,
        )
        self.reporter.on_test_end(_test_case(report), result)

    def pytest_sessionfinish(self, session: pytest.Session, exitstatus: Any) -> None:  # noqa: ARG002
        self.reporter.on_end()

    def pytest_terminal_summary(self, terminalreporter: Any) -> None:
        if self.reporter.result_path is not None:
            terminalreporter.write_sep("-", f"circleci report: {self.reporter.result_path}")
