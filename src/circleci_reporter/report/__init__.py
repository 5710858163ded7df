"""Report building: lifecycle handlers, rendering and persistence."""

from circleci_reporter.report.builder import (
    build_record,
    on_run_end,
    on_run_start,
    on_test_end,
    summarize,
)
from circleci_reporter.report.models import (
    FailureDetail,
    ReportContext,
    ReportSummary,
    RunMetadata,
    TestCase,
    TestError,
    TestOutcome,
    TestRecord,
    TestResult,
)
from circleci_reporter.report.render import render_xml
from circleci_reporter.report.sanitize import remove_invalid_characters, strip_ansi
from circleci_reporter.report.writer import content_hash, resolve_result_path, write_report

__all__ = [
    # Lifecycle
    "on_run_start",
    "on_test_end",
    "on_run_end",
    "build_record",
    "summarize",
    # Models
    "FailureDetail",
    "ReportContext",
    "ReportSummary",
    "RunMetadata",
    "TestCase",
    "TestError",
    "TestOutcome",
    "TestRecord",
    "TestResult",
    # Output
    "render_xml",
    "remove_invalid_characters",
    "strip_ansi",
    "content_hash",
    "resolve_result_path",
    "write_report",
]
