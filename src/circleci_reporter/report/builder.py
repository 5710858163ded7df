"""Run lifecycle handlers.

Three functions over an explicit ReportContext:

- on_run_start: validate config, capture the start time
- on_test_end: fold one attempt into the identity-keyed record table
- on_run_end: derive counters, render, hash and write the report

Retries collapse because the table is keyed by test identity and the last
attempt wins. Counters are derived from the final table, never tallied
per event.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from circleci_reporter.config.models import HASH_PLACEHOLDER, ReporterConfig
from circleci_reporter.core.errors import ConfigError
from circleci_reporter.core.logging import get_logger
from circleci_reporter.report.models import (
    FAILING_OUTCOMES,
    FailureDetail,
    ReportContext,
    ReportSummary,
    RunMetadata,
    TestCase,
    TestOutcome,
    TestRecord,
    TestResult,
)
from circleci_reporter.report.render import format_seconds, format_timestamp, render_xml
from circleci_reporter.report.sanitize import strip_ansi
from circleci_reporter.report.writer import content_hash, resolve_result_path, write_report

log = get_logger(__name__)

TIMEOUT_FAILURE = FailureDetail(
    message="Test timeout",
    type="Timeout",
    body="Test exceeded timeout",
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def classname_for(title_path: Iterable[str]) -> str:
    """Dot-join the enclosing groups, i.e. the title path minus the test's own title."""
    segments = list(title_path)
    return ".".join(segments[:-1])


def resolve_file(file_path: str, project: str | None) -> str:
    """Prefix the project segment onto a test file path.

    Absolute file paths are nested under the project too: ``spec`` + ``/abs/a.ts``
    gives ``spec/abs/a.ts``.
    """
    if not project:
        return file_path
    return posixpath.normpath(posixpath.join(project, file_path.lstrip("/")))


def failure_for(outcome: TestOutcome, result: TestResult) -> FailureDetail | None:
    if outcome is TestOutcome.TIMED_OUT:
        return TIMEOUT_FAILURE
    if outcome is not TestOutcome.FAILED:
        return None
    error = result.error
    if error is None:
        return FailureDetail(message="", type="", body="")
    message = error.message or ""
    return FailureDetail(
        message=message,
        type=error.name or "",
        body=error.stack or message,
    )


def build_record(
    test: TestCase, result: TestResult, config: ReporterConfig
) -> TestRecord | None:
    """Build the render-ready record for one attempt. None for unknown statuses."""
    outcome = TestOutcome.parse(result.status)
    if outcome is None:
        return None
    title_path = list(test.title_path) if test.title_path else [test.title]
    return TestRecord(
        name=strip_ansi(test.title),
        file=resolve_file(test.file or "", config.project),
        time=format_seconds(result.duration),
        classname=strip_ansi(classname_for(title_path)),
        outcome=outcome,
        failure=failure_for(outcome, result),
    )


def summarize(records: Iterable[TestRecord]) -> ReportSummary:
    """Derive counters with a single pass over the final records."""
    tests = failures = skipped = 0
    for record in records:
        tests += 1
        if record.outcome in FAILING_OUTCOMES:
            failures += 1
        elif record.outcome is TestOutcome.SKIPPED:
            skipped += 1
    return ReportSummary(tests=tests, failures=failures, skipped=skipped)


# =============================================================================
# Lifecycle
# =============================================================================


def on_run_start(
    config: ReporterConfig | None = None, *, now: datetime | None = None
) -> ReportContext:
    """Validate config and open a new run.

    Raises:
        ConfigError: result_file_name lacks the ``[hash]`` placeholder.
    """
    if config is None:
        config = ReporterConfig()
    if HASH_PLACEHOLDER not in config.result_file_name:
        raise ConfigError.invalid_value(
            "result_file_name",
            config.result_file_name,
            f"must contain '{HASH_PLACEHOLDER}'",
        )
    start_time = now or _utcnow()
    log.info(
        "run_started",
        start_time=format_timestamp(start_time),
        results_dir=config.results_dir,
        result_file_name=config.result_file_name,
    )
    return ReportContext(config=config, metadata=RunMetadata(start_time=start_time))


def on_test_end(ctx: ReportContext, test: TestCase, result: TestResult) -> TestRecord | None:
    """Upsert the attempt under the test's identity. Last attempt wins."""
    record = build_record(test, result, ctx.config)
    if record is None:
        log.warning("unknown_outcome_ignored", test=test.title, status=str(result.status))
        return None
    replaced = test.id in ctx.records
    ctx.records[test.id] = record
    log.debug(
        "test_recorded",
        test=record.name,
        outcome=record.outcome.value,
        time=record.time,
        replaced=replaced,
    )
    return record


def on_run_end(ctx: ReportContext, *, now: datetime | None = None) -> Path:
    """Render the final table, write it to its content-addressed path and return the path.

    Filesystem errors propagate unchanged.
    """
    end_time = now or _utcnow()
    ctx.metadata.duration_millis = (end_time - ctx.metadata.start_time).total_seconds() * 1000

    summary = summarize(ctx.records.values())
    xml_text = render_xml(ctx, summary)
    path = resolve_result_path(ctx.config, content_hash(xml_text))
    write_report(path, xml_text)

    log.info(
        "run_finished",
        path=str(path),
        tests=summary.tests,
        failures=summary.failures,
        skipped=summary.skipped,
        duration_ms=round(ctx.metadata.duration_millis),
    )
    return path
