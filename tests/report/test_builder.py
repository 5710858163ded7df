"""Tests for the run lifecycle handlers."""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from circleci_reporter.config.models import ReporterConfig
from circleci_reporter.core.errors import ConfigError, ErrorCode
from circleci_reporter.report.builder import (
    TIMEOUT_FAILURE,
    build_record,
    classname_for,
    on_run_end,
    on_run_start,
    on_test_end,
    resolve_file,
    summarize,
)
from circleci_reporter.report.models import FailureDetail, TestError, TestOutcome


class TestClassname:
    @pytest.mark.parametrize(
        ("title_path", "expected"),
        [
            (["root", "t1"], "root"),
            (["root", "nested", "t5"], "root.nested"),
            (["t0"], ""),
            ([], ""),
        ],
    )
    def test_drops_own_title_and_joins_groups(self, title_path: list[str], expected: str) -> None:
        assert classname_for(title_path) == expected


class TestResolveFile:
    def test_without_project_returns_path_unchanged(self) -> None:
        assert resolve_file("a/b.spec.ts", None) == "a/b.spec.ts"

    def test_project_is_path_joined(self) -> None:
        assert resolve_file("a/b.spec.ts", "spec") == "spec/a/b.spec.ts"

    def test_redundant_separators_normalized(self) -> None:
        assert resolve_file("./a//b.spec.ts", "spec/") == "spec/a/b.spec.ts"

    def test_absolute_file_nested_under_project(self) -> None:
        assert resolve_file("/home/ci/repo/a/b.spec.ts", "spec") == "spec/home/ci/repo/a/b.spec.ts"

    def test_absolute_project_keeps_root(self) -> None:
        assert resolve_file("/abs/a.spec.ts", "/ci") == "/ci/abs/a.spec.ts"
        assert resolve_file("a.spec.ts", "/ci") == "/ci/a.spec.ts"


class TestBuildRecord:
    """Record shaping for each outcome."""

    def test_passed_record(self, make_test, make_result) -> None:
        record = build_record(make_test("t1"), make_result("passed", 1200), ReporterConfig())

        assert record is not None
        assert record.name == "t1"
        assert record.classname == "root"
        assert record.file == "path/to/file.spec.ts"
        assert record.time == "1.2000"
        assert record.outcome is TestOutcome.PASSED
        assert record.failure is None

    def test_skipped_record_has_no_failure(self, make_test, make_result) -> None:
        record = build_record(make_test("t4"), make_result("skipped", 1500), ReporterConfig())

        assert record is not None
        assert record.outcome is TestOutcome.SKIPPED
        assert record.failure is None

    def test_failed_stack_falls_back_to_message(self, make_test, make_result) -> None:
        error = TestError(name="TestError", message="boom")

        record = build_record(make_test("t2"), make_result("failed", 2500, error), ReporterConfig())

        assert record is not None
        assert record.failure == FailureDetail(message="boom", type="TestError", body="boom")

    def test_failed_prefers_stack_for_body(self, make_test, make_result) -> None:
        error = TestError(message="", stack="some test stack", name="")

        record = build_record(make_test("t3"), make_result("failed", 3500, error), ReporterConfig())

        assert record is not None
        assert record.failure == FailureDetail(message="", type="", body="some test stack")

    def test_failed_without_error_gets_empty_failure(self, make_test, make_result) -> None:
        record = build_record(make_test("t2"), make_result("failed"), ReporterConfig())

        assert record is not None
        assert record.failure == FailureDetail(message="", type="", body="")

    def test_timed_out_uses_fixed_failure(self, make_test, make_result) -> None:
        error = TestError(message="ignored", stack="ignored", name="Ignored")

        record = build_record(make_test("t5"), make_result("timedOut", 30000, error), ReporterConfig())

        assert record is not None
        assert record.outcome is TestOutcome.TIMED_OUT
        assert record.failure == TIMEOUT_FAILURE
        assert record.failure == FailureDetail(
            message="Test timeout", type="Timeout", body="Test exceeded timeout"
        )

    def test_ansi_stripped_from_name_and_classname(self, make_test, make_result) -> None:
        test = make_test(
            "\x1b[31mred title\x1b[39m",
            title_path=["\x1b[1mgroup\x1b[22m", "\x1b[31mred title\x1b[39m"],
        )

        record = build_record(test, make_result("passed"), ReporterConfig())

        assert record is not None
        assert record.name == "red title"
        assert record.classname == "group"

    @pytest.mark.parametrize(("duration", "expected"), [(None, "0.0000"), (0, "0.0000"), (1, "0.0010")])
    def test_duration_defaults(self, make_test, make_result, duration, expected) -> None:
        record = build_record(make_test("t"), make_result("passed", duration), ReporterConfig())

        assert record is not None
        assert record.time == expected

    def test_project_prefixes_file(self, make_test, make_result) -> None:
        test = make_test("t", file="a/b.spec.ts")

        record = build_record(test, make_result("passed"), ReporterConfig(project="spec"))

        assert record is not None
        assert record.file == "spec/a/b.spec.ts"

    def test_project_prefixes_absolute_file(self, make_test, make_result) -> None:
        test = make_test("t", file="/home/ci/repo/a/b.spec.ts")

        record = build_record(test, make_result("passed"), ReporterConfig(project="spec"))

        assert record is not None
        assert record.file == "spec/home/ci/repo/a/b.spec.ts"

    def test_unknown_status_yields_none(self, make_test, make_result) -> None:
        assert build_record(make_test("t"), make_result("interrupted"), ReporterConfig()) is None


class TestOnRunStart:
    def test_template_without_placeholder_raises(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            on_run_start(ReporterConfig(result_file_name="playwright"))

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "[hash]" in exc_info.value.message

    def test_template_with_placeholder_accepted(self, start_time: datetime) -> None:
        ctx = on_run_start(ReporterConfig(result_file_name="run-[hash]-final"), now=start_time)

        assert ctx.metadata.start_time == start_time
        assert ctx.metadata.duration_millis is None
        assert ctx.records == {}

    def test_default_config(self) -> None:
        ctx = on_run_start()

        assert ctx.config == ReporterConfig()
        assert ctx.metadata.start_time.tzinfo is not None


class TestOnTestEnd:
    """Folding attempts into the identity-keyed table."""

    def test_last_attempt_wins(self, make_test, make_result) -> None:
        ctx = on_run_start()
        test = make_test("flaky")

        on_test_end(ctx, test, make_result("failed", 100, TestError(message="first")))
        on_test_end(ctx, test, make_result("timedOut", 200))
        on_test_end(ctx, test, make_result("passed", 300))

        assert list(ctx.records) == [test.id]
        record = ctx.records[test.id]
        assert record.outcome is TestOutcome.PASSED
        assert record.time == "0.3000"
        assert record.failure is None

    def test_overwrite_keeps_first_seen_position(self, make_test, make_result) -> None:
        ctx = on_run_start()
        a, b, c = make_test("a"), make_test("b"), make_test("c")

        for test in (a, b, c):
            on_test_end(ctx, test, make_result("failed"))
        on_test_end(ctx, a, make_result("passed"))
        on_test_end(ctx, b, make_result("skipped"))

        assert list(ctx.records) == [a.id, b.id, c.id]

    def test_unknown_outcome_ignored(self, make_test, make_result) -> None:
        ctx = on_run_start()
        test = make_test("t")
        on_test_end(ctx, test, make_result("passed"))

        result = on_test_end(ctx, test, make_result("interrupted"))

        assert result is None
        assert ctx.records[test.id].outcome is TestOutcome.PASSED

    def test_unknown_outcome_for_new_identity_not_recorded(self, make_test, make_result) -> None:
        ctx = on_run_start()

        on_test_end(ctx, make_test("t"), make_result("rerun"))

        assert ctx.records == {}


class TestSummarize:
    def test_counts_derived_from_final_records(self, make_test, make_result) -> None:
        ctx = on_run_start()
        retried = make_test("retried")
        on_test_end(ctx, retried, make_result("failed"))
        on_test_end(ctx, retried, make_result("passed"))
        on_test_end(ctx, make_test("failed"), make_result("failed"))
        on_test_end(ctx, make_test("timeout"), make_result("timedOut"))
        on_test_end(ctx, make_test("skipped"), make_result("skipped"))

        summary = summarize(ctx.records.values())

        assert summary.tests == 4
        assert summary.failures == 2
        assert summary.skipped == 1

    def test_empty_table(self) -> None:
        summary = summarize([])

        assert (summary.tests, summary.failures, summary.skipped) == (0, 0, 0)


class TestOnRunEnd:
    def test_writes_report_and_sets_duration(
        self, config: ReporterConfig, start_time: datetime, make_test, make_result
    ) -> None:
        ctx = on_run_start(config, now=start_time)
        on_test_end(ctx, make_test("t1"), make_result("passed", 1200))

        path = on_run_end(ctx, now=start_time + timedelta(milliseconds=4500))

        assert ctx.metadata.duration_millis == pytest.approx(4500)
        assert path.parent == Path(config.results_dir)
        assert path.name.startswith("playwright-")
        assert path.suffix == ".xml"
        assert 'time="4.5000"' in path.read_text(encoding="utf-8")

    def test_filesystem_error_propagates(
        self, tmp_path: Path, start_time: datetime, make_test, make_result
    ) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")
        ctx = on_run_start(ReporterConfig(results_dir=str(blocker / "results")), now=start_time)
        on_test_end(ctx, make_test("t1"), make_result("passed"))

        with pytest.raises(OSError):
            on_run_end(ctx, now=start_time)
