"""Report data model.

Host-facing inputs (TestCase, TestResult, TestError) and the render-ready
structures the builder folds them into.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from circleci_reporter.config.models import ReporterConfig

# =============================================================================
# Outcomes
# =============================================================================


class TestOutcome(StrEnum):
    """Terminal classification of a single attempt."""

    __test__ = False

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    TIMED_OUT = "timedOut"

    @classmethod
    def parse(cls, value: object) -> TestOutcome | None:
        """Map a host status to an outcome, None when unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return None


FAILING_OUTCOMES = frozenset({TestOutcome.FAILED, TestOutcome.TIMED_OUT})


# =============================================================================
# Host inputs
# =============================================================================


@dataclass(frozen=True)
class TestError:
    """Error payload of a failed attempt. Every part is optional."""

    __test__ = False

    message: str | None = None
    stack: str | None = None
    name: str | None = None  # Error category, e.g. "AssertionError"


@dataclass(frozen=True)
class TestCase:
    """A logical test, stable across retries."""

    __test__ = False

    id: Hashable
    title: str
    title_path: Sequence[str] = ()
    file: str = ""


@dataclass(frozen=True)
class TestResult:
    """One attempt of a test."""

    __test__ = False

    status: str
    duration: float | None = None  # milliseconds
    error: TestError | None = None


# =============================================================================
# Render-ready records
# =============================================================================


@dataclass(frozen=True)
class FailureDetail:
    """Body of a ``<failure>`` element."""

    message: str
    type: str
    body: str


@dataclass(frozen=True)
class TestRecord:
    """A ``<testcase>`` element, built from the latest attempt of a test."""

    __test__ = False

    name: str
    file: str
    time: str  # seconds, 4 decimals
    classname: str
    outcome: TestOutcome
    failure: FailureDetail | None = None


@dataclass
class RunMetadata:
    start_time: datetime
    duration_millis: float | None = None


@dataclass(frozen=True)
class ReportSummary:
    """Counters derived from the final record table."""

    tests: int = 0
    failures: int = 0
    skipped: int = 0


@dataclass
class ReportContext:
    """Mutable state of one run: metadata plus the identity-keyed record table.

    ``records`` keeps first-insertion order; overwriting a key replaces the
    record but not its position.
    """

    config: ReporterConfig
    metadata: RunMetadata
    records: dict[Hashable, TestRecord] = field(default_factory=dict)
