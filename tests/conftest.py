"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from circleci_reporter.config.models import ReporterConfig  # noqa: E402
from circleci_reporter.report.models import TestCase, TestError, TestResult  # noqa: E402

MakeTest = Callable[..., TestCase]
MakeResult = Callable[..., TestResult]


@pytest.fixture
def start_time() -> datetime:
    return datetime(2024, 5, 17, 9, 30, 15, 123000, tzinfo=UTC)


@pytest.fixture
def config(tmp_path: Path) -> ReporterConfig:
    """Reporter config writing into a temp directory."""
    return ReporterConfig(results_dir=str(tmp_path / "results"))


@pytest.fixture
def make_test() -> MakeTest:
    """Factory for TestCase; identity defaults to the joined title path."""

    def _make(
        title: str,
        title_path: list[str] | None = None,
        file: str = "path/to/file.spec.ts",
        test_id: str | None = None,
    ) -> TestCase:
        path = title_path if title_path is not None else ["root", title]
        return TestCase(id=test_id or "::".join(path), title=title, title_path=path, file=file)

    return _make


@pytest.fixture
def make_result() -> MakeResult:
    def _make(
        status: str,
        duration: float | None = 0,
        error: TestError | None = None,
    ) -> TestResult:
        return TestResult(status=status, duration=duration, error=error)

    return _make
