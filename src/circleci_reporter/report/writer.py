"""Content-addressed report persistence."""

from __future__ import annotations

import hashlib
from pathlib import Path

from circleci_reporter.config.models import HASH_PLACEHOLDER, ReporterConfig

REPORT_SUFFIX = ".xml"


def content_hash(text: str) -> str:
    """MD5 of the UTF-8 encoded text as 32 lowercase hex digits."""
    return hashlib.md5(text.encode("utf-8"), usedforsecurity=False).hexdigest()


def resolve_result_path(config: ReporterConfig, digest: str) -> Path:
    """``<results_dir>/<result_file_name with [hash] replaced>.xml``."""
    file_name = config.result_file_name.replace(HASH_PLACEHOLDER, digest)
    return Path(config.results_dir) / f"{file_name}{REPORT_SUFFIX}"


def write_report(path: Path, text: str) -> None:
    """Create parent directories and write the document, overwriting any existing file.

    OSError is not caught.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8", newline="")
