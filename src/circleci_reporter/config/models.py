"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (CIRCLECI_REPORTER__SECTION__KEY)
3. YAML config file passed to load_config()
4. Built-in defaults (this file)

Environment Variable Format:
    CIRCLECI_REPORTER__<SECTION>__<KEY>=<VALUE>

Examples:
    CIRCLECI_REPORTER__REPORTER__RESULTS_DIR=/tmp/results
    CIRCLECI_REPORTER__REPORTER__PROJECT=chromium
    CIRCLECI_REPORTER__LOGGING__LEVEL=DEBUG
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

HASH_PLACEHOLDER = "[hash]"
DEFAULT_RESULTS_DIR = "./test_results/playwright"
DEFAULT_RESULT_FILE_NAME = "playwright-[hash]"


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        CIRCLECI_REPORTER__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every recorded test attempt.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ReporterConfig(BaseModel):
    """Report output configuration.

    The ``[hash]`` placeholder in ``result_file_name`` is checked when the
    run starts, not here, so a config can be built before it is used.

    Env vars:
        CIRCLECI_REPORTER__REPORTER__PROJECT: Path segment prefixed onto test file paths
        CIRCLECI_REPORTER__REPORTER__RESULTS_DIR: Output directory
        CIRCLECI_REPORTER__REPORTER__RESULT_FILE_NAME: File name template
    """

    project: str | None = Field(
        default=None,
        description="Path segment joined in front of every recorded test file path.",
    )
    results_dir: str = Field(
        default=DEFAULT_RESULTS_DIR,
        description="Directory the report is written to. Created if missing.",
    )
    result_file_name: str = Field(
        default=DEFAULT_RESULT_FILE_NAME,
        description="Report file name without extension. Must contain '[hash]'.",
    )

    @field_validator("project", "results_dir", "result_file_name", mode="before")
    @classmethod
    def empty_as_default(cls, v: object, info: ValidationInfo) -> object:
        # Empty strings behave as unset.
        if v == "" and info.field_name:
            return cls.model_fields[info.field_name].default
        return v


class ReporterSettingsModel(BaseModel):
    """Root configuration.

    All settings can be configured via:
    1. Environment variables: CIRCLECI_REPORTER__SECTION__KEY
    2. A YAML config file
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    reporter: ReporterConfig = Field(default_factory=ReporterConfig)
