"""Configuration models.

This module provides the frozen Pydantic models describing githistory
settings. Defaults reproduce the behavior of an unconfigured session.
"""

from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty writes to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""


class HistoryConfig(BaseModel):
    """Top-level githistory configuration.

    Attributes:
        page_size: Commits per log page.
        debounce_ms: Quiet period that ends a batch of repository
            metadata changes; one cache flush follows each batch.
        debounce_max_ms: Longest a batch of changes may keep growing
            before it is flushed anyway.
        git_timeout_seconds: Timeout applied to each git subprocess.
        git_executable: Name or path of the git binary.
        logging: Logging section.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    page_size: int = Field(default=50, gt=0)
    debounce_ms: int = Field(default=500, gt=0)
    debounce_max_ms: int = Field(default=1600, gt=0)
    git_timeout_seconds: float = Field(default=30.0, gt=0)
    git_executable: str = "git"
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
