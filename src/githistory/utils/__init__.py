"""Shared utilities for githistory."""

from githistory.utils._logging import (
    LogFormatType,
    create_history_logger,
    create_null_logger,
)

__all__ = [
    "LogFormatType",
    "create_history_logger",
    "create_null_logger",
]
