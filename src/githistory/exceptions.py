"""githistory exceptions."""

from pathlib import Path
from typing import Any


class GitHistoryError(Exception):
    """Base exception for githistory errors."""


class NotARepositoryError(GitHistoryError):
    """Raised when no repository owns the given path.

    Attributes:
        path: The path that was searched for a repository.
    """

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            path: The path that was searched for a repository.
        """
        super().__init__(message)
        self.path: Path | None = path


class QueryFailureError(GitHistoryError):
    """Raised when an underlying version-control query fails.

    Covers non-zero git exits, timeouts, unknown revisions and a missing
    git binary. The service layer converts this into an empty result.

    Attributes:
        operation: Name of the query that failed (e.g. "blame").
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and query context."""
        super().__init__(message)
        self.operation: str = operation
        self.cause: Exception | None = cause


class ConfigError(GitHistoryError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be read or parsed."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        """Initialize with error message and file context."""
        super().__init__(message)
        self.path: Path | None = path


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.source: str | None = source
