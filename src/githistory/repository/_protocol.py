# ruff: noqa: TC003  # Path needed at runtime for Protocol method bodies
"""Git handle protocol for type-safe dependency injection.

This module defines a runtime-checkable Protocol that both GitRepository
and FakeGitHandle satisfy. Every method returns raw query output; parsing
happens in the service layer.
"""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class GitHandleProtocol(Protocol):
    """Protocol for raw version-control queries bound to one root.

    All methods raise QueryFailureError when the underlying query fails.

    Example:
        >>> def head_files(handle: GitHandleProtocol, commit: str) -> str:
        ...     return handle.show_name_status(commit)
    """

    @property
    def root(self) -> Path:
        """Absolute path to the repository working tree."""
        ...

    def close(self) -> None:
        """Release resources held by the handle."""
        ...

    def log_follow(self, relative_path: str, *, max_count: int, skip: int) -> str:
        """Return raw rename-following log output for a path.

        Args:
            relative_path: Repository-relative path with forward slashes.
            max_count: Maximum number of commits to return.
            skip: Number of newest commits to skip.

        Returns:
            One record per commit, fields separated by the unit separator
            and records terminated by the record separator (see
            LOG_FORMAT in githistory.repository._git).
        """
        ...

    def show_name_status(self, commit: str) -> str:
        """Return the raw name-status summary for a commit."""
        ...

    def show_blob(self, commit: str, relative_path: str) -> bytes | None:
        """Return file content at a commit, or None if the path is absent."""
        ...

    def parent_of(self, commit: str) -> str | None:
        """Return the first parent SHA, or None for a root commit."""
        ...

    def blame_porcelain(self, relative_path: str) -> str:
        """Return raw porcelain blame output for a working-tree file."""
        ...

    def remote_url(self, name: str = "origin") -> str | None:
        """Return the configured URL of a remote, or None if not set."""
        ...

    def submodule_paths(self) -> list[str]:
        """Return repository-relative paths of registered submodules."""
        ...
