# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Fake git handle for testing.

This module provides a FakeGitHandle class that implements GitHandleProtocol
for use in tests without requiring an actual Git repository.
"""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import Self

from githistory.exceptions import QueryFailureError
from githistory.repository._git import FIELD_SEP, RECORD_SEP


def format_log_record(
    sha: str, date: str, subject: str, author: str, email: str
) -> str:
    """Render one commit the way git renders LOG_FORMAT."""
    return FIELD_SEP.join((sha, date, subject, author, email)) + RECORD_SEP + "\n"


@dataclass(slots=True)
class FakeGitHandle:
    """Fake git handle for testing.

    Raw outputs are configured per query; unconfigured queries raise
    QueryFailureError like a failing git call would. Every call is counted
    in `calls` so tests can assert cache hits.

    Example:
        >>> handle = FakeGitHandle()
        >>> handle.set_name_status("abc123", "M\\tsrc/a.ts\\n")
        >>> handle.show_name_status("abc123")
        'M\\tsrc/a.ts\\n'
    """

    root: Path = field(default_factory=lambda: Path("/fake/project"))
    calls: Counter[str] = field(default_factory=Counter)
    closed: bool = False
    submodules: list[str] = field(default_factory=list)
    remotes: dict[str, str] = field(default_factory=dict)
    _logs: dict[str, list[str]] = field(default_factory=dict)
    _name_status: dict[str, str] = field(default_factory=dict)
    _blobs: dict[tuple[str, str], bytes] = field(default_factory=dict)
    _parents: dict[str, str | None] = field(default_factory=dict)
    _blame: dict[str, str] = field(default_factory=dict)

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Mark the handle closed."""
        self.closed = True

    # =========================================================================
    # GitHandleProtocol Methods
    # =========================================================================

    def log_follow(self, relative_path: str, *, max_count: int, skip: int) -> str:
        """Return the configured records for a path, paginated."""
        self.calls["log_follow"] += 1
        if relative_path not in self._logs:
            msg = f"no history configured for {relative_path}"
            raise QueryFailureError(msg, operation="log")
        return "".join(self._logs[relative_path][skip : skip + max_count])

    def show_name_status(self, commit: str) -> str:
        """Return the configured name-status text for a commit."""
        self.calls["show_name_status"] += 1
        if commit not in self._name_status:
            msg = f"unknown revision {commit}"
            raise QueryFailureError(msg, operation="show")
        return self._name_status[commit]

    def show_blob(self, commit: str, relative_path: str) -> bytes | None:
        """Return the configured blob, or None if the path is absent."""
        self.calls["show_blob"] += 1
        if commit not in self._parents:
            msg = f"unknown revision {commit}"
            raise QueryFailureError(msg, operation="show-blob")
        return self._blobs.get((commit, relative_path))

    def parent_of(self, commit: str) -> str | None:
        """Return the configured parent of a commit."""
        self.calls["parent_of"] += 1
        if commit not in self._parents:
            msg = f"unknown revision {commit}"
            raise QueryFailureError(msg, operation="rev-parse")
        return self._parents[commit]

    def blame_porcelain(self, relative_path: str) -> str:
        """Return the configured porcelain text for a path."""
        self.calls["blame_porcelain"] += 1
        if relative_path not in self._blame:
            msg = f"no such path {relative_path}"
            raise QueryFailureError(msg, operation="blame")
        return self._blame[relative_path]

    def remote_url(self, name: str = "origin") -> str | None:
        """Return the configured remote URL."""
        self.calls["remote_url"] += 1
        return self.remotes.get(name)

    def submodule_paths(self) -> list[str]:
        """Return the configured submodule paths."""
        self.calls["submodule_paths"] += 1
        return list(self.submodules)

    # =========================================================================
    # Test Helper Methods
    # =========================================================================

    def add_commit(
        self,
        sha: str,
        *,
        parent: str | None = None,
        name_status: str = "",
        files: dict[str, bytes] | None = None,
    ) -> None:
        """Register a commit with its parent, name-status and blobs.

        Args:
            sha: Commit SHA.
            parent: Parent SHA, or None for a root commit.
            name_status: Raw name-status output for the commit.
            files: Blob content by repository-relative path.
        """
        self._parents[sha] = parent
        self._name_status[sha] = name_status
        for path, content in (files or {}).items():
            self._blobs[(sha, path)] = content

    def set_log(self, relative_path: str, records: list[str]) -> None:
        """Set the newest-first log records for a path.

        Args:
            relative_path: Repository-relative path.
            records: Records built with format_log_record().
        """
        self._logs[relative_path] = records

    def set_name_status(self, commit: str, output: str) -> None:
        """Set raw name-status output for a commit."""
        self._name_status[commit] = output

    def set_blame(self, relative_path: str, output: str) -> None:
        """Set raw porcelain blame output for a path."""
        self._blame[relative_path] = output
