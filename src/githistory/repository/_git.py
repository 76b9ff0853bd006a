# ruff: noqa: TC003  # Path needed at runtime for method bodies
"""Git repository handle.

This module provides GitRepository, the concrete query handle bound to a
single repository root. Object, config and submodule access goes through
dulwich; rename-following log, name-status and blame use the git binary.
"""

import subprocess
from pathlib import Path
from types import TracebackType
from typing import Final, Self

from dulwich import porcelain
from dulwich.errors import NotGitRepository, NotTreeError
from dulwich.object_store import tree_lookup_path
from dulwich.objects import Blob
from dulwich.objectspec import AmbiguousShortId, parse_commit
from dulwich.repo import Repo

from githistory.exceptions import NotARepositoryError, QueryFailureError

# Unit separator between fields, record separator after each commit
FIELD_SEP: Final = "\x1f"
RECORD_SEP: Final = "\x1e"

# hash, strict ISO author date, subject, author name, author email
LOG_FORMAT: Final = "%H%x1f%aI%x1f%s%x1f%an%x1f%ae%x1e"

DEFAULT_TIMEOUT_SECONDS: Final = 30.0


def decode_bytes(value: bytes | str) -> str:
    """Decode bytes to str if needed.

    Args:
        value: A bytes or str value.

    Returns:
        The value as a string.
    """
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def split_log_records(output: str) -> list[list[str]]:
    """Split LOG_FORMAT output into per-commit field lists.

    Args:
        output: Raw log output.

    Returns:
        One list of fields per commit, in output order.
    """
    records: list[list[str]] = []
    for raw in output.split(RECORD_SEP):
        record = raw.strip("\n")
        if not record:
            continue
        records.append(record.split(FIELD_SEP))
    return records


class GitRepository:
    """Query handle for one git repository.

    The class implements the context manager protocol; the underlying
    dulwich Repo is closed on exit.

    Attributes:
        root: The resolved path to the repository working tree.

    Example:
        >>> with GitRepository(Path("/path/to/repo")) as repo:
        ...     print(repo.parent_of("HEAD"))
    """

    __slots__: Final = ("_git", "_repo", "_root", "_timeout")

    def __init__(
        self,
        root: Path,
        *,
        git_executable: str = "git",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Open the repository at root.

        Args:
            root: Working tree directory containing ``.git``.
            git_executable: Name or path of the git binary.
            timeout_seconds: Timeout for each git subprocess.

        Raises:
            NotARepositoryError: If root is not a git repository.
        """
        self._root: Path = root.resolve()
        self._git: str = git_executable
        self._timeout: float = timeout_seconds
        try:
            self._repo: Repo = Repo(str(self._root))
        except NotGitRepository as e:
            msg = f"Not a git repository: {root}"
            raise NotARepositoryError(msg, path=root) from e

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    def __enter__(self) -> Self:
        """Enter the context manager.

        Returns:
            The repository instance.
        """
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager and close the repository."""
        self.close()

    def close(self) -> None:
        """Close the underlying dulwich Repo."""
        self._repo.close()

    @property
    def root(self) -> Path:
        """Get the resolved root path of the repository."""
        return self._root

    # =========================================================================
    # Subprocess Queries
    # =========================================================================

    def _run_git(self, operation: str, *args: str) -> str:
        """Run git in the repository root and return stdout.

        Args:
            operation: Query name used in error context.
            *args: Arguments passed to git.

        Returns:
            Captured standard output.

        Raises:
            QueryFailureError: If git is missing, times out or exits non-zero.
        """
        cmd = [self._git, *args]
        try:
            result = subprocess.run(  # noqa: S603
                cmd,
                cwd=str(self._root),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as e:
            msg = f"git executable not found: {self._git}"
            raise QueryFailureError(msg, operation=operation, cause=e) from e
        except subprocess.TimeoutExpired as e:
            msg = f"git {operation} timed out after {self._timeout}s"
            raise QueryFailureError(msg, operation=operation, cause=e) from e

        if result.returncode != 0:
            msg = f"git {operation} failed: {result.stderr.strip()}"
            raise QueryFailureError(msg, operation=operation)

        return result.stdout

    def log_follow(self, relative_path: str, *, max_count: int, skip: int) -> str:
        """Return rename-following log output for a path.

        Args:
            relative_path: Repository-relative path.
            max_count: Maximum number of commits.
            skip: Number of newest commits to skip.

        Returns:
            Raw output in LOG_FORMAT, newest commit first.
        """
        return self._run_git(
            "log",
            "log",
            "--follow",
            f"--max-count={max_count}",
            f"--skip={skip}",
            f"--format={LOG_FORMAT}",
            "--",
            relative_path,
        )

    def show_name_status(self, commit: str) -> str:
        """Return the NUL-separated name-status summary of a commit.

        ``-z`` keeps paths verbatim instead of C-quoting non-ASCII names.
        """
        return self._run_git(
            "show",
            "show",
            "-z",
            "--name-status",
            "--pretty=format:",
            commit,
            "--",
        )

    def blame_porcelain(self, relative_path: str) -> str:
        """Return porcelain blame output for a working-tree file."""
        return self._run_git("blame", "blame", "--porcelain", "--", relative_path)

    # =========================================================================
    # Object Queries
    # =========================================================================

    def _parse_commit(self, commit: str, operation: str) -> object:
        """Resolve a committish (full or abbreviated SHA, ref) to a commit.

        Raises:
            QueryFailureError: If the revision cannot be resolved.
        """
        try:
            return parse_commit(self._repo, commit)
        except (KeyError, ValueError, AmbiguousShortId) as e:
            msg = f"Unknown revision: {commit}"
            raise QueryFailureError(msg, operation=operation, cause=e) from e

    def parent_of(self, commit: str) -> str | None:
        """Return the first parent of a commit.

        Args:
            commit: Commit SHA or other committish.

        Returns:
            Parent SHA hex string, or None for a root commit.
        """
        commit_obj = self._parse_commit(commit, "rev-parse")
        parents: list[bytes] = getattr(commit_obj, "parents", [])
        if not parents:
            return None
        return decode_bytes(parents[0])

    def show_blob(self, commit: str, relative_path: str) -> bytes | None:
        """Return file content at a commit.

        Args:
            commit: Commit SHA or other committish.
            relative_path: Repository-relative path.

        Returns:
            Blob content, or None if the path does not name a file at
            that commit.
        """
        commit_obj = self._parse_commit(commit, "show-blob")
        tree_sha: bytes = getattr(commit_obj, "tree", b"")
        if not tree_sha:
            return None

        path_bytes = relative_path.encode("utf-8")
        try:
            _, blob_sha = tree_lookup_path(self._repo.__getitem__, tree_sha, path_bytes)
            blob = self._repo[blob_sha]
        except (KeyError, NotTreeError):
            return None

        if not isinstance(blob, Blob):
            return None
        return blob.data

    def remote_url(self, name: str = "origin") -> str | None:
        """Return the configured URL of a remote."""
        config = self._repo.get_config()
        try:
            url = config.get((b"remote", name.encode()), b"url")
        except KeyError:
            return None
        return decode_bytes(url) if url else None

    def submodule_paths(self) -> list[str]:
        """Return registered submodule paths from the HEAD tree.

        Returns:
            Repository-relative submodule paths, or an empty list for a
            repository without commits.
        """
        try:
            return [decode_bytes(path) for path, _ in porcelain.submodule_list(self._repo)]
        except KeyError:
            return []
