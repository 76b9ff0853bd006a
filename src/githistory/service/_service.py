"""Commit history queries.

CommitHistoryService routes every query to the repository owning the
file, serves repeated queries from HistoryCache, and turns query failures
into empty results so callers can render "no history" instead of erroring.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Final

from githistory.blame import BlameParser
from githistory.cache import MISS, HistoryCache
from githistory.exceptions import QueryFailureError
from githistory.repository import (
    BlameLine,
    ChangedFile,
    CommitRecord,
    DiffSources,
    FileRevision,
    FileRevisionState,
    RepoRoot,
    RepositoryResolver,
    normalize_path,
)
from githistory.service._parsers import github_web_url, parse_log, parse_name_status
from githistory.utils import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

DEFAULT_PAGE_SIZE: Final = 50


class CommitHistoryService:
    """Cached, failure-tolerant history queries over a workspace.

    Constructed without a resolver the service is in the not-a-repository
    state: every query returns an empty result without touching git.

    Cache keys are ``<operation>:<arguments>``. Log, content and blame
    entries are tagged with the file path they were asked for; changed
    files, parents and remotes carry no file tag and survive file-scoped
    invalidation.

    Example:
        >>> service = CommitHistoryService(resolver)
        >>> commits = service.get_log("/work/app/src/main.py")
        >>> files = service.get_changed_files(commits[0].hash)
    """

    __slots__ = ("_blame_parser", "_cache", "_logger", "_page_size", "_resolver")

    def __init__(
        self,
        resolver: RepositoryResolver | None,
        cache: HistoryCache | None = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        blame_parser: BlameParser | None = None,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> None:
        """Initialize the service.

        Args:
            resolver: Root resolver, or None when the workspace is not a
                repository.
            cache: Shared cache. A private one is created when omitted.
            page_size: Commits per log page.
            blame_parser: Parser for porcelain blame output.
            logger: Optional logger.

        Raises:
            ValueError: If page_size is not positive.
        """
        if page_size < 1:
            msg = f"page_size must be positive, got {page_size}"
            raise ValueError(msg)
        self._resolver: RepositoryResolver | None = resolver
        self._cache: HistoryCache = cache if cache is not None else HistoryCache()
        self._page_size: int = page_size
        self._logger: FilteringBoundLogger = logger or create_null_logger()
        self._blame_parser: BlameParser = blame_parser or BlameParser(
            logger=self._logger
        )

    # =========================================================================
    # State
    # =========================================================================

    @property
    def is_repository(self) -> bool:
        """False when the workspace is not inside a repository."""
        return self._resolver is not None

    @property
    def page_size(self) -> int:
        """Commits per log page."""
        return self._page_size

    @property
    def cache(self) -> HistoryCache:
        """The cache fronting every query."""
        return self._cache

    def invalidate_cache(self, file_path: str | Path | None = None) -> None:
        """Evict cached results for one file, or everything."""
        if file_path is None:
            removed = self._cache.invalidate()
        else:
            removed = self._cache.invalidate(normalize_path(file_path))
        self._logger.debug(
            "Invalidated cache",
            path=None if file_path is None else str(file_path),
            removed=removed,
        )

    def root_for(self, file_path: str | Path | None = None) -> RepoRoot | None:
        """Return the root owning file_path, the main root as fallback."""
        if self._resolver is None:
            return None
        if file_path is None:
            return self._resolver.main
        return self._resolver.resolve(file_path) or self._resolver.main

    def relative_path(self, file_path: str | Path) -> str:
        """Return file_path relative to its owning root."""
        root = self.root_for(file_path)
        if root is None or self._resolver is None:
            return str(file_path)
        return self._resolver.relativize(file_path, root)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_log(self, file_path: str | Path, page: int = 0) -> list[CommitRecord]:
        """Return one page of a file's history, newest first.

        History follows renames. Page n skips the n * page_size newest
        commits.

        Args:
            file_path: Absolute path of the file.
            page: Zero-based page index.

        Returns:
            Up to page_size commits; empty on failure.

        Raises:
            ValueError: If page is negative.
        """
        if page < 0:
            msg = f"page must be non-negative, got {page}"
            raise ValueError(msg)
        root = self.root_for(file_path)
        if root is None:
            return []

        tag = normalize_path(file_path)
        key = f"log:{tag}:{page}"
        cached = self._cache.get(key)
        if cached is not MISS:
            return list(cached)  # pyright: ignore[reportArgumentType]

        relative = self.relative_path(file_path)
        try:
            output = root.handle.log_follow(
                relative,
                max_count=self._page_size,
                skip=page * self._page_size,
            )
        except QueryFailureError as e:
            self._log_failure(e, path=relative)
            return []

        commits = parse_log(output, logger=self._logger)
        self._cache.set(key, tuple(commits), file_path=tag)
        return commits

    def get_changed_files(
        self, commit: str, file_path: str | Path | None = None
    ) -> list[ChangedFile]:
        """Return the paths a commit touched.

        Args:
            commit: Commit SHA.
            file_path: File selecting the owning repository. The main
                repository is used when omitted.

        Returns:
            Changed files in git's order; empty on failure.
        """
        root = self.root_for(file_path)
        if root is None:
            return []

        key = f"files:{normalize_path(root.root_path)}:{commit}"
        cached = self._cache.get(key)
        if cached is not MISS:
            return list(cached)  # pyright: ignore[reportArgumentType]

        try:
            output = root.handle.show_name_status(commit)
        except QueryFailureError as e:
            self._log_failure(e, commit=commit)
            return []

        files = parse_name_status(output, logger=self._logger)
        self._cache.set(key, tuple(files), commit_hash=commit)
        return files

    def get_parent_commit(
        self, commit: str, file_path: str | Path | None = None
    ) -> str | None:
        """Return the first parent of commit.

        None means either a root commit (nothing to diff against) or a
        failed lookup; the latter is logged and not cached.
        """
        root = self.root_for(file_path)
        if root is None:
            return None

        key = f"parent:{normalize_path(root.root_path)}:{commit}"
        cached = self._cache.get(key)
        if cached is not MISS:
            return cached  # pyright: ignore[reportReturnType]

        try:
            parent = root.handle.parent_of(commit)
        except QueryFailureError as e:
            self._log_failure(e, commit=commit)
            return None

        self._cache.set(key, parent, commit_hash=commit)
        return parent

    def get_file_revision(self, commit: str, file_path: str | Path) -> FileRevision:
        """Return a file's content at commit with an explicit state.

        Args:
            commit: Commit SHA.
            file_path: Absolute path, or a path relative to the main root.

        Returns:
            PRESENT with the text, ABSENT if the path did not exist at that
            revision, or UNAVAILABLE if the lookup failed.
        """
        root = self.root_for(file_path)
        if root is None:
            return FileRevision(state=FileRevisionState.UNAVAILABLE)

        tag = normalize_path(file_path)
        relative = self.relative_path(file_path)
        key = f"content:{commit}:{tag}"
        cached = self._cache.get(key)
        if cached is not MISS:
            return cached  # pyright: ignore[reportReturnType]

        try:
            blob = root.handle.show_blob(commit, relative)
        except QueryFailureError as e:
            self._log_failure(e, commit=commit, path=relative)
            return FileRevision(state=FileRevisionState.UNAVAILABLE)

        if blob is None:
            revision = FileRevision(state=FileRevisionState.ABSENT)
        else:
            text = blob.decode("utf-8", errors="replace")
            revision = FileRevision(state=FileRevisionState.PRESENT, text=text)
        self._cache.set(key, revision, file_path=tag, commit_hash=commit)
        return revision

    def get_file_content(self, commit: str, file_path: str | Path) -> str:
        """Return a file's text at commit, empty when absent or failed."""
        return self.get_file_revision(commit, file_path).text

    def get_diff_sources(
        self, commit: str, file_path: str | Path
    ) -> DiffSources | None:
        """Return both sides of a file's diff for commit.

        Returns:
            The parent and commit contents, or None for a root commit
            (there is nothing to diff against).
        """
        parent = self.get_parent_commit(commit, file_path)
        if parent is None:
            return None
        return DiffSources(
            path=self.relative_path(file_path),
            parent=parent,
            commit=commit,
            left=self.get_file_content(parent, file_path),
            right=self.get_file_content(commit, file_path),
        )

    def get_github_remote_url(self, file_path: str | Path | None = None) -> str | None:
        """Return the GitHub web URL of the origin remote, if any.

        Never raises; non-GitHub and unparseable remotes yield None.
        """
        root = self.root_for(file_path)
        if root is None:
            return None

        key = f"remote:{normalize_path(root.root_path)}"
        cached = self._cache.get(key)
        if cached is not MISS:
            return cached  # pyright: ignore[reportReturnType]

        try:
            remote = root.handle.remote_url("origin")
        except QueryFailureError as e:
            self._log_failure(e)
            return None

        url = github_web_url(remote) if remote else None
        self._cache.set(key, url)
        return url

    def get_blame(self, file_path: str | Path) -> list[BlameLine]:
        """Return per-line attribution of the working-tree file."""
        root = self.root_for(file_path)
        if root is None:
            return []

        tag = normalize_path(file_path)
        key = f"blame:{tag}"
        cached = self._cache.get(key)
        if cached is not MISS:
            return list(cached)  # pyright: ignore[reportArgumentType]

        relative = self.relative_path(file_path)
        try:
            output = root.handle.blame_porcelain(relative)
        except QueryFailureError as e:
            self._log_failure(e, path=relative)
            return []

        lines = self._blame_parser.parse(output)
        self._cache.set(key, tuple(lines), file_path=tag)
        return lines

    def _log_failure(self, error: QueryFailureError, **context: object) -> None:
        self._logger.warning(
            "Git query failed",
            operation=error.operation,
            error=str(error),
            **context,
        )
