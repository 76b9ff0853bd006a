# ruff: noqa: TC003  # Path needed at runtime for method bodies
"""Workspace history session.

HistorySession wires the resolver, cache, service, view state and the
optional metadata watcher for one workspace, and tears them down again.
"""

from collections.abc import Callable
from functools import partial
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

from githistory.cache import HistoryCache
from githistory.config import HistoryConfig
from githistory.exceptions import NotARepositoryError
from githistory.repository import GitRepository, HandleFactory, RepositoryResolver
from githistory.service import CommitHistoryService
from githistory.utils import create_null_logger
from githistory.view import HistoryViewState
from githistory.watch import GitMetadataWatcher

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

type ActiveFileCallback = Callable[[str | None], None]


@runtime_checkable
class EditorEvents(Protocol):
    """Source of active-document notifications.

    Example:
        >>> unsubscribe = events.subscribe(lambda path: print(path))
        >>> unsubscribe()
    """

    def subscribe(self, callback: ActiveFileCallback) -> Callable[[], None]:
        """Call callback with the active file path (None when no file is open).

        Returns:
            A function that removes the subscription.
        """
        ...


class HistorySession:
    """Everything the history panel needs for one workspace.

    A workspace outside any repository still yields a session; its
    service is in the not-a-repository state and every query is empty.

    Example:
        >>> with HistorySession(Path("/work/app"), watch=True) as session:
        ...     session.view.set_active_file("/work/app/src/main.py")
        ...     session.view.root_items()
    """

    def __init__(
        self,
        workspace_root: Path,
        *,
        config: HistoryConfig | None = None,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
        handle_factory: HandleFactory | None = None,
        events: EditorEvents | None = None,
        watch: bool = False,
    ) -> None:
        """Build the session.

        Args:
            workspace_root: Directory the editor opened.
            config: Settings. Defaults to HistoryConfig().
            logger: Optional logger shared by every component.
            handle_factory: Opens a handle per repository root. Defaults
                to GitRepository with the configured git settings.
            events: Active-file notifications to follow.
            watch: Start watching repository metadata immediately.
        """
        self._config: HistoryConfig = config or HistoryConfig()
        self._logger: FilteringBoundLogger = logger or create_null_logger()
        self._workspace_root: Path = workspace_root
        self._closed: bool = False

        factory: HandleFactory = handle_factory or partial(
            GitRepository,
            git_executable=self._config.git_executable,
            timeout_seconds=self._config.git_timeout_seconds,
        )
        self._resolver: RepositoryResolver | None
        try:
            self._resolver = RepositoryResolver.discover(
                workspace_root, factory, logger=self._logger
            )
        except NotARepositoryError as e:
            self._logger.info("Workspace is not a git repository", path=str(e.path))
            self._resolver = None

        self._cache: HistoryCache = HistoryCache()
        self._service: CommitHistoryService = CommitHistoryService(
            self._resolver,
            self._cache,
            page_size=self._config.page_size,
            logger=self._logger,
        )
        self._view: HistoryViewState = HistoryViewState(
            self._service, logger=self._logger
        )

        self._watcher: GitMetadataWatcher | None = None

        self._unsubscribe: Callable[[], None] | None = None
        if events is not None:
            self._unsubscribe = events.subscribe(self._view.set_active_file)

        if watch:
            self.start_watching()

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

    # =========================================================================
    # Components
    # =========================================================================

    @property
    def config(self) -> HistoryConfig:
        """Session settings."""
        return self._config

    @property
    def resolver(self) -> RepositoryResolver | None:
        """Root resolver, None outside a repository."""
        return self._resolver

    @property
    def service(self) -> CommitHistoryService:
        """History queries."""
        return self._service

    @property
    def view(self) -> HistoryViewState:
        """Panel view state."""
        return self._view

    @property
    def is_repository(self) -> bool:
        """False when the workspace is not inside a repository."""
        return self._resolver is not None

    @property
    def closed(self) -> bool:
        """True after close()."""
        return self._closed

    # =========================================================================
    # Operations
    # =========================================================================

    def refresh(self) -> None:
        """Flush every cached result and reload the view."""
        self._logger.debug("Refreshing history")
        self._service.invalidate_cache()
        self._view.reload()

    def file_saved(self, file_path: str | Path) -> None:
        """Drop cached results tagged with a file after it is written."""
        self._service.invalidate_cache(file_path)

    def start_watching(self) -> None:
        """Watch every known root's metadata and refresh on change."""
        if self._resolver is None or self._closed:
            return
        if self._watcher is None:
            self._watcher = GitMetadataWatcher(
                [root.root_path for root in self._resolver.roots],
                self.refresh,
                step_ms=self._config.debounce_ms,
                max_wait_ms=self._config.debounce_max_ms,
                logger=self._logger,
            )
        self._watcher.start()

    def close(self) -> None:
        """Unsubscribe, stop watching and close repository handles."""
        if self._closed:
            return
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._watcher is not None:
            self._watcher.stop()
        if self._resolver is not None:
            self._resolver.close()
        self._logger.debug("Closed history session", root=str(self._workspace_root))
