# ruff: noqa: TC003  # Path needed at runtime for method bodies
"""Repository metadata watcher using watchfiles.

Any change below a repository's ``.git`` directory (new commits, ref
updates, index writes) makes cached history stale. The watcher runs
watchfiles in a daemon thread. watchfiles groups changes until no new
change arrives for step_ms (capped at max_wait_ms), so a rebase touching
many refs yields a single batch and a single callback.
"""

import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Final

from watchfiles import Change, watch

from githistory.utils import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

DEFAULT_STEP_MS: Final = 500
DEFAULT_MAX_WAIT_MS: Final = 1600

# Object writes always precede the ref update that makes them visible
_IGNORED_DIRS: Final = frozenset({"objects"})


def metadata_dirs(roots: Iterable[Path]) -> list[Path]:
    """Return the ``.git`` directories of roots that have one.

    Submodules usually keep a ``.git`` file pointing into the parent's
    ``.git/modules``, which the parent's directory already covers.
    """
    dirs: list[Path] = []
    for root in roots:
        git_dir = root / ".git"
        if git_dir.is_dir() and git_dir not in dirs:
            dirs.append(git_dir)
    return dirs


def is_relevant_change(_change: Change, changed_path: str) -> bool:
    """Filter function for watchfiles.

    Args:
        _change: The type of change (unused).
        changed_path: The path that changed.

    Returns:
        True unless the path lies in an ignored metadata directory.
    """
    return _IGNORED_DIRS.isdisjoint(Path(changed_path).parts)


class GitMetadataWatcher:
    """Watches ``.git`` directories and reports each change batch once.

    start() and stop() are idempotent. The watcher thread is a daemon, so
    a forgotten watcher never blocks interpreter exit.

    Example:
        >>> watcher = GitMetadataWatcher([Path("/work/app")], session.refresh)
        >>> watcher.start()
        >>> watcher.stop()
    """

    def __init__(
        self,
        roots: Iterable[Path],
        on_change: Callable[[], None],
        *,
        step_ms: int = DEFAULT_STEP_MS,
        max_wait_ms: int = DEFAULT_MAX_WAIT_MS,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> None:
        """Initialize the watcher.

        Args:
            roots: Repository working trees whose metadata to watch.
            on_change: Called with no arguments once per change batch.
            step_ms: Quiet period that ends a batch.
            max_wait_ms: Longest a batch may keep growing. Raised to
                step_ms when smaller.
            logger: Optional logger.

        Raises:
            ValueError: If step_ms is not positive.
        """
        if step_ms <= 0:
            msg = f"step_ms must be positive, got {step_ms}"
            raise ValueError(msg)
        self._paths: list[Path] = metadata_dirs(roots)
        self._on_change: Callable[[], None] = on_change
        self._step_ms: int = step_ms
        self._max_wait_ms: int = max(max_wait_ms, step_ms)
        self._logger: FilteringBoundLogger = logger or create_null_logger()
        self._stop_event: threading.Event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock: threading.Lock = threading.Lock()

    @property
    def paths(self) -> list[Path]:
        """Directories being watched."""
        return list(self._paths)

    @property
    def running(self) -> bool:
        """True while the watcher thread is alive."""
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start watching in a background thread."""
        with self._lock:
            if self._thread is not None:
                return
            if not self._paths:
                self._logger.info("No git metadata directories to watch")
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run, name="githistory-watcher", daemon=True
            )
            self._thread.start()
        self._logger.info("Watching git metadata", paths=[str(p) for p in self._paths])

    def stop(self, timeout: float = 5.0) -> None:
        """Stop watching; a batch still being grouped is dropped."""
        with self._lock:
            thread = self._thread
            self._thread = None
        self._stop_event.set()
        if thread is not None:
            thread.join(timeout)

    def notify(self, changes: Iterable[tuple[Change, str]]) -> None:
        """Report one batch of changes."""
        batch = list(changes)
        if not batch:
            return
        self._logger.debug("Git metadata changed", changes=len(batch))
        self._on_change()

    def _run(self) -> None:
        try:
            for changes in watch(
                *self._paths,
                watch_filter=is_relevant_change,
                debounce=self._max_wait_ms,
                step=self._step_ms,
                stop_event=self._stop_event,
                raise_interrupt=False,
            ):
                self.notify(changes)
        except OSError as e:
            self._logger.warning("Git metadata watcher stopped", error=str(e))
