"""Session view state for the history panel.

HistoryViewState decides what the panel shows: the paginated commit log
of the active file (Log mode) or the changed-file tree of one commit
(Focused mode), plus the fold policy of that tree.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Final

from githistory.repository import CommitRecord, normalize_path
from githistory.service import CommitHistoryService, parse_content_uri
from githistory.tree import (
    ROOT_PATH,
    AllCollapsed,
    AllExpanded,
    AutoExpandTo,
    FileTree,
    FileTreeBuilder,
    FoldPolicy,
    TreeNode,
)
from githistory.utils import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

NOT_A_REPOSITORY: Final = "Not a git repository"
NO_ACTIVE_FILE: Final = "Open a file to see git history"
NO_HISTORY: Final = "No history found for this file"
BACK_LABEL: Final = "← Back to commit history"


class ViewMode(StrEnum):
    """Which listing the panel shows."""

    LOG = "log"
    FOCUSED = "focused"


class FoldMode(StrEnum):
    """Fold selection for the focused tree."""

    AUTO = "auto"
    EXPANDED = "expanded"
    COLLAPSED = "collapsed"


@dataclass(frozen=True, slots=True)
class EmptyState:
    """Placeholder row explaining why there is nothing to show."""

    message: str


@dataclass(frozen=True, slots=True)
class BackEntry:
    """Row leading from a focused commit back to the log."""

    label: str = BACK_LABEL


@dataclass(frozen=True, slots=True)
class LoadMoreEntry:
    """Row requesting the next log page."""

    file_path: str
    next_page: int


type ViewItem = EmptyState | BackEntry | LoadMoreEntry | CommitRecord | TreeNode


class HistoryViewState:
    """State machine behind the history panel.

    Selecting a commit enters Focused mode; back() or switching to a
    different file returns to Log mode and resets the fold mode to auto.
    Trees are cached per commit hash and dropped for that commit whenever
    focus is entered or the fold mode changes, so a rebuilt tree is
    never a mutated copy of a previous one.

    Listeners registered with subscribe() are called after every change
    that alters what the panel shows.

    Example:
        >>> view = HistoryViewState(service)
        >>> view.set_active_file("/work/app/src/main.py")
        >>> commit = view.root_items()[0]
        >>> view.select_commit(commit.hash)
        >>> view.root_items()[0]
        BackEntry(label='← Back to commit history')
    """

    def __init__(
        self,
        service: CommitHistoryService,
        *,
        builder: FileTreeBuilder | None = None,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> None:
        self._service: CommitHistoryService = service
        self._logger: FilteringBoundLogger = logger or create_null_logger()
        self._builder: FileTreeBuilder = builder or FileTreeBuilder(logger=self._logger)
        self._lock: threading.RLock = threading.RLock()
        self._listeners: list[Callable[[], None]] = []

        self._active_file: str | None = None
        self._focused_commit: str | None = None
        self._fold_mode: FoldMode = FoldMode.AUTO
        self._loaded_commits: dict[str, list[CommitRecord]] = {}
        self._current_page: dict[str, int] = {}
        self._trees: dict[str, FileTree] = {}

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def mode(self) -> ViewMode:
        """Current listing mode."""
        return ViewMode.FOCUSED if self._focused_commit is not None else ViewMode.LOG

    @property
    def active_file(self) -> str | None:
        """Path of the file the log is shown for."""
        return self._active_file

    @property
    def focused_commit(self) -> str | None:
        """Commit shown in Focused mode, None in Log mode."""
        return self._focused_commit

    @property
    def fold_mode(self) -> FoldMode:
        """Fold selection for the focused tree."""
        return self._fold_mode

    @property
    def fold_policy(self) -> FoldPolicy:
        """Tree fold policy derived from the fold mode and active file."""
        match self._fold_mode:
            case FoldMode.EXPANDED:
                return AllExpanded()
            case FoldMode.COLLAPSED:
                return AllCollapsed()
            case FoldMode.AUTO:
                target = (
                    self._service.relative_path(self._active_file)
                    if self._active_file
                    else ""
                )
                return AutoExpandTo(target_path=target)

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a change listener and return its unsubscribe function."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Transitions
    # =========================================================================

    def set_active_file(self, file_path: str | Path | None) -> None:
        """Track the file open in the editor.

        Revision documents opened from this panel (content URIs) are
        ignored so viewing a diff keeps the current focus. Switching to a
        different file clears focus and reloads its log from page 0.
        """
        if file_path is not None and parse_content_uri(str(file_path)) is not None:
            return

        path = normalize_path(file_path) if file_path is not None else None
        with self._lock:
            if path == self._active_file:
                return
            self._logger.debug("Active file changed", path=path)
            if self._focused_commit is not None:
                self._clear_focus()
            self._active_file = path
            if path is not None:
                self._loaded_commits.pop(path, None)
                self._current_page[path] = 0
            self._trees.clear()
        self._notify()

    def select_commit(self, commit: str) -> None:
        """Enter Focused mode for commit."""
        with self._lock:
            self._focused_commit = commit
            self._trees.pop(commit, None)
        self._notify()

    def back(self) -> None:
        """Return to Log mode."""
        with self._lock:
            if self._focused_commit is None:
                return
            self._clear_focus()
        self._notify()

    def fold_all(self) -> None:
        """Collapse every folder of the focused tree."""
        self._set_fold_mode(FoldMode.COLLAPSED)

    def unfold_all(self) -> None:
        """Expand every folder of the focused tree."""
        self._set_fold_mode(FoldMode.EXPANDED)

    def load_more(self, file_path: str | Path | None = None) -> list[CommitRecord]:
        """Append the next log page of file_path (default: active file).

        Returns:
            The newly loaded commits.
        """
        path = self._path_or_active(file_path)
        if path is None:
            return []
        with self._lock:
            self._ensure_first_page(path)
            page = self._current_page.get(path, 0) + 1
        commits = self._service.get_log(path, page)
        with self._lock:
            self._loaded_commits.setdefault(path, []).extend(commits)
            self._current_page[path] = page
        self._notify()
        return commits

    def reload(self) -> None:
        """Drop loaded pages and trees so the next read queries again."""
        with self._lock:
            self._loaded_commits.clear()
            self._current_page.clear()
            self._trees.clear()
        self._notify()

    # =========================================================================
    # Rendering
    # =========================================================================

    def commits(self, file_path: str | Path | None = None) -> list[CommitRecord]:
        """Return every loaded commit of file_path (default: active file)."""
        path = self._path_or_active(file_path)
        if path is None:
            return []
        with self._lock:
            return list(self._ensure_first_page(path))

    def has_more(self, file_path: str | Path | None = None) -> bool:
        """True when the last loaded page was full."""
        path = self._path_or_active(file_path)
        if path is None:
            return False
        with self._lock:
            loaded = self._ensure_first_page(path)
            page = self._current_page.get(path, 0)
        return bool(loaded) and len(loaded) == self._service.page_size * (page + 1)

    def commit_tree(self, commit: str) -> FileTree:
        """Return the changed-file tree of commit under the current policy."""
        with self._lock:
            tree = self._trees.get(commit)
            if tree is not None:
                return tree
            policy = self.fold_policy
            target = (
                self._service.relative_path(self._active_file)
                if self._active_file
                else None
            )
        files = self._service.get_changed_files(commit, self._active_file)
        tree = self._builder.build(files, policy, target_path=target)
        with self._lock:
            self._trees[commit] = tree
        return tree

    def root_items(self) -> list[ViewItem]:
        """Return the top-level rows of the panel."""
        if not self._service.is_repository:
            return [EmptyState(NOT_A_REPOSITORY)]

        active = self._active_file
        if active is None:
            return [EmptyState(NO_ACTIVE_FILE)]

        focused = self._focused_commit
        if focused is not None:
            return [BackEntry(), *self.commit_tree(focused).children(ROOT_PATH)]

        commits = self.commits(active)
        if not commits:
            return [EmptyState(NO_HISTORY)]

        items: list[ViewItem] = list(commits)
        if self.has_more(active):
            page = self._current_page.get(active, 0)
            items.append(LoadMoreEntry(file_path=active, next_page=page + 1))
        return items

    def children(
        self, folder_path: str, commit: str | None = None
    ) -> tuple[TreeNode, ...]:
        """Return the children of a folder in commit's tree.

        Args:
            folder_path: Folder path; ``""`` is the root.
            commit: Commit whose tree to read. Defaults to the focused one.
        """
        target = commit if commit is not None else self._focused_commit
        if target is None:
            return ()
        return self.commit_tree(target).children(folder_path)

    # =========================================================================
    # Internals
    # =========================================================================

    def _set_fold_mode(self, mode: FoldMode) -> None:
        with self._lock:
            if self._focused_commit is None:
                self._logger.debug("Ignoring fold change outside a focused commit")
                return
            self._fold_mode = mode
            self._trees.pop(self._focused_commit, None)
        self._notify()

    def _clear_focus(self) -> None:
        self._focused_commit = None
        self._fold_mode = FoldMode.AUTO

    def _path_or_active(self, file_path: str | Path | None) -> str | None:
        if file_path is None:
            return self._active_file
        return normalize_path(file_path)

    def _ensure_first_page(self, path: str) -> list[CommitRecord]:
        loaded = self._loaded_commits.get(path)
        if loaded is None:
            loaded = self._service.get_log(path, 0)
            self._loaded_commits[path] = loaded
            self._current_page[path] = 0
        return loaded

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener()
