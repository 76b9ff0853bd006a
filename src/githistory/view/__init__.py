"""githistory panel view state."""

from githistory.view._state import (
    BACK_LABEL,
    NO_ACTIVE_FILE,
    NO_HISTORY,
    NOT_A_REPOSITORY,
    BackEntry,
    EmptyState,
    FoldMode,
    HistoryViewState,
    LoadMoreEntry,
    ViewItem,
    ViewMode,
)

__all__ = [
    "BACK_LABEL",
    "NOT_A_REPOSITORY",
    "NO_ACTIVE_FILE",
    "NO_HISTORY",
    "BackEntry",
    "EmptyState",
    "FoldMode",
    "HistoryViewState",
    "LoadMoreEntry",
    "ViewItem",
    "ViewMode",
]
