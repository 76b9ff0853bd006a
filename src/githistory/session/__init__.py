"""githistory workspace sessions."""

from githistory.session._session import ActiveFileCallback, EditorEvents, HistorySession

__all__ = [
    "ActiveFileCallback",
    "EditorEvents",
    "HistorySession",
]
