"""githistory repository change watching."""

from githistory.watch._watcher import (
    DEFAULT_MAX_WAIT_MS,
    DEFAULT_STEP_MS,
    GitMetadataWatcher,
    is_relevant_change,
    metadata_dirs,
)

__all__ = [
    "DEFAULT_MAX_WAIT_MS",
    "DEFAULT_STEP_MS",
    "GitMetadataWatcher",
    "is_relevant_change",
    "metadata_dirs",
]
