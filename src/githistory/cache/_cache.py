"""Tag-invalidated memoization for history queries.

Entries never expire on their own. They are evicted by the file path
they were tagged with, by commit, or all at once, because the repository
can change underneath them at any time.

Example:
    >>> cache = HistoryCache()
    >>> cache.set("log:src/a.py:0", commits, file_path="src/a.py")
    >>> cache.get("log:src/a.py:0") is MISS
    False
    >>> cache.invalidate("src/a.py")
    >>> cache.get("log:src/a.py:0") is MISS
    True
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Literal


class _Miss(Enum):
    MISS = "MISS"

    def __repr__(self) -> str:
        return "MISS"


MISS: Final = _Miss.MISS
type Miss = Literal[_Miss.MISS]


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached payload and its invalidation tags.

    Attributes:
        data: The cached payload. Trusted as written.
        file_path: File tag, empty for entries not scoped to a file.
        commit_hash: Commit tag, if any.
        created_at: Wall-clock creation time in seconds.
    """

    data: object
    file_path: str = ""
    commit_hash: str | None = None
    created_at: float = field(default_factory=time.time)


class HistoryCache:
    """Thread-safe key/value cache with tag-based invalidation.

    Concurrent writers of the same key converge on the last value written.
    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock: threading.Lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> object | Miss:
        """Return the cached payload for key, or MISS.

        A stored None or empty value is a hit, distinct from MISS.
        """
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return MISS
        return entry.data

    def entry(self, key: str) -> CacheEntry | None:
        """Return the full entry for key, including its tags."""
        with self._lock:
            return self._entries.get(key)

    def set(
        self,
        key: str,
        data: object,
        *,
        file_path: str = "",
        commit_hash: str | None = None,
    ) -> None:
        """Store data under key, replacing any previous entry.

        Args:
            key: Composite key of operation name and arguments.
            data: Payload to cache.
            file_path: File tag for invalidate(file_path).
            commit_hash: Commit tag for invalidate_commit(commit_hash).
        """
        entry = CacheEntry(data=data, file_path=file_path, commit_hash=commit_hash)
        with self._lock:
            self._entries[key] = entry

    def invalidate(self, file_path: str | None = None) -> int:
        """Evict entries tagged with file_path, or everything when omitted.

        Entries with no file tag survive a file-scoped invalidation.

        Args:
            file_path: Exact file tag to evict. None clears the cache.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            if file_path is None:
                removed = len(self._entries)
                self._entries.clear()
                return removed
            doomed = [k for k, e in self._entries.items() if e.file_path == file_path]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def invalidate_commit(self, commit_hash: str) -> int:
        """Evict every entry tagged with commit_hash.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            doomed = [
                k for k, e in self._entries.items() if e.commit_hash == commit_hash
            ]
            for key in doomed:
                del self._entries[key]
            return len(doomed)
