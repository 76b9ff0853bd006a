"""githistory query cache."""

from githistory.cache._cache import MISS, CacheEntry, HistoryCache, Miss

__all__ = [
    "MISS",
    "CacheEntry",
    "HistoryCache",
    "Miss",
]
