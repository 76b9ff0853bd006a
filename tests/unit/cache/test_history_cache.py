"""Tests for HistoryCache."""

import threading

from githistory.cache import MISS, HistoryCache


class TestGetSet:
    def test_missing_key_is_miss(self) -> None:
        assert HistoryCache().get("log:a.py:0") is MISS

    def test_stored_none_is_a_hit(self) -> None:
        cache = HistoryCache()
        cache.set("parent:/r:abc", None)

        assert cache.get("parent:/r:abc") is None
        assert "parent:/r:abc" in cache

    def test_stored_empty_list_is_a_hit(self) -> None:
        cache = HistoryCache()
        cache.set("log:a.py:3", ())

        assert cache.get("log:a.py:3") == ()

    def test_set_replaces_entry(self) -> None:
        cache = HistoryCache()
        cache.set("k", 1, file_path="a.py")
        cache.set("k", 2)

        entry = cache.entry("k")
        assert entry is not None
        assert entry.data == 2
        assert entry.file_path == ""
        assert len(cache) == 1

    def test_entry_records_tags(self) -> None:
        cache = HistoryCache()
        cache.set("content:abc:a.py", "x", file_path="a.py", commit_hash="abc")

        entry = cache.entry("content:abc:a.py")
        assert entry is not None
        assert entry.file_path == "a.py"
        assert entry.commit_hash == "abc"
        assert entry.created_at > 0


class TestInvalidate:
    def test_clear_all(self) -> None:
        cache = HistoryCache()
        cache.set("a", 1, file_path="a.py")
        cache.set("b", 2)

        assert cache.invalidate() == 2
        assert len(cache) == 0

    def test_file_scoped_removes_only_tagged_entries(self) -> None:
        cache = HistoryCache()
        cache.set("log:a.py:0", 1, file_path="a.py")
        cache.set("blame:a.py", 2, file_path="a.py")
        cache.set("log:b.py:0", 3, file_path="b.py")
        cache.set("files:/r:abc", 4, commit_hash="abc")

        assert cache.invalidate("a.py") == 2
        assert cache.get("log:a.py:0") is MISS
        assert cache.get("log:b.py:0") == 3
        assert cache.get("files:/r:abc") == 4

    def test_file_scoped_requires_exact_tag(self) -> None:
        cache = HistoryCache()
        cache.set("log:src/a.py:0", 1, file_path="src/a.py")

        assert cache.invalidate("a.py") == 0
        assert cache.get("log:src/a.py:0") == 1

    def test_commit_scoped(self) -> None:
        cache = HistoryCache()
        cache.set("files:/r:abc", 1, commit_hash="abc")
        cache.set("content:abc:a.py", 2, file_path="a.py", commit_hash="abc")
        cache.set("files:/r:def", 3, commit_hash="def")

        assert cache.invalidate_commit("abc") == 2
        assert cache.get("files:/r:def") == 3


class TestConcurrency:
    def test_concurrent_writers_keep_every_key(self) -> None:
        cache = HistoryCache()

        def write(worker: int) -> None:
            for i in range(200):
                cache.set(f"k:{worker}:{i}", i, file_path=f"f{worker}")

        threads = [threading.Thread(target=write, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(cache) == 8 * 200
        assert cache.invalidate("f3") == 200
