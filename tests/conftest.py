"""Shared test fixtures for githistory tests."""

from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console

from githistory.repository import (
    FakeGitHandle,
    RepoRoot,
    RepositoryResolver,
    format_log_record,
)

FAKE_ROOT = Path("/fake/project")

LogFactory = Callable[..., list[str]]
BlameFactory = Callable[..., str]


def _sha(n: int) -> str:
    return f"{n:040x}"


@pytest.fixture
def fake_handle() -> FakeGitHandle:
    return FakeGitHandle()


@pytest.fixture
def resolver(fake_handle: FakeGitHandle) -> RepositoryResolver:
    """Resolver over a single fake root at /fake/project."""
    return RepositoryResolver(RepoRoot(root_path=FAKE_ROOT, handle=fake_handle))


@pytest.fixture
def sha() -> Callable[[int], str]:
    """Return a function mapping an index to a deterministic 40-char SHA."""
    return _sha


@pytest.fixture
def make_log() -> LogFactory:
    """Return a factory for newest-first log records.

    ``make_log(3)`` yields records for SHAs 1, 2 and 3; ``start`` shifts
    the first index.
    """

    def _make(count: int, *, start: int = 1) -> list[str]:
        return [
            format_log_record(
                _sha(n),
                f"2024-01-{(n % 28) + 1:02d}T12:00:00+00:00",
                f"Commit {n}",
                "Test User",
                "test@example.com",
            )
            for n in range(start, start + count)
        ]

    return _make


@pytest.fixture
def make_blame() -> BlameFactory:
    """Return a factory for porcelain blame text.

    Each entry is (sha, final_line, author, author_time, summary). Metadata
    is written only for the first occurrence of a commit, like git does.
    """

    def _make(*entries: tuple[str, int, str, int, str]) -> str:
        seen: set[str] = set()
        lines: list[str] = []
        for commit, final_line, author, author_time, summary in entries:
            lines.append(f"{commit} {final_line} {final_line} 1")
            if commit not in seen:
                seen.add(commit)
                lines.extend(
                    [
                        f"author {author}",
                        f"author-mail <{author.lower()}@example.com>",
                        f"author-time {author_time}",
                        "author-tz +0000",
                        f"summary {summary}",
                        "filename file.txt",
                    ]
                )
            lines.append(f"\tline {final_line}")
        return "\n".join(lines) + "\n"

    return _make


@pytest.fixture
def console() -> Console:
    return Console(
        width=120,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )
