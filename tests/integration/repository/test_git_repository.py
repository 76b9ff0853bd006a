"""Integration tests for GitRepository using real git repositories."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from githistory.exceptions import QueryFailureError
from githistory.repository import (
    ChangedFile,
    FileStatus,
    GitRepository,
    split_log_records,
)
from githistory.service import parse_name_status

from tests.integration.conftest import HistoryRepo, commit_all, run_git


@pytest.fixture
def repo(history_repo: HistoryRepo) -> Iterator[GitRepository]:
    with GitRepository(history_repo.root) as repository:
        yield repository


class TestLogFollow:
    def test_follows_rename(self, repo: GitRepository, history_repo: HistoryRepo) -> None:
        output = repo.log_follow("src/main.py", max_count=50, skip=0)

        shas = [fields[0] for fields in split_log_records(output)]
        assert shas == list(reversed(history_repo.shas))

    def test_paginates(self, repo: GitRepository, history_repo: HistoryRepo) -> None:
        output = repo.log_follow("src/main.py", max_count=2, skip=2)

        shas = [fields[0] for fields in split_log_records(output)]
        assert shas == [history_repo.shas[1], history_repo.shas[0]]

    def test_records_carry_author(self, repo: GitRepository) -> None:
        output = repo.log_follow("README.md", max_count=50, skip=0)

        records = split_log_records(output)
        assert len(records) == 1
        assert records[0][2:] == ["Initial commit", "Test User", "test@example.com"]


class TestObjectQueries:
    def test_parent_of(self, repo: GitRepository, history_repo: HistoryRepo) -> None:
        first, second, *_ = history_repo.shas

        assert repo.parent_of(first) is None
        assert repo.parent_of(second) == first

    def test_parent_of_head(self, repo: GitRepository, history_repo: HistoryRepo) -> None:
        assert repo.parent_of("HEAD") == history_repo.shas[2]

    def test_unknown_revision(self, repo: GitRepository) -> None:
        with pytest.raises(QueryFailureError):
            _ = repo.parent_of("f" * 40)

    def test_show_blob(self, repo: GitRepository, history_repo: HistoryRepo) -> None:
        first, second, third, _ = history_repo.shas

        assert repo.show_blob(first, "src/app.py") == b"value = 1\n"
        assert repo.show_blob(third, "src/main.py") == b"value = 2\n"
        assert repo.show_blob(second, "src/main.py") is None

    def test_show_blob_of_directory_is_none(
        self, repo: GitRepository, history_repo: HistoryRepo
    ) -> None:
        assert repo.show_blob(history_repo.shas[0], "src") is None

    def test_remote_url(self, repo: GitRepository, history_repo: HistoryRepo) -> None:
        assert repo.remote_url() is None

        run_git(history_repo.root, "remote", "add", "origin", "git@github.com:o/r.git")

        with GitRepository(history_repo.root) as fresh:
            assert fresh.remote_url() == "git@github.com:o/r.git"

    def test_no_submodules(self, repo: GitRepository) -> None:
        assert repo.submodule_paths() == []


class TestSubprocessQueries:
    def test_show_name_status(
        self, repo: GitRepository, history_repo: HistoryRepo
    ) -> None:
        output = repo.show_name_status(history_repo.shas[3])

        assert "A\0docs/guide.md\0" in output
        assert "M\0src/main.py\0" in output

    def test_show_name_status_keeps_non_ascii_paths(
        self, repo: GitRepository, history_repo: HistoryRepo
    ) -> None:
        (history_repo.root / "docs" / "résumé.md").write_text("cv\n")
        sha = commit_all(history_repo.root, "Add résumé")

        output = repo.show_name_status(sha)

        assert "docs/résumé.md\0" in output
        assert parse_name_status(output) == [
            ChangedFile(path="docs/résumé.md", status=FileStatus.ADDED)
        ]

    def test_blame_porcelain(self, repo: GitRepository) -> None:
        output = repo.blame_porcelain("src/main.py")

        assert "author Test User" in output
        assert "\tvalue = 3" in output

    def test_blame_untracked_fails(
        self, repo: GitRepository, history_repo: HistoryRepo
    ) -> None:
        (history_repo.root / "new.py").write_text("x = 1\n")

        with pytest.raises(QueryFailureError) as exc_info:
            _ = repo.blame_porcelain("new.py")

        assert exc_info.value.operation == "blame"


class TestRepositoryPath:
    def test_root_is_resolved(self, history_repo: HistoryRepo) -> None:
        with GitRepository(history_repo.root / "src" / "..") as repo:
            assert repo.root == Path(history_repo.root).resolve()
