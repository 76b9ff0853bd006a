"""End-to-end tests for HistorySession over real repositories."""

import threading
import time
from pathlib import Path

import pytest

from githistory.config import HistoryConfig
from githistory.repository import ChangedFile, CommitRecord, FileRevisionState, FileStatus
from githistory.session import HistorySession
from githistory.tree import FileNode, FolderNode
from githistory.view import BackEntry, LoadMoreEntry, ViewMode

from tests.integration.conftest import (
    HistoryRepo,
    commit_all,
    init_git_repo,
    run_git,
)


class TestServiceQueries:
    def test_log_follows_rename(self, history_repo: HistoryRepo) -> None:
        with HistorySession(history_repo.root) as session:
            commits = session.service.get_log(history_repo.main_file)

        assert [c.message for c in commits] == [
            "Add guide",
            "Rename app",
            "Update app",
            "Initial commit",
        ]
        assert all(c.author == "Test User" for c in commits)

    def test_changed_files(self, history_repo: HistoryRepo) -> None:
        with HistorySession(history_repo.root) as session:
            files = session.service.get_changed_files(history_repo.shas[3])

        assert sorted(files, key=lambda f: f.path) == [
            ChangedFile(path="docs/guide.md", status=FileStatus.ADDED),
            ChangedFile(path="src/main.py", status=FileStatus.MODIFIED),
        ]

    def test_rename_is_reported_as_modified_new_path(
        self, history_repo: HistoryRepo
    ) -> None:
        with HistorySession(history_repo.root) as session:
            files = session.service.get_changed_files(history_repo.shas[2])

        assert files == [ChangedFile(path="src/main.py", status=FileStatus.MODIFIED)]

    def test_first_commit_has_no_parent(self, history_repo: HistoryRepo) -> None:
        with HistorySession(history_repo.root) as session:
            assert session.service.get_parent_commit(history_repo.shas[0]) is None
            assert session.service.get_diff_sources(
                history_repo.shas[0], history_repo.root / "README.md"
            ) is None

    def test_diff_sources(self, history_repo: HistoryRepo) -> None:
        with HistorySession(history_repo.root) as session:
            sources = session.service.get_diff_sources(
                history_repo.shas[3], history_repo.main_file
            )

        assert sources is not None
        assert sources.left == "value = 2\n"
        assert sources.right == "value = 3\nextra = True\n"

    def test_file_revision_states(self, history_repo: HistoryRepo) -> None:
        with HistorySession(history_repo.root) as session:
            before = session.service.get_file_revision(
                history_repo.shas[1], history_repo.main_file
            )
            after = session.service.get_file_revision(
                history_repo.shas[2], history_repo.main_file
            )

        assert before.state is FileRevisionState.ABSENT
        assert after.state is FileRevisionState.PRESENT
        assert after.text == "value = 2\n"

    def test_blame(self, history_repo: HistoryRepo) -> None:
        with HistorySession(history_repo.root) as session:
            lines = session.service.get_blame(history_repo.main_file)

        assert [line.line_number for line in lines] == [1, 2]
        assert {line.commit_hash for line in lines} == {history_repo.shas[3]}
        assert lines[0].author == "Test User"
        assert lines[0].author_email == "test@example.com"
        assert lines[0].summary == "Add guide"

    def test_github_remote(self, history_repo: HistoryRepo) -> None:
        run_git(
            history_repo.root,
            "remote",
            "add",
            "origin",
            "https://github.com/owner/repo.git",
        )

        with HistorySession(history_repo.root) as session:
            url = session.service.get_github_remote_url()

        assert url == "https://github.com/owner/repo"


class TestPanelFlow:
    def test_log_focus_and_back(self, history_repo: HistoryRepo) -> None:
        with HistorySession(history_repo.root) as session:
            view = session.view
            view.set_active_file(history_repo.main_file)

            items = view.root_items()
            assert all(isinstance(item, CommitRecord) for item in items)
            assert len(items) == 4

            view.select_commit(history_repo.shas[3])
            focused = view.root_items()
            assert focused[0] == BackEntry()
            assert focused[1:] == [
                FolderNode(name="docs", path="docs", expanded=False),
                FolderNode(name="src", path="src", expanded=True),
            ]
            assert view.children("src") == (
                FileNode(
                    name="main.py",
                    path="src/main.py",
                    status=FileStatus.MODIFIED,
                    is_target=True,
                ),
            )

            view.back()
            assert view.mode is ViewMode.LOG

    def test_non_ascii_target_expands(self, history_repo: HistoryRepo) -> None:
        resume = history_repo.root / "docs" / "résumé.md"
        resume.write_text("cv\n")
        sha = commit_all(history_repo.root, "Add résumé")

        with HistorySession(history_repo.root) as session:
            view = session.view
            view.set_active_file(resume)
            view.select_commit(sha)

            assert view.root_items()[1:] == [
                FolderNode(name="docs", path="docs", expanded=True)
            ]
            assert view.children("docs") == (
                FileNode(
                    name="résumé.md",
                    path="docs/résumé.md",
                    status=FileStatus.ADDED,
                    is_target=True,
                ),
            )

    def test_pagination_with_small_pages(self, history_repo: HistoryRepo) -> None:
        config = HistoryConfig(page_size=3)
        with HistorySession(history_repo.root, config=config) as session:
            view = session.view
            view.set_active_file(history_repo.main_file)

            assert view.root_items()[-1] == LoadMoreEntry(
                file_path=str(history_repo.main_file), next_page=1
            )
            more = view.load_more()

        assert [c.hash for c in more] == [history_repo.shas[0]]

    def test_outside_repository(self, tmp_path_factory: pytest.TempPathFactory) -> None:
        plain = tmp_path_factory.mktemp("plain")

        with HistorySession(plain) as session:
            assert session.is_repository is False
            assert session.service.get_log(plain / "a.py") == []


class TestSubmodules:
    @pytest.fixture
    def superproject(self, tmp_path: Path) -> Path:
        library = (tmp_path / "library").resolve()
        init_git_repo(library)
        (library / "lib.py").write_text("def helper(): ...\n")
        _ = commit_all(library, "Library commit")

        root = (tmp_path / "app").resolve()
        init_git_repo(root)
        (root / "app.py").write_text("print('app')\n")
        _ = commit_all(root, "App commit")
        run_git(
            root,
            "-c",
            "protocol.file.allow=always",
            "submodule",
            "add",
            "-q",
            str(library),
            "vendor/library",
        )
        _ = commit_all(root, "Add library submodule")
        return root

    def test_queries_route_to_submodule(self, superproject: Path) -> None:
        with HistorySession(superproject) as session:
            assert session.resolver is not None
            assert len(session.resolver.roots) == 2

            lib_commits = session.service.get_log(
                superproject / "vendor" / "library" / "lib.py"
            )
            app_commits = session.service.get_log(superproject / "app.py")

        assert [c.message for c in lib_commits] == ["Library commit"]
        assert [c.message for c in app_commits] == ["App commit"]


class TestWatching:
    def test_new_commit_refreshes_view(self, history_repo: HistoryRepo) -> None:
        config = HistoryConfig(debounce_ms=50)
        refreshed = threading.Event()

        with HistorySession(history_repo.root, config=config) as session:
            session.view.set_active_file(history_repo.main_file)
            assert len(session.view.commits()) == 4
            _ = session.view.subscribe(refreshed.set)
            session.start_watching()
            time.sleep(0.5)

            history_repo.main_file.write_text("value = 4\n")
            _ = commit_all(history_repo.root, "Another change")

            # Index writes can trigger a refresh before the ref update lands
            deadline = time.monotonic() + 10.0
            while len(session.view.commits()) != 5 and time.monotonic() < deadline:
                _ = refreshed.wait(0.5)
                refreshed.clear()

            assert len(session.view.commits()) == 5
