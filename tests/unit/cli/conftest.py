from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console

from githistory.cli import create_app
from githistory.repository import FakeGitHandle
from githistory.session import HistorySession


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    (tmp_path / ".git").mkdir()
    return tmp_path.resolve()


@pytest.fixture
def fake_sessions(monkeypatch: pytest.MonkeyPatch, fake_handle: FakeGitHandle) -> None:
    """Make every command session use fake_handle for each repository root."""

    def _session(workspace_root: Path, **kwargs: object) -> HistorySession:
        return HistorySession(
            workspace_root,
            handle_factory=lambda _root: fake_handle,
            **kwargs,  # pyright: ignore[reportArgumentType]
        )

    monkeypatch.setattr("githistory.cli._commands.HistorySession", _session)


@pytest.fixture
def githistory_cli(
    console: Console, workspace: Path, fake_sessions: None
) -> Callable[..., int]:
    """Run the CLI in workspace and return the exit code (0 if no SystemExit)."""
    app = create_app(console=console, error_console=console)

    def _run(*args: str, cwd: Path | None = None) -> int:
        try:
            app.meta(["--cwd", str(cwd or workspace), *args])
        except SystemExit as e:
            if e.code is None:
                return 0
            return e.code if isinstance(e.code, int) else 1
        else:
            return 0

    return _run
