"""Tests for CLIContext and exit helpers."""

from pathlib import Path

import pytest
from rich.console import Console

from githistory.cli import CLIContext, ExitCode
from githistory.cli._context import exit_with_error


class TestCLIContext:
    def test_get_current_defaults_when_unset(self) -> None:
        CLIContext.reset()

        ctx = CLIContext.get_current()

        assert ctx.workspace == Path.cwd()
        assert ctx.config.page_size == 50

    def test_set_and_reset(self, tmp_path: Path) -> None:
        ctx = CLIContext(workspace=tmp_path)

        CLIContext.set_current(ctx)
        try:
            assert CLIContext.get_current() is ctx
        finally:
            CLIContext.reset()

        assert CLIContext.get_current() is not ctx

    def test_resolve_relative_file(self, tmp_path: Path) -> None:
        ctx = CLIContext(workspace=tmp_path)

        assert ctx.resolve_file("src/a.py") == tmp_path / "src" / "a.py"

    def test_resolve_absolute_file(self, tmp_path: Path) -> None:
        ctx = CLIContext(workspace=tmp_path)

        assert ctx.resolve_file("/etc/hosts") == Path("/etc/hosts")


class TestExitWithError:
    def test_prints_and_exits(
        self, console: Console, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            exit_with_error("broken", ExitCode.NOT_FOUND, console=console)

        assert exc_info.value.code == ExitCode.NOT_FOUND
        assert "Error: broken" in capsys.readouterr().out
