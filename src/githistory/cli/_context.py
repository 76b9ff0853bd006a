# ruff: noqa: TC003  # Path needed at runtime for dataclass field
"""CLI context and shared helpers.

The CLIContext is set once by the meta entry point and read by every
command through a context variable.
"""

import contextvars
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Never, Self

from rich.console import Console

from githistory.config import HistoryConfig
from githistory.utils import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


class ExitCode(IntEnum):
    """Exit codes for githistory commands."""

    SUCCESS = 0
    CONFIG_ERROR = 1
    NOT_A_REPOSITORY = 2
    NOT_FOUND = 3
    QUERY_FAILED = 4


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global CLI state shared with every command.

    Attributes:
        config: Loaded configuration.
        workspace: Directory relative file arguments resolve against.
        console: Console for regular output.
        error_console: Console for error output.
        logger: Structured logger for the session.
    """

    config: HistoryConfig = field(default_factory=HistoryConfig, repr=False)
    workspace: Path = field(default_factory=Path.cwd)
    console: Console = field(default_factory=Console, repr=False)
    error_console: Console = field(
        default_factory=lambda: Console(stderr=True), repr=False
    )
    logger: "FilteringBoundLogger" = field(  # noqa: UP037
        default_factory=create_null_logger, repr=False
    )

    @classmethod
    def get_current(cls) -> Self:
        """Get the active CLIContext, or a default one if none is set."""
        ctx = _current_cli_context.get()
        if ctx is not None:
            return ctx
        return cls()

    @classmethod
    def set_current(cls, ctx: Self) -> None:
        """Set the active CLIContext."""
        _current_cli_context.set(ctx)

    @classmethod
    def reset(cls) -> None:
        """Clear the active CLIContext."""
        _current_cli_context.set(None)

    def resolve_file(self, file: str) -> Path:
        """Resolve a file argument against the workspace."""
        path = Path(file).expanduser()
        if not path.is_absolute():
            path = self.workspace / path
        return path


_current_cli_context: contextvars.ContextVar[CLIContext | None] = (
    contextvars.ContextVar("cli_context", default=None)
)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.QUERY_FAILED,
    *,
    console: Console | None = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = Console(stderr=True)
    console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(code)
