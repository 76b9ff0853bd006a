"""The command-line interface for githistory."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from githistory.cli._commands import register_commands
from githistory.cli._context import CLIContext, ExitCode, exit_with_error
from githistory.config import ConfigError, HistoryConfig, load_config
from githistory.utils import create_history_logger, create_null_logger

_HELP = "Browse the git history of files and commits."


def _build_context(
    *,
    config: Path | None,
    cwd: Path | None,
    verbose: bool,
    console: Console,
    error_console: Console,
) -> CLIContext:
    """Load configuration and build the context shared by commands."""
    workspace = (cwd or Path.cwd()).resolve()
    try:
        loaded: HistoryConfig = load_config(config, search_from=workspace)
    except ConfigError as e:
        exit_with_error(str(e), ExitCode.CONFIG_ERROR, console=error_console)

    if verbose or loaded.logging.file:
        logger = create_history_logger(
            level="debug" if verbose else loaded.logging.level.value,
            log_format=loaded.logging.format.value,  # type: ignore[arg-type]
            log_file=loaded.logging.file,
            component="cli",
        )
    else:
        logger = create_null_logger()

    return CLIContext(
        config=loaded,
        workspace=workspace,
        console=console,
        error_console=error_console,
        logger=logger,
    )


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    """Create the githistory application.

    Args:
        console: Console for command output.
        error_console: Console for errors.
        exit_on_error: Exit the process on parse errors.

    Returns:
        The configured App; invoke ``app.meta(tokens)`` to run it.
    """
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="githistory",
        help=_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        cwd: Annotated[
            Path | None,
            Parameter(name="--cwd", help="Workspace directory (default: current)"),
        ] = None,
        verbose: Annotated[
            bool, Parameter(name="--verbose", help="Log debug output to stderr")
        ] = False,
    ) -> None:
        """Launch githistory with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            config: Explicit path to config file.
            cwd: Workspace directory relative paths resolve against.
            verbose: Log debug output to stderr.
        """
        ctx = _build_context(
            config=config,
            cwd=cwd,
            verbose=verbose,
            console=console,
            error_console=error_console,
        )
        CLIContext.set_current(ctx)
        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


def main() -> None:
    """Default entrypoint for the `githistory` CLI."""
    app = create_app()
    app.meta()
