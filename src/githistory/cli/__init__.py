"""The githistory command-line interface."""

from githistory.cli._app import create_app, main
from githistory.cli._context import CLIContext, ExitCode

__all__ = ["CLIContext", "ExitCode", "create_app", "main"]
