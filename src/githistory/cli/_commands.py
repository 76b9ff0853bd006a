# pyright: reportUnusedCallResult=false
# ruff: noqa: D415
"""githistory commands."""

from pathlib import Path
from typing import Annotated, Literal

from cyclopts import App, Parameter
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from githistory.cli._context import CLIContext, ExitCode, exit_with_error
from githistory.cli._formatters import (
    blame_colors,
    format_blame_annotation,
    format_relative_time,
    truncate_message,
)
from githistory.repository import FileRevisionState, FileStatus
from githistory.session import HistorySession
from githistory.tree import FileNode, FileTree, FolderNode
from githistory.view import NO_HISTORY, NOT_A_REPOSITORY, FoldMode

_STATUS_STYLES: dict[FileStatus, tuple[str, str]] = {
    FileStatus.ADDED: ("A", "green"),
    FileStatus.MODIFIED: ("M", "yellow"),
    FileStatus.DELETED: ("D", "red"),
    FileStatus.UNCHANGED: ("·", "dim"),
}

_SHORT_SHA = 8


def _open_session(ctx: CLIContext) -> HistorySession:
    """Open a session for the workspace, exiting outside a repository."""
    session = HistorySession(ctx.workspace, config=ctx.config, logger=ctx.logger)
    if not session.is_repository:
        session.close()
        exit_with_error(
            NOT_A_REPOSITORY, ExitCode.NOT_A_REPOSITORY, console=ctx.error_console
        )
    return session


def _log(
    file: str,
    /,
    page: Annotated[
        int,
        Parameter(name=["--page", "-p"], help="Zero-based page of 50 commits"),
    ] = 0,
) -> None:
    """Show the commit history of a file, following renames

    Args:
        file: File to show history for
        page: Page to show
    """
    ctx = CLIContext.get_current()
    console = ctx.console
    path = ctx.resolve_file(file)

    with _open_session(ctx) as session:
        commits = session.service.get_log(path, page)
        if not commits:
            console.print(f"[dim]{NO_HISTORY}[/dim]")
            return

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1))
        table.add_column("SHA", style="yellow", width=_SHORT_SHA)
        table.add_column("Message")
        table.add_column("Author", style="cyan")
        table.add_column("When", style="dim")
        for commit in commits:
            table.add_row(
                commit.hash[:_SHORT_SHA],
                escape(truncate_message(commit.message)),
                escape(commit.author),
                format_relative_time(commit.date),
            )
        console.print(table)

        if len(commits) == session.service.page_size:
            console.print(
                f"[dim]More commits: githistory log {escape(file)} --page {page + 1}[/dim]"
            )


def _tree_label(node: FolderNode | FileNode) -> Text:
    match node:
        case FolderNode(name=name, expanded=expanded):
            label = Text(f"{name}/", style="bold blue")
            if not expanded:
                label.append(" (collapsed)", style="dim")
            return label
        case FileNode(name=name, status=status, is_target=is_target):
            code, style = _STATUS_STYLES[status]
            label = Text(f"{code} ", style=style)
            label.append(name, style="bold" if is_target else "")
            if is_target:
                label.append(" (current)", style="dim")
            return label


def _add_children(branch: Tree, tree: FileTree, folder_path: str) -> None:
    for node in tree.children(folder_path):
        child = branch.add(_tree_label(node))
        if isinstance(node, FolderNode) and node.expanded:
            _add_children(child, tree, node.path)


def _files(
    commit: str,
    /,
    file: Annotated[
        str | None,
        Parameter(name=["--file", "-f"], help="Active file to highlight and expand to"),
    ] = None,
    fold: Annotated[
        Literal["auto", "expanded", "collapsed"],
        Parameter(name=["--fold"], help="Folder expansion policy"),
    ] = "auto",
) -> None:
    """Show the files changed by a commit as a tree

    Args:
        commit: Commit SHA or other revision
        file: Active file to highlight and expand to
        fold: Folder expansion policy
    """
    ctx = CLIContext.get_current()
    console = ctx.console

    with _open_session(ctx) as session:
        view = session.view
        if file is not None:
            view.set_active_file(ctx.resolve_file(file))
        view.select_commit(commit)
        match FoldMode(fold):
            case FoldMode.EXPANDED:
                view.unfold_all()
            case FoldMode.COLLAPSED:
                view.fold_all()
            case FoldMode.AUTO:
                pass

        tree = view.commit_tree(commit)
        if tree.is_empty():
            console.print(f"[dim]No files changed in {escape(commit)}[/dim]")
            return

        root = Tree(Text(commit[:_SHORT_SHA], style="yellow"))
        _add_children(root, tree, "")
        console.print(root)


def _blame(file: str, /) -> None:
    """Show who last changed each line of a file

    Args:
        file: File to annotate
    """
    ctx = CLIContext.get_current()
    console = ctx.console
    path = ctx.resolve_file(file)

    with _open_session(ctx) as session:
        lines = session.service.get_blame(path)
        if not lines:
            console.print(
                "[dim]No blame information available "
                "(file may be empty or untracked)[/dim]"
            )
            return

        try:
            content = path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError:
            content = []

        colors = blame_colors(lines)
        width = len(str(lines[-1].line_number))
        for line in lines:
            text = Text(
                format_blame_annotation(line), style=f"on {colors[line.commit_hash]}"
            )
            text.append(f" {line.line_number:>{width}} ", style="dim")
            if line.line_number <= len(content):
                text.append(content[line.line_number - 1])
            console.print(text)


def _show(commit: str, file: str, /) -> None:
    """Print a file as it was at a commit

    Args:
        commit: Commit SHA or other revision
        file: File to print
    """
    ctx = CLIContext.get_current()
    path = ctx.resolve_file(file)

    with _open_session(ctx) as session:
        revision = session.service.get_file_revision(commit, path)
        relative = session.service.relative_path(path)
        match revision.state:
            case FileRevisionState.PRESENT:
                ctx.console.print(
                    revision.text, markup=False, highlight=False, end=""
                )
            case FileRevisionState.ABSENT:
                exit_with_error(
                    f"{escape(relative)} does not exist at {escape(commit)}",
                    ExitCode.NOT_FOUND,
                    console=ctx.error_console,
                )
            case FileRevisionState.UNAVAILABLE:
                exit_with_error(
                    f"Could not read {escape(relative)} at {escape(commit)}",
                    ExitCode.QUERY_FAILED,
                    console=ctx.error_console,
                )


def _parent(
    commit: str,
    /,
    file: Annotated[
        str | None,
        Parameter(name=["--file", "-f"], help="File selecting the repository"),
    ] = None,
) -> None:
    """Print the parent of a commit

    Args:
        commit: Commit SHA or other revision
        file: File selecting the repository (for submodules)
    """
    ctx = CLIContext.get_current()
    path: Path | None = ctx.resolve_file(file) if file is not None else None

    with _open_session(ctx) as session:
        parent = session.service.get_parent_commit(commit, path)
        if parent is None:
            ctx.console.print("[dim]This is the first commit[/dim]")
            return
        ctx.console.print(parent, highlight=False)


def _remote(
    file: Annotated[
        str | None,
        Parameter(name=["--file", "-f"], help="File selecting the repository"),
    ] = None,
) -> None:
    """Print the GitHub URL of the origin remote

    Args:
        file: File selecting the repository (for submodules)
    """
    ctx = CLIContext.get_current()
    path: Path | None = ctx.resolve_file(file) if file is not None else None

    with _open_session(ctx) as session:
        url = session.service.get_github_remote_url(path)
        if url is None:
            ctx.console.print("[dim]No GitHub remote configured[/dim]")
            return
        ctx.console.print(url, highlight=False)


def register_commands(app: App) -> None:
    """Register every githistory command on app."""
    app.command(_log, name="log")
    app.command(_files, name="files")
    app.command(_blame, name="blame")
    app.command(_show, name="show")
    app.command(_parent, name="parent")
    app.command(_remote, name="remote")
