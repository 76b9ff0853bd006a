# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Version-control history models.

This module defines the immutable records produced from repository queries.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from githistory.repository._protocol import GitHandleProtocol


class FileStatus(StrEnum):
    """Change type of a path within a single commit.

    Renames and type changes collapse to MODIFIED; the rename origin is
    not retained.
    """

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    UNCHANGED = "unchanged"


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """Information about a single commit in a file's history.

    Identity is the hash; two records with the same hash describe the
    same commit.

    Attributes:
        hash: Full 40-character commit SHA hex string.
        date: Author date as an ISO-8601 timestamp string.
        message: Subject line of the commit message.
        author: Author name.
        author_email: Author email.
    """

    hash: str
    date: str = field(compare=False)
    message: str = field(compare=False)
    author: str = field(compare=False)
    author_email: str = field(compare=False)


@dataclass(frozen=True, slots=True)
class ChangedFile:
    """A path touched by a commit.

    Attributes:
        path: Repository-relative path with forward slashes.
        status: The change type.
    """

    path: str
    status: FileStatus


@dataclass(frozen=True, slots=True)
class BlameLine:
    """Attribution of one line of the working-tree file.

    Attributes:
        line_number: 1-based line number in the current file.
        commit_hash: SHA of the commit that last modified the line.
        author: Author name, or "Unknown" when no metadata was seen.
        date: ISO-8601 author date.
        summary: First line of the commit message.
        author_email: Author email without angle brackets (may be empty).
    """

    line_number: int
    commit_hash: str
    author: str
    date: str
    summary: str
    author_email: str = ""


@dataclass(frozen=True, slots=True)
class RepoRoot:
    """A known repository root and the session bound to it.

    Attributes:
        root_path: Absolute path to the repository working tree.
        handle: Query handle bound to that root.
        is_submodule: True for nested repositories below the main root.
    """

    root_path: Path
    handle: "GitHandleProtocol"  # noqa: UP037
    is_submodule: bool = False


class FileRevisionState(StrEnum):
    """Outcome of looking up a file at a revision."""

    PRESENT = "present"
    ABSENT = "absent"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True, slots=True)
class FileRevision:
    """File content at a revision with an explicit presence state.

    Attributes:
        state: PRESENT when the path existed (text may still be empty),
            ABSENT when the path did not exist at that revision, and
            UNAVAILABLE when the lookup itself failed.
        text: Decoded file content; empty unless state is PRESENT.
    """

    state: FileRevisionState
    text: str = ""


@dataclass(frozen=True, slots=True)
class DiffSources:
    """The two blobs an external diff viewer needs for one file.

    Attributes:
        path: Repository-relative path of the file.
        parent: Parent commit SHA (left side).
        commit: Commit SHA (right side).
        left: File content at the parent commit.
        right: File content at the commit.
    """

    path: str
    parent: str
    commit: str
    left: str
    right: str
