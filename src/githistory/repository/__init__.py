"""githistory repository access.

This package provides the query handles bound to repository roots and the
resolver that maps file paths to the root that owns them.

Classes:
    GitRepository: dulwich and git-binary backed query handle.
    FakeGitHandle: In-memory handle for tests.
    GitHandleProtocol: Runtime-checkable protocol for dependency injection.
    RepositoryResolver: Maps paths to RepoRoots, submodules first.

Models:
    CommitRecord: Metadata about a single commit.
    ChangedFile: A path touched by a commit, with its FileStatus.
    BlameLine: Attribution of one line of a file.
    RepoRoot: A repository root and its handle.
    FileRevision: File content at a revision with a presence state.
    DiffSources: Both sides of a single-file diff.

Example:
    >>> from githistory.repository import GitRepository, RepositoryResolver
    >>> resolver = RepositoryResolver.discover(Path.cwd(), GitRepository)
    >>> root = resolver.resolve(Path.cwd() / "README.md")
"""

from githistory.repository._fake import FakeGitHandle, format_log_record
from githistory.repository._git import GitRepository, split_log_records
from githistory.repository._models import (
    BlameLine,
    ChangedFile,
    CommitRecord,
    DiffSources,
    FileRevision,
    FileRevisionState,
    FileStatus,
    RepoRoot,
)
from githistory.repository._protocol import GitHandleProtocol
from githistory.repository._resolver import (
    HandleFactory,
    RepositoryResolver,
    discover_root,
    normalize_path,
)

__all__ = [
    "BlameLine",
    "ChangedFile",
    "CommitRecord",
    "DiffSources",
    "FakeGitHandle",
    "FileRevision",
    "FileRevisionState",
    "FileStatus",
    "GitHandleProtocol",
    "GitRepository",
    "HandleFactory",
    "RepoRoot",
    "RepositoryResolver",
    "discover_root",
    "format_log_record",
    "normalize_path",
    "split_log_records",
]
