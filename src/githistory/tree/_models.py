"""File tree models.

Tree nodes form a closed union of FolderNode and FileNode; consumers
match on the variant. Fold policies form a second closed union.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from githistory.repository import FileStatus

ROOT_PATH = ""


@dataclass(frozen=True, slots=True)
class FolderNode:
    """A directory in a commit's changed-file tree.

    Attributes:
        name: Display name (last path segment).
        path: Slash-joined path of the folder from the repository root.
        expanded: Whether the folder renders expanded.
    """

    name: str
    path: str
    expanded: bool


@dataclass(frozen=True, slots=True)
class FileNode:
    """A changed file in a commit's tree.

    Attributes:
        name: Display name (last path segment).
        path: Repository-relative path.
        status: Change type within the commit.
        is_target: True for the file currently open in the editor.
    """

    name: str
    path: str
    status: FileStatus
    is_target: bool = False


type TreeNode = FolderNode | FileNode


@dataclass(frozen=True, slots=True)
class AutoExpandTo:
    """Expand only the folders on the path to target_path."""

    target_path: str


@dataclass(frozen=True, slots=True)
class AllExpanded:
    """Expand every folder."""


@dataclass(frozen=True, slots=True)
class AllCollapsed:
    """Collapse every folder."""


type FoldPolicy = AutoExpandTo | AllExpanded | AllCollapsed


@dataclass(frozen=True, slots=True)
class FileTree:
    """Children of every folder, keyed by folder path.

    The root folder has path ``""``. The mapping is read-only; a new
    tree is built whenever the commit or fold policy changes.

    Attributes:
        nodes: Ordered children per folder path.
        target: The file matched as the active file, if any.
    """

    nodes: Mapping[str, tuple[TreeNode, ...]]
    target: FileNode | None = None

    def children(self, folder_path: str = ROOT_PATH) -> tuple[TreeNode, ...]:
        """Return the ordered children of a folder, empty if unknown."""
        return self.nodes.get(folder_path, ())

    def folder_paths(self) -> list[str]:
        """Return every folder path including the root."""
        return list(self.nodes)

    def is_empty(self) -> bool:
        """Return True if the tree holds no files."""
        return not self.nodes.get(ROOT_PATH)
