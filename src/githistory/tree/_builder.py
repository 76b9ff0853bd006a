"""Pure construction of changed-file trees."""

import posixpath
from collections.abc import Iterable, Sequence
from types import MappingProxyType
from typing import TYPE_CHECKING

from githistory.repository import ChangedFile
from githistory.tree._models import (
    ROOT_PATH,
    AllCollapsed,
    AllExpanded,
    AutoExpandTo,
    FileNode,
    FileTree,
    FoldPolicy,
    FolderNode,
    TreeNode,
)
from githistory.utils import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


def name_sort_key(name: str) -> tuple[str, str]:
    """Case-insensitive ordering with a case-sensitive tie-break."""
    return (name.casefold(), name)


def node_sort_key(node: TreeNode) -> tuple[int, str, str]:
    """Folders before files, then by display name."""
    match node:
        case FolderNode(name=name):
            return (0, *name_sort_key(name))
        case FileNode(name=name):
            return (1, *name_sort_key(name))


def split_path(path: str) -> list[str]:
    """Split a repository path into non-empty segments."""
    return [part for part in path.replace("\\", "/").split("/") if part]


def match_target(paths: Sequence[str], target: str) -> str | None:
    """Pick the changed path that names the active file.

    An exact match wins. Otherwise the first path where one of the two
    is a path-suffix of the other is used, then the first path sharing
    the target's basename.

    Args:
        paths: Changed paths in tree order.
        target: Active file path, ideally repository-relative.

    Returns:
        The matching path, or None.
    """
    target = "/".join(split_path(target))
    if not target:
        return None
    if target in paths:
        return target

    for path in paths:
        if target.endswith("/" + path) or path.endswith("/" + target):
            return path

    basename = posixpath.basename(target)
    for path in paths:
        if posixpath.basename(path) == basename:
            return path
    return None


class FileTreeBuilder:
    """Builds folder hierarchies from flat changed-file lists.

    The builder keeps no state between calls: the same files and policy
    always produce an equal tree, and a returned tree is never mutated.

    Example:
        >>> builder = FileTreeBuilder()
        >>> tree = builder.build(files, AutoExpandTo("src/app.py"))
        >>> [node.name for node in tree.children()]
        ['src', 'README.md']
    """

    __slots__ = ("_logger",)

    def __init__(self, *, logger: "FilteringBoundLogger | None" = None) -> None:  # noqa: UP037
        self._logger: FilteringBoundLogger = logger or create_null_logger()

    def build(
        self,
        files: Iterable[ChangedFile],
        policy: FoldPolicy,
        *,
        target_path: str | None = None,
    ) -> FileTree:
        """Build the tree for one commit's changed files.

        Args:
            files: Changed files in any order.
            policy: Fold policy deciding which folders are expanded.
            target_path: Active file used for FileNode.is_target. Defaults
                to the AutoExpandTo target.

        Returns:
            The immutable tree.
        """
        ordered = sorted(files, key=lambda f: name_sort_key(f.path))

        if target_path is None and isinstance(policy, AutoExpandTo):
            target_path = policy.target_path
        target = (
            match_target([f.path for f in ordered], target_path)
            if target_path
            else None
        )

        expanded_paths = self._expanded_paths(policy, target)

        children: dict[str, list[TreeNode]] = {}
        seen_folders: set[str] = set()
        target_node: FileNode | None = None

        for changed in ordered:
            parts = split_path(changed.path)
            if not parts:
                self._logger.debug("Skipping changed file with empty path")
                continue

            parent = ROOT_PATH
            for name in parts[:-1]:
                folder_path = f"{parent}/{name}" if parent else name
                if folder_path not in seen_folders:
                    seen_folders.add(folder_path)
                    expanded = self._is_expanded(policy, folder_path, expanded_paths)
                    children.setdefault(parent, []).append(
                        FolderNode(name=name, path=folder_path, expanded=expanded)
                    )
                parent = folder_path

            node = FileNode(
                name=parts[-1],
                path=changed.path,
                status=changed.status,
                is_target=target is not None and changed.path == target,
            )
            if node.is_target and target_node is None:
                target_node = node
            children.setdefault(parent, []).append(node)

        nodes = {
            path: tuple(sorted(items, key=node_sort_key))
            for path, items in children.items()
        }
        return FileTree(nodes=MappingProxyType(nodes), target=target_node)

    @staticmethod
    def _expanded_paths(policy: FoldPolicy, target: str | None) -> frozenset[str]:
        """Folder paths on the ancestor chain of the auto-expand target."""
        match policy:
            case AutoExpandTo():
                if target is None:
                    return frozenset()
                parts = split_path(target)[:-1]
                return frozenset("/".join(parts[: i + 1]) for i in range(len(parts)))
            case AllExpanded() | AllCollapsed():
                return frozenset()

    @staticmethod
    def _is_expanded(
        policy: FoldPolicy, folder_path: str, expanded_paths: frozenset[str]
    ) -> bool:
        match policy:
            case AllExpanded():
                return True
            case AllCollapsed():
                return False
            case AutoExpandTo():
                return folder_path in expanded_paths
