"""githistory changed-file trees.

Example:
    >>> from githistory.tree import AllCollapsed, FileTreeBuilder
    >>> tree = FileTreeBuilder().build(files, AllCollapsed())
    >>> tree.children("src")
"""

from githistory.tree._builder import (
    FileTreeBuilder,
    match_target,
    name_sort_key,
    node_sort_key,
    split_path,
)
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

__all__ = [
    "ROOT_PATH",
    "AllCollapsed",
    "AllExpanded",
    "AutoExpandTo",
    "FileNode",
    "FileTree",
    "FileTreeBuilder",
    "FoldPolicy",
    "FolderNode",
    "TreeNode",
    "match_target",
    "name_sort_key",
    "node_sort_key",
    "split_path",
]
