# ruff: noqa: TC003  # Path needed at runtime for method bodies
"""Repository root resolution.

This module maps arbitrary file paths to the repository that owns them when
nested repositories (submodules) live below the main working tree.
"""

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Self

from githistory.exceptions import NotARepositoryError
from githistory.repository._models import RepoRoot
from githistory.repository._protocol import GitHandleProtocol
from githistory.utils import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

type HandleFactory = Callable[[Path], GitHandleProtocol]


def discover_root(working_dir: Path) -> Path:
    """Discover the repository root containing working_dir.

    Walks up the directory tree until a ``.git`` directory or file is
    found. Worktrees and submodules use a ``.git`` file, so both count.

    Args:
        working_dir: File or directory to start discovery from.

    Returns:
        The resolved repository root.

    Raises:
        NotARepositoryError: If no ``.git`` exists at or above working_dir.
    """
    current = working_dir.resolve()
    if current.is_file():
        current = current.parent

    while True:
        if (current / ".git").exists():
            return current

        parent = current.parent
        if parent == current:
            msg = f"Not inside a Git repository: {working_dir}"
            raise NotARepositoryError(msg, path=working_dir)
        current = parent


def normalize_path(path: str | Path) -> str:
    """Render a path with forward slashes and no trailing separator."""
    text = str(path).replace("\\", "/")
    if len(text) > 1:
        text = text.rstrip("/")
    return text


def _is_within(path: str, root: str) -> bool:
    if root == "/":
        return path.startswith("/")
    return path == root or path.startswith(root + "/")


class RepositoryResolver:
    """Maps file paths to their owning repository root.

    Submodule roots are matched before the main root, longest prefix
    first, since every submodule lies inside the main working tree.

    Example:
        >>> resolver = RepositoryResolver.discover(Path("/work/app"), GitRepository)
        >>> root = resolver.resolve("/work/app/vendor/lib/src/x.py")
        >>> resolver.relativize("/work/app/vendor/lib/src/x.py", root)
        'src/x.py'
    """

    __slots__ = ("_logger", "_main", "_submodules")

    def __init__(
        self,
        main: RepoRoot,
        submodules: Iterable[RepoRoot] = (),
        *,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> None:
        """Initialize the resolver with a known root set.

        Args:
            main: The main repository root.
            submodules: Nested repository roots.
            logger: Optional logger for diagnostics.
        """
        self._main: RepoRoot = main
        self._submodules: tuple[RepoRoot, ...] = tuple(
            sorted(
                submodules,
                key=lambda r: len(normalize_path(r.root_path)),
                reverse=True,
            )
        )
        self._logger: FilteringBoundLogger = logger or create_null_logger()

    @classmethod
    def discover(
        cls,
        workspace_root: Path,
        handle_factory: HandleFactory,
        *,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> Self:
        """Build a resolver for the repository containing workspace_root.

        Submodules are enumerated once through the main handle. Each
        candidate directory is probed for ``.git`` metadata; entries that
        are not checked out are skipped silently.

        Args:
            workspace_root: Directory inside the main repository.
            handle_factory: Opens a handle for a repository root.
            logger: Optional logger for diagnostics.

        Returns:
            A resolver over the main root and its checked-out submodules.

        Raises:
            NotARepositoryError: If workspace_root is not inside a repository.
        """
        log = logger or create_null_logger()
        root = discover_root(workspace_root)
        main = RepoRoot(root_path=root, handle=handle_factory(root))

        submodules: list[RepoRoot] = []
        for relative in main.handle.submodule_paths():
            candidate = root / relative
            if not (candidate / ".git").exists():
                log.debug("Skipping submodule without git metadata", path=relative)
                continue
            try:
                handle = handle_factory(candidate)
            except NotARepositoryError:
                log.debug("Skipping submodule that is not a repository", path=relative)
                continue
            submodules.append(
                RepoRoot(root_path=candidate.resolve(), handle=handle, is_submodule=True)
            )

        log.info(
            "Resolved repository roots",
            root=str(root),
            submodules=[str(s.root_path) for s in submodules],
        )
        return cls(main, submodules, logger=log)

    @property
    def main(self) -> RepoRoot:
        """The main repository root."""
        return self._main

    @property
    def roots(self) -> tuple[RepoRoot, ...]:
        """All known roots, submodules first."""
        return (*self._submodules, self._main)

    def close(self) -> None:
        """Close every handle owned by the resolver."""
        for root in self.roots:
            root.handle.close()

    def resolve(self, path: str | Path) -> RepoRoot | None:
        """Find the repository root owning path.

        Args:
            path: Absolute file path.

        Returns:
            The owning root, or None if no known root contains path.
        """
        for candidate in self._candidates(path):
            for root in self.roots:
                if _is_within(candidate, normalize_path(root.root_path)):
                    return root
        self._logger.debug("No repository owns path", path=str(path))
        return None

    def relativize(self, path: str | Path, root: RepoRoot | None = None) -> str:
        """Convert path to a forward-slash path relative to its root.

        Paths that match no known root are returned unchanged, so calling
        this on an already-relative path is a no-op.

        Args:
            path: Absolute (or already relative) file path.
            root: Root to strip. Resolved from path when omitted.

        Returns:
            The repository-relative path.
        """
        target = root if root is not None else self.resolve(path)
        if target is None:
            return str(path)

        root_text = normalize_path(target.root_path)
        for candidate in self._candidates(path):
            if _is_within(candidate, root_text):
                return candidate[len(root_text) :].lstrip("/")
        return str(path)

    def _candidates(self, path: str | Path) -> list[str]:
        """Normalized spellings of path: as given, then symlink-resolved."""
        raw = normalize_path(path)
        candidates = [raw]
        as_path = Path(path)
        if as_path.is_absolute():
            resolved = normalize_path(as_path.resolve())
            if resolved != raw:
                candidates.append(resolved)
        return candidates
