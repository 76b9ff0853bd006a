import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

import pytest


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    skip_no_git = pytest.mark.skip(reason="git executable not available")
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)
            if shutil.which("git") is None:
                item.add_marker(skip_no_git)


def run_git(cwd: Path, *args: str) -> str:
    """Run a git command in the given directory and return stdout."""
    result = subprocess.run(  # noqa: S603 - Safe: running git with controlled args
        ["git", *args],  # noqa: S607
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        msg = f"git {' '.join(args)} failed: {result.stderr}"
        raise RuntimeError(msg)
    return result.stdout


def init_git_repo(path: Path) -> None:
    """Initialize a minimal git repository in the given path."""
    path.mkdir(parents=True, exist_ok=True)
    run_git(path, "init", "-q")
    run_git(path, "config", "user.email", "test@example.com")
    run_git(path, "config", "user.name", "Test User")
    # Disable GPG signing to avoid signature issues
    run_git(path, "config", "commit.gpgsign", "false")
    run_git(path, "config", "diff.renames", "true")


def commit_all(path: Path, message: str) -> str:
    """Stage everything, commit, and return the new HEAD SHA."""
    run_git(path, "add", "-A")
    run_git(path, "commit", "-q", "-m", message)
    return run_git(path, "rev-parse", "HEAD").strip()


@dataclass(frozen=True, slots=True)
class HistoryRepo:
    """A repository with a renamed file and four commits.

    Attributes:
        root: Working tree path.
        shas: Commit SHAs, oldest first.
    """

    root: Path
    shas: tuple[str, ...]

    @property
    def main_file(self) -> Path:
        return self.root / "src" / "main.py"


@pytest.fixture
def history_repo(tmp_path: Path) -> HistoryRepo:
    """Create a git repository whose history includes a rename.

    Creates:
    - Initial commit with README.md and src/app.py
    - Second commit modifying src/app.py
    - Third commit renaming src/app.py to src/main.py
    - Fourth commit modifying src/main.py and adding docs/guide.md
    """
    root = (tmp_path / "repo").resolve()
    init_git_repo(root)

    (root / "README.md").write_text("hello\n")
    (root / "src").mkdir()
    (root / "src" / "app.py").write_text("value = 1\n")
    first = commit_all(root, "Initial commit")

    (root / "src" / "app.py").write_text("value = 2\n")
    second = commit_all(root, "Update app")

    run_git(root, "mv", "src/app.py", "src/main.py")
    third = commit_all(root, "Rename app")

    (root / "src" / "main.py").write_text("value = 3\nextra = True\n")
    (root / "docs").mkdir()
    (root / "docs" / "guide.md").write_text("# Guide\n")
    fourth = commit_all(root, "Add guide")

    return HistoryRepo(root=root, shas=(first, second, third, fourth))
