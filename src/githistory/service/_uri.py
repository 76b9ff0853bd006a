"""Content URIs for file revisions.

A content URI names a file at a commit so an external viewer can ask for
its text: ``git-history://<commit>/<path>``.
"""

from dataclasses import dataclass
from typing import Final

CONTENT_URI_SCHEME: Final = "git-history"
_PREFIX: Final = f"{CONTENT_URI_SCHEME}://"


@dataclass(frozen=True, slots=True)
class ContentRef:
    """A file at a commit."""

    commit: str
    path: str


def build_content_uri(commit: str, path: str) -> str:
    """Build the content URI for path at commit."""
    return f"{_PREFIX}{commit}/{path.lstrip('/')}"


def parse_content_uri(uri: str) -> ContentRef | None:
    """Parse a content URI.

    Returns:
        The commit and path, or None if uri is not a well-formed
        content URI.
    """
    if not uri.startswith(_PREFIX):
        return None
    commit, sep, path = uri[len(_PREFIX) :].partition("/")
    if not commit or not sep or not path:
        return None
    return ContentRef(commit=commit, path=path)
