"""Parsers for raw log, name-status and remote output."""

import re
from typing import TYPE_CHECKING, Final

from githistory.repository import (
    ChangedFile,
    CommitRecord,
    FileStatus,
    split_log_records,
)
from githistory.utils import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

# One or two status letters, optional similarity score, tab, path(s)
_NAME_STATUS_RE: Final = re.compile(r"^([A-Z]{1,2})(\d*)\t(.+)$")
_STATUS_RE: Final = re.compile(r"^([A-Z]{1,2})(\d*)$")

# Renames and copies carry the source path before the destination
_TWO_PATH_CODES: Final = frozenset({"R", "C"})

_C_ESCAPE_RE: Final = re.compile(rb"\\([0-7]{3}|.)", re.DOTALL)
_C_ESCAPES: Final = {
    b"a": b"\a",
    b"b": b"\b",
    b"t": b"\t",
    b"n": b"\n",
    b"v": b"\v",
    b"f": b"\f",
    b"r": b"\r",
}

_STATUS_BY_CODE: Final = {
    "A": FileStatus.ADDED,
    "M": FileStatus.MODIFIED,
    "D": FileStatus.DELETED,
    "R": FileStatus.MODIFIED,
    "T": FileStatus.MODIFIED,
}

# hash, date, subject, author, email
_LOG_FIELDS: Final = 5

_GITHUB_REMOTE_RES: Final = (
    re.compile(r"^git@github\.com:(?P<slug>[^/]+/[^/]+?)(?:\.git)?/?$"),
    re.compile(r"^ssh://git@github\.com(?::\d+)?/(?P<slug>[^/]+/[^/]+?)(?:\.git)?/?$"),
    re.compile(
        r"^(?:https?|git)://(?:[^@/]+@)?github\.com/(?P<slug>[^/]+/[^/]+?)(?:\.git)?/?$"
    ),
)


def unquote_path(path: str) -> str:
    """Undo git's C-style quoting of a path.

    Without ``-z`` git wraps paths holding non-ASCII bytes, quotes,
    backslashes or control characters in double quotes and escapes them
    (``"r\\303\\251sum\\303\\251.md"``). Unquoted paths are returned as-is.

    Example:
        >>> unquote_path('"docs/r\\\\303\\\\251sum\\\\303\\\\251.md"')
        'docs/résumé.md'
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    raw = _C_ESCAPE_RE.sub(_unescape, path[1:-1].encode("utf-8"))
    return raw.decode("utf-8", errors="replace")


def _unescape(match: re.Match[bytes]) -> bytes:
    token = match.group(1)
    if len(token) == 3:
        return bytes([int(token, 8) & 0xFF])
    return _C_ESCAPES.get(token, token)


def _status_for(code: str) -> FileStatus:
    # Combined diffs of merges print one letter per parent; the first decides
    return _STATUS_BY_CODE.get(code[0], FileStatus.UNCHANGED)


def parse_name_status(
    output: str, *, logger: "FilteringBoundLogger | None" = None  # noqa: UP037
) -> list[ChangedFile]:
    """Parse ``git show --name-status`` output.

    Both layouts are accepted: NUL-separated (``-z``), where every field is
    taken verbatim, and tab/newline-separated, where quoted paths are
    unquoted. Renames and copies become MODIFIED and keep only the new
    path. Status codes are one or two letters; unknown letters map to
    UNCHANGED and records without a status code are skipped.

    Args:
        output: Raw name-status output.
        logger: Optional logger for skipped records.

    Returns:
        Changed files in output order.

    Example:
        >>> parse_name_status("M\\tsrc/a.ts\\nA\\tsrc/b.ts")
        [ChangedFile(path='src/a.ts', ...), ChangedFile(path='src/b.ts', ...)]
    """
    log = logger or create_null_logger()
    if "\0" in output:
        return _parse_nul_separated(output, log)

    files: list[ChangedFile] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        match = _NAME_STATUS_RE.match(line)
        if match is None:
            log.debug("Skipping unrecognized name-status line", line=line)
            continue
        code, _, paths = match.groups()
        # Renames and copies list "old<TAB>new"; keep the new path
        path = unquote_path(paths.split("\t")[-1])
        files.append(ChangedFile(path=path, status=_status_for(code)))
    return files


def _parse_nul_separated(
    output: str, log: "FilteringBoundLogger"  # noqa: UP037
) -> list[ChangedFile]:
    files: list[ChangedFile] = []
    fields = output.split("\0")
    index = 0
    while index < len(fields):
        # Status fields may carry the newline ending the empty commit header
        token = fields[index].strip()
        index += 1
        if not token:
            continue
        match = _STATUS_RE.match(token)
        if match is None:
            log.debug("Skipping unrecognized name-status field", field=token)
            continue
        code = match.group(1)
        count = 2 if code in _TWO_PATH_CODES else 1
        paths = fields[index : index + count]
        index += count
        if len(paths) < count or not paths[-1]:
            log.debug("Skipping truncated name-status record", code=code)
            break
        files.append(ChangedFile(path=paths[-1], status=_status_for(code)))
    return files


def parse_log(
    output: str, *, logger: "FilteringBoundLogger | None" = None  # noqa: UP037
) -> list[CommitRecord]:
    """Parse log output produced with LOG_FORMAT into commit records."""
    log = logger or create_null_logger()
    commits: list[CommitRecord] = []
    for fields in split_log_records(output):
        if len(fields) < _LOG_FIELDS:
            log.debug("Skipping truncated log record", fields=len(fields))
            continue
        sha, date, message, author, email = fields[:_LOG_FIELDS]
        commits.append(
            CommitRecord(
                hash=sha.strip(),
                date=date,
                message=message,
                author=author,
                author_email=email,
            )
        )
    return commits


def github_web_url(remote: str) -> str | None:
    """Derive the https URL of a GitHub repository from a remote URL.

    Args:
        remote: Remote URL in scp-like, ssh, git or http(s) form.

    Returns:
        ``https://github.com/<owner>/<repo>``, or None for remotes that
        are not on GitHub or cannot be parsed.
    """
    remote = remote.strip()
    for pattern in _GITHUB_REMOTE_RES:
        match = pattern.match(remote)
        if match is not None:
            return f"https://github.com/{match.group('slug')}"
    return None
