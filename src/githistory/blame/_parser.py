"""Streaming parser for ``git blame --porcelain`` output.

The porcelain format is::

    <sha> <orig_line> <final_line> [<num_lines>]
    author <name>
    author-mail <<email>>
    author-time <timestamp>
    author-tz <tz>
    ... other headers ...
    summary <subject>
    filename <path>
    \t<content>

Metadata is printed only the first time a commit appears in the stream;
later lines attributed to the same commit repeat the header line alone.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING, Final

from githistory.repository import BlameLine
from githistory.utils import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

UNKNOWN_AUTHOR: Final = "Unknown"

# Keys git emits between a header and its content line
_METADATA_KEYS: Final = frozenset(
    {
        "author",
        "author-mail",
        "author-time",
        "author-tz",
        "committer",
        "committer-mail",
        "committer-time",
        "committer-tz",
        "summary",
        "previous",
        "filename",
        "boundary",
    }
)

# <commit> <orig_line> <final_line> [<num_lines>]
_HEADER_RE: Final = re.compile(
    r"^(?P<commit>\S+) (?P<orig>\d+) (?P<final>\d+)(?: (?P<count>\d+))?$"
)

# Git timezone string length (+HHMM or -HHMM)
_TZ_STRING_LENGTH: Final = 5


@dataclass(slots=True)
class _CommitMetadata:
    author: str | None = None
    author_email: str = ""
    author_time: int | None = None
    author_tz: str = "+0000"
    summary: str | None = None


def _parse_tz(value: str) -> timezone:
    """Convert a +HHMM/-HHMM string to a timezone, UTC when malformed."""
    if len(value) != _TZ_STRING_LENGTH or value[0] not in "+-":
        return UTC
    sign = -1 if value[0] == "-" else 1
    try:
        hours = int(value[1:3])
        minutes = int(value[3:5])
        return timezone(sign * timedelta(hours=hours, minutes=minutes))
    except ValueError:
        return UTC


class BlameParser:
    """Turns porcelain blame text into ordered BlameLine records.

    One record is emitted per header line, when its content line arrives
    (or at the next header or end of input if the content line is
    missing). Author, date and summary come from a per-commit metadata
    cache filled incrementally as metadata lines arrive, so bare repeat
    headers reuse what the first occurrence captured.

    A header whose commit has no metadata yet gets placeholders:
    author "Unknown", the parse time as date and an empty summary.
    Known limitation: records already emitted with placeholders are not
    corrected when metadata for that commit shows up later in the stream.

    Lines that are neither headers, metadata nor content are skipped and
    logged at debug level; one bad line costs at most one record.

    Example:
        >>> parser = BlameParser()
        >>> lines = parser.parse(blame_text)
        >>> lines[0].author
        'Alice'
    """

    __slots__ = ("_clock", "_logger")

    def __init__(
        self,
        *,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the parser.

        Args:
            logger: Optional logger for skipped lines.
            clock: Source of the placeholder date. Defaults to UTC now.
        """
        self._logger: FilteringBoundLogger = logger or create_null_logger()
        self._clock: Callable[[], datetime] = clock or (lambda: datetime.now(UTC))

    def parse(self, text: str) -> list[BlameLine]:
        """Parse porcelain output.

        Args:
            text: Raw ``git blame --porcelain`` output.

        Returns:
            BlameLine records sorted by line number.
        """
        parse_time = self._clock().isoformat()
        cache: dict[str, _CommitMetadata] = {}
        records: list[BlameLine] = []
        # (commit, final line) of the header awaiting its content line
        pending: tuple[str, int] | None = None

        def emit(commit: str, line_number: int) -> None:
            meta = cache.get(commit) or _CommitMetadata()
            records.append(
                BlameLine(
                    line_number=line_number,
                    commit_hash=commit,
                    author=meta.author if meta.author is not None else UNKNOWN_AUTHOR,
                    date=self._format_date(meta) or parse_time,
                    summary=meta.summary or "",
                    author_email=meta.author_email,
                )
            )

        for index, line in enumerate(text.split("\n"), start=1):
            if line.startswith("\t"):
                if pending is not None:
                    emit(*pending)
                    pending = None
                continue

            if not line:
                continue

            key, _, value = line.partition(" ")
            if key in _METADATA_KEYS:
                if pending is None:
                    self._skip(index, line, "metadata outside a header block")
                    continue
                meta = cache.setdefault(pending[0], _CommitMetadata())
                self._apply_metadata(meta, key, value, index)
                continue

            match = _HEADER_RE.match(line)
            if match is None:
                self._skip(index, line, "unrecognized line")
                continue

            final_line = int(match.group("final"))
            if final_line < 1:
                self._skip(index, line, "line number out of range")
                continue

            if pending is not None:
                emit(*pending)
            pending = (match.group("commit"), final_line)

        if pending is not None:
            emit(*pending)

        records.sort(key=lambda record: record.line_number)
        return records

    def _apply_metadata(
        self, meta: _CommitMetadata, key: str, value: str, index: int
    ) -> None:
        """Record one metadata field; other keys are accepted and ignored."""
        match key:
            case "author":
                meta.author = value
            case "author-mail":
                meta.author_email = value.strip().removeprefix("<").removesuffix(">")
            case "author-time":
                try:
                    meta.author_time = int(value)
                except ValueError:
                    self._skip(index, f"{key} {value}", "non-numeric author-time")
            case "author-tz":
                meta.author_tz = value.strip()
            case "summary":
                meta.summary = value
            case _:
                pass

    def _format_date(self, meta: _CommitMetadata) -> str | None:
        if meta.author_time is None:
            return None
        tz = _parse_tz(meta.author_tz)
        try:
            return datetime.fromtimestamp(meta.author_time, tz=tz).isoformat()
        except (OverflowError, OSError, ValueError):
            return None

    def _skip(self, index: int, line: str, reason: str) -> None:
        self._logger.debug(
            "Skipping malformed blame line", line_number=index, line=line, reason=reason
        )
