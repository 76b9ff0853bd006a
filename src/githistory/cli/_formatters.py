"""Text formatting for commit rows and blame annotations."""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Final

from githistory.repository import BlameLine, CommitRecord

# Commit subjects longer than this are cut and suffixed with "..."
MAX_MESSAGE_LENGTH: Final = 60

# Fixed author column in blame annotations
AUTHOR_WIDTH: Final = 12

NEWEST_COLOR: Final = "#1a3d1a"
OLDEST_COLOR: Final = "#3d1a1a"

# Shown instead of DD/MM/YYYY when a blame date cannot be parsed
UNKNOWN_DATE: Final = "--/--/----"

# Time constants for relative time formatting (in seconds)
_SECONDS_PER_MINUTE: Final = 60
_SECONDS_PER_HOUR: Final = 3600
_SECONDS_PER_DAY: Final = 86400
_RELATIVE_DAYS_LIMIT: Final = 30


def _parse_date(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def truncate_message(message: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    """Cut message to limit characters, marking the cut with "..."."""
    if len(message) <= limit:
        return message
    return message[:limit] + "..."


def format_relative_time(date: str, *, now: datetime | None = None) -> str:
    """Format an ISO date relative to now.

    Args:
        date: ISO-8601 timestamp.
        now: Reference time. Defaults to the current UTC time.

    Returns:
        "just now", "Nm ago", "Nh ago" or "Nd ago" within 30 days, the
        calendar date beyond that, and the input itself if unparseable.
    """
    parsed = _parse_date(date)
    if parsed is None:
        return date
    reference = now or datetime.now(tz=UTC)
    seconds = int((reference - parsed).total_seconds())

    if seconds < _SECONDS_PER_MINUTE:
        return "just now"
    if seconds < _SECONDS_PER_HOUR:
        return f"{seconds // _SECONDS_PER_MINUTE}m ago"
    if seconds < _SECONDS_PER_DAY:
        return f"{seconds // _SECONDS_PER_HOUR}h ago"
    days = seconds // _SECONDS_PER_DAY
    if days < _RELATIVE_DAYS_LIMIT:
        return f"{days}d ago"
    return parsed.date().isoformat()


def format_commit_row(commit: CommitRecord, *, now: datetime | None = None) -> str:
    """Render a commit as "<subject>  <author> • <when>"."""
    when = format_relative_time(commit.date, now=now)
    return f"{truncate_message(commit.message)}  {commit.author} • {when}"


def format_blame_date(date: str) -> str:
    """Render an ISO date as DD/MM/YYYY."""
    parsed = _parse_date(date)
    if parsed is None:
        return UNKNOWN_DATE
    return parsed.strftime("%d/%m/%Y")


def truncate_author(author: str, width: int = AUTHOR_WIDTH) -> str:
    """Pad or cut author to exactly width characters.

    Names that do not fit keep width - 2 characters followed by "..".
    """
    if len(author) <= width:
        return author.ljust(width)
    return author[: width - 2] + ".."


def format_blame_annotation(line: BlameLine) -> str:
    """Render the fixed-width "DD/MM/YYYY author" annotation of a line."""
    return f"{format_blame_date(line.date)} {truncate_author(line.author)}"


def interpolate_color(start: str, end: str, ratio: float) -> str:
    """Blend two ``#rrggbb`` colours.

    Args:
        start: Colour at ratio 0.
        end: Colour at ratio 1.
        ratio: Position between the two, clamped to [0, 1].

    Returns:
        The blended ``#rrggbb`` colour.
    """
    ratio = min(max(ratio, 0.0), 1.0)
    channels: list[str] = []
    for offset in (1, 3, 5):
        a = int(start[offset : offset + 2], 16)
        b = int(end[offset : offset + 2], 16)
        channels.append(f"{round(a + (b - a) * ratio):02x}")
    return "#" + "".join(channels)


def blame_colors(
    lines: Sequence[BlameLine],
    *,
    newest: str = NEWEST_COLOR,
    oldest: str = OLDEST_COLOR,
) -> dict[str, str]:
    """Assign each blamed commit a background colour by age.

    Unique commits are ordered newest first by date and spread evenly
    from newest to oldest. A single commit gets the newest colour.

    Returns:
        Colour per commit hash.
    """
    dates: dict[str, str] = {}
    for line in lines:
        dates.setdefault(line.commit_hash, line.date)

    epoch = datetime.min.replace(tzinfo=UTC)
    ordered = sorted(
        dates, key=lambda sha: _parse_date(dates[sha]) or epoch, reverse=True
    )
    if len(ordered) <= 1:
        return dict.fromkeys(ordered, newest)
    last = len(ordered) - 1
    return {
        sha: interpolate_color(newest, oldest, index / last)
        for index, sha in enumerate(ordered)
    }
