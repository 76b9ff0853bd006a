"""Property-based tests for BlameParser.

Invariants checked over generated porcelain streams:
- One record per header line, sorted by line number
- Line numbers are exactly 1..n when the stream covers n lines
- Every record carries a non-empty commit hash
- Repeat headers inherit the metadata of the commit's first occurrence
"""

from datetime import UTC, datetime

from hypothesis import given, strategies as st

from githistory.blame import BlameParser

# =============================================================================
# Strategies
# =============================================================================

_HEX = "0123456789abcdef"

commit_shas = st.text(alphabet=_HEX, min_size=40, max_size=40)

author_names = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ ", min_size=1, max_size=20
).filter(lambda s: s.strip() == s and s != "")

line_content = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters="\n\r"),
    max_size=40,
)


@st.composite
def blame_streams(draw: st.DrawFn) -> tuple[str, dict[int, str], dict[str, str]]:
    """Porcelain text plus the expected commit per line and author per commit."""
    commits = draw(st.lists(commit_shas, min_size=1, max_size=5, unique=True))
    authors = {sha: draw(author_names) for sha in commits}
    count = draw(st.integers(min_value=1, max_value=30))
    owners = [draw(st.sampled_from(commits)) for _ in range(count)]
    order = draw(st.permutations(list(range(1, count + 1))))

    seen: set[str] = set()
    lines: list[str] = []
    for line_number in order:
        sha = owners[line_number - 1]
        lines.append(f"{sha} {line_number} {line_number} 1")
        if sha not in seen:
            seen.add(sha)
            lines.extend(
                [
                    f"author {authors[sha]}",
                    "author-time 1700000000",
                    "author-tz +0000",
                    "summary change",
                ]
            )
        lines.append("\t" + draw(line_content))

    expected = {n: owners[n - 1] for n in range(1, count + 1)}
    return "\n".join(lines) + "\n", expected, authors


def _parser() -> BlameParser:
    return BlameParser(clock=lambda: datetime(2024, 1, 1, tzinfo=UTC))


# =============================================================================
# Properties
# =============================================================================


@given(blame_streams())
def test_one_record_per_line_in_order(
    stream: tuple[str, dict[int, str], dict[str, str]],
) -> None:
    text, expected, _ = stream

    lines = _parser().parse(text)

    assert [line.line_number for line in lines] == list(range(1, len(expected) + 1))


@given(blame_streams())
def test_hashes_are_non_empty_and_attributed(
    stream: tuple[str, dict[int, str], dict[str, str]],
) -> None:
    text, expected, _ = stream

    lines = _parser().parse(text)

    assert all(line.commit_hash for line in lines)
    assert {line.line_number: line.commit_hash for line in lines} == expected


@given(blame_streams())
def test_repeat_headers_inherit_metadata(
    stream: tuple[str, dict[int, str], dict[str, str]],
) -> None:
    text, _, authors = stream

    lines = _parser().parse(text)

    for line in lines:
        assert line.author == authors[line.commit_hash]
        assert line.summary == "change"


@given(st.text(max_size=200))
def test_arbitrary_text_never_raises(text: str) -> None:
    lines = _parser().parse(text)

    numbers = [line.line_number for line in lines]
    assert numbers == sorted(numbers)
    assert all(n >= 1 for n in numbers)
