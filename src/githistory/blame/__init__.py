"""githistory blame parsing.

Example:
    >>> from githistory.blame import BlameParser
    >>> BlameParser().parse(handle.blame_porcelain("src/app.py"))
"""

from githistory.blame._parser import UNKNOWN_AUTHOR, BlameParser

__all__ = [
    "UNKNOWN_AUTHOR",
    "BlameParser",
]
