"""githistory history service.

Example:
    >>> from githistory.service import CommitHistoryService
    >>> service = CommitHistoryService(resolver)
    >>> service.get_parent_commit(root_sha) is None
    True
"""

from githistory.service._parsers import (
    github_web_url,
    parse_log,
    parse_name_status,
    unquote_path,
)
from githistory.service._service import DEFAULT_PAGE_SIZE, CommitHistoryService
from githistory.service._uri import (
    CONTENT_URI_SCHEME,
    ContentRef,
    build_content_uri,
    parse_content_uri,
)

__all__ = [
    "CONTENT_URI_SCHEME",
    "DEFAULT_PAGE_SIZE",
    "CommitHistoryService",
    "ContentRef",
    "build_content_uri",
    "github_web_url",
    "parse_content_uri",
    "parse_log",
    "parse_name_status",
    "unquote_path",
]
