"""
Resource extraction engine.

One assembler per page shape, each a pure `from_html(url, document)`
function returning a record or raising a ParseError subclass:

  view          /view/<id>/              → View
  journal       /journal/<id>/           → Journal
  submissions   /msg/submissions/...     → Submissions
  others        /msg/others/             → Others
  header        any logged-in page       → Header
"""

from enum import Enum
from typing import Callable

from bs4 import BeautifulSoup

from ..exceptions import IncorrectUrl
from ..primitives import path_segments
from . import header, journal, others, submissions, view


class PageType(str, Enum):
    VIEW = "view"
    JOURNAL = "journal"
    SUBMISSIONS = "submissions"
    OTHERS = "others"
    HEADER = "header"


ASSEMBLERS: dict[PageType, Callable] = {
    PageType.VIEW: view.from_html,
    PageType.JOURNAL: journal.from_html,
    PageType.SUBMISSIONS: submissions.from_html,
    PageType.OTHERS: others.from_html,
    PageType.HEADER: header.from_html,
}


def page_type_for_url(url: str) -> PageType:
    """Guess the page shape from the request URL."""
    segments = path_segments(url)
    head = segments[:2]

    if head[:1] == ["view"]:
        return PageType.VIEW
    if head[:1] == ["journal"]:
        return PageType.JOURNAL
    if head == ["msg", "submissions"]:
        return PageType.SUBMISSIONS
    if head == ["msg", "others"]:
        return PageType.OTHERS

    raise IncorrectUrl(url)


def from_html(page_type: PageType, url: str, document: BeautifulSoup):
    """Run the assembler for `page_type`."""
    return ASSEMBLERS[PageType(page_type)](url, document)


__all__ = [
    "PageType",
    "ASSEMBLERS",
    "page_type_for_url",
    "from_html",
    "header",
    "journal",
    "others",
    "submissions",
    "view",
]
