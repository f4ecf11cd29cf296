"""
Journal page (`/journal/<id>/`) assembler.
"""

from typing import Optional

from bs4 import BeautifulSoup, Tag

from ..comments import decode_thread
from ..exceptions import IncorrectUrl, MissingElement
from ..logger import get_module_logger
from ..markup import simplify
from ..primitives import (
    attr, join, number, path_segments, select_first, text, timestamp,
    unsigned, user_slug,
)
from ..schemas import CommentRoot, Journal, MiniUser

logger = get_module_logger("resources.journal")

USERNAME_SELECTOR = "#user-profile .username h2"


def _journal_id(url: str) -> int:
    segments = path_segments(url)
    if len(segments) < 2 or segments[0] != "journal":
        raise IncorrectUrl(url)
    return unsigned(segments[1])


def _optional_block(url: str, item: Tag, css: str) -> Optional[str]:
    try:
        block = select_first(item, css)
    except MissingElement:
        return None
    return simplify(url, block)


def _author(url: str, doc: BeautifulSoup) -> MiniUser:
    # rendered as "~Name"
    username = text(select_first(doc, USERNAME_SELECTOR))
    if not username.startswith("~"):
        raise MissingElement(USERNAME_SELECTOR)

    slug_elem = select_first(doc, "#user-profile .user-nav a[href^='/user/']")
    avatar_elem = select_first(doc, "#user-profile img.user-nav-avatar")

    return MiniUser(
        avatar=join(url, attr(avatar_elem, "src")),
        name=username[1:],
        slug=user_slug(attr(slug_elem, "href")),
    )


def from_html(url: str, doc: BeautifulSoup) -> Journal:
    """Build a Journal; header and footer banners are optional."""
    journal_id = _journal_id(url)
    logger.debug(f"Extracting journal {journal_id}")

    item = select_first(doc, ".journal-item")

    header = _optional_block(url, item, ".journal-header")
    footer = _optional_block(url, item, ".journal-footer")
    content = simplify(url, select_first(item, ".journal-content"))

    title = text(select_first(doc, "h2.journal-title"))
    posted = timestamp(select_first(doc, "h2.journal-title + div .popup_date"))

    author = _author(url, doc)

    n_comments = number(select_first(doc, ".journal-body-theme + div.section-footer span"))

    comments = decode_thread(
        url, CommentRoot.JOURNAL, journal_id, doc,
        "#comments-journal .comment_container",
    )

    if len(comments) != n_comments:
        logger.warning(
            f"Journal {journal_id} reports {n_comments} comments, found {len(comments)}"
        )

    logger.info(f"Extracted journal {journal_id} ({len(comments)} comments)")

    return Journal(
        journal_id=journal_id,
        title=title,
        author=author,
        header=header,
        footer=footer,
        content=content,
        posted=posted,
        n_comments=n_comments,
        comments=comments,
    )
