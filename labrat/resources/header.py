"""
Logged-in header assembler.

Every page fetched with a session carries the user's avatar and a bar of
notification badges ("357S", "7577J", "2TT", ...). Pages fetched without
one lack `img.loggedin_user_avatar`, which surfaces as MissingElement.
"""

from typing import Optional

from bs4 import BeautifulSoup

from ..exceptions import IncorrectUrl, MissingElement
from ..logger import get_module_logger
from ..primitives import attr, join, select_all, select_first, text, user_slug
from ..schemas import Header, MiniUser, Notifications

logger = get_module_logger("resources.header")

AVATAR_SELECTOR = "img.loggedin_user_avatar"

# badge suffix → Notifications field; "TT" before the single letters
BADGE_SUFFIXES = [
    ("TT", "trouble_tickets"),
    ("S", "submissions"),
    ("W", "watches"),
    ("C", "comments"),
    ("F", "favorites"),
    ("N", "notes"),
    ("J", "journals"),
]


def _badge(suffix: str, badge: str) -> Optional[int]:
    if not badge.endswith(suffix):
        return None
    count = badge[:-len(suffix)].strip()
    if not count.isascii() or not count.isdigit():
        return None
    return int(count)


def notifications_from_html(url: str, doc: BeautifulSoup) -> Notifications:
    """Sum the badges in the desktop message bar; unrecognised badges are skipped."""
    bar = select_first(doc, "#ddmenu .message-bar-desktop")

    counts = {field: 0 for _, field in BADGE_SUFFIXES}
    for elem in select_all(bar, "a.notification-container"):
        badge = text(elem)
        for suffix, field in BADGE_SUFFIXES:
            count = _badge(suffix, badge)
            if count is not None:
                counts[field] += count
                break
        else:
            logger.debug(f"Ignoring notification badge {badge!r}")

    return Notifications(**counts)


def from_html(url: str, doc: BeautifulSoup) -> Header:
    avatar_elem = select_first(doc, AVATAR_SELECTOR)
    avatar = join(url, attr(avatar_elem, "src"))
    name = attr(avatar_elem, "alt")

    link = avatar_elem.parent
    if link is None or link.name != "a":
        raise MissingElement(f"a > {AVATAR_SELECTOR}")
    href = attr(link, "href")
    if not href.endswith("/"):
        raise IncorrectUrl(href)
    slug = user_slug(href)

    return Header(
        me=MiniUser(avatar=avatar, name=name, slug=slug),
        notifications=notifications_from_html(url, doc),
    )
