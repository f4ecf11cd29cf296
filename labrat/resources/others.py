"""
Message center (`/msg/others/`) assembler.

The page holds one `.message-stream` per message group. Any group may be
missing entirely (empty list). Within a group every entry carries a
checkbox whose value is the message id; when the thing the message points
at was deleted, the site keeps the checkbox but drops the user link, and
the entry's payload becomes None.
"""

from typing import Optional
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag

from ..exceptions import IncorrectUrl, MissingElement
from ..logger import get_module_logger
from ..primitives import (
    attr, join, path_segments, select_all, select_first, text, timestamp,
    unsigned, user_slug,
)
from ..schemas import (
    CommentMsg, CommentRoot, Favorite, MiniComment, MiniJournal, MiniShout,
    MiniUser, Others, ShoutMsg, Watch, WatchMsg,
)

logger = get_module_logger("resources.others")

USER_LINK = "a[href^='/user/']"

WATCHES_SELECTOR = "#messages-watches .message-stream > li"
COMMENTS_SELECTOR = (
    "#messages-comments-submission .message-stream > li, "
    "#messages-comments-journal .message-stream > li"
)
SHOUTS_SELECTOR = "#messages-shouts .message-stream > li"
JOURNALS_SELECTOR = "#messages-journals .message-stream > li"
FAVORITES_SELECTOR = "#messages-favorites .message-stream > li"


def _checkbox_id(elem: Tag, css: str) -> int:
    return unsigned(attr(select_first(elem, css), "value"))


def _user(elem: Tag) -> MiniUser:
    link = select_first(elem, USER_LINK)
    return MiniUser(name=text(link), slug=user_slug(attr(link, "href")))


def _optional_user(elem: Tag) -> Optional[MiniUser]:
    try:
        return _user(elem)
    except MissingElement:
        return None


def _watch(url: str, elem: Tag) -> WatchMsg:
    watch_id = _checkbox_id(elem, "input[name='watches[]']")

    avatar_img = select_first(elem, ".avatar img")
    try:
        avatar_link = select_first(elem, ".avatar a")
    except MissingElement:
        return WatchMsg(watch_id=watch_id)

    user = MiniUser(
        avatar=join(url, attr(avatar_img, "src")),
        name=text(select_first(elem, ".info span:first-child")),
        slug=user_slug(attr(avatar_link, "href")),
    )
    when = timestamp(select_first(elem, ".info .popup_date"))

    return WatchMsg(watch_id=watch_id, watch=Watch(user=user, when=when))


def _comment_root(url: str, href: str, is_journal: bool) -> int:
    """Id of the submission/journal a `/view/<id>/#cid:<cid>` link points into."""
    target = join(url, href)
    segments = path_segments(target)
    expected = "journal" if is_journal else "view"
    if len(segments) < 2 or segments[0] != expected:
        raise IncorrectUrl(target)

    fragment = urlsplit(target).fragment
    if not fragment.startswith("cid:"):
        raise IncorrectUrl(target)
    unsigned(fragment[len("cid:"):])

    return unsigned(segments[1])


def _comment(url: str, elem: Tag) -> CommentMsg:
    checkbox = select_first(elem, "input[name^='comments-']")
    is_journal = "journals" in attr(checkbox, "name")
    comment_id = unsigned(attr(checkbox, "value"))

    author = _optional_user(elem)
    if author is None:
        return CommentMsg(comment_id=comment_id, is_journal=is_journal)

    posted = timestamp(select_first(elem, ".popup_date"))

    root_link = select_first(elem, "a[href*='#cid:']")
    root_id = _comment_root(url, attr(root_link, "href"), is_journal)

    return CommentMsg(
        comment_id=comment_id,
        is_journal=is_journal,
        comment=MiniComment(
            root=CommentRoot.JOURNAL if is_journal else CommentRoot.VIEW,
            root_id=root_id,
            comment_id=comment_id,
            title=text(root_link),
            author=author,
            posted=posted,
        ),
    )


def _shout(url: str, elem: Tag) -> ShoutMsg:
    shout_id = _checkbox_id(elem, "input[name='shouts[]']")

    author = _optional_user(elem)
    if author is None:
        return ShoutMsg(shout_id=shout_id)

    posted = timestamp(select_first(elem, ".popup_date"))
    return ShoutMsg(shout_id=shout_id, shout=MiniShout(author=author, posted=posted))


def _journal(url: str, elem: Tag) -> MiniJournal:
    journal_id = _checkbox_id(elem, "input[name='journals[]']")
    author = _user(elem)
    posted = timestamp(select_first(elem, ".popup_date"))
    title = text(select_first(elem, "a[href^='/journal/']"))

    return MiniJournal(journal_id=journal_id, title=title, author=author, posted=posted)


def _favorite(url: str, elem: Tag) -> Favorite:
    favorite_id = _checkbox_id(elem, "input[name='favorites[]']")

    view_link = select_first(elem, "a[href^='/view/']")
    segments = path_segments(join(url, attr(view_link, "href")))
    if len(segments) < 2:
        raise IncorrectUrl(attr(view_link, "href"))
    submission_id = unsigned(segments[1])

    # rendered as "Title" including the quotes
    title = text(view_link)
    if title.startswith('"'):
        title = title[1:]
    if title.endswith('"'):
        title = title[:-1]

    user = _user(elem)
    when = timestamp(select_first(elem, ".popup_date"))

    return Favorite(
        favorite_id=favorite_id,
        submission_id=submission_id,
        title=title,
        user=user,
        when=when,
    )


def from_html(url: str, doc: BeautifulSoup) -> Others:
    others = Others(
        watches=[_watch(url, e) for e in select_all(doc, WATCHES_SELECTOR)],
        comments=[_comment(url, e) for e in select_all(doc, COMMENTS_SELECTOR)],
        shouts=[_shout(url, e) for e in select_all(doc, SHOUTS_SELECTOR)],
        journals=[_journal(url, e) for e in select_all(doc, JOURNALS_SELECTOR)],
        favorites=[_favorite(url, e) for e in select_all(doc, FAVORITES_SELECTOR)],
    )

    logger.info(
        f"Extracted messages: {len(others.watches)} watches, "
        f"{len(others.comments)} comments, {len(others.shouts)} shouts, "
        f"{len(others.journals)} journals, {len(others.favorites)} favorites"
    )
    return others
