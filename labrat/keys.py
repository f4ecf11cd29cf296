"""
Key codec: typed identifiers for site resources and actions.

Each key family knows how to parse itself out of a canonical site URL
(`Key.from_url`) and how to format itself back into one (`key.to_url`).
Parsing walks path segments positionally; trailing segments beyond the
ones a family needs are ignored, re-ordered segments are not accepted.

URL grammar:
    /view/<id>/
    /journal/<id>/
    /msg/submissions/[{old|new}[~<cursor>]@<page-size>/]
    /{fav|unfav}/<id>/?key=<token>
    /replyto/{submission|journal}/<comment id>/
    #cid:<comment id>   (fragment on view and journal URLs)

Every key parsed from a URL formats to a URL that parses back to an equal
key. FavKey and CommentReplyKey format to action URLs (the fav/unfav
toggle, the reply form target) rather than to the URL they came from.
"""

from enum import Enum
from typing import Optional, Union
from urllib.parse import parse_qsl, urlencode, urlsplit

from pydantic import BaseModel, ConfigDict

from .config import get_settings
from .exceptions import MalformedUrl, MissingSegment
from .logger import get_module_logger
from .primitives import unsigned

logger = get_module_logger("keys")

DEFAULT_PAGE_SIZE = 72


def _site(path: str) -> str:
    return get_settings().site_root + path


def _split(url: str) -> tuple[list[str], str, str, bool]:
    """
    Validate an absolute URL and return (segments, query, fragment, has_fragment).

    urlsplit() reports "" for both "no fragment" and "empty fragment", so the
    presence of '#' is tracked separately.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        raise MalformedUrl(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise MalformedUrl(url)

    path = parts.path
    segments = path[1:].split("/") if path.startswith("/") else []
    return segments, parts.query, parts.fragment, "#" in url


def _segment(segments: list[str], index: int, url: str) -> str:
    if index >= len(segments) or not segments[index]:
        raise MissingSegment(url)
    return segments[index]


def _expect(segments: list[str], index: int, literal: str, url: str) -> None:
    if index >= len(segments) or segments[index] != literal:
        raise MissingSegment(url)


class _Key(BaseModel):
    model_config = ConfigDict(frozen=True)


class ViewKey(_Key):
    """A submission page: `/view/<id>/`."""
    submission_id: int

    @classmethod
    def from_url(cls, url: str) -> "ViewKey":
        segments, _, _, _ = _split(url)
        _expect(segments, 0, "view", url)
        return cls(submission_id=unsigned(_segment(segments, 1, url)))

    def to_url(self) -> str:
        return _site(f"view/{self.submission_id}/")


class JournalKey(_Key):
    """A journal page: `/journal/<id>/`."""
    journal_id: int

    @classmethod
    def from_url(cls, url: str) -> "JournalKey":
        segments, _, _, _ = _split(url)
        _expect(segments, 0, "journal", url)
        return cls(journal_id=unsigned(_segment(segments, 1, url)))

    def to_url(self) -> str:
        return _site(f"journal/{self.journal_id}/")


class Order(str, Enum):
    """Sort order of the new-submissions inbox, by URL token."""
    ASCENDING = "old"
    DESCENDING = "new"


class SubmissionsKey(_Key):
    """
    A page of the new-submissions inbox.

    `cursor` is the submission id the page starts after; `page_size` is the
    number after '@', kept so the URL survives a round trip. A key with no
    optional segment at all is the default (oldest first, no cursor).
    """
    order: Order = Order.ASCENDING
    cursor: Optional[int] = None
    page_size: Optional[int] = None

    @classmethod
    def from_url(cls, url: str) -> "SubmissionsKey":
        segments, _, _, _ = _split(url)
        _expect(segments, 0, "msg", url)
        _expect(segments, 1, "submissions", url)

        if len(segments) < 3 or not segments[2]:
            return cls()

        head, at, size = segments[2].partition("@")
        if not at:
            raise MissingSegment(url)
        page_size = unsigned(size)

        token, tilde, cursor_txt = head.partition("~")
        try:
            order = Order(token)
        except ValueError:
            raise MissingSegment(url)
        cursor = unsigned(cursor_txt) if tilde else None

        return cls(order=order, cursor=cursor, page_size=page_size)

    def to_url(self) -> str:
        if self == SubmissionsKey():
            return _site("msg/submissions/")

        segment = self.order.value
        if self.cursor is not None:
            segment += f"~{self.cursor}"
        page_size = DEFAULT_PAGE_SIZE if self.page_size is None else self.page_size
        return _site(f"msg/submissions/{segment}@{page_size}/")


class FavKey(_Key):
    """
    Token-bearing fav/unfav action for one submission.

    The token is per-session and the same for both directions, so the mode
    segment is dropped on parse and chosen again when formatting.
    """
    submission_id: int
    token: str

    @classmethod
    def from_url(cls, url: str) -> "FavKey":
        segments, query, _, _ = _split(url)
        if not segments or segments[0] not in ("fav", "unfav"):
            raise MissingSegment(url)
        submission_id = unsigned(_segment(segments, 1, url))

        for name, value in parse_qsl(query, keep_blank_values=True):
            if name == "key":
                return cls(submission_id=submission_id, token=value)

        raise MissingSegment(url)

    def to_url(self, fav: bool = True) -> str:
        mode = "fav" if fav else "unfav"
        return _site(f"{mode}/{self.submission_id}/?" + urlencode({"key": self.token}))

    def view_key(self) -> ViewKey:
        return ViewKey(submission_id=self.submission_id)


class ReplyTarget(str, Enum):
    VIEW = "view"
    JOURNAL = "journal"
    VIEW_COMMENT = "view_comment"
    JOURNAL_COMMENT = "journal_comment"


class CommentReplyKey(_Key):
    """
    Where a reply gets posted: a submission, a journal, or a comment on
    either. `target_id` is the submission/journal id for the first two and
    the comment id for the comment targets.
    """
    target: ReplyTarget
    target_id: int

    @classmethod
    def view(cls, submission_id: int) -> "CommentReplyKey":
        return cls(target=ReplyTarget.VIEW, target_id=submission_id)

    @classmethod
    def journal(cls, journal_id: int) -> "CommentReplyKey":
        return cls(target=ReplyTarget.JOURNAL, target_id=journal_id)

    @classmethod
    def view_comment(cls, comment_id: int) -> "CommentReplyKey":
        return cls(target=ReplyTarget.VIEW_COMMENT, target_id=comment_id)

    @classmethod
    def journal_comment(cls, comment_id: int) -> "CommentReplyKey":
        return cls(target=ReplyTarget.JOURNAL_COMMENT, target_id=comment_id)

    @staticmethod
    def _fragment_cid(fragment: str, url: str) -> int:
        if not fragment.startswith("cid:"):
            raise MissingSegment(url)
        return unsigned(fragment[4:])

    @classmethod
    def from_url(cls, url: str) -> "CommentReplyKey":
        segments, _, fragment, has_fragment = _split(url)
        head = segments[0] if segments else ""

        if head in ("view", "journal"):
            root_id = unsigned(_segment(segments, 1, url))
            if has_fragment:
                cid = cls._fragment_cid(fragment, url)
                if head == "view":
                    return cls.view_comment(cid)
                return cls.journal_comment(cid)
            if head == "view":
                return cls.view(root_id)
            return cls.journal(root_id)

        if head == "replyto":
            kind = _segment(segments, 1, url)
            cid = unsigned(_segment(segments, 2, url))
            if kind == "submission":
                return cls.view_comment(cid)
            if kind == "journal":
                return cls.journal_comment(cid)

        raise MissingSegment(url)

    def to_url(self) -> str:
        if self.target is ReplyTarget.VIEW:
            return _site(f"view/{self.target_id}/")
        if self.target is ReplyTarget.JOURNAL:
            return _site(f"journal/{self.target_id}/")
        if self.target is ReplyTarget.VIEW_COMMENT:
            return _site(f"replyto/submission/{self.target_id}/")
        return _site(f"replyto/journal/{self.target_id}/")


ResourceKey = Union[ViewKey, JournalKey, SubmissionsKey, FavKey, CommentReplyKey]

# Tried in this order by parse_key(); the first family that does not raise
# MissingSegment wins. CommentReplyKey also accepts bare view/journal URLs,
# so it only gets them when a fragment is present.
KEY_PARSE_ORDER = (ViewKey, JournalKey, SubmissionsKey, FavKey, CommentReplyKey)


def parse_key(url: str) -> ResourceKey:
    """Parse any supported site URL into its key."""
    _, _, _, has_fragment = _split(url)
    if has_fragment:
        return CommentReplyKey.from_url(url)

    for key_cls in KEY_PARSE_ORDER:
        try:
            return key_cls.from_url(url)
        except MissingSegment:
            continue

    logger.debug(f"No key family matches {url}")
    raise MissingSegment(url)
