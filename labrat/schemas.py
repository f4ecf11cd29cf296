"""
Pydantic records produced by the extraction engine.

Every record is frozen: it is built once from a document snapshot and
never mutated. Links back to other resources (a comment's reply target, a
submission's view page) are derived from stored ids by methods rather
than stored as references.

Record families:
  MiniUser, Submission          shared building blocks
  CommentNode / Comment         one entry of a comment thread
  View, Journal                 full pages
  Submissions                   one page of the new-submissions inbox
  Header / Notifications        the logged-in user's bar on every page
  Others                        the message center (watches, comments, ...)
"""

from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar
from urllib.parse import urljoin, urlsplit

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import IncorrectUrl, UnknownRating, UnauthenticatedError
from .keys import CommentReplyKey, FavKey, JournalKey, SubmissionsKey, ViewKey
from .primitives import unsigned


class Record(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Enumerations ---

class Rating(str, Enum):
    GENERAL = "General"
    MATURE = "Mature"
    ADULT = "Adult"

    @classmethod
    def parse(cls, text: str) -> "Rating":
        """Exact site text to Rating."""
        try:
            return cls(text)
        except ValueError:
            raise UnknownRating(text)


class SubmissionKind(str, Enum):
    IMAGE = "image"
    FLASH = "flash"
    TEXT = "text"
    AUDIO = "audio"


class PreviewSize(int, Enum):
    """Thumbnail sizes the CDN serves, in pixels."""
    XXXS = 50
    XXS = 100
    XS = 120
    S = 150
    M = 200
    L = 250
    XL = 300
    XXL = 400
    XXXL = 600


class CommentRoot(str, Enum):
    VIEW = "view"
    JOURNAL = "journal"


# --- Shared building blocks ---

class MiniUser(Record):
    """Minimal identity of an artist, commenter or watcher."""
    avatar: Optional[str] = None   # absent where the page shows no avatar
    name: str                      # display name
    slug: str                      # lowercase /user/<slug>/ segment


class Submission(Record):
    """A submission as shown on its own page or in a listing."""
    submission_id: int
    created: int                   # epoch seconds, part of every CDN path
    cdn: str                       # thumbnail CDN root, e.g. https://t.facdn.net/
    rating: Rating
    kind: SubmissionKind
    title: str
    description: str               # simplified markup
    artist: MiniUser

    def preview(self, size: PreviewSize) -> str:
        return urljoin(self.cdn, f"/{self.submission_id}@{int(size)}-{self.created}.jpg")

    def view_key(self) -> ViewKey:
        return ViewKey(submission_id=self.submission_id)

    @staticmethod
    def parse_preview_url(url: str) -> tuple[str, int]:
        """
        Split a thumbnail URL into (cdn root, created).

        `https://t2.facdn.net/38351732@400-1600894374.jpg`
            → ("https://t2.facdn.net/", 1600894374)
        """
        path = urlsplit(url).path
        last = path.rsplit("/", 1)[-1]
        _, dash, after_size = last.partition("-")
        if not dash:
            raise IncorrectUrl(url)
        created_txt = after_size.split(".", 1)[0]
        return urljoin(url, "./"), unsigned(created_txt)


# --- Comments ---

class Comment(Record):
    """Body of a visible comment."""
    parent_id: Optional[int] = None    # None for top-level comments
    commenter: MiniUser
    posted: datetime
    text: str                          # simplified markup


class CommentNode(Record):
    """
    One slot in a comment thread.

    `comment` is None when the site shows the slot but hides its content
    (deleted or blocked comments); id and depth are still known.
    """
    root: CommentRoot
    root_id: int
    comment_id: int
    depth: int = Field(ge=0)
    comment: Optional[Comment] = None

    def reply_key(self) -> CommentReplyKey:
        if self.root is CommentRoot.VIEW:
            return CommentReplyKey.view_comment(self.comment_id)
        return CommentReplyKey.journal_comment(self.comment_id)


# --- Full pages ---

class View(Record):
    """A submission page."""
    submission: Submission
    fullview: str
    download: str

    category: str
    type_: str
    tags: list[str] = Field(default_factory=list)

    n_views: int
    n_comments: int
    n_favorites: int

    posted: datetime
    comments: list[CommentNode] = Field(default_factory=list)

    faved: Optional[bool] = None       # None when not logged in
    fav_key: Optional[FavKey] = None

    def view_key(self) -> ViewKey:
        return self.submission.view_key()

    def reply_key(self) -> CommentReplyKey:
        return CommentReplyKey.view(self.submission.submission_id)

    def preview(self, size: PreviewSize) -> str:
        return self.submission.preview(size)

    def require_fav_key(self) -> FavKey:
        if self.fav_key is None:
            raise UnauthenticatedError("fav key")
        return self.fav_key


class Journal(Record):
    """A journal page."""
    journal_id: int
    title: str
    author: MiniUser

    header: Optional[str] = None
    footer: Optional[str] = None
    content: str

    posted: datetime
    n_comments: int
    comments: list[CommentNode] = Field(default_factory=list)

    def journal_key(self) -> JournalKey:
        return JournalKey(journal_id=self.journal_id)

    def reply_key(self) -> CommentReplyKey:
        return CommentReplyKey.journal(self.journal_id)


# --- New-submissions inbox ---

class SubmissionInfo(BaseModel):
    """One entry of the `var descriptions = {...}` script object."""
    title: str
    description: str
    username: str
    lower: str
    avatar_mtime: str


class Submissions(Record):
    """One page of the new-submissions inbox."""
    items: list[Submission] = Field(default_factory=list)
    next: Optional[SubmissionsKey] = None
    prev: Optional[SubmissionsKey] = None


# --- Header ---

class Notifications(Record):
    submissions: int = 0
    journals: int = 0
    watches: int = 0
    comments: int = 0
    favorites: int = 0
    trouble_tickets: int = 0
    notes: int = 0


class Header(Record):
    """The logged-in user's avatar and notification counters."""
    me: MiniUser
    notifications: Notifications


# --- Message center ---

class Watch(Record):
    user: MiniUser
    when: datetime


class WatchMsg(Record):
    watch_id: int
    watch: Optional[Watch] = None


class MiniComment(Record):
    root: CommentRoot
    root_id: int
    comment_id: int
    title: str
    author: MiniUser
    posted: datetime

    def as_view_key(self) -> Optional[ViewKey]:
        if self.root is CommentRoot.VIEW:
            return ViewKey(submission_id=self.root_id)
        return None

    def as_journal_key(self) -> Optional[JournalKey]:
        if self.root is CommentRoot.JOURNAL:
            return JournalKey(journal_id=self.root_id)
        return None

    def reply_key(self) -> CommentReplyKey:
        if self.root is CommentRoot.VIEW:
            return CommentReplyKey.view_comment(self.comment_id)
        return CommentReplyKey.journal_comment(self.comment_id)


class CommentMsg(Record):
    comment_id: int
    is_journal: bool
    comment: Optional[MiniComment] = None


class MiniShout(Record):
    author: MiniUser
    posted: datetime


class ShoutMsg(Record):
    shout_id: int
    shout: Optional[MiniShout] = None


class MiniJournal(Record):
    journal_id: int
    title: str
    author: MiniUser
    posted: datetime

    def journal_key(self) -> JournalKey:
        return JournalKey(journal_id=self.journal_id)


class Favorite(Record):
    favorite_id: int
    submission_id: int
    title: str
    user: MiniUser
    when: datetime

    def view_key(self) -> ViewKey:
        return ViewKey(submission_id=self.submission_id)


class Others(Record):
    """The message center page, one list per message group."""
    watches: list[WatchMsg] = Field(default_factory=list)
    comments: list[CommentMsg] = Field(default_factory=list)
    shouts: list[ShoutMsg] = Field(default_factory=list)
    journals: list[MiniJournal] = Field(default_factory=list)
    favorites: list[Favorite] = Field(default_factory=list)


# --- Any page plus its header ---

PageT = TypeVar("PageT")


class Response(BaseModel, Generic[PageT]):
    """A parsed page together with the header, when logged in."""
    model_config = ConfigDict(frozen=True)

    header: Optional[Header] = None
    page: PageT
