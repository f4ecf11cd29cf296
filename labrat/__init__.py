"""
labrat

Typed extraction of FurAffinity pages and URLs.
- Keys: typed identifiers that round-trip through site URLs
- Resources: page assemblers producing frozen pydantic records
- Markup: HTML subtree → escaped, simplified rich text

Public API surface:
  Orchestrator  : LabratParser, parse_page
  Keys          : ViewKey, JournalKey, SubmissionsKey, FavKey, CommentReplyKey, parse_key
  Records       : View, Journal, Submissions, Header, Others, Response, ...
  Error types   : ParseError (markup changed), ContentGated (policy), UrlKeyError
"""

# --- Orchestrator ---
from .main import LabratParser, parse_page

# --- Key codec ---
from .keys import (
    ViewKey, JournalKey, SubmissionsKey, FavKey, CommentReplyKey, Order,
    ReplyTarget, ResourceKey, parse_key,
)

# --- Engine pieces ---
from .markup import simplify
from .comments import decode_comment, decode_depth
from .resources import PageType, from_html, page_type_for_url

# --- Records ---
from .schemas import (
    MiniUser, Rating, SubmissionKind, PreviewSize, Submission, CommentRoot,
    Comment, CommentNode, View, Journal, Submissions, Notifications, Header,
    Watch, WatchMsg, MiniComment, CommentMsg, MiniShout, ShoutMsg,
    MiniJournal, Favorite, Others, Response,
)

# --- Exceptions ---
from .exceptions import (
    LabratError, ParseError, UrlKeyError, MissingElement, MissingAttribute,
    MalformedUrl, IncorrectUrl, InvalidInteger, InvalidDate, UnknownRating,
    InvalidDepth, MalformedEmbeddedData, ContentGated, MissingSegment,
    ContractViolation, UnauthenticatedError,
)

__version__ = "0.1.0"
__all__ = [
    "LabratParser",
    "parse_page",
    "ViewKey",
    "JournalKey",
    "SubmissionsKey",
    "FavKey",
    "CommentReplyKey",
    "Order",
    "ReplyTarget",
    "ResourceKey",
    "parse_key",
    "simplify",
    "decode_comment",
    "decode_depth",
    "PageType",
    "from_html",
    "page_type_for_url",
    "MiniUser",
    "Rating",
    "SubmissionKind",
    "PreviewSize",
    "Submission",
    "CommentRoot",
    "Comment",
    "CommentNode",
    "View",
    "Journal",
    "Submissions",
    "Notifications",
    "Header",
    "Watch",
    "WatchMsg",
    "MiniComment",
    "CommentMsg",
    "MiniShout",
    "ShoutMsg",
    "MiniJournal",
    "Favorite",
    "Others",
    "Response",
    "LabratError",
    "ParseError",
    "UrlKeyError",
    "MissingElement",
    "MissingAttribute",
    "MalformedUrl",
    "IncorrectUrl",
    "InvalidInteger",
    "InvalidDate",
    "UnknownRating",
    "InvalidDepth",
    "MalformedEmbeddedData",
    "ContentGated",
    "MissingSegment",
    "ContractViolation",
    "UnauthenticatedError",
]
