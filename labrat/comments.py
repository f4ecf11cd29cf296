"""
Comment-thread decoder.

The site renders threads flat: each `.comment_container` carries its
nesting as an inline `width:NN%` style (100% at the top level, 3% narrower
per level), its own id on an `a.comment_anchor#cid:<id>`, and, for
replies, an `a.comment-parent` link to `#cid:<parent id>`.
"""

from bs4 import BeautifulSoup, Tag

from .exceptions import InvalidDepth, IncorrectUrl, MissingElement
from .logger import get_module_logger
from .markup import simplify
from .primitives import attr, join, select_all, select_first, text, timestamp, unsigned
from .schemas import Comment, CommentNode, CommentRoot, MiniUser

logger = get_module_logger("comments")

WIDTH_PREFIX = "width:"
WIDTH_SUFFIX = "%"
# "width:N%" .. "width:NNN%"
MIN_STYLE_LEN = 8
MAX_STYLE_LEN = 10

ID_SELECTOR = "a.comment_anchor[id^='cid:']"
TEXT_SELECTOR = ".comment_text"
PARENT_SELECTOR = "a.comment-parent"
POSTED_SELECTOR = ".comment-date .popup_date"
AVATAR_SELECTOR = "img.comment_useravatar"
NAME_SELECTOR = ".comment_username h3"


def decode_depth(style: str) -> int:
    """`width:97%` → 1, `width:100%` → 0, `width:40%` → 20"""
    if not style.startswith(WIDTH_PREFIX) or not style.endswith(WIDTH_SUFFIX):
        raise InvalidDepth(style)
    if not MIN_STYLE_LEN <= len(style) <= MAX_STYLE_LEN:
        raise InvalidDepth(style)

    width_txt = style[len(WIDTH_PREFIX):-len(WIDTH_SUFFIX)]
    if not width_txt.isascii() or not width_txt.isdigit():
        raise InvalidDepth(style)
    width = int(width_txt)
    if width > 100:
        raise InvalidDepth(style)

    return (100 - width) // 3


def _parent_id(elem: Tag):
    try:
        parent = select_first(elem, PARENT_SELECTOR)
    except MissingElement:
        return None

    href = attr(parent, "href")
    if not href.startswith("#cid:"):
        raise IncorrectUrl(href)
    return unsigned(href[len("#cid:"):])


def decode_comment(base_url: str, root: CommentRoot, root_id: int, elem: Tag) -> CommentNode:
    """
    Decode one `.comment_container`.

    Args:
        base_url: URL of the page, for resolving avatars and links
        root: Whether the thread hangs off a submission or a journal
        root_id: Id of that submission or journal
        elem: The comment container element

    Returns:
        CommentNode; `comment` is None for hidden comments

    Raises:
        MissingAttribute: no style (or id/href/src/alt where needed)
        InvalidDepth: style present but not a width percentage
        MissingElement: a mandatory part of a visible comment is missing
    """
    depth = decode_depth(attr(elem, "style"))

    id_elem = select_first(elem, ID_SELECTOR)
    comment_id = unsigned(attr(id_elem, "id")[len("cid:"):])

    try:
        body = select_first(elem, TEXT_SELECTOR)
    except MissingElement:
        logger.debug(f"Comment {comment_id} is hidden")
        return CommentNode(root=root, root_id=root_id, comment_id=comment_id, depth=depth)

    parent_id = _parent_id(elem)

    posted = timestamp(select_first(elem, POSTED_SELECTOR))

    avatar_elem = select_first(elem, AVATAR_SELECTOR)
    avatar = join(base_url, attr(avatar_elem, "src"))
    slug = attr(avatar_elem, "alt")

    name = text(select_first(elem, NAME_SELECTOR))

    return CommentNode(
        root=root,
        root_id=root_id,
        comment_id=comment_id,
        depth=depth,
        comment=Comment(
            parent_id=parent_id,
            commenter=MiniUser(avatar=avatar, name=name, slug=slug),
            posted=posted,
            text=simplify(base_url, body),
        ),
    )


def decode_thread(base_url: str, root: CommentRoot, root_id: int,
                  document: BeautifulSoup, css: str) -> list[CommentNode]:
    """Decode every comment container matching `css`; the first failure aborts."""
    return [
        decode_comment(base_url, root, root_id, elem)
        for elem in select_all(document, css)
    ]
