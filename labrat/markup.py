"""
Markup simplifier.

Turns an HTML subtree from a user-authored area (descriptions, comments,
journal bodies) into a small, escaped markup dialect that a rich-text
widget can display safely:

    <strong> <em> <u> <s> <hr> <br> <blockquote class="quote">
    <strong class="quote-name"> <div align=...> <font color=...>
    <a href=...> <img ...>

The site renders its BBCode as ordinary tags distinguished by class
(`<span class="bbcode bbcode_b">`), so most of the work is a class lookup.
Everything not in the table is dropped, but its text is kept.

Traversal is a single pass over the subtree in document order. Opening an
element pushes the tag it needs on close (if any) onto the same work stack
as its children, so output is balanced without re-inspecting the element.
"""

from html import escape
from typing import Optional
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

from .logger import get_module_logger

logger = get_module_logger("markup")

# (class, open tag, close tag); checked in order, first match wins
BBCODE_CLASSES = [
    ("bbcode_hr", "<hr>", None),
    ("bbcode_b", "<strong>", "</strong>"),
    ("bbcode_i", "<em>", "</em>"),
    ("bbcode_u", "<u>", "</u>"),
    ("bbcode_s", "<s>", "</s>"),
    ("bbcode_left", '<div align="left">', "</div>"),
    ("bbcode_center", '<div align="center">', "</div>"),
    ("bbcode_right", '<div align="right">', "</div>"),
    ("bbcode_quote", '<blockquote class="quote">', "</blockquote>"),
    ("bbcode_quote_name", '<strong class="quote-name">', "</strong>"),
]

# Tags that may carry a BBCode class
BBCODE_TAGS = {"strong", "b", "em", "i", "u", "s", "code", "hr", "span", "div"}

# Tags that may carry an inline colour when no class matched
COLOR_TAGS = {"span", "div"}

COLOR_PREFIX = "color: "
COLOR_SUFFIX = ";"

# Inline images are avatars/icons in practice; alt text is not carried over
IMG_TAG = '<img width="50" height="50" align="middle" src="{}">'

# Characters left as-is when re-encoding a resolved URL, per component;
# space, quotes and angle brackets are always percent-encoded
PATH_SAFE = "/%!$&'()*+,;=:@[]^|"
QUERY_SAFE = "/%!$&()*+,;=:@?[]^|`{}"
FRAGMENT_SAFE = "/%!$&'()*+,;=:@?#[]^|{}"


class _Close(str):
    """Marker for a close tag waiting on the work stack."""


def _resolve(base_url: str, ref: Optional[str]) -> Optional[str]:
    """Join `ref` onto the page URL and percent-encode what a browser would."""
    if ref is None:
        return None
    try:
        parts = urlsplit(urljoin(base_url, ref.strip()))
    except ValueError:
        return None
    if not parts.scheme:
        return None
    return urlunsplit((
        parts.scheme,
        parts.netloc,
        quote(parts.path, safe=PATH_SAFE),
        quote(parts.query, safe=QUERY_SAFE),
        quote(parts.fragment, safe=FRAGMENT_SAFE),
    ))


def _color(elem: Tag) -> Optional[str]:
    style = elem.get("style")
    if not isinstance(style, str):
        return None
    if not style.startswith(COLOR_PREFIX) or not style.endswith(COLOR_SUFFIX):
        return None
    return style[len(COLOR_PREFIX):-len(COLOR_SUFFIX)]


def _bbcode(elem: Tag) -> tuple[Optional[str], Optional[str]]:
    names = {c.lower() for c in (elem.get("class") or [])}
    for cls, open_tag, close_tag in BBCODE_CLASSES:
        if cls in names:
            return open_tag, close_tag

    if elem.name.lower() in COLOR_TAGS:
        color = _color(elem)
        if color is not None:
            return f'<font color="{escape(color)}">', "</font>"

    return None, None


def _classify(base_url: str, elem: Tag) -> tuple[Optional[str], Optional[str]]:
    """Open and close output for one element."""
    name = elem.name.lower()

    if name in BBCODE_TAGS:
        return _bbcode(elem)

    if name == "br":
        return "<br>", None

    if name == "a":
        url = _resolve(base_url, elem.get("href"))
        if url is None:
            return "<a>", "</a>"
        return f'<a href="{escape(url)}">', "</a>"

    if name == "img":
        url = _resolve(base_url, elem.get("src"))
        if url is None:
            return None, None
        return IMG_TAG.format(escape(url)), None

    return None, None


def simplify(base_url: str, element: Tag) -> str:
    """
    Convert the children of `element` into simplified markup.

    Args:
        base_url: URL of the page the element came from; relative links and
                  image sources are resolved against it
        element: The container element (itself not emitted)

    Returns:
        Escaped simplified markup; identical input always gives identical output
    """
    output = []
    pending = list(reversed(element.contents))

    while pending:
        node = pending.pop()

        if isinstance(node, _Close):
            output.append(str(node))
        elif isinstance(node, PreformattedString):
            # comments, doctype, CDATA, processing instructions
            continue
        elif isinstance(node, NavigableString):
            output.append(escape(str(node)))
        elif isinstance(node, Tag):
            open_tag, close_tag = _classify(base_url, node)
            if open_tag is not None:
                output.append(open_tag)
            if close_tag is not None:
                pending.append(_Close(close_tag))
            pending.extend(reversed(node.contents))

    return "".join(output)
