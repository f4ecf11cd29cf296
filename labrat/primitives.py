"""
Primitive extractors.

Small selector-based getters shared by every assembler. Each one either
returns a value or raises a specific ParseError subclass; none of them
return None for "not there", so optional lookups are written at the call
site as `except MissingElement`.
"""

import re
from datetime import datetime
from typing import Union
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, Tag

from .exceptions import (
    MissingElement, MissingAttribute, MalformedUrl, IncorrectUrl,
    InvalidInteger, InvalidDate,
)

Node = Union[BeautifulSoup, Tag]

# e.g. "Sep 23, 2020 03:52 PM"; %d also accepts "Sep 3" and "Sep  3"
DATE_FORMAT = "%b %d, %Y %I:%M %p"

_DIGITS = re.compile(r"[0-9]+")
_U64_MAX = 2 ** 64 - 1
_U64_DIGITS = len(str(_U64_MAX))


def select_first(root: Node, css: str) -> Tag:
    elem = root.select_one(css)
    if elem is None:
        raise MissingElement(css)
    return elem


def select_all(root: Node, css: str) -> list[Tag]:
    return list(root.select(css))


def attr(elem: Tag, name: str) -> str:
    """Attribute value; multi-valued attributes come back space-joined."""
    value = elem.get(name)
    if value is None:
        raise MissingAttribute(name)
    if isinstance(value, list):
        return " ".join(value)
    return value


def classes(elem: Tag) -> list[str]:
    value = elem.get("class") or []
    if isinstance(value, str):
        return value.split()
    return list(value)


def text(elem: Tag) -> str:
    """Descendant text, each piece trimmed, blanks dropped, space-joined."""
    return " ".join(elem.stripped_strings)


def unsigned(txt: str) -> int:
    # 2**64 - 1 has 20 digits
    if len(txt) > _U64_DIGITS or not _DIGITS.fullmatch(txt):
        raise InvalidInteger(txt)
    value = int(txt)
    if value > _U64_MAX:
        raise InvalidInteger(txt)
    return value


def number(elem: Tag) -> int:
    return unsigned(text(elem))


def timestamp(elem: Tag) -> datetime:
    """
    Parse a `.popup_date` style element.

    The site puts the absolute date in `title` and a relative one ("3 days
    ago") in the text, but swaps them depending on the user's settings,
    so both are tried.
    """
    candidates = []
    title = elem.get("title")
    if title:
        candidates.append(title.strip())
    candidates.append(text(elem))

    for candidate in candidates:
        try:
            return datetime.strptime(candidate, DATE_FORMAT)
        except ValueError:
            continue

    raise InvalidDate(candidates[-1])


def join(base: str, href: str) -> str:
    """Resolve href against base, requiring an absolute http(s) result."""
    try:
        url = urljoin(base, href.strip())
        parts = urlsplit(url)
    except ValueError:
        raise MalformedUrl(href)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise MalformedUrl(href)
    return url


def path_segments(url: str) -> list[str]:
    """`https://host/view/1/` → ["view", "1", ""]"""
    try:
        path = urlsplit(url).path
    except ValueError:
        raise MalformedUrl(url)
    if not path.startswith("/"):
        return []
    return path[1:].split("/")


def user_slug(href: str) -> str:
    """`/user/<slug>/` → `<slug>`"""
    if not href.startswith("/user/"):
        raise IncorrectUrl(href)
    slug = href[len("/user/"):]
    if slug.endswith("/"):
        slug = slug[:-1]
    if not slug or "/" in slug:
        raise IncorrectUrl(href)
    return slug
