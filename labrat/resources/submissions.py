"""
New-submissions inbox (`/msg/submissions/...`) assembler.

The gallery grid only renders thumbnails. Titles, descriptions and artist
names for every figure come from an inline script:

    var descriptions = {"38351732": {"title": ..., "description": ...,
                        "username": ..., "lower": ..., "avatar_mtime": ...}, ...};

Figures and script entries are joined by submission id. A figure without
an entry is a contract violation; script entries without a figure are
ignored.
"""

import json
from html import escape
from typing import Optional

from bs4 import BeautifulSoup, Tag
from pydantic import ValidationError

from ..exceptions import (
    ContractViolation, IncorrectUrl, MalformedEmbeddedData, MissingAttribute,
    MissingElement, MissingSegment,
)
from ..keys import SubmissionsKey
from ..logger import get_module_logger
from ..primitives import attr, classes, join, select_all, select_first, unsigned
from ..schemas import (
    MiniUser, Rating, Submission, SubmissionInfo, SubmissionKind, Submissions,
)

logger = get_module_logger("resources.submissions")

PREV_SELECTOR = "a.button.prev[href^='/msg/submissions/'][href*='~']"
NEXT_SELECTOR = "a.button:not(.prev)[href^='/msg/submissions/'][href*='~']"
FIGURE_SELECTOR = "section[id^='gallery-'] > figure"

SCRIPT_MARKER = "var descriptions ="
AVATAR_URL = "//a.facdn.net/{}/{}.gif"

# figure class → rating / kind, checked in order
RATING_CLASSES = [
    ("r-adult", Rating.ADULT),
    ("r-mature", Rating.MATURE),
    ("r-general", Rating.GENERAL),
]
KIND_CLASSES = [
    ("t-image", SubmissionKind.IMAGE),
    ("t-text", SubmissionKind.TEXT),
    ("t-audio", SubmissionKind.AUDIO),
    ("t-music", SubmissionKind.AUDIO),
    ("t-flash", SubmissionKind.FLASH),
]


def _nav(url: str, doc: BeautifulSoup, css: str) -> Optional[SubmissionsKey]:
    try:
        link = select_first(doc, css)
    except MissingElement:
        return None

    href = join(url, attr(link, "href"))
    try:
        return SubmissionsKey.from_url(href)
    except MissingSegment:
        raise IncorrectUrl(href)


def _script_object(doc: BeautifulSoup) -> str:
    for script in select_all(doc, "script"):
        body = script.string or ""
        start = body.find(SCRIPT_MARKER)
        if start < 0:
            continue

        statement = body[start + len(SCRIPT_MARKER):].split(";\n", 1)[0].strip()
        if statement.endswith(";"):
            statement = statement[:-1].rstrip()
        if not statement.startswith("{") or not statement.endswith("}"):
            raise MalformedEmbeddedData(
                "descriptions is not an object literal",
                {"statement": statement[:80]},
            )
        return statement

    raise MissingElement("script")


def _descriptions(doc: BeautifulSoup) -> dict[int, SubmissionInfo]:
    raw = _script_object(doc)
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedEmbeddedData(f"descriptions is not valid JSON: {e}")
    if not isinstance(decoded, dict):
        raise MalformedEmbeddedData("descriptions is not a JSON object")

    descriptions = {}
    for sid_txt, entry in decoded.items():
        try:
            info = SubmissionInfo.model_validate(entry)
        except ValidationError as e:
            raise MalformedEmbeddedData(
                f"bad descriptions entry {sid_txt!r}",
                {"errors": e.errors(include_url=False)},
            )
        descriptions[unsigned(sid_txt)] = info
    return descriptions


def _classify(figure_classes: list[str], table):
    for cls, value in table:
        if cls in figure_classes:
            return value
    raise MissingAttribute("class")


def _figure(url: str, figure: Tag, descriptions: dict[int, SubmissionInfo]) -> Submission:
    figure_classes = classes(figure)
    if not figure_classes:
        raise MissingAttribute("class")
    rating = _classify(figure_classes, RATING_CLASSES)
    kind = _classify(figure_classes, KIND_CLASSES)

    id_attr = attr(figure, "id")
    if not id_attr.startswith("sid-"):
        raise MissingAttribute("id")
    view_id = unsigned(id_attr[len("sid-"):])

    preview = join(url, attr(select_first(figure, "img"), "src"))
    cdn, created = Submission.parse_preview_url(preview)

    info = descriptions.get(view_id)
    if info is None:
        raise ContractViolation(
            f"figure sid-{view_id} has no descriptions entry",
            {"submission_id": view_id},
        )

    avatar = join(url, AVATAR_URL.format(info.avatar_mtime, info.lower))

    return Submission(
        submission_id=view_id,
        created=created,
        cdn=cdn,
        rating=rating,
        kind=kind,
        title=info.title,
        description=escape(info.description),
        artist=MiniUser(avatar=avatar, name=info.username, slug=info.lower),
    )


def from_html(url: str, doc: BeautifulSoup) -> Submissions:
    """
    Build one inbox page.

    Raises:
        ContractViolation: a gallery figure has no script metadata
        MalformedEmbeddedData: the descriptions script cannot be decoded
        ParseError: any other missing or malformed mandatory element
    """
    prev = _nav(url, doc, PREV_SELECTOR)
    next_ = _nav(url, doc, NEXT_SELECTOR)

    descriptions = _descriptions(doc)
    items = [_figure(url, f, descriptions) for f in select_all(doc, FIGURE_SELECTOR)]

    unused = len(descriptions) - len(items)
    if unused > 0:
        logger.debug(f"{unused} descriptions entries have no gallery figure")

    logger.info(f"Extracted {len(items)} inbox submissions")
    return Submissions(items=items, next=next_, prev=prev)
