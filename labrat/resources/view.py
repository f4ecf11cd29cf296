"""
Submission page (`/view/<id>/`) assembler.

The page comes in four layouts (image, flash, story, music) that differ
only in how the full-size file and the thumbnail are exposed:

  1. `img#submissionImg` with data-fullview-src/data-preview-src
     (images, and the cover image of stories and music)
  2. the mature-content block page → ContentGated
  3. `object#flash_embed`; the thumbnail is not linked anywhere, so its
     URL is rebuilt from the embed path

Strategies are tried in that order; only "element not found" falls through.
"""

from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag

from ..comments import decode_thread
from ..exceptions import (
    ContentGated, ContractViolation, IncorrectUrl, MissingAttribute,
    MissingElement, MissingSegment,
)
from ..keys import FavKey
from ..logger import get_module_logger
from ..markup import simplify
from ..primitives import (
    attr, join, number, path_segments, select_all, select_first, text,
    timestamp, unsigned, user_slug,
)
from ..schemas import CommentRoot, MiniUser, Rating, Submission, SubmissionKind, View

logger = get_module_logger("resources.view")

GATED_SELECTOR = "#pageid-matureimage-error"
FLASH_PREVIEW = "//t.facdn.net/{}@200-{}.jpg"

# class fragment on #submission_page → kind, checked in order
KIND_CLASSES = [
    ("page-content-type-flash", SubmissionKind.FLASH),
    ("page-content-type-image", SubmissionKind.IMAGE),
    ("page-content-type-text", SubmissionKind.TEXT),
    ("page-content-type-music", SubmissionKind.AUDIO),
]


def _view_id(url: str) -> int:
    segments = path_segments(url)
    if len(segments) < 2 or segments[0] != "view":
        raise IncorrectUrl(url)
    return unsigned(segments[1])


def _image_urls(url: str, img: Tag) -> tuple[str, str]:
    fullview = join(url, attr(img, "data-fullview-src"))
    preview = join(url, attr(img, "data-preview-src"))
    return preview, fullview


def _flash_urls(url: str, view_id: int, doc: BeautifulSoup) -> tuple[str, str]:
    embed = select_first(doc, "object#flash_embed")
    fullview = join(url, attr(embed, "data"))

    # /art/<artist>/<created>/<file>.swf
    segments = urlsplit(fullview).path.split("/")
    if len(segments) < 4 or not segments[3]:
        raise IncorrectUrl(fullview)
    created = segments[3]

    preview = join(url, FLASH_PREVIEW.format(view_id, created))
    return preview, fullview


def _media_urls(url: str, view_id: int, doc: BeautifulSoup) -> tuple[str, str]:
    try:
        img = select_first(doc, "img#submissionImg")
    except MissingElement:
        pass
    else:
        return _image_urls(url, img)

    if doc.select_one(GATED_SELECTOR) is not None:
        logger.info(f"Submission {view_id} is behind the mature content filter")
        raise ContentGated()

    return _flash_urls(url, view_id, doc)


def _kind(doc: BeautifulSoup) -> SubmissionKind:
    page_class = attr(select_first(doc, "#submission_page"), "class")
    for fragment, kind in KIND_CLASSES:
        if fragment in page_class:
            return kind
    raise MissingAttribute("class")


def _fav_state(url: str, doc: BeautifulSoup):
    """(faved, fav_key); both None when the page has no fav controls."""
    fav = doc.select_one(".favorite-nav a[href^='/fav/']")
    unfav = doc.select_one(".favorite-nav a[href^='/unfav/']")

    if fav is not None and unfav is not None:
        raise ContractViolation("submission page has both fav and unfav links")
    if fav is None and unfav is None:
        return None, None

    faved = unfav is not None
    link = unfav if faved else fav
    href = join(url, attr(link, "href"))
    try:
        key = FavKey.from_url(href)
    except MissingSegment:
        raise IncorrectUrl(href)
    return faved, key


def from_html(url: str, doc: BeautifulSoup) -> View:
    """
    Build a View from a submission page.

    Raises:
        ContentGated: the page is the mature-content block page
        ContractViolation: both fav and unfav links are present
        ParseError: any other missing or malformed mandatory element
    """
    view_id = _view_id(url)
    logger.debug(f"Extracting submission {view_id}")

    preview, fullview = _media_urls(url, view_id, doc)
    cdn, created = Submission.parse_preview_url(preview)

    kind = _kind(doc)

    download = join(url, attr(select_first(doc, ".download a"), "href"))

    category = text(select_first(doc, ".submission-sidebar span.category-name"))
    type_ = text(select_first(doc, ".submission-sidebar span.type-name"))

    n_views = number(select_first(doc, ".stats-container .views .font-large"))
    n_comments = number(select_first(doc, ".stats-container .comments .font-large"))
    n_favorites = number(select_first(doc, ".stats-container .favorites .font-large"))

    rating = Rating.parse(text(select_first(doc, ".stats-container .rating-box")))

    posted = timestamp(select_first(doc, ".submission-id-container .popup_date"))

    title = text(select_first(doc, ".submission-id-container .submission-title h2 p"))

    description = simplify(url, select_first(doc, ".submission-description"))

    avatar_elem = select_first(doc, ".submission-id-avatar > a > img")
    avatar = join(url, attr(avatar_elem, "src"))

    artist_elem = select_first(doc, ".submission-id-sub-container > a[href^='/user/']")
    artist = MiniUser(
        avatar=avatar,
        name=text(artist_elem),
        slug=user_slug(attr(artist_elem, "href")),
    )

    tags = [text(t) for t in select_all(doc, ".submission-sidebar .tags")]

    comments = decode_thread(
        url, CommentRoot.VIEW, view_id, doc,
        "#comments-submission .comment_container",
    )

    faved, fav_key = _fav_state(url, doc)

    if len(comments) != n_comments:
        logger.warning(
            f"Submission {view_id} reports {n_comments} comments, found {len(comments)}"
        )

    logger.info(f"Extracted submission {view_id} ({kind.value}, {len(comments)} comments)")

    return View(
        submission=Submission(
            submission_id=view_id,
            created=created,
            cdn=cdn,
            rating=rating,
            kind=kind,
            title=title,
            description=description,
            artist=artist,
        ),
        fullview=fullview,
        download=download,
        category=category,
        type_=type_,
        tags=tags,
        n_views=n_views,
        n_comments=n_comments,
        n_favorites=n_favorites,
        posted=posted,
        comments=comments,
        faved=faved,
        fav_key=fav_key,
    )
