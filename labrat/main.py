"""
Orchestrator for labrat.

Wires document parsing to the resource extraction engine: raw page bytes
or text go in together with the URL they were fetched from, a Response
(the page record plus the logged-in header, if any) comes out.

Fetching pages is the caller's job; nothing here performs I/O except
parse_file(), which reads a saved page from disk.
"""

from pathlib import Path
from typing import Optional, Union

from bs4 import BeautifulSoup

from .config import get_settings
from .exceptions import MissingElement
from .logger import get_module_logger, setup_logger
from .resources import PageType, from_html, header, page_type_for_url
from .schemas import Header, Response

logger = get_module_logger("main")


class LabratParser:
    """
    Parses saved or fetched pages into records.

    Stateless apart from its configuration, so one instance can be shared
    across threads.
    """

    def __init__(self, html_parser: Optional[str] = None, log_level: Union[int, str, None] = None):
        settings = get_settings()
        if log_level is not None:
            setup_logger(level=log_level)

        self.html_parser = html_parser or settings.html_parser

    def parse_document(self, markup: Union[str, bytes]) -> BeautifulSoup:
        """Parse page markup into a selector-queryable document."""
        return BeautifulSoup(markup, self.html_parser)

    def header(self, url: str, document: BeautifulSoup) -> Optional[Header]:
        """The logged-in header, or None for pages fetched without a session."""
        try:
            return header.from_html(url, document)
        except MissingElement as e:
            logger.debug(f"No logged-in header on {url}: {e.message}")
            return None

    def parse(
        self,
        markup: Union[str, bytes],
        url: str,
        page_type: Optional[PageType] = None
    ) -> Response:
        """
        Parse one page.

        Args:
            markup: Page HTML as fetched
            url: The URL the page was fetched from
            page_type: Page shape; guessed from `url` when omitted

        Returns:
            Response with the page record and the optional header
        """
        if page_type is None:
            page_type = page_type_for_url(url)
        page_type = PageType(page_type)

        logger.info(f"Parsing {page_type.value} page {url}")
        document = self.parse_document(markup)

        page = from_html(page_type, url, document)
        if page_type is PageType.HEADER:
            return Response(header=page, page=page)
        return Response(header=self.header(url, document), page=page)

    def parse_file(
        self,
        file_path: Union[str, Path],
        url: str,
        page_type: Optional[PageType] = None
    ) -> Response:
        """Parse a saved page; bytes are handed to BeautifulSoup for charset detection."""
        raw_bytes = Path(file_path).read_bytes()
        return self.parse(raw_bytes, url, page_type)


def parse_page(markup: Union[str, bytes], url: str, page_type: Optional[PageType] = None) -> Response:
    """Convenience function to parse one page with default settings."""
    return LabratParser().parse(markup, url, page_type)
