"""Shared pytest fixtures: saved pages under samples/ and a clean environment."""

from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from labrat.config import get_settings

SAMPLES = Path(__file__).parent / "samples"


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Every test sees the default site root and tree builder."""
    for var in ("LABRAT_SITE_ROOT", "LABRAT_HTML_PARSER", "LABRAT_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_html():
    """Raw text of a saved page."""
    def load(name: str) -> str:
        return (SAMPLES / name).read_text(encoding="utf-8")
    return load


@pytest.fixture
def sample_doc(sample_html):
    """A saved page parsed the way LabratParser parses it by default."""
    def load(name: str, parser: str = "html5lib") -> BeautifulSoup:
        return BeautifulSoup(sample_html(name), parser)
    return load


@pytest.fixture
def fragment():
    """Parse an inline HTML snippet."""
    def parse(markup: str) -> BeautifulSoup:
        return BeautifulSoup(markup, "html5lib")
    return parse
