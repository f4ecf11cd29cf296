"""Tests for the orchestrator, settings, logging setup and the run_parser CLI."""

import json
import logging
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from labrat import (
    ContentGated, Header, IncorrectUrl, Journal, LabratParser, PageType,
    Submissions, View, parse_page, page_type_for_url,
)
from labrat.config import Settings, get_settings
from labrat.exceptions import InvalidDepth, LabratError, MissingElement
from labrat.logger import get_module_logger, setup_logger
from labrat.resources import ASSEMBLERS

SAMPLES = Path(__file__).parent / "samples"

SITE = "https://www.furaffinity.net/"


@pytest.fixture
def restore_logger():
    """Drop handlers that setup_logger() attached during the test."""
    logger = logging.getLogger("labrat")
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level)


# --- Page type dispatch ---

@pytest.mark.parametrize("path, page_type", [
    ("view/1/", PageType.VIEW),
    ("journal/2/", PageType.JOURNAL),
    ("msg/submissions/", PageType.SUBMISSIONS),
    ("msg/submissions/new~5@72/", PageType.SUBMISSIONS),
    ("msg/others/", PageType.OTHERS),
])
def test_page_type_for_url(path, page_type):
    assert page_type_for_url(SITE + path) is page_type


def test_page_type_for_unknown_url():
    with pytest.raises(IncorrectUrl):
        page_type_for_url(SITE + "gallery/someone/")


def test_every_page_type_has_an_assembler():
    assert set(ASSEMBLERS) == set(PageType)


# --- LabratParser ---

def test_parse_view_with_header(sample_html):
    response = LabratParser().parse(sample_html("view_image.html"), SITE + "view/38351732/")

    assert isinstance(response.page, View)
    assert isinstance(response.header, Header)
    assert response.header.me.slug == "afakeuser"
    assert response.page.submission.submission_id == 38351732


def test_parse_logged_out_page_has_no_header(sample_html):
    response = parse_page(sample_html("view_story.html"), SITE + "view/37432007/")
    assert response.header is None
    assert response.page.faved is None


def test_parse_file_reads_bytes():
    response = LabratParser().parse_file(SAMPLES / "journal.html", SITE + "journal/9876543/")
    assert isinstance(response.page, Journal)
    assert response.header.notifications.favorites == 12


def test_explicit_page_type(sample_html):
    response = LabratParser().parse(
        sample_html("msg_submissions_next.html"), SITE + "msg/submissions/", PageType.SUBMISSIONS
    )
    assert isinstance(response.page, Submissions)
    assert len(response.page.items) == 2


def test_header_page_type(sample_html):
    response = LabratParser().parse(sample_html("msg_others.html"), SITE + "msg/others/", "header")
    assert isinstance(response.page, Header)
    assert response.header == response.page
    assert response.page.notifications.watches == 3


def test_gated_page_propagates(sample_html):
    with pytest.raises(ContentGated):
        LabratParser().parse(sample_html("view_gated.html"), SITE + "view/1/")


def test_broken_header_is_not_folded(sample_html):
    markup = sample_html("view_image.html").replace('href="/user/afakeuser/"', 'href="/user/afakeuser"')
    with pytest.raises(IncorrectUrl):
        LabratParser().parse(markup, SITE + "view/38351732/")


def test_response_serializes_to_json(sample_html):
    response = LabratParser().parse(sample_html("view_flash.html"), SITE + "view/10801070/")
    data = response.model_dump(mode="json")

    assert data["page"]["submission"]["kind"] == "flash"
    assert data["page"]["submission"]["rating"] == "Adult"
    assert data["page"]["posted"] == "2013-06-09T04:33:00"
    assert data["page"]["comments"][1]["comment"] is None
    json.dumps(data)


def test_records_are_frozen(sample_html):
    response = parse_page(sample_html("view_image.html"), SITE + "view/38351732/")
    with pytest.raises(ValidationError):
        response.page.n_views = 0


def test_parser_uses_configured_tree_builder(monkeypatch):
    monkeypatch.setenv("LABRAT_HTML_PARSER", "lxml")
    get_settings.cache_clear()

    parser = LabratParser()
    assert parser.html_parser == "lxml"
    doc = parser.parse_document("<div id='x'><span>hi</span></div>")
    assert doc.select_one("#x span").get_text() == "hi"


# --- Settings ---

def test_default_settings():
    settings = get_settings()
    assert settings.site_root == "https://www.furaffinity.net/"
    assert settings.html_parser == "html5lib"
    assert settings.log_level == "INFO"


def test_site_root_gets_trailing_slash():
    assert Settings(site_root="https://example.com").site_root == "https://example.com/"


def test_unknown_tree_builder_is_rejected(monkeypatch):
    monkeypatch.setenv("LABRAT_HTML_PARSER", "regex")
    get_settings.cache_clear()
    with pytest.raises(ValidationError):
        get_settings()


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("LABRAT_SITE_ROOT", "https://mirror.example")
    monkeypatch.setenv("LABRAT_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("HTML_PARSER", "lxml")
    get_settings.cache_clear()

    settings = get_settings()
    assert settings.site_root == "https://mirror.example/"
    assert settings.log_level == "DEBUG"
    assert settings.html_parser == "html5lib"


def test_empty_environment_values_keep_defaults(monkeypatch):
    monkeypatch.setenv("LABRAT_HTML_PARSER", "")
    get_settings.cache_clear()
    assert get_settings().html_parser == "html5lib"


def test_settings_are_frozen():
    with pytest.raises(ValidationError):
        get_settings().log_level = "DEBUG"


# --- Logging ---

def test_setup_logger_is_idempotent(restore_logger):
    logger = setup_logger(level="DEBUG")
    count = len(logger.handlers)

    again = setup_logger(level="WARNING")
    assert again is logger
    assert len(again.handlers) == count
    assert again.level == logging.WARNING


def test_module_logger_is_a_child():
    assert get_module_logger("resources.view").name == "labrat.resources.view"


def test_count_mismatch_logs_warning(sample_html, caplog):
    from bs4 import BeautifulSoup
    from labrat.resources import journal

    markup = sample_html("journal.html").replace("<span>3</span> Comments", "<span>4</span> Comments")
    with caplog.at_level(logging.WARNING, logger="labrat"):
        journal.from_html(SITE + "journal/9876543/", BeautifulSoup(markup, "html5lib"))

    assert any("reports 4 comments, found 3" in r.getMessage() for r in caplog.records)


# --- Errors ---

def test_error_to_dict():
    error = MissingElement(".journal-content")
    assert error.to_dict() == {
        "error": "MissingElement",
        "message": "no element matches '.journal-content'",
        "details": {"selector": ".journal-content"},
    }
    assert isinstance(InvalidDepth("width:x%"), LabratError)


# --- CLI ---

def test_run_parser_cli(monkeypatch, tmp_path, restore_logger):
    import run_parser

    out = tmp_path / "out.json"
    monkeypatch.setattr(sys, "argv", [
        "run_parser.py",
        str(SAMPLES / "view_image.html"),
        str(SAMPLES / "view_gated.html"),
        "--url", SITE + "view/38351732/",
        "-o", str(out),
    ])

    assert run_parser.main() == 1

    results = json.loads(out.read_text())
    assert [r["status"] for r in results] == ["success", "error"]
    assert results[0]["page"]["submission"]["title"] == "F2U Goat Base"
    assert results[1]["error"] == "ContentGated"
