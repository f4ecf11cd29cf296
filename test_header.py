"""Tests for the logged-in header assembler (labrat.resources.header)."""

import pytest

from labrat.exceptions import IncorrectUrl, MissingElement
from labrat.resources import header

URL = "https://www.furaffinity.net/view/38351732/"

BAR = """
<nav id="ddmenu"><ul>
  <li class="message-bar-desktop">{badges}</li>
  <li><a href="{href}"><img class="loggedin_user_avatar" src="//a.facdn.net/1/me.gif" alt="Me"></a></li>
</ul></nav>
"""


def _bar(fragment, badges="", href="/user/me/"):
    links = "".join(f'<a class="notification-container" href="#">{b}</a>' for b in badges.split())
    return fragment(BAR.format(badges=links, href=href))


def test_header(sample_doc):
    result = header.from_html(URL, sample_doc("view_image.html"))

    assert result.me.name == "aFakeUser"
    assert result.me.slug == "afakeuser"
    assert result.me.avatar == "https://a.facdn.net/1424255659/afakeuser.gif"

    counts = result.notifications
    assert counts.submissions == 357
    assert counts.journals == 7577
    assert counts.trouble_tickets == 2
    assert counts.notes == 4
    assert counts.watches == 0
    assert counts.comments == 0
    assert counts.favorites == 0


def test_badges_are_summed_per_kind(fragment):
    result = header.from_html(URL, _bar(fragment, "3C 12F 1W 2C"))
    assert result.notifications.comments == 5
    assert result.notifications.favorites == 12
    assert result.notifications.watches == 1


def test_unknown_badges_are_ignored(fragment):
    result = header.from_html(URL, _bar(fragment, "5X S 7S"))
    assert result.notifications.submissions == 7


def test_logged_out_page(sample_doc):
    with pytest.raises(MissingElement):
        header.from_html(URL, sample_doc("view_story.html"))


def test_avatar_link_needs_trailing_slash(fragment):
    with pytest.raises(IncorrectUrl):
        header.from_html(URL, _bar(fragment, href="/user/me"))


def test_avatar_link_must_be_a_user_page(fragment):
    with pytest.raises(IncorrectUrl):
        header.from_html(URL, _bar(fragment, href="/view/1/"))
