"""Tests for labrat.comments: depth decoding and single-comment extraction."""

from datetime import datetime

import pytest

from labrat.comments import decode_comment, decode_depth, decode_thread
from labrat.exceptions import (
    IncorrectUrl, InvalidDepth, MissingAttribute, MissingElement,
)
from labrat.keys import CommentReplyKey
from labrat.schemas import CommentRoot

BASE = "https://www.furaffinity.net/view/38351732/"

COMMENT = """
<div class="comment_container" style="{style}">
    <a class="comment_anchor" id="cid:150154300"></a>
    <div class="avatar"><img class="comment_useravatar" src="//a2.facdn.net/1/someone.gif" alt="someone"></div>
    <div class="comment_username"><a href="/user/someone/"><h3>Someone</h3></a></div>
    <div class="comment-date"><span class="popup_date" title="Sep 23, 2020 04:10 PM">a month ago</span></div>
    {parent}
    <div class="comment_text">Hi <strong class="bbcode bbcode_b">there</strong></div>
</div>
"""


def _container(fragment, style="width:97%", parent='<a class="comment-parent" href="#cid:150154279">Parent</a>'):
    doc = fragment(COMMENT.format(style=style, parent=parent))
    return doc.select_one(".comment_container")


@pytest.mark.parametrize("style, depth", [
    ("width:100%", 0),
    ("width:97%", 1),
    ("width:94%", 2),
    ("width:98%", 0),
    ("width:40%", 20),
    ("width:1%", 33),
    ("width:0%", 33),
])
def test_decode_depth(style, depth):
    assert decode_depth(style) == depth


@pytest.mark.parametrize("style", [
    "width:%",          # too short
    "width:1000%",      # too long
    "width:97",         # no suffix
    "height:97%",       # wrong prefix
    "width:9a%",        # not a number
    "width:101%",       # wider than the page
    "width: 97%",
])
def test_decode_depth_rejects(style):
    with pytest.raises(InvalidDepth):
        decode_depth(style)


def test_decode_comment(fragment):
    node = decode_comment(BASE, CommentRoot.VIEW, 38351732, _container(fragment))

    assert node.comment_id == 150154300
    assert node.depth == 1
    assert node.root is CommentRoot.VIEW
    assert node.root_id == 38351732

    comment = node.comment
    assert comment.parent_id == 150154279
    assert comment.commenter.name == "Someone"
    assert comment.commenter.slug == "someone"
    assert comment.commenter.avatar == "https://a2.facdn.net/1/someone.gif"
    assert comment.posted == datetime(2020, 9, 23, 16, 10)
    assert comment.text == "Hi <strong>there</strong>"


def test_top_level_comment_has_no_parent(fragment):
    node = decode_comment(BASE, CommentRoot.VIEW, 1, _container(fragment, style="width:100%", parent=""))
    assert node.depth == 0
    assert node.comment.parent_id is None


def test_hidden_comment(fragment):
    doc = fragment(
        '<div class="comment_container" style="width:94%">'
        '<a class="comment_anchor" id="cid:42"></a>'
        '<div class="comment-deleted">Comment hidden by its owner</div>'
        "</div>"
    )
    node = decode_comment(BASE, CommentRoot.JOURNAL, 7, doc.select_one(".comment_container"))

    assert node.comment is None
    assert node.comment_id == 42
    assert node.depth == 2


def test_missing_style(fragment):
    doc = fragment('<div class="comment_container"><a class="comment_anchor" id="cid:1"></a></div>')
    with pytest.raises(MissingAttribute):
        decode_comment(BASE, CommentRoot.VIEW, 1, doc.select_one(".comment_container"))


def test_missing_anchor(fragment):
    doc = fragment('<div class="comment_container" style="width:100%"></div>')
    with pytest.raises(MissingElement):
        decode_comment(BASE, CommentRoot.VIEW, 1, doc.select_one(".comment_container"))


def test_malformed_parent_link(fragment):
    container = _container(fragment, parent='<a class="comment-parent" href="/view/1/">Parent</a>')
    with pytest.raises(IncorrectUrl):
        decode_comment(BASE, CommentRoot.VIEW, 1, container)


def test_reply_key(fragment):
    node = decode_comment(BASE, CommentRoot.JOURNAL, 9, _container(fragment))
    assert node.reply_key() == CommentReplyKey.journal_comment(150154300)


def test_decode_thread_keeps_document_order(fragment):
    doc = fragment(
        '<div id="thread">'
        + COMMENT.format(style="width:100%", parent="").replace("150154300", "1")
        + COMMENT.format(style="width:97%", parent='<a class="comment-parent" href="#cid:1">P</a>').replace("150154300", "2")
        + "</div>"
    )
    nodes = decode_thread(BASE, CommentRoot.VIEW, 5, doc, "#thread .comment_container")

    assert [n.comment_id for n in nodes] == [1, 2]
    assert [n.depth for n in nodes] == [0, 1]
    assert nodes[1].comment.parent_id == 1


def test_decode_thread_fails_on_first_bad_comment(fragment):
    doc = fragment(
        '<div id="thread">'
        + COMMENT.format(style="width:100%", parent="")
        + COMMENT.format(style="width:abc%", parent="")
        + "</div>"
    )
    with pytest.raises(InvalidDepth):
        decode_thread(BASE, CommentRoot.VIEW, 5, doc, "#thread .comment_container")
