from __future__ import annotations

from unittest.mock import patch

import pytest
from bs4.builder import ParserRejectedMarkup

from app.core.errors import ParseError
from app.models.metadata.document import FetchTarget
from app.services.metadata.extractor import extract_metadata, make_absolute


def _page(head: str = "", body: str = "") -> str:
    return f"<!DOCTYPE html><html><head>{head}</head><body>{body}</body></html>"


# ---------------------------------------------------------------------------
# name
# ---------------------------------------------------------------------------


class TestName:
    def test_og_title_wins_over_title_tag(self, target):
        html = _page(
            '<meta property="og:title" content="OG Name">'
            '<meta name="twitter:title" content="Twitter Name">'
            "<title>Title Tag</title>"
        )
        assert extract_metadata(html, target).name == "OG Name"

    def test_twitter_title_is_second(self, target):
        html = _page('<meta name="twitter:title" content="Twitter Name"><title>Title Tag</title>')
        assert extract_metadata(html, target).name == "Twitter Name"

    def test_title_tag_text_is_trimmed(self, target):
        html = _page("<title>\n   Title Tag  \n</title>")
        assert extract_metadata(html, target).name == "Title Tag"

    def test_falls_back_to_host_before_first_dot(self, target):
        assert extract_metadata(_page(), target).name == "example"

    def test_host_fallback_uses_hostname_of_full_url(self):
        target = FetchTarget.from_input("https://tools.example.com/page")
        assert extract_metadata(_page(), target).name == "tools"

    def test_blank_og_title_falls_through(self, target):
        html = _page('<meta property="og:title" content="   "><title>Title Tag</title>')
        assert extract_metadata(html, target).name == "Title Tag"


# ---------------------------------------------------------------------------
# description
# ---------------------------------------------------------------------------


class TestDescription:
    def test_order(self, target):
        html = _page(
            '<meta name="twitter:description" content="tw">'
            '<meta name="description" content="plain">'
            '<meta property="og:description" content="og">'
        )
        assert extract_metadata(html, target).description == "og"

    def test_plain_description_before_twitter(self, target):
        html = _page(
            '<meta name="twitter:description" content="tw">'
            '<meta name="description" content="  plain  ">'
        )
        assert extract_metadata(html, target).description == "plain"

    def test_empty_when_missing(self, target):
        assert extract_metadata(_page(), target).description == ""


# ---------------------------------------------------------------------------
# logo
# ---------------------------------------------------------------------------


class TestLogo:
    def test_default_favicon(self, target):
        assert extract_metadata(_page(), target).logo == "https://example.com/favicon.ico"

    def test_og_image_first(self, target):
        html = _page(
            '<link rel="icon" href="/icon.png">'
            '<meta property="og:image" content="https://cdn.example.com/og.png">'
        )
        assert extract_metadata(html, target).logo == "https://cdn.example.com/og.png"

    def test_relative_icon_is_absolutized(self, target):
        html = _page('<link rel="icon" href="/favicon.png">')
        assert extract_metadata(html, target).logo == "https://example.com/favicon.png"

    def test_shortcut_icon(self, target):
        html = _page('<link rel="shortcut icon" href="//cdn.example.com/x.ico">')
        assert extract_metadata(html, target).logo == "https://cdn.example.com/x.ico"

    def test_twitter_image_before_icon(self, target):
        html = _page(
            '<link rel="icon" href="/icon.png">'
            '<meta name="twitter:image" content="/tw.png">'
        )
        assert extract_metadata(html, target).logo == "https://example.com/tw.png"


# ---------------------------------------------------------------------------
# video
# ---------------------------------------------------------------------------


class TestVideo:
    def test_og_video(self, target):
        html = _page('<meta property="og:video" content="https://v.example.com/a.mp4">')
        assert extract_metadata(html, target).video == "https://v.example.com/a.mp4"

    def test_og_video_url(self, target):
        html = _page('<meta property="og:video:url" content="/b.mp4">')
        assert extract_metadata(html, target).video == "https://example.com/b.mp4"

    def test_first_video_source(self, target):
        html = _page(
            body='<video><source src="media/first.webm"><source src="media/second.mp4"></video>'
        )
        assert extract_metadata(html, target).video == "https://example.com/media/first.webm"

    def test_empty_when_missing(self, target):
        assert extract_metadata(_page(), target).video == ""


# ---------------------------------------------------------------------------
# images
# ---------------------------------------------------------------------------


class TestImages:
    def test_dedup_preserves_document_order(self, target):
        html = _page(body='<img src="/a.png"><img src="/b.png"><img src="/a.png">')
        assert extract_metadata(html, target).images == [
            "https://example.com/a.png",
            "https://example.com/b.png",
        ]

    def test_dedup_compares_absolute_urls(self, target):
        html = _page(
            body='<img src="/a.png"><img src="https://example.com/a.png"><img src="//example.com/a.png">'
        )
        assert extract_metadata(html, target).images == ["https://example.com/a.png"]

    def test_dedup_compares_normalized_urls(self, target):
        html = _page(body='<img src="/a b.png"><img src="/a%20b.png">')
        assert extract_metadata(html, target).images == ["https://example.com/a%20b.png"]

    def test_unusable_url_is_skipped(self, target):
        html = _page(body='<img src="https://example.com:abc/x.png"><img src="/ok.png">')
        assert extract_metadata(html, target).images == ["https://example.com/ok.png"]

    def test_img_without_src_is_skipped(self, target):
        html = _page(body='<img alt="no source"><img src="">')
        assert extract_metadata(html, target).images == []


# ---------------------------------------------------------------------------
# URL resolution and document handling
# ---------------------------------------------------------------------------


class TestMakeAbsolute:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("", ""),
            ("/favicon.png", "https://example.com/favicon.png"),
            ("//cdn.example.com/x.png", "https://cdn.example.com/x.png"),
            ("https://other.com/y.png", "https://other.com/y.png"),
            ("HTTP://other.com/y.png", "http://other.com/y.png"),
        ],
    )
    def test_against_site_root(self, value, expected):
        assert make_absolute(value, "https://example.com/") == expected

    def test_dot_segments_and_query(self):
        base = "https://example.com/docs/guide/page.html?ref=1#top"
        assert make_absolute("../img/logo.png?v=2", base) == "https://example.com/docs/img/logo.png?v=2"


class TestDocument:
    def test_non_html_body_yields_defaults(self, target):
        metadata = extract_metadata('{"not": "html"}', target)
        assert metadata.name == "example"
        assert metadata.logo == "https://example.com/favicon.ico"
        assert metadata.images == []

    def test_malformed_markup_degrades_gracefully(self, target):
        html = '<html><head><title>Broken<meta property="og:image" content="/x.png"<body><img src="/a.png"'
        metadata = extract_metadata(html, target)
        assert metadata.name

    def test_relative_urls_resolve_against_fetch_url(self):
        target = FetchTarget.from_input("https://example.com/tools/item/")
        html = _page(body='<img src="shot.png">')
        assert extract_metadata(html, target).images == ["https://example.com/tools/item/shot.png"]

    def test_idempotent(self, target):
        html = _page(
            '<meta property="og:title" content="Tool"><link rel="icon" href="/i.png">',
            '<img src="/a.png"><video><source src="/v.mp4"></video>',
        )
        first = extract_metadata(html, target)
        second = extract_metadata(html, target)
        assert first.model_dump_json() == second.model_dump_json()

    def test_parser_rejection_raises_parse_error(self, target):
        with patch(
            "app.services.metadata.extractor.BeautifulSoup",
            side_effect=ParserRejectedMarkup("bad bytes"),
        ):
            with pytest.raises(ParseError, match="Could not parse HTML"):
                extract_metadata("<html>", target)
