"""Tests for the document fetcher, document model adapter and crawl models.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network calls
  are made during ``fetch_page`` tests.
- Responses are built with ``html=`` so they carry a ``text/html`` content
  type, the only kind the fetcher accepts.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from backend.errors import InvalidTargetError
from backend.scraper.document import parse_document
from backend.scraper.fetcher import fetch_page, make_client
from backend.scraper.models import (
    CrawlResult,
    CrawlTarget,
    FetchedPage,
    FetchError,
    normalize_url,
    origin_of,
)


# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

_PAGE_HTML = """\
<!DOCTYPE html>
<html>
<head>
  <title>Acme Plumbing</title>
  <style>body { color: red; }</style>
  <script>var tracking = "do not index";</script>
  <script type="application/ld+json">{"@type": "Plumber", "telephone": "617-555-0101"}</script>
</head>
<body>
  <nav><a href="/about">About</a> | <a href="contact#form">Contact</a></nav>
  <main>
    <h1>Acme   Plumbing</h1>
    <p>Serving Boston since 1998.</p>


    <p>Call us<br>today.</p>
    <img src="/img/logo.png" alt="logo">
    <noscript>Enable JavaScript</noscript>
    <svg><text>decorative</text></svg>
    <iframe src="https://maps.example.net/embed"></iframe>
    <a href="https://facebook.com/acme">Facebook</a>
  </main>
</body>
</html>
"""


def _page(url: str, text: str = "", links=None) -> FetchedPage:
    return FetchedPage(url=url, raw_markup="", visible_text=text, outbound_links=links or [])


# ---------------------------------------------------------------------------
# CrawlTarget validation
# ---------------------------------------------------------------------------

class TestCrawlTarget:
    def test_valid_url_is_normalised(self) -> None:
        target = CrawlTarget.parse("  https://example.com#top ")
        assert target.url == "https://example.com/"

    @pytest.mark.parametrize(
        "raw, message",
        [
            ("", "Please enter a website URL."),
            (None, "Please enter a website URL."),
            ("https://a.com https://b.com", "Enter a single URL (no spaces or commas)."),
            ("https://a.com,https://b.com", "Enter a single URL (no spaces or commas)."),
            ("example.com", "Please enter a valid URL."),
            ("ftp://example.com/file", "URL must start with http:// or https://"),
            ("https://example.com:notaport/", "Please enter a valid URL."),
        ],
    )
    def test_invalid_input_rejected(self, raw, message) -> None:
        with pytest.raises(InvalidTargetError) as excinfo:
            CrawlTarget.parse(raw)
        assert excinfo.value.message == message
        assert excinfo.value.status_code == 400

    def test_same_origin_requires_scheme_host_and_port(self) -> None:
        target = CrawlTarget.parse("https://example.com/")
        assert target.is_same_origin("https://example.com/about")
        assert target.is_same_origin("https://EXAMPLE.com:443/contact")
        assert not target.is_same_origin("http://example.com/about")
        assert not target.is_same_origin("https://www.example.com/about")
        assert not target.is_same_origin("https://example.com:8443/about")


class TestUrlHelpers:
    def test_origin_fills_default_port(self) -> None:
        assert origin_of("http://Example.com/x") == ("http", "example.com", 80)

    def test_normalize_strips_fragment(self) -> None:
        assert normalize_url("https://a.com/contact#form") == "https://a.com/contact"
        assert normalize_url("https://a.com") == "https://a.com/"
        assert normalize_url("https://a.com/p?q=1#x") == "https://a.com/p?q=1"


# ---------------------------------------------------------------------------
# parse_document
# ---------------------------------------------------------------------------

class TestParseDocument:
    def test_collects_structured_blocks(self) -> None:
        doc = parse_document(_PAGE_HTML, "https://acme.test/")
        assert len(doc.structured_blocks) == 1
        assert '"telephone": "617-555-0101"' in doc.structured_blocks[0]

    def test_non_content_removed_from_text(self) -> None:
        text = parse_document(_PAGE_HTML, "https://acme.test/").visible_text
        assert "Serving Boston since 1998." in text
        assert "do not index" not in text
        assert "color: red" not in text
        assert "Enable JavaScript" not in text
        assert "decorative" not in text
        assert "617-555-0101" not in text

    def test_whitespace_collapsed(self) -> None:
        text = parse_document(_PAGE_HTML, "https://acme.test/").visible_text
        assert "Acme Plumbing" in text
        assert "\n\n\n" not in text
        assert "|" not in text
        assert "Call us\ntoday." in text

    def test_links_resolved_and_unfiltered(self) -> None:
        doc = parse_document(_PAGE_HTML, "https://acme.test/services/")
        assert doc.outbound_links == [
            "https://acme.test/about",
            "https://acme.test/services/contact#form",
            "https://facebook.com/acme",
        ]

    def test_image_sources_resolved(self) -> None:
        doc = parse_document(_PAGE_HTML, "https://acme.test/")
        assert doc.image_sources == ["https://acme.test/img/logo.png"]

    def test_empty_markup(self) -> None:
        doc = parse_document("", "https://acme.test/")
        assert doc.visible_text == ""
        assert doc.outbound_links == []


# ---------------------------------------------------------------------------
# fetch_page
# ---------------------------------------------------------------------------

class TestFetchPage:
    def test_success_returns_fetched_page(self) -> None:
        with respx.mock:
            respx.get("https://acme.test/").mock(
                return_value=httpx.Response(200, html=_PAGE_HTML)
            )
            with make_client() as client:
                page = fetch_page(client, "https://acme.test/")

        assert isinstance(page, FetchedPage)
        assert page.url == "https://acme.test/"
        assert "Serving Boston" in page.visible_text
        assert "<title>Acme Plumbing</title>" in page.raw_markup

    def test_sends_identity_headers(self) -> None:
        with respx.mock:
            route = respx.get("https://acme.test/").mock(
                return_value=httpx.Response(200, html="<p>hi</p>")
            )
            with make_client() as client:
                fetch_page(client, "https://acme.test/")

        request = route.calls.last.request
        assert "BBBProfileBot" in request.headers["user-agent"]
        assert request.headers["accept-language"].startswith("en-US")

    def test_http_error_becomes_fetch_error(self) -> None:
        with respx.mock:
            respx.get("https://acme.test/missing").mock(
                return_value=httpx.Response(404, text="Not Found")
            )
            with make_client() as client:
                result = fetch_page(client, "https://acme.test/missing")

        assert result == FetchError(url="https://acme.test/missing", reason="HTTP 404")

    def test_transport_error_becomes_fetch_error(self) -> None:
        with respx.mock:
            respx.get("https://acme.test/").mock(side_effect=httpx.ConnectError("refused"))
            with make_client() as client:
                result = fetch_page(client, "https://acme.test/")

        assert isinstance(result, FetchError)
        assert "ConnectError" in result.reason

    def test_non_html_rejected(self) -> None:
        with respx.mock:
            respx.get("https://acme.test/logo.png").mock(
                return_value=httpx.Response(
                    200, content=b"\x89PNG", headers={"content-type": "image/png"}
                )
            )
            with make_client() as client:
                result = fetch_page(client, "https://acme.test/logo.png")

        assert isinstance(result, FetchError)
        assert "image/png" in result.reason

    def test_relative_links_resolved_against_final_url(self) -> None:
        with respx.mock:
            respx.get("https://acme.test/old").mock(
                return_value=httpx.Response(301, headers={"location": "https://acme.test/new/"})
            )
            respx.get("https://acme.test/new/").mock(
                return_value=httpx.Response(200, html='<a href="page">x</a>')
            )
            with make_client() as client:
                page = fetch_page(client, "https://acme.test/old")

        assert page.outbound_links == ["https://acme.test/new/page"]


# ---------------------------------------------------------------------------
# CrawlResult
# ---------------------------------------------------------------------------

class TestCrawlResult:
    def test_corpus_in_discovery_order(self) -> None:
        result = CrawlResult(
            target=CrawlTarget.parse("https://a.test/"),
            pages=[_page("https://a.test/", "first"), _page("https://a.test/b", ""),
                   _page("https://a.test/c", "third")],
        )
        assert result.corpus == "first\n\nthird"

    def test_outbound_links_deduplicated(self) -> None:
        result = CrawlResult(
            target=CrawlTarget.parse("https://a.test/"),
            pages=[
                _page("https://a.test/", links=["https://x.test/1", "https://x.test/2"]),
                _page("https://a.test/b", links=["https://x.test/2", "https://x.test/3"]),
            ],
        )
        assert result.outbound_links == ["https://x.test/1", "https://x.test/2", "https://x.test/3"]

    def test_page_lookup_ignores_fragment(self) -> None:
        page = _page("https://a.test/contact")
        result = CrawlResult(target=CrawlTarget.parse("https://a.test/"), pages=[page])
        assert result.page("https://a.test/contact#form") is page
        assert result.page("https://a.test/other") is None
