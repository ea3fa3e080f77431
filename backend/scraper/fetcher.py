"""HTTP fetcher: one GET per page with a fixed identity header set."""

from __future__ import annotations

import httpx

from backend.config import settings
from backend.scraper.document import parse_document
from backend.scraper.models import FetchedPage, FetchError, FetchResult

_HTML_CONTENT_TYPES = ("text/html", "application/xhtml")


def default_headers() -> dict[str, str]:
    """Headers sent with every page request."""
    return {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }


def make_client() -> httpx.Client:
    """Return an ``httpx.Client`` configured for crawling.

    The client is shared by every fetch of one run; callers own it and must
    close it (use it as a context manager).
    """
    return httpx.Client(
        headers=default_headers(),
        timeout=settings.request_timeout,
        follow_redirects=True,
    )


def fetch_html(client: httpx.Client, url: str) -> tuple[str, str]:
    """GET *url* and return ``(final_url, body)`` after redirects.

    Raises:
        httpx.HTTPStatusError: If the server returns a non-2xx status code.
        httpx.HTTPError: On any transport failure or timeout.
        ValueError: If the response is not an HTML document.
    """
    response = client.get(url)
    response.raise_for_status()
    content_type = response.headers.get("content-type", "").lower()
    if content_type and not any(t in content_type for t in _HTML_CONTENT_TYPES):
        raise ValueError(f"unsupported content type {content_type!r}")
    return str(response.url), response.text


def fetch_page(client: httpx.Client, url: str) -> FetchResult:
    """Fetch and parse *url*.

    Never raises for page-level problems: a failed page comes back as a
    :class:`FetchError` so the walker can drop it and carry on.
    """
    try:
        final_url, html = fetch_html(client, url)
    except httpx.HTTPStatusError as exc:
        return FetchError(url=url, reason=f"HTTP {exc.response.status_code}")
    except (httpx.HTTPError, ValueError) as exc:
        return FetchError(url=url, reason=f"{type(exc).__name__}: {exc}")

    doc = parse_document(html, final_url)
    return FetchedPage(
        url=url,
        raw_markup=html,
        visible_text=doc.visible_text,
        structured_blocks=doc.structured_blocks,
        outbound_links=doc.outbound_links,
        image_sources=doc.image_sources,
    )
