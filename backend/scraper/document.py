"""Document model adapter: turns raw markup into text, links and JSON-LD blocks."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List
from urllib.parse import urljoin

from bs4 import BeautifulSoup


# ---------------------------------------------------------------------------
# Tag tables
# ---------------------------------------------------------------------------

_LD_JSON_TYPE = re.compile(r"application/ld\+json", re.IGNORECASE)

# Never part of the visible text.  JSON-LD scripts are collected before this
# strip runs, so removing every <script> here is safe.
_NON_CONTENT_TAGS = [
    "script", "style", "noscript", "svg", "iframe", "template",
    "object", "embed", "video", "audio", "canvas",
]

# Elements that start a new line in rendered output.
_BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3",
    "h4", "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre",
    "section", "table", "tr", "ul",
]


@dataclass
class ParsedDocument:
    """Everything the crawler needs from one page of markup."""

    visible_text: str
    outbound_links: List[str] = field(default_factory=list)
    structured_blocks: List[str] = field(default_factory=list)
    image_sources: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _normalize_whitespace(text: str) -> str:
    """Collapse runs of spaces and keep at most one blank line between blocks."""
    text = text.replace("\r", "").replace("\xa0", " ").replace("|", " ")
    text = re.sub(r"[ \t\f\v]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _visible_text(soup: BeautifulSoup) -> str:
    for tag in soup(_NON_CONTENT_TAGS):
        tag.decompose()

    container = soup.body or soup
    for br in container.find_all("br"):
        br.replace_with("\n")
    for tag in container.find_all(_BLOCK_TAGS):
        if tag.parent is not None:
            tag.insert_before("\n")
        tag.append("\n")
    # Table cells sit side by side: keep a row on one line.
    for cell in container.find_all(["td", "th"]):
        cell.append(" ")

    return _normalize_whitespace(container.get_text())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_markup(html: str) -> BeautifulSoup:
    """Parse *html* with the same parser the rest of the pipeline uses."""
    return BeautifulSoup(html or "", "html.parser")


def resolve_links(soup: BeautifulSoup, base_url: str) -> List[str]:
    """Absolute URL of every ``<a href>``, in document order, unfiltered."""
    links: List[str] = []
    for anchor in soup.find_all("a", href=True):
        href = str(anchor.get("href") or "").strip()
        if not href:
            continue
        links.append(urljoin(base_url, href))
    return links


def parse_document(html: str, base_url: str) -> ParsedDocument:
    """Parse *html* fetched from *base_url*.

    Links are resolved against *base_url* but not filtered: origin checks
    belong to the walker and platform checks to the social extractor.
    """
    soup = load_markup(html)

    structured_blocks = [
        script.get_text()
        for script in soup.find_all("script", attrs={"type": _LD_JSON_TYPE})
        if script.get_text().strip()
    ]
    links = resolve_links(soup, base_url)
    images = [
        urljoin(base_url, str(img.get("src")).strip())
        for img in soup.find_all("img", src=True)
        if str(img.get("src")).strip()
    ]

    return ParsedDocument(
        visible_text=_visible_text(soup),
        outbound_links=links,
        structured_blocks=structured_blocks,
        image_sources=images,
    )
