"""Data models for the crawl pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Union
from urllib.parse import urlsplit, urlunsplit

from backend.errors import InvalidTargetError

_DEFAULT_PORTS = {"http": 80, "https": 443}


def origin_of(url: str) -> tuple[str, str, int | None]:
    """Return the ``(scheme, host, port)`` triple used for same-origin checks.

    Default ports are made explicit so ``https://a.com`` and
    ``https://a.com:443`` compare equal.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    try:
        port = parts.port
    except ValueError:
        port = None
    return scheme, (parts.hostname or "").lower(), port or _DEFAULT_PORTS.get(scheme)


def normalize_url(url: str) -> str:
    """Drop the fragment and give an empty path its root ``/``."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", parts.query, ""))


@dataclass(frozen=True)
class CrawlTarget:
    """A validated root URL; the only input a profile run accepts."""

    url: str

    @classmethod
    def parse(cls, raw: str | None) -> "CrawlTarget":
        """Validate *raw* and return a target, or raise :class:`InvalidTargetError`."""
        value = (raw or "").strip()
        if not value:
            raise InvalidTargetError("Please enter a website URL.")
        if re.search(r"[\s,;]", value):
            raise InvalidTargetError("Enter a single URL (no spaces or commas).")
        parts = urlsplit(value)
        if not parts.scheme or not parts.netloc:
            raise InvalidTargetError("Please enter a valid URL.")
        if parts.scheme.lower() not in ("http", "https"):
            raise InvalidTargetError("URL must start with http:// or https://")
        try:
            parts.port
        except ValueError as exc:
            raise InvalidTargetError("Please enter a valid URL.") from exc
        if not parts.hostname:
            raise InvalidTargetError("Please enter a valid URL.")
        return cls(url=normalize_url(value))

    @property
    def origin(self) -> tuple[str, str, int | None]:
        return origin_of(self.url)

    def is_same_origin(self, url: str) -> bool:
        """Strict scheme + host + port equality; subdomains do not count."""
        return origin_of(url) == self.origin


@dataclass
class FetchedPage:
    """A successfully fetched and parsed page."""

    url: str
    raw_markup: str
    visible_text: str
    structured_blocks: List[str] = field(default_factory=list)
    outbound_links: List[str] = field(default_factory=list)
    image_sources: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FetchError:
    """Why a single page did not make it into the crawl."""

    url: str
    reason: str


FetchResult = Union[FetchedPage, FetchError]


@dataclass
class CrawlResult:
    """Everything one walker run produced, successes and failures alike."""

    target: CrawlTarget
    pages: List[FetchedPage] = field(default_factory=list)
    failures: List[FetchError] = field(default_factory=list)

    @property
    def corpus(self) -> str:
        """All visible text, in discovery order."""
        return "\n\n".join(p.visible_text for p in self.pages if p.visible_text)

    @property
    def outbound_links(self) -> List[str]:
        """Every anchor target across all pages, deduplicated, first-seen order."""
        seen: set[str] = set()
        links: List[str] = []
        for page in self.pages:
            for link in page.outbound_links:
                if link not in seen:
                    seen.add(link)
                    links.append(link)
        return links

    @property
    def structured_blocks(self) -> List[str]:
        return [block for p in self.pages for block in p.structured_blocks]

    @property
    def image_sources(self) -> List[str]:
        return [src for p in self.pages for src in p.image_sources]

    def page(self, url: str) -> FetchedPage | None:
        """Return the crawled page for *url* (fragment-insensitive), if any."""
        wanted = normalize_url(url)
        for p in self.pages:
            if normalize_url(p.url) == wanted:
                return p
        return None
