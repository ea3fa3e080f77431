"""Scraper package: bounded site crawl, page fetch & document parsing."""

from backend.scraper.document import ParsedDocument, parse_document
from backend.scraper.fetcher import fetch_page
from backend.scraper.models import CrawlResult, CrawlTarget, FetchedPage, FetchError
from backend.scraper.walker import walk

__all__ = [
    "walk",
    "fetch_page",
    "parse_document",
    "ParsedDocument",
    "CrawlTarget",
    "CrawlResult",
    "FetchedPage",
    "FetchError",
]
