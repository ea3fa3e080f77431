"""Per-request orchestration: URL in, :class:`BusinessProfileRecord` out."""

from __future__ import annotations

import time
from typing import Optional

from backend.errors import InsufficientContentError
from backend.extract.structured import harvest
from backend.profile.merge import merge_profile
from backend.profile.models import BusinessProfileRecord, format_elapsed
from backend.profile.summarizer import summarize as summarize_record
from backend.profile.vocabulary import Vocabulary
from backend.scraper.fetcher import fetch_page, make_client
from backend.scraper.models import CrawlResult, CrawlTarget
from backend.scraper.walker import walk


def build_profile(
    url: str,
    summarize: bool = True,
    vocab: Optional[Vocabulary] = None,
) -> BusinessProfileRecord:
    """Crawl *url*, extract every field and (optionally) summarise.

    Args:
        url: Raw user input; validated before any network activity.
        summarize: Call the summarisation model for the judgment fields.
        vocab: Vocabulary override for the summariser.

    Returns:
        The finished, immutable profile record.

    Raises:
        InvalidTargetError: *url* is malformed or not http/https.
        InsufficientContentError: The crawl produced no text and no
            structured data at all.
        SummarizerError: The summarisation model is unavailable or failed.
    """
    started = time.monotonic()
    target = CrawlTarget.parse(url)
    print(f"[PROFILE] Building profile for {target.url}")

    crawl = walk(target)
    record = profile_from_crawl(crawl)
    if summarize:
        summary = summarize_record(record, crawl.corpus, vocab)
        record = summary.apply(record)

    elapsed = format_elapsed(time.monotonic() - started)
    print(f"[PROFILE] Finished in {elapsed}.")
    return record.with_fields(time_taken=elapsed)


def profile_from_crawl(crawl: CrawlResult) -> BusinessProfileRecord:
    """Harvest structured data and run the extractors over a finished crawl."""
    metadata = harvest(crawl.structured_blocks)
    if not crawl.corpus and metadata.is_empty:
        raise InsufficientContentError()

    with make_client() as client:
        return merge_profile(crawl, metadata, fetch=lambda u: fetch_page(client, u))
