"""Plain-text rendering of profile records for the terminal."""

from __future__ import annotations

from typing import List

from backend.profile.models import BusinessProfileRecord
from backend.scraper.models import CrawlResult

# (heading, attribute) in display order
_SECTIONS = [
    ("Website", "url"),
    ("Time Taken", "time_taken"),
    ("Business Description", "description"),
    ("Client Base", "client_base"),
    ("Owner Demographic", "owner_demographic"),
    ("Products & Services", "products_and_services"),
    ("Hours of Operation", "hours_of_operation"),
    ("Addresses", "addresses"),
    ("Phone Numbers", "phone_numbers"),
    ("Email Addresses", "email_addresses"),
    ("Social Media", "social_media_urls"),
    ("License Numbers", "license_numbers"),
    ("Methods of Payment", "methods_of_payment"),
    ("BBB Seal", "bbb_seal"),
    ("Service Area", "service_area"),
    ("Refund & Exchange Policy", "refund_and_exchange_policy"),
    ("Lead Form", "lead_form"),
]


def render_record(record: BusinessProfileRecord) -> str:
    """Render *record* as labelled blocks separated by blank lines.

    Multi-line values (hours, addresses, licenses) are indented under their
    heading so each block stays visually grouped.
    """
    blocks: List[str] = []
    for heading, attr in _SECTIONS:
        value = getattr(record, attr)
        body = "\n".join(f"  {line}" if line else "" for line in value.splitlines())
        blocks.append(f"{heading}:\n{body}")
    return "\n\n".join(blocks)


def render_crawl(crawl: CrawlResult) -> str:
    """One line per fetched page and per failure, then corpus totals."""
    lines = [f"  OK    {p.url}  ({len(p.visible_text)} chars)" for p in crawl.pages]
    lines += [f"  FAIL  {f.url}  ({f.reason})" for f in crawl.failures]
    lines.append("")
    lines.append(f"Pages        : {len(crawl.pages)}")
    lines.append(f"Failures     : {len(crawl.failures)}")
    lines.append(f"Corpus chars : {len(crawl.corpus)}")
    lines.append(f"Links        : {len(crawl.outbound_links)}")
    lines.append(f"JSON-LD      : {len(crawl.structured_blocks)} block(s)")
    return "\n".join(lines)
