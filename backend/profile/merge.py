"""Merge & normalise: fold extractor output into one profile record.

Structured-data values outrank pattern matches for the same field.  The
ranking is explicit: every value becomes a :class:`Candidate` tagged with
its :class:`Provenance` and discovery order, and :func:`prioritise` sorts
and deduplicates on that basis alone.
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Dict, Iterable, List, Optional

from backend.config import settings
from backend.extract.addresses import address_key, extract_addresses
from backend.extract.emails import extract_emails
from backend.extract.hours import resolve_hours
from backend.extract.lead_form import PageFetcher, detect_lead_form
from backend.extract.licenses import extract_licenses, format_licenses
from backend.extract.phones import extract_phones
from backend.extract.seal import detect_seal, seal_status
from backend.extract.social import extract_social
from backend.extract.structured import StructuredMetadata
from backend.profile.models import ABSENT, BusinessProfileRecord, join_lines
from backend.scraper.models import CrawlResult


class Provenance(IntEnum):
    """Lower values win."""

    STRUCTURED = 0
    PATTERN = 1


@dataclass(frozen=True)
class Candidate:
    value: str
    provenance: Provenance
    order: int


def tag(values: Iterable[str], provenance: Provenance, start: int = 0) -> List[Candidate]:
    return [Candidate(v, provenance, start + i) for i, v in enumerate(values)]


def prioritise(
    candidates: Iterable[Candidate],
    key: Callable[[str], str] = lambda v: v,
) -> List[str]:
    """Order by provenance then discovery order; keep the first of each *key*."""
    ranked = sorted(candidates, key=lambda c: (c.provenance, c.order))
    kept: List[str] = []
    seen: set[str] = set()
    for candidate in ranked:
        k = key(candidate.value)
        if k in seen:
            continue
        seen.add(k)
        kept.append(candidate.value)
    return kept


def _phone_key(value: str) -> str:
    return re.sub(r"\D", "", value)


# ---------------------------------------------------------------------------
# Per-field merges
# ---------------------------------------------------------------------------

def merge_phones(metadata: StructuredMetadata, corpus: str) -> List[str]:
    structured = [p for raw in metadata.telephones for p in extract_phones(raw)]
    return prioritise(
        tag(structured, Provenance.STRUCTURED) + tag(extract_phones(corpus), Provenance.PATTERN),
        key=_phone_key,
    )


def merge_addresses(metadata: StructuredMetadata, corpus: str) -> List[str]:
    structured = [a.format() for a in metadata.addresses]
    structured += [a for text in metadata.address_texts for a in extract_addresses(text)]
    return prioritise(
        tag(structured, Provenance.STRUCTURED) + tag(extract_addresses(corpus), Provenance.PATTERN),
        key=address_key,
    )


def _seal_fields(found: bool) -> Dict[str, str]:
    hint = "" if found else settings.seal_not_found_hint
    return {"bbb_seal": seal_status(found), "bbb_seal_hint": hint or ABSENT}


def _lead_form_fields(crawl: CrawlResult, fetch: Optional[PageFetcher]) -> Dict[str, str]:
    lead = detect_lead_form(crawl, fetch=fetch)
    if lead is None:
        return {}
    return {"lead_form": lead.format(), "lead_form_title": lead.title, "lead_form_url": lead.url}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def merge_profile(
    crawl: CrawlResult,
    metadata: StructuredMetadata,
    fetch: Optional[PageFetcher] = None,
) -> BusinessProfileRecord:
    """Run every extractor over *crawl* and build the profile record.

    The extractors share nothing mutable, so they run side by side on a
    thread pool; their outputs meet only here.  *fetch* lets the lead-form
    detector inspect call-to-action targets the crawl did not reach.
    """
    corpus = crawl.corpus
    links = crawl.outbound_links

    jobs: Dict[str, Callable[[], Any]] = {
        "phone_numbers": lambda: join_lines(merge_phones(metadata, corpus)),
        "addresses": lambda: join_lines(merge_addresses(metadata, corpus), "\n\n"),
        "email_addresses": lambda: join_lines(extract_emails(corpus, links)),
        "social_media_urls": lambda: join_lines(extract_social(links, metadata.related_profiles)),
        "hours_of_operation": lambda: resolve_hours(metadata.hours, corpus) or ABSENT,
        "license_numbers": lambda: format_licenses(extract_licenses(corpus)),
        "seal": lambda: _seal_fields(detect_seal(crawl.pages)),
        "lead_form": lambda: _lead_form_fields(crawl, fetch),
    }

    fields: Dict[str, str] = {"url": crawl.target.url}
    with ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="extract") as pool:
        future_to_name = {pool.submit(job): name for name, job in jobs.items()}
        for future in as_completed(future_to_name):
            name = future_to_name[future]
            value = future.result()
            if isinstance(value, dict):
                fields.update(value)
            else:
                fields[name] = value
            print(f"[EXTRACT] {name} done.")

    return BusinessProfileRecord().with_fields(**fields)
