"""Lead-capture entry point detection.

A candidate is any anchor or button whose label, ``aria-label`` or
``title`` reads like a call to action (request a quote, book a table,
contact us, ...) and whose target is a same-origin page other than the
home page.  A candidate is confirmed only when its target page carries a
real form: a field named, labelled or placeholdered like a contact field,
or an iframe served by a known form host.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

from backend.config import settings
from backend.scraper.document import load_markup
from backend.scraper.models import CrawlResult, FetchError, FetchResult, normalize_url

# Called with a URL the crawl did not cover; returns the fetched page or an error.
PageFetcher = Callable[[str], FetchResult]

INTENT_RE = re.compile(
    r"\b(quote|estimate|consult|consultation|request|schedule|book|booking|reserve"
    r"|reservation|table|appointment|service|contact|order|order online)\b",
    re.IGNORECASE,
)
# Keywords that point at a lead form rather than a general contact page.
_STRONG_INTENT = {
    "quote", "estimate", "consult", "consultation", "book", "booking",
    "schedule", "reserve", "reservation", "appointment", "request",
}
FIELD_RE = re.compile(r"(name|email|phone|message|address|guests|date|time)", re.IGNORECASE)
FORM_HOST_RE = re.compile(
    r"form|typeform|jotform|hubspot|marketo|pardot|salesforce|gravityforms|wpforms",
    re.IGNORECASE,
)
_ONCLICK_URL_RE = re.compile(r"""(?:location(?:\.href)?|window\.open)\s*[=(]\s*['"]([^'"]+)['"]""")


@dataclass(frozen=True)
class LeadForm:
    title: str
    url: str

    def format(self) -> str:
        return f"Lead Form Title: {self.title or 'None'}\nLead Form URL: {self.url or 'None'}"


@dataclass(frozen=True)
class _Candidate:
    label: str
    target: str
    order: int

    @property
    def depth(self) -> int:
        return len([s for s in urlsplit(self.target).path.split("/") if s])

    @property
    def strength(self) -> int:
        words = {m.lower() for m in INTENT_RE.findall(self.label)}
        return 1 if words & _STRONG_INTENT else 0


# ---------------------------------------------------------------------------
# Candidate collection
# ---------------------------------------------------------------------------

def _label(el) -> str:
    parts = [el.get_text(" ", strip=True), el.get("aria-label") or "", el.get("title") or ""]
    label = " ".join(str(p).strip() for p in parts if p and str(p).strip())
    return re.sub(r"\s+", " ", label.replace("|", " ")).strip()


def _target(el, page_url: str) -> Optional[str]:
    href = str(el.get("href") or "").strip()
    if not href:
        onclick = str(el.get("onclick") or "")
        match = _ONCLICK_URL_RE.search(onclick)
        href = match.group(1) if match else ""
    if not href or href.startswith("#") or href.lower().startswith(("mailto:", "tel:", "javascript:")):
        return None
    return urljoin(page_url, href)


def find_candidates(crawl: CrawlResult) -> List[_Candidate]:
    """Every call-to-action link on every crawled page, in discovery order.

    One candidate per target: it keeps its first position but takes the
    strongest label seen for that target.
    """
    candidates: List[_Candidate] = []
    index: Dict[str, int] = {}
    for page in crawl.pages:
        soup = load_markup(page.raw_markup)
        for el in soup.find_all(["a", "button"]):
            label = _label(el)
            if not label or not INTENT_RE.search(label):
                continue
            target = _target(el, page.url)
            if target is None or not crawl.target.is_same_origin(target):
                continue
            target = normalize_url(target)
            if urlsplit(target).path in ("", "/"):
                continue
            candidate = _Candidate(label=label, target=target, order=len(candidates))
            if target in index:
                kept = candidates[index[target]]
                if candidate.strength > kept.strength:
                    candidates[index[target]] = replace(kept, label=label)
                continue
            index[target] = len(candidates)
            candidates.append(candidate)
    return candidates


def rank_candidates(candidates: List[_Candidate]) -> List[_Candidate]:
    """Deeper paths first, then keyword-bearing labels, then discovery order."""
    return sorted(candidates, key=lambda c: (-c.depth, -c.strength, c.order))


# ---------------------------------------------------------------------------
# Confirmation
# ---------------------------------------------------------------------------

def _field_matches(soup: BeautifulSoup, field) -> bool:
    texts = [str(field.get("name") or ""), str(field.get("placeholder") or "")]
    field_id = field.get("id")
    if field_id:
        label = soup.find("label", attrs={"for": field_id})
        if label is not None:
            texts.append(label.get_text(" ", strip=True))
    wrapping = field.find_parent("label")
    if wrapping is not None:
        texts.append(wrapping.get_text(" ", strip=True))
    return any(FIELD_RE.search(t) for t in texts if t)


def has_lead_form(markup: str) -> bool:
    """Whether *markup* contains a contact-style form or a hosted form iframe."""
    soup = load_markup(markup)
    for form in soup.find_all("form"):
        for field in form.find_all(["input", "textarea", "select"]):
            if str(field.get("type") or "").lower() in ("hidden", "submit", "button"):
                continue
            if _field_matches(soup, field):
                return True
    for frame in soup.find_all("iframe", src=True):
        if FORM_HOST_RE.search(str(frame.get("src"))):
            return True
    return False


def detect_lead_form(
    crawl: CrawlResult,
    fetch: Optional[PageFetcher] = None,
    max_probes: Optional[int] = None,
) -> Optional[LeadForm]:
    """Return the best confirmed lead-form entry point, or ``None``.

    Candidate targets already in the crawl are inspected directly.  Others
    are fetched through *fetch*, at most *max_probes* of them (default
    ``settings.lead_form_max_probes``); without *fetch* they are skipped.
    """
    max_probes = settings.lead_form_max_probes if max_probes is None else max_probes
    probes = 0
    verdicts: Dict[str, bool] = {}

    for candidate in rank_candidates(find_candidates(crawl)):
        if candidate.target not in verdicts:
            page = crawl.page(candidate.target)
            if page is not None:
                verdicts[candidate.target] = has_lead_form(page.raw_markup)
            elif fetch is not None and probes < max_probes:
                probes += 1
                outcome = fetch(candidate.target)
                verdicts[candidate.target] = (
                    not isinstance(outcome, FetchError) and has_lead_form(outcome.raw_markup)
                )
            else:
                continue
        if verdicts[candidate.target]:
            return LeadForm(title=candidate.label, url=candidate.target)
    return None
