"""BBB accreditation seal detection."""

from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import unquote, urlsplit

from backend.scraper.models import FetchedPage

SEAL_FOUND = (
    "FOUND    It appears the BBB Accredited Business Seal IS on this website "
    "or the website uses the text BBB Accredited."
)
SEAL_NOT_FOUND = "NOT FOUND    It appears the BBB Accredited Business Seal is NOT on this website."

_IMAGE_TOKENS = ("bbb", "accredited", "sscc-bbb-logos-footer")
_PHRASE_RE = re.compile(r"\bBBB\s+Accredited\b", re.IGNORECASE)
# "Site managed by BBB ..." footers mention accreditation without being a seal.
_DISCLAIMER_RE = re.compile(r"site\s+managed\s+by\s+[^\n.]*", re.IGNORECASE)


def image_has_seal(src: str) -> bool:
    """Whether an image's path (not its host) carries a seal marker token."""
    path = unquote(urlsplit(src).path).lower()
    return any(token in path for token in _IMAGE_TOKENS)


def text_has_seal(text: str) -> bool:
    return bool(_PHRASE_RE.search(_DISCLAIMER_RE.sub(" ", text or "")))


def detect_seal(pages: Iterable[FetchedPage]) -> bool:
    """``True`` if any page shows a seal image or the accreditation phrase."""
    for page in pages:
        if text_has_seal(page.visible_text):
            return True
        if any(image_has_seal(src) for src in page.image_sources):
            return True
    return False


def seal_status(found: bool) -> str:
    return SEAL_FOUND if found else SEAL_NOT_FOUND
