"""North-American phone number extraction."""

from __future__ import annotations

import re
from typing import List

_PHONE_RE = re.compile(
    r"(?<!\d)"
    r"(?:\+?1[\s.\-]?)?"
    r"\(?(\d{3})\)?[\s.\-]?"
    r"(\d{3})[\s.\-]?"
    r"(\d{4})"
    r"(?:\s*(?:ext\.?|x|extension)\s*(\d{1,6}))?"
    r"(?!\d)",
    re.IGNORECASE,
)
_FAX_RE = re.compile(r"\bfax\b", re.IGNORECASE)

# Characters before a match that are searched for the word "fax".
_FAX_WINDOW = 16


def is_valid_nanp(area: str, exchange: str) -> bool:
    """Area code and exchange must both start with 2-9."""
    return area[0] in "23456789" and exchange[0] in "23456789"


def format_phone(area: str, exchange: str, line: str, extension: str | None = None) -> str:
    formatted = f"({area}) {exchange}-{line}"
    if extension:
        formatted += f" ext. {extension}"
    return formatted


def extract_phones(text: str) -> List[str]:
    """Return every valid number in *text* as ``(AAA) EEE-LLLL[ ext. N]``.

    Numbers failing the numbering-plan check, and numbers labelled as fax
    lines, are skipped.  Output is deduplicated in first-seen order.
    """
    phones: List[str] = []
    for match in _PHONE_RE.finditer(text or ""):
        area, exchange, line, extension = match.groups()
        if not is_valid_nanp(area, exchange):
            continue
        window = text[max(0, match.start() - _FAX_WINDOW):match.start()]
        if _FAX_RE.search(window):
            continue
        formatted = format_phone(area, exchange, line, extension)
        if formatted not in phones:
            phones.append(formatted)
    return phones
