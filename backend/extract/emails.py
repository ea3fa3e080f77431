"""Email-address extraction from page text and ``mailto:`` links."""

from __future__ import annotations

import html
import re
import urllib.parse
from typing import Iterable, List

_EMAIL_RE = re.compile(r"\b[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}\b")

_OBFUSCATED = [
    (re.compile(r"\s*\[\s*at\s*\]\s*", re.I), "@"),
    (re.compile(r"\s*\(\s*at\s*\)\s*", re.I), "@"),
    (re.compile(r"\s*\[\s*dot\s*\]\s*", re.I), "."),
    (re.compile(r"\s*\(\s*dot\s*\)\s*", re.I), "."),
]

# Vendor/placeholder domains that show up in site templates, never a business inbox.
# Matched as the whole domain or a parent of it, never as a substring.
_BLOCKLIST_DOMAINS = (
    "wixpress.com",
    "sentry.io",
    "domain.com",
    "godaddy.com",
)

_BAD_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".css", ".js")


def _deobfuscate(text: str) -> str:
    out = text
    for rx, repl in _OBFUSCATED:
        out = rx.sub(repl, out)
    return out


def _is_junk_email(e: str) -> bool:
    if not e or "@" not in e:
        return True
    if e.endswith(_BAD_SUFFIXES):
        return True
    domain = e.split("@", 1)[1]
    return any(domain == bad or domain.endswith("." + bad) for bad in _BLOCKLIST_DOMAINS)


def _clean_candidate(raw: str) -> str:
    s = urllib.parse.unquote(raw or "").strip()
    # strip obvious wrapping punctuation
    s = s.strip(" \t\r\n\"'<>[](){}.,;:")
    return s.lower()


def extract_emails(text: str, links: Iterable[str] = ()) -> List[str]:
    """Extract a de-duplicated list of emails from page text and ``mailto:`` links.

    - Unescapes HTML entities
    - Handles ``[at]`` / ``(dot)`` obfuscations
    - Filters known vendor/junk domains and image-looking matches
    - Keeps first-seen order
    """
    found: List[str] = []

    def _add(candidate: str) -> None:
        cand = _clean_candidate(candidate)
        if _EMAIL_RE.fullmatch(cand) and not _is_junk_email(cand) and cand not in found:
            found.append(cand)

    for m in _EMAIL_RE.findall(_deobfuscate(html.unescape(text or ""))):
        _add(m)

    # mailto: links sometimes carry several recipients and extra params
    for link in links:
        if link.lower().startswith("mailto:"):
            for recipient in link[len("mailto:"):].split("?", 1)[0].split(","):
                _add(recipient)

    return found
