"""Postal-address extraction from free page text.

Extraction runs in two stages:

1. ``normalize_address_text`` repairs the usual markup damage: a house
   number or "Suite" left on its own line, a comma-terminated line, and
   street-type words rendered letter by letter ("S t r e e t").
2. ``_ADDRESS_RE`` requires every component of a US street address:
   house number, one to five street-name words, a street-type token, an
   optional unit, a city, a two-letter state code and a ZIP code.

Anything short of a full match is dropped; there are no partial guesses.
Each address comes out as a three-line block::

    10 Main St, Suite 200
    Boston, MA 02108
    USA
"""

from __future__ import annotations

import re
from typing import List, Optional

# Street-type token -> canonical abbreviation (used for dedupe keys)
STREET_TYPES = {
    "street": "st", "st": "st",
    "avenue": "ave", "ave": "ave",
    "road": "rd", "rd": "rd",
    "boulevard": "blvd", "blvd": "blvd",
    "drive": "dr", "dr": "dr",
    "lane": "ln", "ln": "ln",
    "court": "ct", "ct": "ct",
    "place": "pl", "pl": "pl",
    "parkway": "pkwy", "pkwy": "pkwy",
    "highway": "hwy", "hwy": "hwy",
    "way": "way",
    "terrace": "ter", "terr": "ter",
    "circle": "cir", "cir": "cir",
    "pike": "pike",
    "square": "sq", "sq": "sq",
    "trail": "trl", "trl": "trl",
    "plaza": "plz", "plz": "plz",
}

_UNIT_WORDS = {"suite": "ste", "ste": "ste", "unit": "ste", "apt": "ste", "apartment": "ste"}

# Directional -> abbreviation (used for dedupe keys)
_DIRECTIONS = {
    "north": "n", "south": "s", "east": "e", "west": "w",
    "northeast": "ne", "northwest": "nw", "southeast": "se", "southwest": "sw",
}

US_STATES = frozenset(
    "AL AK AZ AR CA CO CT DE DC FL GA HI ID IL IN IA KS KY LA ME MD MA MI MN MS "
    "MO MT NE NV NH NJ NM NY NC ND OH OK OR PA RI SC SD TN TX UT VT VA WA WV WI "
    "WY PR VI GU AS MP".split()
)

_US_COUNTRY_NAMES = {"us", "usa", "u.s.", "u.s.a.", "united states", "united states of america"}

_NAV_WORDS_RE = re.compile(
    r"\b(Home|About|Services|Contact|Reviews|Specials|Privacy|Terms|COVID|Update"
    r"|Name|Email|Phone|Menu|Cookie|Policy|Copyright)\b",
    re.IGNORECASE,
)
_PO_BOX_RE = re.compile(r"\b(?:p\.?\s*o\.?\s*box|post\s+office\s+box)\b", re.IGNORECASE)

_TYPES_ALT = "|".join(sorted(STREET_TYPES, key=len, reverse=True))
_WORD = r"(?=[A-Za-z0-9.'\-]*[A-Za-z])[A-Za-z0-9][A-Za-z0-9.'\-]*"

_ADDRESS_RE = re.compile(
    r"(?<![\w#\-])"
    r"(?P<number>\d{1,6})[ \t]+"
    rf"(?P<name>(?:{_WORD}[ \t]+){{1,5}}?)"
    rf"(?P<type>(?i:{_TYPES_ALT}))\b\.?"
    # Post-directional ("Main St NW"), only when a comma, line break or unit follows
    r"(?P<dir>[ \t]+(?i:NE|NW|SE|SW|N|S|E|W|North|South|East|West)\b\.?"
    r"(?=[ \t]*(?:[,\n#]|(?i:suite|ste|unit|apt|apartment)\b)))?"
    r"(?P<unit>[ \t]*,?[ \t]*(?:(?i:suite|ste|unit|apt|apartment)\.?|#)[ \t]*#?[A-Za-z0-9\-]+)?"
    r"(?:[ \t]*,[ \t]*\n?[ \t]*|[ \t]*\n[ \t]*|[ \t]+)"
    r"(?P<city>[A-Za-z][A-Za-z.'\-]*(?:[ \t]+[A-Za-z][A-Za-z.'\-]*){0,3}?)"
    r"[ \t]*,?[ \t]+"
    r"(?P<region>[A-Z]{2})"
    r",?[ \t]+"
    r"(?P<postal>\d{5}(?:-\d{4})?)(?![\d\-])"
)

_SPACED_TYPE_RES = [
    (re.compile(r"\b" + " ".join(word) + r"\b", re.IGNORECASE), word.capitalize())
    for word in STREET_TYPES
    if len(word) >= 4
]


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def title_case_city(city: str) -> str:
    """``"WINSTON-SALEM"`` -> ``"Winston-Salem"``."""
    cleaned = re.sub(r"\s+", " ", city).strip().lower()
    return re.sub(r"[a-z]+('[a-z]+)?", lambda m: m.group(0).capitalize(), cleaned)


def _country_line(country: Optional[str]) -> str:
    if not country or country.strip().lower() in _US_COUNTRY_NAMES:
        return "USA"
    return country.strip()


def format_address(
    street: str,
    city: str,
    region: str,
    postal_code: str,
    country: Optional[str] = None,
) -> str:
    """Three-line block: street (+unit), ``City, ST ZIP``, country."""
    street_line = re.sub(r"\s+", " ", street).strip().strip(",")
    return (
        f"{street_line}\n"
        f"{title_case_city(city)}, {region.strip().upper()} {postal_code.strip()}\n"
        f"{_country_line(country)}"
    )


def address_key(block: str) -> str:
    """Comparison key that ignores case, punctuation and abbreviation choice."""
    tokens = re.findall(r"[a-z0-9]+", block.lower())
    return " ".join(
        _UNIT_WORDS.get(t) or _DIRECTIONS.get(t) or STREET_TYPES.get(t, t) for t in tokens
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def normalize_address_text(text: str) -> str:
    """Undo line breaks and letter spacing that split an address apart."""
    out = text or ""
    out = re.sub(r"(\d{1,6})[ \t]*\n\s*([A-Za-z])", r"\1 \2", out)
    out = re.sub(r"\b(Suite|Ste|Unit|Apt|#)[ \t]*\n\s*", r"\1 ", out, flags=re.IGNORECASE)
    out = re.sub(r",[ \t]*\n\s*", ", ", out)
    out = out.replace("|", " ")
    for rx, word in _SPACED_TYPE_RES:
        out = rx.sub(word, out)
    return out


def extract_addresses(text: str) -> List[str]:
    """Return every complete US street address in *text* as a 3-line block."""
    normalized = normalize_address_text(text)
    blocks: List[str] = []
    seen: set[str] = set()

    for match in _ADDRESS_RE.finditer(normalized):
        context = normalized[max(0, match.start() - 16):match.end()]
        if _PO_BOX_RE.search(context) or "@" in match.group(0):
            continue
        if match.group("region") not in US_STATES:
            continue

        name = re.sub(r"\s+", " ", match.group("name")).strip()
        city = match.group("city")
        if _NAV_WORDS_RE.search(name) or _NAV_WORDS_RE.search(city):
            continue
        if len(re.findall(r"[A-Za-z]", name)) < 2:
            continue

        street = f"{match.group('number')} {name} {match.group('type')}"
        if match.group("dir"):
            street += " " + match.group("dir").strip()
        unit = match.group("unit")
        if unit:
            street += ", " + re.sub(r"^[\s,]+", "", unit)

        block = format_address(street, city, match.group("region"), match.group("postal"))
        key = address_key(block)
        if key not in seen:
            seen.add(key)
            blocks.append(block)

    return blocks
