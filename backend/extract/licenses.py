"""License-number extraction and the labelled five-line license block."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

ABSENT = "None"

LICENSE_LABELS = (
    "License Number",
    "Issuing Authority",
    "License Type",
    "Status",
    "Expiration Date",
)

_LICENSE_RE = re.compile(
    r"\b(?:(?P<kind>[A-Z][A-Za-z]+(?:\s+[A-Z][A-Za-z]+){0,2})\s+)?"
    r"(?:License|Licence|Lic\.?)\s*"
    r"(?:#|No\.?|Number|Num\.?)?\s*:?\s*#?\s*"
    r"(?P<number>[A-Z0-9][A-Z0-9\-]{2,19})\b",
    re.IGNORECASE,
)
_STOP_KINDS = {"our", "the", "a", "your", "state", "with", "and", "fully", "is"}


@dataclass(frozen=True)
class License:
    number: str
    authority: Optional[str] = None
    kind: Optional[str] = None
    status: Optional[str] = None
    expires: Optional[str] = None

    def format(self) -> str:
        values = (self.number, self.authority, self.kind, self.status, self.expires)
        return "\n".join(
            f"{label}: {value or ABSENT}" for label, value in zip(LICENSE_LABELS, values)
        )


def _kind(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    words = [w for w in raw.split() if w.lower() not in _STOP_KINDS]
    return " ".join(words) + " License" if words else None


def extract_licenses(text: str) -> List[License]:
    """Pattern-matched ``License #`` style identifiers found in page text.

    An identifier must contain at least one digit, which keeps words such
    as "License Agreement" out.
    """
    found: List[License] = []
    seen: set[str] = set()
    for match in _LICENSE_RE.finditer(text or ""):
        number = match.group("number").upper()
        if not re.search(r"\d", number) or number in seen:
            continue
        seen.add(number)
        found.append(License(number=number, kind=_kind(match.group("kind"))))
    return found


def parse_license_block(block: str) -> Optional[License]:
    """Read one labelled block; ``None`` when it has no license number."""

    def _get(label: str) -> Optional[str]:
        match = re.search(rf"{label}\s*:\s*(.*)", block, re.IGNORECASE)
        value = match.group(1).strip() if match else ""
        return None if not value or value == ABSENT else value

    number = _get("License Number")
    if number is None:
        return None
    return License(
        number=number,
        authority=_get("Issuing Authority"),
        kind=_get("License Type"),
        status=_get("Status"),
        expires=_get("Expiration Date"),
    )


def parse_license_blocks(text: Optional[str]) -> List[License]:
    """Split blank-line separated blocks and parse each one."""
    if not text or text.strip() == ABSENT:
        return []
    blocks = [b.strip() for b in re.split(r"\n\s*\n", text) if b.strip()]
    return [lic for lic in (parse_license_block(b) for b in blocks) if lic]


def merge_licenses(*groups: Iterable[License]) -> List[License]:
    """Concatenate groups, keeping the first license seen per number."""
    merged: List[License] = []
    seen: set[str] = set()
    for group in groups:
        for lic in group:
            key = re.sub(r"[^A-Z0-9]", "", lic.number.upper())
            if key in seen:
                continue
            seen.add(key)
            merged.append(lic)
    return merged


def format_licenses(licenses: Iterable[License]) -> str:
    blocks = [lic.format() for lic in licenses]
    return "\n\n".join(blocks) if blocks else ABSENT
