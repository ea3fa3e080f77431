"""Structured-data harvester for schema.org JSON-LD blocks.

Decoded JSON is loosely typed, so every node is first classified into one of
three record shapes with explicit presence checks:

* :class:`PostalAddress`: a complete street/city/region/postal-code set.
* :class:`HoursSpec`: one ``OpeningHoursSpecification`` entry.
* :class:`OrganizationRecord`: any node carrying business facts
  (telephone, address, opening hours, ``sameAs`` profile links).

``harvest`` folds the records from every block of every page into a single
:class:`StructuredMetadata` for the run.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from backend.extract.addresses import format_address
from backend.extract.hours import WEEKDAYS, format_clock, format_day_line


# ---------------------------------------------------------------------------
# Record shapes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PostalAddress:
    street: str
    city: str
    region: str
    postal_code: str
    country: Optional[str] = None

    def format(self) -> str:
        return format_address(self.street, self.city, self.region, self.postal_code, self.country)


@dataclass(frozen=True)
class HoursSpec:
    days: Tuple[str, ...]
    opens: Optional[str] = None
    closes: Optional[str] = None
    closed: bool = False

    def line_for(self, day: str) -> Optional[str]:
        if self.closed:
            return format_day_line(day, None)
        if self.opens and self.closes:
            return format_day_line(day, (self.opens, self.closes))
        return None


@dataclass(frozen=True)
class OrganizationRecord:
    name: Optional[str] = None
    telephones: Tuple[str, ...] = ()
    addresses: Tuple[PostalAddress, ...] = ()
    address_texts: Tuple[str, ...] = ()
    hours: Tuple[HoursSpec, ...] = ()
    same_as: Tuple[str, ...] = ()


MetadataRecord = Union[OrganizationRecord, PostalAddress, HoursSpec]


@dataclass
class StructuredMetadata:
    """Run-scoped accumulation of every record found across all pages."""

    telephones: List[str] = field(default_factory=list)
    addresses: List[PostalAddress] = field(default_factory=list)
    address_texts: List[str] = field(default_factory=list)
    # Day -> canonical line; only ever set to a complete seven-day week.
    hours: Optional[Dict[str, str]] = None
    related_profiles: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            self.telephones
            or self.addresses
            or self.address_texts
            or self.hours
            or self.related_profiles
        )


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _flatten(data: Any) -> Iterator[Dict[str, Any]]:
    if isinstance(data, list):
        for item in data:
            yield from _flatten(item)
    elif isinstance(data, dict):
        yield data
        if "@graph" in data:
            yield from _flatten(data["@graph"])


def decode_block(raw: str) -> List[Dict[str, Any]]:
    """Decode one ``<script type="application/ld+json">`` body into nodes.

    Back-to-back objects (``{...}{...}``) are repaired into an array.  A
    block that still fails to decode yields no nodes.
    """
    text = (raw or "").strip()
    text = re.sub(r"^<!--|-->$", "", text).strip()
    if not text:
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        repaired = "[" + re.sub(r"}\s*{", "},{", text) + "]"
        try:
            data = json.loads(repaired)
        except json.JSONDecodeError:
            return []
    return list(_flatten(data))


# ---------------------------------------------------------------------------
# Field readers
# ---------------------------------------------------------------------------

def _strings(value: Any) -> List[str]:
    """Coerce a scalar-or-list JSON value to a list of non-empty strings."""
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    out: List[str] = []
    for item in items:
        if isinstance(item, (str, int)) and not isinstance(item, bool):
            text = str(item).strip()
            if text:
                out.append(text)
    return out


def _types(node: Dict[str, Any]) -> List[str]:
    return [t.rsplit("/", 1)[-1] for t in _strings(node.get("@type"))]


def _country_name(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get("name")
    names = _strings(value)
    return names[0] if names else None


def _postal_address(value: Dict[str, Any]) -> Optional[PostalAddress]:
    """Build a :class:`PostalAddress` or ``None`` when any part is missing."""
    street = ", ".join(_strings(value.get("streetAddress")) + _strings(value.get("address2")))
    city = " ".join(_strings(value.get("addressLocality")))
    region = " ".join(_strings(value.get("addressRegion")))
    postal = " ".join(_strings(value.get("postalCode")))
    if not (street and city and region and postal):
        return None
    return PostalAddress(
        street=street,
        city=city,
        region=region,
        postal_code=postal,
        country=_country_name(value.get("addressCountry")),
    )


def _weekday(value: str) -> Optional[str]:
    name = value.rsplit("/", 1)[-1].strip().capitalize()
    return name if name in WEEKDAYS else None


def _clock(value: Any) -> Optional[Tuple[int, int]]:
    """Parse ``"08:00"`` / ``"8:00:00"`` / ``"08:00-05:00"`` into (hour, minute)."""
    match = re.match(r"^\s*(\d{1,2}):(\d{2})", str(value or ""))
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 24 or minute > 59:
        return None
    return hour % 24, minute


def _hours_spec(node: Dict[str, Any]) -> Optional[HoursSpec]:
    days = tuple(d for d in (_weekday(v) for v in _strings(node.get("dayOfWeek"))) if d)
    if not days:
        return None
    opens_raw, closes_raw = node.get("opens"), node.get("closes")
    if "closed" in (str(opens_raw).lower(), str(closes_raw).lower()):
        return HoursSpec(days=days, closed=True)
    opens, closes = _clock(opens_raw), _clock(closes_raw)
    if opens is None or closes is None:
        return None
    if opens == closes == (0, 0):
        return HoursSpec(days=days, closed=True)
    return HoursSpec(days=days, opens=format_clock(*opens), closes=format_clock(*closes))


_SHORT_DAYS = ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su")
_SHORT_DAY = r"(?:Mo|Tu|We|Th|Fr|Sa|Su)"
_OPENING_HOURS_RE = re.compile(
    rf"({_SHORT_DAY}(?:\s*[-,]\s*{_SHORT_DAY})*)\s+(\d{{1,2}}:\d{{2}})\s*-\s*(\d{{1,2}}:\d{{2}})"
)


def _expand_short_days(spec: str) -> Tuple[str, ...]:
    days: List[str] = []
    for part in spec.split(","):
        bounds = [b.strip() for b in part.split("-")]
        if not all(b in _SHORT_DAYS for b in bounds):
            continue
        start = _SHORT_DAYS.index(bounds[0])
        end = _SHORT_DAYS.index(bounds[-1])
        span = (end - start) % 7
        days.extend(WEEKDAYS[(start + i) % 7] for i in range(span + 1))
    return tuple(dict.fromkeys(days))


def _opening_hours_strings(value: Any) -> List[HoursSpec]:
    """Parse the short ``openingHours`` form, e.g. ``"Mo-Fr 09:00-17:00"``."""
    specs: List[HoursSpec] = []
    for text in _strings(value):
        for match in _OPENING_HOURS_RE.finditer(text):
            days = _expand_short_days(match.group(1))
            opens, closes = _clock(match.group(2)), _clock(match.group(3))
            if days and opens and closes:
                specs.append(
                    HoursSpec(days=days, opens=format_clock(*opens), closes=format_clock(*closes))
                )
    return specs


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

_BUSINESS_KEYS = ("telephone", "address", "openingHoursSpecification", "openingHours", "sameAs")


def classify(node: Dict[str, Any]) -> List[MetadataRecord]:
    """Map one decoded JSON-LD node to the record shapes it carries."""
    types = _types(node)

    if "PostalAddress" in types:
        address = _postal_address(node)
        return [address] if address else []

    if "OpeningHoursSpecification" in types:
        spec = _hours_spec(node)
        return [spec] if spec else []

    if not any(key in node for key in _BUSINESS_KEYS):
        return []

    addresses: List[PostalAddress] = []
    address_texts: List[str] = []
    raw_addresses = node.get("address")
    for value in raw_addresses if isinstance(raw_addresses, list) else [raw_addresses]:
        if isinstance(value, dict):
            address = _postal_address(value)
            if address:
                addresses.append(address)
        elif isinstance(value, str) and value.strip():
            address_texts.append(value.strip())

    hours: List[HoursSpec] = []
    raw_specs = node.get("openingHoursSpecification")
    for value in raw_specs if isinstance(raw_specs, list) else [raw_specs]:
        if isinstance(value, dict):
            spec = _hours_spec(value)
            if spec:
                hours.append(spec)
    hours.extend(_opening_hours_strings(node.get("openingHours")))

    names = _strings(node.get("name"))
    return [
        OrganizationRecord(
            name=names[0] if names else None,
            telephones=tuple(_strings(node.get("telephone"))),
            addresses=tuple(addresses),
            address_texts=tuple(address_texts),
            hours=tuple(hours),
            same_as=tuple(_strings(node.get("sameAs"))),
        )
    ]


def week_from_specs(specs: Iterable[HoursSpec]) -> Optional[Dict[str, str]]:
    """Return day -> line when *specs* cover all seven weekdays, else ``None``."""
    week: Dict[str, str] = {}
    for spec in specs:
        for day in spec.days:
            line = spec.line_for(day)
            if line and day not in week:
                week[day] = line
    if all(day in week for day in WEEKDAYS):
        return {day: week[day] for day in WEEKDAYS}
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def harvest(blocks: Iterable[str]) -> StructuredMetadata:
    """Fold every JSON-LD block of a run into one :class:`StructuredMetadata`.

    Malformed blocks are skipped.  Opening hours are kept only when one
    record (or, failing that, the loose specs taken together) covers the
    whole week.
    """
    meta = StructuredMetadata()
    loose_specs: List[HoursSpec] = []

    for block in blocks:
        for node in decode_block(block):
            for record in classify(node):
                if isinstance(record, PostalAddress):
                    meta.addresses.append(record)
                elif isinstance(record, HoursSpec):
                    loose_specs.append(record)
                else:
                    meta.telephones.extend(record.telephones)
                    meta.addresses.extend(record.addresses)
                    meta.address_texts.extend(record.address_texts)
                    meta.related_profiles.extend(record.same_as)
                    if meta.hours is None and record.hours:
                        meta.hours = week_from_specs(record.hours)

    if meta.hours is None and loose_specs:
        meta.hours = week_from_specs(loose_specs)

    return meta
