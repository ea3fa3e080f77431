"""Opening-hours extraction and normalisation.

The canonical form is exactly seven lines, Monday first::

    Monday: 09:00 AM - 05:00 PM
    ...
    Sunday: Closed

A week is only ever returned whole.  If any weekday cannot be resolved to
explicit times or an explicit "Closed", the result is ``None``: missing
days are never inferred.  Running :func:`extract_hours` over its own output
returns the same seven lines.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

WEEKDAYS: Tuple[str, ...] = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)

_DAY = (
    r"\b(?:mon(?:day)?|tue(?:s(?:day)?)?|wed(?:nesday)?|thu(?:r(?:s(?:day)?)?)?"
    r"|fri(?:day)?|sat(?:urday)?|sun(?:day)?)\b\.?"
)
_RANGE_SEP = r"\s*(?:-|–|—|to|through|thru)\s*"
_LIST_SEP = r"\s*(?:,|&|/|and)\s*"

_SEGMENT_RE = re.compile(
    rf"(?P<days>{_DAY}(?:(?:{_RANGE_SEP}|{_LIST_SEP}){_DAY})*)\s*:?\s*"
    rf"(?P<value>.*?)(?=[ \t]*{_DAY}|$)",
    re.IGNORECASE | re.MULTILINE,
)
_DAY_TOKEN_RE = re.compile(_DAY, re.IGNORECASE)
_RANGE_SEP_RE = re.compile(rf"^{_RANGE_SEP}$", re.IGNORECASE)

_TIME = r"(?:noon|midnight|\d{1,2}(?::\d{2})?\s*(?:[ap]\.?\s?m\b\.?)?)"
_SPAN_RE = re.compile(
    rf"(?<![\d:])(?P<open>{_TIME})\s*(?:-|–|—|to|until)\s*(?P<close>{_TIME})",
    re.IGNORECASE,
)
_TOKEN_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(?:([ap])\.?\s?m\.?)?$", re.IGNORECASE)
_CLOSED_RE = re.compile(r"\bclosed\b", re.IGNORECASE)
_CLOCK_MARK_RE = re.compile(r"[ap]\.?\s?m\b|:|noon|midnight", re.IGNORECASE)
# Separators and punctuation allowed around a bare span
_FILLER_RE = re.compile(r"[\s,;.|/()\-–—]+")

Clock = Tuple[int, int]


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_clock(hour: int, minute: int) -> str:
    """``(13, 5)`` -> ``"01:05 PM"``."""
    suffix = "PM" if hour >= 12 else "AM"
    twelve = hour % 12 or 12
    return f"{twelve:02d}:{minute:02d} {suffix}"


def format_day_line(day: str, span: Optional[Tuple[str, str]]) -> str:
    """A canonical line; ``span=None`` means the day is closed."""
    if span is None:
        return f"{day}: Closed"
    return f"{day}: {span[0]} - {span[1]}"


# ---------------------------------------------------------------------------
# Time parsing
# ---------------------------------------------------------------------------

def _parse_token(token: str) -> Optional[Tuple[int, int, Optional[str]]]:
    """Return ``(hour, minute, meridiem)``; meridiem is ``"am"``, ``"pm"`` or ``None``."""
    text = token.strip().lower()
    if text == "noon":
        return 12, 0, "pm"
    if text == "midnight":
        return 12, 0, "am"
    match = _TOKEN_RE.match(text)
    if not match:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    meridiem = (match.group(3) + "m") if match.group(3) else None
    if minute > 59 or hour > 24:
        return None
    if meridiem and not 1 <= hour <= 12:
        return None
    return hour, minute, meridiem


def _to_24(hour: int, meridiem: str) -> int:
    if meridiem == "am":
        return 0 if hour == 12 else hour
    return 12 if hour == 12 else hour + 12


def _readings(hour: int) -> List[int]:
    """Both 24-hour readings of an hour written without AM/PM."""
    if hour == 0 or hour > 12:
        return [hour % 24]
    return [_to_24(hour, "am"), _to_24(hour, "pm")]


def _resolve_span(open_tok: str, close_tok: str) -> Optional[Tuple[Clock, Clock]]:
    """Turn two time tokens into 24-hour clocks, filling a missing AM/PM.

    A token without AM/PM takes whichever reading keeps the opening time
    before the closing time; with neither marked, opening hours before 7
    are read as afternoon.
    """
    first, second = _parse_token(open_tok), _parse_token(close_tok)
    if first is None or second is None:
        return None
    oh, om, omer = first
    ch, cm, cmer = second

    if omer and cmer:
        return (_to_24(oh, omer), om), (_to_24(ch, cmer), cm)

    if cmer and not omer:
        close = _to_24(ch, cmer) * 60 + cm
        before = [h for h in _readings(oh) if h * 60 + om < close]
        open_h = before[-1] if before else _readings(oh)[0]
        return (open_h, om), (close // 60, cm)

    if omer:
        open_h = _to_24(oh, omer)
    else:
        readings = _readings(oh)
        open_h = readings[-1] if len(readings) > 1 and 1 <= oh < 7 else readings[0]
    start = open_h * 60 + om
    after = [h for h in _readings(ch) if h * 60 + cm > start]
    close_h = after[0] if after else _readings(ch)[-1]
    return (open_h, om), (close_h, cm)


def _is_clock_span(value: str, span: re.Match) -> bool:
    """A bare ``N - M`` only counts as hours when nothing else surrounds it.

    Spans embedded in other words ("2 - 3 weeks turnaround") need an AM/PM
    marker, a colon, or noon/midnight to be read as clock times.
    """
    rest = value[:span.start()] + value[span.end():]
    if not _FILLER_RE.sub("", rest):
        return True
    return bool(_CLOCK_MARK_RE.search(span.group(0)))


def _parse_value(value: str) -> Optional[str]:
    """Parse the text following a day label.

    Returns ``"HH:MM AM - HH:MM PM"``, ``"Closed"``, or ``None`` when the
    text states neither.
    """
    span = _SPAN_RE.search(value)
    if span and not _is_clock_span(value, span):
        span = None
    if span:
        resolved = _resolve_span(span.group("open"), span.group("close"))
        if resolved:
            (oh, om), (ch, cm) = resolved
            return f"{format_clock(oh, om)} - {format_clock(ch, cm)}"
    if _CLOSED_RE.search(value):
        return "Closed"
    return None


# ---------------------------------------------------------------------------
# Day parsing
# ---------------------------------------------------------------------------

def _day_index(token: str) -> int:
    prefix = token.strip(". ").lower()[:3]
    return [d[:3].lower() for d in WEEKDAYS].index(prefix)


def _expand_days(text: str) -> List[str]:
    """``"Mon-Fri"`` -> Monday..Friday; ``"Sat & Sun"`` -> Saturday, Sunday."""
    tokens = list(_DAY_TOKEN_RE.finditer(text))
    days: List[str] = []
    i = 0
    while i < len(tokens):
        start = _day_index(tokens[i].group(0))
        if i + 1 < len(tokens):
            between = text[tokens[i].end():tokens[i + 1].start()]
            if _RANGE_SEP_RE.match(between):
                end = _day_index(tokens[i + 1].group(0))
                span = (end - start) % 7
                days.extend(WEEKDAYS[(start + k) % 7] for k in range(span + 1))
                i += 2
                continue
        days.append(WEEKDAYS[start])
        i += 1
    return list(dict.fromkeys(days))


def parse_hours_text(text: str) -> Dict[str, str]:
    """Collect every day the text states hours for.

    Explicit single-day lines win over day-range shorthand; within each kind
    the first statement for a day wins.  The map may be partial.
    """
    explicit: Dict[str, str] = {}
    ranged: Dict[str, str] = {}
    for match in _SEGMENT_RE.finditer(text or ""):
        hours = _parse_value(match.group("value"))
        if hours is None:
            continue
        days = _expand_days(match.group("days"))
        bucket = explicit if len(days) == 1 else ranged
        for day in days:
            bucket.setdefault(day, f"{day}: {hours}")
    return {**ranged, **explicit}


def format_week(week: Dict[str, str]) -> Optional[str]:
    """Seven canonical lines, or ``None`` when any weekday is missing."""
    if not all(day in week for day in WEEKDAYS):
        return None
    return "\n".join(week[day] for day in WEEKDAYS)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_hours(text: str) -> Optional[str]:
    """Seven-line hours block from free text, or ``None``."""
    return format_week(parse_hours_text(text))


def resolve_hours(structured_week: Optional[Dict[str, str]], corpus: str) -> Optional[str]:
    """Pick the hours block for a profile.

    A complete structured-data week wins; otherwise the corpus is parsed.
    """
    if structured_week:
        block = format_week(structured_week)
        if block:
            return block
    return extract_hours(corpus)
