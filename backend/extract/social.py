"""Social-profile URL extraction.

Every candidate URL is canonicalised, matched against :data:`PLATFORMS` by
hostname, and kept only when it points below the platform root.  One URL
is kept per platform: the first one seen wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlsplit


@dataclass(frozen=True)
class Platform:
    name: str
    hosts: Tuple[str, ...]
    # Path prefixes that are share/intent widgets rather than profiles.
    disallow: Tuple[str, ...] = ()

    def matches(self, host: str) -> bool:
        return any(host == h or host.endswith("." + h) for h in self.hosts)


PLATFORMS: Tuple[Platform, ...] = (
    Platform("Facebook", ("facebook.com", "fb.com"), ("/sharer", "/share", "/dialog", "/plugins")),
    Platform("Instagram", ("instagram.com",), ("/share",)),
    Platform("LinkedIn", ("linkedin.com",), ("/share", "/sharearticle", "/cws/share")),
    Platform("X", ("twitter.com", "x.com"), ("/intent", "/share", "/home")),
    Platform("TikTok", ("tiktok.com",), ("/share",)),
    Platform("YouTube", ("youtube.com", "youtu.be"), ("/embed", "/share")),
    Platform("Vimeo", ("vimeo.com",), ("/share",)),
    Platform("Flickr", ("flickr.com",)),
    Platform("Foursquare", ("foursquare.com",)),
    Platform("Threads", ("threads.net", "threads.com"), ("/intent",)),
    Platform("Tumblr", ("tumblr.com",), ("/share", "/widgets")),
    Platform("Pinterest", ("pinterest.com",), ("/pin/create",)),
    Platform("Yelp", ("yelp.com",)),
)


def canonical_social_url(url: str) -> Optional[str]:
    """``http://www.Facebook.com/acme/#top`` -> ``https://facebook.com/acme``.

    Returns ``None`` for anything that is not an absolute http(s) URL.
    """
    parts = urlsplit((url or "").strip())
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return None
    host = parts.hostname.lower()
    if host.startswith("www."):
        host = host[4:]
    path = parts.path.rstrip("/")
    query = f"?{parts.query}" if parts.query else ""
    return f"https://{host}{path}{query}"


def platform_for(url: str) -> Optional[Platform]:
    """The platform a canonical URL belongs to, when it is a profile link."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    segments = [s for s in parts.path.split("/") if s]
    if not segments:
        return None
    path = parts.path.lower()
    for platform in PLATFORMS:
        if not platform.matches(host):
            continue
        if any(path.startswith(prefix) for prefix in platform.disallow):
            return None
        return platform
    return None


def social_candidates(
    links: Iterable[str], related_profiles: Iterable[str] = ()
) -> List[Tuple[str, str]]:
    """Every ``(platform, canonical_url)`` pair, structured profiles first."""
    pairs: List[Tuple[str, str]] = []
    for raw in [*related_profiles, *links]:
        canon = canonical_social_url(raw)
        if canon is None:
            continue
        platform = platform_for(canon)
        if platform is not None:
            pairs.append((platform.name, canon))
    return pairs


def extract_social(links: Iterable[str], related_profiles: Iterable[str] = ()) -> List[str]:
    """One ``Platform: url`` line per platform, first-seen wins.

    ``related_profiles`` (structured-data ``sameAs`` links) are considered
    before page anchors, which are considered in discovery order.
    """
    lines: List[str] = []
    taken: set[str] = set()
    for name, url in social_candidates(links, related_profiles):
        if name in taken:
            continue
        taken.add(name)
        lines.append(f"{name}: {url}")
    return lines
