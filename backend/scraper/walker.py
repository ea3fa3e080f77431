"""Bounded breadth-first crawl of one site.

``walk`` owns the frontier: only the calling thread touches the queue and
the visited set.  Fetches are handed to a ``ThreadPoolExecutor`` one BFS
batch at a time and their results are folded back in submission order, so
the page list (and therefore the corpus) stays in discovery order no matter
which fetch finishes first.
"""

from __future__ import annotations

import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

import httpx

from backend.config import settings
from backend.scraper.fetcher import fetch_page, make_client
from backend.scraper.models import (
    CrawlResult,
    CrawlTarget,
    FetchedPage,
    FetchError,
    FetchResult,
    normalize_url,
)

FetchFn = Callable[[httpx.Client, str], FetchResult]

_SKIP_SCHEMES = ("mailto:", "tel:", "javascript:", "data:")


def _fetch_batch(
    pool: ThreadPoolExecutor,
    client: httpx.Client,
    urls: Sequence[str],
    deadline: float,
    fetch: FetchFn,
) -> Tuple[List[FetchResult], bool]:
    """Fetch *urls* concurrently; return results in input order.

    Anything still running at *deadline* is reported as a ``FetchError`` and
    the second return value is ``True`` so the caller stops crawling.
    """
    futures = [pool.submit(fetch, client, url) for url in urls]
    timeout = max(0.0, deadline - time.monotonic())
    _, not_done = wait(futures, timeout=timeout)

    results: List[FetchResult] = []
    for url, future in zip(urls, futures):
        if future in not_done:
            future.cancel()
            results.append(FetchError(url=url, reason="crawl deadline exceeded"))
            continue
        exc = future.exception()
        if exc is not None:
            results.append(FetchError(url=url, reason=f"{type(exc).__name__}: {exc}"))
        else:
            results.append(future.result())
    return results, bool(not_done)


def _should_probe_fallbacks(result: CrawlResult) -> bool:
    policy = settings.crawl_fallback_policy
    if policy == "always":
        return True
    if policy == "never":
        return False
    return len(result.corpus) < settings.crawl_min_content_chars


def walk(
    target: CrawlTarget,
    max_pages: Optional[int] = None,
    max_depth: Optional[int] = None,
    fallback_paths: Optional[Iterable[str]] = None,
    fetch: FetchFn = fetch_page,
) -> CrawlResult:
    """Crawl *target* breadth-first and return every page that fetched.

    Args:
        target: Validated root URL; its origin bounds the crawl.
        max_pages: Page budget (successful pages).  Defaults to
            ``settings.crawl_max_pages``.
        max_depth: Links are followed from pages shallower than this.
            Defaults to ``settings.crawl_max_depth``.
        fallback_paths: Conventional sub-paths probed when the corpus is
            thin.  Defaults to ``settings.crawl_fallback_paths``.
        fetch: Page fetcher; swapped out in tests.

    Returns:
        A :class:`CrawlResult`.  Failed pages are listed in ``failures``
        and are otherwise absent; they never abort the run.
    """
    max_pages = settings.crawl_max_pages if max_pages is None else max_pages
    max_depth = settings.crawl_max_depth if max_depth is None else max_depth
    paths = tuple(settings.crawl_fallback_paths if fallback_paths is None else fallback_paths)

    result = CrawlResult(target=target)
    deadline = time.monotonic() + settings.crawl_deadline

    visited: set[str] = set()
    queued: set[str] = {target.url}
    frontier: deque[Tuple[str, int]] = deque([(target.url, 0)])
    timed_out = False

    print(f"[CRAWL] {target.url} (budget={max_pages}, depth={max_depth})")

    pool = ThreadPoolExecutor(
        max_workers=max(1, settings.crawl_concurrency), thread_name_prefix="crawl"
    )
    try:
        with make_client() as client:
            # ----------------------------------------------------------
            # 1. Breadth-first traversal
            # ----------------------------------------------------------
            while frontier and len(result.pages) < max_pages and not timed_out:
                remaining = max_pages - len(result.pages)
                batch: List[Tuple[str, int]] = []
                while frontier and len(batch) < remaining:
                    url, depth = frontier.popleft()
                    if url in visited:
                        continue
                    visited.add(url)
                    batch.append((url, depth))
                if not batch:
                    break

                outcomes, timed_out = _fetch_batch(
                    pool, client, [u for u, _ in batch], deadline, fetch
                )
                for (url, depth), outcome in zip(batch, outcomes):
                    if isinstance(outcome, FetchError):
                        result.failures.append(outcome)
                        continue
                    result.pages.append(outcome)
                    if depth < max_depth:
                        _enqueue_links(target, outcome, depth + 1, visited, queued, frontier)

            # ----------------------------------------------------------
            # 2. Conventional sub-paths when the site yielded too little
            # ----------------------------------------------------------
            if not timed_out and paths and _should_probe_fallbacks(result):
                probes: List[str] = []
                for path in paths:
                    url = normalize_url(urljoin(target.url, "/" + path.strip("/")))
                    if url in visited:
                        continue
                    if (
                        settings.crawl_fallback_within_budget
                        and len(result.pages) + len(probes) >= max_pages
                    ):
                        break
                    visited.add(url)
                    probes.append(url)
                if probes:
                    print(f"[CRAWL] Thin content; probing {len(probes)} fallback path(s).")
                    outcomes, _ = _fetch_batch(pool, client, probes, deadline, fetch)
                    for outcome in outcomes:
                        if isinstance(outcome, FetchError):
                            result.failures.append(outcome)
                        else:
                            result.pages.append(outcome)
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    print(
        f"[CRAWL] Done: {len(result.pages)} page(s), "
        f"{len(result.failures)} failure(s), {len(result.corpus)} chars of text."
    )
    return result


def _enqueue_links(
    target: CrawlTarget,
    page: FetchedPage,
    depth: int,
    visited: set[str],
    queued: set[str],
    frontier: "deque[Tuple[str, int]]",
) -> None:
    for link in page.outbound_links:
        if link.lower().startswith(_SKIP_SCHEMES):
            continue
        clean = normalize_url(link)
        if clean in visited or clean in queued:
            continue
        if not target.is_same_origin(clean):
            continue
        queued.add(clean)
        frontier.append((clean, depth))
