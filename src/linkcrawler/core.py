"""
Core crawling logic and data structures.

The controller runs breadth-first rounds: pop up to ``fanout_limit``
addresses from the frontier, fetch them concurrently, wait for the whole
batch, then fold the discovered links back into the crawl state.
"""
from __future__ import annotations

import logging
from collections import deque
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, Dict, Iterable, List, Optional, Set, Tuple
from urllib.parse import urlsplit

from linkcrawler.config import DEFAULT_FANOUT, CrawlerSettings
from linkcrawler.fetch import LinkFetcher

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINKS = 10

# Takes an absolute address, returns the absolute http(s) links found there.
Fetcher = Callable[[str], Iterable[str]]


class CrawlPhase(str, Enum):
    IDLE = "idle"
    ROUND_ACTIVE = "round_active"
    AGGREGATING = "aggregating"
    DONE = "done"


@dataclass(slots=True)
class CrawlResult:
    """Snapshot of a finished crawl."""
    total_links_crawled: int
    links_discovered: Set[str]
    domains_discovered: Set[str]

    def to_dict(self) -> Dict[str, object]:
        return {
            "totalLinksCrawled": self.total_links_crawled,
            "linksDiscovered": sorted(self.links_discovered),
            "domainsDiscovered": sorted(self.domains_discovered),
        }


@dataclass(slots=True)
class CrawlState:
    """Frontier plus dedup and origin bookkeeping for one crawl."""
    frontier: Deque[str] = field(default_factory=deque)
    visited: Set[str] = field(default_factory=set)
    origins: Set[str] = field(default_factory=set)
    visited_count: int = 0

    @classmethod
    def seeded(cls, start_url: str) -> "CrawlState":
        state = cls()
        state.enqueue(start_url)
        return state

    def enqueue(self, url: str) -> bool:
        """Add ``url`` to the frontier unless it was seen before."""
        if url in self.visited:
            return False
        self.visited.add(url)
        self.frontier.append(url)
        self.record_origin(url)
        return True

    def record_origin(self, url: str) -> None:
        origin = extract_origin(url)
        if origin is not None:
            self.origins.add(origin)

    def snapshot(self) -> CrawlResult:
        return CrawlResult(
            total_links_crawled=self.visited_count,
            links_discovered=set(self.visited),
            domains_discovered=set(self.origins),
        )


def extract_origin(url: str) -> Optional[str]:
    """Return the host of ``url``, or None if it cannot be parsed."""
    if not url or any(ch.isspace() for ch in url):
        logger.debug("Failed to extract domain from URL: %r", url)
        return None
    try:
        parts = urlsplit(url)
        # hostname validates brackets; the host itself is sliced from netloc to keep its case
        if not parts.hostname:
            return None
    except ValueError:
        logger.debug("Failed to extract domain from URL: %r", url)
        return None

    host = parts.netloc.rpartition("@")[2]
    if host.startswith("["):
        host = host[: host.index("]") + 1]
    else:
        host = host.partition(":")[0]
    return host or None


def _fetch_links(fetcher: Fetcher, url: str) -> List[str]:
    return list(fetcher(url))


def dispatch_batch(
    frontier: Deque[str],
    remaining_budget: int,
    fetcher: Fetcher,
    executor: Executor,
    fanout_limit: int = DEFAULT_FANOUT,
) -> List[Tuple[str, List[str]]]:
    """
    Pop up to ``fanout_limit`` addresses and fetch them concurrently.

    Blocks until every fetch in the batch has finished. Results come back in
    the order the addresses were taken from the frontier. A fetch that
    raises counts as a page with no links.
    """
    n = min(fanout_limit, remaining_budget, len(frontier))
    batch = [frontier.popleft() for _ in range(n)]
    futures = [executor.submit(_fetch_links, fetcher, url) for url in batch]

    results: List[Tuple[str, List[str]]] = []
    for url, future in zip(batch, futures):
        try:
            links = future.result()
        except Exception:
            logger.warning("Fetch failed for %s; treating as no links", url, exc_info=True)
            links = []
        results.append((url, links))
    return results


class CrawlController:
    """Bounded-concurrency BFS over links returned by ``fetcher``."""

    def __init__(
        self,
        fetcher: Fetcher,
        fanout_limit: int = DEFAULT_FANOUT,
        max_workers: Optional[int] = None,
    ) -> None:
        if fanout_limit < 1:
            raise ValueError(f"fanout_limit must be >= 1, got {fanout_limit}")
        self.fetcher = fetcher
        self.fanout_limit = fanout_limit
        self.max_workers = max_workers or fanout_limit
        self.phase = CrawlPhase.IDLE

    def run(self, start_url: str, max_links: int = DEFAULT_MAX_LINKS) -> CrawlResult:
        if max_links < 1:
            raise ValueError(f"max_links must be >= 1, got {max_links}")

        logger.info("Starting crawl for URL: %s (maxLinks: %d)", start_url, max_links)
        self.phase = CrawlPhase.IDLE
        state = CrawlState.seeded(start_url)

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="linkcrawler") as executor:
            while state.frontier and state.visited_count < max_links:
                self.phase = CrawlPhase.ROUND_ACTIVE
                remaining = max_links - state.visited_count
                batch = dispatch_batch(state.frontier, remaining, self.fetcher, executor, self.fanout_limit)
                state.visited_count += len(batch)

                self.phase = CrawlPhase.AGGREGATING
                self._aggregate(state, batch)

                logger.info(
                    "Crawled %d URLs so far, discovered %d total links across %d domains",
                    state.visited_count,
                    len(state.visited),
                    len(state.origins),
                )

        self.phase = CrawlPhase.DONE
        logger.info(
            "Crawl completed. Total links crawled: %d, Total links discovered: %d, Total domains: %d",
            state.visited_count,
            len(state.visited),
            len(state.origins),
        )
        return state.snapshot()

    @staticmethod
    def _aggregate(state: CrawlState, batch: List[Tuple[str, List[str]]]) -> None:
        for crawled_url, links in batch:
            state.record_origin(crawled_url)
            for link in links:
                state.enqueue(link)


def crawl(
    start_url: str,
    max_links: int = DEFAULT_MAX_LINKS,
    fetcher: Optional[Fetcher] = None,
    *,
    settings: Optional[CrawlerSettings] = None,
    fanout_limit: Optional[int] = None,
    max_workers: Optional[int] = None,
) -> CrawlResult:
    """
    Crawl breadth-first from ``start_url``, fetching at most ``max_links`` pages.

    Args:
        start_url: The URL to start crawling from.
        max_links: Maximum number of pages handed to the fetcher.
        fetcher: Callable returning the links on a page. Defaults to an
            HTTP ``LinkFetcher`` built from ``settings``.
        settings: Timeout, user agent and concurrency defaults.
        fanout_limit: Pages fetched concurrently per round (overrides settings).
        max_workers: Thread pool size (overrides settings).

    Returns:
        The crawl result: pages crawled, links discovered, domains discovered.
    """
    settings = settings or CrawlerSettings()
    fanout = settings.fanout_limit if fanout_limit is None else fanout_limit
    workers = max_workers or settings.max_workers

    if fetcher is not None:
        return CrawlController(fetcher, fanout_limit=fanout, max_workers=workers).run(start_url, max_links)

    with LinkFetcher(settings) as link_fetcher:
        return CrawlController(link_fetcher, fanout_limit=fanout, max_workers=workers).run(start_url, max_links)
