"""
Breadth-first link crawler with bounded concurrency.
Starts from one URL, fetches pages in rounds and reports the links and
domains it discovered.
"""
from linkcrawler.core import CrawlController, CrawlResult, CrawlState, crawl, extract_origin
from linkcrawler.fetch import HttpGetResult, LinkFetcher, http_get

__version__ = "1.0.0"
__all__ = [
    "crawl",
    "extract_origin",
    "CrawlController",
    "CrawlResult",
    "CrawlState",
    "HttpGetResult",
    "LinkFetcher",
    "http_get",
]
