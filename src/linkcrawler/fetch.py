"""
HTTP access: the fetch-and-parse collaborator used by the crawl controller,
and a plain GET pass-through.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, SoupStrainer

from linkcrawler.config import DEFAULT_GET_TIMEOUT_S, DEFAULT_USER_AGENT, CrawlerSettings

logger = logging.getLogger(__name__)

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)

HTTP_SCHEMES = ("http://", "https://")


@dataclass(slots=True)
class HttpGetResult:
    """Outcome of a single GET request."""
    response_text: str
    url: str
    status_code: int

    def to_dict(self) -> dict:
        return {
            "responseText": self.response_text,
            "url": self.url,
            "statusCode": self.status_code,
        }


def extract_links(html: str) -> List[str]:
    """Extract all href values from <a> tags using optimized parsing."""
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)
    return [a["href"] for a in soup.find_all("a") if a.get("href")]


def resolve_links(hrefs: List[str], base_url: str) -> List[str]:
    """
    Resolve hrefs against the page URL and keep absolute http(s) links.

    Order of first appearance is preserved and duplicates are dropped.
    Fragments and query strings are kept as-is.
    """
    unique: dict[str, None] = {}
    for href in hrefs:
        try:
            absolute = urljoin(base_url, href.strip())
        except ValueError:
            logger.debug("Failed to resolve %s against %s", href, base_url)
            continue
        if absolute.startswith(HTTP_SCHEMES):
            unique.setdefault(absolute, None)
    return list(unique)


class LinkFetcher:
    """
    Fetch a page and return the outbound links found on it.

    Any failure (transport error, non-2xx status, non-HTML body) yields an
    empty list, so callers never see an exception from a single page.
    """

    def __init__(
        self,
        settings: Optional[CrawlerSettings] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.settings = settings or CrawlerSettings()
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = self.settings.user_agent

    def __enter__(self) -> "LinkFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the session if this fetcher created it."""
        if self._owns_session:
            self.session.close()

    def __call__(self, url: str) -> List[str]:
        return self.parse_links_from_url(url)

    def parse_links_from_url(self, url: str) -> List[str]:
        logger.info("Parsing links from URL: %s", url)
        try:
            resp = self.session.get(url, timeout=self.settings.timeout_s, allow_redirects=True)
        except requests.RequestException as e:
            logger.warning("Error fetching URL %s: %s", url, e)
            return []

        if not 200 <= resp.status_code < 300:
            logger.warning("Failed to fetch URL: %s (status: %s)", url, resp.status_code)
            return []

        # Only parse HTML content
        content_type = (resp.headers.get("content-type") or "").lower()
        if "text/html" not in content_type:
            logger.debug("Skipping non-HTML response from %s (%s)", url, content_type or "no content-type")
            return []

        links = resolve_links(extract_links(resp.text), url)
        logger.info("Found %d links on %s", len(links), url)
        return links


def http_get(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout_s: float = DEFAULT_GET_TIMEOUT_S,
    user_agent: str = DEFAULT_USER_AGENT,
) -> HttpGetResult:
    """
    Perform one GET request and return body text and status code.

    Transport errors are logged and re-raised; HTTP error statuses are
    returned like any other response.
    """
    owns_session = session is None
    session = session or requests.Session()
    logger.info("Performing HTTP GET request to URL: %s", url)
    try:
        resp = session.get(url, timeout=timeout_s, headers={"User-Agent": user_agent})
    except requests.RequestException as e:
        logger.error("Error performing HTTP GET request to %s: %s", url, e)
        raise
    finally:
        if owns_session:
            session.close()

    logger.info("HTTP GET request completed with status code: %s", resp.status_code)
    return HttpGetResult(response_text=resp.text or "", url=url, status_code=resp.status_code)
