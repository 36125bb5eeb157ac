import pytest
import requests

from linkcrawler.config import CrawlerSettings
from linkcrawler.core import crawl
from linkcrawler.fetch import LinkFetcher, extract_links, http_get, resolve_links

PAGE = """
<html><body>
  <a href="/about">About</a>
  <a href="contact.html">Contact</a>
  <a href="https://other.example/path?q=1#top">Other</a>
  <a href="/about">About again</a>
  <a href="mailto:team@example.com">Mail</a>
  <a href="javascript:void(0)">JS</a>
  <a name="anchor-only">No href</a>
</body></html>
"""


def test_extract_links_reads_anchor_hrefs():
    assert extract_links(PAGE) == [
        "/about",
        "contact.html",
        "https://other.example/path?q=1#top",
        "/about",
        "mailto:team@example.com",
        "javascript:void(0)",
    ]


def test_resolve_links_keeps_http_and_dedupes():
    links = resolve_links(extract_links(PAGE), "https://example.com/docs/index.html")

    assert links == [
        "https://example.com/about",
        "https://example.com/docs/contact.html",
        "https://other.example/path?q=1#top",
    ]


def test_link_fetcher_parses_html(fake_session, fake_response):
    session = fake_session({"https://example.com/": fake_response(PAGE)})
    fetcher = LinkFetcher(CrawlerSettings(timeout_s=2.5, user_agent="TestAgent/1.0"), session=session)

    links = fetcher("https://example.com/")

    assert "https://example.com/about" in links
    assert len(links) == 3
    assert session.headers["User-Agent"] == "TestAgent/1.0"
    assert session.requests[0]["timeout"] == 2.5


def test_link_fetcher_returns_empty_on_error_status(fake_session, fake_response):
    session = fake_session({"https://example.com/": fake_response(PAGE, status_code=500)})

    assert LinkFetcher(session=session)("https://example.com/") == []


def test_link_fetcher_returns_empty_on_transport_error(fake_session):
    session = fake_session({"https://example.com/": requests.ConnectionError("refused")})

    assert LinkFetcher(session=session)("https://example.com/") == []


def test_link_fetcher_skips_non_html(fake_session, fake_response):
    session = fake_session({
        "https://example.com/data.json": fake_response('{"href": "/x"}', content_type="application/json"),
    })

    assert LinkFetcher(session=session)("https://example.com/data.json") == []


def test_crawl_over_fake_http_site(fake_session, fake_response):
    session = fake_session({
        "https://example.com/": fake_response('<a href="/a">a</a><a href="https://cdn.example/x">x</a>'),
        "https://example.com/a": fake_response('<a href="/">home</a>'),
        "https://cdn.example/x": requests.Timeout("slow"),
    })

    result = crawl("https://example.com/", max_links=10, fetcher=LinkFetcher(session=session))

    assert result.total_links_crawled == 3
    assert result.links_discovered == {"https://example.com/", "https://example.com/a", "https://cdn.example/x"}
    assert result.domains_discovered == {"example.com", "cdn.example"}


def test_http_get_returns_body_and_status(fake_session, fake_response):
    session = fake_session({"https://example.com/missing": fake_response("not here", status_code=404)})

    result = http_get("https://example.com/missing", session=session, timeout_s=1.0, user_agent="UA")

    assert result.status_code == 404
    assert result.response_text == "not here"
    assert result.to_dict() == {"responseText": "not here", "url": "https://example.com/missing", "statusCode": 404}
    assert session.requests[0]["headers"] == {"User-Agent": "UA"}


def test_http_get_propagates_transport_errors(fake_session):
    session = fake_session({"https://example.com/": requests.ConnectionError("down")})

    with pytest.raises(requests.RequestException):
        http_get("https://example.com/", session=session)


def test_link_fetcher_closes_only_its_own_session(fake_session, monkeypatch):
    injected = fake_session()
    with LinkFetcher(session=injected):
        pass
    assert injected.closed is False

    owned = fake_session()
    monkeypatch.setattr(requests, "Session", lambda: owned)
    with LinkFetcher() as fetcher:
        assert fetcher.session is owned
    assert owned.closed is True


def test_crawl_closes_default_fetcher_session(fake_session, fake_response, monkeypatch):
    owned = fake_session({"https://example.com/": fake_response("<p>no links</p>")})
    monkeypatch.setattr(requests, "Session", lambda: owned)

    result = crawl("https://example.com/")

    assert result.total_links_crawled == 1
    assert owned.closed is True


def test_http_get_closes_session_it_created(fake_session, fake_response, monkeypatch):
    owned = fake_session({"https://example.com/": fake_response("ok")})
    monkeypatch.setattr(requests, "Session", lambda: owned)

    assert http_get("https://example.com/").status_code == 200
    assert owned.closed is True


def test_http_get_leaves_injected_session_open(fake_session, fake_response):
    injected = fake_session({"https://example.com/": fake_response("ok")})

    http_get("https://example.com/", session=injected)

    assert injected.closed is False
