from __future__ import annotations

import threading
from typing import Dict, List

import pytest


class GraphFetcher:
    """In-memory link graph standing in for the HTTP fetcher."""

    def __init__(self, graph: Dict[str, List[str]]) -> None:
        self.graph = graph
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def __call__(self, url: str) -> List[str]:
        with self._lock:
            self.calls.append(url)
        return list(self.graph.get(url, []))


@pytest.fixture
def graph_fetcher():
    return GraphFetcher


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200, content_type: str = "text/html; charset=utf-8") -> None:
        self.text = text
        self.status_code = status_code
        self.headers = {"content-type": content_type} if content_type else {}


class FakeSession:
    """Minimal requests.Session replacement keyed by URL."""

    def __init__(self, responses=None) -> None:
        self.responses = responses or {}
        self.headers: Dict[str, str] = {}
        self.requests: List[dict] = []
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def get(self, url, **kwargs):
        self.requests.append({"url": url, **kwargs})
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None:
            return FakeResponse("", status_code=404)
        return response


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse
