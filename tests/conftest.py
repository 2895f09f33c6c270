"""
Pytest configuration and shared fixtures for ycb tests.
"""

import json
from typing import Callable, Dict, List

import httpx
import pytest

from ycb.core.config import DEFAULTS

BACKEND = "https://yourcommonbase.com/backend"
MEILI = "https://meili.test"


class Recorder:
    """Mock transport that records requests and answers from a route table."""

    def __init__(self, routes: Dict[str, Callable[[httpx.Request], httpx.Response]]):
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"error": "not found"})
        return handler(request)

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def bodies(self, path: str) -> List[dict]:
        return [json.loads(r.content) for r in self.calls(path)]


@pytest.fixture
def recorder():
    return Recorder({})


@pytest.fixture
def http(recorder):
    return httpx.AsyncClient(transport=httpx.MockTransport(recorder))


@pytest.fixture
def cfg():
    config = json.loads(json.dumps(DEFAULTS))
    config['lexical']['host'] = MEILI
    config['ui']['debounce_seconds'] = 0
    return config


def image_route(urls: Dict[str, str]):
    def handler(request: httpx.Request) -> httpx.Response:
        ids = json.loads(request.content)["ids"]
        return httpx.Response(
            200, json={"body": {"urls": {i: urls[i] for i in ids if i in urls}}}
        )
    return handler


@pytest.fixture
def sample_hits() -> List[dict]:
    """Meilisearch hits: one text entry, one image entry."""
    return [
        {
            "id": "e1",
            "data": "Ownership is Rust's most unique feature and has deep implications.",
            "metadata": {
                "title": "The Rust Book: Ownership",
                "author": "https://www.example.com/rust/ownership",
                "type": "link",
            },
            "_formatted": {
                "data": "<em>Ownership</em> is <em>Rust</em>'s most unique feature",
                "metadata": {"title": "The <em>Rust</em> Book: <em>Ownership</em>"},
            },
        },
        {
            "id": "img-2",
            "data": "Whiteboard sketch of the borrow checker",
            "metadata": {"type": "image", "author": "https://yourcommonbase.com/dashboard"},
        },
    ]


@pytest.fixture
def sample_semantic() -> List[dict]:
    return [
        {
            "id": "s1",
            "data": "Borrowing lets you reference data without taking ownership.",
            "metadata": {"title": "Borrowing", "ogDescription": "References and borrowing"},
            "similarity": 0.82,
        },
        {
            "id": "s2",
            "data": "A photo of a crab",
            "metadata": {"type": "image"},
            "similarity": 0.41,
        },
    ]
