"""Pytest configuration and fixtures for docs-context."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Any, Union

import httpx
import pytest

from docs_context.config import Settings
from docs_context.context7_client import Context7Client
from docs_context.engine import RetrievalEngine
from docs_context.github_client import GitHubClient
from docs_context.models import InvocationState
from docs_context.page import PageRetriever

CONTEXT7_BASE = "https://context7.test/api/v2"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


# ============================================================================
# HTTP Fixtures
# ============================================================================


class RouteTable:
    """Serves canned responses keyed by ``scheme://host/path`` (query ignored).

    Unknown routes answer 404. Every request is recorded.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, route: Route) -> None:
        self.routes[url] = route

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, text="Not Found")
        if callable(route):
            return route(request)
        return route

    def requested(self, url_prefix: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url).startswith(url_prefix)]


@pytest.fixture
def http() -> RouteTable:
    """Return an empty route table."""
    return RouteTable()


@pytest.fixture
def transport(http: RouteTable) -> httpx.MockTransport:
    """Return an httpx transport backed by the route table."""
    return httpx.MockTransport(http.handle)


@pytest.fixture
def settings() -> Settings:
    """Return settings pointing at the test Context7 base URL."""
    return Settings(context7_api_key="", context7_base_url=CONTEXT7_BASE, timeout=5.0)


@pytest.fixture
def engine(settings: Settings, transport: httpx.MockTransport) -> RetrievalEngine:
    """Return an engine whose clients all use the mock transport."""
    return RetrievalEngine(
        settings,
        context7=Context7Client(base_url=CONTEXT7_BASE, transport=transport),
        pages=PageRetriever(transport=transport),
        github=GitHubClient(token="", transport=transport),
    )


@pytest.fixture
def collect() -> Callable[[AsyncIterator[InvocationState]], list[InvocationState]]:
    """Return a function that drains an invocation into a list of states."""

    def _collect(states: AsyncIterator[InvocationState]) -> list[InvocationState]:
        async def drain() -> list[InvocationState]:
            return [state async for state in states]

        return asyncio.run(drain())

    return _collect


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def react_candidates() -> list[dict[str, Any]]:
    """Return library search results for "react"."""
    return [
        {
            "id": "/reactjs/react.dev",
            "name": "React",
            "description": "The library for web and native user interfaces",
            "totalSnippets": 50,
            "trustScore": 8,
            "benchmarkScore": 2,
        },
    ]


@pytest.fixture
def react_snippets() -> list[dict[str, Any]]:
    """Return context snippets for the React hooks query."""
    return [
        {
            "title": "useState",
            "content": "useState is a React Hook that lets you add a state variable. Call it at the top level.",
            "source": "https://react.dev/reference/react/useState",
        },
        {
            "title": "useEffect",
            "content": "useEffect lets you synchronize a component with an external system. It runs after render.",
            "source": "https://react.dev/reference/react/useEffect",
        },
        {
            "content": "Hooks must be called in the same order on every render.",
            "source": "https://react.dev/reference/react/useState",
        },
    ]


@pytest.fixture
def sample_html() -> str:
    """Return a small documentation page."""
    return (
        "<html><head><title>Getting Started &amp; Setup</title>"
        "<style>body { color: red; }</style>"
        "<script>window.track('x');</script></head>"
        "<body><h1>Start here</h1>"
        "<p>Install the package first. Then configure it!</p>"
        "<p>Run the server. Open your browser? Done.</p>"
        "</body></html>"
    )


@pytest.fixture
def repo_payload() -> dict[str, Any]:
    """Return a GitHub ``GET /repos/facebook/react`` payload."""
    return {
        "name": "react",
        "full_name": "facebook/react",
        "description": "The library for web and native user interfaces.",
        "stargazers_count": 230000,
        "forks_count": 47000,
        "language": "JavaScript",
        "created_at": "2013-05-24T16:15:54Z",
        "updated_at": "2026-10-17T09:00:00Z",
        "homepage": "https://react.dev",
        "default_branch": "main",
    }

