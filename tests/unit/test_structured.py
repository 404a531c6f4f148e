"""Unit tests for structured content retrieval."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from conftest import CONTEXT7_BASE, RouteTable
from docs_context.context7_client import Context7Client
from docs_context.errors import StructuredServiceError
from docs_context.models import DocSnippet, ResultSource
from docs_context.structured import (
    assemble_structured_result,
    collect_citations,
    retrieve_structured,
)

CONTEXT_URL = f"{CONTEXT7_BASE}/context"


@pytest.fixture
def client(transport: httpx.MockTransport) -> Context7Client:
    return Context7Client(base_url=CONTEXT7_BASE, transport=transport)


class TestAssembly:
    """Tests for assembling snippets into a RetrievalResult."""

    def test_sections_one_per_snippet(self, react_snippets: list[dict[str, Any]]) -> None:
        snippets = [DocSnippet.from_dict(s) for s in react_snippets]
        result = assemble_structured_result(snippets, "hooks", 1200, 5, "/reactjs/react.dev", "React")

        assert result.source == ResultSource.STRUCTURED
        assert [s.heading for s in result.sections] == ["useState", "useEffect", "Documentation"]
        assert result.sections[1].citation_url == "https://react.dev/reference/react/useEffect"
        assert result.title == "React"
        assert result.library_id == "/reactjs/react.dev"

    def test_summary_spans_all_snippets(self, react_snippets: list[dict[str, Any]]) -> None:
        snippets = [DocSnippet.from_dict(s) for s in react_snippets]
        result = assemble_structured_result(snippets, "hooks", 1200, 3, None, None)
        assert result.summary == (
            "useState is a React Hook that lets you add a state variable. "
            "Call it at the top level. "
            "useEffect lets you synchronize a component with an external system."
        )

    def test_snippets_truncated(self) -> None:
        snippets = [DocSnippet(title="Long", content="word " * 500)]
        result = assemble_structured_result(snippets, "q", 200, 5)
        assert len(result.sections[0].snippet) <= 200

    def test_title_falls_back_to_first_heading(self) -> None:
        snippets = [DocSnippet(title="  Routing  ", content="Routes map URLs. They nest.")]
        result = assemble_structured_result(snippets, "q", 1200, 5)
        assert result.title == "Routing"

    def test_citations_deduplicated_in_order(self) -> None:
        snippets = [
            DocSnippet(content="a", source="https://x/2"),
            DocSnippet(content="b", source=" "),
            DocSnippet(content="c", source="https://x/1"),
            DocSnippet(content="d", source="https://x/2"),
            DocSnippet(content="e"),
        ]
        assert [c.url for c in collect_citations(snippets)] == ["https://x/2", "https://x/1"]

    def test_titles_without_content_give_no_summary(self) -> None:
        """Headings alone cannot produce a summary, so the result is unusable."""
        snippets = [DocSnippet(title="Only a heading")]
        assert assemble_structured_result(snippets, "q", 1200, 5) is None


class TestRetrieveStructured:
    """Tests for retrieve_structured against a mocked service."""

    def test_returns_result(
        self,
        http: RouteTable,
        client: Context7Client,
        react_snippets: list[dict[str, Any]],
    ) -> None:
        http.add(CONTEXT_URL, httpx.Response(200, json=react_snippets))

        result = asyncio.run(retrieve_structured(client, "/reactjs/react.dev", "hooks", 1200, 5, "React"))

        assert result is not None
        assert len(result.sections) == 3
        params = http.requests[0].url.params
        assert params["libraryId"] == "/reactjs/react.dev"
        assert params["type"] == "json"

    def test_empty_snippet_list_returns_none(self, http: RouteTable, client: Context7Client) -> None:
        http.add(CONTEXT_URL, httpx.Response(200, json=[]))
        assert asyncio.run(retrieve_structured(client, "/a/b", "q", 1200, 5)) is None

    def test_unusable_snippets_return_none(self, http: RouteTable, client: Context7Client) -> None:
        http.add(CONTEXT_URL, httpx.Response(200, json=[{"source": "https://x"}, {}]))
        assert asyncio.run(retrieve_structured(client, "/a/b", "q", 1200, 5)) is None

    def test_invalid_json_raises(self, http: RouteTable, client: Context7Client) -> None:
        http.add(CONTEXT_URL, httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(StructuredServiceError, match="invalid JSON"):
            asyncio.run(retrieve_structured(client, "/a/b", "q", 1200, 5))

    def test_timeout_raises(self, http: RouteTable, client: Context7Client) -> None:
        def timeout(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        http.add(CONTEXT_URL, timeout)
        with pytest.raises(StructuredServiceError, match="timed out"):
            asyncio.run(retrieve_structured(client, "/a/b", "q", 1200, 5))
