"""Unit tests for library ranking and resolution."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from conftest import CONTEXT7_BASE, RouteTable
from docs_context.config import RankingWeights
from docs_context.context7_client import Context7Client
from docs_context.errors import StructuredServiceError
from docs_context.models import LibraryCandidate, LibraryMatch, NoMatch
from docs_context.resolver import is_library_id, rank_libraries, resolve_library, score_library

SEARCH_URL = f"{CONTEXT7_BASE}/libs/search"


def candidate(id: str, snippets: int = 0, trust: float = 0, benchmark: float = 0) -> LibraryCandidate:
    return LibraryCandidate(
        id=id, total_snippets=snippets, trust_score=trust, benchmark_score=benchmark
    )


class TestScoring:
    """Tests for score_library and rank_libraries."""

    def test_score_formula(self) -> None:
        """50 snippets, trust 8, benchmark 2 -> 50 + 40 + 6 = 96."""
        assert score_library(candidate("/a/b", 50, 8, 2)) == 96

    def test_custom_weights(self) -> None:
        weights = RankingWeights(trust=1, benchmark=0)
        assert score_library(candidate("/a/b", 10, 4, 100), weights) == 14

    def test_trust_breaks_equal_snippets(self) -> None:
        low = candidate("/low/trust", 20, 3)
        high = candidate("/high/trust", 20, 9)
        assert rank_libraries([low, high])[0] is high

    def test_equal_scores_keep_input_order(self) -> None:
        first = candidate("/first/lib", 10, 2)
        second = candidate("/second/lib", 20, 0)
        third = candidate("/third/lib", 0, 4)
        ranked = rank_libraries([first, second, third])
        assert [c.id for c in ranked] == ["/first/lib", "/second/lib", "/third/lib"]

    def test_zero_snippets_can_still_win(self) -> None:
        """A candidate without snippets competes on trust and benchmark."""
        many = candidate("/many/snippets", 30, 0, 0)
        trusted = candidate("/trusted/lib", 0, 10, 0)
        assert rank_libraries([many, trusted])[0] is trusted


class TestIsLibraryId:
    """Tests for is_library_id."""

    @pytest.mark.parametrize("value", ["/vercel/next.js", "/org/repo/v1.2", " /a_b/c-d "])
    def test_well_formed(self, value: str) -> None:
        assert is_library_id(value)

    @pytest.mark.parametrize("value", [None, "", "react", "vercel/next.js", "/only", "/a/b/c/d"])
    def test_malformed(self, value: str | None) -> None:
        assert not is_library_id(value)


class TestResolveLibrary:
    """Tests for resolve_library against a mocked search service."""

    def _client(self, transport: httpx.MockTransport) -> Context7Client:
        return Context7Client(base_url=CONTEXT7_BASE, transport=transport)

    def test_identifier_skips_search(self, http: RouteTable, transport: httpx.MockTransport) -> None:
        result = asyncio.run(resolve_library(self._client(transport), "/vercel/next.js", "routing"))
        assert isinstance(result, LibraryMatch)
        assert result.candidate.id == "/vercel/next.js"
        assert result.resolved_by == "identifier"
        assert http.requests == []

    def test_best_candidate_selected(
        self,
        http: RouteTable,
        transport: httpx.MockTransport,
        react_candidates: list[dict[str, Any]],
    ) -> None:
        weaker = {"id": "/someone/react-clone", "totalSnippets": 90, "trustScore": 1}
        http.add(SEARCH_URL, httpx.Response(200, json=[weaker, *react_candidates]))

        result = asyncio.run(resolve_library(self._client(transport), "react", "hooks"))

        assert isinstance(result, LibraryMatch)
        assert result.candidate.id == "/reactjs/react.dev"
        assert result.resolved_by == "search"
        params = http.requests[0].url.params
        assert params["libraryName"] == "react"
        assert params["query"] == "hooks"

    def test_empty_results_is_no_match(self, http: RouteTable, transport: httpx.MockTransport) -> None:
        http.add(SEARCH_URL, httpx.Response(200, json=[]))
        result = asyncio.run(resolve_library(self._client(transport), "nothing", "q"))
        assert isinstance(result, NoMatch)

    def test_non_list_payload_is_no_match(self, http: RouteTable, transport: httpx.MockTransport) -> None:
        http.add(SEARCH_URL, httpx.Response(200, json={"error": "none"}))
        result = asyncio.run(resolve_library(self._client(transport), "nothing", "q"))
        assert isinstance(result, NoMatch)

    def test_transport_failure_raises(self, http: RouteTable, transport: httpx.MockTransport) -> None:
        http.add(SEARCH_URL, httpx.Response(503, text="down"))
        with pytest.raises(StructuredServiceError, match="503"):
            asyncio.run(resolve_library(self._client(transport), "react", "q"))

    def test_bearer_sent_only_when_configured(
        self, http: RouteTable, transport: httpx.MockTransport
    ) -> None:
        http.add(SEARCH_URL, lambda request: httpx.Response(200, json=[]))

        asyncio.run(resolve_library(self._client(transport), "react", "q"))
        keyed = Context7Client(api_key="ctx7-key", base_url=CONTEXT7_BASE, transport=transport)
        asyncio.run(resolve_library(keyed, "react", "q"))

        assert "authorization" not in http.requests[0].headers
        assert http.requests[1].headers["authorization"] == "Bearer ctx7-key"
