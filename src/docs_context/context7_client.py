"""Client for the Context7 structured documentation search service.

Two endpoints are used:
    GET /libs/search?libraryName=&query=      -> list of library candidates
    GET /context?libraryId=&query=&type=json  -> list of {title, content, source}

Every failure (transport, timeout, non-2xx, undecodable JSON) is raised as
StructuredServiceError so callers can treat the whole service as best-effort.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import CONTEXT7_BASE_URL, DEFAULT_TIMEOUT
from .errors import StructuredServiceError
from .models import DocSnippet, LibraryCandidate

logger = logging.getLogger(__name__)


class Context7Client:
    """Async client for Context7 library search and snippet retrieval.

    Example:
        async with Context7Client(api_key="...") as client:
            libraries = await client.search_libraries("react", "hooks")
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = CONTEXT7_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Bearer credential; requests go out unauthenticated when empty
            base_url: Service base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key or ""
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Build request headers."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def __aenter__(self) -> Context7Client:
        _ = self.client
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get HTTP client, creating if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        try:
            response = await self.client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise StructuredServiceError(f"Context7 request timed out: {path}") from e
        except httpx.HTTPError as e:
            raise StructuredServiceError(f"Context7 request failed: {e}") from e

        if response.is_error:
            raise StructuredServiceError(
                f"Context7 request failed ({response.status_code} {response.reason_phrase})"
            )

        try:
            return response.json()
        except ValueError as e:
            raise StructuredServiceError(f"Context7 returned invalid JSON for {path}") from e

    async def search_libraries(self, library_name: str, query: str) -> list[LibraryCandidate]:
        """Search the index for libraries matching a name.

        Args:
            library_name: Library name (e.g. "react", "nextjs")
            query: The user's question, used by the service for relevance

        Returns:
            Candidates in service order; empty when nothing matched
        """
        data = await self._get_json(
            "/libs/search",
            {"libraryName": library_name, "query": query},
        )
        if isinstance(data, dict):
            # some deployments wrap the list in {"results": [...]}
            data = data.get("results")
        if not isinstance(data, list):
            return []

        try:
            candidates = [
                LibraryCandidate.from_dict(item)
                for item in data
                if isinstance(item, dict) and item.get("id")
            ]
        except (ValueError, OverflowError) as e:
            raise StructuredServiceError(f"Context7 returned a malformed library: {e}") from e
        logger.debug(f"Context7 search '{library_name}': {len(candidates)} candidates")
        return candidates

    async def get_context(self, library_id: str, query: str) -> list[DocSnippet]:
        """Fetch ranked documentation snippets for a library.

        Args:
            library_id: Library identifier (e.g. "/vercel/next.js")
            query: The user's question

        Returns:
            Snippets that carry a title or content, in service order
        """
        data = await self._get_json(
            "/context",
            {"libraryId": library_id, "query": query, "type": "json"},
        )
        if not isinstance(data, list):
            return []

        snippets = [DocSnippet.from_dict(item) for item in data if isinstance(item, dict)]
        return [snippet for snippet in snippets if snippet.usable]
