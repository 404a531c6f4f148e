"""Retrieval Engine - grounding context for documentation and GitHub questions.

This module composes the classifier and retrievers into the two invocations
an agent's tool layer calls:

1. ``retrieve_docs``: structured library lookup first, page fetch fallback
2. ``retrieve_github``: reference classification, then repository metadata

Each invocation is an async generator that yields exactly two states:
LOADING first, then one terminal READY or ERROR. Nothing is cached between
invocations.

Example:
    async with RetrievalEngine(Settings.from_env()) as engine:
        async for state in engine.retrieve_docs({"library_name": "react", "query": "hooks"}):
            print(state.state)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

from .classifier import classify
from .config import Settings
from .context7_client import Context7Client
from .errors import (
    GitHubError,
    MissingInputError,
    RequestValidationError,
    RetrievalError,
    StructuredServiceError,
)
from .github_client import GitHubClient
from .models import InvocationState, NoMatch, RetrievalResult, TrendingListing
from .page import PageRetriever
from .resolver import is_library_id, resolve_library
from .schemas import DocsRequest
from .structured import retrieve_structured

logger = logging.getLogger(__name__)


class RetrievalEngine:
    """Routes retrieval requests to the structured, page and GitHub paths.

    Clients are created lazily; pass pre-built ones to share transports or
    to inject fakes in tests.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        context7: Context7Client | None = None,
        pages: PageRetriever | None = None,
        github: GitHubClient | None = None,
    ):
        self.settings = settings or Settings()
        self._context7 = context7
        self._pages = pages
        self._github = github

    async def __aenter__(self) -> RetrievalEngine:
        return self

    async def __aexit__(self, *args) -> None:
        for client in (self._context7, self._pages, self._github):
            if client is not None:
                await client.aclose()

    @property
    def context7(self) -> Context7Client:
        if self._context7 is None:
            self._context7 = Context7Client(
                api_key=self.settings.context7_api_key,
                base_url=self.settings.context7_base_url,
                timeout=self.settings.timeout,
            )
        return self._context7

    @property
    def pages(self) -> PageRetriever:
        if self._pages is None:
            self._pages = PageRetriever(timeout=self.settings.timeout)
        return self._pages

    @property
    def github(self) -> GitHubClient:
        if self._github is None:
            self._github = GitHubClient(
                token=self.settings.github_token,
                timeout=self.settings.timeout,
            )
        return self._github

    # ----- docs ------------------------------------------------------------

    async def _try_structured(self, request: DocsRequest) -> RetrievalResult | None:
        """Best-effort structured lookup; any service failure means no match."""
        explicit_id = request.library_id if is_library_id(request.library_id) else None
        # a malformed identifier is still a usable search name
        name = explicit_id or request.library_name or request.library_id
        if not name:
            return None

        try:
            resolution = await resolve_library(
                self.context7, name, request.query, self.settings.weights
            )
            if isinstance(resolution, NoMatch):
                logger.info(f"No structured match: {resolution.reason}")
                return None

            candidate = resolution.candidate
            result = await retrieve_structured(
                self.context7,
                candidate.id,
                request.query,
                max_section_chars=request.max_section_chars,
                max_sentences=request.max_sentences,
                library_name=candidate.name,
            )
        except StructuredServiceError as e:
            logger.warning(f"Context7 lookup failed: {e}")
            return None

        if result is not None and not result.library_name:
            result.library_name = request.library_name
        return result

    async def retrieve_docs(
        self, request: DocsRequest | dict[str, Any]
    ) -> AsyncIterator[InvocationState]:
        """Retrieve documentation context.

        A structured match short-circuits: the fallback URL is not fetched.
        Without a match, the request's URL is fetched and summarized.

        Args:
            request: DocsRequest, or a mapping validated into one

        Yields:
            LOADING, then READY (``docs`` set) or ERROR (``error`` set)
        """
        yield InvocationState.loading()

        if not isinstance(request, DocsRequest):
            try:
                request = DocsRequest.from_dict(request)
            except RequestValidationError as e:
                yield InvocationState.failed(f"Invalid request: {e}")
                return

        structured = await self._try_structured(request)
        if structured is not None:
            yield InvocationState.ready_docs(structured)
            return

        if not request.url:
            yield InvocationState.failed(str(MissingInputError()))
            return

        try:
            result = await self.pages.retrieve(
                request.url,
                query=request.query,
                max_chars=request.max_chars,
                max_section_chars=request.max_section_chars,
                max_sentences=request.max_sentences,
            )
        except RetrievalError as e:
            logger.warning(f"Page retrieval failed for {request.url}: {e}")
            yield InvocationState.failed(str(e))
            return

        yield InvocationState.ready_docs(result)

    # ----- github ----------------------------------------------------------

    async def retrieve_github(self, reference: str) -> AsyncIterator[InvocationState]:
        """Retrieve repository metadata for a GitHub reference.

        An unparseable reference still goes through the metadata lookup with
        empty identifiers and comes back as READY with ``github=None``.

        An unreachable API is logged and also comes back as READY with
        ``github=None``; absent metadata is a displayable outcome.

        Yields:
            LOADING, then READY with ``github`` possibly None
        """
        yield InvocationState.loading()

        parsed = classify(reference).github
        owner, repo = (parsed.owner, parsed.repo) if parsed else ("", "")

        try:
            metadata = await self.github.get_repository(owner, repo)
        except GitHubError as e:
            logger.warning(f"GitHub lookup failed for {reference!r}: {e}")
            metadata = None

        yield InvocationState.ready_github(metadata)

    async def trending(self, date: str | None = None, per_page: int | None = None) -> TrendingListing:
        """List today's most-starred new repositories (see GitHubClient.search_trending)."""
        return await self.github.search_trending(date=date, per_page=per_page)


async def final_state(states: AsyncIterator[InvocationState]) -> InvocationState:
    """Drain an invocation and return its terminal state."""
    last = InvocationState.failed("Invocation produced no result.")
    async for state in states:
        last = state
    return last
