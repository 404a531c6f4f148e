"""Generic page retrieval: fetch HTML, extract text, bundle sidecar documents.

Used when the structured search service has nothing for a request. The page
itself must be reachable and readable; the ``llms.txt`` / ``llms-full.txt``
sidecars next to it are optional extras and never fail a retrieval.
"""

from __future__ import annotations

import asyncio
import logging
import re
from urllib.parse import urljoin

import httpx

from .config import DEFAULT_TIMEOUT
from .errors import EmptyPageError, PageFetchError, UnsupportedContentTypeError
from .models import Citation, PageFallback, ResultSource, RetrievalResult, RetrievedSection
from .text import extract_title, strip_html, summarize, truncate_snippet

logger = logging.getLogger(__name__)

PAGE_ACCEPT = "text/html, text/plain;q=0.9, */*;q=0.8"
SIDECAR_ACCEPT = "text/plain, text/markdown;q=0.9, */*;q=0.8"
SIDECAR_NAMES = ("llms.txt", "llms-full.txt")
EXCERPT_HEADING = "Excerpt"

_PAGE_CONTENT_TYPES = re.compile(r"text/html|text/plain", re.IGNORECASE)
_SIDECAR_CONTENT_TYPES = re.compile(r"text/plain|text/markdown|text/html", re.IGNORECASE)


def sidecar_urls(url: str) -> tuple[str, str]:
    """Resolve ``llms.txt`` and ``llms-full.txt`` relative to a page URL."""
    return urljoin(url, SIDECAR_NAMES[0]), urljoin(url, SIDECAR_NAMES[1])


class PageRetriever:
    """Fetch and summarize an arbitrary documentation page.

    Example:
        async with PageRetriever() as pages:
            result = await pages.retrieve("https://docs.example.com/start")
            print(result.summary)
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the retriever.

        Args:
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> PageRetriever:
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
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def fetch_text(self, url: str) -> str:
        """Fetch a page body, accepting only HTML or plain text.

        Raises:
            PageFetchError: Non-2xx status, timeout or transport failure
            UnsupportedContentTypeError: Any other content type
        """
        try:
            response = await self.client.get(url, headers={"Accept": PAGE_ACCEPT})
        except httpx.TimeoutException as e:
            raise PageFetchError(f"Docs request timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise PageFetchError(f"Docs request failed: {e}") from e

        if not response.is_success:
            raise PageFetchError(
                f"Docs request failed ({response.status_code} {response.reason_phrase})",
                status_code=response.status_code,
                reason=response.reason_phrase,
            )

        content_type = response.headers.get("content-type", "")
        if not _PAGE_CONTENT_TYPES.search(content_type):
            raise UnsupportedContentTypeError(content_type)

        return response.text

    async def fetch_optional_text(self, url: str) -> str | None:
        """Fetch a sidecar document; any failure yields None."""
        try:
            response = await self.client.get(url, headers={"Accept": SIDECAR_ACCEPT})
        except httpx.HTTPError as e:
            logger.debug(f"Sidecar {url} unavailable: {e}")
            return None

        if not response.is_success:
            logger.debug(f"Sidecar {url} returned {response.status_code}")
            return None
        if not _SIDECAR_CONTENT_TYPES.search(response.headers.get("content-type", "")):
            return None

        text = response.text
        return text if text.strip() else None

    async def retrieve(
        self,
        url: str,
        query: str = "",
        max_chars: int = 6000,
        max_section_chars: int = 1200,
        max_sentences: int = 5,
    ) -> RetrievalResult:
        """Fetch a page and build a single-excerpt result.

        Args:
            url: Page URL
            query: The user's question (carried through to the result)
            max_chars: Cap for the excerpt and each sidecar document
            max_section_chars: Cap for the Excerpt section snippet
            max_sentences: Sentence budget for the summary

        Returns:
            RetrievalResult with source PAGE and a ``fallback`` payload

        Raises:
            PageFetchError, UnsupportedContentTypeError: Page unreachable
            EmptyPageError: Page reachable but no text could be extracted
        """
        html = await self.fetch_text(url)
        text = strip_html(html)
        if not text:
            raise EmptyPageError(url)

        llms_txt_url, llms_full_txt_url = sidecar_urls(url)
        llms_txt, llms_full_txt = await asyncio.gather(
            self.fetch_optional_text(llms_txt_url),
            self.fetch_optional_text(llms_full_txt_url),
        )

        title = extract_title(html, text)
        summary = summarize(text, max_sentences)
        excerpt = text[:max_chars]

        return RetrievalResult(
            source=ResultSource.PAGE,
            title=title,
            summary=summary,
            sections=[
                RetrievedSection(
                    heading=EXCERPT_HEADING,
                    snippet=truncate_snippet(excerpt, max_section_chars),
                    citation_url=url,
                )
            ],
            citations=[Citation(url=url, title=title)],
            raw=excerpt,
            query=query,
            url=url,
            fallback=PageFallback(
                url=url,
                title=title,
                summary=summary,
                excerpt=excerpt,
                content_length=len(text),
                llms_txt=llms_txt[:max_chars] if llms_txt else None,
                llms_full_txt=llms_full_txt[:max_chars] if llms_full_txt else None,
                llms_txt_url=llms_txt_url,
                llms_full_txt_url=llms_full_txt_url,
            ),
        )
