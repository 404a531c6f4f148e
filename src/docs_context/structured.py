"""Structured content retrieval: snippets from the search service to a result."""

from __future__ import annotations

import logging

from .context7_client import Context7Client
from .models import Citation, DocSnippet, ResultSource, RetrievalResult, RetrievedSection
from .text import summarize, truncate_snippet

logger = logging.getLogger(__name__)

DEFAULT_HEADING = "Documentation"


def build_sections(snippets: list[DocSnippet], max_section_chars: int) -> list[RetrievedSection]:
    return [
        RetrievedSection(
            heading=(snippet.title or DEFAULT_HEADING).strip() or DEFAULT_HEADING,
            snippet=truncate_snippet(snippet.content or "", max_section_chars),
            citation_url=(snippet.source or "").strip() or None,
        )
        for snippet in snippets
    ]


def collect_citations(snippets: list[DocSnippet]) -> list[Citation]:
    """Distinct non-empty source URLs, in order of first appearance."""
    seen: dict[str, None] = {}
    for snippet in snippets:
        source = (snippet.source or "").strip()
        if source:
            seen.setdefault(source, None)
    return [Citation(url=url) for url in seen]


def assemble_structured_result(
    snippets: list[DocSnippet],
    query: str,
    max_section_chars: int,
    max_sentences: int,
    library_id: str | None = None,
    library_name: str | None = None,
) -> RetrievalResult | None:
    """Turn snippets into a RetrievalResult, or None if nothing is usable.

    The summary is taken across the concatenated content of all snippets,
    not per snippet.
    """
    usable = [snippet for snippet in snippets if snippet.usable]
    if not usable:
        return None

    sections = build_sections(usable, max_section_chars)
    summary = summarize(" ".join(s.content or "" for s in usable), max_sentences)
    if not summary or not sections:
        return None

    return RetrievalResult(
        source=ResultSource.STRUCTURED,
        title=library_name or sections[0].heading or DEFAULT_HEADING,
        summary=summary,
        sections=sections,
        citations=collect_citations(usable),
        query=query,
        library_id=library_id,
        library_name=library_name,
    )


async def retrieve_structured(
    client: Context7Client,
    library_id: str,
    query: str,
    max_section_chars: int,
    max_sentences: int,
    library_name: str | None = None,
) -> RetrievalResult | None:
    """Fetch snippets for a resolved library and assemble a result.

    Returns:
        RetrievalResult with source STRUCTURED, or None when the service had
        nothing usable (the caller then falls back to page retrieval)

    Raises:
        StructuredServiceError: On transport or decoding failures
    """
    snippets = await client.get_context(library_id, query)
    if not snippets:
        logger.info(f"No snippets for {library_id} (query {query!r})")
        return None

    return assemble_structured_result(
        snippets,
        query=query,
        max_section_chars=max_section_chars,
        max_sentences=max_sentences,
        library_id=library_id,
        library_name=library_name,
    )
