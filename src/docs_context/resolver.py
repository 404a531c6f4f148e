"""Library resolution and ranking against the structured search service."""

from __future__ import annotations

import logging
import re

from .config import RankingWeights
from .context7_client import Context7Client
from .models import LibraryCandidate, LibraryMatch, LibraryResolution, NoMatch

logger = logging.getLogger(__name__)

_LIBRARY_ID_RE = re.compile(r"^/[\w.-]+/[\w.-]+(?:/[\w.-]+)?$")


def is_library_id(value: str | None) -> bool:
    """True for well-formed identifiers like ``/vercel/next.js`` or ``/org/repo/v1``."""
    if not value:
        return False
    return bool(_LIBRARY_ID_RE.match(value.strip()))


def score_library(candidate: LibraryCandidate, weights: RankingWeights | None = None) -> float:
    """Ranking score: total_snippets + trust*w_trust + benchmark*w_benchmark.

    A candidate with zero snippets still competes on trust and benchmark.
    """
    weights = weights or RankingWeights()
    return (
        candidate.total_snippets
        + candidate.trust_score * weights.trust
        + candidate.benchmark_score * weights.benchmark
    )


def rank_libraries(
    candidates: list[LibraryCandidate],
    weights: RankingWeights | None = None,
) -> list[LibraryCandidate]:
    """Sort candidates best first; equal scores keep their input order."""
    return sorted(candidates, key=lambda c: score_library(c, weights), reverse=True)


async def resolve_library(
    client: Context7Client,
    name_or_query: str,
    query: str,
    weights: RankingWeights | None = None,
) -> LibraryResolution:
    """Resolve a library name (or identifier) to a single library.

    Well-formed identifiers skip the search entirely. Otherwise the service
    is searched and the best-scoring candidate wins.

    Args:
        client: Structured search client
        name_or_query: Library name or ``/owner/library`` identifier
        query: The user's question
        weights: Ranking weights (defaults to 5x trust, 3x benchmark)

    Returns:
        LibraryMatch, or NoMatch when the search came back empty

    Raises:
        StructuredServiceError: On transport or decoding failures
    """
    name = (name_or_query or "").strip()
    if is_library_id(name):
        return LibraryMatch(candidate=LibraryCandidate(id=name), resolved_by="identifier")
    if not name:
        return NoMatch(reason="no library name given")

    candidates = await client.search_libraries(name, query)
    if not candidates:
        return NoMatch(reason=f"no libraries matched {name!r}")

    best = rank_libraries(candidates, weights)[0]
    logger.info(
        f"Resolved {name!r} to {best.id} "
        f"(score {score_library(best, weights):.1f} of {len(candidates)} candidates)"
    )
    return LibraryMatch(candidate=best)
