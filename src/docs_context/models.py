"""Data models for the docs-context retrieval engine.

All models are request-scoped value objects: they are built fresh for each
retrieval call and nothing holds on to them afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class TargetKind(str, Enum):
    """What a reference string points at."""
    GITHUB = "github"
    DOCS = "docs"
    UNKNOWN = "unknown"


class ResultSource(str, Enum):
    """Which retrieval path produced a RetrievalResult."""
    STRUCTURED = "structured"
    PAGE = "page"


class InvocationStatus(str, Enum):
    """States of one invocation: LOADING, then READY or ERROR (terminal)."""
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


# =============================================================================
# Classified references
# =============================================================================


@dataclass(frozen=True)
class ParsedGithubReference:
    """A GitHub reference normalized to owner/repo/ref/path.

    Fields:
        owner: Repository owner (user or organization)
        repo: Repository name without a trailing ``.git``
        ref: Branch, tag or commit SHA (tree/blob/commit URLs only)
        path: Path inside the repository, when the reference encodes one
        canonical_url: ``https://github.com/<owner>/<repo>``
    """
    owner: str
    repo: str
    ref: str | None = None
    path: str | None = None
    canonical_url: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class ParsedDocsReference:
    """A documentation URL split into host/section/page."""
    host: str
    section: str | None = None
    page: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class Classification:
    """Result of classifying a reference string.

    ``data`` is a ParsedGithubReference for GITHUB, a ParsedDocsReference for
    DOCS and None for UNKNOWN.
    """
    kind: TargetKind
    data: ParsedGithubReference | ParsedDocsReference | None = None

    @property
    def github(self) -> ParsedGithubReference | None:
        return self.data if isinstance(self.data, ParsedGithubReference) else None

    @property
    def docs(self) -> ParsedDocsReference | None:
        return self.data if isinstance(self.data, ParsedDocsReference) else None


# =============================================================================
# Structured search service
# =============================================================================


def _number(value: Any) -> float:
    """Coerce a JSON score to a number; missing or null is 0.

    Raises:
        ValueError: If the value is not numeric
    """
    if value is None or value == "":
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"expected a number, got {value!r}")
    return float(value)


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@dataclass
class LibraryCandidate:
    """A library returned by the structured search service."""

    id: str
    name: str | None = None
    description: str | None = None
    total_snippets: int = 0
    trust_score: float = 0.0
    benchmark_score: float = 0.0
    versions: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LibraryCandidate:
        """Create LibraryCandidate from a search-service JSON object.

        Raises:
            ValueError: If a score or the versions list has the wrong type
        """
        versions = data.get("versions") or []
        if not isinstance(versions, list):
            raise ValueError(f"expected a list of versions, got {versions!r}")
        return cls(
            id=str(data["id"]),
            name=_text(data.get("name")) or _text(data.get("title")),
            description=_text(data.get("description")),
            total_snippets=int(_number(data.get("totalSnippets"))),
            trust_score=_number(data.get("trustScore")),
            benchmark_score=_number(data.get("benchmarkScore")),
            versions=[str(v) for v in versions],
        )


@dataclass
class DocSnippet:
    """A pre-chunked documentation snippet from the structured service."""

    title: str | None = None
    content: str | None = None
    source: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocSnippet:
        """Create DocSnippet; non-string fields are treated as absent."""
        return cls(
            title=_text(data.get("title")),
            content=_text(data.get("content")),
            source=_text(data.get("source")),
        )

    @property
    def usable(self) -> bool:
        """True when the snippet carries a title or some content."""
        return bool(self.content or self.title)


@dataclass(frozen=True)
class LibraryMatch:
    """A library was resolved; ``resolved_by`` is "identifier" or "search"."""
    candidate: LibraryCandidate
    resolved_by: str = "search"


@dataclass(frozen=True)
class NoMatch:
    """No library could be resolved."""
    reason: str = ""


LibraryResolution = Union[LibraryMatch, NoMatch]


# =============================================================================
# Retrieval results
# =============================================================================


@dataclass
class RetrievedSection:
    """One titled snippet of retrieved documentation."""
    heading: str
    snippet: str
    citation_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "heading": self.heading,
            "snippet": self.snippet,
            "citation_url": self.citation_url,
        }


@dataclass
class Citation:
    url: str
    title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "url": self.url}


@dataclass
class PageFallback:
    """Deeper context bundled with a page retrieval.

    Fields:
        url: The fetched page
        title: Extracted page title
        summary: Extractive summary of the page text
        excerpt: Leading page text capped at max_chars
        content_length: Length of the full extracted text
        llms_txt: Sidecar ``llms.txt`` body (capped), None when unavailable
        llms_full_txt: Sidecar ``llms-full.txt`` body (capped), None when unavailable
        llms_txt_url: Resolved URL of ``llms.txt``
        llms_full_txt_url: Resolved URL of ``llms-full.txt``
    """
    url: str
    title: str
    summary: str
    excerpt: str
    content_length: int
    llms_txt: str | None
    llms_full_txt: str | None
    llms_txt_url: str
    llms_full_txt_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "summary": self.summary,
            "excerpt": self.excerpt,
            "content_length": self.content_length,
            "llms_txt": self.llms_txt,
            "llms_full_txt": self.llms_full_txt,
            "llms_txt_url": self.llms_txt_url,
            "llms_full_txt_url": self.llms_full_txt_url,
        }


@dataclass
class RetrievalResult:
    """Summarized documentation ready for an agent to ground an answer in.

    ``summary`` is never empty for a successful result, and page results
    always carry at least the synthesized "Excerpt" section.
    """

    source: ResultSource
    title: str
    summary: str
    sections: list[RetrievedSection] = field(default_factory=list)
    citations: list[Citation] = field(default_factory=list)
    raw: str | None = None
    query: str = ""
    url: str | None = None
    library_id: str | None = None
    library_name: str | None = None
    fallback: PageFallback | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "source": self.source.value,
            "title": self.title,
            "summary": self.summary,
            "sections": [s.to_dict() for s in self.sections],
            "citations": [c.to_dict() for c in self.citations],
            "raw": self.raw,
            "query": self.query,
            "url": self.url,
            "library_id": self.library_id,
            "library_name": self.library_name,
            "fallback": self.fallback.to_dict() if self.fallback else None,
        }


# =============================================================================
# GitHub
# =============================================================================


@dataclass(frozen=True)
class RepositoryMetadata:
    """Read-only snapshot of a repository's GitHub metadata."""

    name: str
    full_name: str
    description: str | None
    stars: int
    forks: int
    language: str | None
    created_at: str
    updated_at: str
    homepage: str | None
    default_branch: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RepositoryMetadata:
        """Create RepositoryMetadata from a GitHub ``GET /repos`` payload."""
        return cls(
            name=data["name"],
            full_name=data["full_name"],
            description=data.get("description"),
            stars=data.get("stargazers_count", 0),
            forks=data.get("forks_count", 0),
            language=data.get("language"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
            homepage=data.get("homepage") or None,
            default_branch=data.get("default_branch", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "full_name": self.full_name,
            "description": self.description,
            "stars": self.stars,
            "forks": self.forks,
            "language": self.language,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "homepage": self.homepage,
            "default_branch": self.default_branch,
        }


@dataclass(frozen=True)
class TrendingRepository:
    id: int
    full_name: str
    html_url: str
    description: str | None
    language: str | None
    stars: int
    forks: int

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> TrendingRepository:
        return cls(
            id=data["id"],
            full_name=data["full_name"],
            html_url=data["html_url"],
            description=data.get("description"),
            language=data.get("language"),
            stars=data.get("stargazers_count", 0),
            forks=data.get("forks_count", 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "html_url": self.html_url,
            "description": self.description,
            "language": self.language,
            "stars": self.stars,
            "forks": self.forks,
        }


@dataclass
class TrendingListing:
    """Repositories created since ``date``, most-starred first."""
    date: str
    query: str
    repos: list[TrendingRepository] = field(default_factory=list)
    note: str = ""

    @property
    def count(self) -> int:
        return len(self.repos)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "query": self.query,
            "count": self.count,
            "repos": [r.to_dict() for r in self.repos],
            "note": self.note,
        }


# =============================================================================
# Invocation protocol
# =============================================================================


@dataclass(frozen=True)
class InvocationState:
    """One state emitted by a retrieval invocation.

    A docs invocation ends in READY with ``docs`` set, a GitHub invocation
    ends in READY with ``github`` set (possibly None), and either can end in
    ERROR with a short human-readable ``error``.
    """

    state: InvocationStatus
    docs: RetrievalResult | None = None
    github: RepositoryMetadata | None = None
    error: str | None = None

    @classmethod
    def loading(cls) -> InvocationState:
        return cls(state=InvocationStatus.LOADING)

    @classmethod
    def ready_docs(cls, result: RetrievalResult) -> InvocationState:
        return cls(state=InvocationStatus.READY, docs=result)

    @classmethod
    def ready_github(cls, metadata: RepositoryMetadata | None) -> InvocationState:
        return cls(state=InvocationStatus.READY, github=metadata)

    @classmethod
    def failed(cls, message: str) -> InvocationState:
        return cls(state=InvocationStatus.ERROR, error=message)

    @property
    def terminal(self) -> bool:
        return self.state is not InvocationStatus.LOADING

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {"state": self.state.value}
        if self.docs is not None:
            data["docs"] = self.docs.to_dict()
        if self.state is InvocationStatus.READY and self.docs is None:
            data["github"] = self.github.to_dict() if self.github else None
        if self.error is not None:
            data["error"] = self.error
        return data
