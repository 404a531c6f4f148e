"""Exceptions raised by the docs-context retrieval engine."""

from __future__ import annotations


class DocsContextError(Exception):
    """Base class for all docs-context errors."""


class StructuredServiceError(DocsContextError):
    """The structured search service failed (transport, status or JSON).

    The orchestrator absorbs this and falls back to page retrieval.
    """


class RetrievalError(DocsContextError):
    """A docs invocation cannot produce a result."""


class MissingInputError(RetrievalError):
    """Neither a resolvable library nor a URL was supplied."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message or "No library could be resolved and no URL was provided."
        )


class PageFetchError(RetrievalError):
    """The page could not be fetched (bad status, timeout, transport)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reason: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class UnsupportedContentTypeError(RetrievalError):
    """The page responded with something other than HTML or plain text."""

    def __init__(self, content_type: str):
        super().__init__(
            f"Unsupported content type ({content_type or 'unknown'}). Expected HTML."
        )
        self.content_type = content_type


class EmptyPageError(RetrievalError):
    """The page was fetched but contained no readable text."""

    def __init__(self, url: str):
        super().__init__("No readable text was found on the page.")
        self.url = url


class GitHubError(DocsContextError):
    """The GitHub API could not be reached."""


class RateLimitExceededError(GitHubError):
    """GitHub search quota is exhausted."""

    def __init__(self, retry_after_seconds: int):
        super().__init__(
            f"GitHub rate limit exceeded. Retry after {retry_after_seconds}s."
        )
        self.retry_after_seconds = retry_after_seconds


class RequestValidationError(DocsContextError):
    """A docs request failed schema validation."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors) or "Invalid request")
        self.errors = errors
