"""GitHub API client for repository metadata and trending listings."""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timezone

import httpx

from .errors import GitHubError, RateLimitExceededError
from .models import RepositoryMetadata, TrendingListing, TrendingRepository

logger = logging.getLogger(__name__)

# Constants
GITHUB_API_BASE = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0
TRENDING_PER_PAGE_DEFAULT = 10
TRENDING_PER_PAGE_MAX = 25
TRENDING_NOTE = "Trending today uses GitHub search: repos created today, sorted by stars."
RATE_LIMIT_FALLBACK_SECONDS = 60


def today_utc() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def clamp_per_page(per_page: int | None) -> int:
    if per_page is None:
        return TRENDING_PER_PAGE_DEFAULT
    return min(max(int(per_page), 1), TRENDING_PER_PAGE_MAX)


class GitHubClient:
    """Client for the GitHub REST API.

    Repository lookups are read-only snapshots; nothing is cached between
    calls. A missing or inaccessible repository is reported as None rather
    than an error, since a private, deleted or misspelled repository is a
    normal thing for a user to ask about.
    """

    def __init__(
        self,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize GitHub client.

        Args:
            token: GitHub personal access token (or from GITHUB_TOKEN env var)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.token = token if token is not None else os.environ.get("GITHUB_TOKEN", "")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Build request headers."""
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def __aenter__(self) -> GitHubClient:
        """Async context manager entry."""
        _ = self.client
        return self

    async def __aexit__(self, *args) -> None:
        """Async context manager exit."""
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
                base_url=GITHUB_API_BASE,
                headers=self.headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def _get(self, url: str, params: dict[str, str | int] | None = None) -> httpx.Response:
        try:
            return await self.client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise GitHubError(f"GitHub request timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise GitHubError(f"GitHub request failed: {e}") from e

    async def get_repository(self, owner: str, repo: str) -> RepositoryMetadata | None:
        """Fetch repository metadata.

        Args:
            owner: Repository owner (username or organization)
            repo: Repository name

        Returns:
            RepositoryMetadata, or None if the repository was not found,
            is not accessible, or owner/repo are empty

        Raises:
            GitHubError: If the API could not be reached
        """
        if not owner or not repo:
            logger.warning(f"Invalid owner or repo name: {owner!r}/{repo!r}")
            return None

        response = await self._get(f"/repos/{owner}/{repo}")

        if response.status_code == 404:
            logger.warning(f"Repository not found: {owner}/{repo}")
            return None
        if response.status_code != 200:
            logger.error(
                f"GitHub API error for {owner}/{repo}: "
                f"{response.status_code} {response.reason_phrase}"
            )
            return None

        try:
            return RepositoryMetadata.from_api(response.json())
        except (ValueError, KeyError) as e:
            logger.error(f"Unexpected repository payload for {owner}/{repo}: {e}")
            return None

    async def search_trending(
        self,
        date: str | None = None,
        per_page: int | None = TRENDING_PER_PAGE_DEFAULT,
    ) -> TrendingListing:
        """List repositories created on or after ``date``, most-starred first.

        Args:
            date: ``YYYY-MM-DD`` (defaults to today, UTC)
            per_page: Number of repositories, clamped to 1..25

        Returns:
            TrendingListing

        Raises:
            RateLimitExceededError: If the search quota is exhausted
            GitHubError: If the API could not be reached or returned an error
        """
        date = (date or "").strip() or today_utc()
        query = f"created:>={date}"

        response = await self._get(
            "/search/repositories",
            params={
                "q": query,
                "sort": "stars",
                "order": "desc",
                "per_page": clamp_per_page(per_page),
            },
        )

        remaining = response.headers.get("X-RateLimit-Remaining")
        if (remaining is not None and remaining.isdigit() and int(remaining) <= 0) or (
            response.status_code == 429
        ):
            raise RateLimitExceededError(self._retry_after(response))

        if not response.is_success:
            raise GitHubError(
                f"Failed to load trending repositories ({response.status_code} {response.reason_phrase})"
            )

        try:
            items = response.json().get("items") or []
            repos = [TrendingRepository.from_api(item) for item in items]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise GitHubError(f"GitHub returned an unexpected trending payload: {e}") from e

        return TrendingListing(date=date, query=query, repos=repos, note=TRENDING_NOTE)

    @staticmethod
    def _retry_after(response: httpx.Response) -> int:
        reset = response.headers.get("X-RateLimit-Reset", "")
        if reset.isdigit() and int(reset) > 0:
            return max(1, int(reset) - int(time.time()))
        return RATE_LIMIT_FALLBACK_SECONDS

    @staticmethod
    def get_html_url(owner: str, repo: str, ref: str | None = None, path: str | None = None) -> str:
        """Get the web URL for a repository, optionally at a ref/path."""
        url = f"https://github.com/{owner}/{repo}"
        if ref:
            url += f"/tree/{ref}"
            if path:
                url += f"/{path}"
        return url
