"""Runtime configuration for docs-context.

Credentials and tunables come from the environment (optionally a ``.env``
file) and are read once, when ``Settings.from_env()`` is called at startup.

Environment Variables:
    CONTEXT7_API_KEY: Bearer credential for the structured search service (optional)
    CONTEXT7_BASE_URL: Structured search service base URL
    GITHUB_TOKEN: GitHub personal access token (optional)
    DOCS_CONTEXT_TIMEOUT: Per-request timeout in seconds (default: 10)
    DOCS_CONTEXT_TRUST_WEIGHT: Library ranking weight for trust score (default: 5)
    DOCS_CONTEXT_BENCHMARK_WEIGHT: Library ranking weight for benchmark score (default: 3)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Constants
CONTEXT7_BASE_URL = "https://context7.com/api/v2"
GITHUB_API_BASE = "https://api.github.com"
DEFAULT_TIMEOUT = 10.0
DEFAULT_TRUST_WEIGHT = 5.0
DEFAULT_BENCHMARK_WEIGHT = 3.0

DOCUMENTATION_PRESETS: list[tuple[str, str]] = [
    ("OpenClaw", "https://docs.openclaw.ai"),
    ("OpenAI", "https://platform.openai.com/docs"),
    ("Anthropic", "https://docs.anthropic.com"),
    ("Google Gemini", "https://ai.google.dev/docs"),
    ("Microsoft Copilot", "https://docs.microsoft.com/en-us/copilot/"),
    ("Perplexity", "https://docs.perplexity.ai"),
    ("xAI Grok", "https://docs.x.ai"),
    ("Mistral", "https://docs.mistral.ai"),
    ("Poe", "https://developer.poe.com/docs"),
    ("Vercel AI", "https://vercel.com/docs"),
]


@dataclass(frozen=True)
class RankingWeights:
    """Weights for library ranking.

    score = total_snippets + trust_score * trust + benchmark_score * benchmark
    """
    trust: float = DEFAULT_TRUST_WEIGHT
    benchmark: float = DEFAULT_BENCHMARK_WEIGHT


@dataclass(frozen=True)
class Settings:
    """Configuration shared by all clients of one engine."""

    context7_api_key: str = ""
    context7_base_url: str = CONTEXT7_BASE_URL
    github_token: str = ""
    timeout: float = DEFAULT_TIMEOUT
    weights: RankingWeights = field(default_factory=RankingWeights)

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from environment variables (and ``.env``)."""
        load_dotenv()

        return cls(
            context7_api_key=os.getenv("CONTEXT7_API_KEY", "").strip(),
            context7_base_url=os.getenv("CONTEXT7_BASE_URL", CONTEXT7_BASE_URL).rstrip("/"),
            github_token=os.getenv("GITHUB_TOKEN", "").strip(),
            timeout=float(os.getenv("DOCS_CONTEXT_TIMEOUT", str(DEFAULT_TIMEOUT))),
            weights=RankingWeights(
                trust=float(os.getenv("DOCS_CONTEXT_TRUST_WEIGHT", str(DEFAULT_TRUST_WEIGHT))),
                benchmark=float(
                    os.getenv("DOCS_CONTEXT_BENCHMARK_WEIGHT", str(DEFAULT_BENCHMARK_WEIGHT))
                ),
            ),
        )
