"""docs-context - grounding context for documentation sites and GitHub repositories."""

from .classifier import classify, route_conversation
from .config import RankingWeights, Settings
from .engine import RetrievalEngine, final_state
from .models import (
    InvocationState,
    InvocationStatus,
    RepositoryMetadata,
    RetrievalResult,
    TargetKind,
)
from .schemas import DocsRequest

__all__ = [
    "RetrievalEngine",
    "final_state",
    "classify",
    "route_conversation",
    "DocsRequest",
    "Settings",
    "RankingWeights",
    "InvocationState",
    "InvocationStatus",
    "RepositoryMetadata",
    "RetrievalResult",
    "TargetKind",
]
