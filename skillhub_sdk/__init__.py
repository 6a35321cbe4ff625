"""Async client for the SkillHub skill catalog API.

Wraps search, catalog browsing, skill detail, install info and favorites
with typed responses, bearer-token auth, per-call timeouts and
cancellation, and a single error type (SkillHubError).
"""

from .agents import SUPPORTED_AGENTS, Agent, AgentId, get_agent
from .cancellation import CancellationToken
from .cli import main
from .client import RequestOptions, SkillHubClient, create_client
from .errors import SkillHubError
from .models import (
    CatalogQuery,
    CatalogResponse,
    Category,
    InstallInfo,
    PackBuildRequest,
    PackBuildResponse,
    PaginationMeta,
    SearchRequest,
    SearchResponse,
    SearchResult,
    Skill,
    SkillDetail,
    SkillEvaluation,
    User,
    UserFavorite,
)

__all__ = [
    "main",
    "SkillHubClient",
    "SkillHubError",
    "RequestOptions",
    "CancellationToken",
    "create_client",
    "SUPPORTED_AGENTS",
    "Agent",
    "AgentId",
    "get_agent",
    "CatalogQuery",
    "CatalogResponse",
    "Category",
    "InstallInfo",
    "PackBuildRequest",
    "PackBuildResponse",
    "PaginationMeta",
    "SearchRequest",
    "SearchResponse",
    "SearchResult",
    "Skill",
    "SkillDetail",
    "SkillEvaluation",
    "User",
    "UserFavorite",
]

if __name__ == "__main__":
    main()
