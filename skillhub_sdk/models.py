"""Wire shapes for the SkillHub API.

Response records are built from decoded JSON with `from_dict`. Keys the
service always sends are required; everything it may leave out is
`None` when absent. Unknown keys are ignored.
"""

from dataclasses import MISSING, asdict, dataclass, fields
from typing import Literal

CatalogSort = Literal["score", "stars", "recent", "composite"]
CatalogStatus = Literal["published", "all"]
SortOrder = Literal["asc", "desc"]
SearchMethod = Literal["embedding", "fulltext", "hybrid"]
InstallFormat = Literal["json", "raw", "sh", "ps1"]
SelectorType = Literal["random", "top_score", "embedding", "mmr", "category_balanced"]

UNCATEGORIZED = "Uncategorized"


def _build(cls, data: dict, **nested):
    """Instantiate dataclass `cls` from `data`.

    Fields without a default must be present in `data` (KeyError otherwise);
    fields with a default fall back to None. `nested` supplies already
    converted values for fields holding other records.
    """
    kwargs = {}
    for f in fields(cls):
        if f.name in nested:
            kwargs[f.name] = nested[f.name]
        elif f.default is MISSING and f.default_factory is MISSING:
            kwargs[f.name] = data[f.name]
        else:
            kwargs[f.name] = data.get(f.name)
    return cls(**kwargs)


def _drop_none(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


# ---------------------------------------------------------------------------
# Common
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PaginationMeta:
    total: int
    limit: int
    offset: int
    has_more: bool

    @classmethod
    def from_dict(cls, data: dict) -> "PaginationMeta":
        return _build(cls, data)


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Skill:
    """A skill as listed by catalog, favorites and popularity endpoints."""

    id: str
    name: str
    slug: str
    author: str
    repo_url: str
    description: str | None = None
    description_zh: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    simple_score: float | None = None
    simple_rating: str | None = None  # A-E
    composite_score: float | None = None
    github_stars: int | None = None
    github_forks: int | None = None
    last_commit_at: str | None = None
    skill_md_raw: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Skill":
        return _build(cls, data)


@dataclass(frozen=True)
class SkillDetailSkill(Skill):
    readme_raw: str | None = None
    base_repo_url: str | None = None
    skill_path: str | None = None


@dataclass(frozen=True)
class SkillEvaluation:
    overall_score: float | None = None
    overall_rating: str | None = None  # S, A-D
    instruction_clarity: float | None = None
    practicality: float | None = None
    output_quality: float | None = None
    maintainability: float | None = None
    innovation: float | None = None
    security: float | None = None
    summary: str | None = None
    summary_zh: str | None = None
    pros: list[str] | None = None
    pros_zh: list[str] | None = None
    cons: list[str] | None = None
    cons_zh: list[str] | None = None
    target_audience: str | None = None
    target_audience_zh: str | None = None
    flow_data: object | None = None
    potential_output: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "SkillEvaluation":
        return _build(cls, data)


@dataclass(frozen=True)
class SkillVersionSummary:
    version_number: int
    mutation_type: str
    is_active: bool
    created_at: str

    @classmethod
    def from_dict(cls, data: dict) -> "SkillVersionSummary":
        return _build(cls, data)


@dataclass(frozen=True)
class TokenStats:
    skill_md_tokens: int
    total_tokens: int
    readme_tokens: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "TokenStats":
        return _build(cls, data)


@dataclass(frozen=True)
class SkillDetail:
    skill: SkillDetailSkill
    token_stats: TokenStats
    evaluation: SkillEvaluation | None = None
    versions: list[SkillVersionSummary] | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "SkillDetail":
        evaluation = data.get("evaluation")
        versions = data.get("versions")
        return _build(
            cls,
            data,
            skill=SkillDetailSkill.from_dict(data["skill"]),
            token_stats=TokenStats.from_dict(data["token_stats"]),
            evaluation=SkillEvaluation.from_dict(evaluation) if evaluation is not None else None,
            versions=[SkillVersionSummary.from_dict(v) for v in versions] if versions is not None else None,
        )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@dataclass
class CatalogQuery:
    """Filters for GET /skills/catalog."""

    category: str | None = None
    tags: list[str] | None = None
    min_score: float | None = None
    min_stars: int | None = None
    status: CatalogStatus | None = None
    sort: CatalogSort | None = None
    order: SortOrder | None = None
    limit: int | None = None
    offset: int | None = None
    include_content: bool = False
    include_evaluation: bool = False

    def to_params(self) -> dict[str, str]:
        """Encode the query as query-string parameters.

        A key is present only when its field was given: strings and tag lists
        must be non-empty, numbers non-None (zero counts), flags True.
        """
        params: dict[str, str] = {}
        if self.category:
            params["category"] = self.category
        if self.tags:
            params["tags"] = ",".join(self.tags)
        if self.min_score is not None:
            params["min_score"] = str(self.min_score)
        if self.min_stars is not None:
            params["min_stars"] = str(self.min_stars)
        if self.status:
            params["status"] = self.status
        if self.sort:
            params["sort"] = self.sort
        if self.order:
            params["order"] = self.order
        if self.limit is not None:
            params["limit"] = str(self.limit)
        if self.offset is not None:
            params["offset"] = str(self.offset)
        if self.include_content:
            params["include_content"] = "true"
        if self.include_evaluation:
            params["include_evaluation"] = "true"
        return params


@dataclass(frozen=True)
class CatalogResponse:
    skills: list[Skill]
    pagination: PaginationMeta

    @classmethod
    def from_dict(cls, data: dict) -> "CatalogResponse":
        return cls(
            skills=[Skill.from_dict(s) for s in data["skills"]],
            pagination=PaginationMeta.from_dict(data["pagination"]),
        )


@dataclass(frozen=True)
class Category:
    name: str
    count: int


def count_categories(skills: list[Skill]) -> list[Category]:
    """Aggregate skills into per-category counts, largest first.

    Skills without a category land in the "Uncategorized" bucket. Ties keep
    the order in which categories were first seen.
    """
    counts: dict[str, int] = {}
    for skill in skills:
        name = skill.category or UNCATEGORIZED
        counts[name] = counts.get(name, 0) + 1
    categories = [Category(name=name, count=count) for name, count in counts.items()]
    categories.sort(key=lambda c: c.count, reverse=True)
    return categories


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@dataclass
class SearchRequest:
    query: str
    limit: int | None = None
    method: SearchMethod | None = None
    mmr: bool | None = None
    mmr_lambda: float | None = None
    category: str | None = None
    min_score: float | None = None
    exclude_ids: list[str] | None = None
    include_content: bool | None = None

    def to_dict(self) -> dict:
        """JSON body with unset options left out."""
        return _drop_none(asdict(self))


@dataclass(frozen=True)
class SearchResult:
    id: str
    name: str
    slug: str
    similarity_score: float
    description: str | None = None
    description_zh: str | None = None
    category: str | None = None
    simple_score: float | None = None
    match_reason: str | None = None
    skill_md_raw: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "SearchResult":
        return _build(cls, data)


@dataclass(frozen=True)
class SearchMeta:
    method_used: str
    search_latency_ms: float
    query_embedding_tokens: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "SearchMeta":
        return _build(cls, data)


@dataclass(frozen=True)
class SearchResponse:
    results: list[SearchResult]
    meta: SearchMeta

    @classmethod
    def from_dict(cls, data: dict) -> "SearchResponse":
        return cls(
            results=[SearchResult.from_dict(r) for r in data["results"]],
            meta=SearchMeta.from_dict(data["meta"]),
        )


# ---------------------------------------------------------------------------
# Install
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InstallSkill:
    id: str
    slug: str
    name: str
    repo_url: str
    skill_path: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "InstallSkill":
        return _build(cls, data)


@dataclass(frozen=True)
class InstallAgentInfo:
    id: str
    name: str
    unix_path: str
    windows_path: str

    @classmethod
    def from_dict(cls, data: dict) -> "InstallAgentInfo":
        return _build(cls, data)


@dataclass(frozen=True)
class InstallBundle:
    agents: list[InstallAgentInfo]
    content: str
    content_url: str

    @classmethod
    def from_dict(cls, data: dict) -> "InstallBundle":
        return _build(cls, data, agents=[InstallAgentInfo.from_dict(a) for a in data["agents"]])


@dataclass(frozen=True)
class InstallScripts:
    bash: str
    powershell: str

    @classmethod
    def from_dict(cls, data: dict) -> "InstallScripts":
        return _build(cls, data)


@dataclass(frozen=True)
class OneLiners:
    unix: str
    windows: str

    @classmethod
    def from_dict(cls, data: dict) -> "OneLiners":
        return _build(cls, data)


@dataclass(frozen=True)
class InstallInfo:
    skill: InstallSkill
    install: InstallBundle
    scripts: InstallScripts
    one_liners: OneLiners

    @classmethod
    def from_dict(cls, data: dict) -> "InstallInfo":
        return cls(
            skill=InstallSkill.from_dict(data["skill"]),
            install=InstallBundle.from_dict(data["install"]),
            scripts=InstallScripts.from_dict(data["scripts"]),
            one_liners=OneLiners.from_dict(data["one_liners"]),
        )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class User:
    id: str
    tier: Literal["free", "pro"]
    email: str | None = None
    name: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return _build(cls, data)


@dataclass(frozen=True)
class UserFavorite:
    skill_id: str
    created_at: str

    @classmethod
    def from_dict(cls, data: dict) -> "UserFavorite":
        return _build(cls, data)


# ---------------------------------------------------------------------------
# Pack builder
# ---------------------------------------------------------------------------


@dataclass
class PackSelectorConfig:
    query: str | None = None
    mmr_lambda: float | None = None
    category_weights: dict[str, float] | None = None
    score_threshold: float | None = None


@dataclass
class PackBuildRequest:
    selector: SelectorType
    selector_config: PackSelectorConfig | None = None
    max_count: int | None = None
    max_tokens: int | None = None
    task_type: str | None = None
    required_tags: list[str] | None = None
    avoid_ids: list[str] | None = None
    dedup_by_repo: bool | None = None
    include_reasons: bool | None = None

    def to_dict(self) -> dict:
        body = _drop_none(asdict(self))
        if self.selector_config is not None:
            body["selector_config"] = _drop_none(asdict(self.selector_config))
        return body


@dataclass(frozen=True)
class PackSkill:
    id: str
    name: str
    slug: str
    version: int
    token_count: int
    selection_reason: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "PackSkill":
        return _build(cls, data)


@dataclass(frozen=True)
class Pack:
    id: str
    skills: list[PackSkill]
    total_skills: int
    total_tokens: int

    @classmethod
    def from_dict(cls, data: dict) -> "Pack":
        return _build(cls, data, skills=[PackSkill.from_dict(s) for s in data["skills"]])


@dataclass(frozen=True)
class PackBuildMeta:
    selector_used: str
    candidates_considered: int
    candidates_filtered: int
    build_latency_ms: float

    @classmethod
    def from_dict(cls, data: dict) -> "PackBuildMeta":
        return _build(cls, data)


@dataclass(frozen=True)
class PackBuildResponse:
    pack: Pack
    meta: PackBuildMeta
    warnings: list[str] | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "PackBuildResponse":
        return _build(
            cls,
            data,
            pack=Pack.from_dict(data["pack"]),
            meta=PackBuildMeta.from_dict(data["meta"]),
        )
