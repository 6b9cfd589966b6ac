"""Pydantic models for the analysis result and API responses."""

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class RepositorySummary(_Frozen):
    name: str = ""
    description: str | None = None
    url: str = ""
    stars: int = 0
    forks: int = 0
    open_issues: int = 0
    watchers: int = 0
    license: str = "None"
    created: str = ""
    updated: str = ""
    homepage: str | None = None
    default_branch: str = ""
    size: int = 0  # KiB, as reported by GitHub
    is_private: bool = False


class LanguageShare(_Frozen):
    bytes: int
    percentage: float


class CommitRecord(_Frozen):
    sha: str = ""
    message: str = ""
    author: str = "Unknown"
    date: str = ""


class ContributorRecord(_Frozen):
    login: str = ""
    avatar: str = ""
    contributions: int = 0
    url: str = ""


class IssueTally(_Frozen):
    open: int = 0
    closed: int = 0
    total: int = 0
    close_rate: float = 0.0
    close_rate_label: str = "0.0%"


class ReleaseRecord(_Frozen):
    name: str = ""
    date: str | None = None
    url: str = ""
    prerelease: bool = False


class RepositoryAge(_Frozen):
    days: int
    months: int
    years: int
    display: str


class CommitPatterns(_Frozen):
    patterns: list[str] = Field(default_factory=list)
    types: dict[str, int] = Field(default_factory=dict)
    total_commits: int = 0


class ActivityStats(_Frozen):
    score: int
    days_since_last_update: int
    commit_frequency: str
    commit_patterns: CommitPatterns


class PopularityStats(_Frozen):
    score: float
    stars: int
    forks: int
    watchers: int


class HealthStats(_Frozen):
    score: int
    issue_close_rate: str
    contributor_count: int


class RepositoryStats(_Frozen):
    age: RepositoryAge
    activity: ActivityStats
    popularity: PopularityStats
    health: HealthStats


class CodeFrequencySummary(_Frozen):
    weeks: int = 0
    additions: int = 0
    deletions: int = 0


class Insight(_Frozen):
    main: str
    details: list[str]


class InsightBundle(_Frozen):
    technical: Insight
    business: Insight
    general: Insight


class LanguageProfile(_Frozen):
    complexity: str
    is_modern: bool
    is_web_project: bool
    language_count: int


class Maturity(_Frozen):
    score: int
    level: str


class QualityAssessment(_Frozen):
    score: int
    level: str
    factors: list[str]


class Recommendation(_Frozen):
    type: str
    priority: str
    title: str
    description: str
    action: str


class Risk(_Frozen):
    type: str
    level: str
    description: str
    impact: str


class Assessment(_Frozen):
    language_profile: LanguageProfile
    maturity: Maturity
    quality: QualityAssessment
    recommendations: list[Recommendation]
    risks: list[Risk]


class AnalysisResult(_Frozen):
    repo: RepositorySummary
    stats: RepositoryStats
    languages: dict[str, LanguageShare]
    commits: list[CommitRecord]
    contributors: list[ContributorRecord]
    issues: IssueTally
    releases: list[ReleaseRecord]
    code_frequency: CodeFrequencySummary
    insights: InsightBundle
    assessment: Assessment


class DependenciesResponse(BaseModel):
    manifest: str
    dependencies: dict[str, str]


class HealthResponse(BaseModel):
    status: str
    version: str
