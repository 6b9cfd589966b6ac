"""Maturity, quality, recommendation and risk heuristics over an analysis."""

from datetime import datetime, timedelta

from formatter import days_between, parse_timestamp
from models import (
    Assessment,
    CommitRecord,
    ContributorRecord,
    IssueTally,
    LanguageProfile,
    Maturity,
    QualityAssessment,
    Recommendation,
    ReleaseRecord,
    RepositoryStats,
    RepositorySummary,
    Risk,
)

COMPLEX_LANGUAGES = {"C++", "Rust", "Assembly", "Haskell"}
MODERN_LANGUAGES = {"TypeScript", "Go", "Kotlin", "Swift"}
WEB_LANGUAGES = {"JavaScript", "HTML", "CSS", "PHP"}

_DESCRIPTIVE_WORDS = ("fix", "add", "update")


def language_profile(languages: dict) -> LanguageProfile:
    names = set(languages)
    return LanguageProfile(
        complexity="High" if names & COMPLEX_LANGUAGES else "Medium",
        is_modern=bool(names & MODERN_LANGUAGES),
        is_web_project=bool(names & WEB_LANGUAGES),
        language_count=len(names),
    )


def project_maturity(repo: RepositorySummary, commits: list[CommitRecord],
                     releases: list[ReleaseRecord], now: datetime) -> Maturity:
    """Age (0-30) + releases (0-25) + commit rate over the last 30 days (0-25) + stars (0-20)."""
    created = parse_timestamp(repo.created) or now
    age_days = max(0, days_between(created, now))
    commits_per_day = len(commits) / max(1, min(age_days, 30))

    score = 0
    if age_days > 365:
        score += 30
    elif age_days > 180:
        score += 20
    elif age_days > 30:
        score += 10

    if len(releases) > 10:
        score += 25
    elif len(releases) > 5:
        score += 20
    elif len(releases) > 0:
        score += 15

    if commits_per_day > 1:
        score += 25
    elif commits_per_day > 0.5:
        score += 20
    elif commits_per_day > 0.1:
        score += 15
    elif commits_per_day > 0:
        score += 10

    if repo.stars > 1000:
        score += 20
    elif repo.stars > 100:
        score += 15
    elif repo.stars > 10:
        score += 10
    elif repo.stars > 0:
        score += 5

    score = min(100, score)
    level = "Mature" if score > 80 else "Developing" if score > 50 else "Early"
    return Maturity(score=score, level=level)


def code_quality(repo: RepositorySummary, languages: dict,
                 commits: list[CommitRecord], now: datetime) -> QualityAssessment:
    score = 0
    factors = []

    if repo.description and len(repo.description) > 20:
        score += 15
        factors.append("Good documentation")

    if repo.license != "None":
        score += 10
        factors.append("Has license")

    if 2 <= len(languages) <= 5:
        score += 15
        factors.append("Good language balance")

    if any(len(c.message) > 10 and any(w in c.message.lower() for w in _DESCRIPTIVE_WORDS) for c in commits):
        score += 20
        factors.append("Descriptive commits")

    week_ago = now - timedelta(days=7)
    if any((parse_timestamp(c.date) or now) > week_ago for c in commits):
        score += 20
        factors.append("Recent activity")

    size_mb = repo.size / 1024
    if 1 < size_mb < 500:
        score += 20
        factors.append("Appropriate size")

    score = min(100, score)
    level = "High" if score > 80 else "Medium" if score > 50 else "Low"
    return QualityAssessment(score=score, level=level, factors=factors)


def recommendations(repo: RepositorySummary, stats: RepositoryStats, languages: dict,
                    issues: IssueTally, releases: list[ReleaseRecord]) -> list[Recommendation]:
    recs = []

    if stats.activity.score < 50:
        recs.append(Recommendation(
            type="activity", priority="high",
            title="Increase Repository Activity",
            description="The repository has low recent activity. Consider regular commits and updates.",
            action="Make regular commits and keep the project updated",
        ))

    if not repo.description or len(repo.description) < 20:
        recs.append(Recommendation(
            type="documentation", priority="medium",
            title="Improve Repository Description",
            description="Add a clear, detailed description to help users understand the project.",
            action="Add a comprehensive description in repository settings",
        ))

    if repo.license == "None":
        recs.append(Recommendation(
            type="legal", priority="medium",
            title="Add a License",
            description="Adding a license clarifies how others can use your project.",
            action="Choose and add an appropriate open source license",
        ))

    if issues.open > issues.closed and issues.total > 10:
        recs.append(Recommendation(
            type="maintenance", priority="high",
            title="Address Open Issues",
            description="High number of open issues may indicate maintenance challenges.",
            action="Review and address open issues regularly",
        ))

    if not releases and repo.stars > 10:
        recs.append(Recommendation(
            type="versioning", priority="medium",
            title="Create Releases",
            description="Tags and releases help users track stable versions.",
            action="Create tagged releases for stable versions",
        ))

    if len(languages) > 8:
        recs.append(Recommendation(
            type="architecture", priority="low",
            title="Consider Language Consolidation",
            description="Many languages might indicate architectural complexity.",
            action="Review if all languages are necessary",
        ))

    return recs


def risks(repo: RepositorySummary, stats: RepositoryStats,
          contributors: list[ContributorRecord], issues: IssueTally) -> list[Risk]:
    found = []

    if len(contributors) < 3:
        found.append(Risk(
            type="bus-factor", level="high",
            description="Few contributors - project depends heavily on one person",
            impact="Project could become unmaintained if key contributor leaves",
        ))

    if stats.activity.score < 30:
        found.append(Risk(
            type="maintenance", level="medium",
            description="Low recent activity may indicate maintenance issues",
            impact="Users may encounter unresolved bugs and issues",
        ))

    if repo.stars < 5 and repo.forks < 2:
        found.append(Risk(
            type="adoption", level="medium",
            description="Low community engagement",
            impact="Limited community support and contributions",
        ))

    open_ratio = issues.open / issues.total if issues.total else 0
    if open_ratio > 0.7 and issues.total > 10:
        found.append(Risk(
            type="support", level="high",
            description="High ratio of unresolved issues",
            impact="May indicate poor issue management or complex problems",
        ))

    return found


def assess(repo, stats, languages, commits, contributors, issues, releases, now: datetime) -> Assessment:
    return Assessment(
        language_profile=language_profile(languages),
        maturity=project_maturity(repo, commits, releases, now),
        quality=code_quality(repo, languages, commits, now),
        recommendations=recommendations(repo, stats, languages, issues, releases),
        risks=risks(repo, stats, contributors, issues),
    )
