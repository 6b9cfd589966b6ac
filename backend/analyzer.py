"""Repository analysis: turns raw GitHub payloads into scores and insights.

Scores (all in [0, 100]):

  Activity:    A = 100 - days since last update        (clamped)
  Popularity:  P = min(100, 25 · log10(stars + 1))
  Health:      H = round((A + I + C) / 3)
               I = issue close rate, or 50 without issues
               C = min(100, 10 · contributors)

The analysis is a pure function of the payloads and the current time.
"""

import logging
import math
from datetime import datetime, timezone

from assessment import assess
from formatter import (
    calculate_commit_frequency,
    commit_date,
    days_between,
    format_date,
    format_languages,
    parse_timestamp,
    percentage,
)
from identifiers import analyze_commit_messages
from models import (
    ActivityStats,
    AnalysisResult,
    CodeFrequencySummary,
    CommitPatterns,
    CommitRecord,
    ContributorRecord,
    HealthStats,
    Insight,
    InsightBundle,
    IssueTally,
    LanguageShare,
    PopularityStats,
    ReleaseRecord,
    RepositoryAge,
    RepositoryStats,
    RepositorySummary,
)

logger = logging.getLogger("codeconcierge")

NEUTRAL_ISSUE_HEALTH = 50


def _obj(value) -> dict:
    return value if isinstance(value, dict) else {}


def _int(value) -> int:
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _str(value, default: str = "") -> str:
    return value if isinstance(value, str) and value else default


def _records(items, kind: str) -> list[dict]:
    """Coerce a payload list to dicts, logging (not raising on) malformed entries."""
    if not isinstance(items, list):
        if items:
            logger.debug("analyzer MALFORMED_PAYLOAD kind=%s type=%s", kind, type(items).__name__)
        return []
    out = []
    for item in items:
        if not isinstance(item, dict):
            logger.debug("analyzer MALFORMED_ENTRY kind=%s entry=%r", kind, item)
            item = {}
        out.append(item)
    return out


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


# ---------------------------------------------------------------------------
# Record normalization
# ---------------------------------------------------------------------------

def summarize_repository(repo_info: dict) -> RepositorySummary:
    license_info = _obj(repo_info.get("license"))
    return RepositorySummary(
        name=_str(repo_info.get("full_name")),
        description=_str(repo_info.get("description")) or None,
        url=_str(repo_info.get("html_url")),
        stars=_int(repo_info.get("stargazers_count")),
        forks=_int(repo_info.get("forks_count")),
        open_issues=_int(repo_info.get("open_issues_count")),
        watchers=_int(repo_info.get("watchers_count")),
        license=_str(license_info.get("spdx_id"), "None"),
        created=_str(repo_info.get("created_at")),
        updated=_str(repo_info.get("updated_at")),
        homepage=_str(repo_info.get("homepage")) or None,
        default_branch=_str(repo_info.get("default_branch")),
        size=_int(repo_info.get("size")),
        is_private=bool(repo_info.get("private")),
    )


def normalize_commit(commit: dict, now: datetime) -> CommitRecord:
    """Author falls back name -> login -> 'Unknown'; a missing date becomes ``now``."""
    inner = _obj(commit.get("commit"))
    author = _obj(inner.get("author"))
    message = inner.get("message") if isinstance(inner.get("message"), str) else ""
    if not inner:
        logger.debug("analyzer COMMIT_WITHOUT_DETAILS sha=%s", commit.get("sha"))
    return CommitRecord(
        sha=str(commit.get("sha") or "")[:7],
        message=message.split("\n", 1)[0],
        author=_str(author.get("name")) or _str(_obj(commit.get("author")).get("login"), "Unknown"),
        date=commit_date(commit) or now.isoformat(),
    )


def normalize_contributor(contributor: dict) -> ContributorRecord:
    return ContributorRecord(
        login=_str(contributor.get("login")),
        avatar=_str(contributor.get("avatar_url")),
        contributions=_int(contributor.get("contributions")),
        url=_str(contributor.get("html_url")),
    )


def normalize_release(release: dict) -> ReleaseRecord:
    return ReleaseRecord(
        name=_str(release.get("name")) or _str(release.get("tag_name")),
        date=_str(release.get("published_at")) or None,
        url=_str(release.get("html_url")),
        prerelease=bool(release.get("prerelease")),
    )


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

def tally_issues(issues: list[dict]) -> IssueTally:
    open_count = sum(1 for i in issues if i.get("state") == "open")
    closed_count = sum(1 for i in issues if i.get("state") == "closed")
    total = open_count + closed_count
    rate = percentage(closed_count, total)
    return IssueTally(
        open=open_count,
        closed=closed_count,
        total=total,
        close_rate=rate,
        close_rate_label=f"{rate:.1f}%",
    )


def repository_age(created: datetime, now: datetime) -> RepositoryAge:
    days = max(0, days_between(created, now))
    months = days // 30
    years = months // 12
    if years > 0:
        display = f"{years} years"
    elif months > 0:
        display = f"{months} months"
    else:
        display = f"{days} days"
    return RepositoryAge(days=days, months=months, years=years, display=display)


def activity_score(days_since_update: int) -> int:
    return max(0, min(100, 100 - days_since_update))


def popularity_score(stars: int) -> float:
    """Logarithmic: 10 stars ~ 26, 1,000 ~ 75, 10,000+ saturates at 100."""
    return min(100.0, math.log10(max(stars, 0) + 1) * 25)


def health_score(activity: int, issues: IssueTally, contributor_count: int) -> int:
    issue_health = issues.close_rate if issues.total else NEUTRAL_ISSUE_HEALTH
    contributor_health = min(100, contributor_count * 10)
    return _round_half_up((activity + issue_health + contributor_health) / 3)


def summarize_code_frequency(rows) -> CodeFrequencySummary:
    """Totals over GitHub's weekly [timestamp, additions, deletions] rows."""
    weeks = additions = deletions = 0
    for row in rows if isinstance(rows, list) else []:
        if not isinstance(row, (list, tuple)) or len(row) < 3:
            logger.debug("analyzer MALFORMED_ENTRY kind=code_frequency entry=%r", row)
            continue
        weeks += 1
        additions += abs(_int(row[1]))
        deletions += abs(_int(row[2]))
    return CodeFrequencySummary(weeks=weeks, additions=additions, deletions=deletions)


# ---------------------------------------------------------------------------
# Insights: fixed-order clauses, one sentence fragment each
# ---------------------------------------------------------------------------

def _language_clause(languages: dict) -> str:
    if not languages:
        return "This repository has no detected languages. "
    primary = next(iter(languages))
    clause = f"This repository primarily uses {primary}"
    if len(languages) > 1:
        clause += f" with {len(languages) - 1} supporting languages"
    return clause + ". "


def _frequency_clause(frequency: str) -> str:
    if frequency == "high":
        return "It shows high development activity with frequent commits. "
    if frequency == "medium":
        return "It shows steady development with regular commits. "
    return "It shows limited recent development activity. "


def _size_clause(size_kb: int) -> str:
    size_mb = size_kb / 1024
    if size_mb > 100:
        return f"The codebase is large ({size_mb:.1f} MB), suggesting a mature project."
    if size_mb > 10:
        return f"The codebase is medium-sized ({size_mb:.1f} MB)."
    return f"The codebase is relatively small ({size_mb:.1f} MB)."


def _health_clause(score: int) -> str:
    if score > 80:
        return "This is a healthy, active project with good maintenance practices. "
    if score > 50:
        return "This is a moderately maintained project with average activity. "
    return "This project shows signs of limited maintenance and may require attention. "


def _team_clause(count: int) -> str:
    if count > 10:
        return f"It has a large team with {count} contributors. "
    if count > 3:
        return f"It has a moderate team with {count} contributors. "
    return f"It has a small team with only {count} contributor(s). "


def _popularity_clause(stars: int) -> str:
    if stars > 1000:
        return f"With {stars} stars, it has significant community interest."
    if stars > 100:
        return f"With {stars} stars, it has moderate community interest."
    return f"With {stars} stars, it has limited community visibility."


def _recency_clause(days: int | None) -> str:
    if days is None:
        return ""
    if days < 7:
        return " It is actively maintained with updates in the past week."
    if days < 30:
        return " It has been updated in the past month."
    if days < 90:
        return " It was last updated a few months ago."
    return " It has not been updated recently."


def technical_insight(repo: RepositorySummary, languages: dict, commit_count: int, frequency: str) -> Insight:
    main = _language_clause(languages) + _frequency_clause(frequency) + _size_clause(repo.size)
    return Insight(main=main, details=[
        f"The repository has {commit_count} recent commits.",
        f'Main branch is "{repo.default_branch}".',
        f"There are {len(languages)} languages used in this codebase.",
    ])


def business_insight(repo: RepositorySummary, contributor_count: int, health: int, age: RepositoryAge) -> Insight:
    main = _health_clause(health) + _team_clause(contributor_count) + _popularity_clause(repo.stars)
    has_license = repo.license != "None"
    license_name = repo.license if has_license else "not specified"
    usage = "allows commercial use" if has_license else "may restrict usage"
    return Insight(main=main, details=[
        f"The repository has {repo.open_issues} open issues.",
        f"The project has been active since {format_date(repo.created) or 'an unknown date'} ({age.months} months).",
        f'The license is "{license_name}", which {usage}.',
    ])


def general_insight(repo: RepositorySummary, contributors: list[ContributorRecord], days_since_commit: int | None) -> Insight:
    main = f"{repo.name} is a {'private' if repo.is_private else 'public'} repository"
    if repo.description:
        main += f" that {repo.description.rstrip('.').lower()}."
    else:
        main += "."
    main += _recency_clause(days_since_commit)

    creator = contributors[0].login if contributors and contributors[0].login else "unknown"
    return Insight(main=main, details=[
        f"Project website: {repo.homepage}" if repo.homepage else "No project website specified.",
        f"Created by {creator} and has {len(contributors)} contributor(s).",
        f"The project has {repo.forks} fork(s) and {repo.stars} star(s).",
    ])


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def analyze_repository(data: dict, now: datetime | None = None) -> AnalysisResult:
    """Build the full analysis from the payloads returned by fetch_repository_bundle.

    ``data`` keys: repo_info, languages, commits, contributors, issues,
    releases, code_frequency. Inputs are never mutated.
    """
    now = now or datetime.now(timezone.utc)

    repo_info = _obj(data.get("repo_info"))
    raw_commits = _records(data.get("commits"), "commit")
    raw_contributors = _records(data.get("contributors"), "contributor")
    raw_issues = _records(data.get("issues"), "issue")
    raw_releases = _records(data.get("releases"), "release")

    repo = summarize_repository(repo_info)
    language_data = format_languages(_obj(data.get("languages")))
    languages = {lang: LanguageShare(**info) for lang, info in language_data.items()}
    commits = [normalize_commit(c, now) for c in raw_commits]
    contributors = [normalize_contributor(c) for c in raw_contributors]
    releases = [normalize_release(r) for r in raw_releases]
    issues = tally_issues(raw_issues)
    frequency = calculate_commit_frequency(raw_commits, now)

    age = repository_age(parse_timestamp(repo.created) or now, now)
    days_since_update = max(0, days_between(parse_timestamp(repo.updated) or now, now))
    activity = activity_score(days_since_update)
    popularity = popularity_score(repo.stars)
    health = health_score(activity, issues, len(contributors))

    last_commit = parse_timestamp(commit_date(raw_commits[0])) if raw_commits else None
    days_since_commit = days_between(last_commit, now) if last_commit else None

    stats = RepositoryStats(
        age=age,
        activity=ActivityStats(
            score=activity,
            days_since_last_update=days_since_update,
            commit_frequency=frequency,
            commit_patterns=CommitPatterns(**analyze_commit_messages(raw_commits)),
        ),
        popularity=PopularityStats(score=popularity, stars=repo.stars, forks=repo.forks, watchers=repo.watchers),
        health=HealthStats(score=health, issue_close_rate=issues.close_rate_label, contributor_count=len(contributors)),
    )

    insights = InsightBundle(
        technical=technical_insight(repo, languages, len(commits), frequency),
        business=business_insight(repo, len(contributors), health, age),
        general=general_insight(repo, contributors, days_since_commit),
    )

    return AnalysisResult(
        repo=repo,
        stats=stats,
        languages=languages,
        commits=commits,
        contributors=contributors,
        issues=issues,
        releases=releases,
        code_frequency=summarize_code_frequency(data.get("code_frequency")),
        insights=insights,
        assessment=assess(repo, stats, languages, commits, contributors, issues, releases, now),
    )
