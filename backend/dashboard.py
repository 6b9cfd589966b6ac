"""Dashboard view model and Jinja2 rendering.

Usage:
    context = build_dashboard_context(result)
    html = render_dashboard("dashboard.html", context)
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from formatter import format_date, format_number, format_percent, parse_timestamp
from models import AnalysisResult, ContributorRecord, CommitRecord, IssueTally, RepositorySummary

TEMPLATE_DIR = Path(__file__).parent / "templates"

COLORS = {
    "primary": "#2563eb",
    "secondary": "#64748b",
    "success": "#10b981",
    "warning": "#f59e0b",
    "error": "#ef4444",
    "info": "#06b6d4",
}

COMMIT_WINDOW_DAYS = 30
TOP_CONTRIBUTORS = 10
TOP_COMMITS = 10

_jinja_env: Environment | None = None


def get_jinja_environment() -> Environment:
    """Get or create the Jinja2 environment (autoescaping, custom filters)."""
    global _jinja_env

    if _jinja_env is None:
        _jinja_env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        _jinja_env.filters["format_number"] = format_number
        _jinja_env.filters["format_percent"] = format_percent
        _jinja_env.filters["format_date"] = format_date

    return _jinja_env


def render_dashboard(template_name: str, context: dict[str, Any]) -> str:
    """Render a template from templates/ with the given context."""
    template = get_jinja_environment().get_template(template_name)
    return template.render(**context)


# ---------------------------------------------------------------------------
# Chart datasets
# ---------------------------------------------------------------------------

def generate_colors(count: int) -> list[str]:
    """Six base colours, then hues spaced by the golden angle."""
    base = [COLORS[k] for k in ("primary", "success", "warning", "error", "info", "secondary")]
    colors = []
    for i in range(count):
        if i < len(base):
            colors.append(base[i])
        else:
            hue = (i * 137.508) % 360
            colors.append(f"hsl({hue:g}, 70%, 50%)")
    return colors


def language_chart(languages: dict) -> dict:
    labels = list(languages)
    return {
        "labels": labels,
        "data": [share.percentage for share in languages.values()],
        "colors": generate_colors(len(labels)),
    }


def commit_chart(commits: list[CommitRecord], now: datetime) -> dict:
    """Commits per UTC day over the last 30 days, zero-filled, today included."""
    today = now.astimezone(timezone.utc).date()
    start = today - timedelta(days=COMMIT_WINDOW_DAYS)
    buckets = {start + timedelta(days=i): 0 for i in range(COMMIT_WINDOW_DAYS + 1)}

    for commit in commits:
        when = parse_timestamp(commit.date)
        if when is not None and when.date() in buckets:
            buckets[when.date()] += 1

    return {
        "labels": [f"{day:%b} {day.day}" for day in buckets],
        "data": list(buckets.values()),
    }


def contributors_chart(contributors: list[ContributorRecord]) -> dict:
    top = contributors[:TOP_CONTRIBUTORS]
    return {
        "labels": [c.login for c in top],
        "data": [c.contributions for c in top],
    }


def issues_chart(issues: IssueTally) -> dict:
    return {
        "labels": ["Open Issues", "Closed Issues"],
        "data": [issues.open, issues.closed],
        "total": issues.total,
    }


def timeline_chart(repo: RepositorySummary, now: datetime) -> dict:
    """Four qualitative points: created, midpoint, last update, now."""
    created = parse_timestamp(repo.created) or now
    updated = parse_timestamp(repo.updated) or now
    milestones = [
        (created, 10, "Created"),
        (created + (updated - created) / 2, 50, "Development"),
        (updated, 80, "Latest Update"),
        (now, 60, "Current"),
    ]
    return {
        "labels": [format_date(when, "day") for when, _, _ in milestones],
        "data": [activity for _, activity, _ in milestones],
        "milestones": [name for _, _, name in milestones],
    }


def build_dashboard_context(result: AnalysisResult, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    return {
        "repo": result.repo,
        "scores": {
            "health": result.stats.health.score,
            "activity": result.stats.activity.score,
            "popularity": round(result.stats.popularity.score),
        },
        "stats": result.stats,
        "insights": [
            ("General", result.insights.general),
            ("Technical", result.insights.technical),
            ("Business", result.insights.business),
        ],
        "commits": result.commits[:TOP_COMMITS],
        "releases": result.releases,
        "issues": result.issues,
        "code_frequency": result.code_frequency,
        "assessment": result.assessment,
        "charts": {
            "languages": language_chart(result.languages),
            "commits": commit_chart(result.commits, now),
            "contributors": contributors_chart(result.contributors),
            "issues": issues_chart(result.issues),
            "timeline": timeline_chart(result.repo, now),
        },
        "colors": COLORS,
        "generated_at": now.strftime("%Y-%m-%d %H:%M UTC"),
    }
