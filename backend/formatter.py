"""Formatting helpers shared by the analyzer and the dashboard."""

from datetime import datetime, timedelta, timezone

HIGH_FREQUENCY_COMMITS = 5
MEDIUM_FREQUENCY_COMMITS = 2


def parse_timestamp(value) -> datetime | None:
    """Parse a GitHub ISO 8601 timestamp into an aware UTC datetime, or None."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from ``earlier`` to ``later`` (floored)."""
    return int((later - earlier).total_seconds() // 86400)


def percentage(part: int, total: int) -> float:
    """part/total as a percentage to one decimal, ties rounded up (6.25 -> 6.3)."""
    if total <= 0:
        return 0.0
    return (part * 2000 + total) // (2 * total) / 10


def format_languages(languages: dict) -> dict[str, dict]:
    """Turn GitHub's {language: bytes} into {language: {bytes, percentage}}.

    Ordered by descending byte count; empty when the total is zero.
    """
    counts = {
        lang: int(n) for lang, n in (languages or {}).items()
        if isinstance(n, (int, float)) and not isinstance(n, bool) and n >= 0
    }
    total = sum(counts.values())
    if total == 0:
        return {}

    ordered = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return {
        lang: {"bytes": n, "percentage": percentage(n, total)}
        for lang, n in ordered
    }


def commit_date(commit) -> str | None:
    """The author date of a raw GitHub commit payload, if present."""
    if not isinstance(commit, dict):
        return None
    inner = commit.get("commit")
    author = inner.get("author") if isinstance(inner, dict) else None
    value = (author.get("date") if isinstance(author, dict) else None) or commit.get("date")
    return value if isinstance(value, str) and value else None


def calculate_commit_frequency(commits: list, now: datetime | None = None) -> str:
    """Bucket recent activity: 'high' (>=5 commits in 7 days), 'medium' (>=2), else 'low'.

    Commits without a usable date count as made now.
    """
    if not commits:
        return "low"

    now = now or datetime.now(timezone.utc)
    one_week_ago = now - timedelta(days=7)

    recent = 0
    for commit in commits:
        when = parse_timestamp(commit_date(commit)) or now
        if when > one_week_ago:
            recent += 1

    if recent >= HIGH_FREQUENCY_COMMITS:
        return "high"
    if recent >= MEDIUM_FREQUENCY_COMMITS:
        return "medium"
    return "low"


def format_number(value) -> str:
    """Compact display: 1234 -> '1.2K', 3400000 -> '3.4M'."""
    try:
        num = float(value)
    except (TypeError, ValueError):
        return str(value)
    for threshold, suffix in ((1_000_000_000, "B"), (1_000_000, "M"), (1_000, "K")):
        if num >= threshold:
            return f"{num / threshold:.1f}{suffix}"
    return str(int(num)) if num == int(num) else str(num)


def format_date(value, fmt: str = "short") -> str:
    """'Jan 5, 2024' for fmt='short', 'Jan 5' for fmt='day'; unparseable input is returned as-is."""
    dt = parse_timestamp(value)
    if dt is None:
        return "" if value is None else str(value)
    if fmt == "day":
        return f"{dt:%b} {dt.day}"
    return f"{dt:%b} {dt.day}, {dt.year}"


def format_percent(value, decimals: int = 1) -> str:
    try:
        return f"{float(value):.{decimals}f}%"
    except (TypeError, ValueError):
        return str(value)
