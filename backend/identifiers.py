"""Repository identifier and token parsing, commit message heuristics."""

import re


class InvalidRepositoryIdentifier(ValueError):
    """The text is not a GitHub URL, SSH remote, or owner/repo pair."""


_IDENTIFIER_PATTERNS = (
    # https://github.com/owner/repo[.git][/anything]
    re.compile(r"^https?://github\.com/([^/]+)/([^/]+?)(?:\.git)?(?:/.*)?$"),
    # git@github.com:owner/repo[.git]
    re.compile(r"^git@github\.com:([^/]+)/([^/]+?)(?:\.git)?$"),
    # owner/repo
    re.compile(r"^([^/\s]+)/([^/\s]+)$"),
)

_TOKEN_PATTERNS = (
    re.compile(r"^ghp_[a-zA-Z0-9]{36}$"),          # classic
    re.compile(r"^github_pat_[a-zA-Z0-9_]{82}$"),  # fine-grained
    re.compile(r"^gho_[a-zA-Z0-9]{36}$"),          # OAuth
    re.compile(r"^ghu_[a-zA-Z0-9]{36}$"),          # user-to-server
    re.compile(r"^ghs_[a-zA-Z0-9]{36}$"),          # server-to-server
    re.compile(r"^ghr_[a-zA-Z0-9]{36}$"),          # refresh
)

_CONVENTIONAL_RE = re.compile(
    r"^(feat|fix|docs|style|refactor|test|chore|build|ci|perf|revert)(\(.+\))?\s*:\s*.+"
)


def parse_repository_identifier(text: str) -> tuple[str, str]:
    """Return (owner, repo) from a web URL, SSH remote, or bare owner/repo."""
    value = (text or "").strip()
    for pattern in _IDENTIFIER_PATTERNS:
        m = pattern.match(value)
        if m:
            owner, repo = m.group(1), re.sub(r"\.git$", "", m.group(2))
            if owner and repo:
                return owner, repo
    raise InvalidRepositoryIdentifier("Invalid repository URL format. Use owner/repo or GitHub URL")


def validate_github_token(token: str | None) -> bool:
    """Whether the token looks like one of GitHub's prefixed token formats."""
    if not token:
        return False
    return any(p.match(token) for p in _TOKEN_PATTERNS)


def analyze_commit_messages(commits: list) -> dict:
    """Detect conventional-commit types and common message patterns.

    Works on raw GitHub commit payloads; entries without a message count as empty.
    """
    if not commits:
        return {"patterns": [], "types": {}, "total_commits": 0}

    types: dict[str, int] = {}
    patterns: list[str] = []

    for commit in commits:
        inner = commit.get("commit") if isinstance(commit, dict) else None
        message = (inner or {}).get("message") or ""
        first_line = message.split("\n", 1)[0].lower()

        m = _CONVENTIONAL_RE.match(first_line)
        if m:
            types[m.group(1)] = types.get(m.group(1), 0) + 1
            patterns.append("conventional")

        if "merge" in first_line:
            patterns.append("merge")
        elif "update" in first_line or "upgrade" in first_line:
            patterns.append("update")
        elif "add" in first_line or "implement" in first_line:
            patterns.append("feature")
        elif "fix" in first_line or "bug" in first_line:
            patterns.append("bugfix")

    return {
        "patterns": list(dict.fromkeys(patterns)),
        "types": types,
        "total_commits": len(commits),
    }
