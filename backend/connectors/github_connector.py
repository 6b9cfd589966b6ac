"""GitHub API connector for public repository data."""

import asyncio
import logging
import os
from datetime import datetime, timezone

import httpx

import cache
from .exceptions import RateLimitExceededError, RepositoryNotFoundError, UpstreamError, GitHubError

logger = logging.getLogger("codeconcierge")

GH_API = os.environ.get("GITHUB_API_URL", "https://api.github.com")
GH_TIMEOUT = float(os.environ.get("GITHUB_TIMEOUT", "15"))
USER_AGENT = "CodeConcierge/1.0"
CACHE_TTL = 3600  # 1 hour

# Page sizes used for one analysis
COMMITS_PER_PAGE = 10
CONTRIBUTORS_PER_PAGE = 10
ISSUES_PER_PAGE = 20
RELEASES_PER_PAGE = 5


def _headers(token: str | None) -> dict:
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": USER_AGENT,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _rate_limit_error(resp: httpx.Response) -> RateLimitExceededError:
    """Build the rate-limit error, deriving the reset time from X-RateLimit-Reset."""
    reset_at = None
    try:
        reset_at = datetime.fromtimestamp(int(resp.headers.get("x-ratelimit-reset", "")), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        pass
    when = f"{reset_at:%H:%M:%S} UTC" if reset_at else "an unknown time"
    return RateLimitExceededError(f"GitHub API rate limit exceeded. Resets at {when}", reset_at=reset_at)


def _upstream_message(resp: httpx.Response, endpoint: str) -> str:
    try:
        message = (resp.json() or {}).get("message")
    except (ValueError, AttributeError):
        message = None
    return f"{resp.status_code} {resp.reason_phrase} - {message or endpoint}"


async def github_get(client: httpx.AsyncClient, endpoint: str, token: str | None = None):
    """GET a GitHub API endpoint, consulting the cache first.

    ``endpoint`` is the path plus query string, e.g. ``/repos/o/r/commits?per_page=10``.
    Successful payloads (including ``None`` for empty bodies) are cached for an hour.
    """
    cache_key = f"github:{endpoint}:{'auth' if token else 'noauth'}"
    cached = cache.get(cache_key)
    if cached is not cache.MISSING:
        return cached

    try:
        resp = await client.get(f"{GH_API}{endpoint}", headers=_headers(token))
    except httpx.HTTPError as e:
        logger.error("github REQUEST_FAILED endpoint=%s error=%s", endpoint, e)
        raise UpstreamError(f"Request to GitHub failed: {e}") from e

    if resp.status_code == 404:
        raise RepositoryNotFoundError(_upstream_message(resp, endpoint))
    if resp.status_code == 403 and resp.headers.get("x-ratelimit-remaining") == "0":
        err = _rate_limit_error(resp)
        logger.warning("github RATE_LIMITED endpoint=%s reset=%s", endpoint, err.reset_at)
        raise err
    if not resp.is_success:
        message = _upstream_message(resp, endpoint)
        logger.error("github UPSTREAM_ERROR endpoint=%s message=%s", endpoint, message)
        raise UpstreamError(message, status_code=resp.status_code)

    if not resp.content:
        data = None
    else:
        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON from GitHub for {endpoint}", status_code=resp.status_code) from e

    cache.set(cache_key, data, ttl=CACHE_TTL)
    return data


async def fetch_repository(client, owner: str, repo: str, token: str | None = None) -> dict:
    return await github_get(client, f"/repos/{owner}/{repo}", token)


async def fetch_languages(client, owner: str, repo: str, token: str | None = None) -> dict:
    return await github_get(client, f"/repos/{owner}/{repo}/languages", token)


async def fetch_commits(client, owner: str, repo: str, per_page: int = COMMITS_PER_PAGE, token: str | None = None) -> list:
    return await github_get(client, f"/repos/{owner}/{repo}/commits?per_page={per_page}", token)


async def fetch_contributors(client, owner: str, repo: str, per_page: int = CONTRIBUTORS_PER_PAGE, token: str | None = None) -> list:
    return await github_get(client, f"/repos/{owner}/{repo}/contributors?per_page={per_page}", token)


async def fetch_issues(client, owner: str, repo: str, state: str = "all", per_page: int = ISSUES_PER_PAGE, token: str | None = None) -> list:
    return await github_get(client, f"/repos/{owner}/{repo}/issues?state={state}&per_page={per_page}", token)


async def fetch_releases(client, owner: str, repo: str, per_page: int = RELEASES_PER_PAGE, token: str | None = None) -> list:
    return await github_get(client, f"/repos/{owner}/{repo}/releases?per_page={per_page}", token)


async def fetch_code_frequency(client, owner: str, repo: str, token: str | None = None) -> list:
    """Weekly [timestamp, additions, deletions] triples. Never raises; failures yield []."""
    try:
        data = await github_get(client, f"/repos/{owner}/{repo}/stats/code_frequency", token)
    except GitHubError as e:
        logger.info("github CODE_FREQUENCY_UNAVAILABLE repo=%s/%s error=%s", owner, repo, e)
        return []
    # GitHub answers 202 with {} while the statistics are being computed
    return data if isinstance(data, list) else []


async def fetch_repository_bundle(owner: str, repo: str, token: str | None = None, transport=None) -> dict:
    """Fetch every payload needed for one analysis in parallel.

    Raises the first GitHubError among the required reads; the code-frequency
    read is best effort and never fails the bundle.
    """
    async with httpx.AsyncClient(timeout=GH_TIMEOUT, transport=transport) as client:
        results = await asyncio.gather(
            fetch_repository(client, owner, repo, token),
            fetch_languages(client, owner, repo, token),
            fetch_commits(client, owner, repo, token=token),
            fetch_contributors(client, owner, repo, token=token),
            fetch_issues(client, owner, repo, token=token),
            fetch_releases(client, owner, repo, token=token),
            fetch_code_frequency(client, owner, repo, token),
            return_exceptions=True,
        )

    for result in results:
        if isinstance(result, Exception):
            raise result

    repo_info, languages, commits, contributors, issues, releases, code_frequency = results
    return {
        "repo_info": repo_info or {},
        "languages": languages or {},
        "commits": commits or [],
        "contributors": contributors or [],
        "issues": issues or [],
        "releases": releases or [],
        "code_frequency": code_frequency,
    }
