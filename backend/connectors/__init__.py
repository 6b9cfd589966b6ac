"""Data connectors for the GitHub API."""

from .exceptions import GitHubError, RateLimitExceededError, RepositoryNotFoundError, UpstreamError
from .github_connector import fetch_repository_bundle
from .manifest import fetch_dependencies

__all__ = [
    "GitHubError", "RateLimitExceededError", "RepositoryNotFoundError", "UpstreamError",
    "fetch_repository_bundle", "fetch_dependencies",
]
