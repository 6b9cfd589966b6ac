"""Errors raised by the GitHub connectors."""

from datetime import datetime


class GitHubError(Exception):
    """Base class for upstream failures."""


class RepositoryNotFoundError(GitHubError):
    """GitHub answered 404 for the requested resource."""


class RateLimitExceededError(GitHubError):
    """GitHub refused the request because the rate limit is exhausted."""

    def __init__(self, message: str, reset_at: datetime | None = None):
        super().__init__(message)
        self.reset_at = reset_at


class UpstreamError(GitHubError):
    """Any other non-2xx answer, or a transport failure (status_code is None)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
