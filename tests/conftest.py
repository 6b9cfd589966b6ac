"""Shared fixtures: a realistic GitHub payload bundle pinned to a fixed clock."""

from datetime import datetime, timedelta, timezone

import pytest

import cache

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def make_commit(sha: str, message: str, days_ago: float, name: str | None = "Dev", login: str | None = None) -> dict:
    author = {"date": iso(NOW - timedelta(days=days_ago))}
    if name:
        author["name"] = name
    return {
        "sha": sha,
        "commit": {"message": message, "author": author},
        "author": {"login": login} if login else None,
    }


def make_bundle() -> dict:
    return {
        "repo_info": {
            "full_name": "octo/widget",
            "description": "Builds widgets for the web",
            "html_url": "https://github.com/octo/widget",
            "stargazers_count": 1500,
            "forks_count": 120,
            "open_issues_count": 4,
            "watchers_count": 1500,
            "license": {"spdx_id": "MIT"},
            "created_at": "2021-06-15T12:00:00Z",
            "updated_at": iso(NOW - timedelta(days=2)),
            "homepage": "https://widget.dev",
            "default_branch": "main",
            "size": 20480,
            "private": False,
        },
        "languages": {"JavaScript": 50000, "CSS": 20000, "HTML": 10000},
        "commits": [
            make_commit("a1b2c3d4e5f6a7b8", "feat: add widget api\n\nLong body", 0, name="Alice"),
            make_commit("b2c3d4e5f6a7b8c9", "fix(core): handle nulls", 1, name=None, login="bob"),
            make_commit("c3d4e5f6a7b8c9d0", "Merge pull request #3 from octo/docs", 2),
            make_commit("d4e5f6a7b8c9d0e1", "Update docs", 3),
            make_commit("e5f6a7b8c9d0e1f2", "chore: bump deps", 10),
            make_commit("f6a7b8c9d0e1f2a3", "initial", 40),
        ],
        "contributors": [
            {"login": "alice", "avatar_url": "https://avatars/alice", "contributions": 120, "html_url": "https://github.com/alice"},
            {"login": "bob", "avatar_url": "https://avatars/bob", "contributions": 40, "html_url": "https://github.com/bob"},
            {"login": "carol", "avatar_url": "https://avatars/carol", "contributions": 10, "html_url": "https://github.com/carol"},
            {"login": "dave", "avatar_url": "https://avatars/dave", "contributions": 5, "html_url": "https://github.com/dave"},
            {"login": "erin", "avatar_url": "https://avatars/erin", "contributions": 1, "html_url": "https://github.com/erin"},
        ],
        "issues": [{"state": "open"}] * 3 + [{"state": "closed"}] * 7,
        "releases": [
            {"name": "v1.2.0", "tag_name": "v1.2.0", "published_at": iso(NOW - timedelta(days=5)),
             "html_url": "https://github.com/octo/widget/releases/tag/v1.2.0", "prerelease": False},
            {"name": None, "tag_name": "v1.3.0-rc1", "published_at": iso(NOW - timedelta(days=1)),
             "html_url": "https://github.com/octo/widget/releases/tag/v1.3.0-rc1", "prerelease": True},
        ],
        "code_frequency": [[1717891200, 100, -20], [1718496000, 50, -5]],
    }


def make_empty_bundle() -> dict:
    return {
        "repo_info": {
            "full_name": "octo/empty",
            "description": None,
            "stargazers_count": 0,
            "forks_count": 0,
            "open_issues_count": 0,
            "watchers_count": 0,
            "license": None,
            "created_at": iso(NOW),
            "updated_at": iso(NOW),
            "homepage": None,
            "default_branch": "main",
            "size": 0,
            "private": False,
        },
        "languages": {},
        "commits": [],
        "contributors": [],
        "issues": [],
        "releases": [],
        "code_frequency": [],
    }


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def bundle() -> dict:
    return make_bundle()


@pytest.fixture
def empty_bundle() -> dict:
    return make_empty_bundle()
