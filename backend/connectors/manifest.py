"""Dependency manifest connector (raw.githubusercontent.com)."""

import json
import logging
import os
import re
import tomllib

import httpx

import cache

logger = logging.getLogger("codeconcierge")

RAW_BASE = os.environ.get("GITHUB_RAW_URL", "https://raw.githubusercontent.com")
CACHE_TTL = 3600

# Checked in order; the first one found wins.
MANIFESTS = ("package.json", "pyproject.toml", "requirements.txt")

_REQ_NAME_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)(\[[^\]]*\])?\s*(.*)$")


def _split_requirement(line: str) -> tuple[str, str] | None:
    """Split 'httpx>=0.27 ; python_version>"3.8"' into ('httpx', '>=0.27')."""
    line = line.split("#", 1)[0].split(";", 1)[0].strip()
    if not line or line.startswith("-"):
        return None
    m = _REQ_NAME_RE.match(line)
    if not m:
        return None
    return m.group(1), m.group(3).strip() or "*"


def parse_package_json(text: str) -> dict:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("package.json is not an object")
    merged = {}
    for section in ("dependencies", "devDependencies"):
        entries = data.get(section)
        if isinstance(entries, dict):
            merged.update({name: str(spec) for name, spec in entries.items()})
    return merged


def _requirement_list(value, where: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(req, str) for req in value):
        raise ValueError(f"{where} must be a list of strings")
    return value


def parse_pyproject(text: str) -> dict:
    """PEP 621 dependencies plus every optional-dependencies group."""
    project = tomllib.loads(text).get("project", {})
    if not isinstance(project, dict):
        raise ValueError("[project] is not a table")
    requirements = list(_requirement_list(project.get("dependencies", []), "project.dependencies"))
    extras = project.get("optional-dependencies", {})
    if not isinstance(extras, dict):
        raise ValueError("[project.optional-dependencies] is not a table")
    for group, extra in extras.items():
        requirements.extend(_requirement_list(extra, f"optional-dependencies.{group}"))
    deps = {}
    for req in requirements:
        parsed = _split_requirement(req)
        if parsed:
            deps[parsed[0]] = parsed[1]
    return deps


def parse_requirements(text: str) -> dict:
    deps = {}
    for line in text.splitlines():
        parsed = _split_requirement(line)
        if parsed:
            deps[parsed[0]] = parsed[1]
    return deps


_PARSERS = {
    "package.json": parse_package_json,
    "pyproject.toml": parse_pyproject,
    "requirements.txt": parse_requirements,
}


async def fetch_dependencies(owner: str, repo: str, branch: str = "main", transport=None) -> dict | None:
    """Return {"manifest": name, "dependencies": {...}} or None if no manifest is readable.

    Runtime and development dependencies are merged; dev entries win on conflict.
    """
    cache_key = f"manifest:{owner}/{repo}@{branch}"
    cached = cache.get(cache_key)
    if cached is not cache.MISSING:
        return cached

    result = None
    async with httpx.AsyncClient(timeout=15, transport=transport) as client:
        for name in MANIFESTS:
            try:
                resp = await client.get(f"{RAW_BASE}/{owner}/{repo}/{branch}/{name}")
            except httpx.HTTPError as e:
                logger.info("manifest FETCH_FAILED repo=%s/%s file=%s error=%s", owner, repo, name, e)
                continue
            if not resp.is_success:
                continue
            try:
                deps = _PARSERS[name](resp.text)
            except ValueError as e:
                logger.info("manifest PARSE_FAILED repo=%s/%s file=%s error=%s", owner, repo, name, e)
                continue
            result = {"manifest": name, "dependencies": deps}
            break

    if result is not None:
        cache.set(cache_key, result, ttl=CACHE_TTL)
    return result
