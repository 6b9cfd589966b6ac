import json

import httpx
import pytest

from connectors.manifest import (
    fetch_dependencies,
    parse_package_json,
    parse_pyproject,
    parse_requirements,
)

PACKAGE_JSON = json.dumps({
    "name": "widget",
    "dependencies": {"react": "^18.2.0", "lodash": "4.17.21"},
    "devDependencies": {"jest": "^29.0.0", "lodash": "^4.17.0"},
})

PYPROJECT = """
[project]
name = "widget"
dependencies = ["httpx>=0.27", "pydantic[email]>=2.5", "rich"]

[project.optional-dependencies]
test = ["pytest>=8 ; python_version >= '3.11'"]
"""

REQUIREMENTS = """
# runtime
fastapi==0.110.0
uvicorn[standard]>=0.27  # server
-r extra.txt
--index-url https://example.org/simple

jinja2
"""


def _raw_transport(files: dict[str, str], seen: list | None = None) -> httpx.MockTransport:
    async def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request.url.path)
        name = request.url.path.rsplit("/", 1)[-1]
        if name in files:
            return httpx.Response(200, text=files[name])
        return httpx.Response(404, text="404: Not Found")

    return httpx.MockTransport(handler)


class TestParsers:
    def test_package_json_merges_dev_dependencies(self):
        deps = parse_package_json(PACKAGE_JSON)
        assert deps == {"react": "^18.2.0", "lodash": "^4.17.0", "jest": "^29.0.0"}

    def test_package_json_must_be_object(self):
        with pytest.raises(ValueError):
            parse_package_json("[1, 2]")

    def test_pyproject(self):
        deps = parse_pyproject(PYPROJECT)
        assert deps == {"httpx": ">=0.27", "pydantic": ">=2.5", "rich": "*", "pytest": ">=8"}

    def test_pyproject_without_project_table(self):
        assert parse_pyproject("[tool.black]\nline-length = 100\n") == {}

    @pytest.mark.parametrize(
        "text",
        [
            "[project]\ndependencies = [1]\n",
            "[project]\ndependencies = \"httpx\"\n",
            "project = \"widget\"\n",
            "[project]\noptional-dependencies = [\"pytest\"]\n",
            "[project.optional-dependencies]\ntest = \"pytest\"\n",
        ],
    )
    def test_pyproject_with_unexpected_shape_is_rejected(self, text):
        with pytest.raises(ValueError):
            parse_pyproject(text)

    def test_requirements(self):
        deps = parse_requirements(REQUIREMENTS)
        assert deps == {"fastapi": "==0.110.0", "uvicorn": ">=0.27", "jinja2": "*"}


@pytest.mark.asyncio
async def test_package_json_wins_over_other_manifests() -> None:
    transport = _raw_transport({"package.json": PACKAGE_JSON, "requirements.txt": REQUIREMENTS})

    result = await fetch_dependencies("octo", "widget", transport=transport)

    assert result["manifest"] == "package.json"
    assert result["dependencies"]["react"] == "^18.2.0"


@pytest.mark.asyncio
async def test_falls_back_to_python_manifests() -> None:
    seen: list[str] = []
    transport = _raw_transport({"requirements.txt": REQUIREMENTS}, seen=seen)

    result = await fetch_dependencies("octo", "widget", branch="develop", transport=transport)

    assert result == {"manifest": "requirements.txt", "dependencies": {"fastapi": "==0.110.0", "uvicorn": ">=0.27", "jinja2": "*"}}
    assert seen == [
        "/octo/widget/develop/package.json",
        "/octo/widget/develop/pyproject.toml",
        "/octo/widget/develop/requirements.txt",
    ]


@pytest.mark.asyncio
async def test_unparseable_manifest_is_skipped() -> None:
    transport = _raw_transport({"package.json": "{not json", "pyproject.toml": PYPROJECT})

    result = await fetch_dependencies("octo", "widget", transport=transport)

    assert result["manifest"] == "pyproject.toml"


@pytest.mark.asyncio
async def test_no_manifest_returns_none_and_is_not_cached() -> None:
    seen: list[str] = []
    transport = _raw_transport({}, seen=seen)

    assert await fetch_dependencies("octo", "widget", transport=transport) is None
    assert await fetch_dependencies("octo", "widget", transport=transport) is None
    assert len(seen) == 6


@pytest.mark.asyncio
async def test_result_is_cached_per_branch() -> None:
    seen: list[str] = []
    transport = _raw_transport({"package.json": PACKAGE_JSON}, seen=seen)

    await fetch_dependencies("octo", "widget", transport=transport)
    await fetch_dependencies("octo", "widget", transport=transport)
    assert len(seen) == 1

    await fetch_dependencies("octo", "widget", branch="next", transport=transport)
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_malformed_pyproject_falls_through_to_requirements() -> None:
    transport = _raw_transport({"pyproject.toml": "[project]\ndependencies = [1]\n", "requirements.txt": "rich\n"})

    result = await fetch_dependencies("octo", "widget", transport=transport)

    assert result == {"manifest": "requirements.txt", "dependencies": {"rich": "*"}}


@pytest.mark.asyncio
async def test_only_malformed_pyproject_returns_none() -> None:
    transport = _raw_transport({"pyproject.toml": "[project]\ndependencies = [1]\n"})

    assert await fetch_dependencies("octo", "widget", transport=transport) is None
