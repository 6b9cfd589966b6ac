import pytest
from fastapi.testclient import TestClient

import main
from conftest import make_bundle
from connectors import RateLimitExceededError, RepositoryNotFoundError, UpstreamError

client = TestClient(main.app)


@pytest.fixture
def calls(monkeypatch):
    """Replace the GitHub fetch with a canned bundle and record its arguments."""
    recorded = []

    async def fake_bundle(owner, repo, token=None):
        recorded.append((owner, repo, token))
        return make_bundle()

    monkeypatch.setattr(main, "fetch_repository_bundle", fake_bundle)
    return recorded


def _failing_bundle(monkeypatch, error):
    async def fake_bundle(owner, repo, token=None):
        raise error

    monkeypatch.setattr(main, "fetch_repository_bundle", fake_bundle)


class TestHealth:
    def test_health(self):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": "1.0.0"}

    def test_security_headers(self):
        resp = client.get("/api/health")
        assert resp.headers["x-frame-options"] == "DENY"
        assert resp.headers["x-content-type-options"] == "nosniff"


class TestAnalyze:
    def test_analyze(self, calls):
        resp = client.get("/api/analyze/octo/widget")
        assert resp.status_code == 200

        body = resp.json()
        assert body["repo"]["name"] == "octo/widget"
        assert body["issues"]["close_rate_label"] == "70.0%"
        assert set(body["insights"]) == {"technical", "business", "general"}
        assert 0 <= body["stats"]["health"]["score"] <= 100
        assert calls == [("octo", "widget", None)]

    def test_token_is_forwarded(self, calls):
        client.get("/api/analyze/octo/widget", params={"token": "not-a-real-token"})
        assert calls == [("octo", "widget", "not-a-real-token")]

    def test_empty_token_is_dropped(self, calls):
        client.get("/api/analyze/octo/widget", params={"token": ""})
        assert calls == [("octo", "widget", None)]

    @pytest.mark.parametrize("path", ["/api/analyze/octo/bad$name", "/api/analyze/" + "a" * 101 + "/widget"])
    def test_invalid_names(self, calls, path):
        resp = client.get(path)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid repository format. Use owner/repo"
        assert calls == []

    def test_not_found(self, monkeypatch):
        _failing_bundle(monkeypatch, RepositoryNotFoundError("404 Not Found - Not Found"))
        resp = client.get("/api/analyze/octo/nope")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Repository octo/nope not found"

    def test_rate_limited(self, monkeypatch):
        message = "GitHub API rate limit exceeded. Resets at 12:00:00 UTC"
        _failing_bundle(monkeypatch, RateLimitExceededError(message))
        resp = client.get("/api/analyze/octo/widget")
        assert resp.status_code == 429
        assert resp.json()["detail"] == message

    def test_upstream_error(self, monkeypatch):
        _failing_bundle(monkeypatch, UpstreamError("502 Bad Gateway - /repos/octo/widget", status_code=502))
        resp = client.get("/api/analyze/octo/widget")
        assert resp.status_code == 500
        assert resp.json()["detail"] == "502 Bad Gateway - /repos/octo/widget"

    def test_unexpected_error(self, monkeypatch):
        _failing_bundle(monkeypatch, RuntimeError("kaboom"))
        resp = client.get("/api/analyze/octo/widget")
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Internal error while analyzing repository"


class TestAnalyzeIdentifier:
    @pytest.mark.parametrize(
        "identifier",
        ["octo/widget", "https://github.com/octo/widget", "https://github.com/octo/widget.git", "git@github.com:octo/widget.git"],
    )
    def test_identifier_forms(self, calls, identifier):
        resp = client.get("/api/analyze", params={"repo": identifier})
        assert resp.status_code == 200
        assert calls == [("octo", "widget", None)]

    def test_invalid_identifier(self, calls):
        resp = client.get("/api/analyze", params={"repo": "just-a-name"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid repository URL format. Use owner/repo or GitHub URL"
        assert calls == []

    @pytest.mark.parametrize("identifier", ["octo/..", "octo/.", "../widget", "https://github.com/octo/..."])
    def test_dot_only_names_are_rejected(self, calls, identifier):
        resp = client.get("/api/analyze", params={"repo": identifier})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid repository format. Use owner/repo"
        assert calls == []

    def test_dotted_names_are_allowed(self, calls):
        assert client.get("/api/analyze", params={"repo": "octo/widget.js"}).status_code == 200
        assert calls == [("octo", "widget.js", None)]

    def test_missing_identifier(self):
        assert client.get("/api/analyze").status_code == 422


class TestDependencies:
    def test_dependencies(self, monkeypatch):
        recorded = []

        async def fake_dependencies(owner, repo, branch="main"):
            recorded.append((owner, repo, branch))
            return {"manifest": "package.json", "dependencies": {"react": "^18.2.0"}}

        monkeypatch.setattr(main, "fetch_dependencies", fake_dependencies)

        resp = client.get("/api/dependencies/octo/widget", params={"branch": "develop"})
        assert resp.status_code == 200
        assert resp.json() == {"manifest": "package.json", "dependencies": {"react": "^18.2.0"}}
        assert recorded == [("octo", "widget", "develop")]

    def test_default_branch(self, monkeypatch):
        recorded = []

        async def fake_dependencies(owner, repo, branch="main"):
            recorded.append(branch)
            return {"manifest": "requirements.txt", "dependencies": {}}

        monkeypatch.setattr(main, "fetch_dependencies", fake_dependencies)

        assert client.get("/api/dependencies/octo/widget").status_code == 200
        assert recorded == ["main"]

    def test_no_manifest(self, monkeypatch):
        async def fake_dependencies(owner, repo, branch="main"):
            return None

        monkeypatch.setattr(main, "fetch_dependencies", fake_dependencies)

        resp = client.get("/api/dependencies/octo/widget")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Dependencies information not available"


class TestPages:
    def test_index(self):
        resp = client.get("/")
        assert resp.status_code == 200
        assert 'action="/dashboard"' in resp.text

    def test_dashboard(self, calls):
        resp = client.get("/dashboard", params={"repo": "https://github.com/octo/widget"})
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
        assert 'id="healthScore"' in resp.text
        assert 'value="https://github.com/octo/widget"' in resp.text
        assert calls == [("octo", "widget", None)]

    def test_dashboard_without_repository(self, calls):
        resp = client.get("/dashboard")
        assert resp.status_code == 400
        assert "Please enter a repository URL or owner/repo format" in resp.text
        assert calls == []

    def test_dashboard_invalid_identifier(self, calls):
        resp = client.get("/dashboard", params={"repo": "nonsense"})
        assert resp.status_code == 400
        assert 'role="alert"' in resp.text

    def test_dashboard_not_found(self, monkeypatch):
        _failing_bundle(monkeypatch, RepositoryNotFoundError("404"))
        resp = client.get("/dashboard", params={"repo": "octo/nope"})
        assert resp.status_code == 404
        assert "Repository octo/nope not found" in resp.text
