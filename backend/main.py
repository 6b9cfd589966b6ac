import logging
import os
import re
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from analyzer import analyze_repository
from connectors import (
    GitHubError,
    RateLimitExceededError,
    RepositoryNotFoundError,
    fetch_dependencies,
    fetch_repository_bundle,
)
from dashboard import build_dashboard_context, render_dashboard
from identifiers import InvalidRepositoryIdentifier, parse_repository_identifier, validate_github_token
from models import AnalysisResult, DependenciesResponse, HealthResponse

VERSION = "1.0.0"

logger = logging.getLogger("codeconcierge")
logger.setLevel(logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Attach to uvicorn's handler (available now that uvicorn is running)
    uvicorn_logger = logging.getLogger("uvicorn")
    for h in uvicorn_logger.handlers:
        logger.addHandler(h)
    logger.info("CodeConcierge %s started", VERSION)
    yield


# Disable docs in production
docs_url = "/docs" if os.environ.get("ENV") == "dev" else None
redoc_url = "/redoc" if os.environ.get("ENV") == "dev" else None

app = FastAPI(
    title="CodeConcierge API", version=VERSION,
    docs_url=docs_url, redoc_url=redoc_url, lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["Content-Type"],
)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# GitHub owner and repository names, never only dots
NAME_RE = re.compile(r"^(?!\.+$)[A-Za-z0-9_.-]{1,100}$")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _validate_names(owner: str, repo: str):
    if not owner or not repo or not NAME_RE.match(owner) or not NAME_RE.match(repo):
        raise HTTPException(status_code=400, detail="Invalid repository format. Use owner/repo")


def _parse_identifier(text: str) -> tuple[str, str]:
    try:
        owner, repo = parse_repository_identifier(text)
    except InvalidRepositoryIdentifier as e:
        raise HTTPException(status_code=400, detail=str(e))
    _validate_names(owner, repo)
    return owner, repo


def _check_token(token: str | None):
    # Tokens are passed through untouched; an unknown shape is only worth a warning.
    if token and not validate_github_token(token):
        logger.warning("token does not match a known GitHub token format")


async def _analyze(owner: str, repo: str, token: str | None) -> AnalysisResult:
    """Fetch every payload in parallel and run the analysis, mapping upstream errors to HTTP."""
    _check_token(token)
    try:
        data = await fetch_repository_bundle(owner, repo, token or None)
        result = analyze_repository(data)
    except RepositoryNotFoundError:
        raise HTTPException(status_code=404, detail=f"Repository {owner}/{repo} not found")
    except RateLimitExceededError as e:
        raise HTTPException(status_code=429, detail=str(e))
    except GitHubError as e:
        logger.error("analyze UPSTREAM_ERROR repo=%s/%s error=%s", owner, repo, e)
        raise HTTPException(status_code=500, detail=str(e))
    except Exception:
        logger.exception("analyze PIPELINE_ERROR repo=%s/%s", owner, repo)
        raise HTTPException(status_code=500, detail="Internal error while analyzing repository")

    logger.info("analyze repo=%s/%s health=%d", owner, repo, result.stats.health.score)
    return result


def _error_page(status_code: int, message: str, query: str = "") -> HTMLResponse:
    html = render_dashboard("error.html", {"message": message, "query": query})
    return HTMLResponse(html, status_code=status_code)


# ---------------------------------------------------------------------------
# JSON API
# ---------------------------------------------------------------------------

@app.get("/api/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", version=VERSION)


@app.get("/api/analyze/{owner}/{repo}", response_model=AnalysisResult)
async def analyze(owner: str, repo: str, token: str | None = Query(default=None, max_length=256)):
    _validate_names(owner, repo)
    return await _analyze(owner, repo, token)


@app.get("/api/analyze", response_model=AnalysisResult)
async def analyze_identifier(
    repo: str = Query(..., min_length=1, max_length=300),
    token: str | None = Query(default=None, max_length=256),
):
    """Same as /api/analyze/{owner}/{repo}, accepting a URL, SSH remote, or owner/repo."""
    owner, name = _parse_identifier(repo)
    return await _analyze(owner, name, token)


@app.get("/api/dependencies/{owner}/{repo}", response_model=DependenciesResponse)
async def dependencies(owner: str, repo: str, branch: str = Query(default="main", max_length=255)):
    _validate_names(owner, repo)
    result = await fetch_dependencies(owner, repo, branch)
    if not result:
        raise HTTPException(status_code=404, detail="Dependencies information not available")
    return DependenciesResponse(**result)


# ---------------------------------------------------------------------------
# HTML dashboard
# ---------------------------------------------------------------------------

@app.get("/", response_class=HTMLResponse)
def index():
    return HTMLResponse(render_dashboard("index.html", {"query": ""}))


@app.get("/dashboard", response_class=HTMLResponse)
async def dashboard(
    repo: str = Query(default="", max_length=300),
    token: str | None = Query(default=None, max_length=256),
):
    if not repo.strip():
        return _error_page(400, "Please enter a repository URL or owner/repo format")
    try:
        owner, name = _parse_identifier(repo)
        result = await _analyze(owner, name, token)
    except HTTPException as e:
        return _error_page(e.status_code, e.detail, repo)

    context = build_dashboard_context(result)
    context["query"] = repo
    return HTMLResponse(render_dashboard("dashboard.html", context))
