"""
Docs Search - FastAPI application for federated documentation search

Serves ranked results over the combined snapshot produced by
`docsearch build-index`:
- GET  /v1/search     ranked search with optional project scope
- GET  /v1/projects   project catalog with quick-links
- POST /v1/telemetry  record a result selection
- GET  /v1/telemetry  telemetry summary (dev dashboards)

The snapshot is loaded exactly once at startup. If it is missing or has an
incompatible schema, startup fails instead of serving empty results.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Literal, Optional

from fastapi import FastAPI, HTTPException, Query, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from . import __version__
from .catalog import enrich_projects
from .config import get_settings
from .logging_config import setup_logging
from .search.engine import MAX_SECTIONS_DISPLAYED, ProjectNotFoundError, run_query
from .search.store import SearchIndex, load_search_index
from .telemetry import Telemetry

settings = get_settings()

setup_logging(
    log_file=settings.log_file,
    console_level=getattr(logging, settings.log_level, logging.INFO),
    file_level=logging.DEBUG,  # Always DEBUG in file for troubleshooting
)

logger = logging.getLogger(__name__)

APP_START_TIME = datetime.now(timezone.utc)
CACHE_CONTROL = "public, max-age=30, stale-while-revalidate=60"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the search index once; refuse to start without it"""
    if getattr(app.state, "index", None) is None:
        logger.info(f"Loading combined search index from {settings.index_path}...")
        app.state.index = load_search_index(settings.index_path)
    if getattr(app.state, "telemetry", None) is None:
        app.state.telemetry = Telemetry(capacity=settings.telemetry_capacity)
    logger.info(f"Search index ready: {app.state.index!r}")

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title="Docs Search API",
    description="Federated search over statically generated documentation sites",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# Request/Response models
class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class HealthResponse(BaseModel):
    status: str
    version: str
    started_at: str
    uptime_seconds: float
    projects: int
    documents: int
    index_generated_at: str


class SectionItem(BaseModel):
    title: str
    anchor: Optional[str] = None


class SearchResultItem(CamelModel):
    doc_id: str = Field(..., alias="docId", description="Namespaced id '<project>:<index>'")
    project: str
    title: str
    url: str
    score: float
    matched_terms: List[str] = Field(..., alias="matchedTerms", description="Query stems that matched")
    sections: List[SectionItem] = Field(default_factory=list)


class SearchMeta(CamelModel):
    query: str
    project: Optional[str] = None
    count: int = Field(..., description="Number of results returned (<= limit)")
    total: int = Field(..., description="Matching documents before limit is applied")
    duration_ms: float = Field(..., alias="durationMs")


class SearchResponseModel(BaseModel):
    results: List[SearchResultItem]
    meta: SearchMeta


class SuggestedLinkItem(BaseModel):
    title: str
    url: str
    subtitle: str = ""


class ProjectItem(CamelModel):
    id: str
    base_path: str = Field(..., alias="basePath")
    is_external: bool = Field(..., alias="isExternal")
    doc_count: int = Field(..., alias="docCount")
    indexed_at: str = Field(..., alias="indexedAt")
    display_name: str = Field(..., alias="displayName")
    description: str
    accent_color: str = Field(..., alias="accentColor")
    links: List[SuggestedLinkItem]


class ProjectListResponse(BaseModel):
    total: int
    projects: List[ProjectItem]


class ResultSelectedRequest(CamelModel):
    event: Literal["result_selected"]
    query: str = Field(..., min_length=1, max_length=settings.max_query_length)
    doc_id: str = Field(..., alias="docId", min_length=1)
    rank: int = Field(..., ge=0, description="0-based rank of the selected result")


def get_index(request: Request) -> SearchIndex:
    index = getattr(request.app.state, "index", None)
    if index is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search index not loaded",
        )
    return index


# Routes
@app.get("/", response_model=dict)
async def root():
    """Root endpoint"""
    return {
        "service": "Docs Search API",
        "version": __version__,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", response_model=HealthResponse)
async def health(request: Request):
    """Health check endpoint"""
    index = get_index(request)
    uptime = (datetime.now(timezone.utc) - APP_START_TIME).total_seconds()

    return HealthResponse(
        status="healthy",
        version=__version__,
        started_at=APP_START_TIME.isoformat(),
        uptime_seconds=round(uptime, 2),
        projects=len(index.projects),
        documents=index.total_docs,
        index_generated_at=index.generated_at,
    )


@app.get("/v1/search", response_model=SearchResponseModel)
async def search_docs(
    request: Request,
    response: Response,
    q: str = Query(..., min_length=1, max_length=settings.max_query_length, description="Search query"),
    project: Optional[str] = Query(None, description="Scope results to one project"),
    limit: int = Query(settings.default_limit, ge=1, le=settings.max_limit, description="Max results"),
):
    """
    Search the combined documentation index.

    **Parameters:**
    - `q` (str): Free-text query, e.g. "quantum circuits"
    - `project` (str, optional): Project id to scope results to
    - `limit` (int): Maximum number of results (1-50, default: 20)

    Returns 404 for an unknown project (distinct from an empty result list).

    Example:
        GET /v1/search?q=quantum+circuits&project=qiskit-nature&limit=10
    """
    index = get_index(request)

    try:
        outcome = run_query(index, q, project=project, limit=limit)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    request.app.state.telemetry.record_search_performed(q, project, outcome.meta.count)
    response.headers["Cache-Control"] = CACHE_CONTROL

    return SearchResponseModel(
        results=[
            SearchResultItem(**r.to_dict(max_sections=MAX_SECTIONS_DISPLAYED))
            for r in outcome.results
        ],
        meta=SearchMeta(
            query=outcome.meta.query,
            project=outcome.meta.project,
            count=outcome.meta.count,
            total=outcome.meta.total,
            duration_ms=round(outcome.meta.duration_ms, 2),
        ),
    )


@app.get("/v1/projects", response_model=ProjectListResponse)
async def list_projects(request: Request):
    """List indexed projects with display names and quick-links"""
    projects = enrich_projects(get_index(request))
    return ProjectListResponse(
        total=len(projects),
        projects=[ProjectItem(**p) for p in projects],
    )


@app.post("/v1/telemetry", status_code=status.HTTP_202_ACCEPTED)
async def record_selection(request: Request, body: ResultSelectedRequest):
    """Record that the user selected a search result"""
    request.app.state.telemetry.record_result_selected(body.query, body.doc_id, body.rank)
    return {"ok": True}


@app.get("/v1/telemetry", response_model=dict)
async def telemetry_summary(request: Request):
    """Telemetry summary: counts, recent searches, top queries"""
    return request.app.state.telemetry.summary()


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": str(exc),
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "docsearch.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=True,  # Development only
    )
