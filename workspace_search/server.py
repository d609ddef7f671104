"""
Search Server

FastAPI server for workspace semantic search.

Endpoints:
- POST /api/search/semantic/{workspace_id}: Search a workspace
- GET /api/search/suggestions/{workspace_id}: Example queries
- GET /health: Health check

Pipeline:
1. Authorize caller (X-User-Id must be a workspace member)
2. Validate query and filters
3. Collect GitHub / Notion / member records concurrently
4. Normalize, answer intents, score, boost, rank
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .common.config import load_config, WorkspaceSearchConfig
from .common.schemas import InvalidQueryError, SearchQuery
from .retriever import SearchPipeline, get_suggestions
from .sources import GitHubProvider, NotionProvider, SourceCollector
from .workspaces import NotAMemberError, WorkspaceNotFoundError, WorkspaceRegistry

logger = logging.getLogger("wsearch.server")


# Global state
config: Optional[WorkspaceSearchConfig] = None
registry: Optional[WorkspaceRegistry] = None
collector: Optional[SourceCollector] = None
pipeline: Optional[SearchPipeline] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize components on startup"""
    global config, registry, collector, pipeline

    logger.info("Starting up...")
    load_dotenv()

    config = load_config()

    if registry is None:
        registry = WorkspaceRegistry.load(config.server.workspaces_path)

    github = None
    notion = None
    if collector is None:
        github = GitHubProvider(
            token=config.github.token,
            api_url=config.github.api_url,
            per_page=config.github.per_page,
            timeout=config.github.timeout,
        )
        if not github.has_token:
            logger.warning("GITHUB_TOKEN not set, using unauthenticated GitHub access")

        notion = NotionProvider(
            token=config.notion.token,
            database_id=config.notion.database_id,
            api_version=config.notion.api_version,
            page_size=config.notion.page_size,
            timeout=config.notion.timeout,
        )
        if not notion.is_configured:
            logger.info("NOTION_DATABASE_ID not set, documents source disabled")

        collector = SourceCollector(github=github, notion=notion)

    if pipeline is None:
        pipeline = SearchPipeline()

    logger.info("Ready (%d workspace(s))", len(registry))

    yield

    # Cleanup
    logger.info("Shutting down...")
    for provider in (github, notion):
        if provider is not None:
            await provider.aclose()


app = FastAPI(
    title="Workspace Search",
    description="Semantic search and direct answers across workspace sources",
    version="0.1.0",
    lifespan=lifespan,
)


# =============================================================================
# Request/Response Models
# =============================================================================

class SearchRequest(BaseModel):
    """Semantic search request"""
    query: Optional[str] = None
    filters: Optional[Dict[str, Any]] = None


# =============================================================================
# Helpers
# =============================================================================

def _authorize(workspace_id: str, user_id: Optional[str]):
    if registry is None:
        raise HTTPException(status_code=503, detail="Workspace registry not initialized")
    try:
        return registry.authorize(workspace_id, user_id)
    except WorkspaceNotFoundError:
        raise HTTPException(status_code=404, detail="Workspace not found")
    except NotAMemberError:
        raise HTTPException(status_code=403, detail="Not authorized to access this workspace")


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "workspace-search",
        "initialized": pipeline is not None,
        "workspaces": len(registry) if registry is not None else 0,
    }


@app.post("/api/search/semantic/{workspace_id}")
async def semantic_search(
    workspace_id: str,
    request: SearchRequest,
    x_user_id: Optional[str] = Header(None),
):
    """
    Search across a workspace's GitHub activity, documents and members.
    """
    workspace = _authorize(workspace_id, x_user_id)

    try:
        query = SearchQuery.from_request(request.query, request.filters)
    except InvalidQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if collector is None or pipeline is None:
        raise HTTPException(status_code=503, detail="Search not initialized")

    try:
        bundle = await collector.collect(workspace)
        response = pipeline.search(query, bundle)
    except Exception as e:
        logger.error("Semantic search error: %s", e, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": "Search failed. Please try again.", "details": str(e)},
        )

    if bundle.failures:
        logger.info(
            "Search in %s degraded, unavailable sources: %s",
            workspace_id, ", ".join(bundle.failures),
        )

    return response.to_response()


@app.get("/api/search/suggestions/{workspace_id}")
async def search_suggestions(
    workspace_id: str,
    x_user_id: Optional[str] = Header(None),
):
    """Example queries for the search box"""
    _authorize(workspace_id, x_user_id)

    limit = config.search.suggestion_count if config else 8
    return {
        "success": True,
        "suggestions": get_suggestions(limit),
    }


# =============================================================================
# CLI Entry Point
# =============================================================================

def run_server():
    """Run the search server"""
    import uvicorn

    load_dotenv()
    config = load_config()

    logging.basicConfig(
        level=config.server.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info("Starting server on port %d", config.server.port)
    uvicorn.run(
        "workspace_search.server:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.server.log_level,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
