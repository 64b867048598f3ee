"""
Search Routes
=============

API endpoints for running compliance searches and inspecting the cache.

Version: 0.1.0
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from shared.logging import bind_context, get_logger
from shared.models.search import CacheStatsResponse, SearchRequest, SearchResponse
from services.compliance_search.orchestrator import ComplianceSearchOrchestrator

logger = get_logger(__name__)

router = APIRouter()


def get_orchestrator(request: Request) -> ComplianceSearchOrchestrator:
    """Orchestrator created by the application lifespan."""
    orchestrator: ComplianceSearchOrchestrator | None = getattr(
        request.app.state, "orchestrator", None
    )
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search engine is not initialized",
        )
    return orchestrator


@router.post("", response_model=SearchResponse)
async def search(
    body: SearchRequest,
    orchestrator: ComplianceSearchOrchestrator = Depends(get_orchestrator),
) -> SearchResponse:
    """
    Search compliance rules.

    Results are cached per query and category for six hours. Identical
    concurrent searches share one pipeline run.
    """
    bind_context(query=body.query)

    response = await orchestrator.search(
        body.query,
        business_category=body.business_category,
        business_context=body.business_context,
    )

    logger.info(
        "search_served",
        results=len(response.results),
        cached=response.cached,
        response_time_ms=response.response_time_ms,
    )
    return response


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(
    orchestrator: ComplianceSearchOrchestrator = Depends(get_orchestrator),
) -> CacheStatsResponse:
    """Cache size, most-hit queries and hit rate."""
    return orchestrator.get_cache_stats()
