"""
Compliance Search Service - Main Application
============================================

FastAPI application exposing the real-time compliance search engine.

Version: 0.1.0
"""

import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from services.compliance_search.errors import SearchPipelineError
from services.compliance_search.orchestrator import ComplianceSearchOrchestrator
from services.compliance_search.routes import search
from shared.config import settings
from shared.logging import bind_context, clear_context, get_logger, setup_logging
from shared.models.common import ErrorResponse, HealthResponse


# Setup logging
setup_logging(
    log_level=settings.log_level.value,
    json_logs=settings.is_production,
    service_name="compliance-search",
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Application lifespan manager."""
    logger.info(
        "compliance_search_starting",
        environment=settings.environment.value,
        port=settings.port,
    )

    app.state.orchestrator = ComplianceSearchOrchestrator.from_settings(settings)

    yield

    # Shutdown
    logger.info("compliance_search_shutting_down")
    await app.state.orchestrator.close()
    app.state.orchestrator = None


# Create FastAPI application
app = FastAPI(
    title="Compliance Search Service",
    description="Real-time compliance rule search across government sources",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins_list,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next: Any) -> Any:
    """Bind a request id to every log line emitted while handling a request."""
    clear_context()
    bind_context(
        request_id=request.headers.get("x-request-id") or str(uuid.uuid4()),
        path=request.url.path,
    )
    return await call_next(request)


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request) -> HealthResponse:
    """
    Service health check.

    Reports the search engine's sources, cache size and in-flight searches.
    """
    components: dict[str, dict[str, Any]] = {}

    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        components["search_engine"] = {"status": "unavailable"}
    else:
        components["search_engine"] = await orchestrator.health_check()

    all_healthy = all(c.get("status") == "healthy" for c in components.values())

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        service="compliance-search",
        version="0.1.0",
        components=components,
    )


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": "Compliance Search Service",
        "version": "0.1.0",
        "docs": "/docs",
    }


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(
    search.router,
    prefix="/api/v1/search",
    tags=["Search"],
)


# ============================================================================
# Error Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=str(exc.detail),
            status_code=exc.status_code,
        ).model_dump(mode="json"),
    )


@app.exception_handler(SearchPipelineError)
async def search_pipeline_exception_handler(
    request: Request, exc: SearchPipelineError
) -> JSONResponse:
    """Handle a failed search run."""
    logger.error(
        "search_failed",
        stage=exc.stage,
        error=str(exc.cause),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=ErrorResponse(
            error="Search failed",
            error_code=f"search_{exc.stage}_failed",
            status_code=status.HTTP_502_BAD_GATEWAY,
        ).model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        ).model_dump(mode="json"),
    )


# ============================================================================
# Run with Uvicorn
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.compliance_search.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.value.lower(),
    )
