"""
FastAPI application entry point for the Inline Completion Engine.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from inline_completion.api.dependencies import get_orchestrator
from inline_completion.api.error_handlers import EXCEPTION_HANDLERS
from inline_completion.api.middleware import RequestTracingMiddleware
from inline_completion.api.routes import router
from inline_completion.config import settings
from inline_completion.logging_config import configure_logging
from inline_completion.models.enums import Availability

# Configure structured logging before any other imports
configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
logger = structlog.get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Inline, context-aware text completion backed by a local or remote language model",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Request tracing middleware (must be first for request_id in all logs)
app.add_middleware(RequestTracingMiddleware)

# The browser extension calls from its own origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)

app.include_router(router, tags=["completions"])


def _resolve_orchestrator():
    # Honour test overrides outside request handling
    return app.dependency_overrides.get(get_orchestrator, get_orchestrator)()


@app.on_event("startup")
async def startup():
    """Application startup - report which backend will serve completions."""
    logger.info(
        "Application startup",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        provider=settings.PROVIDER,
        ollama_base_url=settings.OLLAMA_BASE_URL if settings.PROVIDER == "local" else None,
        model=settings.OLLAMA_MODEL if settings.PROVIDER == "local" else settings.OPENAI_MODEL,
        priority_lane=settings.FOREGROUND_PRIORITY_LANE,
    )
    
    # Availability only; sessions are created on first use or on /warmup
    availability = await _resolve_orchestrator().provider.availability()
    if availability is Availability.AVAILABLE:
        logger.info("Backend available")
    else:
        logger.warning("Backend not ready", availability=availability.value)
    
    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown():
    """Application shutdown - destroy backend sessions and close clients."""
    logger.info("Application shutdown")
    await _resolve_orchestrator().shutdown()
    logger.info("Application shutdown complete")


if settings.PROMETHEUS_ENABLED:
    Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    """Root endpoint with API documentation links."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "provider": settings.PROVIDER,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics" if settings.PROMETHEUS_ENABLED else None,
    }


if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "inline_completion.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.DEBUG,
    )
