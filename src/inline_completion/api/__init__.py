"""
FastAPI API routes and endpoints.

- routes.py: POST /completions, /completions/prefetch, /warmup, /model/download; GET /health
- dependencies.py: Singleton orchestrator, provider and prompt builder
- models.py: API-specific request/response models
- error_handlers.py: Completion errors to structured responses
- middleware.py: Request id tracing
"""

from inline_completion.api import dependencies, error_handlers, models
from inline_completion.api.routes import router

__all__ = [
    "router",
    "dependencies",
    "error_handlers",
    "models",
]
