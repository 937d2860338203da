"""
API-specific request and response models for FastAPI endpoints.

These models wrap the core domain models (CompletionRequest,
CompletionSuggestion) with per-call options and status information.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from inline_completion.models.completion_models import (
    CompletionRequest,
    CompletionSuggestion,
    ContextMetadata,
)
from inline_completion.models.enums import Availability, CompletionStatus, WarmupPhase


class CompletionRequestPayload(BaseModel):
    """Body of POST /completions and POST /completions/prefetch."""
    
    input_text: str = Field(description="Full content of the text field")
    cursor_position: int = Field(ge=0, description="Caret offset in input_text")
    context_metadata: ContextMetadata = Field(default_factory=ContextMetadata)
    context_text: Optional[str] = Field(default=None, description="Nearby page text")
    response_timeout_ms: Optional[int] = Field(
        default=None,
        gt=0,
        description="Backend deadline; server default when omitted"
    )
    max_suggestions: Optional[int] = Field(
        default=None,
        ge=1,
        le=10,
        description="Result cap; server default when omitted"
    )
    trigger_key: Optional[str] = Field(
        default=None,
        description="Key press that triggered a prefetch; the prefetch is skipped "
        "unless the key makes a completion request likely soon",
        examples=[".", "Enter", ">"],
    )
    
    def to_request(self) -> CompletionRequest:
        return CompletionRequest(
            input_text=self.input_text,
            cursor_position=self.cursor_position,
            context_metadata=self.context_metadata,
            context_text=self.context_text,
        )


class ProviderInfo(BaseModel):
    """Which provider was configured and which one actually served."""
    
    preference: str = Field(examples=["local", "openai"])
    resolved: str = Field(examples=["local", "openai", "stub"])


class CompletionResponsePayload(BaseModel):
    """
    Response for completion endpoints.
    
    On failure suggestions is empty and status/error describe what to tell
    the user.
    """
    
    suggestions: list[CompletionSuggestion] = Field(default_factory=list)
    status: Optional[CompletionStatus] = Field(
        default=None,
        description="Failure status (absent on success)"
    )
    error: Optional[str] = Field(
        default=None,
        description="User-actionable message"
    )
    provider: Optional[ProviderInfo] = None


class WarmupRequest(BaseModel):
    """Body of POST /warmup."""
    
    phase: WarmupPhase = WarmupPhase.ACTIVATE
    scope: Optional[str] = Field(
        default=None,
        description="Session scope to activate; derived from url/page_title when omitted"
    )
    url: Optional[str] = None
    page_title: Optional[str] = None


class WarmupResponse(BaseModel):
    """Response for POST /warmup."""
    
    ok: bool
    provider: Optional[ProviderInfo] = None
    availability: Optional[Availability] = None
    scope: Optional[str] = None


class ModelDownloadResponse(BaseModel):
    """Response for POST /model/download."""
    
    status: str = Field(examples=["downloaded", "already_available", "downloading"])
    model: str


class HealthResponse(BaseModel):
    """Response for health check endpoint."""
    
    status: str = Field(
        description="Overall health status",
        examples=["healthy", "degraded", "unhealthy"]
    )
    version: str = Field(description="Service version", examples=["0.1.0"])
    services: dict[str, str] = Field(
        description="Backend health",
        examples=[{"provider": "local", "backend": "available"}]
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Health check timestamp (UTC)"
    )
