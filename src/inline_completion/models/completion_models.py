"""
Request/response data models for the completion lifecycle.

CompletionRequest and CompletionSuggestion are immutable pydantic models.
Options objects that carry live cancellation tokens are plain dataclasses,
since tokens are runtime objects rather than data.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from inline_completion.llm.abort import CancellationToken


class ContextMetadata(BaseModel):
    """
    Page-level context captured when the user triggered a completion.
    
    Opaque to the engine except for the fingerprint (domain, language) and the
    session scope (url, page_title).
    """
    
    model_config = ConfigDict(frozen=True)
    
    domain: Optional[str] = Field(default=None, description="Page host name")
    language: Optional[str] = Field(default=None, description="Document or browser language")
    page_title: Optional[str] = Field(default=None, description="Document title")
    url: Optional[str] = Field(default=None, description="Full page URL")


class CompletionRequest(BaseModel):
    """One user trigger event: field content plus caret position."""
    
    model_config = ConfigDict(frozen=True)
    
    input_text: str = Field(..., description="Full content of the text field")
    cursor_position: int = Field(..., ge=0, description="Caret offset in input_text")
    context_metadata: ContextMetadata = Field(default_factory=ContextMetadata)
    context_text: Optional[str] = Field(default=None, description="Nearby page text")
    
    @property
    def text_before(self) -> str:
        return self.input_text[:self.cursor_position]
    
    @property
    def text_after(self) -> str:
        return self.input_text[self.cursor_position:]
    
    def fingerprint(self) -> str:
        """
        Cache key derived from (domain, language, input_text, cursor_position).
        
        Requests that differ only in other metadata share a fingerprint.
        """
        meta = self.context_metadata
        return "::".join([
            meta.domain or "general",
            meta.language or "en",
            self.input_text,
            str(self.cursor_position),
        ])


class CompletionSuggestion(BaseModel):
    """A ranked insertion string. Produced only by the ranker."""
    
    model_config = ConfigDict(frozen=True)
    
    text: str = Field(..., description="Text to insert at the caret")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Heuristic score")


@dataclass
class CacheEntry:
    """
    Cached ranked suggestions for one fingerprint.
    
    Attributes:
        value: Private copy of the suggestions
        timestamp: Clock time at insertion (seconds)
        access_count: 1 on insert, incremented on every hit
    """
    
    value: list[CompletionSuggestion]
    timestamp: float
    access_count: int = 1


@dataclass
class CompletionOptions:
    """
    Per-call options for generate_completions.
    
    Attributes:
        response_timeout_ms: Backend deadline; engine default when None
        max_suggestions: Result cap; engine default when None
        abort_signal: Caller-owned token, cancelled e.g. when the UI dismisses
            the suggestion before the backend answers
    """
    
    response_timeout_ms: Optional[int] = None
    max_suggestions: Optional[int] = None
    abort_signal: Optional["CancellationToken"] = None


@dataclass
class PromptOptions:
    """Options for a single provider prompt call."""
    
    timeout_ms: int = 10000
    session_scope: str = "global"
    response_constraint: Optional[dict[str, Any]] = None
    abort_signal: Optional["CancellationToken"] = None
    extra: dict[str, Any] = field(default_factory=dict)
