"""
Data models for the Inline Completion Engine.

Includes:
- Enums (Availability, AbortReason, CompletionStatus, DomainType, ...)
- Backend configuration (AIConfig, CreateOptions, SessionPromptOptions)
- Completion models (CompletionRequest, CompletionSuggestion, CacheEntry, options)
"""

from inline_completion.models.enums import (
    AbortReason,
    Availability,
    AvailabilityStatus,
    CompletionStatus,
    DetectedIntent,
    DomainType,
    OutputLanguage,
    PreferredLength,
    QueueLane,
    WarmupPhase,
    WritingStyle,
)
from inline_completion.models.ai_config import AIConfig, CreateOptions, SessionPromptOptions
from inline_completion.models.completion_models import (
    CacheEntry,
    CompletionOptions,
    CompletionRequest,
    CompletionSuggestion,
    ContextMetadata,
    PromptOptions,
)

__all__ = [
    # Enums
    "AbortReason",
    "Availability",
    "AvailabilityStatus",
    "CompletionStatus",
    "DetectedIntent",
    "DomainType",
    "OutputLanguage",
    "PreferredLength",
    "QueueLane",
    "WarmupPhase",
    "WritingStyle",
    # Backend configuration
    "AIConfig",
    "CreateOptions",
    "SessionPromptOptions",
    # Completion models
    "CacheEntry",
    "CompletionOptions",
    "CompletionRequest",
    "CompletionSuggestion",
    "ContextMetadata",
    "PromptOptions",
]
