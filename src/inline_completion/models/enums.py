"""
Enumerations for the Inline Completion Engine data models.

All enums are closed sets - no values outside these sets are permitted.
"""

from enum import Enum


class OutputLanguage(str, Enum):
    """Languages the local model is asked to produce."""
    
    EN = "en"
    ES = "es"
    JA = "ja"


class Availability(str, Enum):
    """
    Backend readiness as reported by the model creation contract.
    
    DOWNLOADABLE means a model can be fetched but nobody asked for it yet;
    the engine never starts that download on its own.
    """
    
    AVAILABLE = "available"
    DOWNLOADABLE = "downloadable"
    DOWNLOADING = "downloading"
    UNAVAILABLE = "unavailable"


class AvailabilityStatus(str, Enum):
    """Reason carried by AvailabilityError."""
    
    NEEDS_DOWNLOAD = "needs_download"
    DOWNLOADING = "downloading"
    UNAVAILABLE = "unavailable"


class AbortReason(str, Enum):
    """
    Why an in-flight backend call was aborted.
    
    The first abort wins; later triggers on the same call are ignored.
    """
    
    TIMEOUT = "timeout"
    EXTERNAL = "external"
    SUPERSEDED = "superseded"


class CompletionStatus(str, Enum):
    """Status reported to the caller alongside an empty suggestion list."""
    
    NEEDS_DOWNLOAD = "NEEDS_DOWNLOAD"
    DOWNLOADING = "DOWNLOADING"
    UNAVAILABLE = "UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    ABORTED = "ABORTED"
    PROVIDER_ERROR = "PROVIDER_ERROR"


class QueueLane(str, Enum):
    """Admission lanes. Identical behavior unless the priority lane is enabled."""
    
    FOREGROUND = "foreground"
    PREFETCH = "prefetch"


class DomainType(str, Enum):
    """Site family detected from the page URL."""
    
    GITHUB = "github"
    GMAIL = "gmail"
    SOCIAL = "social"
    DOCS = "docs"
    GENERIC = "generic"


class WritingStyle(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"
    TECHNICAL = "technical"
    CREATIVE = "creative"
    NEUTRAL = "neutral"


class PreferredLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class DetectedIntent(str, Enum):
    STATEMENT = "statement"
    QUESTION = "question"
    INSTRUCTION = "instruction"
    NARRATIVE = "narrative"


class WarmupPhase(str, Enum):
    """
    Warm-up stages requested by the caller.
    
    AVAILABILITY only reports readiness; ACTIVATE also creates the session so
    the first completion does not pay for it.
    """
    
    AVAILABILITY = "availability"
    ACTIVATE = "activate"
