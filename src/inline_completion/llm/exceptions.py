"""
Exception taxonomy for backend-facing failures.

Every failure that crosses the orchestrator boundary is one of these types,
so the API layer can map each to a status the caller understands without
inspecting messages.
"""

from typing import Optional

from inline_completion.models.enums import AbortReason, AvailabilityStatus, CompletionStatus


class CompletionError(Exception):
    """
    Base exception for all completion errors.

    Attributes:
        message: Human-readable message, safe to show to the user
        details: Structured context for logs
        status: Status reported to the caller
    """

    status: CompletionStatus = CompletionStatus.PROVIDER_ERROR

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AvailabilityError(CompletionError):
    """
    Raised when the backend is not ready to serve prompts.

    Never retried automatically. NEEDS_DOWNLOAD in particular must not start a
    download; the user has to ask for it.
    """

    _STATUS_MAP = {
        AvailabilityStatus.NEEDS_DOWNLOAD: CompletionStatus.NEEDS_DOWNLOAD,
        AvailabilityStatus.DOWNLOADING: CompletionStatus.DOWNLOADING,
        AvailabilityStatus.UNAVAILABLE: CompletionStatus.UNAVAILABLE,
    }

    _DEFAULT_MESSAGES = {
        AvailabilityStatus.NEEDS_DOWNLOAD: "On-device model not installed. Open settings to download.",
        AvailabilityStatus.DOWNLOADING: "On-device model is downloading. Please retry shortly.",
        AvailabilityStatus.UNAVAILABLE: "On-device AI is unavailable on this device.",
    }

    def __init__(
        self,
        availability: AvailabilityStatus,
        message: Optional[str] = None,
        details: dict | None = None,
    ):
        super().__init__(message or self._DEFAULT_MESSAGES[availability], details)
        self.availability = availability
        self.status = self._STATUS_MAP[availability]


class CompletionTimeoutError(CompletionError):
    """Raised when a backend call exceeds the response timeout. Not retried."""

    status = CompletionStatus.TIMEOUT

    def __init__(self, message: str = "Completion timed out", details: dict | None = None):
        super().__init__(message, details)


class CompletionAbortedError(CompletionError):
    """
    Raised when a backend call is aborted before it resolves.

    Superseded calls are turned into an empty result by the orchestrator and
    never reach the caller; only externally aborted calls surface.
    """

    status = CompletionStatus.ABORTED

    def __init__(
        self,
        reason: AbortReason = AbortReason.EXTERNAL,
        message: str = "Completion aborted",
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.reason = reason


class ProviderError(CompletionError):
    """Any other backend failure (transport, auth, malformed HTTP response)."""
    pass


class ResponseParseError(CompletionError):
    """
    Raised when backend output is not the expected structured shape.

    Recovered locally by the parser; never surfaced.
    """
    pass
