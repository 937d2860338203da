"""
Abstract base for completion providers.

A provider turns a fully assembled prompt into raw model output. It is the
only thing the orchestrator knows about the backend; swapping the local
model for a remote API or a test stub does not touch the orchestrator.
"""

from abc import ABC, abstractmethod
from typing import Optional

from inline_completion.models.ai_config import AIConfig
from inline_completion.models.completion_models import PromptOptions
from inline_completion.models.enums import Availability


class BaseCompletionProvider(ABC):
    """
    Abstract base class for completion providers.

    Implementations must respect options.abort_signal and options.timeout_ms
    promptly, and fail with the completion error taxonomy:
    AvailabilityError, CompletionTimeoutError, CompletionAbortedError or
    ProviderError.
    """

    name: str = "provider"

    @abstractmethod
    async def prompt(
        self,
        text: str,
        config: AIConfig,
        options: Optional[PromptOptions] = None,
    ) -> str:
        """
        Send one prompt and return the raw model output.

        Args:
            text: Fully assembled prompt
            config: Generation parameters
            options: Timeout, session scope, response constraint, abort signal
        """
        pass

    async def availability(self) -> Availability:
        """Readiness without side effects. Remote providers are always available."""
        return Availability.AVAILABLE

    async def warmup(self, config: AIConfig, scope: str = "global") -> None:
        """Prepare whatever the first prompt for `scope` would otherwise create."""
        return None

    async def close(self) -> None:
        """Release sessions and transport resources."""
        return None
