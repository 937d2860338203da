"""
Abstract contract for a stateful language-model backend.

A backend creates sessions; a session holds whatever running state the model
keeps between prompts (for Ollama, the `context` token array). The session
manager owns every session it creates and is the only caller of create().
"""

from abc import ABC, abstractmethod
from typing import Optional

from inline_completion.models.ai_config import CreateOptions, SessionPromptOptions
from inline_completion.models.enums import Availability


class BackendSession(ABC):
    """
    One live backend session.

    Implementations must let prompt() be cancelled at its await points;
    the abort guard relies on task cancellation to stop a call.
    """

    @abstractmethod
    async def prompt(self, text: str, options: Optional[SessionPromptOptions] = None) -> str:
        """Send one prompt and return the raw model output."""
        pass

    async def clone(self) -> Optional["BackendSession"]:
        """
        Derive a disposable copy carrying the same state.

        Returns None when the backend does not support cloning.
        """
        return None

    @abstractmethod
    def destroy(self) -> None:
        """Release the session. Must be safe to call twice."""
        pass


class LanguageModelBackend(ABC):
    """Creation contract used by the session manager."""

    @abstractmethod
    async def availability(self) -> Availability:
        """
        Report readiness without side effects.

        DOWNLOADABLE must never trigger a download.
        """
        pass

    @abstractmethod
    async def create(self, options: CreateOptions) -> BackendSession:
        """Create a fresh session with the given generation parameters."""
        pass

    async def close(self) -> None:
        """Release transport resources."""
        pass
