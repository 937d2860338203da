"""
Local model provider: prompts go through the session manager.
"""

from typing import Optional

from inline_completion.llm.base_provider import BaseCompletionProvider
from inline_completion.llm.session_manager import SessionManager
from inline_completion.models.ai_config import AIConfig
from inline_completion.models.completion_models import PromptOptions
from inline_completion.models.enums import Availability


class LocalModelProvider(BaseCompletionProvider):
    """Provider backed by cached, cloneable local model sessions."""

    name = "local"

    def __init__(self, session_manager: SessionManager):
        self.session_manager = session_manager

    async def prompt(
        self,
        text: str,
        config: AIConfig,
        options: Optional[PromptOptions] = None,
    ) -> str:
        return await self.session_manager.prompt_with_session(text, config, options)

    async def availability(self) -> Availability:
        return await self.session_manager.availability()

    async def warmup(self, config: AIConfig, scope: str = "global") -> None:
        await self.session_manager.acquire(config, scope)

    async def close(self) -> None:
        await self.session_manager.shutdown()
