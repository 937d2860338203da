"""
Scripted provider for tests and offline development.
"""

import asyncio
import inspect
from typing import Awaitable, Callable, Optional, Union

from inline_completion.llm.abort import AbortGuard
from inline_completion.llm.base_provider import BaseCompletionProvider
from inline_completion.models.ai_config import AIConfig
from inline_completion.models.completion_models import PromptOptions
from inline_completion.scheduling.clock import Clock, resolve_clock

Responder = Union[str, Callable[[str], Union[str, Awaitable[str]]]]


class StubCompletionProvider(BaseCompletionProvider):
    """
    Returns canned output while honouring timeouts and abort signals.

    Args:
        responder: Fixed output, or a callable (sync or async) of the prompt
        delay: Seconds to wait on the clock before answering
        clock: Clock used for the delay and the abort guard

    Every call is recorded in `calls` as (text, config, options).
    """

    name = "stub"

    def __init__(
        self,
        responder: Responder = '{"suggestions": []}',
        delay: float = 0.0,
        clock: Optional[Clock] = None,
    ):
        self.responder = responder
        self.delay = delay
        self._clock = resolve_clock(clock)
        self.calls: list[tuple[str, AIConfig, PromptOptions]] = []
        self.closed = False

    async def prompt(
        self,
        text: str,
        config: AIConfig,
        options: Optional[PromptOptions] = None,
    ) -> str:
        options = options or PromptOptions()
        self.calls.append((text, config, options))
        with AbortGuard(options.timeout_ms, options.abort_signal, self._clock) as guard:
            return await guard.run(lambda: self._respond(text))

    async def _respond(self, text: str) -> str:
        if self.delay > 0:
            await self._clock.sleep(self.delay)
        else:
            await asyncio.sleep(0)
        if isinstance(self.responder, str):
            return self.responder
        result = self.responder(text)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def close(self) -> None:
        self.closed = True
