"""Unit test fixtures (fakes and stubs).

Provides in-memory backends and prompt builders for testing without a
running model server.
"""

import asyncio
from typing import Optional
from unittest.mock import Mock

import pytest

from inline_completion.completion.orchestrator import CompletionOrchestrator
from inline_completion.llm.backend import BackendSession, LanguageModelBackend
from inline_completion.llm.stub_provider import StubCompletionProvider
from inline_completion.models.ai_config import CreateOptions, SessionPromptOptions
from inline_completion.models.enums import Availability
from inline_completion.prompt.prompt_builder import PromptBuilder
from inline_completion.scheduling.admission_queue import AdmissionQueue


class FakeSession(BackendSession):
    """Records prompts; answers with the backend's scripted output."""

    def __init__(self, backend: "FakeBackend", options: CreateOptions, is_clone: bool = False):
        self.backend = backend
        self.options = options
        self.is_clone = is_clone
        self.prompts: list[tuple[str, Optional[SessionPromptOptions]]] = []
        self.destroyed = 0

    async def prompt(self, text: str, options: Optional[SessionPromptOptions] = None) -> str:
        self.prompts.append((text, options))
        if self.backend.prompt_gate is not None:
            await self.backend.prompt_gate.wait()
        else:
            await asyncio.sleep(0)
        if self.backend.prompt_error is not None:
            raise self.backend.prompt_error
        return self.backend.output

    async def clone(self) -> Optional[BackendSession]:
        if self.backend.clone_error is not None:
            raise self.backend.clone_error
        if not self.backend.supports_clone:
            return None
        clone = FakeSession(self.backend, self.options, is_clone=True)
        self.backend.clones.append(clone)
        return clone

    def destroy(self) -> None:
        self.destroyed += 1


class FakeBackend(LanguageModelBackend):
    """Scriptable backend: availability, output, errors and clone support."""

    def __init__(self, availability: Availability = Availability.AVAILABLE, output: str = "ok"):
        self.current_availability = availability
        self.output = output
        self.supports_clone = True
        self.clone_error: Optional[Exception] = None
        self.prompt_error: Optional[Exception] = None
        self.prompt_gate: Optional[asyncio.Event] = None
        self.create_gate: Optional[asyncio.Event] = None
        self.created: list[FakeSession] = []
        self.clones: list[FakeSession] = []
        self.closed = False

    async def availability(self) -> Availability:
        return self.current_availability

    async def create(self, options: CreateOptions) -> FakeSession:
        if self.create_gate is not None:
            await self.create_gate.wait()
        session = FakeSession(self, options)
        self.created.append(session)
        return session

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_backend() -> FakeBackend:
    """Available backend whose sessions answer "ok"."""
    return FakeBackend()


@pytest.fixture
def prompt_builder() -> PromptBuilder:
    """Real prompt builder over the bundled template."""
    return PromptBuilder()


@pytest.fixture
def mock_prompt_builder():
    """Mock prompt builder returning a fixed bundle."""
    mock = Mock()
    mock.build = Mock(return_value=Mock(prompt="PROMPT", scope="scope:00000000"))
    return mock


@pytest.fixture
def create_orchestrator(mock_prompt_builder):
    """Factory fixture for an orchestrator over a stub provider.

    Usage:
        def test_something(create_orchestrator):
            orchestrator, provider = create_orchestrator('{"suggestions": []}')
    """
    def _create(responder='{"suggestions": []}', delay: float = 0.0, clock=None, **kwargs):
        provider = StubCompletionProvider(responder=responder, delay=delay, clock=clock)
        orchestrator = CompletionOrchestrator(
            provider=provider,
            prompt_builder=mock_prompt_builder,
            queue=AdmissionQueue(min_delay=0),
            clock=clock,
            **kwargs,
        )
        return orchestrator, provider

    return _create
