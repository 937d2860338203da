"""
Backend abstraction, sessions and providers.

Components:
- LanguageModelBackend / BackendSession: stateful backend contract
- OllamaBackend: local Ollama implementation of that contract
- SessionManager: cached, idle-expiring, cloneable sessions
- BaseCompletionProvider: the one-operation provider interface
- LocalModelProvider, OpenAICompatibleProvider, StubCompletionProvider
- abort: cancellation tokens and the per-call abort guard
- exceptions: completion error taxonomy
"""

from inline_completion.llm.abort import AbortGuard, CancellationToken
from inline_completion.llm.backend import BackendSession, LanguageModelBackend
from inline_completion.llm.base_provider import BaseCompletionProvider
from inline_completion.llm.exceptions import (
    AvailabilityError,
    CompletionAbortedError,
    CompletionError,
    CompletionTimeoutError,
    ProviderError,
    ResponseParseError,
)
from inline_completion.llm.local_provider import LocalModelProvider
from inline_completion.llm.ollama_backend import OllamaBackend, OllamaSession
from inline_completion.llm.openai_provider import OpenAICompatibleProvider
from inline_completion.llm.session_manager import SessionManager
from inline_completion.llm.stub_provider import StubCompletionProvider

__all__ = [
    "AbortGuard",
    "CancellationToken",
    "BackendSession",
    "LanguageModelBackend",
    "BaseCompletionProvider",
    "LocalModelProvider",
    "OllamaBackend",
    "OllamaSession",
    "OpenAICompatibleProvider",
    "SessionManager",
    "StubCompletionProvider",
    "AvailabilityError",
    "CompletionAbortedError",
    "CompletionError",
    "CompletionTimeoutError",
    "ProviderError",
    "ResponseParseError",
]
