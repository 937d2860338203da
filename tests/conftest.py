"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import pytest

from inline_completion.config import Settings
from inline_completion.models.ai_config import AIConfig
from inline_completion.models.completion_models import CompletionRequest, ContextMetadata
from inline_completion.scheduling.clock import ManualClock


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.OLLAMA_BASE_URL = "http://custom:11434"
    """
    return Settings(
        # === Application ===
        APP_NAME="Inline Completion Engine (Test)",
        APP_VERSION="0.1.0",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Provider ===
        PROVIDER="local",
        OLLAMA_BASE_URL="http://localhost:11434",
        OLLAMA_MODEL="qwen2.5:3b",
        OLLAMA_TIMEOUT=30,
        OPENAI_API_KEY=None,

        # === Engine ===
        MAX_SUGGESTIONS=3,
        RESPONSE_TIMEOUT_MS=10000,
        QUEUE_MIN_DELAY_MS=0,
        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def ai_config() -> AIConfig:
    """Default generation parameters."""
    return AIConfig()


@pytest.fixture
def manual_clock() -> ManualClock:
    """Virtual clock; move time with manual_clock.advance(seconds)."""
    return ManualClock()


@pytest.fixture
def sample_request() -> CompletionRequest:
    """Caret at the end of a short English sentence on a docs page."""
    text = "Thanks for the update. I will review the draft and "
    return CompletionRequest(
        input_text=text,
        cursor_position=len(text),
        context_metadata=ContextMetadata(
            domain="docs.example.com",
            language="en",
            page_title="Quarterly planning",
            url="https://docs.example.com/plans/q3?tab=2#intro",
        ),
        context_text="Quarterly planning covers hiring and budget. Drafts are due Friday.",
    )


@pytest.fixture
def create_test_request():
    """Factory fixture to create CompletionRequest with custom text.

    Usage:
        def test_something(create_test_request):
            request = create_test_request("Hello wor", url="https://github.com/a/b")

    The caret defaults to the end of the text.
    """
    def _create(
        input_text: str = "Hello ",
        cursor_position: int | None = None,
        url: str | None = None,
        page_title: str | None = None,
        language: str | None = "en",
        domain: str | None = None,
        context_text: str | None = None,
    ) -> CompletionRequest:
        return CompletionRequest(
            input_text=input_text,
            cursor_position=len(input_text) if cursor_position is None else cursor_position,
            context_metadata=ContextMetadata(
                domain=domain,
                language=language,
                page_title=page_title,
                url=url,
            ),
            context_text=context_text,
        )

    return _create
