"""Integration test fixtures (service checks and prerequisites).

Provides fixtures for checking if external services are available.
Integration tests are skipped if required services are not running.
"""

import httpx
import pytest
import pytest_asyncio

from inline_completion.completion.orchestrator import CompletionOrchestrator
from inline_completion.llm.ollama_backend import OllamaBackend
from inline_completion.llm.stub_provider import StubCompletionProvider
from inline_completion.prompt.prompt_builder import PromptBuilder
from inline_completion.scheduling.admission_queue import AdmissionQueue

OLLAMA_URL = "http://localhost:11434"


@pytest.fixture(scope="session")
def check_ollama():
    """Check if Ollama is available at localhost:11434.

    Skips tests if Ollama is not reachable.
    """
    try:
        response = httpx.get(f"{OLLAMA_URL}/api/tags", timeout=5)
    except httpx.HTTPError as e:
        pytest.skip(f"Ollama not available: {e}")
    if response.status_code != 200:
        pytest.skip("Ollama not available (non-200 status)")
    return response.json()


@pytest.fixture
def integration_settings(test_settings):
    """Settings pointing at a local Ollama server."""
    test_settings.OLLAMA_BASE_URL = OLLAMA_URL
    test_settings.PROMETHEUS_ENABLED = False
    return test_settings


@pytest_asyncio.fixture
async def real_ollama_backend(check_ollama, integration_settings):
    """Real OllamaBackend; skips when the configured model is not pulled."""
    names = {m.get("name") for m in check_ollama.get("models", [])}
    model = integration_settings.OLLAMA_MODEL
    if model not in names and f"{model}:latest" not in names:
        pytest.skip(f"Model {model} not pulled (run: ollama pull {model})")

    backend = OllamaBackend(
        base_url=integration_settings.OLLAMA_BASE_URL,
        model=model,
        timeout=60,
    )
    yield backend
    await backend.close()


@pytest.fixture
def create_stub_orchestrator():
    """Factory for a real orchestrator and prompt builder over a scripted provider.

    Usage:
        orchestrator, provider = create_stub_orchestrator('{"suggestions": []}')
    """
    def _create(responder='{"suggestions": []}', **kwargs):
        provider = StubCompletionProvider(responder=responder)
        orchestrator = CompletionOrchestrator(
            provider=provider,
            prompt_builder=PromptBuilder(),
            queue=AdmissionQueue(min_delay=0),
            **kwargs,
        )
        return orchestrator, provider

    return _create
