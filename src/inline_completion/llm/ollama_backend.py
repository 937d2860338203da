"""
Ollama implementation of the backend session contract.

Communicates with the Ollama API using httpx AsyncClient:
- GET /api/tags: availability (is the model pulled?)
- POST /api/pull: explicit, user-requested model download
- POST /api/generate: one prompt, carrying the session's running context

A session's state is the `context` token array Ollama returns after each
generate call; cloning a session copies that array.
"""

import time
from typing import Any, Optional

import httpx
import structlog

from inline_completion.llm.backend import BackendSession, LanguageModelBackend
from inline_completion.llm.exceptions import (
    AvailabilityError,
    CompletionTimeoutError,
    ProviderError,
)
from inline_completion.models.ai_config import CreateOptions, SessionPromptOptions
from inline_completion.models.enums import Availability, AvailabilityStatus, OutputLanguage
from inline_completion.monitoring.metrics import backend_latency_seconds

logger = structlog.get_logger(__name__)

LANGUAGE_NAMES = {
    OutputLanguage.EN: "English",
    OutputLanguage.ES: "Spanish",
    OutputLanguage.JA: "Japanese",
}


class OllamaBackend(LanguageModelBackend):
    """
    Session factory over one Ollama model.

    Never pulls a model on its own: a missing model is reported as
    DOWNLOADABLE until pull_model() is called explicitly.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "qwen2.5:3b",
        timeout: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Ollama server URL
            model: Model tag to serve completions from
            timeout: HTTP timeout in seconds (the abort guard usually fires first)
            transport: Optional httpx transport, e.g. MockTransport in tests
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._downloading = False

        logger.info("Ollama backend initialized", base_url=self.base_url, model=model)

    def get_client(self) -> httpx.AsyncClient:
        """Get or create the shared async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    @property
    def downloading(self) -> bool:
        return self._downloading

    async def availability(self) -> Availability:
        if self._downloading:
            return Availability.DOWNLOADING
        try:
            response = await self.get_client().get("/api/tags", timeout=5.0)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Ollama availability check failed", error=str(e))
            return Availability.UNAVAILABLE

        names = {m.get("name") for m in data.get("models", [])}
        if self.model in names or f"{self.model}:latest" in names:
            return Availability.AVAILABLE
        logger.debug("Model not pulled", model=self.model, available=sorted(n for n in names if n))
        return Availability.DOWNLOADABLE

    async def create(self, options: CreateOptions) -> "OllamaSession":
        return OllamaSession(self, options)

    async def pull_model(self) -> None:
        """
        Download the configured model. Only ever called on explicit request.

        Raises:
            ProviderError: Pull failed or server unreachable
        """
        if self._downloading:
            return
        self._downloading = True
        logger.info("Pulling Ollama model", model=self.model)
        try:
            response = await self.get_client().post(
                "/api/pull",
                json={"model": self.model, "stream": False},
                timeout=None,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Model download failed: {e.response.status_code}",
                details={"model": self.model, "error": e.response.text},
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Model download failed: {e}",
                details={"model": self.model, "error_type": type(e).__name__},
            ) from e
        finally:
            self._downloading = False
        logger.info("Ollama model pulled", model=self.model)

    async def close(self) -> None:
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed Ollama client connection")


class OllamaSession(BackendSession):
    """
    A conversation with running context against one model.

    POST /api/generate payload:
    {
        "model": "qwen2.5:3b",
        "prompt": "...",
        "system": "...\\nRespond in English.",
        "stream": false,
        "context": [...],
        "format": <JSON Schema>,
        "options": {"temperature": 0.7, "top_k": 3, "num_predict": 150}
    }
    """

    def __init__(
        self,
        backend: OllamaBackend,
        options: CreateOptions,
        context: Optional[list[int]] = None,
    ):
        self.backend = backend
        self.options = options
        self.context: list[int] = list(context or [])
        self.destroyed = False

    @property
    def system_instruction(self) -> str:
        language = f"Respond in {LANGUAGE_NAMES[self.options.output_language]}."
        if self.options.system_prompt:
            return f"{self.options.system_prompt}\n{language}"
        return language

    def build_payload(self, text: str, options: Optional[SessionPromptOptions]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.backend.model,
            "prompt": text,
            "system": self.system_instruction,
            "stream": False,
            "options": {
                "temperature": self.options.temperature,
                "top_k": self.options.top_k,
                "num_predict": self.options.max_tokens,
            },
        }
        if self.context:
            payload["context"] = list(self.context)
        if options is not None and options.response_constraint is not None:
            payload["format"] = options.response_constraint
        return payload

    async def prompt(self, text: str, options: Optional[SessionPromptOptions] = None) -> str:
        if self.destroyed:
            raise ProviderError("Session already destroyed")

        start_time = time.time()
        payload = self.build_payload(text, options)
        try:
            response = await self.backend.get_client().post("/api/generate", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            self._observe(start_time, success=False)
            raise CompletionTimeoutError(
                f"Ollama request timeout after {self.backend.timeout}s",
                details={"timeout": self.backend.timeout},
            ) from e
        except httpx.HTTPStatusError as e:
            self._observe(start_time, success=False)
            status_code = e.response.status_code
            if status_code == 404:
                raise AvailabilityError(
                    AvailabilityStatus.NEEDS_DOWNLOAD,
                    details={"model": self.backend.model},
                ) from e
            raise ProviderError(
                f"Ollama error: {status_code}",
                details={"status": status_code, "error": e.response.text},
            ) from e
        except httpx.HTTPError as e:
            self._observe(start_time, success=False)
            raise ProviderError(
                f"Network error: {e}",
                details={"error_type": type(e).__name__},
            ) from e
        except ValueError as e:
            self._observe(start_time, success=False)
            raise ProviderError("Invalid JSON response from Ollama") from e

        self._observe(start_time, success=True)
        if isinstance(data.get("context"), list):
            self.context = data["context"]
        return data.get("response", "")

    async def clone(self) -> "OllamaSession":
        return OllamaSession(self.backend, self.options, context=self.context)

    def destroy(self) -> None:
        self.destroyed = True
        self.context = []

    @staticmethod
    def _observe(start_time: float, success: bool) -> None:
        backend_latency_seconds.labels(
            provider="local", success=str(success).lower()
        ).observe(time.time() - start_time)
