"""
Remote provider for OpenAI-compatible chat completion APIs.

POST {base_url}/chat/completions with the prompt as the user message and, when
a response constraint is supplied, a strict json_schema response format.
"""

import time
from typing import Any, Optional

import httpx
import structlog

from inline_completion.llm.abort import AbortGuard
from inline_completion.llm.base_provider import BaseCompletionProvider
from inline_completion.llm.exceptions import (
    AvailabilityError,
    CompletionTimeoutError,
    ProviderError,
)
from inline_completion.models.ai_config import AIConfig
from inline_completion.models.completion_models import PromptOptions
from inline_completion.models.enums import Availability, AvailabilityStatus
from inline_completion.monitoring.metrics import backend_latency_seconds
from inline_completion.scheduling.clock import Clock, resolve_clock

logger = structlog.get_logger(__name__)

MISSING_KEY_MESSAGE = "Add your OpenAI API key in Settings to enable the OpenAI provider."


class OpenAICompatibleProvider(BaseCompletionProvider):
    """
    Stateless remote provider; every prompt is an independent HTTP call.

    No sessions, so warmup() is a no-op and availability only depends on
    whether an API key is configured.
    """

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        timeout: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Clock] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._clock = resolve_clock(clock)
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def availability(self) -> Availability:
        return Availability.AVAILABLE if self.api_key else Availability.UNAVAILABLE

    def build_body(self, text: str, config: AIConfig, options: PromptOptions) -> dict[str, Any]:
        messages = []
        if config.system_prompt:
            messages.append({"role": "system", "content": config.system_prompt})
        messages.append({"role": "user", "content": text})

        body: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
        }
        if options.response_constraint is not None:
            body["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": "CompletionSuggestions",
                    "schema": options.response_constraint,
                    "strict": True,
                },
            }
        return body

    async def prompt(
        self,
        text: str,
        config: AIConfig,
        options: Optional[PromptOptions] = None,
    ) -> str:
        if not self.api_key:
            raise AvailabilityError(AvailabilityStatus.UNAVAILABLE, MISSING_KEY_MESSAGE)
        options = options or PromptOptions()
        body = self.build_body(text, config, options)
        with AbortGuard(options.timeout_ms, options.abort_signal, self._clock) as guard:
            return await guard.run(lambda: self._send(body))

    async def _send(self, body: dict[str, Any]) -> str:
        start_time = time.time()
        success = False
        try:
            response = await self._get_client().post(
                "/chat/completions",
                json=body,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            if response.is_error:
                raise ProviderError(
                    f"OpenAI error: {response.status_code} {response.text}",
                    details={"status": response.status_code},
                )
            data = response.json()
            content = _extract_content(data)
            if not content:
                raise ProviderError("OpenAI: empty response")
            success = True
            return content.rstrip()
        except httpx.TimeoutException as e:
            raise CompletionTimeoutError(
                f"OpenAI request timeout after {self.timeout}s",
                details={"timeout": self.timeout},
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Network error: {e}",
                details={"error_type": type(e).__name__},
            ) from e
        except ValueError as e:
            raise ProviderError("Invalid JSON response from OpenAI") from e
        finally:
            backend_latency_seconds.labels(
                provider=self.name, success=str(success).lower()
            ).observe(time.time() - start_time)

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed OpenAI client connection")


def _extract_content(data: Any) -> Optional[str]:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None
