"""
Completion orchestrator.

Turns a "user wants a suggestion now" event into ranked insertion strings:

    request -> cache (fast path) -> admission queue -> provider
            -> response parser -> overlap reconciler -> ranker -> cache

At most one foreground request is active per orchestrator. Starting a new one
supersedes the previous call, which then resolves to an empty list instead of
raising, so a stale result can never overwrite a newer one.
"""

import time
from typing import Optional, Protocol

import structlog

from inline_completion.completion.overlap import trim_suggestions
from inline_completion.completion.ranker import SuggestionRanker
from inline_completion.llm.abort import CancellationToken
from inline_completion.llm.base_provider import BaseCompletionProvider
from inline_completion.llm.exceptions import (
    AvailabilityError,
    CompletionAbortedError,
    CompletionError,
    CompletionTimeoutError,
    ProviderError,
)
from inline_completion.models.ai_config import AIConfig
from inline_completion.models.completion_models import (
    CompletionOptions,
    CompletionRequest,
    CompletionSuggestion,
    PromptOptions,
)
from inline_completion.models.enums import (
    AbortReason,
    Availability,
    AvailabilityStatus,
    QueueLane,
    WarmupPhase,
)
from inline_completion.monitoring.metrics import completion_requests_total
from inline_completion.persistence.completion_cache import CompletionCache
from inline_completion.scheduling.admission_queue import AdmissionQueue
from inline_completion.scheduling.clock import Clock, resolve_clock
from inline_completion.validation.response_parser import build_response_constraint, parse_suggestions

logger = structlog.get_logger(__name__)


class PromptAssembler(Protocol):
    """What the orchestrator needs from prompt assembly."""

    def build(self, request: CompletionRequest, max_suggestions: int): ...


class CompletionOrchestrator:
    """
    Facade over cache, admission queue, provider, parser, reconciler and ranker.

    Owns the provider lifecycle: shutdown() drains the queue and closes the
    provider (destroying every live backend session).

    Attributes:
        provider: Backend provider (local model, remote API or stub)
        ai_config: Generation parameters; never mutated
        max_suggestions: Default result cap
        response_timeout_ms: Default backend deadline
    """

    def __init__(
        self,
        provider: BaseCompletionProvider,
        prompt_builder: PromptAssembler,
        ai_config: Optional[AIConfig] = None,
        cache: Optional[CompletionCache] = None,
        queue: Optional[AdmissionQueue] = None,
        ranker: Optional[SuggestionRanker] = None,
        clock: Optional[Clock] = None,
        max_suggestions: int = 3,
        response_timeout_ms: int = 10000,
    ):
        clock = resolve_clock(clock)
        self.provider = provider
        self.prompt_builder = prompt_builder
        self.ai_config = ai_config or AIConfig()
        self.cache = cache if cache is not None else CompletionCache(clock=clock)
        self.queue = queue if queue is not None else AdmissionQueue(clock=clock)
        self.ranker = ranker or SuggestionRanker()
        self.max_suggestions = max_suggestions
        self.response_timeout_ms = response_timeout_ms
        self._active: Optional[CancellationToken] = None

        logger.info(
            "Completion orchestrator initialized",
            provider=provider.name,
            max_suggestions=max_suggestions,
            response_timeout_ms=response_timeout_ms,
            priority_lane=self.queue.priority_lane,
        )

    @property
    def has_active_request(self) -> bool:
        return self._active is not None

    async def generate_completions(
        self,
        request: CompletionRequest,
        options: Optional[CompletionOptions] = None,
    ) -> list[CompletionSuggestion]:
        """
        Ranked suggestions for one trigger event.

        Supersedes whatever foreground request is still in flight.

        Returns:
            Up to max_suggestions suggestions; [] if this call was superseded

        Raises:
            AvailabilityError: Backend not ready
            CompletionTimeoutError: Backend exceeded the response timeout
            CompletionAbortedError: Caller's abort signal fired
            ProviderError: Any other backend failure
        """
        options = options or CompletionOptions()
        if self._active is not None:
            self._active.cancel(AbortReason.SUPERSEDED)
        token = CancellationToken()
        self._active = token
        try:
            return await self._run(request, options, token, QueueLane.FOREGROUND)
        finally:
            if self._active is token:
                self._active = None

    async def prefetch_completions(
        self,
        request: CompletionRequest,
        options: Optional[CompletionOptions] = None,
    ) -> list[CompletionSuggestion]:
        """
        Warm the cache for a likely-next request.

        Never supersedes the active request and is never superseded itself;
        it shares the cache and the admission queue with foreground calls.
        """
        return await self._run(request, options or CompletionOptions(), CancellationToken(), QueueLane.PREFETCH)

    async def warmup(self, phase: WarmupPhase = WarmupPhase.ACTIVATE, scope: str = "global") -> Availability:
        """
        Report availability and, for ACTIVATE, create the session for `scope`.

        Raises:
            AvailabilityError: ACTIVATE on a backend that is not ready
        """
        availability = await self.provider.availability()
        logger.debug("Warmup", phase=phase.value, availability=availability.value, provider=self.provider.name)
        if phase is WarmupPhase.ACTIVATE:
            await self.provider.warmup(self.ai_config, scope)
        return availability

    async def shutdown(self) -> None:
        """Cancel queued work and release the provider."""
        if self._active is not None:
            self._active.cancel(AbortReason.EXTERNAL)
        await self.queue.drain()
        await self.provider.close()
        logger.info("Completion orchestrator shut down", cached_entries=len(self.cache))

    async def _run(
        self,
        request: CompletionRequest,
        options: CompletionOptions,
        token: CancellationToken,
        lane: QueueLane,
    ) -> list[CompletionSuggestion]:
        kind = lane.value
        unlink = token.link(options.abort_signal, AbortReason.EXTERNAL) if options.abort_signal else None
        max_suggestions = options.max_suggestions or self.max_suggestions
        try:
            key = request.fingerprint()
            cached = self.cache.get(key)
            if cached is not None:
                completion_requests_total.labels(kind=kind, outcome="cache_hit").inc()
                return cached[:max_suggestions]

            bundle = self.prompt_builder.build(request, max_suggestions)
            prompt_options = PromptOptions(
                timeout_ms=options.response_timeout_ms or self.response_timeout_ms,
                session_scope=bundle.scope,
                response_constraint=build_response_constraint(max_suggestions),
                abort_signal=token,
            )

            start_time = time.time()
            try:
                raw = await self.queue.execute(
                    lambda: self._invoke(bundle.prompt, prompt_options, token),
                    lane=lane,
                )
            except CompletionAbortedError as e:
                if e.reason is AbortReason.SUPERSEDED:
                    raw = None
                else:
                    self._record_failure(kind, e)
                    raise
            except CompletionError as e:
                self._record_failure(kind, e)
                raise
            except Exception as e:
                error = ProviderError(str(e) or type(e).__name__, details={"error_type": type(e).__name__})
                self._record_failure(kind, error)
                raise error from e

            if raw is None or token.reason is AbortReason.SUPERSEDED:
                completion_requests_total.labels(kind=kind, outcome="superseded").inc()
                logger.debug("Completion superseded", kind=kind)
                return []

            ranked = self._rank(request, raw)
            self.cache.set(key, ranked)
            completion_requests_total.labels(kind=kind, outcome="success").inc()
            logger.debug(
                "Completion generated",
                kind=kind,
                candidates=len(ranked),
                latency_ms=int((time.time() - start_time) * 1000),
            )
            return ranked[:max_suggestions]
        finally:
            if unlink is not None:
                unlink()

    async def _invoke(self, prompt: str, options: PromptOptions, token: CancellationToken) -> Optional[str]:
        # Cancelled while waiting for admission
        if token.cancelled:
            if token.reason is AbortReason.SUPERSEDED:
                return None
            raise CompletionAbortedError(token.reason)
        return await self.provider.prompt(prompt, self.ai_config, options)

    def _rank(self, request: CompletionRequest, raw: str) -> list[CompletionSuggestion]:
        candidates = parse_suggestions(raw)
        if candidates is None:
            candidates = [raw]
        trimmed = trim_suggestions(request.text_before, candidates, request.text_after)
        return self.ranker.rank(trimmed)

    def _record_failure(self, kind: str, error: CompletionError) -> None:
        if isinstance(error, AvailabilityError):
            outcome = "unavailable"
            if error.availability is AvailabilityStatus.DOWNLOADING:
                logger.debug("Backend downloading", provider=self.provider.name)
            else:
                logger.warning(
                    "Backend unavailable",
                    provider=self.provider.name,
                    availability=error.availability.value,
                    error=error.message,
                )
        elif isinstance(error, CompletionTimeoutError):
            outcome = "timeout"
            logger.debug("Completion timed out", provider=self.provider.name, **error.details)
        elif isinstance(error, CompletionAbortedError):
            outcome = "aborted"
            logger.debug("Completion aborted", reason=error.reason.value)
        else:
            outcome = "error"
            logger.warning("Provider error", provider=self.provider.name, error=error.message)
        completion_requests_total.labels(kind=kind, outcome=outcome).inc()
