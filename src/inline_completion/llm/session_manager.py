"""
Session manager for stateful backend sessions.

Sessions are expensive to create, so they are cached per (scope, config) key
and torn down after a period without acquisitions. Every prompt runs against
a disposable clone when the backend supports cloning, keeping running state
from one prompt out of the next.
"""

import asyncio
from typing import Optional

import structlog

from inline_completion.llm.abort import AbortGuard
from inline_completion.llm.backend import BackendSession, LanguageModelBackend
from inline_completion.llm.exceptions import AvailabilityError
from inline_completion.models.ai_config import AIConfig, CreateOptions, SessionKey, SessionPromptOptions
from inline_completion.models.completion_models import PromptOptions
from inline_completion.models.enums import Availability, AvailabilityStatus, OutputLanguage
from inline_completion.monitoring.metrics import backend_sessions_active, session_events_total
from inline_completion.scheduling.clock import Clock, TimerHandle, resolve_clock

logger = structlog.get_logger(__name__)


class SessionManager:
    """
    Owns every backend session and its idle-expiry timer.

    Registry updates happen synchronously between awaits, so concurrent
    acquisitions of one key can never observe a half-updated entry.
    Concurrent first acquisitions share a single creation.

    Attributes:
        backend: Session factory
        idle_timeout: Seconds without acquisition before a session is destroyed
        default_output_language: Used when AIConfig.output_language is None
    """

    def __init__(
        self,
        backend: LanguageModelBackend,
        idle_timeout: float = 300.0,
        clock: Optional[Clock] = None,
        default_output_language: OutputLanguage = OutputLanguage.EN,
    ):
        self.backend = backend
        self.idle_timeout = idle_timeout
        self.default_output_language = default_output_language
        self._clock = resolve_clock(clock)
        self._sessions: dict[SessionKey, BackendSession] = {}
        self._timers: dict[SessionKey, TimerHandle] = {}
        self._creating: dict[SessionKey, asyncio.Future] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def has_session(self, config: AIConfig, scope: str = "global") -> bool:
        return config.session_key(scope) in self._sessions

    async def availability(self) -> Availability:
        return await self.backend.availability()

    async def acquire(self, config: AIConfig, scope: str = "global") -> BackendSession:
        """
        Return the live session for (scope, config), creating it if needed.

        Every acquisition resets the idle-expiry timer.

        Raises:
            AvailabilityError: Backend not ready (never starts a download)
        """
        key = config.session_key(scope)
        session = self._sessions.get(key)
        if session is not None:
            session_events_total.labels(event="reused").inc()
        else:
            creating = self._creating.get(key)
            if creating is None:
                creating = asyncio.ensure_future(self._create_and_register(key, config))
                self._creating[key] = creating
                creating.add_done_callback(lambda _: self._creating.pop(key, None))
            session = await asyncio.shield(creating)
        self._bump_expiration(key, session)
        return session

    async def prompt_with_session(
        self,
        text: str,
        config: AIConfig,
        options: Optional[PromptOptions] = None,
    ) -> str:
        """
        Prompt a clone of the (scope, config) session under an abort guard.

        Args:
            text: Fully assembled prompt
            config: Generation parameters (part of the session identity)
            options: Timeout, scope, response constraint, abort signal

        Returns:
            Raw model output

        Raises:
            AvailabilityError, CompletionTimeoutError, CompletionAbortedError,
            ProviderError
        """
        options = options or PromptOptions()
        base = await self.acquire(config, options.session_scope)
        working = await self._safe_clone(base) or base
        prompt_options = SessionPromptOptions(response_constraint=options.response_constraint)
        try:
            with AbortGuard(options.timeout_ms, options.abort_signal, self._clock) as guard:
                return await guard.run(lambda: working.prompt(text, prompt_options))
        finally:
            if working is not base:
                self._destroy(working)

    async def shutdown(self) -> None:
        """Destroy every live session and release the backend."""
        for creating in list(self._creating.values()):
            creating.cancel()
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            self._destroy(session)
        backend_sessions_active.set(0)
        await self.backend.close()
        logger.info("Session manager shut down", destroyed=len(sessions))

    async def _create_and_register(self, key: SessionKey, config: AIConfig) -> BackendSession:
        # Registered here, not by the waiters: creation outlives cancelled acquirers
        session = self._sessions.setdefault(key, await self._create_session(config))
        backend_sessions_active.set(len(self._sessions))
        self._bump_expiration(key, session)
        return session

    async def _create_session(self, config: AIConfig) -> BackendSession:
        availability = await self.backend.availability()
        logger.debug("Backend availability", availability=availability.value)
        if availability is Availability.DOWNLOADABLE:
            # Downloads are started by the user only
            raise AvailabilityError(AvailabilityStatus.NEEDS_DOWNLOAD)
        if availability is Availability.DOWNLOADING:
            raise AvailabilityError(AvailabilityStatus.DOWNLOADING)
        if availability is not Availability.AVAILABLE:
            raise AvailabilityError(
                AvailabilityStatus.UNAVAILABLE,
                details={"availability": availability.value},
            )

        options = CreateOptions(
            temperature=config.temperature,
            top_k=config.top_k,
            max_tokens=config.max_tokens,
            output_language=config.output_language or self.default_output_language,
            system_prompt=config.system_prompt,
        )
        session = await self.backend.create(options)
        session_events_total.labels(event="created").inc()
        logger.debug(
            "Created backend session",
            temperature=options.temperature,
            top_k=options.top_k,
            output_language=options.output_language.value,
        )
        return session

    def _bump_expiration(self, key: SessionKey, session: BackendSession) -> None:
        existing = self._timers.pop(key, None)
        if existing is not None:
            existing.cancel()
        self._timers[key] = self._clock.call_later(self.idle_timeout, self._expire, key, session)

    def _expire(self, key: SessionKey, session: BackendSession) -> None:
        if self._sessions.get(key) is not session:
            return
        del self._sessions[key]
        self._timers.pop(key, None)
        self._destroy(session)
        session_events_total.labels(event="expired").inc()
        backend_sessions_active.set(len(self._sessions))
        logger.debug("Backend session expired", idle_timeout=self.idle_timeout)

    async def _safe_clone(self, session: BackendSession) -> Optional[BackendSession]:
        try:
            return await session.clone()
        except Exception as e:
            session_events_total.labels(event="clone_failed").inc()
            logger.debug("Session clone failed; reusing base session", error=str(e))
            return None

    def _destroy(self, session: BackendSession) -> None:
        try:
            session.destroy()
        except Exception as e:
            logger.debug("Session destroy failed", error=str(e))
        else:
            session_events_total.labels(event="destroyed").inc()
