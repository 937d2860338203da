"""Unit tests for the completion orchestrator (stub provider, mock prompt builder)."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest

from inline_completion.llm.abort import CancellationToken
from inline_completion.llm.exceptions import (
    AvailabilityError,
    CompletionAbortedError,
    CompletionTimeoutError,
    ProviderError,
)
from inline_completion.models.completion_models import CompletionOptions
from inline_completion.models.enums import AbortReason, Availability, AvailabilityStatus, WarmupPhase


def suggestions_json(*texts: str) -> str:
    return json.dumps({"suggestions": [{"text": t} for t in texts]})


async def wait_until(predicate, attempts: int = 200) -> None:
    """Yield to the loop until predicate() holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


class TestGenerateCompletions:
    """Happy path, caching and result shaping."""

    @pytest.mark.asyncio
    async def test_ranked_structured_output(self, create_orchestrator, sample_request):
        orchestrator, _ = create_orchestrator(suggestions_json("Hi", "Hello there!  ", "Greetings."))

        result = await orchestrator.generate_completions(sample_request)

        assert [s.text for s in result] == ["Hello there!", "Greetings.", "Hi"]
        assert not orchestrator.has_active_request

    @pytest.mark.asyncio
    async def test_unstructured_output_is_one_candidate(self, create_orchestrator, create_test_request):
        orchestrator, _ = create_orchestrator("Finish the sentence gracefully.")

        result = await orchestrator.generate_completions(create_test_request("Please "))

        assert len(result) == 1
        assert result[0].text == "Finish the sentence gracefully."

    @pytest.mark.asyncio
    async def test_empty_structured_list(self, create_orchestrator, sample_request):
        orchestrator, _ = create_orchestrator(suggestions_json())

        assert await orchestrator.generate_completions(sample_request) == []

    @pytest.mark.asyncio
    async def test_overlap_trimmed(self, create_orchestrator, create_test_request):
        orchestrator, _ = create_orchestrator(suggestions_json("実行結果を見てみます"))

        result = await orchestrator.generate_completions(create_test_request("次に実行結果を見て", language="ja"))

        assert [s.text for s in result] == ["みます"]

    @pytest.mark.asyncio
    async def test_cache_hit_skips_backend(self, create_orchestrator, sample_request):
        orchestrator, provider = create_orchestrator(suggestions_json("Sounds good."))

        first = await orchestrator.generate_completions(sample_request)
        second = await orchestrator.generate_completions(sample_request)

        assert first == second
        assert len(provider.calls) == 1
        assert orchestrator.cache.access_count(sample_request.fingerprint()) == 2

    @pytest.mark.asyncio
    async def test_cached_value_isolated_from_caller(self, create_orchestrator, sample_request):
        orchestrator, _ = create_orchestrator(suggestions_json("Sounds good."))

        first = await orchestrator.generate_completions(sample_request)
        first.clear()

        assert len(await orchestrator.generate_completions(sample_request)) == 1

    @pytest.mark.asyncio
    async def test_max_suggestions_option(self, create_orchestrator, sample_request, mock_prompt_builder):
        orchestrator, _ = create_orchestrator(suggestions_json("One.", "Two.", "Three.", "Four."))

        result = await orchestrator.generate_completions(sample_request, CompletionOptions(max_suggestions=2))

        assert len(result) == 2
        mock_prompt_builder.build.assert_called_once_with(sample_request, 2)

    @pytest.mark.asyncio
    async def test_prompt_options_passed_to_provider(self, create_orchestrator, sample_request, ai_config):
        orchestrator, provider = create_orchestrator(suggestions_json("Ok."), response_timeout_ms=2500)

        await orchestrator.generate_completions(sample_request)

        text, config, options = provider.calls[0]
        assert text == "PROMPT"
        assert config == ai_config
        assert options.timeout_ms == 2500
        assert options.session_scope == "scope:00000000"
        assert options.response_constraint["properties"]["suggestions"]["maxItems"] == 3
        assert options.abort_signal is not None


class TestSupersession:
    """A newer foreground request supersedes the one in flight."""

    @pytest.mark.asyncio
    async def test_back_to_back_identical_requests(self, create_orchestrator, sample_request):
        orchestrator, provider = create_orchestrator(suggestions_json("Sounds good."), delay=0.05)

        first_task = asyncio.create_task(orchestrator.generate_completions(sample_request))
        await wait_until(lambda: len(provider.calls) == 1)
        second = await orchestrator.generate_completions(sample_request)
        first = await first_task

        assert first == []
        assert [s.text for s in second] == ["Sounds good."]
        assert len(orchestrator.cache) == 1
        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    async def test_superseded_result_not_cached(self, create_orchestrator, create_test_request):
        orchestrator, _ = create_orchestrator(suggestions_json("More text."), delay=0.05)
        older = create_test_request("Hello wor")
        newer = create_test_request("Hello world")

        older_task = asyncio.create_task(orchestrator.generate_completions(older))
        await asyncio.sleep(0.01)
        await orchestrator.generate_completions(newer)

        assert await older_task == []
        assert older.fingerprint() not in orchestrator.cache
        assert newer.fingerprint() in orchestrator.cache

    @pytest.mark.asyncio
    async def test_superseded_while_queued(self, create_orchestrator, create_test_request):
        """Both calls issued in the same tick: the older never reaches the backend."""
        orchestrator, provider = create_orchestrator(suggestions_json("Done."))

        first, second = await asyncio.gather(
            orchestrator.generate_completions(create_test_request("a")),
            orchestrator.generate_completions(create_test_request("b")),
        )

        assert first == []
        assert [s.text for s in second] == ["Done."]
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_prefetch_does_not_supersede(self, create_orchestrator, create_test_request):
        orchestrator, _ = create_orchestrator(suggestions_json("Indeed."), delay=0.02)

        foreground = asyncio.create_task(orchestrator.generate_completions(create_test_request("one")))
        await asyncio.sleep(0.005)
        prefetched = await orchestrator.prefetch_completions(create_test_request("two"))

        assert [s.text for s in prefetched] == ["Indeed."]
        assert [s.text for s in await foreground] == ["Indeed."]

    @pytest.mark.asyncio
    async def test_prefetch_warms_cache(self, create_orchestrator, sample_request):
        orchestrator, provider = create_orchestrator(suggestions_json("Indeed."))

        await orchestrator.prefetch_completions(sample_request)
        result = await orchestrator.generate_completions(sample_request)

        assert [s.text for s in result] == ["Indeed."]
        assert len(provider.calls) == 1


class TestFailures:
    """Error taxonomy at the orchestrator boundary."""

    @pytest.mark.asyncio
    async def test_external_abort(self, create_orchestrator, sample_request):
        orchestrator, provider = create_orchestrator(suggestions_json("Late."), delay=0.5)
        signal = CancellationToken()

        task = asyncio.create_task(
            orchestrator.generate_completions(sample_request, CompletionOptions(abort_signal=signal))
        )
        await wait_until(lambda: len(provider.calls) == 1)
        signal.cancel(AbortReason.EXTERNAL)

        with pytest.raises(CompletionAbortedError) as exc_info:
            await task
        assert exc_info.value.reason is AbortReason.EXTERNAL
        assert sample_request.fingerprint() not in orchestrator.cache

    @pytest.mark.asyncio
    async def test_already_aborted_signal(self, create_orchestrator, sample_request):
        orchestrator, provider = create_orchestrator(suggestions_json("Never."))
        signal = CancellationToken()
        signal.cancel()

        with pytest.raises(CompletionAbortedError):
            await orchestrator.generate_completions(sample_request, CompletionOptions(abort_signal=signal))
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_timeout(self, create_orchestrator, sample_request, manual_clock):
        orchestrator, provider = create_orchestrator(suggestions_json("Slow."), delay=5.0, clock=manual_clock)

        task = asyncio.create_task(
            orchestrator.generate_completions(sample_request, CompletionOptions(response_timeout_ms=1000))
        )
        await wait_until(lambda: manual_clock.pending_timers >= 2)
        manual_clock.advance(1.0)

        with pytest.raises(CompletionTimeoutError):
            await task
        assert not orchestrator.has_active_request

    @pytest.mark.asyncio
    async def test_unknown_error_wrapped(self, create_orchestrator, sample_request):
        def explode(text):
            raise RuntimeError("socket closed")

        orchestrator, _ = create_orchestrator(explode)

        with pytest.raises(ProviderError) as exc_info:
            await orchestrator.generate_completions(sample_request)
        assert exc_info.value.details["error_type"] == "RuntimeError"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_availability_error_passes_through(self, create_orchestrator, sample_request):
        def not_installed(text):
            raise AvailabilityError(AvailabilityStatus.NEEDS_DOWNLOAD)

        orchestrator, _ = create_orchestrator(not_installed)

        with pytest.raises(AvailabilityError) as exc_info:
            await orchestrator.generate_completions(sample_request)
        assert exc_info.value.availability is AvailabilityStatus.NEEDS_DOWNLOAD

    @pytest.mark.asyncio
    async def test_failure_does_not_block_next_request(self, create_orchestrator, create_test_request):
        outputs = iter([RuntimeError("boom"), suggestions_json("Recovered.")])

        def respond(text):
            value = next(outputs)
            if isinstance(value, Exception):
                raise value
            return value

        orchestrator, _ = create_orchestrator(respond)

        with pytest.raises(ProviderError):
            await orchestrator.generate_completions(create_test_request("first"))
        result = await orchestrator.generate_completions(create_test_request("second"))

        assert [s.text for s in result] == ["Recovered."]


class TestLifecycle:
    """Warmup and shutdown."""

    @pytest.mark.asyncio
    async def test_warmup_activate_creates_session(self, create_orchestrator, ai_config):
        orchestrator, provider = create_orchestrator()

        with patch.object(provider, "warmup", new=AsyncMock()) as warmup:
            availability = await orchestrator.warmup(WarmupPhase.ACTIVATE, "scope:12345678")

        assert availability is Availability.AVAILABLE
        warmup.assert_awaited_once_with(ai_config, "scope:12345678")

    @pytest.mark.asyncio
    async def test_warmup_availability_only(self, create_orchestrator):
        orchestrator, provider = create_orchestrator()

        with patch.object(provider, "warmup", new=AsyncMock()) as warmup:
            await orchestrator.warmup(WarmupPhase.AVAILABILITY)

        warmup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_shutdown_closes_provider(self, create_orchestrator):
        orchestrator, provider = create_orchestrator()

        await orchestrator.shutdown()

        assert provider.closed is True
