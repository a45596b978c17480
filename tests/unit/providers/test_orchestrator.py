"""Tests for the provider fallback chain."""

import time

import httpx
import pytest

from voiceai.config_models import ProviderConfig
from voiceai.models import ProviderId, ProviderStatus
from voiceai.providers import ProviderOrchestrator
from voiceai.providers.base import ProviderError
from voiceai.providers.openai_provider import OpenAIProvider


class TestFallbackChain:
    @pytest.mark.asyncio
    async def test_primary_answers(self, stub_provider):
        primary = stub_provider(intent="get_tasks", confidence=0.9)
        orchestrator = ProviderOrchestrator([primary])

        command = await orchestrator.parse("show my tasks")

        assert command.intent == "get_tasks"
        assert command.provider == ProviderId.OPENAI
        assert orchestrator.status_snapshot()[ProviderId.OPENAI] == ProviderStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_failure_moves_to_fallback(self, stub_provider):
        primary = stub_provider(ProviderId.OPENAI, error=ProviderError("down"))
        fallback = stub_provider(ProviderId.ANTHROPIC, intent="clock_out")
        orchestrator = ProviderOrchestrator([primary, fallback])

        command = await orchestrator.parse("clock me out")

        assert command.provider == ProviderId.ANTHROPIC
        assert orchestrator.status_snapshot()[ProviderId.OPENAI] == ProviderStatus.ERROR

    @pytest.mark.asyncio
    async def test_errored_provider_is_skipped(self, stub_provider):
        primary = stub_provider(error=RuntimeError("boom"))
        orchestrator = ProviderOrchestrator([primary])

        await orchestrator.parse("clock me in")
        await orchestrator.parse("clock me in")

        assert primary.calls == 1

    @pytest.mark.asyncio
    async def test_all_fail_uses_keywords(self, stub_provider):
        orchestrator = ProviderOrchestrator(
            [
                stub_provider(ProviderId.OPENAI, error=ProviderError("down")),
                stub_provider(ProviderId.ANTHROPIC, error=ProviderError("down")),
                stub_provider(ProviderId.GOOGLE, error=ProviderError("down")),
            ]
        )

        command = await orchestrator.parse("clock me in")

        assert command.provider == ProviderId.KEYWORDS
        assert command.intent == "clock_in"
        assert 0.0 <= command.confidence <= 1.0

    @pytest.mark.asyncio
    async def test_low_confidence_is_rejected(self, stub_provider):
        primary = stub_provider(intent="get_status", confidence=0.4)
        orchestrator = ProviderOrchestrator([primary], confidence_threshold=0.7)

        command = await orchestrator.parse("clock me in")

        assert command.provider == ProviderId.KEYWORDS
        assert orchestrator.status_snapshot()[ProviderId.OPENAI] == ProviderStatus.ERROR

    @pytest.mark.asyncio
    async def test_unavailable_provider_never_called(self, stub_provider):
        primary = stub_provider(available=False)
        orchestrator = ProviderOrchestrator([primary])

        assert orchestrator.status_snapshot()[ProviderId.OPENAI] == ProviderStatus.ERROR
        await orchestrator.parse("clock me in")
        assert primary.calls == 0

    @pytest.mark.asyncio
    async def test_blank_text_skips_providers(self, stub_provider):
        primary = stub_provider()
        orchestrator = ProviderOrchestrator([primary])

        command = await orchestrator.parse("   ")

        assert command.intent == "unknown"
        assert primary.calls == 0

    @pytest.mark.asyncio
    async def test_malformed_provider_json(self, make_client):
        body = {"choices": [{"message": {"content": "not json at all"}}]}
        client = make_client(lambda request: httpx.Response(200, json=body))
        provider = OpenAIProvider(ProviderConfig(provider="openai", api_key="sk"), client=client)
        orchestrator = ProviderOrchestrator([provider])

        command = await orchestrator.parse("clock me in")

        assert command.provider == ProviderId.KEYWORDS
        assert orchestrator.status_snapshot()[ProviderId.OPENAI] == ProviderStatus.ERROR
        await client.aclose()


class TestTimeouts:
    @pytest.mark.asyncio
    async def test_slow_provider_times_out(self, stub_provider):
        slow = stub_provider(delay=5.0)
        orchestrator = ProviderOrchestrator([slow], timeout_ms=50)

        command = await orchestrator.parse("clock me in")

        assert command.provider == ProviderId.KEYWORDS
        assert orchestrator.status_snapshot()[ProviderId.OPENAI] == ProviderStatus.ERROR

    @pytest.mark.asyncio
    async def test_total_time_bounded(self, stub_provider):
        orchestrator = ProviderOrchestrator(
            [
                stub_provider(ProviderId.OPENAI, delay=5.0),
                stub_provider(ProviderId.ANTHROPIC, delay=5.0),
            ],
            timeout_ms=50,
        )

        start = time.monotonic()
        await orchestrator.parse("clock me in")
        elapsed = time.monotonic() - start

        assert elapsed < 1.0


class TestStatus:
    def test_snapshot_is_read_only(self, stub_provider):
        orchestrator = ProviderOrchestrator([stub_provider()])
        snapshot = orchestrator.status_snapshot()
        with pytest.raises(TypeError):
            snapshot[ProviderId.OPENAI] = ProviderStatus.ERROR

    def test_keywords_always_available(self):
        orchestrator = ProviderOrchestrator([])
        assert orchestrator.status_snapshot() == {ProviderId.KEYWORDS: ProviderStatus.AVAILABLE}

    @pytest.mark.asyncio
    async def test_reset_status(self, stub_provider):
        primary = stub_provider(error=ProviderError("down"))
        orchestrator = ProviderOrchestrator([primary])
        await orchestrator.parse("clock me in")

        primary.error = None
        orchestrator.reset_status(ProviderId.OPENAI)
        command = await orchestrator.parse("clock me in")

        assert command.provider == ProviderId.OPENAI

    @pytest.mark.asyncio
    async def test_update_settings(self, stub_provider):
        primary = stub_provider(confidence=0.6)
        orchestrator = ProviderOrchestrator([primary], confidence_threshold=0.7)
        orchestrator.update_settings(confidence_threshold=0.5)

        command = await orchestrator.parse("clock me in")

        assert command.provider == ProviderId.OPENAI

    def test_keyword_entries_dropped(self, stub_provider):
        orchestrator = ProviderOrchestrator([stub_provider(ProviderId.KEYWORDS)])
        assert orchestrator.providers == []

    @pytest.mark.asyncio
    async def test_aclose(self, stub_provider):
        primary = stub_provider()
        orchestrator = ProviderOrchestrator([primary])
        await orchestrator.aclose()
        assert primary.closed is True
