"""Shared test fixtures for VoiceAI tests.

This module provides common fixtures used across all test modules:
- Business contexts and configurations
- Command registry access
- httpx mock transports (no test touches the network)

Usage:
    def test_something(construction_context):
        extractor = EntityExtractor(construction_context)
        ...
"""

import asyncio
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from voiceai.config_models import BusinessContext, VoiceAIConfig
from voiceai.models import ProviderId, VoiceCommand
from voiceai.providers.base import BaseIntentProvider, PromptContext
from voiceai.registry.commands import DEFAULT_REGISTRY, CommandRegistry


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"


# ─────────────────────────────────────────────────────────────────────────────
# Business Context Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def business_context() -> BusinessContext:
    """A small business with a website and support address."""
    return BusinessContext(
        name="Acme Corp",
        domain="general",
        capabilities=["time tracking", "task management"],
        website="https://acme.example.com",
        support_email="help@acme.example.com",
    )


@pytest.fixture
def construction_context() -> BusinessContext:
    """Construction company context (enables domain rules and keywords)."""
    return BusinessContext(
        name="BuildRight",
        domain="construction",
        capabilities=["time tracking", "safety reporting"],
    )


# ─────────────────────────────────────────────────────────────────────────────
# Config Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def config(business_context: BusinessContext) -> VoiceAIConfig:
    """Default config bound to ``business_context`` with an action API."""
    return VoiceAIConfig(
        business_context=business_context,
        api_base_url="https://api.acme.example.com",
        api_key="test-key",
        retry_attempts=1,
    )


@pytest.fixture
def registry() -> CommandRegistry:
    return DEFAULT_REGISTRY


# ─────────────────────────────────────────────────────────────────────────────
# HTTP Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def make_client(recorded_requests: list[httpx.Request]) -> Callable[..., httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by ``handler``.

    Every request is appended to ``recorded_requests``.
    """

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        def record(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        return httpx.AsyncClient(transport=httpx.MockTransport(record))

    return factory


# ─────────────────────────────────────────────────────────────────────────────
# Provider Stubs
# ─────────────────────────────────────────────────────────────────────────────


class StubProvider(BaseIntentProvider):
    """In-memory provider: returns a fixed command, raises, or sleeps."""

    def __init__(
        self,
        provider_id: ProviderId = ProviderId.OPENAI,
        intent: str = "clock_in",
        confidence: float = 0.95,
        error: Exception | None = None,
        delay: float = 0.0,
        available: bool = True,
    ):
        self._id = provider_id
        self.intent = intent
        self.confidence = confidence
        self.error = error
        self.delay = delay
        self.available = available
        self.calls = 0
        self.closed = False

    @property
    def provider_id(self) -> ProviderId:
        return self._id

    @property
    def is_available(self) -> bool:
        return self.available

    async def interpret(self, text: str, prompt_context: PromptContext | None = None) -> VoiceCommand:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return VoiceCommand(
            intent=self.intent,
            confidence=self.confidence,
            raw_text=text,
            provider=self._id,
        )

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def stub_provider() -> type[StubProvider]:
    """The StubProvider class, for building provider chains in tests."""
    return StubProvider
