"""
Intent Provider Package

Pluggable backends that turn a transcript into intent + entities + confidence.

Architecture:
    ProviderOrchestrator → [primary, *fallbacks] → KeywordProvider (terminal)
                               ↓
                 OpenAI / Anthropic / Google (httpx)

Usage:
    from voiceai.providers import build_orchestrator

    orchestrator = build_orchestrator(config)
    command = await orchestrator.parse("clock me in", prompt_context)
"""

from __future__ import annotations

import httpx

from voiceai.config_models import ProviderConfig, VoiceAIConfig
from voiceai.models import ProviderId
from voiceai.providers.base import (
    BaseIntentProvider,
    PromptContext,
    ProviderError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderUnavailableError,
)
from voiceai.providers.keywords import KeywordProvider
from voiceai.providers.orchestrator import ProviderOrchestrator
from voiceai.registry.commands import CommandRegistry

__all__ = [
    "BaseIntentProvider",
    "KeywordProvider",
    "PromptContext",
    "ProviderError",
    "ProviderHTTPError",
    "ProviderOrchestrator",
    "ProviderResponseError",
    "ProviderUnavailableError",
    "build_orchestrator",
    "get_provider",
]


def get_provider(
    config: ProviderConfig,
    registry: CommandRegistry | None = None,
    client: httpx.AsyncClient | None = None,
) -> BaseIntentProvider:
    """
    Get a provider instance for a provider config.

    Args:
        config: Provider configuration (provider id, key, model...)
        registry: Command registry (keyword provider only)
        client: Shared HTTP client (AI providers only)

    Raises:
        ValueError: If the provider id is not supported
    """
    provider = config.provider

    if provider == ProviderId.OPENAI:
        from voiceai.providers.openai_provider import OpenAIProvider

        return OpenAIProvider(config, client=client)

    elif provider == ProviderId.ANTHROPIC:
        from voiceai.providers.anthropic_provider import AnthropicProvider

        return AnthropicProvider(config, client=client)

    elif provider == ProviderId.GOOGLE:
        from voiceai.providers.google_provider import GoogleProvider

        return GoogleProvider(config, client=client)

    elif provider == ProviderId.KEYWORDS:
        return KeywordProvider(registry)

    else:
        raise ValueError(
            f"Unknown provider: {provider}. Available: {[p.value for p in ProviderId]}"
        )


def build_orchestrator(
    config: VoiceAIConfig,
    registry: CommandRegistry | None = None,
    client: httpx.AsyncClient | None = None,
) -> ProviderOrchestrator:
    """Build the provider chain described by ``config.providers``."""
    configured = []
    if config.providers.primary is not None:
        configured.append(config.providers.primary)
    configured.extend(config.providers.fallbacks)

    providers = [
        get_provider(c, registry, client)
        for c in configured
        if c.provider != ProviderId.KEYWORDS
    ]
    return ProviderOrchestrator(
        providers,
        keyword_provider=KeywordProvider(registry),
        confidence_threshold=config.confidence_threshold,
        timeout_ms=config.timeout_ms,
    )
