"""Coordinates intent providers with a sequential fallback chain.

Order: primary → fallbacks → keywords. Each AI attempt is raced against
``timeout_ms``; a failure, timeout or below-threshold answer flags the
provider ``error`` and the next one is tried. Flagged providers are skipped
until ``reset_status()``. The keyword provider always answers, so ``parse``
never raises and never waits longer than ``timeout_ms × (providers + 1)``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from types import MappingProxyType

from voiceai.models import ProviderId, ProviderStatus, VoiceCommand
from voiceai.providers.base import BaseIntentProvider, PromptContext
from voiceai.providers.keywords import KeywordProvider

logger = logging.getLogger(__name__)


class ProviderOrchestrator:
    """Owns the provider chain and the provider status cache."""

    def __init__(
        self,
        providers: list[BaseIntentProvider],
        keyword_provider: KeywordProvider | None = None,
        confidence_threshold: float = 0.7,
        timeout_ms: int = 5000,
    ):
        self._providers = [p for p in providers if p.provider_id != ProviderId.KEYWORDS]
        self._keywords = keyword_provider if keyword_provider is not None else KeywordProvider()
        self._threshold = confidence_threshold
        self._timeout_ms = timeout_ms
        self._status: dict[ProviderId, ProviderStatus] = {}
        self._init_status()

    def _init_status(self) -> None:
        self._status = {}
        for provider in self._providers:
            if provider.is_available:
                self._status[provider.provider_id] = ProviderStatus.AVAILABLE
            else:
                logger.warning(
                    "Provider %s is not configured, skipping it", provider.provider_id.value
                )
                self._status[provider.provider_id] = ProviderStatus.ERROR
        self._status[ProviderId.KEYWORDS] = ProviderStatus.AVAILABLE

    @property
    def providers(self) -> list[BaseIntentProvider]:
        return list(self._providers)

    @property
    def keyword_provider(self) -> KeywordProvider:
        return self._keywords

    def status_snapshot(self) -> Mapping[ProviderId, ProviderStatus]:
        """Read-only copy of the provider status cache."""
        return MappingProxyType(dict(self._status))

    def reset_status(self, provider: ProviderId | None = None) -> None:
        """Clear error flags (all providers, or one)."""
        if provider is None:
            self._init_status()
        elif provider in self._status:
            self._status[provider] = ProviderStatus.AVAILABLE

    def update_settings(
        self,
        confidence_threshold: float | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        if confidence_threshold is not None:
            self._threshold = confidence_threshold
        if timeout_ms is not None:
            self._timeout_ms = timeout_ms

    async def parse(
        self, text: str, prompt_context: PromptContext | None = None
    ) -> VoiceCommand:
        """Interpret ``text`` with the first provider that answers confidently."""
        if not text or not text.strip():
            return self._keywords.match(text)

        prompt_context = prompt_context or PromptContext()
        timeout_s = self._timeout_ms / 1000

        for provider in self._providers:
            provider_id = provider.provider_id
            if self._status.get(provider_id) == ProviderStatus.ERROR:
                continue

            start = time.monotonic()
            try:
                command = await asyncio.wait_for(
                    provider.interpret(text, prompt_context), timeout=timeout_s
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Provider %s timed out after %dms", provider_id.value, self._timeout_ms
                )
                self._status[provider_id] = ProviderStatus.ERROR
                continue
            except Exception as e:
                logger.warning("Provider %s failed: %s", provider_id.value, e, exc_info=True)
                self._status[provider_id] = ProviderStatus.ERROR
                continue

            elapsed_ms = int((time.monotonic() - start) * 1000)
            if command.confidence >= self._threshold:
                logger.debug(
                    "Provider %s answered %s (%.2f) in %dms",
                    provider_id.value,
                    command.intent,
                    command.confidence,
                    elapsed_ms,
                )
                self._status[provider_id] = ProviderStatus.AVAILABLE
                return command

            logger.info(
                "Provider %s below confidence threshold (%.2f < %.2f)",
                provider_id.value,
                command.confidence,
                self._threshold,
            )
            self._status[provider_id] = ProviderStatus.ERROR

        return self._keywords.match(text)

    async def aclose(self) -> None:
        for provider in self._providers:
            await provider.aclose()
