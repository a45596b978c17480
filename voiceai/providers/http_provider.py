"""Shared HTTP plumbing for hosted AI providers."""

from __future__ import annotations

import logging
import os
from abc import abstractmethod
from typing import Any

import httpx

from voiceai.config_models import ProviderConfig
from voiceai.models import VoiceCommand
from voiceai.providers.base import (
    BaseIntentProvider,
    PromptContext,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderUnavailableError,
    parse_provider_content,
)

logger = logging.getLogger(__name__)


class HTTPIntentProvider(BaseIntentProvider):
    """Provider that POSTs a prompt to a JSON API and reads back text content.

    Subclasses supply the endpoint, headers and body, and know where the
    model's text lives in the response.
    """

    default_base_url: str = ""
    default_model: str = ""
    api_key_env: str = ""

    def __init__(
        self,
        config: ProviderConfig,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self._config = config
        self._api_key = config.api_key or os.getenv(config.api_key_env or self.api_key_env)
        self._base_url = config.base_url or self.default_base_url
        self._model = config.model or self.default_model
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def is_available(self) -> bool:
        return bool(self._api_key)

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._client

    @abstractmethod
    def _build_request(self, prompt: str) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Return (path, headers, json body) for a prompt."""

    @abstractmethod
    def _extract_content(self, data: dict[str, Any]) -> str:
        """Pull the model's text out of a decoded response body."""

    async def interpret(self, text: str, prompt_context: PromptContext) -> VoiceCommand:
        if not self.is_available:
            raise ProviderUnavailableError(f"{self.provider_id.value} has no API key")

        path, headers, body = self._build_request(prompt_context.build_prompt(text))
        url = self._base_url.rstrip("/") + path
        response = await self._get_client().post(url, headers=headers, json=body)

        if not response.is_success:
            logger.warning(
                "%s API error: %s - %s",
                self.provider_id.value,
                response.status_code,
                response.text[:200],
            )
            raise ProviderHTTPError(self.provider_id, response.status_code)

        try:
            content = self._extract_content(response.json())
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise ProviderResponseError(
                f"{self.provider_id.value} response missing content: {e}"
            ) from e

        return parse_provider_content(content, text, self.provider_id)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
