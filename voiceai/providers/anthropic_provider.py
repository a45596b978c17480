"""Anthropic messages-API intent provider."""

from __future__ import annotations

from typing import Any

from voiceai.models import ProviderId
from voiceai.providers.http_provider import HTTPIntentProvider

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(HTTPIntentProvider):
    default_base_url = "https://api.anthropic.com"
    default_model = "claude-3-haiku-20240307"
    api_key_env = "ANTHROPIC_API_KEY"

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.ANTHROPIC

    def _build_request(self, prompt: str) -> tuple[str, dict[str, str], dict[str, Any]]:
        headers = {
            "x-api-key": self._api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }
        body = {
            "model": self._model,
            "max_tokens": self._config.max_tokens,
            "temperature": self._config.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        return "/v1/messages", headers, body

    def _extract_content(self, data: dict[str, Any]) -> str:
        return data["content"][0]["text"]
