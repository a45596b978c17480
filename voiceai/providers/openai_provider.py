"""OpenAI chat-completions intent provider."""

from __future__ import annotations

from typing import Any

from voiceai.models import ProviderId
from voiceai.providers.http_provider import HTTPIntentProvider


class OpenAIProvider(HTTPIntentProvider):
    default_base_url = "https://api.openai.com"
    default_model = "gpt-3.5-turbo"
    api_key_env = "OPENAI_API_KEY"

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.OPENAI

    def _build_request(self, prompt: str) -> tuple[str, dict[str, str], dict[str, Any]]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self._config.organization_id:
            headers["OpenAI-Organization"] = self._config.organization_id

        body = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
        }
        return "/v1/chat/completions", headers, body

    def _extract_content(self, data: dict[str, Any]) -> str:
        return data["choices"][0]["message"]["content"]
