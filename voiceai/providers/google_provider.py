"""Google Gemini generateContent intent provider."""

from __future__ import annotations

from typing import Any

from voiceai.models import ProviderId
from voiceai.providers.http_provider import HTTPIntentProvider


class GoogleProvider(HTTPIntentProvider):
    default_base_url = "https://generativelanguage.googleapis.com"
    default_model = "gemini-pro"
    api_key_env = "GOOGLE_API_KEY"

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.GOOGLE

    def _build_request(self, prompt: str) -> tuple[str, dict[str, str], dict[str, Any]]:
        path = f"/v1beta/models/{self._model}:generateContent?key={self._api_key}"
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._config.temperature,
                "maxOutputTokens": self._config.max_tokens,
            },
        }
        return path, {"Content-Type": "application/json"}, body

    def _extract_content(self, data: dict[str, Any]) -> str:
        return data["candidates"][0]["content"]["parts"][0]["text"]
