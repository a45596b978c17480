"""Abstract base class and shared plumbing for intent providers.

Every provider turns a transcript into a VoiceCommand. AI providers return
JSON of the form ``{"intent": str, "entities": object, "confidence": number}``;
anything else is a ProviderResponseError.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from voiceai.config_models import BusinessContext
from voiceai.models import EntityType, ExtractedEntity, ProviderId, VoiceCommand

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_CONFIDENCE = 0.7

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SLOT_SUFFIX = re.compile(r"_(\d+)$")
_ENTITY_TYPES = {t.value: t for t in EntityType}


class ProviderError(Exception):
    """Base error for a failed provider attempt."""


class ProviderUnavailableError(ProviderError):
    """Provider is not configured (e.g. missing API key)."""


class ProviderHTTPError(ProviderError):
    """Provider endpoint answered with a non-2xx status."""

    def __init__(self, provider: ProviderId, status_code: int):
        super().__init__(f"{provider.value} API error: {status_code}")
        self.provider = provider
        self.status_code = status_code


class ProviderResponseError(ProviderError):
    """Provider content was not valid intent JSON."""


class ProviderPayload(BaseModel):
    """Validated shape of an AI provider's answer."""

    model_config = ConfigDict(extra="ignore")
    intent: str = Field(min_length=1)
    entities: dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(default=DEFAULT_PROVIDER_CONFIDENCE, ge=0.0, le=1.0)

    @field_validator("entities", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("confidence", mode="before")
    @classmethod
    def _missing_confidence(cls, value: Any) -> Any:
        return DEFAULT_PROVIDER_CONFIDENCE if value is None else value


@dataclass
class PromptContext:
    """What a provider needs to know beyond the transcript."""

    business_context: BusinessContext = field(default_factory=BusinessContext)
    intents: list[str] = field(default_factory=list)

    def build_prompt(self, text: str) -> str:
        ctx = self.business_context
        return (
            f'Extract the intent and entities from this {ctx.domain} voice command: "{text}"\n'
            "\n"
            f"Business Context: {ctx.name} - {', '.join(ctx.capabilities)}\n"
            f"Available intents: {', '.join(self.intents)}\n"
            "\n"
            "Return ONLY valid JSON in this exact format:\n"
            '{"intent": "detected_intent", "entities": {"task_identifier": "...", '
            '"recipient": "...", "message_content": "...", "project_name": "...", '
            '"priority_level": "..."}, "confidence": 0.8}\n'
            "\n"
            "Examples:\n"
            '- "clock me in" -> {"intent": "clock_in", "entities": {}, "confidence": 0.9}\n'
            '- "complete task 5" -> {"intent": "complete_task", '
            '"entities": {"task_identifier": "5"}, "confidence": 0.9}\n'
            '- "send message to John about delay" -> {"intent": "send_message", '
            '"entities": {"recipient": "John", "message_content": "delay"}, "confidence": 0.85}\n'
        )


def _normalize_key(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key.strip()).lower()


def entities_from_payload(
    raw: dict[str, Any], text: str, confidence: float
) -> dict[str, ExtractedEntity]:
    """Convert provider entity values into ExtractedEntity slots.

    Keys may be snake_case or camelCase. Unknown entity types, empty values
    and non-scalar values are dropped.
    """
    entities: dict[str, ExtractedEntity] = {}
    for key, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            continue
        value = str(value).strip()
        if not value:
            continue

        slot = _normalize_key(key)
        entity_type = _ENTITY_TYPES.get(_SLOT_SUFFIX.sub("", slot))
        if entity_type is None:
            logger.debug("Dropping unknown provider entity %r", key)
            continue

        entities[slot] = ExtractedEntity(
            type=entity_type,
            value=value,
            confidence=confidence,
            source_text=text,
        )
    return entities


def parse_provider_content(content: str, text: str, provider: ProviderId) -> VoiceCommand:
    """Validate provider content and build a VoiceCommand.

    Raises:
        ProviderResponseError: Content is not JSON or not the expected shape.
    """
    content = content.strip()
    fenced = _FENCE.match(content)
    if fenced:
        content = fenced.group(1)

    try:
        payload = ProviderPayload.model_validate(json.loads(content))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ProviderResponseError(f"{provider.value} returned invalid content: {e}") from e

    return VoiceCommand(
        intent=payload.intent,
        entities=entities_from_payload(payload.entities, text, payload.confidence),
        confidence=payload.confidence,
        raw_text=text,
        provider=provider,
    )


class BaseIntentProvider(ABC):
    """Abstract base for all intent providers."""

    @property
    @abstractmethod
    def provider_id(self) -> ProviderId:
        """Provider identifier."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether this provider is currently usable."""

    @abstractmethod
    async def interpret(self, text: str, prompt_context: PromptContext) -> VoiceCommand:
        """Turn a transcript into a command. May raise ProviderError."""

    async def aclose(self) -> None:
        """Release any held resources. Override if needed."""
