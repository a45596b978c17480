"""Local keyword provider.

Pure pattern matching over registry trigger phrases. It needs no network
and cannot fail, which makes it the terminal fallback of the orchestrator.
"""

from __future__ import annotations

import re

from voiceai.models import (
    UNKNOWN_INTENT,
    EntityType,
    ExtractedEntity,
    ProviderId,
    VoiceCommand,
)
from voiceai.providers.base import BaseIntentProvider, PromptContext
from voiceai.registry.commands import DEFAULT_REGISTRY, CommandRegistry

TRIGGER_CONFIDENCE = 0.8
UNKNOWN_CONFIDENCE = 0.3

# Basic matches when no registry trigger fires: (pattern, intent, confidence)
BASIC_PATTERNS: list[tuple[re.Pattern[str], str, float]] = [
    (re.compile(r"clock in|start work", re.IGNORECASE), "clock_in", 0.8),
    (re.compile(r"clock out|end work", re.IGNORECASE), "clock_out", 0.8),
    (re.compile(r"help", re.IGNORECASE), "help", 0.9),
    (re.compile(r"\b(?:hi|hello|hey|good\s+(?:morning|afternoon|evening))\b", re.IGNORECASE), "greeting", 0.8),
]

# Entity hints for a matched command's required entities
ENTITY_HINTS: dict[str, tuple[re.Pattern[str], EntityType]] = {
    "task_identifier": (
        re.compile(r"task\s+(?:number\s+)?(\d+)", re.IGNORECASE),
        EntityType.TASK_IDENTIFIER,
    ),
    "recipient": (
        re.compile(r"\b(?:to|for)\s+([a-zA-Z][a-zA-Z\s]*?)(?:\s+(?:about|regarding)\b|$)", re.IGNORECASE),
        EntityType.RECIPIENT,
    ),
    "message_content": (
        re.compile(r"\b(?:about|regarding)\s+(.+)", re.IGNORECASE),
        EntityType.MESSAGE_CONTENT,
    ),
}


class KeywordProvider(BaseIntentProvider):
    """Trigger-phrase matcher over a command registry."""

    def __init__(self, registry: CommandRegistry | None = None):
        self._registry = DEFAULT_REGISTRY if registry is None else registry

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.KEYWORDS

    @property
    def is_available(self) -> bool:
        return True

    def set_registry(self, registry: CommandRegistry) -> None:
        self._registry = registry

    def match(self, text: str) -> VoiceCommand:
        """Interpret synchronously. Always returns a command."""
        text = text or ""
        definition = self._registry.find_by_trigger(text) if text.strip() else None

        if definition is not None:
            return VoiceCommand(
                intent=definition.intent,
                entities=self._entity_hints(text, definition.required_entities),
                confidence=TRIGGER_CONFIDENCE,
                raw_text=text,
                provider=ProviderId.KEYWORDS,
            )

        for pattern, intent, confidence in BASIC_PATTERNS:
            if pattern.search(text):
                return VoiceCommand(
                    intent=intent,
                    confidence=confidence,
                    raw_text=text,
                    provider=ProviderId.KEYWORDS,
                )

        return VoiceCommand(
            intent=UNKNOWN_INTENT,
            confidence=UNKNOWN_CONFIDENCE,
            raw_text=text,
            provider=ProviderId.KEYWORDS,
        )

    @staticmethod
    def _entity_hints(text: str, required: tuple[str, ...]) -> dict[str, ExtractedEntity]:
        entities: dict[str, ExtractedEntity] = {}
        for key in required:
            hint = ENTITY_HINTS.get(key)
            if hint is None:
                continue
            pattern, entity_type = hint
            found = pattern.search(text)
            if found and found.group(1).strip():
                entities[key] = ExtractedEntity(
                    type=entity_type,
                    value=found.group(1).strip(),
                    confidence=TRIGGER_CONFIDENCE,
                    source_text=found.group(0),
                    span=found.span(),
                )
        return entities

    async def interpret(self, text: str, prompt_context: PromptContext | None = None) -> VoiceCommand:
        return self.match(text)
