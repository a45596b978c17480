"""Response composition.

Renders the final spoken/displayed text through the business context and
attaches a command's action only when the classifier allows local handling.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from voiceai.classifier.business_keywords import FALLBACK_REASONS
from voiceai.context.business_context import BusinessContextManager, RenderOptions
from voiceai.models import (
    UNKNOWN_INTENT,
    CommandClassification,
    CommandDefinition,
    VoiceCommand,
    VoiceResponse,
)
from voiceai.registry.commands import CommandRegistry

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE = "I'll handle that for you."
ERROR_RESPONSE = "I'm sorry, I didn't understand that. Could you try again?"
HELP_TEMPLATE = (
    "I'm your {{businessName}} voice assistant! I can help you with "
    "{{capabilities}}. What would you like to do?"
)
FALLBACK_TEMPLATE = (
    "I'll connect you to the {{businessName}} system to handle that request. "
    "Please wait a moment..."
)
UNKNOWN_TEMPLATE = (
    "I'm not sure how to help with that in {{businessName}}. "
    "Try asking about {{capabilities}}."
)

HELP_SUGGESTIONS = ["show commands", "clock in", "get my tasks", "project status"]
GENERIC_SUGGESTIONS = ["help", "clock in", "get status"]
MAX_SUGGESTIONS = 4

_SNAKE_PART = re.compile(r"_([a-z0-9])")


def camel_case(key: str) -> str:
    """task_identifier_2 → taskIdentifier2"""
    return _SNAKE_PART.sub(lambda m: m.group(1).upper(), key)


def command_variables(command: VoiceCommand) -> dict[str, str]:
    """Template variables describing one command.

    Every entity is exposed under its slot key and a camelCase alias.
    """
    variables = {
        "timestamp": command.timestamp.isoformat(),
        "rawText": command.raw_text,
        "confidence": f"{command.confidence:.2f}",
        "intent": command.intent,
    }
    for key, entity in command.entities.items():
        variables[key] = entity.value
        variables[camel_case(key)] = entity.value
    return variables


class ResponseBuilder:
    """Builds VoiceResponses from a command and its classification."""

    def __init__(self, context_manager: BusinessContextManager, registry: CommandRegistry):
        self._context = context_manager
        self._registry = registry

    def set_registry(self, registry: CommandRegistry) -> None:
        self._registry = registry

    def suggestions(self) -> list[str]:
        """First example of the first few commands that declare examples."""
        examples = [c.examples[0] for c in self._registry.with_examples()[:MAX_SUGGESTIONS]]
        return examples or list(GENERIC_SUGGESTIONS)

    def _render(self, template: str, command: VoiceCommand) -> str:
        options = RenderOptions(custom_variables=command_variables(command))
        return self._context.render(template, options).result

    def _metadata(
        self,
        command: VoiceCommand,
        classification: CommandClassification,
        definition: CommandDefinition | None,
    ) -> dict[str, Any]:
        return {
            "command_id": definition.id if definition else None,
            "complexity": classification.complexity.value,
            "confidence": command.confidence,
            "business_relevance": classification.business_relevance,
            "provider": command.provider.value if command.provider else None,
            "entities": {k: e.value for k, e in command.entities.items()},
            "business_name": self._context.context.name,
        }

    def respond(
        self,
        command: VoiceCommand,
        classification: CommandClassification,
        definition: CommandDefinition | None = None,
    ) -> VoiceResponse:
        metadata = self._metadata(command, classification, definition)

        if definition is not None:
            # The action only runs when the command is handled locally
            actions = (
                [definition.action]
                if classification.can_handle and definition.action
                else []
            )
            return VoiceResponse(
                text=self._render(definition.response_template or DEFAULT_RESPONSE, command),
                success=True,
                can_handle=classification.can_handle,
                should_fallback=classification.should_fallback,
                fallback_reason=classification.fallback_reason,
                intent=command.intent,
                actions=actions,
                suggestions=self.suggestions(),
                metadata=metadata,
            )

        if classification.can_handle:
            return VoiceResponse(
                text=self._render(HELP_TEMPLATE, command),
                success=True,
                can_handle=True,
                should_fallback=False,
                intent=command.intent,
                suggestions=list(HELP_SUGGESTIONS),
                metadata=metadata,
            )

        is_unknown = (
            command.intent == UNKNOWN_INTENT
            or classification.fallback_reason == FALLBACK_REASONS["unknown_command"]
        )
        return VoiceResponse(
            text=self._render(UNKNOWN_TEMPLATE if is_unknown else FALLBACK_TEMPLATE, command),
            success=not is_unknown,
            can_handle=False,
            should_fallback=True,
            fallback_reason=classification.fallback_reason,
            intent=command.intent,
            suggestions=self.suggestions(),
            metadata=metadata,
        )

    def error_response(self, error: Exception | str | None = None) -> VoiceResponse:
        """Non-fatal response for an internal failure."""
        return VoiceResponse(
            text=ERROR_RESPONSE,
            success=False,
            can_handle=False,
            should_fallback=True,
            fallback_reason="Processing error",
            suggestions=list(GENERIC_SUGGESTIONS),
            metadata={"error": str(error)} if error else {},
        )
