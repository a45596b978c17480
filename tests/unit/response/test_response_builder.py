"""Tests for voiceai/response/response_builder.py"""

import pytest

from voiceai.classifier.business_keywords import FALLBACK_REASONS
from voiceai.context.business_context import BusinessContextManager
from voiceai.models import (
    CommandClassification,
    CommandComplexity,
    CommandDefinition,
    EntityType,
    ExtractedEntity,
    ProviderId,
    VoiceCommand,
)
from voiceai.registry.commands import CommandRegistry
from voiceai.response import ResponseBuilder, camel_case, command_variables
from voiceai.response.response_builder import (
    ERROR_RESPONSE,
    GENERIC_SUGGESTIONS,
    HELP_SUGGESTIONS,
)


def handled(complexity=CommandComplexity.HYBRID) -> CommandClassification:
    return CommandClassification(
        complexity=complexity, can_handle=True, should_fallback=False, confidence=0.9
    )


def deferred(reason: str) -> CommandClassification:
    return CommandClassification(
        complexity=CommandComplexity.BUSINESS,
        can_handle=False,
        should_fallback=True,
        fallback_reason=reason,
        confidence=0.9,
    )


@pytest.fixture
def builder(business_context, registry) -> ResponseBuilder:
    return ResponseBuilder(BusinessContextManager(business_context), registry)


@pytest.fixture
def complete_task_command() -> VoiceCommand:
    return VoiceCommand(
        intent="complete_task",
        entities={
            "task_identifier": ExtractedEntity(EntityType.TASK_IDENTIFIER, "5", 0.9, "task 5")
        },
        confidence=0.9,
        raw_text="complete task 5",
        provider=ProviderId.KEYWORDS,
    )


class TestHelpers:
    @pytest.mark.parametrize(
        "key,expected",
        [
            ("task_identifier", "taskIdentifier"),
            ("task_identifier_2", "taskIdentifier2"),
            ("recipient", "recipient"),
        ],
    )
    def test_camel_case(self, key, expected):
        assert camel_case(key) == expected

    def test_command_variables(self, complete_task_command):
        variables = command_variables(complete_task_command)
        assert variables["task_identifier"] == "5"
        assert variables["taskIdentifier"] == "5"
        assert variables["rawText"] == "complete task 5"
        assert variables["confidence"] == "0.90"
        assert variables["intent"] == "complete_task"
        assert variables["timestamp"] == complete_task_command.timestamp.isoformat()


class TestRespond:
    def test_handled_command(self, builder, registry, complete_task_command):
        definition = registry.get_by_id("complete_task")

        response = builder.respond(complete_task_command, handled(), definition)

        assert response.text == "I'll mark task 5 as complete."
        assert response.success is True
        assert response.can_handle is True
        assert response.actions == [definition.action]
        assert response.intent == "complete_task"
        assert response.metadata["command_id"] == "complete_task"
        assert response.metadata["provider"] == "keywords"
        assert response.metadata["business_name"] == "Acme Corp"

    def test_deferred_command_keeps_template_without_actions(self, builder, registry):
        definition = registry.get_by_id("team_status")
        command = VoiceCommand(intent="team_status", confidence=0.9, raw_text="team status")

        response = builder.respond(command, deferred(definition.fallback_reason), definition)

        assert response.actions == []
        assert response.should_fallback is True
        assert response.success is True
        assert response.text == "Let me get your team's current status."
        assert response.fallback_reason == definition.fallback_reason

    def test_simple_without_definition(self, builder):
        command = VoiceCommand(intent="greeting", confidence=0.8, raw_text="hello")

        response = builder.respond(command, handled(CommandComplexity.SIMPLE))

        assert response.can_handle is True
        assert "Acme Corp" in response.text
        assert "time tracking, task management" in response.text
        assert response.suggestions == HELP_SUGGESTIONS
        assert response.actions == []

    def test_unknown_command(self, builder):
        command = VoiceCommand(intent="unknown", confidence=0.3, raw_text="sing me a song")

        response = builder.respond(command, deferred(FALLBACK_REASONS["low_confidence"]))

        assert response.success is False
        assert response.should_fallback is True
        assert response.text.startswith("I'm not sure how to help with that in Acme Corp")

    def test_business_fallback_without_definition(self, builder):
        command = VoiceCommand(intent="approve_invoice", confidence=0.9, raw_text="approve invoice")

        response = builder.respond(command, deferred(FALLBACK_REASONS["complex_operation"]))

        assert response.success is True
        assert response.text.startswith("I'll connect you to the Acme Corp system")
        assert response.fallback_reason == FALLBACK_REASONS["complex_operation"]

    def test_definition_without_template(self, builder):
        definition = CommandDefinition(id="ping", name="Ping", intent="ping")
        command = VoiceCommand(intent="ping", confidence=0.9, raw_text="ping")

        response = builder.respond(command, handled(), definition)

        assert response.text == "I'll handle that for you."
        assert response.actions == []


class TestSuggestions:
    def test_from_registry(self, builder):
        assert builder.suggestions() == [
            "Clock me in",
            "Clock me out",
            "Start my break",
            "End my break",
        ]

    def test_generic_when_no_examples(self, builder):
        builder.set_registry(CommandRegistry([]))
        assert builder.suggestions() == GENERIC_SUGGESTIONS


class TestErrorResponse:
    def test_error_response(self, builder):
        response = builder.error_response(RuntimeError("boom"))
        assert response.text == ERROR_RESPONSE
        assert response.success is False
        assert response.should_fallback is True
        assert response.fallback_reason == "Processing error"
        assert response.metadata == {"error": "boom"}

    def test_error_response_without_error(self, builder):
        assert builder.error_response().metadata == {}
