"""Tests for the command registry and role presets."""

import pytest

from voiceai.models import ActionType, CommandDefinition
from voiceai.registry import DEFAULT_REGISTRY, CommandRegistry
from voiceai.registry.presets import ROLE_PRESETS, UserRole, registry_for_role


class TestLookup:
    def test_get_by_intent(self, registry):
        assert registry.get_by_intent("complete_task").id == "complete_task"
        assert registry.get_by_intent("nope") is None

    def test_get_by_id(self, registry):
        assert registry.get_by_id("help").action.type == ActionType.UI

    def test_find_by_trigger(self, registry):
        assert registry.find_by_trigger("Please CLOCK ME IN now").id == "clock_in"
        assert registry.find_by_trigger("send message to John").id == "send_message"

    def test_alias(self, registry):
        assert registry.find_by_trigger("Done!").id == "complete_task"
        assert registry.find_by_trigger("tasks").id == "get_tasks"

    def test_alias_needs_whole_text(self, registry):
        assert registry.find_by_trigger("i am done for today") is None

    def test_no_match(self, registry):
        assert registry.find_by_trigger("the weather is nice") is None

    def test_by_category(self, registry):
        ids = [c.id for c in registry.by_category("timesheet")]
        assert ids == ["clock_in", "clock_out", "break_start", "break_end"]

    def test_known_intents_unique(self, registry):
        intents = registry.known_intents()
        assert len(intents) == len(set(intents))
        assert intents[0] == "clock_in"

    def test_requires_business_data_only_team_status(self, registry):
        assert [c.id for c in registry if c.requires_business_data] == ["team_status"]


class TestDerivedRegistries:
    def test_filtered_by_category(self, registry):
        filtered = registry.filtered(enabled_categories=["help"])
        assert {c.id for c in filtered} == {"commands_list", "help"}

    def test_filtered_disabled(self, registry):
        filtered = registry.filtered(disabled_commands=["clock_in"])
        assert filtered.get_by_id("clock_in") is None
        assert len(filtered) == len(registry) - 1

    def test_filtered_does_not_mutate(self, registry):
        registry.filtered(disabled_commands=["clock_in"])
        assert registry.get_by_id("clock_in") is not None

    def test_extended_adds(self, registry):
        custom = CommandDefinition(id="lunch", name="Lunch", intent="lunch", triggers=("lunch time",))
        extended = registry.extended([custom])
        assert extended.find_by_trigger("it is lunch time").id == "lunch"
        assert len(extended) == len(registry) + 1

    def test_extended_replaces_same_id(self, registry):
        custom = CommandDefinition(id="help", name="Help", intent="help", triggers=("help",))
        extended = registry.extended([custom])
        assert len(extended) == len(registry)
        assert extended.get_by_id("help").action is None

    def test_empty_registry(self):
        assert CommandRegistry([]).find_by_trigger("help") is None


class TestCommandDefinitionFromDict:
    def test_from_dict(self):
        definition = CommandDefinition.from_dict(
            {
                "id": "order_parts",
                "triggers": ["order parts"],
                "complexity": "business",
                "requires_business_data": True,
                "required_entities": ["amount"],
                "action": {"type": "api", "endpoint": "/api/parts", "method": "post"},
            }
        )
        assert definition.intent == "order_parts"
        assert definition.name == "order_parts"
        assert definition.triggers == ("order parts",)
        assert definition.required_entities == ("amount",)
        assert definition.action.endpoint == "/api/parts"
        assert definition.action.method.value == "POST"

    def test_to_dict_round_trip(self, registry):
        definition = registry.get_by_id("send_message")
        assert CommandDefinition.from_dict(definition.to_dict()) == definition


class TestRolePresets:
    @pytest.mark.parametrize("role", list(UserRole))
    def test_every_role_has_help(self, role):
        assert registry_for_role(role).get_by_id("help") is not None

    def test_manager_gets_assign_task(self):
        registry = registry_for_role(UserRole.MANAGER)
        assert registry.find_by_trigger("assign task 4 to Maria").id == "assign_task"

    def test_client_has_no_timesheet(self):
        registry = registry_for_role("client")
        assert registry.get_by_id("clock_in") is None
        assert registry.get_by_id("complete_task") is None
        assert registry.get_by_id("submit_feedback") is not None

    def test_role_categories_added(self):
        registry = registry_for_role(UserRole.ADMIN)
        assert "admin" in {c.id for c in registry.categories}

    def test_role_commands_within_enabled_categories(self):
        for role, preset in ROLE_PRESETS.items():
            registry = registry_for_role(role)
            assert all(c.category in preset.enabled_categories for c in registry)

    def test_unknown_role(self):
        with pytest.raises(ValueError):
            registry_for_role("intern")

    def test_default_registry_untouched(self):
        registry_for_role(UserRole.CLIENT)
        assert DEFAULT_REGISTRY.get_by_id("clock_in") is not None
