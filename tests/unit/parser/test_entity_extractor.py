"""Tests for command entity extraction.

Verifies rule ordering, overlap handling, slot assignment, contextual
confidence bonuses and implied entities.
"""

from itertools import combinations

import pytest

from voiceai.config_models import BusinessContext, ExtractionConfig
from voiceai.models import EntityType
from voiceai.parser.entity_extractor import (
    EntityExtractor,
    extract_entities,
    find_missing_required,
    slot_key,
)
from voiceai.parser.extraction_rules import BASE_RULES, ExtractionRule


@pytest.fixture
def extractor() -> EntityExtractor:
    return EntityExtractor()


class TestTaskIdentifiers:
    def test_complete_task_number(self, extractor):
        result = extractor.extract("complete task 5")
        entity = result.entities["task_identifier"]
        assert entity.value == "5"
        assert entity.confidence >= 0.9

    def test_module_level_helper(self):
        result = extract_entities("complete task 5")
        assert result.get_value("task_identifier") == "5"

    def test_completion_bonus_capped(self, extractor):
        result = extractor.extract("complete task 5")
        assert result.entities["task_identifier"].confidence == 1.0

    def test_multiple_slots(self, extractor):
        result = extractor.extract("task 3 and task 4")
        assert result.get_value("task_identifier") == "3"
        assert result.get_value("task_identifier_2") == "4"

    def test_per_type_limit(self):
        extractor = EntityExtractor(max_entities_per_type=1)
        result = extractor.extract("task 3 and task 4")
        assert "task_identifier" in result.entities
        assert "task_identifier_2" not in result.entities

    def test_multiple_types_disabled(self):
        config = ExtractionConfig(enable_multiple_entity_types=False)
        result = EntityExtractor(config=config).extract("task 3 and task 4")
        assert "task_identifier_2" not in result.entities


class TestMessaging:
    def test_recipient_and_implied_content(self, extractor):
        result = extractor.extract("send message to John about the delay")
        assert result.get_value("recipient") == "John"
        assert "delay" in result.get_value("message_content")

    def test_implied_content_has_no_span(self, extractor):
        result = extractor.extract("send message to John about the delay")
        content = result.entities["message_content"]
        assert content.span is None
        assert content.confidence == pytest.approx(0.6)

    def test_contextual_extraction_disabled(self):
        config = ExtractionConfig(enable_contextual_extraction=False)
        result = EntityExtractor(config=config).extract("send message to John about the delay")
        assert "message_content" not in result.entities


class TestOtherEntities:
    def test_critical_issue_beats_plain_issue(self, extractor):
        result = extractor.extract("report a critical issue")
        assert result.get_value("issue_type") == "critical_issue"
        assert "issue_type_2" not in result.entities

    def test_safety_issue(self, extractor):
        result = extractor.extract("there is a safety concern")
        assert result.get_value("issue_type") == "safety_issue"

    def test_time(self, extractor):
        result = extractor.extract("finish the report by 5pm")
        assert result.get_value("date_time") == "5pm"

    def test_amount(self, extractor):
        result = extractor.extract("the invoice was $1,250.50")
        assert result.get_value("amount") == "1,250.50"

    def test_percentage(self, extractor):
        result = extractor.extract("we are 75 percent done")
        assert result.get_value("percentage") == "75"

    def test_priority(self, extractor):
        result = extractor.extract("this is high priority")
        assert result.get_value("priority_level") == "high"


class TestInvariants:
    @pytest.mark.parametrize(
        "text",
        [
            "send message to John about the delay",
            "assign task 12 to Maria for the Downtown project",
            "urgent issue at site Alpha tomorrow, notify the foreman",
            "task 1 task 2 task 3 task 4 task 5",
        ],
    )
    def test_spans_never_overlap(self, extractor, text):
        result = extractor.extract(text)
        spans = [e.span for e in result.entities.values() if e.span is not None]
        for (a_start, a_end), (b_start, b_end) in combinations(spans, 2):
            assert a_end <= b_start or b_end <= a_start

    def test_confidences_in_range(self, extractor):
        result = extractor.extract("complete task 5 for the Downtown project, high priority")
        assert all(0.0 <= e.confidence <= 1.0 for e in result.entities.values())
        assert 0.0 <= result.confidence <= 1.0

    def test_blank_text(self, extractor):
        result = extractor.extract("   ")
        assert result.entities == {}
        assert result.confidence == 0.0

    def test_total_limit(self):
        config = ExtractionConfig(max_entities_total=2)
        result = EntityExtractor(config=config, max_entities_per_type=5).extract(
            "task 1 task 2 task 3 task 4"
        )
        assert len(result.entities) == 2

    def test_global_threshold_skips_weak_rules(self):
        config = ExtractionConfig(confidence_threshold=0.9)
        result = EntityExtractor(config=config).extract("send message to John")
        assert "recipient" not in result.entities

    def test_slot_key(self):
        assert slot_key(EntityType.RECIPIENT, 0) == "recipient"
        assert slot_key(EntityType.RECIPIENT, 2) == "recipient_3"


class TestBusinessContext:
    def test_domain_rule_only_in_domain(self, construction_context):
        assert "location" not in EntityExtractor().extract("check site B7").entities

        result = EntityExtractor(construction_context).extract("check site B7")
        assert result.get_value("location") == "B7"

    def test_update_business_context_rebuilds_rules(self, construction_context):
        extractor = EntityExtractor()
        before = len(extractor.rules)
        extractor.update_business_context(construction_context)
        assert len(extractor.rules) > before

    def test_capability_bonus(self, business_context):
        result = EntityExtractor(business_context).extract("time tracking question for Sarah")
        assert result.get_value("recipient") == "Sarah"
        assert result.entities["recipient"].confidence == pytest.approx(0.85)


class TestCustomRules:
    def test_custom_rule(self, extractor):
        extractor.add_custom_rule(
            ExtractionRule.compile(r"\bcrew\s+(\w+)", EntityType.TEAM_NAME, 0.9, 9)
        )
        assert extractor.extract("ask crew alpha").get_value("team_name") == "alpha"

    def test_failing_processor_is_skipped(self, extractor):
        def explode(value):
            raise ValueError("bad value")

        extractor.add_custom_rule(
            ExtractionRule.compile(r"task", EntityType.TEAM_NAME, 0.99, 99, processor=explode)
        )
        result = extractor.extract("complete task 5")
        assert result.get_value("task_identifier") == "5"
        assert "team_name" not in result.entities


class TestMissingRequired:
    def test_task_without_identifier(self, extractor):
        assert extractor.extract("complete the task").missing_required == ["task_identifier"]

    def test_message_without_recipient(self, extractor):
        assert extractor.extract("send a message").missing_required == ["recipient"]

    def test_assign_without_assignee(self):
        assert find_missing_required("assign it", {}) == ["assignee"]

    def test_nothing_missing(self, extractor):
        assert extractor.extract("complete task 5").missing_required == []


class TestDiagnostics:
    def test_extraction_stats(self, extractor):
        stats = extractor.extraction_stats(["complete task 5", "hello"])
        assert stats["total_texts"] == 2
        assert stats["total_entities"] == 1
        assert stats["average_entities_per_text"] == 0.5
        assert stats["entity_type_counts"] == {"task_identifier": 1}
        assert stats["most_common_types"] == [("task_identifier", 1)]

    def test_extraction_stats_empty(self, extractor):
        stats = extractor.extraction_stats([])
        assert stats["average_entities_per_text"] == 0.0

    def test_evaluate_rule(self, extractor):
        report = extractor.evaluate_rule(BASE_RULES[0], ["task 1 and task 2", "nothing"])
        assert report["matches"] == 2
        assert report["matched_texts"] == 1
        assert report["average_confidence"] == 0.95
        assert [e["value"] for e in report["examples"]] == ["1", "2"]
