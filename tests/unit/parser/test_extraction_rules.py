"""Tests for voiceai/parser/extraction_rules.py"""

import pytest

from voiceai.models import EntityType
from voiceai.parser.extraction_rules import (
    BASE_RULES,
    CAPABILITY_RULES,
    DOMAIN_RULES,
    ExtractionRule,
    clean_location,
    clean_message_content,
    clean_person_name,
    clean_project_name,
    clean_team_name,
    rules_for_context,
)


class TestCleaners:
    def test_person_name_drops_title(self):
        assert clean_person_name("Dr. Smith") == "Smith"

    def test_person_name_drops_article_and_spaces(self):
        assert clean_person_name("the   manager") == "manager"

    def test_message_content_drops_prefix_and_punctuation(self):
        assert clean_message_content("about the delay.") == "the delay"

    def test_project_name_drops_suffix(self):
        assert clean_project_name("the Downtown project") == "Downtown"

    def test_team_name_drops_suffix(self):
        assert clean_team_name("Alpha team") == "Alpha"

    def test_location_drops_article(self):
        assert clean_location("the  north  wing") == "north wing"


class TestExtractionRule:
    def test_compile_is_case_insensitive(self):
        rule = ExtractionRule.compile(r"task (\d+)", EntityType.TASK_IDENTIFIER, 0.9, 5)
        assert rule.pattern.search("TASK 12")

    def test_value_uses_first_group(self):
        rule = BASE_RULES[0]
        match = rule.pattern.search("close task #12 now")
        assert rule.value_for(match) == "12"

    def test_value_falls_back_to_whole_match(self):
        rule = ExtractionRule.compile(r"\btomorrow\b", EntityType.DATE_TIME, 0.8, 5)
        match = rule.pattern.search("do it tomorrow")
        assert rule.value_for(match) == "tomorrow"

    def test_processor_applied(self):
        rule = ExtractionRule.compile(
            r"(\w+) team", EntityType.TEAM_NAME, 0.8, 5, processor=str.upper
        )
        match = rule.pattern.search("ask the alpha team")
        assert rule.value_for(match) == "ALPHA"

    def test_accepts_rejects_empty(self):
        rule = ExtractionRule.compile(r"x", EntityType.AMOUNT, 0.8, 5)
        assert rule.accepts("") is False
        assert rule.accepts("x") is True

    def test_validator(self):
        rule = ExtractionRule.compile(
            r"id (\w+)", EntityType.TASK_IDENTIFIER, 0.8, 5, validator=str.isdigit
        )
        assert rule.accepts("42") is True
        assert rule.accepts("abc") is False


class TestRuleTables:
    def test_base_rules_only_for_unknown_domain(self):
        assert len(rules_for_context("aerospace", [])) == len(BASE_RULES)

    def test_domain_and_capability_rules_added(self):
        rules = rules_for_context("Construction", ["Time Tracking"])
        expected = (
            len(BASE_RULES)
            + len(DOMAIN_RULES["construction"])
            + len(CAPABILITY_RULES["time tracking"])
        )
        assert len(rules) == expected

    def test_none_inputs(self):
        assert len(rules_for_context(None, None)) == len(BASE_RULES)

    @pytest.mark.parametrize("rule", BASE_RULES)
    def test_confidence_in_range(self, rule):
        assert 0.0 <= rule.confidence <= 1.0
