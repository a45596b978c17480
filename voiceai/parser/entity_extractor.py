"""Entity extraction from command transcripts.

Applies the priority-sorted rules from extraction_rules.py. Higher-priority
rules claim text first: a match whose span overlaps an already accepted
entity is dropped. Accepted entities are stored under ``type``, ``type_2``,
``type_3``... up to the per-type limit.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import replace
from statistics import mean
from typing import Any

from voiceai.config_models import BusinessContext, ExtractionConfig
from voiceai.models import EntityExtractionResult, EntityType, ExtractedEntity
from voiceai.parser.extraction_rules import (
    ExtractionRule,
    clean_message_content,
    rules_for_context,
)

logger = logging.getLogger(__name__)

COMPLETION_VERBS = re.compile(r"\b(?:complete|finish|update|close|mark)\b", re.IGNORECASE)
MESSAGING_VERBS = re.compile(r"\b(?:send|message|tell|notify|email)\b", re.IGNORECASE)
ASSIGN_VERB = re.compile(r"\bassign", re.IGNORECASE)
TASK_COMPLETION_SHAPE = re.compile(
    r"\b(?:complete|finish|update|close|mark)\b.*\btask", re.IGNORECASE
)
ABOUT_CLAUSE = re.compile(r"\babout\s+([^,.!?]+)", re.IGNORECASE)

IMPLIED_CONFIDENCE = 0.6
CONTEXT_BONUS = 0.1
CAPABILITY_BONUS = 0.05


def slot_key(entity_type: EntityType, index: int) -> str:
    """Storage key for the ``index``-th (0-based) entity of a type."""
    return entity_type.value if index == 0 else f"{entity_type.value}_{index + 1}"


def _overlaps(start: int, end: int, spans: list[tuple[int, int]]) -> bool:
    return any(start < s_end and end > s_start for s_start, s_end in spans)


class EntityExtractor:
    """Rule-based extractor bound to one business context."""

    def __init__(
        self,
        business_context: BusinessContext | None = None,
        config: ExtractionConfig | None = None,
        max_entities_per_type: int = 3,
    ):
        self._context = business_context or BusinessContext()
        self._config = config or ExtractionConfig()
        self._max_per_type = max_entities_per_type
        self._custom_rules: list[ExtractionRule] = []
        self._rules = self._build_rules()

    def _build_rules(self) -> list[ExtractionRule]:
        rules = rules_for_context(self._context.domain, self._context.capabilities)
        rules.extend(self._custom_rules)
        # sorted() is stable: equal priorities keep declaration order
        return sorted(rules, key=lambda r: r.priority, reverse=True)

    @property
    def rules(self) -> list[ExtractionRule]:
        return list(self._rules)

    @property
    def config(self) -> ExtractionConfig:
        return self._config

    # ─────────────────────────────────────────────────────────────────────
    # Extraction
    # ─────────────────────────────────────────────────────────────────────

    def extract(self, text: str) -> EntityExtractionResult:
        """Extract entities, overall confidence and missing required slots."""
        if not text or not text.strip():
            return EntityExtractionResult(extracted_text=text or "")

        entities = self._apply_rules(text)
        if self._config.enable_contextual_extraction:
            entities = self._apply_context(text, entities)

        confidence = mean(e.confidence for e in entities.values()) if entities else 0.0

        return EntityExtractionResult(
            entities=entities,
            confidence=confidence,
            extracted_text=text,
            missing_required=find_missing_required(text, entities),
        )

    def _apply_rules(self, text: str) -> dict[str, ExtractedEntity]:
        entities: dict[str, ExtractedEntity] = {}
        spans: list[tuple[int, int]] = []
        type_counts: Counter[EntityType] = Counter()
        per_type = self._max_per_type if self._config.enable_multiple_entity_types else 1
        limit = self._config.max_entities_total

        for rule in self._rules:
            if len(entities) >= limit:
                break
            if rule.confidence < self._config.confidence_threshold:
                continue

            for match in rule.pattern.finditer(text):
                if len(entities) >= limit or type_counts[rule.entity_type] >= per_type:
                    break

                start, end = match.span()
                if _overlaps(start, end, spans):
                    continue

                try:
                    value = rule.value_for(match)
                    if not rule.accepts(value):
                        continue
                except Exception:
                    logger.warning(
                        "Extraction rule %s failed", rule.pattern.pattern, exc_info=True
                    )
                    continue

                key = slot_key(rule.entity_type, type_counts[rule.entity_type])
                entities[key] = ExtractedEntity(
                    type=rule.entity_type,
                    value=value,
                    confidence=rule.confidence,
                    source_text=match.group(0),
                    span=(start, end),
                )
                spans.append((start, end))
                type_counts[rule.entity_type] += 1

        return entities

    def _apply_context(
        self, text: str, entities: dict[str, ExtractedEntity]
    ) -> dict[str, ExtractedEntity]:
        """Confidence bonuses from surrounding keywords, then implied entities."""
        text_lower = text.lower()
        has_completion = bool(COMPLETION_VERBS.search(text))
        has_messaging = bool(MESSAGING_VERBS.search(text))
        capability_hits = sum(
            1 for c in self._context.capabilities if c and c.lower() in text_lower
        )

        enriched: dict[str, ExtractedEntity] = {}
        for key, entity in entities.items():
            bonus = capability_hits * CAPABILITY_BONUS
            if entity.type == EntityType.TASK_IDENTIFIER and has_completion:
                bonus += CONTEXT_BONUS
            elif entity.type == EntityType.MESSAGE_CONTENT and has_messaging:
                bonus += CONTEXT_BONUS
            enriched[key] = replace(entity, confidence=min(1.0, entity.confidence + bonus))

        recipient_key = EntityType.RECIPIENT.value
        content_key = EntityType.MESSAGE_CONTENT.value
        if recipient_key in enriched and content_key not in enriched:
            about = ABOUT_CLAUSE.search(text)
            content = clean_message_content(about.group(1)) if about else ""
            if content:
                # Implied entities carry no span: they never claim text
                enriched[content_key] = ExtractedEntity(
                    type=EntityType.MESSAGE_CONTENT,
                    value=content,
                    confidence=IMPLIED_CONFIDENCE,
                    source_text=about.group(0),
                )

        return enriched

    # ─────────────────────────────────────────────────────────────────────
    # Configuration
    # ─────────────────────────────────────────────────────────────────────

    def update_business_context(self, context: BusinessContext) -> None:
        """Switch context and rebuild domain/capability rules."""
        self._context = context
        self._rules = self._build_rules()

    def update_config(
        self,
        config: ExtractionConfig | None = None,
        max_entities_per_type: int | None = None,
    ) -> None:
        if config is not None:
            self._config = config
        if max_entities_per_type is not None:
            self._max_per_type = max_entities_per_type

    def add_custom_rule(self, rule: ExtractionRule) -> None:
        self._custom_rules.append(rule)
        self._rules = self._build_rules()

    # ─────────────────────────────────────────────────────────────────────
    # Diagnostics
    # ─────────────────────────────────────────────────────────────────────

    def extraction_stats(self, texts: list[str]) -> dict[str, Any]:
        """Aggregate extraction results over a sample of transcripts."""
        results = [self.extract(t) for t in texts]
        type_counts: Counter[str] = Counter(
            e.type.value for r in results for e in r.entities.values()
        )
        total_entities = sum(type_counts.values())
        confidences = [r.confidence for r in results if r.entities]

        return {
            "total_texts": len(texts),
            "total_entities": total_entities,
            "average_entities_per_text": total_entities / len(texts) if texts else 0.0,
            "average_confidence": mean(confidences) if confidences else 0.0,
            "entity_type_counts": dict(type_counts),
            "most_common_types": type_counts.most_common(5),
        }

    def evaluate_rule(self, rule: ExtractionRule, texts: list[str]) -> dict[str, Any]:
        """Run a single rule in isolation (no ordering or overlap logic)."""
        matches: list[dict[str, str]] = []
        for text in texts:
            for match in rule.pattern.finditer(text):
                value = rule.value_for(match)
                if rule.accepts(value):
                    matches.append({"text": text, "value": value})

        return {
            "matches": len(matches),
            "matched_texts": len({m["text"] for m in matches}),
            "average_confidence": rule.confidence if matches else 0.0,
            "examples": matches[:5],
        }


def find_missing_required(text: str, entities: dict[str, Any]) -> list[str]:
    """Slots the phrasing implies but extraction did not fill."""
    missing: list[str] = []

    if TASK_COMPLETION_SHAPE.search(text) and not (
        EntityType.TASK_IDENTIFIER.value in entities
        or EntityType.TASK_NUMBER.value in entities
    ):
        missing.append("task_identifier")

    if MESSAGING_VERBS.search(text) and EntityType.RECIPIENT.value not in entities:
        missing.append("recipient")

    if ASSIGN_VERB.search(text) and not (
        EntityType.USER_NAME.value in entities
        or EntityType.RECIPIENT.value in entities
    ):
        missing.append("assignee")

    return missing


# Default extractor (lazy)
_default_extractor: EntityExtractor | None = None


def extract_entities(text: str) -> EntityExtractionResult:
    """Extract entities with the default business context."""
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = EntityExtractor()
    return _default_extractor.extract(text)
