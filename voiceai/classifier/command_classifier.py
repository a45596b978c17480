"""Command classification: answer locally or fall back to the business system.

Known commands start from their registry definition. Unknown commands are
scored by business relevance:

    relevance = mean(weight of matched words) + min(matched / total, 0.3)

capped at 1.0. Smart-fallback overrides run last and may force a fallback
(low confidence, strict mode, missing required entities).
"""

from __future__ import annotations

import logging
import string
from collections import Counter
from dataclasses import replace
from typing import Any

from voiceai.classifier.business_keywords import (
    BUSINESS_KEYWORDS,
    CAPABILITY_KEYWORDS,
    CATEGORY_PATTERNS,
    DOMAIN_KEYWORDS,
    FALLBACK_REASONS,
    GREETING_PATTERN,
    HELP_PATTERN,
    REQUIRED_ENTITY_HINTS,
    SIMPLE_KEYWORDS,
)
from voiceai.config_models import BusinessContext, VoiceAIConfig
from voiceai.models import (
    CommandClassification,
    CommandComplexity,
    CommandDefinition,
    VoiceCommand,
)

logger = logging.getLogger(__name__)

DENSITY_BONUS_CAP = 0.3
STRICT_MODE_RELEVANCE = 0.5
CATEGORY_RELEVANCE = 0.8
SIMPLE_MIN_CONFIDENCE = 0.8


def _words(text: str) -> list[str]:
    words = (w.strip(string.punctuation) for w in text.lower().split())
    return [w for w in words if w]


class CommandClassifier:
    """Deterministic classifier: same command, definition and config give the same result."""

    def __init__(
        self,
        business_context: BusinessContext | None = None,
        config: VoiceAIConfig | None = None,
    ):
        self._config = config or VoiceAIConfig()
        self._custom_keywords: dict[str, float] = {}
        self._keywords: dict[str, float] = {}
        self.update_business_context(business_context or self._config.business_context)

    # ─────────────────────────────────────────────────────────────────────
    # Configuration
    # ─────────────────────────────────────────────────────────────────────

    def update_business_context(self, context: BusinessContext) -> None:
        """Rebuild the keyword table for a new domain / capability set."""
        self._context = context
        keywords = dict(BUSINESS_KEYWORDS)
        keywords.update(DOMAIN_KEYWORDS.get(context.domain.lower(), {}))
        for capability in context.capabilities:
            keywords.update(CAPABILITY_KEYWORDS.get(capability.lower(), {}))
        keywords.update(self._custom_keywords)
        self._keywords = keywords

    def update_config(self, config: VoiceAIConfig) -> None:
        self._config = config

    def add_custom_keywords(self, keywords: dict[str, float]) -> None:
        for word, weight in keywords.items():
            if not 0.0 <= weight <= 1.0:
                raise ValueError(f"Keyword weight for {word!r} must be in [0, 1], got {weight}")
        normalized = {w.lower(): weight for w, weight in keywords.items()}
        self._custom_keywords.update(normalized)
        self._keywords.update(normalized)

    @property
    def business_keywords(self) -> dict[str, float]:
        return dict(self._keywords)

    # ─────────────────────────────────────────────────────────────────────
    # Classification
    # ─────────────────────────────────────────────────────────────────────

    def classify(
        self,
        command: VoiceCommand,
        definition: CommandDefinition | None = None,
    ) -> CommandClassification:
        if definition is not None:
            classification = self._classify_defined(command, definition)
        else:
            classification = self._classify_unknown(command)

        if self._config.enable_smart_fallback:
            classification = self._apply_smart_fallback(classification, command, definition)

        logger.debug(
            "Classified %r: can_handle=%s reason=%s relevance=%.2f",
            command.raw_text,
            classification.can_handle,
            classification.fallback_reason,
            classification.business_relevance,
        )
        return classification

    def _classify_defined(
        self, command: VoiceCommand, definition: CommandDefinition
    ) -> CommandClassification:
        return CommandClassification(
            complexity=definition.complexity,
            can_handle=not definition.requires_business_data,
            should_fallback=definition.requires_business_data,
            fallback_reason=definition.fallback_reason if definition.requires_business_data else None,
            confidence=command.confidence,
            business_relevance=self.business_relevance(command.raw_text),
            required_entities=list(definition.required_entities),
            detected_keywords=self.detect_keywords(command.raw_text),
        )

    def _classify_unknown(self, command: VoiceCommand) -> CommandClassification:
        text = command.raw_text
        relevance = self.business_relevance(text)
        keywords = self.detect_keywords(text)

        if self.is_simple_command(text):
            return CommandClassification(
                complexity=CommandComplexity.SIMPLE,
                can_handle=True,
                should_fallback=False,
                confidence=max(command.confidence, SIMPLE_MIN_CONFIDENCE),
                business_relevance=relevance,
                detected_keywords=keywords,
            )

        if relevance >= self._config.business_relevance_threshold:
            return CommandClassification(
                complexity=CommandComplexity.BUSINESS,
                can_handle=False,
                should_fallback=True,
                fallback_reason=self._fallback_reason(text, relevance, command.confidence),
                confidence=command.confidence,
                business_relevance=relevance,
                required_entities=self.detect_required_entities(text),
                detected_keywords=keywords,
            )

        if command.confidence < self._config.confidence_threshold:
            reason = FALLBACK_REASONS["low_confidence"]
        else:
            reason = FALLBACK_REASONS["unknown_command"]
        return CommandClassification(
            complexity=CommandComplexity.SIMPLE,
            can_handle=False,
            should_fallback=True,
            fallback_reason=reason,
            confidence=command.confidence,
            business_relevance=relevance,
            detected_keywords=keywords,
        )

    def _apply_smart_fallback(
        self,
        classification: CommandClassification,
        command: VoiceCommand,
        definition: CommandDefinition | None,
    ) -> CommandClassification:
        # Low confidence wins over every other decision
        if command.confidence < self._config.confidence_threshold:
            return self._force_fallback(classification, "low_confidence")

        if (
            self._config.strict_mode
            and classification.business_relevance > STRICT_MODE_RELEVANCE
        ):
            return self._force_fallback(classification, "complex_operation")

        if definition is not None and any(
            e not in command.entities for e in definition.required_entities
        ):
            return self._force_fallback(classification, "entity_extraction_failed")

        return classification

    @staticmethod
    def _force_fallback(
        classification: CommandClassification, reason_key: str
    ) -> CommandClassification:
        return replace(
            classification,
            can_handle=False,
            should_fallback=True,
            fallback_reason=FALLBACK_REASONS[reason_key],
        )

    def _fallback_reason(self, text: str, relevance: float, confidence: float) -> str:
        if confidence < self._config.confidence_threshold:
            return FALLBACK_REASONS["low_confidence"]

        if relevance > CATEGORY_RELEVANCE:
            for pattern, reason_key in CATEGORY_PATTERNS:
                if pattern.search(text):
                    return FALLBACK_REASONS[reason_key]

        if relevance > self._config.business_relevance_threshold:
            return FALLBACK_REASONS["complex_operation"]
        return FALLBACK_REASONS["data_required"]

    # ─────────────────────────────────────────────────────────────────────
    # Scoring helpers
    # ─────────────────────────────────────────────────────────────────────

    def business_relevance(self, text: str) -> float:
        words = _words(text)
        weights = [self._keywords[w] for w in words if w in self._keywords]
        if not weights:
            return 0.0
        average = sum(weights) / len(weights)
        density = min(len(weights) / len(words), DENSITY_BONUS_CAP)
        return min(average + density, 1.0)

    def detect_keywords(self, text: str) -> list[str]:
        detected = [
            w for w in _words(text) if w in self._keywords or w in SIMPLE_KEYWORDS
        ]
        return list(dict.fromkeys(detected))

    def is_simple_command(self, text: str) -> bool:
        lowered = text.lower()
        if any(w in SIMPLE_KEYWORDS for w in _words(text)):
            return True
        if any(" " in phrase and phrase in lowered for phrase in SIMPLE_KEYWORDS):
            return True
        return bool(HELP_PATTERN.search(text) or GREETING_PATTERN.search(text))

    @staticmethod
    def detect_required_entities(text: str) -> list[str]:
        required: list[str] = []
        for pattern, keys in REQUIRED_ENTITY_HINTS:
            if pattern.search(text):
                required.extend(k for k in keys if k not in required)
        return required

    # ─────────────────────────────────────────────────────────────────────
    # Diagnostics
    # ─────────────────────────────────────────────────────────────────────

    def classification_stats(self, commands: list[VoiceCommand]) -> dict[str, Any]:
        """Aggregate classification outcomes over a batch of commands."""
        results = [self.classify(c) for c in commands]
        total = len(results)
        reasons = Counter(r.fallback_reason for r in results if r.fallback_reason)
        complexity = Counter(r.complexity.value for r in results)

        return {
            "total_commands": total,
            "can_handle": sum(1 for r in results if r.can_handle),
            "should_fallback": sum(1 for r in results if r.should_fallback),
            "average_confidence": sum(r.confidence for r in results) / total if total else 0.0,
            "average_business_relevance": (
                sum(r.business_relevance for r in results) / total if total else 0.0
            ),
            "complexity_breakdown": {
                c.value: complexity.get(c.value, 0) for c in CommandComplexity
            },
            "top_fallback_reasons": [
                {"reason": reason, "count": count} for reason, count in reasons.most_common(5)
            ],
        }
