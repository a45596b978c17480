"""Command classification (local handling vs. business-system fallback)."""

from voiceai.classifier.business_keywords import FALLBACK_REASONS
from voiceai.classifier.command_classifier import CommandClassifier

__all__ = ["CommandClassifier", "FALLBACK_REASONS"]
