"""Entity extraction: declarative rules and the matching engine."""

from voiceai.parser.entity_extractor import EntityExtractor, extract_entities
from voiceai.parser.extraction_rules import ExtractionRule

__all__ = ["EntityExtractor", "ExtractionRule", "extract_entities"]
