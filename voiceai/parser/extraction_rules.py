"""Declarative entity extraction rules.

Each rule is a regex plus metadata. Rules are pure data; ordering, overlap
resolution and slot assignment live in entity_extractor.py.

Higher priority = matched first. Group 1 (when present and non-empty) is the
entity value, otherwise the whole match.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from voiceai.models import EntityType

ValueProcessor = Callable[[str], str]
ValueValidator = Callable[[str], bool]


@dataclass(frozen=True)
class ExtractionRule:
    """One pattern that produces entities of a single type."""

    pattern: re.Pattern[str]
    entity_type: EntityType
    confidence: float
    priority: int
    processor: ValueProcessor | None = None
    validator: ValueValidator | None = None

    @classmethod
    def compile(
        cls,
        regex: str,
        entity_type: EntityType,
        confidence: float,
        priority: int,
        processor: ValueProcessor | None = None,
        validator: ValueValidator | None = None,
    ) -> ExtractionRule:
        return cls(
            pattern=re.compile(regex, re.IGNORECASE),
            entity_type=entity_type,
            confidence=confidence,
            priority=priority,
            processor=processor,
            validator=validator,
        )

    def value_for(self, match: re.Match[str]) -> str:
        """Cleaned value for a match (empty string means reject)."""
        value = match.group(0)
        if self.pattern.groups and match.group(1):
            value = match.group(1)
        if self.processor:
            value = self.processor(value)
        return value.strip()

    def accepts(self, value: str) -> bool:
        if not value:
            return False
        return self.validator(value) if self.validator else True


# =============================================================================
# Value cleanup
# =============================================================================

_TITLES = re.compile(r"\b(mr|mrs|ms|dr|prof)\b\.?\s*", re.IGNORECASE)
_LEADING_ARTICLE = re.compile(r"^(the|a|an)\s+", re.IGNORECASE)
_MESSAGE_PREFIX = re.compile(r"^(that|about|regarding)\s+", re.IGNORECASE)
_TRAILING_PUNCT = re.compile(r"[.!?]+$")
_PROJECT_SUFFIX = re.compile(r"\s+(project|job|task)$", re.IGNORECASE)
_TEAM_SUFFIX = re.compile(r"\s+(team|group|department)$", re.IGNORECASE)


def _normalize_space(value: str) -> str:
    return re.sub(r"\s+", " ", value)


def clean_person_name(name: str) -> str:
    name = _normalize_space(_TITLES.sub("", name)).strip()
    return _LEADING_ARTICLE.sub("", name)


def clean_message_content(content: str) -> str:
    content = _MESSAGE_PREFIX.sub("", _normalize_space(content)).strip()
    return _TRAILING_PUNCT.sub("", content)


def clean_project_name(name: str) -> str:
    name = _LEADING_ARTICLE.sub("", _normalize_space(name))
    return _PROJECT_SUFFIX.sub("", name).strip()


def clean_team_name(name: str) -> str:
    name = _LEADING_ARTICLE.sub("", _normalize_space(name))
    return _TEAM_SUFFIX.sub("", name).strip()


def clean_location(location: str) -> str:
    return _LEADING_ARTICLE.sub("", _normalize_space(location)).strip()


def _lower(value: str) -> str:
    return value.lower()


def _numeric(value: str) -> bool:
    return value.isdigit()


# =============================================================================
# Base rules
# =============================================================================

_NAME = r"([a-zA-Z][a-zA-Z\s]{1,30}?)"

BASE_RULES: list[ExtractionRule] = [
    # Task identifiers
    ExtractionRule.compile(
        r"\btask\s+(?:number\s+|#\s*)?(\d+)\b",
        EntityType.TASK_IDENTIFIER, 0.95, 10, validator=_numeric,
    ),
    ExtractionRule.compile(
        r"\b(?:complete|finish|mark|close|update)\s+(?:task\s+)?(?:number\s+|#\s*)?(\d+)\b",
        EntityType.TASK_IDENTIFIER, 0.9, 9, validator=_numeric,
    ),
    ExtractionRule.compile(
        r"\b(?:item|ticket|job)\s+(?:number\s+|#\s*)?(\d+)\b",
        EntityType.TASK_IDENTIFIER, 0.8, 8, validator=_numeric,
    ),
    ExtractionRule.compile(
        r"\b(?:task|item|ticket)\s+(\d+)\b",
        EntityType.TASK_NUMBER, 0.85, 7,
    ),

    # Recipients
    ExtractionRule.compile(
        r"\b(?:to|for|assign\s+to|send\s+to|notify|tell)\s+" + _NAME
        + r"(?:\s+(?:about|regarding|that|to)|\s*$|[,.!?])",
        EntityType.RECIPIENT, 0.8, 8, processor=clean_person_name,
    ),
    ExtractionRule.compile(
        r"\b(?:message|email|call|contact)\s+" + _NAME
        + r"(?:\s+(?:about|regarding|and)|\s*$|[,.!?])",
        EntityType.RECIPIENT, 0.75, 7, processor=clean_person_name,
    ),

    # Message content
    ExtractionRule.compile(
        r"\b(?:message|tell|notify|inform).*?(?:about|regarding|that|:)\s+(.+?)"
        r"(?:\s+(?:to|for)\s+[a-zA-Z]|\s*$)",
        EntityType.MESSAGE_CONTENT, 0.8, 6, processor=clean_message_content,
    ),
    ExtractionRule.compile(
        r"\bsay\s+\"([^\"]+)\"",
        EntityType.MESSAGE_CONTENT, 0.9, 8,
    ),
    ExtractionRule.compile(
        r"\bsend\s+(?:a\s+)?(?:message|email|text)\s+saying\s+(.+?)(?:\s+to|\s*$)",
        EntityType.MESSAGE_CONTENT, 0.85, 7, processor=clean_message_content,
    ),

    # Projects
    ExtractionRule.compile(
        r"\bproject\s+(?:named\s+|called\s+)?([a-zA-Z][a-zA-Z0-9\s\-_]{1,50}?)"
        r"(?:\s+(?:status|progress|update|report)|$|\s*[,.!?])",
        EntityType.PROJECT_NAME, 0.8, 7, processor=clean_project_name,
    ),
    ExtractionRule.compile(
        r"\b(?:on|for|in)\s+(?:the\s+)?project\s+([a-zA-Z][a-zA-Z0-9\s\-_]{1,50}?)\b",
        EntityType.PROJECT_NAME, 0.75, 6, processor=clean_project_name,
    ),
    ExtractionRule.compile(
        r"\b([a-zA-Z][a-zA-Z0-9\s\-_]{1,50}?)\s+project\b",
        EntityType.PROJECT_NAME, 0.7, 5, processor=clean_project_name,
    ),

    # Issues
    ExtractionRule.compile(
        r"\b(bug|error|issue|problem|defect|failure|malfunction)\b",
        EntityType.ISSUE_TYPE, 0.8, 6, processor=_lower,
    ),
    ExtractionRule.compile(
        r"\b(urgent|critical|emergency|high\s+priority|immediate)\s+(?:issue|problem|bug)",
        EntityType.ISSUE_TYPE, 0.9, 8, processor=lambda _value: "critical_issue",
    ),
    ExtractionRule.compile(
        r"\b(safety|security|compliance|regulatory)\s+(?:issue|concern|violation|problem)",
        EntityType.ISSUE_TYPE, 0.85, 7, processor=lambda value: f"{value.lower()}_issue",
    ),

    # Priority
    ExtractionRule.compile(
        r"\b(urgent|high|critical|emergency|immediate)\s*(?:priority)?\b",
        EntityType.PRIORITY_LEVEL, 0.85, 6, processor=_lower,
    ),
    ExtractionRule.compile(
        r"\b(low|medium|normal|standard)\s*(?:priority)?\b",
        EntityType.PRIORITY_LEVEL, 0.75, 5, processor=_lower,
    ),

    # People and teams
    ExtractionRule.compile(
        r"\bassign.*?(?:to|for)\s+" + _NAME + r"\b",
        EntityType.USER_NAME, 0.8, 7, processor=clean_person_name,
    ),
    ExtractionRule.compile(
        r"\b" + _NAME + r"\s+(?:should|will|can)\s+(?:handle|work\s+on|take)",
        EntityType.USER_NAME, 0.75, 6, processor=clean_person_name,
    ),
    ExtractionRule.compile(
        r"\b(?:team|group|department)\s+([a-zA-Z][a-zA-Z\s\-_]{1,30}?)\b",
        EntityType.TEAM_NAME, 0.8, 6, processor=clean_team_name,
    ),

    # Locations
    ExtractionRule.compile(
        r"\b(?:at|in|on|from)\s+(?:the\s+)?(?:site|location|building|floor|room|area)\s+"
        r"([a-zA-Z0-9][a-zA-Z0-9\s\-_]{1,30}?)\b",
        EntityType.LOCATION, 0.75, 5, processor=clean_location,
    ),

    # Dates and times
    ExtractionRule.compile(
        r"\b(?:today|tomorrow|yesterday|monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b",
        EntityType.DATE_TIME, 0.8, 6, processor=_lower,
    ),
    ExtractionRule.compile(
        r"\b(?:at|by|before|after)\s+(\d{1,2}(?::\d{2})?\s*(?:am|pm)?)\b",
        EntityType.DATE_TIME, 0.85, 7,
    ),
    ExtractionRule.compile(
        r"\b(\d{1,2}/\d{1,2}(?:/\d{2,4})?)\b",
        EntityType.DATE_TIME, 0.9, 8,
    ),

    # Amounts
    ExtractionRule.compile(
        r"\$(\d+(?:,\d{3})*(?:\.\d{2})?)\b",
        EntityType.AMOUNT, 0.9, 7,
    ),
    ExtractionRule.compile(
        r"\b(\d+(?:\.\d+)?)\s*(?:%|percent)\b",
        EntityType.PERCENTAGE, 0.85, 6,
    ),
]


# =============================================================================
# Domain and capability rules
# =============================================================================

DOMAIN_RULES: dict[str, list[ExtractionRule]] = {
    "construction": [
        ExtractionRule.compile(
            r"\b(foundation|concrete|electrical|plumbing|roofing|framing)\s+(?:work|task|job|project)\b",
            EntityType.ISSUE_TYPE, 0.85, 7, processor=lambda value: f"{value.lower()}_work",
        ),
        ExtractionRule.compile(
            r"\b(?:site|building|floor|level)\s+([a-zA-Z0-9\-_]{1,20})\b",
            EntityType.LOCATION, 0.8, 6, processor=clean_location,
        ),
    ],
    "retail": [
        ExtractionRule.compile(
            r"\b(inventory|stock|customer|sale|refund|return)\s+(?:issue|problem|task)\b",
            EntityType.ISSUE_TYPE, 0.8, 6, processor=lambda value: f"{value.lower()}_issue",
        ),
        ExtractionRule.compile(
            r"\b(?:aisle|section|department|store)\s+([a-zA-Z0-9\-_]{1,20})\b",
            EntityType.LOCATION, 0.8, 6, processor=clean_location,
        ),
    ],
    "healthcare": [
        ExtractionRule.compile(
            r"\bpatient\s+([a-zA-Z][a-zA-Z\s]{1,30}?)\b",
            EntityType.RECIPIENT, 0.85, 8, processor=clean_person_name,
        ),
        ExtractionRule.compile(
            r"\b(?:room|ward|unit)\s+([a-zA-Z0-9\-_]{1,20})\b",
            EntityType.LOCATION, 0.85, 7, processor=clean_location,
        ),
    ],
}

CAPABILITY_RULES: dict[str, list[ExtractionRule]] = {
    "time tracking": [
        ExtractionRule.compile(
            r"\bclock\s+(?:in|out)\s+(?:for|at)\s+([a-zA-Z][a-zA-Z0-9\s\-_]{1,30}?)(?:\s*$|[,.!?])",
            EntityType.PROJECT_NAME, 0.8, 7, processor=clean_project_name,
        ),
    ],
    "task management": [
        ExtractionRule.compile(
            r"\bcreate\s+(?:a\s+)?task\s+(?:for|about)\s+([^,.!?]+)",
            EntityType.MESSAGE_CONTENT, 0.8, 6, processor=clean_message_content,
        ),
    ],
}


def rules_for_context(domain: str | None, capabilities: list[str] | None) -> list[ExtractionRule]:
    """Base rules plus any domain and capability extensions."""
    rules = list(BASE_RULES)
    if domain:
        rules.extend(DOMAIN_RULES.get(domain.lower(), []))
    for capability in capabilities or []:
        rules.extend(CAPABILITY_RULES.get(capability.lower(), []))
    return rules
