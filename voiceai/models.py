"""Voice AI data models.

Defines providers, entities, commands and result types for the pipeline:
    Transcript → VoiceCommand → CommandClassification → VoiceResponse
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any


UNKNOWN_INTENT = "unknown"


class ProviderId(str, Enum):
    """Interpretation backends, in no particular order."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    KEYWORDS = "keywords"


class ProviderStatus(str, Enum):
    AVAILABLE = "available"
    ERROR = "error"


class EntityType(str, Enum):
    """Entity types. The value doubles as the base slot key."""

    TASK_IDENTIFIER = "task_identifier"
    TASK_NUMBER = "task_number"
    RECIPIENT = "recipient"
    MESSAGE_CONTENT = "message_content"
    PROJECT_NAME = "project_name"
    ISSUE_TYPE = "issue_type"
    PRIORITY_LEVEL = "priority_level"
    USER_NAME = "user_name"
    TEAM_NAME = "team_name"
    LOCATION = "location"
    DATE_TIME = "date_time"
    AMOUNT = "amount"
    PERCENTAGE = "percentage"


class CommandComplexity(str, Enum):
    """How much a command depends on business-system data."""

    SIMPLE = "simple"
    BUSINESS = "business"
    HYBRID = "hybrid"


class ActionType(str, Enum):
    API = "api"
    NAVIGATION = "navigation"
    UI = "ui"


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class SessionState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"


@dataclass
class ExtractedEntity:
    """A structured value pulled out of a transcript."""

    type: EntityType
    value: str
    confidence: float = 1.0
    source_text: str = ""
    span: tuple[int, int] | None = None

    def overlaps(self, start: int, end: int) -> bool:
        """Whether [start, end) intersects this entity's span."""
        if self.span is None:
            return False
        return start < self.span[1] and end > self.span[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "value": self.value,
            "confidence": self.confidence,
            "source_text": self.source_text,
            "span": list(self.span) if self.span else None,
        }


@dataclass
class EntityExtractionResult:
    """Output of one extraction run."""

    entities: dict[str, ExtractedEntity] = field(default_factory=dict)
    confidence: float = 0.0
    extracted_text: str = ""
    missing_required: list[str] = field(default_factory=list)

    def get_value(self, key: str) -> str | None:
        entity = self.entities.get(key)
        return entity.value if entity else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "entities": {k: e.to_dict() for k, e in self.entities.items()},
            "confidence": self.confidence,
            "extracted_text": self.extracted_text,
            "missing_required": self.missing_required,
        }


@dataclass(frozen=True)
class VoiceCommand:
    """An interpreted command. Never mutated; enrichment returns a copy."""

    intent: str
    entities: dict[str, ExtractedEntity] = field(default_factory=dict)
    confidence: float = 0.0
    raw_text: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    provider: ProviderId | None = None
    complexity: CommandComplexity | None = None

    def with_complexity(self, complexity: CommandComplexity) -> VoiceCommand:
        return replace(self, complexity=complexity)

    def with_entities(self, entities: dict[str, ExtractedEntity]) -> VoiceCommand:
        return replace(self, entities=entities)

    def entity_value(self, key: str) -> str | None:
        entity = self.entities.get(key)
        return entity.value if entity else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent": self.intent,
            "entities": {k: e.to_dict() for k, e in self.entities.items()},
            "confidence": self.confidence,
            "raw_text": self.raw_text,
            "timestamp": self.timestamp.isoformat(),
            "provider": self.provider.value if self.provider else None,
            "complexity": self.complexity.value if self.complexity else None,
        }


@dataclass(frozen=True)
class CommandAction:
    """Side effect attached to a command: an API call or a UI dispatch."""

    type: ActionType
    endpoint: str | None = None
    method: HTTPMethod = HTTPMethod.POST
    headers: dict[str, str] = field(default_factory=dict)
    body_template: dict[str, Any] = field(default_factory=dict)
    route: str | None = None
    params: dict[str, Any] = field(default_factory=dict)
    component: str | None = None
    props: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommandAction:
        return cls(
            type=ActionType(data.get("type", "api")),
            endpoint=data.get("endpoint"),
            method=HTTPMethod(str(data.get("method", "POST")).upper()),
            headers=dict(data.get("headers") or {}),
            body_template=dict(data.get("body_template") or {}),
            route=data.get("route"),
            params=dict(data.get("params") or {}),
            component=data.get("component"),
            props=dict(data.get("props") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "endpoint": self.endpoint,
            "method": self.method.value,
            "headers": self.headers,
            "body_template": self.body_template,
            "route": self.route,
            "params": self.params,
            "component": self.component,
            "props": self.props,
        }


@dataclass(frozen=True)
class CommandDefinition:
    """Static registry entry describing one command."""

    id: str
    name: str
    intent: str
    triggers: tuple[str, ...] = ()
    category: str | None = None
    description: str = ""
    examples: tuple[str, ...] = ()
    complexity: CommandComplexity = CommandComplexity.SIMPLE
    requires_business_data: bool = False
    fallback_reason: str | None = None
    response_template: str = ""
    action: CommandAction | None = None
    required_entities: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommandDefinition:
        """Build a definition from plain config data (e.g. custom commands)."""
        action = data.get("action")
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            intent=data.get("intent", data["id"]),
            triggers=tuple(data.get("triggers") or ()),
            category=data.get("category"),
            description=data.get("description", ""),
            examples=tuple(data.get("examples") or ()),
            complexity=CommandComplexity(data.get("complexity", "simple")),
            requires_business_data=bool(data.get("requires_business_data", False)),
            fallback_reason=data.get("fallback_reason"),
            response_template=data.get("response_template", ""),
            action=CommandAction.from_dict(action) if action else None,
            required_entities=tuple(data.get("required_entities") or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "intent": self.intent,
            "triggers": list(self.triggers),
            "category": self.category,
            "description": self.description,
            "examples": list(self.examples),
            "complexity": self.complexity.value,
            "requires_business_data": self.requires_business_data,
            "fallback_reason": self.fallback_reason,
            "response_template": self.response_template,
            "action": self.action.to_dict() if self.action else None,
            "required_entities": list(self.required_entities),
        }


@dataclass
class CommandClassification:
    """Whether a command is answered locally or deferred to the business system."""

    complexity: CommandComplexity
    can_handle: bool
    should_fallback: bool
    fallback_reason: str | None = None
    confidence: float = 0.0
    business_relevance: float = 0.0
    required_entities: list[str] = field(default_factory=list)
    detected_keywords: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.can_handle == self.should_fallback:
            raise ValueError(
                "Exactly one of can_handle / should_fallback must be true"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "complexity": self.complexity.value,
            "can_handle": self.can_handle,
            "should_fallback": self.should_fallback,
            "fallback_reason": self.fallback_reason,
            "confidence": self.confidence,
            "business_relevance": self.business_relevance,
            "required_entities": self.required_entities,
            "detected_keywords": self.detected_keywords,
        }


@dataclass
class ActionResult:
    """Outcome of executing one action."""

    action: CommandAction
    success: bool
    status_code: int | None = None
    data: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.to_dict(),
            "success": self.success,
            "status_code": self.status_code,
            "data": self.data,
            "error": self.error,
        }


@dataclass
class VoiceResponse:
    """Terminal artifact of one pipeline run."""

    text: str
    success: bool
    can_handle: bool = True
    should_fallback: bool = False
    fallback_reason: str | None = None
    intent: str | None = None
    actions: list[CommandAction] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    action_results: list[ActionResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "success": self.success,
            "can_handle": self.can_handle,
            "should_fallback": self.should_fallback,
            "fallback_reason": self.fallback_reason,
            "intent": self.intent,
            "actions": [a.to_dict() for a in self.actions],
            "suggestions": self.suggestions,
            "metadata": self.metadata,
            "action_results": [r.to_dict() for r in self.action_results],
        }
