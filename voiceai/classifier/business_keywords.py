"""Keyword data for business-relevance scoring.

Weights are tuning data, not invariants: sessions merge domain and
capability dictionaries at runtime, and callers may add their own.
"""

from __future__ import annotations

import re

# word → weight in [0, 1]
BUSINESS_KEYWORDS: dict[str, float] = {
    # Time tracking
    "clock": 0.9, "timesheet": 0.95, "overtime": 0.9, "schedule": 0.8,
    "shift": 0.9, "break": 0.8,
    # Tasks and projects
    "task": 0.9, "project": 0.85, "assign": 0.8, "complete": 0.85,
    "finish": 0.8, "deadline": 0.8, "priority": 0.8,
    # People
    "team": 0.8, "client": 0.85, "customer": 0.8, "manager": 0.7,
    "supervisor": 0.75, "employee": 0.8, "staff": 0.8,
    # Reporting
    "report": 0.85, "analytics": 0.8, "metrics": 0.8, "dashboard": 0.8,
    "statistics": 0.8, "performance": 0.85,
    # Quality and compliance
    "quality": 0.8, "inspection": 0.85, "compliance": 0.8, "safety": 0.85,
    "audit": 0.8,
    # Communication
    "message": 0.75, "notify": 0.7, "alert": 0.75, "email": 0.7,
    "communication": 0.75,
    # Finance
    "invoice": 0.85, "payment": 0.8, "billing": 0.8, "expense": 0.8,
    "budget": 0.8,
    # Field work
    "location": 0.75, "site": 0.8, "field": 0.8, "route": 0.8, "travel": 0.7,
    # Equipment
    "equipment": 0.85, "supplies": 0.8, "inventory": 0.85, "maintenance": 0.8,
    "repair": 0.8,
}

SIMPLE_KEYWORDS: frozenset[str] = frozenset({
    "help", "hello", "hi", "hey", "thanks", "thank you", "goodbye", "bye",
    "what", "how", "when", "where", "why", "commands", "tutorial", "guide",
    "settings", "preferences", "options", "version", "about", "info",
})

DOMAIN_KEYWORDS: dict[str, dict[str, float]] = {
    "construction": {
        "foundation": 0.8, "concrete": 0.8, "blueprint": 0.8, "contractor": 0.8,
        "building": 0.8, "permit": 0.8, "materials": 0.8, "crane": 0.8,
        "scaffold": 0.8,
    },
    "retail": {
        "customer": 0.9, "sale": 0.9, "inventory": 0.9, "product": 0.8,
        "checkout": 0.8, "register": 0.8, "discount": 0.8, "refund": 0.8,
    },
    "healthcare": {
        "patient": 0.9, "appointment": 0.9, "medical": 0.8, "treatment": 0.8,
        "diagnosis": 0.8, "prescription": 0.8, "clinic": 0.8,
    },
    "manufacturing": {
        "production": 0.9, "assembly": 0.8, "quality": 0.9, "machine": 0.8,
        "operator": 0.8, "shift": 0.9, "output": 0.8,
    },
}

CAPABILITY_KEYWORDS: dict[str, dict[str, float]] = {
    "time tracking": {
        "clock": 0.95, "time": 0.9, "hours": 0.9, "overtime": 0.9,
        "break": 0.8, "shift": 0.9,
    },
    "task management": {
        "task": 0.95, "todo": 0.9, "complete": 0.9, "assign": 0.9,
        "deadline": 0.8, "priority": 0.8,
    },
    "project management": {
        "project": 0.95, "milestone": 0.8, "progress": 0.8, "status": 0.8,
        "timeline": 0.8,
    },
    "team coordination": {
        "team": 0.9, "member": 0.8, "leader": 0.8, "meeting": 0.8,
        "collaboration": 0.8,
    },
}

FALLBACK_REASONS: dict[str, str] = {
    "data_required": "Requires access to business data",
    "complex_operation": "Complex business operation requiring system integration",
    "user_context": "Needs user-specific information from business system",
    "real_time_data": "Requires real-time business data",
    "authentication": "Requires business authentication and permissions",
    "database_operation": "Database operation requiring business API",
    "external_integration": "Requires integration with external business systems",
    "workflow_management": "Complex workflow requiring business logic",
    "compliance_check": "Compliance validation requiring business rules",
    "low_confidence": "Low confidence in command understanding",
    "unknown_command": "Unknown command requiring business interpretation",
    "entity_extraction_failed": "Failed to extract required information",
    "ambiguous_request": "Ambiguous request requiring clarification",
}

# Checked in order; first match picks the fallback reason
CATEGORY_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(?:clock|timesheet|schedule)\b", re.IGNORECASE), "real_time_data"),
    (re.compile(r"\b(?:assign|project|task)\b", re.IGNORECASE), "workflow_management"),
    (re.compile(r"\b(?:report|analytics|metrics)\b", re.IGNORECASE), "database_operation"),
    (re.compile(r"\b(?:user|employee|staff|team)\b", re.IGNORECASE), "user_context"),
]

HELP_PATTERN = re.compile(r"\b(?:help|what.*do|show.*command|how.*work)\b", re.IGNORECASE)
GREETING_PATTERN = re.compile(
    r"\b(?:hi|hello|hey|good\s+(?:morning|afternoon|evening))\b", re.IGNORECASE
)

# (pattern, entity keys) used to guess what a business command will need
REQUIRED_ENTITY_HINTS: list[tuple[re.Pattern[str], tuple[str, ...]]] = [
    (re.compile(r"\b(?:task|complete|finish|assign)\b", re.IGNORECASE), ("task_identifier",)),
    (re.compile(r"\b(?:message|tell|notify|send)\b", re.IGNORECASE), ("recipient", "message_content")),
    (re.compile(r"\bproject\b", re.IGNORECASE), ("project_name",)),
    (re.compile(r"\b(?:priority|urgent|important)\b", re.IGNORECASE), ("priority_level",)),
    (re.compile(r"\b(?:schedule|time|date|when)\b", re.IGNORECASE), ("date_time",)),
]
