"""Business context variables and ``{{variable}}`` template rendering.

The manager keeps a flat variable map derived from the current business
context. The map is rebuilt whenever the context changes; custom variables
are applied last so they win on key collisions.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

from voiceai.config_models import BusinessContext, merge_business_context

logger = logging.getLogger(__name__)

VARIABLE_PATTERN = re.compile(r"\{\{([a-zA-Z_][a-zA-Z0-9_]*)\}\}")
DEFAULT_BRAND_COLOR = "#3B82F6"

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_HEX_COLOR = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
_RGB_COLOR = re.compile(r"^rgba?\(\s*\d+\s*,\s*\d+\s*,\s*\d+(\s*,\s*[\d.]+)?\s*\)$")
_NAMED_COLORS = {
    "red", "blue", "green", "yellow", "orange", "purple", "pink", "brown",
    "black", "white", "gray", "grey", "cyan", "magenta", "lime", "navy",
}


@dataclass(frozen=True)
class RenderOptions:
    preserve_unknown_variables: bool = True
    case_sensitive: bool = True
    custom_variables: dict[str, str] = field(default_factory=dict)
    enable_nested_variables: bool = False


@dataclass
class RenderMetrics:
    variables_used: list[str] = field(default_factory=list)
    replacement_count: int = 0
    unreplaced_variables: list[str] = field(default_factory=list)
    processing_time_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "variables_used": self.variables_used,
            "replacement_count": self.replacement_count,
            "unreplaced_variables": self.unreplaced_variables,
            "processing_time_ms": self.processing_time_ms,
        }


@dataclass
class RenderResult:
    result: str
    metrics: RenderMetrics


@dataclass
class ContextValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    completeness: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": self.errors,
            "warnings": self.warnings,
            "completeness": self.completeness,
        }


def _title_case(value: str) -> str:
    return re.sub(r"\w\S*", lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), value)


def _is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return bool(parsed.scheme and parsed.netloc)


def _is_valid_color(color: str) -> bool:
    return bool(
        _HEX_COLOR.match(color)
        or _RGB_COLOR.match(color)
        or color.lower() in _NAMED_COLORS
    )


class BusinessContextManager:
    """Owns the business context and its flattened variable cache."""

    def __init__(self, context: BusinessContext | None = None):
        self._context = context or BusinessContext()
        self._variables: dict[str, str] = {}
        self._refresh_variables()

    @property
    def context(self) -> BusinessContext:
        return self._context

    @property
    def variables(self) -> dict[str, str]:
        """Snapshot of the cached variable map."""
        return dict(self._variables)

    def _refresh_variables(self) -> None:
        ctx = self._context
        now = datetime.now()
        joined = ", ".join(ctx.capabilities)

        self._variables = {
            "businessName": ctx.name,
            "companyName": ctx.name,
            "organizationName": ctx.name,
            "domain": ctx.domain,
            "industry": ctx.domain,
            "capabilities": joined,
            "capabilitiesList": joined,
            "primaryCapability": ctx.capabilities[0] if ctx.capabilities else "general assistance",
            "capabilityCount": str(len(ctx.capabilities)),
            "website": ctx.website or "",
            "supportEmail": ctx.support_email or "",
            "brandColor": ctx.brand_color or DEFAULT_BRAND_COLOR,
            "currentDate": now.strftime("%Y-%m-%d"),
            "currentTime": now.strftime("%H:%M:%S"),
            "currentYear": str(now.year),
            "businessNameUpper": ctx.name.upper(),
            "businessNameLower": ctx.name.lower(),
            "businessNameTitle": _title_case(ctx.name),
            **ctx.custom_variables,
        }

    # ─────────────────────────────────────────────────────────────────────
    # Context updates
    # ─────────────────────────────────────────────────────────────────────

    def update_context(self, partial: dict[str, Any] | BusinessContext) -> BusinessContext:
        """Merge a partial context (or replace with a full one) and rebuild variables."""
        if isinstance(partial, BusinessContext):
            self._context = partial
        else:
            self._context = merge_business_context(self._context, partial)
        self._refresh_variables()
        logger.debug("Business context updated: %s", self._context.name)
        return self._context

    def add_custom_variables(self, variables: dict[str, str]) -> None:
        merged = {**self._context.custom_variables, **variables}
        self.update_context(self._context.model_copy(update={"custom_variables": merged}))

    def remove_custom_variables(self, keys: list[str]) -> None:
        remaining = {
            k: v for k, v in self._context.custom_variables.items() if k not in keys
        }
        self.update_context(self._context.model_copy(update={"custom_variables": remaining}))

    def export_context(self) -> dict[str, Any]:
        return self._context.model_dump()

    def import_context(self, data: dict[str, Any] | BusinessContext) -> ContextValidation:
        """Replace the context only if the imported one validates."""
        context = (
            data if isinstance(data, BusinessContext) else BusinessContext.model_validate(data)
        )
        validation = self.validate_context(context)
        if validation.is_valid:
            self.update_context(context)
        else:
            logger.warning("Rejected business context import: %s", validation.errors)
        return validation

    # ─────────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────────

    def render(self, template: str, options: RenderOptions | None = None) -> RenderResult:
        """Replace ``{{variable}}`` tokens in ``template``.

        Unknown tokens are kept verbatim unless ``preserve_unknown_variables``
        is off. With ``enable_nested_variables`` a resolved value is rendered
        once more, with nesting disabled.
        """
        options = options or RenderOptions()
        started = time.perf_counter()
        variables = {**self._variables, **options.custom_variables}
        lowered = (
            {} if options.case_sensitive else {k.lower(): k for k in variables}
        )

        used: list[str] = []
        unreplaced: list[str] = []
        count = 0

        def substitute(match: re.Match[str]) -> str:
            nonlocal count
            name = match.group(1)
            key = name if options.case_sensitive else lowered.get(name.lower())

            if key is None or key not in variables:
                unreplaced.append(name)
                return match.group(0) if options.preserve_unknown_variables else ""

            used.append(name)
            count += 1
            value = variables[key]
            if options.enable_nested_variables and "{{" in value:
                nested = RenderOptions(
                    preserve_unknown_variables=options.preserve_unknown_variables,
                    case_sensitive=options.case_sensitive,
                    custom_variables=options.custom_variables,
                    enable_nested_variables=False,
                )
                value = self.render(value, nested).result
            return value

        result = VARIABLE_PATTERN.sub(substitute, template)

        metrics = RenderMetrics(
            variables_used=list(dict.fromkeys(used)),
            replacement_count=count,
            unreplaced_variables=list(dict.fromkeys(unreplaced)),
            processing_time_ms=(time.perf_counter() - started) * 1000,
        )
        return RenderResult(result=result, metrics=metrics)

    def extract_variables(self, text: str) -> list[str]:
        """Unique variable names referenced by ``text``, in order."""
        return list(dict.fromkeys(VARIABLE_PATTERN.findall(text)))

    def preview(self, text: str) -> dict[str, Any]:
        """Render ``text`` and report which of its variables are resolvable."""
        names = self.extract_variables(text)
        rendered = self.render(text)
        return {
            "original": text,
            "preview": rendered.result,
            "variables": [
                {"name": n, "value": self._variables.get(n), "found": n in self._variables}
                for n in names
            ],
            "metrics": rendered.metrics.to_dict(),
        }

    def available_variables(self) -> list[str]:
        return sorted(self._variables)

    def response_templates(self) -> dict[str, str]:
        return {
            "greeting": "Hello! I'm your {{businessName}} assistant. I can help you with {{capabilities}}.",
            "introduction": (
                "I'm your {{businessName}} voice assistant, specialized in {{domain}} "
                "operations. I can assist with {{capabilities}}. How can I help you today?"
            ),
            "help": "I'm your {{businessName}} voice assistant! I can help you with {{capabilities}}. What would you like to do?",
            "fallback": "I'll connect you to the {{businessName}} system to handle that request. Please wait a moment...",
            "unknown": "I'm not sure how to help with that in {{businessName}}. Try asking about {{capabilities}}.",
            "error": "I'm having trouble with that request in {{businessName}}. Please try again.",
            "processing": "Processing your {{businessName}} request...",
            "completed": "Your {{businessName}} request has been completed successfully.",
            "needs_permission": (
                "This action requires {{businessName}} system access. "
                "Please ensure you're properly authenticated."
            ),
            "capabilities": "As your {{businessName}} assistant, I can help you with: {{capabilitiesList}}. What would you like to do?",
        }

    # ─────────────────────────────────────────────────────────────────────
    # Validation
    # ─────────────────────────────────────────────────────────────────────

    def validate_context(self, context: BusinessContext | None = None) -> ContextValidation:
        ctx = context or self._context
        errors: list[str] = []
        warnings: list[str] = []
        completeness = 0.0

        if ctx.name.strip():
            completeness += 0.3
        else:
            errors.append("Business name is required")

        if ctx.domain.strip():
            completeness += 0.2
        else:
            errors.append("Business domain is required")

        if ctx.capabilities:
            completeness += 0.2
        else:
            errors.append("At least one capability is required")

        if ctx.website:
            completeness += 0.1
        else:
            warnings.append("Website not provided - some features may be limited")

        if ctx.support_email:
            completeness += 0.1
        else:
            warnings.append("Support email not provided - contact features may be limited")

        if ctx.brand_color:
            completeness += 0.1
        else:
            warnings.append("Brand color not provided - using default styling")

        if len(ctx.name) > 100:
            warnings.append("Business name is very long - consider shortening for better UX")
        if len(ctx.capabilities) > 10:
            warnings.append("Too many capabilities listed - consider grouping for better clarity")
        if ctx.website and not _is_valid_url(ctx.website):
            warnings.append("Website URL appears to be invalid")
        if ctx.support_email and not _EMAIL_PATTERN.match(ctx.support_email):
            warnings.append("Support email appears to be invalid")
        if ctx.brand_color and not _is_valid_color(ctx.brand_color):
            warnings.append("Brand color appears to be invalid - using default")

        return ContextValidation(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            completeness=min(round(completeness, 2), 1.0),
        )


# Industry presets
PRESET_CONTEXTS: dict[str, dict[str, Any]] = {
    "construction": {
        "name": "Construction Manager",
        "domain": "construction",
        "capabilities": [
            "time tracking", "project management", "team coordination",
            "safety compliance", "quality control",
        ],
        "brand_color": "#F59E0B",
        "custom_variables": {"industry": "construction", "workType": "field operations"},
    },
    "retail": {
        "name": "Retail Assistant",
        "domain": "retail",
        "capabilities": [
            "customer service", "inventory management", "sales tracking", "team coordination",
        ],
        "brand_color": "#10B981",
        "custom_variables": {"industry": "retail", "workType": "customer operations"},
    },
    "healthcare": {
        "name": "Healthcare Assistant",
        "domain": "healthcare",
        "capabilities": [
            "appointment scheduling", "patient communication",
            "staff coordination", "compliance tracking",
        ],
        "brand_color": "#3B82F6",
        "custom_variables": {"industry": "healthcare", "workType": "patient care"},
    },
    "manufacturing": {
        "name": "Production Assistant",
        "domain": "manufacturing",
        "capabilities": [
            "production tracking", "quality control", "shift management", "equipment monitoring",
        ],
        "brand_color": "#8B5CF6",
        "custom_variables": {"industry": "manufacturing", "workType": "production operations"},
    },
    "hospitality": {
        "name": "Hospitality Manager",
        "domain": "hospitality",
        "capabilities": [
            "guest services", "staff scheduling", "event coordination", "facility management",
        ],
        "brand_color": "#EC4899",
        "custom_variables": {"industry": "hospitality", "workType": "guest services"},
    },
}

_GENERAL_PRESET: dict[str, Any] = {
    "name": "Business Assistant",
    "domain": "general",
    "capabilities": ["task management", "team coordination", "basic operations"],
    "brand_color": "#6B7280",
    "custom_variables": {"industry": "general", "workType": "business operations"},
}


def preset_context(industry: str) -> BusinessContext:
    """Ready-made context for an industry (general assistant when unknown)."""
    return BusinessContext.model_validate(PRESET_CONTEXTS.get(industry.lower(), _GENERAL_PRESET))


def render(
    template: str,
    context: BusinessContext | dict[str, Any] | None = None,
    options: RenderOptions | None = None,
) -> RenderResult:
    """One-shot render against a context (dict values override defaults)."""
    if isinstance(context, BusinessContext):
        manager = BusinessContextManager(context)
    else:
        manager = BusinessContextManager(BusinessContext.model_validate(context or {}))
    return manager.render(template, options)
