from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from voiceai import CONFIG_PATH
from voiceai.models import ProviderId

logger = logging.getLogger(__name__)


# =============================================================================
# BusinessContext
# =============================================================================

class BusinessContext(BaseModel):
    """Business profile used for prompts, templates and keyword tuning."""

    model_config = ConfigDict(extra="allow", frozen=True)
    name: str = Field(default="your assistant")
    domain: str = Field(default="general")
    capabilities: list[str] = Field(
        default_factory=lambda: ["basic commands", "help", "information"]
    )
    website: Optional[str] = None
    support_email: Optional[str] = None
    brand_color: Optional[str] = Field(default="#3B82F6")
    custom_variables: dict[str, str] = Field(default_factory=dict)


# =============================================================================
# VoiceAIConfig (args/voice.yaml)
# =============================================================================

class ProviderConfig(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)
    provider: ProviderId
    api_key: Optional[str] = None
    api_key_env: Optional[str] = None
    model: Optional[str] = None
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=200, ge=1)
    organization_id: Optional[str] = None
    base_url: Optional[str] = None


class ProvidersConfig(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)
    primary: Optional[ProviderConfig] = None
    fallbacks: list[ProviderConfig] = Field(default_factory=list)


class ExtractionConfig(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)
    enabled: bool = Field(default=True)
    enable_contextual_extraction: bool = Field(default=True)
    enable_multiple_entity_types: bool = Field(default=True)
    confidence_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    max_entities_total: int = Field(default=20, ge=1, le=20)


class CommandsConfig(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)
    enabled_categories: list[str] = Field(default_factory=list)
    disabled_commands: list[str] = Field(default_factory=list)
    custom_commands: list[dict[str, Any]] = Field(default_factory=list)


class VoiceAIConfig(BaseModel):
    """Complete, immutable session configuration."""

    model_config = ConfigDict(extra="allow", frozen=True)
    confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    business_relevance_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    enable_smart_fallback: bool = Field(default=True)
    strict_mode: bool = Field(default=False)
    max_entities_per_type: int = Field(default=3, ge=1)
    timeout_ms: int = Field(default=5000, ge=1)
    retry_attempts: int = Field(default=2, ge=0)
    max_history_items: int = Field(default=50, ge=0)
    api_base_url: Optional[str] = None
    api_key: Optional[str] = None
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    commands: CommandsConfig = Field(default_factory=CommandsConfig)
    business_context: BusinessContext = Field(default_factory=BusinessContext)


# =============================================================================
# Loading
# =============================================================================

def _deep_merge(base: dict[str, Any], partial: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in partial.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def merge_config(config: VoiceAIConfig, partial: dict[str, Any]) -> VoiceAIConfig:
    """Return a new config with ``partial`` deep-merged over ``config``.

    Raises:
        pydantic.ValidationError: If the merged values are invalid.
    """
    raw = _deep_merge(config.model_dump(mode="json"), partial)
    return VoiceAIConfig.model_validate(raw)


def merge_business_context(
    context: BusinessContext, partial: dict[str, Any]
) -> BusinessContext:
    raw = _deep_merge(context.model_dump(), partial)
    return BusinessContext.model_validate(raw)


def load_config(path: Path | str | None = None) -> VoiceAIConfig:
    """Load args/voice.yaml (or ``path``), falling back to defaults on error."""
    yaml_path = Path(path) if path else CONFIG_PATH

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return VoiceAIConfig.model_validate(raw)
    except Exception as e:
        logger.warning(f"Config validation failed for {yaml_path}: {e}, using defaults")
        return VoiceAIConfig()
