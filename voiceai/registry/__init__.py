"""Command registry: static definitions, categories, aliases and role presets."""

from voiceai.registry.commands import (
    DEFAULT_REGISTRY,
    CommandCategory,
    CommandRegistry,
)
from voiceai.registry.presets import UserRole, registry_for_role

__all__ = [
    "CommandCategory",
    "CommandRegistry",
    "DEFAULT_REGISTRY",
    "UserRole",
    "registry_for_role",
]
