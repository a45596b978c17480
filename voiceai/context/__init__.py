"""Business context: variable cache, template rendering, validation, presets."""

from voiceai.context.business_context import (
    BusinessContextManager,
    RenderOptions,
    RenderResult,
    preset_context,
    render,
)

__all__ = [
    "BusinessContextManager",
    "RenderOptions",
    "RenderResult",
    "preset_context",
    "render",
]
