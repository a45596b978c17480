"""Response composition and action execution."""

from voiceai.response.action_executor import ActionError, ActionExecutor
from voiceai.response.response_builder import (
    ResponseBuilder,
    camel_case,
    command_variables,
)

__all__ = [
    "ActionError",
    "ActionExecutor",
    "ResponseBuilder",
    "camel_case",
    "command_variables",
]
