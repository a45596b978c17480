"""Role-based command presets.

Each role gets the default commands plus a few role-specific ones, with
category and command filtering applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from voiceai.models import ActionType, CommandAction, CommandComplexity, CommandDefinition, HTTPMethod
from voiceai.registry.commands import DEFAULT_REGISTRY, CommandCategory, CommandRegistry


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    FIELD_WORKER = "field_worker"
    CLIENT = "client"


@dataclass(frozen=True)
class RolePreset:
    role: UserRole
    permissions: tuple[str, ...]
    enabled_categories: tuple[str, ...]
    disabled_commands: tuple[str, ...] = ()
    commands: tuple[CommandDefinition, ...] = field(default_factory=tuple)


def _query_command(
    command_id: str,
    name: str,
    triggers: tuple[str, ...],
    category: str,
    endpoint: str,
    text: str,
) -> CommandDefinition:
    return CommandDefinition(
        id=command_id,
        name=name,
        intent=command_id,
        triggers=triggers,
        category=category,
        complexity=CommandComplexity.BUSINESS,
        response_template=text,
        action=CommandAction(type=ActionType.API, endpoint=endpoint, method=HTTPMethod.GET),
    )


ADMIN_COMMANDS = (
    _query_command("team_analytics", "Team Analytics",
        ("team analytics", "team report", "performance report"), "admin",
        "/api/admin/analytics/team", "Generating team analytics report."),
    _query_command("system_status", "System Status",
        ("system status", "server status", "system health"), "admin",
        "/api/admin/system/status", "Checking system status and health metrics."),
)

MANAGER_COMMANDS = (
    CommandDefinition(
        id="assign_task",
        name="Assign Task",
        intent="assign_task",
        triggers=("assign task", "give task to"),
        category="management",
        examples=("Assign task 7 to Maria",),
        complexity=CommandComplexity.BUSINESS,
        response_template="I'll assign task {{taskIdentifier}} to {{userName}}.",
        action=CommandAction(
            type=ActionType.API,
            endpoint="/api/tasks/assign",
            method=HTTPMethod.POST,
            body_template={
                "taskId": "{{taskIdentifier}}",
                "assignee": "{{userName}}",
                "assignedAt": "{{timestamp}}",
            },
        ),
        required_entities=("task_identifier", "user_name"),
    ),
    _query_command("team_performance", "Team Performance",
        ("team performance", "how is team doing", "team metrics"), "management",
        "/api/manager/team/performance", "Getting performance metrics for your team."),
)

FIELD_WORKER_COMMANDS = (
    CommandDefinition(
        id="location_update",
        name="Update Location",
        intent="location_update",
        triggers=("update location", "arrived at site", "at location"),
        category="field",
        complexity=CommandComplexity.HYBRID,
        response_template="I'll update your location to {{location}}.",
        action=CommandAction(
            type=ActionType.API,
            endpoint="/api/field/location/update",
            method=HTTPMethod.POST,
            body_template={"location": "{{location}}", "timestamp": "{{timestamp}}"},
        ),
        required_entities=("location",),
    ),
    _query_command("equipment_status", "Equipment Status",
        ("equipment status", "check equipment", "tool status"), "field",
        "/api/field/equipment/status", "Checking your equipment status."),
)

CLIENT_COMMANDS = (
    _query_command("project_updates", "Project Updates",
        ("project updates", "how is my project"), "client",
        "/api/client/projects/updates", "Getting updates on your projects."),
    CommandDefinition(
        id="submit_feedback",
        name="Submit Feedback",
        intent="submit_feedback",
        triggers=("submit feedback", "give feedback", "feedback about"),
        category="client",
        complexity=CommandComplexity.HYBRID,
        response_template="I'll record your feedback: {{rawText}}",
        action=CommandAction(
            type=ActionType.API,
            endpoint="/api/client/feedback/submit",
            method=HTTPMethod.POST,
            body_template={"feedback": "{{rawText}}", "submittedAt": "{{timestamp}}"},
        ),
    ),
)

ROLE_CATEGORIES: tuple[CommandCategory, ...] = (
    CommandCategory("admin", "Administration"),
    CommandCategory("management", "Team Management"),
    CommandCategory("field", "Field Work"),
    CommandCategory("client", "Client Services"),
)

ROLE_PRESETS: dict[UserRole, RolePreset] = {
    UserRole.ADMIN: RolePreset(
        role=UserRole.ADMIN,
        permissions=("admin:*", "analytics:read", "system:read", "team:manage"),
        enabled_categories=("timesheet", "tasks", "communication", "status", "admin", "help"),
        commands=ADMIN_COMMANDS,
    ),
    UserRole.MANAGER: RolePreset(
        role=UserRole.MANAGER,
        permissions=("team:read", "team:assign", "tasks:manage", "reports:read"),
        enabled_categories=("timesheet", "tasks", "communication", "status", "management", "help"),
        commands=MANAGER_COMMANDS,
    ),
    UserRole.FIELD_WORKER: RolePreset(
        role=UserRole.FIELD_WORKER,
        permissions=("timesheet:write", "tasks:update", "location:update", "issues:report"),
        enabled_categories=("timesheet", "tasks", "communication", "field", "help"),
        commands=FIELD_WORKER_COMMANDS,
    ),
    UserRole.CLIENT: RolePreset(
        role=UserRole.CLIENT,
        permissions=("projects:read", "feedback:write", "support:create"),
        enabled_categories=("communication", "status", "client", "help"),
        disabled_commands=("clock_in", "clock_out", "break_start", "break_end", "complete_task"),
        commands=CLIENT_COMMANDS,
    ),
}


def registry_for_role(
    role: UserRole | str, base: CommandRegistry = DEFAULT_REGISTRY
) -> CommandRegistry:
    """Build the command registry a user with ``role`` should see."""
    preset = ROLE_PRESETS[UserRole(role)]
    registry = CommandRegistry(
        base.commands,
        base.categories + list(ROLE_CATEGORIES),
        base.aliases,
    )
    return registry.extended(preset.commands).filtered(
        preset.enabled_categories, preset.disabled_commands
    )
