"""Static command registry.

Commands are read-only definitions grouped into categories. Lookup is by id,
intent, or trigger phrase (substring of the lowercased transcript).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from voiceai.models import (
    ActionType,
    CommandAction,
    CommandComplexity,
    CommandDefinition,
    HTTPMethod,
)


@dataclass(frozen=True)
class CommandCategory:
    id: str
    name: str
    description: str = ""


DEFAULT_CATEGORIES: tuple[CommandCategory, ...] = (
    CommandCategory("timesheet", "Time Tracking", "Clock in/out and manage work time"),
    CommandCategory("tasks", "Task Management", "Complete and manage tasks"),
    CommandCategory("communication", "Communication", "Send messages and reports"),
    CommandCategory("status", "Status & Reports", "Check status and generate reports"),
    CommandCategory("help", "Help & Support", "Get help and information"),
)


def _timesheet_action(path: str, action: str) -> CommandAction:
    return CommandAction(
        type=ActionType.API,
        endpoint=f"/api/timesheet/{path}",
        method=HTTPMethod.POST,
        body_template={
            "timestamp": "{{timestamp}}",
            "action": action,
            "source": "voice_ai",
        },
    )


DEFAULT_COMMANDS: tuple[CommandDefinition, ...] = (
    # Time tracking
    CommandDefinition(
        id="clock_in",
        name="Clock In",
        intent="clock_in",
        triggers=("clock in", "start work", "begin shift", "clock me in"),
        category="timesheet",
        description="Start your work shift",
        examples=("Clock me in", "Start work", "Begin my shift"),
        complexity=CommandComplexity.HYBRID,
        response_template="I'll clock you in now. Have a great shift!",
        action=_timesheet_action("clock-in", "clock_in"),
    ),
    CommandDefinition(
        id="clock_out",
        name="Clock Out",
        intent="clock_out",
        triggers=("clock out", "end work", "finish shift", "clock me out"),
        category="timesheet",
        description="End your work shift",
        examples=("Clock me out", "End work", "Finish my shift"),
        complexity=CommandComplexity.HYBRID,
        response_template="I'll clock you out now. Great work today!",
        action=_timesheet_action("clock-out", "clock_out"),
    ),
    CommandDefinition(
        id="break_start",
        name="Start Break",
        intent="break_start",
        triggers=("start break", "begin break", "going on break", "break time"),
        category="timesheet",
        description="Start your break period",
        examples=("Start my break", "Going on break", "Break time"),
        complexity=CommandComplexity.HYBRID,
        response_template="Starting your break now. Enjoy your time off!",
        action=_timesheet_action("break-start", "break_start"),
    ),
    CommandDefinition(
        id="break_end",
        name="End Break",
        intent="break_end",
        triggers=("end break", "back from break", "resume work", "break over"),
        category="timesheet",
        description="End your break period",
        examples=("End my break", "Back from break", "Resume work"),
        complexity=CommandComplexity.HYBRID,
        response_template="Welcome back! I'll end your break now.",
        action=_timesheet_action("break-end", "break_end"),
    ),
    # Tasks
    CommandDefinition(
        id="complete_task",
        name="Complete Task",
        intent="complete_task",
        triggers=("complete task", "task done", "finished task", "mark complete"),
        category="tasks",
        description="Mark a task as completed",
        examples=("Complete task 12", "Mark task 4 as complete"),
        complexity=CommandComplexity.HYBRID,
        response_template="I'll mark task {{taskIdentifier}} as complete.",
        action=CommandAction(
            type=ActionType.API,
            endpoint="/api/tasks/complete",
            method=HTTPMethod.PUT,
            body_template={
                "taskId": "{{taskIdentifier}}",
                "completedAt": "{{timestamp}}",
                "source": "voice_ai",
            },
        ),
        required_entities=("task_identifier",),
    ),
    CommandDefinition(
        id="get_tasks",
        name="Get My Tasks",
        intent="get_tasks",
        triggers=("get my tasks", "show tasks", "what are my tasks", "task list"),
        category="tasks",
        description="Get your current task list",
        examples=("Show my tasks", "What are my tasks today?"),
        complexity=CommandComplexity.HYBRID,
        response_template="Let me get your current tasks.",
        action=CommandAction(
            type=ActionType.API,
            endpoint="/api/tasks/my-tasks",
            method=HTTPMethod.GET,
        ),
    ),
    # Communication
    CommandDefinition(
        id="send_message",
        name="Send Message",
        intent="send_message",
        triggers=("send message", "send a message", "message to", "tell"),
        category="communication",
        description="Send a message to a colleague",
        examples=("Send message to John about the delay",),
        complexity=CommandComplexity.HYBRID,
        response_template="I'll let {{recipient}} know: {{messageContent}}",
        action=CommandAction(
            type=ActionType.API,
            endpoint="/api/messages/send",
            method=HTTPMethod.POST,
            body_template={
                "recipient": "{{recipient}}",
                "content": "{{messageContent}}",
                "sentAt": "{{timestamp}}",
                "source": "voice_ai",
            },
        ),
        required_entities=("recipient", "message_content"),
    ),
    CommandDefinition(
        id="report_issue",
        name="Report Issue",
        intent="report_issue",
        triggers=("report issue", "problem found", "there is a problem", "issue alert"),
        category="communication",
        description="Report a problem or issue",
        examples=("Report equipment issue", "There is a safety problem"),
        complexity=CommandComplexity.HYBRID,
        response_template="I've logged your {{issueType}} issue. Someone will follow up soon.",
        action=CommandAction(
            type=ActionType.API,
            endpoint="/api/issues/report",
            method=HTTPMethod.POST,
            body_template={
                "description": "{{rawText}}",
                "type": "{{issueType}}",
                "reportedAt": "{{timestamp}}",
                "source": "voice_ai",
            },
        ),
    ),
    CommandDefinition(
        id="team_status",
        name="Team Status",
        intent="team_status",
        triggers=("team status", "how is my team", "team update"),
        category="communication",
        description="Get your team's current status",
        examples=("How is my team doing?", "Team status update"),
        complexity=CommandComplexity.BUSINESS,
        requires_business_data=True,
        fallback_reason="Needs user-specific information from business system",
        response_template="Let me get your team's current status.",
        action=CommandAction(
            type=ActionType.API,
            endpoint="/api/teams/status",
            method=HTTPMethod.GET,
        ),
    ),
    # Status
    CommandDefinition(
        id="get_status",
        name="Get Status",
        intent="get_status",
        triggers=("get status", "my status", "current status", "work status"),
        category="status",
        description="Get your current work status",
        examples=("What's my status?", "Get current status"),
        complexity=CommandComplexity.HYBRID,
        response_template="Let me check your current work status.",
        action=CommandAction(
            type=ActionType.API,
            endpoint="/api/status/current",
            method=HTTPMethod.GET,
        ),
    ),
    CommandDefinition(
        id="project_status",
        name="Project Status",
        intent="project_status",
        triggers=("project status", "project progress", "how is project"),
        category="status",
        description="Get current project status",
        examples=("How is the downtown project?", "Project status update"),
        complexity=CommandComplexity.HYBRID,
        response_template="Let me get the status for {{projectName}}.",
        action=CommandAction(
            type=ActionType.API,
            endpoint="/api/projects/{{projectName}}/status",
            method=HTTPMethod.GET,
        ),
        required_entities=("project_name",),
    ),
    # Help
    CommandDefinition(
        id="commands_list",
        name="Show Commands",
        intent="commands_list",
        triggers=("show commands", "list commands", "what commands", "available commands"),
        category="help",
        description="Show all available voice commands",
        examples=("Show all commands", "What commands are available?"),
        response_template=(
            "Here are all the commands I understand. "
            "You can also use the command center to explore them."
        ),
        action=CommandAction(
            type=ActionType.UI,
            component="command_center",
            props={"show_categories": True, "expand_all": True},
        ),
    ),
    CommandDefinition(
        id="help",
        name="Help",
        intent="help",
        triggers=("help", "what can you do", "assistance"),
        category="help",
        description="Get help and see available commands",
        examples=("Help me", "What can you do?"),
        response_template=(
            "I'm your {{businessName}} assistant. I can help you with "
            "{{capabilitiesList}}. Say 'show commands' to see everything I can do!"
        ),
        action=CommandAction(
            type=ActionType.UI,
            component="command_center",
            props={"show_categories": True, "highlight_help": True},
        ),
    ),
)

DEFAULT_ALIASES: dict[str, str] = {
    "start": "clock_in",
    "stop": "clock_out",
    "done": "complete_task",
    "finished": "complete_task",
    "status": "get_status",
    "tasks": "get_tasks",
}


class CommandRegistry:
    """Read-only collection of command definitions.

    Mutating operations (filtering, extending) return a new registry.
    """

    def __init__(
        self,
        commands: Iterable[CommandDefinition],
        categories: Iterable[CommandCategory] = DEFAULT_CATEGORIES,
        aliases: dict[str, str] | None = None,
    ):
        self._commands: tuple[CommandDefinition, ...] = tuple(commands)
        self._categories: tuple[CommandCategory, ...] = tuple(categories)
        self._aliases: dict[str, str] = dict(aliases or {})

    @property
    def commands(self) -> list[CommandDefinition]:
        return list(self._commands)

    @property
    def categories(self) -> list[CommandCategory]:
        return list(self._categories)

    @property
    def aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self):
        return iter(self._commands)

    def get_by_id(self, command_id: str) -> CommandDefinition | None:
        for command in self._commands:
            if command.id == command_id:
                return command
        return None

    def get_by_intent(self, intent: str) -> CommandDefinition | None:
        for command in self._commands:
            if command.intent == intent:
                return command
        return None

    def find_by_trigger(self, text: str) -> CommandDefinition | None:
        """First command whose trigger phrase appears in the text.

        Falls back to a one-word alias (e.g. "done") when no trigger matches.
        """
        lowered = text.lower()
        for command in self._commands:
            if any(trigger.lower() in lowered for trigger in command.triggers):
                return command

        alias_target = self._aliases.get(lowered.strip(" .!?"))
        if alias_target:
            return self.get_by_id(alias_target)
        return None

    def by_category(self, category_id: str) -> list[CommandDefinition]:
        return [c for c in self._commands if c.category == category_id]

    def known_intents(self) -> list[str]:
        """Unique intents in registry order."""
        return list(dict.fromkeys(c.intent for c in self._commands))

    def with_examples(self) -> list[CommandDefinition]:
        return [c for c in self._commands if c.examples]

    def filtered(
        self,
        enabled_categories: Iterable[str] = (),
        disabled_commands: Iterable[str] = (),
    ) -> CommandRegistry:
        """Restrict to enabled categories (all when empty), minus disabled ids."""
        enabled = set(enabled_categories)
        disabled = set(disabled_commands)
        commands = [
            c for c in self._commands
            if c.id not in disabled and (not enabled or c.category in enabled)
        ]
        return CommandRegistry(commands, self._categories, self._aliases)

    def extended(self, commands: Iterable[CommandDefinition]) -> CommandRegistry:
        """Add commands; a new command replaces an existing one with the same id."""
        extra = list(commands)
        extra_ids = {c.id for c in extra}
        merged = [c for c in self._commands if c.id not in extra_ids] + extra
        return CommandRegistry(merged, self._categories, self._aliases)


DEFAULT_REGISTRY = CommandRegistry(DEFAULT_COMMANDS, DEFAULT_CATEGORIES, DEFAULT_ALIASES)
