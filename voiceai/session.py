"""Voice session: the public entry point of the pipeline.

A session owns the business context, the provider chain (and through it the
provider status cache), the command registry and the command history.

    session = VoiceSession(load_config())
    response = await session.process_text("complete task 5")

Pipeline per transcript:
    extract_entities → parse_command → classify_command → build_response
    → execute actions (only when the command can be handled locally)
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from voiceai.classifier.command_classifier import CommandClassifier
from voiceai.config_models import (
    BusinessContext,
    VoiceAIConfig,
    merge_business_context,
    merge_config,
)
from voiceai.context.business_context import BusinessContextManager, RenderOptions, RenderResult
from voiceai.models import (
    ActionResult,
    CommandClassification,
    CommandDefinition,
    EntityExtractionResult,
    ProviderId,
    ProviderStatus,
    SessionState,
    VoiceCommand,
    VoiceResponse,
)
from voiceai.parser.entity_extractor import EntityExtractor
from voiceai.providers import PromptContext, ProviderOrchestrator, build_orchestrator
from voiceai.providers.base import BaseIntentProvider, entities_from_payload
from voiceai.providers.keywords import KeywordProvider
from voiceai.registry.commands import DEFAULT_REGISTRY, CommandRegistry
from voiceai.response.action_executor import ActionExecutor
from voiceai.response.response_builder import ResponseBuilder, command_variables

logger = logging.getLogger(__name__)


@dataclass
class SessionEvents:
    """Optional callbacks fired by a VoiceSession. Exceptions are logged."""

    on_command: Callable[[VoiceCommand], Any] | None = None
    on_response: Callable[[VoiceResponse], Any] | None = None
    on_error: Callable[[Exception], Any] | None = None
    on_state_change: Callable[[SessionState, SessionState], Any] | None = None
    on_fallback: Callable[[VoiceCommand, str | None], Any] | None = None
    on_action_executed: Callable[[ActionResult], Any] | None = None
    on_business_context_changed: Callable[[BusinessContext], Any] | None = None


class VoiceSession:
    """Stateful voice command session."""

    def __init__(
        self,
        config: VoiceAIConfig | None = None,
        events: SessionEvents | None = None,
        registry: CommandRegistry | None = None,
        providers: list[BaseIntentProvider] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._config = config or VoiceAIConfig()
        self._events = events or SessionEvents()
        self._base_registry = DEFAULT_REGISTRY if registry is None else registry
        self._custom_providers = providers
        self._state = SessionState.IDLE
        self._history: list[VoiceCommand] = []

        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=self._config.timeout_ms / 1000
        )

        self._context = BusinessContextManager(self._config.business_context)
        self._build_components()

    # ─────────────────────────────────────────────────────────────────────
    # Component wiring
    # ─────────────────────────────────────────────────────────────────────

    def _build_registry(self) -> CommandRegistry:
        commands_config = self._config.commands
        registry = self._base_registry.filtered(
            commands_config.enabled_categories, commands_config.disabled_commands
        )
        if commands_config.custom_commands:
            registry = registry.extended(
                CommandDefinition.from_dict(c) for c in commands_config.custom_commands
            )
        return registry

    def _build_components(self) -> None:
        config = self._config
        self._registry = self._build_registry()

        self._extractor = EntityExtractor(
            config.business_context,
            config.extraction,
            max_entities_per_type=config.max_entities_per_type,
        )
        self._classifier = CommandClassifier(config.business_context, config)

        if self._custom_providers is not None:
            self._orchestrator = ProviderOrchestrator(
                self._custom_providers,
                keyword_provider=KeywordProvider(self._registry),
                confidence_threshold=config.confidence_threshold,
                timeout_ms=config.timeout_ms,
            )
        else:
            self._orchestrator = build_orchestrator(config, self._registry, self._http_client)

        self._builder = ResponseBuilder(self._context, self._registry)
        self._executor = ActionExecutor(
            self._context,
            api_base_url=config.api_base_url or os.environ.get("VOICE_AI_API_URL"),
            api_key=config.api_key or os.environ.get("VOICE_AI_API_KEY"),
            retry_attempts=config.retry_attempts,
            timeout_ms=config.timeout_ms,
            client=self._http_client,
            on_executed=lambda result: self._emit("on_action_executed", result),
        )

    def _prompt_context(self) -> PromptContext:
        return PromptContext(
            business_context=self._context.context,
            intents=self._registry.known_intents(),
        )

    def _emit(self, name: str, *args: Any) -> None:
        callback = getattr(self._events, name)
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception(f"Session event handler {name} failed")

    def _set_state(self, state: SessionState) -> None:
        previous = self._state
        if previous == state:
            return
        self._state = state
        self._emit("on_state_change", previous, state)

    # ─────────────────────────────────────────────────────────────────────
    # Read-only state
    # ─────────────────────────────────────────────────────────────────────

    @property
    def config(self) -> VoiceAIConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def business_context(self) -> BusinessContext:
        return self._context.context

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def history(self) -> list[VoiceCommand]:
        """Processed commands, newest first."""
        return list(self._history)

    @property
    def provider_status(self) -> Mapping[ProviderId, ProviderStatus]:
        return self._orchestrator.status_snapshot()

    # ─────────────────────────────────────────────────────────────────────
    # State machine
    # ─────────────────────────────────────────────────────────────────────

    def start_listening(self) -> bool:
        """IDLE → LISTENING. Returns False when the session is busy."""
        if self._state != SessionState.IDLE:
            return False
        self._set_state(SessionState.LISTENING)
        return True

    def stop_listening(self) -> None:
        if self._state == SessionState.LISTENING:
            self._set_state(SessionState.IDLE)

    # ─────────────────────────────────────────────────────────────────────
    # Pipeline operations
    # ─────────────────────────────────────────────────────────────────────

    def extract_entities(self, text: str) -> EntityExtractionResult:
        if not self._config.extraction.enabled:
            return EntityExtractionResult(extracted_text=text)
        return self._extractor.extract(text)

    async def parse_command(self, text: str) -> VoiceCommand:
        """Interpret ``text`` through the provider chain. Never raises."""
        return await self._orchestrator.parse(text, self._prompt_context())

    def classify_command(
        self, command: VoiceCommand, definition: CommandDefinition | None = None
    ) -> CommandClassification:
        definition = definition or self._registry.get_by_intent(command.intent)
        return self._classifier.classify(command, definition)

    def build_response(
        self,
        command: VoiceCommand,
        classification: CommandClassification | None = None,
        definition: CommandDefinition | None = None,
    ) -> VoiceResponse:
        definition = definition or self._registry.get_by_intent(command.intent)
        classification = classification or self._classifier.classify(command, definition)
        return self._builder.respond(command, classification, definition)

    async def process_text(self, text: str) -> VoiceResponse | None:
        """Run the full pipeline for one transcript.

        Returns None without doing anything when a command is already being
        processed.
        """
        if self._state == SessionState.PROCESSING:
            logger.debug("Session busy, ignoring %r", text)
            return None

        self._set_state(SessionState.PROCESSING)
        start = time.monotonic()
        try:
            extraction = self.extract_entities(text)
            command = await self.parse_command(text)
            # Extractor slots take precedence over provider-reported entities
            command = command.with_entities({**command.entities, **extraction.entities})
            response = await self._respond(command)
        except Exception as e:
            logger.exception(f"Voice command processing failed: {e}")
            response = self._builder.error_response(e)
            self._emit("on_error", e)
        finally:
            self._set_state(SessionState.IDLE)

        response.metadata.setdefault("processing_time_ms", int((time.monotonic() - start) * 1000))
        return response

    async def execute_command(
        self, command_id: str, entities: dict[str, Any] | None = None
    ) -> VoiceResponse:
        """Run a registry command directly, bypassing interpretation.

        Raises:
            KeyError: If no command has ``command_id``
        """
        definition = self._registry.get_by_id(command_id)
        if definition is None:
            raise KeyError(f"Command not found: {command_id}")

        text = definition.examples[0] if definition.examples else definition.name
        command = VoiceCommand(
            intent=definition.intent,
            entities=entities_from_payload(entities or {}, text, 1.0),
            confidence=1.0,
            raw_text=text,
        )
        return await self._respond(command, definition)

    async def _respond(
        self, command: VoiceCommand, definition: CommandDefinition | None = None
    ) -> VoiceResponse:
        definition = definition or self._registry.get_by_intent(command.intent)
        classification = self._classifier.classify(command, definition)
        command = command.with_complexity(classification.complexity)
        self._record(command)
        self._emit("on_command", command)

        response = self._builder.respond(command, classification, definition)
        if response.should_fallback:
            self._emit("on_fallback", command, response.fallback_reason)

        if response.actions:
            response.action_results = await self._executor.execute(
                response.actions, command_variables(command)
            )

        self._emit("on_response", response)
        return response

    def _record(self, command: VoiceCommand) -> None:
        self._history.insert(0, command)
        del self._history[self._config.max_history_items:]

    def can_handle(self, text: str) -> bool:
        """Whether ``text`` would be answered locally, judged by keywords only."""
        command = self._orchestrator.keyword_provider.match(text)
        return self.classify_command(command).can_handle

    def available_commands(self, category: str | None = None) -> list[CommandDefinition]:
        if category is None:
            return self._registry.commands
        return self._registry.by_category(category)

    def clear_history(self) -> None:
        self._history.clear()

    def render_template(self, template: str, options: RenderOptions | None = None) -> RenderResult:
        return self._context.render(template, options)

    # ─────────────────────────────────────────────────────────────────────
    # Configuration
    # ─────────────────────────────────────────────────────────────────────

    def update_business_context(self, partial: dict[str, Any] | BusinessContext) -> BusinessContext:
        if isinstance(partial, BusinessContext):
            context = partial
        else:
            context = merge_business_context(self._context.context, partial)

        self._config = self._config.model_copy(update={"business_context": context})
        self._context.update_context(context)
        self._extractor.update_business_context(context)
        self._classifier.update_config(self._config)
        self._classifier.update_business_context(context)
        logger.info(f"Business context updated: {context.name} ({context.domain})")
        self._emit("on_business_context_changed", context)
        return context

    def update_config(self, partial: dict[str, Any]) -> VoiceAIConfig:
        """Merge ``partial`` into the config and rebuild the pipeline.

        Raises:
            pydantic.ValidationError: If the merged config is invalid
        """
        previous = self._config.business_context
        self._config = merge_config(self._config, partial)
        self._context.update_context(self._config.business_context)
        self._build_components()
        if self._config.business_context != previous:
            self._emit("on_business_context_changed", self._config.business_context)
        return self._config

    async def aclose(self) -> None:
        await self._orchestrator.aclose()
        await self._executor.aclose()
        if self._owns_client:
            await self._http_client.aclose()
