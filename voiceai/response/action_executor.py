"""Executes command actions.

API actions are sent to the configured business API with httpx. UI and
navigation actions are not executed here; they are handed to the
``on_executed`` callback for the host application to dispatch.

Every action is independent: a failing action is logged and reported in its
ActionResult and never raised to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx

from voiceai.context.business_context import BusinessContextManager, RenderOptions
from voiceai.models import ActionResult, ActionType, CommandAction, HTTPMethod

logger = logging.getLogger(__name__)


class ActionError(Exception):
    """An action could not be executed."""


class ActionExecutor:
    """Runs the actions attached to a VoiceResponse."""

    def __init__(
        self,
        context_manager: BusinessContextManager,
        api_base_url: str | None = None,
        api_key: str | None = None,
        retry_attempts: int = 2,
        timeout_ms: int = 5000,
        client: httpx.AsyncClient | None = None,
        on_executed: Callable[[ActionResult], Any] | None = None,
    ):
        self._context = context_manager
        self._base_url = api_base_url
        self._api_key = api_key
        self._retry_attempts = max(0, retry_attempts)
        self._timeout = timeout_ms / 1000
        self._client = client
        self._owns_client = client is None
        self._on_executed = on_executed

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    # ─────────────────────────────────────────────────────────────────────
    # Template helpers
    # ─────────────────────────────────────────────────────────────────────

    def _render(self, value: Any, variables: dict[str, str]) -> Any:
        if isinstance(value, str):
            return self._context.render(value, RenderOptions(custom_variables=variables)).result
        if isinstance(value, dict):
            return {k: self._render(v, variables) for k, v in value.items()}
        if isinstance(value, list):
            return [self._render(v, variables) for v in value]
        return value

    def _endpoint(self, endpoint: str, variables: dict[str, str]) -> str:
        merged = {**self._context.variables, **variables}
        quoted = {k: quote(v, safe="") for k, v in merged.items()}
        path = self._render(endpoint, quoted)
        return self._base_url.rstrip("/") + "/" + path.lstrip("/")

    def _headers(self, action: CommandAction) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        headers.update(action.headers)
        return headers

    # ─────────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────────

    async def execute(
        self, actions: list[CommandAction], variables: dict[str, str] | None = None
    ) -> list[ActionResult]:
        """Execute each action in order and collect the outcomes."""
        variables = variables or {}
        results = []
        for action in actions:
            try:
                result = await self._execute_one(action, variables)
            except ActionError as e:
                logger.warning("Action %s failed: %s", action.type.value, e)
                result = ActionResult(action=action, success=False, error=str(e))
            except Exception as e:
                logger.exception("Unexpected error executing %s action", action.type.value)
                result = ActionResult(action=action, success=False, error=str(e))
            results.append(result)
            self._notify(result)
        return results

    async def _execute_one(self, action: CommandAction, variables: dict[str, str]) -> ActionResult:
        if action.type == ActionType.API:
            return await self._call_api(action, variables)

        elif action.type == ActionType.NAVIGATION:
            return ActionResult(
                action=action,
                success=True,
                data={"route": action.route, "params": self._render(action.params, variables)},
            )

        elif action.type == ActionType.UI:
            return ActionResult(
                action=action,
                success=True,
                data={"component": action.component, "props": self._render(action.props, variables)},
            )

        else:
            raise ActionError(f"Unsupported action type: {action.type}")

    async def _call_api(self, action: CommandAction, variables: dict[str, str]) -> ActionResult:
        if not self._base_url:
            raise ActionError("API base URL not configured")
        if not action.endpoint:
            raise ActionError("API action has no endpoint")

        url = self._endpoint(action.endpoint, variables)
        kwargs: dict[str, Any] = {"headers": self._headers(action)}
        if action.method != HTTPMethod.GET:
            kwargs["json"] = self._render(action.body_template, variables)

        client = await self._get_client()
        last_error: Exception | None = None
        for attempt in range(self._retry_attempts + 1):
            try:
                response = await client.request(action.method.value, url, **kwargs)
                break
            except httpx.TransportError as e:
                last_error = e
                logger.warning(
                    "%s %s failed (attempt %d/%d): %s",
                    action.method.value,
                    url,
                    attempt + 1,
                    self._retry_attempts + 1,
                    e,
                )
        else:
            raise ActionError(f"API call failed: {last_error}")

        try:
            data = response.json() if response.content else None
        except ValueError:
            data = response.text

        if not response.is_success:
            logger.warning("%s %s returned %d", action.method.value, url, response.status_code)
            return ActionResult(
                action=action,
                success=False,
                status_code=response.status_code,
                data=data,
                error=f"API call failed: {response.status_code} {response.reason_phrase}",
            )

        return ActionResult(action=action, success=True, status_code=response.status_code, data=data)

    def _notify(self, result: ActionResult) -> None:
        if self._on_executed is None:
            return
        try:
            self._on_executed(result)
        except Exception:
            logger.exception("on_executed callback failed")

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
