"""Hub transport over the hub's REST API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..exceptions import AutomationNotFoundError, TransportError
from ..models.config import AutomationConfig, HubAutomation

logger = logging.getLogger(__name__)

AUTOMATION_DOMAIN = "automation"
CONFIG_PATH = "/api/config/automation/config"
STATES_PATH = "/api/states"

HTTP_NOT_FOUND = 404


class RestHubTransport:
    """Automation CRUD against ``/api/config/automation/config/<id>``.

    Listing reads the ``automation.*`` entities from ``/api/states`` and
    fetches each config, at most *max_concurrency* at a time. Pass *client*
    to share an :class:`httpx.AsyncClient`; a client created here is closed
    by :meth:`close`.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = 6.0,
        max_concurrency: int = 6,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.max_concurrency = max(1, max_concurrency)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> RestHubTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        """Send one request and return the decoded JSON body (or ``None``)."""
        try:
            response = await self._client.request(
                method,
                f"{self.base_url}{path}",
                headers=self._headers(),
                json=json,
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            logger.error("Hub request %s %s failed: %s", method, path, exc)
            raise TransportError(f"Hub unreachable: {exc}") from exc

        # Only a missing automation config means "no such automation".
        if response.status_code == HTTP_NOT_FOUND and path.startswith(f"{CONFIG_PATH}/"):
            raise AutomationNotFoundError(f"Not found: {path}", status=response.status_code)
        if not response.is_success:
            logger.error("Hub request %s %s returned %d", method, path, response.status_code)
            raise TransportError(
                f"Hub request failed ({response.status_code})", status=response.status_code
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Hub request %s %s returned invalid JSON", method, path)
            raise TransportError("Hub returned invalid JSON", status=response.status_code) from exc

    @staticmethod
    def _config_path(automation_id: str) -> str:
        return f"{CONFIG_PATH}/{quote(automation_id, safe='')}"

    async def _automation_states(self) -> list[dict[str, Any]]:
        states = await self._request("GET", STATES_PATH)
        if not isinstance(states, list):
            raise TransportError("Unexpected /api/states payload")
        return [
            state
            for state in states
            if isinstance(state, dict)
            and str(state.get("entity_id", "")).startswith(f"{AUTOMATION_DOMAIN}.")
        ]

    async def _fetch_config(self, automation_id: str) -> AutomationConfig:
        payload = await self._request("GET", self._config_path(automation_id))
        if not isinstance(payload, dict):
            raise TransportError(f"Unexpected config payload for {automation_id}")
        config = AutomationConfig.model_validate(payload)
        if not config.id:
            config = config.model_copy(update={"id": automation_id})
        return config

    @staticmethod
    def _config_id(state: dict[str, Any]) -> str | None:
        attributes = state.get("attributes")
        if not isinstance(attributes, dict):
            return None
        config_id = attributes.get("id")
        return str(config_id) if config_id not in (None, "") else None

    @staticmethod
    def _to_automation(state: dict[str, Any] | None, config: AutomationConfig) -> HubAutomation:
        if state is None:
            return HubAutomation(config=config)
        return HubAutomation(
            entity_id=state.get("entity_id"),
            enabled=state.get("state") != "off",
            config=config,
        )

    # ------------------------------------------------------------------
    # HubTransport
    # ------------------------------------------------------------------

    async def list_automations(self) -> list[HubAutomation]:
        states = await self._automation_states()
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch(state: dict[str, Any]) -> HubAutomation | None:
            config_id = self._config_id(state)
            if config_id is None:
                # Not editable through the config API (e.g. defined in YAML packages).
                return None
            async with semaphore:
                try:
                    config = await self._fetch_config(config_id)
                except AutomationNotFoundError:
                    logger.debug("No stored config for %s", state.get("entity_id"))
                    return None
            return self._to_automation(state, config)

        results = await asyncio.gather(*(fetch(state) for state in states))
        automations = [automation for automation in results if automation is not None]
        logger.debug("Fetched %d of %d automation configs", len(automations), len(states))
        return automations

    async def get_automation(self, automation_id: str) -> HubAutomation:
        config = await self._fetch_config(automation_id)
        state = next(
            (s for s in await self._automation_states() if self._config_id(s) == automation_id),
            None,
        )
        return self._to_automation(state, config)

    async def create(self, config: AutomationConfig) -> str:
        await self._request("POST", self._config_path(config.id), json=config.to_hub_payload())
        logger.info("Stored automation config %s on hub", config.id)
        return config.id

    async def update(self, automation_id: str, config: AutomationConfig) -> None:
        payload = config.to_hub_payload()
        payload["id"] = automation_id
        await self._request("POST", self._config_path(automation_id), json=payload)
        logger.info("Replaced automation config %s on hub", automation_id)

    async def delete(self, automation_id: str) -> None:
        await self._request("DELETE", self._config_path(automation_id))
        logger.info("Deleted automation config %s on hub", automation_id)

    async def _resolve_entity_id(self, automation_id: str) -> str:
        if "." in automation_id:
            return automation_id
        for state in await self._automation_states():
            if self._config_id(state) == automation_id:
                return str(state["entity_id"])
        return f"{AUTOMATION_DOMAIN}.{automation_id}"

    async def set_enabled(self, automation_id: str, enabled: bool) -> None:
        entity_id = await self._resolve_entity_id(automation_id)
        service = "turn_on" if enabled else "turn_off"
        await self._request(
            "POST",
            f"/api/services/{AUTOMATION_DOMAIN}/{service}",
            json={"entity_id": entity_id},
        )
        logger.info("Called %s.%s for %s", AUTOMATION_DOMAIN, service, entity_id)
