"""Hub transport backed by an ``automations.yaml`` file.

For hubs whose configuration directory is mounted locally. The enabled
flag is stored as the automation's ``initial_state``. Every mutation is a
read-modify-write of the whole file under one lock.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import aiofiles
import yaml

from ..exceptions import AutomationNotFoundError, PathSecurityError, TransportError, YAMLParseError
from ..models.config import AutomationConfig, HubAutomation

logger = logging.getLogger(__name__)


class YamlFileTransport:
    """Automation CRUD on a YAML list file inside *config_path*."""

    def __init__(self, config_path: Path, *, filename: str = "automations.yaml") -> None:
        self.config_path = Path(config_path).resolve()
        self.path = self._get_full_path(filename)
        self._lock = asyncio.Lock()

    def _get_full_path(self, relative_path: str) -> Path:
        """Return the absolute path, ensuring it stays within *config_path*.

        Raises :class:`PathSecurityError` if the resolved path escapes the
        allowed directory tree.
        """
        if relative_path.startswith("/"):
            relative_path = relative_path[1:]
        if not relative_path:
            raise PathSecurityError("Automations file name is empty")

        full_path = (self.config_path / relative_path).resolve()
        if not full_path.is_relative_to(self.config_path) or full_path == self.config_path:
            raise PathSecurityError(f"Path outside config directory: {relative_path}")
        return full_path

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    async def _read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            async with aiofiles.open(self.path, encoding="utf-8") as fh:
                content = await fh.read()
        except OSError as exc:
            logger.error("Error reading %s: %s", self.path, exc)
            raise TransportError(str(exc)) from exc

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            logger.error("Invalid YAML in %s: %s", self.path, exc)
            raise YAMLParseError(f"Invalid YAML: {exc}") from exc

        if data is None:
            return []
        if not isinstance(data, list):
            raise YAMLParseError(f"{self.path.name} must contain a list of automations")
        return [item for item in data if isinstance(item, dict)]

    async def _write(self, items: list[dict[str, Any]]) -> None:
        content = yaml.safe_dump(items, sort_keys=False, allow_unicode=True) if items else "[]\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.path, "w", encoding="utf-8") as fh:
                await fh.write(content)
        except OSError as exc:
            logger.error("Error writing %s: %s", self.path, exc)
            raise TransportError(str(exc)) from exc

    @staticmethod
    def _index(items: list[dict[str, Any]], automation_id: str) -> int:
        for index, item in enumerate(items):
            if str(item.get("id", "")) == automation_id:
                return index
        raise AutomationNotFoundError(f"Automation not found: {automation_id}", status=404)

    @staticmethod
    def _to_automation(item: dict[str, Any]) -> HubAutomation:
        return HubAutomation(
            enabled=item.get("initial_state", True) is not False,
            config=AutomationConfig.model_validate(item),
        )

    # ------------------------------------------------------------------
    # HubTransport
    # ------------------------------------------------------------------

    async def list_automations(self) -> list[HubAutomation]:
        return [self._to_automation(item) for item in await self._read() if item.get("id")]

    async def get_automation(self, automation_id: str) -> HubAutomation:
        items = await self._read()
        return self._to_automation(items[self._index(items, automation_id)])

    async def create(self, config: AutomationConfig) -> str:
        async with self._lock:
            items = await self._read()
            if any(str(item.get("id", "")) == config.id for item in items):
                raise TransportError(f"Automation already exists: {config.id}", status=409)
            items.append(config.to_hub_payload())
            await self._write(items)
        logger.info("Added automation %s to %s", config.id, self.path.name)
        return config.id

    async def update(self, automation_id: str, config: AutomationConfig) -> None:
        async with self._lock:
            items = await self._read()
            index = self._index(items, automation_id)
            payload = config.to_hub_payload()
            payload["id"] = automation_id
            if "initial_state" in items[index]:
                payload["initial_state"] = items[index]["initial_state"]
            items[index] = payload
            await self._write(items)
        logger.info("Replaced automation %s in %s", automation_id, self.path.name)

    async def delete(self, automation_id: str) -> None:
        async with self._lock:
            items = await self._read()
            del items[self._index(items, automation_id)]
            await self._write(items)
        logger.info("Removed automation %s from %s", automation_id, self.path.name)

    async def set_enabled(self, automation_id: str, enabled: bool) -> None:
        async with self._lock:
            items = await self._read()
            items[self._index(items, automation_id)]["initial_state"] = enabled
            await self._write(items)
        logger.info("Set initial_state=%s for automation %s", enabled, automation_id)
