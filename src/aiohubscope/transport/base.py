"""Hub transport protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..models.config import AutomationConfig, HubAutomation


@runtime_checkable
class HubTransport(Protocol):
    """What the automation service needs from a hub connection.

    Implementations raise :class:`~aiohubscope.exceptions.TransportError`
    (or a subclass) on any failure and never retry on their own.
    """

    async def list_automations(self) -> list[HubAutomation]: ...

    async def get_automation(self, automation_id: str) -> HubAutomation:
        """Raise :class:`~aiohubscope.exceptions.AutomationNotFoundError` if absent."""
        ...

    async def create(self, config: AutomationConfig) -> str:
        """Store *config* and return its id."""
        ...

    async def update(self, automation_id: str, config: AutomationConfig) -> None: ...

    async def delete(self, automation_id: str) -> None: ...

    async def set_enabled(self, automation_id: str, enabled: bool) -> None: ...
