"""Shared fixtures for aiohubscope tests."""

from __future__ import annotations

from typing import Any

import pytest

from aiohubscope.exceptions import AutomationNotFoundError
from aiohubscope.models import AllowedEntitySet, AutomationConfig, Device, HubAutomation


class FakeTransport:
    """In-memory hub that records every call it receives."""

    def __init__(self, automations: list[HubAutomation] | None = None) -> None:
        self.automations: dict[str, HubAutomation] = {
            a.config.id: a for a in automations or []
        }
        self.calls: list[tuple[Any, ...]] = []

    @property
    def writes(self) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] not in ("list", "get")]

    async def list_automations(self) -> list[HubAutomation]:
        self.calls.append(("list",))
        return list(self.automations.values())

    async def get_automation(self, automation_id: str) -> HubAutomation:
        self.calls.append(("get", automation_id))
        if automation_id not in self.automations:
            raise AutomationNotFoundError(f"Automation not found: {automation_id}", status=404)
        return self.automations[automation_id]

    async def create(self, config: AutomationConfig) -> str:
        self.calls.append(("create", config.id))
        self.automations[config.id] = HubAutomation(
            entity_id=f"automation.{config.id}", config=config
        )
        return config.id

    async def update(self, automation_id: str, config: AutomationConfig) -> None:
        self.calls.append(("update", automation_id))
        current = self.automations[automation_id]
        self.automations[automation_id] = current.model_copy(update={"config": config})

    async def delete(self, automation_id: str) -> None:
        self.calls.append(("delete", automation_id))
        del self.automations[automation_id]

    async def set_enabled(self, automation_id: str, enabled: bool) -> None:
        self.calls.append(("set_enabled", automation_id, enabled))
        current = self.automations[automation_id]
        self.automations[automation_id] = current.model_copy(update={"enabled": enabled})


def hub_automation(config: dict[str, Any], *, enabled: bool = True) -> HubAutomation:
    """Wrap a raw hub config the way a transport would list it."""
    parsed = AutomationConfig.model_validate(config)
    return HubAutomation(entity_id=f"automation.{parsed.id}", enabled=enabled, config=parsed)


@pytest.fixture
def devices() -> list[Device]:
    """A small two-storey home."""
    return [
        Device(entity_id="light.kitchen", area="Kitchen"),
        Device(entity_id="sensor.kitchen_motion", area="Kitchen", label="Motion Sensor"),
        Device(entity_id="binary_sensor.hall_motion", area="Hallway", label="Motion Sensor"),
        Device(
            entity_id="cover.living_blind",
            area="Living Room",
            attributes={"current_position": 40, "supported_features": 15},
        ),
        Device(entity_id="cover.garage_door", area="Garage", attributes={"supported_features": 3}),
        Device(entity_id="climate.hall_boiler", area="Hallway", label="Boiler"),
        Device(entity_id="media_player.living_tv", area="Living Room", label="TV"),
        Device(entity_id="media_player.kitchen_speaker", area="Kitchen", label="Speaker"),
        Device(entity_id="switch.garden_pump", area="Garden"),
        Device(entity_id="light.bedroom", area="Bedroom"),
    ]


@pytest.fixture
def admin(devices: list[Device]) -> AllowedEntitySet:
    return AllowedEntitySet.for_admin(devices)


@pytest.fixture
def kitchen_tenant(devices: list[Device]) -> AllowedEntitySet:
    return AllowedEntitySet.for_tenant(devices, ["Kitchen"])


@pytest.fixture
def motion_light_draft() -> dict[str, Any]:
    """Kitchen motion turns on the kitchen light."""
    return {
        "alias": "Kitchen motion light",
        "trigger": {"type": "state", "entityId": "sensor.kitchen_motion", "to": "on"},
        "action": {"type": "turn_on", "entityId": "light.kitchen"},
    }


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def make_automation() -> Any:
    return hub_automation
