"""Tests for draft validation and capability checks."""

from __future__ import annotations

from typing import Any

import pytest

from aiohubscope.automations import check_capabilities, validate_draft
from aiohubscope.exceptions import DraftValidationError
from aiohubscope.models import Device, DeviceTrigger, StateTrigger


class TestValidateDraft:
    def test_valid(self, motion_light_draft: dict[str, Any]) -> None:
        draft = validate_draft(motion_light_draft)
        assert isinstance(draft.trigger, StateTrigger)
        assert draft.action.entity_id == "light.kitchen"

    @pytest.mark.parametrize("raw", [None, [], "draft", 3])
    def test_not_a_mapping(self, raw: Any) -> None:
        with pytest.raises(DraftValidationError):
            validate_draft(raw)

    def test_collects_every_error(self) -> None:
        with pytest.raises(DraftValidationError) as exc_info:
            validate_draft(
                {
                    "alias": "",
                    "trigger": {"type": "state", "entityId": "nope"},
                    "action": {"type": "set_brightness", "entityId": "light.a", "value": "x"},
                }
            )
        errors = exc_info.value.errors
        assert len(errors) >= 3
        assert any(e.startswith("alias") for e in errors)
        assert any("entityId" in e for e in errors)

    def test_unknown_command_rejected(self) -> None:
        with pytest.raises(DraftValidationError) as exc_info:
            validate_draft(
                {
                    "alias": "Reboot",
                    "trigger": {"type": "schedule", "scheduleType": "daily", "at": "03:00"},
                    "action": {
                        "type": "device_command",
                        "entityId": "switch.router",
                        "command": "router/reboot",
                    },
                }
            )
        assert any("unsupported command" in e for e in exc_info.value.errors)

    def test_message(self) -> None:
        with pytest.raises(DraftValidationError, match="Invalid automation payload"):
            validate_draft({})


class TestCheckCapabilities:
    def test_supported(self, devices: list[Device], motion_light_draft: dict[str, Any]) -> None:
        check_capabilities(validate_draft(motion_light_draft), devices)

    def test_unknown_device(self, motion_light_draft: dict[str, Any]) -> None:
        with pytest.raises(DraftValidationError) as exc_info:
            check_capabilities(validate_draft(motion_light_draft), [])
        assert exc_info.value.errors == [
            "trigger: not offered by the selected device",
            "action: not offered by the selected device",
        ]

    def test_sensor_as_action_target(self, devices: list[Device]) -> None:
        draft = validate_draft(
            {
                "alias": "Bad",
                "trigger": {"type": "schedule", "scheduleType": "daily", "at": "08:00"},
                "action": {"type": "toggle", "entityId": "binary_sensor.hall_motion"},
            }
        )
        with pytest.raises(DraftValidationError, match="not supported"):
            check_capabilities(draft, devices)

    def test_device_trigger_outside_registry(self, devices: list[Device]) -> None:
        draft = validate_draft(
            {
                "alias": "Blind at 42",
                "trigger": {
                    "type": "device",
                    "entityId": "cover.living_blind",
                    "mode": "position_equals",
                    "attribute": "current_position",
                    "to": 42,
                },
                "action": {"type": "turn_on", "entityId": "light.kitchen"},
            }
        )
        assert isinstance(draft.trigger, DeviceTrigger)
        with pytest.raises(DraftValidationError) as exc_info:
            check_capabilities(draft, devices)
        assert exc_info.value.errors == ["trigger: not offered by the selected device"]
