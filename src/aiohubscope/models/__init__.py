"""Pydantic models for aiohubscope."""

from .capabilities import (
    ActionSpec,
    AttributeDeltaSpec,
    CommandSpec,
    FixedPositionSpec,
    PositionEqualsSpec,
    SliderSpec,
    StateEqualsSpec,
    TriggerSpec,
)
from .config import AutomationConfig, AutomationListItem, HubAutomation, ServiceCallSpec
from .device import Device
from .draft import (
    AUTOMATION_COMMANDS,
    VALUE_COMMANDS,
    WEEKDAYS,
    Action,
    AutomationDraft,
    DeviceCommand,
    DeviceCommandAction,
    DeviceTrigger,
    PowerAction,
    ScheduleTrigger,
    StateTrigger,
    Trigger,
    ValueAction,
)
from .scope import AllowedEntitySet, EntityReferenceSet, Role

__all__ = [
    "AUTOMATION_COMMANDS",
    "VALUE_COMMANDS",
    "WEEKDAYS",
    "Action",
    "ActionSpec",
    "AllowedEntitySet",
    "AttributeDeltaSpec",
    "AutomationConfig",
    "AutomationDraft",
    "AutomationListItem",
    "CommandSpec",
    "Device",
    "DeviceCommand",
    "DeviceCommandAction",
    "DeviceTrigger",
    "EntityReferenceSet",
    "FixedPositionSpec",
    "HubAutomation",
    "PositionEqualsSpec",
    "PowerAction",
    "Role",
    "ScheduleTrigger",
    "ServiceCallSpec",
    "SliderSpec",
    "StateEqualsSpec",
    "StateTrigger",
    "Trigger",
    "TriggerSpec",
    "ValueAction",
]
