"""Capability registry.

Maps a device to the triggers and actions that are meaningful and safe for
it, so neither the UI nor the compiler can build a nonsensical automation
(a brightness slider on a switch, a command sent to a sensor).

Devices are classified by domain first. The assigned category label only
refines a known domain (TV vs. speaker power command, which kind of binary
sensor) or, for an unknown domain, marks the device as a sensor. Anything
else falls back to a generic toggle.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from ..models.capabilities import (
    ActionSpec,
    AttributeDeltaSpec,
    CommandSpec,
    FixedPositionSpec,
    PositionEqualsSpec,
    SliderSpec,
    StateEqualsSpec,
    TriggerSpec,
)
from ..models.device import Device
from ..models.draft import (
    Action,
    DeviceCommand,
    DeviceCommandAction,
    DeviceTrigger,
    PowerAction,
    ScheduleTrigger,
    StateTrigger,
    Trigger,
    ValueAction,
)

Context = Literal["automation", "dashboard"]

BRIGHTNESS_MIN, BRIGHTNESS_MAX = 0, 100
POSITION_MIN, POSITION_MAX = 0, 100
TEMPERATURE_MIN, TEMPERATURE_MAX, TEMPERATURE_STEP = 5, 35, 0.5
VOLUME_MIN, VOLUME_MAX = 0, 100

# Cover supports set_position (CoverEntityFeature.SET_POSITION).
_COVER_SET_POSITION = 4

EXCLUDED_DOMAINS = frozenset({"automation", "device_tracker", "person", "sun", "update", "zone"})
EXCLUDED_LABELS = frozenset({"spotify"})


class DeviceClass(StrEnum):
    """Closed set of capability variants."""

    LIGHT = "light"
    COVER = "cover"
    CLIMATE = "climate"
    MEDIA = "media"
    SWITCH = "switch"
    SENSOR = "sensor"
    GENERIC = "generic"


_DOMAIN_CLASSES: dict[str, DeviceClass] = {
    "light": DeviceClass.LIGHT,
    "cover": DeviceClass.COVER,
    "climate": DeviceClass.CLIMATE,
    "water_heater": DeviceClass.CLIMATE,
    "media_player": DeviceClass.MEDIA,
    "switch": DeviceClass.SWITCH,
    "input_boolean": DeviceClass.SWITCH,
    "binary_sensor": DeviceClass.SENSOR,
    "sensor": DeviceClass.SENSOR,
}

_SENSOR_LABELS: dict[str, str] = {
    "motion sensor": "Motion",
    "motion": "Motion",
    "doorbell": "Doorbell",
    "home security": "Security",
    "security": "Security",
    "sensor": "State",
}

_ON_OFF = ("on", "off")


@dataclass(frozen=True)
class Capability:
    """Everything a device offers, before context filtering."""

    device_class: DeviceClass
    triggers: tuple[TriggerSpec, ...] = ()
    actions: tuple[ActionSpec, ...] = ()


def _light(device: Device) -> Capability:
    return Capability(
        DeviceClass.LIGHT,
        triggers=(
            StateEqualsSpec(label="Power", options=_ON_OFF),
            AttributeDeltaSpec(label="Brightness changed", attribute="brightness"),
        ),
        actions=(
            CommandSpec(id=DeviceCommand.LIGHT_TOGGLE.value, label="On / Off"),
            SliderSpec(
                id=DeviceCommand.LIGHT_SET_BRIGHTNESS.value,
                label="Brightness",
                min=BRIGHTNESS_MIN,
                max=BRIGHTNESS_MAX,
                step=1,
            ),
        ),
    )


def _reports_position(device: Device) -> bool:
    if "current_position" in device.attributes:
        return True
    features = device.attributes.get("supported_features")
    return isinstance(features, int) and bool(features & _COVER_SET_POSITION)


def _cover(device: Device) -> Capability:
    if _reports_position(device):
        return Capability(
            DeviceClass.COVER,
            triggers=(
                PositionEqualsSpec(
                    label="Position",
                    attribute="current_position",
                    waypoints={0: "Closed", 50: "Half", 100: "Open"},
                ),
            ),
            actions=(
                SliderSpec(
                    id=DeviceCommand.BLIND_SET_POSITION.value,
                    label="Position",
                    min=POSITION_MIN,
                    max=POSITION_MAX,
                    step=1,
                ),
            ),
        )
    return Capability(
        DeviceClass.COVER,
        triggers=(StateEqualsSpec(label="Opened / closed", options=("open", "closed")),),
        actions=(
            FixedPositionSpec(
                id=DeviceCommand.BLIND_SET_POSITION.value,
                label="Position",
                positions={POSITION_MAX: "Open", POSITION_MIN: "Close"},
            ),
        ),
    )


def _climate(device: Device) -> Capability:
    return Capability(
        DeviceClass.CLIMATE,
        triggers=(
            AttributeDeltaSpec(
                label="Current temperature changed", attribute="current_temperature"
            ),
        ),
        actions=(
            SliderSpec(
                id=DeviceCommand.BOILER_SET_TEMPERATURE.value,
                label="Set temperature",
                min=TEMPERATURE_MIN,
                max=TEMPERATURE_MAX,
                step=TEMPERATURE_STEP,
            ),
        ),
    )


def _media(device: Device) -> Capability:
    power = (
        DeviceCommand.TV_TOGGLE_POWER
        if device.primary_label.lower() == "tv"
        else DeviceCommand.SPEAKER_TOGGLE_POWER
    )
    return Capability(
        DeviceClass.MEDIA,
        triggers=(StateEqualsSpec(label="Power", options=("on", "off", "playing", "paused")),),
        actions=(
            CommandSpec(id=power.value, label="On / Off"),
            CommandSpec(id=DeviceCommand.MEDIA_PLAY_PAUSE.value, label="Play / Pause"),
            SliderSpec(
                id=DeviceCommand.MEDIA_VOLUME_SET.value,
                label="Volume",
                min=VOLUME_MIN,
                max=VOLUME_MAX,
                step=1,
            ),
        ),
    )


def _switch(device: Device) -> Capability:
    return Capability(
        DeviceClass.SWITCH,
        triggers=(StateEqualsSpec(label="Power", options=_ON_OFF),),
        actions=(CommandSpec(id="toggle", label="On / Off"),),
    )


def _sensor(device: Device) -> Capability:
    # A sensor is a trigger source only.
    label = _SENSOR_LABELS.get(device.primary_label.lower())
    if device.domain == "binary_sensor" or label:
        return Capability(
            DeviceClass.SENSOR,
            triggers=(StateEqualsSpec(label=label or "State", options=_ON_OFF),),
        )
    return Capability(DeviceClass.SENSOR)


def _generic(device: Device) -> Capability:
    return Capability(DeviceClass.GENERIC, actions=(CommandSpec(id="toggle", label="On / Off"),))


_BUILDERS: dict[DeviceClass, Callable[[Device], Capability]] = {
    DeviceClass.LIGHT: _light,
    DeviceClass.COVER: _cover,
    DeviceClass.CLIMATE: _climate,
    DeviceClass.MEDIA: _media,
    DeviceClass.SWITCH: _switch,
    DeviceClass.SENSOR: _sensor,
    DeviceClass.GENERIC: _generic,
}

_VALUE_ACTION_CLASSES: dict[str, DeviceClass] = {
    "set_brightness": DeviceClass.LIGHT,
    "set_temperature": DeviceClass.CLIMATE,
    "set_cover_position": DeviceClass.COVER,
}


class CapabilityRegistry:
    """Lookup of legal trigger and action specs per device."""

    def __init__(
        self,
        *,
        excluded_domains: Iterable[str] = EXCLUDED_DOMAINS,
        excluded_labels: Iterable[str] = EXCLUDED_LABELS,
    ) -> None:
        self.excluded_domains = frozenset(excluded_domains)
        self.excluded_labels = frozenset(label.lower() for label in excluded_labels)

    def classify(self, device: Device) -> DeviceClass:
        """Return the capability variant for *device*."""
        device_class = _DOMAIN_CLASSES.get(device.domain)
        if device_class is not None:
            return device_class
        if device.primary_label.lower() in _SENSOR_LABELS:
            return DeviceClass.SENSOR
        return DeviceClass.GENERIC

    def capability(self, device: Device) -> Capability:
        return _BUILDERS[self.classify(device)](device)

    def is_automation_excluded(self, device: Device) -> bool:
        """Hard veto, independent of domain matching."""
        if device.domain in self.excluded_domains:
            return True
        if device.primary_label.lower() in self.excluded_labels:
            return True
        return device.attributes.get("entity_category") == "diagnostic"

    def triggers_for(self, device: Device, context: Context = "automation") -> list[TriggerSpec]:
        """Trigger specs *device* offers in *context*."""
        if context == "dashboard":
            return []
        if self.is_automation_excluded(device):
            return []
        return list(self.capability(device).triggers)

    def actions_for(self, device: Device, context: Context = "automation") -> list[ActionSpec]:
        """Action specs *device* offers in *context*.

        The dashboard gets only the one-tap primary action.
        """
        actions = list(self.capability(device).actions)
        if context == "dashboard":
            return actions[:1]
        if self.is_automation_excluded(device):
            return []
        return actions

    def automation_eligible(self, devices: Iterable[Device]) -> list[Device]:
        """Devices that can take part in an automation at all."""
        return [
            d
            for d in devices
            if not self.is_automation_excluded(d)
            and (self.triggers_for(d) or self.actions_for(d))
        ]

    def supports_trigger(self, device: Device, trigger: Trigger) -> bool:
        """Whether *trigger* is one *device* offers."""
        if isinstance(trigger, ScheduleTrigger):
            return True
        if self.is_automation_excluded(device):
            return False
        if isinstance(trigger, StateTrigger):
            return True
        return any(_trigger_matches(spec, trigger) for spec in self.triggers_for(device))

    def supports_action(self, device: Device, action: Action) -> bool:
        """Whether *action* is one *device* offers."""
        specs = self.actions_for(device)
        if not specs:
            return False
        if isinstance(action, PowerAction):
            return True
        if isinstance(action, ValueAction):
            return self.classify(device) == _VALUE_ACTION_CLASSES[action.type]
        if isinstance(action, DeviceCommandAction):
            return action.command.value in {spec.id for spec in specs}
        return False


def _trigger_matches(spec: TriggerSpec, trigger: DeviceTrigger) -> bool:
    if spec.type != trigger.mode:
        return False
    if isinstance(spec, StateEqualsSpec):
        return str(trigger.to) in spec.options
    if isinstance(spec, AttributeDeltaSpec):
        return spec.attribute == trigger.attribute
    if isinstance(spec, PositionEqualsSpec):
        return spec.attribute == trigger.attribute and trigger.to in spec.waypoints
    return False


default_registry = CapabilityRegistry()
