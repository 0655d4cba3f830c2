"""Automation draft models.

A draft is the user-facing intent ("when this sensor turns on, set this
light to 40%") posted by the portal UI. Validation is closed: an unknown
``type`` tag, a field of the wrong runtime type or a missing required
field rejects the whole draft. The camelCase keys the UI sends
(``entityId``, ``forSeconds``, ``scheduleType``) are accepted as aliases.
"""

from __future__ import annotations

import math
import re
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationInfo,
    field_validator,
    model_validator,
)

WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

_ENTITY_ID_RE = re.compile(r"^[a-zA-Z0-9_]+\.[a-zA-Z0-9_-]+$")
_ATTRIBUTE_RE = re.compile(r"^[a-z_][a-z0-9_]*$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def _require_number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    if not math.isfinite(value):
        raise ValueError("must be a finite number")
    return value


def _require_scalar(value: Any) -> Any:
    if isinstance(value, str):
        return value
    return _require_number(value)


def _check_entity_id(value: str) -> str:
    value = value.strip()
    if not _ENTITY_ID_RE.match(value):
        raise ValueError("must be an entity id like 'light.kitchen'")
    # The hub lowercases entity ids when it loads a config.
    return value.lower()


def _check_attribute(value: str) -> str:
    if not _ATTRIBUTE_RE.match(value):
        raise ValueError("must be a lowercase attribute name")
    return value


def _check_time(value: str) -> str:
    match = _TIME_RE.match(value.strip())
    if not match:
        raise ValueError("must be HH:MM or HH:MM:SS")
    hours, minutes, seconds = match.groups()
    if int(hours) > 23 or int(minutes) > 59 or int(seconds or 0) > 59:
        raise ValueError("must be a valid time of day")
    return value.strip()


def _normalize_weekdays(value: Any) -> Any:
    if not isinstance(value, (list, tuple)):
        raise ValueError("must be a list of weekday names")
    days = set()
    for item in value:
        if not isinstance(item, str):
            raise ValueError("weekday names must be strings")
        days.add(item.strip().lower())
    # Unknown names are dropped, not rejected.
    return tuple(day for day in WEEKDAYS if day in days)


FiniteNumber = Annotated[int | float, BeforeValidator(_require_number)]
StateValue = Annotated[str | int | float, BeforeValidator(_require_scalar)]
EntityId = Annotated[StrictStr, AfterValidator(_check_entity_id)]
AttributeName = Annotated[StrictStr, AfterValidator(_check_attribute)]
TimeOfDay = Annotated[StrictStr, AfterValidator(_check_time)]
Weekdays = Annotated[tuple[str, ...], BeforeValidator(_normalize_weekdays)]
DayOfMonth = Annotated[int, BeforeValidator(_require_number), Field(ge=1, le=31)]

AutomationMode = Literal["single", "restart", "queued", "parallel"]


class _DraftModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


# -- Triggers -----------------------------------------------------------------


class StateTrigger(_DraftModel):
    """Fire when an entity's state changes."""

    type: Literal["state"]
    entity_id: EntityId = Field(alias="entityId")
    to: StateValue | None = None
    from_: StrictStr | None = Field(default=None, alias="from")
    for_seconds: FiniteNumber | None = Field(default=None, alias="forSeconds")

    @field_validator("for_seconds")
    @classmethod
    def _positive_duration(cls, value: int | float | None) -> int | float | None:
        if value is not None and value <= 0:
            raise ValueError("must be greater than 0")
        return value


class DeviceTrigger(_DraftModel):
    """Fire on a capability-specific change of one device."""

    type: Literal["device"]
    entity_id: EntityId = Field(alias="entityId")
    mode: Literal["state_equals", "attribute_delta", "position_equals"]
    to: StateValue | None = None
    direction: Literal["increased", "decreased"] | None = None
    attribute: AttributeName | None = None
    weekdays: Weekdays | None = None

    @model_validator(mode="after")
    def _check_mode_fields(self) -> DeviceTrigger:
        if self.mode == "state_equals" and self.to is None:
            raise ValueError("state_equals requires 'to'")
        if self.mode == "attribute_delta" and (self.attribute is None or self.direction is None):
            raise ValueError("attribute_delta requires 'attribute' and 'direction'")
        if self.mode == "position_equals":
            if self.attribute is None:
                raise ValueError("position_equals requires 'attribute'")
            if isinstance(self.to, str) or self.to is None:
                raise ValueError("position_equals requires a numeric 'to'")
        return self


class ScheduleTrigger(_DraftModel):
    """Fire at a time of day, optionally restricted to weekdays or a day of month."""

    type: Literal["schedule"]
    schedule_type: Literal["daily", "weekly", "monthly"] = Field(alias="scheduleType")
    at: TimeOfDay
    weekdays: Weekdays | None = None
    day: DayOfMonth | None = None

    @model_validator(mode="after")
    def _check_schedule_fields(self) -> ScheduleTrigger:
        if self.schedule_type == "weekly" and not self.weekdays:
            raise ValueError("weekly schedule requires at least one weekday")
        if self.schedule_type == "monthly" and self.day is None:
            raise ValueError("monthly schedule requires 'day'")
        return self


Trigger = Annotated[StateTrigger | DeviceTrigger | ScheduleTrigger, Field(discriminator="type")]


# -- Actions ------------------------------------------------------------------


class DeviceCommand(StrEnum):
    """Allow-listed device command ids."""

    LIGHT_TOGGLE = "light/toggle"
    LIGHT_SET_BRIGHTNESS = "light/set_brightness"
    BLIND_SET_POSITION = "blind/set_position"
    MEDIA_PLAY_PAUSE = "media/play_pause"
    MEDIA_NEXT = "media/next"
    MEDIA_PREVIOUS = "media/previous"
    MEDIA_VOLUME_SET = "media/volume_set"
    MEDIA_VOLUME_UP = "media/volume_up"
    MEDIA_VOLUME_DOWN = "media/volume_down"
    TV_TOGGLE_POWER = "tv/toggle_power"
    SPEAKER_TOGGLE_POWER = "speaker/toggle_power"
    BOILER_SET_TEMPERATURE = "boiler/set_temperature"


AUTOMATION_COMMANDS = frozenset(c.value for c in DeviceCommand)

VALUE_COMMANDS = frozenset(
    {
        DeviceCommand.LIGHT_SET_BRIGHTNESS.value,
        DeviceCommand.BLIND_SET_POSITION.value,
        DeviceCommand.MEDIA_VOLUME_SET.value,
        DeviceCommand.BOILER_SET_TEMPERATURE.value,
    }
)


def _automation_command(value: Any) -> Any:
    if not isinstance(value, str):
        raise ValueError("must be a command id")
    if value not in AUTOMATION_COMMANDS:
        raise ValueError(f"unsupported command '{value}'")
    return DeviceCommand(value)


class PowerAction(_DraftModel):
    """Generic power control of one entity."""

    type: Literal["toggle", "turn_on", "turn_off"]
    entity_id: EntityId = Field(alias="entityId")


class ValueAction(_DraftModel):
    """Set a numeric level on one entity."""

    type: Literal["set_brightness", "set_temperature", "set_cover_position"]
    entity_id: EntityId = Field(alias="entityId")
    value: FiniteNumber


class DeviceCommandAction(_DraftModel):
    """Run one allow-listed device command."""

    type: Literal["device_command"]
    entity_id: EntityId = Field(alias="entityId")
    command: Annotated[DeviceCommand, BeforeValidator(_automation_command)]
    value: StateValue | None = None

    @field_validator("value")
    @classmethod
    def _numeric_value(cls, value: Any, info: ValidationInfo) -> Any:
        if str(info.data.get("command")) not in VALUE_COMMANDS or not isinstance(value, str):
            return value
        try:
            number = float(value)
        except ValueError:
            raise ValueError("must be numeric for this command") from None
        return _require_number(number)

    @model_validator(mode="after")
    def _value_present(self) -> DeviceCommandAction:
        if self.command.value in VALUE_COMMANDS and self.value is None:
            raise ValueError(f"command '{self.command}' requires 'value'")
        return self


Action = Annotated[PowerAction | ValueAction | DeviceCommandAction, Field(discriminator="type")]


# -- Draft --------------------------------------------------------------------


class AutomationDraft(_DraftModel):
    """One trigger and one action, as entered in the portal."""

    alias: StrictStr
    description: StrictStr | None = None
    mode: AutomationMode = "single"
    enabled: StrictBool | None = None
    trigger: Trigger
    action: Action

    @field_validator("alias")
    @classmethod
    def _non_empty_alias(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @property
    def entity_ids(self) -> frozenset[str]:
        """Entities the draft names directly."""
        entities = {self.action.entity_id}
        if not isinstance(self.trigger, ScheduleTrigger):
            entities.add(self.trigger.entity_id)
        return frozenset(entities)
