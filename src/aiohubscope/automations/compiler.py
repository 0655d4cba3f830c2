"""Compile automation drafts into hub-native automation configs.

The compiler trusts its input: drafts come from :func:`validate_draft`, so
every tag and command id is already known. A tag without a rule here means
the validator and the compiler have drifted apart, which is a defect and
raises :class:`CompilerInvariantError`.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Callable
from typing import Any

from ..capabilities.registry import (
    BRIGHTNESS_MAX,
    BRIGHTNESS_MIN,
    POSITION_MAX,
    POSITION_MIN,
    TEMPERATURE_MAX,
    TEMPERATURE_MIN,
)
from ..exceptions import CompilerInvariantError, DraftValidationError
from ..models.config import AutomationConfig, ServiceCallSpec
from ..models.draft import (
    AutomationDraft,
    DeviceCommand,
    DeviceCommandAction,
    DeviceTrigger,
    PowerAction,
    ScheduleTrigger,
    StateTrigger,
    ValueAction,
)

DEFAULT_ID_PREFIX = "portal"
DEFAULT_DESCRIPTION = "Created via portal"

_ID_STRIP_RE = re.compile(r"[^a-zA-Z0-9_]")

Number = int | float


def _clamp(value: Number, low: Number, high: Number) -> Number:
    return min(max(value, low), high)


def make_automation_id(existing_id: str | None = None, *, prefix: str = DEFAULT_ID_PREFIX) -> str:
    """Return *existing_id* or a fresh random id, reduced to ``[a-z0-9_]``."""
    raw = existing_id or f"{prefix}_{uuid.uuid4().hex}"
    automation_id = _ID_STRIP_RE.sub("", raw).lower()
    if not automation_id:
        raise DraftValidationError("Invalid automation id")
    return automation_id


def normalize_time(at: str) -> str:
    """Return ``HH:MM:SS`` for ``H:MM``, ``HH:MM`` or ``HH:MM:SS``."""
    parts = at.strip().split(":")
    if len(parts) == 2:
        parts.append("00")
    hours, minutes, seconds = parts
    return f"{int(hours):02d}:{minutes}:{seconds}"


# -- Triggers -----------------------------------------------------------------


def _state_trigger(
    entity_id: str,
    *,
    to: Any = None,
    from_: Any = None,
    attribute: str | None = None,
    for_seconds: Number | None = None,
) -> dict[str, Any]:
    trigger: dict[str, Any] = {"trigger": "state", "entity_id": entity_id}
    if attribute is not None:
        trigger["attribute"] = attribute
    if to is not None:
        trigger["to"] = to
    if from_ is not None:
        trigger["from"] = from_
    if for_seconds is not None:
        trigger["for"] = {"seconds": for_seconds}
    return trigger


def _weekday_condition(weekdays: tuple[str, ...]) -> dict[str, Any]:
    return {"condition": "time", "weekday": list(weekdays)}


def _delta_condition(attribute: str, direction: str) -> dict[str, Any]:
    # Only the trigger context is read, so no further entity is involved.
    op = ">" if direction == "increased" else "<"
    current = f"trigger.to_state.attributes.{attribute} | float(0)"
    previous = f"trigger.from_state.attributes.{attribute} | float(0)"
    return {"condition": "template", "value_template": f"{{{{ {current} {op} {previous} }}}}"}


def _compile_state(trigger: StateTrigger) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    return [
        _state_trigger(
            trigger.entity_id, to=trigger.to, from_=trigger.from_, for_seconds=trigger.for_seconds
        )
    ], []


def _compile_device(trigger: DeviceTrigger) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    conditions: list[dict[str, Any]] = []
    if trigger.mode == "state_equals":
        triggers = [_state_trigger(trigger.entity_id, to=trigger.to)]
    elif trigger.mode == "attribute_delta":
        triggers = [_state_trigger(trigger.entity_id, attribute=trigger.attribute)]
        conditions.append(_delta_condition(trigger.attribute, trigger.direction))
    elif trigger.mode == "position_equals":
        triggers = [_state_trigger(trigger.entity_id, attribute=trigger.attribute, to=trigger.to)]
    else:
        raise CompilerInvariantError(f"No compile rule for device trigger mode {trigger.mode!r}")

    if trigger.weekdays:
        conditions.append(_weekday_condition(trigger.weekdays))
    return triggers, conditions


def _compile_schedule(
    trigger: ScheduleTrigger,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    triggers = [{"trigger": "time", "at": normalize_time(trigger.at)}]
    conditions: list[dict[str, Any]] = []
    if trigger.schedule_type == "weekly":
        conditions.append(_weekday_condition(trigger.weekdays))
    elif trigger.schedule_type == "monthly":
        conditions.append(
            {"condition": "template", "value_template": f"{{{{ now().day == {trigger.day} }}}}"}
        )
    return triggers, conditions


_TRIGGER_RULES: dict[type, Callable[[Any], tuple[list[dict[str, Any]], list[dict[str, Any]]]]] = {
    StateTrigger: _compile_state,
    DeviceTrigger: _compile_device,
    ScheduleTrigger: _compile_schedule,
}


# -- Actions ------------------------------------------------------------------


_POWER_SERVICES = {
    "toggle": ("homeassistant", "toggle"),
    "turn_on": ("homeassistant", "turn_on"),
    "turn_off": ("homeassistant", "turn_off"),
}

_VALUE_SERVICES: dict[str, tuple[str, str, Callable[[Number], dict[str, Any]]]] = {
    "set_brightness": (
        "light",
        "turn_on",
        lambda v: {"brightness_pct": _clamp(v, BRIGHTNESS_MIN, BRIGHTNESS_MAX)},
    ),
    "set_temperature": (
        "climate",
        "set_temperature",
        lambda v: {"temperature": _clamp(v, TEMPERATURE_MIN, TEMPERATURE_MAX)},
    ),
    "set_cover_position": (
        "cover",
        "set_cover_position",
        lambda v: {"position": _clamp(v, POSITION_MIN, POSITION_MAX)},
    ),
}

COMMAND_SERVICES: dict[DeviceCommand, tuple[str, str, Callable[[Any], dict[str, Any]] | None]] = {
    DeviceCommand.LIGHT_TOGGLE: ("light", "toggle", None),
    DeviceCommand.LIGHT_SET_BRIGHTNESS: (
        "light",
        "turn_on",
        lambda v: {"brightness_pct": _clamp(v, BRIGHTNESS_MIN, BRIGHTNESS_MAX)},
    ),
    DeviceCommand.BLIND_SET_POSITION: (
        "cover",
        "set_cover_position",
        lambda v: {"position": _clamp(v, POSITION_MIN, POSITION_MAX)},
    ),
    DeviceCommand.MEDIA_PLAY_PAUSE: ("media_player", "media_play_pause", None),
    DeviceCommand.MEDIA_NEXT: ("media_player", "media_next_track", None),
    DeviceCommand.MEDIA_PREVIOUS: ("media_player", "media_previous_track", None),
    DeviceCommand.MEDIA_VOLUME_SET: (
        "media_player",
        "volume_set",
        lambda v: {"volume_level": _clamp(v / 100, 0, 1)},
    ),
    DeviceCommand.MEDIA_VOLUME_UP: ("media_player", "volume_up", None),
    DeviceCommand.MEDIA_VOLUME_DOWN: ("media_player", "volume_down", None),
    DeviceCommand.TV_TOGGLE_POWER: ("media_player", "toggle", None),
    DeviceCommand.SPEAKER_TOGGLE_POWER: ("media_player", "toggle", None),
    DeviceCommand.BOILER_SET_TEMPERATURE: (
        "climate",
        "set_temperature",
        lambda v: {"temperature": _clamp(v, TEMPERATURE_MIN, TEMPERATURE_MAX)},
    ),
}


def _service_call(
    entity_id: str, domain: str, service: str, data: dict[str, Any] | None = None
) -> dict[str, Any]:
    return ServiceCallSpec(
        domain=domain, service=service, data=data or {}, target={"entity_id": entity_id}
    ).to_action()


def _compile_action(action: Any) -> dict[str, Any]:
    if isinstance(action, PowerAction) and action.type in _POWER_SERVICES:
        domain, service = _POWER_SERVICES[action.type]
        return _service_call(action.entity_id, domain, service)

    if isinstance(action, ValueAction) and action.type in _VALUE_SERVICES:
        domain, service, build = _VALUE_SERVICES[action.type]
        return _service_call(action.entity_id, domain, service, build(action.value))

    if isinstance(action, DeviceCommandAction) and action.command in COMMAND_SERVICES:
        domain, service, build = COMMAND_SERVICES[action.command]
        data = build(action.value) if build is not None else None
        return _service_call(action.entity_id, domain, service, data)

    raise CompilerInvariantError(f"No compile rule for action {action!r}")


# -- Entry point --------------------------------------------------------------


def compile_draft(
    draft: AutomationDraft,
    existing_id: str | None = None,
    *,
    id_prefix: str = DEFAULT_ID_PREFIX,
) -> AutomationConfig:
    """Compile *draft* into a hub automation config.

    Without *existing_id* every call mints a new random id; pass it to
    update an automation in place.
    """
    rule = _TRIGGER_RULES.get(type(draft.trigger))
    if rule is None:
        raise CompilerInvariantError(f"No compile rule for trigger {draft.trigger!r}")
    triggers, conditions = rule(draft.trigger)

    return AutomationConfig(
        id=make_automation_id(existing_id, prefix=id_prefix),
        alias=draft.alias,
        description=draft.description or DEFAULT_DESCRIPTION,
        mode=draft.mode,
        triggers=triggers,
        conditions=conditions,
        actions=[_compile_action(draft.action)],
    )
