"""Static entity extraction from hub automation configs.

Configs listed from the hub may come from anywhere: the portal's own
compiler, the hub's UI, hand-written YAML. The extractor walks them as an
untrusted tree. Shapes it recognizes (trigger platforms, condition kinds,
action steps) are searched for entity references; anything it cannot
fully account for, whether a template or an unknown shape, marks the
result as incomplete through ``has_templates`` while still returning the
references that were found.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from ..models.config import AutomationConfig
from ..models.scope import EntityReferenceSet

logger = logging.getLogger(__name__)

TEMPLATE_MARKERS = ("{{", "{%", "{#")

KNOWN_TRIGGER_PLATFORMS = frozenset(
    {
        "calendar",
        "event",
        "homeassistant",
        "mqtt",
        "numeric_state",
        "state",
        "sun",
        "tag",
        "template",
        "time",
        "time_pattern",
        "webhook",
        "zone",
    }
)

LOGICAL_CONDITIONS = frozenset({"and", "or", "not"})
KNOWN_CONDITIONS = frozenset(
    {"numeric_state", "state", "sun", "template", "time", "trigger", "zone"}
) | LOGICAL_CONDITIONS

_POWER = frozenset({"turn_on", "turn_off", "toggle"})

# Services whose whole effect is on the entities they target. Anything
# else (scripts, automation.trigger, scene.apply with inline entities)
# runs logic the walker cannot see.
TARGETED_SERVICES: dict[str, frozenset[str]] = {
    "homeassistant": _POWER | {"update_entity"},
    "automation": _POWER,
    "light": _POWER,
    "switch": _POWER,
    "input_boolean": _POWER,
    "siren": _POWER,
    "fan": _POWER
    | {
        "set_percentage",
        "set_preset_mode",
        "set_direction",
        "oscillate",
        "increase_speed",
        "decrease_speed",
    },
    "cover": frozenset(
        {
            "open_cover",
            "close_cover",
            "stop_cover",
            "toggle",
            "set_cover_position",
            "open_cover_tilt",
            "close_cover_tilt",
            "stop_cover_tilt",
            "toggle_cover_tilt",
            "set_cover_tilt_position",
        }
    ),
    "valve": frozenset({"open_valve", "close_valve", "stop_valve", "toggle", "set_valve_position"}),
    "climate": _POWER
    | {
        "set_temperature",
        "set_hvac_mode",
        "set_preset_mode",
        "set_fan_mode",
        "set_humidity",
        "set_swing_mode",
    },
    "water_heater": frozenset(
        {"turn_on", "turn_off", "set_temperature", "set_operation_mode", "set_away_mode"}
    ),
    "humidifier": _POWER | {"set_humidity", "set_mode"},
    "media_player": _POWER
    | {
        "media_play",
        "media_pause",
        "media_stop",
        "media_play_pause",
        "media_next_track",
        "media_previous_track",
        "media_seek",
        "volume_set",
        "volume_up",
        "volume_down",
        "volume_mute",
        "select_source",
        "shuffle_set",
        "repeat_set",
        "play_media",
    },
    "lock": frozenset({"lock", "unlock", "open"}),
    "vacuum": frozenset({"start", "stop", "pause", "return_to_base", "locate", "clean_spot"}),
    "alarm_control_panel": frozenset(
        {"alarm_arm_away", "alarm_arm_home", "alarm_arm_night", "alarm_arm_vacation", "alarm_disarm"}
    ),
    "button": frozenset({"press"}),
    "input_button": frozenset({"press"}),
    "number": frozenset({"set_value"}),
    "input_number": frozenset({"set_value", "increment", "decrement"}),
    "select": frozenset({"select_option", "select_next", "select_previous"}),
    "input_select": frozenset(
        {"select_option", "select_next", "select_previous", "select_first", "select_last"}
    ),
    "input_text": frozenset({"set_value"}),
    "input_datetime": frozenset({"set_datetime"}),
    "counter": frozenset({"increment", "decrement", "reset"}),
    "timer": frozenset({"start", "pause", "cancel", "finish"}),
    "scene": frozenset({"turn_on"}),
}

# Domains whose services touch no entity at all.
NON_ENTITY_DOMAINS = frozenset({"notify", "persistent_notification", "logbook", "system_log"})

# Action steps that carry no nested steps.
_PLAIN_ACTION_KEYS = frozenset(
    {"delay", "event", "set_conversation_response", "stop", "variables", "wait_template"}
)

_ENTITY_KEYS = frozenset({"entity_id", "entityId"})
# Targets the hub expands to entities at run time.
_OPAQUE_TARGET_KEYS = frozenset({"area_id", "device_id", "floor_id", "label_id"})

_ENTITY_ID_RE = re.compile(r"^[a-z0-9_]+\.[a-z0-9_]+$")
_SERVICE_RE = re.compile(r"^[a-z0-9_]+\.[a-z0-9_]+$")

_EXPRESSION_RE = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_FREE_NAME_RE = re.compile(r"(?<![\w.])[A-Za-z_]\w*")
_CONTEXT_NAMES = frozenset(
    {
        "trigger",
        "now",
        "float",
        "int",
        "round",
        "abs",
        "and",
        "or",
        "not",
        "is",
        "none",
        "true",
        "false",
        "None",
        "True",
        "False",
    }
)


def is_template(value: str) -> bool:
    """Whether *value* contains hub template syntax."""
    return any(marker in value for marker in TEMPLATE_MARKERS)


def is_context_only_template(value: str) -> bool:
    """Whether a template reads nothing but the trigger context and the clock.

    Such a template has only expression blocks, no string literals and no
    free names beyond ``trigger``, ``now`` and numeric helpers, so it cannot
    look up any entity other than the one that fired.
    """
    if "{%" in value or "{#" in value:
        return False
    bodies = _EXPRESSION_RE.findall(value)
    if not bodies or "{{" in _EXPRESSION_RE.sub("", value):
        return False
    for body in bodies:
        if "'" in body or '"' in body:
            return False
        if any(name not in _CONTEXT_NAMES for name in _FREE_NAME_RE.findall(body)):
            return False
    return True


def is_targeted_service(service: str) -> bool:
    """Whether calling *service* affects nothing beyond its target entities."""
    if not _SERVICE_RE.match(service):
        return False
    domain, name = service.split(".", 1)
    return domain in NON_ENTITY_DOMAINS or name in TARGETED_SERVICES.get(domain, ())


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _without(node: dict[str, Any], *keys: str) -> dict[str, Any]:
    return {key: value for key, value in node.items() if key not in keys}


class _Walker:
    """Accumulates references for one config."""

    def __init__(self) -> None:
        self.has_templates = False

    def opaque(self, reason: str) -> None:
        if not self.has_templates:
            logger.debug("Automation config not fully analyzable: %s", reason)
        self.has_templates = True

    # -- Generic scan ---------------------------------------------------------

    def scan(self, node: Any, bucket: set[str]) -> None:
        """Collect entity references anywhere under *node*."""
        if isinstance(node, str):
            if is_template(node):
                self.opaque("template")
            return
        if isinstance(node, list):
            for item in node:
                self.scan(item, bucket)
            return
        if not isinstance(node, dict):
            return
        for key, value in node.items():
            if key in _ENTITY_KEYS:
                self.entity_value(value, bucket)
            elif key in _OPAQUE_TARGET_KEYS:
                if value:
                    self.opaque(key)
            else:
                self.scan(value, bucket)

    def entity_value(self, value: Any, bucket: set[str]) -> None:
        for item in _as_list(value):
            if not isinstance(item, str):
                self.opaque("non-string entity reference")
                continue
            if is_template(item):
                self.opaque("templated entity reference")
                continue
            for part in item.split(","):
                entity_id = part.strip().lower()
                if entity_id == "all":
                    self.opaque("entity_id: all")
                elif entity_id and entity_id != "none":
                    bucket.add(entity_id)

    def entity_like(self, value: Any, bucket: set[str]) -> None:
        """Collect values that name an entity in fields that may also hold literals."""
        for item in _as_list(value):
            if not isinstance(item, str):
                continue
            candidate = item.strip().lower()
            if _ENTITY_ID_RE.match(candidate):
                bucket.add(candidate)

    # -- Shapes ---------------------------------------------------------------

    def trigger(self, node: Any, bucket: set[str]) -> None:
        if not isinstance(node, dict):
            self.opaque("trigger is not a mapping")
            self.scan(node, bucket)
            return
        platform = node.get("trigger", node.get("platform"))
        if not isinstance(platform, str) or platform not in KNOWN_TRIGGER_PLATFORMS:
            self.opaque(f"trigger platform {platform!r}")
        elif platform == "time":
            self.entity_like(node.get("at"), bucket)
        elif platform == "zone":
            self.entity_like(node.get("zone"), bucket)
        self.scan(node, bucket)

    def condition(self, node: Any, bucket: set[str]) -> None:
        if isinstance(node, str):
            # Template shorthand.
            if not is_context_only_template(node):
                self.opaque("condition string")
            return
        if not isinstance(node, dict):
            self.opaque("condition is not a mapping")
            self.scan(node, bucket)
            return

        kind = node.get("condition")
        if kind is None:
            shorthand = next((key for key in LOGICAL_CONDITIONS if key in node), None)
            if shorthand is None:
                self.opaque("condition without kind")
                self.scan(node, bucket)
                return
            for item in _as_list(node[shorthand]):
                self.condition(item, bucket)
            self.scan(_without(node, shorthand), bucket)
            return

        if not isinstance(kind, str) or kind not in KNOWN_CONDITIONS:
            self.opaque(f"condition {kind!r}")
        elif kind in LOGICAL_CONDITIONS:
            for item in _as_list(node.get("conditions")):
                self.condition(item, bucket)
            self.scan(_without(node, "conditions"), bucket)
            return
        elif kind == "time":
            self.entity_like(node.get("after"), bucket)
            self.entity_like(node.get("before"), bucket)
        elif kind == "zone":
            self.entity_like(node.get("zone"), bucket)
        elif kind == "template":
            # Only a template condition may read the trigger context.
            value = node.get("value_template")
            if not isinstance(value, str) or not is_context_only_template(value):
                self.opaque("template condition")
            self.scan(_without(node, "value_template"), bucket)
            return
        self.scan(node, bucket)

    def action(self, node: Any, bucket: set[str]) -> None:
        if not isinstance(node, dict):
            self.opaque("action is not a mapping")
            self.scan(node, bucket)
            return

        if "action" in node or "service" in node:
            service = node.get("action", node.get("service"))
            if not isinstance(service, str) or not is_targeted_service(service.strip()):
                self.opaque(f"service {service!r}")
            self.scan(node, bucket)
        elif "choose" in node:
            for option in _as_list(node["choose"]):
                if not isinstance(option, dict):
                    self.opaque("choose option is not a mapping")
                    self.scan(option, bucket)
                    continue
                for item in _as_list(option.get("conditions")):
                    self.condition(item, bucket)
                self.actions(option.get("sequence"), bucket)
                self.scan(_without(option, "conditions", "sequence"), bucket)
            self.actions(node.get("default"), bucket)
            self.scan(_without(node, "choose", "default"), bucket)
        elif "if" in node:
            for item in _as_list(node["if"]):
                self.condition(item, bucket)
            self.actions(node.get("then"), bucket)
            self.actions(node.get("else"), bucket)
            self.scan(_without(node, "if", "then", "else"), bucket)
        elif "repeat" in node:
            repeat = node["repeat"]
            if isinstance(repeat, dict):
                for key in ("while", "until"):
                    for item in _as_list(repeat.get(key)):
                        self.condition(item, bucket)
                self.actions(repeat.get("sequence"), bucket)
                self.scan(_without(repeat, "while", "until", "sequence"), bucket)
            else:
                self.opaque("repeat is not a mapping")
                self.scan(repeat, bucket)
            self.scan(_without(node, "repeat"), bucket)
        elif "parallel" in node or "sequence" in node:
            key = "parallel" if "parallel" in node else "sequence"
            self.actions(node[key], bucket)
            self.scan(_without(node, key), bucket)
        elif "wait_for_trigger" in node:
            for item in _as_list(node["wait_for_trigger"]):
                self.trigger(item, bucket)
            self.scan(_without(node, "wait_for_trigger"), bucket)
        elif "condition" in node:
            self.condition(node, bucket)
        elif "scene" in node:
            self.entity_like(node["scene"], bucket)
            self.scan(node, bucket)
        elif _PLAIN_ACTION_KEYS.intersection(node):
            self.scan(node, bucket)
        else:
            self.opaque("unrecognized action step")
            self.scan(node, bucket)

    def actions(self, value: Any, bucket: set[str]) -> None:
        for item in _as_list(value):
            self.action(item, bucket)


def extract_entities(config: AutomationConfig | dict[str, Any]) -> EntityReferenceSet:
    """Recover the entities *config* references, per section.

    Accepts a compiled :class:`AutomationConfig` or any foreign payload the
    hub returned.
    """
    if not isinstance(config, AutomationConfig):
        config = AutomationConfig.model_validate(config)

    walker = _Walker()
    trigger_entities: set[str] = set()
    condition_entities: set[str] = set()
    action_entities: set[str] = set()

    for item in config.triggers:
        walker.trigger(item, trigger_entities)
    for item in config.conditions:
        walker.condition(item, condition_entities)
    walker.actions(config.actions, action_entities)

    return EntityReferenceSet(
        trigger_entities=frozenset(trigger_entities),
        condition_entities=frozenset(condition_entities),
        action_entities=frozenset(action_entities),
        has_templates=walker.has_templates,
    )
