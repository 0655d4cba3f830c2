"""Hub-native automation configuration models."""

from __future__ import annotations

from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_SECTIONS = (("triggers", "trigger"), ("conditions", "condition"), ("actions", "action"))


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


class AutomationConfig(BaseModel):
    """Automation definition in the hub's own schema.

    Configs read back from the hub may have been written by anything, so the
    model is lenient: legacy singular section keys (``trigger``, ``condition``,
    ``action``) are merged into the plural ones, a single object stands for a
    one-item list and section items are kept as untyped values.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    alias: str = ""
    description: str | None = None
    mode: str = "single"
    triggers: list[Any] = Field(default_factory=list)
    conditions: list[Any] = Field(default_factory=list)
    actions: list[Any] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _merge_legacy_sections(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for plural, singular in _SECTIONS:
            if singular not in data:
                continue
            legacy = _as_list(data.pop(singular))
            current = _as_list(data.get(plural))
            data[plural] = current + [item for item in legacy if item not in current]
        return data

    @field_validator("triggers", "conditions", "actions", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> list[Any]:
        return _as_list(value)

    @field_validator("id", "alias", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip() if isinstance(value, (str, int)) else ""

    @field_validator("description", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("mode", mode="before")
    @classmethod
    def _mode(cls, value: Any) -> str:
        return value if isinstance(value, str) and value else "single"

    def to_hub_payload(self) -> dict[str, Any]:
        """Return the dict the hub's config API accepts."""
        payload: dict[str, Any] = {"id": self.id, "alias": self.alias}
        if self.description is not None:
            payload["description"] = self.description
        payload["mode"] = self.mode
        payload["triggers"] = list(self.triggers)
        payload["conditions"] = list(self.conditions)
        payload["actions"] = list(self.actions)
        return payload

    def to_yaml(self) -> str:
        """Render the config as hub YAML."""
        return yaml.safe_dump(self.to_hub_payload(), sort_keys=False, allow_unicode=True)


class ServiceCallSpec(BaseModel):
    """Hub service-call parameters."""

    domain: str
    service: str
    data: dict[str, Any] = {}
    target: dict[str, Any] | None = None

    def to_action(self) -> dict[str, Any]:
        """Return the call as an automation action item."""
        action: dict[str, Any] = {"action": f"{self.domain}.{self.service}"}
        if self.target:
            action["target"] = dict(self.target)
        if self.data:
            action["data"] = dict(self.data)
        return action


class HubAutomation(BaseModel):
    """An automation as listed by the hub: its config plus runtime state."""

    entity_id: str | None = None
    enabled: bool = True
    config: AutomationConfig


class AutomationListItem(BaseModel):
    """One row of an automation listing, annotated for the caller."""

    id: str
    entity_id: str | None = None
    alias: str
    description: str = ""
    mode: str = "single"
    action_entities: list[str] = Field(default_factory=list)
    has_templates: bool = False
    can_edit: bool = False
    enabled: bool = True
