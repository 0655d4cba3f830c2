"""Tests for Pydantic models."""

from __future__ import annotations

import pytest
import yaml
from pydantic import ValidationError

from aiohubscope.models import (
    AllowedEntitySet,
    AutomationConfig,
    AutomationListItem,
    Device,
    EntityReferenceSet,
    Role,
    ServiceCallSpec,
    SliderSpec,
)


class TestDevice:
    def test_domain_derived(self) -> None:
        d = Device(entityId="light.kitchen", areaName="Kitchen")
        assert d.entity_id == "light.kitchen"
        assert d.domain == "light"
        assert d.area == "Kitchen"

    def test_explicit_domain_kept(self) -> None:
        d = Device(entity_id="light.kitchen", domain="switch")
        assert d.domain == "switch"

    def test_primary_label(self) -> None:
        assert Device(entity_id="media_player.tv", label="TV").primary_label == "TV"
        assert Device(entity_id="media_player.tv", labels=["Speaker", "TV"]).primary_label == (
            "Speaker"
        )
        assert Device(entity_id="media_player.tv", label="  ").primary_label == "Other"


class TestAllowedEntitySet:
    def test_admin_gets_every_entity(self, devices: list[Device]) -> None:
        allowed = AllowedEntitySet.for_admin(devices)
        assert allowed.role is Role.ADMIN
        assert allowed.is_admin
        assert len(allowed.entities) == len(devices)

    def test_tenant_filtered_by_area(self, devices: list[Device]) -> None:
        allowed = AllowedEntitySet.for_tenant(devices, ["Kitchen"])
        assert not allowed.is_admin
        assert allowed.entities == {
            "light.kitchen",
            "sensor.kitchen_motion",
            "media_player.kitchen_speaker",
        }
        assert "light.kitchen" in allowed
        assert "light.bedroom" not in allowed

    def test_tenant_without_areas(self, devices: list[Device]) -> None:
        assert AllowedEntitySet.for_tenant(devices, []).entities == frozenset()

    def test_unassigned_devices_never_granted(self) -> None:
        devices = [Device(entity_id="light.loose")]
        assert AllowedEntitySet.for_tenant(devices, [""]).entities == frozenset()

    def test_frozen(self, kitchen_tenant: AllowedEntitySet) -> None:
        with pytest.raises(ValidationError):
            kitchen_tenant.role = Role.ADMIN  # type: ignore[misc]


class TestEntityReferenceSet:
    def test_all_entities_is_union(self) -> None:
        refs = EntityReferenceSet(
            trigger_entities=frozenset({"sensor.a"}),
            condition_entities=frozenset({"sun.sun"}),
            action_entities=frozenset({"light.b", "sensor.a"}),
        )
        assert refs.all_entities == {"sensor.a", "sun.sun", "light.b"}
        assert refs.has_templates is False


class TestAutomationConfig:
    def test_defaults(self) -> None:
        a = AutomationConfig()
        assert a.id == ""
        assert a.mode == "single"
        assert a.triggers == []

    def test_legacy_singular_keys_merged(self) -> None:
        a = AutomationConfig.model_validate(
            {
                "id": 17,
                "alias": "Legacy",
                "trigger": {"platform": "state", "entity_id": "sensor.a"},
                "condition": [],
                "action": [{"service": "light.turn_on"}],
            }
        )
        assert a.id == "17"
        assert a.triggers == [{"platform": "state", "entity_id": "sensor.a"}]
        assert a.actions == [{"service": "light.turn_on"}]

    def test_duplicate_back_compat_keys_not_doubled(self) -> None:
        item = {"trigger": "state", "entity_id": "sensor.a"}
        a = AutomationConfig.model_validate({"triggers": [item], "trigger": [item]})
        assert a.triggers == [item]

    def test_untrusted_scalars_coerced(self) -> None:
        a = AutomationConfig.model_validate({"alias": None, "description": 3, "mode": ""})
        assert a.alias == ""
        assert a.description is None
        assert a.mode == "single"

    def test_hub_payload_uses_plural_keys(self) -> None:
        a = AutomationConfig(id="x", alias="X", triggers=[{"trigger": "time", "at": "07:00:00"}])
        payload = a.to_hub_payload()
        assert list(payload) == ["id", "alias", "mode", "triggers", "conditions", "actions"]

    def test_to_yaml(self) -> None:
        a = AutomationConfig(id="x", alias="Café", description="d")
        loaded = yaml.safe_load(a.to_yaml())
        assert loaded["alias"] == "Café"
        assert loaded["description"] == "d"


class TestServiceCallSpec:
    def test_to_action(self) -> None:
        s = ServiceCallSpec(
            domain="light",
            service="turn_on",
            target={"entity_id": "light.kitchen"},
            data={"brightness_pct": 40},
        )
        assert s.to_action() == {
            "action": "light.turn_on",
            "target": {"entity_id": "light.kitchen"},
            "data": {"brightness_pct": 40},
        }

    def test_empty_parts_omitted(self) -> None:
        assert ServiceCallSpec(domain="homeassistant", service="restart").to_action() == {
            "action": "homeassistant.restart"
        }


class TestSpecs:
    def test_slider_defaults(self) -> None:
        s = SliderSpec(id="light/set_brightness", label="Brightness", min=0, max=100)
        assert s.kind == "slider"
        assert s.step == 1


class TestAutomationListItem:
    def test_defaults(self) -> None:
        item = AutomationListItem(id="a", alias="A")
        assert item.can_edit is False
        assert item.enabled is True
        assert item.action_entities == []
